import pytest

from packages.core.crash.messages import CRASH_RECOVERY_DESCRIPTION, TemplateMessages
from packages.core.crash.runtime import current_runtime, recommend
from packages.core.crash.types import RuntimeInfo


@pytest.mark.parametrize(
    "vendor, needle",
    [
        ("PyPy", "latest PyPy release"),
        ("GraalPy", "GraalPy may lack"),
        ("CPython (conda)", "conda environment"),
        ("CPython", "latest CPython patch release"),
        ("Jython", "Unknown runtime vendor (Jython)"),
    ],
)
def test_recommendation_table(vendor, needle):
    assert needle in recommend(RuntimeInfo(name=vendor, version="1", vendor=vendor))


def test_current_runtime_descriptor():
    rt = current_runtime()
    assert rt.descriptor() == f"{rt.name} {rt.version}"
    assert rt.name


def test_messages_format_positional_arguments():
    text = TemplateMessages().format(CRASH_RECOVERY_DESCRIPTION, "1", "2026-03-10 12:00:00", "N/A", "3")
    assert "PID: 1" in text
    assert "Crash dump: N/A" in text


def test_messages_unknown_key_returns_key():
    assert TemplateMessages().format("crash.nope") == "crash.nope"
