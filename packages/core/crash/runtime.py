"""
Runtime descriptor and per-vendor recommendations.

The recommendation table is evaluated top-down; the first rule whose
substrings all occur in the runtime vendor string wins.
"""

from __future__ import annotations

import os
import platform
import sys
from typing import Tuple

from .types import RuntimeInfo

RecommendationRule = Tuple[Tuple[str, ...], str]

RECOMMENDATIONS: tuple[RecommendationRule, ...] = (
    (("PyPy",),
     "Consider updating to the latest PyPy release. "
     "Native extensions built for CPython (PySide6, psutil) are a frequent crash source under PyPy; "
     "switching to CPython is the safest option."),
    (("GraalPy",),
     "Switch to CPython which has better compatibility with native extensions. "
     "GraalPy may lack support for some C extension APIs."),
    (("CPython", "conda"),
     "Update the conda environment and reinstall PySide6 from a single channel. "
     "Mixing conda-forge and pip builds of Qt libraries is a common cause of native crashes."),
    (("CPython",),
     "Consider updating to the latest CPython patch release and reinstalling native dependencies. "
     "Check https://www.python.org/downloads/ for newer versions."),
)

DEFAULT_RECOMMENDATION = (
    "Switch to CPython which has the best compatibility with native extensions. "
    "Unknown runtime vendor ({vendor}) may not include necessary patches."
)


def current_pid() -> str:
    return str(os.getpid())


def current_runtime() -> RuntimeInfo:
    name = platform.python_implementation()
    vendor = name
    if "conda" in sys.version.lower() or "Anaconda" in sys.version:
        vendor = f"{name} (conda)"
    return RuntimeInfo(
        name=name,
        version=platform.python_version(),
        vendor=vendor,
        executable=sys.executable or "",
    )


def recommend(runtime: RuntimeInfo) -> str:
    vendor = runtime.vendor or ""
    for needles, text in RECOMMENDATIONS:
        if all(n in vendor for n in needles):
            return text
    return DEFAULT_RECOMMENDATION.format(vendor=vendor or "unknown")
