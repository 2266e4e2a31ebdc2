import os
import time
from datetime import timedelta

import pytest

from packages.core.crash.dumps import DumpArchive, DumpLocator, default_resolvers, dump_file_name

from conftest import FixedClock


@pytest.fixture
def dirs(tmp_path):
    out = {}
    for name in ("data", "local", "temp", "home", "work"):
        out[name] = tmp_path / name
        out[name].mkdir()
    return out


def _locator(dirs):
    return DumpLocator([
        ("data", lambda: dirs["data"]),
        ("local-app-data", lambda: dirs["local"]),
        ("temp", lambda: dirs["temp"]),
        ("home", lambda: dirs["home"]),
        ("workdir", lambda: dirs["work"]),
    ])


def test_data_directory_wins_over_temp(dirs):
    (dirs["data"] / "hs_err_pid77.log").write_text("data")
    (dirs["temp"] / "hs_err_pid77.log").write_text("temp")

    assert _locator(dirs).find("77") == dirs["data"] / "hs_err_pid77.log"


def test_later_location_used_when_earlier_missing(dirs):
    (dirs["work"] / "hs_err_pid77.log").write_text("work")
    (dirs["home"] / "hs_err_pid77.log").write_text("home")

    assert _locator(dirs).find("77") == dirs["home"] / "hs_err_pid77.log"


def test_not_found_is_none(dirs):
    (dirs["temp"] / "hs_err_pid1.log").write_text("other pid")
    assert _locator(dirs).find("77") is None


def test_failing_resolver_is_skipped(dirs):
    def broken():
        raise RuntimeError("no home directory")

    (dirs["temp"] / "hs_err_pid5.log").write_text("temp")
    locator = DumpLocator([("home", broken), ("temp", lambda: dirs["temp"])])

    assert locator.find("5") == dirs["temp"] / "hs_err_pid5.log"


def test_default_resolver_precedence(dirs, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(dirs["local"]))
    monkeypatch.setenv("HOME", str(dirs["home"]))
    monkeypatch.setattr("tempfile.gettempdir", lambda: str(dirs["temp"]))
    monkeypatch.chdir(dirs["work"])

    labels = [label for label, _ in default_resolvers(dirs["data"])]
    assert labels == ["data", "local-app-data", "temp", "home", "workdir"]

    locator = DumpLocator(default_resolvers(dirs["data"]))
    candidates = [p.parent for _, p in locator.candidates("9")]
    assert candidates[0] == dirs["data"]
    assert candidates[1] == dirs["local"] / "CrashWarden"
    assert candidates[2] == dirs["temp"]

    (dirs["temp"] / dump_file_name("9")).write_text("temp")
    assert locator.find("9") == dirs["temp"] / "hs_err_pid9.log"


def test_preserve_copies_under_timestamped_name(tmp_path, dirs, clock):
    dump = dirs["temp"] / "hs_err_pid1234.log"
    dump.write_text("# A fatal error has been detected")
    archive = DumpArchive(tmp_path / "crash-reports", clock=clock)

    archived = archive.preserve(dump, "1234")

    assert archived is not None
    assert archived.path.name == "hs_err_pid1234_20260310_120000.log"
    assert archived.path.read_text() == dump.read_text()
    assert dump.exists()


def test_preserve_missing_source_returns_none(tmp_path, clock):
    archive = DumpArchive(tmp_path / "crash-reports", clock=clock)
    assert archive.preserve(tmp_path / "nope.log", "1") is None


def test_preserve_does_not_overwrite(tmp_path, dirs, clock):
    dump = dirs["temp"] / "hs_err_pid1.log"
    dump.write_text("first")
    archive = DumpArchive(tmp_path / "crash-reports", clock=clock)

    assert archive.preserve(dump, "1") is not None
    dump.write_text("second")
    assert archive.preserve(dump, "1") is None
    assert archive.members()[0].read_text() == "first"


def test_retention_keeps_ten_most_recent(tmp_path, dirs, now):
    dump = dirs["temp"] / "hs_err_pid1.log"
    dump.write_text("dump")
    archive = DumpArchive(tmp_path / "crash-reports", max_members=10, clock=FixedClock(now, timedelta(seconds=1)))
    base = time.time() - 10_000

    names = []
    for i in range(15):
        archived = archive.preserve(dump, "1")
        names.append(archived.path.name)
        os.utime(archived.path, (base + i, base + i))

    remaining = sorted(p.name for p in (tmp_path / "crash-reports").iterdir())
    assert remaining == sorted(names[5:])
    assert [p.name for p in archive.members()] == list(reversed(names[5:]))


def test_prune_ignores_unrelated_files(tmp_path, now):
    archive_dir = tmp_path / "crash-reports"
    archive_dir.mkdir()
    (archive_dir / "notes.txt").write_text("keep me")
    base = time.time() - 1000
    for i in range(12):
        p = archive_dir / f"hs_err_pid{i}_20260101_000000.log"
        p.write_text("x")
        os.utime(p, (base + i, base + i))

    deleted = DumpArchive(archive_dir, max_members=10).prune()

    assert sorted(p.name for p in deleted) == ["hs_err_pid0_20260101_000000.log", "hs_err_pid1_20260101_000000.log"]
    assert (archive_dir / "notes.txt").exists()
