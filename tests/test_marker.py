import os

from packages.core.crash.marker import MarkerHandle, RunningMarker


def test_start_then_release_round_trip(tmp_path, runtime, clock):
    registered = []
    marker = RunningMarker(tmp_path / "running.marker", runtime=runtime, clock=clock, register_exit=registered.append)

    handle = marker.start()
    assert handle.armed
    assert marker.exists()
    assert registered == [handle.release]

    handle.release()
    assert not marker.exists()


def test_marker_contents(tmp_path, runtime, clock):
    marker = RunningMarker(tmp_path / "running.marker", runtime=runtime, clock=clock, register_exit=lambda f: None)
    marker.start()

    lines = marker.read().splitlines()
    assert lines == [f"PID: {os.getpid()}", "Started: 2026-03-10 12:00:00", "CPython 3.12.1"]


def test_release_is_idempotent_and_only_once(tmp_path):
    path = tmp_path / "running.marker"
    path.write_text("x")
    handle = MarkerHandle(path, armed=True)

    handle.release()
    path.write_text("recreated by a later instance")
    handle.release()

    assert path.exists()


def test_release_swallows_errors(tmp_path):
    path = tmp_path / "dir-not-file"
    path.mkdir()
    handle = MarkerHandle(path, armed=True)

    handle.release()

    assert path.exists()


def test_start_failure_returns_unarmed_handle(tmp_path, runtime):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    registered = []
    marker = RunningMarker(blocker / "running.marker", runtime=runtime, register_exit=registered.append)

    handle = marker.start()

    assert not handle.armed
    assert registered == []
    handle.release()


def test_context_manager_releases(tmp_path, runtime):
    marker = RunningMarker(tmp_path / "running.marker", runtime=runtime, register_exit=lambda f: None)
    with marker.start():
        assert marker.exists()
    assert not marker.exists()


def test_read_missing_marker(tmp_path):
    assert RunningMarker(tmp_path / "running.marker", register_exit=lambda f: None).read() is None


def test_read_undecodable_marker(tmp_path):
    path = tmp_path / "running.marker"
    path.write_bytes(b"PID: 1\xff\nStarted: 2026-03-10 08:00:00\n")

    text = RunningMarker(path, register_exit=lambda f: None).read()

    assert text.startswith("PID: 1")
    assert "Started: 2026-03-10 08:00:00" in text
