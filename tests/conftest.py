from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from packages.core.crash.types import AlertLevel, HostMetadata, RuntimeInfo


class FixedClock:
    def __init__(self, now: datetime, step: timedelta = timedelta(0)) -> None:
        self.now = now
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class RecordingSink:
    def __init__(self) -> None:
        self.published: list[dict] = []

    def publish(self, persistent: bool, level: AlertLevel, identifier: str, title: str, body: str) -> None:
        self.published.append(
            {"persistent": persistent, "level": level, "identifier": identifier, "title": title, "body": body}
        )

    def exists_including_read(self, identifier: str) -> bool:
        return any(p["identifier"] == identifier for p in self.published)

    def ids(self, prefix: str) -> list[str]:
        return [p["identifier"] for p in self.published if p["identifier"].startswith(prefix)]


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def clock(now) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def runtime() -> RuntimeInfo:
    return RuntimeInfo(name="CPython", version="3.12.1", vendor="CPython", executable="/usr/bin/python3")


@pytest.fixture
def metadata(tmp_path) -> HostMetadata:
    return HostMetadata(
        version="1.4.0",
        branch="main",
        commit="abc1234",
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )
