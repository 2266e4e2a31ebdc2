"""
Bounded crash ledger.

One event per line, append order preserved. Every append is followed by a
trim so the file never holds more than ``max_entries`` lines; the oldest
lines are dropped first. Undecodable bytes are replaced on read, so a line
torn by a crash mid-write is at worst skipped as unparsable.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional

from .types import TIMESTAMP_FORMAT, CrashEvent

log = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)


class EventStore(ABC):
    """Storage seam for crash events."""

    @abstractmethod
    def append(self, event: CrashEvent) -> None:
        ...

    @abstractmethod
    def recent_count(self, window: timedelta = DEFAULT_WINDOW, now: Optional[datetime] = None) -> int:
        ...

    @abstractmethod
    def tail(self, n: int = 10) -> List[str]:
        ...


def parse_line_timestamp(line: str) -> Optional[datetime]:
    if not line.startswith("["):
        return None
    end = line.find("]")
    if end < 0:
        return None
    try:
        return datetime.strptime(line[1:end], TIMESTAMP_FORMAT)
    except ValueError:
        return None


class CrashLedger(EventStore):
    def __init__(
        self,
        path: Path,
        max_entries: int = 50,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._path = path
        self._max_entries = max_entries
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: CrashEvent) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(event.to_line() + "\n")
        except OSError:
            log.exception("Failed to record crash event")
            return
        self._trim()

    def _trim(self) -> None:
        try:
            if not self._path.exists():
                return
            lines = self._path.read_text(encoding="utf-8", errors="replace").splitlines()
            if len(lines) > self._max_entries:
                kept = lines[-self._max_entries:]
                self._path.write_text("\n".join(kept) + "\n", encoding="utf-8")
                log.debug("Trimmed crash history to %d entries", len(kept))
        except OSError:
            log.exception("Failed to limit crash history size")

    def lines(self) -> List[str]:
        if not self._path.exists():
            return []
        try:
            return self._path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError:
            log.error("Failed to read crash history %s", self._path, exc_info=True)
            return []

    def recent_count(self, window: timedelta = DEFAULT_WINDOW, now: Optional[datetime] = None) -> int:
        cutoff = (now or self._clock()) - window
        count = 0
        for line in self.lines():
            ts = parse_line_timestamp(line)
            if ts is not None and ts > cutoff:
                count += 1
        return count

    def tail(self, n: int = 10) -> List[str]:
        if n <= 0:
            return []
        return self.lines()[-n:]
