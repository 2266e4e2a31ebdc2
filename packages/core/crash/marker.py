from __future__ import annotations

import atexit
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .runtime import current_pid, current_runtime
from .types import TIMESTAMP_FORMAT, RuntimeInfo

log = logging.getLogger(__name__)


class MarkerHandle:
    """
    Owns the running marker for the lifetime of the process.

    release() deletes the marker at most once and never raises, so it is safe
    to call from atexit as well as from an explicit shutdown path.
    """

    def __init__(self, path: Path, armed: bool) -> None:
        self._path = path
        self._armed = armed
        self._released = False
        self._lock = threading.Lock()

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def path(self) -> Path:
        return self._path

    def release(self) -> None:
        try:
            with self._lock:
                if not self._armed or self._released:
                    return
                self._released = True
            if self._path.exists():
                self._path.unlink()
        except Exception:
            # Runs during interpreter shutdown; nothing useful can be done here
            pass

    def __enter__(self) -> "MarkerHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class RunningMarker:
    def __init__(
        self,
        path: Path,
        runtime: Optional[RuntimeInfo] = None,
        clock: Callable[[], datetime] = datetime.now,
        register_exit: Callable[[Callable[[], None]], object] = atexit.register,
    ) -> None:
        self._path = path
        self._runtime = runtime or current_runtime()
        self._clock = clock
        self._register_exit = register_exit

    @property
    def path(self) -> Path:
        return self._path

    def _contents(self) -> str:
        started = self._clock().strftime(TIMESTAMP_FORMAT)
        return f"PID: {current_pid()}\nStarted: {started}\n{self._runtime.descriptor()}\n"

    def start(self) -> MarkerHandle:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(self._contents(), encoding="utf-8")
        except OSError:
            log.exception("Unable to create running marker at %s", self._path)
            return MarkerHandle(self._path, armed=False)

        handle = MarkerHandle(self._path, armed=True)
        self._register_exit(handle.release)
        log.debug("Running marker written to %s", self._path)
        return handle

    def exists(self) -> bool:
        return self._path.exists()

    def read(self) -> Optional[str]:
        if not self._path.exists():
            return None
        try:
            return self._path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            log.error("Failed to read running marker %s", self._path, exc_info=True)
            return None
