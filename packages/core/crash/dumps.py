"""
Crash dump discovery and archival.

Discovery walks a fixed, ordered list of directories and returns the first
``hs_err_pid<PID>.log`` it finds. Precedence:

    1. data            application data directory
    2. local-app-data  %LOCALAPPDATA% (or XDG data home) / app name
    3. temp            system temp directory
    4. home            user home directory
    5. workdir         current working directory

Archival copies a dump into the archive directory under a timestamped name
and keeps only the most recently modified members.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from packages.shared.paths import local_app_data_dir

from .types import FILE_STAMP_FORMAT, ArchivedDump

log = logging.getLogger(__name__)

DirectoryResolver = Tuple[str, Callable[[], Path]]

ARCHIVE_GLOB = "hs_err_*.log"


def dump_file_name(pid: str) -> str:
    return f"hs_err_pid{pid}.log"


def archived_file_name(pid: str, captured_at: datetime) -> str:
    return f"hs_err_pid{pid}_{captured_at.strftime(FILE_STAMP_FORMAT)}.log"


def default_resolvers(data_dir: Path) -> List[DirectoryResolver]:
    return [
        ("data", lambda: data_dir),
        ("local-app-data", local_app_data_dir),
        ("temp", lambda: Path(tempfile.gettempdir())),
        ("home", Path.home),
        ("workdir", Path.cwd),
    ]


class DumpLocator:
    def __init__(self, resolvers: Sequence[DirectoryResolver]) -> None:
        self._resolvers = list(resolvers)

    def candidates(self, pid: str) -> List[Tuple[str, Path]]:
        name = dump_file_name(pid)
        out: List[Tuple[str, Path]] = []
        for label, resolve in self._resolvers:
            try:
                out.append((label, resolve() / name))
            except (OSError, RuntimeError, KeyError):
                log.debug("Skipping crash dump location %s: directory unavailable", label, exc_info=True)
        return out

    def find(self, pid: str) -> Optional[Path]:
        for label, candidate in self.candidates(pid):
            log.info("Looking for crash file in %s directory: %s", label, candidate.absolute())
            try:
                if candidate.is_file():
                    return candidate
            except OSError:
                log.debug("Cannot stat %s", candidate, exc_info=True)
        return None


class ArchiveStore(ABC):
    """Storage seam for preserved crash dumps."""

    @abstractmethod
    def preserve(self, dump_path: Path, pid: str) -> Optional[ArchivedDump]:
        ...

    @abstractmethod
    def prune(self) -> List[Path]:
        ...


class DumpArchive(ArchiveStore):
    def __init__(
        self,
        directory: Path,
        max_members: int = 10,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._dir = directory
        self._max_members = max_members
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self._dir

    def preserve(self, dump_path: Path, pid: str) -> Optional[ArchivedDump]:
        captured_at = self._clock()
        target = self._dir / archived_file_name(pid, captured_at)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            if target.exists():
                raise FileExistsError(str(target))
            # copyfile leaves the member's mtime at copy time, which retention relies on
            shutil.copyfile(dump_path, target)
        except OSError:
            log.exception("Failed to preserve crash file %s", dump_path)
            return None

        log.info("Preserved crash file to: %s", target.absolute())
        self.prune()
        return ArchivedDump(pid=pid, captured_at=captured_at, path=target)

    def _sorted_members(self) -> List[Tuple[float, str, Path]]:
        entries: List[Tuple[float, str, Path]] = []
        for p in self._dir.glob(ARCHIVE_GLOB):
            try:
                if p.is_file():
                    entries.append((p.stat().st_mtime, p.name, p))
            except OSError:
                continue
        entries.sort()
        return entries

    def prune(self) -> List[Path]:
        deleted: List[Path] = []
        try:
            entries = self._sorted_members()
        except OSError:
            log.exception("Failed to list crash archive %s", self._dir)
            return deleted

        excess = len(entries) - self._max_members
        for _, _, p in entries[:max(excess, 0)]:
            try:
                p.unlink()
                deleted.append(p)
                log.debug("Cleaned up old crash report: %s", p.name)
            except OSError:
                log.error("Failed to delete old crash report %s", p, exc_info=True)
        return deleted

    def members(self) -> List[Path]:
        if not self._dir.exists():
            return []
        try:
            return [p for _, _, p in reversed(self._sorted_members())]
        except OSError:
            log.error("Failed to list crash archive %s", self._dir, exc_info=True)
            return []
