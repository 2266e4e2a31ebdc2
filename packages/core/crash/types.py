from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel

CrashKind = Literal["jvm_crash", "unexpected_shutdown"]
RecoveryMode = Literal["recovery", "unexpected_shutdown", "clean"]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
FILE_STAMP_FORMAT = "%Y%m%d_%H%M%S"
DAY_STAMP_FORMAT = "%Y%m%d"

UNKNOWN_PID = "unknown"
NOT_AVAILABLE = "N/A"


class AlertLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"


@dataclass(frozen=True)
class RuntimeInfo:
    """Describes the interpreter the host process runs on."""
    name: str
    version: str
    vendor: str
    executable: str = ""

    def descriptor(self) -> str:
        return f"{self.name} {self.version}"


@dataclass(frozen=True)
class CrashEvent:
    timestamp: datetime
    pid: str
    kind: CrashKind
    runtime: str

    def to_line(self) -> str:
        return f"[{self.timestamp.strftime(TIMESTAMP_FORMAT)}] PID: {self.pid}, Type: {self.kind}, Runtime: {self.runtime}"


@dataclass(frozen=True)
class ArchivedDump:
    pid: str
    captured_at: datetime
    path: Path


@dataclass
class RecoveryOutcome:
    mode: RecoveryMode = "clean"
    pid: Optional[str] = None
    dump_path: Optional[Path] = None
    archived: Optional[ArchivedDump] = None
    recent_crashes: int = 0
    escalated: bool = False


class HostMetadata(BaseModel):
    version: str = "dev"
    branch: str = "unknown"
    commit: str = "unknown"
    data_dir: Path
    config_dir: Path

    @classmethod
    def detect(cls, data_dir: Path, config_dir: Path) -> "HostMetadata":
        try:
            version = dist_version("crash-warden")
        except PackageNotFoundError:
            version = "dev"
        return cls(
            version=version,
            branch=os.environ.get("CRASHWARDEN_BRANCH", "unknown"),
            commit=os.environ.get("CRASHWARDEN_COMMIT", "unknown"),
            data_dir=data_dir,
            config_dir=config_dir,
        )
