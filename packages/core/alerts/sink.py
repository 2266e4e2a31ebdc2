"""
Alert sink contract and a JSON-backed implementation.

Persistent alerts are kept in a small JSON document so the "already published"
check survives restarts. Every publish is also forwarded to a Notifier.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field, ValidationError

from packages.core.crash.types import AlertLevel

from .notifier import Notifier

log = logging.getLogger(__name__)


class AlertSink(Protocol):
    def publish(self, persistent: bool, level: AlertLevel, identifier: str, title: str, body: str) -> None:
        ...

    def exists_including_read(self, identifier: str) -> bool:
        ...


class AlertRecord(BaseModel):
    identifier: str
    level: AlertLevel
    title: str
    body: str
    created_at: datetime = Field(default_factory=datetime.now)
    read: bool = False


class _AlertDocument(BaseModel):
    alerts: List[AlertRecord] = Field(default_factory=list)


class AlertBook:
    def __init__(self, path: Path, notifier: Optional[Notifier] = None) -> None:
        self._path = path
        self._notifier = notifier
        self._lock = threading.Lock()
        self._doc = self._load()

    def _load(self) -> _AlertDocument:
        if not self._path.exists():
            return _AlertDocument()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return _AlertDocument.model_validate(data)
        except (OSError, ValueError, ValidationError):
            log.error("Alert store %s is unreadable, starting empty", self._path, exc_info=True)
            return _AlertDocument()

    def _save(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(self._doc.model_dump_json(indent=2), encoding="utf-8")
        except OSError:
            log.exception("Failed to save alerts to %s", self._path)

    def publish(self, persistent: bool, level: AlertLevel, identifier: str, title: str, body: str) -> None:
        if persistent:
            with self._lock:
                self._doc.alerts.append(AlertRecord(identifier=identifier, level=level, title=title, body=body))
                self._save()
        log.info("Alert published [%s] %s: %s", level.value, identifier, title)
        if self._notifier is not None:
            try:
                self._notifier.notify(title, body)
            except Exception:
                log.exception("Failed to deliver alert %s", identifier)

    def exists_including_read(self, identifier: str) -> bool:
        with self._lock:
            return any(a.identifier == identifier for a in self._doc.alerts)

    def mark_read(self, identifier: str) -> bool:
        with self._lock:
            changed = False
            for a in self._doc.alerts:
                if a.identifier == identifier and not a.read:
                    a.read = True
                    changed = True
            if changed:
                self._save()
            return changed

    def unread(self) -> List[AlertRecord]:
        with self._lock:
            return [a for a in self._doc.alerts if not a.read]

    def all(self) -> List[AlertRecord]:
        with self._lock:
            return list(self._doc.alerts)
