from __future__ import annotations

import logging
from typing import Protocol

log = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None:
        ...


class ToastNotifierWin10:
    def __init__(self) -> None:
        from win10toast import ToastNotifier

        self._toaster = ToastNotifier()

    def notify(self, title: str, body: str) -> None:
        try:
            self._toaster.show_toast(title, body, duration=6, threaded=True)
        except Exception:
            log.exception("Failed to show toast notification")


class LogNotifier:
    def notify(self, title: str, body: str) -> None:
        log.warning("%s\n%s", title, body)
