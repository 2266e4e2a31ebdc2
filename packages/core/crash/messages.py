from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

log = logging.getLogger(__name__)

UNEXPECTED_SHUTDOWN_TITLE = "crash.unexpected_shutdown.title"
UNEXPECTED_SHUTDOWN_DESCRIPTION = "crash.unexpected_shutdown.description"
CRASH_RECOVERY_TITLE = "crash.recovery.title"
CRASH_RECOVERY_DESCRIPTION = "crash.recovery.description"
FREQUENT_CRASHES_TITLE = "crash.frequent.title"
FREQUENT_CRASHES_DESCRIPTION = "crash.frequent.description"

ENGLISH: Dict[str, str] = {
    UNEXPECTED_SHUTDOWN_TITLE: "Unexpected shutdown detected",
    UNEXPECTED_SHUTDOWN_DESCRIPTION: (
        "The previous session did not shut down cleanly. "
        "This usually means the process was killed, the system lost power, or the runtime crashed "
        "before it could write a crash dump.\n\n"
        "Previous session:\n{0}\n\nDetected at: {1}"
    ),
    CRASH_RECOVERY_TITLE: "Recovered from a crash",
    CRASH_RECOVERY_DESCRIPTION: (
        "The application crashed and was restarted by the launcher.\n"
        "PID: {0}\nTime: {1}\nCrash dump: {2}\nCrashes in the last 24 hours: {3}\n\n"
        "Please export a crash summary and attach the crash dump when reporting this issue."
    ),
    FREQUENT_CRASHES_TITLE: "Frequent crashes detected",
    FREQUENT_CRASHES_DESCRIPTION: (
        "The application crashed {0} times in the last 24 hours.\n\n"
        "Recommendation: {1}"
    ),
}


class MessageFormatter(Protocol):
    def format(self, key: str, *args: object) -> str:
        ...


class TemplateMessages:
    def __init__(self, templates: Optional[Dict[str, str]] = None) -> None:
        self._templates = dict(ENGLISH if templates is None else templates)

    def format(self, key: str, *args: object) -> str:
        template = self._templates.get(key)
        if template is None:
            log.warning("Missing message template: %s", key)
            return key
        try:
            return template.format(*args)
        except (IndexError, KeyError, ValueError):
            log.warning("Bad arguments for message template %s", key, exc_info=True)
            return template
