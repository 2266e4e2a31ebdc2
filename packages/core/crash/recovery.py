"""
Startup crash check.

Runs once, before the running marker for the current process is written.
Exactly one branch executes:

    Idle -> RecoveryMode(pid)          a launcher passed ``crashRecovery:<pid>``
    Idle -> UnexpectedShutdownCheck    no (well-formed) recovery argument
         -> Done

Nothing in here raises into the caller; failures are logged and the outcome
reflects whatever work completed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from packages.core.alerts.sink import AlertSink

from .dumps import ArchiveStore, DumpLocator
from .escalation import CrashFrequencyEscalator
from .ledger import DEFAULT_WINDOW, EventStore
from .marker import RunningMarker
from .messages import (
    CRASH_RECOVERY_DESCRIPTION,
    CRASH_RECOVERY_TITLE,
    UNEXPECTED_SHUTDOWN_DESCRIPTION,
    UNEXPECTED_SHUTDOWN_TITLE,
    MessageFormatter,
)
from .types import (
    NOT_AVAILABLE,
    TIMESTAMP_FORMAT,
    UNKNOWN_PID,
    AlertLevel,
    CrashEvent,
    CrashKind,
    RecoveryOutcome,
    RuntimeInfo,
)

log = logging.getLogger(__name__)

RECOVERY_ARGUMENT_PREFIX = "crashRecovery"


def parse_recovery_argument(args: Iterable[str], prefix: str = RECOVERY_ARGUMENT_PREFIX) -> Optional[str]:
    """Return the crashed PID from the first well-formed ``<prefix>:<pid>`` argument."""
    for arg in args:
        parts = arg.split(":")
        if parts[0] != prefix:
            continue
        pid = parts[1].strip() if len(parts) == 2 else ""
        if not (pid.isascii() and pid.isdigit()):
            log.error("Invalid crash recovery argument: %s", arg)
            continue
        return pid
    return None


class CrashRecoveryCoordinator:
    def __init__(
        self,
        marker: RunningMarker,
        ledger: EventStore,
        locator: DumpLocator,
        archive: ArchiveStore,
        escalator: CrashFrequencyEscalator,
        sink: AlertSink,
        messages: MessageFormatter,
        runtime: RuntimeInfo,
        clock: Callable[[], datetime] = datetime.now,
        window: timedelta = DEFAULT_WINDOW,
        argument_prefix: str = RECOVERY_ARGUMENT_PREFIX,
    ) -> None:
        self._marker = marker
        self._ledger = ledger
        self._locator = locator
        self._archive = archive
        self._escalator = escalator
        self._sink = sink
        self._messages = messages
        self._runtime = runtime
        self._clock = clock
        self._window = window
        self._prefix = argument_prefix

    def check_crash_recovery(self, startup_args: Iterable[str]) -> RecoveryOutcome:
        pid = parse_recovery_argument(startup_args, self._prefix)
        if pid is not None:
            outcome = RecoveryOutcome(mode="recovery", pid=pid)
            try:
                self._process_crash_recovery(outcome)
            except Exception:
                log.exception("Failed to process crash recovery for pid %s", pid)
            return outcome

        outcome = RecoveryOutcome(mode="clean")
        try:
            self._check_unexpected_shutdown(outcome)
        except Exception:
            log.exception("Failed to process unexpected shutdown")
        return outcome

    def _record(self, pid: str, kind: CrashKind) -> int:
        now = self._clock()
        self._ledger.append(CrashEvent(timestamp=now, pid=pid, kind=kind, runtime=self._runtime.descriptor()))
        return self._ledger.recent_count(self._window, now=now)

    def _process_crash_recovery(self, outcome: RecoveryOutcome) -> None:
        pid = outcome.pid or UNKNOWN_PID
        log.warning("Recovering from a crash of pid %s", pid)
        outcome.recent_crashes = self._record(pid, "jvm_crash")

        outcome.dump_path = self._locator.find(pid)
        if outcome.dump_path is not None:
            outcome.archived = self._archive.preserve(outcome.dump_path, pid)
        else:
            log.warning("No crash file found for pid: %s", pid)

        outcome.escalated = self._escalator.maybe_escalate(outcome.recent_crashes)

        dump = str(outcome.dump_path.absolute()) if outcome.dump_path is not None else NOT_AVAILABLE
        self._sink.publish(
            True,
            AlertLevel.FATAL,
            f"peerbanhelper-crash-recovery-{uuid.uuid4()}",
            self._messages.format(CRASH_RECOVERY_TITLE),
            self._messages.format(
                CRASH_RECOVERY_DESCRIPTION,
                pid,
                self._clock().strftime(TIMESTAMP_FORMAT),
                dump,
                str(outcome.recent_crashes),
            ),
        )

    def _check_unexpected_shutdown(self, outcome: RecoveryOutcome) -> None:
        if not self._marker.exists():
            return

        log.warning("Detected unexpected shutdown - running marker file exists")
        outcome.mode = "unexpected_shutdown"
        outcome.pid = UNKNOWN_PID
        contents = self._marker.read()
        marker_text = contents.strip() if contents and contents.strip() else NOT_AVAILABLE

        outcome.recent_crashes = self._record(UNKNOWN_PID, "unexpected_shutdown")
        outcome.escalated = self._escalator.maybe_escalate(outcome.recent_crashes)

        self._sink.publish(
            True,
            AlertLevel.WARN,
            f"unexpected-shutdown-{uuid.uuid4()}",
            self._messages.format(UNEXPECTED_SHUTDOWN_TITLE),
            self._messages.format(
                UNEXPECTED_SHUTDOWN_DESCRIPTION,
                marker_text,
                self._clock().strftime(TIMESTAMP_FORMAT),
            ),
        )
