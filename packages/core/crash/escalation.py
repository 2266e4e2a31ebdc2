from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from packages.core.alerts.sink import AlertSink

from .messages import FREQUENT_CRASHES_DESCRIPTION, FREQUENT_CRASHES_TITLE, MessageFormatter
from .types import DAY_STAMP_FORMAT, AlertLevel

log = logging.getLogger(__name__)


def suppression_key(day: datetime) -> str:
    return f"frequent-crashes-{day.strftime(DAY_STAMP_FORMAT)}"


class CrashFrequencyEscalator:
    """Publishes the "frequent crashes" alert at most once per calendar day."""

    def __init__(
        self,
        sink: AlertSink,
        messages: MessageFormatter,
        recommendation: Callable[[], str],
        threshold: int = 3,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._sink = sink
        self._messages = messages
        self._recommendation = recommendation
        self._threshold = threshold
        self._clock = clock

    @property
    def threshold(self) -> int:
        return self._threshold

    def maybe_escalate(self, count: int) -> bool:
        if count < self._threshold:
            return False

        alert_id = suppression_key(self._clock())
        if self._sink.exists_including_read(alert_id):
            log.debug("Frequent crash alert %s already published today", alert_id)
            return False

        log.warning("Detected %d crashes within the frequency window", count)
        self._sink.publish(
            True,
            AlertLevel.FATAL,
            alert_id,
            self._messages.format(FREQUENT_CRASHES_TITLE),
            self._messages.format(FREQUENT_CRASHES_DESCRIPTION, str(count), self._recommendation()),
        )
        return True
