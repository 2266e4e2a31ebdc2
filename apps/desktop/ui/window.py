"""
Crash console window.
Shows alerts raised by the startup crash check, the crash ledger, archived
dumps, and the crash summary with an export action.
"""

from __future__ import annotations

import logging
from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPlainTextEdit,
)

from packages.core.alerts.sink import AlertBook, AlertRecord
from packages.core.crash.services import CrashServices
from packages.core.crash.types import RecoveryOutcome

from .theme import Theme
from .components import Card, PrimaryButton, SecondaryButton, SeverityBadge, StatusPill

log = logging.getLogger(__name__)

_SUBTITLES = {
    "recovery": "Recovered from a crash of PID {pid}.",
    "unexpected_shutdown": "The previous session ended unexpectedly.",
    "clean": "The previous session shut down cleanly.",
}


class AlertListItem(QWidget):
    def __init__(self, alert: AlertRecord, theme: Theme, parent=None):
        super().__init__(parent)
        self.alert = alert

        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(10)

        layout.addWidget(SeverityBadge(alert.level.value, theme.severity_color(alert.level), self))

        text = QLabel(f"{alert.title}  ·  {alert.created_at:%Y-%m-%d %H:%M}")
        text.setObjectName("HintLabel" if alert.read else "SectionLabel")
        text.setWordWrap(True)
        layout.addWidget(text, 1)


class CrashConsoleWindow(QMainWindow):
    def __init__(self, services: CrashServices, alerts: AlertBook, outcome: RecoveryOutcome) -> None:
        super().__init__()
        self.setWindowTitle("CrashWarden")
        self.resize(1100, 800)
        self.setMinimumSize(800, 600)

        self.theme = Theme("dark")
        self.services = services
        self.alerts = alerts
        self.outcome = outcome

        self._build_ui()
        self.setStyleSheet(self.theme.get_stylesheet())
        self._refresh()

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        main_layout = QVBoxLayout(root)
        main_layout.setContentsMargins(24, 24, 24, 24)
        main_layout.setSpacing(16)

        title = QLabel("Crash Console")
        title.setObjectName("TitleLabel")
        main_layout.addWidget(title)

        subtitle = QLabel(_SUBTITLES[self.outcome.mode].format(pid=self.outcome.pid))
        subtitle.setObjectName("HintLabel")
        main_layout.addWidget(subtitle)

        status_row = QHBoxLayout()
        status_row.setSpacing(12)
        self.recent_pill = StatusPill()
        status_row.addWidget(self.recent_pill)
        self.archive_pill = StatusPill()
        status_row.addWidget(self.archive_pill)
        status_row.addStretch()

        self.btn_refresh = SecondaryButton("Refresh")
        self.btn_refresh.clicked.connect(self._refresh)
        status_row.addWidget(self.btn_refresh)

        self.btn_export = PrimaryButton("Export summary")
        self.btn_export.clicked.connect(self._export_summary)
        status_row.addWidget(self.btn_export)
        main_layout.addLayout(status_row)

        columns = QHBoxLayout()
        columns.setSpacing(16)

        alerts_card = Card("Alerts", "Select an alert to read it. Read alerts stay listed.")
        self.alert_list = QListWidget()
        self.alert_list.currentItemChanged.connect(self._show_alert)
        alerts_card.layout.addWidget(self.alert_list, 1)
        self.alert_body = QPlainTextEdit()
        self.alert_body.setReadOnly(True)
        alerts_card.layout.addWidget(self.alert_body, 1)
        self.btn_mark_read = SecondaryButton("Mark read")
        self.btn_mark_read.setEnabled(False)
        self.btn_mark_read.clicked.connect(self._mark_read)
        alerts_card.layout.addWidget(self.btn_mark_read, 0, Qt.AlignRight)
        columns.addWidget(alerts_card, 1)

        history_card = Card("Crash history", "Newest first. Archived dumps are listed below the ledger.")
        self.history_list = QListWidget()
        history_card.layout.addWidget(self.history_list, 2)
        self.archive_list = QListWidget()
        history_card.layout.addWidget(self.archive_list, 1)
        columns.addWidget(history_card, 1)

        main_layout.addLayout(columns, 1)

        summary_card = Card("Crash summary", "This is the report that Export summary writes to the data directory.")
        self.summary = QPlainTextEdit()
        self.summary.setReadOnly(True)
        summary_card.layout.addWidget(self.summary)
        self.export_hint = QLabel("")
        self.export_hint.setObjectName("HintLabel")
        summary_card.layout.addWidget(self.export_hint)
        main_layout.addWidget(summary_card, 1)

    def _refresh(self) -> None:
        ledger = self.services.ledger
        recent = ledger.recent_count()
        threshold = self.services.escalator.threshold
        self.recent_pill.setText(f"Crashes (24h): {recent}")
        self.recent_pill.set_alarm(recent >= threshold)

        members = self.services.archive.members()
        self.archive_pill.setText(f"Archived dumps: {len(members)}")

        self.history_list.clear()
        for line in reversed(ledger.lines()):
            self.history_list.addItem(QListWidgetItem(line))

        self.archive_list.clear()
        for p in members:
            self.archive_list.addItem(QListWidgetItem(p.name))

        self._render_alerts()
        self.summary.setPlainText(self.services.reporter.generate())

    def _render_alerts(self) -> None:
        self.alert_list.clear()
        self.alert_body.clear()
        for alert in reversed(self.alerts.all()):
            widget = AlertListItem(alert, self.theme)
            item = QListWidgetItem()
            hint = widget.sizeHint()
            hint.setHeight(max(hint.height(), 44))
            item.setSizeHint(hint)
            self.alert_list.addItem(item)
            self.alert_list.setItemWidget(item, widget)

    def _current_alert(self) -> AlertRecord | None:
        item = self.alert_list.currentItem()
        if item is None:
            return None
        widget = self.alert_list.itemWidget(item)
        return widget.alert if isinstance(widget, AlertListItem) else None

    def _show_alert(self, *_args) -> None:
        alert = self._current_alert()
        if alert is None:
            self.alert_body.clear()
            self.btn_mark_read.setEnabled(False)
            return
        self.alert_body.setPlainText(alert.body)
        self.btn_mark_read.setEnabled(not alert.read)

    def _mark_read(self) -> None:
        alert = self._current_alert()
        if alert is None:
            return
        self.alerts.mark_read(alert.identifier)
        self._render_alerts()

    def _export_summary(self) -> None:
        path = self.services.reporter.export()
        if path is None:
            self.export_hint.setText("Export failed, see the log for details.")
            return
        self.export_hint.setText(f"Exported to {path}")
