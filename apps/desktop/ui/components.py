"""
Small widgets shared by the crash console.
"""

from __future__ import annotations

from PySide6.QtWidgets import QFrame, QLabel, QPushButton, QVBoxLayout

from .theme import rgba


class Card(QFrame):
    def __init__(self, title: str, hint: str = "", parent=None):
        super().__init__(parent)
        self.setObjectName("Card")
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(16, 16, 16, 16)
        self.layout.setSpacing(10)

        heading = QLabel(title)
        heading.setObjectName("SectionLabel")
        self.layout.addWidget(heading)
        if hint:
            hint_label = QLabel(hint)
            hint_label.setObjectName("HintLabel")
            hint_label.setWordWrap(True)
            self.layout.addWidget(hint_label)


class PrimaryButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("PrimaryButton")


class SecondaryButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("SecondaryButton")


class StatusPill(QLabel):
    """Counter pill; switches to the alarm style when ``alarm`` is set."""

    def __init__(self, text: str = "", alarm: bool = False, parent=None):
        super().__init__(text, parent)
        self.set_alarm(alarm)

    def set_alarm(self, alarm: bool) -> None:
        self.setObjectName("StatusPillAlarm" if alarm else "StatusPill")
        # Object-name selectors are only re-evaluated after a re-polish
        self.style().unpolish(self)
        self.style().polish(self)


class SeverityBadge(QLabel):
    def __init__(self, text: str, color: str, parent=None):
        super().__init__(text, parent)
        self.setStyleSheet(
            f"background-color: {rgba(color, 0.15)}; color: {color}; "
            "border-radius: 10px; padding: 2px 8px; font-size: 11px; font-weight: 600;"
        )
