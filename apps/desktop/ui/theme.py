"""
Theme for the crash console.
Palette, severity colors and a QSS generator for light/dark modes.
"""

from __future__ import annotations

from typing import Dict, Literal

from packages.core.crash.types import AlertLevel

FONT_FAMILY = "Segoe UI, -apple-system, BlinkMacSystemFont, sans-serif"
MONO_FAMILY = "Cascadia Mono, Consolas, Menlo, monospace"

ACCENT = "#0A84FF"

SEVERITY_COLORS: Dict[AlertLevel, str] = {
    AlertLevel.INFO: "#0A84FF",
    AlertLevel.WARN: "#FF9F0A",
    AlertLevel.ERROR: "#FF453A",
    AlertLevel.FATAL: "#BF5AF2",
}

LIGHT_COLORS = {
    "background": "#F5F5F7",
    "surface": "#FFFFFF",
    "surface_secondary": "#F2F2F7",
    "text_primary": "#000000",
    "text_secondary": "#6E6E73",
    "border": "#E5E5EA",
}

DARK_COLORS = {
    "background": "#000000",
    "surface": "#1C1C1E",
    "surface_secondary": "#2C2C2E",
    "text_primary": "#FFFFFF",
    "text_secondary": "#98989D",
    "border": "#38383A",
}

ThemeMode = Literal["light", "dark"]


def rgba(hex_color: str, alpha: float) -> str:
    hex_color = hex_color.lstrip("#")
    r, g, b = int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16)
    return f"rgba({r}, {g}, {b}, {alpha})"


class Theme:
    def __init__(self, mode: ThemeMode = "dark"):
        self.mode = mode
        self.colors = LIGHT_COLORS if mode == "light" else DARK_COLORS

    def severity_color(self, level: AlertLevel) -> str:
        return SEVERITY_COLORS.get(level, self.colors["text_secondary"])

    def get_stylesheet(self) -> str:
        c = self.colors
        return f"""
        QMainWindow {{
            background-color: {c["background"]};
            color: {c["text_primary"]};
        }}

        QLabel#TitleLabel {{
            font-family: {FONT_FAMILY};
            font-size: 26px;
            font-weight: 700;
            color: {c["text_primary"]};
        }}

        QLabel#SectionLabel {{
            font-family: {FONT_FAMILY};
            font-size: 17px;
            font-weight: 600;
            color: {c["text_primary"]};
        }}

        QLabel#HintLabel {{
            font-family: {FONT_FAMILY};
            font-size: 13px;
            color: {c["text_secondary"]};
        }}

        QFrame#Card {{
            background-color: {c["surface"]};
            border-radius: 14px;
            border: 1px solid {c["border"]};
        }}

        QPushButton#PrimaryButton {{
            background-color: {ACCENT};
            color: #FFFFFF;
            border: none;
            border-radius: 18px;
            padding: 8px 20px;
            font-family: {FONT_FAMILY};
            font-weight: 600;
            min-height: 32px;
        }}

        QPushButton#SecondaryButton {{
            background-color: {c["surface_secondary"]};
            color: {ACCENT};
            border: 1px solid {c["border"]};
            border-radius: 18px;
            padding: 8px 20px;
            font-family: {FONT_FAMILY};
            min-height: 32px;
        }}

        QPushButton:disabled {{
            color: {c["text_secondary"]};
        }}

        QListWidget {{
            background-color: transparent;
            border: none;
            color: {c["text_primary"]};
            font-family: {MONO_FAMILY};
            font-size: 12px;
        }}

        QListWidget::item:selected {{
            background-color: {rgba(ACCENT, 0.15)};
            color: {c["text_primary"]};
        }}

        QPlainTextEdit {{
            background-color: {c["surface_secondary"]};
            color: {c["text_primary"]};
            border: none;
            border-radius: 8px;
            font-family: {MONO_FAMILY};
            font-size: 12px;
        }}

        QLabel#StatusPill {{
            background-color: {c["surface_secondary"]};
            color: {c["text_secondary"]};
            border-radius: 12px;
            padding: 4px 12px;
            font-family: {FONT_FAMILY};
            font-size: 13px;
        }}

        QLabel#StatusPillAlarm {{
            background-color: {rgba(SEVERITY_COLORS[AlertLevel.ERROR], 0.15)};
            color: {SEVERITY_COLORS[AlertLevel.ERROR]};
            border-radius: 12px;
            padding: 4px 12px;
            font-family: {FONT_FAMILY};
            font-size: 13px;
        }}
        """
