from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "CrashWarden"


def app_data_dir() -> Path:
    override = os.environ.get("CRASHWARDEN_HOME")
    if override:
        return Path(override)
    base = os.environ.get("APPDATA") or str(Path.home())
    return Path(base) / APP_NAME


def data_dir() -> Path:
    return app_data_dir() / "data"


def config_dir() -> Path:
    return app_data_dir() / "config"


def config_path() -> Path:
    return config_dir() / "config.json"


def logs_dir() -> Path:
    return app_data_dir() / "logs"


def log_path() -> Path:
    return logs_dir() / "app.log"


def alerts_path() -> Path:
    return data_dir() / "alerts.json"


def local_app_data_dir() -> Path:
    """Per-user local application data, where some runtimes drop their crash dumps."""
    base = os.environ.get("LOCALAPPDATA") or os.environ.get("XDG_DATA_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".local" / "share" / APP_NAME


def ensure_app_dirs() -> None:
    app_data_dir().mkdir(parents=True, exist_ok=True)
    data_dir().mkdir(parents=True, exist_ok=True)
    config_dir().mkdir(parents=True, exist_ok=True)
    logs_dir().mkdir(parents=True, exist_ok=True)
