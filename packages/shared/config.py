from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, Field


class CrashSettings(BaseModel):
    max_history_entries: int = Field(default=50, ge=1)
    frequency_threshold: int = Field(default=3, ge=1)
    frequency_window_hours: int = Field(default=24, ge=1)
    max_archived_dumps: int = Field(default=10, ge=1)
    recovery_argument_prefix: str = "crashRecovery"

    def frequency_window(self) -> timedelta:
        return timedelta(hours=self.frequency_window_hours)


class AppConfig(BaseModel):
    crash: CrashSettings = Field(default_factory=CrashSettings)
    notifications_enabled: bool = True
    log_level: str = "INFO"
