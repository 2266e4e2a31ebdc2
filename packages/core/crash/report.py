from __future__ import annotations

import logging
import platform
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import psutil

from packages.shared.paths import APP_NAME

from .ledger import EventStore
from .runtime import recommend
from .types import FILE_STAMP_FORMAT, TIMESTAMP_FORMAT, HostMetadata, RuntimeInfo

log = logging.getLogger(__name__)

HISTORY_LIMIT = 10

INSTRUCTIONS = (
    "1. Please share this report when reporting the crash issue\n"
    "2. If available, also attach the crash dump file (hs_err_*.log) from the crash-reports directory\n"
    "3. Include steps to reproduce if the crash is reproducible\n"
    "4. Follow the recommendation above if you are running an outdated or uncommon runtime\n"
)


def format_bytes(n: int) -> str:
    if n < 0:
        return "Unknown"
    if n < 1024:
        return f"{n} B"
    if n < 1024 * 1024:
        return f"{n / 1024.0:.1f} KB"
    if n < 1024 * 1024 * 1024:
        return f"{n / (1024.0 * 1024):.1f} MB"
    return f"{n / (1024.0 * 1024 * 1024):.1f} GB"


class CrashReportComposer:
    """Renders ledger and host state into a shareable Markdown crash summary."""

    def __init__(
        self,
        ledger: EventStore,
        runtime: RuntimeInfo,
        metadata: HostMetadata,
        output_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._ledger = ledger
        self._runtime = runtime
        self._meta = metadata
        self._output_dir = output_dir or metadata.data_dir
        self._clock = clock

    def system_info(self) -> str:
        try:
            proc = psutil.Process()
            vm = psutil.virtual_memory()
            rss = proc.memory_info().rss

            lines = [
                "=== System Information ===",
                f"OS: {platform.system()} {platform.release()}",
                f"Architecture: {platform.machine()}",
                f"Available Processors: {psutil.cpu_count(logical=True)}",
                "",
                "=== Runtime Information ===",
                f"Runtime Name: {self._runtime.name}",
                f"Runtime Vendor: {self._runtime.vendor}",
                f"Runtime Version: {self._runtime.version}",
                f"Executable: {self._runtime.executable or 'Unknown'}",
                "",
                "=== Memory Information ===",
                f"Process Memory (RSS): {format_bytes(rss)}",
                f"System Memory: {format_bytes(vm.used)} / {format_bytes(vm.total)}",
                "",
                f"=== {APP_NAME} Information ===",
                f"Version: {self._meta.version}",
                f"Data Directory: {self._meta.data_dir.absolute()}",
                f"Config Directory: {self._meta.config_dir.absolute()}",
            ]
            return "\n".join(lines) + "\n"
        except Exception as e:
            return f"Failed to collect system information: {e}"

    def generate(self) -> str:
        try:
            return self._compose()
        except Exception as e:
            log.exception("Failed to generate crash summary")
            return f"Failed to generate crash summary: {e}"

    def _compose(self) -> str:
        now = self._clock()
        parts = [
            f"# {APP_NAME} Crash Report\n\n",
            f"**Version:** {self._meta.version}\n",
            f"**Branch:** {self._meta.branch}\n",
            f"**Commit:** {self._meta.commit}\n",
            f"**Report Generated:** {now.strftime(TIMESTAMP_FORMAT)}\n\n",
            f"**Recent Crashes (24h):** {self._ledger.recent_count(now=now)}\n\n",
            "## System Information\n",
            "```\n", self.system_info(), "```\n\n",
            "## Recommendation\n",
            recommend(self._runtime), "\n\n",
        ]

        history = self._ledger.tail(HISTORY_LIMIT)
        if history:
            parts.append("## Recent Crash History\n```\n")
            parts.extend(line + "\n" for line in history)
            parts.append("```\n\n")

        parts.append("## Instructions\n")
        parts.append(INSTRUCTIONS)
        return "".join(parts)

    def export(self) -> Optional[Path]:
        stamp = self._clock().strftime(FILE_STAMP_FORMAT)
        target = self._output_dir / f"crash-summary-{stamp}.md"
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(self.generate(), encoding="utf-8")
        except OSError:
            log.exception("Failed to export crash summary")
            return None
        log.info("Crash summary exported to: %s", target.absolute())
        return target
