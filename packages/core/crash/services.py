from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from packages.core.alerts.sink import AlertSink
from packages.shared.config import CrashSettings

from .dumps import DirectoryResolver, DumpArchive, DumpLocator, default_resolvers
from .escalation import CrashFrequencyEscalator
from .ledger import CrashLedger
from .marker import RunningMarker
from .messages import MessageFormatter, TemplateMessages
from .recovery import CrashRecoveryCoordinator
from .report import CrashReportComposer
from .runtime import current_runtime, recommend
from .types import HostMetadata, RuntimeInfo


@dataclass
class CrashServices:
    marker: RunningMarker
    ledger: CrashLedger
    locator: DumpLocator
    archive: DumpArchive
    escalator: CrashFrequencyEscalator
    coordinator: CrashRecoveryCoordinator
    reporter: CrashReportComposer


def build_crash_services(
    metadata: HostMetadata,
    sink: AlertSink,
    settings: Optional[CrashSettings] = None,
    runtime: Optional[RuntimeInfo] = None,
    messages: Optional[MessageFormatter] = None,
    resolvers: Optional[List[DirectoryResolver]] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> CrashServices:
    settings = settings or CrashSettings()
    runtime = runtime or current_runtime()
    messages = messages or TemplateMessages()
    data_dir: Path = metadata.data_dir

    marker = RunningMarker(data_dir / "running.marker", runtime=runtime, clock=clock)
    ledger = CrashLedger(data_dir / "crash-history.log", max_entries=settings.max_history_entries, clock=clock)
    locator = DumpLocator(resolvers if resolvers is not None else default_resolvers(data_dir))
    archive = DumpArchive(data_dir / "crash-reports", max_members=settings.max_archived_dumps, clock=clock)
    escalator = CrashFrequencyEscalator(
        sink,
        messages,
        recommendation=lambda: recommend(runtime),
        threshold=settings.frequency_threshold,
        clock=clock,
    )
    coordinator = CrashRecoveryCoordinator(
        marker=marker,
        ledger=ledger,
        locator=locator,
        archive=archive,
        escalator=escalator,
        sink=sink,
        messages=messages,
        runtime=runtime,
        clock=clock,
        window=settings.frequency_window(),
        argument_prefix=settings.recovery_argument_prefix,
    )
    reporter = CrashReportComposer(ledger, runtime, metadata, clock=clock)
    return CrashServices(
        marker=marker,
        ledger=ledger,
        locator=locator,
        archive=archive,
        escalator=escalator,
        coordinator=coordinator,
        reporter=reporter,
    )
