import logging
import signal
import sys
from typing import Optional
from PySide6.QtWidgets import QApplication

from packages.shared.paths import alerts_path, config_dir, data_dir, ensure_app_dirs
from packages.shared.store import ConfigStore
from packages.core.logging_ import setup_logging
from packages.core.alerts.notifier import LogNotifier, Notifier, ToastNotifierWin10
from packages.core.alerts.sink import AlertBook
from packages.core.crash.services import build_crash_services
from packages.core.crash.types import HostMetadata
from .ui.window import CrashConsoleWindow

log = logging.getLogger(__name__)


def _make_notifier(enabled: bool) -> Optional[Notifier]:
    if not enabled:
        return None
    if sys.platform == "win32":
        return ToastNotifierWin10()
    return LogNotifier()


def main() -> None:
    ensure_app_dirs()
    cfg = ConfigStore().load()
    setup_logging(cfg.log_level)

    alerts = AlertBook(alerts_path(), notifier=_make_notifier(cfg.notifications_enabled))
    meta = HostMetadata.detect(data_dir(), config_dir())
    services = build_crash_services(meta, alerts, settings=cfg.crash)

    # The check has to see the previous run's marker before this run writes its own
    outcome = services.coordinator.check_crash_recovery(sys.argv[1:])
    log.info("Startup crash check finished: %s", outcome.mode)
    marker = services.marker.start()

    app = QApplication(sys.argv)
    win = CrashConsoleWindow(services, alerts, outcome)
    win.show()

    def signal_handler(sig, frame):
        print("\nReceived interrupt signal (Ctrl+C), shutting down...")
        win.close()

    if hasattr(signal, 'SIGINT'):
        signal.signal(signal.SIGINT, signal_handler)

    with marker:
        code = app.exec()
    sys.exit(code)


if __name__ == "__main__":
    main()
