import os
import sys
import logging
import tempfile
from PySide6.QtWidgets import QApplication

from explorer_gui.config.models import ConfigUpdate
from explorer_gui.config.storage import save_config
from explorer_gui.core.logging_setup import setup_logging, install_excepthook
from explorer_gui.core.debug_support import log_startup_snapshot
from explorer_gui.core.paths import APP_DIR_ENV
from explorer_gui.services.files_mock import DEMO_ROOT, demo_backend
from explorer_gui.ui.main_window import MainWindow

DRY_RUN_FLAG = "--dry-run"
DRY_RUN_ENV = "EXPLORER_GUI_DRY_RUN"


def is_dry_run(argv, environ=os.environ) -> bool:
    """True for `--dry-run` or EXPLORER_GUI_DRY_RUN=1/true/yes."""
    if DRY_RUN_FLAG in argv:
        return True
    return environ.get(DRY_RUN_ENV, "").strip().lower() in ("1", "true", "yes")


def prepare_dry_run():
    """Point config and logs at a throwaway dir and seed a demo config."""
    os.environ[APP_DIR_ENV] = tempfile.mkdtemp(prefix="explorer_gui_demo_")
    return save_config(
        ConfigUpdate(default_path=DEMO_ROOT, quick_access=[f"{DEMO_ROOT}/projects"], editable_folders=[DEMO_ROOT])
    )


def main() -> int:
    dry_run = is_dry_run(sys.argv)
    argv = [a for a in sys.argv if a != DRY_RUN_FLAG]
    app = QApplication(argv)

    config = prepare_dry_run() if dry_run else None

    # Logging (file-backed, rotating). Must not crash the GUI.
    setup_logging(level=logging.INFO)
    install_excepthook()
    try:
        log_startup_snapshot()
    except OSError:
        pass
    if dry_run:
        logging.getLogger("explorer_gui").info("dry run: in-memory files under %s", DEMO_ROOT)

    app.setStyleSheet(
        """
        QMainWindow { background-color: #f0f0f0; }
        """
    )

    if dry_run:
        w = MainWindow(config, files=demo_backend(), dry_run=True)
    else:
        w = MainWindow()
    # closeEvent is skipped on some quit paths; aboutToQuit always fires.
    app.aboutToQuit.connect(w.graceful_shutdown)
    w.resize(1100, 700)
    w.show()

    return app.exec()
