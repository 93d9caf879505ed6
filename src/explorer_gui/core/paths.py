from __future__ import annotations

import os
from pathlib import Path

# Tests and portable installs point this somewhere else.
APP_DIR_ENV = "EXPLORER_GUI_HOME"


def app_data_dir() -> Path:
    """Per-user app data directory used for logs and config."""

    override = os.environ.get(APP_DIR_ENV)
    base = Path(override) if override else Path.home() / ".explorer_gui"
    base.mkdir(parents=True, exist_ok=True)
    return base
