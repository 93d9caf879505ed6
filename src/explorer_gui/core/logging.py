from __future__ import annotations

"""Central logging utilities.

A file-backed log under the per-user app dir. Logging must never crash
the explorer window.
"""

import logging
from pathlib import Path

from explorer_gui.core.paths import app_data_dir


def log_path() -> Path:
    return app_data_dir() / "app.log"


def get_logger(name: str = "explorer_gui") -> logging.Logger:
    return logging.getLogger(name)
