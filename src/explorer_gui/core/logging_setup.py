from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from explorer_gui.core.logging import log_path

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _level_from_env(default: int) -> int:
    name = os.environ.get("EXPLORER_GUI_LOG_LEVEL", "").strip().upper()
    if not name:
        return default
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else default


def setup_logging(level: int = logging.INFO, *, console: bool = False) -> Optional[RotatingFileHandler]:
    """Attach a rotating file handler to the ``explorer_gui`` logger.

    The log lives at ``~/.explorer_gui/app.log`` (or under
    ``EXPLORER_GUI_HOME``); ``EXPLORER_GUI_LOG_LEVEL`` overrides ``level``.
    Returns the handler, or None when the log file could not be opened.
    Never raises: a broken log directory must not keep the GUI from starting.
    """
    level = _level_from_env(level)
    root = logging.getLogger("explorer_gui")
    root.setLevel(level)

    for h in root.handlers:
        if isinstance(h, RotatingFileHandler):
            # Already configured (second window, interactive reload).
            h.setLevel(level)
            return h

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    if console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(fmt)
        sh.setLevel(level)
        root.addHandler(sh)

    try:
        p = log_path()
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(p, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    except OSError as e:
        sys.stderr.write(f"explorer_gui: file logging disabled ({e})\n")
        return None

    fh.setFormatter(fmt)
    fh.setLevel(level)
    root.addHandler(fh)
    logging.captureWarnings(True)
    return fh


def install_excepthook() -> None:
    """Route uncaught exceptions to the app log, then to the default hook."""

    previous = sys.excepthook

    def _hook(exc_type, exc, tb):
        if not issubclass(exc_type, KeyboardInterrupt):
            logging.getLogger("explorer_gui").critical("Uncaught exception", exc_info=(exc_type, exc, tb))
        previous(exc_type, exc, tb)

    sys.excepthook = _hook
