from __future__ import annotations

import platform
import sys
import uuid
from dataclasses import dataclass

from explorer_gui.core.logging import get_logger


@dataclass(frozen=True)
class ErrorId:
    """Short user-facing error identifier for correlating UI errors with logs."""

    area: str
    token: str

    def __str__(self) -> str:
        return f"{self.area}-{self.token}"


def new_error_id(area: str) -> ErrorId:
    area = (area or "GEN").upper()
    token = uuid.uuid4().hex[:6].upper()
    return ErrorId(area=area, token=token)


def log_startup_snapshot() -> None:
    """Log a one-shot environment snapshot useful for field debugging."""

    log = get_logger("explorer_gui.startup")
    from explorer_gui import __version__

    log.info("=== App startup ===")
    log.info("app_version=%s", __version__)
    log.info("mode=%s", "standalone_exe" if getattr(sys, "frozen", False) else "source")
    log.info("python=%s", sys.version.split()[0])
    log.info("os=%s %s", platform.system(), platform.release())
    log.info("arch=%s", platform.machine())

    try:
        import PySide6

        log.info("pyside6=%s", getattr(PySide6, "__version__", ""))
    except ImportError:
        pass


def log_exception_with_id(area: str, exc: BaseException, *, logger_name: str = "explorer_gui") -> ErrorId:
    """Log an exception and return a stable error id to show the user."""

    err_id = new_error_id(area)
    log = get_logger(logger_name)
    # Use .exception to include traceback.
    log.exception("Error-ID=%s", str(err_id), exc_info=exc)
    return err_id
