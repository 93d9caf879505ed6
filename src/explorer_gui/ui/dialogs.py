from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QMessageBox, QWidget

from explorer_gui.core.debug_support import log_exception_with_id, new_error_id
from explorer_gui.core.errors import PermissionDeniedError, SelfReferentialOperationError


def show_exception(
    parent: Optional[QWidget],
    *,
    title: Optional[str] = None,
    user_message: Optional[str] = None,
    exc: Optional[BaseException] = None,
    area: str = "GEN",
) -> None:
    if exc is not None:
        err_id = log_exception_with_id(area, exc)
    else:
        err_id = new_error_id(area)

    msg = (user_message or "Error") + f"\n\nError code: {err_id}"
    QMessageBox.critical(parent, title or "Error", msg)


class QtPrompter:
    """Prompter backed by modal QMessageBox dialogs."""

    def __init__(self, parent: Optional[QWidget] = None):
        self.parent = parent

    def confirm(self, title: str, message: str) -> bool:
        return QMessageBox.question(self.parent, title, message) == QMessageBox.StandardButton.Yes

    def show_error(self, title: str, message: str, exc: Optional[BaseException] = None) -> None:
        # Refusals are expected outcomes, not faults worth an error id.
        if isinstance(exc, (PermissionDeniedError, SelfReferentialOperationError)):
            QMessageBox.warning(self.parent, title, message)
            return
        show_exception(self.parent, title=title, user_message=message, exc=exc, area="FS")
