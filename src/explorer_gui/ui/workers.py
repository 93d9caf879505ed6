from __future__ import annotations

from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot
from PySide6.QtWidgets import QProgressDialog, QWidget

from explorer_gui.core.logging import get_logger

log = get_logger("explorer_gui.ui.workers")


class CallWorker(QObject):
    """Runs one callable off the UI thread; `finished` is always emitted."""

    finished = Signal()

    def __init__(self, fn: Callable[[], Any]):
        super().__init__()
        self._fn = fn
        self.result: Any = None
        self.error: Optional[BaseException] = None

    @Slot()
    def run(self) -> None:
        try:
            self.result = self._fn()
        except Exception as e:
            log.exception("background call failed")
            self.error = e
        finally:
            self.finished.emit()


def run_with_progress(parent: QWidget, label: str, fn: Callable[[], Any]) -> CallWorker:
    """Run `fn` on a QThread behind a modal, busy progress dialog.

    Blocks (in a nested event loop) until `fn` returns; the worker carries
    the result or the exception.
    """
    dlg = QProgressDialog(label, "Cancel", 0, 0, parent)
    dlg.setCancelButton(None)
    dlg.setWindowModality(Qt.WindowModality.ApplicationModal)
    dlg.setMinimumDuration(0)

    thread = QThread(parent)
    worker = CallWorker(fn)
    worker.moveToThread(thread)
    thread.started.connect(worker.run)
    worker.finished.connect(dlg.accept)
    worker.finished.connect(thread.quit)
    thread.start()
    dlg.exec()
    thread.wait()
    return worker
