from __future__ import annotations

from typing import Dict, List, Optional

from PySide6.QtCore import QMimeData, QPoint, QRect, Qt, QTimer, QUrl, Signal
from PySide6.QtGui import QDrag, QKeyEvent, QMouseEvent
from PySide6.QtWidgets import QAbstractItemView, QApplication, QRubberBand, QTreeWidget, QTreeWidgetItem

from explorer_gui.ui.selection_model import Rect, SelectionModel

PATH_ROLE = Qt.ItemDataRole.UserRole
IS_DIR_ROLE = Qt.ItemDataRole.UserRole + 1


def item_path(item: Optional[QTreeWidgetItem]) -> str:
    if item is None:
        return ""
    return str(item.data(0, PATH_ROLE) or "")


class SelectableTreeWidget(QTreeWidget):
    """QTreeWidget whose selection is driven by a SelectionModel.

    Qt's own selection handling is switched off; mouse and keyboard
    gestures go to the model and the model's result is mirrored onto the
    items. Subclasses define the visible row order in _rows().
    """

    selection_changed = Signal()
    action_requested = Signal(str)  # "copy" | "cut" | "paste" | "delete" | "rename" | "open"
    paths_dropped = Signal(list, str, str)  # sources, target dir, "copy" | "move"

    def __init__(self, parent=None):
        super().__init__(parent)
        self.selection = SelectionModel()
        self.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self.setVerticalScrollMode(QAbstractItemView.ScrollMode.ScrollPerPixel)
        self.setHorizontalScrollMode(QAbstractItemView.ScrollMode.ScrollPerPixel)
        self._band = QRubberBand(QRubberBand.Shape.Rectangle, self.viewport())
        self.setAcceptDrops(True)
        self.viewport().setAcceptDrops(True)
        # Target for drops that do not land on a folder row ("" = refuse).
        self.drop_fallback_dir = ""
        self._press_pos: Optional[QPoint] = None
        self._pending_click: Optional[int] = None

    # ---------- row order ----------
    def _rows(self) -> List[QTreeWidgetItem]:
        return [self.topLevelItem(i) for i in range(self.topLevelItemCount())]

    def sync_items(self) -> None:
        """Push the current row order into the model (after refresh/sort/expand)."""
        self.selection.set_items([item_path(it) for it in self._rows()])
        self._apply_selection()

    def selected_paths(self) -> List[str]:
        return [str(p) for p in self.selection.selected_items()]

    def select_path(self, path: str) -> None:
        items = self.selection.items
        if path in items:
            self.selection.click(items.index(path))
            self._apply_selection()

    def _apply_selection(self) -> None:
        for it in self._rows():
            it.setSelected(self.selection.is_selected(item_path(it)))
        focus = self.selection.focus
        rows = self._rows()
        if focus is not None and 0 <= focus < len(rows) and not self.selection.marquee_active:
            self.scrollToItem(rows[focus])
        self.selection_changed.emit()

    def _index_at(self, pos: QPoint) -> Optional[int]:
        item = self.itemAt(pos)
        if item is None:
            return None
        path = item_path(item)
        items = self.selection.items
        return items.index(path) if path in items else None

    def _scroll_offset(self):
        return self.horizontalScrollBar().value(), self.verticalScrollBar().value()

    # ---------- mouse ----------
    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        self.setFocus()
        pos = event.position().toPoint()
        idx = self._index_at(pos)
        mods = event.modifiers()
        if event.button() == Qt.MouseButton.RightButton:
            if idx is not None:
                self.selection.context_click(idx)
                self._apply_selection()
            return
        if event.button() != Qt.MouseButton.LeftButton:
            return super().mousePressEvent(event)

        item = self.itemAt(pos)
        if item is not None and item.childCount() and pos.x() < self.visualItemRect(item).x():
            # branch arrow
            item.setExpanded(not item.isExpanded())
            return

        if idx is None:
            sx, sy = self._scroll_offset()
            self.selection.begin_marquee(pos.x(), pos.y(), sx, sy)
            self._band.setGeometry(QRect(pos, pos))
            self._band.show()
        elif mods & Qt.KeyboardModifier.ShiftModifier:
            self.selection.shift_click(idx)
        elif mods & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier):
            self.selection.ctrl_click(idx)
        else:
            self._press_pos = pos
            if self.selection.is_selected(self.selection.items[idx]):
                # Might be the start of a drag of the whole selection;
                # collapse on release instead.
                self._pending_click = idx
                return
            self.selection.click(idx)
        self._apply_selection()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if not self.selection.marquee_active:
            if self._press_pos is not None and event.buttons() & Qt.MouseButton.LeftButton:
                moved = (event.position().toPoint() - self._press_pos).manhattanLength()
                if moved >= QApplication.startDragDistance():
                    self._press_pos = None
                    self._pending_click = None
                    self._start_drag()
            return
        pos = event.position().toPoint()
        sx, sy = self._scroll_offset()
        boxes: Dict[str, Rect] = {}
        for it in self._rows():
            r = self.visualItemRect(it)
            if r.isValid():
                boxes[item_path(it)] = Rect(r.x() + sx, r.y() + sy, r.width(), r.height())
        rect = self.selection.update_marquee(pos.x(), pos.y(), boxes, sx, sy)
        if rect is not None:
            self._band.setGeometry(QRect(int(rect.x - sx), int(rect.y - sy), int(rect.w), int(rect.h)))
        self._apply_selection()

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        # The press that preceded this already selected the row.
        if event.button() == Qt.MouseButton.LeftButton and self._index_at(event.position().toPoint()) is not None:
            self.action_requested.emit("open")

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        self._press_pos = None
        if self.selection.marquee_active:
            self.selection.end_marquee()
            self._band.hide()
            return
        if self._pending_click is not None:
            idx, self._pending_click = self._pending_click, None
            if idx < len(self.selection.items):
                self.selection.click(idx)
                self._apply_selection()
            return
        super().mouseReleaseEvent(event)

    # ---------- drag & drop ----------
    def _start_drag(self) -> None:
        paths = self.selected_paths()
        if not paths:
            return
        mime = QMimeData()
        mime.setUrls([QUrl.fromLocalFile(p) for p in paths])
        drag = QDrag(self)
        drag.setMimeData(mime)
        drag.exec(Qt.DropAction.CopyAction | Qt.DropAction.MoveAction)

    def _drop_target(self, pos: QPoint) -> str:
        """Folder row under `pos`, else the fallback dir."""
        item = self.itemAt(pos)
        if item is not None and item.data(0, IS_DIR_ROLE):
            return item_path(item)
        return self.drop_fallback_dir

    @staticmethod
    def _local_paths(event) -> List[str]:
        md = event.mimeData()
        if not md.hasUrls():
            return []
        return [u.toLocalFile() for u in md.urls() if u.isLocalFile()]

    def dragEnterEvent(self, event):  # type: ignore[override]
        if self._local_paths(event):
            event.acceptProposedAction()
            return
        event.ignore()

    def dragMoveEvent(self, event):  # type: ignore[override]
        if self._local_paths(event) and self._drop_target(event.position().toPoint()):
            event.acceptProposedAction()
            return
        event.ignore()

    def dropEvent(self, event):  # type: ignore[override]
        paths = self._local_paths(event)
        target = self._drop_target(event.position().toPoint())
        if not paths or not target:
            event.ignore()
            return
        # Ctrl => copy, else move.
        is_copy = bool(event.modifiers() & Qt.KeyboardModifier.ControlModifier)
        # Report CopyAction so the drag source never deletes anything itself.
        event.setDropAction(Qt.DropAction.CopyAction)
        event.accept()
        op = "copy" if is_copy else "move"
        # Run after the drag loop has returned; the transfer opens a modal dialog.
        QTimer.singleShot(0, lambda: self.paths_dropped.emit(paths, target, op))

    # ---------- keyboard ----------
    def keyPressEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        key = event.key()
        mods = event.modifiers()
        shift = bool(mods & Qt.KeyboardModifier.ShiftModifier)
        ctrl = bool(mods & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier))

        if key == Qt.Key.Key_Up:
            self.selection.key_up(shift=shift)
        elif key == Qt.Key.Key_Down:
            self.selection.key_down(shift=shift)
        elif ctrl and key == Qt.Key.Key_A:
            self.selection.select_all()
        elif ctrl and key == Qt.Key.Key_C:
            self.action_requested.emit("copy")
            return
        elif ctrl and key == Qt.Key.Key_X:
            self.action_requested.emit("cut")
            return
        elif ctrl and key == Qt.Key.Key_V:
            self.action_requested.emit("paste")
            return
        elif key == Qt.Key.Key_F2:
            self.action_requested.emit("rename")
            return
        elif key == Qt.Key.Key_Delete:
            self.action_requested.emit("delete")
            return
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.action_requested.emit("open")
            return
        else:
            return super().keyPressEvent(event)
        self._apply_selection()
