from __future__ import annotations

from typing import List

from PySide6.QtWidgets import QStyle, QTreeWidgetItem

from explorer_gui.core.logging import get_logger
from explorer_gui.services.files_base import FilesBackend
from explorer_gui.ui.widgets.selectable_tree import IS_DIR_ROLE, PATH_ROLE, SelectableTreeWidget, item_path

log = get_logger("explorer_gui.ui.folder_tree")

_PLACEHOLDER = "__loading__"


class FolderTree(SelectableTreeWidget):
    """Lazy folder tree; children are listed on first expand."""

    def __init__(self, files: FilesBackend, parent=None):
        super().__init__(parent)
        self.files = files
        self.setHeaderHidden(True)
        self.itemExpanded.connect(self._on_expanded)
        self.itemCollapsed.connect(lambda _it: self.sync_items())

    def set_roots(self, roots: List[str]) -> None:
        self.clear()
        for path in roots:
            self.addTopLevelItem(self._make_item(path, path))
        self.sync_items()

    def _make_item(self, name: str, path: str) -> QTreeWidgetItem:
        it = QTreeWidgetItem([name])
        it.setIcon(0, self.style().standardIcon(QStyle.StandardPixmap.SP_DirIcon))
        it.setData(0, PATH_ROLE, path)
        it.setData(0, IS_DIR_ROLE, True)
        # Placeholder child so the expand arrow shows before listing.
        it.addChild(QTreeWidgetItem([_PLACEHOLDER]))
        return it

    def _on_expanded(self, item: QTreeWidgetItem) -> None:
        if item.childCount() == 1 and item.child(0).text(0) == _PLACEHOLDER:
            item.takeChildren()
            try:
                entries = self.files.listdir_entries(item_path(item))
            except OSError as e:
                log.warning("cannot expand %s: %s", item_path(item), e)
                entries = []
            for e in entries:
                if e.is_dir:
                    item.addChild(self._make_item(e.name, e.path))
        self.sync_items()

    def reload(self) -> None:
        """Drop cached listings; expanded folders are listed again on demand."""
        expanded = {item_path(it) for it in self._rows() if it.isExpanded()}
        roots = [item_path(self.topLevelItem(i)) for i in range(self.topLevelItemCount())]
        self.set_roots(roots)
        self.expand_paths(expanded)

    def expand_paths(self, paths) -> None:
        expanded = set(paths)
        # Expanding adds rows, so rescan until nothing is left to open.
        pending = True
        while pending:
            pending = False
            for it in self._rows():
                if item_path(it) in expanded and not it.isExpanded():
                    it.setExpanded(True)
                    pending = True

    def _rows(self) -> List[QTreeWidgetItem]:
        """Visible rows top to bottom (children of collapsed folders excluded)."""
        out: List[QTreeWidgetItem] = []
        stack = [self.topLevelItem(i) for i in reversed(range(self.topLevelItemCount()))]
        while stack:
            it = stack.pop()
            if it.text(0) == _PLACEHOLDER:
                continue
            out.append(it)
            if it.isExpanded():
                stack.extend(it.child(i) for i in reversed(range(it.childCount())))
        return out
