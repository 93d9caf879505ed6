from __future__ import annotations

from typing import List

from PySide6.QtCore import QPoint, Qt, Signal, Slot
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMenu,
    QPushButton,
    QStyle,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from explorer_gui.core.events import FILE_CHANGES, INDEX_READY
from explorer_gui.core.logging import get_logger
from explorer_gui.services.explorer_actions import ExplorerActions
from explorer_gui.services.file_index import item_name, merge_changes
from explorer_gui.services.native import NativeBridge, NativeCommandError
from explorer_gui.services.permissions import parent_path
from explorer_gui.ui.widgets.selectable_tree import IS_DIR_ROLE, PATH_ROLE, SelectableTreeWidget, item_path
from explorer_gui.ui.workers import run_with_progress

log = get_logger("explorer_gui.ui.search")

RESULT_LIMIT = 500


class SearchPanel(QWidget):
    """Name search over the bridge's index, kept live by file-change events."""

    open_dir = Signal(str)
    # Channel callbacks may fire on a worker thread; these hop to the UI thread.
    _changes_received = Signal(list)
    _index_ready_received = Signal(bool)
    _refresh_requested = Signal()

    def __init__(self, actions: ExplorerActions, bridge: NativeBridge, parent=None):
        super().__init__(parent)
        self.actions = actions
        self.bridge = bridge
        self._results: List[str] = []

        self.query = QLineEdit()
        self.query.setPlaceholderText("Search file names...")
        self.query.returnPressed.connect(self.run_search)
        btn_search = QPushButton("Search")
        btn_search.clicked.connect(self.run_search)
        btn_index = QPushButton("Build index")
        btn_index.clicked.connect(self.build_index)

        top = QHBoxLayout()
        top.addWidget(self.query, 1)
        top.addWidget(btn_search)
        top.addWidget(btn_index)

        self.view = SelectableTreeWidget(self)
        self.view.setColumnCount(2)
        self.view.setHeaderLabels(["Name", "Folder"])
        self.view.setRootIsDecorated(False)
        self.view.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.view.customContextMenuRequested.connect(self._on_context_menu)
        self.view.action_requested.connect(self._on_action)

        self.status = QLabel("Index not built")

        lay = QVBoxLayout(self)
        lay.addLayout(top)
        lay.addWidget(self.view, 1)
        lay.addWidget(self.status)

        self._subs = [
            bridge.channels[FILE_CHANGES].subscribe(self._changes_received.emit),
            bridge.channels[INDEX_READY].subscribe(self._index_ready_received.emit),
            actions.refresh.subscribe(lambda _v: self._refresh_requested.emit()),
        ]
        self._changes_received.connect(self._on_changes)
        self._index_ready_received.connect(self._on_index_ready)
        self._refresh_requested.connect(self._rerun)

    # ---------- index ----------
    def build_index(self) -> None:
        self.status.setText("Indexing...")
        worker = run_with_progress(self, "Building search index...", self.bridge.build_mft_index)
        if worker.error is not None:
            self.status.setText("Indexing failed")
            self.actions.prompter.show_error("Indexing failed", str(worker.error), worker.error)

    @Slot(bool)
    def _on_index_ready(self, ready: bool) -> None:
        self.status.setText("Index ready" if ready else "Index not built")
        if ready:
            self._rerun()

    # ---------- results ----------
    def run_search(self) -> None:
        query = self.query.text().strip()
        if not query:
            self._show([])
            return
        try:
            hits = self.bridge.search_mft(query)
        except NativeCommandError as e:
            log.info("search %r: %s", query, e)
            self.status.setText(str(e))
            return
        self._show(hits)

    def _rerun(self) -> None:
        if self.query.text().strip():
            self.run_search()

    @Slot(list)
    def _on_changes(self, changes: list) -> None:
        query = self.query.text().strip()
        if query:
            self._show(merge_changes(self._results, changes, query))

    def _show(self, paths: List[str]) -> None:
        self._results = list(paths)[:RESULT_LIMIT]
        self.view.clear()
        st = self.style()
        for p in self._results:
            is_dir = self.actions.files.is_dir(p)
            it = QTreeWidgetItem([item_name(p), parent_path(p)])
            pixmap = QStyle.StandardPixmap.SP_DirIcon if is_dir else QStyle.StandardPixmap.SP_FileIcon
            it.setIcon(0, st.standardIcon(pixmap))
            it.setData(0, PATH_ROLE, p)
            it.setData(0, IS_DIR_ROLE, is_dir)
            self.view.addTopLevelItem(it)
        self.view.resizeColumnToContents(0)
        self.view.sync_items()
        more = len(paths) > RESULT_LIMIT
        self.status.setText(f"{len(self._results)} result(s)" + (f", first {RESULT_LIMIT} shown" if more else ""))

    # ---------- actions ----------
    def _open(self, path: str) -> None:
        if not path:
            return
        is_dir = self.actions.files.is_dir(path)
        self.open_dir.emit(path if is_dir else parent_path(path))

    @Slot(str)
    def _on_action(self, name: str) -> None:
        sel = self.view.selected_paths()
        if name == "copy":
            self.actions.copy(sel)
        elif name == "cut":
            self.actions.cut(sel)
        elif name == "delete":
            self.actions.delete(sel)
        elif name == "open" and len(sel) == 1:
            self._open(sel[0])

    def _on_context_menu(self, pos: QPoint) -> None:
        clicked = item_path(self.view.itemAt(pos))
        sel = self.view.selected_paths()
        if not sel:
            return
        menu = QMenu(self)
        act_open = menu.addAction("Open containing folder") if clicked else None
        act_copy = menu.addAction("Copy")
        act_cut = menu.addAction("Cut")
        menu.addSeparator()
        act_delete = menu.addAction("Delete")

        chosen = menu.exec(self.view.viewport().mapToGlobal(pos))
        if chosen is None:
            return
        if chosen == act_open:
            self._open(clicked)
        elif chosen == act_copy:
            self.actions.copy(sel)
        elif chosen == act_cut:
            self.actions.cut(sel)
        elif chosen == act_delete:
            self.actions.delete(sel)

    def shutdown(self) -> None:
        for sub in self._subs:
            sub.dispose()
        self._subs = []
