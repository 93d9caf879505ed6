from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QPoint, Qt, Signal
from PySide6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QListWidget,
    QMainWindow,
    QMenu,
    QPushButton,
    QSplitter,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from explorer_gui.config.models import VIEW_FOLDER, VIEW_SEARCH, ConfigUpdate, ExplorerConfig
from explorer_gui.config.storage import (
    add_quick_access,
    clear_folder_permission,
    load_config,
    remove_quick_access,
    save_config,
    set_folder_permission,
)
from explorer_gui.core.events import RefreshCounter
from explorer_gui.core.logging import get_logger
from explorer_gui.services.archive import ArchiveActions
from explorer_gui.services.explorer_actions import ExplorerActions
from explorer_gui.services.file_clipboard import ClipboardState
from explorer_gui.services.files_base import FilesBackend
from explorer_gui.services.files_local import LocalFilesBackend
from explorer_gui.services.native import NativeCommandError
from explorer_gui.services.native_local import LocalNativeBridge
from explorer_gui.services.permissions import PathRuleSet
from explorer_gui.ui.dialogs import QtPrompter
from explorer_gui.ui.widgets.file_list_panel import FileListPanel
from explorer_gui.ui.widgets.folder_tree import FolderTree
from explorer_gui.ui.widgets.search_panel import SearchPanel
from explorer_gui.ui.widgets.selectable_tree import item_path

log = get_logger("explorer_gui.ui.main")


class MainWindow(QMainWindow):
    _refresh_requested = Signal()

    def __init__(self, config: Optional[ExplorerConfig] = None, files: Optional[FilesBackend] = None, dry_run: bool = False):
        super().__init__()
        self.setWindowTitle("Explorer (dry run)" if dry_run else "Explorer")
        self._shutdown_done = False
        self.dry_run = dry_run
        self.config = config or load_config()

        files = files or LocalFilesBackend()
        rules = PathRuleSet.from_lists(self.config.editable_folders, self.config.readonly_folders)
        self.prompter = QtPrompter(self)
        self.bridge = LocalNativeBridge(files, index_roots=self._index_roots())
        # One clipboard and one refresh counter for the whole window.
        self.clipboard = ClipboardState()
        self.refresh = RefreshCounter()
        self.actions = ExplorerActions(files, rules, self.prompter, self.clipboard, self.refresh)
        # Archives are real zip files on disk; the in-memory backend has none.
        self.archive = None if dry_run else ArchiveActions(self.bridge, files, rules, self.prompter, self.refresh)

        self.quick_access = QListWidget()
        self.quick_access.itemClicked.connect(lambda it: self._navigate(it.text()))
        self.quick_access.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.quick_access.customContextMenuRequested.connect(self._on_quick_access_menu)

        self.tree = FolderTree(files)
        self.tree.selection_changed.connect(self._on_tree_selection)
        self.tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.tree.customContextMenuRequested.connect(self._on_tree_menu)
        self.tree.action_requested.connect(self._on_tree_action)
        self.tree.paths_dropped.connect(lambda paths, target, op: self.panel.drop_into(paths, target, op))
        self.tree.itemExpanded.connect(lambda it: self._remember_expanded(item_path(it), True))
        self.tree.itemCollapsed.connect(lambda it: self._remember_expanded(item_path(it), False))

        self.panel = FileListPanel(self.actions, self.archive)
        self.panel.open_file.connect(self._open_file)
        self.search = SearchPanel(self.actions, self.bridge)
        self.search.open_dir.connect(lambda path: self._show_folder(path))

        self.stack = QStackedWidget()
        self.stack.addWidget(self.panel)
        self.stack.addWidget(self.search)
        self.btn_folder = QPushButton("Folder")
        self.btn_search = QPushButton("Search")
        self._view_buttons = QButtonGroup(self)
        for view, btn in ((VIEW_FOLDER, self.btn_folder), (VIEW_SEARCH, self.btn_search)):
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked=False, v=view: self.set_view(v))
            self._view_buttons.addButton(btn)
        switch = QHBoxLayout()
        switch.addWidget(self.btn_folder)
        switch.addWidget(self.btn_search)
        switch.addStretch(1)

        side = QWidget()
        side_lay = QVBoxLayout(side)
        side_lay.setContentsMargins(0, 0, 0, 0)
        side_lay.addWidget(self.quick_access, 0)
        side_lay.addWidget(self.tree, 1)

        main = QWidget()
        main_lay = QVBoxLayout(main)
        main_lay.setContentsMargins(0, 0, 0, 0)
        main_lay.addLayout(switch)
        main_lay.addWidget(self.stack, 1)

        self.splitter = QSplitter()
        self.splitter.addWidget(side)
        self.splitter.addWidget(main)
        self.splitter.setSizes([self.config.sidebar_width, 800])
        self.setCentralWidget(self.splitter)

        # Bumps may arrive from the transfer worker thread.
        self.refresh.subscribe(lambda _v: self._refresh_requested.emit())
        self._refresh_requested.connect(self.tree.reload)
        self._load_sidebar()
        self._navigate(self.config.default_path)
        self._select_view(self.config.view)

    # ---------- views ----------
    def _select_view(self, view: str) -> None:
        is_search = view == VIEW_SEARCH
        self.stack.setCurrentWidget(self.search if is_search else self.panel)
        (self.btn_search if is_search else self.btn_folder).setChecked(True)

    def set_view(self, view: str) -> None:
        self._select_view(view)
        if view != self.config.view:
            self.config = save_config(ConfigUpdate(view=view))

    def _show_folder(self, path: str) -> None:
        self.set_view(VIEW_FOLDER)
        self._navigate(path)

    def _index_roots(self):
        roots = [self.config.default_path]
        return roots + [p for p in self.config.quick_access if p not in roots]

    # ---------- config-backed state ----------
    def _load_sidebar(self) -> None:
        self.quick_access.clear()
        self.quick_access.addItems(self.config.quick_access)
        self.tree.set_roots([self.config.default_path] + [p for p in self.config.quick_access if p != self.config.default_path])
        self.tree.expand_paths(self.config.expanded_paths)

    def _apply_config(self, cfg: ExplorerConfig) -> None:
        self.config = cfg
        rules = PathRuleSet.from_lists(cfg.editable_folders, cfg.readonly_folders)
        self.actions.set_rules(rules)
        if self.archive is not None:
            self.archive.rules = rules
        self.bridge.set_index_roots(self._index_roots())

    def _remember_expanded(self, path: str, expanded: bool) -> None:
        if (path in self.config.expanded_paths) == expanded:
            return
        paths = [p for p in self.config.expanded_paths if p != path]
        if expanded:
            paths.append(path)
        self.config = save_config(ConfigUpdate(expanded_paths=paths))

    def _navigate(self, path: str, from_tree: bool = False) -> None:
        if not path:
            return
        self.panel.set_dir(path)
        if not from_tree:
            self.tree.select_path(path)

    def _on_tree_selection(self) -> None:
        sel = self.tree.selected_paths()
        if len(sel) == 1 and sel[0] != self.panel.current_dir:
            self._navigate(sel[0], from_tree=True)

    def _open_file(self, path: str) -> None:
        if self.dry_run:
            log.info("dry run: not opening %s", path)
            return
        if path.lower().endswith(".zip"):
            self.panel.browse_archive(path)
            return
        try:
            self.bridge.open_file(path)
        except NativeCommandError as e:
            self.prompter.show_error("Open failed", str(e), e)

    # ---------- tree actions ----------
    def _on_tree_action(self, name: str) -> None:
        sel = self.tree.selected_paths()
        if name == "copy":
            self.actions.copy(sel)
        elif name == "cut":
            self.actions.cut(sel)
        elif name == "paste" and len(sel) == 1:
            self.panel.paste_into(sel[0])
        elif name == "delete":
            self.actions.delete(sel)
        elif name == "open" and sel:
            self._navigate(sel[0], from_tree=True)

    def _on_tree_menu(self, pos: QPoint) -> None:
        path = item_path(self.tree.itemAt(pos))
        if not path:
            return
        menu = QMenu(self)
        act_editable = menu.addAction("Allow editing")
        act_readonly = menu.addAction("Make read-only")
        act_clear = menu.addAction("Clear permission")
        menu.addSeparator()
        act_default = menu.addAction("Set as start folder")
        act_quick = menu.addAction("Add to quick access")
        menu.addSeparator()
        act_paste = menu.addAction("Paste") if not self.clipboard.is_empty else None

        chosen = menu.exec(self.tree.viewport().mapToGlobal(pos))
        if chosen is None:
            return
        if chosen == act_editable:
            self._apply_config(set_folder_permission(path, "editable"))
        elif chosen == act_readonly:
            self._apply_config(set_folder_permission(path, "readonly"))
        elif chosen == act_clear:
            self._apply_config(clear_folder_permission(path))
        elif chosen == act_default:
            self._apply_config(save_config(ConfigUpdate(default_path=path)))
        elif chosen == act_quick:
            self._apply_config(add_quick_access(path))
            self._load_sidebar()
        elif chosen == act_paste:
            self.panel.paste_into(path)

    def _on_quick_access_menu(self, pos: QPoint) -> None:
        item = self.quick_access.itemAt(pos)
        if item is None:
            return
        menu = QMenu(self)
        act_remove = menu.addAction("Remove from quick access")
        if menu.exec(self.quick_access.viewport().mapToGlobal(pos)) == act_remove:
            self._apply_config(remove_quick_access(item.text()))
            self._load_sidebar()

    # ---------- shutdown ----------
    def graceful_shutdown(self) -> None:
        """Idempotent; called from closeEvent and QApplication.aboutToQuit."""
        if self._shutdown_done:
            return
        self._shutdown_done = True
        self.panel.shutdown()
        self.search.shutdown()
        try:
            save_config(ConfigUpdate(sidebar_width=self.splitter.sizes()[0]))
        except OSError:
            log.exception("could not save sidebar width")

    def closeEvent(self, event):  # type: ignore[override]
        self.graceful_shutdown()
        super().closeEvent(event)
