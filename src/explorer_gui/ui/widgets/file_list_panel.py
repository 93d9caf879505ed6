from __future__ import annotations

import datetime
import os
from typing import List, Optional

from PySide6.QtCore import QPoint, Qt, Signal, Slot
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import (
    QInputDialog,
    QLabel,
    QLineEdit,
    QMenu,
    QStyle,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from explorer_gui.core.errors import ArchivePasswordRequiredError, ExplorerError
from explorer_gui.core.logging import get_logger
from explorer_gui.services.archive import ArchiveActions
from explorer_gui.services.explorer_actions import ExplorerActions
from explorer_gui.services.files_base import FileEntry
from explorer_gui.services.listing import SORT_KEYS, SORT_NAME, file_type, format_size, sort_entries
from explorer_gui.services.native import NativeCommandError
from explorer_gui.services.transfer import TransferOutcome, TransferRequest, crashed_outcome
from explorer_gui.ui.widgets.selectable_tree import IS_DIR_ROLE, PATH_ROLE, SelectableTreeWidget, item_path
from explorer_gui.ui.widgets.zip_browser import ZipBrowserDialog
from explorer_gui.ui.workers import run_with_progress

log = get_logger("explorer_gui.ui.file_list")

COLUMNS = ["Name", "Size", "Type", "Modified"]  # same order as SORT_KEYS


def _fmt_mtime(ts: int) -> str:
    if not ts:
        return ""
    try:
        return datetime.datetime.fromtimestamp(int(ts)).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError):
        return ""


class FileListPanel(QWidget):
    open_dir = Signal(str)
    open_file = Signal(str)
    _refresh_requested = Signal()

    def __init__(self, actions: ExplorerActions, archive: Optional[ArchiveActions] = None, parent=None):
        super().__init__(parent)
        self.actions = actions
        self.archive = archive
        self.current_dir = ""
        self._entries: List[FileEntry] = []
        self._sort_key = SORT_NAME
        self._sort_desc = False
        self._busy = False

        self.path = QLineEdit()
        self.path.returnPressed.connect(lambda: self.set_dir(self.path.text().strip()))

        self.view = SelectableTreeWidget(self)
        self.view.setColumnCount(len(COLUMNS))
        self.view.setHeaderLabels(COLUMNS)
        self.view.setRootIsDecorated(False)
        self.view.setAlternatingRowColors(True)
        header = self.view.header()
        header.setStretchLastSection(True)
        header.setSectionsClickable(True)
        header.setSortIndicatorShown(True)
        header.setSortIndicator(0, Qt.SortOrder.AscendingOrder)
        header.sectionClicked.connect(self._on_header_clicked)
        self.view.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.view.customContextMenuRequested.connect(self._on_context_menu)
        self.view.action_requested.connect(self._on_action)
        self.view.paths_dropped.connect(self.drop_into)

        self.status = QLabel("")
        self.view.selection_changed.connect(self._update_status)

        lay = QVBoxLayout(self)
        lay.addWidget(self.path)
        lay.addWidget(self.view)
        lay.addWidget(self.status)

        # Counter bumps can come from the worker thread; the signal hops to ours.
        self._refresh_sub = actions.refresh.subscribe(lambda _v: self._refresh_requested.emit())
        self._refresh_requested.connect(self.refresh)

    # ---------- listing ----------
    def set_dir(self, path: str) -> None:
        self.current_dir = path
        self.view.drop_fallback_dir = path
        self.path.setText(path)
        self.refresh()

    def _icon_for(self, entry: FileEntry) -> QIcon:
        st = self.style()
        if entry.is_dir:
            return st.standardIcon(QStyle.StandardPixmap.SP_DirIcon)
        if entry.is_link:
            return st.standardIcon(QStyle.StandardPixmap.SP_FileLinkIcon)
        return st.standardIcon(QStyle.StandardPixmap.SP_FileIcon)

    def refresh(self) -> None:
        if not self.current_dir:
            return
        try:
            self._entries = self.actions.files.listdir_entries(self.current_dir)
        except OSError as e:
            log.warning("listing %s failed: %s", self.current_dir, e)
            self.actions.prompter.show_error("Folder unreadable", f"Could not read '{self.current_dir}'.\n{e}", e)
            self._entries = []
        self._render()

    def _render(self) -> None:
        self.view.clear()
        for entry in sort_entries(self._entries, self._sort_key, self._sort_desc):
            it = QTreeWidgetItem()
            it.setText(0, entry.name)
            it.setIcon(0, self._icon_for(entry))
            it.setText(1, "" if entry.is_dir else format_size(entry.size))
            it.setText(2, file_type(entry.name, entry.is_dir))
            it.setText(3, _fmt_mtime(entry.mtime))
            it.setData(0, PATH_ROLE, entry.path)
            it.setData(0, IS_DIR_ROLE, bool(entry.is_dir))
            self.view.addTopLevelItem(it)
        for col in range(len(COLUMNS)):
            self.view.resizeColumnToContents(col)
        # Selection follows the items, not the rows.
        self.view.sync_items()

    @Slot(int)
    def _on_header_clicked(self, column: int) -> None:
        key = SORT_KEYS[column]
        self._sort_desc = (not self._sort_desc) if key == self._sort_key else False
        self._sort_key = key
        order = Qt.SortOrder.DescendingOrder if self._sort_desc else Qt.SortOrder.AscendingOrder
        self.view.header().setSortIndicator(column, order)
        self._render()

    def _update_status(self) -> None:
        n = len(self.view.selected_paths())
        self.status.setText(f"{n} selected" if n else "")

    def _open_item(self, item: Optional[QTreeWidgetItem]) -> None:
        path = item_path(item)
        if not path:
            return
        if item.data(0, IS_DIR_ROLE):
            self.set_dir(path)
            self.open_dir.emit(path)
        else:
            self.open_file.emit(path)

    # ---------- actions ----------
    @Slot(str)
    def _on_action(self, name: str) -> None:
        sel = self.view.selected_paths()
        if name == "copy":
            self.actions.copy(sel)
        elif name == "cut":
            self.actions.cut(sel)
        elif name == "paste":
            self.paste_into(self.current_dir)
        elif name == "delete":
            self.actions.delete(sel)
        elif name == "rename" and len(sel) == 1:
            self.rename_item(sel[0])
        elif name == "open" and len(sel) == 1:
            rows = [self.view.topLevelItem(i) for i in range(self.view.topLevelItemCount())]
            self._open_item(next((it for it in rows if item_path(it) == sel[0]), None))

    def rename_item(self, path: str) -> None:
        base = self.actions.files.basename(path)
        new_name, ok = QInputDialog.getText(self, "Rename", "New name:", text=base)
        if not ok:
            return
        new_path = self.actions.rename(path, new_name)
        if new_path:
            self.view.select_path(new_path)

    def paste_into(self, target_dir: str) -> None:
        if not target_dir or self._busy:
            return
        request = self.actions.prepare_paste(target_dir)
        if request is None:
            return
        self.actions.finish_transfer(self._run_transfer(request), from_clipboard=True)

    def drop_into(self, paths: list, target_dir: str, operation: str) -> None:
        if not paths or self._busy:
            return
        request = self.actions.prepare_drop(paths, target_dir, operation)
        if request is None:
            return
        self.actions.finish_transfer(self._run_transfer(request))

    def _run_transfer(self, request: TransferRequest) -> TransferOutcome:
        label = f"{request.operation.value.capitalize()} {len(request.sources)} item(s)..."
        self._busy = True
        try:
            # Sources are drained in order inside execute(); no cancellation.
            worker = run_with_progress(self, label, lambda: self.actions.transfers.execute(request))
        finally:
            self._busy = False
        if worker.error is not None or worker.result is None:
            return crashed_outcome(request, worker.error or RuntimeError("transfer did not finish"))
        return worker.result

    # ---------- archives ----------
    def extract_archive(
        self,
        zip_path: str,
        files: Optional[List[str]] = None,
        target_dir: Optional[str] = None,
        password: Optional[str] = None,
    ) -> bool:
        if self.archive is None:
            return False
        while True:
            try:
                return self.archive.extract(zip_path, files=files, target_dir=target_dir or self.current_dir, password=password)
            except ArchivePasswordRequiredError:
                password, ok = QInputDialog.getText(
                    self, "Password required", f"Password for {os.path.basename(zip_path)}:", QLineEdit.EchoMode.Password
                )
                if not ok:
                    return False
            except (ExplorerError, NativeCommandError, OSError) as e:
                self.actions.prompter.show_error("Extract failed", str(e), e)
                return False

    def browse_archive(self, zip_path: str) -> None:
        if self.archive is None:
            return
        try:
            entries = self.archive.list_contents(zip_path)
        except (NativeCommandError, OSError) as e:
            self.actions.prompter.show_error("Cannot open archive", str(e), e)
            return
        dlg = ZipBrowserDialog(
            zip_path,
            entries,
            self.current_dir,
            lambda names, target, pw: self.extract_archive(zip_path, names, target, pw or None),
            self,
        )
        dlg.exec()

    def compress_selected(self) -> None:
        sel = self.view.selected_paths()
        if self.archive is None or not sel:
            return
        name, ok = QInputDialog.getText(self, "Compress", "Archive name:", text="archive.zip")
        if not ok or not name.strip():
            return
        password, ok = QInputDialog.getText(
            self, "Compress", "Password (leave empty for none):", QLineEdit.EchoMode.Password
        )
        if not ok:
            return
        try:
            self.archive.compress(sel, self.current_dir, name.strip(), password=password or None)
        except (ExplorerError, NativeCommandError, OSError) as e:
            self.actions.prompter.show_error("Compress failed", str(e), e)

    # ---------- context menu ----------
    def _on_context_menu(self, pos: QPoint) -> None:
        item = self.view.itemAt(pos)
        clicked_path = item_path(item)
        clicked_is_dir = bool(item.data(0, IS_DIR_ROLE)) if item is not None else False
        sel = self.view.selected_paths()
        is_zip = self.archive is not None and clicked_path.lower().endswith(".zip")

        menu = QMenu(self)
        act_open = menu.addAction("Open") if clicked_path else None
        act_copy = menu.addAction("Copy") if sel else None
        act_cut = menu.addAction("Cut") if sel else None
        act_paste = act_paste_into = None
        if not self.actions.clipboard.is_empty:
            act_paste = menu.addAction("Paste")
            if clicked_path and clicked_is_dir:
                act_paste_into = menu.addAction("Paste into folder")
        act_rename = menu.addAction("Rename") if len(sel) == 1 else None
        act_browse = menu.addAction("Browse archive...") if is_zip else None
        act_extract = menu.addAction("Extract here") if is_zip else None
        act_compress = menu.addAction("Compress...") if self.archive is not None and sel else None
        menu.addSeparator()
        act_delete = menu.addAction("Delete") if sel else None
        act_refresh = menu.addAction("Refresh")

        chosen = menu.exec(self.view.viewport().mapToGlobal(pos))
        if chosen is None:
            return
        if chosen == act_open:
            self._open_item(item)
        elif chosen == act_copy:
            self.actions.copy(sel)
        elif chosen == act_cut:
            self.actions.cut(sel)
        elif chosen == act_paste:
            self.paste_into(self.current_dir)
        elif chosen == act_paste_into:
            self.paste_into(clicked_path)
        elif chosen == act_rename:
            self.rename_item(sel[0])
        elif chosen == act_browse:
            self.browse_archive(clicked_path)
        elif chosen == act_extract:
            self.extract_archive(clicked_path)
        elif chosen == act_compress:
            self.compress_selected()
        elif chosen == act_delete:
            self.actions.delete(sel)
        elif chosen == act_refresh:
            self.refresh()

    def shutdown(self) -> None:
        self._refresh_sub.dispose()
