from __future__ import annotations

import os
from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
)

from explorer_gui.services.listing import format_size
from explorer_gui.services.native import ZipEntry

# (entries or None for all, target dir, password or "")
ExtractCallback = Callable[[Optional[List[str]], str, str], bool]


class ZipBrowserDialog(QDialog):
    """Lists the entries of one archive and extracts all or a selection."""

    def __init__(
        self,
        zip_path: str,
        entries: Sequence[ZipEntry],
        target_dir: str,
        on_extract: ExtractCallback,
        parent=None,
    ):
        super().__init__(parent)
        self.zip_path = zip_path
        self._on_extract = on_extract
        self.setWindowTitle(os.path.basename(zip_path))
        self.setMinimumSize(560, 420)

        self.view = QTreeWidget(self)
        self.view.setColumnCount(3)
        self.view.setHeaderLabels(["Name", "Size", "Encrypted"])
        self.view.setRootIsDecorated(False)
        self.view.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        for e in entries:
            it = QTreeWidgetItem([e.name, "" if e.is_dir else format_size(e.size), "yes" if e.is_encrypted else ""])
            it.setData(0, Qt.ItemDataRole.UserRole, e.name)
            self.view.addTopLevelItem(it)
        self.view.resizeColumnToContents(0)

        self.target = QLineEdit(target_dir, self)
        self.password = QLineEdit(self)
        self.password.setEchoMode(QLineEdit.EchoMode.Password)
        self.password.setPlaceholderText("only for encrypted archives")

        form = QFormLayout()
        form.addRow("Extract to:", self.target)
        form.addRow("Password:", self.password)

        btn_selected = QPushButton("Extract selected", self)
        btn_selected.clicked.connect(self._extract_selected)
        btn_all = QPushButton("Extract all", self)
        btn_all.clicked.connect(lambda: self._extract(None))
        btn_close = QPushButton("Close", self)
        btn_close.clicked.connect(self.reject)

        bottom = QHBoxLayout()
        bottom.addStretch(1)
        bottom.addWidget(btn_selected)
        bottom.addWidget(btn_all)
        bottom.addWidget(btn_close)

        layout = QVBoxLayout(self)
        layout.addWidget(self.view, 1)
        layout.addLayout(form)
        layout.addLayout(bottom)

    def selected_entries(self) -> List[str]:
        return [str(it.data(0, Qt.ItemDataRole.UserRole)) for it in self.view.selectedItems()]

    def _extract_selected(self) -> None:
        names = self.selected_entries()
        if names:
            self._extract(names)

    def _extract(self, names: Optional[List[str]]) -> None:
        target = self.target.text().strip()
        if target and self._on_extract(names, target, self.password.text()):
            self.accept()
