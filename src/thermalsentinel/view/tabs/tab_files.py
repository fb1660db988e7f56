"""
Files Tab
Catalogue of captures and logs stored on the backend, with a name filter.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import (
    QAbstractItemView, QHBoxLayout, QHeaderView, QLabel, QLineEdit, QPushButton, QTableWidget,
    QTableWidgetItem, QVBoxLayout, QWidget
)

from thermalsentinel.controller.workers import WorkerPool
from thermalsentinel.model.api import ApiClient
from thermalsentinel.model.records import DataFile, filter_files

logger = logging.getLogger(__name__)

COLUMNS = ("File name", "Type", "Date", "Size")


class FilesPanel(QWidget):
    def __init__(self, client: ApiClient, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.client = client
        self.workers = WorkerPool(self)
        self.files: list[DataFile] = []

        layout = QVBoxLayout(self)

        toolbar = QHBoxLayout()
        self.edit_search = QLineEdit()
        self.edit_search.setPlaceholderText("Search file...")
        self.edit_search.textChanged.connect(self._populate)
        toolbar.addWidget(self.edit_search)
        self.btn_refresh = QPushButton("Refresh")
        self.btn_refresh.clicked.connect(self.load)
        toolbar.addWidget(self.btn_refresh)
        toolbar.addStretch()
        self.lbl_total = QLabel("Total: 0 files")
        toolbar.addWidget(self.lbl_total)
        layout.addLayout(toolbar)

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        layout.addWidget(self.table)

        self.lbl_status = QLabel("")
        layout.addWidget(self.lbl_status)

    def load(self) -> None:
        self.btn_refresh.setEnabled(False)
        self.lbl_status.setText("Loading catalogue...")
        self.workers.submit(self.client.list_files, self._on_loaded, self._on_failed, tag="files")

    def _on_loaded(self, _tag, files: list[DataFile]) -> None:
        self.btn_refresh.setEnabled(True)
        self.files = files
        self.lbl_total.setText(f"Total: {len(files)} files")
        self._populate()

    def _on_failed(self, _tag, message: str) -> None:
        self.btn_refresh.setEnabled(True)
        self.lbl_status.setText("The file catalogue could not be loaded.")
        logger.error(f"Listing files failed: {message}")

    def _populate(self) -> None:
        shown = filter_files(self.files, self.edit_search.text())
        self.table.setRowCount(len(shown))
        for row, entry in enumerate(shown):
            for col, text in enumerate((entry.name, entry.type, entry.date, entry.size_label)):
                self.table.setItem(row, col, QTableWidgetItem(text))
        self.lbl_status.setText("" if shown else "No files found.")

    def shutdown(self) -> None:
        self.workers.wait_all()
