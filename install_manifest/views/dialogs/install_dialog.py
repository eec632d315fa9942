"""
InstallDialog - Confirmation list for files about to be installed.

Shows one checkable row per manifest entry. Unchecking a row excludes the
file; the manifest is kept in sync so callers can read either.
"""

from typing import List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QDialogButtonBox,
)

from ...models.manifest import SelectionManifest

WINDOW_TITLE = "Install Files to NAND"
DESCRIPTION = "Please confirm these are the files you wish to install."
UPDATE_DESCRIPTION = "Installing an Update or DLC will overwrite the previously installed one."


class InstallDialog(QDialog):
    """
    Modal dialog listing resolved install candidates.

    Example:
        manifest = controller.resolve(paths)
        dialog = InstallDialog(manifest)
        if dialog.exec_() == QDialog.Accepted:
            install(dialog.get_files())
    """

    def __init__(self, manifest: SelectionManifest, parent=None):
        super().__init__(parent)
        self.setWindowTitle(WINDOW_TITLE)
        self.setWindowFlags(self.windowFlags() & ~Qt.WindowContextHelpButtonHint)

        self._manifest = manifest

        self._setup_ui()
        self._load_entries()

    def _setup_ui(self):
        vbox_layout = QVBoxLayout(self)
        hbox_layout = QHBoxLayout()

        self.description = QLabel(DESCRIPTION)
        self.update_description = QLabel(UPDATE_DESCRIPTION)

        self.file_list = QListWidget(self)
        self.file_list.itemChanged.connect(self._on_item_changed)

        self.buttons = QDialogButtonBox()
        self.buttons.addButton(QDialogButtonBox.Cancel)
        self.buttons.addButton("Install", QDialogButtonBox.AcceptRole)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        hbox_layout.addWidget(self.buttons)

        vbox_layout.addWidget(self.description)
        vbox_layout.addWidget(self.update_description)
        vbox_layout.addWidget(self.file_list)
        vbox_layout.addLayout(hbox_layout)

        self.setLayout(vbox_layout)
        self.setModal(True)

    def _load_entries(self):
        # Block itemChanged while building rows so the manifest isn't touched
        self.file_list.blockSignals(True)
        for entry in self._manifest:
            self._add_item(entry.source_path, entry.display_label, entry.included)
        self.file_list.blockSignals(False)

        # Leave some room past the longest label
        self.file_list.setMinimumWidth((self.file_list.sizeHintForColumn(0) * 11) // 10)

    def _add_item(self, path: str, label: str, included: bool = True) -> QListWidgetItem:
        item = QListWidgetItem(label, self.file_list)
        item.setData(Qt.UserRole, path)
        item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
        item.setCheckState(Qt.Checked if included else Qt.Unchecked)
        return item

    def _on_item_changed(self, item: QListWidgetItem):
        path = item.data(Qt.UserRole)
        if path in self._manifest:
            self._manifest.set_included(path, item.checkState() == Qt.Checked)

    @property
    def manifest(self) -> SelectionManifest:
        return self._manifest

    def item_for_path(self, path: str) -> Optional[QListWidgetItem]:
        for i in range(self.file_list.count()):
            item = self.file_list.item(i)
            if item.data(Qt.UserRole) == path:
                return item
        return None

    def get_files(self) -> List[str]:
        """Paths of the rows still checked, in list order."""
        files = []
        for i in range(self.file_list.count()):
            item = self.file_list.item(i)
            if item.checkState() == Qt.Checked:
                files.append(item.data(Qt.UserRole))
        return files

    def get_minimum_width(self) -> int:
        return self.file_list.width()
