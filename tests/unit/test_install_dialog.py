"""
Unit tests for InstallDialog.
"""

import pytest
from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QDialogButtonBox

from install_manifest.models.manifest import ManifestEntry, SelectionManifest
from install_manifest.views.dialogs.install_dialog import InstallDialog


@pytest.fixture
def manifest():
    manifest = SelectionManifest()
    manifest.add(ManifestEntry("/dumps/a.nsp", "Game (Update) (1.1.0)"))
    manifest.add(ManifestEntry("/dumps/b.xci", "b.xci (DLC) (v0)"))
    manifest.add(ManifestEntry("/dumps/c.nca", "c.nca"))
    return manifest


class TestInstallDialog:
    """Tests for the install confirmation dialog."""

    def test_window_text(self, qapp, manifest):
        dialog = InstallDialog(manifest)

        assert dialog.windowTitle() == "Install Files to NAND"
        assert dialog.description.text() == "Please confirm these are the files you wish to install."
        assert "overwrite the previously installed one" in dialog.update_description.text()

    def test_rows_match_manifest(self, qapp, manifest):
        dialog = InstallDialog(manifest)

        labels = [dialog.file_list.item(i).text() for i in range(dialog.file_list.count())]
        assert labels == ["Game (Update) (1.1.0)", "b.xci (DLC) (v0)", "c.nca"]
        assert dialog.item_for_path("/dumps/b.xci").data(Qt.UserRole) == "/dumps/b.xci"

    def test_rows_checked_by_default(self, qapp, manifest):
        dialog = InstallDialog(manifest)
        assert dialog.get_files() == ["/dumps/a.nsp", "/dumps/b.xci", "/dumps/c.nca"]

    def test_unchecking_updates_manifest(self, qapp, manifest):
        dialog = InstallDialog(manifest)

        dialog.item_for_path("/dumps/b.xci").setCheckState(Qt.Unchecked)

        assert dialog.get_files() == ["/dumps/a.nsp", "/dumps/c.nca"]
        assert manifest.selected_paths() == ["/dumps/a.nsp", "/dumps/c.nca"]

        dialog.item_for_path("/dumps/b.xci").setCheckState(Qt.Checked)
        assert manifest.get("/dumps/b.xci").included is True

    def test_excluded_entries_start_unchecked(self, qapp, manifest):
        manifest.set_included("/dumps/a.nsp", False)
        dialog = InstallDialog(manifest)

        assert dialog.item_for_path("/dumps/a.nsp").checkState() == Qt.Unchecked
        assert dialog.get_files() == ["/dumps/b.xci", "/dumps/c.nca"]

    def test_empty_manifest(self, qapp):
        dialog = InstallDialog(SelectionManifest())
        assert dialog.file_list.count() == 0
        assert dialog.get_files() == []

    def test_buttons(self, qapp, manifest):
        dialog = InstallDialog(manifest)
        texts = sorted(b.text().replace("&", "") for b in dialog.buttons.buttons())

        assert "Install" in texts
        assert dialog.buttons.buttonRole(
            next(b for b in dialog.buttons.buttons() if b.text() == "Install")
        ) == QDialogButtonBox.AcceptRole

    def test_minimum_width(self, qapp, manifest):
        dialog = InstallDialog(manifest)
        assert dialog.get_minimum_width() == dialog.file_list.width()
