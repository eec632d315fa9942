"""
Unit tests for InstallController.
"""

import logging

import pytest
from builders import (
    HEADER_KEY,
    SECTION_KEY,
    build_cnmt,
    build_control_nca,
    build_meta_nca,
    build_nacp,
    build_nca,
    build_nested_romfs,
    build_nsp,
    build_pfs0,
    build_secure_xci,
)
from install_manifest.controllers.install_controller import (
    InstallController,
    MalformedMetadata,
    MissingRequiredContentUnit,
    OpenFailure,
    UnsupportedContainerKind,
    UnsupportedTitleType,
)
from install_manifest.formats.cnmt import ContentMetaType
from install_manifest.formats.content_archive import FsType
from install_manifest.formats.nacp import Language
from install_manifest.models.container import ContainerKind, ContentType
from install_manifest.models.manifest import ManifestEntry
from install_manifest.services.filesystem_service import FilesystemService


class NamedPackageController(InstallController):
    """Controller whose packages all report the name "Foo"."""

    def open_package(self, file, kind):
        package = super().open_package(file, kind)
        package.name = "Foo"
        return package


def _reasons(controller):
    return {d.path: type(d.reason) for d in controller.dropped}


class TestResolvePackages:
    """Tests for resolving package files into labeled entries."""

    def test_update_without_control(self, mock_filesystem_service):
        """Package name and numeric version are used without control metadata."""
        mock_filesystem_service.add_file("a.nsp", build_nsp(ContentMetaType.PATCH, 3))
        controller = NamedPackageController(mock_filesystem_service)

        manifest = controller.resolve(["a.nsp"])

        assert manifest.entries() == [ManifestEntry("a.nsp", "Foo (Update) (v3)", True)]

    def test_package_name_is_file_name(self, mock_filesystem_service):
        mock_filesystem_service.add_file("/dumps/a.nsp", build_nsp(ContentMetaType.PATCH, 3))
        manifest = InstallController(mock_filesystem_service).resolve(["/dumps/a.nsp"])

        assert manifest.get("/dumps/a.nsp").display_label == "a.nsp (Update) (v3)"

    def test_update_with_control(self, mock_filesystem_service):
        nsp = build_nsp(ContentMetaType.PATCH, 65536, application_name="Super Game",
                        version_string="1.2.0")
        mock_filesystem_service.add_file("game.nsp", nsp)

        manifest = InstallController(mock_filesystem_service).resolve(["game.nsp"])

        assert manifest.get("game.nsp").display_label == "Super Game (Update) (1.2.0)"

    def test_dlc_in_card_image(self, mock_filesystem_service):
        xci = build_secure_xci([
            ("aa.cnmt.nca", build_meta_nca(ContentMetaType.ADD_ON_CONTENT, 0)),
        ])
        mock_filesystem_service.add_file("cart.xci", xci)

        manifest = InstallController(mock_filesystem_service).resolve(["cart.xci"])

        assert manifest.get("cart.xci").display_label == "cart.xci (DLC) (v0)"

    def test_control_without_romfs_falls_back(self, mock_filesystem_service):
        """A Control archive with nothing readable is not an error."""
        nsp = build_pfs0([
            ("meta.cnmt.nca", build_meta_nca(ContentMetaType.PATCH, 2)),
            ("control.nca", build_nca(ContentType.CONTROL)),
        ])
        mock_filesystem_service.add_file("u.nsp", nsp)

        manifest = InstallController(mock_filesystem_service).resolve(["u.nsp"])

        assert manifest.get("u.nsp").display_label == "u.nsp (Update) (v2)"

    def test_control_with_capitalized_nacp(self, mock_filesystem_service):
        nsp = build_pfs0([
            ("meta.cnmt.nca", build_meta_nca(ContentMetaType.PATCH, 2)),
            ("control.nca", build_control_nca(build_nacp("Game", "3.0"), "Control.nacp")),
        ])
        mock_filesystem_service.add_file("u.nsp", nsp)

        manifest = InstallController(mock_filesystem_service).resolve(["u.nsp"])

        assert manifest.get("u.nsp").display_label == "Game (Update) (3.0)"

    def test_preferred_language(self, mock_filesystem_service):
        nacp = build_nacp(names={Language.AmericanEnglish: "Game", Language.French: "Jeu"},
                          version_string="1.0")
        nsp = build_pfs0([
            ("meta.cnmt.nca", build_meta_nca(ContentMetaType.PATCH, 1)),
            ("control.nca", build_control_nca(nacp)),
        ])
        mock_filesystem_service.add_file("u.nsp", nsp)

        controller = InstallController(mock_filesystem_service, language=Language.French)

        assert controller.resolve(["u.nsp"]).get("u.nsp").display_label == "Jeu (Update) (1.0)"

    def test_later_meta_archive_wins(self, mock_filesystem_service):
        """Archives of the same type collapse to the last one."""
        nsp = build_pfs0([
            ("old.cnmt.nca", build_meta_nca(ContentMetaType.PATCH, 1)),
            ("new.cnmt.nca", build_meta_nca(ContentMetaType.PATCH, 5)),
        ])
        mock_filesystem_service.add_file("u.nsp", nsp)

        manifest = InstallController(mock_filesystem_service).resolve(["u.nsp"])

        assert manifest.get("u.nsp").display_label == "u.nsp (Update) (v5)"

    def test_encrypted_archives(self, mock_filesystem_service, mock_key_service):
        meta = build_nca(
            ContentType.META,
            [(FsType.PARTITION_FS, build_pfs0([("a.cnmt", build_cnmt(ContentMetaType.PATCH, 4))]))],
            section_key=SECTION_KEY,
            header_key=HEADER_KEY,
        )
        mock_filesystem_service.add_file("enc.nsp", build_pfs0([("m.cnmt.nca", meta)]))

        with_keys = InstallController(mock_filesystem_service, mock_key_service.load())
        without_keys = InstallController(mock_filesystem_service)

        assert with_keys.resolve(["enc.nsp"]).get("enc.nsp").display_label == "enc.nsp (Update) (v4)"
        assert len(without_keys.resolve(["enc.nsp"])) == 0
        assert _reasons(without_keys) == {"enc.nsp": MissingRequiredContentUnit}


class TestResolveRawContent:
    """Tests for raw content archive files."""

    def test_labeled_by_file_name(self, mock_filesystem_service):
        mock_filesystem_service.add_file("/games/c.nca", b"not parsed")
        manifest = InstallController(mock_filesystem_service).resolve(["/games/c.nca"])

        assert manifest.entries() == [ManifestEntry("/games/c.nca", "c.nca", True)]

    def test_uppercase_extension(self, mock_filesystem_service):
        mock_filesystem_service.add_file("C.NCA", b"")
        manifest = InstallController(mock_filesystem_service).resolve(["C.NCA"])

        assert manifest.get("C.NCA").display_label == "C.NCA"


class TestDroppedFiles:
    """Tests for files that are filtered out."""

    def test_card_image_without_meta(self, mock_filesystem_service):
        xci = build_secure_xci([
            ("control.nca", build_control_nca(build_nacp("Game", "1.0"))),
        ])
        mock_filesystem_service.add_file("b.xci", xci)
        controller = InstallController(mock_filesystem_service)

        manifest = controller.resolve(["b.xci"])

        assert len(manifest) == 0
        assert _reasons(controller) == {"b.xci": MissingRequiredContentUnit}

    def test_unsupported_extension_never_opened(self, mock_filesystem_service):
        mock_filesystem_service.add_file("readme.txt", b"hello")
        controller = InstallController(mock_filesystem_service)

        manifest = controller.resolve(["readme.txt"])

        assert len(manifest) == 0
        assert mock_filesystem_service.get_opened_paths() == []
        assert _reasons(controller) == {"readme.txt": UnsupportedContainerKind}

    def test_missing_file(self, mock_filesystem_service):
        controller = InstallController(mock_filesystem_service)
        assert len(controller.resolve(["gone.nsp"])) == 0
        assert _reasons(controller) == {"gone.nsp": OpenFailure}

    def test_unparseable_package(self, mock_filesystem_service):
        mock_filesystem_service.add_file("bad.nsp", b"\x00" * 0x40)
        mock_filesystem_service.add_file("bad.xci", b"\x00" * 0x400)
        controller = InstallController(mock_filesystem_service)

        assert len(controller.resolve(["bad.nsp", "bad.xci"])) == 0
        assert _reasons(controller) == {"bad.nsp": OpenFailure, "bad.xci": OpenFailure}

    def test_base_application_dropped(self, mock_filesystem_service):
        mock_filesystem_service.add_file("base.nsp", build_nsp(ContentMetaType.APPLICATION, 0))
        controller = InstallController(mock_filesystem_service)

        assert len(controller.resolve(["base.nsp"])) == 0
        assert _reasons(controller) == {"base.nsp": UnsupportedTitleType}

    def test_unreadable_meta(self, mock_filesystem_service):
        meta = build_nca(ContentType.META, [(FsType.PARTITION_FS, build_pfs0([]))])
        mock_filesystem_service.add_file("m.nsp", build_pfs0([("m.cnmt.nca", meta)]))
        controller = InstallController(mock_filesystem_service)

        assert len(controller.resolve(["m.nsp"])) == 0
        assert _reasons(controller) == {"m.nsp": MalformedMetadata}

    def test_drops_are_logged(self, mock_filesystem_service, caplog, propagate_logs):
        with caplog.at_level(logging.INFO, logger="install_manifest"):
            InstallController(mock_filesystem_service).resolve(["x.zip"])

        assert "Skipping x.zip" in caplog.text

    def test_dropped_reset_per_batch(self, mock_filesystem_service):
        controller = InstallController(mock_filesystem_service)
        controller.resolve(["x.zip"])
        controller.resolve([])
        assert controller.dropped == []


class TestBatch:
    """Tests for whole-batch behavior."""

    def _populate(self, fs):
        fs.add_file("a.nsp", build_nsp(ContentMetaType.PATCH, 3))
        fs.add_file("b.xci", build_secure_xci([]))
        fs.add_file("c.nca", b"")
        fs.add_file("d.nsp", build_nsp(ContentMetaType.ADD_ON_CONTENT, 1, application_name="Game"))
        return ["a.nsp", "b.xci", "notes.txt", "c.nca", "d.nsp"]

    def test_mixed_batch(self, mock_filesystem_service):
        paths = self._populate(mock_filesystem_service)
        manifest = InstallController(mock_filesystem_service).resolve(paths)

        assert [(e.source_path, e.display_label) for e in manifest] == [
            ("a.nsp", "a.nsp (Update) (v3)"),
            ("c.nca", "c.nca"),
            ("d.nsp", "Game (DLC) (1.0.0)"),
        ]
        assert manifest.selected_paths() == ["a.nsp", "c.nca", "d.nsp"]

    def test_idempotent(self, mock_filesystem_service):
        paths = self._populate(mock_filesystem_service)
        controller = InstallController(mock_filesystem_service)

        first = controller.resolve(paths).entries()
        second = controller.resolve(paths).entries()

        assert first == second

    def test_every_opened_file_closed(self, mock_filesystem_service):
        paths = self._populate(mock_filesystem_service)
        InstallController(mock_filesystem_service).resolve(paths)

        assert mock_filesystem_service.get_opened_paths() == ["a.nsp", "b.xci", "c.nca", "d.nsp"]
        assert mock_filesystem_service.all_closed() is True

    def test_duplicate_paths(self, mock_filesystem_service):
        mock_filesystem_service.add_file("c.nca", b"")
        manifest = InstallController(mock_filesystem_service).resolve(["c.nca", "c.nca"])
        assert len(manifest) == 1

    def test_empty_batch(self, mock_filesystem_service):
        assert len(InstallController(mock_filesystem_service).resolve([])) == 0

    def test_deeply_nested_control_does_not_stop_batch(self, mock_filesystem_service):
        """A control archive with a very deep RomFS still yields a label."""
        control = build_nca(ContentType.CONTROL, [(FsType.ROMFS, build_nested_romfs(3000))])
        mock_filesystem_service.add_file("deep.nsp", build_pfs0([
            ("meta.cnmt.nca", build_meta_nca(ContentMetaType.PATCH, 2)),
            ("control.nca", control),
        ]))
        mock_filesystem_service.add_file("a.nsp", build_nsp(ContentMetaType.PATCH, 3))

        manifest = InstallController(mock_filesystem_service).resolve(["deep.nsp", "a.nsp"])

        assert [e.display_label for e in manifest] == [
            "deep.nsp (Update) (v2)",
            "a.nsp (Update) (v3)",
        ]
        assert mock_filesystem_service.all_closed() is True


class TestOpenPackage:
    """Tests for open_package."""

    def test_raw_kind_rejected(self, mock_filesystem_service):
        mock_filesystem_service.add_file("c.nca", b"")
        file = mock_filesystem_service.open_file("c.nca")
        with pytest.raises(OpenFailure):
            InstallController(mock_filesystem_service).open_package(file, ContainerKind.RAW_CONTENT_UNIT)


class TestFilesystemService:
    """Tests for the on-disk filesystem service."""

    def test_resolves_real_files(self, tmp_path):
        path = tmp_path / "update.nsp"
        path.write_bytes(build_nsp(ContentMetaType.PATCH, 7))

        manifest = InstallController(FilesystemService()).resolve([str(path)])

        assert manifest.get(str(path)).display_label == "update.nsp (Update) (v7)"

    def test_open_missing_and_directory(self, tmp_path):
        service = FilesystemService()
        assert service.open_file(str(tmp_path / "missing.nsp")) is None
        assert service.open_file(str(tmp_path)) is None

    def test_open_file_closes(self, tmp_path):
        path = tmp_path / "x.nca"
        path.write_bytes(b"abc")
        with FilesystemService().open_file(str(path)) as file:
            assert file.read_all() == b"abc"
        assert file.closed is True
