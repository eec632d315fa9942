# main.py
import argparse
import sys
from typing import Optional

from PyQt5.QtWidgets import QApplication, QDialog, QFileDialog

from install_manifest import ConfigData, InstallController, configure_from_config
from install_manifest.formats.nacp import Language
from install_manifest.services import (
    ConfigService,
    FilesystemService,
    IConfigService,
    IFilesystemService,
    IKeyService,
    KeyService,
)
from install_manifest.views import InstallDialog

APP_TITLE = "Install Files to NAND"

FILE_FILTER = "Installable Files (*.xci *.nsp *.nca);;All Files (*)"


def parse_args(argv):
    parser = argparse.ArgumentParser(
        description="Confirm which updates and DLC to install from a set of files."
    )
    parser.add_argument("files", nargs="*", help="XCI, NSP or NCA files")
    parser.add_argument("--config", default=None, help="path to config.json")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--verbose", action="store_true", help="report files left out of the list")
    return parser.parse_args(argv)


def load_config(config_service: IConfigService, debug: bool = False, verbose: bool = False) -> ConfigData:
    """Load the config and apply its logging preference."""
    config = config_service.load()
    configure_from_config(config, debug=debug, verbose=verbose)
    return config


def create_controller(
    config: ConfigData,
    key_service: Optional[IKeyService] = None,
    filesystem: Optional[IFilesystemService] = None,
) -> InstallController:
    """Build a controller from the config; keys come from its key files unless given."""
    if key_service is None:
        key_service = KeyService(config.prod_keys_path, config.title_keys_path)
    return InstallController(
        filesystem or FilesystemService(),
        key_service.load(),
        Language.from_name(config.language),
    )


def main(argv=None) -> int:
    app = QApplication(sys.argv)
    args = parse_args(app.arguments()[1:] if argv is None else argv)

    config = load_config(ConfigService(args.config), debug=args.debug, verbose=args.verbose)

    files = args.files
    if not files:
        files, _ = QFileDialog.getOpenFileNames(None, APP_TITLE, "", FILE_FILTER)
        if not files:
            return 0

    manifest = create_controller(config).resolve(files)

    dialog = InstallDialog(manifest)
    if dialog.exec_() != QDialog.Accepted:
        return 1

    for path in dialog.get_files():
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
