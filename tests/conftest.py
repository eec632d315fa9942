"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
import tempfile
import json

# Project root for `install_manifest`, tests dir for `builders`
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

# Dialog tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def temp_config_file():
    """Create a temporary config file for testing."""
    with tempfile.NamedTemporaryFile(
        mode='w',
        suffix='.json',
        delete=False
    ) as f:
        json.dump({
            "_version": 1,
            "keys_directory": "/opt/keys",
            "prod_keys_file": "prod.keys",
            "title_keys_file": "title.keys",
            "language": "Japanese",
            "debug_logging": True,
        }, f)
        temp_path = f.name

    yield temp_path

    # Cleanup
    if os.path.exists(temp_path):
        os.remove(temp_path)


@pytest.fixture
def temp_config_v0():
    """Create a v0 (unversioned) config file for migration testing."""
    with tempfile.NamedTemporaryFile(
        mode='w',
        suffix='.json',
        delete=False
    ) as f:
        # Old format without version, single keys file path
        json.dump({
            "keys_file": "/home/user/switch/prod.keys",
            "language": "French",
        }, f)
        temp_path = f.name

    yield temp_path

    if os.path.exists(temp_path):
        os.remove(temp_path)


@pytest.fixture
def corrupted_config_file():
    """Create a corrupted config file for error handling testing."""
    with tempfile.NamedTemporaryFile(
        mode='w',
        suffix='.json',
        delete=False
    ) as f:
        f.write("{ invalid json content")
        temp_path = f.name

    yield temp_path

    if os.path.exists(temp_path):
        os.remove(temp_path)


@pytest.fixture
def keys_directory(tmp_path):
    """Directory with a prod.keys and title.keys pair."""
    from builders import HEADER_KEY, KEY_AREA_KEY, TITLEKEK

    (tmp_path / "prod.keys").write_text(
        "; console keys\n"
        f"header_key = {HEADER_KEY.hex()}\n"
        f"key_area_key_application_00 = {KEY_AREA_KEY.hex()}\n"
        f"TITLEKEK_00 = {TITLEKEK.hex().upper()}\n"
        "header_key_source = 00\n"
    )
    (tmp_path / "title.keys").write_text(
        "0100abcd000108000000000000000000 = 000102030405060708090a0b0c0d0e0f\n"
    )
    return tmp_path


@pytest.fixture
def mock_filesystem_service():
    """Create an in-memory filesystem service for testing."""
    from install_manifest.services.filesystem_service import MockFilesystemService
    return MockFilesystemService()


@pytest.fixture
def mock_key_service():
    """Create a mock key service holding the test keys."""
    from builders import HEADER_KEY, KEY_AREA_KEY, TITLEKEK
    from install_manifest.models.keys import KeySet
    from install_manifest.services.key_service import MockKeyService

    return MockKeyService(KeySet(keys={
        "header_key": HEADER_KEY,
        "key_area_key_application_00": KEY_AREA_KEY,
        "titlekek_00": TITLEKEK,
    }))


@pytest.fixture
def mock_config_service():
    """Create a mock config service for testing."""
    from install_manifest.services.config_service import MockConfigService
    return MockConfigService()


@pytest.fixture
def qapp():
    """Create QApplication for dialog tests."""
    from PyQt5.QtWidgets import QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def propagate_logs(monkeypatch):
    """Let package log records reach caplog's root handler."""
    import logging
    monkeypatch.setattr(logging.getLogger("install_manifest"), "propagate", True)
