"""
Services - Business logic layer with no Qt dependencies.

Services handle all business operations and can be easily unit tested.
"""

from .interfaces import IFilesystemService, IKeyService, IConfigService
from .filesystem_service import FilesystemService, MockFilesystemService, MockFile
from .key_service import KeyService, MockKeyService, parse_keys
from .config_service import ConfigService, MockConfigService
from .metadata_service import (
    get_title_meta,
    get_application_meta,
    format_display_label,
)

__all__ = [
    # Interfaces
    "IFilesystemService",
    "IKeyService",
    "IConfigService",
    # Services
    "FilesystemService",
    "KeyService",
    "ConfigService",
    "parse_keys",
    "get_title_meta",
    "get_application_meta",
    "format_display_label",
    # Mocks for testing
    "MockFilesystemService",
    "MockFile",
    "MockKeyService",
    "MockConfigService",
]
