"""
Service interfaces (Protocols) for dependency injection and testing.

These protocols define the contracts that services must implement,
enabling easy mocking in tests and loose coupling between components.
"""

from typing import Protocol, Optional

from ..formats.vfs import VirtualFile
from ..models.config import ConfigData
from ..models.keys import KeySet


class IFilesystemService(Protocol):
    """Interface for opening candidate files."""

    def open_file(self, path: str) -> Optional[VirtualFile]:
        """
        Open a path for read-only random access.

        Args:
            path: Path as supplied by the caller

        Returns:
            An open VirtualFile (the caller closes it), or None on failure
        """
        ...


class IKeyService(Protocol):
    """Interface for loading decryption keys."""

    def load(self) -> KeySet:
        """
        Load the key set.

        Returns:
            KeySet (empty if no key files are available)
        """
        ...


class IConfigService(Protocol):
    """Interface for configuration loading."""

    def load(self) -> ConfigData:
        """Load configuration from disk."""
        ...

    def get_config_path(self) -> str:
        """Get the path to the configuration file."""
        ...
