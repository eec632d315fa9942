"""
FilesystemService - Opens candidate files as virtual files.
"""

import logging
import os
from typing import Dict, List, Optional

from ..formats.vfs import BytesFile, RealFile, VirtualFile

logger = logging.getLogger(__name__)


class FilesystemService:
    """
    Service for opening files on the local disk.

    Open failures are reported as None, never raised, so that one bad path
    cannot stop a batch.
    """

    def open_file(self, path: str) -> Optional[VirtualFile]:
        """
        Open `path` read-only.

        Returns:
            RealFile owning an OS handle, or None if the path can't be opened
        """
        if not os.path.isfile(path):
            logger.debug("Not a regular file: %s", path)
            return None
        try:
            return RealFile.open(path)
        except OSError as e:
            logger.warning(f"Failed to open {path}: {e}")
            return None


class MockFilesystemService(FilesystemService):
    """
    Mock FilesystemService for testing.

    Serves files from memory and remembers which paths were opened.
    """

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self._files: Dict[str, bytes] = dict(files or {})
        self._opened: List[str] = []
        self._handles: List["MockFile"] = []

    def add_file(self, path: str, data: bytes) -> None:
        self._files[path] = data

    def open_file(self, path: str) -> Optional[VirtualFile]:
        self._opened.append(path)
        if path not in self._files:
            return None
        handle = MockFile(self._files[path], os.path.basename(path))
        self._handles.append(handle)
        return handle

    def get_opened_paths(self) -> List[str]:
        """Get list of all paths passed to open_file (for testing)."""
        return self._opened

    def all_closed(self) -> bool:
        """Check that every file handed out has been closed (for testing)."""
        return all(handle.closed for handle in self._handles)

    def reset(self) -> None:
        self._opened.clear()
        self._handles.clear()


class MockFile(BytesFile):
    """In-memory file that tracks whether it was closed."""

    def __init__(self, data: bytes, name: str = ""):
        super().__init__(data, name)
        self.closed = False

    def close(self) -> None:
        self.closed = True
