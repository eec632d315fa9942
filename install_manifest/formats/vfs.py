"""
Virtual filesystem primitives.

Every container parser reads through a VirtualFile so that nested
structures (a RomFS inside a decrypted section inside a content archive
inside a package) are just windows onto the same underlying byte source.
"""

import os
from typing import BinaryIO, List, Optional

from .errors import TruncatedDataError


class VirtualFile:
    """Random-access, read-only byte source."""

    def __init__(self, name: str):
        self.name = name

    @property
    def size(self) -> int:
        raise NotImplementedError

    def read(self, length: int, offset: int = 0) -> bytes:
        """Read up to `length` bytes starting at `offset`."""
        raise NotImplementedError

    def read_all(self) -> bytes:
        return self.read(self.size, 0)

    def read_exact(self, length: int, offset: int = 0) -> bytes:
        """
        Read exactly `length` bytes.

        Raises:
            TruncatedDataError: If the file ends before `length` bytes
        """
        data = self.read(length, offset)
        if len(data) != length:
            raise TruncatedDataError(
                f"{self.name}: wanted {length:#x} bytes at {offset:#x}, got {len(data):#x}"
            )
        return data

    def close(self) -> None:
        """Release any handle held by this file."""
        pass

    def __enter__(self) -> "VirtualFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, size={self.size:#x})"


class BytesFile(VirtualFile):
    """In-memory file."""

    def __init__(self, data: bytes, name: str = ""):
        super().__init__(name)
        self._data = bytes(data)

    @property
    def size(self) -> int:
        return len(self._data)

    def read(self, length: int, offset: int = 0) -> bytes:
        if offset < 0 or length <= 0:
            return b""
        return self._data[offset:offset + length]


class RealFile(VirtualFile):
    """File on disk. Owns its handle; close it (or use `with`) when done."""

    def __init__(self, handle: BinaryIO, name: str):
        super().__init__(name)
        self._handle = handle
        self._size = os.fstat(handle.fileno()).st_size

    @classmethod
    def open(cls, path: str) -> "RealFile":
        """Open `path` read-only. Raises OSError on failure."""
        handle = open(path, "rb")
        try:
            return cls(handle, os.path.basename(path))
        except OSError:
            handle.close()
            raise

    @property
    def size(self) -> int:
        return self._size

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def read(self, length: int, offset: int = 0) -> bytes:
        if offset < 0 or length <= 0 or offset >= self._size:
            return b""
        self._handle.seek(offset)
        return self._handle.read(min(length, self._size - offset))

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()


class OffsetFile(VirtualFile):
    """Window of `size` bytes starting at `offset` in a parent file."""

    def __init__(self, base: VirtualFile, size: int, offset: int, name: str = ""):
        super().__init__(name)
        self._base = base
        self._size = size
        self._offset = offset

    @property
    def size(self) -> int:
        return self._size

    @property
    def offset(self) -> int:
        return self._offset

    def read(self, length: int, offset: int = 0) -> bytes:
        if offset < 0 or length <= 0 or offset >= self._size:
            return b""
        length = min(length, self._size - offset)
        return self._base.read(length, self._offset + offset)


class VirtualDir:
    """Directory of virtual files and nested directories."""

    def __init__(
        self,
        name: str = "",
        files: Optional[List[VirtualFile]] = None,
        subdirectories: Optional[List["VirtualDir"]] = None,
    ):
        self.name = name
        self.files: List[VirtualFile] = list(files or [])
        self.subdirectories: List["VirtualDir"] = list(subdirectories or [])

    def get_file(self, name: str) -> Optional[VirtualFile]:
        """Exact (case-sensitive) lookup of a direct child file."""
        for f in self.files:
            if f.name == name:
                return f
        return None

    def get_subdirectory(self, name: str) -> Optional["VirtualDir"]:
        for d in self.subdirectories:
            if d.name == name:
                return d
        return None

    def __repr__(self) -> str:
        return (
            f"VirtualDir(name={self.name!r}, files={len(self.files)}, "
            f"subdirectories={len(self.subdirectories)})"
        )
