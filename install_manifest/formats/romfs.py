"""
RomFS image reader.

Layout: a 0x50-byte header of ten u64 fields, then directory and file
metadata tables. Entries link to their first child and next sibling by
table offset; 0xFFFFFFFF ends a chain.
"""

import logging
import struct
from typing import List, Set, Tuple

from .errors import FormatError, TruncatedDataError
from .vfs import OffsetFile, VirtualDir, VirtualFile

logger = logging.getLogger(__name__)

HEADER_SIZE = 0x50
EMPTY_ENTRY = 0xFFFFFFFF

_HEADER = struct.Struct("<10Q")
# parent, sibling, child dir, child file, hash sibling, name length
_DIR_ENTRY = struct.Struct("<IIIIII")
# parent, sibling, data offset, data size, hash sibling, name length
_FILE_ENTRY = struct.Struct("<IIQQII")


def extract_romfs(file: VirtualFile) -> VirtualDir:
    """
    Build a directory tree from a RomFS image.

    File contents are not copied; each file is a window onto `file`.

    Raises:
        FormatError: If the image is truncated or its tables are inconsistent
    """
    header = file.read_exact(HEADER_SIZE, 0)
    (
        header_size,
        _dir_hash_offset,
        _dir_hash_size,
        dir_meta_offset,
        dir_meta_size,
        _file_hash_offset,
        _file_hash_size,
        file_meta_offset,
        file_meta_size,
        data_offset,
    ) = _HEADER.unpack(header)

    if header_size != HEADER_SIZE:
        raise FormatError(f"{file.name}: unexpected RomFS header size {header_size:#x}")

    reader = _RomFSReader(
        file,
        dir_meta=file.read_exact(dir_meta_size, dir_meta_offset),
        file_meta=file.read_exact(file_meta_size, file_meta_offset),
        data_offset=data_offset,
    )
    root = reader.read_directory(0, "")
    logger.debug("Extracted RomFS %s: %d root files", file.name, len(root.files))
    return root


class _RomFSReader:
    """Walks the metadata tables of one RomFS image."""

    def __init__(self, file: VirtualFile, dir_meta: bytes, file_meta: bytes, data_offset: int):
        self._file = file
        self._dir_meta = dir_meta
        self._file_meta = file_meta
        self._data_offset = data_offset

    def read_directory(self, offset: int, name: str) -> VirtualDir:
        """
        Build the tree rooted at the directory entry at `offset`.

        Iterative; nesting depth is limited only by the table size.
        """
        root = VirtualDir(name)
        seen_dirs: Set[int] = {offset}
        pending: List[Tuple[int, VirtualDir]] = [(offset, root)]

        while pending:
            dir_offset, directory = pending.pop()
            _, _, child_dir, child_file, _, _ = self._unpack(_DIR_ENTRY, self._dir_meta, dir_offset)

            self._read_files(directory, child_file)

            child_offset = child_dir
            while child_offset != EMPTY_ENTRY:
                if child_offset in seen_dirs:
                    raise FormatError(f"{self._file.name}: directory table loops at {child_offset:#x}")
                seen_dirs.add(child_offset)

                _, sibling, _, _, _, name_length = self._unpack(_DIR_ENTRY, self._dir_meta, child_offset)
                child = VirtualDir(self._name(self._dir_meta, child_offset + _DIR_ENTRY.size, name_length))
                directory.subdirectories.append(child)
                pending.append((child_offset, child))
                child_offset = sibling

        return root

    def _read_files(self, directory: VirtualDir, first_offset: int) -> None:
        seen_files: Set[int] = set()
        file_offset = first_offset
        while file_offset != EMPTY_ENTRY:
            if file_offset in seen_files:
                raise FormatError(f"{self._file.name}: file table loops at {file_offset:#x}")
            seen_files.add(file_offset)

            _, sibling, data_offset, data_size, _, name_length = self._unpack(
                _FILE_ENTRY, self._file_meta, file_offset
            )
            file_name = self._name(self._file_meta, file_offset + _FILE_ENTRY.size, name_length)
            start = self._data_offset + data_offset
            if start + data_size > self._file.size:
                raise TruncatedDataError(f"{self._file.name}: {file_name!r} runs past image end")
            directory.files.append(OffsetFile(self._file, data_size, start, file_name))
            file_offset = sibling

    def _unpack(self, entry: struct.Struct, table: bytes, offset: int) -> tuple:
        if offset + entry.size > len(table):
            raise TruncatedDataError(f"{self._file.name}: entry at {offset:#x} outside table")
        return entry.unpack_from(table, offset)

    def _name(self, table: bytes, offset: int, length: int) -> str:
        if offset + length > len(table):
            raise TruncatedDataError(f"{self._file.name}: name at {offset:#x} outside table")
        return table[offset:offset + length].decode("utf-8", errors="replace")
