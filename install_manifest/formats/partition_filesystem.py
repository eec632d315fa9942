"""
Partition filesystem parser (PFS0 and HFS0).

Both variants share a layout: a 0x10-byte header, a table of fixed-size
entries, a string table of NUL-terminated names, then file data. HFS0
entries carry an extra hash region that this parser does not verify.
"""

import logging
import struct
from typing import List

from .errors import InvalidMagicError, TruncatedDataError
from .vfs import OffsetFile, VirtualDir, VirtualFile

logger = logging.getLogger(__name__)

PFS0_MAGIC = b"PFS0"
HFS0_MAGIC = b"HFS0"

HEADER_SIZE = 0x10
ENTRY_SIZES = {
    PFS0_MAGIC: 0x18,
    HFS0_MAGIC: 0x40,
}

_HEADER = struct.Struct("<4sII4x")
_ENTRY = struct.Struct("<QQI")  # data offset, size, name offset (common prefix)


class PartitionFilesystem(VirtualDir):
    """
    A parsed PFS0/HFS0 image.

    Files appear in the order the entry table declares them.
    """

    def __init__(self, file: VirtualFile, name: str = ""):
        super().__init__(name or file.name)
        self.magic = b""
        self._parse(file)

    @property
    def is_hashed(self) -> bool:
        return self.magic == HFS0_MAGIC

    def _parse(self, file: VirtualFile) -> None:
        header = file.read_exact(HEADER_SIZE, 0)
        magic, file_count, string_table_size = _HEADER.unpack(header)
        if magic not in ENTRY_SIZES:
            raise InvalidMagicError(
                f"{file.name}: expected PFS0 or HFS0, found {magic!r}"
            )
        self.magic = magic
        entry_size = ENTRY_SIZES[magic]

        entry_table = file.read_exact(file_count * entry_size, HEADER_SIZE)
        strings_offset = HEADER_SIZE + file_count * entry_size
        strings = file.read_exact(string_table_size, strings_offset)
        data_offset = strings_offset + string_table_size

        files: List[VirtualFile] = []
        for index in range(file_count):
            offset, size, name_offset = _ENTRY.unpack_from(entry_table, index * entry_size)
            name = _read_name(strings, name_offset)

            start = data_offset + offset
            if start + size > file.size:
                raise TruncatedDataError(
                    f"{file.name}: entry {name!r} ends at {start + size:#x}, "
                    f"past file size {file.size:#x}"
                )
            files.append(OffsetFile(file, size, start, name))

        self.files = files
        logger.debug("Parsed %s %s with %d files", magic.decode(), file.name, len(files))


def _read_name(strings: bytes, offset: int) -> str:
    if offset >= len(strings):
        raise TruncatedDataError(f"Name offset {offset:#x} outside string table")
    end = strings.find(b"\x00", offset)
    if end == -1:
        end = len(strings)
    return strings[offset:end].decode("utf-8", errors="replace")
