"""
Card image (XCI) reader.

The card header starts with a 0x100-byte signature followed by the
`HEAD` magic. It points at a root HFS0 whose entries are themselves
HFS0 partitions: update, normal, secure and (newer cards) logo. Installable
content lives in the secure partition.
"""

import logging
import struct
from typing import Optional

from ..models.keys import KeySet
from .errors import FormatError, InvalidMagicError
from .package import Package
from .partition_filesystem import PartitionFilesystem
from .vfs import OffsetFile, VirtualFile

logger = logging.getLogger(__name__)

HEADER_MAGIC = b"HEAD"
HEADER_MAGIC_OFFSET = 0x100
HFS0_OFFSET_FIELD = 0x130

SECURE_PARTITION = "secure"


class CardImage:
    """
    Parsed card image.

    Raises:
        FormatError: If the header or root partition table is invalid
    """

    def __init__(self, file: VirtualFile, keys: Optional[KeySet] = None):
        self.name = file.name
        self._file = file
        self._keys = keys

        magic = file.read_exact(4, HEADER_MAGIC_OFFSET)
        if magic != HEADER_MAGIC:
            raise InvalidMagicError(f"{file.name}: expected {HEADER_MAGIC!r}, found {magic!r}")

        hfs0_offset, hfs0_header_size = struct.unpack("<QQ", file.read_exact(0x10, HFS0_OFFSET_FIELD))
        if hfs0_offset >= file.size:
            raise FormatError(f"{file.name}: root partition offset {hfs0_offset:#x} past end of file")
        logger.debug("%s: root HFS0 at %#x (header %#x bytes)", file.name, hfs0_offset, hfs0_header_size)

        root = OffsetFile(file, file.size - hfs0_offset, hfs0_offset, "root")
        self.root = PartitionFilesystem(root, "root")

    def partition_file(self, name: str) -> Optional[VirtualFile]:
        return self.root.get_file(name)

    def secure_partition(self) -> Package:
        """
        The secure partition as a package named after this card image.

        Raises:
            FormatError: If the partition is missing or unreadable
        """
        secure = self.partition_file(SECURE_PARTITION)
        if secure is None:
            raise FormatError(f"{self.name}: no {SECURE_PARTITION} partition")
        return Package(secure, self._keys, name=self.name)
