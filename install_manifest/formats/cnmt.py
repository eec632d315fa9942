"""
Content meta (CNMT) parser.

The CNMT lives as the single file of section 0 of a Meta content archive.
It names the title, its version and type.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from ..models.container import TitleType
from .errors import FormatError, TruncatedDataError
from .vfs import VirtualFile

HEADER_SIZE = 0x20

_HEADER = struct.Struct("<QIBBHHH")


class ContentMetaType(IntEnum):
    """CNMT content meta type"""
    SYSTEM_PROGRAM = 0x01
    SYSTEM_DATA = 0x02
    SYSTEM_UPDATE = 0x03
    BOOT_IMAGE_PACKAGE = 0x04
    BOOT_IMAGE_PACKAGE_SAFE = 0x05
    APPLICATION = 0x80
    PATCH = 0x81
    ADD_ON_CONTENT = 0x82
    DELTA = 0x83
    DATA_PATCH = 0x84


TITLE_TYPES = {
    ContentMetaType.PATCH: TitleType.UPDATE,
    ContentMetaType.ADD_ON_CONTENT: TitleType.ADD_ON_CONTENT,
}


@dataclass
class ContentMeta:
    """Parsed CNMT header."""
    title_id: int
    title_version: int
    meta_type: int
    extended_header: bytes = b""

    @property
    def content_meta_type(self) -> Optional[ContentMetaType]:
        try:
            return ContentMetaType(self.meta_type)
        except ValueError:
            return None

    @property
    def title_type(self) -> TitleType:
        return TITLE_TYPES.get(self.content_meta_type, TitleType.OTHER)

    @classmethod
    def from_bytes(cls, data: bytes) -> "ContentMeta":
        """
        Parse CNMT data.

        Raises:
            FormatError: If the data is too short for its declared header
        """
        if len(data) < HEADER_SIZE:
            raise TruncatedDataError(f"CNMT needs {HEADER_SIZE:#x} bytes, got {len(data):#x}")

        (
            title_id,
            title_version,
            meta_type,
            _platform,
            extended_header_size,
            _content_count,
            _meta_count,
        ) = _HEADER.unpack_from(data, 0)

        extended_header_end = HEADER_SIZE + extended_header_size
        if extended_header_end > len(data):
            raise TruncatedDataError(
                f"CNMT extended header ends at {extended_header_end:#x}, "
                f"data is {len(data):#x} bytes"
            )

        return cls(
            title_id=title_id,
            title_version=title_version,
            meta_type=meta_type,
            extended_header=data[HEADER_SIZE:extended_header_end],
        )

    @classmethod
    def from_file(cls, file: VirtualFile) -> "ContentMeta":
        try:
            return cls.from_bytes(file.read_all())
        except FormatError as e:
            raise type(e)(f"{file.name}: {e}") from e
