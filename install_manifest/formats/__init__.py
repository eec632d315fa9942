"""
Formats - Read-only parsers for package, card image and content archive layouts.

No Qt dependencies in this package.
"""

from .errors import (
    FormatError,
    InvalidMagicError,
    TruncatedDataError,
    MissingKeyError,
    UnsupportedFormatError,
)
from .vfs import VirtualFile, VirtualDir, BytesFile, RealFile, OffsetFile
from .partition_filesystem import PartitionFilesystem
from .content_archive import ContentArchive
from .package import Package, find_content
from .card_image import CardImage
from .romfs import extract_romfs
from .cnmt import ContentMeta, ContentMetaType
from .nacp import ControlProperty, Language
from .ticket import Ticket

__all__ = [
    "FormatError",
    "InvalidMagicError",
    "TruncatedDataError",
    "MissingKeyError",
    "UnsupportedFormatError",
    "VirtualFile",
    "VirtualDir",
    "BytesFile",
    "RealFile",
    "OffsetFile",
    "PartitionFilesystem",
    "ContentArchive",
    "Package",
    "find_content",
    "CardImage",
    "extract_romfs",
    "ContentMeta",
    "ContentMetaType",
    "ControlProperty",
    "Language",
    "Ticket",
]
