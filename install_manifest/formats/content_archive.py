"""
Content archive (NCA) parser.

A content archive is the unit that packages and card images carry. Its
0xC00-byte header describes up to four sections; each section is either a
partition filesystem (PFS0) or a RomFS image, optionally AES-CTR encrypted.

Only the parts needed to read metadata are implemented: header
decryption, key derivation, and mapping of PFS0/RomFS sections. Patch
(BKTR) and XTS-encrypted sections are reported as unsupported and skipped.
"""

import logging
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional

from ..models.container import ContentType
from ..models.keys import KeySet
from .crypto import CtrFile, decrypt_ecb, decrypt_xts
from .errors import (
    FormatError,
    InvalidMagicError,
    MissingKeyError,
    TruncatedDataError,
    UnsupportedFormatError,
)
from .partition_filesystem import PartitionFilesystem
from .vfs import OffsetFile, VirtualDir, VirtualFile

logger = logging.getLogger(__name__)

HEADER_SIZE = 0xC00
MAGIC_OFFSET = 0x200
MEDIA_UNIT_SIZE = 0x200
SECTION_COUNT = 4
FS_HEADER_OFFSET = 0x400
FS_HEADER_SIZE = 0x200
KEY_AREA_OFFSET = 0x300

NCA3_MAGIC = b"NCA3"
NCA2_MAGIC = b"NCA2"

# Key area slot holding the AES-CTR section key
CTR_KEY_SLOT = 2

_INFO = struct.Struct("<4sBBBBQQIIBB")          # at 0x200
_SECTION_ENTRY = struct.Struct("<II8x")         # at 0x240 + 0x10*i
_FS_HEADER = struct.Struct("<HBBB")             # at start of each fs header
_PFS0_REGION = struct.Struct("<QQ")             # at fs header + 0x40
_ROMFS_LEVEL = struct.Struct("<QQ")             # at fs header + 0x90
IVFC_MAGIC = b"IVFC"


class FsType(IntEnum):
    ROMFS = 0
    PARTITION_FS = 1


class EncryptionType(IntEnum):
    AUTO = 0
    NONE = 1
    AES_XTS = 2
    AES_CTR = 3
    AES_CTR_EX = 4


@dataclass(frozen=True)
class SectionInfo:
    """Decoded section table entry plus its filesystem header fields."""
    index: int
    start: int  # absolute byte offset
    end: int
    fs_type: int
    hash_type: int
    encryption_type: int
    fs_header: bytes

    @property
    def size(self) -> int:
        return self.end - self.start

    @property
    def upper_iv(self) -> bytes:
        # stored little-endian at 0x140, counter wants it big-endian
        return self.fs_header[0x140:0x148][::-1]


class ContentArchive:
    """
    A parsed content archive.

    Attributes:
        name: File name of the archive inside its container
        content_type: Type tag (Meta, Control, Program, ...)
        title_id: Program id from the header
        rights_id: 16-byte rights id (all zero when not title-key encrypted)
        subdirectories: Parsed PFS0 sections, in section order
        romfs: Decrypted view of the first RomFS section, or None

    Raises:
        FormatError: If the header is missing, truncated or undecryptable
    """

    def __init__(self, file: VirtualFile, keys: Optional[KeySet] = None):
        self.name = file.name
        self._file = file
        self._keys = keys or KeySet()

        self._header = self._read_header()
        (
            magic,
            self.distribution_type,
            content_type,
            key_generation_old,
            self.key_area_index,
            self.content_size,
            self.title_id,
            self.content_index,
            self.sdk_version,
            key_generation,
            self.signature_key_generation,
        ) = _INFO.unpack_from(self._header, MAGIC_OFFSET)
        self.format_version = magic

        try:
            self.content_type = ContentType(content_type)
        except ValueError:
            raise UnsupportedFormatError(
                f"{self.name}: unknown content type {content_type}"
            ) from None

        self.key_generation = max(key_generation_old, key_generation)
        self.rights_id = bytes(self._header[0x230:0x240])

        self.sections = self._read_sections()
        self._section_key: Optional[bytes] = None

        self.subdirectories: List[VirtualDir] = []
        self.romfs: Optional[VirtualFile] = None
        self._mount_sections()

    @property
    def master_key_revision(self) -> int:
        return self.key_generation - 1 if self.key_generation > 0 else 0

    @property
    def has_rights_id(self) -> bool:
        return any(self.rights_id)

    # =========================================================================
    # Header
    # =========================================================================

    def _read_header(self) -> bytes:
        raw = self._file.read(HEADER_SIZE, 0)
        if len(raw) != HEADER_SIZE:
            raise TruncatedDataError(f"{self.name}: header shorter than {HEADER_SIZE:#x}")

        if raw[MAGIC_OFFSET:MAGIC_OFFSET + 4] in (NCA3_MAGIC, NCA2_MAGIC):
            return raw

        header_key = self._keys.header_key
        if header_key is None:
            raise MissingKeyError(f"{self.name}: encrypted header and no header_key")

        header = decrypt_xts(header_key, raw[:FS_HEADER_OFFSET])
        magic = header[MAGIC_OFFSET:MAGIC_OFFSET + 4]

        if magic == NCA3_MAGIC:
            header += decrypt_xts(header_key, raw[FS_HEADER_OFFSET:], first_sector=2)
        elif magic == NCA2_MAGIC:
            # NCA2 encrypts every fs header as sector 0
            for i in range(SECTION_COUNT):
                start = FS_HEADER_OFFSET + i * FS_HEADER_SIZE
                header += decrypt_xts(header_key, raw[start:start + FS_HEADER_SIZE])
        else:
            raise InvalidMagicError(f"{self.name}: bad magic {magic!r} after decryption")

        return header

    def _read_sections(self) -> List[SectionInfo]:
        sections = []
        for i in range(SECTION_COUNT):
            start, end = _SECTION_ENTRY.unpack_from(self._header, 0x240 + i * 0x10)
            if start == 0 and end == 0:
                continue
            if end < start:
                logger.debug("%s: section %d has end before start, skipping", self.name, i)
                continue

            fs_header = self._header[
                FS_HEADER_OFFSET + i * FS_HEADER_SIZE:FS_HEADER_OFFSET + (i + 1) * FS_HEADER_SIZE
            ]
            _, fs_type, hash_type, encryption_type = _FS_HEADER.unpack_from(fs_header, 0)
            sections.append(SectionInfo(
                index=i,
                start=start * MEDIA_UNIT_SIZE,
                end=end * MEDIA_UNIT_SIZE,
                fs_type=fs_type,
                hash_type=hash_type,
                encryption_type=encryption_type,
                fs_header=fs_header,
            ))
        return sections

    # =========================================================================
    # Keys
    # =========================================================================

    def _get_section_key(self) -> bytes:
        if self._section_key is None:
            if self.has_rights_id:
                self._section_key = self._decrypt_title_key()
            else:
                self._section_key = self._decrypt_key_area()[CTR_KEY_SLOT]
        return self._section_key

    def _decrypt_key_area(self) -> List[bytes]:
        kek = self._keys.key_area_key(self.key_area_index, self.master_key_revision)
        if kek is None:
            raise MissingKeyError(
                f"{self.name}: no key area key {self.key_area_index} "
                f"for revision {self.master_key_revision:02x}"
            )
        area = decrypt_ecb(kek, self._header[KEY_AREA_OFFSET:KEY_AREA_OFFSET + 0x40])
        return [area[i:i + 0x10] for i in range(0, 0x40, 0x10)]

    def _decrypt_title_key(self) -> bytes:
        encrypted = self._keys.encrypted_title_key(self.rights_id)
        if encrypted is None:
            raise MissingKeyError(f"{self.name}: no title key for rights id {self.rights_id.hex()}")
        titlekek = self._keys.titlekek(self.master_key_revision)
        if titlekek is None:
            raise MissingKeyError(
                f"{self.name}: no titlekek for revision {self.master_key_revision:02x}"
            )
        return decrypt_ecb(titlekek, encrypted)

    # =========================================================================
    # Sections
    # =========================================================================

    def _open_section(self, section: SectionInfo) -> VirtualFile:
        if section.end > self._file.size:
            raise TruncatedDataError(
                f"{self.name}: section {section.index} ends past end of archive"
            )
        raw = OffsetFile(self._file, section.size, section.start, f"section{section.index}")

        if section.encryption_type == EncryptionType.NONE:
            return raw
        if section.encryption_type == EncryptionType.AES_CTR:
            return CtrFile(raw, self._get_section_key(), section.upper_iv, section.start)
        raise UnsupportedFormatError(
            f"{self.name}: section {section.index} uses encryption type {section.encryption_type}"
        )

    def _mount_sections(self) -> None:
        for section in self.sections:
            try:
                data = self._open_section(section)
                if section.fs_type == FsType.PARTITION_FS:
                    offset, size = _PFS0_REGION.unpack_from(section.fs_header, 0x40)
                    pfs = OffsetFile(data, size, offset, data.name)
                    self.subdirectories.append(PartitionFilesystem(pfs, f"section{section.index}"))
                elif section.fs_type == FsType.ROMFS:
                    if self.romfs is not None:
                        continue
                    if section.fs_header[0x8:0xC] != IVFC_MAGIC:
                        raise InvalidMagicError(f"{self.name}: RomFS section lacks IVFC header")
                    offset, size = _ROMFS_LEVEL.unpack_from(section.fs_header, 0x90)
                    self.romfs = OffsetFile(data, size, offset, "romfs")
                else:
                    raise UnsupportedFormatError(
                        f"{self.name}: section {section.index} has fs type {section.fs_type}"
                    )
            except FormatError as e:
                logger.debug("Skipping section %d of %s: %s", section.index, self.name, e)

    def __repr__(self) -> str:
        return (
            f"ContentArchive(name={self.name!r}, type={self.content_type.name}, "
            f"title_id={self.title_id:016X})"
        )

