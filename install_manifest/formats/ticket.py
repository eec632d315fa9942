"""
Ticket (.tik) parser.

Packages ship one ticket per title-key-encrypted archive. Common tickets
carry the encrypted title key in the clear; personalized tickets wrap it
with a console-unique RSA key and are not usable here.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum

from .errors import TruncatedDataError, UnsupportedFormatError
from .vfs import VirtualFile

# signature type -> (signature size, padding size)
SIGNATURE_LAYOUTS = {
    0x010000: (0x200, 0x3C),  # RSA-4096 SHA-1
    0x010001: (0x100, 0x3C),  # RSA-2048 SHA-1
    0x010002: (0x3C, 0x40),   # ECDSA SHA-1
    0x010003: (0x200, 0x3C),  # RSA-4096 SHA-256
    0x010004: (0x100, 0x3C),  # RSA-2048 SHA-256
    0x010005: (0x3C, 0x40),   # ECDSA SHA-256
}

TICKET_DATA_SIZE = 0x180


class TitleKeyType(IntEnum):
    COMMON = 0
    PERSONALIZED = 1


@dataclass(frozen=True)
class Ticket:
    issuer: str
    title_key_block: bytes
    title_key_type: int
    key_generation: int
    rights_id: bytes

    @property
    def is_common(self) -> bool:
        return self.title_key_type == TitleKeyType.COMMON

    @property
    def encrypted_title_key(self) -> bytes:
        return self.title_key_block[:0x10]

    @property
    def rights_id_hex(self) -> str:
        return self.rights_id.hex()

    @classmethod
    def from_file(cls, file: VirtualFile) -> "Ticket":
        """
        Raises:
            UnsupportedFormatError: On an unknown signature type
            TruncatedDataError: If the ticket body is cut short
        """
        (signature_type,) = struct.unpack("<I", file.read_exact(4, 0))
        if signature_type not in SIGNATURE_LAYOUTS:
            raise UnsupportedFormatError(
                f"{file.name}: unknown signature type {signature_type:#x}"
            )
        signature_size, padding_size = SIGNATURE_LAYOUTS[signature_type]
        body = file.read(TICKET_DATA_SIZE, 4 + signature_size + padding_size)
        if len(body) < 0x170:
            raise TruncatedDataError(f"{file.name}: ticket body too short")

        return cls(
            issuer=body[0x00:0x40].split(b"\x00", 1)[0].decode("ascii", errors="replace"),
            title_key_block=body[0x40:0x140],
            title_key_type=body[0x141],
            key_generation=body[0x145],
            rights_id=body[0x160:0x170],
        )
