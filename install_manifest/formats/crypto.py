"""
AES helpers for content archive decryption.

Thin wrappers over `cryptography` for the three modes content archives use:
XTS for headers, ECB for key unwrapping and CTR for section data.
"""

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .vfs import VirtualFile

AES_BLOCK_SIZE = 0x10
XTS_SECTOR_SIZE = 0x200


def sector_tweak(sector: int) -> bytes:
    """Content archives use a big-endian sector number as the XTS tweak."""
    return sector.to_bytes(16, "big")


def decrypt_xts(key: bytes, data: bytes, first_sector: int = 0,
                sector_size: int = XTS_SECTOR_SIZE) -> bytes:
    """
    Decrypt `data` sector by sector with AES-128-XTS.

    Args:
        key: 32-byte XTS key (two concatenated AES-128 keys)
        data: Ciphertext, a whole number of sectors
        first_sector: Sector number of the first byte of `data`
        sector_size: Bytes per sector

    Returns:
        Plaintext of the same length
    """
    if len(data) % sector_size:
        raise ValueError(f"XTS data must be a multiple of {sector_size:#x} bytes")

    out = bytearray()
    for i in range(0, len(data), sector_size):
        sector = first_sector + i // sector_size
        decryptor = Cipher(algorithms.AES(key), modes.XTS(sector_tweak(sector))).decryptor()
        out += decryptor.update(data[i:i + sector_size]) + decryptor.finalize()
    return bytes(out)


def decrypt_ecb(key: bytes, data: bytes) -> bytes:
    """Decrypt with AES-128-ECB (key area and title key unwrapping)."""
    decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
    return decryptor.update(data) + decryptor.finalize()


def ctr_counter(upper_iv: bytes, offset: int) -> bytes:
    """Build the CTR counter for absolute archive offset `offset`."""
    return upper_iv + (offset >> 4).to_bytes(8, "big")


class CtrFile(VirtualFile):
    """
    AES-CTR decrypting view over an encrypted section.

    `base_offset` is the section's absolute offset inside its archive; the
    counter is derived from absolute offsets, not section-relative ones.
    """

    def __init__(self, base: VirtualFile, key: bytes, upper_iv: bytes, base_offset: int,
                 name: str = ""):
        super().__init__(name or base.name)
        self._base = base
        self._key = key
        self._upper_iv = upper_iv
        self._base_offset = base_offset

    @property
    def size(self) -> int:
        return self._base.size

    def read(self, length: int, offset: int = 0) -> bytes:
        if offset < 0 or length <= 0 or offset >= self.size:
            return b""
        length = min(length, self.size - offset)

        aligned_start = offset - (offset % AES_BLOCK_SIZE)
        skip = offset - aligned_start
        raw = self._base.read(length + skip, aligned_start)

        counter = ctr_counter(self._upper_iv, self._base_offset + aligned_start)
        decryptor = Cipher(algorithms.AES(self._key), modes.CTR(counter)).decryptor()
        plain = decryptor.update(raw) + decryptor.finalize()
        return plain[skip:skip + length]
