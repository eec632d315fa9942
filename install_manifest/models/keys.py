"""
Key material used to decrypt content archives.
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Dict, Optional


class KeyAreaKeyIndex(IntEnum):
    """Which key-area key family an archive's key area is wrapped with."""
    APPLICATION = 0
    OCEAN = 1
    SYSTEM = 2


KEY_AREA_KEY_NAMES = {
    KeyAreaKeyIndex.APPLICATION: "key_area_key_application",
    KeyAreaKeyIndex.OCEAN: "key_area_key_ocean",
    KeyAreaKeyIndex.SYSTEM: "key_area_key_system",
}


@dataclass(frozen=True)
class KeySet:
    """
    Named keys from a keys file plus known encrypted title keys.

    `keys` maps lowercase key names (e.g. "header_key",
    "titlekek_0a") to raw bytes. `title_keys` maps lowercase rights-id hex
    to the still-encrypted title key. Instances are immutable; use
    `with_title_keys` to derive a per-package copy.
    """
    keys: Dict[str, bytes] = field(default_factory=dict)
    title_keys: Dict[str, bytes] = field(default_factory=dict)

    def get(self, name: str) -> Optional[bytes]:
        return self.keys.get(name.lower())

    @property
    def header_key(self) -> Optional[bytes]:
        return self.get("header_key")

    def key_area_key(self, index: int, revision: int) -> Optional[bytes]:
        try:
            family = KEY_AREA_KEY_NAMES[KeyAreaKeyIndex(index)]
        except ValueError:
            return None
        return self.get(f"{family}_{revision:02x}")

    def titlekek(self, revision: int) -> Optional[bytes]:
        return self.get(f"titlekek_{revision:02x}")

    def encrypted_title_key(self, rights_id: bytes) -> Optional[bytes]:
        return self.title_keys.get(rights_id.hex().lower())

    def with_title_keys(self, title_keys: Dict[str, bytes]) -> "KeySet":
        """Return a copy with `title_keys` merged over the known ones."""
        if not title_keys:
            return self
        merged = dict(self.title_keys)
        merged.update({k.lower(): v for k, v in title_keys.items()})
        return replace(self, title_keys=merged)

    def __len__(self) -> int:
        return len(self.keys)
