"""
KeyService - Loads decryption keys from keys files.

Keys files are plain text, one `name = hex` pair per line. `prod.keys`
holds named console keys; `title.keys` maps rights ids to encrypted title
keys. Both are optional: without them only plaintext archives resolve.
"""

import logging
import os
import re
from typing import Dict, Optional

from ..models.keys import KeySet

logger = logging.getLogger(__name__)

KEY_LINE = re.compile(r"^\s*([A-Za-z0-9_]+)\s*[=,]\s*([0-9A-Fa-f]+)\s*$")

RIGHTS_ID = re.compile(r"^[0-9a-f]{32}$")
KEYED_PREFIXES = ("key_area_key_", "titlekek_")


def expected_key_length(name: str) -> Optional[int]:
    """Length the resolver needs for `name`, or None for keys it never uses."""
    if name == "header_key":
        return 0x20
    if name.startswith(KEYED_PREFIXES) and not name.endswith("_source"):
        return 0x10
    if RIGHTS_ID.match(name):
        return 0x10
    return None


def parse_keys(text: str, source: str = "<keys>") -> Dict[str, bytes]:
    """
    Parse `name = hex` lines.

    Blank lines and lines starting with ';' or '#' are ignored. Malformed
    lines are logged and skipped.

    Returns:
        Dict mapping lowercase key name to key bytes
    """
    keys: Dict[str, bytes] = {}
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped[0] in ";#":
            continue

        match = KEY_LINE.match(stripped)
        if not match or len(match.group(2)) % 2:
            logger.warning(f"{source}:{number}: ignoring malformed key line")
            continue

        name = match.group(1).lower()
        value = bytes.fromhex(match.group(2))
        expected = expected_key_length(name)
        if expected is not None and len(value) != expected:
            logger.warning(
                f"{source}:{number}: {name} is {len(value)} bytes, expected {expected}"
            )
            continue
        keys[name] = value
    return keys


class KeyService:
    """
    Service for loading the key set from disk.

    The key set is read once and cached.
    """

    def __init__(self, prod_keys_path: Optional[str] = None, title_keys_path: Optional[str] = None):
        """
        Initialize the key service.

        Args:
            prod_keys_path: Path to prod.keys (skipped if None or missing)
            title_keys_path: Path to title.keys (skipped if None or missing)
        """
        self._prod_keys_path = prod_keys_path
        self._title_keys_path = title_keys_path
        self._keys: Optional[KeySet] = None

    def load(self) -> KeySet:
        """
        Load and cache the key set.

        Returns:
            KeySet; empty when neither file exists
        """
        if self._keys is not None:
            return self._keys

        keys = self._read_optional(self._prod_keys_path)
        title_keys = self._read_optional(self._title_keys_path)

        self._keys = KeySet(keys=keys, title_keys=title_keys)
        logger.info(
            "Loaded %d keys and %d title keys", len(keys), len(title_keys)
        )
        return self._keys

    def _read_optional(self, path: Optional[str]) -> Dict[str, bytes]:
        if not path:
            return {}
        path = os.path.expanduser(path)
        if not os.path.exists(path):
            logger.info("Keys file not found: %s", path)
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                return parse_keys(f.read(), path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read keys file {path}: {e}")
            return {}


class MockKeyService(KeyService):
    """
    Mock KeyService for testing.

    Returns a fixed key set without touching disk.
    """

    def __init__(self, keys: Optional[KeySet] = None):
        super().__init__()
        self._keys = keys or KeySet()

    def set_keys(self, keys: KeySet) -> None:
        self._keys = keys

    def load(self) -> KeySet:
        return self._keys
