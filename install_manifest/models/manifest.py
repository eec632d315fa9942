"""
Selection manifest models.

The manifest is what the confirmation dialog shows: one row per file that
survived resolution, each with a checkbox that defaults to checked.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List

logger = logging.getLogger(__name__)


@dataclass
class ManifestEntry:
    """One row of the install confirmation list."""
    source_path: str
    display_label: str
    included: bool = True


class SelectionManifest:
    """
    Ordered collection of manifest entries.

    Entries keep the order files were supplied in. A path appears at most
    once; adding a second entry for the same path is ignored.
    """

    def __init__(self):
        self._entries: List[ManifestEntry] = []
        self._by_path: Dict[str, ManifestEntry] = {}

    def add(self, entry: ManifestEntry) -> bool:
        """
        Append an entry.

        Returns:
            True if added, False if the path was already present
        """
        if entry.source_path in self._by_path:
            logger.debug("Ignoring duplicate manifest entry for %s", entry.source_path)
            return False
        self._entries.append(entry)
        self._by_path[entry.source_path] = entry
        return True

    def entries(self) -> List[ManifestEntry]:
        """Entries in input order."""
        return list(self._entries)

    def get(self, path: str) -> ManifestEntry:
        """Raises KeyError if `path` is not in the manifest."""
        return self._by_path[path]

    def toggle(self, path: str) -> bool:
        """
        Flip the inclusion flag of the entry for `path`.

        Returns:
            The new inclusion state

        Raises:
            KeyError: If `path` is not in the manifest
        """
        entry = self._by_path[path]
        entry.included = not entry.included
        return entry.included

    def set_included(self, path: str, included: bool) -> None:
        """Raises KeyError if `path` is not in the manifest."""
        self._by_path[path].included = included

    def selected_paths(self) -> List[str]:
        """Paths of entries still checked, in input order."""
        return [e.source_path for e in self._entries if e.included]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ManifestEntry]:
        return iter(list(self._entries))

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def __repr__(self) -> str:
        return f"SelectionManifest({self._entries!r})"
