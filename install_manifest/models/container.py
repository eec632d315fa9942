"""
Container and content classification models.
"""

from enum import Enum, IntEnum
from pathlib import PurePath
from typing import Optional


class ContainerKind(Enum):
    """Kind of file handed to the resolver, keyed by file extension."""
    RAW_CONTENT_UNIT = "nca"
    SECURE_PACKAGE = "xci"
    LOOSE_PACKAGE = "nsp"

    @classmethod
    def from_path(cls, path: str) -> Optional["ContainerKind"]:
        """
        Classify a path by its extension (case-insensitive).

        Never touches the file itself.

        Returns:
            The container kind, or None if the extension is unsupported
        """
        suffix = PurePath(path).suffix.lower().lstrip(".")
        for kind in cls:
            if kind.value == suffix:
                return kind
        return None

    @property
    def is_package(self) -> bool:
        """Whether this kind unpacks into a package of content units."""
        return self is not ContainerKind.RAW_CONTENT_UNIT


class ContentType(IntEnum):
    """Type tag stored in a content archive header."""
    PROGRAM = 0
    META = 1
    CONTROL = 2
    MANUAL = 3
    DATA = 4
    PUBLIC_DATA = 5


class TitleType(Enum):
    """Installable title category, as far as the install manifest cares."""
    UPDATE = "update"
    ADD_ON_CONTENT = "add_on_content"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Short label used in display names; empty for uninstallable types."""
        return TITLE_TYPE_LABELS.get(self, "")

    @property
    def is_installable(self) -> bool:
        return self in TITLE_TYPE_LABELS


TITLE_TYPE_LABELS = {
    TitleType.UPDATE: "Update",
    TitleType.ADD_ON_CONTENT: "DLC",
}
