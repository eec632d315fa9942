"""
Models - Pure Python dataclasses representing resolver state.

No Qt dependencies in this package.
"""

from .container import ContainerKind, ContentType, TitleType
from .metadata import TitleMeta, ApplicationMeta
from .manifest import ManifestEntry, SelectionManifest
from .config import ConfigData
from .keys import KeySet, KeyAreaKeyIndex

__all__ = [
    "ContainerKind",
    "ContentType",
    "TitleType",
    "TitleMeta",
    "ApplicationMeta",
    "ManifestEntry",
    "SelectionManifest",
    "ConfigData",
    "KeySet",
    "KeyAreaKeyIndex",
]
