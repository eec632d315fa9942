"""
Controllers - Coordinate between services and views.

Controllers turn user-supplied paths into manifests the views can show.
"""

from .install_controller import (
    InstallController,
    DroppedFile,
    ResolveError,
    UnsupportedContainerKind,
    OpenFailure,
    MissingRequiredContentUnit,
    UnsupportedTitleType,
    MalformedMetadata,
)

__all__ = [
    "InstallController",
    "DroppedFile",
    "ResolveError",
    "UnsupportedContainerKind",
    "OpenFailure",
    "MissingRequiredContentUnit",
    "UnsupportedTitleType",
    "MalformedMetadata",
]
