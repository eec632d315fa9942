"""
Install Manifest

Resolves a batch of user-selected files (NSP packages, XCI card images and
raw NCA content archives) into a labeled, toggleable list of what can be
installed:
- Classifies each file by extension
- Unpacks card images and packages into content archives
- Reads title type and version from the Meta archive
- Reads the localized application name from the Control archive
- Drops anything that isn't an update or add-on content

The Qt confirmation dialog lives in `install_manifest.views` and is not
imported here.
"""

from .models import (
    ContainerKind,
    ContentType,
    TitleType,
    TitleMeta,
    ApplicationMeta,
    ManifestEntry,
    SelectionManifest,
    ConfigData,
    KeySet,
)

from .controllers import (
    InstallController,
    ResolveError,
)

from .logging import (
    logger,
    configure_logging,
    set_debug_enabled,
    is_debug_enabled,
    configure_from_config,
)

__version__ = "0.1.0"

__all__ = [
    # Models
    "ContainerKind",
    "ContentType",
    "TitleType",
    "TitleMeta",
    "ApplicationMeta",
    "ManifestEntry",
    "SelectionManifest",
    "ConfigData",
    "KeySet",
    # Controller
    "InstallController",
    "ResolveError",
    # Logging
    "logger",
    "configure_logging",
    "set_debug_enabled",
    "is_debug_enabled",
    "configure_from_config",
]
