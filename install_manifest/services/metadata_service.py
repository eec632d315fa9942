"""
Metadata extraction from content units.

Each lookup returns None instead of raising so the caller can chain them
and fall back explicitly:

    meta archive -> first section -> first file -> CNMT -> TitleMeta
    control archive -> RomFS -> control.nacp -> NACP -> ApplicationMeta
"""

import logging
from typing import Optional

from ..formats.cnmt import ContentMeta
from ..formats.content_archive import ContentArchive
from ..formats.errors import FormatError
from ..formats.nacp import ControlProperty, Language
from ..formats.romfs import extract_romfs
from ..formats.vfs import VirtualDir, VirtualFile
from ..models.metadata import ApplicationMeta, TitleMeta

logger = logging.getLogger(__name__)

# Tried in order
NACP_FILE_NAMES = ("control.nacp", "Control.nacp")


def get_meta_file(meta_archive: ContentArchive) -> Optional[VirtualFile]:
    """First file of the first section, where the CNMT lives."""
    if not meta_archive.subdirectories:
        return None
    section0 = meta_archive.subdirectories[0]
    if not section0.files:
        return None
    return section0.files[0]


def get_title_meta(meta_archive: ContentArchive) -> Optional[TitleMeta]:
    """
    Read title type and version from a Meta archive.

    Returns:
        TitleMeta, or None if the archive has no sections, its first
        section is empty, or the meta file can't be parsed
    """
    meta_file = get_meta_file(meta_archive)
    if meta_file is None:
        return None

    try:
        cnmt = ContentMeta.from_file(meta_file)
    except FormatError as e:
        logger.debug("Unreadable meta in %s: %s", meta_archive.name, e)
        return None

    return TitleMeta(
        title_type=cnmt.title_type,
        title_version=cnmt.title_version,
        title_id=cnmt.title_id,
    )


def find_nacp(romfs: VirtualDir) -> Optional[VirtualFile]:
    """Look up the control property file, lowercase name first."""
    for name in NACP_FILE_NAMES:
        nacp_file = romfs.get_file(name)
        if nacp_file is not None:
            return nacp_file
    return None


def get_application_meta(
    control_archive: ContentArchive,
    language: Language = Language.AmericanEnglish,
) -> Optional[ApplicationMeta]:
    """
    Read the application name and display version from a Control archive.

    Returns:
        ApplicationMeta, or None if there is no RomFS, it fails to
        extract, it holds no control.nacp/Control.nacp, or that file
        can't be parsed
    """
    if control_archive.romfs is None:
        return None

    try:
        extracted = extract_romfs(control_archive.romfs)
    except FormatError as e:
        logger.debug("Failed to extract RomFS of %s: %s", control_archive.name, e)
        return None

    nacp_file = find_nacp(extracted)
    if nacp_file is None:
        return None

    try:
        nacp = ControlProperty.from_file(nacp_file)
    except FormatError as e:
        logger.debug("Unreadable NACP in %s: %s", control_archive.name, e)
        return None

    return ApplicationMeta(
        application_name=nacp.application_name(language),
        version_string=nacp.version_string,
        publisher=nacp.publisher(language),
    )


def format_display_label(
    title_meta: TitleMeta,
    application_meta: Optional[ApplicationMeta],
    package_name: str,
) -> str:
    """
    Display label for an installable title.

    Uses the localized name and display version when control metadata is
    present, otherwise the package name and numeric title version.
    """
    type_label = title_meta.title_type.label
    if application_meta is not None:
        return (
            f"{application_meta.application_name} ({type_label}) "
            f"({application_meta.version_string})"
        )
    return f"{package_name} ({type_label}) (v{title_meta.title_version})"
