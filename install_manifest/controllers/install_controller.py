"""
InstallController - Resolves candidate files into a selection manifest.

Each path goes through:

    classify -> open -> collapse contents -> read metadata -> label

and either lands in the manifest or is dropped. Drops are logged and
recorded in `dropped` but never raised; the batch always completes.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable, List, Optional, TYPE_CHECKING

from ..formats.card_image import CardImage
from ..formats.errors import FormatError
from ..formats.nacp import Language
from ..formats.package import Package, find_content
from ..formats.vfs import VirtualFile
from ..models.container import ContainerKind, ContentType
from ..models.keys import KeySet
from ..models.manifest import ManifestEntry, SelectionManifest
from ..services.metadata_service import (
    format_display_label,
    get_application_meta,
    get_title_meta,
)

if TYPE_CHECKING:
    from ..services.interfaces import IFilesystemService


logger = logging.getLogger(__name__)


class ResolveError(Exception):
    """Base exception for a candidate file that can't be installed."""
    pass


class UnsupportedContainerKind(ResolveError):
    """The file extension is not a supported container."""
    pass


class OpenFailure(ResolveError):
    """The file or its container structure could not be read."""
    pass


class MissingRequiredContentUnit(ResolveError):
    """The package has no Meta content unit."""
    pass


class UnsupportedTitleType(ResolveError):
    """The title is neither an update nor add-on content."""
    pass


class MalformedMetadata(ResolveError):
    """The Meta content unit holds no readable content meta."""
    pass


@dataclass(frozen=True)
class DroppedFile:
    """A candidate that was left out of the manifest, and why."""
    path: str
    reason: ResolveError


class InstallController:
    """
    Controller for resolving install candidates.

    Coordinates between:
    - Filesystem service (opening candidate files)
    - Format parsers (card images, packages, content archives)
    - Metadata service (title and application metadata, labels)
    """

    def __init__(
        self,
        filesystem: "IFilesystemService",
        keys: Optional[KeySet] = None,
        language: Language = Language.AmericanEnglish,
    ):
        """
        Initialize the InstallController.

        Args:
            filesystem: Service used to open candidate paths
            keys: Key set for encrypted archives (empty if not provided)
            language: Preferred language for application names
        """
        self._filesystem = filesystem
        self._keys = keys or KeySet()
        self._language = language
        self._dropped: List[DroppedFile] = []

    @property
    def dropped(self) -> List[DroppedFile]:
        """Files dropped by the most recent `resolve` call."""
        return list(self._dropped)

    def resolve(self, paths: Iterable[str]) -> SelectionManifest:
        """
        Resolve candidate paths into a manifest.

        Args:
            paths: Candidate file paths, in display order

        Returns:
            SelectionManifest with one entry per installable file
        """
        manifest = SelectionManifest()
        self._dropped = []

        for path in paths:
            try:
                entry = self.resolve_file(path)
            except ResolveError as e:
                logger.info("Skipping %s: %s", path, e)
                self._dropped.append(DroppedFile(path, e))
                continue
            manifest.add(entry)

        logger.info(
            "Resolved %d installable file(s), dropped %d", len(manifest), len(self._dropped)
        )
        return manifest

    def resolve_file(self, path: str) -> ManifestEntry:
        """
        Resolve a single path into a manifest entry.

        Raises:
            ResolveError: If the file can't be installed
        """
        kind = ContainerKind.from_path(path)
        if kind is None:
            raise UnsupportedContainerKind(f"unsupported extension {PurePath(path).suffix!r}")

        file = self._filesystem.open_file(path)
        if file is None:
            raise OpenFailure("could not open file")

        with file:
            if not kind.is_package:
                return ManifestEntry(path, PurePath(path).name)

            try:
                label = self._label_package(self.open_package(file, kind))
            except OSError as e:
                raise OpenFailure(f"read error: {e}") from e

        return ManifestEntry(path, label)

    def open_package(self, file: VirtualFile, kind: ContainerKind) -> Package:
        """
        Unpack a card image or package file into a Package.

        Raises:
            OpenFailure: If the container can't be parsed
        """
        if not kind.is_package:
            raise OpenFailure(f"{kind.name} is not a package container")

        try:
            if kind is ContainerKind.SECURE_PACKAGE:
                return CardImage(file, self._keys).secure_partition()
            return Package(file, self._keys)
        except FormatError as e:
            raise OpenFailure(str(e)) from e

    def _label_package(self, package: Package) -> str:
        contents = package.contents_collapsed()

        meta = find_content(contents, ContentType.META)
        if meta is None:
            raise MissingRequiredContentUnit("no Meta content unit")

        title_meta = get_title_meta(meta)
        if title_meta is None:
            raise MalformedMetadata(f"no readable content meta in {meta.name}")

        if not title_meta.title_type.is_installable:
            raise UnsupportedTitleType(
                f"title {title_meta.title_id_hex} is {title_meta.title_type.value}"
            )

        control = find_content(contents, ContentType.CONTROL)
        application_meta = (
            get_application_meta(control, self._language) if control is not None else None
        )

        return format_display_label(title_meta, application_meta, package.name)
