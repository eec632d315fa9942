"""
Package (NSP) reader.

A package is a partition filesystem holding content archives (`*.nca`)
and, for title-key encrypted content, tickets (`*.tik`). Card images
expose their secure partition through the same class.
"""

import logging
from typing import Dict, List, Optional

from ..models.container import ContentType
from ..models.keys import KeySet
from .content_archive import ContentArchive
from .errors import FormatError
from .partition_filesystem import PartitionFilesystem
from .ticket import Ticket
from .vfs import VirtualFile

logger = logging.getLogger(__name__)

NCA_SUFFIX = ".nca"
TICKET_SUFFIX = ".tik"


class Package:
    """
    Parsed package.

    Archives that fail to parse are left out rather than failing the
    whole package; only an unreadable partition table is fatal.

    Attributes:
        name: Display name of the package (the source file's name)
        contents: Content archives in the order the package declares them
        tickets: Common tickets found in the package
        keys: Key set used for this package, including its ticket title keys

    Raises:
        FormatError: If the partition filesystem cannot be parsed
    """

    def __init__(self, file: VirtualFile, keys: Optional[KeySet] = None, name: Optional[str] = None):
        self.name = name or file.name
        self.partition = PartitionFilesystem(file)

        self.tickets = self._read_tickets()
        self.keys = (keys or KeySet()).with_title_keys({
            ticket.rights_id_hex: ticket.encrypted_title_key
            for ticket in self.tickets
        })

        self.contents = self._read_contents()

    def _read_tickets(self) -> List[Ticket]:
        tickets = []
        for file in self.partition.files:
            if not file.name.lower().endswith(TICKET_SUFFIX):
                continue
            try:
                ticket = Ticket.from_file(file)
            except FormatError as e:
                logger.debug("Skipping ticket %s in %s: %s", file.name, self.name, e)
                continue
            if not ticket.is_common:
                logger.debug("Ignoring personalized ticket %s in %s", file.name, self.name)
                continue
            tickets.append(ticket)
        return tickets

    def _read_contents(self) -> List[ContentArchive]:
        contents = []
        for file in self.partition.files:
            if not file.name.lower().endswith(NCA_SUFFIX):
                continue
            try:
                contents.append(ContentArchive(file, self.keys))
            except FormatError as e:
                logger.debug("Skipping content archive %s in %s: %s", file.name, self.name, e)
        return contents

    def contents_collapsed(self) -> List[ContentArchive]:
        """
        One archive per content type; a later archive replaces an earlier one.

        The result keeps the position where each type first appeared.
        """
        by_type: Dict[ContentType, ContentArchive] = {}
        for archive in self.contents:
            by_type[archive.content_type] = archive
        return list(by_type.values())

    def __repr__(self) -> str:
        return f"Package(name={self.name!r}, contents={len(self.contents)})"


def find_content(contents: List[ContentArchive], content_type: ContentType) -> Optional[ContentArchive]:
    """First archive of `content_type` in `contents`, or None."""
    return next((c for c in contents if c.content_type == content_type), None)
