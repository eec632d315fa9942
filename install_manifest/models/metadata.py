"""
Metadata extracted from content units.
"""

from dataclasses import dataclass

from .container import TitleType


@dataclass(frozen=True)
class TitleMeta:
    """Title identity read from a Meta content unit."""
    title_type: TitleType
    title_version: int
    title_id: int = 0

    @property
    def title_id_hex(self) -> str:
        return f"{self.title_id:016X}"


@dataclass(frozen=True)
class ApplicationMeta:
    """Localized display metadata read from a Control content unit."""
    application_name: str
    version_string: str
    publisher: str = ""
