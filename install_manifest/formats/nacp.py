"""
Control property (NACP) parser.

control.nacp sits at the root of a Control archive's RomFS and carries
the per-language application names and the display version.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional

from .errors import TruncatedDataError
from .vfs import VirtualFile

NACP_SIZE = 0x4000
LANGUAGE_ENTRY_SIZE = 0x300
NAME_SIZE = 0x200
PUBLISHER_SIZE = 0x100
DISPLAY_VERSION_OFFSET = 0x3060
DISPLAY_VERSION_SIZE = 0x10


class Language(IntEnum):
    """Order of language entries in the NACP title table."""
    AmericanEnglish = 0
    BritishEnglish = 1
    Japanese = 2
    French = 3
    German = 4
    LatinAmericanSpanish = 5
    Spanish = 6
    Italian = 7
    Dutch = 8
    CanadianFrench = 9
    Portuguese = 10
    Russian = 11
    Korean = 12
    TraditionalChinese = 13
    SimplifiedChinese = 14
    BrazilianPortuguese = 15

    @classmethod
    def from_name(cls, name: str) -> "Language":
        """Case-insensitive lookup; unknown names give AmericanEnglish."""
        for language in cls:
            if language.name.lower() == name.replace(" ", "").replace("_", "").lower():
                return language
        return cls.AmericanEnglish


@dataclass
class LanguageEntry:
    application_name: str
    publisher: str


def _c_string(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


class ControlProperty:
    """Parsed NACP."""

    def __init__(self, data: bytes):
        if len(data) < NACP_SIZE:
            raise TruncatedDataError(f"NACP needs {NACP_SIZE:#x} bytes, got {len(data):#x}")

        self.languages: List[LanguageEntry] = []
        for i in range(len(Language)):
            start = i * LANGUAGE_ENTRY_SIZE
            self.languages.append(LanguageEntry(
                application_name=_c_string(data[start:start + NAME_SIZE]),
                publisher=_c_string(data[start + NAME_SIZE:start + LANGUAGE_ENTRY_SIZE]),
            ))

        self.version_string = _c_string(
            data[DISPLAY_VERSION_OFFSET:DISPLAY_VERSION_OFFSET + DISPLAY_VERSION_SIZE]
        )

    @classmethod
    def from_file(cls, file: VirtualFile) -> "ControlProperty":
        return cls(file.read(NACP_SIZE, 0))

    def language_entry(self, language: Language = Language.AmericanEnglish) -> Optional[LanguageEntry]:
        """
        Entry for `language`, or the first entry with a name if that one is blank.
        """
        preferred = self.languages[language]
        if preferred.application_name:
            return preferred
        for entry in self.languages:
            if entry.application_name:
                return entry
        return None

    def application_name(self, language: Language = Language.AmericanEnglish) -> str:
        entry = self.language_entry(language)
        return entry.application_name if entry else ""

    def publisher(self, language: Language = Language.AmericanEnglish) -> str:
        entry = self.language_entry(language)
        return entry.publisher if entry else ""
