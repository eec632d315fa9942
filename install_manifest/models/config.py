"""
Configuration model for the install manifest resolver.

Represents the config.json structure. The resolver only ever reads it.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict


# Current config version - increment when schema changes
CONFIG_VERSION = 1

DEFAULT_KEYS_DIRECTORY = os.path.join("~", ".switch")
DEFAULT_LANGUAGE = "AmericanEnglish"


@dataclass
class ConfigData:
    """
    Main configuration data structure.

    Migration support: add new fields with defaults, never remove fields.
    """
    _version: int = CONFIG_VERSION

    # Directory holding the keys files
    keys_directory: str = DEFAULT_KEYS_DIRECTORY
    prod_keys_file: str = "prod.keys"
    title_keys_file: str = "title.keys"

    # Preferred language for application names (NACP language entry name)
    language: str = DEFAULT_LANGUAGE

    debug_logging: bool = False

    @property
    def prod_keys_path(self) -> str:
        return os.path.join(os.path.expanduser(self.keys_directory), self.prod_keys_file)

    @property
    def title_keys_path(self) -> str:
        return os.path.join(os.path.expanduser(self.keys_directory), self.title_keys_file)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_version": self._version,
            "keys_directory": self.keys_directory,
            "prod_keys_file": self.prod_keys_file,
            "title_keys_file": self.title_keys_file,
            "language": self.language,
            "debug_logging": self.debug_logging,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigData":
        """Create from dictionary, handling missing fields gracefully."""
        return cls(
            _version=data.get("_version", 0),
            keys_directory=data.get("keys_directory", DEFAULT_KEYS_DIRECTORY),
            prod_keys_file=data.get("prod_keys_file", "prod.keys"),
            title_keys_file=data.get("title_keys_file", "title.keys"),
            language=data.get("language", DEFAULT_LANGUAGE),
            debug_logging=bool(data.get("debug_logging", False)),
        )
