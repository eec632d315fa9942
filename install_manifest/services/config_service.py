"""
ConfigService - Configuration file loading with migration support.

Loads config.json and upgrades older layouts in memory. The resolver
never writes configuration back to disk.
"""

import json
import logging
import os
from typing import Optional, Dict, Any

from ..models.config import ConfigData, CONFIG_VERSION, DEFAULT_KEYS_DIRECTORY

logger = logging.getLogger(__name__)


class ConfigService:
    """
    Service for reading application configuration.

    Provides:
    - Loading config.json
    - In-memory migration of old config formats
    - Safe handling of missing or corrupted files
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the config service.

        Args:
            config_path: Path to config.json. Defaults to 'config.json' in current dir.
        """
        self._config_path = config_path or "config.json"
        self._config: Optional[ConfigData] = None

    def get_config_path(self) -> str:
        """Get the path to the configuration file."""
        return self._config_path

    def load(self) -> ConfigData:
        """
        Load configuration from disk.

        If the file doesn't exist or is corrupted, returns default config.
        If the file is old format, migrates it in memory.

        Returns:
            ConfigData instance
        """
        if not os.path.exists(self._config_path):
            self._config = ConfigData()
            return self._config

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupted config {self._config_path}: {e}")
            self._config = ConfigData()
            return self._config
        except OSError as e:
            logger.warning(f"Failed to read config {self._config_path}: {e}")
            self._config = ConfigData()
            return self._config

        if not isinstance(raw_data, dict):
            logger.warning(f"Ignoring config {self._config_path}: not a JSON object")
            self._config = ConfigData()
            return self._config

        version = raw_data.get("_version", 0)
        if isinstance(version, bool) or not isinstance(version, int):
            logger.warning(f"Ignoring config {self._config_path}: bad _version {version!r}")
            self._config = ConfigData()
            return self._config

        if version < CONFIG_VERSION:
            raw_data = self._migrate(raw_data, version)

        self._config = ConfigData.from_dict(raw_data)
        return self._config

    def _migrate(self, data: Dict[str, Any], from_version: int) -> Dict[str, Any]:
        """
        Apply migrations sequentially from old version to current.

        Args:
            data: Raw config dictionary
            from_version: Version to migrate from

        Returns:
            Migrated config dictionary
        """
        migrations = {
            0: self._migrate_v0_to_v1,
        }

        current = dict(data)
        for v in range(from_version, CONFIG_VERSION):
            if v in migrations:
                current = migrations[v](current)

        current["_version"] = CONFIG_VERSION
        return current

    def _migrate_v0_to_v1(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Migrate from unversioned config to v1.

        Unversioned configs pointed at a single `keys_file` path; split it
        into a directory and a file name.
        NEVER removes keys - only adds or transforms.
        """
        result = dict(data)

        keys_file = result.get("keys_file")
        if keys_file and "keys_directory" not in result:
            directory, name = os.path.split(keys_file)
            result["keys_directory"] = directory or DEFAULT_KEYS_DIRECTORY
            result["prod_keys_file"] = name

        return result


class MockConfigService(ConfigService):
    """
    Mock ConfigService for testing.

    Holds config in memory instead of reading disk.
    """

    def __init__(self, config: Optional[ConfigData] = None):
        super().__init__("/dev/null")  # Won't actually be used
        self._config = config or ConfigData()

    def load(self) -> ConfigData:
        return self._config

    def reset(self) -> None:
        """Reset to default config."""
        self._config = ConfigData()
