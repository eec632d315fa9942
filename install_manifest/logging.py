"""
Install manifest logging

The controller reports every dropped file at INFO and the parsers explain
skipped archives and tickets at DEBUG. By default only warnings (corrupt
config, malformed key lines) reach the console.
"""

import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models.config import ConfigData

# Module loggers (install_manifest.formats.*, ...) inherit from this one
logger = logging.getLogger("install_manifest")

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Enough to see why a file was left out of the manifest
VERBOSE_LEVEL = logging.INFO


def configure_logging(
    level: int = logging.WARNING,
    format_str: Optional[str] = None,
    date_format: Optional[str] = None,
):
    """
    Install a single stderr handler on the package logger.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO)
        format_str: Log message format string
        date_format: Date format string
    """
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            format_str or DEFAULT_FORMAT,
            datefmt=date_format or DEFAULT_DATE_FORMAT,
        )
    )

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def set_debug_enabled(enabled: bool):
    """Switch between debug output and warnings only."""
    logger.setLevel(logging.DEBUG if enabled else logging.WARNING)


def is_debug_enabled() -> bool:
    return logger.level <= logging.DEBUG


def configure_from_config(config: "ConfigData", debug: bool = False, verbose: bool = False) -> int:
    """
    Apply the logging preference of a loaded config.

    Args:
        config: Loaded configuration; `debug_logging` turns on debug output
        debug: Command-line override that forces debug output
        verbose: Report dropped files without full debug output

    Returns:
        The level now set on the package logger
    """
    if debug or config.debug_logging:
        set_debug_enabled(True)
    elif verbose:
        logger.setLevel(VERBOSE_LEVEL)
    else:
        set_debug_enabled(False)
    return logger.level


# Warnings only until a config is applied
configure_logging()
