"""
Exceptions raised by the container format parsers.
"""


class FormatError(Exception):
    """Base exception for malformed or unreadable container data."""
    pass


class InvalidMagicError(FormatError):
    """A structure did not start with the expected magic bytes."""
    pass


class TruncatedDataError(FormatError):
    """A structure extends past the end of its backing file."""
    pass


class MissingKeyError(FormatError):
    """A key needed to decrypt a structure is not in the key set."""
    pass


class UnsupportedFormatError(FormatError):
    """A structure uses a variant this package cannot read."""
    pass
