"""Error types raised by the color byte code codec.

All errors subclass ValueError so callers that treat ValueError as bad
input (e.g. the HTTP layer returning 422) handle them without changes.
"""

from __future__ import annotations


class ColorByteCodeError(ValueError):
    """Base class for codec failures."""


class UnknownSymbolError(ColorByteCodeError):
    """A character outside the base64 alphabet was found."""


class UnsupportedVersionError(ColorByteCodeError):
    """The version block does not match a known frame layout."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported color byte code version: {version}")
        self.version = version


class MalformedPayloadError(ColorByteCodeError):
    """The payload text could not be decoded, even after padding repair."""


class InvalidPayloadError(ColorByteCodeError):
    """The decoded object is missing required fields."""
