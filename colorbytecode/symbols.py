"""Conversion between base64 text and block colors.

One character becomes one block color. The base64 alphabet has exactly
64 data characters, matching the 64 quantized colors.

The padding sentinel "=" has no color of its own: it is rendered with the
color of symbol 0, so it reads back as "A". The padding repair in
padding.py undoes that substitution.
"""

from __future__ import annotations

from .errors import UnknownSymbolError
from .quantizer import Pixel, pixel_to_symbol, symbol_to_pixel

BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PADDING_CHAR = "="

_SYMBOL_BY_CHAR: dict[str, int] = {c: i for i, c in enumerate(BASE64_ALPHABET)}
# "=" sits at index 64, which wraps to symbol 0
_SYMBOL_BY_CHAR[PADDING_CHAR] = 0


def char_to_symbol(char: str) -> int:
    """Return the symbol for a base64 character.

    Raises:
        UnknownSymbolError: If char is not in the base64 alphabet.
    """
    try:
        return _SYMBOL_BY_CHAR[char]
    except KeyError:
        raise UnknownSymbolError(f"Unknown base64 character: {char!r}") from None


def symbol_to_char(symbol: int) -> str:
    """Return the base64 character for a symbol [0-63]."""
    if not 0 <= symbol < len(BASE64_ALPHABET):
        raise UnknownSymbolError(f"Symbol out of range: {symbol}")
    return BASE64_ALPHABET[symbol]


def text_to_colors(text: str) -> list[Pixel]:
    """Convert base64 text to one block color per character."""
    return [symbol_to_pixel(char_to_symbol(c)) for c in text]


def colors_to_text(colors: list[tuple[int, ...]]) -> str:
    """Convert sampled block colors back to base64 text."""
    return "".join(symbol_to_char(pixel_to_symbol(c)) for c in colors)
