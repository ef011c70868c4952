"""Object <-> base64 text conversion with trailing padding repair.

Objects are packed with msgpack and the bytes are base64 encoded. The
text is then carried one character per block.

The padding character "=" has no block color of its own and comes back
from the grid as "A" (symbol 0). Decoding therefore tries the text as-is
first and, on failure, turns trailing "A"s back into "=" one at a time.

Known limitation: a genuine trailing "A" in a corrupted text looks exactly
like recovered padding. There is no checksum to tell them apart.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

import msgpack
import structlog

from .errors import MalformedPayloadError
from .symbols import BASE64_ALPHABET, PADDING_CHAR

logger = structlog.get_logger(__name__)

# Base64 padding is at most 2 characters; one extra attempt as a safety margin
MAX_PADDING_RETRIES = 3

SUBSTITUTE_CHAR = BASE64_ALPHABET[0]

_DECODE_ERRORS = (
    binascii.Error,
    ValueError,
    TypeError,
    msgpack.ExtraData,
    msgpack.FormatError,
    msgpack.StackError,
)


def object_to_text(obj: Any) -> str:
    """Pack an object with msgpack and return the base64 text."""
    packed = msgpack.packb(obj, use_bin_type=True)
    return base64.b64encode(packed).decode("ascii")


def text_to_object(text: str) -> Any:
    """Decode base64 text and unpack it with msgpack, without repair.

    Raises:
        binascii.Error, ValueError, msgpack errors: On malformed input.
    """
    data = base64.b64decode(text, validate=True)
    return msgpack.unpackb(data, raw=False)


def restore_padding(text: str, count: int) -> str:
    """Replace the last `count` characters of text with padding."""
    return text[: len(text) - count] + PADDING_CHAR * count


def decode_with_recovery(text: str) -> Any:
    """Decode base64 text to an object, repairing lost trailing padding.

    Tries the text as-is. On failure, the k-th character from the end
    (k = 1, 2, 3) is reinterpreted as padding, but only if it is "A",
    the character that lost padding turns into.

    Args:
        text: Base64 text read back from the blocks.

    Returns:
        The unpacked object.

    Raises:
        MalformedPayloadError: If the text cannot be decoded.
    """
    candidate = text
    for retry in range(MAX_PADDING_RETRIES + 1):
        try:
            obj = text_to_object(candidate)
        except _DECODE_ERRORS as e:
            if retry >= MAX_PADDING_RETRIES:
                logger.warning("padding_recovery_exhausted", retries=retry, error=str(e))
                raise MalformedPayloadError(
                    f"Could not decode color byte code after {retry} padding retries"
                ) from e

            # Only a substituted "A" can be lost padding
            suspect = candidate[-(retry + 1) : len(candidate) - retry]
            if suspect != SUBSTITUTE_CHAR:
                logger.warning(
                    "padding_recovery_failed",
                    retry=retry,
                    suspect=suspect,
                    error=str(e),
                )
                raise MalformedPayloadError(
                    f"Could not decode color byte code: {e}"
                ) from e

            candidate = restore_padding(candidate, retry + 1)
            continue

        if retry:
            logger.info("padding_recovered", padding=retry)
        return obj

    # Unreachable: the loop either returns or raises
    raise MalformedPayloadError("Could not decode color byte code")
