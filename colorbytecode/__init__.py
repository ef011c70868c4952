"""Color byte code -- block-grid color codec for image transform metadata.

Embeds a small structured record (transform options, rectangular areas,
image size) into a strip of solid-colored blocks that is printed beneath,
or composited onto, an image. The strip describes its own block width and
payload length, so it can still be read after the image has been resized.

Each block carries one base64 symbol, quantized to one of 64 colors
(4 levels per RGB channel).
"""

from .decoder import decode, decode_image, detach_from_image
from .encoder import attach_to_image, encode, encode_png
from .errors import (
    ColorByteCodeError,
    InvalidPayloadError,
    MalformedPayloadError,
    UnknownSymbolError,
    UnsupportedVersionError,
)
from .payload import ColorByteCodeData, EncodeOptions, RectArea

__all__ = [
    "ColorByteCodeData",
    "ColorByteCodeError",
    "EncodeOptions",
    "InvalidPayloadError",
    "MalformedPayloadError",
    "RectArea",
    "UnknownSymbolError",
    "UnsupportedVersionError",
    "attach_to_image",
    "decode",
    "decode_image",
    "detach_from_image",
    "encode",
    "encode_png",
]
