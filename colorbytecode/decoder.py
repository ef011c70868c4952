"""Color byte code decoder.

Decodes a color byte code back to its record by:
1. Reading block_count_x from the two bottom corner blocks
2. Checking the version block and reading the data length
3. Sampling each data block center and classifying its color
4. Joining the symbols into base64 text (repairing lost padding)
5. Unpacking with msgpack and validating the record

The code must occupy the bottom rows of the image and span its full
width; anything above it (e.g. the image it was attached to) is ignored.
"""

from __future__ import annotations

import io
from dataclasses import dataclass

import numpy as np
import structlog
from PIL import Image

from .errors import ColorByteCodeError
from .layout import BlockGeometry, read_blocks, read_geometry
from .padding import decode_with_recovery
from .payload import ColorByteCodeData, from_wire
from .raster import pixel_array
from .symbols import colors_to_text

logger = structlog.get_logger(__name__)


@dataclass
class DecodeResult:
    """Result of decoding a color byte code image.

    Attributes:
        data: Decoded record, or None if decode failed.
        error: Error message if decode failed.
    """

    data: ColorByteCodeData | None
    error: str | None = None


def _as_pixels(image: Image.Image | np.ndarray) -> np.ndarray:
    if isinstance(image, np.ndarray):
        return image
    return pixel_array(image)


def _decode_pixels(pixels: np.ndarray) -> tuple[BlockGeometry, ColorByteCodeData]:
    geometry = read_geometry(pixels)
    text = colors_to_text(read_blocks(pixels, geometry))

    logger.debug("color_byte_code_read", length=geometry.length, text_length=len(text))

    return geometry, from_wire(decode_with_recovery(text))


def decode(image: Image.Image | np.ndarray) -> ColorByteCodeData:
    """Decode the color byte code in the bottom rows of an image.

    Args:
        image: Pillow image, or an (height, width, 3+) pixel array.

    Returns:
        The decoded record.

    Raises:
        UnsupportedVersionError: If the code uses an unknown layout version.
        MalformedPayloadError: If no code is found or its text cannot be decoded.
        InvalidPayloadError: If the decoded record is incomplete.
    """
    _geometry, data = _decode_pixels(_as_pixels(image))
    return data


def detach_from_image(image: Image.Image) -> tuple[ColorByteCodeData, Image.Image]:
    """Decode a code printed beneath an image and strip it off.

    Args:
        image: Image produced by attach_to_image (possibly resized).

    Returns:
        (record, image without the code rows) tuple.
    """
    geometry, data = _decode_pixels(_as_pixels(image))

    content_height = max(0, image.height - geometry.code_height)
    logger.debug("code_detached", code_height=geometry.code_height, content_height=content_height)
    return data, image.crop((0, 0, image.width, content_height))


def decode_image(image_bytes: bytes) -> DecodeResult:
    """Decode a color byte code from encoded image bytes.

    Supports any format Pillow can open (PNG recommended; lossy formats
    may shift block colors across quantization levels).

    Args:
        image_bytes: Raw image bytes.

    Returns:
        DecodeResult with the record, or an error message.
    """
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except Exception as e:
        logger.warning("decode_image_open_failed", error=str(e))
        return DecodeResult(data=None, error=f"Cannot open image: {e}")

    try:
        data = decode(img)
    except ColorByteCodeError as e:
        logger.warning("decode_failed", error=str(e), error_type=type(e).__name__)
        return DecodeResult(data=None, error=str(e))

    logger.info("decode_success", areas=len(data.areas), size=data.size)
    return DecodeResult(data=data)
