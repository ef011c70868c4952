"""Color byte code encoder.

Encoding pipeline:
1. Convert the record to its compact wire object
2. Pack with msgpack and base64 encode
3. Map each base64 character to a block color
4. Choose the block size from the target image size
5. Frame the colors with the geometry header/footer and rasterize

The resulting raster is as wide as the target image and can be printed
beneath it (see attach_to_image) or composited onto its bottom rows.
"""

from __future__ import annotations

import io

import structlog
from PIL import Image

from .layout import compute_block_layout, draw_blocks, frame_blocks
from .padding import object_to_text
from .payload import ColorByteCodeData, to_wire
from .raster import TRANSPARENT
from .symbols import text_to_colors

logger = structlog.get_logger(__name__)


def encode_blocks(data: ColorByteCodeData, width: int, height: int) -> tuple[list, int]:
    """Build the framed block list for a record.

    Returns:
        (blocks, block_count_x) tuple; see layout.frame_blocks.
    """
    text = object_to_text(to_wire(data))
    colors = text_to_colors(text)
    block_width, block_count_x = compute_block_layout(width, height)

    logger.debug(
        "encoding_color_byte_code",
        text_length=len(text),
        block_width=block_width,
        block_count_x=block_count_x,
        image=f"{width}x{height}",
    )

    return frame_blocks(colors, block_count_x), block_count_x


def encode(data: ColorByteCodeData, width: int, height: int) -> Image.Image:
    """Encode a record into a color byte code raster.

    Args:
        data: Record to embed.
        width: Width of the image the code belongs to (and of the code).
        height: Height of that image; only used to size the blocks.

    Returns:
        Transparent RGBA raster containing the code.

    Raises:
        ValueError: If the image is too narrow or the payload too large.
    """
    blocks, block_count_x = encode_blocks(data, width, height)
    return draw_blocks(blocks, block_count_x, width)


def encode_png(data: ColorByteCodeData, width: int, height: int) -> bytes:
    """Encode a record and return the code as PNG bytes."""
    image = encode(data, width, height)
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    png_bytes = buf.getvalue()

    logger.debug("png_rendered", size=f"{image.width}x{image.height}", bytes=len(png_bytes))
    return png_bytes


def attach_to_image(image: Image.Image, data: ColorByteCodeData) -> Image.Image:
    """Print a color byte code beneath an image.

    The code is sized for the image and appended below it, so the result
    is as wide as the image and taller by the code height. decode() reads
    the result directly.

    Args:
        image: Source image (any mode).
        data: Record to embed.

    Returns:
        New RGBA image: the source on top, the code beneath.
    """
    source = image.convert("RGBA")
    code = encode(data, source.width, source.height)

    combined = Image.new("RGBA", (source.width, source.height + code.height), TRANSPARENT)
    combined.paste(source, (0, 0))
    combined.alpha_composite(code, dest=(0, source.height))

    logger.debug(
        "code_attached",
        image=f"{source.width}x{source.height}",
        code_height=code.height,
    )
    return combined
