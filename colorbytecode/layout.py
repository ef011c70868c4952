"""Block grid layout for color byte codes.

The code is a grid of square blocks anchored at the bottom-left of the
raster. Block row 0 is the bottom-most row and rows grow upward; column 0
is the left-most column. Blocks are numbered row by row:

    index i -> column i % block_count_x, row i // block_count_x

Frame layout (version 1), in block index order:

    [bcx_hi, version, length_lo, length_hi, data..., pad..., bcx_lo]

- bcx_hi / bcx_lo: block_count_x // 64 and block_count_x % 64
- length: number of data blocks (before framing), split into two 6-bit digits
- bcx_lo always sits in the last column of row 0. If the data is too short
  to reach it, the gap is left unrendered (transparent).

A decoder reads the two bottom corners first to learn block_count_x, derives
the block width from the raster width, and from there reads the header and
the data. Nothing depends on the original resolution, so the code survives
uniform resizing as long as each block stays a few pixels wide.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import structlog
from PIL import Image

from .errors import MalformedPayloadError, UnsupportedVersionError
from .quantizer import SYMBOL_COUNT, Pixel, pixel_to_symbol, symbol_to_pixel
from .raster import create_raster, fill_rect, get_pixel

logger = structlog.get_logger(__name__)

# Layout constants (shared with decoder)
MIN_COLOR_BYTE_BLOCK_WIDTH = 4  # Block width (px) after resizing to MIN_RESIZED_IMAGE_WIDTH
MIN_RESIZED_IMAGE_WIDTH = 400  # Smallest long edge (px) the code must survive
MIN_DRAWN_BLOCK_WIDTH = 2  # Narrower blocks lose their centers to the neighbour overlap
FORMAT_VERSION = 1

HEADER_BLOCKS = 4  # bcx_hi, version, length_lo, length_hi
FRAME_BLOCKS = HEADER_BLOCKS + 1  # + bcx_lo footer

MIN_BLOCK_COUNT_X = FRAME_BLOCKS
MAX_BLOCK_COUNT_X = SYMBOL_COUNT * SYMBOL_COUNT - 1  # two 6-bit digits
MAX_DATA_BLOCKS = SYMBOL_COUNT * SYMBOL_COUNT - 1

Block = Pixel | None


@dataclass(frozen=True)
class BlockGeometry:
    """Geometry recovered from a rendered code.

    Attributes:
        block_count_x: Blocks per row.
        block_width: Block edge in pixels (may be fractional).
        length: Number of data blocks (before framing).
    """

    block_count_x: int
    block_width: float
    length: int

    @property
    def total_blocks(self) -> int:
        """Blocks to read: header, data and the bcx_lo footer."""
        return self.length + FRAME_BLOCKS

    @property
    def block_count_y(self) -> int:
        return math.ceil(self.total_blocks / self.block_count_x)

    @property
    def code_height(self) -> int:
        """Height in pixels of the rendered code."""
        return int(math.floor(self.block_width * self.block_count_y + 0.5))


def compute_block_layout(width: int, height: int) -> tuple[int, int]:
    """Choose block width and blocks per row for a target image size.

    The block width is sized so that if the image is later downscaled until
    its long edge is MIN_RESIZED_IMAGE_WIDTH, each block is still at least
    MIN_COLOR_BYTE_BLOCK_WIDTH pixels wide.

    Args:
        width: Target image width in pixels.
        height: Target image height in pixels.

    Returns:
        (block_width, block_count_x) tuple.

    Raises:
        ValueError: If the image is too small for blocks of
            MIN_DRAWN_BLOCK_WIDTH pixels.
    """
    long_edge = max(width, height)
    block_width = math.ceil(MIN_COLOR_BYTE_BLOCK_WIDTH * long_edge / MIN_RESIZED_IMAGE_WIDTH)
    if block_width < MIN_DRAWN_BLOCK_WIDTH:
        raise ValueError(
            f"Image too small: {block_width}px blocks for {width}x{height} "
            f"(min {MIN_DRAWN_BLOCK_WIDTH}px)"
        )
    block_count_x = width // block_width
    return block_width, block_count_x


def frame_blocks(colors: list[Pixel], block_count_x: int) -> list[Block]:
    """Wrap data colors with the header and footer blocks.

    Args:
        colors: Data block colors, one per base64 character.
        block_count_x: Blocks per row.

    Returns:
        Block list in index order. None entries are placeholders that
        must not be rendered.

    Raises:
        ValueError: If the row is too narrow or too wide for the frame,
            or the data does not fit in the length field.
    """
    if block_count_x < MIN_BLOCK_COUNT_X:
        raise ValueError(
            f"Image too narrow: {block_count_x} blocks per row (min {MIN_BLOCK_COUNT_X})"
        )
    if block_count_x > MAX_BLOCK_COUNT_X:
        raise ValueError(
            f"Image too wide: {block_count_x} blocks per row (max {MAX_BLOCK_COUNT_X})"
        )

    length = len(colors)
    if length > MAX_DATA_BLOCKS:
        raise ValueError(f"Data too large: {length} blocks (max {MAX_DATA_BLOCKS})")

    blocks: list[Block] = [
        symbol_to_pixel(block_count_x // SYMBOL_COUNT),
        symbol_to_pixel(FORMAT_VERSION),
        symbol_to_pixel(length % SYMBOL_COUNT),
        symbol_to_pixel(length // SYMBOL_COUNT),
    ]
    blocks.extend(colors)

    footer = symbol_to_pixel(block_count_x % SYMBOL_COUNT)
    if len(blocks) < block_count_x - 1:
        # Short data: leave the rest of row 0 empty, footer in the last column
        blocks.extend([None] * (block_count_x - len(blocks) - 1))
        blocks.append(footer)
    else:
        blocks.insert(block_count_x - 1, footer)

    logger.debug(
        "frame_built",
        data_blocks=length,
        total_blocks=len(blocks),
        block_count_x=block_count_x,
    )
    return blocks


def draw_blocks(blocks: list[Block], block_count_x: int, width: int) -> Image.Image:
    """Rasterize a framed block list.

    The block width is width / block_count_x, so the code always spans the
    full width. Each block is drawn one pixel larger than its cell so
    neighbours overlap instead of leaving seams.

    Args:
        blocks: Framed block list from frame_blocks.
        block_count_x: Blocks per row.
        width: Raster width in pixels.

    Returns:
        RGBA raster of size width x round(block_width * block_count_y).

    Raises:
        ValueError: If blocks would be narrower than MIN_DRAWN_BLOCK_WIDTH.
    """
    block_width = width / block_count_x
    if block_width < MIN_DRAWN_BLOCK_WIDTH:
        raise ValueError(
            f"Image too small: {block_width:.2f}px blocks (min {MIN_DRAWN_BLOCK_WIDTH}px)"
        )
    block_count_y = math.ceil(len(blocks) / block_count_x)

    image = create_raster(width, block_width * block_count_y)
    for i, color in enumerate(blocks):
        if color is None:
            continue
        x = (i % block_count_x) * block_width
        y = (block_count_y - i // block_count_x - 1) * block_width
        fill_rect(image, x, y, block_width + 1, block_width + 1, color)

    logger.debug(
        "blocks_drawn",
        block_width=round(block_width, 3),
        block_count_x=block_count_x,
        block_count_y=block_count_y,
        size=f"{image.width}x{image.height}",
    )
    return image


def _block_center(
    index: int, block_count_x: int, block_width: float, height: int
) -> tuple[float, float]:
    """Pixel position of a block center; rows are counted from the bottom."""
    x = (index % block_count_x) * block_width + block_width / 2
    y = height - (index // block_count_x) * block_width - block_width / 2
    return x, y


def _sample_block(
    pixels: np.ndarray, index: int, block_count_x: int, block_width: float
) -> Pixel:
    return get_pixel(pixels, *_block_center(index, block_count_x, block_width, pixels.shape[0]))


def read_geometry(pixels: np.ndarray) -> BlockGeometry:
    """Recover block geometry and data length from a rendered code.

    Args:
        pixels: (height, width, 3) array with the code in its bottom rows.

    Returns:
        BlockGeometry for the code.

    Raises:
        MalformedPayloadError: If the corner blocks do not describe a grid.
        UnsupportedVersionError: If the version block is not 1.
    """
    height, width = pixels.shape[:2]

    hi = pixel_to_symbol(get_pixel(pixels, 0, height - 1))
    lo = pixel_to_symbol(get_pixel(pixels, width - 1, height - 1))
    block_count_x = hi * SYMBOL_COUNT + lo
    if block_count_x < MIN_BLOCK_COUNT_X or block_count_x > width:
        raise MalformedPayloadError(
            f"No color byte code found: {block_count_x} blocks per row for width {width}"
        )
    block_width = width / block_count_x

    version = pixel_to_symbol(_sample_block(pixels, 1, block_count_x, block_width))
    # Only version 1 is defined; a new layout would branch here
    if version != FORMAT_VERSION:
        raise UnsupportedVersionError(version)

    length_lo, length_hi = (
        pixel_to_symbol(_sample_block(pixels, i, block_count_x, block_width)) for i in (2, 3)
    )
    geometry = BlockGeometry(
        block_count_x=block_count_x,
        block_width=block_width,
        length=length_lo + length_hi * SYMBOL_COUNT,
    )
    logger.debug(
        "geometry_read",
        block_count_x=block_count_x,
        block_width=round(block_width, 3),
        length=geometry.length,
    )
    return geometry


def read_blocks(pixels: np.ndarray, geometry: BlockGeometry | None = None) -> list[Pixel]:
    """Sample the data block colors of a rendered code.

    Args:
        pixels: (height, width, 3) array with the code in its bottom rows.
        geometry: Geometry from read_geometry. Read from pixels if omitted.

    Returns:
        Data block colors in encode order, header and footer stripped.
    """
    if geometry is None:
        geometry = read_geometry(pixels)

    bcx = geometry.block_count_x
    length = geometry.length

    colors = [
        _sample_block(pixels, i, bcx, geometry.block_width) for i in range(geometry.total_blocks)
    ]

    if length + HEADER_BLOCKS < bcx:
        # Data fits in row 0 before the footer column
        return colors[HEADER_BLOCKS : HEADER_BLOCKS + length]
    return colors[HEADER_BLOCKS : bcx - 1] + colors[bcx:]
