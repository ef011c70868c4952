"""SVG rendering for color byte codes.

Produces the same block layout as encoder.encode, as vector <rect>
elements, for print output where the code is placed beneath an image
in a document. Placeholder cells are omitted so the background shows
through, as in the raster output.

Blocks are drawn with crispEdges so that renderers do not anti-alias
block borders into in-between colors.
"""

from __future__ import annotations

import math

import structlog

from .encoder import encode_blocks
from .payload import ColorByteCodeData
from .raster import round_coord

logger = structlog.get_logger(__name__)


def _rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert (r, g, b) to hex color string."""
    return f"#{r:02x}{g:02x}{b:02x}"


def render_svg(data: ColorByteCodeData, width: int, height: int) -> str:
    """Render a color byte code as an SVG string.

    Args:
        data: Record to embed.
        width: Width of the image the code belongs to.
        height: Height of that image (used to size the blocks).

    Returns:
        Complete SVG document as a string.
    """
    blocks, block_count_x = encode_blocks(data, width, height)
    block_width = width / block_count_x
    block_count_y = math.ceil(len(blocks) / block_count_x)
    code_height = block_width * block_count_y

    svg_parts: list[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'viewBox="0 0 {width} {code_height:.3f}" '
        f'width="{width}" height="{round_coord(code_height)}" '
        f'shape-rendering="crispEdges">',
    ]

    for i, color in enumerate(blocks):
        if color is None:
            continue
        x = (i % block_count_x) * block_width
        y = (block_count_y - i // block_count_x - 1) * block_width
        svg_parts.append(
            f'  <rect x="{x:.3f}" y="{y:.3f}" '
            f'width="{block_width + 1:.3f}" height="{block_width + 1:.3f}" '
            f'fill="{_rgb_to_hex(*color)}"/>'
        )

    svg_parts.append("</svg>")
    svg_content = "\n".join(svg_parts)

    logger.debug(
        "svg_rendered",
        block_count=sum(1 for b in blocks if b is not None),
        block_count_x=block_count_x,
        block_count_y=block_count_y,
    )

    return svg_content
