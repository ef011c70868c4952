"""Pixel buffer helpers used by the layout engine.

Rasters are Pillow RGBA images with a transparent background. Sampling
works on a numpy view of the image so that many block centers can be read
without going through Pillow per pixel.

All coordinates are rounded half-up to the nearest integer before use.
"""

from __future__ import annotations

import math

import numpy as np
from PIL import Image, ImageDraw

from .quantizer import Pixel

TRANSPARENT = (0, 0, 0, 0)


def round_coord(value: float) -> int:
    """Round a pixel coordinate half-up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def create_raster(width: float, height: float) -> Image.Image:
    """Create a fully transparent RGBA raster."""
    return Image.new("RGBA", (round_coord(width), round_coord(height)), TRANSPARENT)


def fill_rect(
    image: Image.Image,
    x: float,
    y: float,
    w: float,
    h: float,
    pixel: Pixel,
) -> None:
    """Fill a rectangle with an opaque color.

    Args:
        image: Target raster, modified in place.
        x, y: Top-left corner.
        w, h: Size. The right and bottom edges are exclusive.
        pixel: (r, g, b) fill color.
    """
    x0 = round_coord(x)
    y0 = round_coord(y)
    x1 = round_coord(x + w)
    y1 = round_coord(y + h)
    if x1 <= x0 or y1 <= y0:
        return
    draw = ImageDraw.Draw(image)
    # ImageDraw rectangles include both corner pixels
    draw.rectangle([x0, y0, x1 - 1, y1 - 1], fill=(*pixel, 255))


def pixel_array(image: Image.Image) -> np.ndarray:
    """Return an (height, width, 3) uint8 array of the image's RGB channels."""
    return np.asarray(image.convert("RGB"))


def get_pixel(pixels: np.ndarray, x: float, y: float) -> Pixel:
    """Sample the color at (x, y), clamped to the raster bounds."""
    h, w = pixels.shape[:2]
    px = min(max(round_coord(x), 0), w - 1)
    py = min(max(round_coord(y), 0), h - 1)
    r, g, b = pixels[py, px, :3]
    return (int(r), int(g), int(b))
