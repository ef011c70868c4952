#!/usr/bin/env python3
"""Basic usage example for colorbytecode.

Demonstrates encoding a record into a color byte code, attaching it
beneath an image, and decoding it back (also after resizing).

Usage:
    python examples/basic_usage.py
"""

from PIL import Image

from colorbytecode import (
    ColorByteCodeData,
    EncodeOptions,
    RectArea,
    attach_to_image,
    decode,
    detach_from_image,
    encode,
)
from colorbytecode.layout import compute_block_layout
from colorbytecode.renderer import render_svg


def _record() -> ColorByteCodeData:
    return ColorByteCodeData(
        encode_options=EncodeOptions(grid_size=16, is_swap=True, is_nega=True),
        areas=[RectArea(x=0, y=0, w=800, h=600), RectArea(x=100, y=80, w=200, h=150)],
        size=(800, 600, 0),
    )


def example_basic_roundtrip():
    """Encode a record into a code strip and decode it back."""
    print("=" * 60)
    print("Example 1: Basic Encode/Decode Roundtrip")
    print("=" * 60)

    record = _record()
    block_width, block_count_x = compute_block_layout(800, 600)
    print(f"  Block width: {block_width}px, {block_count_x} blocks per row")

    code = encode(record, 800, 600)
    print(f"  Code size:   {code.width}x{code.height}")

    decoded = decode(code)
    print(f"  Match:       {decoded == record}")
    print()


def example_attach_and_resize():
    """Attach a code beneath an image, shrink it, and read it back."""
    print("=" * 60)
    print("Example 2: Attach, Resize, Detach")
    print("=" * 60)

    record = _record()
    photo = Image.new("RGB", (800, 600), (40, 90, 160))
    combined = attach_to_image(photo, record)
    print(f"  Combined:    {combined.width}x{combined.height}")

    small = combined.resize(
        (400, combined.height // 2), Image.Resampling.NEAREST
    )
    data, content = detach_from_image(small)
    print(f"  Resized:     {small.width}x{small.height}")
    print(f"  Content:     {content.width}x{content.height}")
    print(f"  Match:       {data == record}")
    print()


def example_svg():
    """Render the code as SVG for print layouts."""
    print("=" * 60)
    print("Example 3: SVG Output")
    print("=" * 60)

    svg = render_svg(_record(), 800, 600)
    print(f"  SVG length:  {len(svg)} chars")
    print(f"  Blocks:      {svg.count('<rect')}")
    print()


if __name__ == "__main__":
    example_basic_roundtrip()
    example_attach_and_resize()
    example_svg()
