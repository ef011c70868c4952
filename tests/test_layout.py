"""Tests for the block grid layout (framing, rasterizing, reading back)."""

import numpy as np
import pytest
from PIL import Image

from colorbytecode.errors import MalformedPayloadError, UnsupportedVersionError
from colorbytecode.layout import (
    MIN_DRAWN_BLOCK_WIDTH,
    compute_block_layout,
    draw_blocks,
    frame_blocks,
    read_blocks,
    read_geometry,
)
from colorbytecode.quantizer import symbol_to_pixel
from colorbytecode.raster import fill_rect, pixel_array


def _data(length: int) -> list[tuple[int, int, int]]:
    """Distinct-looking data colors."""
    return [symbol_to_pixel((i * 7 + 3) % 64) for i in range(length)]


class TestComputeBlockLayout:
    def test_reference_size(self):
        assert compute_block_layout(400, 300) == (4, 100)

    def test_scales_with_long_edge(self):
        assert compute_block_layout(800, 600) == (8, 100)

    def test_portrait_uses_height(self):
        assert compute_block_layout(300, 900) == (9, 33)

    def test_rounds_block_width_up(self):
        assert compute_block_layout(513, 100) == (6, 85)

    def test_smallest_drawable_block(self):
        assert compute_block_layout(101, 101) == (MIN_DRAWN_BLOCK_WIDTH, 50)

    @pytest.mark.parametrize("width,height", [(100, 100), (50, 50), (16, 100)])
    def test_rejects_single_pixel_blocks(self, width, height):
        with pytest.raises(ValueError, match="too small"):
            compute_block_layout(width, height)


class TestFrameBlocks:
    def test_short_data_single_row(self):
        data = _data(2)
        blocks = frame_blocks(data, 8)
        assert len(blocks) == 8
        assert blocks[0] == symbol_to_pixel(0)  # bcx_hi
        assert blocks[1] == symbol_to_pixel(1)  # version
        assert blocks[2] == symbol_to_pixel(2)  # length_lo
        assert blocks[3] == symbol_to_pixel(0)  # length_hi
        assert blocks[4:6] == data
        assert blocks[6] is None
        assert blocks[7] == symbol_to_pixel(8)  # bcx_lo

    def test_long_data_splices_footer(self):
        data = _data(20)
        blocks = frame_blocks(data, 8)
        assert len(blocks) == 25
        assert blocks[4:7] == data[:3]
        assert blocks[7] == symbol_to_pixel(8)
        assert blocks[8:] == data[3:]
        assert None not in blocks

    def test_exactly_fills_row(self):
        # header + data == bcx - 1: footer lands in the last column, no padding
        data = _data(3)
        blocks = frame_blocks(data, 8)
        assert len(blocks) == 8
        assert None not in blocks
        assert blocks[7] == symbol_to_pixel(8)

    def test_block_count_split(self):
        blocks = frame_blocks(_data(10), 100)
        assert blocks[0] == symbol_to_pixel(1)  # 100 // 64
        assert blocks[99] == symbol_to_pixel(36)  # 100 % 64

    def test_length_split(self):
        blocks = frame_blocks(_data(130), 200)
        assert blocks[2] == symbol_to_pixel(130 % 64)
        assert blocks[3] == symbol_to_pixel(130 // 64)

    def test_rejects_narrow_row(self):
        with pytest.raises(ValueError, match="too narrow"):
            frame_blocks(_data(2), 4)

    def test_rejects_wide_row(self):
        with pytest.raises(ValueError, match="too wide"):
            frame_blocks(_data(2), 4096)

    def test_rejects_oversized_data(self):
        with pytest.raises(ValueError, match="Data too large"):
            frame_blocks([symbol_to_pixel(0)] * 4096, 100)


class TestDrawBlocks:
    def test_single_row_size(self):
        image = draw_blocks(frame_blocks(_data(2), 8), 8, 80)
        assert image.size == (80, 10)
        assert image.mode == "RGBA"

    def test_multi_row_size(self):
        image = draw_blocks(frame_blocks(_data(20), 8), 8, 80)
        assert image.size == (80, 40)

    def test_placeholder_is_transparent(self):
        image = draw_blocks(frame_blocks(_data(2), 8), 8, 80)
        assert image.getpixel((65, 5)) == (0, 0, 0, 0)

    def test_row_zero_is_bottom(self):
        image = draw_blocks(frame_blocks(_data(20), 8), 8, 80)
        # block 0 (bcx_hi) bottom-left, footer bottom-right
        assert image.getpixel((5, 35))[:3] == symbol_to_pixel(0)
        assert image.getpixel((75, 35))[:3] == symbol_to_pixel(8)
        # block 8 (data[3]) is the first block of the row above
        assert image.getpixel((5, 25))[:3] == _data(20)[3]

    def test_blocks_are_opaque(self):
        image = draw_blocks(frame_blocks(_data(2), 8), 8, 80)
        assert image.getpixel((5, 5))[3] == 255

    def test_rejects_blocks_narrower_than_two_pixels(self):
        with pytest.raises(ValueError, match="too small"):
            draw_blocks(frame_blocks(_data(2), 8), 8, 8)

    def test_two_pixel_blocks_read_back(self):
        data = _data(20)
        image = draw_blocks(frame_blocks(data, 8), 8, 16)
        assert read_blocks(pixel_array(image)) == data


class TestReadBlocks:
    @pytest.mark.parametrize("length", [2, 3, 4, 20])
    def test_roundtrip(self, length):
        data = _data(length)
        image = draw_blocks(frame_blocks(data, 8), 8, 80)
        assert read_blocks(pixel_array(image)) == data

    def test_roundtrip_fractional_block_width(self):
        data = _data(20)
        image = draw_blocks(frame_blocks(data, 8), 8, 83)
        assert read_blocks(pixel_array(image)) == data

    def test_multi_row_matches_single_row(self):
        short = _data(2)
        long = _data(20)
        short_img = draw_blocks(frame_blocks(short, 8), 8, 80)
        long_img = draw_blocks(frame_blocks(long, 8), 8, 80)
        assert read_blocks(pixel_array(short_img)) == short
        assert read_blocks(pixel_array(long_img)) == long

    def test_roundtrip_after_downscale(self):
        data = _data(20)
        image = draw_blocks(frame_blocks(data, 8), 8, 160)
        small = image.resize((80, image.height // 2), Image.Resampling.NEAREST)
        assert read_blocks(pixel_array(small)) == data


class TestReadGeometry:
    def test_geometry(self):
        image = draw_blocks(frame_blocks(_data(20), 8), 8, 80)
        geometry = read_geometry(pixel_array(image))
        assert geometry.block_count_x == 8
        assert geometry.block_width == 10
        assert geometry.length == 20
        assert geometry.block_count_y == 4
        assert geometry.code_height == 40

    def test_block_count_over_64(self):
        image = draw_blocks(frame_blocks(_data(10), 100), 100, 400)
        geometry = read_geometry(pixel_array(image))
        assert geometry.block_count_x == 100
        assert geometry.block_width == 4

    def test_unsupported_version(self):
        image = draw_blocks(frame_blocks(_data(2), 8), 8, 80)
        fill_rect(image, 10, 0, 10, 10, symbol_to_pixel(2))
        with pytest.raises(UnsupportedVersionError) as exc_info:
            read_geometry(pixel_array(image))
        assert exc_info.value.version == 2

    def test_blank_image_has_no_code(self):
        pixels = np.zeros((10, 80, 3), dtype=np.uint8)
        with pytest.raises(MalformedPayloadError, match="No color byte code"):
            read_geometry(pixels)

    def test_white_image_has_no_code(self):
        pixels = np.full((10, 80, 3), 255, dtype=np.uint8)
        with pytest.raises(MalformedPayloadError):
            read_geometry(pixels)
