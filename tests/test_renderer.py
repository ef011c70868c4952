"""Tests for color byte code SVG rendering."""

from colorbytecode.encoder import encode, encode_blocks
from colorbytecode.payload import ColorByteCodeData, EncodeOptions, RectArea
from colorbytecode.renderer import render_svg


def _record() -> ColorByteCodeData:
    return ColorByteCodeData(
        encode_options=EncodeOptions(grid_size=4, is_nega=True),
        areas=[RectArea(x=10, y=20, w=30, h=40)],
        size=(640, 480, 0),
    )


class TestRenderSVG:
    def test_render_svg_produces_valid_svg(self):
        svg = render_svg(_record(), 640, 480)
        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert "xmlns" in svg

    def test_render_svg_crisp_edges(self):
        svg = render_svg(_record(), 640, 480)
        assert 'shape-rendering="crispEdges"' in svg

    def test_render_svg_matches_raster_size(self):
        image = encode(_record(), 640, 480)
        svg = render_svg(_record(), 640, 480)
        assert f'width="{image.width}"' in svg
        assert f'height="{image.height}"' in svg

    def test_render_svg_one_rect_per_block(self):
        blocks, _ = encode_blocks(_record(), 640, 480)
        svg = render_svg(_record(), 640, 480)
        assert svg.count("<rect") == sum(1 for b in blocks if b is not None)

    def test_render_svg_uses_quantized_colors(self):
        svg = render_svg(_record(), 640, 480)
        for line in svg.splitlines():
            if "<rect" not in line:
                continue
            fill = line.split('fill="#')[1][:6]
            for i in range(0, 6, 2):
                assert fill[i : i + 2] in ("00", "55", "aa", "ff")
