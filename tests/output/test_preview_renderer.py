"""
Tests for output.renderer

Test Coverage:
- render(): Bitmap size, background, text ink
- Placeholders for unresolved textures, fills for packed textures,
  pixels for loose textures
- PreviewPage.to_bgra(): Byte order and length
"""

import pytest
from PIL import ImageColor

from obbook.assets import AssetIndex, resolve
from obbook.compiler import parse
from obbook.core.models import AssetEntry, AssetKind
from obbook.layout import LayoutConfig
from obbook.output import PreviewPage, render


def _render(source, index=None, width=400, height=300, dpi=96.0):
    return render(parse(source).nodes, index, width, height, dpi)


def _rgb(color):
    return ImageColor.getrgb(color)


class TestRender:
    """Tests for render()."""

    @pytest.mark.parametrize("width,height", [(400, 300), (1000, 700), (37, 23)])
    def test_render_when_size_requested_then_bitmap_has_that_size(self, width, height):
        page = _render("Hello world", width=width, height=height)
        assert isinstance(page, PreviewPage)
        assert page.image.size == (width, height)

    def test_render_when_size_not_positive_then_raises_error(self):
        with pytest.raises(ValueError):
            _render("x", width=0, height=100)

    def test_render_when_empty_source_then_blank_page(self):
        page = _render("")
        colors = page.image.getcolors()
        assert colors == [(400 * 300, _rgb(LayoutConfig().background_color))]

    def test_render_when_text_present_then_ink_drawn_inside_line(self):
        # Act
        page = _render("Hello")

        # Assert
        line = page.layout.lines[0]
        box = (line.left, line.top, line.right, line.bottom)
        region = page.image.crop(box)
        background = _rgb(LayoutConfig().background_color)
        assert any(color != background for _, color in region.getcolors(maxcolors=100000))

    def test_render_when_unresolved_image_then_placeholder_outline(self):
        # Act
        page = _render("<IMG src=book/x.dds width=10 height=10>")

        # Assert
        image = page.layout.images[0]
        assert (image.width, image.height) == (10, 10)
        outline = _rgb(LayoutConfig().placeholder_color)
        assert page.image.getpixel((image.x, image.y)) == outline
        assert page.image.getpixel((image.right - 1, image.bottom - 1)) == outline

    def test_render_when_packed_texture_then_filled_box(self):
        # Arrange
        index = AssetIndex()
        index.add(AssetEntry("Book/Packed.dds", AssetKind.TEXTURE, archive="Oblivion - Misc.bsa"))

        # Act
        page = _render("<IMG src=book/packed.dds width=20 height=20>", index)

        # Assert
        image = page.layout.images[0]
        center = (image.x + 10, image.y + 10)
        assert page.image.getpixel(center) == _rgb(LayoutConfig().texture_color)

    def test_render_when_loose_texture_then_texture_pixels_drawn(self, oblivion_root):
        # Arrange
        index = resolve(oblivion_root).index

        # Act
        page = _render("<IMG src=book/plain.dds>", index)

        # Assert
        image = page.layout.images[0]
        assert (image.width, image.height) == (20, 10)
        assert page.image.getpixel((image.x + 5, image.y + 5)) == (0, 0, 255)


class TestPreviewPage:
    """Tests for PreviewPage."""

    def test_to_bgra_when_called_then_four_bytes_per_pixel_in_bgra_order(self):
        # Arrange
        page = _render("", width=8, height=4)
        r, g, b = _rgb(LayoutConfig().background_color)

        # Act
        data = page.to_bgra()

        # Assert
        assert len(data) == page.stride * page.height == 8 * 4 * 4
        assert data[:4] == bytes([b, g, r, 255])
