"""
Tests for layout.flow and layout.config

Test Coverage:
- LayoutConfig: validation, fit(), DPI scaling
- layout_page(): wrapping, BR, DIV alignment scoping, FONT variants
- Inline images: explicit, intrinsic and default sizes, baseline placement,
  oversized boxes, placeholders
- Clipping at the bottom margin
"""

from pathlib import Path

import pytest

from obbook.assets import AssetIndex, resolve
from obbook.compiler import parse
from obbook.core.models import AssetEntry, AssetKind, Severity, Stage
from obbook.layout import LayoutConfig, PlacedImage, layout_page
from obbook.layout.fonts import FontBook, variant_for_entry


def _layout(source, index=None, config=None):
    return layout_page(parse(source).nodes, index or AssetIndex(), config or LayoutConfig())


class TestLayoutConfig:
    """Tests for LayoutConfig."""

    def test_init_when_margins_exceed_width_then_raises_error(self):
        with pytest.raises(ValueError, match="Margins exceed page width"):
            LayoutConfig(page_width=80, margin_left=50, margin_right=50)

    def test_init_when_dpi_not_positive_then_raises_error(self):
        with pytest.raises(ValueError, match="dpi must be positive"):
            LayoutConfig(dpi=0)

    def test_fit_when_page_large_enough_then_default_margins_kept(self):
        config = LayoutConfig.fit(1000, 700)
        assert config.content_left == 50
        assert config.available_width == 900

    def test_fit_when_page_too_small_then_margins_dropped(self):
        config = LayoutConfig.fit(60, 40)
        assert config.available_width == 60
        assert config.available_height == 40

    def test_fit_when_size_not_positive_then_raises_error(self):
        with pytest.raises(ValueError, match="page_width"):
            LayoutConfig.fit(0, 100)

    def test_px_when_double_dpi_then_double_size(self):
        config = LayoutConfig(dpi=192)
        assert config.px(10) == 20
        assert config.content_top == 80


class TestLayoutText:
    """Tests for text flow."""

    def test_layout_when_long_text_then_wraps_within_content_width(self):
        # Arrange
        config = LayoutConfig(page_width=240, page_height=800, margin_left=20, margin_right=20)
        source = " ".join(["word"] * 60)

        # Act
        page = _layout(source, config=config).page

        # Assert
        assert page.line_count > 1
        for line in page.lines:
            assert line.left >= config.content_left
            assert line.right <= config.content_right

    def test_layout_when_word_wider_than_line_then_split(self):
        config = LayoutConfig(page_width=120, page_height=800, margin_left=10, margin_right=10)
        page = _layout("W" * 80, config=config).page
        assert page.line_count > 1
        assert "".join(t.text for t in page.texts) == "W" * 80

    def test_layout_when_whitespace_runs_then_single_words(self):
        page = _layout("Hello \n\n   world").page
        assert [t.text for t in page.texts] == ["Hello", "world"]
        assert page.line_count == 1

    def test_layout_when_br_then_forced_lines_and_empty_line_kept(self):
        # Act
        page = _layout("one<BR><BR>two").page

        # Assert
        assert [line.text for line in page.lines] == ["one", "", "two"]
        assert page.lines[1].height > 0
        assert page.lines[0].top < page.lines[1].top < page.lines[2].top

    def test_layout_when_same_input_twice_then_identical(self):
        source = '<DIV align="center">Title</DIV>Some body text<BR><IMG src=book/x.dds>'
        assert _layout(source).page == _layout(source).page


class TestLayoutAlignment:
    """Tests for DIV alignment scoping."""

    def test_layout_when_nested_divs_then_alignment_restored_after_close(self):
        # Arrange
        config = LayoutConfig()
        source = '<DIV align="center">A<DIV align="right">B</DIV>C</DIV>'

        # Act
        page = _layout(source, config=config).page

        # Assert
        assert [line.text for line in page.lines] == ["A", "B", "C"]
        a, b, c = page.lines
        assert (a.align, b.align, c.align) == ("center", "right", "center")
        assert b.right == config.content_right
        for line in (a, c):
            assert line.left == config.content_left + (config.available_width - line.width) // 2

    def test_layout_when_no_div_then_left_aligned(self):
        config = LayoutConfig()
        line = _layout("plain", config=config).page.lines[0]
        assert line.align == "left"
        assert line.left == config.content_left

    def test_layout_when_unknown_alignment_then_enclosing_alignment_kept(self):
        page = _layout('<DIV align="right"><DIV align="middle">x</DIV></DIV>').page
        assert page.lines[0].align == "right"


class TestLayoutFonts:
    """Tests for FONT face selection."""

    @pytest.fixture
    def index(self):
        index = AssetIndex()
        index.add(AssetEntry("Kingthings_Regular.fnt", AssetKind.FONT, Path("/d/a.fnt")))
        index.add(AssetEntry("Kingthings_Shadowed.fnt", AssetKind.FONT, Path("/d/b.fnt")))
        index.add(AssetEntry("Tahoma_Bold_Small.fnt", AssetKind.FONT, Path("/d/c.fnt")))
        return index

    def test_layout_when_small_face_then_smaller_font_size(self, index):
        page = _layout("big <FONT face=3>small</FONT> big", index).page
        sizes = {t.text: t.font_size for t in page.texts}
        assert sizes["small"] == 16
        assert sizes["big"] == 20

    def test_layout_when_shadowed_face_then_shadow_flag(self, index):
        page = _layout("<FONT face=2>shade</FONT>plain", index).page
        shadows = {t.text: t.shadow for t in page.texts}
        assert shadows == {"shade": True, "plain": False}

    def test_layout_when_face_out_of_range_then_default_variant(self, index):
        page = _layout("<FONT face=9>x</FONT>", index).page
        assert page.texts[0].font_size == 20
        assert not page.texts[0].shadow

    def test_variant_for_entry_when_plain_name_then_full_size(self):
        variant = variant_for_entry(AssetEntry("Handwritten.fnt", AssetKind.FONT))
        assert variant.scale == 1.0
        assert not variant.shadow

    def test_font_book_when_text_measured_then_positive_width(self):
        book = FontBook(AssetIndex(), LayoutConfig())
        variant = book.variant(None)
        assert book.measure(variant, "Hello") > book.measure(variant, "H") > 0


class TestLayoutImages:
    """Tests for inline image boxes."""

    def test_layout_when_unresolved_with_size_then_placeholder_of_that_size(self):
        # Act
        result = _layout('<IMG src="book/x.dds" width=10 height=12>')

        # Assert
        (image,) = result.page.images
        assert isinstance(image, PlacedImage)
        assert image.placeholder
        assert (image.width, image.height) == (10, 12)

    def test_layout_when_higher_dpi_then_box_scaled(self):
        result = _layout("<IMG src=book/x.dds width=10 height=12>", config=LayoutConfig(dpi=192))
        image = result.page.images[0]
        assert (image.width, image.height) == (20, 24)

    def test_layout_when_no_size_and_unresolved_then_default_size(self):
        image = _layout("<IMG src=book/x.dds>").page.images[0]
        assert (image.width, image.height) == (64, 64)

    def test_layout_when_resolved_texture_then_intrinsic_size(self, oblivion_root):
        # Arrange
        index = resolve(oblivion_root).index

        # Act
        images = _layout("<IMG src=book/fancy/scroll.dds><IMG src=book/fancy/scroll.dds width=64>", index).page.images

        # Assert
        assert not images[0].placeholder
        assert (images[0].width, images[0].height) == (32, 16)
        assert (images[1].width, images[1].height) == (64, 32)

    def test_layout_when_width_invalid_and_unresolved_then_default_width(self):
        image = _layout("<IMG src=book/x.dds width=abc height=12>").page.images[0]
        assert image.placeholder
        assert (image.width, image.height) == (64, 12)

    @pytest.mark.parametrize("source,size", [
        ("<IMG src=book/fancy/scroll.dds width=abc height=40>", (80, 40)),
        ("<IMG src=book/fancy/scroll.dds width=64 height=0>", (64, 32)),
        ("<IMG src=book/fancy/scroll.dds width=-5 height=x>", (32, 16)),
    ])
    def test_layout_when_dimension_invalid_and_resolved_then_texture_aspect_used(
        self, oblivion_root, source, size
    ):
        # Arrange
        index = resolve(oblivion_root).index

        # Act
        image = _layout(source, index).page.images[0]

        # Assert
        assert not image.placeholder
        assert (image.width, image.height) == size

    def test_layout_when_image_inline_with_text_then_sits_on_baseline(self):
        page = _layout("before <IMG src=book/x.dds width=30 height=50> after").page
        line = page.lines[0]
        image = page.images[0]
        assert image.bottom == line.baseline
        assert [t.text for t in line.items if not isinstance(t, PlacedImage)] == ["before", "after"]

    def test_layout_when_image_wider_than_line_then_scaled_with_info(self):
        # Arrange
        config = LayoutConfig(page_width=200, page_height=600, margin_left=50, margin_right=50)

        # Act
        result = _layout("<IMG src=book/x.dds width=300 height=60>", config=config)

        # Assert
        image = result.page.images[0]
        assert (image.width, image.height) == (100, 20)
        (issue,) = result.diagnostics
        assert issue.severity is Severity.INFO
        assert issue.stage is Stage.LAYOUT


class TestLayoutClipping:
    """Tests for overflow past the bottom margin."""

    def test_layout_when_content_taller_than_page_then_lines_clipped(self):
        # Arrange
        config = LayoutConfig(page_width=300, page_height=150, margin_top=10, margin_bottom=10)
        source = "<BR>".join(f"line{i}" for i in range(30))

        # Act
        result = _layout(source, config=config)

        # Assert
        page = result.page
        assert page.clipped_lines > 0
        assert page.line_count + page.clipped_lines == 30
        assert all(line.bottom <= config.content_bottom for line in page.lines)
        (issue,) = result.diagnostics
        assert "clipped" in issue.message
        assert source[issue.offset:].startswith(f"line{page.line_count}")
