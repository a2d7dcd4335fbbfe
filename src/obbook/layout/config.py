"""
Module: layout.config

Purpose:
    Configuration for the page layout engine.
    Defines page dimensions, margins, font size and preview colors.

Key Classes:
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)

Used By:
    - obbook.layout.flow: Text flow
    - obbook.output.renderer: Drawing
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

# Book preview page at screen resolution
DEFAULT_PAGE_WIDTH_PX = 1000
DEFAULT_PAGE_HEIGHT_PX = 700
DEFAULT_DPI = 96.0

# Design sizes below are pixels at this DPI
BASE_DPI = 96.0


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for page layout (immutable).

    Page width and height are output pixels. Margins, spacing, font size
    and image sizes are design pixels at 96 DPI and scale with `dpi`.

    Attributes:
        page_width: Page width in pixels
        page_height: Page height in pixels
        dpi: Dots per inch for rendering
        margin_top: Top margin (design px)
        margin_bottom: Bottom margin (design px)
        margin_left: Left margin (design px)
        margin_right: Right margin (design px)
        line_spacing: Extra space between lines (design px)
        base_font_size: Size of the default font variant (design px)
        default_image_size: IMG box when neither markup nor texture gives one
        background_color: Page color
        ink_color: Text color
        shadow_color: Drop shadow color for shadowed fonts
        texture_color: Fill for textures that cannot be drawn
        placeholder_color: Outline for missing textures

    Example:
        >>> config = LayoutConfig(page_width=1000, margin_left=50, margin_right=50)
        >>> config.available_width
        900
    """

    # Page dimensions
    page_width: int = DEFAULT_PAGE_WIDTH_PX
    page_height: int = DEFAULT_PAGE_HEIGHT_PX
    dpi: float = DEFAULT_DPI

    # Margins
    margin_top: int = 40
    margin_bottom: int = 40
    margin_left: int = 50
    margin_right: int = 50

    # Text
    line_spacing: int = 4
    base_font_size: int = 20

    # Images
    default_image_size: Tuple[int, int] = (64, 64)

    # Colors
    background_color: str = "#f1e6c8"
    ink_color: str = "#2b1d0e"
    shadow_color: str = "#b8a27a"
    texture_color: str = "#8c7853"
    placeholder_color: str = "#a03020"

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive: {self.dpi}")
        if self.base_font_size <= 0:
            raise ValueError(f"base_font_size must be positive: {self.base_font_size}")
        if min(self.default_image_size) <= 0:
            raise ValueError(f"default_image_size must be positive: {self.default_image_size}")
        if self.available_width <= 0:
            raise ValueError("Margins exceed page width")
        if self.available_height <= 0:
            raise ValueError("Margins exceed page height")

    @classmethod
    def fit(cls, page_width: int, page_height: int, dpi: float = DEFAULT_DPI, **overrides) -> "LayoutConfig":
        """
        Config for a page size, dropping margins that do not fit.

        Small preview surfaces still get a page instead of an error.

        Raises:
            ValueError: Non-positive page size or dpi
        """
        config = cls(
            page_width=page_width,
            page_height=page_height,
            dpi=dpi,
            margin_top=0,
            margin_bottom=0,
            margin_left=0,
            margin_right=0,
            **{k: v for k, v in overrides.items() if not k.startswith("margin_")},
        )
        margins = {k: v for k, v in overrides.items() if k.startswith("margin_")}
        defaults = {
            "margin_top": cls.margin_top,
            "margin_bottom": cls.margin_bottom,
            "margin_left": cls.margin_left,
            "margin_right": cls.margin_right,
        }
        defaults.update(margins)
        try:
            return replace(config, **defaults)
        except ValueError:
            return config

    # ─────────────────────────────────────────────────────────────────────
    # Derived geometry (output pixels)
    # ─────────────────────────────────────────────────────────────────────

    @property
    def scale(self) -> float:
        """Output pixels per design pixel."""
        return self.dpi / BASE_DPI

    def px(self, design: float) -> int:
        """Convert design pixels to output pixels."""
        return int(round(design * self.scale))

    @property
    def content_left(self) -> int:
        return self.px(self.margin_left)

    @property
    def content_top(self) -> int:
        return self.px(self.margin_top)

    @property
    def content_right(self) -> int:
        return self.page_width - self.px(self.margin_right)

    @property
    def content_bottom(self) -> int:
        return self.page_height - self.px(self.margin_bottom)

    @property
    def available_width(self) -> int:
        """Width available for content (excluding margins)."""
        return self.content_right - self.content_left

    @property
    def available_height(self) -> int:
        """Height available for content (excluding margins)."""
        return self.content_bottom - self.content_top
