"""
Module: layout

Purpose:
    Single-page layout of book markup for the preview.
    Flows text and inline images into aligned line boxes.

Key Functions:
    - layout_page(): Nodes -> LayoutResult
    - load_font(): Pillow font used to measure and draw text

Key Classes:
    - LayoutConfig: Page geometry and colors
    - FontBook: Face lookup and text metrics
    - PlacedText, PlacedImage, LineBox, PageLayout, LayoutResult

Dependencies:
    - PIL: Font metrics, texture headers
    - obbook.assets: AssetIndex

Used By:
    - obbook.output.renderer: Preview bitmaps
    - obbook.engine: Layout-stage diagnostics
"""

from .config import LayoutConfig
from .models import LayoutResult, LineBox, PageLayout, PlacedImage, PlacedItem, PlacedText
from .fonts import DEFAULT_VARIANT, FontBook, FontVariant, load_font, variant_for_entry
from .flow import layout_page

__all__ = [
    # Config
    "LayoutConfig",
    # Models
    "PlacedText",
    "PlacedImage",
    "PlacedItem",
    "LineBox",
    "PageLayout",
    "LayoutResult",
    # Fonts
    "FontVariant",
    "FontBook",
    "DEFAULT_VARIANT",
    "load_font",
    "variant_for_entry",
    # Functions
    "layout_page",
]
