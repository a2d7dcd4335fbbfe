"""
Module: layout.fonts

Purpose:
    Map FONT face numbers to drawable Pillow fonts. Game fonts (.fnt) are
    not rasterized; each indexed font selects a variant (size, drop
    shadow) derived from its name, drawn with a TrueType fallback.

Key Functions:
    - load_font(): Pillow font for a pixel size (cached)
    - variant_for_entry(): Font asset -> FontVariant

Key Classes:
    - FontVariant: How one face is drawn
    - FontBook: Face lookup and text metrics for one layout

Dependencies:
    - PIL: ImageFont

Used By:
    - obbook.layout.flow: Measuring text
    - obbook.output.renderer: Drawing text
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Tuple, Union

from PIL import ImageFont

from obbook.assets.index import AssetIndex
from obbook.core.models import AssetEntry

from .config import LayoutConfig

logger = logging.getLogger(__name__)

PillowFont = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

# Serif faces first, closest to the game's book fonts
FONT_CANDIDATES = (
    "DejaVuSerif.ttf",         # DejaVu Serif (Linux)
    "georgia.ttf",             # Georgia (Windows)
    "Georgia.ttf",             # Georgia (Mac)
    "LiberationSerif-Regular.ttf",
    "times.ttf",               # Times New Roman (Windows)
    "DejaVuSans.ttf",
)

SMALL_FONT_SCALE = 0.8


@dataclass(frozen=True)
class FontVariant:
    """
    Drawing style of one font face.

    Attributes:
        name: Font asset path, or "built-in"
        scale: Size relative to the base font size
        shadow: Draw a drop shadow under glyphs
    """

    name: str
    scale: float = 1.0
    shadow: bool = False


DEFAULT_VARIANT = FontVariant("built-in")


def variant_for_entry(entry: AssetEntry) -> FontVariant:
    """
    Derive a drawing variant from a font's file name.

    Example:
        >>> from obbook.core.models import AssetKind
        >>> variant_for_entry(AssetEntry("Tahoma_Bold_Small.fnt", AssetKind.FONT)).scale
        0.8
    """
    stem = entry.stem
    scale = SMALL_FONT_SCALE if "small" in stem else 1.0
    return FontVariant(entry.logical_path, scale=scale, shadow="shadow" in stem)


@lru_cache(maxsize=64)
def load_font(size: int, candidates: Tuple[str, ...] = FONT_CANDIDATES) -> PillowFont:
    """
    Load a font for text rendering.

    Tries TrueType candidates in order and falls back to Pillow's
    bundled default font.

    Args:
        size: Font size in pixels
        candidates: TrueType file names to try

    Returns:
        Font object
    """
    for font_name in candidates:
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue

    logger.debug(f"No TrueType candidate available at {size}px, using default")
    return ImageFont.load_default(size=size)


def line_metrics(font: PillowFont) -> Tuple[int, int]:
    """
    Line height and ascent of a font.

    Returns:
        (ascent + descent, ascent)
    """
    if hasattr(font, "getmetrics"):
        ascent, descent = font.getmetrics()
        return ascent + descent, ascent
    bottom = font.getbbox("Ay")[3]
    return bottom, bottom


class FontBook:
    """
    Face lookup and metrics for one layout pass.

    Example:
        >>> book = FontBook(AssetIndex(), LayoutConfig())
        >>> book.variant(3) is DEFAULT_VARIANT
        True
    """

    def __init__(
        self,
        index: AssetIndex,
        config: LayoutConfig,
        candidates: Tuple[str, ...] = FONT_CANDIDATES,
    ):
        self._index = index
        self._config = config
        self._candidates = candidates
        self._widths: Dict[Tuple[int, str], int] = {}

    def variant(self, face: Optional[int]) -> FontVariant:
        """Variant for FONT face=N; unknown faces use the built-in variant."""
        if face is None:
            return DEFAULT_VARIANT
        entry = self._index.font_for_face(face)
        if entry is None:
            return DEFAULT_VARIANT
        return variant_for_entry(entry)

    def size(self, variant: FontVariant) -> int:
        """Pixel size of a variant at the layout's DPI."""
        return max(1, self._config.px(self._config.base_font_size * variant.scale))

    def font(self, variant: FontVariant) -> PillowFont:
        return load_font(self.size(variant), self._candidates)

    def metrics(self, variant: FontVariant) -> Tuple[int, int]:
        """(line height, ascent) in pixels."""
        return line_metrics(self.font(variant))

    def measure(self, variant: FontVariant, text: str) -> int:
        """Advance width of `text` in pixels."""
        size = self.size(variant)
        key = (size, text)
        width = self._widths.get(key)
        if width is None:
            width = int(math.ceil(self.font(variant).getlength(text)))
            self._widths[key] = width
        return width
