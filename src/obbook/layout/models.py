"""
Module: layout.models

Purpose:
    Data models for page layout.
    Immutable dataclasses representing placed text, placed images, line
    boxes and the finished page.

Key Classes:
    - PlacedText: A word (or word fragment) at its page position
    - PlacedImage: An inline image box at its page position
    - LineBox: One laid-out line
    - PageLayout: Complete single-page layout
    - LayoutResult: Page plus layout-stage diagnostics

Dependencies:
    - dataclasses (std)

Used By:
    - obbook.layout.flow: Creates the models
    - obbook.output.renderer: Draws them
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from obbook.core.models import AssetEntry, Diagnostic


@dataclass(frozen=True)
class PlacedText:
    """
    Text drawn at a fixed position.

    Attributes:
        x: Left edge in pixels
        y: Top of the font's ascent in pixels
        width: Advance width in pixels
        height: Ascent + descent in pixels
        text: Characters to draw
        font_size: Pixel size of the font
        shadow: Draw a drop shadow under the glyphs
    """

    x: int
    y: int
    width: int
    height: int
    text: str
    font_size: int
    shadow: bool = False

    @property
    def right(self) -> int:
        return self.x + self.width


@dataclass(frozen=True)
class PlacedImage:
    """
    Inline image box sitting on the text baseline.

    Attributes:
        x: Left edge in pixels
        y: Top edge in pixels
        width: Box width in pixels
        height: Box height in pixels
        src: Path as written in markup
        entry: Indexed texture, None when unresolved
    """

    x: int
    y: int
    width: int
    height: int
    src: str
    entry: Optional[AssetEntry] = None

    @property
    def placeholder(self) -> bool:
        """True when the texture is not in the index."""
        return self.entry is None

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


PlacedItem = Union[PlacedText, PlacedImage]


@dataclass(frozen=True)
class LineBox:
    """
    One line of the page.

    Attributes:
        top: Y of the line's top edge
        height: Line height (max ascent + max descent of its items)
        baseline: Y of the shared baseline
        left: X of the first item after alignment
        width: Distance from first item's left to last item's right
        align: "left", "center" or "right"
        items: Items in reading order

    Example:
        >>> line = LineBox(top=40, height=24, baseline=58, left=50, width=100, align="left", items=())
        >>> line.bottom
        64
    """

    top: int
    height: int
    baseline: int
    left: int
    width: int
    align: str
    items: tuple[PlacedItem, ...]

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def text(self) -> str:
        """Words on the line joined by single spaces."""
        return " ".join(item.text for item in self.items if isinstance(item, PlacedText))

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class PageLayout:
    """
    Complete layout plan for the single preview page.

    Attributes:
        width: Page width in pixels
        height: Page height in pixels
        dpi: Resolution the page was laid out for
        lines: Lines that fit on the page
        clipped_lines: Lines dropped because they overflow the page
    """

    width: int
    height: int
    dpi: float
    lines: tuple[LineBox, ...]
    clipped_lines: int = 0

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def texts(self) -> list[PlacedText]:
        return [item for line in self.lines for item in line.items if isinstance(item, PlacedText)]

    @property
    def images(self) -> list[PlacedImage]:
        return [item for line in self.lines for item in line.items if isinstance(item, PlacedImage)]


@dataclass(frozen=True)
class LayoutResult:
    """
    Layout output with diagnostics.

    Attributes:
        page: The laid-out page
        diagnostics: Layout-stage issues (clipping, oversized images)
    """

    page: PageLayout
    diagnostics: tuple[Diagnostic, ...] = ()
