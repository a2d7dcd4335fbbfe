"""
Module: layout.flow

Purpose:
    Flow a node sequence onto a single page: word wrapping, forced breaks,
    DIV alignment scopes, FONT face changes and inline images sitting on
    the text baseline.

Key Functions:
    - layout_page(): Main entry point

Algorithm:
    1. Text collapses whitespace and wraps at word boundaries; a word
       wider than the line is split by character.
    2. BR ends the line (an empty line takes the current font's height).
    3. DIV open/close end the line; DIV align pushes an alignment that
       the matching close pops, restoring the enclosing one.
    4. FONT face=N pushes a font variant; close pops it.
    5. IMG adds a box of the markup size, else the texture's size, else
       the default size; boxes wider than the line are scaled down.
    6. Finished lines are aligned within the content width. Lines that
       would cross the bottom margin are clipped.

Dependencies:
    - obbook.layout.fonts: Text metrics
    - obbook.assets.textures: Intrinsic image size

Used By:
    - obbook.output.renderer: render()
    - obbook.engine: Layout-stage diagnostics
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from obbook.assets.index import AssetIndex
from obbook.assets.textures import texture_size
from obbook.core.models import (
    ALIGNMENTS,
    TAG_BR,
    TAG_DIV,
    TAG_FONT,
    TAG_IMG,
    AssetEntry,
    Diagnostic,
    Node,
    Severity,
    Span,
    Stage,
)

from .config import LayoutConfig
from .fonts import FontBook, FontVariant
from .models import LayoutResult, LineBox, PageLayout, PlacedImage, PlacedItem, PlacedText

logger = logging.getLogger(__name__)

_TOKENS = re.compile(r"\S+|\s+")

DEFAULT_ALIGN = "left"


def layout_page(
    nodes: Iterable[Node],
    index: Optional[AssetIndex] = None,
    config: Optional[LayoutConfig] = None,
    fonts: Optional[FontBook] = None,
) -> LayoutResult:
    """
    Lay out nodes on one page.

    Deterministic for identical inputs.

    Args:
        nodes: Parsed node sequence
        index: Asset index for fonts and textures (empty if None)
        config: Page geometry
        fonts: Font book; built from index and config if None

    Returns:
        LayoutResult with the page and layout-stage diagnostics

    Example:
        >>> from obbook.compiler import parse
        >>> result = layout_page(parse("Hello<BR>World").nodes)
        >>> [line.text for line in result.page.lines]
        ['Hello', 'World']
    """
    index = index if index is not None else AssetIndex()
    config = config or LayoutConfig()
    fonts = fonts or FontBook(index, config)

    flow = _Flow(index, config, fonts)
    for node in nodes:
        flow.feed(node)
    flow.finish_line()

    page = PageLayout(
        width=config.page_width,
        height=config.page_height,
        dpi=config.dpi,
        lines=tuple(flow.lines),
        clipped_lines=flow.clipped,
    )
    diagnostics = list(flow.diagnostics)
    if flow.clipped and flow.first_clipped is not None:
        diagnostics.append(_info(
            flow.first_clipped,
            f"Content exceeds the page height; {flow.clipped} line(s) clipped in the preview",
        ))

    logger.debug(
        f"Laid out {page.line_count} lines ({page.clipped_lines} clipped) "
        f"on {config.page_width}x{config.page_height} @ {config.dpi:g} DPI"
    )
    return LayoutResult(page=page, diagnostics=tuple(diagnostics))


def _info(span: Span, message: str) -> Diagnostic:
    return Diagnostic(Severity.INFO, span.offset, span.length, message, Stage.LAYOUT)


@dataclass
class _Pending:
    """Item on the line being built, x relative to the line start."""

    x: int
    width: int
    ascent: int
    descent: int
    text: Optional[str] = None
    variant: Optional[FontVariant] = None
    image: Optional[Tuple[str, Optional[AssetEntry]]] = None


class _Flow:
    """Line-flow cursor state for one layout pass."""

    def __init__(self, index: AssetIndex, config: LayoutConfig, fonts: FontBook):
        self.index = index
        self.config = config
        self.fonts = fonts

        self.align_stack: List[str] = [DEFAULT_ALIGN]
        self.face_stack: List[Optional[int]] = [None]

        self.items: List[_Pending] = []
        self.cursor = 0
        self.pending_space = False
        self.line_align: Optional[str] = None
        self.line_span: Optional[Span] = None

        self.y = config.content_top
        self.lines: List[LineBox] = []
        self.clipped = 0
        self.first_clipped: Optional[Span] = None
        self.diagnostics: List[Diagnostic] = []
        self._sizes: Dict[str, Optional[Tuple[int, int]]] = {}

    @property
    def variant(self) -> FontVariant:
        return self.fonts.variant(self.face_stack[-1])

    # ─────────────────────────────────────────────────────────────────────
    # Node dispatch
    # ─────────────────────────────────────────────────────────────────────

    def feed(self, node: Node) -> None:
        if node.is_text:
            self._text(node)
        elif node.is_open:
            self._open(node)
        else:
            self._close(node)

    def _text(self, node: Node) -> None:
        for match in _TOKENS.finditer(node.text):
            token = match.group()
            if token.isspace():
                self.pending_space = bool(self.items)
            else:
                start = node.span.offset + match.start() if node.span.length else node.span.offset
                self._word(token, Span(start, len(token) if node.span.length else 0))

    def _open(self, node: Node) -> None:
        if node.name == TAG_DIV:
            self._block_break()
            align = (node.get("align") or "").strip().lower()
            self.align_stack.append(align if align in ALIGNMENTS else self.align_stack[-1])
        elif node.name == TAG_FONT:
            self.face_stack.append(node.int_value("face") or self.face_stack[-1])
        elif node.name == TAG_BR:
            self.line_span = self.line_span or node.span
            self.finish_line(allow_empty=True)
        elif node.name == TAG_IMG:
            self._image(node)

    def _close(self, node: Node) -> None:
        if node.name == TAG_DIV:
            self._block_break()
            if len(self.align_stack) > 1:
                self.align_stack.pop()
        elif node.name == TAG_FONT:
            if len(self.face_stack) > 1:
                self.face_stack.pop()

    # ─────────────────────────────────────────────────────────────────────
    # Placement
    # ─────────────────────────────────────────────────────────────────────

    def _block_break(self) -> None:
        if self.items:
            self.finish_line()
        self.pending_space = False

    def _place(self, item: _Pending, span: Span) -> None:
        """Append an item, wrapping first if it does not fit."""
        available = self.config.available_width
        space = 0
        if self.pending_space and self.items:
            space = self.fonts.measure(self.variant, " ")
        if self.items and self.cursor + space + item.width > available:
            self.finish_line()
            space = 0

        if not self.items:
            self.line_align = self.align_stack[-1]
            self.line_span = self.line_span or span
        item.x = self.cursor + space
        self.items.append(item)
        self.cursor = item.x + item.width
        self.pending_space = False

    def _word(self, word: str, span: Span) -> None:
        variant = self.variant
        height, ascent = self.fonts.metrics(variant)
        available = self.config.available_width

        width = self.fonts.measure(variant, word)
        if width <= available:
            self._place(_Pending(0, width, ascent, height - ascent, text=word, variant=variant), span)
            return

        # Split an over-long word by character
        chunk = ""
        for ch in word:
            candidate = chunk + ch
            if chunk and self.fonts.measure(variant, candidate) > available:
                self._place(
                    _Pending(0, self.fonts.measure(variant, chunk), ascent, height - ascent,
                             text=chunk, variant=variant),
                    span,
                )
                self.finish_line()
                chunk = ch
            else:
                chunk = candidate
        if chunk:
            self._place(
                _Pending(0, self.fonts.measure(variant, chunk), ascent, height - ascent,
                         text=chunk, variant=variant),
                span,
            )

    def _image(self, node: Node) -> None:
        src = (node.get("src") or "").strip()
        entry = self.index.find_texture(src) if src else None
        width, height = self._image_size(node, entry)

        available = self.config.available_width
        if width > available:
            self.diagnostics.append(_info(
                node.span,
                f"IMG is {width}px wide but the line is {available}px; the preview scales it down",
            ))
            height = max(1, round(height * available / width))
            width = available

        self._place(_Pending(0, width, height, 0, image=(src, entry)), node.span)

    def _image_size(self, node: Node, entry: Optional[AssetEntry]) -> Tuple[int, int]:
        """Box size in output pixels: markup, then texture, then default."""
        width = node.int_value("width")
        height = node.int_value("height")
        default_w, default_h = self.config.default_image_size

        if width is None or height is None:
            intrinsic = self._intrinsic_size(entry)
            if width is None and height is None:
                width, height = intrinsic or (default_w, default_h)
            elif width is None:
                width = round(height * intrinsic[0] / intrinsic[1]) if intrinsic else default_w
            else:
                height = round(width * intrinsic[1] / intrinsic[0]) if intrinsic else default_h

        return max(1, self.config.px(width)), max(1, self.config.px(height))

    def _intrinsic_size(self, entry: Optional[AssetEntry]) -> Optional[Tuple[int, int]]:
        if entry is None:
            return None
        if entry.key not in self._sizes:
            size = texture_size(entry)
            self._sizes[entry.key] = size if size and min(size) > 0 else None
        return self._sizes[entry.key]

    def finish_line(self, allow_empty: bool = False) -> None:
        """Close the current line, aligning and positioning its items."""
        if not self.items and not allow_empty:
            return

        if self.items:
            ascent = max(item.ascent for item in self.items)
            descent = max(item.descent for item in self.items)
        else:
            height, ascent = self.fonts.metrics(self.variant)
            descent = height - ascent
        height = ascent + descent

        align = self.line_align or self.align_stack[-1]
        width = self.cursor
        left = self.config.content_left
        if align == "center":
            left += (self.config.available_width - width) // 2
        elif align == "right":
            left += self.config.available_width - width

        top = self.y
        baseline = top + ascent
        if top + height > self.config.content_bottom:
            self.clipped += 1
            if self.first_clipped is None:
                self.first_clipped = self.line_span
        else:
            placed = tuple(self._finalize(item, left, baseline) for item in self.items)
            self.lines.append(LineBox(
                top=top,
                height=height,
                baseline=baseline,
                left=left,
                width=width,
                align=align,
                items=placed,
            ))

        self.y = top + height + self.config.px(self.config.line_spacing)
        self.items = []
        self.cursor = 0
        self.pending_space = False
        self.line_align = None
        self.line_span = None

    def _finalize(self, item: _Pending, left: int, baseline: int) -> PlacedItem:
        x = left + item.x
        if item.image is not None:
            src, entry = item.image
            return PlacedImage(
                x=x, y=baseline - item.ascent, width=item.width, height=item.ascent,
                src=src, entry=entry,
            )
        return PlacedText(
            x=x,
            y=baseline - item.ascent,
            width=item.width,
            height=item.ascent + item.descent,
            text=item.text or "",
            font_size=self.fonts.size(item.variant),
            shadow=item.variant.shadow,
        )
