"""
Module: output.renderer

Purpose:
    Render a PageLayout to a preview bitmap using Pillow.
    Text is drawn at its placed position, textures are scaled into their
    boxes, and unresolved images become outlined placeholders of the
    requested size.

Key Functions:
    - render_page(): PageLayout -> PIL image
    - render(): Nodes -> PreviewPage (layout + draw)

Key Classes:
    - PreviewPage: Rendered bitmap with BGRA export for the shell

Dependencies:
    - PIL: Image, ImageDraw
    - obbook.layout: layout_page, load_font

Used By:
    - obbook.engine: render_preview_page()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw

from obbook.assets.index import AssetIndex
from obbook.assets.textures import load_texture
from obbook.core.models import Node
from obbook.layout import (
    LayoutConfig,
    PageLayout,
    PlacedImage,
    PlacedText,
    layout_page,
    load_font,
)
from obbook.layout.fonts import FONT_CANDIDATES, FontBook

logger = logging.getLogger(__name__)

# Drop shadow offset for shadowed font faces (design px)
SHADOW_OFFSET = 1


@dataclass(frozen=True)
class PreviewPage:
    """
    One rendered preview page.

    Attributes:
        image: RGB bitmap of the page
        dpi: Resolution it was rendered at
        layout: Layout the bitmap was drawn from
    """

    image: Image.Image
    dpi: float
    layout: PageLayout

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def stride(self) -> int:
        """Bytes per BGRA row."""
        return self.image.width * 4

    def to_bgra(self) -> bytes:
        """
        Pixels as top-down 32-bit BGRA rows.

        Example:
            >>> len(page.to_bgra()) == page.stride * page.height
            True
        """
        return self.image.convert("RGBA").tobytes("raw", "BGRA")


def render_page(
    page: PageLayout,
    config: Optional[LayoutConfig] = None,
    candidates: Tuple[str, ...] = FONT_CANDIDATES,
) -> Image.Image:
    """
    Draw a laid-out page.

    Args:
        page: Layout to draw
        config: Colors and DPI scale; defaults to the page's size
        candidates: TrueType font names, same as used for measuring

    Returns:
        RGB image of size (page.width, page.height)
    """
    config = config or LayoutConfig.fit(page.width, page.height, page.dpi)
    image = Image.new("RGB", (page.width, page.height), config.background_color)
    draw = ImageDraw.Draw(image)
    shadow = max(1, config.px(SHADOW_OFFSET))

    for line in page.lines:
        for item in line.items:
            if isinstance(item, PlacedText):
                font = load_font(item.font_size, candidates)
                if item.shadow:
                    draw.text((item.x + shadow, item.y + shadow), item.text,
                              fill=config.shadow_color, font=font)
                draw.text((item.x, item.y), item.text, fill=config.ink_color, font=font)
            elif isinstance(item, PlacedImage):
                _draw_image(image, draw, item, config)

    logger.debug(
        f"Rendered {page.line_count} lines, {len(page.images)} images "
        f"at {page.width}x{page.height}"
    )
    return image


def _draw_image(
    image: Image.Image,
    draw: ImageDraw.ImageDraw,
    item: PlacedImage,
    config: LayoutConfig,
) -> None:
    box = (item.x, item.y, item.right - 1, item.bottom - 1)

    if item.placeholder:
        draw.rectangle(box, outline=config.placeholder_color, width=1)
        draw.line(box, fill=config.placeholder_color, width=1)
        draw.line((box[0], box[3], box[2], box[1]), fill=config.placeholder_color, width=1)
        return

    texture = load_texture(item.entry)
    if texture is None:
        # Indexed but not decodable here (packed in an archive, or unsupported format)
        draw.rectangle(box, fill=config.texture_color)
        return

    if texture.size != (item.width, item.height):
        texture = texture.resize((item.width, item.height), Image.Resampling.LANCZOS)
    image.paste(texture, (item.x, item.y), texture)


def render(
    nodes: Iterable[Node],
    index: Optional[AssetIndex] = None,
    width: int = 1000,
    height: int = 700,
    dpi: float = 96.0,
    candidates: Tuple[str, ...] = FONT_CANDIDATES,
) -> PreviewPage:
    """
    Lay out and draw one preview page.

    Args:
        nodes: Compiled node sequence
        index: Asset index (empty if None)
        width: Bitmap width in pixels
        height: Bitmap height in pixels
        dpi: Resolution used to scale fonts, margins and images

    Returns:
        PreviewPage of exactly width x height

    Raises:
        ValueError: If width, height or dpi is not positive

    Example:
        >>> from obbook.compiler import parse
        >>> page = render(parse("<DIV align=\\"center\\">Title</DIV>").nodes, width=400, height=300)
        >>> page.image.size
        (400, 300)
    """
    config = LayoutConfig.fit(width, height, dpi)
    index = index if index is not None else AssetIndex()
    result = layout_page(nodes, index, config, FontBook(index, config, candidates))
    image = render_page(result.page, config, candidates)
    return PreviewPage(image=image, dpi=dpi, layout=result.page)
