"""
Module: assets.textures

Purpose:
    Read loose texture files through Pillow: the intrinsic size used when
    IMG gives no width/height, and the pixels drawn in the preview.
    Archive entries and files Pillow cannot decode yield None; callers
    fall back to default sizes and plain boxes.

Key Functions:
    - texture_size(): (width, height) of a texture, or None
    - load_texture(): RGBA image of a texture, or None

Dependencies:
    - PIL: Image decoding (DDS, TGA, PNG...)

Used By:
    - obbook.layout.flow: Intrinsic IMG size
    - obbook.output.renderer: Drawing textures
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from PIL import Image

from obbook.core.models import AssetEntry

logger = logging.getLogger(__name__)

# Raised by Pillow for unreadable or unsupported image data
_DECODE_ERRORS = (OSError, ValueError, NotImplementedError, SyntaxError)


def texture_size(entry: Optional[AssetEntry]) -> Optional[Tuple[int, int]]:
    """
    Intrinsic size of a texture.

    Only the image header is read.

    Returns:
        (width, height), or None for unresolved, packed or unreadable textures
    """
    if entry is None or entry.resolved_path is None:
        return None
    try:
        with Image.open(entry.resolved_path) as img:
            return img.size
    except _DECODE_ERRORS as e:
        logger.debug(f"Cannot read size of {entry.resolved_path}: {e}")
        return None


def load_texture(entry: Optional[AssetEntry]) -> Optional[Image.Image]:
    """
    Decode a texture to RGBA.

    Returns:
        The image, or None for unresolved, packed or undecodable textures
    """
    if entry is None or entry.resolved_path is None:
        return None
    try:
        with Image.open(entry.resolved_path) as img:
            return img.convert("RGBA")
    except _DECODE_ERRORS as e:
        logger.debug(f"Cannot decode {entry.resolved_path}: {e}")
        return None
