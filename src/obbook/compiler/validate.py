"""
Module: compiler.validate

Purpose:
    Cross-check markup asset references against the asset index. Missing
    assets are Warnings at the referencing tag: the preview substitutes a
    placeholder or the built-in font and stays usable.

Key Functions:
    - check_asset_references(): Record resolve-stage diagnostics

Dependencies:
    - obbook.assets.index: AssetIndex
    - obbook.compiler.diagnostics: DiagnosticsCollector

Used By:
    - obbook.engine: Compile pipeline
"""

from __future__ import annotations

import logging
from typing import Iterable

from obbook.assets.index import AssetIndex
from obbook.core.models import TAG_FONT, TAG_IMG, Node, Stage

from .diagnostics import DiagnosticsCollector

logger = logging.getLogger(__name__)


def check_asset_references(
    nodes: Iterable[Node],
    index: AssetIndex,
    collector: DiagnosticsCollector,
) -> int:
    """
    Look up every IMG src and FONT face in the index.

    Args:
        nodes: Parsed node sequence
        index: Asset index for the current data directory
        collector: Collector; issues are stamped with the RESOLVE stage

    Returns:
        Number of unresolved references
    """
    misses = 0
    with collector.stage(Stage.RESOLVE):
        for node in nodes:
            if not node.is_open:
                continue
            if node.name == TAG_IMG:
                misses += _check_image(node, index, collector)
            elif node.name == TAG_FONT:
                misses += _check_font(node, index, collector)

    if misses:
        logger.debug(f"{misses} unresolved asset references")
    return misses


def _check_image(node: Node, index: AssetIndex, collector: DiagnosticsCollector) -> int:
    src = node.get("src")
    if src is None or not src.strip():
        # Reported by the parser
        return 0
    if index.find_texture(src) is not None:
        return 0

    message = f"Texture '{src}' not found; a placeholder is shown"
    suggestion = index.suggest_texture(src)
    if suggestion is not None:
        message += f" (did you mean '{suggestion.logical_path}'?)"
    collector.warning(node.span, message)
    return 1


def _check_font(node: Node, index: AssetIndex, collector: DiagnosticsCollector) -> int:
    face = node.int_value("face")
    if face is None:
        # Missing or invalid face is reported by the parser
        return 0
    if index.font_count == 0:
        collector.warning(
            node.span, f"Font face {face} is unresolved (no fonts indexed); using the built-in font"
        )
        return 1
    if index.font_for_face(face) is None:
        collector.warning(
            node.span,
            f"Font face {face} is out of range (only {index.font_count} fonts); "
            "using the built-in font",
        )
        return 1
    return 0
