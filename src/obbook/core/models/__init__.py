"""
Core Models Package

Immutable data models shared by the compiler, asset index and layout.

All models in this package are frozen dataclasses. A compile produces a
fresh tuple of nodes and diagnostics every time; nothing is patched in
place, so a compile snapshot can be handed to the renderer while the
editor keeps typing.
"""

from .nodes import (
    Attribute,
    Node,
    NodeKind,
    Span,
    parse_positive_int,
    ALIGNMENTS,
    CONTAINER_TAGS,
    KNOWN_TAGS,
    SELF_CLOSING_TAGS,
    TAG_ATTRIBUTES,
    TAG_BR,
    TAG_DIV,
    TAG_FONT,
    TAG_IMG,
)
from .diagnostics import Diagnostic, Severity, Stage
from .assets import AssetEntry, AssetKind, normalize_asset_key

__all__ = [
    "Attribute",
    "Node",
    "NodeKind",
    "Span",
    "parse_positive_int",
    "ALIGNMENTS",
    "CONTAINER_TAGS",
    "KNOWN_TAGS",
    "SELF_CLOSING_TAGS",
    "TAG_ATTRIBUTES",
    "TAG_BR",
    "TAG_DIV",
    "TAG_FONT",
    "TAG_IMG",
    "Diagnostic",
    "Severity",
    "Stage",
    "AssetEntry",
    "AssetKind",
    "normalize_asset_key",
]
