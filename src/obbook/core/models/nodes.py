"""
Module: nodes

Purpose:
    Provides the flat node variant produced by the parser. A node is a
    text run, a tag open or a tag close; tag payloads live in an ordered
    attribute tuple so parser, normalizer and layout all switch on
    `kind` instead of walking a class hierarchy.

Key Classes:
    - NodeKind: TEXT / OPEN / CLOSE
    - Span: Source offset and length
    - Attribute: One name=value pair with its source location
    - Node: The variant itself

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - obbook.compiler.parser
    - obbook.compiler.normalizer
    - obbook.compiler.validate
    - obbook.layout.flow
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NodeKind(Enum):
    """Node variant tag."""

    TEXT = "text"
    OPEN = "open"
    CLOSE = "close"


# Tag names understood by layout
TAG_FONT = "FONT"
TAG_DIV = "DIV"
TAG_BR = "BR"
TAG_IMG = "IMG"

KNOWN_TAGS = frozenset({TAG_FONT, TAG_DIV, TAG_BR, TAG_IMG})

# Tags that never take a close tag
SELF_CLOSING_TAGS = frozenset({TAG_BR, TAG_IMG})

# Tags that must be closed, auto-closed at end of document otherwise
CONTAINER_TAGS = frozenset({TAG_FONT, TAG_DIV})

# Attributes each known tag uses
TAG_ATTRIBUTES = {
    TAG_FONT: ("face",),
    TAG_DIV: ("align",),
    TAG_BR: (),
    TAG_IMG: ("src", "width", "height"),
}

ALIGNMENTS = ("left", "center", "right")


@dataclass(frozen=True, slots=True)
class Span:
    """
    Region of source text, [offset, offset + length).

    Example:
        >>> Span(4, 3).end
        7
    """

    offset: int
    length: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0: {self.offset}")
        if self.length < 0:
            raise ValueError(f"length must be >= 0: {self.length}")

    @property
    def end(self) -> int:
        """Offset one past the last character."""
        return self.offset + self.length

    @classmethod
    def between(cls, start: int, end: int) -> "Span":
        """Span from start (inclusive) to end (exclusive)."""
        return cls(start, end - start)


@dataclass(frozen=True, slots=True)
class Attribute:
    """
    One tag attribute.

    Attributes:
        name: Lower-cased attribute name
        value: Raw value with quote delimiters removed
        span: Whole `name=value` text in the source
        value_span: Value text in the source (without delimiters)
    """

    name: str
    value: str
    span: Span
    value_span: Span


@dataclass(frozen=True, slots=True)
class Node:
    """
    Parsed markup node (immutable).

    Attributes:
        kind: TEXT, OPEN or CLOSE
        span: Source region the node came from (zero length when synthetic)
        text: Literal text (TEXT only)
        name: Upper-cased tag name (OPEN / CLOSE only)
        attributes: Ordered attributes (OPEN only)
        synthetic: True for closes inserted by the parser

    Example:
        >>> node = Node(NodeKind.OPEN, Span(0, 12), name="DIV",
        ...             attributes=(Attribute("align", "center", Span(5, 12), Span(11, 6)),))
        >>> node.get("ALIGN")
        'center'
    """

    kind: NodeKind
    span: Span
    text: str = ""
    name: str = ""
    attributes: tuple[Attribute, ...] = ()
    synthetic: bool = False

    @property
    def is_text(self) -> bool:
        return self.kind is NodeKind.TEXT

    @property
    def is_open(self) -> bool:
        return self.kind is NodeKind.OPEN

    @property
    def is_close(self) -> bool:
        return self.kind is NodeKind.CLOSE

    @property
    def is_known(self) -> bool:
        """True when layout understands this tag."""
        return self.name in KNOWN_TAGS

    def attribute(self, name: str) -> Optional[Attribute]:
        """Look up an attribute by case-insensitive name."""
        wanted = name.lower()
        for attr in self.attributes:
            if attr.name == wanted:
                return attr
        return None

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Attribute value by case-insensitive name."""
        attr = self.attribute(name)
        return attr.value if attr is not None else default

    def int_value(self, name: str) -> Optional[int]:
        """
        Positive integer attribute value, or None.

        Values that do not parse as a positive integer count as absent.
        """
        return parse_positive_int(self.get(name))


def parse_positive_int(value: Optional[str]) -> Optional[int]:
    """
    Parse a positive decimal integer.

    Returns:
        The integer, or None for missing, non-numeric or non-positive input

    Example:
        >>> parse_positive_int(" 70 ")
        70
        >>> parse_positive_int("0") is None
        True
    """
    if value is None:
        return None
    value = value.strip()
    if not value.isascii() or not value.isdigit():
        return None
    number = int(value)
    return number if number > 0 else None
