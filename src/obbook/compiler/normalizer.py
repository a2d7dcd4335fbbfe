"""
Module: compiler.normalizer

Purpose:
    Rewrite a parsed node sequence as canonical markup. The output is what
    the editor shows after "Compile" and what the DESC export starts from.

Key Functions:
    - normalize(): Node sequence -> canonical text

Rewrites:
    - Smart quotes -> straight quotes (text and attribute values)
    - Backslashes in `src` -> forward slashes
    - Tag names upper-cased, attribute names lower-cased
    - Attribute values re-quoted with straight quotes (double unless the value holds one)
    - Whitespace in text collapsed to single spaces
    - One line per top-level DIV block, a line break after each BR

    normalize(parse(normalize(x)).nodes) == normalize(x) for valid x.

Dependencies:
    - obbook.core.models: Node

Used By:
    - obbook.engine: Compile pipeline
    - obbook.compiler.export: DESC text
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from obbook.config import ProjectSettings
from obbook.core.models import TAG_BR, TAG_DIV, Attribute, Node

from .parser import DOUBLE_QUOTES, SINGLE_QUOTES

_WHITESPACE = re.compile(r"\s+")

_QUOTE_MAP = str.maketrans({"‘": "'", "’": "'", "“": '"', "”": '"'})

# Attributes holding asset paths
PATH_ATTRIBUTES = frozenset({"src"})


def straighten_quotes(text: str) -> str:
    """
    Replace typographic quotes with their ASCII counterparts.

    Example:
        >>> straighten_quotes("“Hi” it’s")
        '"Hi" it\\'s'
    """
    return text.translate(_QUOTE_MAP)


def normalize(nodes: Iterable[Node], settings: Optional[ProjectSettings] = None) -> str:
    """
    Render nodes as canonical markup.

    Args:
        nodes: Parsed node sequence
        settings: Switches for quote and slash rewriting

    Returns:
        Normalized markup, lines separated by "\\n", no trailing newline

    Example:
        >>> from obbook.compiler.parser import parse
        >>> normalize(parse("<div align=center>Hi</div><br>").nodes)
        '<DIV align="center">Hi</DIV>\\n<BR>'
    """
    settings = settings or ProjectSettings()
    writer = _LineWriter()
    div_depth = 0

    for node in nodes:
        if node.is_text:
            text = node.text
            if settings.auto_normalize_smart_quotes:
                text = straighten_quotes(text)
            writer.write_text(_WHITESPACE.sub(" ", text))

        elif node.is_open:
            if node.name == TAG_DIV:
                if div_depth == 0:
                    writer.break_line()
                div_depth += 1
            writer.write(_render_open(node, settings))
            if node.name == TAG_BR:
                writer.break_line()

        else:
            writer.write(f"</{node.name}>")
            if node.name == TAG_DIV:
                div_depth = max(0, div_depth - 1)
                if div_depth == 0:
                    writer.break_line()

    return writer.getvalue()


def _render_open(node: Node, settings: ProjectSettings) -> str:
    parts = [node.name]
    parts.extend(_render_attribute(attr, settings) for attr in node.attributes)
    return "<" + " ".join(parts) + ">"


def _render_attribute(attr: Attribute, settings: ProjectSettings) -> str:
    value = attr.value
    if settings.auto_normalize_smart_quotes:
        value = straighten_quotes(value)
    if settings.auto_normalize_slashes and attr.name in PATH_ATTRIBUTES:
        value = value.replace("\\", "/")
    return f"{attr.name}={quote_value(value)}"


def quote_value(value: str) -> str:
    """
    Quote an attribute value so it scans back unchanged.

    The parser ends a quoted value at any member of the opening quote's
    family (straight or typographic), so the delimiter is picked by family.
    Double quotes are used unless the value holds one; single quotes next.
    A value holding both families has its double quotes turned into
    apostrophes.

    Examples:
        >>> quote_value("center")
        '"center"'
        >>> quote_value('say "hi"')
        '\\'say "hi"\\''
        >>> quote_value("a”b")
        "'a”b'"
    """
    if not any(ch in DOUBLE_QUOTES for ch in value):
        return f'"{value}"'
    if not any(ch in SINGLE_QUOTES for ch in value):
        return f"'{value}'"
    return '"' + "".join("'" if ch in DOUBLE_QUOTES else ch for ch in value) + '"'


class _LineWriter:
    """Accumulates output lines, dropping blank ones and edge whitespace."""

    def __init__(self) -> None:
        self._lines: List[str] = []
        self._current: List[str] = []

    def write(self, piece: str) -> None:
        self._current.append(piece)

    def write_text(self, text: str) -> None:
        if not self._current:
            text = text.lstrip()
        if text:
            self._current.append(text)

    def break_line(self) -> None:
        line = "".join(self._current).rstrip()
        self._current = []
        if line:
            self._lines.append(line)

    def getvalue(self) -> str:
        self.break_line()
        return "\n".join(self._lines)
