"""
Module: compiler.parser

Purpose:
    Turn raw book markup into an ordered node sequence annotated with
    source spans. Parsing never fails: malformed input yields a best-effort
    node sequence plus Error diagnostics.

Key Functions:
    - parse(): Main entry point

Key Classes:
    - ParseResult: Nodes and parse-stage diagnostics

Algorithm:
    1. Scan for '<'. Text before it becomes a TEXT node.
    2. A '<' whose '>' comes before the next '<' is a tag; otherwise the
       run up to the next '<' (or end of text) is literal text with an Error.
    3. Tag name is the first whitespace-delimited token; a leading '/' marks
       a close. Attributes are name=value pairs, quoted or not.
    4. DIV/FONT are matched on a stack. Unclosed ones are closed at end of
       document with synthetic CLOSE nodes.

Dependencies:
    - obbook.core.models: Node, Attribute, Span
    - obbook.compiler.diagnostics: DiagnosticsCollector

Used By:
    - obbook.engine: Compile pipeline
    - obbook.compiler.normalizer (round trips in tests)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from obbook.config import ProjectSettings
from obbook.core.models import (
    ALIGNMENTS,
    CONTAINER_TAGS,
    SELF_CLOSING_TAGS,
    TAG_ATTRIBUTES,
    TAG_BR,
    TAG_DIV,
    TAG_FONT,
    TAG_IMG,
    Attribute,
    Diagnostic,
    Node,
    NodeKind,
    Span,
    parse_positive_int,
)

from .diagnostics import DiagnosticsCollector

logger = logging.getLogger(__name__)

SMART_DOUBLE_QUOTES = "“”"
SMART_SINGLE_QUOTES = "‘’"
SMART_QUOTES = SMART_DOUBLE_QUOTES + SMART_SINGLE_QUOTES
DOUBLE_QUOTES = '"' + SMART_DOUBLE_QUOTES
SINGLE_QUOTES = "'" + SMART_SINGLE_QUOTES


@dataclass(frozen=True)
class ParseResult:
    """
    Parser output (immutable).

    Attributes:
        nodes: Ordered node sequence
        diagnostics: Parse-stage issues in detection order
    """

    nodes: tuple[Node, ...]
    diagnostics: tuple[Diagnostic, ...]


def parse(
    text: str,
    settings: Optional[ProjectSettings] = None,
    collector: Optional[DiagnosticsCollector] = None,
) -> ParseResult:
    """
    Parse book markup.

    Args:
        text: Raw markup
        settings: Project settings (image width cap, export codepage)
        collector: Collector to record into; a fresh one is created if None

    Returns:
        ParseResult with nodes and the diagnostics recorded by this call

    Example:
        >>> result = parse('<DIV align="center">Hi</DIV>')
        >>> [node.kind.value for node in result.nodes]
        ['open', 'text', 'close']
    """
    settings = settings or ProjectSettings()
    collector = collector or DiagnosticsCollector(text)
    before = collector.issue_count

    parser = _Parser(text, settings, collector)
    nodes = parser.run()

    issues = collector.diagnostics[before:]
    logger.debug(f"Parsed {len(text)} chars into {len(nodes)} nodes, {len(issues)} issues")
    return ParseResult(nodes=tuple(nodes), diagnostics=issues)


class _Parser:
    """Single-use scanner state for one parse."""

    def __init__(self, text: str, settings: ProjectSettings, collector: DiagnosticsCollector):
        self.text = text
        self.settings = settings
        self.diags = collector
        self.nodes: List[Node] = []
        self.stack: List[Node] = []

    # ─────────────────────────────────────────────────────────────────────
    # Scanning
    # ─────────────────────────────────────────────────────────────────────

    def run(self) -> List[Node]:
        text = self.text
        n = len(text)
        pos = 0
        while pos < n:
            lt = text.find("<", pos)
            if lt < 0:
                self._emit_text(pos, n)
                break
            if lt > pos:
                self._emit_text(pos, lt)

            gt = text.find(">", lt + 1)
            nxt = text.find("<", lt + 1)
            if gt < 0 or (0 <= nxt < gt):
                end = nxt if nxt >= 0 else n
                self.diags.error(Span.between(lt, end), "Unterminated tag: missing '>'")
                self._emit_text(lt, end)
                pos = end
                continue

            self._scan_tag(lt, gt)
            pos = gt + 1

        self._close_remaining()
        return self.nodes

    def _emit_text(self, start: int, end: int) -> None:
        """Add literal text, merging with a directly preceding TEXT node."""
        self._check_text(start, end)
        if self.nodes:
            last = self.nodes[-1]
            if last.is_text and last.span.end == start:
                self.nodes[-1] = Node(
                    NodeKind.TEXT,
                    Span.between(last.span.offset, end),
                    text=self.text[last.span.offset:end],
                )
                return
        self.nodes.append(Node(NodeKind.TEXT, Span.between(start, end), text=self.text[start:end]))

    def _check_text(self, start: int, end: int) -> None:
        segment = self.text[start:end]
        for i, ch in enumerate(segment):
            if ch in SMART_QUOTES:
                if self.settings.auto_normalize_smart_quotes:
                    message = "Smart quote normalized to straight quote"
                else:
                    message = "Smart quote in text; prefer straight quotes"
                self.diags.info(Span(start + i, 1), message)

        try:
            segment.encode(self.settings.encoding)
        except UnicodeEncodeError:
            for i, ch in enumerate(segment):
                try:
                    ch.encode(self.settings.encoding)
                except UnicodeEncodeError:
                    self.diags.warning(
                        Span(start + i, 1),
                        f"Character U+{ord(ch):04X} is not in codepage "
                        f"{self.settings.codepage}; exported as '?'",
                    )

    def _skip_space(self, i: int, end: int) -> int:
        while i < end and self.text[i].isspace():
            i += 1
        return i

    def _scan_tag(self, lt: int, gt: int) -> None:
        text = self.text
        span = Span.between(lt, gt + 1)

        i = self._skip_space(lt + 1, gt)
        is_close = i < gt and text[i] == "/"
        if is_close:
            i = self._skip_space(i + 1, gt)

        name_start = i
        while i < gt and not text[i].isspace() and text[i] not in "/=":
            i += 1
        raw_name = text[name_start:i]
        if not raw_name:
            self.diags.error(span, "Empty tag: no tag name between '<' and '>'")
            self._emit_text(lt, gt + 1)
            return

        name = raw_name.upper()
        attributes = self._scan_attributes(i, gt)

        if is_close:
            if attributes:
                self.diags.warning(span, f"Attributes on </{name}> are ignored")
            self._close_tag(Node(NodeKind.CLOSE, span, name=name), lt)
        else:
            self._open_tag(Node(NodeKind.OPEN, span, name=name, attributes=attributes))

    def _scan_attributes(self, start: int, end: int) -> tuple[Attribute, ...]:
        text = self.text
        attributes: List[Attribute] = []
        seen: Dict[str, int] = {}

        i = start
        while True:
            i = self._skip_space(i, end)
            if i >= end:
                break
            if text[i] == "/":
                # Self-closing marker as in <BR/>
                i += 1
                continue

            name_start = i
            while i < end and not text[i].isspace() and text[i] != "=":
                i += 1
            name = text[name_start:i]

            j = self._skip_space(i, end)
            if j < end and text[j] == "=":
                value, value_span, i = self._scan_value(self._skip_space(j + 1, end), end)
            else:
                value, value_span = "", Span(i, 0)

            attr_span = Span.between(name_start, max(i, value_span.end))
            if not name:
                self.diags.error(attr_span, "Attribute value without a name")
                continue

            attr = Attribute(name.lower(), value, attr_span, value_span)
            if attr.name in seen:
                self.diags.warning(attr_span, f"Duplicate attribute '{attr.name}'; last value wins")
                attributes[seen[attr.name]] = attr
            else:
                seen[attr.name] = len(attributes)
                attributes.append(attr)

        return tuple(attributes)

    def _scan_value(self, i: int, end: int) -> Tuple[str, Span, int]:
        """
        Scan one attribute value starting at `i`.

        Returns:
            (value, value_span, next_index)
        """
        text = self.text
        if i < end and (text[i] in DOUBLE_QUOTES or text[i] in SINGLE_QUOTES):
            opening = text[i]
            family = DOUBLE_QUOTES if opening in DOUBLE_QUOTES else SINGLE_QUOTES
            if opening in SMART_QUOTES:
                self._smart_quote_in_tag(i)
            value_start = i + 1
            k = value_start
            while k < end and text[k] not in family:
                k += 1
            if k >= end:
                self.diags.error(Span.between(i, end), "Unterminated quoted attribute value")
                self._flag_smart_quotes(value_start, end)
                return text[value_start:end], Span.between(value_start, end), end
            if text[k] in SMART_QUOTES:
                self._smart_quote_in_tag(k)
            self._flag_smart_quotes(value_start, k)
            return text[value_start:k], Span.between(value_start, k), k + 1

        k = i
        while k < end and not text[k].isspace():
            k += 1
        self._flag_smart_quotes(i, k)
        return text[i:k], Span.between(i, k), k

    def _flag_smart_quotes(self, start: int, end: int) -> None:
        for k in range(start, end):
            if self.text[k] in SMART_QUOTES:
                self._smart_quote_in_tag(k)

    def _smart_quote_in_tag(self, offset: int) -> None:
        self.diags.info(Span(offset, 1), 'Smart quote in tag; use straight quotes (")')

    # ─────────────────────────────────────────────────────────────────────
    # Structure
    # ─────────────────────────────────────────────────────────────────────

    def _open_tag(self, node: Node) -> None:
        if not node.is_known:
            self.diags.warning(node.span, f"Unknown tag <{node.name}> is ignored by the preview")
        else:
            self._validate_open(node)
        if node.name in CONTAINER_TAGS:
            self.stack.append(node)
        self.nodes.append(node)

    def _close_tag(self, node: Node, at: int) -> None:
        name = node.name
        if name in SELF_CLOSING_TAGS:
            self.diags.warning(node.span, f"Redundant </{name}>: {name} does not take a close tag")
            return

        if name not in CONTAINER_TAGS:
            self.diags.warning(node.span, f"Unknown tag </{name}> is ignored by the preview")
            self.nodes.append(node)
            return

        match = None
        for depth in range(len(self.stack) - 1, -1, -1):
            if self.stack[depth].name == name:
                match = depth
                break
        if match is None:
            self.diags.warning(node.span, f"</{name}> has no matching <{name}>")
            return

        while len(self.stack) - 1 > match:
            inner = self.stack.pop()
            self.diags.warning(inner.span, f"<{inner.name}> implicitly closed by </{name}>")
            self.nodes.append(Node(NodeKind.CLOSE, Span(at, 0), name=inner.name, synthetic=True))
        self.stack.pop()
        self.nodes.append(node)

    def _close_remaining(self) -> None:
        end = len(self.text)
        while self.stack:
            node = self.stack.pop()
            self.diags.warning(
                node.span, f"<{node.name}> is never closed; closed at end of document"
            )
            self.nodes.append(Node(NodeKind.CLOSE, Span(end, 0), name=node.name, synthetic=True))

    def _validate_open(self, node: Node) -> None:
        name = node.name
        used = TAG_ATTRIBUTES[name]

        if name == TAG_BR:
            if node.attributes:
                self.diags.warning(node.span, "BR takes no attributes")
            return

        for attr in node.attributes:
            if attr.name not in used:
                self.diags.info(attr.span, f"Attribute '{attr.name}' is not used by <{name}>")

        if name == TAG_FONT:
            face = node.attribute("face")
            if face is None:
                self.diags.warning(node.span, "FONT without face; the default font is used")
            elif parse_positive_int(face.value) is None:
                self.diags.error(
                    _value_span(face), f"FONT face must be a positive integer, got '{face.value}'"
                )

        elif name == TAG_DIV:
            align = node.attribute("align")
            if align is not None and align.value.strip().lower() not in ALIGNMENTS:
                self.diags.warning(
                    _value_span(align),
                    f"Unknown alignment '{align.value}'; expected left, center or right",
                )

        elif name == TAG_IMG:
            src = node.attribute("src")
            if src is None or not src.value.strip():
                self.diags.warning(node.span, "IMG without src")
            elif self.settings.auto_normalize_slashes:
                for i, ch in enumerate(src.value):
                    if ch == "\\":
                        self.diags.info(
                            Span(src.value_span.offset + i, 1),
                            "Backslash normalized to forward slash in IMG src path",
                        )
            for dimension in ("width", "height"):
                attr = node.attribute(dimension)
                if attr is None:
                    continue
                number = parse_positive_int(attr.value)
                if number is None:
                    self.diags.error(
                        _value_span(attr),
                        f"IMG {dimension} must be a positive integer, got '{attr.value}'",
                    )
                elif dimension == "width" and number > self.settings.max_image_width:
                    self.diags.error(
                        _value_span(attr),
                        f"IMG width {number} exceeds safe maximum "
                        f"({self.settings.max_image_width}). Risk: crash on open.",
                    )


def _value_span(attr: Attribute) -> Span:
    return attr.value_span if attr.value_span.length else attr.span
