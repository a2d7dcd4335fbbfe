"""
Module: compiler.diagnostics

Accumulates severity-tagged issues raised while parsing, resolving assets
and laying out a page. Issues keep the order they were detected in and are
never merged; every span is clamped to the source text the collector was
created for.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from obbook.core.models import Diagnostic, Severity, Span, Stage

logger = logging.getLogger(__name__)


class DiagnosticsCollector:
    """
    Ordered collector for diagnostics against one source text.

    The current stage is stamped on every issue; switch it with `stage()`
    as the pipeline moves from parsing to asset resolution to layout.

    Example:
        >>> collector = DiagnosticsCollector("<FONT face=1")
        >>> collector.error(Span(0, 12), "Unterminated tag")
        >>> collector.issue_count
        1
    """

    def __init__(self, source: str, stage: Stage = Stage.PARSE):
        self._source_length = len(source)
        self._issues: List[Diagnostic] = []
        self._stage = stage

    @property
    def current_stage(self) -> Stage:
        return self._stage

    @contextmanager
    def stage(self, stage: Stage) -> Iterator["DiagnosticsCollector"]:
        """Stamp issues added inside the block with `stage`."""
        previous = self._stage
        self._stage = stage
        try:
            yield self
        finally:
            self._stage = previous

    def add(self, severity: Severity, span: Span, message: str) -> None:
        """Record an issue, clamping its span to the source text."""
        offset = min(span.offset, self._source_length)
        length = min(span.length, self._source_length - offset)
        issue = Diagnostic(
            severity=severity,
            offset=offset,
            length=length,
            message=message,
            stage=self._stage,
        )
        self._issues.append(issue)
        logger.debug(f"{self._stage.value}: {issue.format()}")

    def info(self, span: Span, message: str) -> None:
        """Record a style suggestion."""
        self.add(Severity.INFO, span, message)

    def warning(self, span: Span, message: str) -> None:
        """Record a recoverable semantic issue."""
        self.add(Severity.WARNING, span, message)

    def error(self, span: Span, message: str) -> None:
        """Record a structural markup problem."""
        self.add(Severity.ERROR, span, message)

    def extend(self, issues: Iterable[Diagnostic]) -> None:
        """Append diagnostics produced elsewhere, keeping their order."""
        for issue in issues:
            self.add(issue.severity, Span(issue.offset, issue.length), issue.message)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._issues)

    @property
    def issue_count(self) -> int:
        return len(self._issues)

    def count(self, severity: Optional[Severity] = None) -> int:
        """Number of issues, optionally of one severity."""
        if severity is None:
            return len(self._issues)
        return sum(1 for issue in self._issues if issue.severity is severity)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity is Severity.ERROR for issue in self._issues)
