"""
Module: diagnostics

Purpose:
    Provides the Diagnostic dataclass - a severity-tagged issue located by
    offset and length in the source text, plus the pipeline stage that
    raised it.

Key Classes:
    - Severity: INFO / WARNING / ERROR
    - Stage: PARSE / RESOLVE / LAYOUT
    - Diagnostic: One located issue

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - obbook.compiler.diagnostics.DiagnosticsCollector
    - obbook.engine
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any


class Severity(IntEnum):
    """Diagnostic severity, ordered from least to most serious."""

    INFO = 0
    WARNING = 1
    ERROR = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


class Stage(Enum):
    """Pipeline stage that detected an issue."""

    PARSE = "parse"
    RESOLVE = "resolve"
    LAYOUT = "layout"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """
    A located issue (immutable).

    Attributes:
        severity: INFO, WARNING or ERROR
        offset: Start position in the source text
        length: Number of characters covered
        message: Human readable description
        stage: Stage that raised it

    Invariants:
        - offset >= 0
        - length >= 0

    Example:
        >>> d = Diagnostic(Severity.ERROR, 0, 12, "Unterminated tag")
        >>> d.end
        12
    """

    severity: Severity
    offset: int
    length: int
    message: str
    stage: Stage = Stage.PARSE

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0: {self.offset}")
        if self.length < 0:
            raise ValueError(f"length must be >= 0: {self.length}")

    @property
    def end(self) -> int:
        return self.offset + self.length

    def fits(self, source: str) -> bool:
        """Check the span lies within `source`."""
        return self.end <= len(source)

    def format(self) -> str:
        """One-line summary in the layout the editor's issue list uses."""
        return f"{self.severity.label:<7} off={self.offset} len={self.length} :: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.label,
            "offset": self.offset,
            "length": self.length,
            "message": self.message,
            "stage": self.stage.value,
        }
