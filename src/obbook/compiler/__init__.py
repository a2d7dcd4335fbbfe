"""
Module: compiler

Purpose:
    Source-to-diagnostics compilation of book markup: parsing, the
    diagnostics collector, normalization, asset cross-checks and DESC
    export.

Key Functions:
    - parse(): Markup -> nodes + diagnostics
    - normalize(): Nodes -> canonical markup
    - check_asset_references(): Resolve-stage cross-check
    - export_desc(): Normalized markup -> DESC text

Key Classes:
    - DiagnosticsCollector: Ordered issue accumulator
    - ParseResult, ExportResult
"""

from .diagnostics import DiagnosticsCollector
from .parser import ParseResult, parse
from .normalizer import normalize, straighten_quotes
from .validate import check_asset_references
from .export import ExportResult, export_desc

__all__ = [
    "DiagnosticsCollector",
    "ParseResult",
    "parse",
    "normalize",
    "straighten_quotes",
    "check_asset_references",
    "ExportResult",
    "export_desc",
]
