"""
Module: obbook.engine

Purpose:
    Orchestrate the book pipeline for an editor shell.
    Parse → Normalize → Export → Resolve → Cross-check → Layout check

    The shell sets the source text and game directory, calls compile(),
    then reads diagnostics, normalized/export text, asset listings and
    preview bitmaps. Every compile produces a fresh immutable
    CompileResult; nothing is updated incrementally.

Key Classes:
    - BookEngine: Stateful facade
    - CompileResult: Snapshot of one compile
    - EngineError: Internal invariant violation

Dependencies:
    - obbook.compiler: parse, normalize, export_desc, check_asset_references
    - obbook.assets: resolve
    - obbook.layout / obbook.output: Preview layout and rendering

Used By:
    - Editor shells (outside this package)
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from obbook.assets import AssetIndex, AssetScanConfig, Resolution, resolve
from obbook.compiler import (
    DiagnosticsCollector,
    check_asset_references,
    export_desc,
    normalize,
    parse,
)
from obbook.compiler.export import ExportResult
from obbook.config import ProjectSettings
from obbook.core.models import Diagnostic, Node, Severity, Stage
from obbook.layout import LayoutConfig, layout_page
from obbook.output import PreviewPage, render

logger = logging.getLogger(__name__)

Scanner = Callable[[str, AssetScanConfig], Resolution]


class EngineError(Exception):
    """Internal invariant violated during a compile."""
    pass


@dataclass(frozen=True)
class CompileResult:
    """
    Complete compile snapshot (immutable).

    Attributes:
        source: Source text that was compiled
        nodes: Parsed node sequence
        normalized_text: Canonical markup
        export: DESC export of the normalized markup
        diagnostics: All issues, parse stage first, offsets into `source`
        index: Asset index used for cross-checks and the preview
        data_directory: Resolved data directory, None if unresolved

    Example:
        >>> result = BookEngine().compile()
        >>> result.error_count
        0
    """

    source: str
    nodes: tuple[Node, ...]
    normalized_text: str
    export: ExportResult
    diagnostics: tuple[Diagnostic, ...]
    index: AssetIndex
    data_directory: Optional[Path]

    def count(self, severity: Severity) -> int:
        return sum(1 for d in self.diagnostics if d.severity == severity)

    @property
    def error_count(self) -> int:
        return self.count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(Severity.WARNING)


class BookEngine:
    """
    Facade owning the current source text, game directory and asset index.

    Not thread-safe; callers serialize access to one instance.

    Example:
        >>> engine = BookEngine()
        >>> engine.set_source_text('<DIV align="center">Hello</DIV>')
        >>> _ = engine.compile()
        >>> engine.normalized_text
        '<DIV align="center">Hello</DIV>'
    """

    def __init__(
        self,
        settings: Optional[ProjectSettings] = None,
        *,
        scan_config: Optional[AssetScanConfig] = None,
        scanner: Scanner = resolve,
    ):
        self._settings = settings or ProjectSettings()
        self._scan_config = scan_config or AssetScanConfig()
        self._scanner = scanner

        self._source = ""
        self._directory = self._settings.oblivion_directory
        self._rescan = False

        self._resolved_key: Optional[str] = None
        self._resolution: Optional[Resolution] = None
        self._scan_count = 0
        self._last: Optional[CompileResult] = None

    # ─────────────────────────────────────────────────────────────────────
    # Inputs
    # ─────────────────────────────────────────────────────────────────────

    @property
    def settings(self) -> ProjectSettings:
        return self._settings

    def set_settings(self, settings: ProjectSettings) -> None:
        """
        Replace project settings; takes effect on the next compile.

        A game directory in the new settings replaces the current one when
        it differs from the directory the old settings carried.
        """
        previous = self._settings.oblivion_directory
        self._settings = settings
        if settings.oblivion_directory != previous:
            self._directory = settings.oblivion_directory

    @property
    def source_text(self) -> str:
        return self._source

    def set_source_text(self, text: str) -> None:
        """Replace the source markup; takes effect on the next compile."""
        self._source = text or ""

    @property
    def oblivion_directory(self) -> str:
        return self._directory

    def set_oblivion_directory(self, path) -> None:
        """
        Replace the game directory.

        The directory is rescanned on the next compile only if the path
        differs from the one last scanned.
        """
        self._directory = "" if path is None else os.fspath(path)

    def request_rescan(self) -> None:
        """Force a rescan of the current directory on the next compile."""
        self._rescan = True

    @property
    def scan_count(self) -> int:
        """Number of directory scans performed by this engine."""
        return self._scan_count

    # ─────────────────────────────────────────────────────────────────────
    # Pipeline
    # ─────────────────────────────────────────────────────────────────────

    def compile(self) -> CompileResult:
        """
        Run the full pipeline over the current inputs.

        Malformed markup never raises; it produces diagnostics.

        Returns:
            CompileResult, also kept for the output accessors

        Raises:
            EngineError: If a diagnostic falls outside the source text
        """
        start_time = time.perf_counter()
        settings = self._settings
        source = self._source
        collector = DiagnosticsCollector(source)

        # 1. Parse
        parsed = parse(source, settings, collector)

        # 2. Normalize + export
        normalized = normalize(parsed.nodes, settings)
        export = export_desc(normalized, settings)

        # 3. Resolve (cached per directory)
        resolution = self._resolve()

        # 4. Cross-check asset references
        check_asset_references(parsed.nodes, resolution.index, collector)

        # 5. Layout at the default preview size
        layout = layout_page(
            parsed.nodes,
            resolution.index,
            LayoutConfig.fit(settings.preview_width, settings.preview_height, settings.preview_dpi),
        )
        with collector.stage(Stage.LAYOUT):
            collector.extend(layout.diagnostics)

        diagnostics = collector.diagnostics
        _check_spans(diagnostics, source)

        result = CompileResult(
            source=source,
            nodes=parsed.nodes,
            normalized_text=normalized,
            export=export,
            diagnostics=diagnostics,
            index=resolution.index,
            data_directory=resolution.data_directory,
        )
        self._last = result

        elapsed = time.perf_counter() - start_time
        logger.info(
            f"Compiled {len(source)} chars: {collector.count(Severity.ERROR)} errors, "
            f"{collector.count(Severity.WARNING)} warnings, "
            f"{collector.count(Severity.INFO)} info in {elapsed:.3f}s"
        )
        return result

    def _resolve(self) -> Resolution:
        key = self._directory
        if self._resolution is not None and key == self._resolved_key and not self._rescan:
            return self._resolution

        self._scan_count += 1
        self._rescan = False
        try:
            resolution = self._scanner(key, self._scan_config)
        except OSError as e:
            logger.warning(f"Asset scan of {key!r} failed, keeping previous index: {e}")
            if self._resolution is not None:
                # Not retried until the path changes or a rescan is requested
                self._resolved_key = key
                return self._resolution
            resolution = Resolution(
                root=key,
                data_directory=None,
                index=AssetIndex(
                    face_order=self._scan_config.font_face_order,
                    prefer_loose=self._scan_config.prefer_loose_files,
                ),
            )

        self._resolution = resolution
        self._resolved_key = key
        logger.info(
            f"Resolved {key!r} -> {resolution.data_directory}: "
            f"{resolution.index.font_count} fonts, {resolution.index.texture_count} textures"
        )
        return resolution

    # ─────────────────────────────────────────────────────────────────────
    # Outputs
    # ─────────────────────────────────────────────────────────────────────

    @property
    def last_result(self) -> Optional[CompileResult]:
        return self._last

    def _current(self) -> CompileResult:
        return self._last if self._last is not None else self.compile()

    @property
    def normalized_text(self) -> str:
        return self._current().normalized_text

    @property
    def export_desc_text(self) -> str:
        """Text for the book's DESC field (codepage-safe, CRLF)."""
        return self._current().export.text

    def export_desc_bytes(self) -> bytes:
        """DESC text encoded in the project codepage."""
        return self._current().export.data

    def get_diagnostics(self) -> List[Diagnostic]:
        """Diagnostics of the most recent compile, in stable order."""
        return list(self._current().diagnostics)

    @property
    def resolved_data_directory(self) -> str:
        """Absolute data directory of the asset index, "" if unresolved."""
        data_directory = self._current().data_directory
        return "" if data_directory is None else str(data_directory)

    def get_book_font_assets(self) -> List[str]:
        return self._current().index.font_displays()

    def get_book_texture_assets(self) -> List[str]:
        return self._current().index.texture_displays()

    def render_preview_page(self, width: int, height: int, dpi: float = 96.0) -> PreviewPage:
        """
        Render the most recent compile's content to a new bitmap.

        Raises:
            ValueError: If width, height or dpi is not positive
        """
        result = self._current()
        return render(result.nodes, result.index, width, height, dpi)


def _check_spans(diagnostics: tuple[Diagnostic, ...], source: str) -> None:
    for diagnostic in diagnostics:
        if not diagnostic.fits(source):
            raise EngineError(
                f"Diagnostic span {diagnostic.offset}+{diagnostic.length} outside source "
                f"of length {len(source)}: {diagnostic.message}"
            )
