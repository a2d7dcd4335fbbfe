"""
Module: obbook.config

Purpose:
    Project-wide settings for compiling and exporting book markup.
    Immutable settings with validation on construction.

Key Classes:
    - ProjectSettings: Export governance and normalization switches

Dependencies:
    - dataclasses (std)
    - os (std): OBLIVION_PATH lookup

Used By:
    - obbook.compiler: Parser, normalizer and export
    - obbook.engine: Facade state
"""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass

# Windows-1252 matches the English release of the game
DEFAULT_CODEPAGE = 1252

# Wider images crash the book menu when the book is opened
DEFAULT_MAX_IMAGE_WIDTH = 490

# Preview size used when the shell does not ask for one
DEFAULT_PREVIEW_WIDTH = 1000
DEFAULT_PREVIEW_HEIGHT = 700
DEFAULT_PREVIEW_DPI = 96.0

OBLIVION_PATH_ENV = "OBLIVION_PATH"


@dataclass(frozen=True)
class ProjectSettings:
    """
    Settings for one book project (immutable).

    Attributes:
        codepage: Windows codepage the DESC field is stored in
        max_image_width: Largest IMG width the game opens safely
        auto_normalize_smart_quotes: Rewrite curly quotes as straight quotes
        auto_normalize_slashes: Rewrite backslashes in IMG src as slashes
        oblivion_directory: Game root or Data folder ("" when unknown)
        export_line_ending: Line break written into the DESC text
        preview_width: Page width for compile-time layout checks
        preview_height: Page height for compile-time layout checks
        preview_dpi: DPI for compile-time layout checks

    Example:
        >>> settings = ProjectSettings(max_image_width=256)
        >>> settings.encoding
        'cp1252'
    """

    codepage: int = DEFAULT_CODEPAGE
    max_image_width: int = DEFAULT_MAX_IMAGE_WIDTH
    auto_normalize_smart_quotes: bool = True
    auto_normalize_slashes: bool = True
    oblivion_directory: str = ""
    export_line_ending: str = "\r\n"
    preview_width: int = DEFAULT_PREVIEW_WIDTH
    preview_height: int = DEFAULT_PREVIEW_HEIGHT
    preview_dpi: float = DEFAULT_PREVIEW_DPI

    def __post_init__(self) -> None:
        """Validate settings on construction."""
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"Unsupported codepage: {self.codepage}") from e
        if self.max_image_width <= 0:
            raise ValueError(f"max_image_width must be positive: {self.max_image_width}")
        if self.export_line_ending not in ("\n", "\r\n"):
            raise ValueError(f"export_line_ending must be LF or CRLF: {self.export_line_ending!r}")
        if self.preview_width <= 0 or self.preview_height <= 0:
            raise ValueError(
                f"preview size must be positive: {self.preview_width}x{self.preview_height}"
            )
        if self.preview_dpi <= 0:
            raise ValueError(f"preview_dpi must be positive: {self.preview_dpi}")

    @property
    def encoding(self) -> str:
        """Python codec name for the export codepage."""
        return f"cp{self.codepage}"

    @classmethod
    def from_env(cls, **overrides) -> "ProjectSettings":
        """
        Build settings with the game directory taken from OBLIVION_PATH.

        Explicit keyword overrides win over the environment.

        Example:
            >>> settings = ProjectSettings.from_env(codepage=1250)
        """
        values = {"oblivion_directory": os.environ.get(OBLIVION_PATH_ENV, "")}
        values.update(overrides)
        return cls(**values)
