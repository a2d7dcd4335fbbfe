"""
Module: assets

Purpose:
    Provides the AssetEntry dataclass - one font or texture the game can
    load, keyed by its logical path relative to the font or texture root.

Key Functions:
    - normalize_asset_key(): Canonical comparison key for a path

Key Classes:
    - AssetKind: FONT / TEXTURE
    - AssetEntry: Indexed asset

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - obbook.assets.index
    - obbook.assets.resolver
    - obbook.layout
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Optional


class AssetKind(Enum):
    """Asset family, fixed by the subtree the file was found under."""

    FONT = "font"
    TEXTURE = "texture"


def normalize_asset_key(path: str) -> str:
    """
    Canonical comparison key for a logical asset path.

    Backslashes become forward slashes, runs of slashes collapse, leading
    "./" and "/" are dropped and the result is lower-cased.

    Examples:
        >>> normalize_asset_key("Book\\\\Fancy_Font\\\\A.dds")
        'book/fancy_font/a.dds'
        >>> normalize_asset_key("./book//x.DDS")
        'book/x.dds'
    """
    parts = [p for p in path.strip().replace("\\", "/").split("/") if p and p != "."]
    return "/".join(parts).lower()


@dataclass(frozen=True, slots=True)
class AssetEntry:
    """
    One indexed asset (immutable).

    Attributes:
        logical_path: Path relative to the asset root, original casing,
            forward slashes
        kind: FONT or TEXTURE
        resolved_path: Loose file on disk, None for archive entries
        archive: Archive file name the entry was listed from, if any

    Example:
        >>> entry = AssetEntry("Book/X.dds", AssetKind.TEXTURE, archive="Textures.bsa")
        >>> entry.key, entry.display
        ('book/x.dds', 'Book/X.dds [Textures.bsa]')
    """

    logical_path: str
    kind: AssetKind
    resolved_path: Optional[Path] = None
    archive: Optional[str] = None

    @property
    def key(self) -> str:
        """Case-insensitive unique key within an index."""
        return normalize_asset_key(self.logical_path)

    @property
    def is_loose(self) -> bool:
        return self.resolved_path is not None

    @property
    def depth(self) -> int:
        """Number of directories between the asset root and the file."""
        return len(PurePosixPath(self.key).parts) - 1

    @property
    def stem(self) -> str:
        """Lower-cased file name without extension."""
        return PurePosixPath(self.key).stem

    @property
    def display(self) -> str:
        """Display string, with a bracketed archive suffix for packed entries."""
        if self.archive:
            return f"{self.logical_path} [{self.archive}]"
        return self.logical_path
