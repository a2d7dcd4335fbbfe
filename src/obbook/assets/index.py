"""
Module: assets.index

Purpose:
    Case-insensitive index of the fonts and textures found in one data
    directory. Keys are lower-cased forward-slash paths; duplicates go
    through `prefer_entry()`, the single place the tie-break policy lives.

Key Functions:
    - prefer_entry(): Duplicate tie-break policy
    - order_fonts(): FONT face ordinal order

Key Classes:
    - AssetIndex: Queryable font and texture sets

Dependencies:
    - obbook.core.models: AssetEntry, AssetKind

Used By:
    - obbook.assets.resolver: Builds the index
    - obbook.compiler.validate: Cross-checks markup references
    - obbook.layout: Font selection and image sizes
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional, Sequence

from obbook.core.models import AssetEntry, AssetKind, normalize_asset_key

from .config import DEFAULT_FONT_FACE_ORDER

logger = logging.getLogger(__name__)


def prefer_entry(current: AssetEntry, candidate: AssetEntry, *, prefer_loose: bool = True) -> AssetEntry:
    """
    Choose which of two entries with the same key stays indexed.

    Policy:
        1. A loose file beats an archive entry (when prefer_loose)
        2. Otherwise the entry seen first wins

    Callers must not depend on which duplicate wins beyond this.

    Args:
        current: Entry already in the index
        candidate: Entry found later with the same key

    Returns:
        The entry to keep
    """
    if prefer_loose and current.is_loose != candidate.is_loose:
        return current if current.is_loose else candidate
    return current


def order_fonts(entries: Iterable[AssetEntry], face_order: Sequence[str]) -> List[AssetEntry]:
    """
    Order fonts for FONT face=N lookups.

    Fonts whose stem appears in `face_order` come first in that order;
    the rest follow sorted by key.

    Example:
        >>> fonts = [AssetEntry("Zed.fnt", AssetKind.FONT),
        ...          AssetEntry("Kingthings_Regular.fnt", AssetKind.FONT)]
        >>> [f.logical_path for f in order_fonts(fonts, ("kingthings_regular",))]
        ['Kingthings_Regular.fnt', 'Zed.fnt']
    """
    slots = {stem.lower(): i for i, stem in enumerate(face_order)}
    return sorted(entries, key=lambda e: (slots.get(e.stem, len(slots)), e.key))


class AssetIndex:
    """
    Font and texture sets for one data directory.

    Attributes:
        data_directory: Directory the index was built from, or None

    Example:
        >>> index = AssetIndex()
        >>> index.add(AssetEntry("Book/X.dds", AssetKind.TEXTURE, Path("/d/X.dds")))
        True
        >>> index.find_texture("book\\\\x.DDS").logical_path
        'Book/X.dds'
    """

    def __init__(
        self,
        data_directory: Optional[Path] = None,
        *,
        face_order: Sequence[str] = DEFAULT_FONT_FACE_ORDER,
        prefer_loose: bool = True,
    ):
        self.data_directory = data_directory
        self._face_order = tuple(face_order)
        self._prefer_loose = prefer_loose
        self._entries: Dict[AssetKind, Dict[str, AssetEntry]] = {
            AssetKind.FONT: {},
            AssetKind.TEXTURE: {},
        }
        self._ordered_fonts: Optional[List[AssetEntry]] = None

    def add(self, entry: AssetEntry) -> bool:
        """
        Index an entry.

        Returns:
            True if the entry is now the indexed one for its key
        """
        bucket = self._entries[entry.kind]
        current = bucket.get(entry.key)
        if current is None:
            bucket[entry.key] = entry
            kept = entry
        else:
            kept = prefer_entry(current, entry, prefer_loose=self._prefer_loose)
            if kept is not current:
                bucket[entry.key] = kept
            logger.debug(f"Duplicate {entry.kind.value} '{entry.key}': kept {kept.display}")
        if entry.kind is AssetKind.FONT:
            self._ordered_fonts = None
        return kept is entry

    # ─────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────

    @property
    def fonts(self) -> List[AssetEntry]:
        """Fonts in FONT face order."""
        if self._ordered_fonts is None:
            self._ordered_fonts = order_fonts(
                self._entries[AssetKind.FONT].values(), self._face_order
            )
        return list(self._ordered_fonts)

    @property
    def textures(self) -> List[AssetEntry]:
        """Textures sorted by key."""
        bucket = self._entries[AssetKind.TEXTURE]
        return [bucket[key] for key in sorted(bucket)]

    @property
    def font_count(self) -> int:
        return len(self._entries[AssetKind.FONT])

    @property
    def texture_count(self) -> int:
        return len(self._entries[AssetKind.TEXTURE])

    @property
    def is_empty(self) -> bool:
        return self.font_count == 0 and self.texture_count == 0

    def __len__(self) -> int:
        return self.font_count + self.texture_count

    def find(self, kind: AssetKind, path: str) -> Optional[AssetEntry]:
        """Look up an entry by logical path (case and slash insensitive)."""
        return self._entries[kind].get(normalize_asset_key(path))

    def find_texture(self, path: str) -> Optional[AssetEntry]:
        return self.find(AssetKind.TEXTURE, path)

    def font_for_face(self, face: int) -> Optional[AssetEntry]:
        """
        Font selected by FONT face=N (1-based).

        Returns:
            The entry, or None when there is no N-th font
        """
        fonts = self.fonts
        if 1 <= face <= len(fonts):
            return fonts[face - 1]
        return None

    def suggest_texture(self, path: str) -> Optional[AssetEntry]:
        """
        Texture with the same file name as `path`, for "did you mean" hints.

        When several subdirectories hold that name the one closest to the
        texture root wins, then the first in key order.
        """
        name = PurePosixPath(normalize_asset_key(path)).name
        if not name:
            return None
        matches = [e for e in self.textures if PurePosixPath(e.key).name == name]
        if not matches:
            return None
        return min(matches, key=lambda e: e.depth)

    def font_displays(self) -> List[str]:
        return [entry.display for entry in self.fonts]

    def texture_displays(self) -> List[str]:
        return [entry.display for entry in self.textures]
