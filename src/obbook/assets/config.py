"""
Module: assets.config

Purpose:
    Configuration for discovering book fonts and textures in a game
    installation. Names the marker directory, the font and texture roots,
    extension allowlists and the font slot order used by FONT face=N.

Key Classes:
    - AssetScanConfig: Immutable scan configuration

Dependencies:
    - dataclasses (std)

Used By:
    - obbook.assets.resolver: Directory resolution and scanning
    - obbook.assets.index: Font ordinal order
"""

from __future__ import annotations

from dataclasses import dataclass

# Font slots 1-5 as configured by a default Oblivion.ini (SFontFile_1..5)
DEFAULT_FONT_FACE_ORDER = (
    "kingthings_regular",
    "kingthings_shadowed",
    "tahoma_bold_small",
    "daedric_font",
    "handwritten",
)


@dataclass(frozen=True)
class AssetScanConfig:
    """
    Configuration for asset discovery (immutable).

    Attributes:
        data_marker: Subdirectory of the install root holding game data
        font_root: Font root, relative to the data directory
        texture_root: Directory IMG src paths are relative to
        texture_subtree: Subdirectory of texture_root holding book textures
        font_extensions: Font file suffixes to index (lower case)
        texture_extensions: Texture file suffixes to index (lower case)
        font_face_order: Font stems in FONT face order; other fonts follow
            sorted by path
        scan_archives: List .bsa archives in the data directory
        archive_extension: Archive file suffix
        prefer_loose_files: Loose files override archive entries with the
            same logical path, as they do in game

    Example:
        >>> config = AssetScanConfig(texture_extensions=(".dds", ".tga"))
        >>> config.texture_prefix
        'textures/menus/'
    """

    data_marker: str = "Data"
    font_root: str = "Fonts"
    texture_root: str = "Textures/Menus"
    texture_subtree: str = "Book"
    font_extensions: tuple[str, ...] = (".fnt",)
    texture_extensions: tuple[str, ...] = (".dds",)
    font_face_order: tuple[str, ...] = DEFAULT_FONT_FACE_ORDER
    scan_archives: bool = True
    archive_extension: str = ".bsa"
    prefer_loose_files: bool = True

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not self.data_marker:
            raise ValueError("data_marker must not be empty")
        if not self.font_root or not self.texture_root or not self.texture_subtree:
            raise ValueError("font_root, texture_root and texture_subtree must not be empty")
        for suffix in self.font_extensions + self.texture_extensions + (self.archive_extension,):
            if not suffix.startswith(".") or suffix != suffix.lower():
                raise ValueError(f"extensions must be lower case and start with '.': {suffix!r}")

    @property
    def font_prefix(self) -> str:
        """Archive path prefix of the font root."""
        return _prefix(self.font_root)

    @property
    def texture_prefix(self) -> str:
        """Archive path prefix of the texture root."""
        return _prefix(self.texture_root)


def _prefix(path: str) -> str:
    return path.replace("\\", "/").strip("/").lower() + "/"
