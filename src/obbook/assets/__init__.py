"""
Module: assets

Purpose:
    Game data discovery. Resolves the data directory from an install path
    and indexes the book fonts and textures found in loose files and .bsa
    archives.

Key Functions:
    - resolve(): Root path -> Resolution
    - scan_assets(): Data directory -> AssetIndex
    - list_archive(): .bsa file listing

Key Classes:
    - AssetScanConfig: Scan configuration
    - AssetIndex: Queryable font/texture sets
    - Resolution: Data directory + index

Used By:
    - obbook.engine
    - obbook.compiler.validate
    - obbook.layout
"""

from .config import AssetScanConfig
from .index import AssetIndex, order_fonts, prefer_entry
from .archive import ArchiveFormatError, list_archive
from .resolver import Resolution, resolve, resolve_data_directory, scan_assets

__all__ = [
    "AssetScanConfig",
    "AssetIndex",
    "order_fonts",
    "prefer_entry",
    "ArchiveFormatError",
    "list_archive",
    "Resolution",
    "resolve",
    "resolve_data_directory",
    "scan_assets",
]
