"""
Module: assets.resolver

Purpose:
    Resolve a user-supplied game path to the data directory and scan it
    for book fonts and textures. Resolution fails softly: bad input gives
    an empty index and no data directory, never an exception.

Key Functions:
    - resolve(): Root path -> Resolution (main entry point)
    - resolve_data_directory(): Install root or Data folder -> Data folder
    - scan_assets(): Data folder -> AssetIndex

Algorithm:
    1. A root with a `Data` child (any case) is an install root.
    2. Otherwise the root itself counts when it has a font root, a
       texture root or archives.
    3. Loose files are walked depth-first, directories and files sorted
       case-insensitively, so files nearer the root are seen first.
    4. Archives are listed after loose files; loose files win duplicates.

Dependencies:
    - os (std): Directory walking
    - obbook.assets.archive: .bsa listing

Used By:
    - obbook.engine: Re-resolution when the directory changes
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from obbook.core.models import AssetEntry, AssetKind

from .archive import ArchiveFormatError, list_archive
from .config import AssetScanConfig
from .index import AssetIndex

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving a game path (immutable).

    Attributes:
        root: Path as supplied by the caller
        data_directory: Absolute data directory, or None if unresolved
        index: Assets found (empty when unresolved)
    """

    root: str
    data_directory: Optional[Path]
    index: AssetIndex

    @property
    def resolved(self) -> bool:
        return self.data_directory is not None


def resolve(root: Optional[PathLike], config: Optional[AssetScanConfig] = None) -> Resolution:
    """
    Resolve a game path and index its assets.

    Args:
        root: Game install root or its Data folder ("" / None allowed)
        config: Scan configuration

    Returns:
        Resolution; unresolved input gives data_directory=None and an
        empty index

    Example:
        >>> res = resolve("C:/Games/Oblivion")
        >>> res.data_directory.name
        'Data'
    """
    config = config or AssetScanConfig()
    text = "" if root is None else os.fspath(root)

    data_directory = resolve_data_directory(text, config)
    if data_directory is None:
        logger.info(f"Game data directory not resolved from {text!r}")
        return Resolution(
            root=text,
            data_directory=None,
            index=AssetIndex(face_order=config.font_face_order, prefer_loose=config.prefer_loose_files),
        )

    index = scan_assets(data_directory, config)
    return Resolution(root=text, data_directory=data_directory, index=index)


def resolve_data_directory(root: Optional[PathLike], config: Optional[AssetScanConfig] = None) -> Optional[Path]:
    """
    Find the data directory for an install root or a data directory.

    Returns:
        Absolute data directory, or None for empty, missing or
        unrecognizable input
    """
    config = config or AssetScanConfig()
    text = "" if root is None else os.fspath(root).strip()
    if not text:
        return None

    path = Path(text).expanduser()
    try:
        if not path.is_dir():
            return None
    except OSError as e:
        logger.warning(f"Cannot access {path}: {e}")
        return None

    marker = find_child_directory(path, config.data_marker)
    if marker is not None:
        return marker.resolve()

    if _looks_like_data_directory(path, config):
        return path.resolve()
    return None


def scan_assets(data_directory: Path, config: Optional[AssetScanConfig] = None) -> AssetIndex:
    """
    Index book fonts and textures under a data directory.

    I/O errors are logged and the affected files treated as absent.

    Args:
        data_directory: Resolved data directory
        config: Scan configuration

    Returns:
        AssetIndex for the directory
    """
    config = config or AssetScanConfig()
    index = AssetIndex(
        data_directory,
        face_order=config.font_face_order,
        prefer_loose=config.prefer_loose_files,
    )

    font_root = find_subpath(data_directory, config.font_root)
    if font_root is not None:
        for path, relative in walk_files(font_root, config.font_extensions):
            index.add(AssetEntry(relative, AssetKind.FONT, resolved_path=path))

    texture_root = find_subpath(data_directory, config.texture_root)
    book_root = find_child_directory(texture_root, config.texture_subtree) if texture_root else None
    if book_root is not None:
        for path, relative in walk_files(book_root, config.texture_extensions):
            index.add(AssetEntry(f"{book_root.name}/{relative}", AssetKind.TEXTURE, resolved_path=path))

    if config.scan_archives:
        for archive in _archives(data_directory, config):
            _index_archive(index, archive, config)

    logger.info(
        f"Indexed {index.font_count} fonts and {index.texture_count} textures "
        f"under {data_directory}"
    )
    return index


# ─────────────────────────────────────────────────────────────────────────────
# Filesystem helpers
# ─────────────────────────────────────────────────────────────────────────────

def find_child_directory(parent: Path, name: str) -> Optional[Path]:
    """
    Case-insensitive lookup of a subdirectory.

    An exact-case match wins; otherwise the first match in sorted order.
    """
    exact = parent / name
    try:
        if exact.is_dir():
            return exact
        wanted = name.lower()
        for child in sorted(parent.iterdir(), key=lambda p: p.name):
            if child.name.lower() == wanted and child.is_dir():
                return child
    except OSError as e:
        logger.warning(f"Cannot list {parent}: {e}")
    return None


def find_subpath(base: Path, relative: str) -> Optional[Path]:
    """Case-insensitive lookup of a nested directory like 'Textures/Menus'."""
    current: Optional[Path] = base
    for part in relative.replace("\\", "/").split("/"):
        if not part:
            continue
        current = find_child_directory(current, part)
        if current is None:
            return None
    return current


def walk_files(root: Path, extensions: Tuple[str, ...]) -> Iterator[Tuple[Path, str]]:
    """
    Depth-first walk yielding files with an allowed extension.

    Files of a directory come before those of its subdirectories; both
    are sorted case-insensitively.

    Yields:
        (absolute path, path relative to root with forward slashes)
    """
    def _on_error(error: OSError) -> None:
        logger.warning(f"Skipping unreadable directory {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames.sort(key=str.lower)
        current = Path(dirpath)
        for filename in sorted(filenames, key=str.lower):
            if os.path.splitext(filename)[1].lower() not in extensions:
                continue
            path = current / filename
            yield path, path.relative_to(root).as_posix()


def _looks_like_data_directory(path: Path, config: AssetScanConfig) -> bool:
    if find_child_directory(path, config.font_root) is not None:
        return True
    texture_top = config.texture_root.replace("\\", "/").split("/")[0]
    if find_child_directory(path, texture_top) is not None:
        return True
    return bool(config.scan_archives and _archives(path, config))


def _archives(data_directory: Path, config: AssetScanConfig) -> list[Path]:
    try:
        children = list(data_directory.iterdir())
    except OSError as e:
        logger.warning(f"Cannot list {data_directory}: {e}")
        return []
    archives = [
        child for child in children
        if child.suffix.lower() == config.archive_extension and child.is_file()
    ]
    return sorted(archives, key=lambda p: p.name.lower())


def _index_archive(index: AssetIndex, archive: Path, config: AssetScanConfig) -> None:
    try:
        paths = list_archive(archive)
    except (ArchiveFormatError, OSError) as e:
        logger.warning(f"Skipping archive {archive.name}: {e}")
        return

    font_prefix = config.font_prefix
    texture_prefix = config.texture_prefix
    book_prefix = config.texture_subtree.lower() + "/"
    added = 0

    for stored in paths:
        key = stored.lower()
        suffix = os.path.splitext(key)[1]
        if key.startswith(font_prefix) and suffix in config.font_extensions:
            entry = AssetEntry(stored[len(font_prefix):], AssetKind.FONT, archive=archive.name)
        elif (
            key.startswith(texture_prefix)
            and key[len(texture_prefix):].startswith(book_prefix)
            and suffix in config.texture_extensions
        ):
            entry = AssetEntry(stored[len(texture_prefix):], AssetKind.TEXTURE, archive=archive.name)
        else:
            continue
        index.add(entry)
        added += 1

    logger.debug(f"Archive {archive.name}: {added} book assets of {len(paths)} files")
