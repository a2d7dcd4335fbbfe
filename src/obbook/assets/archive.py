"""
Module: assets.archive

Purpose:
    List the files packed in a Bethesda .bsa archive without extracting
    them, so fonts and book textures shipped in the game's archives are
    indexed next to loose files.

Key Functions:
    - read_archive_header(): Parse and check the fixed header
    - list_archive(): File paths stored in an archive

Key Classes:
    - ArchiveHeader: Parsed header fields
    - ArchiveFormatError: Not a readable archive

Format (little endian, versions 103 Oblivion, 104, 105):
    header        36 bytes  magic "BSA\\0", version, folder record offset,
                            archive flags, folder count, file count,
                            folder name length, file name length, file flags
    folder recs   16 bytes each (24 in v105): hash, file count, offset
    file blocks   per folder: length-prefixed folder name, then 16-byte
                  file records
    file names    null-separated, in file record order

Dependencies:
    - struct (std)

Used By:
    - obbook.assets.resolver: Archive scanning
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List

BSA_MAGIC = b"BSA\x00"
SUPPORTED_VERSIONS = (103, 104, 105)

HEADER = struct.Struct("<4sIIIIIIII")
FOLDER_RECORD = struct.Struct("<QII")
FOLDER_RECORD_V105 = struct.Struct("<QIIQ")
FILE_RECORD = struct.Struct("<QII")

ARCHIVE_FLAG_DIRECTORY_NAMES = 0x1
ARCHIVE_FLAG_FILE_NAMES = 0x2

# Names in archives are stored in the game's single-byte codepage
NAME_ENCODING = "cp1252"


class ArchiveFormatError(Exception):
    """File is not a readable .bsa archive."""
    pass


@dataclass(frozen=True)
class ArchiveHeader:
    """
    Fixed archive header.

    Attributes:
        version: Format version (103 for Oblivion)
        folder_offset: Byte offset of the folder records
        archive_flags: Bit flags; bits 0/1 mean folder/file names are stored
        folder_count: Number of folders
        file_count: Number of files
        folder_names_length: Total length of all folder names
        file_names_length: Total length of the file name block
        file_flags: Content type flags
    """

    version: int
    folder_offset: int
    archive_flags: int
    folder_count: int
    file_count: int
    folder_names_length: int
    file_names_length: int
    file_flags: int

    @property
    def has_names(self) -> bool:
        wanted = ARCHIVE_FLAG_DIRECTORY_NAMES | ARCHIVE_FLAG_FILE_NAMES
        return self.archive_flags & wanted == wanted

    @property
    def folder_record(self) -> struct.Struct:
        return FOLDER_RECORD_V105 if self.version == 105 else FOLDER_RECORD


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ArchiveFormatError(f"Truncated archive: wanted {size} bytes, got {len(data)}")
    return data


def read_archive_header(stream: BinaryIO) -> ArchiveHeader:
    """
    Read and validate the archive header at the current position.

    Raises:
        ArchiveFormatError: Bad magic or unsupported version
    """
    fields = HEADER.unpack(_read_exact(stream, HEADER.size))
    magic, version = fields[0], fields[1]
    if magic != BSA_MAGIC:
        raise ArchiveFormatError(f"Not a BSA archive (magic {magic!r})")
    if version not in SUPPORTED_VERSIONS:
        raise ArchiveFormatError(f"Unsupported BSA version {version}")
    return ArchiveHeader(*fields[1:])


def list_archive(path: Path) -> List[str]:
    """
    List files stored in an archive.

    Args:
        path: Archive on disk

    Returns:
        Paths as "folder/sub/file.ext" with forward slashes, in stored order

    Raises:
        ArchiveFormatError: Archive is malformed or stores no names
        OSError: Archive cannot be read

    Example:
        >>> list_archive(Path("Oblivion - Misc.bsa"))[:1]
        ['fonts/kingthings_regular.fnt']
    """
    size = path.stat().st_size
    with path.open("rb") as stream:
        header = read_archive_header(stream)
        if not header.has_names:
            raise ArchiveFormatError("Archive does not store folder and file names")

        record = header.folder_record
        if header.folder_offset + header.folder_count * record.size > size:
            raise ArchiveFormatError(f"Folder table runs past end of file ({header.folder_count} folders)")

        stream.seek(header.folder_offset)
        counts = [
            record.unpack(_read_exact(stream, record.size))[1]
            for _ in range(header.folder_count)
        ]
        if sum(counts) != header.file_count:
            raise ArchiveFormatError(
                f"Folder records hold {sum(counts)} files, header says {header.file_count}"
            )

        folders: List[str] = []
        for count in counts:
            (length,) = _read_exact(stream, 1)
            name = _read_exact(stream, length).rstrip(b"\x00")
            folders.append(name.decode(NAME_ENCODING, errors="replace"))
            stream.seek(FILE_RECORD.size * count, 1)

        names = _read_exact(stream, header.file_names_length).split(b"\x00")
        if len(names) < header.file_count:
            raise ArchiveFormatError(
                f"File name block holds {len(names)} names, header says {header.file_count}"
            )

    paths: List[str] = []
    index = 0
    for folder, count in zip(folders, counts):
        prefix = folder.replace("\\", "/").strip("/")
        for _ in range(count):
            name = names[index].decode(NAME_ENCODING, errors="replace")
            paths.append(f"{prefix}/{name}" if prefix else name)
            index += 1
    return paths
