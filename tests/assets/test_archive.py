"""
Tests for assets.archive

Test Coverage:
- read_archive_header(): Magic and version checks
- list_archive(): Folder/file paths for v103 and v105 layouts
- Malformed archives raise ArchiveFormatError
"""

import io

import pytest

from obbook.assets import ArchiveFormatError, list_archive
from obbook.assets.archive import read_archive_header


class TestReadArchiveHeader:
    """Tests for header parsing."""

    def test_read_header_when_bad_magic_then_raises_error(self):
        with pytest.raises(ArchiveFormatError, match="Not a BSA"):
            read_archive_header(io.BytesIO(b"TES4" + b"\x00" * 32))

    def test_read_header_when_truncated_then_raises_error(self):
        with pytest.raises(ArchiveFormatError, match="Truncated"):
            read_archive_header(io.BytesIO(b"BSA\x00\x67"))

    def test_read_header_when_valid_then_fields_parsed(self, tmp_path, bsa_writer):
        path = bsa_writer(tmp_path / "a.bsa", {"fonts": ["a.fnt", "b.fnt"]})
        with path.open("rb") as stream:
            header = read_archive_header(stream)
        assert header.version == 103
        assert header.folder_count == 1
        assert header.file_count == 2
        assert header.has_names


class TestListArchive:
    """Tests for list_archive()."""

    def test_list_archive_when_oblivion_layout_then_paths_in_stored_order(self, tmp_path, bsa_writer):
        # Arrange
        path = bsa_writer(tmp_path / "Oblivion - Misc.bsa", {
            "fonts": ["kingthings_regular.fnt"],
            "textures\\menus\\book": ["scroll.dds", "seal.dds"],
        })

        # Act
        paths = list_archive(path)

        # Assert
        assert paths == [
            "fonts/kingthings_regular.fnt",
            "textures/menus/book/scroll.dds",
            "textures/menus/book/seal.dds",
        ]

    def test_list_archive_when_version_105_then_wide_folder_records(self, tmp_path, bsa_writer):
        path = bsa_writer(tmp_path / "new.bsa", {"fonts": ["a.fnt"]}, version=105)
        assert list_archive(path) == ["fonts/a.fnt"]

    def test_list_archive_when_unsupported_version_then_raises_error(self, tmp_path, bsa_writer):
        path = bsa_writer(tmp_path / "old.bsa", {"fonts": ["a.fnt"]}, version=100)
        with pytest.raises(ArchiveFormatError, match="Unsupported BSA version"):
            list_archive(path)

    def test_list_archive_when_names_not_stored_then_raises_error(self, tmp_path, bsa_writer):
        path = bsa_writer(tmp_path / "noname.bsa", {"fonts": ["a.fnt"]}, flags=0x0)
        with pytest.raises(ArchiveFormatError, match="names"):
            list_archive(path)

    def test_list_archive_when_file_cut_short_then_raises_error(self, tmp_path, bsa_writer):
        path = bsa_writer(tmp_path / "cut.bsa", {"fonts": ["a.fnt", "b.fnt"]})
        path.write_bytes(path.read_bytes()[:-8])
        with pytest.raises(ArchiveFormatError):
            list_archive(path)
