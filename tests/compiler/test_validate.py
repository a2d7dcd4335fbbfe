"""
Tests for compiler.validate

Test Coverage:
- check_asset_references(): Missing textures, "did you mean" hints,
  unresolved and out-of-range font faces, resolve-stage stamping
"""

from pathlib import Path

import pytest

from obbook.assets import AssetIndex
from obbook.compiler import DiagnosticsCollector, check_asset_references, parse
from obbook.core.models import AssetEntry, AssetKind, Severity, Stage


def _check(source, index):
    collector = DiagnosticsCollector(source)
    nodes = parse(source, collector=collector).nodes
    before = collector.issue_count
    misses = check_asset_references(nodes, index, collector)
    return misses, collector.diagnostics[before:]


@pytest.fixture
def index():
    index = AssetIndex()
    index.add(AssetEntry("Kingthings_Regular.fnt", AssetKind.FONT, Path("/d/k.fnt")))
    index.add(AssetEntry("Book/Fancy/Scroll.dds", AssetKind.TEXTURE, Path("/d/s.dds")))
    return index


class TestCheckAssetReferences:
    """Tests for markup/index cross-checks."""

    def test_check_when_texture_missing_then_warning_at_img_span(self):
        # Arrange
        source = 'Text <IMG src="book/x.dds" width=10 height=10>'

        # Act
        misses, issues = _check(source, AssetIndex())

        # Assert
        assert misses == 1
        assert len(issues) == 1
        issue = issues[0]
        assert issue.severity is Severity.WARNING
        assert issue.stage is Stage.RESOLVE
        assert source[issue.offset:issue.end] == '<IMG src="book/x.dds" width=10 height=10>'

    def test_check_when_texture_present_in_other_case_then_no_issue(self, index):
        misses, issues = _check("<IMG src=BOOK\\FANCY\\scroll.DDS>", index)
        assert misses == 0
        assert issues == ()

    def test_check_when_same_name_elsewhere_then_suggestion_in_message(self, index):
        misses, issues = _check("<IMG src=book/scroll.dds>", index)
        assert misses == 1
        assert "did you mean 'Book/Fancy/Scroll.dds'" in issues[0].message

    def test_check_when_no_fonts_indexed_then_unresolved_warning(self):
        misses, issues = _check("<FONT face=1>x</FONT>", AssetIndex())
        assert misses == 1
        assert "unresolved" in issues[0].message

    def test_check_when_face_beyond_font_count_then_out_of_range_warning(self, index):
        misses, issues = _check("<FONT face=3>x</FONT>", index)
        assert misses == 1
        assert "out of range" in issues[0].message
        assert issues[0].offset == 0

    def test_check_when_face_resolves_then_no_issue(self, index):
        misses, issues = _check("<FONT face=1>x</FONT>", index)
        assert misses == 0
        assert issues == ()

    def test_check_when_img_without_src_then_left_to_parser(self):
        misses, issues = _check("<IMG width=5>", AssetIndex())
        assert misses == 0
        assert issues == ()
