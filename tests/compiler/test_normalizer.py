"""
Tests for compiler.normalizer

Test Coverage:
- normalize(): Canonical tag/attribute spelling and line structure
- Smart quote and backslash rewriting, with both switches
- Unterminated markup survives as literal text
- Idempotence: normalize(parse(normalize(x))) == normalize(x)
- quote_value(): Delimiter choice
"""

import pytest

from obbook.compiler import normalize, parse
from obbook.compiler.normalizer import quote_value
from obbook.config import ProjectSettings


def _normalize(source, settings=None):
    return normalize(parse(source, settings).nodes, settings)


class TestNormalizeSpelling:
    """Tests for tag and attribute rewriting."""

    def test_normalize_when_lower_case_unquoted_then_canonical(self):
        assert _normalize("<div align=center>Hi</div><br>") == '<DIV align="center">Hi</DIV>\n<BR>'

    def test_normalize_when_attribute_name_upper_case_then_lowered(self):
        assert _normalize("<FONT FACE='2'>x</FONT>") == '<FONT face="2">x</FONT>'

    def test_normalize_when_whitespace_runs_then_collapsed(self):
        assert _normalize("Hello   world\n\n  again") == "Hello world again"

    def test_normalize_when_text_around_div_then_div_on_own_line(self):
        assert _normalize("Title<DIV>Body</DIV>tail") == "Title\n<DIV>Body</DIV>\ntail"

    def test_normalize_when_nested_divs_then_one_line_per_top_level_block(self):
        source = '<DIV align="center">A<DIV align="right">B</DIV>C</DIV>'
        assert _normalize(source) == source

    def test_normalize_when_div_left_open_then_close_written(self):
        assert _normalize("<DIV>Hi") == "<DIV>Hi</DIV>"


class TestNormalizeRewrites:
    """Tests for quote and slash normalization."""

    def test_normalize_when_curly_quotes_in_text_then_straight(self):
        assert _normalize("He said “hi” and it’s fine") == "He said \"hi\" and it's fine"

    def test_normalize_when_backslash_in_src_then_forward_slashes(self):
        # Arrange
        source = "<IMG src=“Book\\Fancy\\x.dds” width=10 height=10>"

        # Act
        normalized = _normalize(source)

        # Assert
        assert normalized == '<IMG src="Book/Fancy/x.dds" width="10" height="10">'

    def test_normalize_when_slash_switch_off_then_backslashes_kept(self):
        settings = ProjectSettings(auto_normalize_slashes=False)
        assert _normalize("<IMG src=book\\x.dds>", settings) == '<IMG src="book\\x.dds">'

    def test_normalize_when_quote_switch_off_then_curly_quotes_kept(self):
        settings = ProjectSettings(auto_normalize_smart_quotes=False)
        assert _normalize("it’s", settings) == "it’s"

    def test_normalize_when_backslash_in_text_then_untouched(self):
        assert _normalize("a\\b") == "a\\b"


class TestNormalizeRecovery:
    """Tests for malformed input."""

    def test_normalize_when_unterminated_tag_then_literal_text_kept(self):
        assert "<FONT face=1" in _normalize("<FONT face=1")

    def test_normalize_when_redundant_close_then_dropped(self):
        assert _normalize("a<BR></BR>b") == "a<BR>\nb"


class TestNormalizeIdempotence:
    """normalize(parse(normalize(x))) == normalize(x)."""

    @pytest.mark.parametrize("source", [
        "Plain text",
        "<div align=center>Title</div>Body text<br>more",
        '<DIV align="center">A<DIV align="right">B</DIV>C</DIV>',
        "<DIV>a<BR>b</DIV>",
        "<FONT face=1> hi </FONT><FONT face=2>there</FONT>",
        "x <DIV>y</DIV>  z",
        "<IMG src='book\\x.dds' width=64 height=32> caption",
        "“Quoted” text<br><br>after",
        "<DIV><FONT face=1>unclosed</DIV>",
    ])
    def test_normalize_when_applied_twice_then_unchanged(self, source):
        # Arrange
        once = _normalize(source)

        # Act
        twice = _normalize(once)

        # Assert
        assert twice == once

    @pytest.mark.parametrize("source", [
        "<IMG src='a”b.dds'>",
        '<IMG src="it’s.dds">',
        "<IMG src=a”b’c.dds>",
        "<DIV align=“center”>“Kept” text</DIV>",
    ])
    def test_normalize_when_quote_switch_off_then_applied_twice_unchanged(self, source):
        # Arrange
        settings = ProjectSettings(auto_normalize_smart_quotes=False)
        once = _normalize(source, settings)

        # Act
        twice = _normalize(once, settings)

        # Assert
        assert twice == once

    def test_normalize_when_quote_switch_off_then_curly_quote_in_src_survives(self):
        settings = ProjectSettings(auto_normalize_smart_quotes=False)
        once = _normalize("<IMG src='a”b.dds'>", settings)
        (image,) = parse(once, settings).nodes
        assert once == "<IMG src='a”b.dds'>"
        assert image.get("src") == "a”b.dds"


class TestQuoteValue:
    """Tests for quote_value()."""

    def test_quote_value_when_plain_then_double_quotes(self):
        assert quote_value("center") == '"center"'

    def test_quote_value_when_holds_double_quote_then_single_quotes(self):
        assert quote_value('a "b"') == "'a \"b\"'"

    def test_quote_value_when_holds_both_then_double_quotes_replaced(self):
        assert quote_value("it's \"x\"") == "\"it's 'x'\""

    def test_quote_value_when_holds_curly_double_quote_then_single_quotes(self):
        assert quote_value("a”b") == "'a”b'"

    def test_quote_value_when_holds_curly_of_both_families_then_double_quotes_replaced(self):
        assert quote_value("a“b’c") == "\"a'b’c\""
