#!/usr/bin/env python3
"""
Tests for the quote and comment aware SQL scanner.
"""

from dbview_query.sql import ScanState, SqlPosition, mask_sql, position_at, scan_segments
from dbview_query.sql.scanner import as_text


class TestScanSegments:
    """Test segmentation."""

    def test_segments_cover_input(self):
        """Test kinds, offsets and that segments join back to the input."""
        sql = "SELECT 'it''s' -- c\nFROM t"
        segments = scan_segments(sql)
        assert [s.kind for s in segments] == [
            ScanState.NORMAL,
            ScanState.IN_SINGLE_QUOTE,
            ScanState.NORMAL,
            ScanState.IN_LINE_COMMENT,
            ScanState.NORMAL,
        ]
        assert segments[1].text == "'it''s'"
        assert segments[1].start == 7
        assert segments[3].text == '-- c'
        assert segments[4].text == '\nFROM t'
        assert ''.join(s.text for s in segments) == sql
        assert all(s.terminated for s in segments)

    def test_block_comment_and_identifier(self):
        """Test block comments and double-quoted identifiers."""
        segments = scan_segments('SELECT /* a;b */ "x""y"')
        assert segments[1].kind is ScanState.IN_BLOCK_COMMENT
        assert segments[1].is_comment
        assert segments[3].kind is ScanState.IN_DOUBLE_QUOTE
        assert segments[3].text == '"x""y"'
        assert segments[3].is_literal

    def test_unterminated_quote(self):
        """Test the last segment is flagged when a quote is left open."""
        last = scan_segments("SELECT 'abc")[-1]
        assert last.kind is ScanState.IN_SINGLE_QUOTE
        assert not last.terminated
        assert last.end == len("SELECT 'abc")

    def test_unterminated_block_comment(self):
        """Test an open block comment."""
        last = scan_segments('SELECT 1 /* never closed')[-1]
        assert last.kind is ScanState.IN_BLOCK_COMMENT
        assert not last.terminated

    def test_line_comment_at_end_is_terminated(self):
        """Test a trailing line comment needs no newline."""
        last = scan_segments('SELECT 1 -- done')[-1]
        assert last.kind is ScanState.IN_LINE_COMMENT
        assert last.terminated

    def test_comment_markers_inside_strings(self):
        """Test -- and /* inside a literal are plain text."""
        segments = scan_segments("SELECT '--not /*a comment' FROM t")
        assert [s.kind for s in segments] == [ScanState.NORMAL, ScanState.IN_SINGLE_QUOTE, ScanState.NORMAL]

    def test_empty_input(self):
        """Test empty and None input."""
        assert scan_segments('') == []
        assert scan_segments(None) == []
        assert as_text(None) == ''
        assert as_text(42) == '42'


class TestMaskSql:
    """Test masking of literals and comments."""

    def test_mask(self):
        """Test literals become '' and comments a space."""
        assert mask_sql("SELECT 'drop' FROM t -- delete") == "SELECT '' FROM t  "

    def test_identifiers(self):
        """Test double-quoted identifiers are blanked unless kept."""
        assert mask_sql('SELECT "a" FROM t') == 'SELECT "" FROM t'
        assert mask_sql('SELECT "a" FROM t', keep_identifiers=True) == 'SELECT "a" FROM t'


class TestPositionAt:
    """Test offset to line/column conversion."""

    def test_second_line(self):
        """Test 1-based line and column."""
        assert position_at('SELECT\n  x', 9) == SqlPosition(line=2, column=3, offset=9)

    def test_start(self):
        """Test the first character."""
        assert position_at('SELECT 1', 0) == SqlPosition(line=1, column=1, offset=0)

    def test_clamped(self):
        """Test offsets past the end are clamped."""
        assert position_at('abc', 100) == SqlPosition(line=1, column=4, offset=3)
