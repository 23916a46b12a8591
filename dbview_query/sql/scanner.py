#!/usr/bin/env python3
"""
Quote and comment aware SQL scanner.

Splits SQL text into segments of plain code, quoted literals/identifiers and
comments. Every analyzer function works from these segments so that a
keyword, semicolon or parenthesis inside a string or comment is never taken
for SQL syntax.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List


class ScanState(Enum):
    """Scanner states; also used as the kind of each segment."""
    NORMAL = "normal"
    IN_SINGLE_QUOTE = "single_quote"
    IN_DOUBLE_QUOTE = "double_quote"
    IN_LINE_COMMENT = "line_comment"
    IN_BLOCK_COMMENT = "block_comment"


_QUOTES = {
    ScanState.IN_SINGLE_QUOTE: "'",
    ScanState.IN_DOUBLE_QUOTE: '"',
}


@dataclass(frozen=True)
class Segment:
    """A run of SQL text scanned in a single state."""
    kind: ScanState
    text: str
    start: int
    terminated: bool = True

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    @property
    def is_code(self) -> bool:
        return self.kind is ScanState.NORMAL

    @property
    def is_literal(self) -> bool:
        return self.kind in _QUOTES

    @property
    def is_comment(self) -> bool:
        return self.kind in (ScanState.IN_LINE_COMMENT, ScanState.IN_BLOCK_COMMENT)


@dataclass(frozen=True)
class SqlPosition:
    """1-based line/column plus 0-based character offset."""
    line: int
    column: int
    offset: int


def as_text(sql: Any) -> str:
    """Analyzer input coercion: None becomes '', anything else str()."""
    if sql is None:
        return ''
    return sql if isinstance(sql, str) else str(sql)


def scan_segments(sql: Any) -> List[Segment]:
    """
    Scan SQL into consecutive segments.

    Quotes are escaped by doubling ('' inside '...'). A line comment ends
    before its newline; the newline belongs to the following code segment.
    The last segment is marked terminated=False when the text ends inside a
    quote or block comment.

    Args:
        sql: SQL text

    Returns:
        Segments covering the whole input, in order
    """
    text = as_text(sql)
    segments: List[Segment] = []
    state = ScanState.NORMAL
    start = 0
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ''

        if state is ScanState.NORMAL:
            if ch == "'":
                new_state, width = ScanState.IN_SINGLE_QUOTE, 1
            elif ch == '"':
                new_state, width = ScanState.IN_DOUBLE_QUOTE, 1
            elif ch == '-' and nxt == '-':
                new_state, width = ScanState.IN_LINE_COMMENT, 2
            elif ch == '/' and nxt == '*':
                new_state, width = ScanState.IN_BLOCK_COMMENT, 2
            else:
                i += 1
                continue

            if i > start:
                segments.append(Segment(ScanState.NORMAL, text[start:i], start))
            state, start = new_state, i
            i += width

        elif state in _QUOTES:
            quote = _QUOTES[state]
            if ch == quote:
                if nxt == quote:
                    i += 2
                    continue
                i += 1
                segments.append(Segment(state, text[start:i], start))
                state, start = ScanState.NORMAL, i
                continue
            i += 1

        elif state is ScanState.IN_LINE_COMMENT:
            if ch == '\n':
                segments.append(Segment(state, text[start:i], start))
                state, start = ScanState.NORMAL, i
            i += 1

        else:
            if ch == '*' and nxt == '/':
                i += 2
                segments.append(Segment(state, text[start:i], start))
                state, start = ScanState.NORMAL, i
                continue
            i += 1

    if start < n:
        terminated = state in (ScanState.NORMAL, ScanState.IN_LINE_COMMENT)
        segments.append(Segment(state, text[start:], start, terminated))

    return segments


def mask_sql(sql: Any, keep_identifiers: bool = False) -> str:
    """
    Blank out everything that is not SQL syntax.

    String literals become '' and comments a single space. Double-quoted
    identifiers become "" unless keep_identifiers is set.

    Example:
        >>> mask_sql("SELECT 'drop' FROM t -- delete")
        "SELECT '' FROM t  "
    """
    parts = []
    for segment in scan_segments(sql):
        if segment.is_code:
            parts.append(segment.text)
        elif segment.kind is ScanState.IN_SINGLE_QUOTE:
            parts.append("''")
        elif segment.kind is ScanState.IN_DOUBLE_QUOTE:
            parts.append(segment.text if keep_identifiers else '""')
        else:
            parts.append(' ')
    return ''.join(parts)


def position_at(sql: Any, offset: int) -> SqlPosition:
    """Line and column (both 1-based) of a character offset."""
    text = as_text(sql)
    offset = max(0, min(offset, len(text)))
    line_start = text.rfind('\n', 0, offset) + 1
    return SqlPosition(
        line=text.count('\n', 0, offset) + 1,
        column=offset - line_start + 1,
        offset=offset,
    )
