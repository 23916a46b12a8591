#!/usr/bin/env python3
"""
SQL text formatting: pretty-printing, minifying and statement splitting.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional

import sqlparse

from ..log_manager import get_logger
from .scanner import as_text, scan_segments

_WHITESPACE = re.compile(r'\s+')
_PUNCTUATION_SPACE = re.compile(r'\s*([(),])\s*')
_LITERAL_TOKEN = re.compile('\x00(\\d+)\x00')

_CASES = ('upper', 'lower', 'capitalize', 'preserve')


@dataclass
class FormatSqlOptions:
    """
    Options for format_sql.

    dialect is carried for callers that select formatting per connection;
    sqlparse's lexer is dialect-neutral so it does not change the output.
    """
    dialect: str = 'postgres'
    tab_width: int = 2
    keyword_case: str = 'upper'
    identifier_case: str = 'preserve'
    use_tabs: bool = False
    comma_position: str = 'after'
    line_width: int = 80

    def to_sqlparse(self) -> dict:
        """Keyword arguments for sqlparse.format()."""
        if self.keyword_case not in _CASES:
            raise ValueError(f"Invalid keyword_case: {self.keyword_case}")
        if self.identifier_case not in _CASES:
            raise ValueError(f"Invalid identifier_case: {self.identifier_case}")
        if self.comma_position not in ('before', 'after'):
            raise ValueError(f"Invalid comma_position: {self.comma_position}")

        return {
            'reindent': True,
            'keyword_case': None if self.keyword_case == 'preserve' else self.keyword_case,
            'identifier_case': None if self.identifier_case == 'preserve' else self.identifier_case,
            'indent_width': self.tab_width,
            'indent_tabs': self.use_tabs,
            'comma_first': self.comma_position == 'before',
            'wrap_after': self.line_width,
        }


def format_sql(sql: Any, options: Optional[FormatSqlOptions] = None) -> str:
    """
    Pretty-print SQL for display.

    Args:
        sql: SQL text
        options: Formatting options (defaults: upper-case keywords, 2-space indent)

    Returns:
        Formatted SQL, or the input unchanged if it cannot be formatted
    """
    text = as_text(sql)
    if not text.strip():
        return text

    options = options or FormatSqlOptions()
    try:
        return sqlparse.format(text, **options.to_sqlparse()).strip()
    except Exception as e:
        get_logger('SqlFormatter', component='analyzer').warning(
            f"Formatting failed for {options.dialect} SQL, returning input unchanged: {e}"
        )
        return text


def minify_sql(sql: Any) -> str:
    """
    Collapse SQL onto one line.

    Comments are removed, whitespace runs become one space, and spaces around
    commas and parentheses are dropped. String literals and quoted
    identifiers are kept byte-for-byte.

    Example:
        >>> minify_sql("SELECT a , b\\nFROM t  -- note\\nWHERE id IN ( 1 , 2 )")
        'SELECT a,b FROM t WHERE id IN(1,2)'
    """
    literals: List[str] = []
    parts = []
    for segment in scan_segments(sql):
        if segment.is_code:
            parts.append(segment.text)
        elif segment.is_literal:
            parts.append(f"\x00{len(literals)}\x00")
            literals.append(segment.text)
        else:
            parts.append(' ')

    minified = _WHITESPACE.sub(' ', ''.join(parts))
    minified = _PUNCTUATION_SPACE.sub(r'\1', minified).strip()

    def restore(match):
        index = int(match.group(1))
        return literals[index] if index < len(literals) else match.group(0)

    return _LITERAL_TOKEN.sub(restore, minified)


def split_statements(sql: Any) -> List[str]:
    """
    Split SQL on semicolons that are outside quotes and comments.

    Each statement keeps its original text (comments included) without the
    terminating semicolon. Pieces holding only whitespace or comments are
    dropped; a final statement without a semicolon is kept.

    Example:
        >>> split_statements("SELECT ';' FROM t; SELECT 2;")
        ["SELECT ';' FROM t", 'SELECT 2']
    """
    statements: List[str] = []
    current: List[str] = []
    has_code = False

    for segment in scan_segments(sql):
        if not segment.is_code:
            current.append(segment.text)
            has_code = has_code or segment.is_literal
            continue

        pieces = segment.text.split(';')
        for index, piece in enumerate(pieces):
            if index > 0:
                if has_code:
                    statements.append(''.join(current).strip())
                current, has_code = [], False
            current.append(piece)
            has_code = has_code or bool(piece.strip())

    if has_code:
        statements.append(''.join(current).strip())

    return statements


def has_multiple_statements(sql: Any) -> bool:
    """True when the text holds more than one non-empty statement."""
    return len(split_statements(sql)) > 1
