#!/usr/bin/env python3
"""
SQL text validation for editor feedback.

validate_sql reports malformed text (empty input, unclosed quotes, comments
or parentheses) as errors and risky-but-valid statements as warnings. It
never raises: it runs on every keystroke.
"""

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from .formatter import split_statements
from .scanner import ScanState, SqlPosition, as_text, mask_sql, position_at, scan_segments

DANGEROUS_KEYWORDS = ('DROP', 'TRUNCATE', 'DELETE', 'ALTER', 'CREATE', 'GRANT', 'REVOKE')

_DANGEROUS_PATTERNS = [(kw, re.compile(rf'\b{kw}\b', re.IGNORECASE)) for kw in DANGEROUS_KEYWORDS]

_DELETE_FROM = re.compile(r'^\s*DELETE\s+FROM\b', re.IGNORECASE)
_UPDATE_STATEMENT = re.compile(r'^\s*UPDATE\b', re.IGNORECASE)
_WHERE = re.compile(r'\bWHERE\b', re.IGNORECASE)
_INTO = re.compile(r'\bINTO\b', re.IGNORECASE)
_FIRST_WORD = re.compile(r'[\s(]*([A-Za-z]+)')
_MAIN_STATEMENT = re.compile(r'(?:SELECT|INSERT|UPDATE|DELETE|MERGE|VALUES)\b', re.IGNORECASE)

_ALWAYS_READ_ONLY = frozenset({'EXPLAIN', 'SHOW', 'DESCRIBE', 'DESC'})

_UNCLOSED = {
    ScanState.IN_SINGLE_QUOTE: 'Unclosed single quote',
    ScanState.IN_DOUBLE_QUOTE: 'Unclosed double quote',
    ScanState.IN_BLOCK_COMMENT: 'Unclosed block comment',
}

DELETE_ALL_WARNING = 'DELETE without WHERE clause will delete all rows'
UPDATE_ALL_WARNING = 'UPDATE without WHERE clause will update all rows'


@dataclass
class SqlValidationResult:
    """Outcome of validate_sql. Warnings never make a statement invalid."""
    valid: bool
    error: Optional[str] = None
    position: Optional[SqlPosition] = None
    warnings: List[str] = field(default_factory=list)


def validate_sql(sql: Any) -> SqlValidationResult:
    """
    Validate SQL text.

    Checks, in order: empty input, unclosed quotes and block comments,
    parenthesis balance. A statement that passes is valid even when it
    carries warnings about dangerous operations.

    Args:
        sql: SQL text

    Returns:
        SqlValidationResult with a best-effort error position

    Example:
        >>> validate_sql("SELECT * FROM users WHERE id = '1").error
        'Unclosed single quote'
    """
    text = as_text(sql)
    if not text.strip():
        return SqlValidationResult(valid=False, error='Empty SQL query')

    segments = scan_segments(text)

    for segment in segments:
        if not segment.terminated:
            return SqlValidationResult(
                valid=False,
                error=_UNCLOSED[segment.kind],
                position=position_at(text, segment.start),
            )

    paren_error = _check_parentheses(text, segments)
    if paren_error is not None:
        return paren_error

    return SqlValidationResult(valid=True, warnings=_collect_warnings(text))


def _check_parentheses(text: str, segments) -> Optional[SqlValidationResult]:
    """Unmatched ')' or the innermost '(' left open, outside quotes and comments."""
    open_offsets: List[int] = []
    for segment in segments:
        if not segment.is_code:
            continue
        for index, ch in enumerate(segment.text):
            if ch == '(':
                open_offsets.append(segment.start + index)
            elif ch == ')':
                if not open_offsets:
                    return SqlValidationResult(
                        valid=False,
                        error='Unexpected closing parenthesis',
                        position=position_at(text, segment.start + index),
                    )
                open_offsets.pop()

    if open_offsets:
        return SqlValidationResult(
            valid=False,
            error='Unclosed parenthesis',
            position=position_at(text, open_offsets[-1]),
        )
    return None


def _collect_warnings(text: str) -> List[str]:
    warnings = [
        f"Query contains potentially dangerous operation: {keyword}"
        for keyword in _dangerous_keywords(mask_sql(text))
    ]
    deletes_all, updates_all = _unfiltered_writes(text)
    if deletes_all:
        warnings.append(DELETE_ALL_WARNING)
    if updates_all:
        warnings.append(UPDATE_ALL_WARNING)
    return warnings


def _unfiltered_writes(text: str) -> Tuple[bool, bool]:
    """Whether some DELETE FROM / some UPDATE statement has no WHERE clause."""
    deletes_all = updates_all = False
    for statement in split_statements(text):
        masked = mask_sql(statement)
        if _WHERE.search(masked):
            continue
        main = _main_statement(masked)
        deletes_all = deletes_all or bool(_DELETE_FROM.match(main))
        updates_all = updates_all or bool(_UPDATE_STATEMENT.match(main))
    return deletes_all, updates_all


def _dangerous_keywords(masked: str) -> List[str]:
    return [keyword for keyword, pattern in _DANGEROUS_PATTERNS if pattern.search(masked)]


def _main_statement(masked: str) -> str:
    """The statement after a WITH prefix; the statement itself otherwise."""
    stripped = masked.strip()
    first = _FIRST_WORD.match(stripped)
    if not first or first.group(1).upper() != 'WITH':
        return stripped

    depth = 0
    for i in range(first.end(), len(stripped)):
        ch = stripped[i]
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
        elif depth == 0 and ch.isalpha() and not (stripped[i - 1].isalnum() or stripped[i - 1] == '_'):
            if _MAIN_STATEMENT.match(stripped, i):
                return stripped[i:]
    return ''


def _statement_is_read_only(masked: str) -> bool:
    stripped = masked.strip()
    first = _FIRST_WORD.match(stripped)
    if not first:
        return False

    keyword = first.group(1).upper()
    if keyword == 'WITH':
        main = _main_statement(stripped)
        return bool(main) and _statement_is_read_only(main)
    if keyword in _ALWAYS_READ_ONLY:
        return True
    if keyword == 'SELECT':
        return not _INTO.search(stripped)
    return False


def is_read_only_query(sql: Any) -> bool:
    """
    Check if SQL only reads data.

    SELECT (without INTO), EXPLAIN, SHOW and DESCRIBE are read-only; WITH is
    read-only when the statement after its CTEs is. Every statement of a
    multi-statement script must be read-only. Empty input is not.
    """
    statements = split_statements(sql)
    if not statements:
        return False
    return all(_statement_is_read_only(mask_sql(statement)) for statement in statements)


def detect_dangerous_operations(sql: Any) -> List[str]:
    """
    List dangerous operations found in SQL.

    Returns:
        Matched DANGEROUS_KEYWORDS, plus DELETE_ALL / UPDATE_ALL when some
        DELETE FROM or UPDATE statement (after any WITH prefix) has no WHERE clause
    """
    text = as_text(sql)
    detected = _dangerous_keywords(mask_sql(text))
    deletes_all, updates_all = _unfiltered_writes(text)
    if deletes_all:
        detected.append('DELETE_ALL')
    if updates_all:
        detected.append('UPDATE_ALL')
    return detected
