#!/usr/bin/env python3
"""
Lightweight SQL statement inspection.

This is not a full SQL grammar. It classifies a statement by its leading
keyword and picks table and column names out of the usual clauses, which is
enough for editor features such as result-grid headers and table tabs.
Nothing here raises on malformed input.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Pattern, Tuple

from .scanner import as_text, scan_segments


class SqlStatementType(Enum):
    """Statement type, taken from the leading keyword."""
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CREATE = "CREATE"
    ALTER = "ALTER"
    DROP = "DROP"
    TRUNCATE = "TRUNCATE"
    GRANT = "GRANT"
    REVOKE = "REVOKE"
    BEGIN = "BEGIN"
    COMMIT = "COMMIT"
    ROLLBACK = "ROLLBACK"
    WITH = "WITH"
    EXPLAIN = "EXPLAIN"
    UNKNOWN = "UNKNOWN"

    @property
    def is_modifying(self) -> bool:
        return self in _MODIFYING_TYPES


_MODIFYING_TYPES = frozenset({
    SqlStatementType.INSERT, SqlStatementType.UPDATE, SqlStatementType.DELETE,
    SqlStatementType.CREATE, SqlStatementType.ALTER, SqlStatementType.DROP,
    SqlStatementType.TRUNCATE,
})


@dataclass(frozen=True)
class SqlKeywords:
    """SQL vocabulary grouped for syntax highlighting."""
    statements: Tuple[str, ...]
    clauses: Tuple[str, ...]
    operators: Tuple[str, ...]
    functions: Tuple[str, ...]
    data_types: Tuple[str, ...]
    literals: Tuple[str, ...]


SQL_KEYWORDS = SqlKeywords(
    statements=(
        'SELECT', 'INSERT', 'UPDATE', 'DELETE', 'CREATE', 'ALTER', 'DROP',
        'TRUNCATE', 'GRANT', 'REVOKE', 'BEGIN', 'COMMIT', 'ROLLBACK', 'WITH',
        'EXPLAIN', 'ANALYZE', 'VACUUM', 'MERGE', 'UPSERT',
    ),
    clauses=(
        'FROM', 'WHERE', 'AND', 'OR', 'NOT', 'IN', 'EXISTS', 'BETWEEN',
        'LIKE', 'ILIKE', 'IS', 'NULL', 'TRUE', 'FALSE', 'AS', 'ON', 'USING',
        'JOIN', 'LEFT', 'RIGHT', 'INNER', 'OUTER', 'CROSS', 'FULL', 'NATURAL',
        'GROUP', 'BY', 'HAVING', 'ORDER', 'ASC', 'DESC', 'NULLS', 'FIRST', 'LAST',
        'LIMIT', 'OFFSET', 'FETCH', 'NEXT', 'ROWS', 'ONLY', 'PERCENT',
        'UNION', 'INTERSECT', 'EXCEPT', 'ALL', 'DISTINCT',
        'INTO', 'VALUES', 'SET', 'DEFAULT', 'RETURNING',
        'CASE', 'WHEN', 'THEN', 'ELSE', 'END',
        'OVER', 'PARTITION', 'WINDOW', 'RANGE', 'PRECEDING', 'FOLLOWING',
        'UNBOUNDED', 'CURRENT', 'ROW',
    ),
    operators=(
        '=', '<>', '!=', '<', '>', '<=', '>=', '+', '-', '*', '/', '%',
        '||', '&&', '!', '~', '^', '&', '|', '::', '->', '->>', '#>', '#>>',
    ),
    functions=(
        'COUNT', 'SUM', 'AVG', 'MIN', 'MAX', 'COALESCE', 'NULLIF', 'GREATEST', 'LEAST',
        'CAST', 'CONVERT', 'EXTRACT', 'DATE_PART', 'DATE_TRUNC',
        'UPPER', 'LOWER', 'TRIM', 'LTRIM', 'RTRIM', 'LENGTH', 'SUBSTRING', 'REPLACE',
        'CONCAT', 'CONCAT_WS', 'STRING_AGG', 'ARRAY_AGG', 'JSON_AGG', 'JSONB_AGG',
        'ROW_NUMBER', 'RANK', 'DENSE_RANK', 'NTILE', 'LAG', 'LEAD', 'FIRST_VALUE', 'LAST_VALUE',
        'NOW', 'CURRENT_DATE', 'CURRENT_TIME', 'CURRENT_TIMESTAMP',
        'ABS', 'CEIL', 'FLOOR', 'ROUND', 'TRUNC', 'POWER', 'SQRT', 'MOD',
        'RANDOM', 'GENERATE_SERIES', 'UNNEST',
    ),
    data_types=(
        'INT', 'INTEGER', 'SMALLINT', 'BIGINT', 'TINYINT',
        'DECIMAL', 'NUMERIC', 'REAL', 'FLOAT', 'DOUBLE', 'PRECISION',
        'CHAR', 'VARCHAR', 'TEXT', 'NCHAR', 'NVARCHAR', 'NTEXT',
        'DATE', 'TIME', 'TIMESTAMP', 'DATETIME', 'INTERVAL',
        'BOOLEAN', 'BOOL', 'BIT',
        'BINARY', 'VARBINARY', 'BLOB', 'BYTEA',
        'JSON', 'JSONB', 'XML',
        'UUID', 'SERIAL', 'BIGSERIAL',
        'ARRAY', 'ENUM', 'POINT', 'LINE', 'POLYGON', 'CIRCLE',
    ),
    literals=('NULL', 'TRUE', 'FALSE'),
)

# Operators are symbols, not words
_KEYWORD_WORDS: FrozenSet[str] = frozenset(
    SQL_KEYWORDS.statements + SQL_KEYWORDS.clauses + SQL_KEYWORDS.functions
    + SQL_KEYWORDS.data_types + SQL_KEYWORDS.literals
)


@dataclass
class ParsedSql:
    """What parse_sql could tell about a statement."""
    statement_type: SqlStatementType
    tables: List[str] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    has_where: bool = False
    has_limit: bool = False
    has_order_by: bool = False
    is_modifying: bool = False
    sql: str = ''


# One identifier: "quoted", `quoted`, [quoted] or bare
_IDENT = r'"(?:[^"]|"")*"|`[^`]*`|\[[^\]]*\]|[A-Za-z_@#][\w$#@]*'
_IDENT_RE = re.compile(_IDENT)
_QUALIFIED_NAME = re.compile(rf'(?:{_IDENT})(?:\s*\.\s*(?:{_IDENT}))*')

_FIRST_WORD = re.compile(r'[\s(]*([A-Za-z]+)')
_TABLE_CLAUSE = re.compile(
    r'\b(?:(?P<insert>INSERT\s+INTO)|(?P<delete>DELETE\s+FROM)|(?P<update>UPDATE)'
    r'|(?P<join>JOIN)|(?P<from>FROM))\b',
    re.IGNORECASE,
)
_TABLE_LIST_STOP = re.compile(
    r'(?:WHERE|GROUP\s+BY|ORDER\s+BY|HAVING|LIMIT|OFFSET|FETCH|UNION|INTERSECT|EXCEPT'
    r'|WINDOW|RETURNING|ON|USING|SET|VALUES|SELECT|DEFAULT|OUTPUT|JOIN|INNER|LEFT|RIGHT'
    r'|FULL|CROSS|NATURAL|STRAIGHT_JOIN|FOR|INTO|WITH|LATERAL)\b',
    re.IGNORECASE,
)
_SELECT_LIST_STOP = re.compile(
    r'(?:FROM|INTO|WHERE|GROUP\s+BY|ORDER\s+BY|HAVING|LIMIT|OFFSET|FETCH|UNION'
    r'|INTERSECT|EXCEPT|WINDOW)\b',
    re.IGNORECASE,
)
_SELECT = re.compile(r'\bSELECT\b', re.IGNORECASE)
_SUBQUERY_START = re.compile(r'\s*(?:SELECT|WITH)\b', re.IGNORECASE)
_DISTINCT_BEFORE = re.compile(r'\bDISTINCT$', re.IGNORECASE)
_EXPLAIN_BEFORE = re.compile(r'\bEXPLAIN(?:\s+ANALYZE)?$', re.IGNORECASE)
_ONLY_PREFIX = re.compile(r'ONLY\s+', re.IGNORECASE)

_SELECT_MODIFIERS = re.compile(
    r'\s*(?:(?:DISTINCT(?:\s+ON\s*\([^)]*\))?|ALL|TOP\s*\(?\s*\d+\s*\)?(?:\s+PERCENT)?'
    r'(?:\s+WITH\s+TIES)?)\s+)+',
    re.IGNORECASE,
)
_EXPLICIT_ALIAS = re.compile(rf'\s+AS\s+({_IDENT})\s*$', re.IGNORECASE)
_IMPLICIT_ALIAS = re.compile(rf'(\w*)(?<=[\w)"\]`\'])\s+({_IDENT})\s*$')
_QUALIFIED_COLUMN = re.compile(rf'\.\s*({_IDENT})\s*$')
_BARE_COLUMN = re.compile(_IDENT)

# Words that can precede a trailing identifier without making it an alias
_NOT_ALIAS_AFTER = frozenset({
    'NOT', 'AND', 'OR', 'IS', 'IN', 'LIKE', 'ILIKE', 'BETWEEN',
    'CASE', 'WHEN', 'THEN', 'ELSE', 'DISTINCT', 'ALL',
})

_WHERE = re.compile(r'\bWHERE\b', re.IGNORECASE)
_LIMIT = re.compile(r'\bLIMIT\b|\bFETCH\s+(?:FIRST|NEXT)\b', re.IGNORECASE)
_ORDER_BY = re.compile(r'\bORDER\s+BY\b', re.IGNORECASE)


def parse_sql(sql: Any) -> ParsedSql:
    """
    Inspect a SQL statement.

    Args:
        sql: SQL text (None is treated as empty)

    Returns:
        ParsedSql; statement_type is UNKNOWN when the leading keyword is not
        recognised

    Example:
        >>> parsed = parse_sql('SELECT name, age FROM users WHERE id = 1')
        >>> parsed.statement_type, parsed.tables, parsed.columns
        (<SqlStatementType.SELECT: 'SELECT'>, ['users'], ['name', 'age'])
    """
    text = as_text(sql)
    names, shadow = _prepare(text)
    statement_type = detect_statement_type(shadow)

    return ParsedSql(
        statement_type=statement_type,
        tables=_extract_tables(names, shadow),
        columns=_extract_columns(names, shadow, statement_type),
        has_where=bool(_WHERE.search(shadow)),
        has_limit=bool(_LIMIT.search(shadow)),
        has_order_by=bool(_ORDER_BY.search(shadow)),
        is_modifying=statement_type.is_modifying,
        sql=text,
    )


def detect_statement_type(sql: Any) -> SqlStatementType:
    """Statement type from the first keyword (leading comments and parentheses skipped)."""
    match = _FIRST_WORD.match(_prepare(as_text(sql))[1])
    if not match:
        return SqlStatementType.UNKNOWN
    return SqlStatementType.__members__.get(match.group(1).upper(), SqlStatementType.UNKNOWN)


def get_sql_keywords() -> SqlKeywords:
    """SQL vocabulary for syntax highlighting."""
    return SQL_KEYWORDS


def is_sql_keyword(word: Any) -> bool:
    """Check if a word is a SQL keyword (case-insensitive; operators excluded)."""
    if not isinstance(word, str):
        return False
    return word.strip().upper() in _KEYWORD_WORDS


def _prepare(text: str) -> Tuple[str, str]:
    """
    Two views of the text with identical length and whitespace layout.

    names: comments blanked, quotes kept (for reading identifiers).
    shadow: comments blanked, quoted contents replaced by '_' (for keyword and
    punctuation matching).
    """
    names = []
    shadow = []
    for segment in scan_segments(text):
        if segment.is_comment:
            blank = ' ' * len(segment.text)
            names.append(blank)
            shadow.append(blank)
        elif segment.is_literal:
            names.append(segment.text)
            quote = segment.text[0]
            closing = quote if segment.terminated else ''
            body = '_' * (len(segment.text) - 1 - len(closing))
            shadow.append(quote + body + closing)
        else:
            names.append(segment.text)
            shadow.append(segment.text)
    return ''.join(names), ''.join(shadow)


def _clause_end(shadow: str, start: int, stop: Pattern) -> int:
    """Offset where a clause starting at start ends (depth-0 keyword, ';' or unmatched ')')."""
    depth = 0
    for i in range(start, len(shadow)):
        ch = shadow[i]
        if ch == '(':
            depth += 1
        elif ch == ')':
            if depth == 0:
                return i
            depth -= 1
        elif depth == 0:
            if ch == ';':
                return i
            at_word_start = ch.isalpha() and (i == 0 or not (shadow[i - 1].isalnum() or shadow[i - 1] in '_$'))
            if at_word_start and stop.match(shadow, i):
                return i
    return len(shadow)


def _split_top_level(shadow: str, start: int, end: int) -> List[Tuple[int, int]]:
    """Split [start, end) on commas outside parentheses."""
    items = []
    depth = 0
    item_start = start
    for i in range(start, end):
        ch = shadow[i]
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
        elif ch == ',' and depth == 0:
            items.append((item_start, i))
            item_start = i + 1
    items.append((item_start, end))
    return items


def _open_paren_index(shadow: str) -> List[int]:
    """For each offset, the innermost '(' still open before it; -1 at top level."""
    index = []
    stack: List[int] = []
    for i, ch in enumerate(shadow):
        index.append(stack[-1] if stack else -1)
        if ch == '(':
            stack.append(i)
        elif ch == ')' and stack:
            stack.pop()
    return index


def _word_end_before(shadow: str, pos: int) -> int:
    """Offset just past the last non-space character before pos."""
    while pos > 0 and shadow[pos - 1].isspace():
        pos -= 1
    return pos


def _is_table_from(shadow: str, pos: int, open_parens: List[int]) -> bool:
    """FROM introduces tables unless it is IS DISTINCT FROM or sits in a function call."""
    end = _word_end_before(shadow, pos)
    if _DISTINCT_BEFORE.search(shadow, max(0, end - 9), end):
        return False
    paren = open_parens[pos]
    return paren < 0 or bool(_SUBQUERY_START.match(shadow, paren + 1))


def _starts_statement(shadow: str, pos: int) -> bool:
    """UPDATE begins a statement (not FOR UPDATE, ON UPDATE, ... KEY UPDATE)."""
    end = _word_end_before(shadow, pos)
    if end == 0 or shadow[end - 1] in ';(),':
        return True
    return bool(_EXPLAIN_BEFORE.search(shadow, max(0, end - 20), end))


def _unquote(name: str) -> str:
    if len(name) >= 2 and name[0] == '"' and name[-1] == '"':
        return name[1:-1].replace('""', '"')
    if len(name) >= 2 and (name[0], name[-1]) in (('`', '`'), ('[', ']')):
        return name[1:-1]
    return name


def _extract_tables(names: str, shadow: str) -> List[str]:
    tables: List[str] = []
    open_parens = _open_paren_index(shadow)
    for match in _TABLE_CLAUSE.finditer(shadow):
        kind = match.lastgroup
        if kind == 'from' and not _is_table_from(shadow, match.start(), open_parens):
            continue
        if kind == 'update' and not _starts_statement(shadow, match.start()):
            continue

        start = match.end()
        end = _clause_end(shadow, start, _TABLE_LIST_STOP)
        items = _split_top_level(shadow, start, end)
        if kind != 'from':
            items = items[:1]

        for item_start, item_end in items:
            name = _table_name(names[item_start:item_end], shadow[item_start:item_end],
                               allow_column_list=kind == 'insert')
            if name and name not in tables:
                tables.append(name)
    return tables


def _table_name(raw: str, raw_shadow: str, allow_column_list: bool = False) -> Optional[str]:
    """Bare table name from a FROM/JOIN item: alias, quoting and schema dropped."""
    stripped = raw_shadow.lstrip()
    if not stripped or stripped.startswith('('):
        return None
    raw = raw[len(raw_shadow) - len(stripped):]

    only = _ONLY_PREFIX.match(raw)
    if only:
        raw = raw[only.end():]

    match = _QUALIFIED_NAME.match(raw)
    if not match:
        return None

    # name( is a table function unless it is INSERT INTO t (cols)
    if raw[match.end():].lstrip().startswith('(') and not allow_column_list:
        return None

    parts = _IDENT_RE.findall(match.group(0))
    return _unquote(parts[-1]) or None


def _extract_columns(names: str, shadow: str, statement_type: SqlStatementType) -> List[str]:
    if statement_type is not SqlStatementType.SELECT:
        return []

    select = _SELECT.search(shadow)
    if not select:
        return []

    start = select.end()
    end = _clause_end(shadow, start, _SELECT_LIST_STOP)
    if shadow[start:end].strip() == '*':
        return ['*']

    columns: List[str] = []
    for item_start, item_end in _split_top_level(shadow, start, end):
        name = _column_name(names[item_start:item_end], shadow[item_start:item_end])
        if name and name not in columns:
            columns.append(name)
    return columns


def _column_name(raw: str, raw_shadow: str) -> Optional[str]:
    """Alias, else trailing .column, else a bare identifier; None for other expressions."""
    modifiers = _SELECT_MODIFIERS.match(raw_shadow)
    cut = modifiers.end() if modifiers else 0
    raw, raw_shadow = raw[cut:], raw_shadow[cut:]

    left = len(raw_shadow) - len(raw_shadow.lstrip())
    right = len(raw_shadow.rstrip())
    expr, expr_shadow = raw[left:right], raw_shadow[left:right]
    if not expr:
        return None

    alias = _EXPLICIT_ALIAS.search(expr)
    if alias and _in_code(expr, expr_shadow, alias.start(1)):
        return _unquote(alias.group(1))

    alias = _IMPLICIT_ALIAS.search(expr)
    if alias and _in_code(expr, expr_shadow, alias.start(2)):
        candidate = alias.group(2)
        quoted = candidate[0] in '"`['
        previous = alias.group(1).upper()
        if quoted or not (is_sql_keyword(candidate) or previous in _NOT_ALIAS_AFTER):
            return _unquote(candidate)

    qualified = _QUALIFIED_COLUMN.search(expr)
    if qualified and _in_code(expr, expr_shadow, qualified.start()):
        return _unquote(qualified.group(1))

    if _BARE_COLUMN.fullmatch(expr):
        return _unquote(expr)

    return None


def _in_code(expr: str, expr_shadow: str, index: int) -> bool:
    """True when index is not inside a string literal."""
    return expr[index:index + 1] == expr_shadow[index:index + 1]
