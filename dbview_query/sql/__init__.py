"""
SQL text analyzer.

String-in, struct-out helpers for the SQL editor: statement inspection,
validation, read-only detection, formatting and statement splitting. All of
them tolerate partially typed SQL and never raise for malformed text.

Example usage:
    from dbview_query.sql import validate_sql, is_read_only_query, split_statements

    result = validate_sql("DELETE FROM users")
    # result.valid is True
    # result.warnings == ['Query contains potentially dangerous operation: DELETE',
    #                     'DELETE without WHERE clause will delete all rows']

    is_read_only_query("SELECT * INTO backup FROM users")   # False
    split_statements("SELECT 1; SELECT ';';")             # ['SELECT 1', "SELECT ';'"]
"""

from .scanner import ScanState, Segment, SqlPosition, scan_segments, mask_sql, position_at
from .parser import (
    SqlStatementType,
    SqlKeywords,
    ParsedSql,
    SQL_KEYWORDS,
    parse_sql,
    detect_statement_type,
    get_sql_keywords,
    is_sql_keyword
)
from .validator import (
    DANGEROUS_KEYWORDS,
    SqlValidationResult,
    validate_sql,
    is_read_only_query,
    detect_dangerous_operations
)
from .formatter import (
    FormatSqlOptions,
    format_sql,
    minify_sql,
    split_statements,
    has_multiple_statements
)

__all__ = [
    # Scanner
    'ScanState',
    'Segment',
    'SqlPosition',
    'scan_segments',
    'mask_sql',
    'position_at',

    # Parsing
    'SqlStatementType',
    'SqlKeywords',
    'ParsedSql',
    'SQL_KEYWORDS',
    'parse_sql',
    'detect_statement_type',
    'get_sql_keywords',
    'is_sql_keyword',

    # Validation
    'DANGEROUS_KEYWORDS',
    'SqlValidationResult',
    'validate_sql',
    'is_read_only_query',
    'detect_dangerous_operations',

    # Formatting
    'FormatSqlOptions',
    'format_sql',
    'minify_sql',
    'split_statements',
    'has_multiple_statements'
]
