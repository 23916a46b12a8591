"""
dbview query layer
Database-agnostic filter compilation and SQL text analysis for the dbview editor.
"""

from .filters import (
    FilterCondition,
    FilterOperator,
    FilterLogic,
    create_filter_backend,
    compile_filters,
    validate_filters
)
from .sql import parse_sql, validate_sql, is_read_only_query, format_sql, split_statements
from .exceptions import (
    QueryLayerError,
    QueryError,
    ValidationError,
    FilterError,
    InvalidFilterError,
    UnsupportedDialectError
)
from .config import Config

__version__ = "0.4.0"

__all__ = [
    "FilterCondition",
    "FilterOperator",
    "FilterLogic",
    "create_filter_backend",
    "compile_filters",
    "validate_filters",
    "parse_sql",
    "validate_sql",
    "is_read_only_query",
    "format_sql",
    "split_statements",
    "QueryLayerError",
    "QueryError",
    "ValidationError",
    "FilterError",
    "InvalidFilterError",
    "UnsupportedDialectError",
    "Config"
]
