#!/usr/bin/env python3
"""
SQL backend for filter conditions.
Converts filter conditions into parameterized WHERE clauses for PostgreSQL,
MySQL, MariaDB, SQLite and SQL Server.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..exceptions import UnsupportedDialectError
from .base import (
    FilterBackend, FilterCondition, FilterInput, FilterLogic, FilterOperator,
    SqlFilterResult, SqlFilterResultNamed, parse_in_values
)

QuoteFunction = Callable[[str], str]


class SQLDialect(Enum):
    """SQL engines the backend can target."""
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"

    @classmethod
    def from_db_type(cls, db_type: Union['SQLDialect', str]) -> 'SQLDialect':
        """
        Resolve a database type name to a dialect.

        Raises:
            UnsupportedDialectError: If the type has no SQL dialect rules
        """
        if isinstance(db_type, cls):
            return db_type
        if isinstance(db_type, str):
            key = db_type.strip().lower()
            key = _DIALECT_ALIASES.get(key, key)
            for dialect in cls:
                if dialect.value == key:
                    return dialect
        raise UnsupportedDialectError(db_type)


_DIALECT_ALIASES = {
    'postgresql': 'postgres',
    'pg': 'postgres',
    'mssql': 'sqlserver',
    'tsql': 'sqlserver',
    'sqlite3': 'sqlite',
}


class PlaceholderStyle(Enum):
    """Parameter substitution syntax."""
    POSITIONAL = "positional"  # $1, $2, $3
    QUESTION = "question"      # ?, ?, ?
    NAMED = "named"            # @p0, @p1


def double_quote_identifier(name: str) -> str:
    """Standard SQL identifier quoting (PostgreSQL, SQLite)."""
    return '"' + name.replace('"', '""') + '"'


def backtick_quote_identifier(name: str) -> str:
    """MySQL/MariaDB identifier quoting."""
    return '`' + name.replace('`', '``') + '`'


def bracket_quote_identifier(name: str) -> str:
    """SQL Server identifier quoting."""
    return '[' + name.replace(']', ']]') + ']'


@dataclass(frozen=True)
class DialectRules:
    """Everything the compiler needs to know about one dialect."""
    quote: QuoteFunction
    placeholder_style: PlaceholderStyle
    text_cast: Callable[[str], str]
    like: str
    not_like: str


DIALECT_RULES: Dict[SQLDialect, DialectRules] = {
    SQLDialect.POSTGRES: DialectRules(
        quote=double_quote_identifier,
        placeholder_style=PlaceholderStyle.POSITIONAL,
        text_cast=lambda column: f"{column}::text",
        like='ILIKE',
        not_like='NOT ILIKE',
    ),
    SQLDialect.MYSQL: DialectRules(
        quote=backtick_quote_identifier,
        placeholder_style=PlaceholderStyle.QUESTION,
        text_cast=lambda column: column,
        like='LIKE',
        not_like='NOT LIKE',
    ),
    SQLDialect.MARIADB: DialectRules(
        quote=backtick_quote_identifier,
        placeholder_style=PlaceholderStyle.QUESTION,
        text_cast=lambda column: column,
        like='LIKE',
        not_like='NOT LIKE',
    ),
    SQLDialect.SQLITE: DialectRules(
        quote=double_quote_identifier,
        placeholder_style=PlaceholderStyle.QUESTION,
        text_cast=lambda column: column,
        like='LIKE',
        not_like='NOT LIKE',
    ),
    SQLDialect.SQLSERVER: DialectRules(
        quote=bracket_quote_identifier,
        placeholder_style=PlaceholderStyle.NAMED,
        text_cast=lambda column: f"CAST({column} AS NVARCHAR(MAX))",
        like='LIKE',
        not_like='NOT LIKE',
    ),
}

if set(DIALECT_RULES) != set(SQLDialect):
    _missing = sorted(d.value for d in set(SQLDialect) - set(DIALECT_RULES))
    raise RuntimeError(f"SQL dialect rules missing for: {', '.join(_missing)}")


def quote_identifier(name: str, db_type: Union[SQLDialect, str]) -> str:
    """Quote a column/table name for the given database type."""
    return DIALECT_RULES[SQLDialect.from_db_type(db_type)].quote(name)


class _ParameterCollector:
    """
    Placeholder numbering and parameter storage for a single compile call.
    """

    def __init__(self, style: PlaceholderStyle, start_index: int, as_mapping: bool = False):
        self.style = style
        self.next_index = start_index
        self.params: Union[List[Any], Dict[str, Any]] = {} if as_mapping else []

    def add(self, value: Any) -> str:
        """Record a parameter value and return its placeholder."""
        index = self.next_index
        self.next_index += 1

        if self.style is PlaceholderStyle.POSITIONAL:
            placeholder, name = f"${index}", None
        elif self.style is PlaceholderStyle.QUESTION:
            placeholder, name = '?', None
        else:
            name = f"p{index}"
            placeholder = f"@{name}"

        if isinstance(self.params, dict):
            self.params[name] = value
        else:
            self.params.append(value)
        return placeholder


_COMPARISONS = {
    FilterOperator.EQUALS: '=',
    FilterOperator.NOT_EQUALS: '!=',
    FilterOperator.GREATER_THAN: '>',
    FilterOperator.LESS_THAN: '<',
    FilterOperator.GREATER_OR_EQUAL: '>=',
    FilterOperator.LESS_OR_EQUAL: '<=',
}


def _text(value: Any) -> str:
    return '' if value is None else str(value)


class SQLFilterBackend(FilterBackend):
    """
    Converts filter conditions to SQL WHERE clauses.

    Identifier quoting, placeholder style, text casting and the LIKE keyword
    are taken from DIALECT_RULES for the chosen dialect. Each compile call
    numbers its placeholders from start_index independently.
    """

    backend_name = "SQL"

    def __init__(self,
                 db_type: Union[SQLDialect, str],
                 quote_identifier: Optional[QuoteFunction] = None,
                 start_index: Optional[int] = None):
        """
        Initialize SQL backend.

        Args:
            db_type: Target dialect ('postgres', 'mysql', 'mariadb', 'sqlite', 'sqlserver')
            quote_identifier: Custom identifier quoting function
            start_index: Number of the first placeholder (default 1; 0 for named parameters)

        Raises:
            UnsupportedDialectError: If db_type is not a SQL dialect
        """
        super().__init__()
        self.dialect = SQLDialect.from_db_type(db_type)
        self.rules = DIALECT_RULES[self.dialect]
        self.quote_identifier = quote_identifier or self.rules.quote
        self.start_index = start_index
        self.backend_name = f"SQL ({self.dialect.value})"

    def compile(self, filters: Iterable[FilterInput],
                logic: Union[FilterLogic, str] = FilterLogic.AND) -> SqlFilterResult:
        """
        Convert filter conditions to a WHERE clause with positional parameters.

        Args:
            filters: Filter conditions
            logic: AND or OR between conditions

        Returns:
            SqlFilterResult; an empty where_clause means "no filter"
        """
        style = self.rules.placeholder_style
        default_start = 0 if style is PlaceholderStyle.NAMED else 1
        start = default_start if self.start_index is None else self.start_index
        collector = _ParameterCollector(style, start)

        clause = self._build_clause(filters, logic, collector)
        if not clause:
            return SqlFilterResult(where_clause='', params=[])
        return SqlFilterResult(where_clause=clause, params=collector.params)

    def compile_named(self, filters: Iterable[FilterInput],
                      logic: Union[FilterLogic, str] = FilterLogic.AND) -> SqlFilterResultNamed:
        """
        Convert filter conditions to a WHERE clause with @pN named parameters.

        Args:
            filters: Filter conditions
            logic: AND or OR between conditions

        Returns:
            SqlFilterResultNamed with a name -> value mapping
        """
        start = 0 if self.start_index is None else self.start_index
        collector = _ParameterCollector(PlaceholderStyle.NAMED, start, as_mapping=True)

        clause = self._build_clause(filters, logic, collector)
        if not clause:
            return SqlFilterResultNamed(where_clause='', params={})
        return SqlFilterResultNamed(where_clause=clause, params=collector.params)

    def _build_clause(self, filters, logic, collector: _ParameterCollector) -> str:
        joiner = f" {FilterLogic.coerce(logic).value} "
        conditions = []
        for condition, op in self._usable_conditions(filters):
            sql = self._convert_condition(condition, op, collector)
            if sql:
                conditions.append(sql)
        return joiner.join(conditions)

    def _convert_condition(self, condition: FilterCondition, op: FilterOperator,
                           collector: _ParameterCollector) -> Optional[str]:
        """Lower one condition; None when it contributes no clause."""
        column = self.quote_identifier(condition.column_name)
        value = condition.value

        if op in _COMPARISONS:
            return f"{column} {_COMPARISONS[op]} {collector.add(value)}"

        if op in (FilterOperator.CONTAINS, FilterOperator.NOT_CONTAINS,
                  FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH):
            return self._build_like(column, op, value, collector)

        if op == FilterOperator.IS_NULL:
            return f"{column} IS NULL"

        if op == FilterOperator.IS_NOT_NULL:
            return f"{column} IS NOT NULL"

        if op == FilterOperator.BETWEEN:
            if condition.value2 is None:
                self.logger.debug(f"Skipping BETWEEN without second value on {condition.column_name}")
                return None
            low = collector.add(value)
            high = collector.add(condition.value2)
            return f"{column} BETWEEN {low} AND {high}"

        if op == FilterOperator.IN:
            values = parse_in_values(value)
            if not values:
                self.logger.debug(f"Skipping IN with empty list on {condition.column_name}")
                return None
            placeholders = ', '.join(collector.add(v) for v in values)
            return f"{column} IN ({placeholders})"

        return None

    def _build_like(self, column: str, op: FilterOperator, value: Any,
                    collector: _ParameterCollector) -> str:
        """Build a text match; the column is cast so it also works on non-text types."""
        text_column = self.rules.text_cast(column)
        text = _text(value)

        if op == FilterOperator.CONTAINS:
            return f"{text_column} {self.rules.like} {collector.add(f'%{text}%')}"
        if op == FilterOperator.NOT_CONTAINS:
            return f"{text_column} {self.rules.not_like} {collector.add(f'%{text}%')}"
        if op == FilterOperator.STARTS_WITH:
            return f"{text_column} {self.rules.like} {collector.add(f'{text}%')}"
        return f"{text_column} {self.rules.like} {collector.add(f'%{text}')}"


def build_sql_filter(filters: Iterable[FilterInput],
                     logic: Union[FilterLogic, str],
                     db_type: Union[SQLDialect, str],
                     quote_identifier: Optional[QuoteFunction] = None,
                     start_index: Optional[int] = None) -> SqlFilterResult:
    """
    Build a parameterized SQL WHERE clause from filter conditions.

    Example:
        >>> build_sql_filter([{'id': '1', 'columnName': 'age',
        ...                    'operator': 'greater_than', 'value': 18}], 'AND', 'postgres')
        SqlFilterResult(where_clause='"age" > $1', params=[18])
    """
    backend = SQLFilterBackend(db_type, quote_identifier=quote_identifier, start_index=start_index)
    return backend.compile(filters, logic)


def build_sql_filter_named(filters: Iterable[FilterInput],
                           logic: Union[FilterLogic, str],
                           db_type: Union[SQLDialect, str] = SQLDialect.SQLSERVER,
                           quote_identifier: Optional[QuoteFunction] = None,
                           start_index: Optional[int] = None) -> SqlFilterResultNamed:
    """Build a WHERE clause with named @pN parameters (SQL Server by default)."""
    backend = SQLFilterBackend(db_type, quote_identifier=quote_identifier, start_index=start_index)
    return backend.compile_named(filters, logic)


def build_where_clause(filters: Iterable[FilterInput],
                       logic: Union[FilterLogic, str],
                       db_type: Union[SQLDialect, str],
                       quote_identifier: Optional[QuoteFunction] = None) -> SqlFilterResult:
    """Convenience wrapper around build_sql_filter with default numbering."""
    return build_sql_filter(filters, logic, db_type, quote_identifier=quote_identifier)
