#!/usr/bin/env python3
"""
Cassandra backend for filter conditions.
Converts filter conditions to CQL WHERE clauses.

CQL filtering is far narrower than SQL: there is no OR, no NULL tests and no
NOT CONTAINS. Conditions the dialect cannot express are skipped and reported
so the caller can filter the remaining rows client-side.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

from .base import (
    CassandraFilterResult, FilterBackend, FilterCondition, FilterInput,
    FilterLogic, FilterOperator, SkippedFilter, coerce_condition, parse_in_values
)
from .sql_backend import double_quote_identifier

OR_NOT_SUPPORTED = (
    'Cassandra does not support OR logic in WHERE clauses. '
    'Conditions were joined with AND; use multiple queries or filter results client-side.'
)

_UNSUPPORTED_REASONS = {
    FilterOperator.NOT_CONTAINS: 'Cassandra does not support NOT CONTAINS. Filter results client-side.',
    FilterOperator.IS_NULL: 'Cassandra does not support IS NULL. Filter results client-side.',
    FilterOperator.IS_NOT_NULL: 'Cassandra does not support IS NOT NULL. Filter results client-side.',
}

# Operators that usually need ALLOW FILTERING unless they hit key columns
_FILTERING_OPERATORS = frozenset({
    FilterOperator.CONTAINS, FilterOperator.NOT_CONTAINS,
    FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH,
    FilterOperator.GREATER_THAN, FilterOperator.LESS_THAN,
    FilterOperator.GREATER_OR_EQUAL, FilterOperator.LESS_OR_EQUAL,
    FilterOperator.BETWEEN, FilterOperator.NOT_EQUALS,
})


def escape_like_pattern(value: Any) -> str:
    """Escape LIKE wildcards (% and _) and the escape character itself."""
    text = '' if value is None else str(value)
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


@dataclass
class CassandraValidationResult:
    """Pre-flight compatibility report for a filter list."""
    valid: bool
    supported_filters: List[FilterCondition] = field(default_factory=list)
    unsupported_filters: List[SkippedFilter] = field(default_factory=list)
    logic_error: Optional[str] = None


class CassandraFilterBackend(FilterBackend):
    """
    Converts filter conditions to CQL WHERE clauses with ? placeholders.

    OR logic cannot be expressed in one CQL query; it is logged, reported in
    the result warnings, and the clauses are still joined with AND.
    """

    backend_name = "Cassandra"

    SUPPORTED_OPERATORS = frozenset(FilterOperator) - frozenset(_UNSUPPORTED_REASONS)

    _COMPARISONS = {
        FilterOperator.EQUALS: '=',
        FilterOperator.NOT_EQUALS: '!=',
        FilterOperator.GREATER_THAN: '>',
        FilterOperator.LESS_THAN: '<',
        FilterOperator.GREATER_OR_EQUAL: '>=',
        FilterOperator.LESS_OR_EQUAL: '<=',
    }

    def compile(self, filters: Iterable[FilterInput],
                logic: Union[FilterLogic, str] = FilterLogic.AND) -> CassandraFilterResult:
        """
        Convert filter conditions to a CQL WHERE clause.

        The caller decides whether to append ALLOW FILTERING; see
        needs_allow_filtering().

        Args:
            filters: Filter conditions
            logic: AND or OR (OR is downgraded to AND with a warning)

        Returns:
            CassandraFilterResult with skipped filters and warnings
        """
        logic = FilterLogic.coerce(logic)
        filters = [coerce_condition(f) for f in filters or []]
        conditions: List[str] = []
        params: List[Any] = []
        skipped: List[SkippedFilter] = []
        warnings: List[str] = []

        if logic is FilterLogic.OR and len(filters) > 1:
            self.logger.warning(OR_NOT_SUPPORTED)
            warnings.append(OR_NOT_SUPPORTED)

        for condition, op in self._usable_conditions(filters):
            if not self.supports_operator(op):
                reason = _UNSUPPORTED_REASONS[op]
                self.logger.warning(f"Skipping filter on '{condition.column_name}': {reason}")
                skipped.append(SkippedFilter(condition.column_name, op, reason))
                continue

            if op == FilterOperator.BETWEEN and condition.value2 is None:
                reason = 'BETWEEN operator requires both value and value2.'
                skipped.append(SkippedFilter(condition.column_name, op, reason))
                continue

            clause = self._convert_condition(condition, op, params)
            if clause:
                conditions.append(clause)

        for item in skipped:
            warnings.append(f"{item.column_name}: {item.reason}")

        return CassandraFilterResult(
            where_clause=' AND '.join(conditions),
            params=params,
            skipped_filters=skipped,
            warnings=warnings,
        )

    def _convert_condition(self, condition: FilterCondition, op: FilterOperator,
                           params: List[Any]) -> Optional[str]:
        """Lower a supported condition, appending its parameters."""
        column = double_quote_identifier(condition.column_name)
        value = condition.value

        if op in self._COMPARISONS:
            params.append(value)
            return f"{column} {self._COMPARISONS[op]} ?"

        if op == FilterOperator.CONTAINS:
            # Collection membership (list, set, map values)
            params.append(value)
            return f"{column} CONTAINS ?"

        if op == FilterOperator.STARTS_WITH:
            params.append(f"{escape_like_pattern(value)}%")
            return f"{column} LIKE ?"

        if op == FilterOperator.ENDS_WITH:
            params.append(f"%{escape_like_pattern(value)}")
            return f"{column} LIKE ?"

        if op == FilterOperator.BETWEEN:
            params.extend([value, condition.value2])
            return f"{column} >= ? AND {column} <= ?"

        if op == FilterOperator.IN:
            values = parse_in_values(value)
            if not values:
                return None
            params.extend(values)
            return f"{column} IN ({', '.join('?' for _ in values)})"

        return None

    def validate(self, filters: Iterable[FilterInput],
                 logic: Union[FilterLogic, str] = FilterLogic.AND) -> CassandraValidationResult:
        """
        Check filters for Cassandra compatibility before building a query.

        Args:
            filters: Filter conditions
            logic: AND or OR

        Returns:
            CassandraValidationResult separating supported and unsupported filters
        """
        logic = FilterLogic.coerce(logic)
        filters = [coerce_condition(f) for f in filters or []]

        if logic is FilterLogic.OR and len(filters) > 1:
            return CassandraValidationResult(
                valid=False,
                unsupported_filters=[
                    SkippedFilter(f.column_name, f.operator,
                                  'Cassandra does not support OR logic in WHERE clauses.')
                    for f in filters
                ],
                logic_error=OR_NOT_SUPPORTED,
            )

        supported: List[FilterCondition] = []
        unsupported: List[SkippedFilter] = []
        for condition, op in self._usable_conditions(filters):
            if not self.supports_operator(op):
                unsupported.append(SkippedFilter(condition.column_name, op, _UNSUPPORTED_REASONS[op]))
            elif op == FilterOperator.BETWEEN and condition.value2 is None:
                unsupported.append(SkippedFilter(condition.column_name, op,
                                                 'BETWEEN operator requires both value and value2.'))
            else:
                supported.append(condition)

        return CassandraValidationResult(
            valid=not unsupported,
            supported_filters=supported,
            unsupported_filters=unsupported,
        )


def build_cassandra_filter(filters: Iterable[FilterInput],
                           logic: Union[FilterLogic, str] = FilterLogic.AND) -> CassandraFilterResult:
    """
    Build a CQL WHERE clause from filter conditions.

    Example:
        >>> build_cassandra_filter([
        ...     {'id': '1', 'columnName': 'user_id', 'operator': 'equals', 'value': 'abc123'},
        ...     {'id': '2', 'columnName': 'age', 'operator': 'greater_than', 'value': 18},
        ... ]).where_clause
        '"user_id" = ? AND "age" > ?'
    """
    return CassandraFilterBackend().compile(filters, logic)


def needs_allow_filtering(filters: Iterable[FilterInput]) -> bool:
    """
    Guess whether a filter list will need ALLOW FILTERING.

    This is advisory only: the real answer depends on the table's partition
    and clustering keys, which are not known here. A range on a clustering
    column may run without it, and an equality on a regular column may not.
    """
    for item in filters or []:
        op = coerce_condition(item).op
        if op in _FILTERING_OPERATORS:
            return True
    return False


def validate_cassandra_filters(filters: Iterable[FilterInput],
                               logic: Union[FilterLogic, str] = FilterLogic.AND) -> CassandraValidationResult:
    """Pre-validate filters for Cassandra compatibility."""
    return CassandraFilterBackend().validate(filters, logic)


def get_cassandra_supported_operators() -> List[FilterOperator]:
    """Operators the Cassandra backend can express, in declaration order."""
    return [op for op in FilterOperator if op in CassandraFilterBackend.SUPPORTED_OPERATORS]
