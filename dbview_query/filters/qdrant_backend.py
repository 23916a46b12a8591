#!/usr/bin/env python3
"""
Qdrant backend for filter conditions.
Converts filter conditions to Qdrant payload Filter objects.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from qdrant_client.models import (
    DatetimeRange, FieldCondition, Filter, IsNullCondition, MatchAny,
    MatchText, MatchValue, PayloadField, Range
)

from .base import (
    FilterBackend, FilterCondition, FilterInput, FilterLogic, FilterOperator,
    parse_in_values
)


class QdrantFilterBackend(FilterBackend):
    """
    Converts filter conditions to a Qdrant Filter.

    AND puts clauses under must, OR under should. Negated clauses go to
    must_not (or, under OR, into a nested Filter(must_not=[...])).
    """

    backend_name = "Qdrant"

    # Payload indexes have no prefix/suffix matching
    SUPPORTED_OPERATORS = frozenset(FilterOperator) - {FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH}

    _RANGES = {
        FilterOperator.GREATER_THAN: 'gt',
        FilterOperator.LESS_THAN: 'lt',
        FilterOperator.GREATER_OR_EQUAL: 'gte',
        FilterOperator.LESS_OR_EQUAL: 'lte',
    }

    def __init__(self, payload_prefix: Optional[str] = None):
        """
        Initialize Qdrant backend.

        Args:
            payload_prefix: Prefix for payload keys, e.g. 'metadata' -> 'metadata.<column>'
        """
        super().__init__()
        self.payload_prefix = payload_prefix

    def compile(self, filters: Iterable[FilterInput],
                logic: Union[FilterLogic, str] = FilterLogic.AND) -> Optional[Filter]:
        """
        Convert filter conditions to a Qdrant Filter.

        Args:
            filters: Filter conditions
            logic: AND or OR between conditions

        Returns:
            Qdrant Filter, or None when no clause survives (match everything)
        """
        logic = FilterLogic.coerce(logic)
        must: List[Any] = []
        should: List[Any] = []
        must_not: List[Any] = []

        for condition, op in self._usable_conditions(filters):
            if not self.supports_operator(op):
                self.logger.warning(f"Qdrant cannot express {op.value} on '{condition.column_name}'; skipped")
                continue

            converted = self._convert_condition(condition, op)
            if converted is None:
                continue

            clause, negated = converted
            if logic is FilterLogic.OR:
                should.append(Filter(must_not=[clause]) if negated else clause)
            elif negated:
                must_not.append(clause)
            else:
                must.append(clause)

        if not (must or should or must_not):
            return None

        kwargs: Dict[str, Any] = {}
        if must:
            kwargs['must'] = must
        if should:
            kwargs['should'] = should
        if must_not:
            kwargs['must_not'] = must_not
        return Filter(**kwargs)

    def _convert_condition(self, condition: FilterCondition,
                           op: FilterOperator) -> Optional[Tuple[Any, bool]]:
        """Convert a single condition to (qdrant condition, negated)."""
        key = self._get_field_key(condition.column_name)
        value = condition.value

        if op in (FilterOperator.EQUALS, FilterOperator.NOT_EQUALS):
            return self._match_value(key, value), op == FilterOperator.NOT_EQUALS

        if op in (FilterOperator.CONTAINS, FilterOperator.NOT_CONTAINS):
            text = '' if value is None else str(value)
            base = FieldCondition(key=key, match=MatchText(text=text))
            return base, op == FilterOperator.NOT_CONTAINS

        if op in self._RANGES:
            base = self._range(key, {self._RANGES[op]: value})
            return (base, False) if base is not None else None

        if op in (FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL):
            base = IsNullCondition(is_null=PayloadField(key=key))
            return base, op == FilterOperator.IS_NOT_NULL

        if op == FilterOperator.BETWEEN:
            if condition.value2 is None:
                self.logger.warning(f"BETWEEN on '{condition.column_name}' has no second value; condition skipped")
                return None
            base = self._range(key, {'gte': value, 'lte': condition.value2})
            return (base, False) if base is not None else None

        if op == FilterOperator.IN:
            values = parse_in_values(value)
            if not values:
                return None
            return FieldCondition(key=key, match=MatchAny(any=_uniform_values(values))), False

        return None

    def _match_value(self, key: str, value: Any):
        """Exact match; floats become a closed range since MatchValue is int/str/bool only."""
        if value is None:
            return IsNullCondition(is_null=PayloadField(key=key))
        if isinstance(value, float):
            return FieldCondition(key=key, range=Range(gte=value, lte=value))
        if not isinstance(value, (bool, int, str)):
            value = str(value)
        return FieldCondition(key=key, match=MatchValue(value=value))

    def _range(self, key: str, bounds: Dict[str, Any]) -> Optional[FieldCondition]:
        """Numeric bounds use Range; anything else is treated as a datetime range."""
        if all(_is_number(v) for v in bounds.values()):
            return FieldCondition(key=key, range=Range(**bounds))
        try:
            return FieldCondition(key=key, range=DatetimeRange(**{k: _as_datetime(v) for k, v in bounds.items()}))
        except ValueError as e:
            self.logger.warning(f"Range on '{key}' is neither numeric nor a datetime; skipped ({e})")
            return None

    def _get_field_key(self, field: str) -> str:
        """Payload key for a column, with the optional prefix."""
        if self.payload_prefix:
            return f"{self.payload_prefix}.{field}"
        return field


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_datetime(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    raise ValueError(f"not a datetime: {value!r}")


def _uniform_values(values: List[Any]) -> List[Any]:
    """MatchAny takes a list of ints or a list of strings, never a mix."""
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return values
    return [str(v) for v in values]


def build_qdrant_filter(filters: Iterable[FilterInput],
                        logic: Union[FilterLogic, str] = FilterLogic.AND,
                        payload_prefix: Optional[str] = None) -> Optional[Filter]:
    """Build a Qdrant payload Filter from filter conditions."""
    return QdrantFilterBackend(payload_prefix=payload_prefix).compile(filters, logic)
