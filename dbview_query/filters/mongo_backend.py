#!/usr/bin/env python3
"""
MongoDB backend for filter conditions.
Converts filter conditions to a MongoDB query document.
"""

import re
from typing import Any, Dict, Iterable, Optional, Union

from .base import (
    FilterBackend, FilterCondition, FilterInput, FilterLogic, FilterOperator,
    MongoFilterResult, parse_in_values
)

_REGEX_SPECIAL = re.compile(r'[.*+?^${}()|\[\]\\]')


def escape_regex(text: str) -> str:
    """Escape regex metacharacters so user input matches literally."""
    return _REGEX_SPECIAL.sub(lambda m: '\\' + m.group(0), text)


class MongoFilterBackend(FilterBackend):
    """
    Converts filter conditions to MongoDB query documents.

    Zero clauses produce {} (matches everything), one clause is emitted
    as-is, two or more are wrapped in $and / $or.
    """

    backend_name = "MongoDB"

    _COMPARISONS = {
        FilterOperator.EQUALS: '$eq',
        FilterOperator.NOT_EQUALS: '$ne',
        FilterOperator.GREATER_THAN: '$gt',
        FilterOperator.LESS_THAN: '$lt',
        FilterOperator.GREATER_OR_EQUAL: '$gte',
        FilterOperator.LESS_OR_EQUAL: '$lte',
    }

    def compile(self, filters: Iterable[FilterInput],
                logic: Union[FilterLogic, str] = FilterLogic.AND) -> MongoFilterResult:
        """
        Convert filter conditions to a MongoDB query.

        Args:
            filters: Filter conditions
            logic: AND or OR between conditions

        Returns:
            MongoFilterResult
        """
        logic = FilterLogic.coerce(logic)
        conditions = []
        for condition, op in self._usable_conditions(filters):
            clause = self._convert_condition(condition, op)
            if clause is not None:
                conditions.append(clause)

        if not conditions:
            return MongoFilterResult(query={})

        if len(conditions) == 1:
            return MongoFilterResult(query=conditions[0])

        key = '$and' if logic is FilterLogic.AND else '$or'
        return MongoFilterResult(query={key: conditions})

    def _convert_condition(self, condition: FilterCondition, op: FilterOperator) -> Optional[Dict[str, Any]]:
        """Convert a single condition to a MongoDB field predicate."""
        field = condition.column_name
        value = condition.value

        if op in self._COMPARISONS:
            return {field: {self._COMPARISONS[op]: value}}

        if op == FilterOperator.CONTAINS:
            return {field: self._regex(escape_regex(_text(value)))}

        if op == FilterOperator.NOT_CONTAINS:
            return {field: {'$not': self._regex(escape_regex(_text(value)))}}

        if op == FilterOperator.STARTS_WITH:
            return {field: self._regex('^' + escape_regex(_text(value)))}

        if op == FilterOperator.ENDS_WITH:
            return {field: self._regex(escape_regex(_text(value)) + '$')}

        if op == FilterOperator.IS_NULL:
            return {field: {'$eq': None}}

        if op == FilterOperator.IS_NOT_NULL:
            return {field: {'$ne': None}}

        if op == FilterOperator.BETWEEN:
            if condition.value2 is None:
                self.logger.warning(f"BETWEEN on '{field}' has no second value; condition skipped")
                return None
            return {field: {'$gte': value, '$lte': condition.value2}}

        if op == FilterOperator.IN:
            values = parse_in_values(value)
            if not values:
                self.logger.debug(f"Skipping IN with empty list on {field}")
                return None
            return {field: {'$in': values}}

        return None

    @staticmethod
    def _regex(pattern: str) -> Dict[str, str]:
        return {'$regex': pattern, '$options': 'i'}


def _text(value: Any) -> str:
    return '' if value is None else str(value)


def build_mongo_filter(filters: Iterable[FilterInput],
                       logic: Union[FilterLogic, str] = FilterLogic.AND) -> MongoFilterResult:
    """
    Build a MongoDB query object from filter conditions.

    Example:
        >>> build_mongo_filter([
        ...     {'id': '1', 'columnName': 'age', 'operator': 'greater_than', 'value': 18},
        ...     {'id': '2', 'columnName': 'status', 'operator': 'equals', 'value': 'active'},
        ... ]).query
        {'$and': [{'age': {'$gt': 18}}, {'status': {'$eq': 'active'}}]}
    """
    return MongoFilterBackend().compile(filters, logic)


def build_mongo_match_stage(filters: Iterable[FilterInput],
                            logic: Union[FilterLogic, str] = FilterLogic.AND) -> Dict[str, Any]:
    """Build an aggregation pipeline $match stage from filter conditions."""
    return {'$match': build_mongo_filter(filters, logic).query}
