#!/usr/bin/env python3
"""
Elasticsearch backend for filter conditions.
Converts filter conditions to Elasticsearch Query DSL.
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from .base import (
    ElasticsearchFilterResult, FilterBackend, FilterCondition, FilterInput,
    FilterLogic, FilterOperator, parse_in_values
)

DEFAULT_PAGE_SIZE = 100


def escape_wildcard(text: str) -> str:
    """Escape wildcard metacharacters (\\, * and ?) in user input."""
    return text.replace('\\', '\\\\').replace('*', '\\*').replace('?', '\\?')


class ElasticsearchFilterBackend(FilterBackend):
    """
    Converts filter conditions to an Elasticsearch bool query.

    AND joins clauses under bool.must; OR joins them under bool.should with
    minimum_should_match 1.
    """

    backend_name = "Elasticsearch"

    _RANGES = {
        FilterOperator.GREATER_THAN: 'gt',
        FilterOperator.LESS_THAN: 'lt',
        FilterOperator.GREATER_OR_EQUAL: 'gte',
        FilterOperator.LESS_OR_EQUAL: 'lte',
    }

    def __init__(self, size: int = DEFAULT_PAGE_SIZE):
        """
        Initialize Elasticsearch backend.

        Args:
            size: Default page size for search bodies
        """
        super().__init__()
        self.size = size

    def compile(self, filters: Iterable[FilterInput],
                logic: Union[FilterLogic, str] = FilterLogic.AND) -> ElasticsearchFilterResult:
        """
        Convert filter conditions to a bool query.

        Args:
            filters: Filter conditions
            logic: AND or OR between conditions

        Returns:
            ElasticsearchFilterResult whose query is {'bool': {...}}
        """
        logic = FilterLogic.coerce(logic)
        clauses = []
        for condition, op in self._usable_conditions(filters):
            clause = self._convert_condition(condition, op)
            if clause is not None:
                clauses.append(clause)

        if not clauses:
            return ElasticsearchFilterResult(query={'bool': {}})

        if logic is FilterLogic.AND:
            return ElasticsearchFilterResult(query={'bool': {'must': clauses}})
        return ElasticsearchFilterResult(query={'bool': {'should': clauses, 'minimum_should_match': 1}})

    def search_body(self, filters: Iterable[FilterInput],
                    logic: Union[FilterLogic, str] = FilterLogic.AND,
                    from_: int = 0,
                    size: Optional[int] = None,
                    sort: Optional[List[Dict[str, str]]] = None) -> Dict[str, Any]:
        """
        Build a complete search request body.

        Args:
            filters: Filter conditions
            logic: AND or OR between conditions
            from_: Offset of the first hit
            size: Page size (defaults to the backend's size)
            sort: Sort specification, e.g. [{'age': 'desc'}]

        Returns:
            Search body with query, from, size and optional sort
        """
        query = self.compile(filters, logic).query
        body: Dict[str, Any] = {
            'query': query if query.get('bool') else {'match_all': {}},
            'from': from_,
            'size': self.size if size is None else size,
        }
        if sort:
            body['sort'] = sort
        return body

    def _convert_condition(self, condition: FilterCondition, op: FilterOperator) -> Optional[Dict[str, Any]]:
        """Convert a single condition to a query clause."""
        field = condition.column_name
        value = condition.value

        if op == FilterOperator.EQUALS:
            return {'term': {field: value}}

        if op == FilterOperator.NOT_EQUALS:
            return {'bool': {'must_not': {'term': {field: value}}}}

        if op == FilterOperator.CONTAINS:
            return self._wildcard(field, f"*{escape_wildcard(_text(value))}*")

        if op == FilterOperator.NOT_CONTAINS:
            return {'bool': {'must_not': self._wildcard(field, f"*{escape_wildcard(_text(value))}*")}}

        if op == FilterOperator.STARTS_WITH:
            return {'prefix': {field: {'value': _text(value), 'case_insensitive': True}}}

        if op == FilterOperator.ENDS_WITH:
            return self._wildcard(field, f"*{escape_wildcard(_text(value))}")

        if op in self._RANGES:
            return {'range': {field: {self._RANGES[op]: value}}}

        if op == FilterOperator.IS_NULL:
            return {'bool': {'must_not': {'exists': {'field': field}}}}

        if op == FilterOperator.IS_NOT_NULL:
            return {'exists': {'field': field}}

        if op == FilterOperator.BETWEEN:
            if condition.value2 is None:
                self.logger.warning(f"BETWEEN on '{field}' has no second value; condition skipped")
                return None
            return {'range': {field: {'gte': value, 'lte': condition.value2}}}

        if op == FilterOperator.IN:
            values = parse_in_values(value)
            if not values:
                self.logger.debug(f"Skipping IN with empty list on {field}")
                return None
            return {'terms': {field: values}}

        return None

    @staticmethod
    def _wildcard(field: str, pattern: str) -> Dict[str, Any]:
        return {'wildcard': {field: {'value': pattern, 'case_insensitive': True}}}


def _text(value: Any) -> str:
    return '' if value is None else str(value)


def build_elasticsearch_filter(filters: Iterable[FilterInput],
                               logic: Union[FilterLogic, str] = FilterLogic.AND) -> ElasticsearchFilterResult:
    """Build an Elasticsearch bool query from filter conditions."""
    return ElasticsearchFilterBackend().compile(filters, logic)


def build_elasticsearch_search_body(filters: Iterable[FilterInput],
                                    logic: Union[FilterLogic, str] = FilterLogic.AND,
                                    from_: int = 0,
                                    size: int = DEFAULT_PAGE_SIZE,
                                    sort: Optional[List[Dict[str, str]]] = None) -> Dict[str, Any]:
    """
    Build a search request body; match_all is used when no clause survives.

    Example:
        >>> build_elasticsearch_search_body([], size=20)
        {'query': {'match_all': {}}, 'from': 0, 'size': 20}
    """
    return ElasticsearchFilterBackend(size=size).search_body(filters, logic, from_=from_, sort=sort)
