#!/usr/bin/env python3
"""
Database-agnostic filter model.
Provides the shared FilterCondition representation that every backend
(SQL dialects, MongoDB, Elasticsearch, Cassandra, Qdrant) compiles from.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

from ..exceptions import UnsupportedOperatorError
from ..log_manager import get_logger


class FilterOperator(Enum):
    """Filter operators offered by the filter builder."""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    IN = "in"
    BETWEEN = "between"

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        """Check if a value names a known operator."""
        return cls.from_string(value) is not None

    @classmethod
    def from_string(cls, value: Any) -> Optional['FilterOperator']:
        """Convert a string (or operator) to an operator, None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        for op in cls:
            if op.value == value:
                return op
        return None


class FilterLogic(Enum):
    """How multiple conditions are combined."""
    AND = "AND"
    OR = "OR"

    @classmethod
    def coerce(cls, value: Union['FilterLogic', str, None]) -> 'FilterLogic':
        """Accept the enum, 'AND'/'OR' in any case, or None (AND)."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.AND
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Filter logic must be 'AND' or 'OR', got {value!r}")


@dataclass
class FilterCondition:
    """
    One user-specified predicate.

    The operator is kept as given (enum or raw string) so that a row with an
    unknown operator can still be represented, rejected by the validator and
    skipped by the compilers.
    """
    id: Optional[str]
    column_name: Optional[str]
    operator: Union[FilterOperator, str, None]
    value: Any = None
    value2: Any = None

    @property
    def op(self) -> Optional[FilterOperator]:
        """The operator as a FilterOperator, None if unrecognized."""
        return FilterOperator.from_string(self.operator)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FilterCondition':
        """Build a condition from a UI payload (camelCase or snake_case keys)."""
        column = data.get('columnName', data.get('column_name'))
        return cls(
            id=data.get('id'),
            column_name=column,
            operator=data.get('operator'),
            value=data.get('value'),
            value2=data.get('value2'),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the UI payload shape."""
        op = self.op
        data = {
            'id': self.id,
            'columnName': self.column_name,
            'operator': op.value if op else self.operator,
            'value': self.value,
        }
        if self.value2 is not None:
            data['value2'] = self.value2
        return data

    def __repr__(self):
        op = self.op
        name = op.value if op else self.operator
        if self.value2 is not None:
            return f"{self.column_name} {name} {self.value!r}..{self.value2!r}"
        return f"{self.column_name} {name} {self.value!r}"


FilterInput = Union[FilterCondition, Dict[str, Any]]


def coerce_condition(item: FilterInput) -> FilterCondition:
    """Accept either a FilterCondition or a UI payload dict."""
    if isinstance(item, FilterCondition):
        return item
    if isinstance(item, dict):
        return FilterCondition.from_dict(item)
    raise TypeError(f"Expected FilterCondition or dict, got {type(item).__name__}")


# Collection types accepted as an IN list
LIST_VALUE_TYPES = (list, tuple, set, frozenset)


def parse_in_values(value: Any) -> List[Any]:
    """
    Parse IN operator values, preserving original types.

    Lists keep their element types (only strings are trimmed). String input is
    split on commas and kept as strings so leading zeros survive.
    """
    if isinstance(value, LIST_VALUE_TYPES):
        items = [v.strip() if isinstance(v, str) else v for v in value]
        return [v for v in items if v != '' and v is not None]
    text = '' if value is None else str(value)
    return [part.strip() for part in text.split(',') if part.strip() != '']


@dataclass(frozen=True)
class SkippedFilter:
    """A condition a backend could not express, with the reason."""
    column_name: Optional[str]
    operator: Any
    reason: str


@dataclass(frozen=True)
class SqlFilterResult:
    """WHERE clause (without the WHERE keyword) plus positional parameters."""
    where_clause: str
    params: List[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.where_clause == ''


@dataclass(frozen=True)
class SqlFilterResultNamed:
    """WHERE clause plus named parameters (SQL Server @pN style)."""
    where_clause: str
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.where_clause == ''


@dataclass(frozen=True)
class MongoFilterResult:
    """MongoDB query document."""
    query: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ElasticsearchFilterResult:
    """Elasticsearch query DSL of the form {'bool': {...}}."""
    query: Dict[str, Any] = field(default_factory=lambda: {'bool': {}})

    def to_dict(self) -> Dict[str, Any]:
        return {'query': self.query}


@dataclass(frozen=True)
class CassandraFilterResult:
    """CQL WHERE clause, positional parameters and dialect diagnostics."""
    where_clause: str
    params: List[Any] = field(default_factory=list)
    skipped_filters: List[SkippedFilter] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class FilterBackend(ABC):
    """
    Abstract base class for filter backends.
    Each database/search engine implements this to convert a list of
    FilterCondition values into its native query format.

    Backends are permissive: incomplete rows and operators the target cannot
    express are skipped, never raised, because they run against half-edited
    filter builder state.
    """

    SUPPORTED_OPERATORS: FrozenSet[FilterOperator] = frozenset(FilterOperator)
    backend_name = "generic"

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__, component='compilers')

    @abstractmethod
    def compile(self, filters: Iterable[FilterInput], logic: Union[FilterLogic, str] = FilterLogic.AND) -> Any:
        """
        Compile filter conditions to the backend's native format.

        Args:
            filters: Filter conditions (FilterCondition or UI payload dicts)
            logic: AND or OR between conditions

        Returns:
            Backend-specific result object
        """
        pass

    def supports_operator(self, operator: Union[FilterOperator, str]) -> bool:
        """
        Check if this backend supports a specific operator.

        Args:
            operator: The operator to check

        Returns:
            True if supported, False otherwise
        """
        op = FilterOperator.from_string(operator)
        return op is not None and op in self.SUPPORTED_OPERATORS

    def _usable_conditions(self, filters: Optional[Iterable[FilterInput]]):
        """Yield (condition, operator) for rows with a column name and a known operator."""
        for item in filters or []:
            condition = coerce_condition(item)
            op = condition.op
            if not isinstance(condition.column_name, str) or not condition.column_name or op is None:
                self.logger.debug(f"Skipping incomplete filter: {condition!r}")
                continue
            yield condition, op

    def ensure_supported(self, filters: Optional[Iterable[FilterInput]]) -> None:
        """
        Refuse filters this backend would skip for lack of operator support.

        compile() drops such conditions silently; call this first when a
        dropped condition would change the meaning of the query.

        Raises:
            UnsupportedOperatorError: For the first unsupported operator
        """
        for condition, op in self._usable_conditions(filters):
            if not self.supports_operator(op):
                raise UnsupportedOperatorError(op, self.backend_name)
