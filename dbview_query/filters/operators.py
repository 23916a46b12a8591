"""
Filter operator definitions and utilities.

OPERATOR_METADATA is the single source of truth for operator shape; the
validator and every backend read it instead of re-encoding arity rules.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple, Union

from ..exceptions import UnknownOperatorError
from .base import FilterOperator


class ColumnCategory(Enum):
    """Coarse column type buckets used to pick operators."""
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    ANY = "any"


@dataclass(frozen=True)
class OperatorMetadata:
    """Shape of one operator."""
    label: str
    needs_value: bool
    needs_two_values: bool
    needs_comma_separated: bool
    applicable_types: Tuple[ColumnCategory, ...]


_ALL_TYPES = (ColumnCategory.STRING, ColumnCategory.NUMBER, ColumnCategory.DATE,
              ColumnCategory.BOOLEAN, ColumnCategory.ANY)
_STRING_ONLY = (ColumnCategory.STRING,)
_ORDERED = (ColumnCategory.NUMBER, ColumnCategory.DATE)


def _meta(label, applicable_types, needs_value=True, two=False, comma=False) -> OperatorMetadata:
    return OperatorMetadata(
        label=label,
        needs_value=needs_value,
        needs_two_values=two,
        needs_comma_separated=comma,
        applicable_types=applicable_types,
    )


OPERATOR_METADATA: Dict[FilterOperator, OperatorMetadata] = {
    FilterOperator.EQUALS: _meta('Equals', _ALL_TYPES),
    FilterOperator.NOT_EQUALS: _meta('Not Equals', _ALL_TYPES),
    FilterOperator.CONTAINS: _meta('Contains', _STRING_ONLY),
    FilterOperator.NOT_CONTAINS: _meta('Does Not Contain', _STRING_ONLY),
    FilterOperator.STARTS_WITH: _meta('Starts With', _STRING_ONLY),
    FilterOperator.ENDS_WITH: _meta('Ends With', _STRING_ONLY),
    FilterOperator.GREATER_THAN: _meta('Greater Than', _ORDERED),
    FilterOperator.LESS_THAN: _meta('Less Than', _ORDERED),
    FilterOperator.GREATER_OR_EQUAL: _meta('Greater or Equal', _ORDERED),
    FilterOperator.LESS_OR_EQUAL: _meta('Less or Equal', _ORDERED),
    FilterOperator.IS_NULL: _meta('Is NULL', (ColumnCategory.ANY,), needs_value=False),
    FilterOperator.IS_NOT_NULL: _meta('Is Not NULL', (ColumnCategory.ANY,), needs_value=False),
    FilterOperator.IN: _meta('In List', (ColumnCategory.STRING, ColumnCategory.NUMBER), comma=True),
    FilterOperator.BETWEEN: _meta('Between', _ORDERED, two=True),
}

if set(OPERATOR_METADATA) != set(FilterOperator):
    missing = sorted(op.value for op in set(FilterOperator) - set(OPERATOR_METADATA))
    raise RuntimeError(f"Operator metadata missing for: {', '.join(missing)}")

_F = FilterOperator

STRING_OPERATORS: Tuple[FilterOperator, ...] = (
    _F.EQUALS, _F.NOT_EQUALS, _F.CONTAINS, _F.NOT_CONTAINS,
    _F.STARTS_WITH, _F.ENDS_WITH, _F.IN, _F.IS_NULL, _F.IS_NOT_NULL,
)

NUMERIC_OPERATORS: Tuple[FilterOperator, ...] = (
    _F.EQUALS, _F.NOT_EQUALS, _F.GREATER_THAN, _F.LESS_THAN,
    _F.GREATER_OR_EQUAL, _F.LESS_OR_EQUAL, _F.BETWEEN, _F.IN, _F.IS_NULL, _F.IS_NOT_NULL,
)

DATE_OPERATORS: Tuple[FilterOperator, ...] = (
    _F.EQUALS, _F.NOT_EQUALS, _F.GREATER_THAN, _F.LESS_THAN,
    _F.GREATER_OR_EQUAL, _F.LESS_OR_EQUAL, _F.BETWEEN, _F.IS_NULL, _F.IS_NOT_NULL,
)

BOOLEAN_OPERATORS: Tuple[FilterOperator, ...] = (
    _F.EQUALS, _F.IS_NULL, _F.IS_NOT_NULL,
)

ALL_OPERATORS: Tuple[FilterOperator, ...] = tuple(FilterOperator)

OPERATOR_LABELS: Dict[FilterOperator, str] = {
    op: meta.label for op, meta in OPERATOR_METADATA.items()
}

_OPERATORS_BY_CATEGORY = {
    ColumnCategory.STRING: STRING_OPERATORS,
    ColumnCategory.NUMBER: NUMERIC_OPERATORS,
    ColumnCategory.DATE: DATE_OPERATORS,
    ColumnCategory.BOOLEAN: BOOLEAN_OPERATORS,
}

_NUMERIC_FRAGMENTS = ('int', 'numeric', 'decimal', 'real', 'double', 'float', 'money')
_NUMERIC_NAMES = {'number', 'bigint', 'smallint', 'tinyint'}
_DATE_FRAGMENTS = ('date', 'time')
_DATE_NAMES = {'datetime', 'datetime2', 'smalldatetime'}
_BOOLEAN_NAMES = {'boolean', 'bool', 'bit'}


def categorize_column_type(data_type: str) -> ColumnCategory:
    """
    Map a vendor column type name onto a ColumnCategory.

    Matching is by substring so new vendor type names ('numeric(10,2)',
    'timestamptz', 'unsigned int') land in the right bucket; anything
    unrecognized is treated as a string.
    """
    normalized = (data_type or '').strip().lower()

    if any(fragment in normalized for fragment in _NUMERIC_FRAGMENTS) or normalized in _NUMERIC_NAMES:
        return ColumnCategory.NUMBER

    # 'timestamp' and 'datetime*' are covered by the fragments
    if any(fragment in normalized for fragment in _DATE_FRAGMENTS) or normalized in _DATE_NAMES:
        return ColumnCategory.DATE

    if normalized in _BOOLEAN_NAMES:
        return ColumnCategory.BOOLEAN

    return ColumnCategory.STRING


def get_operators_for_type(data_type: str) -> List[FilterOperator]:
    """
    Get the operators applicable to a column data type.

    Args:
        data_type: The column data type string, e.g. 'varchar(255)'

    Returns:
        Ordered list of applicable operators
    """
    return list(_OPERATORS_BY_CATEGORY[categorize_column_type(data_type)])


def get_operator_metadata(operator: Union[FilterOperator, str]) -> OperatorMetadata:
    """
    Get metadata for an operator.

    Raises:
        UnknownOperatorError: If the operator is not recognized
    """
    op = FilterOperator.from_string(operator)
    if op is None:
        raise UnknownOperatorError(operator)
    return OPERATOR_METADATA[op]


def operator_needs_value(operator: Union[FilterOperator, str]) -> bool:
    """Check if an operator requires a value input."""
    return get_operator_metadata(operator).needs_value


def operator_needs_two_values(operator: Union[FilterOperator, str]) -> bool:
    """Check if an operator requires two values (BETWEEN)."""
    return get_operator_metadata(operator).needs_two_values


def operator_needs_comma_separated(operator: Union[FilterOperator, str]) -> bool:
    """Check if an operator expects a list of values (IN)."""
    return get_operator_metadata(operator).needs_comma_separated


def is_operator_valid_for_type(operator: Union[FilterOperator, str], data_type: str) -> bool:
    """Check if an operator is offered for a given column data type."""
    op = FilterOperator.from_string(operator)
    return op is not None and op in get_operators_for_type(data_type)
