#!/usr/bin/env python3
"""
Pre-flight validation for filter conditions.
Validates filter rows from the filter builder before they are compiled, and
normalizes the ones that pass.
"""

import random
import string
import time
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, List, Optional

from ..exceptions import InvalidFilterError
from .base import LIST_VALUE_TYPES, FilterCondition, FilterInput, FilterOperator, coerce_condition
from .operators import OPERATOR_METADATA, operator_needs_value

# Filtering for a literal empty string is legitimate for these
_EMPTY_STRING_OPERATORS = {FilterOperator.EQUALS, FilterOperator.NOT_EQUALS}


@dataclass
class FilterValidationResult:
    """Outcome of validating one filter condition."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    normalized_filter: Optional[FilterCondition] = None


class FilterValidator:
    """
    Validates filter conditions against the operator registry.

    Unlike the backends, the validator is strict: a row with a blank column,
    an unknown operator or a missing value is reported, never skipped.
    Nothing is raised from validate(); callers decide whether to block.
    """

    def validate(self, condition: FilterInput) -> FilterValidationResult:
        """
        Validate and normalize a single filter condition.

        Args:
            condition: FilterCondition or UI payload dict

        Returns:
            FilterValidationResult with errors, or the normalized filter
        """
        condition = coerce_condition(condition)
        errors: List[str] = []

        if not condition.id:
            errors.append('Filter must have an id')

        if not isinstance(condition.column_name, str) or condition.column_name.strip() == '':
            errors.append('Column name is required')

        op = condition.op
        if condition.operator is None or condition.operator == '':
            errors.append('Operator is required')
        elif op is None:
            errors.append(f"Invalid operator: {condition.operator}")

        # Structural problems make value checks meaningless
        if errors:
            return FilterValidationResult(valid=False, errors=errors)

        meta = OPERATOR_METADATA[op]

        if meta.needs_value:
            if condition.value is None:
                errors.append(f"Operator '{op.value}' requires a value")
            elif isinstance(condition.value, str) and condition.value.strip() == '':
                if op not in _EMPTY_STRING_OPERATORS:
                    errors.append(f"Value cannot be empty for operator '{op.value}'")

        if meta.needs_two_values and condition.value2 is None:
            errors.append(f"Operator '{op.value}' requires a second value")

        if meta.needs_comma_separated and not _split_list(condition.value):
            errors.append('IN operator requires at least one value')

        if errors:
            return FilterValidationResult(valid=False, errors=errors)

        return FilterValidationResult(
            valid=True,
            errors=[],
            normalized_filter=normalize_filter(condition),
        )

    def validate_all(self, conditions: Iterable[FilterInput]) -> List[FilterValidationResult]:
        """Validate each condition; one result per input, in order."""
        return [self.validate(c) for c in conditions or []]

    def ensure_valid(self, conditions: Iterable[FilterInput]) -> List[FilterCondition]:
        """
        Validate every condition and return the normalized list.

        Raises:
            InvalidFilterError: If any condition is invalid; carries all messages
        """
        conditions = [coerce_condition(c) for c in conditions or []]
        errors = get_filter_errors(conditions, validator=self)
        if errors:
            raise InvalidFilterError('; '.join(errors), errors=errors)
        return [self.validate(c).normalized_filter for c in conditions]


_default_validator = FilterValidator()


def _split_list(value: Any) -> List[str]:
    if isinstance(value, LIST_VALUE_TYPES):
        items = [str(v).strip() for v in value if v is not None]
    else:
        items = ('' if value is None else str(value)).split(',')
    return [item.strip() for item in items if item.strip() != '']


def validate_filter(condition: FilterInput) -> FilterValidationResult:
    """Validate a single filter condition."""
    return _default_validator.validate(condition)


def validate_filters(conditions: Iterable[FilterInput]) -> List[FilterValidationResult]:
    """Validate a list of filter conditions."""
    return _default_validator.validate_all(conditions)


def are_filters_valid(conditions: Iterable[FilterInput]) -> bool:
    """Check if all filters in a list are valid."""
    return all(r.valid for r in validate_filters(conditions))


def get_filter_errors(conditions: Iterable[FilterInput],
                      validator: Optional[FilterValidator] = None) -> List[str]:
    """
    Collect validation errors from a list of filters.

    Each message is prefixed with the column name, or 'Filter N' (1-based)
    when the row has no column yet.
    """
    validator = validator or _default_validator
    errors: List[str] = []
    for index, item in enumerate(conditions or []):
        condition = coerce_condition(item)
        result = validator.validate(condition)
        if result.valid:
            continue
        context = condition.column_name or f"Filter {index + 1}"
        errors.extend(f"{context}: {err}" for err in result.errors)
    return errors


def normalize_filter(condition: FilterInput) -> FilterCondition:
    """
    Normalize a filter condition.

    - Trims the column name and string values
    - Rewrites IN values into a list of trimmed, non-empty strings

    Normalizing an already normalized filter returns an equal filter.
    """
    condition = coerce_condition(condition)
    column = condition.column_name
    column = column.strip() if isinstance(column, str) else ('' if column is None else str(column))

    value = condition.value
    if isinstance(value, str):
        value = value.strip()

    value2 = condition.value2
    if isinstance(value2, str):
        value2 = value2.strip()

    if condition.op is FilterOperator.IN:
        value = _split_list(value)

    return replace(condition, column_name=column, value=value, value2=value2)


def is_filter_empty(condition: FilterInput) -> bool:
    """
    Check if a filter row has no meaningful value yet.

    Operators that take no value are never empty. Rows with an unknown
    operator are left for the validator and backends to deal with.
    """
    condition = coerce_condition(condition)
    op = condition.op
    if op is None or not operator_needs_value(op):
        return False

    value = condition.value
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == '':
        return True
    if isinstance(value, LIST_VALUE_TYPES) and len(value) == 0:
        return True
    return False


def remove_empty_filters(conditions: Iterable[FilterInput]) -> List[FilterCondition]:
    """Drop half-entered filter rows."""
    kept = (coerce_condition(c) for c in conditions or [])
    return [c for c in kept if not is_filter_empty(c)]


def create_filter(column_name: str, operator: FilterOperator = FilterOperator.EQUALS) -> FilterCondition:
    """
    Create a new, empty filter row for a column.

    Args:
        column_name: The column name
        operator: The operator (default: equals)
    """
    return FilterCondition(
        id=_generate_filter_id(),
        column_name=column_name,
        operator=operator,
        value='',
    )


def _generate_filter_id() -> str:
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"filter_{int(time.time() * 1000)}_{suffix}"
