#!/usr/bin/env python3
"""
Tests for the filter operator registry.
"""

import pytest

from dbview_query.filters import (
    FilterOperator, FilterCondition, ColumnCategory, OPERATOR_METADATA, OPERATOR_LABELS,
    ALL_OPERATORS, STRING_OPERATORS, NUMERIC_OPERATORS, DATE_OPERATORS, BOOLEAN_OPERATORS,
    categorize_column_type, get_operators_for_type, get_operator_metadata,
    operator_needs_value, operator_needs_two_values, operator_needs_comma_separated,
    is_operator_valid_for_type, UnknownOperatorError
)


class TestFilterOperator:
    """Test the operator enum."""

    def test_fourteen_operators(self):
        """Test that every operator has metadata and a label."""
        assert len(FilterOperator) == 14
        assert set(OPERATOR_METADATA) == set(FilterOperator)
        assert set(OPERATOR_LABELS) == set(FilterOperator)
        assert ALL_OPERATORS == tuple(FilterOperator)

    def test_from_string(self):
        """Test resolving operator names."""
        assert FilterOperator.from_string('greater_or_equal') is FilterOperator.GREATER_OR_EQUAL
        assert FilterOperator.from_string(FilterOperator.IN) is FilterOperator.IN
        assert FilterOperator.from_string('like') is None
        assert FilterOperator.from_string(None) is None
        assert FilterOperator.is_valid('between')
        assert not FilterOperator.is_valid('BETWEEN')

    def test_condition_keeps_unknown_operator(self):
        """Test that a condition can hold an operator the registry doesn't know."""
        condition = FilterCondition(id='1', column_name='a', operator='regex', value='x')
        assert condition.op is None
        assert condition.to_dict()['operator'] == 'regex'

    def test_condition_from_dict(self):
        """Test building conditions from UI payloads."""
        camel = FilterCondition.from_dict({'id': '1', 'columnName': 'age', 'operator': 'between',
                                           'value': 1, 'value2': 5})
        snake = FilterCondition.from_dict({'id': '1', 'column_name': 'age', 'operator': 'between',
                                           'value': 1, 'value2': 5})
        assert camel == snake
        assert camel.op is FilterOperator.BETWEEN
        assert camel.to_dict() == {'id': '1', 'columnName': 'age', 'operator': 'between',
                                   'value': 1, 'value2': 5}


class TestOperatorMetadata:
    """Test operator shape metadata."""

    def test_value_requirements(self):
        """Test which operators need values."""
        assert not operator_needs_value(FilterOperator.IS_NULL)
        assert not operator_needs_value('is_not_null')
        assert operator_needs_value('equals')
        assert operator_needs_two_values('between')
        assert not operator_needs_two_values('in')
        assert operator_needs_comma_separated('in')
        assert not operator_needs_comma_separated('equals')

    def test_only_between_needs_two_values(self):
        """Test that BETWEEN is the only two-value operator."""
        two_valued = [op for op, meta in OPERATOR_METADATA.items() if meta.needs_two_values]
        assert two_valued == [FilterOperator.BETWEEN]

    def test_labels(self):
        """Test human-readable labels."""
        assert OPERATOR_LABELS[FilterOperator.NOT_CONTAINS] == 'Does Not Contain'
        assert get_operator_metadata('in').label == 'In List'

    def test_unknown_operator_raises(self):
        """Test that metadata lookup for an unknown operator is a programmer error."""
        with pytest.raises(UnknownOperatorError) as exc_info:
            get_operator_metadata('fuzzy')
        assert exc_info.value.operator == 'fuzzy'


class TestColumnTypes:
    """Test operator selection by column type."""

    @pytest.mark.parametrize('data_type,category', [
        ('varchar(255)', ColumnCategory.STRING),
        ('text', ColumnCategory.STRING),
        ('numeric(10,2)', ColumnCategory.NUMBER),
        ('BIGINT', ColumnCategory.NUMBER),
        ('double precision', ColumnCategory.NUMBER),
        ('money', ColumnCategory.NUMBER),
        ('timestamp with time zone', ColumnCategory.DATE),
        ('datetime2', ColumnCategory.DATE),
        ('date', ColumnCategory.DATE),
        ('boolean', ColumnCategory.BOOLEAN),
        ('bit', ColumnCategory.BOOLEAN),
        ('geography', ColumnCategory.STRING),
        ('', ColumnCategory.STRING),
    ])
    def test_categorize(self, data_type, category):
        """Test mapping vendor type names to categories."""
        assert categorize_column_type(data_type) is category

    def test_operators_for_type(self):
        """Test operator sets per type."""
        assert get_operators_for_type('varchar(255)') == list(STRING_OPERATORS)
        assert get_operators_for_type('numeric(10,2)') == list(NUMERIC_OPERATORS)
        assert get_operators_for_type('timestamptz') == list(DATE_OPERATORS)
        assert get_operators_for_type('bool') == list(BOOLEAN_OPERATORS)

    def test_unknown_type_falls_back_to_string(self):
        """Test that unrecognized types get the string operators."""
        assert get_operators_for_type('tsvector') == list(STRING_OPERATORS)
        assert get_operators_for_type(None) == list(STRING_OPERATORS)

    def test_operator_valid_for_type(self):
        """Test per-type operator checks."""
        assert is_operator_valid_for_type('contains', 'varchar')
        assert not is_operator_valid_for_type('contains', 'integer')
        assert is_operator_valid_for_type(FilterOperator.BETWEEN, 'date')
        assert not is_operator_valid_for_type('between', 'boolean')
        assert not is_operator_valid_for_type('nope', 'varchar')
