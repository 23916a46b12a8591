#!/usr/bin/env python3
"""
Tests for the Qdrant payload filter backend.
"""

import pytest
from qdrant_client.models import (
    DatetimeRange, FieldCondition, Filter, IsNullCondition, MatchAny, MatchText,
    MatchValue, PayloadField, Range
)

from dbview_query.filters import (
    FilterCondition, FilterOperator, QdrantFilterBackend, UnsupportedOperatorError,
    build_qdrant_filter
)


def row(column, operator, value=None, value2=None):
    return FilterCondition(id=column, column_name=column, operator=operator, value=value, value2=value2)


class TestQdrantConditions:
    """Test condition conversion."""

    def test_equals(self):
        """Test exact match."""
        result = build_qdrant_filter([row('status', 'equals', 'active')])
        assert result == Filter(must=[FieldCondition(key='status', match=MatchValue(value='active'))])

    def test_not_equals_goes_to_must_not(self):
        """Test negated match under AND."""
        result = build_qdrant_filter([row('status', 'not_equals', 'x')])
        assert result.must is None
        assert result.must_not == [FieldCondition(key='status', match=MatchValue(value='x'))]

    def test_float_equals_uses_closed_range(self):
        """Test float equality is expressed as a point range."""
        result = build_qdrant_filter([row('score', 'equals', 0.5)])
        assert result.must == [FieldCondition(key='score', range=Range(gte=0.5, lte=0.5))]

    def test_contains_is_full_text(self):
        """Test text match."""
        result = build_qdrant_filter([row('body', 'contains', 'hello')])
        assert result.must == [FieldCondition(key='body', match=MatchText(text='hello'))]

    def test_not_contains(self):
        """Test negated text match."""
        result = build_qdrant_filter([row('body', 'not_contains', 'spam')])
        assert result.must_not == [FieldCondition(key='body', match=MatchText(text='spam'))]

    def test_numeric_range(self):
        """Test comparison operators."""
        result = build_qdrant_filter([row('age', 'greater_or_equal', 18)])
        assert result.must == [FieldCondition(key='age', range=Range(gte=18))]

    def test_between_numbers(self):
        """Test inclusive numeric range."""
        result = build_qdrant_filter([row('age', 'between', 18, 65)])
        assert result.must == [FieldCondition(key='age', range=Range(gte=18, lte=65))]

    def test_between_dates(self):
        """Test ISO strings produce a datetime range."""
        result = build_qdrant_filter([row('created', 'between', '2024-01-01T00:00:00Z', '2024-02-01')])
        condition = result.must[0]
        assert condition.key == 'created'
        assert isinstance(condition.range, DatetimeRange)

    def test_unparseable_range_skipped(self):
        """Test a range that is neither numeric nor a date contributes nothing."""
        assert build_qdrant_filter([row('name', 'greater_than', 'abc')]) is None

    def test_null_tests(self):
        """Test null conditions."""
        is_null = IsNullCondition(is_null=PayloadField(key='email'))
        assert build_qdrant_filter([row('email', 'is_null')]).must == [is_null]
        assert build_qdrant_filter([row('email', 'is_not_null')]).must_not == [is_null]

    def test_in_ints_and_mixed(self):
        """Test MatchAny keeps ints and stringifies mixed lists."""
        assert build_qdrant_filter([row('n', 'in', [1, 2])]).must == \
            [FieldCondition(key='n', match=MatchAny(any=[1, 2]))]
        assert build_qdrant_filter([row('n', 'in', [1, 'b'])]).must == \
            [FieldCondition(key='n', match=MatchAny(any=['1', 'b']))]

    def test_payload_prefix(self):
        """Test payload keys get the prefix."""
        result = build_qdrant_filter([row('lang', 'equals', 'en')], payload_prefix='metadata')
        assert result.must[0].key == 'metadata.lang'


class TestQdrantCombination:
    """Test must/should/must_not placement."""

    def test_empty_returns_none(self):
        """Test no clauses means no filter."""
        assert build_qdrant_filter([]) is None
        assert build_qdrant_filter([row('a', 'in', '')]) is None

    def test_and_mixes_must_and_must_not(self):
        """Test AND splits positive and negated clauses."""
        result = build_qdrant_filter([row('a', 'equals', 1), row('b', 'is_not_null')], 'AND')
        assert len(result.must) == 1
        assert len(result.must_not) == 1
        assert result.should is None

    def test_or_wraps_negations(self):
        """Test OR puts negated clauses inside a nested must_not filter."""
        result = build_qdrant_filter([row('a', 'equals', 1), row('b', 'not_equals', 2)], 'OR')
        assert result.must is None
        assert result.must_not is None
        assert result.should == [
            FieldCondition(key='a', match=MatchValue(value=1)),
            Filter(must_not=[FieldCondition(key='b', match=MatchValue(value=2))]),
        ]


class TestQdrantOperatorSupport:
    """Prefix and suffix matches cannot be expressed."""

    @pytest.mark.parametrize('operator', ['starts_with', 'ends_with'])
    def test_skipped_in_compile(self, operator):
        """Test unsupported operators are dropped from the filter."""
        assert build_qdrant_filter([row('name', operator, 'jo')]) is None
        assert not QdrantFilterBackend().supports_operator(operator)

    def test_ensure_supported_raises(self):
        """Test the strict pre-check."""
        with pytest.raises(UnsupportedOperatorError) as exc_info:
            QdrantFilterBackend().ensure_supported([row('name', 'starts_with', 'jo')])
        assert exc_info.value.operator is FilterOperator.STARTS_WITH
        assert str(exc_info.value) == 'Operator starts_with is not supported by Qdrant'
