"""
Cross-database filter system.

This module provides a single FilterCondition model and converts lists of
conditions to different query languages (SQL dialects, MongoDB,
Elasticsearch, Cassandra CQL, Qdrant).

Example usage:
    from dbview_query.filters import FilterCondition, validate_filters, build_sql_filter

    filters = [
        FilterCondition(id='1', column_name='age', operator='greater_than', value=18),
        FilterCondition(id='2', column_name='status', operator='in', value='active, pending'),
    ]

    # Reject bad rows before compiling
    results = validate_filters(filters)

    # Convert to PostgreSQL
    result = build_sql_filter(filters, 'AND', 'postgres')
    # result.where_clause == '"age" > $1 AND "status" IN ($2, $3)'
    # result.params == [18, 'active', 'pending']
"""

from ..exceptions import (
    FilterError,
    InvalidFilterError,
    UnknownOperatorError,
    UnsupportedDialectError,
    UnsupportedOperatorError
)

from .base import (
    FilterOperator,
    FilterLogic,
    FilterCondition,
    FilterBackend,
    SkippedFilter,
    SqlFilterResult,
    SqlFilterResultNamed,
    MongoFilterResult,
    ElasticsearchFilterResult,
    CassandraFilterResult,
    parse_in_values
)

from .operators import (
    ColumnCategory,
    OperatorMetadata,
    OPERATOR_METADATA,
    OPERATOR_LABELS,
    ALL_OPERATORS,
    STRING_OPERATORS,
    NUMERIC_OPERATORS,
    DATE_OPERATORS,
    BOOLEAN_OPERATORS,
    categorize_column_type,
    get_operators_for_type,
    get_operator_metadata,
    operator_needs_value,
    operator_needs_two_values,
    operator_needs_comma_separated,
    is_operator_valid_for_type
)

from .validator import (
    FilterValidator,
    FilterValidationResult,
    validate_filter,
    validate_filters,
    are_filters_valid,
    get_filter_errors,
    normalize_filter,
    is_filter_empty,
    remove_empty_filters,
    create_filter
)

from .sql_backend import (
    SQLDialect,
    PlaceholderStyle,
    SQLFilterBackend,
    build_sql_filter,
    build_sql_filter_named,
    build_where_clause,
    quote_identifier
)
from .mongo_backend import MongoFilterBackend, build_mongo_filter, build_mongo_match_stage
from .elasticsearch_backend import (
    ElasticsearchFilterBackend,
    build_elasticsearch_filter,
    build_elasticsearch_search_body
)
from .cassandra_backend import (
    CassandraFilterBackend,
    CassandraValidationResult,
    build_cassandra_filter,
    needs_allow_filtering,
    validate_cassandra_filters,
    get_cassandra_supported_operators
)
from .qdrant_backend import QdrantFilterBackend, build_qdrant_filter
from .factory import create_filter_backend, compile_filters

__all__ = [
    # Core classes
    'FilterOperator',
    'FilterLogic',
    'FilterCondition',
    'FilterBackend',
    'SkippedFilter',
    'parse_in_values',

    # Results
    'SqlFilterResult',
    'SqlFilterResultNamed',
    'MongoFilterResult',
    'ElasticsearchFilterResult',
    'CassandraFilterResult',

    # Operator registry
    'ColumnCategory',
    'OperatorMetadata',
    'OPERATOR_METADATA',
    'OPERATOR_LABELS',
    'ALL_OPERATORS',
    'STRING_OPERATORS',
    'NUMERIC_OPERATORS',
    'DATE_OPERATORS',
    'BOOLEAN_OPERATORS',
    'categorize_column_type',
    'get_operators_for_type',
    'get_operator_metadata',
    'operator_needs_value',
    'operator_needs_two_values',
    'operator_needs_comma_separated',
    'is_operator_valid_for_type',

    # Validation
    'FilterValidator',
    'FilterValidationResult',
    'validate_filter',
    'validate_filters',
    'are_filters_valid',
    'get_filter_errors',
    'normalize_filter',
    'is_filter_empty',
    'remove_empty_filters',
    'create_filter',

    # Backends
    'SQLDialect',
    'PlaceholderStyle',
    'SQLFilterBackend',
    'build_sql_filter',
    'build_sql_filter_named',
    'build_where_clause',
    'quote_identifier',
    'MongoFilterBackend',
    'build_mongo_filter',
    'build_mongo_match_stage',
    'ElasticsearchFilterBackend',
    'build_elasticsearch_filter',
    'build_elasticsearch_search_body',
    'CassandraFilterBackend',
    'CassandraValidationResult',
    'build_cassandra_filter',
    'needs_allow_filtering',
    'validate_cassandra_filters',
    'get_cassandra_supported_operators',
    'QdrantFilterBackend',
    'build_qdrant_filter',
    'create_filter_backend',
    'compile_filters',

    # Errors
    'FilterError',
    'InvalidFilterError',
    'UnknownOperatorError',
    'UnsupportedDialectError',
    'UnsupportedOperatorError'
]
