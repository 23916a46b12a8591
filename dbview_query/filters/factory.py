"""
Backend selection by target database type.
"""

from typing import Any, Iterable, Union

from ..exceptions import UnsupportedDialectError
from .base import FilterBackend, FilterInput, FilterLogic
from .cassandra_backend import CassandraFilterBackend
from .elasticsearch_backend import ElasticsearchFilterBackend
from .mongo_backend import MongoFilterBackend
from .qdrant_backend import QdrantFilterBackend
from .sql_backend import SQLDialect, SQLFilterBackend
from .validator import remove_empty_filters

_DOCUMENT_BACKENDS = {
    'mongodb': MongoFilterBackend,
    'mongo': MongoFilterBackend,
    'elasticsearch': ElasticsearchFilterBackend,
    'cassandra': CassandraFilterBackend,
    'qdrant': QdrantFilterBackend,
}


def create_filter_backend(db_type: Union[SQLDialect, str], **options: Any) -> FilterBackend:
    """
    Create the backend for a database type.

    Args:
        db_type: 'postgres', 'mysql', 'mariadb', 'sqlite', 'sqlserver',
                 'mongodb', 'elasticsearch', 'cassandra' or 'qdrant'
        **options: Backend constructor options (quote_identifier, start_index,
                   size, payload_prefix)

    Raises:
        UnsupportedDialectError: If no backend exists for db_type
    """
    if isinstance(db_type, str):
        backend_cls = _DOCUMENT_BACKENDS.get(db_type.strip().lower())
        if backend_cls is not None:
            return backend_cls(**options)

    try:
        dialect = SQLDialect.from_db_type(db_type)
    except UnsupportedDialectError:
        raise UnsupportedDialectError(db_type) from None
    return SQLFilterBackend(dialect, **options)


def compile_filters(filters: Iterable[FilterInput],
                    logic: Union[FilterLogic, str],
                    db_type: Union[SQLDialect, str],
                    **options: Any) -> Any:
    """
    Drop half-entered rows and compile the rest for db_type.

    Returns whatever the selected backend's compile() returns.
    """
    backend = create_filter_backend(db_type, **options)
    return backend.compile(remove_empty_filters(filters), logic)
