"""
Configuration helpers for the dbview query layer.
Supports environment variables for easy deployment configuration.
"""

import os
from typing import Any, Dict, Optional


class Config:
    """
    Configuration helper that reads from environment variables.

    Environment variables:
        DBVIEW_DB_TYPE: Target database type (default: postgres)
        DBVIEW_PARAM_START_INDEX: First placeholder index for SQL dialects
        DBVIEW_SEARCH_PAGE_SIZE: Default page size for Elasticsearch search bodies
        DBVIEW_LOG_DIR: Directory for log files (read by the logging manager)
        DBVIEW_QUERY_DEBUG: Enable verbose debug logging (read by the logging manager)
    """

    DEFAULT_DB_TYPE = "postgres"
    DEFAULT_SEARCH_PAGE_SIZE = 100
    DOCUMENT_DB_TYPES = ("mongodb", "mongo", "elasticsearch", "cassandra", "qdrant")

    @staticmethod
    def from_env() -> Dict[str, Any]:
        """
        Create configuration from environment variables.

        Returns:
            Dict with keyword arguments for create_filter_backend()

        Example:
            from dbview_query import Config, create_filter_backend

            backend = create_filter_backend(**Config.from_env())
        """
        db_type = os.getenv("DBVIEW_DB_TYPE", Config.DEFAULT_DB_TYPE).strip().lower()
        config: Dict[str, Any] = {"db_type": db_type}

        start_index = _int_env("DBVIEW_PARAM_START_INDEX")
        if start_index is not None and db_type not in Config.DOCUMENT_DB_TYPES:
            config["start_index"] = start_index

        if db_type == "elasticsearch":
            config["size"] = _int_env("DBVIEW_SEARCH_PAGE_SIZE") or Config.DEFAULT_SEARCH_PAGE_SIZE

        return config

    @staticmethod
    def for_postgres(start_index: int = 1) -> Dict[str, Any]:
        """
        Configuration for PostgreSQL ($n placeholders).

        Args:
            start_index: Number of the first placeholder

        Returns:
            Configuration dict
        """
        return {"db_type": "postgres", "start_index": start_index}

    @staticmethod
    def for_sqlserver(start_index: int = 0) -> Dict[str, Any]:
        """
        Configuration for SQL Server (@pN named parameters).

        Args:
            start_index: Suffix of the first parameter name

        Returns:
            Configuration dict
        """
        return {"db_type": "sqlserver", "start_index": start_index}

    @staticmethod
    def for_elasticsearch(size: int = DEFAULT_SEARCH_PAGE_SIZE) -> Dict[str, Any]:
        """
        Configuration for Elasticsearch search bodies.

        Args:
            size: Default page size

        Returns:
            Configuration dict
        """
        return {"db_type": "elasticsearch", "size": size}


def _int_env(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
