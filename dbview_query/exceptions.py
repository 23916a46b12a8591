"""
Exception classes for the dbview query layer.
"""


class QueryLayerError(Exception):
    """Base exception for all query layer errors."""
    pass


class QueryError(QueryLayerError):
    """Raised when a query cannot be built for the requested target."""
    pass


class ValidationError(QueryLayerError):
    """Raised when input validation fails."""
    pass


class FilterError(QueryLayerError):
    """Base exception for filter-related errors."""
    pass


class InvalidFilterError(FilterError, ValidationError):
    """Raised when a filter is malformed or invalid."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class UnknownOperatorError(FilterError):
    """Raised when operator metadata is requested for an unknown operator."""

    def __init__(self, operator):
        super().__init__(f"Unknown filter operator: {operator!r}")
        self.operator = operator


class UnsupportedOperatorError(FilterError):
    """Raised when a backend doesn't support an operator."""

    def __init__(self, operator, backend: str):
        name = getattr(operator, "value", operator)
        super().__init__(f"Operator {name} is not supported by {backend}")
        self.operator = operator
        self.backend = backend


class UnsupportedDialectError(QueryError):
    """Raised when no quoting/placeholder rules exist for a database type."""

    def __init__(self, db_type):
        super().__init__(f"Unsupported database type: {db_type!r}")
        self.db_type = db_type
