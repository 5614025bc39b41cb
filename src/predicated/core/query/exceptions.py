"""Exceptions for query parsing and evaluation."""

class QueryError(Exception):
    """Base class for all query-related errors."""
    pass

class QuerySyntaxError(QueryError):
    """Raised when query syntax is invalid."""
    def __init__(self, message: str, position: int | None = None):
        self.position = position
        self.reason = message
        super().__init__(f"{message} at position {position}" if position is not None else message)

class QueryCastError(QuerySyntaxError):
    """Raised when a literal cannot be cast (e.g. an impossible date)."""
    pass

class QueryEvaluationError(QueryError):
    """Raised when a predicate tree contains a node the evaluator does not know."""
    pass
