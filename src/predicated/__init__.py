"""Predicated - filter queries over in-memory records.

Parses boolean query strings such as ``name == 'John' AND age > 21`` into
predicate trees and evaluates them against dicts, objects and other
record-like values.
"""

__version__ = "1.1.0"

from predicated.core.query import (
    EvaluationResult,
    PredicateBuilder,
    QueryCastError,
    QueryError,
    QuerySyntaxError,
    evaluate,
    parse,
    serialize,
    try_evaluate,
)

__all__ = [
    "parse",
    "evaluate",
    "try_evaluate",
    "serialize",
    "PredicateBuilder",
    "EvaluationResult",
    "QueryError",
    "QuerySyntaxError",
    "QueryCastError",
    "__version__",
]
