"""Query Expression API."""

from dataclasses import dataclass
from typing import Any, Iterable

from predicated.core.config import get_settings
from predicated.core.logging import get_logger

from .ast import (
    ComparisonOperator,
    Condition,
    Group,
    LogicalOperator,
    Predicate,
    PredicateBuilder,
    PredicateList,
)
from .evaluator import Evaluator, PathLookup, resolve_path
from .exceptions import QueryCastError, QueryError, QueryEvaluationError, QuerySyntaxError
from .lexer import Lexer
from .literals import (
    BoolLiteral,
    DateLiteral,
    DateTimeLiteral,
    ListLiteral,
    Literal,
    NullLiteral,
    NumberLiteral,
    StringLiteral,
    literal_from_python,
)
from .parser import Parser
from .predicate_compiler import PredicateCompiler
from .rule_validator import validate_predicates
from .serializer import to_query

logger = get_logger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of evaluating a query, keeping any parse failure."""
    matched: bool
    error: QuerySyntaxError | None = None

    def __bool__(self) -> bool:
        return self.matched


def parse(query: str) -> PredicateList:
    """Parse a query string into a predicate tree.

    Raises:
        QuerySyntaxError: If the query is empty or invalid, including
            literals that cannot be cast (QueryCastError).
    """
    if not isinstance(query, str):
        raise QuerySyntaxError(f"Query must be a string, got {type(query).__name__}")

    parser = Parser(Lexer(query))
    predicates = PredicateCompiler().compile(parser.parse())
    validate_predicates(predicates)

    logger.debug("query_parsed", query=query, predicates=len(predicates))
    return predicates


def try_evaluate(
    query: str | Iterable[Predicate],
    record: Any,
    *,
    lookup: PathLookup | None = None,
) -> EvaluationResult:
    """Evaluate a query string or parsed predicates against a record.

    Parse failures are returned in the result instead of raised.
    """
    if isinstance(query, str):
        try:
            predicates = parse(query)
        except QuerySyntaxError as e:
            return EvaluationResult(matched=False, error=e)
    else:
        predicates = tuple(query)

    evaluator = Evaluator(record, lookup)
    return EvaluationResult(matched=evaluator.evaluate(predicates))


def evaluate(
    query: str | Iterable[Predicate],
    record: Any,
    *,
    lookup: PathLookup | None = None,
) -> bool:
    """Evaluate a query string or parsed predicates against a record.

    A query that fails to parse evaluates to False and is logged.
    """
    result = try_evaluate(query, record, lookup=lookup)
    if result.error is not None and get_settings().log_parse_failures:
        logger.warning(
            "query_parse_failed",
            query=query,
            error=result.error.reason,
            position=result.error.position,
        )
    return result.matched


def serialize(predicates: Iterable[Predicate]) -> str:
    """Render predicates back to query text."""
    return to_query(predicates)


__all__ = [
    "parse",
    "evaluate",
    "try_evaluate",
    "serialize",
    "validate_predicates",
    "resolve_path",
    "EvaluationResult",
    "Evaluator",
    "PathLookup",
    "ComparisonOperator",
    "LogicalOperator",
    "Condition",
    "Group",
    "Predicate",
    "PredicateBuilder",
    "PredicateList",
    "Literal",
    "NullLiteral",
    "BoolLiteral",
    "NumberLiteral",
    "StringLiteral",
    "DateLiteral",
    "DateTimeLiteral",
    "ListLiteral",
    "literal_from_python",
    "QueryError",
    "QuerySyntaxError",
    "QueryCastError",
    "QueryEvaluationError",
]
