"""Serializer for predicate trees.

Renders predicates back to query text that ``parse`` accepts.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Iterable

from .ast import Condition, Group, LogicalOperator, Predicate
from .exceptions import QueryEvaluationError
from .literals import (
    BoolLiteral,
    DateLiteral,
    DateTimeLiteral,
    ListLiteral,
    Literal,
    NullLiteral,
    NumberLiteral,
)


def to_query(predicates: Iterable[Predicate]) -> str:
    """Render a predicate sequence as query text.

    Examples:
        >>> to_query(PredicateBuilder().where("name", "==", "John").and_().where("age", ">", 21).build())
        "name == 'John' AND age > 21"
    """
    return " ".join(predicate_to_query(predicate) for predicate in predicates)


def predicate_to_query(predicate: Predicate) -> str:
    """Render one predicate, followed by its forward operator if any."""
    node = predicate.node

    if isinstance(node, Group):
        parts = [f"({to_query(node.predicates)})"]
    elif isinstance(node, Condition):
        parts = [node.identifier, node.operator.value, literal_to_query(node.expression)]
    else:
        raise QueryEvaluationError(f"Unknown node type: {type(node).__name__}")

    if predicate.forward_operator is not None:
        parts.append(LogicalOperator(predicate.forward_operator).value)
    return " ".join(parts)


def literal_to_query(literal: Literal) -> str:
    """Render a literal in query syntax."""
    if isinstance(literal, BoolLiteral):
        return "true" if literal.value else "false"

    if isinstance(literal, NumberLiteral):
        if isinstance(literal.value, Decimal):
            return str(literal.value)
        return repr(literal.value)

    if isinstance(literal, NullLiteral):
        return "nil"

    if isinstance(literal, DateLiteral):
        return f"'{literal.value.isoformat()}'::DATE"

    if isinstance(literal, DateTimeLiteral):
        text = literal.value.isoformat()
        if literal.value.utcoffset() == timedelta(0):
            text = text[: -len("+00:00")] + "Z"
        return f"'{text}'::DATETIME"

    if isinstance(literal, ListLiteral):
        return "[" + ", ".join(literal_to_query(item) for item in literal.items) + "]"

    return quote(str(literal.to_python()))


def quote(text: str) -> str:
    """Single-quote a string, escaping backslashes and quotes."""
    escaped = text.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"
