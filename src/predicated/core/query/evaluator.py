"""Evaluator for predicate trees."""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable

from .ast import ComparisonOperator, Condition, Group, Predicate
from .boolean_compiler import compile_results
from .exceptions import QueryEvaluationError
from .literals import ListLiteral, Literal

PathLookup = Callable[[Any, tuple[str, ...]], Any]

# Values whose attributes are never treated as record fields
_OPAQUE_TYPES = (
    str, bytes, bytearray, bool, int, float, complex, Decimal, date,
    list, tuple, set, frozenset,
)


def _is_key_value_sequence(value: list | tuple) -> bool:
    return all(
        isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str)
        for item in value
    )


def resolve_path(record: Any, path: tuple[str, ...]) -> Any:
    """Resolve a dot-path against a record.

    Mappings are indexed by key, ordered ``(key, value)`` pair sequences by
    the first matching key, and other objects by attribute. A missing key or
    a value that cannot be traversed yields None, as does an attribute whose
    getter raises.
    """
    value = record

    for part in path:
        if value is None:
            return None

        # 1. Try mapping access
        if isinstance(value, Mapping):
            value = value.get(part)
            continue

        # 2. Try ordered key-value pairs
        if isinstance(value, (list, tuple)):
            if not _is_key_value_sequence(value):
                return None
            value = next((item for key, item in value if key == part), None)
            continue

        # 3. Try object attribute access
        if isinstance(value, _OPAQUE_TYPES) or part.startswith("__"):
            return None
        try:
            value = getattr(value, part, None)
        except Exception:
            # A failing property reads as a missing field
            return None

    return value


class Evaluator:
    """Evaluates a predicate tree against a record."""

    def __init__(self, record: Any, lookup: PathLookup | None = None):
        """Initialize the evaluator.

        Args:
            record: The data to test (dict, object, key-value pairs, ...)
            lookup: Optional function resolving a path tuple against the record.
        """
        self.record = record
        self.lookup = lookup or resolve_path

    def evaluate(self, predicates: Iterable[Predicate]) -> bool:
        """Evaluate one level of predicates, recursing into groups."""
        return compile_results(
            (predicate.forward_operator, self._evaluate_predicate(predicate))
            for predicate in predicates
        )

    def _evaluate_predicate(self, predicate: Predicate) -> bool:
        node = predicate.node

        if isinstance(node, Group):
            return self.evaluate(node.predicates)

        if isinstance(node, Condition):
            return self.evaluate_condition(node)

        raise QueryEvaluationError(f"Unknown node type: {type(node).__name__}")

    def evaluate_condition(self, condition: Condition) -> bool:
        """Evaluate a single comparison. Type mismatches evaluate to False."""
        subject = self.lookup(self.record, condition.path)
        expression = condition.expression
        op = condition.operator

        if op == ComparisonOperator.EQ:
            return _equals(subject, expression)
        if op == ComparisonOperator.NOT_EQ:
            return not _equals(subject, expression)

        if op in (
            ComparisonOperator.GT, ComparisonOperator.GTE,
            ComparisonOperator.LT, ComparisonOperator.LTE,
        ):
            return _ordered(op, subject, expression)

        if op == ComparisonOperator.IN:
            return isinstance(expression, ListLiteral) and expression.has_member(subject)

        if op == ComparisonOperator.CONTAINS:
            return _is_list(subject) and _list_has(subject, expression)
        if op == ComparisonOperator.NOT_CONTAINS:
            return _is_list(subject) and not _list_has(subject, expression)

        raise QueryEvaluationError(f"Unknown comparison operator: {op}")


def _equals(subject: Any, expression: Literal) -> bool:
    if expression.is_temporal:
        # Dates compare calendrically; a missing value is never equal
        if subject is None:
            return False
        return expression.compare(subject) == 0
    return expression.matches(subject)


def _ordered(op: ComparisonOperator, subject: Any, expression: Literal) -> bool:
    if subject is None:
        return False

    order = expression.compare(subject)
    if order is None:
        return False

    if op == ComparisonOperator.GT:
        return order > 0
    if op == ComparisonOperator.GTE:
        return order >= 0
    if op == ComparisonOperator.LT:
        return order < 0
    return order <= 0


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _list_has(subject: list | tuple, expression: Literal) -> bool:
    return any(expression.matches(element) for element in subject)
