"""Predicate tree nodes for query expressions."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Union

from .exceptions import QuerySyntaxError
from .literals import Literal, literal_from_python


class ComparisonOperator(str, Enum):
    """Comparison operators supported by the evaluator."""
    EQ = "=="
    NOT_EQ = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    IN = "in"
    CONTAINS = "contains"
    NOT_CONTAINS = "not contains"


class LogicalOperator(str, Enum):
    """Logical operator linking a predicate to the next sibling."""
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Condition:
    """A single comparison (e.g., user.age >= 18)."""
    identifier: str
    operator: ComparisonOperator
    expression: Literal

    def __post_init__(self) -> None:
        # Accept plain strings and Python values for hand-built conditions
        if not isinstance(self.operator, ComparisonOperator):
            try:
                object.__setattr__(self, "operator", ComparisonOperator(self.operator))
            except ValueError as e:
                raise QuerySyntaxError(f"Unsupported operator '{self.operator}'") from e
        if not isinstance(self.expression, Literal):
            object.__setattr__(self, "expression", literal_from_python(self.expression))

    @property
    def path(self) -> tuple[str, ...]:
        """Path segments of the dot-separated identifier."""
        return tuple(self.identifier.split("."))


@dataclass(frozen=True)
class Group:
    """A parenthesized sequence of predicates."""
    predicates: tuple["Predicate", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "predicates", tuple(self.predicates))
        check_chain(self.predicates)


@dataclass(frozen=True)
class Predicate:
    """A condition or group, plus the operator relating it to the next sibling."""
    node: Union[Condition, Group]
    forward_operator: LogicalOperator | None = None

    @property
    def is_group(self) -> bool:
        return isinstance(self.node, Group)

    @property
    def condition(self) -> Condition | None:
        return self.node if isinstance(self.node, Condition) else None

    @property
    def predicates(self) -> tuple["Predicate", ...]:
        return self.node.predicates if isinstance(self.node, Group) else ()


PredicateList = tuple[Predicate, ...]


def check_chain(predicates: Iterable[Predicate]) -> None:
    """Check the forward-operator invariant of a predicate sequence.

    Every predicate except the last must link to its next sibling, and the
    last one must not.
    """
    predicates = tuple(predicates)
    if not predicates:
        raise QuerySyntaxError("Empty predicate group")
    for predicate in predicates[:-1]:
        if predicate.forward_operator is None:
            raise QuerySyntaxError("Missing logical operator between predicates")
    if predicates[-1].forward_operator is not None:
        raise QuerySyntaxError(
            f"Dangling logical operator '{predicates[-1].forward_operator.value}'"
        )


class PredicateBuilder:
    """Builds predicate sequences that satisfy the forward-operator invariant.

    Example:
        predicates = (
            PredicateBuilder()
            .where("status", "==", "active")
            .and_()
            .group(PredicateBuilder().where("age", ">", 18).or_().where("vip", "==", True))
            .build()
        )
    """

    def __init__(self) -> None:
        self._nodes: list[Condition | Group] = []
        self._operators: list[LogicalOperator | None] = []

    def add(self, node: Condition | Group) -> "PredicateBuilder":
        """Append a condition or group."""
        if self._nodes and self._operators[-1] is None:
            raise QuerySyntaxError("Missing logical operator between predicates")
        self._nodes.append(node)
        self._operators.append(None)
        return self

    def where(self, identifier: str, operator: ComparisonOperator | str, expression: Any) -> "PredicateBuilder":
        """Append a condition."""
        return self.add(Condition(identifier, operator, expression))

    def group(self, predicates: "PredicateBuilder | Iterable[Predicate]") -> "PredicateBuilder":
        """Append a parenthesized group."""
        if isinstance(predicates, PredicateBuilder):
            predicates = predicates.build()
        return self.add(Group(tuple(predicates)))

    def link(self, operator: LogicalOperator) -> "PredicateBuilder":
        """Attach a forward operator to the last appended node."""
        if not self._nodes or self._operators[-1] is not None:
            raise QuerySyntaxError(f"Logical operator '{operator.value}' without a preceding predicate")
        self._operators[-1] = operator
        return self

    def and_(self) -> "PredicateBuilder":
        return self.link(LogicalOperator.AND)

    def or_(self) -> "PredicateBuilder":
        return self.link(LogicalOperator.OR)

    def build(self) -> PredicateList:
        """Return the immutable predicate sequence."""
        predicates = tuple(
            Predicate(node, operator) for node, operator in zip(self._nodes, self._operators)
        )
        check_chain(predicates)
        return predicates
