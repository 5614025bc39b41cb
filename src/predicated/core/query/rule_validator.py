"""Predicate tree validator.

Runs after compilation and on hand-built trees before they are evaluated.
"""

from typing import Iterable

from .ast import Condition, Group, Predicate, check_chain
from .exceptions import QuerySyntaxError
from .literals import ListLiteral, Literal
from .parser import invalid_identifier_reason


class PredicateValidator:
    """Validates predicate trees."""

    # Computed properties such as name.length are not supported
    RESERVED_SUFFIXES = {"length", "size"}

    def __init__(self) -> None:
        self.errors: list[str] = []

    def validate(self, predicates: Iterable[Predicate]) -> None:
        """Validate a predicate sequence.

        Args:
            predicates: Top-level predicates

        Raises:
            QuerySyntaxError: If the tree is invalid
        """
        self.errors = []
        self._validate_sequence(tuple(predicates))

        if self.errors:
            raise QuerySyntaxError("; ".join(self.errors))

    def _validate_sequence(self, predicates: tuple[Predicate, ...]) -> None:
        try:
            check_chain(predicates)
        except QuerySyntaxError as e:
            self.errors.append(e.reason)

        for predicate in predicates:
            if not isinstance(predicate, Predicate):
                self.errors.append(f"Unknown node type: {type(predicate).__name__}")
                continue
            self._validate_node(predicate.node)

    def _validate_node(self, node: Condition | Group) -> None:
        """Recursively validate a node."""
        if isinstance(node, Group):
            self._validate_sequence(node.predicates)
            return

        if isinstance(node, Condition):
            self._validate_identifier(node.identifier)
            self._validate_literal(node.expression)
            return

        self.errors.append(f"Unknown node type: {type(node).__name__}")

    def _validate_identifier(self, identifier: str) -> None:
        """Validate a dot-path identifier."""
        reason = invalid_identifier_reason(identifier)
        if reason:
            self.errors.append(reason)
            return

        path = identifier.split(".")
        if len(path) > 1 and path[-1].lower() in self.RESERVED_SUFFIXES:
            self.errors.append(
                f"Identifier '{identifier}' uses reserved suffix '{path[-1]}'"
            )

    def _validate_literal(self, literal: Literal) -> None:
        if not isinstance(literal, Literal):
            self.errors.append(f"Unknown literal type: {type(literal).__name__}")
        elif isinstance(literal, ListLiteral):
            for item in literal.items:
                self._validate_literal(item)


def validate_predicates(predicates: Iterable[Predicate]) -> None:
    """Validate a predicate tree.

    Args:
        predicates: Top-level predicates, parsed or hand-built

    Raises:
        QuerySyntaxError: If the tree is invalid

    Examples:
        >>> validate_predicates(PredicateBuilder().where("user.name", "==", "John").build())
        # OK

        >>> validate_predicates(PredicateBuilder().where("name.length", ">", 3).build())
        # Raises: QuerySyntaxError: Identifier 'name.length' uses reserved suffix 'length'
    """
    validator = PredicateValidator()
    validator.validate(predicates)
