"""Compiles the raw parser stream into a predicate tree.

Literal tokens are cast here, in a fixed priority order: list, boolean, null,
string (optionally cast to a date or datetime), number. A cast that fails
raises ``QueryCastError`` so bad literals never reach evaluation as nulls.
"""

from typing import Iterator

from predicated.core.config import get_settings

from .ast import Condition, LogicalOperator, PredicateBuilder, PredicateList
from .exceptions import QueryCastError, QuerySyntaxError
from .lexer import LITERAL_TYPES, Lexer, Token, TokenType
from .literals import (
    BoolLiteral,
    ListLiteral,
    Literal,
    NullLiteral,
    cast_number,
    cast_string,
    split_list_items,
)
from .parser import RawComparison, RawGroup, RawItem


def chunk_results(items: list[RawItem]) -> Iterator[tuple[RawComparison | RawGroup, LogicalOperator | None]]:
    """Pair every comparison or group with the logical operator that follows it."""
    index = 0
    while index < len(items):
        node = items[index]
        if isinstance(node, LogicalOperator):
            raise QuerySyntaxError(f"Unexpected logical operator '{node.value}'")
        operator = None
        if index + 1 < len(items):
            operator = items[index + 1]
            if not isinstance(operator, LogicalOperator):
                raise QuerySyntaxError("Missing logical operator between predicates")
        yield node, operator
        index += 2


def cast_token(token: Token, depth: int = 0) -> Literal:
    """Cast a literal token into a typed literal."""
    if token.type == TokenType.LIST:
        return cast_list(token, depth + 1)
    if token.type == TokenType.BOOLEAN:
        return BoolLiteral(str(token.value).lower() == "true")
    if token.type == TokenType.NULL:
        return NullLiteral()
    if token.type == TokenType.STRING:
        return cast_string(str(token.value), token.cast, token.position)
    if token.type == TokenType.NUMBER:
        return cast_number(str(token.value), token.position)
    raise QuerySyntaxError(f"Expected literal value, found {token.type.name}", token.position)


def cast_list(token: Token, depth: int = 1) -> ListLiteral:
    """Split a ``[...]`` token and cast each item with the literal rules."""
    if depth > get_settings().max_nesting_depth:
        raise QueryCastError("List literal nested too deeply", token.position)

    text = str(token.value)
    items = []
    for item_text, position in split_list_items(text[1:-1], token.position + 1):
        items.append(_cast_list_item(item_text, position, depth))
    return ListLiteral(tuple(items))


def _cast_list_item(text: str, position: int, depth: int) -> Literal:
    lexer = Lexer(text, offset=position)
    try:
        token = lexer.get_next_token()
        trailing = lexer.get_next_token()
    except QuerySyntaxError as e:
        raise QueryCastError(f"Invalid list item '{text}': {e.reason}", e.position) from e

    if token.type not in LITERAL_TYPES or trailing.type != TokenType.EOF:
        raise QueryCastError(f"Invalid list item '{text}'", position)
    return cast_token(token, depth)


class PredicateCompiler:
    """Turns parser output into an immutable predicate tree."""

    def compile(self, items: list[RawItem]) -> PredicateList:
        """Compile one grouping level, recursing into nested groups."""
        builder = PredicateBuilder()
        for node, operator in chunk_results(items):
            if isinstance(node, RawGroup):
                builder.group(self.compile(node.items))
            else:
                builder.add(
                    Condition(node.identifier, node.operator, cast_token(node.literal))
                )
            if operator is not None:
                builder.link(operator)
        return builder.build()
