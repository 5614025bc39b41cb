"""Parser for query expressions.

The parser does not build AND/OR sub-trees. Each grouping level is returned
as a flat stream of comparisons, parenthesized groups and the logical
operators between them; precedence is resolved at evaluation time.
"""

import re
from dataclasses import dataclass, field
from typing import Union

from predicated.core.config import get_settings

from .ast import ComparisonOperator, LogicalOperator
from .exceptions import QuerySyntaxError
from .lexer import LITERAL_TYPES, WORD_TYPES, Lexer, Token, TokenType

IDENTIFIER_SEGMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class RawComparison:
    """An ``identifier comparator literal`` triple with the literal still uncast."""
    identifier: str
    operator: ComparisonOperator
    literal: Token


@dataclass(frozen=True)
class RawGroup:
    """The stream of a parenthesized group."""
    items: list["RawItem"] = field(default_factory=list)
    position: int | None = None


RawItem = Union[RawComparison, RawGroup, LogicalOperator]


def invalid_identifier_reason(identifier: str) -> str | None:
    """Describe what is wrong with a dot-path identifier, or None if it is valid."""
    for segment in identifier.split("."):
        if not segment:
            return f"Invalid identifier '{identifier}': empty path segment"
        if not IDENTIFIER_SEGMENT.match(segment):
            return f"Invalid identifier '{identifier}': segment '{segment}' must not start with a digit"
    return None


class Parser:
    """Recursive descent parser for query expressions."""

    COMPARATORS = {
        TokenType.EQ: ComparisonOperator.EQ,
        TokenType.NEQ: ComparisonOperator.NOT_EQ,
        TokenType.GT: ComparisonOperator.GT,
        TokenType.GTE: ComparisonOperator.GTE,
        TokenType.LT: ComparisonOperator.LT,
        TokenType.LTE: ComparisonOperator.LTE,
        TokenType.IN: ComparisonOperator.IN,
        TokenType.CONTAINS: ComparisonOperator.CONTAINS,
    }

    def __init__(self, lexer: Lexer, max_depth: int | None = None):
        self.lexer = lexer
        self.max_depth = max_depth if max_depth is not None else get_settings().max_nesting_depth
        self.depth = 0
        self.current_token: Token = self.lexer.get_next_token()

    def error(self, message: str) -> None:
        """Raise a syntax error."""
        raise QuerySyntaxError(message, self.current_token.position)

    def consume(self, token_type: TokenType) -> None:
        """Consume the current token if it matches the expected type."""
        if self.current_token.type == token_type:
            self.current_token = self.lexer.get_next_token()
        else:
            self.error(f"Expected {token_type.name}, found {self.current_token.type.name}")

    def parse(self) -> list[RawItem]:
        """Parse the entire query."""
        if self.current_token.type == TokenType.EOF:
            self.error("Empty query")
        items = self.expression()
        if self.current_token.type == TokenType.RPAREN:
            self.error("Unmatched ')'")
        if self.current_token.type != TokenType.EOF:
            self.error(f"Unexpected token '{self.current_token.value}' after expression")
        return items

    def expression(self) -> list[RawItem]:
        """Parse logical OR sequences."""
        items = self.term()

        while self.current_token.type == TokenType.OR:
            self.consume(TokenType.OR)
            items.append(LogicalOperator.OR)
            items.extend(self.term())

        return items

    def term(self) -> list[RawItem]:
        """Parse logical AND sequences."""
        items = [self.factor()]

        while self.current_token.type == TokenType.AND:
            self.consume(TokenType.AND)
            items.append(LogicalOperator.AND)
            items.append(self.factor())

        return items

    def factor(self) -> RawItem:
        """Parse a parenthesized group or a comparison."""
        if self.current_token.type != TokenType.LPAREN:
            return self.comparison()

        position = self.current_token.position
        self.consume(TokenType.LPAREN)
        if self.current_token.type == TokenType.RPAREN:
            self.error("Empty group '()'")
        if self.depth >= self.max_depth:
            self.error(f"Maximum nesting depth of {self.max_depth} exceeded")

        self.depth += 1
        items = self.expression()
        self.depth -= 1

        if self.current_token.type != TokenType.RPAREN:
            raise QuerySyntaxError("Unmatched '('", position)
        self.consume(TokenType.RPAREN)
        return RawGroup(items, position)

    def comparison(self) -> RawComparison:
        """Parse ``identifier comparator literal``."""
        token = self.current_token
        if token.type not in WORD_TYPES:
            self.error(f"Expected identifier, found {token.type.name}")

        identifier = str(token.value)
        reason = invalid_identifier_reason(identifier)
        if reason:
            self.error(reason)
        self.consume(token.type)

        operator = self.comparator()
        literal = self.literal()
        return RawComparison(identifier, operator, literal)

    def comparator(self) -> ComparisonOperator:
        """Parse a comparison operator."""
        token = self.current_token

        if token.type in self.COMPARATORS:
            self.consume(token.type)
            return self.COMPARATORS[token.type]

        if token.type == TokenType.NOT:
            self.consume(TokenType.NOT)
            if self.current_token.type == TokenType.CONTAINS:
                self.consume(TokenType.CONTAINS)
                return ComparisonOperator.NOT_CONTAINS
            if self.current_token.type == TokenType.IN:
                raise QuerySyntaxError("Unsupported operator 'not in'", token.position)
            self.error("Expected 'contains' after 'not'")

        if token.type in WORD_TYPES:
            self.error(f"Unknown operator '{token.value}'")

        self.error(f"Expected comparison operator, found {token.type.name}")

    def literal(self) -> Token:
        """Parse a literal value, leaving the raw text for the compiler to cast."""
        token = self.current_token
        if token.type not in LITERAL_TYPES:
            self.error(f"Expected literal value, found {token.type.name}")
        self.consume(token.type)
        return token
