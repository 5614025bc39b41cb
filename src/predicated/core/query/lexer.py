"""Lexer for query expressions."""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from .exceptions import QuerySyntaxError

class TokenType(Enum):
    """Types of tokens in query expressions."""
    IDENTIFIER = auto()

    # Literals (value holds the raw text, cast by the predicate compiler)
    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()
    NULL = auto()
    LIST = auto()

    # Comparison operators
    EQ = auto()  # ==
    NEQ = auto() # !=
    LT = auto()  # <
    GT = auto()  # >
    LTE = auto() # <=
    GTE = auto() # >=
    IN = auto()
    CONTAINS = auto()
    NOT = auto()  # only valid as part of "not contains"

    # Logical operators
    AND = auto()
    OR = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()

    EOF = auto()

KEYWORDS = {
    "and": TokenType.AND,
    "or": TokenType.OR,
    "in": TokenType.IN,
    "contains": TokenType.CONTAINS,
    "not": TokenType.NOT,
    "true": TokenType.BOOLEAN,
    "false": TokenType.BOOLEAN,
    "nil": TokenType.NULL,
    "null": TokenType.NULL,
}

# Keywords may double as field names, so these all parse as identifiers
# when they appear in identifier position.
WORD_TYPES = frozenset({TokenType.IDENTIFIER, *KEYWORDS.values()})

LITERAL_TYPES = frozenset({
    TokenType.NUMBER,
    TokenType.STRING,
    TokenType.BOOLEAN,
    TokenType.NULL,
    TokenType.LIST,
})

_NUMBER = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_WORD = re.compile(r"[A-Za-z0-9_.]+")
_CAST = re.compile(r"[A-Za-z]+")
_JOINED_LOGICAL = re.compile(r"(and|or)(?=[A-Za-z0-9_.])", re.IGNORECASE)

@dataclass
class Token:
    """A single token in the query expression."""
    type: TokenType
    value: str | None
    position: int
    cast: str | None = None

class Lexer:
    """Tokenizes query strings."""

    def __init__(self, text: str, offset: int = 0):
        """Initialize the lexer.

        Args:
            text: Query text to tokenize.
            offset: Position of ``text`` inside a larger query, added to
                every reported position (used when re-lexing list items).
        """
        self.text = text
        self.offset = offset
        self.pos = 0
        self.current_char = self.text[0] if self.text else None
        self.previous_type: TokenType | None = None
        self.previous_end = 0

    def error(self, message: str, pos: int | None = None) -> None:
        """Raise a syntax error."""
        raise QuerySyntaxError(message, self.offset + (self.pos if pos is None else pos))

    def advance(self, count: int = 1) -> None:
        """Move forward."""
        self.pos += count
        if self.pos < len(self.text):
            self.current_char = self.text[self.pos]
        else:
            self.current_char = None

    def peek(self) -> str | None:
        """Look at the next character without moving."""
        peek_pos = self.pos + 1
        return self.text[peek_pos] if peek_pos < len(self.text) else None

    def skip_whitespace(self) -> None:
        """Skip over whitespace characters."""
        while self.current_char is not None and self.current_char.isspace():
            self.advance()

    def _token(self, token_type: TokenType, value: str | None, start_pos: int, cast: str | None = None) -> Token:
        self.previous_type = token_type
        self.previous_end = self.pos
        return Token(token_type, value, self.offset + start_pos, cast)

    def _starts_number(self) -> bool:
        char = self.current_char
        if char is None or not (char in "-." or "0" <= char <= "9"):
            return False
        return _NUMBER.match(self.text, self.pos) is not None

    def _number(self) -> Token:
        """Parse integer or float text."""
        start_pos = self.pos
        match = _NUMBER.match(self.text, self.pos)
        self.advance(match.end() - start_pos)
        return self._token(TokenType.NUMBER, match.group(), start_pos)

    def _string(self) -> Token:
        """Parse a single-quoted string with an optional ::CAST suffix."""
        start_pos = self.pos
        self.advance() # Skip opening quote

        chars = []
        while self.current_char is not None and self.current_char != "'":
            if self.current_char == "\\" and self.peek() in ("\\", "'"):
                self.advance()
            chars.append(self.current_char)
            self.advance()

        if self.current_char is None:
            self.error("Unterminated string literal", start_pos)

        self.advance() # Skip closing quote

        cast = None
        if self.text.startswith("::", self.pos):
            cast_pos = self.pos
            self.advance(2)
            match = _CAST.match(self.text, self.pos)
            if match is None:
                self.error("Expected cast type after '::'", cast_pos)
            cast = match.group()
            self.advance(len(cast))

        return self._token(TokenType.STRING, "".join(chars), start_pos, cast)

    def _list(self) -> Token:
        """Scan a bracketed list, keeping its raw text.

        Brackets and commas inside quoted strings are ignored; nested lists
        are kept intact for the predicate compiler to split.
        """
        start_pos = self.pos
        depth = 0
        in_string = False
        while self.current_char is not None:
            char = self.current_char
            if in_string:
                if char == "\\" and self.peek() is not None:
                    self.advance()
                elif char == "'":
                    in_string = False
            elif char == "'":
                in_string = True
            elif char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
                if depth == 0:
                    self.advance()
                    return self._token(TokenType.LIST, self.text[start_pos:self.pos], start_pos)
            self.advance()

        self.error("Unterminated list literal", start_pos)

    def _word(self) -> Token:
        """Parse identifier or keyword.

        A word written directly after a number, with no whitespace, that
        starts with ``and`` or ``or`` has that keyword split off:
        ``1andb`` reads as ``1 and b`` and ``1order`` as ``1 or der``.
        """
        start_pos = self.pos

        if self.previous_type == TokenType.NUMBER and self.previous_end == start_pos:
            joined = _JOINED_LOGICAL.match(self.text, self.pos)
            if joined:
                self.advance(len(joined.group()))
                return self._token(KEYWORDS[joined.group().lower()], joined.group(), start_pos)

        match = _WORD.match(self.text, self.pos)
        result = match.group()
        self.advance(len(result))
        token_type = KEYWORDS.get(result.lower(), TokenType.IDENTIFIER)
        return self._token(token_type, result, start_pos)

    def get_next_token(self) -> Token: # noqa: C901
        """Get the next token from input."""
        while self.current_char is not None:

            if self.current_char.isspace():
                self.skip_whitespace()
                continue

            if self._starts_number():
                return self._number()

            if self.current_char == "'":
                return self._string()

            if self.current_char == "[":
                return self._list()

            if self.current_char.isascii() and (
                self.current_char.isalpha() or self.current_char in "_."
            ):
                return self._word()

            start_pos = self.pos

            if self.current_char == "=":
                if self.peek() == "=":
                    self.advance(2)
                    return self._token(TokenType.EQ, "==", start_pos)
                self.error("Unexpected character '='. Did you mean '=='?")

            if self.current_char == "!":
                if self.peek() == "=":
                    self.advance(2)
                    return self._token(TokenType.NEQ, "!=", start_pos)
                self.error("Unexpected character '!'. Did you mean '!='?")

            if self.current_char == "<":
                if self.peek() == "=":
                    self.advance(2)
                    return self._token(TokenType.LTE, "<=", start_pos)
                self.advance()
                return self._token(TokenType.LT, "<", start_pos)

            if self.current_char == ">":
                if self.peek() == "=":
                    self.advance(2)
                    return self._token(TokenType.GTE, ">=", start_pos)
                self.advance()
                return self._token(TokenType.GT, ">", start_pos)

            if self.current_char == "(":
                self.advance()
                return self._token(TokenType.LPAREN, "(", start_pos)

            if self.current_char == ")":
                self.advance()
                return self._token(TokenType.RPAREN, ")", start_pos)

            self.error(f"Invalid character '{self.current_char}'")

        return self._token(TokenType.EOF, None, self.pos)

    def tokenize(self) -> Iterator[Token]:
        """Generator that yields all tokens."""
        while True:
            token = self.get_next_token()
            yield token
            if token.type == TokenType.EOF:
                break
