"""Typed literal values for query expressions.

Every value that can appear on the right-hand side of a comparison is one of
the ``Literal`` subclasses below. Literals never coerce across kinds: a
``BoolLiteral`` does not match ``1`` and a ``StringLiteral`` does not match
``1``. Only numbers compare across representations (``1 == 1.0``), and dates
and datetimes compare by calendar day and by instant.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from numbers import Real
from typing import Any

from .exceptions import QueryCastError

DATE_CAST = "DATE"
DATETIME_CAST = "DATETIME"

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
_DATETIME_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|z|[+-]\d{2}:?\d{2})$",
    re.ASCII,
)


def is_number(value: Any) -> bool:
    """Check whether a Python value is numeric (booleans are not numbers)."""
    return isinstance(value, (Real, Decimal)) and not isinstance(value, bool)


def _compare_values(left: Any, right: Any) -> int | None:
    # NaN and signaling decimals are unordered
    try:
        if left < right:
            return -1
        if left > right:
            return 1
        if left == right:
            return 0
    except (TypeError, ArithmeticError):
        pass
    return None


def _is_finite(value: Any) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    return isinstance(value, int) or math.isfinite(value)


def _as_instant(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they can be compared with aware ones."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class Literal:
    """Base class for all literal values."""

    def to_python(self) -> Any:
        """The plain Python value of the literal."""
        raise NotImplementedError

    def matches(self, subject: Any) -> bool:
        """Strict structural equality against a record value."""
        return False

    def compare(self, subject: Any) -> int | None:
        """Order a record value against this literal.

        Returns a negative number, zero or a positive number when the subject
        is less than, equal to or greater than the literal, or None when the
        two cannot be ordered.
        """
        return None

    @property
    def is_temporal(self) -> bool:
        return False


@dataclass(frozen=True)
class NullLiteral(Literal):
    """The null literal (``nil`` or ``null`` in query text)."""

    @property
    def value(self) -> None:
        return None

    def to_python(self) -> None:
        return None

    def matches(self, subject: Any) -> bool:
        return subject is None


@dataclass(frozen=True)
class BoolLiteral(Literal):
    """A boolean literal."""
    value: bool

    def to_python(self) -> bool:
        return self.value

    def matches(self, subject: Any) -> bool:
        return isinstance(subject, bool) and subject == self.value


@dataclass(frozen=True)
class NumberLiteral(Literal):
    """An integer or floating point literal."""
    value: int | float | Decimal

    def __post_init__(self) -> None:
        if not is_number(self.value):
            raise QueryCastError(f"Not a number: {self.value!r}")
        if not _is_finite(self.value):
            raise QueryCastError(f"Number literal must be finite: {self.value!r}")

    def to_python(self) -> int | float | Decimal:
        return self.value

    def matches(self, subject: Any) -> bool:
        return is_number(subject) and subject == self.value

    def compare(self, subject: Any) -> int | None:
        if not is_number(subject):
            return None
        return _compare_values(subject, self.value)


@dataclass(frozen=True)
class StringLiteral(Literal):
    """A single-quoted string literal."""
    value: str

    def to_python(self) -> str:
        return self.value

    def matches(self, subject: Any) -> bool:
        return isinstance(subject, str) and subject == self.value


@dataclass(frozen=True)
class DateLiteral(Literal):
    """A calendar date (``'2024-02-29'::DATE``)."""
    value: date

    def to_python(self) -> date:
        return self.value

    @property
    def is_temporal(self) -> bool:
        return True

    def matches(self, subject: Any) -> bool:
        return (
            isinstance(subject, date)
            and not isinstance(subject, datetime)
            and subject == self.value
        )

    def compare(self, subject: Any) -> int | None:
        if isinstance(subject, datetime):
            subject = subject.date()
        elif not isinstance(subject, date):
            return None
        return _compare_values(subject, self.value)


@dataclass(frozen=True)
class DateTimeLiteral(Literal):
    """A timezone-aware instant (``'2023-01-01T12:00:00Z'::DATETIME``).

    The original offset is kept for serialization; comparisons use the
    absolute instant.
    """
    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None or self.value.utcoffset() is None:
            raise QueryCastError(f"Datetime literal must carry an offset: {self.value.isoformat()}")

    def to_python(self) -> datetime:
        return self.value

    @property
    def is_temporal(self) -> bool:
        return True

    def matches(self, subject: Any) -> bool:
        return isinstance(subject, datetime) and _as_instant(subject) == self.value

    def compare(self, subject: Any) -> int | None:
        if not isinstance(subject, datetime):
            return None
        return _compare_values(_as_instant(subject), self.value)


@dataclass(frozen=True)
class ListLiteral(Literal):
    """An ordered list of literals (``[1, 'a', true]``)."""
    items: tuple[Literal, ...] = ()

    @property
    def value(self) -> list[Any]:
        return self.to_python()

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]

    def matches(self, subject: Any) -> bool:
        if not isinstance(subject, (list, tuple)) or len(subject) != len(self.items):
            return False
        return all(item.matches(element) for item, element in zip(self.items, subject))

    def has_member(self, subject: Any) -> bool:
        """Check whether the subject strictly equals one of the items."""
        return any(item.matches(subject) for item in self.items)


def cast_date(text: str, position: int | None = None) -> DateLiteral:
    """Cast ISO-8601 calendar date text (``YYYY-MM-DD``)."""
    if not _DATE_PATTERN.match(text):
        raise QueryCastError(f"Invalid date literal '{text}'", position)
    try:
        return DateLiteral(date.fromisoformat(text))
    except ValueError as e:
        raise QueryCastError(f"Invalid date literal '{text}': {e}", position) from e


def cast_datetime(text: str, position: int | None = None) -> DateTimeLiteral:
    """Cast ISO-8601 datetime text with a mandatory UTC offset."""
    if not _DATETIME_PATTERN.match(text):
        raise QueryCastError(f"Invalid datetime literal '{text}'", position)
    normalized = text[:-1] + "+00:00" if text[-1] in "Zz" else text
    try:
        return DateTimeLiteral(datetime.fromisoformat(normalized))
    except ValueError as e:
        raise QueryCastError(f"Invalid datetime literal '{text}': {e}", position) from e


def cast_string(text: str, cast: str | None = None, position: int | None = None) -> Literal:
    """Cast string contents, honoring an optional ``::DATE``/``::DATETIME`` suffix."""
    if cast is None:
        return StringLiteral(text)
    if cast == DATE_CAST:
        return cast_date(text, position)
    if cast == DATETIME_CAST:
        return cast_datetime(text, position)
    raise QueryCastError(f"Unsupported cast '::{cast}'", position)


def cast_number(text: str, position: int | None = None) -> NumberLiteral:
    """Cast number text; integers stay exact, fractions and exponents become floats."""
    try:
        value = float(text) if any(c in text for c in ".eE") else int(text)
    except ValueError as e:
        raise QueryCastError(f"Invalid number literal '{text}'", position) from e
    if not _is_finite(value):
        raise QueryCastError(f"Number literal '{text}' is out of range", position)
    return NumberLiteral(value)


def split_list_items(text: str, position: int = 0) -> list[tuple[str, int]]:
    """Split the inside of a ``[...]`` literal on top-level commas.

    Commas inside single-quoted strings or nested brackets do not separate
    items. Returns ``(item_text, absolute_position)`` pairs with surrounding
    whitespace stripped.
    """
    if not text.strip():
        return []

    items: list[tuple[str, int]] = []
    depth = 0
    in_string = False
    start = 0
    i = 0
    while i < len(text):
        char = text[i]
        if in_string:
            if char == "\\":
                i += 1
            elif char == "'":
                in_string = False
        elif char == "'":
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif char == "," and depth == 0:
            items.append(_list_item(text, start, i, position))
            start = i + 1
        i += 1
    items.append(_list_item(text, start, len(text), position))
    return items


def _list_item(text: str, start: int, end: int, position: int) -> tuple[str, int]:
    raw = text[start:end]
    stripped = raw.strip()
    offset = position + start + (len(raw) - len(raw.lstrip()))
    if not stripped:
        raise QueryCastError("Empty list item", offset)
    return stripped, offset


def literal_from_python(value: Any) -> Literal:
    """Build a literal from a plain Python value."""
    if isinstance(value, Literal):
        return value
    if value is None:
        return NullLiteral()
    if isinstance(value, bool):
        return BoolLiteral(value)
    if is_number(value):
        return NumberLiteral(value)
    if isinstance(value, str):
        return StringLiteral(value)
    if isinstance(value, datetime):
        return DateTimeLiteral(_as_instant(value))
    if isinstance(value, date):
        return DateLiteral(value)
    if isinstance(value, (list, tuple)):
        return ListLiteral(tuple(literal_from_python(item) for item in value))
    raise QueryCastError(f"Unsupported literal type: {type(value).__name__}")
