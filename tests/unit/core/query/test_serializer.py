"""Tests for rendering predicate trees back to query text."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from predicated.core.query import parse
from predicated.core.query.ast import Predicate, PredicateBuilder
from predicated.core.query.exceptions import QueryEvaluationError
from predicated.core.query.literals import (
    BoolLiteral,
    DateLiteral,
    DateTimeLiteral,
    ListLiteral,
    NullLiteral,
    NumberLiteral,
    StringLiteral,
)
from predicated.core.query.serializer import literal_to_query, quote, to_query


class TestLiteralToQuery:
    """Test rendering literals."""

    @pytest.mark.parametrize("literal,expected", [
        (BoolLiteral(True), "true"),
        (BoolLiteral(False), "false"),
        (NullLiteral(), "nil"),
        (NumberLiteral(42), "42"),
        (NumberLiteral(-3.5), "-3.5"),
        (NumberLiteral(1e-05), "1e-05"),
        (NumberLiteral(Decimal("9.50")), "9.50"),
        (StringLiteral("John"), "'John'"),
        (DateLiteral(date(2024, 2, 29)), "'2024-02-29'::DATE"),
        (ListLiteral(()), "[]"),
        (ListLiteral((NumberLiteral(1), StringLiteral("a"), NullLiteral())), "[1, 'a', nil]"),
    ])
    def test_literals(self, literal, expected):
        """Test each literal kind."""
        assert literal_to_query(literal) == expected

    def test_utc_datetime(self):
        """Test that UTC datetimes use the Z suffix."""
        literal = DateTimeLiteral(datetime(2015, 1, 23, 23, 50, 7, tzinfo=timezone.utc))
        assert literal_to_query(literal) == "'2015-01-23T23:50:07Z'::DATETIME"

    def test_offset_datetime(self):
        """Test that other offsets are kept."""
        literal = DateTimeLiteral(datetime(2023, 1, 1, 12, tzinfo=timezone(timedelta(hours=5))))
        assert literal_to_query(literal) == "'2023-01-01T12:00:00+05:00'::DATETIME"

    def test_quote_escapes(self):
        """Test escaping backslashes and quotes."""
        assert quote("O'Brien") == r"'O\'Brien'"
        assert quote("C:\\Users") == r"'C:\\Users'"


class TestToQuery:
    """Test rendering predicate sequences."""

    def test_conditions(self):
        """Test a simple conjunction."""
        predicates = (
            PredicateBuilder()
            .where("name", "==", "John")
            .and_()
            .where("age", ">", 21)
            .build()
        )
        assert to_query(predicates) == "name == 'John' AND age > 21"

    def test_group(self):
        """Test that groups are parenthesized."""
        assert to_query(parse("a == 1 AND (b == 2 OR c == 3)")) == "a == 1 AND (b == 2 OR c == 3)"

    def test_group_followed_by_operator(self):
        """Test a group with a forward operator."""
        assert to_query(parse("(a == 1) OR b == 2")) == "(a == 1) OR b == 2"

    def test_normalizes_keywords(self):
        """Test that keywords and spacing are normalized."""
        assert to_query(parse("a==1 and  b  !=  'x' or tags NOT CONTAINS TRUE")) == (
            "a == 1 AND b != 'x' OR tags not contains true"
        )

    def test_membership(self):
        """Test list literals in membership tests."""
        assert to_query(parse("x in [1,'a',  nil]")) == "x in [1, 'a', nil]"

    def test_unknown_node(self):
        """Test that unknown nodes are reported."""
        with pytest.raises(QueryEvaluationError):
            to_query((Predicate("oops"),))


class TestRoundTrip:
    """Test that rendered queries parse back to the same tree."""

    @pytest.mark.parametrize("query", [
        "name == 'John' AND age > 21",
        "status == 'active' AND (role == 'admin' OR role == 'owner')",
        "trace_id in ['test123', 'test456', 1, 3.3, '2015-01-23T23:50:07Z'::DATETIME] AND profile_id == '123'",
        "d >= '2024-02-29'::DATE OR deleted_at == nil",
        r"path == 'C:\\Users\\John' AND name == 'O\'Brien'",
        "tags not contains 'deprecated' AND score <= -1.5",
        "((a == 1 OR b == 2) AND c == 3) OR d contains [1, [2]]",
    ])
    def test_round_trip(self, query):
        """Test parse(to_query(parse(q))) == parse(q)."""
        predicates = parse(query)
        assert parse(to_query(predicates)) == predicates
