"""Tests for folding predicate results with AND-over-OR precedence."""

import pytest

from predicated.core.query.ast import LogicalOperator
from predicated.core.query.boolean_compiler import compile_results

AND = LogicalOperator.AND
OR = LogicalOperator.OR


class TestCompileResults:
    """Test compile_results."""

    def test_empty(self):
        """Test that an empty level is False."""
        assert compile_results([]) is False

    @pytest.mark.parametrize("value", [True, False])
    def test_single(self, value):
        """Test a single result."""
        assert compile_results([(None, value)]) is value

    def test_and_run(self):
        """Test a run of ANDs."""
        assert compile_results([(AND, True), (AND, True), (None, True)]) is True
        assert compile_results([(AND, True), (AND, False), (None, True)]) is False

    def test_or_run(self):
        """Test a run of ORs."""
        assert compile_results([(OR, False), (OR, False), (None, True)]) is True
        assert compile_results([(OR, False), (None, False)]) is False

    @pytest.mark.parametrize("a,b,c,d", [
        (True, True, False, False),
        (False, False, True, True),
        (True, False, False, True),
        (False, True, True, False),
        (True, False, True, False),
    ])
    def test_and_binds_tighter(self, a, b, c, d):
        """Test that a AND b OR c AND d means (a AND b) OR (c AND d)."""
        results = [(AND, a), (OR, b), (AND, c), (None, d)]
        assert compile_results(results) is ((a and b) or (c and d))

    def test_trailing_run_without_terminator(self):
        """Test a level whose last result still carries an operator."""
        assert compile_results([(OR, False), (AND, True)]) is True

    def test_accepts_generators(self):
        """Test that any iterable of pairs is accepted."""
        assert compile_results((op, True) for op in (AND, None)) is True
