"""Folds per-predicate results into a single boolean.

Predicates at one level form a flat list where each element carries the
operator linking it to the next sibling. AND binds tighter than OR: the list
is split into runs of ANDs wherever an OR appears, each run is reduced with
AND, and the runs are combined with OR. Only parentheses create real
sub-trees, and those are folded recursively by the evaluator before they get
here.
"""

from typing import Iterable

from .ast import LogicalOperator


def compile_results(results: Iterable[tuple[LogicalOperator | None, bool]]) -> bool:
    """Combine ``(forward_operator, result)`` pairs honoring AND-over-OR precedence.

    Args:
        results: Results of one level, in order.

    Returns:
        True if any AND-run evaluates to True. An empty level is False.
    """
    groups: list[bool] = []
    current = True
    pending = False

    for operator, result in results:
        current = current and bool(result)
        pending = True
        if operator is None or operator == LogicalOperator.OR:
            groups.append(current)
            current = True
            pending = False

    if pending:
        groups.append(current)

    return any(groups)
