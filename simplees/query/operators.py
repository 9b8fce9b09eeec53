"""Operator normalization for where-clauses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..exceptions import InvalidArgumentError
from .clauses import BooleanType, Clause

# All of the available clause operators.
OPERATORS = ("=", "<", ">", "<=", ">=", "text", "range")

COMPARISONS = {
    "<": "lt",
    "<=": "lte",
    ">": "gt",
    ">=": "gte",
}


def is_operator(token: Any) -> bool:
    """Check whether ``token`` names a supported operator (case-insensitive)."""
    return isinstance(token, str) and token.lower() in OPERATORS


def normalize(
    column: str,
    operator: Any,
    value: Any = None,
    boolean: BooleanType = BooleanType.MUST,
) -> Clause:
    """Resolve a ``(column, operator, value, boolean)`` call into a Clause.

    Args:
        column: Field the predicate applies to
        operator: Operator token, or None for the ``(column, value)``
            equality shorthand where ``value`` already holds the value
        value: Value to compare against
        boolean: Combinator tag for the resulting clause

    Returns:
        The normalized clause

    Raises:
        InvalidArgumentError: If a value-requiring operator has no value
    """
    if operator is None:
        return Clause.term(column, value, boolean)

    if not is_operator(operator):
        # An unknown token is taken as shorthand for "=": the token itself
        # becomes the value and the supplied value is dropped.
        return Clause.term(column, operator, boolean)

    op = operator.lower()

    if op == "=":
        return Clause.term(column, value, boolean)

    if value is None:
        raise InvalidArgumentError("Value must be provided.")

    if op in COMPARISONS:
        return Clause.range(column, {COMPARISONS[op]: value}, boolean)

    if op == "text":
        return Clause.text(column, value, boolean)

    if not isinstance(value, Mapping):
        raise InvalidArgumentError(
            "The range operator expects a mapping of gt, gte, lt, lte bounds."
        )
    return Clause.range(column, value, boolean)
