"""Compile an ordered clause list into a single boolean query tree."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..exceptions import UnsupportedOperatorError
from .clauses import BooleanType, Clause, ClauseKind
from .nodes import BoolNode, MatchNode, RangeNode, TermNode


def compile_clause(clause: Clause) -> Any:
    """Compile one clause into its primitive node.

    Nested clauses are compiled recursively; raw clauses yield the
    caller's fragment as-is.

    Raises:
        UnsupportedOperatorError: If the clause kind is not known
    """
    kind = clause.kind

    if kind == ClauseKind.NESTED:
        return compile_clauses(clause.nested)
    if kind == ClauseKind.TERM:
        return TermNode(clause.column, clause.value)
    if kind == ClauseKind.TEXT:
        return MatchNode(clause.column, clause.value)
    if kind == ClauseKind.RANGE:
        return RangeNode(clause.column, dict(clause.value))
    if kind == ClauseKind.RAW:
        return clause.raw

    raise UnsupportedOperatorError(kind)


def compile_clauses(clauses: Sequence[Clause]) -> Any:
    """Compile clauses into one query node.

    A single clause compiles to its node without a boolean wrapper. For
    longer chains, a leading ``must`` takes on the combinator of the
    clause that follows it, so ``where(a).or_where(b)`` reads as "a or b".
    The clauses themselves are never modified.

    Args:
        clauses: Clauses in the order they were added

    Returns:
        The compiled node, or None when ``clauses`` is empty
    """
    compiled = [(compile_clause(clause), clause.boolean) for clause in clauses]

    if not compiled:
        return None

    if len(compiled) == 1:
        return compiled[0][0]

    first_node, first_boolean = compiled[0]
    if first_boolean == BooleanType.MUST:
        compiled[0] = (first_node, compiled[1][1])

    query = BoolNode()
    for node, boolean in compiled:
        query.add(boolean, node)

    return query
