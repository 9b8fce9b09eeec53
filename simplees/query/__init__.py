"""Clause model, operator normalization and boolean compilation."""

from .clauses import RANGE_BOUNDS, BooleanType, Clause, ClauseKind, to_boolean
from .compiler import compile_clause, compile_clauses
from .nodes import BoolNode, MatchNode, QueryNode, RangeNode, TermNode, serialize
from .operators import COMPARISONS, OPERATORS, is_operator, normalize

__all__ = [
    "BooleanType",
    "Clause",
    "ClauseKind",
    "RANGE_BOUNDS",
    "to_boolean",
    "OPERATORS",
    "COMPARISONS",
    "is_operator",
    "normalize",
    "compile_clause",
    "compile_clauses",
    "QueryNode",
    "TermNode",
    "MatchNode",
    "RangeNode",
    "BoolNode",
    "serialize",
]
