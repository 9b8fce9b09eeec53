"""Clause model: one normalized predicate plus its boolean combinator."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

import msgspec

from ..exceptions import InvalidArgumentError

RANGE_BOUNDS = frozenset({"gt", "gte", "lt", "lte"})


class ClauseKind(str, Enum):
    """Kinds of predicate a clause can carry."""

    TERM = "term"
    TEXT = "text"
    RANGE = "range"
    NESTED = "nested"
    RAW = "raw"


class BooleanType(str, Enum):
    """Boolean combinators; values are the wire keys of a bool query."""

    MUST = "must"
    SHOULD = "should"
    MUST_NOT = "must_not"


class Clause(msgspec.Struct, frozen=True, kw_only=True):
    """A normalized where-clause.

    ``column`` and ``value`` are set for term, text and range clauses.
    ``nested`` holds the child clauses of a nested group and ``raw`` the
    caller's query fragment, which is kept by reference and never inspected.
    """

    kind: ClauseKind
    boolean: BooleanType = BooleanType.MUST
    column: str | None = None
    value: Any = None
    nested: tuple[Clause, ...] = ()
    raw: Any = None

    def __post_init__(self):
        if self.kind == ClauseKind.RANGE:
            _check_bounds(self.value)
        elif self.kind == ClauseKind.NESTED and not self.nested:
            raise InvalidArgumentError("Nested group requires at least one clause.")

    @classmethod
    def term(
        cls, column: str, value: Any, boolean: BooleanType = BooleanType.MUST
    ) -> Clause:
        return cls(kind=ClauseKind.TERM, column=column, value=value, boolean=boolean)

    @classmethod
    def text(
        cls, column: str, value: Any, boolean: BooleanType = BooleanType.MUST
    ) -> Clause:
        return cls(kind=ClauseKind.TEXT, column=column, value=value, boolean=boolean)

    @classmethod
    def range(
        cls,
        column: str,
        bounds: Mapping[str, Any],
        boolean: BooleanType = BooleanType.MUST,
    ) -> Clause:
        return cls(
            kind=ClauseKind.RANGE, column=column, value=dict(bounds), boolean=boolean
        )

    @classmethod
    def nested_group(
        cls, clauses: tuple[Clause, ...] | list[Clause], boolean: BooleanType
    ) -> Clause:
        return cls(kind=ClauseKind.NESTED, nested=tuple(clauses), boolean=boolean)

    @classmethod
    def raw_fragment(cls, fragment: Any, boolean: BooleanType) -> Clause:
        return cls(kind=ClauseKind.RAW, raw=fragment, boolean=boolean)


def to_boolean(boolean: BooleanType | str) -> BooleanType:
    """Coerce a combinator name such as ``"should"`` into a BooleanType."""
    if isinstance(boolean, BooleanType):
        return boolean
    try:
        return BooleanType(str(boolean).lower())
    except ValueError:
        raise InvalidArgumentError(
            f"Boolean must be one of must, should, must_not; got {boolean!r}"
        ) from None


def _check_bounds(value: Any) -> None:
    if not isinstance(value, Mapping) or not value:
        raise InvalidArgumentError("Range requires at least one of gt, gte, lt, lte.")
    unknown = set(value) - RANGE_BOUNDS
    if unknown:
        raise InvalidArgumentError(
            f"Unknown range bounds: {', '.join(sorted(map(str, unknown)))}"
        )
