"""Compiled query-tree nodes and their wire representation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .clauses import BooleanType


class QueryNode(ABC):
    """Base class for compiled query nodes."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Convert the node to its search-engine wire form."""


@dataclass
class TermNode(QueryNode):
    """Exact-match query on a single field."""

    field: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"term": {self.field: self.value}}


@dataclass
class MatchNode(QueryNode):
    """Full-text match query."""

    field: str
    query: Any

    def to_dict(self) -> dict[str, Any]:
        return {"match": {self.field: self.query}}


@dataclass
class RangeNode(QueryNode):
    """Range query; ``bounds`` maps gt/gte/lt/lte to values."""

    field: str
    bounds: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"range": {self.field: dict(self.bounds)}}


@dataclass
class BoolNode(QueryNode):
    """Boolean container with required, optional and forbidden groups."""

    must: list[Any] = field(default_factory=list)
    should: list[Any] = field(default_factory=list)
    must_not: list[Any] = field(default_factory=list)

    def add(self, boolean: BooleanType, node: Any) -> BoolNode:
        """Add ``node`` under the group named by ``boolean``."""
        if boolean == BooleanType.MUST:
            self.must.append(node)
        elif boolean == BooleanType.SHOULD:
            self.should.append(node)
        elif boolean == BooleanType.MUST_NOT:
            self.must_not.append(node)
        else:
            raise ValueError(f"Unknown boolean combinator: {boolean!r}")
        return self

    def to_dict(self) -> dict[str, Any]:
        groups = {}
        for name in ("must", "should", "must_not"):
            nodes = getattr(self, name)
            if nodes:
                groups[name] = [serialize(node) for node in nodes]
        return {"bool": groups}


def serialize(node: Any) -> Any:
    """Serialize a compiled node, or a raw fragment, to its wire form.

    Raw fragments are returned untouched unless they know how to
    serialize themselves through a ``to_dict`` method.
    """
    if isinstance(node, QueryNode):
        return node.to_dict()
    to_dict = getattr(node, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return node
