"""Fluent query builder compiling where-clauses into boolean search queries."""

from .backends import MemoryClient, SearchClient, WhooshClient
from .builder import SearchBuilder
from .exceptions import (
    ConfigError,
    IndexingError,
    InvalidArgumentError,
    QueryError,
    SearchError,
    SimpleESError,
    UnsupportedOperatorError,
)
from .hydration import RecordRepository, hydrate
from .pagination import LengthAwarePaginator, PageResolver, StaticPageResolver

__version__ = "1.0.0"

__all__ = [
    "SearchBuilder",
    "SearchClient",
    "MemoryClient",
    "WhooshClient",
    "RecordRepository",
    "hydrate",
    "LengthAwarePaginator",
    "PageResolver",
    "StaticPageResolver",
    "SimpleESError",
    "InvalidArgumentError",
    "UnsupportedOperatorError",
    "ConfigError",
    "SearchError",
    "IndexingError",
    "QueryError",
]
