"""Exception hierarchy for simplees."""


class SimpleESError(Exception):
    """Base exception for all simplees errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all simplees errors with
    a single except clause.
    """


class InvalidArgumentError(SimpleESError, ValueError):
    """A predicate was built from arguments that cannot form a clause."""


class UnsupportedOperatorError(SimpleESError):
    """A clause carries a kind the compiler does not know how to handle."""

    def __init__(self, kind: object) -> None:
        self.kind = kind
        super().__init__(f"Operator {kind!r} unsupported")


class ConfigError(SimpleESError):
    """Configuration-related errors."""


class SearchError(SimpleESError):
    """Base exception for search client errors."""


class IndexingError(SearchError):
    """Error during document indexing operations."""


class QueryError(SearchError):
    """Error during query translation or execution."""
