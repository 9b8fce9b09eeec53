"""Base search client interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..query.nodes import serialize

DEFAULT_SIZE = 10


@dataclass
class SearchRequest:
    """Compiled search request handed to a client."""

    index: str
    query: Any = None
    doc_type: str | None = None
    offset: int | None = None
    limit: int | None = None
    sort: list[tuple[str, str]] = field(default_factory=list)

    @property
    def size(self) -> int:
        """Number of hits to return, falling back to the engine default."""
        return self.limit if self.limit else DEFAULT_SIZE

    @property
    def start(self) -> int:
        """Number of hits to skip."""
        return self.offset or 0

    def to_body(self) -> dict[str, Any]:
        """Build the request body in search-engine wire form."""
        body: dict[str, Any] = {}

        if self.query is not None:
            body["query"] = serialize(self.query)

        if self.offset:
            body["from"] = self.offset

        if self.limit:
            body["size"] = self.limit

        if self.sort:
            body["sort"] = [{column: direction} for column, direction in self.sort]

        return body


@dataclass
class SearchHit:
    """Individual search result returned by a client."""

    id: str
    score: float = 0.0
    source: dict[str, Any] = field(default_factory=dict)
    doc_type: str | None = None


@dataclass
class SearchResponse:
    """Hits for one page plus the total number of matching documents."""

    hits: list[SearchHit]
    total: int
    took_ms: int | None = None

    @property
    def ids(self) -> list[str]:
        """Hit identifiers in result order."""
        return [hit.id for hit in self.hits]

    def __len__(self) -> int:
        return len(self.hits)

    def __iter__(self):
        return iter(self.hits)


class SearchClient(ABC):
    """Abstract interface for search clients."""

    @abstractmethod
    def index_document(
        self,
        index: str,
        doc_id: str,
        document: dict[str, Any],
        doc_type: str | None = None,
    ) -> None:
        """Index a single document.

        Args:
            index: Name of the target index
            doc_id: Unique identifier for the document
            document: Dictionary of field names to values
            doc_type: Optional document type within the index

        Raises:
            IndexingError: If indexing fails
        """
        pass

    def index_batch(
        self,
        index: str,
        documents: list[tuple[str, dict[str, Any]]],
        doc_type: str | None = None,
    ) -> None:
        """Index multiple ``(doc_id, document)`` pairs.

        Raises:
            IndexingError: If batch indexing fails
        """
        for doc_id, document in documents:
            self.index_document(index, doc_id, document, doc_type)

    @abstractmethod
    def search(self, request: SearchRequest) -> SearchResponse:
        """Execute a search request.

        Args:
            request: Compiled search request

        Returns:
            SearchResponse with the requested page of hits

        Raises:
            QueryError: If the request cannot be executed
        """
        pass

    @abstractmethod
    def delete(self, index: str, doc_id: str, doc_type: str | None = None) -> bool:
        """Delete a document.

        Returns:
            True if document was deleted, False if not found
        """
        pass

    @abstractmethod
    def clear(self, index: str) -> None:
        """Remove all documents from an index."""
        pass

    def commit(self) -> None:
        """Make pending changes visible to subsequent searches."""
        pass

    def close(self) -> None:
        """Release resources held by the client."""
        self.commit()

    @abstractmethod
    def get_statistics(self) -> dict[str, Any]:
        """Get client statistics such as document counts per index."""
        pass
