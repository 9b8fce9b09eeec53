"""In-memory search client for testing and lightweight scenarios."""

import logging
import re
import time
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from ..exceptions import QueryError
from ..query.nodes import serialize
from .base import SearchClient, SearchHit, SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\w+")


class MemoryClient(SearchClient):
    """In-memory search client evaluating compiled query trees directly."""

    def __init__(self):
        # index -> doc_id -> (doc_type, source)
        self.documents: dict[str, dict[str, tuple[str | None, dict[str, Any]]]] = (
            defaultdict(dict)
        )

    def index_document(
        self,
        index: str,
        doc_id: str,
        document: dict[str, Any],
        doc_type: str | None = None,
    ) -> None:
        """Store a copy of the document under ``index``."""
        self.documents[index][str(doc_id)] = (doc_type, dict(document))

    def search(self, request: SearchRequest) -> SearchResponse:
        """Evaluate the request against the stored documents."""
        start_time = time.time()

        if request.index not in self.documents:
            raise QueryError(f"No such index: {request.index}")

        query = serialize(request.query) if request.query is not None else None

        matches = []
        for doc_id, (doc_type, source) in self.documents[request.index].items():
            if request.doc_type and doc_type != request.doc_type:
                continue

            score = 1.0 if query is None else self._evaluate(query, source)
            if score is not None:
                matches.append(SearchHit(doc_id, score, source, doc_type))

        if request.sort:
            matches = self._sort_hits(matches, request.sort)
        else:
            matches.sort(key=lambda hit: hit.score, reverse=True)

        total = len(matches)
        page = matches[request.start : request.start + request.size]

        took_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"Memory search on {request.index}: {total} matches")

        return SearchResponse(hits=page, total=total, took_ms=took_ms)

    def delete(self, index: str, doc_id: str, doc_type: str | None = None) -> bool:
        """Delete a document if present."""
        docs = self.documents.get(index, {})
        stored = docs.get(str(doc_id))
        if stored is None or (doc_type and stored[0] != doc_type):
            return False

        del docs[str(doc_id)]
        return True

    def clear(self, index: str) -> None:
        """Remove every document from ``index``."""
        if index in self.documents:
            self.documents[index].clear()

    def get_statistics(self) -> dict[str, Any]:
        """Get per-index document counts."""
        return {
            "total_documents": sum(len(docs) for docs in self.documents.values()),
            "indexes": {name: len(docs) for name, docs in self.documents.items()},
        }

    def _evaluate(self, query: Any, source: dict[str, Any]) -> float | None:
        """Score ``source`` against a serialized query, None if it does not match."""
        if not isinstance(query, Mapping) or len(query) != 1:
            raise QueryError(f"Cannot evaluate query fragment: {query!r}")

        (clause_type, body), = query.items()

        if clause_type == "match_all":
            return 1.0
        if clause_type == "bool":
            return self._evaluate_bool(body, source)

        if not isinstance(body, Mapping) or len(body) != 1:
            raise QueryError(f"Malformed {clause_type} clause: {body!r}")

        (column, argument), = body.items()
        value = source.get(column)

        if clause_type == "term":
            return 1.0 if self._term_matches(value, argument) else None
        if clause_type == "match":
            return self._match_score(value, argument)
        if clause_type == "range":
            return 1.0 if self._in_range(value, argument) else None

        raise QueryError(f"Unsupported query clause: {clause_type}")

    def _evaluate_bool(self, body: Mapping[str, Any], source: dict[str, Any]) -> float | None:
        must = list(body.get("must", [])) + list(body.get("filter", []))
        should = body.get("should", [])
        must_not = body.get("must_not", [])

        score = 0.0
        for clause in must:
            clause_score = self._evaluate(clause, source)
            if clause_score is None:
                return None
            score += clause_score

        for clause in must_not:
            if self._evaluate(clause, source) is not None:
                return None

        matched_should = 0
        for clause in should:
            clause_score = self._evaluate(clause, source)
            if clause_score is not None:
                matched_should += 1
                score += clause_score

        # Should clauses are only required when nothing else is.
        if should and not must and matched_should == 0:
            return None

        return score if score > 0 else 1.0

    def _term_matches(self, value: Any, expected: Any) -> bool:
        if isinstance(value, list | tuple | set):
            return expected in value
        return value == expected

    def _match_score(self, value: Any, query: Any) -> float | None:
        if value is None:
            return None

        if isinstance(value, list | tuple | set):
            value = " ".join(str(item) for item in value)

        field_terms = set(TOKEN_PATTERN.findall(str(value).lower()))
        query_terms = TOKEN_PATTERN.findall(str(query).lower())

        hits = sum(1 for term in query_terms if term in field_terms)
        return float(hits) if hits else None

    def _in_range(self, value: Any, bounds: Mapping[str, Any]) -> bool:
        if value is None:
            return False

        try:
            if "gt" in bounds and not value > bounds["gt"]:
                return False
            if "gte" in bounds and not value >= bounds["gte"]:
                return False
            if "lt" in bounds and not value < bounds["lt"]:
                return False
            if "lte" in bounds and not value <= bounds["lte"]:
                return False
        except TypeError:
            return False

        return True

    def _sort_hits(
        self, hits: list[SearchHit], sort: list[tuple[str, str]]
    ) -> list[SearchHit]:
        """Sort hits by several fields; documents missing a field sort last."""
        ordered = list(hits)
        for column, direction in reversed(sort):
            present = [hit for hit in ordered if hit.source.get(column) is not None]
            missing = [hit for hit in ordered if hit.source.get(column) is None]
            try:
                present.sort(
                    key=lambda hit: hit.source[column], reverse=direction == "desc"
                )
            except TypeError as e:
                raise QueryError(f"Cannot sort on {column}: {e}") from e
            ordered = present + missing
        return ordered
