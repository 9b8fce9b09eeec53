"""Whoosh search client with persistent disk storage."""

import logging
import re
import threading
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from whoosh import fields as whoosh_fields
from whoosh import sorting
from whoosh.index import Index, create_in, exists_in, open_dir
from whoosh.qparser import OrGroup
from whoosh.qparser import QueryParser as WhooshQueryParser
from whoosh.query import (
    And,
    AndMaybe,
    AndNot,
    Every,
    NullQuery,
    NumericRange,
    Or,
    Query,
    Term,
    TermRange,
)
from whoosh.writing import IndexWriter

from ..exceptions import ConfigError, IndexingError, QueryError
from ..query.nodes import serialize
from .base import SearchClient, SearchHit, SearchRequest, SearchResponse
from .fields import FieldConfiguration, FieldDefinition, FieldType

logger = logging.getLogger(__name__)

ID_FIELD = "doc_id"
TYPE_FIELD = "doc_type"
SOURCE_FIELD = "doc_source"

# TEXT fields are analyzed; term queries go to an untokenized copy
EXACT_SUFFIX = "__exact"

# Whoosh names table-of-contents files "_<indexname>_<generation>.toc"
TOC_PATTERN = re.compile(r"^_(.+)_(\d+)\.toc$")


class WhooshClient(SearchClient):
    """Whoosh-based search client; each index name maps to one Whoosh index."""

    def __init__(
        self,
        index_dir: Path | None = None,
        indexes: dict[str, FieldConfiguration] | None = None,
    ):
        """Initialize Whoosh client.

        Args:
            index_dir: Directory to store the search indexes
            indexes: Field configuration per index name
        """
        self.index_dir = Path(
            index_dir or Path.home() / ".cache" / "simplees" / "index"
        )
        self.indexes = dict(indexes or {})
        self._open: dict[str, Index] = {}
        self._writers: dict[str, IndexWriter] = {}
        self._writer_lock = threading.Lock()

        self.index_dir.mkdir(parents=True, exist_ok=True)

    def field_config(self, index: str) -> FieldConfiguration:
        """Get the field configuration for ``index`` (empty if unconfigured)."""
        return self.indexes.setdefault(index, FieldConfiguration())

    def _create_schema(self, index: str) -> whoosh_fields.Schema:
        """Create Whoosh schema based on the index's field configuration."""
        schema_fields = {
            ID_FIELD: whoosh_fields.ID(stored=True, unique=True),
            TYPE_FIELD: whoosh_fields.ID(stored=True),
            SOURCE_FIELD: whoosh_fields.STORED(),
        }

        for name, field_def in self.field_config(index).fields.items():
            if name in schema_fields or name.endswith(EXACT_SUFFIX):
                raise ConfigError(f"Field name {name} is reserved")
            schema_fields[name] = _schema_field(field_def)
            if field_def.field_type == FieldType.TEXT:
                schema_fields[exact_field(name)] = whoosh_fields.ID()

        return whoosh_fields.Schema(**schema_fields)

    def _get_index(self, index: str, create: bool = False) -> Index | None:
        """Open (or create) the Whoosh index backing ``index``."""
        if index in self._open:
            return self._open[index]

        location = str(self.index_dir)
        schema = self._create_schema(index)

        if exists_in(location, indexname=index):
            ix = open_dir(location, indexname=index)
            if not len(self.field_config(index)):
                self.indexes[index] = _config_from_schema(ix.schema)
            elif _field_types(ix.schema) != _field_types(schema):
                logger.warning(f"Schema of index {index} changed, rebuilding it")
                ix.close()
                ix = create_in(location, schema, indexname=index)
        elif create:
            logger.info(f"Creating index {index} in {location}")
            ix = create_in(location, schema, indexname=index)
        else:
            return None

        self._open[index] = ix
        return ix

    def _ensure_fields(self, index: str, documents: list[dict[str, Any]]) -> None:
        """Infer a field configuration for a new index that has none."""
        if index in self._open or len(self.field_config(index)):
            return
        if exists_in(str(self.index_dir), indexname=index):
            return

        self.indexes[index] = FieldConfiguration.infer(
            documents, exclude=(ID_FIELD, TYPE_FIELD, SOURCE_FIELD)
        )
        logger.info(
            f"Inferred fields for {index}: {', '.join(self.indexes[index].fields)}"
        )

    def _get_writer(self, index: str) -> IndexWriter:
        ix = self._get_index(index, create=True)
        if index not in self._writers:
            self._writers[index] = ix.writer()
        return self._writers[index]

    def index_document(
        self,
        index: str,
        doc_id: str,
        document: dict[str, Any],
        doc_type: str | None = None,
    ) -> None:
        """Add or replace a document; visible after ``commit``."""
        with self._writer_lock:
            self._ensure_fields(index, [document])
            writer = self._get_writer(index)
            doc = self._prepare_document(index, str(doc_id), document, doc_type)
            try:
                writer.update_document(**doc)
            except (ValueError, TypeError) as e:
                raise IndexingError(f"Failed to index {doc_id}: {e}") from e

    def index_batch(
        self,
        index: str,
        documents: list[tuple[str, dict[str, Any]]],
        doc_type: str | None = None,
    ) -> None:
        """Index multiple documents with a single writer."""
        with self._writer_lock:
            self._ensure_fields(index, [document for _, document in documents])
            writer = self._get_writer(index)
            for doc_id, document in documents:
                doc = self._prepare_document(index, str(doc_id), document, doc_type)
                try:
                    writer.update_document(**doc)
                except (ValueError, TypeError) as e:
                    raise IndexingError(f"Failed to index {doc_id}: {e}") from e

        logger.info(f"Queued {len(documents)} documents for index {index}")

    def search(self, request: SearchRequest) -> SearchResponse:
        """Execute a search request."""
        self.commit()

        start_time = time.time()

        ix = self._get_index(request.index)
        if ix is None:
            raise QueryError(f"No such index: {request.index}")

        if request.query is None:
            whoosh_query = Every()
        else:
            whoosh_query = self._convert_query(request.index, serialize(request.query))

        filter_query = Term(TYPE_FIELD, request.doc_type) if request.doc_type else None
        sortedby = self._build_sort(request.index, request.sort)

        with ix.searcher() as searcher:
            results = searcher.search(
                whoosh_query,
                limit=request.start + request.size,
                filter=filter_query,
                sortedby=sortedby,
            )

            hits = []
            for hit in results[request.start : request.start + request.size]:
                if sortedby is None and hit.score is not None:
                    score = float(hit.score)
                else:
                    score = 0.0
                hits.append(
                    SearchHit(
                        id=hit[ID_FIELD],
                        score=score,
                        source=dict(hit.get(SOURCE_FIELD) or {}),
                        doc_type=hit.get(TYPE_FIELD),
                    )
                )
            total = len(results)

        took_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"Whoosh search on {request.index}: {total} matches")

        return SearchResponse(hits=hits, total=total, took_ms=took_ms)

    def delete(self, index: str, doc_id: str, doc_type: str | None = None) -> bool:
        """Delete a document from an index."""
        ix = self._get_index(index)
        if ix is None:
            return False

        self.commit()

        with ix.searcher() as searcher:
            stored = searcher.document(**{ID_FIELD: str(doc_id)})
        if stored is None or (doc_type and stored.get(TYPE_FIELD) != doc_type):
            return False

        with self._writer_lock:
            self._get_writer(index).delete_by_term(ID_FIELD, str(doc_id))
        return True

    def clear(self, index: str) -> None:
        """Clear all documents from an index."""
        ix = self._get_index(index)
        if ix is None:
            return

        self.commit()

        with ix.writer() as writer:
            writer.delete_by_query(Every())

    def commit(self) -> None:
        """Commit pending changes of every open writer."""
        with self._writer_lock:
            for index, writer in self._writers.items():
                writer.commit()
                logger.debug(f"Committed index {index}")
            self._writers.clear()

    def get_statistics(self) -> dict[str, Any]:
        """Get document counts for every known or stored index."""
        self.commit()

        names = set(self.indexes) | set(self._open) | self._stored_index_names()

        counts = {}
        for index in sorted(names):
            ix = self._get_index(index)
            counts[index] = ix.doc_count() if ix is not None else 0

        return {
            "total_documents": sum(counts.values()),
            "indexes": counts,
            "index_path": str(self.index_dir),
        }

    def _stored_index_names(self) -> set[str]:
        """Names of the indexes with a table of contents in ``index_dir``."""
        return {
            match.group(1)
            for path in self.index_dir.glob("_*.toc")
            if (match := TOC_PATTERN.match(path.name))
        }

    def close(self) -> None:
        """Commit pending changes and close all indexes."""
        self.commit()

        for ix in self._open.values():
            ix.close()
        self._open.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _prepare_document(
        self,
        index: str,
        doc_id: str,
        document: dict[str, Any],
        doc_type: str | None,
    ) -> dict[str, Any]:
        """Prepare document for Whoosh indexing."""
        doc: dict[str, Any] = {
            ID_FIELD: doc_id,
            SOURCE_FIELD: dict(document),
        }
        if doc_type:
            doc[TYPE_FIELD] = doc_type

        for name, field_def in self.field_config(index).fields.items():
            value = document.get(name)
            if value is None:
                continue

            if field_def.field_type == FieldType.NUMERIC:
                try:
                    doc[name] = float(value)
                except (ValueError, TypeError):
                    logger.warning(f"Skipping non-numeric {name}={value!r} in {doc_id}")
            elif field_def.field_type == FieldType.BOOLEAN:
                doc[name] = bool(value)
            elif isinstance(value, list | tuple | set):
                separator = "," if field_def.field_type == FieldType.KEYWORD else " "
                doc[name] = separator.join(str(item) for item in value)
            else:
                doc[name] = str(value)
                if field_def.field_type == FieldType.TEXT:
                    doc[exact_field(name)] = doc[name]

        return doc

    def _convert_query(self, index: str, query: Any) -> Query:
        """Convert a serialized query tree into a Whoosh query."""
        if isinstance(query, Query):
            return query

        if not isinstance(query, Mapping) or len(query) != 1:
            raise QueryError(f"Cannot translate query fragment: {query!r}")

        (clause_type, body), = query.items()

        if clause_type == "match_all":
            return Every()
        if clause_type == "bool":
            return self._convert_bool(index, body)

        if not isinstance(body, Mapping) or len(body) != 1:
            raise QueryError(f"Malformed {clause_type} clause: {body!r}")

        (column, argument), = body.items()
        field_def = self.field_config(index).get(column)
        if field_def is None:
            logger.warning(f"Field {column} is not indexed in {index}")
            return NullQuery

        if clause_type == "term":
            return _exact_query(field_def, argument)
        if clause_type == "match":
            if field_def.field_type == FieldType.TEXT:
                parser = WhooshQueryParser(
                    column, self._get_index(index, create=True).schema, group=OrGroup
                )
                return parser.parse(str(argument))
            return _exact_query(field_def, argument)
        if clause_type == "range":
            return _range_query(field_def, argument)

        raise QueryError(f"Unsupported query clause: {clause_type}")

    def _convert_bool(self, index: str, body: Mapping[str, Any]) -> Query:
        must = [self._convert_query(index, q) for q in body.get("must", [])]
        must += [self._convert_query(index, q) for q in body.get("filter", [])]
        should = [self._convert_query(index, q) for q in body.get("should", [])]
        must_not = [self._convert_query(index, q) for q in body.get("must_not", [])]

        if must:
            query = must[0] if len(must) == 1 else And(must)
            if should:
                query = AndMaybe(query, Or(should))
        elif should:
            query = Or(should)
        else:
            query = Every()

        if must_not:
            query = AndNot(query, Or(must_not))

        return query

    def _build_sort(self, index: str, sort: list[tuple[str, str]]):
        if not sort:
            return None

        facets = []
        for column, direction in sort:
            field_def = self.field_config(index).get(column)
            if field_def is None or not field_def.sortable:
                raise QueryError(f"Field {column} is not sortable in {index}")
            facets.append(sorting.FieldFacet(column, reverse=direction == "desc"))

        return facets[0] if len(facets) == 1 else sorting.MultiFacet(facets)


def _field_types(schema: whoosh_fields.Schema) -> dict[str, type]:
    return {name: type(field) for name, field in schema.items()}


_WHOOSH_TYPES = {
    whoosh_fields.TEXT: FieldType.TEXT,
    whoosh_fields.KEYWORD: FieldType.KEYWORD,
    whoosh_fields.NUMERIC: FieldType.NUMERIC,
    whoosh_fields.BOOLEAN: FieldType.BOOLEAN,
}


def _config_from_schema(schema: whoosh_fields.Schema) -> FieldConfiguration:
    """Recover the field configuration of an index created earlier."""
    fields = []
    for name, field in schema.items():
        field_type = _WHOOSH_TYPES.get(type(field))
        if field_type is None or name in (ID_FIELD, TYPE_FIELD, SOURCE_FIELD):
            continue
        fields.append(
            FieldDefinition(
                name=name,
                field_type=field_type,
                stored=bool(field.stored),
                sortable=field_type in (FieldType.NUMERIC, FieldType.BOOLEAN)
                or getattr(field, "column_type", None) is not None,
            )
        )
    return FieldConfiguration(fields)


def exact_field(name: str) -> str:
    """Name of the untokenized copy of TEXT field ``name``."""
    return f"{name}{EXACT_SUFFIX}"


def _schema_field(field_def: FieldDefinition):
    """Whoosh field type for a field definition."""
    if field_def.field_type == FieldType.TEXT:
        return whoosh_fields.TEXT(stored=field_def.stored, sortable=field_def.sortable)
    if field_def.field_type == FieldType.KEYWORD:
        return whoosh_fields.KEYWORD(
            stored=field_def.stored, commas=True, sortable=field_def.sortable
        )
    # Numeric and boolean fields sort on their indexed terms, not a column
    if field_def.field_type == FieldType.NUMERIC:
        return whoosh_fields.NUMERIC(numtype=float, bits=64, stored=field_def.stored)
    return whoosh_fields.BOOLEAN(stored=field_def.stored)


def _exact_query(field_def: FieldDefinition, value: Any) -> Query:
    if field_def.field_type == FieldType.NUMERIC:
        try:
            number = float(value)
        except (ValueError, TypeError):
            return NullQuery
        return NumericRange(field_def.name, number, number)
    if field_def.field_type == FieldType.BOOLEAN:
        return Term(field_def.name, value)
    if field_def.field_type == FieldType.TEXT:
        return Term(exact_field(field_def.name), str(value))
    return Term(field_def.name, str(value))


def _range_query(field_def: FieldDefinition, bounds: Mapping[str, Any]) -> Query:
    """Intersect one open-ended range per bound, so every bound applies."""
    queries = [
        _bound_query(field_def, name, value) for name, value in bounds.items()
    ]
    return queries[0] if len(queries) == 1 else And(queries)


def _bound_query(field_def: FieldDefinition, name: str, value: Any) -> Query:
    excl = name in ("gt", "lt")
    lower = name in ("gt", "gte")

    if field_def.field_type == FieldType.NUMERIC:
        try:
            value = float(value)
        except (ValueError, TypeError) as e:
            raise QueryError(f"Non-numeric range bound on {field_def.name}: {e}") from e
        range_type = NumericRange
    else:
        value = str(value)
        range_type = TermRange

    if lower:
        return range_type(field_def.name, value, None, startexcl=excl)
    return range_type(field_def.name, None, value, endexcl=excl)
