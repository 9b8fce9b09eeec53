"""Fluent search builder.

Accumulates where-clauses, ordering and paging through a chainable API,
compiles the clauses into one boolean query and executes it with a
search client. Optionally hydrates hits into records from an external
store and wraps them in a paginator.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from .backends.base import SearchClient, SearchHit, SearchRequest, SearchResponse
from .exceptions import InvalidArgumentError
from .hydration import RecordRepository, hydrate
from .pagination import (
    DEFAULT_PER_PAGE,
    LengthAwarePaginator,
    PageResolver,
    StaticPageResolver,
)
from .query.clauses import BooleanType, Clause, to_boolean
from .query.compiler import compile_clauses
from .query.operators import normalize

logger = logging.getLogger(__name__)

_UNSET = object()


class SearchBuilder:
    """Chainable builder for search queries against one index."""

    def __init__(
        self,
        client: SearchClient,
        index: str,
        doc_type: str | None = None,
        *,
        record_type: str | None = None,
        repository: RecordRepository | None = None,
        page_resolver: PageResolver | None = None,
        per_page: int = DEFAULT_PER_PAGE,
    ):
        """Create a new search builder.

        Args:
            client: Search client that executes compiled requests
            index: Name of the index to search
            doc_type: Optional document type within the index
            record_type: Record type handed to the repository when hydrating
            repository: Store used to turn hit ids back into records
            page_resolver: Source of the current page for ``paginate``
            per_page: Default page size for ``paginate``
        """
        self.client = client
        self.index = index
        self.doc_type = doc_type
        self.record_type = record_type
        self.repository = repository
        self.page_resolver = page_resolver or StaticPageResolver()
        self.per_page = per_page

        self._wheres: list[Clause] = []
        self._orders: list[tuple[str, str]] = []
        self._limit: int | None = None
        self._offset: int | None = None

    @property
    def wheres(self) -> tuple[Clause, ...]:
        """Snapshot of the clauses added so far, in order."""
        return tuple(self._wheres)

    @property
    def orders(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._orders)

    def set_record_type(self, record_type: str | None) -> "SearchBuilder":
        """Associate the builder with a record type for hydration."""
        self.record_type = record_type
        return self

    def new_search(self) -> "SearchBuilder":
        """Get a fresh builder with the same target and collaborators."""
        return SearchBuilder(
            self.client,
            self.index,
            self.doc_type,
            record_type=self.record_type,
            repository=self.repository,
            page_resolver=self.page_resolver,
            per_page=self.per_page,
        )

    def where(
        self,
        column: str | Callable[["SearchBuilder"], Any],
        operator: Any = _UNSET,
        value: Any = _UNSET,
        boolean: BooleanType | str = BooleanType.MUST,
    ) -> "SearchBuilder":
        """Add a where clause.

        ``where("status", "active")`` is shorthand for
        ``where("status", "=", "active")``. Passing a callable instead of a
        column starts a nested group, see ``where_nested``.

        Raises:
            InvalidArgumentError: If no value is given, or a comparison
                operator is given a None value
        """
        boolean = to_boolean(boolean)

        if callable(column):
            return self.where_nested(column, boolean)

        if value is _UNSET:
            if operator is _UNSET:
                raise InvalidArgumentError("Value must be provided.")
            return self.where_equals(column, operator, boolean)

        if operator is _UNSET:
            return self.where_equals(column, value, boolean)

        return self.where_op(column, operator, value, boolean)

    def or_where(
        self,
        column: str | Callable[["SearchBuilder"], Any],
        operator: Any = _UNSET,
        value: Any = _UNSET,
    ) -> "SearchBuilder":
        """Add an "or where" clause."""
        return self.where(column, operator, value, BooleanType.SHOULD)

    def where_equals(
        self, column: str, value: Any, boolean: BooleanType | str = BooleanType.MUST
    ) -> "SearchBuilder":
        """Add an exact-match clause."""
        self._wheres.append(normalize(column, None, value, to_boolean(boolean)))
        return self

    def where_op(
        self,
        column: str,
        operator: Any,
        value: Any,
        boolean: BooleanType | str = BooleanType.MUST,
    ) -> "SearchBuilder":
        """Add a clause with an explicit operator."""
        self._wheres.append(normalize(column, operator, value, to_boolean(boolean)))
        return self

    def where_nested(
        self,
        callback: Callable[["SearchBuilder"], Any],
        boolean: BooleanType | str = BooleanType.MUST,
    ) -> "SearchBuilder":
        """Add a parenthesised group of clauses built by ``callback``.

        The callback receives a fresh builder; if it adds no clauses the
        group is dropped.
        """
        search = self.new_search()

        callback(search)

        if search.wheres:
            self._wheres.append(Clause.nested_group(search.wheres, to_boolean(boolean)))

        return self

    def where_raw(
        self, query: Any, boolean: BooleanType | str = BooleanType.MUST
    ) -> "SearchBuilder":
        """Add a pre-built query fragment, passed to the client untouched."""
        self._wheres.append(Clause.raw_fragment(query, to_boolean(boolean)))
        return self

    def or_where_raw(self, query: Any) -> "SearchBuilder":
        return self.where_raw(query, BooleanType.SHOULD)

    def where_text(
        self, column: str, value: Any, boolean: BooleanType | str = BooleanType.MUST
    ) -> "SearchBuilder":
        """Add a full-text match clause."""
        return self.where(column, "text", value, boolean)

    def or_where_text(self, column: str, value: Any) -> "SearchBuilder":
        return self.where_text(column, value, BooleanType.SHOULD)

    def where_between(
        self,
        column: str,
        values: Sequence[Any],
        boolean: BooleanType | str = BooleanType.MUST,
    ) -> "SearchBuilder":
        """Add an inclusive range clause; bounds are not checked for order.

        Raises:
            InvalidArgumentError: If ``values`` does not hold exactly two bounds
        """
        if (
            not isinstance(values, Sequence)
            or isinstance(values, str | bytes)
            or len(values) != 2
        ):
            raise InvalidArgumentError("Between requires exactly two values.")

        gte, lte = values
        self._wheres.append(
            Clause.range(column, {"gte": gte, "lte": lte}, to_boolean(boolean))
        )
        return self

    def or_where_between(self, column: str, values: Sequence[Any]) -> "SearchBuilder":
        return self.where_between(column, values, BooleanType.SHOULD)

    def offset(self, value: int) -> "SearchBuilder":
        """Set the number of hits to skip (negative values become 0)."""
        self._offset = max(0, value)
        return self

    def skip(self, value: int) -> "SearchBuilder":
        """Alias to set the offset."""
        return self.offset(value)

    def limit(self, value: int) -> "SearchBuilder":
        """Set the maximum number of hits; values below 1 are ignored."""
        if value > 0:
            self._limit = value
        return self

    def take(self, value: int) -> "SearchBuilder":
        """Alias to set the limit."""
        return self.limit(value)

    def for_page(self, page: int, per_page: int = DEFAULT_PER_PAGE) -> "SearchBuilder":
        """Set the limit and offset for a given page."""
        return self.skip((page - 1) * per_page).take(per_page)

    def order_by(self, column: str, direction: str = "asc") -> "SearchBuilder":
        """Add a sort field; any direction other than "asc" sorts descending."""
        direction = "asc" if str(direction).lower() == "asc" else "desc"
        self._orders.append((column, direction))
        return self

    def compile(self) -> Any:
        """Compile the current clauses; None if there are none."""
        return compile_clauses(self.wheres)

    def to_request(self) -> SearchRequest:
        """Assemble the request that ``execute`` would send."""
        return SearchRequest(
            index=self.index,
            query=self.compile(),
            doc_type=self.doc_type,
            offset=self._offset,
            limit=self._limit,
            sort=list(self._orders),
        )

    def execute(self) -> SearchResponse:
        """Run the query and return the raw client response."""
        request = self.to_request()
        logger.debug(f"Searching {self.index}: {request.to_body()}")
        return self.client.search(request)

    def get(self) -> list[Any]:
        """Run the query.

        Returns:
            Records from the repository in hit order when a repository is
            configured, otherwise the search hits
        """
        response = self.execute()
        return self._resolve(response.hits)

    def first(self) -> Any:
        """Run the query for a single hit and return it, or None."""
        response = self.take(1).execute()
        resolved = self._resolve(response.hits[:1])
        return resolved[0] if resolved else None

    def paginate(
        self, per_page: int | None = None, page: int | None = None
    ) -> LengthAwarePaginator:
        """Run the query for one page and wrap the results in a paginator.

        Args:
            per_page: Page size (default: the builder's ``per_page``)
            page: Page number (default: from the page resolver)
        """
        per_page = per_page or self.per_page
        page = page if page is not None else self.page_resolver.current_page()

        response = self.for_page(page, per_page).execute()

        return LengthAwarePaginator(
            items=self._resolve(response.hits),
            total=response.total,
            per_page=per_page,
            current_page=page,
            path=self.page_resolver.current_path(),
        )

    def _resolve(self, hits: list[SearchHit]) -> list[Any]:
        if self.repository is None or not hits:
            return list(hits)
        return hydrate(self.repository, self.record_type, [hit.id for hit in hits])
