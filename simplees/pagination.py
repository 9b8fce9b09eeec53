"""Length-aware pagination of search results."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

DEFAULT_PER_PAGE = 15


def resolve_page(value: Any) -> int:
    """Sanitize a page number; anything that is not an integer >= 1 gives 1."""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


class PageResolver(ABC):
    """Supplies the current page number and request path."""

    @abstractmethod
    def current_page(self) -> int:
        pass

    @abstractmethod
    def current_path(self) -> str:
        pass


class StaticPageResolver(PageResolver):
    """Page resolver with fixed values, for scripts and tests."""

    def __init__(self, page: Any = 1, path: str = "/"):
        self.page = resolve_page(page)
        self.path = path

    def current_page(self) -> int:
        return self.page

    def current_path(self) -> str:
        return self.path


@dataclass
class LengthAwarePaginator:
    """One page of items plus the total needed to compute page links."""

    items: list[Any]
    total: int
    per_page: int = DEFAULT_PER_PAGE
    current_page: int = 1
    path: str = "/"
    page_name: str = "page"
    query: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.current_page = resolve_page(self.current_page)
        self.per_page = max(1, int(self.per_page))

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    @property
    def on_first_page(self) -> bool:
        return self.current_page <= 1

    @property
    def first_item(self) -> int | None:
        """1-based position of the first item on this page."""
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def last_item(self) -> int | None:
        if not self.items:
            return None
        return self.first_item + len(self.items) - 1

    def url(self, page: int) -> str:
        """URL for a page, keeping any extra query parameters."""
        params = {**self.query, self.page_name: max(1, page)}
        separator = "&" if "?" in self.path else "?"
        return f"{self.path}{separator}{urlencode(params)}"

    @property
    def next_page_url(self) -> str | None:
        if not self.has_more_pages:
            return None
        return self.url(self.current_page + 1)

    @property
    def previous_page_url(self) -> str | None:
        if self.on_first_page:
            return None
        return self.url(self.current_page - 1)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "total": self.total,
            "per_page": self.per_page,
            "current_page": self.current_page,
            "last_page": self.last_page,
            "next_page_url": self.next_page_url,
            "prev_page_url": self.previous_page_url,
            "from": self.first_item,
            "to": self.last_item,
            "data": list(self.items),
        }
