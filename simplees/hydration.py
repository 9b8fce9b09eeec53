"""Resolve search hits back into records owned by an external store."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

logger = logging.getLogger(__name__)


class RecordRepository(ABC):
    """Narrow interface to the store that owns the indexed records."""

    @abstractmethod
    def find_by_ids(self, record_type: str | None, ids: list[str]) -> Iterable[Any]:
        """Fetch the records with the given identifiers, in any order.

        Args:
            record_type: Type of record the search was associated with
            ids: Identifiers returned by the search client

        Returns:
            The records that exist; missing identifiers are simply absent
        """
        pass

    def record_id(self, record: Any) -> str:
        """Identifier of a record, compared against hit ids as a string."""
        return str(getattr(record, "id"))


def hydrate(
    repository: RecordRepository, record_type: str | None, ids: list[str]
) -> list[Any]:
    """Load records for ``ids`` and return them in ``ids`` order.

    Identifiers the repository could not resolve are dropped.
    """
    if not ids:
        return []

    records = {
        repository.record_id(record): record
        for record in repository.find_by_ids(record_type, list(ids))
    }

    ordered = [records[str(hit_id)] for hit_id in ids if str(hit_id) in records]

    if len(ordered) < len(ids):
        missing = [hit_id for hit_id in ids if str(hit_id) not in records]
        logger.warning(
            f"{len(missing)} search hits have no {record_type or 'record'}: {missing}"
        )

    return ordered
