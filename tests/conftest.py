"""Pytest configuration and fixtures."""

import os
from dataclasses import dataclass
from typing import Any

import pytest

from simplees.backends.base import SearchClient, SearchRequest, SearchResponse
from simplees.backends.fields import FieldConfiguration
from simplees.backends.memory import MemoryClient
from simplees.hydration import RecordRepository


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config lookups for each test."""
    original_env = os.environ.copy()

    for name in ("SIMPLEES_BACKEND", "SIMPLEES_INDEX_DIR", "SIMPLEES_PER_PAGE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def people() -> list[dict[str, Any]]:
    """Sample documents for the "people" index."""
    return [
        {
            "id": "1",
            "name": "Alice Smith",
            "age": 34,
            "status": "active",
            "tags": ["admin", "staff"],
            "bio": "Loves distributed search engines",
        },
        {
            "id": "2",
            "name": "Bob Jones",
            "age": 21,
            "status": "inactive",
            "tags": ["staff"],
            "bio": "Writes query builders in Python",
        },
        {
            "id": "3",
            "name": "Carol White",
            "age": 45,
            "status": "active",
            "tags": ["guest"],
            "bio": "Search relevance and ranking",
        },
        {
            "id": "4",
            "name": "Dave Brown",
            "age": 17,
            "status": "pending",
            "tags": ["guest"],
            "bio": "Student of python and search",
        },
    ]


@pytest.fixture
def people_fields() -> FieldConfiguration:
    """Field configuration matching the ``people`` documents."""
    return FieldConfiguration.from_mapping(
        {
            "name": "text",
            "age": "numeric",
            "status": "keyword",
            "tags": "keyword",
            "bio": "text",
        }
    )


@pytest.fixture
def memory_client(people) -> MemoryClient:
    """Memory client holding the ``people`` documents."""
    client = MemoryClient()
    client.index_batch("people", [(doc["id"], doc) for doc in people])
    return client


class RecordingClient(SearchClient):
    """Client that records requests and replies with canned hits."""

    def __init__(self, response: SearchResponse | None = None):
        self.requests: list[SearchRequest] = []
        self.response = response or SearchResponse(hits=[], total=0)

    def index_document(self, index, doc_id, document, doc_type=None):
        pass

    def search(self, request: SearchRequest) -> SearchResponse:
        self.requests.append(request)
        return self.response

    def delete(self, index, doc_id, doc_type=None):
        return False

    def clear(self, index):
        pass

    def get_statistics(self):
        return {"total_documents": 0, "indexes": {}}


@pytest.fixture
def recording_client() -> RecordingClient:
    return RecordingClient()


@dataclass
class Person:
    id: int
    name: str


class PeopleRepository(RecordRepository):
    """In-memory repository that returns records in reverse id order."""

    def __init__(self, records: list[Person]):
        self.records = {str(record.id): record for record in records}
        self.calls: list[tuple[str | None, list[str]]] = []

    def find_by_ids(self, record_type, ids):
        self.calls.append((record_type, list(ids)))
        found = [self.records[i] for i in ids if i in self.records]
        return sorted(found, key=lambda record: record.id, reverse=True)


@pytest.fixture
def repository(people) -> PeopleRepository:
    return PeopleRepository([Person(int(doc["id"]), doc["name"]) for doc in people])
