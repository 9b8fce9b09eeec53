"""Search client implementations."""

from .base import SearchClient, SearchHit, SearchRequest, SearchResponse
from .fields import FieldConfiguration, FieldDefinition, FieldType
from .memory import MemoryClient
from .whoosh import WhooshClient

__all__ = [
    "SearchClient",
    "SearchHit",
    "SearchRequest",
    "SearchResponse",
    "FieldConfiguration",
    "FieldDefinition",
    "FieldType",
    "MemoryClient",
    "WhooshClient",
]
