"""CLI commands module."""

from . import documents, search

__all__ = ["documents", "search"]
