"""Command-line interface for building and running search queries."""

from simplees.cli.main import cli

__all__ = ["cli"]
