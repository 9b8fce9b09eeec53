"""Main CLI entry point and application setup."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
from click.exceptions import Exit
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from simplees import __version__
from simplees.backends.base import SearchClient
from simplees.cli.commands import documents, search
from simplees.config import BACKENDS, create_client, load_config


@dataclass
class Context:
    """CLI context that holds shared resources."""

    client: SearchClient
    console: Console
    config: dict[str, Any]
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


class SimpleESGroup(click.Group):
    """Custom group that reports errors instead of printing tracebacks."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=SimpleESGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--index-dir",
    "-d",
    type=click.Path(path_type=Path),
    help="Override index directory location",
)
@click.option(
    "--backend",
    "-b",
    type=click.Choice(BACKENDS),
    help="Search backend to use",
)
@click.version_option(
    version=__version__, prog_name="simplees", message="simplees version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    index_dir: Path | None,
    backend: str | None,
) -> None:
    """Query search indexes with a where-clause builder."""
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    console = create_console(no_color=no_color)

    try:
        config_data = load_config(config)
        if index_dir:
            config_data["index_dir"] = str(index_dir)
        if backend:
            config_data["backend"] = backend

        client = create_client(config_data)
    except Exception as e:
        if debug:
            raise
        console.print(f"[red]Error initializing application:[/red] {escape(str(e))}")
        ctx.exit(1)

    ctx.call_on_close(client.close)
    ctx.obj = Context(client=client, console=console, config=config_data, debug=debug)


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show document counts per index."""
    console = ctx.obj.console
    statistics = ctx.obj.client.get_statistics()

    console.print(f"\nTotal documents: {statistics.get('total_documents', 0)}")
    if path := statistics.get("index_path"):
        console.print(f"Index location: {path}")

    indexes = statistics.get("indexes") or {}
    if not indexes:
        console.print("[yellow]No indexes[/yellow]")
        return

    table = Table()
    table.add_column("Index", style="cyan")
    table.add_column("Documents", justify="right")
    for name, count in indexes.items():
        table.add_row(name, str(count))
    console.print(table)


cli.add_command(documents.index)
cli.add_command(documents.delete)
cli.add_command(search.search)


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
