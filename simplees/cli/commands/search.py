"""Search CLI command."""

import re
from typing import Any

import click
import msgspec
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from simplees.backends.base import SearchHit
from simplees.builder import SearchBuilder
from simplees.exceptions import InvalidArgumentError
from simplees.pagination import DEFAULT_PER_PAGE

CONDITION_PATTERN = re.compile(r"^\s*([^\s<>=~]+)\s*(<=|>=|=|<|>|~)\s*(.*?)\s*$")


def parse_value(text: str) -> Any:
    """Decode a JSON scalar or structure, falling back to the raw text."""
    try:
        return msgspec.json.decode(text)
    except msgspec.DecodeError:
        return text


def parse_condition(text: str) -> tuple[str, str, Any]:
    """Split ``field OP value`` into its parts.

    Raises:
        click.BadParameter: If the condition does not have that shape
    """
    match = CONDITION_PATTERN.match(text)
    if not match:
        raise click.BadParameter(
            f"{text!r} is not of the form FIELD OP VALUE (OP is one of = < > <= >= ~)"
        )
    column, operator, value = match.groups()
    return column, operator, parse_value(value)


def parse_between(text: str) -> tuple[str, list[Any]]:
    """Split ``field=lower,upper`` into a column and its two bounds."""
    column, sep, bounds = text.partition("=")
    parts = bounds.split(",")
    if not sep or not column.strip() or len(parts) != 2:
        raise click.BadParameter(f"{text!r} is not of the form FIELD=LOWER,UPPER")
    return column.strip(), [parse_value(part.strip()) for part in parts]


def parse_sort(text: str) -> tuple[str, str]:
    column, _, direction = text.partition(":")
    return column, direction or "asc"


def apply_condition(builder: SearchBuilder, text: str, boolean: str) -> None:
    column, operator, value = parse_condition(text)
    if operator == "~":
        builder.where_text(column, value, boolean)
    else:
        builder.where(column, operator, value, boolean)


@click.command()
@click.argument("index_name", metavar="INDEX")
@click.option("--type", "doc_type", help="Document type within the index")
@click.option("--where", "-w", "wheres", multiple=True, help="Required condition, e.g. 'age>=21'")
@click.option("--or-where", "-o", "or_wheres", multiple=True, help="Optional condition")
@click.option("--between", multiple=True, help="Inclusive range, e.g. 'age=18,30'")
@click.option("--raw", "raws", multiple=True, help="Query fragment as JSON")
@click.option("--sort", "-s", "sorts", multiple=True, help="Sort field, e.g. 'age:desc'")
@click.option("--limit", "-n", type=int, help="Maximum results to show")
@click.option("--offset", type=int, help="Skip first N results")
@click.option("--page", "-p", type=int, help="Page number to show")
@click.option("--per-page", type=int, help="Results per page")
@click.option("--dry-run", is_flag=True, help="Print the request body without searching")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    index_name: str,
    doc_type: str | None,
    wheres: tuple[str, ...],
    or_wheres: tuple[str, ...],
    between: tuple[str, ...],
    raws: tuple[str, ...],
    sorts: tuple[str, ...],
    limit: int | None,
    offset: int | None,
    page: int | None,
    per_page: int | None,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Search INDEX.

    Required conditions are added first, then optional ones, ranges and
    raw fragments. A single optional condition on its own is required.
    """
    console = ctx.obj.console
    builder = SearchBuilder(
        ctx.obj.client,
        index_name,
        doc_type,
        per_page=int(ctx.obj.config.get("per_page") or DEFAULT_PER_PAGE),
    )

    for text in wheres:
        apply_condition(builder, text, "must")
    for text in or_wheres:
        apply_condition(builder, text, "should")
    for text in between:
        builder.where_between(*parse_between(text))
    for text in raws:
        fragment = parse_value(text)
        if not isinstance(fragment, dict):
            raise InvalidArgumentError(f"Raw fragment must be a JSON object: {text}")
        builder.where_raw(fragment)

    for text in sorts:
        builder.order_by(*parse_sort(text))
    if limit is not None:
        builder.limit(limit)
    if offset is not None:
        builder.offset(offset)

    if dry_run:
        if page is not None:
            builder.for_page(page, per_page or builder.per_page)
        click.echo(msgspec.json.encode(builder.to_request().to_body()).decode())
        return

    if page is not None:
        paginator = builder.paginate(per_page, page)
        if as_json:
            click.echo(msgspec.json.encode(paginator.to_dict()).decode())
            return
        _display_hits(console, paginator.items, paginator.total)
        console.print(f"Page {paginator.current_page} of {paginator.last_page}")
        return

    response = builder.execute()
    if as_json:
        payload = {"total": response.total, "took_ms": response.took_ms, "hits": response.hits}
        click.echo(msgspec.json.encode(payload).decode())
        return
    _display_hits(console, response.hits, response.total)


def _display_hits(console: Console, hits: list[SearchHit], total: int) -> None:
    """Display hits in table format."""
    if total == 0:
        console.print("\n[yellow]No results found[/yellow]")
        return

    if total == 1:
        console.print("\nFound [green]1[/green] result")
    else:
        console.print(f"\nFound [green]{total}[/green] results")

    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Score", justify="right")
    table.add_column("Source", overflow="ellipsis", max_width=80)

    for hit in hits:
        table.add_row(
            escape(hit.id),
            hit.doc_type or "",
            f"{hit.score:.2f}",
            escape(msgspec.json.encode(hit.source).decode()),
        )

    console.print(table)
