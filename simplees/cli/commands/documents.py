"""Document indexing CLI commands."""

from pathlib import Path
from typing import Any

import click
import msgspec

from simplees.exceptions import IndexingError


def get_client(ctx):
    """Get the search client from context."""
    return ctx.obj.client


def load_documents(path: Path) -> list[dict[str, Any]]:
    """Read documents from a JSON array or JSON Lines file.

    Raises:
        IndexingError: If the file is not valid JSON or holds non-objects
    """
    data = path.read_bytes()

    try:
        if data.lstrip().startswith(b"["):
            documents = msgspec.json.decode(data)
        else:
            documents = [
                msgspec.json.decode(line)
                for line in data.splitlines()
                if line.strip()
            ]
    except msgspec.DecodeError as e:
        raise IndexingError(f"Invalid JSON in {path}: {e}") from e

    for position, document in enumerate(documents, 1):
        if not isinstance(document, dict):
            raise IndexingError(f"Document {position} in {path} is not an object")

    return documents


@click.command()
@click.argument("index_name", metavar="INDEX")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--type", "doc_type", help="Document type within the index")
@click.option("--id-field", default="id", show_default=True, help="Field holding the document id")
@click.pass_context
def index(
    ctx: click.Context,
    index_name: str,
    file: Path,
    doc_type: str | None,
    id_field: str,
) -> None:
    """Index documents from a JSON or JSON Lines FILE."""
    console = ctx.obj.console
    client = get_client(ctx)

    documents = load_documents(file)

    batch = []
    for position, document in enumerate(documents, 1):
        if document.get(id_field) is None:
            raise IndexingError(f"Document {position} has no {id_field!r} field")
        batch.append((str(document[id_field]), document))

    client.index_batch(index_name, batch, doc_type)
    client.commit()

    console.print(
        f"[green]✓[/green] Indexed {len(batch)} documents into [cyan]{index_name}[/cyan]"
    )


@click.command()
@click.argument("index_name", metavar="INDEX")
@click.argument("doc_ids", nargs=-1, required=True, metavar="ID...")
@click.option("--type", "doc_type", help="Only delete documents of this type")
@click.pass_context
def delete(
    ctx: click.Context, index_name: str, doc_ids: tuple[str, ...], doc_type: str | None
) -> None:
    """Delete documents by id."""
    console = ctx.obj.console
    client = get_client(ctx)

    deleted = 0
    for doc_id in doc_ids:
        if client.delete(index_name, doc_id, doc_type):
            deleted += 1
        else:
            console.print(f"[yellow]Not found:[/yellow] {doc_id}")

    client.commit()
    console.print(f"[green]✓[/green] Deleted {deleted} documents")
