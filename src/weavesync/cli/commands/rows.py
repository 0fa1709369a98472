"""
CLI commands for inspecting row-stream files.

Example Usage:
    # Show the first rows of a stored query result
    $ weavesync rows show storage:///3f2c.../search/7a1b.jsonl --limit 5

    # Count rows in a local file
    $ weavesync rows count ./movies.jsonl
"""

import json
from itertools import islice
from typing import Any, Dict, List

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from weavesync.core.exceptions.custom_exceptions import WeaveSyncError
from weavesync.runtime.context import RunContext
from weavesync.serializers import rowstream

app = typer.Typer(help="Inspect row-stream files")
console = Console()


def _cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return escape(json.dumps(value, default=str))
    return escape("" if value is None else str(value))


@app.command()
def show(
    source: str = typer.Argument(..., help="Local path, file:// or storage:// URI"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Maximum rows to show"),
    output_json: bool = typer.Option(False, "--json", help="Print rows as JSON lines"),
) -> None:
    """Show the first rows of a row-stream file"""
    try:
        with RunContext() as run_context, run_context.open_uri(source) as stream:
            rows: List[Dict[str, Any]] = list(islice(rowstream.read_rows(stream), limit))
    except WeaveSyncError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    if output_json:
        for row in rows:
            typer.echo(json.dumps(row, default=str))
        return

    columns: List[str] = []
    for row in rows:
        columns.extend(key for key in row if key not in columns)

    table = Table(title=f"Rows ({len(rows)})")
    for column in columns:
        table.add_column(column, style="cyan")
    for row in rows:
        table.add_row(*[_cell(row.get(column)) for column in columns])
    console.print(table)


@app.command()
def count(
    source: str = typer.Argument(..., help="Local path, file:// or storage:// URI"),
) -> None:
    """Count the rows of a row-stream file"""
    try:
        with RunContext() as run_context, run_context.open_uri(source) as stream:
            total = sum(1 for _ in rowstream.read_rows(stream))
    except WeaveSyncError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    typer.echo(str(total))
