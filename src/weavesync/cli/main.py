"""
WeaveSync CLI - Main entry point
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

import weavesync.weaviate  # noqa: F401  registers the task types
from weavesync.cli.commands import rows
from weavesync.core.config.settings import settings
from weavesync.core.config.validation import (
    DefinitionGenerator,
    DefinitionValidator,
    parse_variables,
)
from weavesync.core.exceptions.custom_exceptions import WeaveSyncError
from weavesync.core.logging.logger import get_logger
from weavesync.runtime.context import RunContext
from weavesync.tasks.base import TaskFactory

app = typer.Typer(
    name="weavesync",
    help="Weaviate task plugins: batch insert, delete, query and schema creation",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
logger = get_logger(__name__)

app.add_typer(rows.app, name="rows", help="Inspect row-stream files")


def _print_output(result: dict) -> None:
    table = Table(title="Task Output")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in result.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value, default=str)
        table.add_row(key, escape(str(value)))
    console.print(table)


@app.command(name="run")
def run_task_command(
    definition_file: str = typer.Argument(..., help="Task definition file (YAML or JSON)"),
    var: List[str] = typer.Option(
        [], "--var", "-V", help="Template variable as key=value (repeatable)"
    ),
    output_json: bool = typer.Option(False, "--json", help="Print the output as JSON"),
) -> None:
    """
    Run a single task definition and print its output.

    Options of the definition are rendered against the variables given with
    --var, e.g. [bold]--var vars.cls=Movies[/bold] for [bold]{{ vars.cls }}[/bold].
    """
    try:
        definition = DefinitionValidator.validate_file(definition_file)
        task = TaskFactory.create(definition.to_task_config())
        variables = parse_variables(var)

        with RunContext(variables, task_id=task.id) as run_context:
            output = task.run(run_context)
    except WeaveSyncError as e:
        logger.error("Task failed", error_code=e.error_code, error=e.message)
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    result = output.to_dict()
    if output_json:
        typer.echo(json.dumps(result, default=str, indent=2))
    else:
        _print_output(result)


@app.command(name="tasks")
def list_tasks_command() -> None:
    """List the available task types"""
    table = Table(title="Task Types")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Description", style="green")
    for task_type in TaskFactory.list_tasks():
        task_class = TaskFactory.get(task_type)
        summary = (task_class.__doc__ or "").strip().splitlines()
        table.add_row(task_type, summary[0] if summary else "")
    console.print(table)


@app.command(name="template")
def template_command(
    task_type: str = typer.Argument(..., help="Task type, e.g. weavesync.weaviate.Query"),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the definition to this file"
    ),
) -> None:
    """Generate a starter definition for a task type"""
    try:
        definition = DefinitionGenerator.generate(task_type)
    except WeaveSyncError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    content = yaml.safe_dump(definition, sort_keys=False)
    if output_file:
        path = Path(output_file)
        if path.exists():
            console.print(f"[red]Error:[/red] File already exists: {escape(output_file)}")
            raise typer.Exit(1)
        path.write_text(content, encoding="utf-8")
        console.print(f"Created definition file: {escape(output_file)}")
    else:
        typer.echo(content)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
) -> None:
    """
    WeaveSync CLI - Weaviate task plugins

    Run 'weavesync --help' for available commands.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.info("Verbose logging enabled")


@app.command()
def version() -> None:
    """Show WeaveSync version information"""
    table = Table(title="WeaveSync Version Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Environment", style="yellow")

    table.add_row(settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)
    table.add_row("Storage", settings.STORAGE_DIR, "Default")

    console.print(table)


if __name__ == "__main__":
    app()
