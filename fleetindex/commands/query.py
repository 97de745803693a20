"""Run a read-only SQL query against an existing package store."""

import json

import click

from fleetindex.utils.error_handler import handle_exceptions


@click.command()
@handle_exceptions
@click.argument("statement")
@click.option("--db", default=None, help="SQLite database path")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
def query(statement, db, output_format):
    """Query a built store with read-only SQLite.

    Examples:
      fleetindex query "SELECT name, version FROM integrations"
      fleetindex query --format json "SELECT * FROM ingest_processors LIMIT 5"

    Run `fleetindex tables` for the schema catalog."""
    from pathlib import Path

    from rich.table import Table

    from fleetindex.config_runtime import load_runtime_config
    from fleetindex.serving.query import QuerySurface
    from fleetindex.serving.store import PublishedStore, ReadOnlyStore
    from fleetindex.ui import console

    if db is None:
        db = load_runtime_config(".")["paths"]["db"]
    if not Path(db).is_file():
        raise click.ClickException(f"Database not found: {db}\nRun 'fleetindex build' first.")

    published = PublishedStore()
    published.publish(ReadOnlyStore(db))
    try:
        result = QuerySurface(published).execute(statement)
    finally:
        published.close()

    if result.status == "error":
        raise click.ClickException(f"failed to execute query: {result.error}")

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
        return

    if not result.rows:
        console.print("[dim](no rows)[/dim]")
        return

    table = Table()
    for column in result.rows[0]:
        table.add_column(column)
    for row in result.rows:
        table.add_row(*("NULL" if v is None else str(v) for v in row.values()))
    console.print(table)
