"""Build the package store in the foreground."""

import sys

import click

from fleetindex.utils.error_handler import handle_exceptions
from fleetindex.utils.exit_codes import ExitCodes


@click.command()
@handle_exceptions
@click.option(
    "--dir",
    "integrations_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False),
    help="Root of the integrations checkout (contains packages/)",
)
@click.option("--db", default=None, help="Output SQLite database path")
@click.option("--ecs-dir", default=None, help="Directory holding <ref>/ecs_flat.yml ECS dictionaries")
def build(integrations_dir, db, ecs_dir):
    """Index an integrations checkout into a SQLite store and exit.

    Same build as `serve` without the server: every package is written in
    its own transaction into a fresh file which replaces --db only when
    all packages succeed. On failure the existing --db is left untouched.

    Examples:
      fleetindex build --dir ~/code/integrations
      fleetindex build --dir ./integrations --db /tmp/fleetpkg.db"""
    from rich.table import Table

    from fleetindex.config_runtime import load_runtime_config
    from fleetindex.indexer.exceptions import FleetIndexError
    from fleetindex.indexer.runner import run_build
    from fleetindex.ui import console, print_error, print_header, print_success

    config = load_runtime_config(".")
    if db is None:
        db = config["paths"]["db"]
    if ecs_dir is None:
        ecs_dir = config["paths"]["ecs_dir"] or None

    print_header("Building package store")
    try:
        result = run_build(integrations_dir, db, ecs_dir)
    except FleetIndexError as e:
        print_error(str(e))
        sys.exit(ExitCodes.BUILD_FAILED)

    table = Table(title="Rows per table", show_lines=False)
    table.add_column("Table", style="cmd")
    table.add_column("Rows", justify="right")
    for name, count in result["counts"].items():
        table.add_row(name, str(count))
    console.print(table)

    print_success(
        f"{result['packages']} packages indexed into "
        f"[path]{result['db_path']}[/path] in {result['elapsed']:.2f}s"
    )
