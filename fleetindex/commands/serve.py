"""Build the package store in the background and serve it over MCP."""

import sys

import click

from fleetindex.utils.error_handler import handle_exceptions


@click.command()
@handle_exceptions
@click.option(
    "--dir",
    "integrations_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False),
    help="Root of the integrations checkout (contains packages/)",
)
@click.option("--http", "http_address", default=None, help="Serve streamable HTTP on HOST:PORT instead of stdio")
@click.option("--db", default=None, help="Output SQLite database path")
@click.option("--ecs-dir", default=None, help="Directory holding <ref>/ecs_flat.yml ECS dictionaries")
@click.option("--log-level", default=None, help="Log level: debug, info, warn, error")
@click.option("--no-log", is_flag=True, help="Disable logging")
def serve(integrations_dir, http_address, db, ecs_dir, log_level, no_log):
    """Index an integrations checkout and answer SQL queries over MCP.

    The store is rebuilt from scratch on a background thread every time the
    server starts. Queries that arrive before the first build finishes get
    an "initializing" reply instead of blocking; once the build completes
    the new store is swapped in atomically.

    Tools:
      fleetpkg_get_sql_tables      Schema catalog (always available)
      fleetpkg_execute_sql_query   Read-only SQLite query

    Examples:
      fleetindex serve --dir ~/code/integrations
      fleetindex serve --dir ~/code/integrations --http 127.0.0.1:8080

    Output:
      fleetpkg.db    # Rebuilt store (default path)"""
    from fleetindex.config_runtime import load_runtime_config
    from fleetindex.indexer.orchestrator import BuildOrchestrator
    from fleetindex.packages.ecs import EcsDictionary
    from fleetindex.serving.mcp_server import run_server
    from fleetindex.serving.query import QuerySurface
    from fleetindex.serving.store import PublishedStore
    from fleetindex.utils.logging import configure_logging, logger

    config = load_runtime_config(".")

    if db is None:
        db = config["paths"]["db"]
    if ecs_dir is None:
        ecs_dir = config["paths"]["ecs_dir"] or None
    if http_address is None:
        http_address = config["server"]["http"] or None
    if log_level is None:
        log_level = config["logging"]["level"]

    try:
        configure_logging(
            level=log_level,
            enabled=config["logging"]["enabled"] and not no_log,
            json_mode=config["logging"]["json"],
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--log-level") from e

    published = PublishedStore()
    orchestrator = BuildOrchestrator(integrations_dir, db, published, EcsDictionary(ecs_dir))
    orchestrator.start()

    try:
        run_server(QuerySurface(published), http_address)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(130)
    finally:
        published.close()
