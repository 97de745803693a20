"""fleetindex CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from fleetindex import __version__


@click.group()
@click.version_option(version=__version__, prog_name="fleetindex")
@click.help_option("-h", "--help")
def cli():
    """fleetindex - SQL over Elastic integration packages

    \b
    QUICK START:
      fleetindex serve --dir ~/code/integrations   # MCP server over stdio
      fleetindex build --dir ~/code/integrations   # Build fleetpkg.db and exit
      fleetindex tables                            # Schema catalog

    \b
    For detailed options: fleetindex <command> --help"""
    pass


from fleetindex.commands.build import build
from fleetindex.commands.query import query
from fleetindex.commands.serve import serve
from fleetindex.commands.tables import tables

cli.add_command(serve)
cli.add_command(build)
cli.add_command(query)
cli.add_command(tables)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
