"""Print the schema catalog."""

import click


@click.command()
def tables():
    """Print the commented CREATE TABLE statements for every table."""
    from fleetindex.indexer.schema import get_schema_catalog

    click.echo(get_schema_catalog())
