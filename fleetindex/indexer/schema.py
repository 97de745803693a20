"""Database schema definitions - Single Source of Truth."""

from .schemas.data_stream_schema import DATA_STREAM_TABLES
from .schemas.package_schema import PACKAGE_TABLES
from .schemas.policy_schema import POLICY_TABLES
from .schemas.transform_schema import TRANSFORM_TABLES
from .schemas.utils import TableSchema
from .schemas.var_schema import VAR_TABLES

TABLES: dict[str, TableSchema] = {
    **PACKAGE_TABLES,
    **POLICY_TABLES,
    **VAR_TABLES,
    **DATA_STREAM_TABLES,
    **TRANSFORM_TABLES,
}

assert len(TABLES) == 31, f"Schema contract violation: Expected 31 tables, got {len(TABLES)}"

CATALOG_HEADER = (
    "-- Fleet Integration Package Database Schema\n"
    "-- SQLite schema for storing Fleet integration package data\n"
)


def get_schema_catalog() -> str:
    """Return the commented CREATE TABLE text for every table.

    This is static and does not need a database; the query surface hands
    it out before the first build has finished.
    """
    statements = [schema.create_table_sql() + ";" for schema in TABLES.values()]
    return CATALOG_HEADER + "\n" + "\n\n".join(statements) + "\n"
