"""SQLite database manager for the package store."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from fleetindex.utils.logging import logger

from .exceptions import PersistenceError
from .schema import TABLES


def validate_table_name(table: str) -> str:
    """Validate table name against schema to prevent SQL injection."""
    if table not in TABLES:
        raise ValueError(f"Invalid table name: {table}. Must be one of the schema-defined tables.")
    return table


def validate_columns(table: str, columns: list[str]) -> list[str]:
    """Validate column names against the table's schema."""
    valid = set(TABLES[table].column_names())
    for col in columns:
        if col not in valid:
            raise ValueError(f"Unknown column '{col}' in table '{table}'")
    return columns


class DatabaseManager:
    """Owns one read-write connection to a store file.

    The connection runs in autocommit mode (isolation_level=None) so that
    transactions are opened and closed only through begin_transaction /
    commit / rollback.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)

        self.conn = sqlite3.connect(self.db_path, timeout=60, isolation_level=None)
        self.conn.execute("PRAGMA journal_mode=DELETE")
        self.conn.execute("PRAGMA synchronous=NORMAL")

        self.conn.execute("PRAGMA foreign_keys = ON")

    def begin_transaction(self) -> None:
        """Start a new transaction."""
        self.conn.execute("BEGIN IMMEDIATE")

    def commit(self) -> None:
        """Commit the current transaction."""
        try:
            self.conn.execute("COMMIT")
        except sqlite3.Error as e:
            self.rollback()
            raise PersistenceError(f"Failed to commit database changes: {e}") from e

    def rollback(self) -> None:
        """Rollback the current transaction."""
        if self.conn.in_transaction:
            self.conn.execute("ROLLBACK")

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the block in one transaction; any exception rolls it back and propagates."""
        self.begin_transaction()
        try:
            yield
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def create_schema(self) -> None:
        """Create all tables (CREATE TABLE IF NOT EXISTS) in one transaction."""
        with self.transaction():
            for table_schema in TABLES.values():
                self.conn.execute(table_schema.create_table_sql())
        logger.debug("Created {count} tables in {db}", count=len(TABLES), db=self.db_path)

    def insert(self, table: str, row: dict[str, Any]) -> int:
        """Insert one row and return its rowid."""
        validate_table_name(table)
        columns = validate_columns(table, list(row))

        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        cursor = self.conn.execute(sql, [row[c] for c in columns])
        return cursor.lastrowid

    def count_rows(self, table: str) -> int:
        """Number of rows in a schema table."""
        validate_table_name(table)
        return self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
