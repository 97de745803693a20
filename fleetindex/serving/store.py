"""Read-only store handles and the published-store reference.

A ReadOnlyStore wraps one `mode=ro` connection to a finished store file.
PublishedStore is the single shared slot readers load from; the builder
swaps a new handle in with publish(). Loading is a plain attribute read,
so readers never wait on the builder.
"""

import sqlite3
import threading
from pathlib import Path
from typing import Any

from fleetindex.utils.logging import logger


class ReadOnlyStore:
    """A read-only SQLite connection usable from any thread.

    Statements are serialized on an internal lock; close() takes the same
    lock, so a store retired by publish() finishes its in-flight query first.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).resolve()
        uri = f"{self.db_path.as_uri()}?mode=ro"
        self._conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        self._conn.execute("PRAGMA query_only = ON")
        self._lock = threading.Lock()
        self._closed = False

    def execute(self, statement: str) -> tuple[list[str], list[tuple[Any, ...]]]:
        """Run one statement and return (column names, rows).

        Raises:
            sqlite3.Error: the statement was rejected
        """
        with self._lock:
            if self._closed:
                raise sqlite3.ProgrammingError("store is closed")
            cursor = self._conn.execute(statement)
            try:
                columns = [d[0] for d in cursor.description or ()]
                rows = cursor.fetchall()
            finally:
                cursor.close()
            return columns, rows

    def close(self) -> None:
        with self._lock:
            if not self._closed:
                self._conn.close()
                self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


class PublishedStore:
    """The shared reference to the currently served store (None until first publish)."""

    def __init__(self) -> None:
        self._current: ReadOnlyStore | None = None
        self._publish_lock = threading.Lock()

    def load(self) -> ReadOnlyStore | None:
        return self._current

    def publish(self, store: ReadOnlyStore) -> None:
        """Make store current, then close the store it replaced."""
        with self._publish_lock:
            previous = self._current
            self._current = store
        logger.info("Published store {path}", path=str(store.db_path))
        if previous is not None and previous is not store:
            previous.close()

    def close(self) -> None:
        with self._publish_lock:
            current, self._current = self._current, None
        if current is not None:
            current.close()
