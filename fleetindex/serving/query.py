"""Query surface: schema introspection and read-only SQL execution."""

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Literal

from fleetindex.indexer.schema import get_schema_catalog
from fleetindex.utils.logging import logger

from .store import PublishedStore

NOT_READY_MESSAGE = "database is still initializing, please retry in a moment"

Status = Literal["ok", "initializing", "error"]


@dataclass
class QueryResult:
    """Outcome of execute().

    status is "ok" (rows holds the result), "initializing" (no store has been
    published yet; retry later) or "error" (the store rejected the statement;
    error holds its message).
    """

    status: Status
    rows: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def to_dict(self) -> dict[str, Any]:
        if self.status == "ok":
            return {"status": self.status, "rows": self.rows}
        if self.status == "initializing":
            return {"status": self.status, "message": self.message}
        return {"status": self.status, "error": self.error}


def _to_text(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


class QuerySurface:
    """Routes queries to whatever store is currently published."""

    def __init__(self, published: PublishedStore):
        self.published = published

    def get_tables(self) -> str:
        """Commented CREATE TABLE text for every table; independent of build state."""
        return get_schema_catalog()

    def execute(self, statement: str) -> QueryResult:
        store = self.published.load()
        if store is None:
            return QueryResult(status="initializing", message=NOT_READY_MESSAGE)

        try:
            columns, rows = store.execute(statement)
        except sqlite3.Error as e:
            logger.debug("Query rejected: {err}", err=str(e))
            return QueryResult(status="error", error=str(e))

        return QueryResult(
            status="ok",
            rows=[{col: _to_text(value) for col, value in zip(columns, row, strict=True)} for row in rows],
        )
