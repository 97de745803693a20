"""Serving the built store: published handle, query surface, MCP tools."""

from .query import NOT_READY_MESSAGE, QueryResult, QuerySurface
from .store import PublishedStore, ReadOnlyStore

__all__ = [
    "NOT_READY_MESSAGE",
    "PublishedStore",
    "QueryResult",
    "QuerySurface",
    "ReadOnlyStore",
]
