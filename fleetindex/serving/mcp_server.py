"""MCP server exposing the query surface as two tools.

    fleetpkg_get_sql_tables       -> schema catalog text
    fleetpkg_execute_sql_query    -> {"status": "ok", "rows": [...]}
                                     {"status": "initializing", "message": ...}
                                     tool error with the SQLite message

Runs over stdio by default or streamable HTTP when an address is given.
"""

import json

import anyio
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations

from fleetindex.utils.logging import logger

from .query import QuerySurface

SERVER_NAME = "fleetpkg"

GET_TABLES_TOOL = "fleetpkg_get_sql_tables"
EXECUTE_QUERY_TOOL = "fleetpkg_execute_sql_query"

_READ_ONLY = ToolAnnotations(readOnlyHint=True, idempotentHint=True)


def create_server(surface: QuerySurface, host: str = "127.0.0.1", port: int = 8000) -> FastMCP:
    """Build a FastMCP server bound to surface."""
    server = FastMCP(SERVER_NAME, host=host, port=port)

    @server.tool(
        name=GET_TABLES_TOOL,
        description="Call this tool first! Returns the complete catalog of available tables and columns.",
        annotations=_READ_ONLY,
    )
    def get_sql_tables() -> str:
        return surface.get_tables()

    @server.tool(
        name=EXECUTE_QUERY_TOOL,
        description=(
            "Call this tool to execute an arbitrary SQLite query.\n"
            f"Be sure you have called {GET_TABLES_TOOL}() first to understand the structure of the data!"
        ),
        annotations=_READ_ONLY,
    )
    async def execute_sql_query(statement: str) -> str:
        """Run a read-only SQLite query.

        Args:
            statement: SQLite query to execute
        """
        logger.info("Executing query", statement=statement)
        result = await anyio.to_thread.run_sync(surface.execute, statement)

        if result.status == "error":
            logger.error("Error executing query: {err}", err=result.error)
            raise ToolError(f"failed to execute query: {result.error}")
        if result.status == "initializing":
            logger.warning("Database not ready yet")
        else:
            logger.info("Query executed successfully", row_count=len(result.rows))

        return json.dumps(result.to_dict(), default=str)

    return server


def parse_address(address: str) -> tuple[str, int]:
    """Split HOST:PORT (HOST optional) for the HTTP transport."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid HTTP address {address!r}, expected HOST:PORT or :PORT")
    return host or "127.0.0.1", int(port)


def run_server(surface: QuerySurface, http_address: str | None = None) -> None:
    """Serve until the transport closes or the process is interrupted."""
    if http_address:
        host, port = parse_address(http_address)
        server = create_server(surface, host=host, port=port)
        logger.info("Serving MCP over streamable HTTP on {host}:{port}", host=host, port=port)
        server.run(transport="streamable-http")
    else:
        server = create_server(surface)
        logger.info("Serving MCP over stdio")
        server.run(transport="stdio")
