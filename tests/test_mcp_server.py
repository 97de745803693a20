"""Tests for the MCP tool surface, driven in-process through FastMCP."""

import asyncio
import json

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from fleetindex.serving.mcp_server import (
    EXECUTE_QUERY_TOOL,
    GET_TABLES_TOOL,
    create_server,
    parse_address,
)
from fleetindex.serving.query import QuerySurface
from fleetindex.serving.store import PublishedStore, ReadOnlyStore


def call(server, name, arguments):
    """Call a tool and return its text payload."""
    result = asyncio.run(server.call_tool(name, arguments))
    # Newer SDKs return (content, structured_content).
    if isinstance(result, tuple):
        result = result[0]
    return result[0].text


@pytest.fixture
def published():
    store = PublishedStore()
    yield store
    store.close()


class TestTools:
    """Tool registration."""

    def test_listed_with_read_only_hints(self, published):
        tools = {t.name: t for t in asyncio.run(create_server(QuerySurface(published)).list_tools())}

        assert set(tools) == {GET_TABLES_TOOL, EXECUTE_QUERY_TOOL}
        for tool in tools.values():
            assert tool.annotations.readOnlyHint is True
            assert tool.annotations.idempotentHint is True
        assert tools[GET_TABLES_TOOL].description.startswith("Call this tool first!")
        assert "statement" in tools[EXECUTE_QUERY_TOOL].inputSchema["properties"]


class TestCalls:
    """Tool calls against the published store."""

    def test_get_tables(self, published):
        text = call(create_server(QuerySurface(published)), GET_TABLES_TOOL, {})

        assert "CREATE TABLE IF NOT EXISTS integrations" in text

    def test_initializing(self, published):
        """Before the first publish the query tool reports not-ready."""
        text = call(create_server(QuerySurface(published)), EXECUTE_QUERY_TOOL, {"statement": "SELECT 1"})

        assert json.loads(text)["status"] == "initializing"

    def test_rows(self, published, built_db):
        published.publish(ReadOnlyStore(built_db))
        server = create_server(QuerySurface(published))

        text = call(server, EXECUTE_QUERY_TOOL, {"statement": "SELECT dir_name FROM integrations ORDER BY id"})

        assert json.loads(text) == {
            "status": "ok",
            "rows": [{"dir_name": "minimal_pkg"}, {"dir_name": "sample_pkg"}],
        }

    def test_query_error_is_a_tool_error(self, published, built_db):
        published.publish(ReadOnlyStore(built_db))
        server = create_server(QuerySurface(published))

        with pytest.raises(ToolError, match="failed to execute query"):
            asyncio.run(server.call_tool(EXECUTE_QUERY_TOOL, {"statement": "SELEC nonsense"}))


class TestParseAddress:
    """parse_address()"""

    def test_host_and_port(self):
        assert parse_address("0.0.0.0:8080") == ("0.0.0.0", 8080)

    def test_port_only(self):
        assert parse_address(":9000") == ("127.0.0.1", 9000)

    @pytest.mark.parametrize("address", ["localhost", "localhost:http"])
    def test_invalid(self, address):
        with pytest.raises(ValueError):
            parse_address(address)
