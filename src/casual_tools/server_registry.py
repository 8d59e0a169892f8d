"""MCP server registries.

A server registry reports every configured MCP server together with the tools
it currently exposes, each tool carrying a selection id that is unique across
servers.
"""

from collections.abc import Callable, Sequence
from typing import Any

import mcp
from fastmcp import Client

from casual_tools.logging import get_logger
from casual_tools.models.catalog import McpServerWithTools, McpToolUnique, unique_tool_id
from casual_tools.models.config import Config
from casual_tools.models.mcp_server_config import McpServerConfig
from casual_tools.tool_cache import ToolCache
from casual_tools.utils import load_mcp_client

logger = get_logger("server_registry")

ClientFactory = Callable[[str, McpServerConfig], Client[Any]]


def to_unique_tools(server_id: str, tools: Sequence[mcp.Tool]) -> tuple[McpToolUnique, ...]:
    """Convert the tools listed by a server into selectable tools."""
    return tuple(
        McpToolUnique(
            uuid=unique_tool_id(server_id, tool.name),
            name=tool.name,
            description=tool.description or tool.name,
        )
        for tool in tools
    )


class McpServerRegistry:
    """Server registry that asks each enabled server for its tools.

    Disabled servers are reported without tools and are never contacted. A
    server that cannot be reached is reported without tools as well, so one
    broken server does not hide the others.
    """

    def __init__(
        self,
        config: Config,
        tool_cache: ToolCache | None = None,
        client_factory: ClientFactory | None = None,
    ):
        self._config = config
        self._tool_cache = tool_cache or ToolCache()
        self._client_factory = client_factory or load_mcp_client

    async def list_servers_with_tools(self) -> list[McpServerWithTools]:
        results: list[McpServerWithTools] = []

        for server_id, server in self._config.servers.items():
            tools: tuple[McpToolUnique, ...] = ()
            if server.enabled:
                try:
                    client = self._client_factory(server_id, server)
                    listed = await self._tool_cache.get_tools(server_id, client)
                    tools = to_unique_tools(server_id, listed)
                except Exception as e:
                    logger.warning(f"Failed to list tools from MCP server '{server_id}': {e}")

            results.append(
                McpServerWithTools(
                    id=server_id,
                    enabled=server.enabled,
                    label=server.label,
                    tools=tools,
                )
            )

        return results

    def invalidate(self, server_id: str | None = None) -> None:
        self._tool_cache.invalidate(server_id)


class StaticServerRegistry:
    """Server registry serving a fixed list of servers."""

    def __init__(self, servers: Sequence[McpServerWithTools] = ()):
        self._servers = list(servers)

    async def list_servers_with_tools(self) -> list[McpServerWithTools]:
        return list(self._servers)
