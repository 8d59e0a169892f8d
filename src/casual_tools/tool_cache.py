import asyncio
import os
import time
from dataclasses import dataclass
from typing import Any

import mcp
from fastmcp import Client

from casual_tools.logging import get_logger

logger = get_logger("tool_cache")


def _parse_ttl(value: str | None) -> float | None:
    """
    Convert an environment value to a TTL in seconds.

    Returns None for non-positive values to indicate no expiry.
    """
    if value is None:
        return 30.0

    try:
        ttl = float(value)
    except (TypeError, ValueError):
        logger.warning(
            f"Invalid MCP_TOOL_CACHE_TTL value '{value}'. Falling back to default of 30s."
        )
        return 30.0

    if ttl <= 0:
        return None

    return ttl


@dataclass(slots=True)
class _ServerTools:
    tools: list[mcp.Tool]
    fetched_at: float


class ToolCache:
    """
    Per-server cache of list_tools responses.

    Building a catalog lists the tools of every enabled server, which happens
    on each status query and toggle. Entries expire after a TTL (default 30
    seconds, overridable with the MCP_TOOL_CACHE_TTL environment variable; a
    non-positive value disables expiry).
    """

    def __init__(self, ttl_seconds: float | None = None):
        self._ttl = (
            ttl_seconds if ttl_seconds is not None else _parse_ttl(os.getenv("MCP_TOOL_CACHE_TTL"))
        )
        self._entries: dict[str, _ServerTools] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._version = 0

    def _is_expired(self, server_id: str) -> bool:
        entry = self._entries.get(server_id)
        if entry is None:
            return True

        if self._ttl is None:
            return False

        return (time.monotonic() - entry.fetched_at) > self._ttl

    async def get_tools(
        self,
        server_id: str,
        client: Client[Any],
        force_refresh: bool = False,
    ) -> list[mcp.Tool]:
        """
        Return the cached tools of one server, listing them again if expired or forced.
        """
        if not force_refresh and not self._is_expired(server_id):
            return self._entries[server_id].tools

        lock = self._locks.setdefault(server_id, asyncio.Lock())
        async with lock:
            if not force_refresh and not self._is_expired(server_id):
                return self._entries[server_id].tools

            logger.debug(f"Refreshing tool cache for server '{server_id}'")
            async with client:
                tools = await client.list_tools()

            self.prime(server_id, tools)
            return tools

    def invalidate(self, server_id: str | None = None) -> None:
        """
        Drop the cached tools of one server, or of every server.
        """
        if server_id is None:
            self._entries.clear()
        else:
            self._entries.pop(server_id, None)

    def prime(self, server_id: str, tools: list[mcp.Tool]) -> None:
        """
        Seed the cache for a server without making a network call.
        """
        self._entries[server_id] = _ServerTools(
            tools=tools,
            fetched_at=time.monotonic(),
        )
        self._version += 1

    @property
    def version(self) -> int:
        return self._version
