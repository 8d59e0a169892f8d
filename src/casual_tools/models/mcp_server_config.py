"""MCP server configuration models.

Defines configuration for stdio-based and remote (HTTP/SSE) MCP servers.
Disabled servers stay in the configuration but contribute no tools to the
selectable catalog.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class StdioServerConfig(BaseModel):
    """Configuration for a stdio-based MCP server.

    Attributes:
        command: The command to run (e.g. ``"python"``).
        args: Command-line arguments passed to the server process.
        env: Environment variables set for the server process.
        cwd: Working directory for the server process.
        transport: Always ``"stdio"`` for this server type.
        enabled: Whether the server's tools are offered for selection.
        label: Display name, falls back to the server id.
    """

    command: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, Any] = Field(default_factory=dict)
    cwd: str | None = None
    transport: Literal["stdio"] = "stdio"
    enabled: bool = True
    label: str | None = None


class RemoteServerConfig(BaseModel):
    """Configuration for a remote MCP server accessed over HTTP or SSE.

    Attributes:
        url: The server URL.
        headers: HTTP headers sent with requests to the server.
        transport: Transport protocol (``"streamable-http"``, ``"sse"``,
            or ``"http"``). Auto-detected if not specified.
        enabled: Whether the server's tools are offered for selection.
        label: Display name, falls back to the server id.
    """

    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    transport: Literal["streamable-http", "sse", "http"] | None = None
    enabled: bool = True
    label: str | None = None


McpServerConfig = StdioServerConfig | RemoteServerConfig
