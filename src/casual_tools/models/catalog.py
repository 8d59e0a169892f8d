"""Catalog models: plugins, MCP servers with their tools, and the catalog itself."""

from pydantic import BaseModel, ConfigDict, Field


class PluginInfo(BaseModel):
    """A built-in plugin as seen by tool selection.

    Single-tool plugins contribute exactly one tool id. Multi-tool plugins
    contribute every id under their shared prefix and are toggled as a unit.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    enabled: bool = True
    multi: bool = False
    tool_ids: tuple[str, ...] = ()


class McpToolUnique(BaseModel):
    """A tool exposed by an MCP server.

    ``uuid`` is unique across every configured server. ``name`` is the tool's
    own name on its server and may clash with tools on other servers.
    """

    model_config = ConfigDict(frozen=True)

    uuid: str
    name: str
    description: str = ""


class McpServerWithTools(BaseModel):
    """An MCP server together with the tools it currently exposes."""

    model_config = ConfigDict(frozen=True)

    id: str
    enabled: bool = True
    label: str | None = None
    tools: tuple[McpToolUnique, ...] = ()

    @property
    def display_name(self) -> str:
        return self.label or self.id

    @property
    def tool_ids(self) -> tuple[str, ...]:
        return tuple(tool.uuid for tool in self.tools)


class Catalog(BaseModel):
    """Snapshot of every tool currently available for selection.

    Holds the enabled plugins and all known servers. Only enabled servers
    contribute to ``server_tool_ids``. A catalog is a snapshot: build a new
    one whenever plugin or server configuration may have changed.
    """

    model_config = ConfigDict(frozen=True)

    plugins: tuple[PluginInfo, ...] = Field(default=())
    servers: tuple[McpServerWithTools, ...] = Field(default=())

    @property
    def plugin_tool_ids(self) -> tuple[str, ...]:
        ids: dict[str, None] = {}
        for plugin in self.plugins:
            if plugin.enabled:
                ids.update(dict.fromkeys(plugin.tool_ids))
        return tuple(ids)

    @property
    def server_tool_ids(self) -> tuple[str, ...]:
        ids: dict[str, None] = {}
        for server in self.servers:
            if server.enabled:
                ids.update(dict.fromkeys(server.tool_ids))
        return tuple(ids)

    @property
    def all_tool_ids(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(self.plugin_tool_ids + self.server_tool_ids))

    def get_plugin(self, name: str) -> PluginInfo | None:
        for plugin in self.plugins:
            if plugin.name == name and plugin.enabled:
                return plugin
        return None

    def get_server(self, server_id: str) -> McpServerWithTools | None:
        for server in self.servers:
            if server.id == server_id:
                return server
        return None


TOOL_ID_SEPARATOR = "___"


def unique_tool_id(server_id: str, tool_name: str) -> str:
    """Build the selection id of a server tool.

    Two servers may expose tools with the same name, so the id carries the
    server id as well. Server ids never contain the separator, which keeps
    ids from different servers apart.
    """
    return f"{tool_name}{TOOL_ID_SEPARATOR}{server_id}"
