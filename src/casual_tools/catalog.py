"""Catalog provider.

Builds the catalog of selectable tools from the plugin registry and the MCP
server registry. The catalog is rebuilt on every call so that enabling or
disabling a plugin or server immediately changes what "all tools" means.
"""

from typing import Protocol

from casual_tools.logging import get_logger
from casual_tools.models.catalog import Catalog, McpServerWithTools, PluginInfo
from casual_tools.models.config import Config

logger = get_logger("catalog")


class PluginRegistry(Protocol):
    def list_enabled_plugins(self) -> list[PluginInfo]: ...


class ServerRegistry(Protocol):
    async def list_servers_with_tools(self) -> list[McpServerWithTools]: ...


class ConfigPluginRegistry:
    """Plugin registry backed by the ``plugins`` section of a config."""

    def __init__(self, config: Config):
        self._config = config

    def list_enabled_plugins(self) -> list[PluginInfo]:
        return [
            PluginInfo(
                name=name,
                enabled=True,
                multi=plugin.multi,
                tool_ids=tuple(plugin.tool_ids(name)),
            )
            for name, plugin in self._config.plugins.items()
            if plugin.enabled
        ]


async def resolve_catalog(
    plugin_registry: PluginRegistry,
    server_registry: ServerRegistry,
) -> Catalog:
    """Read both registries and return a fresh catalog snapshot."""
    plugins = plugin_registry.list_enabled_plugins()
    servers = await server_registry.list_servers_with_tools()
    catalog = Catalog(plugins=tuple(plugins), servers=tuple(servers))
    logger.debug(
        f"Resolved catalog: {len(catalog.plugin_tool_ids)} plugin tools, "
        f"{len(catalog.server_tool_ids)} server tools across {len(servers)} servers"
    )
    return catalog


def catalog_tool_ids(catalog: Catalog) -> list[str]:
    """Return every tool id in the catalog, plugin tools first."""
    return list(catalog.all_tool_ids)


def describe_catalog(catalog: Catalog) -> str:
    """Describe the available tools in plain text.

    Used as context when generating agent definitions: built-in tools first,
    then MCP tools grouped by server.
    """
    lines = ["Available Tools:", ""]

    if catalog.plugin_tool_ids:
        lines.append("Built-in Tools:")
        for plugin in catalog.plugins:
            if not plugin.enabled:
                continue
            for tool_id in plugin.tool_ids:
                lines.append(f"- {tool_id}: provided by the {plugin.name} plugin")
        lines.append("")

    servers = [s for s in catalog.servers if s.enabled and s.tools]
    if servers:
        lines.append("MCP Server Tools:")
        for server in servers:
            tools = ", ".join(f"{t.uuid} ({t.description or t.name})" for t in server.tools)
            lines.append(f"- {server.display_name}: {tools}")
        lines.append("")

    if not catalog.all_tool_ids:
        lines.append("No tools are currently available.")

    return "\n".join(lines) + "\n"
