"""Read-side status queries over a tool selection.

Each query reduces a selection and a catalog snapshot to the state of one
checkbox: ``"all"``, ``"some"`` or ``"none"``. Queries over a single plugin or
a single tool only ever answer ``"all"`` or ``"none"``.
"""

from collections.abc import Iterable
from typing import Literal

from casual_tools.models.catalog import Catalog, McpServerWithTools, McpToolUnique
from casual_tools.models.selection import AllTools, ToolSelection

ToolStatus = Literal["all", "some", "none"]


def _subset_status(selection: ToolSelection, tool_ids: Iterable[str]) -> ToolStatus:
    if isinstance(selection, AllTools):
        return "all"
    if not selection.tool_ids:
        return "none"

    tool_ids = list(tool_ids)
    selected = [tool_id for tool_id in tool_ids if tool_id in selection]
    if not selected:
        return "none"
    if len(selected) == len(tool_ids):
        return "all"
    return "some"


def _resolve_server(catalog: Catalog, server: McpServerWithTools) -> McpServerWithTools:
    # Prefer the catalog's copy, it carries the server's current tool list
    return catalog.get_server(server.id) or server


def tools_status(selection: ToolSelection, catalog: Catalog) -> ToolStatus:
    """Status of the whole catalog."""
    return _subset_status(selection, catalog.all_tool_ids)


def plugins_status(selection: ToolSelection, catalog: Catalog) -> ToolStatus:
    """Status of every tool contributed by enabled plugins."""
    return _subset_status(selection, catalog.plugin_tool_ids)


def plugin_status(selection: ToolSelection, catalog: Catalog, plugin_name: str) -> ToolStatus:
    """Status of one plugin.

    A multi-tool plugin shows as ``"all"`` as soon as any of its tools is
    selected, even though the selection may hold only part of them.
    """
    if isinstance(selection, AllTools):
        return "all"

    plugin = catalog.get_plugin(plugin_name)
    if plugin is None:
        return "none"

    if any(tool_id in selection for tool_id in plugin.tool_ids):
        return "all"
    return "none"


def server_tools_status(
    selection: ToolSelection,
    catalog: Catalog,
    server: McpServerWithTools,
) -> ToolStatus:
    """Status of every tool exposed by one server.

    A server without tools always reports ``"none"``.
    """
    tool_ids = _resolve_server(catalog, server).tool_ids
    if not tool_ids:
        return "none"
    return _subset_status(selection, tool_ids)


def server_tool_status(
    selection: ToolSelection,
    catalog: Catalog,
    server: McpServerWithTools,
    tool: McpToolUnique,
) -> ToolStatus:
    """Status of a single server tool."""
    if isinstance(selection, AllTools):
        return "all"
    return "all" if tool.uuid in selection else "none"
