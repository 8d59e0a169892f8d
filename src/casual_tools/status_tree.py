"""Checkbox state of a whole session, grouped the way tool pickers show it."""

from pydantic import BaseModel

from casual_tools.models.catalog import Catalog
from casual_tools.models.selection import ToolSelection, selection_to_json
from casual_tools.tool_status import (
    ToolStatus,
    plugin_status,
    plugins_status,
    server_tool_status,
    server_tools_status,
    tools_status,
)


class ItemStatus(BaseModel):
    id: str
    label: str
    status: ToolStatus


class PluginsStatus(BaseModel):
    status: ToolStatus
    plugins: list[ItemStatus]


class ServerStatus(BaseModel):
    id: str
    label: str
    status: ToolStatus
    tools: list[ItemStatus]


class SelectionStatus(BaseModel):
    tool_selection: list[str] | None
    status: ToolStatus
    plugins: PluginsStatus
    servers: list[ServerStatus]


def build_status_tree(selection: ToolSelection, catalog: Catalog) -> SelectionStatus:
    """Resolve the status of every checkbox for a selection.

    Disabled servers are left out since their tools cannot be selected.
    """
    plugins = PluginsStatus(
        status=plugins_status(selection, catalog),
        plugins=[
            ItemStatus(
                id=plugin.name,
                label=plugin.name,
                status=plugin_status(selection, catalog, plugin.name),
            )
            for plugin in catalog.plugins
            if plugin.enabled
        ],
    )

    servers = [
        ServerStatus(
            id=server.id,
            label=server.display_name,
            status=server_tools_status(selection, catalog, server),
            tools=[
                ItemStatus(
                    id=tool.uuid,
                    label=tool.name,
                    status=server_tool_status(selection, catalog, server, tool),
                )
                for tool in server.tools
            ],
        )
        for server in catalog.servers
        if server.enabled
    ]

    return SelectionStatus(
        tool_selection=selection_to_json(selection),
        status=tools_status(selection, catalog),
        plugins=plugins,
        servers=servers,
    )
