"""Named toggle targets.

Outer surfaces (the CLI and the HTTP API) describe a user interaction as a
``ToggleRequest``; ``build_update`` turns it into the matching toggle
operation, ready to hand to ``SelectionStore.update``.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from casual_tools.models.catalog import Catalog, McpServerWithTools
from casual_tools.models.selection import ToolSelection
from casual_tools.selection_store import SelectionUpdate
from casual_tools.tool_selection import (
    handle_all_plugins_toggle,
    handle_all_server_tools_toggle,
    handle_plugin_toggle,
    handle_select_all_plugins,
    handle_select_all_server_tools,
    handle_select_all_tools,
    handle_server_tool_toggle,
    handle_unselect_all_plugins,
    handle_unselect_all_server_tools,
    handle_unselect_all_tools,
    validate_tool_selection,
)

ToggleTarget = Literal[
    "plugin",
    "all_plugins",
    "server_tool",
    "server",
    "select_all",
    "unselect_all",
    "select_plugins",
    "unselect_plugins",
    "select_server",
    "unselect_server",
]

_NEEDS_PLUGIN = {"plugin"}
_NEEDS_SERVER = {"server_tool", "server", "select_server", "unselect_server"}


class ToggleRequest(BaseModel):
    """A single interaction with the tool checkboxes.

    ``visible`` carries the ids (plugin names for the plugin targets) shown
    by a filtered view; ``None`` means no filter is active.
    """

    target: ToggleTarget
    plugin: str | None = Field(default=None, description="Plugin name")
    server: str | None = Field(default=None, description="Server id")
    tool: str | None = Field(default=None, description="Server tool selection id")
    visible: list[str] | None = Field(default=None, description="Ids shown by the active filter")

    @model_validator(mode="after")
    def check_target_arguments(self) -> "ToggleRequest":
        if self.target in _NEEDS_PLUGIN and not self.plugin:
            raise ValueError(f"Target '{self.target}' requires a plugin name")
        if self.target in _NEEDS_SERVER and not self.server:
            raise ValueError(f"Target '{self.target}' requires a server id")
        if self.target == "server_tool" and not self.tool:
            raise ValueError("Target 'server_tool' requires a tool id")
        return self


def _server(catalog: Catalog, server_id: str) -> McpServerWithTools:
    # An unknown server has no tools, which turns every operation on it into a no-op
    return catalog.get_server(server_id) or McpServerWithTools(id=server_id, enabled=False)


def build_update(request: ToggleRequest) -> SelectionUpdate:
    """Return the toggle operation a request describes."""

    def update(selection: ToolSelection, catalog: Catalog) -> ToolSelection:
        target = request.target
        visible = request.visible

        if target == "plugin":
            return handle_plugin_toggle(selection, catalog, request.plugin or "")
        if target == "all_plugins":
            return handle_all_plugins_toggle(selection, catalog)
        if target == "select_all":
            return handle_select_all_tools(catalog, visible, selection)
        if target == "unselect_all":
            return handle_unselect_all_tools(catalog, visible, selection)
        if target == "select_plugins":
            return handle_select_all_plugins(selection, catalog, visible)
        if target == "unselect_plugins":
            return handle_unselect_all_plugins(selection, catalog, visible)

        server = _server(catalog, request.server or "")
        if target == "server":
            return handle_all_server_tools_toggle(selection, catalog, server)
        if target == "select_server":
            return handle_select_all_server_tools(selection, catalog, server, visible)
        if target == "unselect_server":
            return handle_unselect_all_server_tools(selection, catalog, server, visible)

        tool = next((t for t in server.tools if t.uuid == request.tool), None)
        if tool is None:
            return validate_tool_selection(selection, catalog)
        return handle_server_tool_toggle(selection, catalog, server, tool)

    return update
