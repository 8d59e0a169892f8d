"""Toggle operations over a session's tool selection.

Every operation takes the current selection and a catalog snapshot and
returns a new selection; inputs are never modified. Results always go
through ``validate_tool_selection`` so that a list naming every tool in the
catalog is stored as ``AllTools`` again.

Removing tools from ``AllTools`` first expands it into the catalog's concrete
tool list. Surviving ids keep their order and newly added ids are appended in
catalog order.

The ``visible_*`` arguments carry what a filtered view currently shows. When
given, an operation only touches the visible part of its scope and leaves
everything else as it was. Names and ids the catalog does not know match
nothing.
"""

from collections.abc import Iterable, Sequence

from casual_tools.logging import get_logger
from casual_tools.models.catalog import Catalog, McpServerWithTools, McpToolUnique
from casual_tools.models.selection import (
    ALL_TOOLS,
    NO_TOOLS,
    AllTools,
    ToolSelection,
    explicit,
)
from casual_tools.tool_status import (
    plugin_status,
    plugins_status,
    server_tool_status,
    server_tools_status,
)

logger = get_logger("tool_selection")


def validate_tool_selection(selection: ToolSelection, catalog: Catalog) -> ToolSelection:
    """Return the canonical form of a selection.

    An explicit list holding exactly the catalog's tools (in any order)
    becomes ``AllTools``. Against an empty catalog that includes the empty
    list, so a session emptied while no tools are available keeps following
    the catalog. Anything else is returned as is.
    """
    if isinstance(selection, AllTools):
        return selection

    if set(selection.tool_ids) == set(catalog.all_tool_ids):
        return ALL_TOOLS

    return selection


def _materialize(selection: ToolSelection, catalog: Catalog) -> list[str]:
    if isinstance(selection, AllTools):
        return list(catalog.all_tool_ids)
    return list(selection.tool_ids)


def _add(tool_ids: Sequence[str], added: Iterable[str]) -> list[str]:
    result = list(tool_ids)
    present = set(result)
    for tool_id in added:
        if tool_id not in present:
            result.append(tool_id)
            present.add(tool_id)
    return result


def _remove(tool_ids: Sequence[str], removed: Iterable[str]) -> list[str]:
    removed = set(removed)
    return [tool_id for tool_id in tool_ids if tool_id not in removed]


def _visible(candidates: Iterable[str], visible: Iterable[str] | None) -> list[str]:
    if visible is None:
        return list(candidates)
    visible = set(visible)
    return [candidate for candidate in candidates if candidate in visible]


def _plugin_tool_ids(catalog: Catalog, plugin_names: Iterable[str] | None = None) -> list[str]:
    plugins = [plugin for plugin in catalog.plugins if plugin.enabled]
    names = _visible((plugin.name for plugin in plugins), plugin_names)
    tool_ids: list[str] = []
    for plugin in plugins:
        if plugin.name in names:
            tool_ids = _add(tool_ids, plugin.tool_ids)
    return tool_ids


def _server_tool_ids(catalog: Catalog, server: McpServerWithTools) -> tuple[str, ...]:
    return (catalog.get_server(server.id) or server).tool_ids


def _finish(operation: str, tool_ids: Sequence[str], catalog: Catalog) -> ToolSelection:
    result = validate_tool_selection(explicit(tool_ids), catalog)
    if isinstance(result, AllTools):
        logger.debug(f"{operation}: every catalog tool selected")
    else:
        logger.debug(f"{operation}: {len(result.tool_ids)} tools selected")
    return result


def handle_plugin_toggle(
    selection: ToolSelection,
    catalog: Catalog,
    plugin_name: str,
) -> ToolSelection:
    """Switch one plugin on or off.

    Switching off a multi-tool plugin removes all of its tools, even when
    only some of them were selected.
    """
    plugin = catalog.get_plugin(plugin_name)
    if plugin is None:
        logger.debug(f"Ignoring toggle of unknown or disabled plugin '{plugin_name}'")
        return validate_tool_selection(selection, catalog)

    current = _materialize(selection, catalog)
    if plugin_status(selection, catalog, plugin_name) == "all":
        tool_ids = _remove(current, plugin.tool_ids)
    else:
        tool_ids = _add(current, plugin.tool_ids)

    return _finish(f"toggle plugin '{plugin_name}'", tool_ids, catalog)


def handle_all_plugins_toggle(selection: ToolSelection, catalog: Catalog) -> ToolSelection:
    """Switch every plugin off when all are on, otherwise switch them all on."""
    current = _materialize(selection, catalog)
    if plugins_status(selection, catalog) == "all":
        tool_ids = _remove(current, catalog.plugin_tool_ids)
    else:
        tool_ids = _add(current, catalog.plugin_tool_ids)

    return _finish("toggle all plugins", tool_ids, catalog)


def handle_server_tool_toggle(
    selection: ToolSelection,
    catalog: Catalog,
    server: McpServerWithTools,
    tool: McpToolUnique,
) -> ToolSelection:
    """Switch a single server tool on or off."""
    current = _materialize(selection, catalog)
    if server_tool_status(selection, catalog, server, tool) == "all":
        tool_ids = _remove(current, [tool.uuid])
    else:
        tool_ids = _add(current, [tool.uuid])

    return _finish(f"toggle tool '{tool.uuid}'", tool_ids, catalog)


def handle_all_server_tools_toggle(
    selection: ToolSelection,
    catalog: Catalog,
    server: McpServerWithTools,
) -> ToolSelection:
    """Switch off a server's tools when all are on, otherwise switch them all on."""
    server_ids = _server_tool_ids(catalog, server)
    current = _materialize(selection, catalog)
    if server_tools_status(selection, catalog, server) == "all":
        tool_ids = _remove(current, server_ids)
    else:
        tool_ids = _add(current, server_ids)

    return _finish(f"toggle server '{server.id}'", tool_ids, catalog)


def handle_select_all_tools(
    catalog: Catalog,
    visible_tool_ids: Iterable[str] | None = None,
    selection: ToolSelection | None = None,
) -> ToolSelection:
    """Select every tool, or only the visible ones.

    Without a filter the result is ``AllTools``. With a filter the visible
    tools are added to ``selection``, which counts as empty when omitted.
    """
    if visible_tool_ids is None:
        logger.debug("select all tools: every catalog tool selected")
        return ALL_TOOLS

    base = NO_TOOLS if selection is None else selection
    visible = _visible(catalog.all_tool_ids, visible_tool_ids)
    return _finish("select visible tools", _add(_materialize(base, catalog), visible), catalog)


def handle_unselect_all_tools(
    catalog: Catalog,
    visible_tool_ids: Iterable[str] | None = None,
    selection: ToolSelection | None = None,
) -> ToolSelection:
    """Unselect every tool, or only the visible ones.

    Without a filter the result is the empty selection. With a filter the
    visible tools are removed from ``selection``, which counts as
    ``AllTools`` when omitted.
    """
    if visible_tool_ids is None:
        return _finish("unselect all tools", [], catalog)

    base = ALL_TOOLS if selection is None else selection
    tool_ids = _remove(_materialize(base, catalog), visible_tool_ids)
    return _finish("unselect visible tools", tool_ids, catalog)


def handle_select_all_plugins(
    selection: ToolSelection,
    catalog: Catalog,
    visible_plugin_names: Iterable[str] | None = None,
) -> ToolSelection:
    """Add the tools of every plugin, or of the visible plugins only."""
    plugin_ids = _plugin_tool_ids(catalog, visible_plugin_names)
    tool_ids = _add(_materialize(selection, catalog), plugin_ids)
    return _finish("select plugins", tool_ids, catalog)


def handle_unselect_all_plugins(
    selection: ToolSelection,
    catalog: Catalog,
    visible_plugin_names: Iterable[str] | None = None,
) -> ToolSelection:
    """Remove the tools of every plugin, or of the visible plugins only."""
    plugin_ids = _plugin_tool_ids(catalog, visible_plugin_names)
    tool_ids = _remove(_materialize(selection, catalog), plugin_ids)
    return _finish("unselect plugins", tool_ids, catalog)


def handle_select_all_server_tools(
    selection: ToolSelection,
    catalog: Catalog,
    server: McpServerWithTools,
    visible_tool_ids: Iterable[str] | None = None,
) -> ToolSelection:
    """Add every tool of one server, or only its visible tools."""
    server_ids = _visible(_server_tool_ids(catalog, server), visible_tool_ids)
    tool_ids = _add(_materialize(selection, catalog), server_ids)
    return _finish(f"select server '{server.id}'", tool_ids, catalog)


def handle_unselect_all_server_tools(
    selection: ToolSelection,
    catalog: Catalog,
    server: McpServerWithTools,
    visible_tool_ids: Iterable[str] | None = None,
) -> ToolSelection:
    """Remove every tool of one server, or only its visible tools."""
    server_ids = _visible(_server_tool_ids(catalog, server), visible_tool_ids)
    tool_ids = _remove(_materialize(selection, catalog), server_ids)
    return _finish(f"unselect server '{server.id}'", tool_ids, catalog)
