"""Resolve a session's tool selection into the tools the LLM may call."""

from collections.abc import Sequence

import mcp

from casual_tools.logging import get_logger
from casual_tools.models.catalog import Catalog
from casual_tools.models.selection import AllTools, ToolSelection

logger = get_logger("tool_filter")


def enabled_tool_ids(selection: ToolSelection, catalog: Catalog) -> list[str]:
    """Return the catalog tools a selection enables, in catalog order.

    Ids that are selected but no longer in the catalog (a disabled plugin, a
    server that stopped exposing a tool) are not callable and are left out.
    """
    if isinstance(selection, AllTools):
        return list(catalog.all_tool_ids)
    return [tool_id for tool_id in catalog.all_tool_ids if tool_id in selection]


def unknown_tool_ids(selection: ToolSelection, catalog: Catalog) -> list[str]:
    """Return the selected ids the catalog does not know about."""
    if isinstance(selection, AllTools):
        return []
    known = set(catalog.all_tool_ids)
    return [tool_id for tool_id in selection.tool_ids if tool_id not in known]


def filter_tools_by_selection(
    tools: Sequence[mcp.Tool],
    selection: ToolSelection,
    catalog: Catalog,
) -> list[mcp.Tool]:
    """Filter MCP tools, named by their selection id, down to the enabled ones.

    Args:
        tools: Tools as offered to the LLM, ``tool.name`` being the selection id
        selection: The session's tool selection
        catalog: Catalog snapshot the selection is resolved against

    Returns:
        The tools the session may call, in their original order
    """
    enabled = set(enabled_tool_ids(selection, catalog))
    filtered = [tool for tool in tools if tool.name in enabled]

    logger.debug(f"Filtered {len(tools)} tools to {len(filtered)} using tool selection")

    return filtered
