from .catalog import Catalog, McpServerWithTools, McpToolUnique, PluginInfo, unique_tool_id
from .config import Config, SessionConfig
from .mcp_server_config import (
    McpServerConfig,
    RemoteServerConfig,
    StdioServerConfig,
)
from .plugin_config import PluginConfig
from .selection import (
    ALL_TOOLS,
    NO_TOOLS,
    AllTools,
    ExplicitTools,
    ToolSelection,
    explicit,
    selection_from_json,
    selection_to_json,
)

__all__ = [
    "ALL_TOOLS",
    "NO_TOOLS",
    "AllTools",
    "ExplicitTools",
    "ToolSelection",
    "explicit",
    "selection_from_json",
    "selection_to_json",
    "Catalog",
    "PluginInfo",
    "McpServerWithTools",
    "McpToolUnique",
    "unique_tool_id",
    "Config",
    "SessionConfig",
    "PluginConfig",
    "McpServerConfig",
    "StdioServerConfig",
    "RemoteServerConfig",
]
