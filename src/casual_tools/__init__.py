from . import models
from .catalog import ConfigPluginRegistry, describe_catalog, resolve_catalog
from .selection_store import SelectionStore
from .server_registry import McpServerRegistry, StaticServerRegistry
from .tool_cache import ToolCache
from .utils import load_config, load_mcp_client

__all__ = [
    "ConfigPluginRegistry",
    "McpServerRegistry",
    "StaticServerRegistry",
    "SelectionStore",
    "ToolCache",
    "describe_catalog",
    "load_config",
    "load_mcp_client",
    "resolve_catalog",
    "models",
]
