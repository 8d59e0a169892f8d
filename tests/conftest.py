"""Shared pytest fixtures."""

import json
from unittest.mock import AsyncMock

import pytest

from casual_tools.models.catalog import Catalog, McpServerWithTools, McpToolUnique, PluginInfo
from casual_tools.selection_store import SelectionStore
from casual_tools.server_registry import StaticServerRegistry


def make_server(server_id: str, *tool_ids: str, enabled: bool = True) -> McpServerWithTools:
    return McpServerWithTools(
        id=server_id,
        enabled=enabled,
        tools=tuple(
            McpToolUnique(uuid=tool_id, name=tool_id.split("_")[0], description=f"{tool_id} tool")
            for tool_id in tool_ids
        ),
    )


SEARCH = PluginInfo(name="search", multi=False, tool_ids=("web_search",))
FILESYSTEM = PluginInfo(
    name="filesystem",
    multi=True,
    tool_ids=("filesystem_list", "filesystem_read", "filesystem_write"),
)


@pytest.fixture
def server1() -> McpServerWithTools:
    return make_server("1", "tool1_1", "tool2_1")


@pytest.fixture
def server2() -> McpServerWithTools:
    return make_server("2", "tool3_2", "tool4_2")


@pytest.fixture
def catalog(server1, server2) -> Catalog:
    """Two plugins and two servers with two tools each."""
    return Catalog(plugins=(SEARCH, FILESYSTEM), servers=(server1, server2))


@pytest.fixture
def small_catalog(server1) -> Catalog:
    """Two plugins and a single server."""
    return Catalog(plugins=(SEARCH, FILESYSTEM), servers=(server1,))


@pytest.fixture
def mock_client():
    """Create a mock MCP client with async context manager support."""
    client = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client


@pytest.fixture
def sample_config_data():
    """Sample configuration data for tests."""
    return {
        "plugins": {
            "search": {"tool_name": "web_search"},
            "filesystem": {"prefix": "filesystem_", "tools": ["list", "read", "write"]},
            "python": {"enabled": False},
        },
        "servers": {
            "1": {"command": "python", "args": ["-m", "server_one"]},
        },
        "sessions": {
            "research": {"description": "Research agent", "tool_selection": None},
            "writer": {"description": "Writer", "tool_selection": ["web_search"]},
        },
    }


@pytest.fixture
def config_path(tmp_path, sample_config_data):
    path = tmp_path / "casual_tools_config.json"
    path.write_text(json.dumps(sample_config_data), encoding="utf-8")
    return path


@pytest.fixture
def store(config_path, server1):
    """Selection store whose server registry serves ``server1`` without network access."""
    return SelectionStore(config_path, lambda config: StaticServerRegistry([server1]))
