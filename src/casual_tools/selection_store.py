"""Persistence of session tool selections.

The store owns the configuration document. Every write re-reads the document,
rebuilds the catalog, applies one toggle operation and writes the result back,
all under a lock so concurrent callers cannot interleave their updates.
"""

import asyncio
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from casual_tools.catalog import ConfigPluginRegistry, ServerRegistry, resolve_catalog
from casual_tools.logging import get_logger
from casual_tools.models.catalog import Catalog
from casual_tools.models.config import Config, SessionConfig
from casual_tools.models.selection import ToolSelection, selection_from_json, selection_to_json
from casual_tools.server_registry import McpServerRegistry
from casual_tools.tool_cache import ToolCache
from casual_tools.tool_filter import unknown_tool_ids
from casual_tools.tool_selection import validate_tool_selection
from casual_tools.utils import load_config

logger = get_logger("selection_store")

SelectionUpdate = Callable[[ToolSelection, Catalog], ToolSelection]


class SessionNotFoundError(KeyError):
    """Raised when a session name is not in the configuration."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Session '{self.name}' not found"


class SessionExistsError(ValueError):
    """Raised when creating a session whose name is already taken."""


class SelectionStore:
    """Reads and updates session tool selections in a config file.

    Args:
        config_path: Path of the JSON configuration document
        server_registry_factory: Builds the server registry for a freshly
            loaded config. Defaults to querying the configured MCP servers.
        tool_cache: Tool listings shared by every catalog the store builds,
            so servers are only asked again once their entry expires.
    """

    def __init__(
        self,
        config_path: str | Path,
        server_registry_factory: Callable[[Config], ServerRegistry] | None = None,
        tool_cache: ToolCache | None = None,
    ):
        self._config_path = Path(config_path)
        self._tool_cache = tool_cache or ToolCache()
        self._server_registry_factory = server_registry_factory or self._mcp_registry
        self._lock = asyncio.Lock()

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def tool_cache(self) -> ToolCache:
        return self._tool_cache

    def _mcp_registry(self, config: Config) -> McpServerRegistry:
        return McpServerRegistry(config, tool_cache=self._tool_cache)

    def load(self) -> Config:
        return load_config(self._config_path)

    async def catalog(self, config: Config | None = None) -> Catalog:
        """Build a fresh catalog from the current configuration."""
        if config is None:
            config = self.load()
        return await resolve_catalog(
            ConfigPluginRegistry(config),
            self._server_registry_factory(config),
        )

    def sessions(self) -> dict[str, SessionConfig]:
        return self.load().sessions

    def get_session(self, name: str) -> SessionConfig:
        sessions = self.sessions()
        if name not in sessions:
            raise SessionNotFoundError(name)
        return sessions[name]

    def get_selection(self, name: str) -> ToolSelection:
        return self.get_session(name).tool_selection

    def _read_raw(self) -> dict[str, Any]:
        with self._config_path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _write_raw(self, raw: dict[str, Any]) -> None:
        with self._config_path.open("w", encoding="utf-8") as f:
            json.dump(raw, f, indent=4)

    async def create_session(self, name: str, description: str = "") -> SessionConfig:
        """Add a session with every tool enabled."""
        async with self._lock:
            raw = self._read_raw()
            sessions = raw.setdefault("sessions", {})
            if name in sessions:
                raise SessionExistsError(f"Session '{name}' already exists")

            session = SessionConfig(description=description)
            sessions[name] = session.model_dump(mode="json")
            self._write_raw(raw)

        logger.info(f"Created session '{name}'")
        return session

    async def delete_session(self, name: str) -> None:
        async with self._lock:
            raw = self._read_raw()
            sessions = raw.get("sessions", {})
            if name not in sessions:
                raise SessionNotFoundError(name)

            del sessions[name]
            if not sessions:
                raw.pop("sessions", None)
            self._write_raw(raw)

        logger.info(f"Deleted session '{name}'")

    async def update(
        self, name: str, update: SelectionUpdate
    ) -> tuple[ToolSelection, Catalog]:
        """Apply a toggle operation to a session's selection and persist the result.

        The configuration and the catalog are both re-read under the lock, so
        the operation always runs against the current catalog.

        Returns:
            The stored selection and the catalog it was canonicalized against
        """
        async with self._lock:
            config = self.load()
            if name not in config.sessions:
                raise SessionNotFoundError(name)

            catalog = await self.catalog(config)
            current = config.sessions[name].tool_selection
            selection = validate_tool_selection(update(current, catalog), catalog)

            raw = self._read_raw()
            raw["sessions"][name]["tool_selection"] = selection_to_json(selection)
            # Persisted sessions may still use the legacy key
            raw["sessions"][name].pop("tools", None)
            self._write_raw(raw)

        logger.info(f"Updated tool selection of session '{name}'")
        return selection, catalog

    async def import_selection(self, name: str, value: Any) -> tuple[ToolSelection, Catalog]:
        """Replace a session's selection with a persisted value from elsewhere.

        The value is parsed and canonicalized against the current catalog.

        Raises:
            ValueError: If the value is not null or a list of tool ids
        """
        imported = selection_from_json(value)

        def replace(_current: ToolSelection, catalog: Catalog) -> ToolSelection:
            unknown = unknown_tool_ids(imported, catalog)
            if unknown:
                logger.warning(
                    f"Imported selection for '{name}' references {len(unknown)} "
                    f"tools not in the catalog: {unknown}"
                )
            return imported

        return await self.update(name, replace)
