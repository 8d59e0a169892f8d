import warnings
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from casual_tools.models.catalog import TOOL_ID_SEPARATOR
from casual_tools.models.mcp_server_config import McpServerConfig
from casual_tools.models.plugin_config import PluginConfig
from casual_tools.models.selection import ALL_TOOLS, PersistedToolSelection


class SessionConfig(BaseModel):
    """An agent or chat session and the tools it may call.

    ``tool_selection`` is persisted as ``null`` (every tool, including tools
    added later) or as an explicit list of tool ids.
    """

    description: str = Field(default="", description="Human-readable description")
    tool_selection: PersistedToolSelection = Field(
        default=ALL_TOOLS,
        description="Tools enabled for this session",
    )


class Config(BaseModel):
    plugins: dict[str, PluginConfig] = Field(default_factory=dict)
    servers: dict[str, McpServerConfig] = Field(default_factory=dict)
    sessions: dict[str, SessionConfig] = Field(default_factory=dict)

    @field_validator("servers", mode="after")
    @classmethod
    def check_server_ids(cls, servers: dict[str, McpServerConfig]) -> dict[str, McpServerConfig]:
        for server_id in servers:
            if TOOL_ID_SEPARATOR in server_id:
                raise ValueError(
                    f"Server id '{server_id}' must not contain '{TOOL_ID_SEPARATOR}'"
                )
        return servers

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_config(cls, data: Any) -> Any:
        """Auto-migrate old-style sessions that stored their selection under ``tools``."""
        if not isinstance(data, dict):
            return data

        sessions = data.get("sessions", {})
        if not isinstance(sessions, dict) or not sessions:
            return data

        has_legacy = any(
            isinstance(s, dict) and "tools" in s and "tool_selection" not in s
            for s in sessions.values()
        )
        if not has_legacy:
            return data

        warnings.warn(
            "Config uses legacy 'tools' key in sessions. Rename it to 'tool_selection'.",
            DeprecationWarning,
            stacklevel=2,
        )

        new_sessions: dict[str, Any] = {}
        for name, session in sessions.items():
            if isinstance(session, dict) and "tools" in session and "tool_selection" not in session:
                session = dict(session)
                session["tool_selection"] = session.pop("tools")
            new_sessions[name] = session

        data["sessions"] = new_sessions
        return data
