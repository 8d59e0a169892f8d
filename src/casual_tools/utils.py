import json
import os
from pathlib import Path
from typing import Any

from fastmcp import Client
from pydantic import ValidationError

from casual_tools.logging import get_logger
from casual_tools.models.config import Config
from casual_tools.models.mcp_server_config import McpServerConfig

logger = get_logger("utils")

DEFAULT_CONFIG_PATH = "casual_tools_config.json"


def default_config_path() -> Path:
    """Return the config path, honouring the CASUAL_TOOLS_CONFIG environment variable."""
    return Path(os.getenv("CASUAL_TOOLS_CONFIG", DEFAULT_CONFIG_PATH))


def load_config(path: str | Path) -> Config:
    """Load and validate a configuration document.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON
        ValidationError: If the document does not match the config schema
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Config file {path} is not valid JSON: {e}") from e

    try:
        return Config.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Invalid config file {path}: {e.error_count()} errors")
        raise


def _server_entry(server: McpServerConfig) -> dict[str, Any]:
    return server.model_dump(exclude={"enabled", "label"}, exclude_none=True)


def load_mcp_client(server_id: str, server: McpServerConfig) -> Client[Any]:
    """Create a FastMCP client talking to a single configured server."""
    return Client({"mcpServers": {server_id: _server_entry(server)}})
