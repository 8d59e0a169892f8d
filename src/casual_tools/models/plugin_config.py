"""Built-in plugin configuration model."""

from pydantic import BaseModel, Field


class PluginConfig(BaseModel):
    """Configuration for a built-in plugin.

    A plugin with ``tools`` set is a multi-tool plugin: it contributes one
    tool id per entry, each built as ``prefix + tool``. Otherwise it
    contributes the single id ``tool_name`` (the plugin name by default).

    Example:
        {
            "search": {"tool_name": "web_search"},
            "filesystem": {"prefix": "filesystem_", "tools": ["list", "read"]},
            "python": {"enabled": false}
        }
    """

    enabled: bool = Field(default=True, description="Whether the plugin is available")
    tool_name: str | None = Field(default=None, description="Tool id of a single-tool plugin")
    prefix: str | None = Field(default=None, description="Shared prefix of a multi-tool plugin")
    tools: list[str] | None = Field(default=None, description="Tool suffixes of a multi-tool plugin")

    @property
    def multi(self) -> bool:
        return self.tools is not None

    def tool_ids(self, name: str) -> list[str]:
        """Return the tool ids this plugin contributes when registered as ``name``."""
        if self.tools is None:
            return [self.tool_name or name]
        prefix = self.prefix if self.prefix is not None else f"{name}_"
        return [f"{prefix}{tool}" for tool in self.tools]
