"""Tool selection models.

A session's tool selection is either the ``AllTools`` sentinel, meaning every
tool currently in the catalog (including tools that show up later), or an
``ExplicitTools`` allow-list of tool ids. The persisted form of a selection is
JSON ``null`` for ``AllTools`` and a JSON array of strings otherwise.
"""

from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    PrivateAttr,
    field_validator,
)


class AllTools(BaseModel):
    """Every tool in the live catalog is enabled."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["all"] = "all"


class ExplicitTools(BaseModel):
    """Exactly the listed tool ids are enabled, whatever the catalog contains."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["explicit"] = "explicit"
    tool_ids: tuple[str, ...] = Field(default=(), description="Enabled tool ids")

    _id_set: frozenset[str] = PrivateAttr(default_factory=frozenset)

    @field_validator("tool_ids", mode="after")
    @classmethod
    def drop_duplicates(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(value))

    def model_post_init(self, context: Any, /) -> None:
        # Status queries test membership once per catalog tool
        self._id_set = frozenset(self.tool_ids)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._id_set


ToolSelection = AllTools | ExplicitTools

ALL_TOOLS = AllTools()
NO_TOOLS = ExplicitTools()


def explicit(tool_ids: Any) -> ExplicitTools:
    """Build an explicit selection from any iterable of tool ids."""
    return ExplicitTools(tool_ids=tuple(tool_ids))


def selection_from_json(value: Any) -> ToolSelection:
    """Parse the persisted form of a selection.

    Raises:
        ValueError: If the value is neither null nor a list of strings
    """
    if value is None:
        return ALL_TOOLS
    if isinstance(value, (AllTools, ExplicitTools)):
        return value
    if isinstance(value, (list, tuple)):
        if not all(isinstance(item, str) for item in value):
            raise ValueError("Tool selection must only contain tool id strings")
        return explicit(value)
    raise ValueError(
        f"Tool selection must be null or a list of tool ids, got {type(value).__name__}"
    )


def selection_to_json(selection: ToolSelection) -> list[str] | None:
    """Return the persisted form of a selection."""
    if isinstance(selection, AllTools):
        return None
    return list(selection.tool_ids)


# Field type for configuration documents: loads from null/list, dumps back to null/list
PersistedToolSelection = Annotated[
    ToolSelection,
    PlainValidator(selection_from_json, json_schema_input_type=list[str] | None),
    PlainSerializer(selection_to_json, return_type=list[str] | None),
]
