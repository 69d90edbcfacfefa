"""Storable, behavior-free shapes for mind maps.

This is the layout written through the persistence boundary. It mirrors what
the graph-rendering layer works with (node ``data`` envelope, camelCase edge
keys), so every key is optional except the ids.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PersistedPosition(BaseModel):
    x: float = 0.0
    y: float = 0.0


class PersistedNode(BaseModel):
    """a node as stored."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str = "custom"
    position: PersistedPosition = Field(default_factory=PersistedPosition)
    data: dict[str, Any] = Field(default_factory=dict)


class PersistedEdge(BaseModel):
    """an edge as stored."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    source: str
    target: str
    source_handle: str | None = Field(None, alias="sourceHandle")
    target_handle: str | None = Field(None, alias="targetHandle")
    type: str | None = None
    animated: bool | None = None
    reconnectable: bool | None = None
    interaction_width: float | None = Field(None, alias="interactionWidth")
    style: dict[str, Any] | None = None


class PersistedGraph(BaseModel):
    """the payload written to and read from storage."""

    title: str = ""
    nodes: list[PersistedNode] = Field(default_factory=list)
    edges: list[PersistedEdge] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the stored (camelCase) key names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GraphSummary(BaseModel):
    """list-screen view of a stored mind map."""

    graph_id: str
    title: str
    description: str | None = None
    is_active: bool = True
    created_at: str
    updated_at: str
