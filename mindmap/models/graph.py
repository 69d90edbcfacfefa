"""Data model for the live mind-map graph.

Nodes carry a user-defined form (an ordered list of fields); edges join two
nodes through named handles. These models hold data only, never behavior.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class FieldType(str, Enum):
    """Field types understood by the editor."""

    text = "text"
    textarea = "textarea"
    number = "number"
    select = "select"
    multiselect = "multiselect"
    checkbox = "checkbox"
    color = "color"


# field types whose options list must be non-empty
OPTION_FIELD_TYPES = {FieldType.select.value, FieldType.multiselect.value}

# handle ids defined by the node template
HANDLE_IDS = (
    "l-target",
    "l-source",
    "t-target",
    "t-source",
    "b-source",
    "b-target",
    "r-source",
    "r-target",
)

DEFAULT_EDGE_STROKE = "#8b5cf6"
REMOVAL_EDGE_STROKE = "#ef4444"


def is_known_field_type(value: str) -> bool:
    return value in FieldType._value2member_map_


class FieldOption(BaseModel):
    """a choice offered by a select/multiselect field."""

    label: str
    value: str


class Field(BaseModel):
    """a single entry in a node's form.

    ``type`` is kept as a plain string so that types this version does not
    know about survive a load/save cycle untouched.
    """

    model_config = ConfigDict(extra="allow")

    id: str  # unique within the owning node
    type: str = FieldType.text.value
    label: str = ""
    value: Any = None
    options: list[FieldOption] | None = None

    @property
    def has_options(self) -> bool:
        return self.type in OPTION_FIELD_TYPES


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class Node(BaseModel):
    """a node in the mind map."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str = "custom"
    position: Position = PydanticField(default_factory=Position)
    title: str = ""
    color: str = "#000000"
    fields: list[Field] = PydanticField(default_factory=list)

    def field(self, field_id: str) -> Field | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


class EdgeStyle(BaseModel):
    """presentation hints for an edge."""

    model_config = ConfigDict(extra="allow")

    stroke: str = DEFAULT_EDGE_STROKE
    stroke_width: float = 2


class Edge(BaseModel):
    """a directed edge between two node handles."""

    model_config = ConfigDict(extra="allow")

    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None

    # presentation only
    type: str = "smoothstep"
    animated: bool = True
    reconnectable: bool = True
    interaction_width: float = 25
    style: EdgeStyle = PydanticField(default_factory=EdgeStyle)

    def pair(self) -> frozenset[str]:
        """Unordered {source, target} identity used for duplicate detection."""
        return frozenset((self.source, self.target))

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def touches_handle(self, node_id: str, handle_id: str) -> bool:
        """True when this edge is attached to ``handle_id`` on ``node_id``."""
        return (self.source == node_id and self.source_handle == handle_id) or (
            self.target == node_id and self.target_handle == handle_id
        )

    def links(
        self,
        first: tuple[str, str],
        second: tuple[str, str],
    ) -> bool:
        """True when this edge joins two (node_id, handle_id) anchors, either direction."""
        src = (self.source, self.source_handle)
        tgt = (self.target, self.target_handle)
        return (src == first and tgt == second) or (src == second and tgt == first)


class Graph(BaseModel):
    """the full mind map as held in memory."""

    title: str = ""
    nodes: list[Node] = PydanticField(default_factory=list)
    edges: list[Edge] = PydanticField(default_factory=list)
