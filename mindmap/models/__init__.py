"""Core data models for the mind-map editor."""

from mindmap.models.defaults import (
    DEFAULT_GRAPH_TITLE,
    DEFAULT_NODE_TITLE,
    default_graph,
    default_nodes,
)
from mindmap.models.graph import (
    HANDLE_IDS,
    OPTION_FIELD_TYPES,
    Edge,
    EdgeStyle,
    Field,
    FieldOption,
    FieldType,
    Graph,
    Node,
    Position,
    is_known_field_type,
)
from mindmap.models.persisted import (
    GraphSummary,
    PersistedEdge,
    PersistedGraph,
    PersistedNode,
    PersistedPosition,
)

__all__ = [
    # Live graph
    "Edge",
    "EdgeStyle",
    "Field",
    "FieldOption",
    "FieldType",
    "Graph",
    "Node",
    "Position",
    "HANDLE_IDS",
    "OPTION_FIELD_TYPES",
    "is_known_field_type",
    # Storage shapes
    "GraphSummary",
    "PersistedEdge",
    "PersistedGraph",
    "PersistedNode",
    "PersistedPosition",
    # Seed content
    "DEFAULT_GRAPH_TITLE",
    "DEFAULT_NODE_TITLE",
    "default_graph",
    "default_nodes",
]
