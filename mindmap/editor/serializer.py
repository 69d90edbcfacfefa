"""Conversion between the live graph and its stored form.

``serialize`` drops anything that is behavior (handler keys, callables) and
normalizes edges to endpoints, handles, type and style hints. ``deserialize``
is its inverse; presentation attributes missing from storage fall back to
defaults. Keys this version does not know about are carried through as-is.
"""

import logging
from typing import Any

from mindmap.editor.graph_model import GraphModel
from mindmap.models.graph import DEFAULT_EDGE_STROKE, Edge, EdgeStyle, Field, Graph, Node, Position
from mindmap.models.persisted import PersistedEdge, PersistedGraph, PersistedNode, PersistedPosition

logger = logging.getLogger(__name__)

# behavior keys older clients left inside node data
HANDLER_KEYS = frozenset({
    "onDelete",
    "onEdit",
    "onUpdate",
    "onTitleChange",
    "onHandleClick",
    "onHandleDisconnect",
    "on_delete",
    "on_edit",
    "on_update",
    "on_title_change",
    "on_handle_click",
})

DEFAULT_EDGE_TYPE = "smoothstep"
DEFAULT_INTERACTION_WIDTH = 25
DEFAULT_STROKE_WIDTH = 2


class PayloadError(ValueError):
    """A stored payload is well-formed JSON but cannot become a live graph."""
    pass


def strip_handlers(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` without handler keys or callable values."""
    return {
        key: value
        for key, value in data.items()
        if key not in HANDLER_KEYS and not callable(value)
    }


# --- live -> stored ---


def _dump_field(field: Field) -> dict[str, Any]:
    dumped = strip_handlers(field.model_dump(mode="json"))
    if dumped.get("options") is None:
        dumped.pop("options", None)
    return dumped


def _serialize_node(node: Node) -> PersistedNode:
    data: dict[str, Any] = strip_handlers(dict(node.model_extra or {}))
    data.update(
        title=node.title,
        color=node.color,
        fields=[_dump_field(f) for f in node.fields],
    )
    return PersistedNode(
        id=node.id,
        type=node.type or "custom",
        position=PersistedPosition(x=node.position.x, y=node.position.y),
        data=data,
    )


def _serialize_edge(edge: Edge) -> PersistedEdge:
    style = dict(edge.style.model_extra or {})
    style.update(stroke=edge.style.stroke, strokeWidth=edge.style.stroke_width)
    extra = strip_handlers(dict(edge.model_extra or {}))
    return PersistedEdge(
        id=edge.id,
        source=edge.source,
        target=edge.target,
        source_handle=edge.source_handle,
        target_handle=edge.target_handle,
        type=edge.type,
        animated=edge.animated,
        reconnectable=edge.reconnectable,
        interaction_width=edge.interaction_width,
        style=style,
        **extra,
    )


def serialize(graph: Graph | GraphModel) -> PersistedGraph:
    """Behavior-free, storable copy of ``graph``."""
    if isinstance(graph, GraphModel):
        graph = graph.to_graph()
    return PersistedGraph(
        title=graph.title,
        nodes=[_serialize_node(n) for n in graph.nodes],
        edges=[_serialize_edge(e) for e in graph.edges],
    )


# --- stored -> live ---


def _deserialize_node(stored: PersistedNode) -> Node:
    # top-level extras (measured size, selection flags) are render state and
    # are not restored; unknown keys inside ``data`` are kept
    data = strip_handlers(stored.data)
    title = data.pop("title", None)
    color = data.pop("color", None)
    raw_fields = data.pop("fields", None) or []
    if not isinstance(raw_fields, list) or not all(isinstance(f, dict) for f in raw_fields):
        raise PayloadError(f"node {stored.id}: fields must be a list of objects")
    for reserved in ("id", "type", "position"):
        if reserved in data:
            logger.warning("node %s: ignoring data key %r", stored.id, reserved)
            data.pop(reserved)
    return Node(
        id=stored.id,
        type=stored.type or "custom",
        position=Position(x=stored.position.x, y=stored.position.y),
        title=title or "",
        color=color or "#000000",
        fields=[Field.model_validate(strip_handlers(f)) for f in raw_fields],
        **data,
    )


def _deserialize_edge(stored: PersistedEdge) -> Edge:
    style = dict(stored.style or {})
    # snake_case width from older payloads; the camelCase key wins
    legacy_width = style.pop("stroke_width", None)
    stroke = style.pop("stroke", DEFAULT_EDGE_STROKE)
    stroke_width = style.pop("strokeWidth", DEFAULT_STROKE_WIDTH if legacy_width is None else legacy_width)
    extra = strip_handlers(dict(stored.model_extra or {}))
    return Edge(
        id=stored.id,
        source=stored.source,
        target=stored.target,
        source_handle=stored.source_handle,
        target_handle=stored.target_handle,
        type=stored.type or DEFAULT_EDGE_TYPE,
        animated=True if stored.animated is None else stored.animated,
        reconnectable=True if stored.reconnectable is None else stored.reconnectable,
        interaction_width=(
            DEFAULT_INTERACTION_WIDTH if stored.interaction_width is None else stored.interaction_width
        ),
        style=EdgeStyle(stroke=stroke, stroke_width=stroke_width, **style),
        **extra,
    )


def deserialize(persisted: PersistedGraph | dict[str, Any]) -> Graph:
    """Rebuild a live graph from storage.

    Callers must run a handler rehydration pass before the graph is used.
    Repeated node or edge ids keep their first occurrence. Raises
    ``ValidationError`` or ``PayloadError`` for payloads it cannot rebuild.
    """
    if not isinstance(persisted, PersistedGraph):
        persisted = PersistedGraph.model_validate(persisted)

    nodes: dict[str, Node] = {}
    for stored in persisted.nodes:
        if stored.id in nodes:
            logger.warning("dropping repeated node id %s", stored.id)
            continue
        nodes[stored.id] = _deserialize_node(stored)

    edges: dict[str, Edge] = {}
    for stored in persisted.edges:
        if stored.id in edges:
            logger.warning("dropping repeated edge id %s", stored.id)
            continue
        edges[stored.id] = _deserialize_edge(stored)

    return Graph(title=persisted.title or "", nodes=list(nodes.values()), edges=list(edges.values()))
