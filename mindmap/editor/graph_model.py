"""Authoritative in-memory mind map.

Nodes and edges are kept in id-keyed dicts (insertion order is the display
order). Stored models are never mutated in place: every change swaps in an
updated copy, so anything holding an older ``Node`` keeps a stable snapshot.

Operations that name an unknown id are no-ops and return ``False``/``None``;
the rendering layer can emit stale ids during fast interaction.
"""

import logging
from typing import Any, Iterable

from mindmap.models.graph import Edge, Graph, Node, Position

logger = logging.getLogger(__name__)

# node attributes a data patch may touch
NODE_DATA_KEYS = ("title", "color", "fields")


class GraphModel:
    """Mutable graph of form-bearing nodes and handle-to-handle edges."""

    def __init__(self, graph: Graph | None = None) -> None:
        self.title: str = ""
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        if graph is not None:
            self.replace(graph)

    # --- reads ---

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges.values())

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Edge | None:
        return self._edges.get(edge_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def edges_touching(self, node_id: str) -> list[Edge]:
        return [e for e in self._edges.values() if e.touches(node_id)]

    def to_graph(self) -> Graph:
        """Snapshot of the current state."""
        return Graph(title=self.title, nodes=self.nodes, edges=self.edges)

    # --- whole-graph ---

    def replace(self, graph: Graph) -> None:
        """Swap in a complete graph (used after load)."""
        self.title = graph.title
        self._nodes = {}
        self._edges = {}
        for node in graph.nodes:
            self.add_node(node)
        for edge in graph.edges:
            self.add_edge(edge)

    def clear(self) -> None:
        self.title = ""
        self._nodes.clear()
        self._edges.clear()

    # --- nodes ---

    def add_node(self, node: Node) -> Node:
        """Append a node. A repeated id is a programming error."""
        if node.id in self._nodes:
            raise ValueError(f"Node already exists: {node.id}")
        self._nodes[node.id] = node
        return node

    def update_node_data(self, node_id: str, patch: dict[str, Any]) -> bool:
        """Shallow-merge ``patch`` into a node's title/color/fields.

        ``id`` and ``position`` cannot be changed through a data patch.
        """
        node = self._nodes.get(node_id)
        if node is None:
            logger.debug("update_node_data ignored, unknown node %s", node_id)
            return False

        update = {}
        for key, value in patch.items():
            if key in ("id", "position"):
                continue
            update[key] = value
        if "fields" in update:
            # validate through the model so dicts become Field instances
            update["fields"] = Node(id=node_id, fields=update["fields"]).fields
        self._nodes[node_id] = node.model_copy(update=update)
        return True

    def update_field(self, node_id: str, field_id: str, value: Any) -> bool:
        """Replace one field's value, leaving every other attribute alone."""
        node = self._nodes.get(node_id)
        if node is None or node.field(field_id) is None:
            logger.debug("update_field ignored, unknown %s/%s", node_id, field_id)
            return False

        fields = [
            f.model_copy(update={"value": value}) if f.id == field_id else f
            for f in node.fields
        ]
        self._nodes[node_id] = node.model_copy(update={"fields": fields})
        return True

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        self._nodes[node_id] = node.model_copy(update={"position": Position(x=x, y=y)})
        return True

    def delete_node(self, node_id: str) -> list[Edge]:
        """Remove a node and every edge that references it.

        Returns the edges removed by the cascade.
        """
        if self._nodes.pop(node_id, None) is None:
            logger.debug("delete_node ignored, unknown node %s", node_id)
            return []

        dangling = self.edges_touching(node_id)
        for edge in dangling:
            del self._edges[edge.id]
        return dangling

    # --- edges ---

    def add_edge(self, edge: Edge) -> Edge:
        if edge.id in self._edges:
            raise ValueError(f"Edge already exists: {edge.id}")
        self._edges[edge.id] = edge
        return edge

    def delete_edge(self, edge_id: str) -> Edge | None:
        """Remove an edge. Removing a missing edge is a no-op."""
        return self._edges.pop(edge_id, None)

    def delete_edges(self, edge_ids: Iterable[str]) -> list[Edge]:
        """Remove every listed edge that still exists."""
        removed = []
        for edge_id in edge_ids:
            edge = self._edges.pop(edge_id, None)
            if edge is not None:
                removed.append(edge)
        return removed

    def update_edge(self, edge_id: str, **changes: Any) -> Edge | None:
        edge = self._edges.get(edge_id)
        if edge is None:
            return None
        updated = edge.model_copy(update=changes)
        self._edges[edge_id] = updated
        return updated

    def replace_edge(
        self,
        old_edge_id: str,
        source: str,
        target: str,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> Edge | None:
        """Point an existing edge at new endpoints, keeping its id and position."""
        return self.update_edge(
            old_edge_id,
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle,
        )
