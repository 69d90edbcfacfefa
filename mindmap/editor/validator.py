"""Connection rules for user-drawn edges.

A mind map links ideas, not anchors: two nodes may share at most one edge,
whichever handles were used and in whichever direction.
"""

import logging
from dataclasses import dataclass

from mindmap.editor.graph_model import GraphModel
from mindmap.models.graph import Edge, EdgeStyle
from mindmap.utils.identifiers import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "A connection already exists between these two nodes."
SELF_LOOP_MESSAGE = "A node cannot be connected to itself."


class ConnectionRejected(Exception):
    """Raised when a proposed edge breaks a graph rule."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


@dataclass(frozen=True)
class Connection:
    """A proposed edge as reported by the rendering layer."""

    source: str | None
    target: str | None
    source_handle: str | None = None
    target_handle: str | None = None


class ConnectionValidator:
    """Validates and commits user-drawn connections.

    Programmatic restores bypass this class; stored graphs are trusted.
    """

    def __init__(
        self,
        id_generator: IdGenerator | None = None,
        reject_self_loops: bool = False,
    ) -> None:
        """
        Args:
            id_generator: source of edge ids
            reject_self_loops: set when the rendering layer does not already
                block source == target drags
        """
        self.id_generator = id_generator or UuidIdGenerator(prefix="edge-")
        self.reject_self_loops = reject_self_loops

    def find_duplicate(
        self,
        model: GraphModel,
        source: str,
        target: str,
        ignore_edge_id: str | None = None,
    ) -> Edge | None:
        """Return the edge already joining {source, target}, if any."""
        pair = frozenset((source, target))
        for edge in model.edges:
            if edge.id == ignore_edge_id:
                continue
            if edge.pair() == pair:
                return edge
        return None

    def check(
        self,
        model: GraphModel,
        connection: Connection,
        ignore_edge_id: str | None = None,
    ) -> None:
        """Raise ConnectionRejected if ``connection`` may not be committed."""
        if not connection.source or not connection.target:
            raise ConnectionRejected("incomplete", "Connection is missing an endpoint.")
        if self.reject_self_loops and connection.source == connection.target:
            raise ConnectionRejected("self_loop", SELF_LOOP_MESSAGE)
        if self.find_duplicate(model, connection.source, connection.target, ignore_edge_id):
            raise ConnectionRejected("duplicate", DUPLICATE_MESSAGE)

    def connect(self, model: GraphModel, connection: Connection) -> Edge:
        """Validate and append a new edge with default presentation."""
        self.check(model, connection)
        edge = Edge(
            id=self.id_generator(),
            source=connection.source,
            target=connection.target,
            source_handle=connection.source_handle,
            target_handle=connection.target_handle,
            style=EdgeStyle(),
        )
        model.add_edge(edge)
        logger.info("connected %s -> %s (%s)", edge.source, edge.target, edge.id)
        return edge

    def reconnect(
        self,
        model: GraphModel,
        old_edge_id: str,
        connection: Connection,
    ) -> Edge | None:
        """Move an existing edge to new endpoints in place.

        The edge is not compared against itself, so dragging one end to
        another handle of the same node is allowed. Returns None when the
        edge no longer exists.
        """
        if not model.has_edge(old_edge_id):
            logger.debug("reconnect ignored, unknown edge %s", old_edge_id)
            return None
        self.check(model, connection, ignore_edge_id=old_edge_id)
        return model.replace_edge(
            old_edge_id,
            source=connection.source,
            target=connection.target,
            source_handle=connection.source_handle,
            target_handle=connection.target_handle,
        )
