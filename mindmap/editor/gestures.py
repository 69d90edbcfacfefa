"""Handle-click gesture resolution.

A handle is a small anchor shared by many edges, so one click on it means
nothing. Two clicks inside the window do:

- the same handle on the same node twice: disconnect everything attached to
  that (node, handle) anchor;
- two different anchors: disconnect the single edge joining them, if any.

Handles are always matched as (node_id, handle_id); handle ids repeat across
nodes. The pending click is cleared after every resolution, matched or not.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from mindmap.models.graph import Edge

logger = logging.getLogger(__name__)

DEFAULT_CLICK_WINDOW_MS = 300


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingSecondClick:
    handle_id: str
    node_id: str
    clicked_at: float
    deadline: float


GestureState = Idle | AwaitingSecondClick


class GestureKind(str, Enum):
    first_click = "first_click"
    double_click = "double_click"
    pair_click = "pair_click"


@dataclass(frozen=True)
class GestureResolution:
    """Outcome of one handle click."""

    kind: GestureKind
    edge_ids: tuple[str, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.kind != GestureKind.first_click


class GestureResolver:
    """Turns pairs of handle clicks into disconnect intents."""

    def __init__(self, window_ms: float = DEFAULT_CLICK_WINDOW_MS) -> None:
        self.window_ms = window_ms
        self.state: GestureState = Idle()

    def reset(self) -> None:
        self.state = Idle()

    def click(
        self,
        handle_id: str,
        node_id: str,
        now_ms: float,
        edges: Iterable[Edge],
    ) -> GestureResolution:
        """Feed one click; returns which edges (if any) should be removed."""
        state = self.state
        if isinstance(state, Idle) or now_ms >= state.deadline:
            self.state = AwaitingSecondClick(
                handle_id=handle_id,
                node_id=node_id,
                clicked_at=now_ms,
                deadline=now_ms + self.window_ms,
            )
            return GestureResolution(GestureKind.first_click)

        self.state = Idle()

        if state.handle_id == handle_id and state.node_id == node_id:
            marked = edges_on_handle(edges, node_id, handle_id)
            logger.debug("double click on %s/%s marks %d edge(s)", node_id, handle_id, len(marked))
            return GestureResolution(GestureKind.double_click, tuple(e.id for e in marked))

        edge = edge_between(edges, (state.node_id, state.handle_id), (node_id, handle_id))
        logger.debug(
            "pair click %s/%s -> %s/%s marks %s",
            state.node_id, state.handle_id, node_id, handle_id, edge.id if edge else None,
        )
        return GestureResolution(GestureKind.pair_click, (edge.id,) if edge else ())


def edges_on_handle(edges: Iterable[Edge], node_id: str, handle_id: str) -> list[Edge]:
    """Every edge attached to ``handle_id`` on ``node_id``."""
    return [e for e in edges if e.touches_handle(node_id, handle_id)]


def edge_between(
    edges: Iterable[Edge],
    first: tuple[str, str],
    second: tuple[str, str],
) -> Edge | None:
    """The edge joining two (node_id, handle_id) anchors in either direction."""
    for edge in edges:
        if edge.links(first, second):
            return edge
    return None
