"""Per-node behavior, kept apart from node data.

Stored nodes are plain data. Each live node also needs five callbacks bound
to its own id (delete, edit-open, field-update, title-update, handle-click).
They live in this registry, never on the node, and every callback looks the
node up by id through ``NodeActions`` at call time, so a callback never acts
on a stale copy.

``HandlerRehydrator.rehydrate`` is run after every load and every change that
can add or copy nodes. It only rebinds nodes whose set is missing or bound
to another id; complete sets are left alone, so a second pass changes nothing.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol

logger = logging.getLogger(__name__)

HANDLER_NAMES = ("on_delete", "on_edit", "on_update", "on_title_change", "on_handle_click")


class NodeActions(Protocol):
    """Dispatch layer the callbacks call into."""

    def delete_node(self, node_id: str) -> bool:
        ...

    def open_editor(self, node_id: str) -> bool:
        ...

    def update_field(self, node_id: str, field_id: str, value: Any) -> bool:
        ...

    def update_title(self, node_id: str, title: str) -> bool:
        ...

    def handle_click(self, handle_id: str, node_id: str) -> None:
        ...


@dataclass(frozen=True)
class NodeHandlers:
    """Callbacks for a single node. Any of them may be missing."""

    node_id: str
    on_delete: Callable[[], Any] | None = None
    on_edit: Callable[[], Any] | None = None
    on_update: Callable[[str, Any], Any] | None = None
    on_title_change: Callable[[str], Any] | None = None
    on_handle_click: Callable[[str, str], Any] | None = None

    def is_complete_for(self, node_id: str) -> bool:
        """True when all five callbacks exist and are bound to ``node_id``."""
        if self.node_id != node_id:
            return False
        return all(callable(getattr(self, name)) for name in HANDLER_NAMES)

    def missing(self) -> list[str]:
        return [name for name in HANDLER_NAMES if getattr(self, name) is None]


def bind_handlers(actions: NodeActions, node_id: str) -> NodeHandlers:
    """Fresh callbacks closed over ``node_id``."""
    return NodeHandlers(
        node_id=node_id,
        on_delete=lambda: actions.delete_node(node_id),
        on_edit=lambda: actions.open_editor(node_id),
        on_update=lambda field_id, value: actions.update_field(node_id, field_id, value),
        on_title_change=lambda title: actions.update_title(node_id, title),
        on_handle_click=lambda handle_id, clicked_node_id: actions.handle_click(handle_id, clicked_node_id),
    )


class HandlerRehydrator:
    """Keeps a callback set for every live node id."""

    def __init__(self, actions: NodeActions) -> None:
        self.actions = actions
        self._handlers: dict[str, NodeHandlers] = {}

    def get(self, node_id: str) -> NodeHandlers | None:
        return self._handlers.get(node_id)

    def attach(self, node_id: str, handlers: NodeHandlers) -> None:
        """Register a set produced elsewhere (e.g. copied with a node)."""
        self._handlers[node_id] = handlers

    def needs_hydration(self, node_ids: Iterable[str]) -> bool:
        for node_id in node_ids:
            handlers = self._handlers.get(node_id)
            if handlers is None or not handlers.is_complete_for(node_id):
                return True
        return False

    def rehydrate(self, node_ids: Iterable[str]) -> list[str]:
        """Bind callbacks for nodes that lack a complete set.

        Sets for ids no longer present are dropped. Returns the ids that
        were (re)bound.
        """
        node_ids = list(node_ids)
        rebound = []
        for node_id in node_ids:
            handlers = self._handlers.get(node_id)
            if handlers is not None and handlers.is_complete_for(node_id):
                continue
            self._handlers[node_id] = bind_handlers(self.actions, node_id)
            rebound.append(node_id)

        live = set(node_ids)
        for stale in [node_id for node_id in self._handlers if node_id not in live]:
            del self._handlers[stale]

        if rebound:
            logger.debug("rehydrated %d node(s)", len(rebound))
        return rebound
