"""One open mind-map editor.

``EditorSession`` owns the live ``GraphModel`` and is the dispatch layer the
per-node callbacks call into: every callback names a node id and the session
looks the node up at call time. User-facing failures never escape as
exceptions; they are published as notices on the session's ``EventBus``.

Typical use::

    session = EditorSession(store, owner_id="u1", graph_id="g1")
    await session.load()
    session.connect("1", "2", "r-source", "l-target")
    await session.save()
    session.close()
"""

import logging
import random
from enum import Enum
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from mindmap.adapters.stores import GraphStore, QuotaExceeded, StorageError
from mindmap.config import EditorSettings, get_settings
from mindmap.editor.events import Event, EventBus, EventType, NoticeLevel
from mindmap.editor.gestures import GestureKind, GestureResolver
from mindmap.editor.graph_model import GraphModel
from mindmap.editor.handlers import HandlerRehydrator, NodeHandlers
from mindmap.editor.quota import QuotaGate, limit_message
from mindmap.editor.scheduling import AsyncioScheduler, Scheduler, TimerHandle
from mindmap.editor.schema_builder import SchemaBuilder
from mindmap.editor.serializer import PayloadError, deserialize, serialize
from mindmap.editor.validator import Connection, ConnectionRejected, ConnectionValidator
from mindmap.models.defaults import DEFAULT_GRAPH_TITLE, default_graph
from mindmap.models.graph import REMOVAL_EDGE_STROKE, Edge, EdgeStyle, Node
from mindmap.utils.identifiers import IdGenerator

logger = logging.getLogger(__name__)

DELETE_KEYS = ("Delete", "Backspace")
TEXT_ENTRY_TAGS = ("INPUT", "TEXTAREA")

REMOVAL_STROKE_WIDTH = 3


class SaveOutcome(str, Enum):
    """Result of ``EditorSession.save``."""

    saved = "saved"
    created = "created"
    rejected_in_flight = "rejected_in_flight"
    quota_exceeded = "quota_exceeded"
    failed = "failed"


class EditorSession:
    """State and operations of a single editor instance."""

    def __init__(
        self,
        store: GraphStore,
        owner_id: str,
        graph_id: str | None = None,
        *,
        bus: EventBus | None = None,
        scheduler: Scheduler | None = None,
        settings: EditorSettings | None = None,
        quota: QuotaGate | None = None,
        validator: ConnectionValidator | None = None,
        edge_id_generator: IdGenerator | None = None,
        node_id_generator: IdGenerator | None = None,
        field_id_generator: IdGenerator | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """
        Args:
            store: persistence boundary
            owner_id: account the graph belongs to
            graph_id: id of a stored graph, or None for a new, unsaved one
            bus: event bus shared with UI collaborators (a private one otherwise)
            scheduler: clock and delayed callbacks. Defaults to the running
                asyncio loop, so handle clicks outside a running loop raise
                RuntimeError unless a scheduler is passed.
        """
        settings = settings or get_settings()
        self.store = store
        self.owner_id = owner_id
        self.graph_id = graph_id
        self.bus = bus or EventBus()
        self.scheduler = scheduler or AsyncioScheduler()
        self.quota = quota or QuotaGate(settings.graph_limit)
        self.validator = validator or ConnectionValidator(id_generator=edge_id_generator)
        self.resolver = GestureResolver(settings.click_window_ms)
        self.removal_delay_ms = settings.removal_delay_ms
        self.node_id_generator = node_id_generator
        self.field_id_generator = field_id_generator
        self.rng = rng

        self.model = GraphModel()
        self.handlers = HandlerRehydrator(self)
        self.draft: SchemaBuilder | None = None
        self.selected_edge_id: str | None = None
        # edges flagged by a handle gesture, waiting for the removal delay
        self.marked_edge_ids: set[str] = set()

        self.mounted = True
        self.saving = False
        self.load_failed = False
        self._reconnect_succeeded = True
        self._timers: list[TimerHandle] = []

        if graph_id is None:
            self.model.replace(default_graph())
            self.rehydrate()

    # --- plumbing ---

    def notify(self, level: NoticeLevel, message: str) -> None:
        """Publish a notice unless the editor has been closed."""
        if self.mounted:
            self.bus.notify(level, message)

    def publish(self, event_type: EventType, **data: Any) -> None:
        if self.mounted:
            self.bus.publish(Event(event_type, data))

    def rehydrate(self) -> list[str]:
        return self.handlers.rehydrate(n.id for n in self.model.nodes)

    def node_handlers(self, node_id: str) -> NodeHandlers | None:
        """Callbacks the rendering layer attaches to a node."""
        return self.handlers.get(node_id)

    def _schedule(self, delay_ms: float, callback: Callable[[], None]) -> None:
        handle = None

        def run() -> None:
            if handle in self._timers:
                self._timers.remove(handle)
            callback()

        handle = self.scheduler.call_later(delay_ms, run)
        self._timers.append(handle)

    def close(self) -> None:
        """Unmount: cancel pending timers and stop reporting results.

        A save already in flight is left to finish.
        """
        self.mounted = False
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()
        self.marked_edge_ids.clear()
        self.resolver.reset()
        if self.draft is not None:
            self.draft.cancel()
            self.draft = None

    # --- persistence ---

    async def load(self) -> bool:
        """Replace the graph with the stored one.

        On failure the editor is left blank with ``load_failed`` set and an
        error notice, never silently empty.
        """
        if self.graph_id is None:
            return True
        try:
            payload = await self.store.load(self.graph_id, self.owner_id)
            graph = deserialize(payload)
        except (StorageError, ValidationError, PayloadError) as e:
            logger.warning("failed to load graph %s: %s", self.graph_id, e)
            self.model.clear()
            self.handlers.rehydrate([])
            self.marked_edge_ids.clear()
            self.load_failed = True
            self.notify(NoticeLevel.error, "Could not load the mind map.")
            return False

        self.model.replace(graph)
        self.load_failed = False
        self.selected_edge_id = None
        self.marked_edge_ids.clear()
        self.resolver.reset()
        self.rehydrate()
        logger.info(
            "loaded graph %s (%d nodes, %d edges)",
            self.graph_id, len(graph.nodes), len(graph.edges),
        )
        self.publish(EventType.graph_loaded, graph_id=self.graph_id)
        return True

    async def save(self) -> SaveOutcome:
        """Persist the current graph.

        Order: quota gate (create only), serialize, write. A second call while
        one is outstanding is rejected. On failure the in-memory graph is kept
        as-is so the user can retry.
        """
        if self.saving:
            logger.warning("save rejected, another save is in flight")
            return SaveOutcome.rejected_in_flight

        self.saving = True
        creating = self.graph_id is None
        try:
            if creating:
                try:
                    count = await self.store.count(self.owner_id)
                except StorageError as e:
                    logger.warning("could not count graphs for %s: %s", self.owner_id, e)
                    self.notify(NoticeLevel.error, "Could not verify the mind map limit.")
                    return SaveOutcome.failed
                except Exception:
                    logger.exception("unexpected error counting graphs for %s", self.owner_id)
                    self.notify(NoticeLevel.error, "Could not verify the mind map limit.")
                    return SaveOutcome.failed
                if not self.quota.can_create(count):
                    logger.warning("owner %s is at the graph limit (%d)", self.owner_id, count)
                    self.notify(NoticeLevel.error, self.quota.message)
                    return SaveOutcome.quota_exceeded

            payload = serialize(self.model)
            payload.title = payload.title.strip() or DEFAULT_GRAPH_TITLE

            try:
                graph_id = await self.store.save(self.graph_id, self.owner_id, payload)
            except QuotaExceeded as e:
                logger.warning("storage refused create at limit: %s", e)
                self.notify(NoticeLevel.error, limit_message(e.limit if e.limit is not None else self.quota.limit))
                return SaveOutcome.quota_exceeded
            except StorageError as e:
                logger.warning("failed to save graph %s: %s", self.graph_id, e)
                message = "Could not create the mind map." if creating else "Could not save the mind map."
                self.notify(NoticeLevel.error, message)
                return SaveOutcome.failed
            except Exception:
                logger.exception("unexpected error saving graph %s", self.graph_id)
                self.notify(NoticeLevel.error, "Could not save the mind map.")
                return SaveOutcome.failed
        finally:
            self.saving = False

        self.graph_id = graph_id
        self.model.title = payload.title
        logger.info("saved graph %s", graph_id)
        self.notify(NoticeLevel.success, "Mind map created" if creating else "Mind map saved")
        self.publish(EventType.graph_saved, graph_id=graph_id, created=creating)
        return SaveOutcome.created if creating else SaveOutcome.saved

    def set_title(self, title: str) -> None:
        self.model.title = title

    # --- nodes (NodeActions) ---

    def delete_node(self, node_id: str) -> bool:
        """Remove a node and every edge touching it."""
        if not self.model.has_node(node_id):
            logger.debug("delete ignored, unknown node %s", node_id)
            return False
        removed = self.model.delete_node(node_id)
        if self.selected_edge_id in {e.id for e in removed}:
            self._set_selection(None)
        self.rehydrate()
        logger.info("deleted node %s and %d edge(s)", node_id, len(removed))
        self.notify(NoticeLevel.success, "Node removed")
        return True

    def open_editor(self, node_id: str) -> bool:
        """Start a draft for an existing node."""
        node = self.model.get_node(node_id)
        if node is None:
            return False
        self.draft = SchemaBuilder.for_node(node, id_generator=self.field_id_generator)
        self.publish(EventType.edit_requested, node_id=node_id)
        return True

    def update_field(self, node_id: str, field_id: str, value: Any) -> bool:
        return self.model.update_field(node_id, field_id, value)

    def update_title(self, node_id: str, title: str) -> bool:
        return self.model.update_node_data(node_id, {"title": title})

    def update_node_data(self, node_id: str, patch: dict[str, Any]) -> bool:
        return self.model.update_node_data(node_id, patch)

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        return self.model.move_node(node_id, x, y)

    # --- drafts ---

    def open_creator(self) -> SchemaBuilder:
        """Start a draft for a brand-new node."""
        self.draft = SchemaBuilder(id_generator=self.field_id_generator)
        self.publish(EventType.edit_requested, node_id=None)
        return self.draft

    def commit_draft(self) -> Node | None:
        if self.draft is None:
            return None
        draft, self.draft = self.draft, None
        node = draft.commit(self.model, node_id_generator=self.node_id_generator, rng=self.rng)
        if node is None:
            logger.debug("draft for %s dropped, node no longer exists", draft.node_id)
            return None
        self.rehydrate()
        self.notify(NoticeLevel.success, "Node created" if draft.is_new else "Node updated")
        return node

    def cancel_draft(self) -> None:
        if self.draft is not None:
            self.draft.cancel()
            self.draft = None

    # --- connections ---

    def connect(
        self,
        source: str | None,
        target: str | None,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> Edge | None:
        """Commit a user-drawn connection, or publish why it was refused."""
        connection = Connection(source, target, source_handle, target_handle)
        try:
            edge = self.validator.connect(self.model, connection)
        except ConnectionRejected as e:
            if e.reason == "incomplete":
                logger.debug("ignoring incomplete connection %s", connection)
                return None
            logger.warning("connection %s -> %s rejected: %s", source, target, e.reason)
            self.notify(NoticeLevel.error, e.message)
            return None
        self.notify(NoticeLevel.success, "Connection created!")
        return edge

    def reconnect_start(self) -> None:
        """An edge endpoint is being dragged."""
        self._reconnect_succeeded = False

    def reconnect(
        self,
        old_edge_id: str,
        source: str | None,
        target: str | None,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> Edge | None:
        """The dragged endpoint was dropped on a handle."""
        # a drop on a handle never removes the edge, even when refused
        self._reconnect_succeeded = True
        connection = Connection(source, target, source_handle, target_handle)
        try:
            return self.validator.reconnect(self.model, old_edge_id, connection)
        except ConnectionRejected as e:
            if e.reason != "incomplete":
                logger.warning("reconnect of %s rejected: %s", old_edge_id, e.reason)
                self.notify(NoticeLevel.error, e.message)
            return None

    def reconnect_end(self, edge_id: str) -> bool:
        """The drag finished; an edge dropped off every handle is removed."""
        succeeded, self._reconnect_succeeded = self._reconnect_succeeded, True
        if succeeded:
            return False
        if self.model.delete_edge(edge_id) is None:
            return False
        if self.selected_edge_id == edge_id:
            self._set_selection(None)
        logger.info("removed edge %s dropped during reconnect", edge_id)
        self.notify(NoticeLevel.info, "Connection removed")
        self.publish(EventType.edges_removed, edge_ids=[edge_id])
        return True

    def delete_edge(self, edge_id: str) -> bool:
        if self.model.delete_edge(edge_id) is None:
            return False
        if self.selected_edge_id == edge_id:
            self._set_selection(None)
        self.notify(NoticeLevel.info, "Connection removed")
        self.publish(EventType.edges_removed, edge_ids=[edge_id])
        return True

    # --- selection and keyboard ---

    def _set_selection(self, edge_id: str | None) -> None:
        self.selected_edge_id = edge_id
        self.publish(EventType.selection_changed, edge_id=edge_id)

    def select_edge(self, edge_id: str) -> bool:
        if not self.model.has_edge(edge_id):
            return False
        self._set_selection(edge_id)
        return True

    def clear_selection(self) -> None:
        if self.selected_edge_id is not None:
            self._set_selection(None)

    def key_down(self, key: str, target_tag: str | None = None, content_editable: bool = False) -> bool:
        """Delete/Backspace removes the selected edge unless focus is in a text entry."""
        if key not in DELETE_KEYS or self.selected_edge_id is None:
            return False
        if content_editable or (target_tag or "").upper() in TEXT_ENTRY_TAGS:
            return False
        return self.delete_edge(self.selected_edge_id)

    # --- handle gestures ---

    def handle_click(self, handle_id: str, node_id: str) -> None:
        """Feed a handle click to the gesture resolver.

        Reads the scheduler clock; with the default ``AsyncioScheduler`` this
        must run inside an event loop.
        """
        resolution = self.resolver.click(handle_id, node_id, self.scheduler.now_ms(), self.model.edges)
        if resolution.edge_ids:
            self._mark_for_removal(resolution.edge_ids, resolution.kind)

    def edge_style(self, edge_id: str) -> EdgeStyle | None:
        """Style to draw an edge with; marked edges get the removal style."""
        edge = self.model.get_edge(edge_id)
        if edge is None:
            return None
        if edge_id in self.marked_edge_ids:
            return EdgeStyle(stroke=REMOVAL_EDGE_STROKE, stroke_width=REMOVAL_STROKE_WIDTH)
        return edge.style

    def _mark_for_removal(self, edge_ids: Iterable[str], kind: GestureKind) -> None:
        edge_ids = list(edge_ids)
        self.marked_edge_ids.update(edge_ids)
        self.publish(EventType.edges_marked, edge_ids=edge_ids)
        self._schedule(self.removal_delay_ms, lambda: self._remove_marked(edge_ids, kind))

    def _remove_marked(self, edge_ids: list[str], kind: GestureKind) -> None:
        # anything deleted meanwhile is simply skipped
        self.marked_edge_ids.difference_update(edge_ids)
        removed = self.model.delete_edges(edge_ids)
        if not removed:
            return
        if self.selected_edge_id in {e.id for e in removed}:
            self._set_selection(None)
        logger.info("removed %d edge(s) by handle gesture", len(removed))
        if kind == GestureKind.double_click:
            self.notify(NoticeLevel.success, f"{len(removed)} connection(s) removed")
        else:
            self.notify(NoticeLevel.success, "Connection removed")
        self.publish(EventType.edges_removed, edge_ids=[e.id for e in removed])
