"""Editor core: graph model, connection rules, gestures, drafts, and sessions."""

from mindmap.editor.events import Event, EventBus, EventType, Notice, NoticeLevel
from mindmap.editor.gestures import (
    AwaitingSecondClick,
    GestureKind,
    GestureResolution,
    GestureResolver,
    Idle,
)
from mindmap.editor.graph_model import GraphModel
from mindmap.editor.handlers import HandlerRehydrator, NodeActions, NodeHandlers
from mindmap.editor.quota import QuotaGate, is_quota_policy_error
from mindmap.editor.scheduling import AsyncioScheduler, ManualScheduler, Scheduler
from mindmap.editor.schema_builder import SchemaBuilder
from mindmap.editor.serializer import PayloadError, deserialize, serialize
from mindmap.editor.validator import Connection, ConnectionRejected, ConnectionValidator
# session pulls in the storage adapters, keep it last
from mindmap.editor.session import EditorSession, SaveOutcome

__all__ = [
    # Graph state
    "GraphModel",
    "Connection",
    "ConnectionRejected",
    "ConnectionValidator",
    # Gestures and time
    "AwaitingSecondClick",
    "GestureKind",
    "GestureResolution",
    "GestureResolver",
    "Idle",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    # Behavior and drafts
    "HandlerRehydrator",
    "NodeActions",
    "NodeHandlers",
    "SchemaBuilder",
    # Persistence
    "PayloadError",
    "deserialize",
    "serialize",
    "QuotaGate",
    "is_quota_policy_error",
    # Sessions
    "Event",
    "EventBus",
    "EventType",
    "Notice",
    "NoticeLevel",
    "EditorSession",
    "SaveOutcome",
]
