"""Mind-map editor core: a graph of form-bearing nodes joined through handles."""

from mindmap.models import (
    Edge,
    Field,
    FieldOption,
    FieldType,
    Graph,
    GraphSummary,
    Node,
    PersistedGraph,
    Position,
)
from mindmap.config import EditorSettings, get_settings
# editor must load before adapters; the session imports the stores
from mindmap.editor import (
    EditorSession,
    EventBus,
    EventType,
    GraphModel,
    SaveOutcome,
    deserialize,
    serialize,
)
from mindmap.adapters import (
    GraphNotFound,
    HttpGraphStore,
    MemoryGraphStore,
    QuotaExceeded,
    StorageError,
)

__all__ = [
    # Data
    "Edge",
    "Field",
    "FieldOption",
    "FieldType",
    "Graph",
    "GraphSummary",
    "Node",
    "PersistedGraph",
    "Position",
    # Settings
    "EditorSettings",
    "get_settings",
    # Editing
    "EditorSession",
    "EventBus",
    "EventType",
    "GraphModel",
    "SaveOutcome",
    "deserialize",
    "serialize",
    # Storage
    "GraphNotFound",
    "HttpGraphStore",
    "MemoryGraphStore",
    "QuotaExceeded",
    "StorageError",
]
