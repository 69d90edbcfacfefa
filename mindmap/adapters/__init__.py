"""Storage adapters for the mind-map editor."""

from mindmap.adapters.stores import (
    GraphNotFound,
    GraphStore,
    HttpGraphStore,
    MemoryGraphStore,
    QuotaExceeded,
    StorageError,
    filter_summaries,
)

__all__ = [
    "GraphNotFound",
    "GraphStore",
    "HttpGraphStore",
    "MemoryGraphStore",
    "QuotaExceeded",
    "StorageError",
    "filter_summaries",
]
