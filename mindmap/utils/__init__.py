"""Utility functions for the mind-map editor."""

from mindmap.utils.identifiers import (
    IdGenerator,
    SequentialIdGenerator,
    UuidIdGenerator,
    generate_graph_id,
    utc_timestamp,
)

__all__ = [
    "IdGenerator",
    "SequentialIdGenerator",
    "UuidIdGenerator",
    "generate_graph_id",
    "utc_timestamp",
]
