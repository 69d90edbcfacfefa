"""ID generation and timestamp utilities."""

import itertools
import uuid
from datetime import datetime, timezone
from typing import Protocol


class IdGenerator(Protocol):
    """Protocol for anything that hands out fresh identifiers."""

    def __call__(self) -> str:
        ...


class UuidIdGenerator:
    """Generate UUID4 identifiers, optionally prefixed."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    def __call__(self) -> str:
        return f"{self.prefix}{uuid.uuid4()}"


class SequentialIdGenerator:
    """Generate monotonic identifiers like ``node-1``, ``node-2``.

    Used by tests that need predictable ids. Values are never reused.
    """

    def __init__(self, prefix: str = "id-", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"


def generate_graph_id() -> str:
    """Generate a unique graph ID (UUID4)."""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
