"""Per-owner limit on stored mind maps."""

from typing import Any

DEFAULT_GRAPH_LIMIT = 4

# code the graph API uses when it refuses a create at the limit
QUOTA_ERROR_CODE = "quota_exceeded"


def limit_message(limit: int) -> str:
    return f"You have reached the limit of {limit} mind maps. Delete one to create another."


class QuotaGate:
    """Client-side check consulted before a save creates a new graph."""

    def __init__(self, limit: int = DEFAULT_GRAPH_LIMIT) -> None:
        self.limit = limit

    def can_create(self, current_count: int) -> bool:
        return current_count < self.limit

    def is_limit_reached(self, current_count: int) -> bool:
        return current_count >= self.limit

    def limit_text(self, current_count: int) -> str:
        """Counter shown on the list screen, e.g. ``3/4``."""
        return f"{current_count}/{self.limit}"

    @property
    def message(self) -> str:
        return limit_message(self.limit)


def is_quota_policy_error(error: Any) -> bool:
    """Detect the storage layer's structured refusal of a create at the limit.

    Accepts the decoded error body (``{"detail": {"code": ...}}`` or the
    inner ``{"code": ...}``); anything else is a generic failure.
    """
    if not isinstance(error, dict):
        return False
    detail = error.get("detail", error)
    if not isinstance(detail, dict):
        return False
    return detail.get("code") == QUOTA_ERROR_CODE
