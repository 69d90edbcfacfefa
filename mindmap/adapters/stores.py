"""Persistence boundary for mind maps.

The editor only talks to a ``GraphStore``. ``MemoryGraphStore`` keeps graphs
in a dict (tests, demos); ``HttpGraphStore`` talks to the graph API served by
``mindmap_server``.
"""

import logging
from typing import Protocol

import httpx

from mindmap.config import get_settings
from mindmap.editor.quota import DEFAULT_GRAPH_LIMIT, is_quota_policy_error
from mindmap.editor.serializer import serialize
from mindmap.models.defaults import default_graph
from mindmap.models.persisted import GraphSummary, PersistedGraph
from mindmap.utils.identifiers import generate_graph_id, utc_timestamp

logger = logging.getLogger(__name__)

OWNER_HEADER = "X-Owner-Id"


class StorageError(Exception):
    """Raised when the storage layer fails."""
    pass


class GraphNotFound(StorageError):
    """No graph with that id exists for the owner."""

    def __init__(self, graph_id: str) -> None:
        super().__init__(f"Graph not found: {graph_id}")
        self.graph_id = graph_id


class QuotaExceeded(StorageError):
    """The storage layer refused to create a graph past the owner's limit."""

    def __init__(self, limit: int | None = None) -> None:
        super().__init__(f"Graph limit reached ({limit})" if limit is not None else "Graph limit reached")
        self.limit = limit


class GraphStore(Protocol):
    """Protocol for loading and saving mind maps per owner."""

    async def load(self, graph_id: str, owner_id: str) -> PersistedGraph:
        """Return the stored payload or raise GraphNotFound."""
        ...

    async def save(self, graph_id: str | None, owner_id: str, payload: PersistedGraph) -> str:
        """Update ``graph_id``, or create a new graph when it is None. Returns the id."""
        ...

    async def count(self, owner_id: str) -> int:
        ...

    async def delete(self, graph_id: str, owner_id: str) -> None:
        ...

    async def list_graphs(self, owner_id: str) -> list[GraphSummary]:
        """Summaries, most recently updated first."""
        ...

    async def set_active(self, graph_id: str, owner_id: str, is_active: bool) -> None:
        ...

    async def ensure_default(self, owner_id: str) -> str | None:
        """Create the starter graph for an owner with none; returns its id."""
        ...


def filter_summaries(summaries: list[GraphSummary], query: str) -> list[GraphSummary]:
    """Case-insensitive search over title and description."""
    needle = query.strip().lower()
    if not needle:
        return list(summaries)
    return [
        s for s in summaries
        if needle in s.title.lower() or needle in (s.description or "").lower()
    ]


class MemoryGraphStore:
    """Stores graphs in a dict. Enforces the per-owner limit like the server."""

    def __init__(self, limit: int | None = DEFAULT_GRAPH_LIMIT) -> None:
        self.limit = limit
        self._rows: dict[str, dict] = {}

    def _owned(self, graph_id: str, owner_id: str) -> dict:
        row = self._rows.get(graph_id)
        if row is None or row["owner_id"] != owner_id:
            raise GraphNotFound(graph_id)
        return row

    async def load(self, graph_id: str, owner_id: str) -> PersistedGraph:
        row = self._owned(graph_id, owner_id)
        return PersistedGraph.model_validate(row["payload"])

    async def save(self, graph_id: str | None, owner_id: str, payload: PersistedGraph) -> str:
        now = utc_timestamp()
        if graph_id is not None:
            row = self._owned(graph_id, owner_id)
            row.update(payload=payload.to_wire(), title=payload.title, updated_at=now)
            return graph_id

        if self.limit is not None and await self.count(owner_id) >= self.limit:
            raise QuotaExceeded(self.limit)
        new_id = generate_graph_id()
        self._rows[new_id] = {
            "owner_id": owner_id,
            "payload": payload.to_wire(),
            "title": payload.title,
            "description": None,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        return new_id

    async def count(self, owner_id: str) -> int:
        return sum(1 for row in self._rows.values() if row["owner_id"] == owner_id)

    async def delete(self, graph_id: str, owner_id: str) -> None:
        self._owned(graph_id, owner_id)
        del self._rows[graph_id]

    async def list_graphs(self, owner_id: str) -> list[GraphSummary]:
        summaries = [
            GraphSummary(
                graph_id=graph_id,
                title=row["title"],
                description=row["description"],
                is_active=row["is_active"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for graph_id, row in self._rows.items()
            if row["owner_id"] == owner_id
        ]
        summaries.sort(key=lambda s: s.updated_at, reverse=True)
        return summaries

    async def set_active(self, graph_id: str, owner_id: str, is_active: bool) -> None:
        row = self._owned(graph_id, owner_id)
        row["is_active"] = is_active

    async def ensure_default(self, owner_id: str) -> str | None:
        if await self.count(owner_id) > 0:
            return None
        return await self.save(None, owner_id, serialize(default_graph()))


class HttpGraphStore:
    """Graph store backed by the mind-map HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the graph API (defaults to MINDMAP_API_URL)
            timeout: HTTP request timeout in seconds
            client: optional shared client; one is opened per request otherwise
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = settings.http_timeout if timeout is None else timeout
        self._client = client

    async def _request(self, method: str, path: str, owner_id: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}/api/graphs{path}"
        headers = {OWNER_HEADER: owner_id}
        try:
            if self._client is not None:
                return await self._client.request(method, url, headers=headers, **kwargs)
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.warning("graph API unreachable: %s", e)
            raise StorageError(f"Failed to connect to graph API at {self.base_url}: {e}") from e

    @staticmethod
    def _check(response: httpx.Response, graph_id: str | None = None) -> None:
        if response.status_code == 404:
            raise GraphNotFound(graph_id or "")
        if response.status_code == 403:
            try:
                body = response.json()
            except ValueError:
                body = None
            if is_quota_policy_error(body):
                raise QuotaExceeded(body.get("detail", body).get("limit"))
        if response.is_error:
            raise StorageError(f"Graph API error {response.status_code}: {response.text}")

    @staticmethod
    def _json(response: httpx.Response):
        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"Graph API returned a non-JSON body: {e}") from e

    def _graph_id(self, response: httpx.Response) -> str | None:
        body = self._json(response)
        if not isinstance(body, dict) or "id" not in body:
            raise StorageError(f"Graph API response has no id: {body!r}")
        return body["id"]

    async def load(self, graph_id: str, owner_id: str) -> PersistedGraph:
        response = await self._request("GET", f"/{graph_id}", owner_id)
        self._check(response, graph_id)
        return PersistedGraph.model_validate(self._json(response))

    async def save(self, graph_id: str | None, owner_id: str, payload: PersistedGraph) -> str:
        body = payload.to_wire()
        if graph_id is None:
            response = await self._request("POST", "", owner_id, json=body)
        else:
            response = await self._request("PUT", f"/{graph_id}", owner_id, json=body)
        self._check(response, graph_id)
        return self._graph_id(response)

    async def count(self, owner_id: str) -> int:
        response = await self._request("GET", "/count", owner_id)
        self._check(response)
        return int(self._json(response)["count"])

    async def delete(self, graph_id: str, owner_id: str) -> None:
        response = await self._request("DELETE", f"/{graph_id}", owner_id)
        self._check(response, graph_id)

    async def list_graphs(self, owner_id: str) -> list[GraphSummary]:
        response = await self._request("GET", "", owner_id)
        self._check(response)
        return [GraphSummary.model_validate(item) for item in self._json(response)]

    async def set_active(self, graph_id: str, owner_id: str, is_active: bool) -> None:
        response = await self._request(
            "PATCH", f"/{graph_id}/status", owner_id, json={"is_active": is_active}
        )
        self._check(response, graph_id)

    async def ensure_default(self, owner_id: str) -> str | None:
        response = await self._request("POST", "/default", owner_id)
        self._check(response)
        return self._graph_id(response)
