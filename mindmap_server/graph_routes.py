"""API routes for storing mind maps."""

import logging

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel

from mindmap.adapters.stores import QuotaExceeded
from mindmap.config import get_settings
from mindmap.editor.quota import QUOTA_ERROR_CODE
from mindmap.models.persisted import GraphSummary, PersistedGraph
from mindmap_server.graph_db import (
    count_graphs as db_count_graphs,
    create_graph as db_create_graph,
    delete_graph as db_delete_graph,
    ensure_default as db_ensure_default,
    get_graph as db_get_graph,
    list_graphs as db_list_graphs,
    set_active as db_set_active,
    update_graph as db_update_graph,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# maximum stored graphs per owner
GRAPH_LIMIT = get_settings().graph_limit


class StatusUpdate(BaseModel):
    """request body for toggling a graph's active flag."""

    is_active: bool


def _not_found(graph_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Graph not found: {graph_id}")


@router.get("/graphs")
def list_graphs(x_owner_id: str = Header(...)) -> list[GraphSummary]:
    """list the owner's graphs, newest first."""
    return db_list_graphs(x_owner_id)


@router.get("/graphs/count")
def count_graphs(x_owner_id: str = Header(...)) -> dict:
    return {"count": db_count_graphs(x_owner_id), "limit": GRAPH_LIMIT}


@router.post("/graphs/default")
def ensure_default(x_owner_id: str = Header(...)) -> dict:
    """create the starter graph if the owner has none."""
    return {"id": db_ensure_default(x_owner_id)}


@router.get("/graphs/{graph_id}")
def get_graph(graph_id: str, x_owner_id: str = Header(...)) -> dict:
    graph = db_get_graph(graph_id, x_owner_id)
    if not graph:
        raise _not_found(graph_id)
    return graph.to_wire()


@router.post("/graphs", status_code=201)
def create_graph(payload: PersistedGraph, x_owner_id: str = Header(...)) -> dict:
    """create a graph; refused with 403 once the owner is at the limit."""
    try:
        graph_id = db_create_graph(x_owner_id, payload, limit=GRAPH_LIMIT)
    except QuotaExceeded as e:
        logger.warning("owner %s refused a new graph at limit %s", x_owner_id, e.limit)
        raise HTTPException(
            status_code=403,
            detail={"code": QUOTA_ERROR_CODE, "limit": e.limit},
        )
    return {"id": graph_id}


@router.put("/graphs/{graph_id}")
def update_graph(graph_id: str, payload: PersistedGraph, x_owner_id: str = Header(...)) -> dict:
    if not db_update_graph(graph_id, x_owner_id, payload):
        raise _not_found(graph_id)
    return {"id": graph_id}


@router.patch("/graphs/{graph_id}/status")
def set_status(graph_id: str, request: StatusUpdate, x_owner_id: str = Header(...)) -> dict:
    if not db_set_active(graph_id, x_owner_id, request.is_active):
        raise _not_found(graph_id)
    return {"id": graph_id, "is_active": request.is_active}


@router.delete("/graphs/{graph_id}")
def delete_graph(graph_id: str, x_owner_id: str = Header(...)) -> dict:
    if not db_delete_graph(graph_id, x_owner_id):
        raise _not_found(graph_id)
    return {"deleted": graph_id}
