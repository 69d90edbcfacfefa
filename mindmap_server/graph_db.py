"""SQLite storage for mind maps, scoped by owner."""

import logging
import os
import sqlite3
from pathlib import Path

from mindmap.adapters.stores import QuotaExceeded
from mindmap.editor.serializer import serialize
from mindmap.models.defaults import default_graph
from mindmap.models.persisted import GraphSummary, PersistedGraph
from mindmap.utils.identifiers import generate_graph_id, utc_timestamp

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "mindmap.db"
GRAPH_DB_PATH = Path(os.getenv("MINDMAP_DB_PATH", str(DEFAULT_DB_PATH)))


def _connect() -> sqlite3.Connection:
    GRAPH_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(GRAPH_DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def _payload_json(payload: PersistedGraph) -> str:
    return payload.model_dump_json(by_alias=True, exclude_none=True)


def init_db() -> None:
    with _connect() as conn:
        conn.execute(
            """
            create table if not exists graphs (
                graph_id text primary key,
                owner_id text not null,
                title text not null,
                description text,
                payload_json text not null,
                is_active integer not null default 1,
                created_at text not null,
                updated_at text not null
            )
            """
        )
        conn.execute(
            "create index if not exists idx_graphs_owner on graphs(owner_id, updated_at)"
        )
        conn.commit()


def count_graphs(owner_id: str) -> int:
    with _connect() as conn:
        row = conn.execute(
            "select count(*) as n from graphs where owner_id = ?",
            (owner_id,),
        ).fetchone()
    return int(row["n"])


def create_graph(owner_id: str, payload: PersistedGraph, limit: int | None = None) -> str:
    """insert a new graph, refusing once the owner holds ``limit`` graphs.

    The count and insert share one transaction so two racing creates cannot
    both slip under the limit.
    """
    graph_id = generate_graph_id()
    now = utc_timestamp()
    with _connect() as conn:
        conn.execute("begin immediate")
        if limit is not None:
            row = conn.execute(
                "select count(*) as n from graphs where owner_id = ?",
                (owner_id,),
            ).fetchone()
            if row["n"] >= limit:
                conn.rollback()
                raise QuotaExceeded(limit)
        conn.execute(
            """
            insert into graphs (
                graph_id, owner_id, title, description, payload_json,
                is_active, created_at, updated_at
            )
            values (?, ?, ?, ?, ?, 1, ?, ?)
            """,
            (graph_id, owner_id, payload.title, None, _payload_json(payload), now, now),
        )
        conn.commit()
    logger.info("created graph %s for %s", graph_id, owner_id)
    return graph_id


def update_graph(graph_id: str, owner_id: str, payload: PersistedGraph) -> bool:
    """overwrite a stored graph. returns False if the owner has no such graph."""
    with _connect() as conn:
        cursor = conn.execute(
            """
            update graphs
            set title = ?, payload_json = ?, updated_at = ?
            where graph_id = ? and owner_id = ?
            """,
            (payload.title, _payload_json(payload), utc_timestamp(), graph_id, owner_id),
        )
        conn.commit()
    return cursor.rowcount > 0


def get_graph(graph_id: str, owner_id: str) -> PersistedGraph | None:
    with _connect() as conn:
        row = conn.execute(
            "select payload_json from graphs where graph_id = ? and owner_id = ?",
            (graph_id, owner_id),
        ).fetchone()
    if not row:
        return None
    return PersistedGraph.model_validate_json(row["payload_json"])


def list_graphs(owner_id: str) -> list[GraphSummary]:
    with _connect() as conn:
        rows = conn.execute(
            """
            select graph_id, title, description, is_active, created_at, updated_at
            from graphs
            where owner_id = ?
            order by updated_at desc
            """,
            (owner_id,),
        ).fetchall()
    return [
        GraphSummary(
            graph_id=row["graph_id"],
            title=row["title"],
            description=row["description"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
        for row in rows
    ]


def set_active(graph_id: str, owner_id: str, is_active: bool) -> bool:
    with _connect() as conn:
        cursor = conn.execute(
            "update graphs set is_active = ? where graph_id = ? and owner_id = ?",
            (int(is_active), graph_id, owner_id),
        )
        conn.commit()
    return cursor.rowcount > 0


def delete_graph(graph_id: str, owner_id: str) -> bool:
    with _connect() as conn:
        cursor = conn.execute(
            "delete from graphs where graph_id = ? and owner_id = ?",
            (graph_id, owner_id),
        )
        conn.commit()
    return cursor.rowcount > 0


def ensure_default(owner_id: str) -> str | None:
    """create the starter graph for an owner with none."""
    if count_graphs(owner_id) > 0:
        return None
    return create_graph(owner_id, serialize(default_graph()))
