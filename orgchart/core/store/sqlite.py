"""
SQLite node store.

Local embedded persistence for hierarchy nodes, one table keyed by
(org_id, id) with indexes on parent_id and level.
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from orgchart.app.models.hierarchy_models import HierarchyNode
from orgchart.core.exceptions import StoreNotFoundError
from orgchart.core.store.base import NodeStore, utc_now

logger = logging.getLogger(__name__)

NODE_COLUMNS = (
    "id", "org_id", "parent_id", "level", "user_id", "name", "role", "department",
    "email", "color", "shape", "position", "is_expanded", "created_at", "updated_at",
)


class SqliteNodeStore(NodeStore):
    def __init__(self, db_path: str):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self) -> None:
        conn = self._get_conn()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS org_chart_nodes (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL,
                org_id TEXT NOT NULL,
                parent_id TEXT,
                level INTEGER NOT NULL DEFAULT 0,
                user_id TEXT,
                name TEXT NOT NULL,
                role TEXT NOT NULL,
                department TEXT,
                email TEXT,
                color TEXT NOT NULL,
                shape TEXT NOT NULL,
                position TEXT NOT NULL,
                is_expanded INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                UNIQUE (org_id, id)
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_org_chart_nodes_parent ON org_chart_nodes(org_id, parent_id)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_org_chart_nodes_level ON org_chart_nodes(org_id, level)"
        )
        conn.commit()
        conn.close()

    @staticmethod
    def _to_row(node: HierarchyNode) -> tuple:
        data = node.model_dump(mode="json")
        data["position"] = json.dumps(data["position"])
        data["is_expanded"] = 1 if node.is_expanded else 0
        data["created_at"] = node.created_at.isoformat()
        data["updated_at"] = node.updated_at.isoformat()
        return tuple(data[col] for col in NODE_COLUMNS)

    @staticmethod
    def _from_row(row: sqlite3.Row) -> HierarchyNode:
        data = {col: row[col] for col in NODE_COLUMNS}
        data["position"] = json.loads(data["position"])
        data["is_expanded"] = bool(data["is_expanded"])
        data["created_at"] = datetime.fromisoformat(data["created_at"])
        data["updated_at"] = datetime.fromisoformat(data["updated_at"])
        return HierarchyNode.model_validate(data)

    def _fetch_one(self, conn: sqlite3.Connection, org_id: str, node_id: str) -> HierarchyNode:
        row = conn.execute(
            "SELECT * FROM org_chart_nodes WHERE org_id = ? AND id = ?",
            (org_id, node_id),
        ).fetchone()
        if row is None:
            raise StoreNotFoundError(org_id, node_id)
        return self._from_row(row)

    async def list_by_org(self, org_id: str) -> List[HierarchyNode]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM org_chart_nodes WHERE org_id = ? ORDER BY seq",
                (org_id,),
            ).fetchall()
        finally:
            conn.close()
        return [self._from_row(row) for row in rows]

    async def insert(self, node: HierarchyNode) -> HierarchyNode:
        now = utc_now()
        stored = node.model_copy(update={"created_at": now, "updated_at": now})
        placeholders = ", ".join("?" for _ in NODE_COLUMNS)
        conn = self._get_conn()
        try:
            conn.execute(
                f"INSERT INTO org_chart_nodes ({', '.join(NODE_COLUMNS)}) VALUES ({placeholders})",
                self._to_row(stored),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Node {node.id} already exists in org {node.org_id}") from e
        finally:
            conn.close()
        logger.debug(f"Inserted node {node.id} for org {node.org_id}")
        return stored

    async def update_by_id(self, org_id: str, node_id: str, patch: Dict[str, Any]) -> HierarchyNode:
        conn = self._get_conn()
        try:
            existing = self._fetch_one(conn, org_id, node_id)
            updated = self.apply_patch(existing, patch)
            assignments = ", ".join(f"{col} = ?" for col in NODE_COLUMNS[2:])
            conn.execute(
                f"UPDATE org_chart_nodes SET {assignments} WHERE org_id = ? AND id = ?",
                self._to_row(updated)[2:] + (org_id, node_id),
            )
            conn.commit()
        finally:
            conn.close()
        return updated

    async def delete_by_id(self, org_id: str, node_id: str) -> None:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "DELETE FROM org_chart_nodes WHERE org_id = ? AND id = ?",
                (org_id, node_id),
            )
            conn.commit()
            deleted = cursor.rowcount
        finally:
            conn.close()
        if deleted == 0:
            raise StoreNotFoundError(org_id, node_id)
        logger.debug(f"Deleted node {node_id} for org {org_id}")
