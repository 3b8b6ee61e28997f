"""
In-memory node store.

Thread-safe dict per organization, preserving insertion order. Used for
development, tests and single-process deployments.
"""

import logging
from threading import Lock
from typing import Any, Dict, List

from orgchart.app.models.hierarchy_models import HierarchyNode
from orgchart.core.exceptions import StoreNotFoundError
from orgchart.core.store.base import NodeStore, utc_now

logger = logging.getLogger(__name__)


class InMemoryNodeStore(NodeStore):
    """
    Node store backed by nested dicts: org_id -> node_id -> node.

    Copies go in and out so callers never hold a reference to stored state.
    """

    def __init__(self):
        self._nodes: Dict[str, Dict[str, HierarchyNode]] = {}
        self._lock = Lock()

    async def list_by_org(self, org_id: str) -> List[HierarchyNode]:
        with self._lock:
            return [n.model_copy(deep=True) for n in self._nodes.get(org_id, {}).values()]

    async def insert(self, node: HierarchyNode) -> HierarchyNode:
        now = utc_now()
        stored = node.model_copy(update={"created_at": now, "updated_at": now}, deep=True)
        with self._lock:
            org_nodes = self._nodes.setdefault(node.org_id, {})
            if node.id in org_nodes:
                raise ValueError(f"Node {node.id} already exists in org {node.org_id}")
            org_nodes[node.id] = stored
        logger.debug(f"Inserted node {node.id} for org {node.org_id}")
        return stored.model_copy(deep=True)

    async def update_by_id(self, org_id: str, node_id: str, patch: Dict[str, Any]) -> HierarchyNode:
        with self._lock:
            org_nodes = self._nodes.get(org_id, {})
            existing = org_nodes.get(node_id)
            if existing is None:
                raise StoreNotFoundError(org_id, node_id)
            updated = self.apply_patch(existing, patch)
            org_nodes[node_id] = updated
        return updated.model_copy(deep=True)

    async def delete_by_id(self, org_id: str, node_id: str) -> None:
        with self._lock:
            org_nodes = self._nodes.get(org_id, {})
            if node_id not in org_nodes:
                raise StoreNotFoundError(org_id, node_id)
            del org_nodes[node_id]
        logger.debug(f"Deleted node {node_id} for org {org_id}")

    def clear(self) -> None:
        """Drop every node of every organization."""
        with self._lock:
            self._nodes.clear()
