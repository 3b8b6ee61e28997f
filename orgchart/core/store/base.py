"""
Node store contract.

The hierarchy engine depends only on these four operations. Any keyed store
(in-memory map, embedded database, remote API) can back it.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List

from orgchart.app.models.hierarchy_models import HierarchyNode


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NodeStore(ABC):
    """Persisted flat collection of hierarchy nodes, scoped by organization."""

    @abstractmethod
    async def list_by_org(self, org_id: str) -> List[HierarchyNode]:
        """Return every node of the organization, in insertion order."""

    @abstractmethod
    async def insert(self, node: HierarchyNode) -> HierarchyNode:
        """Persist a new node. Sets created_at and updated_at."""

    @abstractmethod
    async def update_by_id(self, org_id: str, node_id: str, patch: Dict[str, Any]) -> HierarchyNode:
        """Apply a partial update. Raises StoreNotFoundError for unknown ids."""

    @abstractmethod
    async def delete_by_id(self, org_id: str, node_id: str) -> None:
        """Remove one node. Raises StoreNotFoundError for unknown ids."""

    @staticmethod
    def apply_patch(node: HierarchyNode, patch: Dict[str, Any]) -> HierarchyNode:
        """Return a validated copy of node with patch applied and updated_at bumped."""
        data = node.model_dump()
        data.update(patch)
        data["id"] = node.id
        data["org_id"] = node.org_id
        data["created_at"] = node.created_at
        data["updated_at"] = utc_now()
        return HierarchyNode.model_validate(data)
