"""
Organization Chart Hierarchy Service.

Manages reporting-relationship nodes over a pluggable node store.

Features:
- Create / update / delete / move with invariant checks before any write
- Cycle prevention on move (ancestor walk from the new parent)
- Level cascade to every descendant after a move
- Deletion blocking when a node still has direct reports
- Read helpers: children, level, ancestors, descendants, search, tree
- Member placement and demo seeding
"""

import asyncio
import logging
import re
import uuid
from typing import Any, Dict, List, Optional, Tuple, Union

from orgchart.app.config import get_settings
from orgchart.app.models.hierarchy_models import (
    IMMUTABLE_NODE_FIELDS,
    CreateNodeRequest,
    DeletionBlockedResponse,
    HierarchyNode,
    HierarchyTreeResponse,
    MemberSuggestion,
    OrgMember,
    SeedResult,
    UpdateNodeRequest,
)
from orgchart.core.exceptions import (
    CycleDetectedError,
    HasChildrenError,
    InvalidPatchError,
    MemberAlreadyPlacedError,
    NodeNotFoundError,
    ParentNotFoundError,
)
from orgchart.core.store import (
    InMemoryMemberDirectory,
    NodeStore,
    get_member_directory,
    get_node_store,
)
from orgchart.core.services.hierarchy_crud.level_utils import (
    index_by_id,
    index_children,
    iter_ancestor_ids,
    iter_descendants_bfs,
    level_under,
    would_create_cycle,
)
from orgchart.core.services.hierarchy_crud.suggestions import (
    suggest_members,
    to_member_suggestion,
)
from orgchart.core.services.hierarchy_crud.tree_builder import build_forest, forest_stats

logger = logging.getLogger(__name__)

# ==============================================================================
# Multi-Tenancy Validation
# ==============================================================================

ORG_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,64}$')


def validate_org_id(org_id: str) -> str:
    """Validate org_id format before it is used as a store key."""
    if not org_id or not ORG_ID_PATTERN.match(org_id):
        raise ValueError(f"Invalid organization identifier format: {org_id}")
    return org_id


# ==============================================================================
# Demo Data
# ==============================================================================

# (key, parent key, name, role, department, email)
DEMO_CHART = [
    ("ceo", None, "John Smith", "CEO", "Executive", "john.smith@company.com"),
    ("cto", "ceo", "Sarah Johnson", "CTO", "Technology", "sarah.johnson@company.com"),
    ("cfo", "ceo", "Mike Davis", "CFO", "Finance", "mike.davis@company.com"),
    ("vpe", "cto", "Emily Chen", "VP Engineering", "Technology", "emily.chen@company.com"),
    ("dev", "vpe", "David Wilson", "Senior Developer", "Technology", "david.wilson@company.com"),
]


# ==============================================================================
# Hierarchy Service Class
# ==============================================================================

class OrgChartService:
    """Service for the organization chart hierarchy. The only writer of nodes."""

    def __init__(
        self,
        store: Optional[NodeStore] = None,
        member_directory: Optional[InMemoryMemberDirectory] = None
    ):
        """Initialize with optional store and member directory."""
        self.store = store or get_node_store()
        self.member_directory = member_directory or get_member_directory()
        self.settings = get_settings()
        self._org_locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, org_id: str) -> asyncio.Lock:
        """One lock per org so validate-then-write never interleaves."""
        lock = self._org_locks.get(org_id)
        if lock is None:
            lock = asyncio.Lock()
            self._org_locks[org_id] = lock
        return lock

    async def _snapshot(self, org_id: str) -> Tuple[List[HierarchyNode], Dict[str, HierarchyNode]]:
        nodes = await self.store.list_by_org(org_id)
        return nodes, index_by_id(nodes)

    @staticmethod
    def _resolve(org_id: str, node_id: str, by_id: Dict[str, HierarchyNode]) -> HierarchyNode:
        node = by_id.get(node_id)
        if node is None:
            raise NodeNotFoundError(org_id, node_id)
        return node

    # ==========================================================================
    # Read Operations
    # ==========================================================================

    async def list_nodes(self, org_id: str) -> List[HierarchyNode]:
        org_id = validate_org_id(org_id)
        return await self.store.list_by_org(org_id)

    async def get_node(self, org_id: str, node_id: str) -> HierarchyNode:
        org_id = validate_org_id(org_id)
        _, by_id = await self._snapshot(org_id)
        return self._resolve(org_id, node_id, by_id)

    async def get_children(self, org_id: str, parent_id: Optional[str]) -> List[HierarchyNode]:
        """Direct reports of parent_id, or the stored roots when parent_id is None."""
        org_id = validate_org_id(org_id)
        nodes, by_id = await self._snapshot(org_id)
        if parent_id is not None:
            self._resolve(org_id, parent_id, by_id)
        return index_children(nodes).get(parent_id, [])

    async def get_nodes_by_level(self, org_id: str, level: int) -> List[HierarchyNode]:
        org_id = validate_org_id(org_id)
        nodes = await self.store.list_by_org(org_id)
        return [node for node in nodes if node.level == level]

    async def get_ancestors(self, org_id: str, node_id: str) -> List[HierarchyNode]:
        """Management chain from the direct manager up to the root."""
        org_id = validate_org_id(org_id)
        _, by_id = await self._snapshot(org_id)
        node = self._resolve(org_id, node_id, by_id)
        return [by_id[ancestor_id] for ancestor_id in iter_ancestor_ids(node.parent_id, by_id)]

    async def get_descendants(self, org_id: str, node_id: str) -> List[HierarchyNode]:
        """Everyone below node_id, breadth-first."""
        org_id = validate_org_id(org_id)
        nodes, by_id = await self._snapshot(org_id)
        self._resolve(org_id, node_id, by_id)
        return list(iter_descendants_bfs(node_id, index_children(nodes)))

    async def search_nodes(self, org_id: str, query: str) -> List[HierarchyNode]:
        """Case-insensitive substring search over name, role, department and email."""
        org_id = validate_org_id(org_id)
        nodes = await self.store.list_by_org(org_id)
        q = (query or "").strip().lower()
        if not q:
            return nodes
        return [
            node for node in nodes
            if q in node.name.lower()
            or q in node.role.lower()
            or (node.department and q in node.department.lower())
            or (node.email and q in node.email.lower())
        ]

    async def get_tree(self, org_id: str) -> HierarchyTreeResponse:
        """Get the full chart as a forest with header stats."""
        org_id = validate_org_id(org_id)
        nodes = await self.store.list_by_org(org_id)
        return HierarchyTreeResponse(
            org_id=org_id,
            roots=build_forest(nodes),
            stats=forest_stats(nodes),
        )

    # ==========================================================================
    # Create Operations
    # ==========================================================================

    async def create_node(self, org_id: str, request: CreateNodeRequest) -> HierarchyNode:
        """Add a node under request.parent_id (or as a root)."""
        org_id = validate_org_id(org_id)

        async with self._lock_for(org_id):
            nodes, by_id = await self._snapshot(org_id)

            parent = None
            if request.parent_id is not None:
                parent = by_id.get(request.parent_id)
                if parent is None:
                    logger.warning(
                        f"Refused create in org {org_id}: parent {request.parent_id} not found"
                    )
                    raise ParentNotFoundError(org_id, request.parent_id)

            if request.user_id is not None:
                self._ensure_member_unplaced(org_id, request.user_id, nodes)

            node = HierarchyNode(
                id=str(uuid.uuid4()),
                org_id=org_id,
                parent_id=request.parent_id,
                level=level_under(parent),
                user_id=request.user_id,
                name=request.name,
                role=request.role,
                department=request.department,
                email=request.email,
                color=request.color or self.settings.default_node_color,
                shape=request.shape or self.settings.default_node_shape,
                position=request.position or {"x": 0, "y": 0},
                is_expanded=request.is_expanded,
            )
            created = await self.store.insert(node)

        logger.info(
            f"Created node {created.id} at level {created.level} in org {org_id}",
            extra={"org_id": org_id, "node_id": created.id, "parent_id": created.parent_id}
        )
        return created

    @staticmethod
    def _ensure_member_unplaced(
        org_id: str,
        user_id: str,
        nodes: List[HierarchyNode],
        ignore_node_id: Optional[str] = None
    ) -> None:
        for node in nodes:
            if node.user_id == user_id and node.id != ignore_node_id:
                raise MemberAlreadyPlacedError(org_id, user_id, node.id)

    async def place_member(
        self,
        org_id: str,
        member_id: str,
        parent_id: Optional[str] = None
    ) -> HierarchyNode:
        """
        Create a node for an organization member (member join / onboarding).

        Name, role, department and email come from the member directory.
        """
        org_id = validate_org_id(org_id)
        member = self.member_directory.get_member(org_id, member_id)
        if member is None:
            raise ValueError(f"Member {member_id} not found in organization {org_id}")
        request = CreateNodeRequest(
            name=member.full_name,
            role=member.role or "Member",
            department=member.department or "General",
            email=member.email,
            parent_id=parent_id,
            user_id=member.id,
        )
        return await self.create_node(org_id, request)

    async def seed_default_nodes(self, org_id: str) -> SeedResult:
        """Insert a small demo chart. Skipped when the org already has nodes."""
        org_id = validate_org_id(org_id)
        existing = await self.store.list_by_org(org_id)
        if existing:
            logger.info(f"Org chart data already exists for org {org_id}, skipping seed")
            return SeedResult(org_id=org_id, seeded=False, created=0)

        created_ids: Dict[str, str] = {}
        for key, parent_key, name, role, department, email in DEMO_CHART:
            node = await self.create_node(org_id, CreateNodeRequest(
                name=name,
                role=role,
                department=department,
                email=email,
                parent_id=created_ids.get(parent_key) if parent_key else None,
            ))
            created_ids[key] = node.id

        logger.info(f"Seeded {len(created_ids)} demo nodes for org {org_id}")
        return SeedResult(org_id=org_id, seeded=True, created=len(created_ids))

    # ==========================================================================
    # Update Operations
    # ==========================================================================

    async def update_node(
        self,
        org_id: str,
        node_id: str,
        patch: Union[UpdateNodeRequest, Dict[str, Any]]
    ) -> HierarchyNode:
        """
        Edit descriptive fields of a node.

        parent_id and level are never changed here; use move_node.
        """
        org_id = validate_org_id(org_id)

        if isinstance(patch, dict):
            forbidden = IMMUTABLE_NODE_FIELDS.intersection(patch)
            if forbidden:
                logger.warning(f"Refused update of {node_id} in org {org_id}: immutable {sorted(forbidden)}")
                raise InvalidPatchError(node_id, list(forbidden))
            patch = UpdateNodeRequest.model_validate(patch)

        changes = patch.model_dump(exclude_unset=True, mode="json")

        async with self._lock_for(org_id):
            nodes, by_id = await self._snapshot(org_id)
            self._resolve(org_id, node_id, by_id)
            if changes.get("user_id") is not None:
                self._ensure_member_unplaced(org_id, changes["user_id"], nodes, ignore_node_id=node_id)
            updated = await self.store.update_by_id(org_id, node_id, changes)

        logger.info(
            f"Updated node {node_id} in org {org_id}: {sorted(changes)}",
            extra={"org_id": org_id, "node_id": node_id}
        )
        return updated

    # ==========================================================================
    # Move Operations
    # ==========================================================================

    async def move_node(
        self,
        org_id: str,
        node_id: str,
        new_parent_id: Optional[str] = None,
        new_level: Optional[int] = None
    ) -> HierarchyNode:
        """
        Reparent a node and recompute the level of its whole subtree.

        The level stored is always derived from the new parent; a caller
        supplied new_level that disagrees is logged and ignored.
        """
        org_id = validate_org_id(org_id)

        async with self._lock_for(org_id):
            nodes, by_id = await self._snapshot(org_id)

            node = self._resolve(org_id, node_id, by_id)

            new_parent = None
            if new_parent_id is not None:
                new_parent = by_id.get(new_parent_id)
                if new_parent is None:
                    logger.warning(f"Refused move of {node_id} in org {org_id}: parent {new_parent_id} not found")
                    raise ParentNotFoundError(org_id, new_parent_id)

            if would_create_cycle(node_id, new_parent_id, by_id):
                logger.warning(
                    f"Refused move of {node_id} under {new_parent_id} in org {org_id}: cycle",
                    extra={"org_id": org_id, "node_id": node_id, "new_parent_id": new_parent_id}
                )
                raise CycleDetectedError(org_id, node_id, new_parent_id)

            computed_level = level_under(new_parent)
            if new_level is not None and new_level != computed_level:
                logger.warning(
                    f"Ignoring requested level {new_level} for node {node_id}; "
                    f"level under new parent is {computed_level}"
                )

            # Plan the subtree relevel against the post-move structure before writing
            moved = node.model_copy(update={"parent_id": new_parent_id, "level": computed_level})
            planned = {**by_id, node_id: moved}
            children = index_children(planned.values())
            relevel: List[Tuple[str, int]] = []
            for descendant in iter_descendants_bfs(node_id, children):
                parent_level = planned[descendant.parent_id].level
                target = parent_level + 1
                if descendant.level != target:
                    planned[descendant.id] = descendant.model_copy(update={"level": target})
                    relevel.append((descendant.id, target))

            result = await self.store.update_by_id(
                org_id, node_id, {"parent_id": new_parent_id, "level": computed_level}
            )
            for descendant_id, level in relevel:
                await self.store.update_by_id(org_id, descendant_id, {"level": level})

        logger.info(
            f"Moved node {node_id} under {new_parent_id or 'root'} in org {org_id} "
            f"(level {node.level} -> {computed_level}, {len(relevel)} descendant(s) releveled)",
            extra={"org_id": org_id, "node_id": node_id, "new_parent_id": new_parent_id}
        )
        return result

    # ==========================================================================
    # Delete Operations
    # ==========================================================================

    async def check_deletion_blocked(self, org_id: str, node_id: str) -> DeletionBlockedResponse:
        """Check if node deletion is blocked by direct reports."""
        org_id = validate_org_id(org_id)
        nodes, by_id = await self._snapshot(org_id)
        self._resolve(org_id, node_id, by_id)

        children = index_children(nodes).get(node_id, [])
        blocking = [{"id": child.id, "name": child.name} for child in children]
        reason = f"Cannot delete node with {len(children)} direct report(s)" if children else ""
        return DeletionBlockedResponse(
            node_id=node_id,
            blocked=bool(children),
            reason=reason,
            blocking_nodes=blocking,
        )

    async def delete_node(self, org_id: str, node_id: str) -> None:
        """Delete exactly one node. Refused while any node reports to it."""
        org_id = validate_org_id(org_id)

        async with self._lock_for(org_id):
            nodes, by_id = await self._snapshot(org_id)
            node = self._resolve(org_id, node_id, by_id)

            child_ids = [n.id for n in nodes if n.parent_id == node_id]
            if child_ids:
                logger.warning(
                    f"Refused delete of {node_id} in org {org_id}: {len(child_ids)} direct report(s)"
                )
                raise HasChildrenError(org_id, node_id, child_ids)

            await self.store.delete_by_id(org_id, node_id)

        logger.info(
            f"Deleted node {node_id} ({node.name}) from org {org_id}",
            extra={"org_id": org_id, "node_id": node_id}
        )

    # ==========================================================================
    # Suggestions
    # ==========================================================================

    async def placed_user_ids(self, org_id: str) -> List[str]:
        org_id = validate_org_id(org_id)
        nodes = await self.store.list_by_org(org_id)
        return [node.user_id for node in nodes if node.user_id]

    async def suggest_members(self, org_id: str, query: str) -> List[MemberSuggestion]:
        """Members not yet in the chart whose name, role or department match."""
        org_id = validate_org_id(org_id)
        members: List[OrgMember] = self.member_directory.list_members(org_id)
        placed = await self.placed_user_ids(org_id)
        return [to_member_suggestion(m) for m in suggest_members(query, members, placed)]


# ==============================================================================
# Singleton
# ==============================================================================

_service: Optional[OrgChartService] = None


def get_org_chart_service() -> OrgChartService:
    """Get the process-wide service instance."""
    global _service
    if _service is None:
        _service = OrgChartService()
    return _service
