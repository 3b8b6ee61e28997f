"""
Organization Chart API Routes

Endpoints for viewing and editing the reporting hierarchy of an organization.

URL Structure: /api/v1/org-chart/{org_id}/...

Features:
- Flat list (with level / search filters) and forest views
- Admin-only create, edit, move (drag-and-drop) and delete
- Deletion pre-check, member placement and suggestions
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from typing import List, NoReturn, Optional
import logging

from orgchart.app.dependencies.auth import (
    CurrentUser,
    ensure_org_access,
    get_current_user,
    require_admin,
)
from orgchart.app.models.hierarchy_models import (
    CreateNodeRequest,
    DeletionBlockedResponse,
    HierarchyListResponse,
    HierarchyNode,
    HierarchyTreeResponse,
    MemberSuggestion,
    MoveNodeRequest,
    SeedResult,
    UpdateNodeRequest,
)
from orgchart.core.exceptions import OrgChartError
from orgchart.core.services.hierarchy_crud import OrgChartService, get_org_chart_service

router = APIRouter()
logger = logging.getLogger(__name__)


def _raise_http(e: Exception, action: str, org_id: str) -> NoReturn:
    """Translate service errors into HTTP responses."""
    if isinstance(e, OrgChartError):
        raise HTTPException(status_code=e.http_status, detail=e.to_dict())
    if isinstance(e, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.exception(f"Error trying to {action} for org {org_id}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}"
    )


# ============================================================================
# Read Endpoints
# ============================================================================

@router.get(
    "/{org_id}/nodes",
    response_model=HierarchyListResponse,
    summary="List chart nodes",
    description="Flat list of nodes, optionally filtered by level and search text"
)
async def list_nodes(
    org_id: str,
    level: Optional[int] = Query(None, ge=0, description="Only nodes at this level"),
    q: Optional[str] = Query(None, max_length=200, description="Search name, role, department, email"),
    user: CurrentUser = Depends(get_current_user),
    service: OrgChartService = Depends(get_org_chart_service)
):
    """List nodes."""
    ensure_org_access(org_id, user)
    try:
        nodes = await service.search_nodes(org_id, q) if q else await service.list_nodes(org_id)
        if level is not None:
            nodes = [node for node in nodes if node.level == level]
        return HierarchyListResponse(org_id=org_id, nodes=nodes, total=len(nodes))
    except Exception as e:
        _raise_http(e, "list chart nodes", org_id)


@router.get(
    "/{org_id}/tree",
    response_model=HierarchyTreeResponse,
    summary="Get chart tree",
    description="Full chart as a forest of roots with nested children"
)
async def get_tree(
    org_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: OrgChartService = Depends(get_org_chart_service)
):
    """Get the chart as a forest."""
    ensure_org_access(org_id, user)
    try:
        return await service.get_tree(org_id)
    except Exception as e:
        _raise_http(e, "get chart tree", org_id)


@router.get("/{org_id}/nodes/{node_id}", response_model=HierarchyNode, summary="Get node")
async def get_node(
    org_id: str,
    node_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.get_node(org_id, node_id)
    except Exception as e:
        _raise_http(e, "get node", org_id)


@router.get("/{org_id}/nodes/{node_id}/children", response_model=List[HierarchyNode], summary="Direct reports")
async def get_children(
    org_id: str,
    node_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.get_children(org_id, node_id)
    except Exception as e:
        _raise_http(e, "get direct reports", org_id)


@router.get("/{org_id}/nodes/{node_id}/descendants", response_model=List[HierarchyNode], summary="All reports")
async def get_descendants(
    org_id: str,
    node_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.get_descendants(org_id, node_id)
    except Exception as e:
        _raise_http(e, "get descendants", org_id)


@router.get(
    "/{org_id}/nodes/{node_id}/deletion-check",
    response_model=DeletionBlockedResponse,
    summary="Check if a node can be deleted"
)
async def check_deletion(
    org_id: str,
    node_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.check_deletion_blocked(org_id, node_id)
    except Exception as e:
        _raise_http(e, "check node deletion", org_id)


@router.get(
    "/{org_id}/suggestions",
    response_model=List[MemberSuggestion],
    summary="Suggest members to add",
    description="Members not yet in the chart whose name, role or department contains q"
)
async def suggest_members(
    org_id: str,
    q: str = Query("", max_length=200),
    user: CurrentUser = Depends(get_current_user),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.suggest_members(org_id, q)
    except Exception as e:
        _raise_http(e, "suggest members", org_id)


# ============================================================================
# Mutation Endpoints (Admin only)
# ============================================================================

@router.post(
    "/{org_id}/nodes",
    response_model=HierarchyNode,
    status_code=status.HTTP_201_CREATED,
    summary="Add a person to the chart"
)
async def create_node(
    org_id: str,
    request: CreateNodeRequest,
    user: CurrentUser = Depends(require_admin),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.create_node(org_id, request)
    except Exception as e:
        _raise_http(e, "create node", org_id)


@router.put("/{org_id}/nodes/{node_id}", response_model=HierarchyNode, summary="Edit a node")
async def update_node(
    org_id: str,
    node_id: str,
    request: UpdateNodeRequest,
    user: CurrentUser = Depends(require_admin),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.update_node(org_id, node_id, request)
    except Exception as e:
        _raise_http(e, "update node", org_id)


@router.patch(
    "/{org_id}/nodes/{node_id}/move",
    response_model=HierarchyNode,
    summary="Move a node under a new manager",
    description="Reparents the node and recomputes levels for its whole subtree"
)
async def move_node(
    org_id: str,
    node_id: str,
    request: MoveNodeRequest,
    user: CurrentUser = Depends(require_admin),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.move_node(org_id, node_id, request.new_parent_id, request.new_level)
    except Exception as e:
        _raise_http(e, "move node", org_id)


@router.delete(
    "/{org_id}/nodes/{node_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a node without reports"
)
async def delete_node(
    org_id: str,
    node_id: str,
    user: CurrentUser = Depends(require_admin),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        await service.delete_node(org_id, node_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        _raise_http(e, "delete node", org_id)


@router.post(
    "/{org_id}/members/{member_id}/place",
    response_model=HierarchyNode,
    status_code=status.HTTP_201_CREATED,
    summary="Place an organization member in the chart"
)
async def place_member(
    org_id: str,
    member_id: str,
    parent_id: Optional[str] = Query(None, description="Manager node id; omit for a root"),
    user: CurrentUser = Depends(require_admin),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.place_member(org_id, member_id, parent_id)
    except Exception as e:
        _raise_http(e, "place member", org_id)


@router.post("/{org_id}/seed", response_model=SeedResult, summary="Seed a demo chart")
async def seed_chart(
    org_id: str,
    user: CurrentUser = Depends(require_admin),
    service: OrgChartService = Depends(get_org_chart_service)
):
    ensure_org_access(org_id, user)
    try:
        return await service.seed_default_nodes(org_id)
    except Exception as e:
        _raise_http(e, "seed chart", org_id)
