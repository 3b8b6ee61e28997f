"""
Org Chart Hierarchy Service

Mutation engine, tree builder, view state and suggestions for the
organization chart.

Usage:
    from orgchart.core.services.hierarchy_crud import get_org_chart_service

    service = get_org_chart_service()
    node = await service.move_node(org_id, node_id, new_parent_id)
"""

from orgchart.core.services.hierarchy_crud.service import (
    OrgChartService,
    get_org_chart_service,
    validate_org_id,
)
from orgchart.core.services.hierarchy_crud.tree_builder import (
    build_forest,
    flatten_forest,
    forest_stats,
)
from orgchart.core.services.hierarchy_crud.view_state import ViewStateController, VisibleRow
from orgchart.core.services.hierarchy_crud.suggestions import (
    Suggestions,
    suggest_from_nodes,
    suggest_members,
)
from orgchart.core.services.hierarchy_crud.level_utils import validate_hierarchy

__all__ = [
    "OrgChartService",
    "get_org_chart_service",
    "validate_org_id",
    "build_forest",
    "flatten_forest",
    "forest_stats",
    "ViewStateController",
    "VisibleRow",
    "Suggestions",
    "suggest_from_nodes",
    "suggest_members",
    "validate_hierarchy",
]
