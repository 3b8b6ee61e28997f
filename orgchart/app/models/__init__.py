"""
Org chart models package.

Exports the hierarchy node record, request and response models.
"""

from .hierarchy_models import (
    # Enums
    NodeColor,
    NodeShape,

    # Constants
    IMMUTABLE_NODE_FIELDS,

    # Records
    NodePosition,
    HierarchyNode,
    OrgMember,

    # Request Models
    CreateNodeRequest,
    UpdateNodeRequest,
    MoveNodeRequest,

    # Response Models
    HierarchyTreeNode,
    HierarchyTreeResponse,
    HierarchyListResponse,
    DeletionBlockedResponse,
    MemberSuggestion,
    SeedResult,
)

__all__ = [
    "NodeColor",
    "NodeShape",
    "IMMUTABLE_NODE_FIELDS",
    "NodePosition",
    "HierarchyNode",
    "OrgMember",
    "CreateNodeRequest",
    "UpdateNodeRequest",
    "MoveNodeRequest",
    "HierarchyTreeNode",
    "HierarchyTreeResponse",
    "HierarchyListResponse",
    "DeletionBlockedResponse",
    "MemberSuggestion",
    "SeedResult",
]
