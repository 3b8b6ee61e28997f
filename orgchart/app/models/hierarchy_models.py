"""
Pydantic models for organization chart hierarchy management.

This module provides:
- The persisted HierarchyNode record
- Request models for create / update / move operations
- Tree and list response models
- Organization member models used by the suggestion helper
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict, model_validator


# ============================================================================
# ENUMS
# ============================================================================

class NodeColor(str, Enum):
    """Display color of a node card."""
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    ORANGE = "orange"
    RED = "red"
    GRAY = "gray"


class NodeShape(str, Enum):
    """Display shape of a node card."""
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    ROUNDED = "rounded"
    DIAMOND = "diamond"


# ============================================================================
# CORE RECORD
# ============================================================================

class NodePosition(BaseModel):
    """Canvas position of a node. Display only."""
    x: float = 0
    y: float = 0


class HierarchyNode(BaseModel):
    """
    One entry in the organization chart.

    Invariants (maintained by the mutation engine, not by this model):
    level == 0 iff parent_id is None, otherwise level == parent.level + 1.
    """
    id: str
    org_id: str
    parent_id: Optional[str] = None
    level: int = Field(default=0, ge=0)
    user_id: Optional[str] = None
    name: str
    role: str
    department: Optional[str] = None
    email: Optional[str] = None
    color: NodeColor = NodeColor.BLUE
    shape: NodeShape = NodeShape.RECTANGLE
    position: NodePosition = Field(default_factory=NodePosition)
    is_expanded: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


# ============================================================================
# REQUEST MODELS
# ============================================================================

class CreateNodeRequest(BaseModel):
    """Request model for adding a person to the chart."""
    name: str = Field(..., min_length=1, max_length=255, description="Full name")
    role: str = Field(..., min_length=1, max_length=255, description="Job title or role")
    department: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=254)
    parent_id: Optional[str] = Field(default=None, description="Manager node id; omit for a root")
    user_id: Optional[str] = Field(default=None, description="Linked organization member id")
    color: Optional[NodeColor] = None
    shape: Optional[NodeShape] = None
    position: Optional[NodePosition] = None
    is_expanded: bool = True

    model_config = ConfigDict(extra="forbid", json_schema_extra={
        "example": {
            "name": "Emily Chen",
            "role": "VP Engineering",
            "department": "Technology",
            "email": "emily.chen@company.com",
            "parent_id": "5f1c0a52-1d1e-4c55-9d0e-0f5b0d3c1a11"
        }
    })


# Fields a generic update may never touch. Structure changes go through move.
IMMUTABLE_NODE_FIELDS = frozenset({
    "id", "org_id", "parent_id", "level", "created_at", "updated_at",
})


class UpdateNodeRequest(BaseModel):
    """Request model for editing descriptive fields of a node."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    role: Optional[str] = Field(default=None, min_length=1, max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=254)
    user_id: Optional[str] = None
    color: Optional[NodeColor] = None
    shape: Optional[NodeShape] = None
    position: Optional[NodePosition] = None
    is_expanded: Optional[bool] = None

    @model_validator(mode='after')
    def at_least_one_field_required(self) -> 'UpdateNodeRequest':
        """Ensure at least one field is provided for update."""
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self

    model_config = ConfigDict(extra="forbid", json_schema_extra={
        "example": {
            "role": "SVP Engineering",
            "department": "Technology"
        }
    })


class MoveNodeRequest(BaseModel):
    """Request model for reparenting a node (drag-and-drop)."""
    new_parent_id: Optional[str] = Field(default=None, description="New manager; null makes it a root")
    new_level: Optional[int] = Field(
        default=None,
        ge=0,
        description="Level requested by the caller; the computed level always wins"
    )

    model_config = ConfigDict(extra="forbid", json_schema_extra={
        "example": {"new_parent_id": None, "new_level": 0}
    })


# ============================================================================
# ORGANIZATION MEMBERS
# ============================================================================

class OrgMember(BaseModel):
    """Read-only member record supplied by the member directory."""
    id: str
    full_name: str
    role: str = "Member"
    department: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MemberSuggestion(BaseModel):
    """One autocomplete candidate."""
    member_id: str
    full_name: str
    role: str
    department: Optional[str] = None
    email: Optional[str] = None


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class HierarchyTreeNode(HierarchyNode):
    """A node with its children attached, as produced by the tree builder."""
    children: List['HierarchyTreeNode'] = Field(default_factory=list)


class HierarchyTreeResponse(BaseModel):
    """Response model for the full chart as a forest."""
    org_id: str
    roots: List[HierarchyTreeNode]
    stats: Dict[str, Any]


class HierarchyListResponse(BaseModel):
    """Response model for a flat list of nodes."""
    org_id: str
    nodes: List[HierarchyNode]
    total: int


class DeletionBlockedResponse(BaseModel):
    """Result of a pre-delete check."""
    node_id: str
    blocked: bool
    reason: str
    blocking_nodes: List[Dict[str, str]]

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "node_id": "5f1c0a52-1d1e-4c55-9d0e-0f5b0d3c1a11",
            "blocked": True,
            "reason": "Cannot delete node with 1 direct report(s)",
            "blocking_nodes": [{"id": "c2f4...", "name": "Emily Chen"}]
        }
    })


class SeedResult(BaseModel):
    """Result of seeding a demo chart."""
    org_id: str
    seeded: bool
    created: int


HierarchyTreeNode.model_rebuild()
