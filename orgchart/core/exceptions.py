"""
Structured Error Handling for the Org Chart Engine
Error hierarchy with error codes, HTTP status mapping and user-facing messages.

All mutation failures are raised before any store write happens, so catching
one of these means nothing was persisted.
"""

from typing import Dict, Any, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for monitoring and client handling."""
    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    PARENT_NOT_FOUND = "PARENT_NOT_FOUND"
    CYCLE_DETECTED = "CYCLE_DETECTED"
    HAS_CHILDREN = "HAS_CHILDREN"
    INVALID_PATCH = "INVALID_PATCH"
    MEMBER_ALREADY_PLACED = "MEMBER_ALREADY_PLACED"
    STORE_NOT_FOUND = "STORE_NOT_FOUND"


class OrgChartError(Exception):
    """
    Base exception for all org chart errors.

    Carries a developer message (with ids, for logs) and a short user message
    (for toasts), plus the HTTP status the API layer should answer with.
    """

    user_message: str = "Something went wrong with the organization chart"

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        http_status: int = 400,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
    ):
        """
        Initialize structured exception.

        Args:
            message: Developer-facing message
            error_code: Standardized error code
            http_status: HTTP status code to return
            context: Additional context (org_id, node_id, ...)
            user_message: Overrides the class-level user message
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.http_status = http_status
        self.context = context or {}
        if user_message:
            self.user_message = user_message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            "error": self.error_code.value,
            "message": self.user_message,
            "detail": self.message,
        }
        if self.context:
            result["context"] = self.context
        return result


class NodeNotFoundError(OrgChartError):
    """The node id does not resolve within the organization."""

    user_message = "This person is no longer in the organization chart"

    def __init__(self, org_id: str, node_id: str):
        super().__init__(
            message=f"Node {node_id} not found in org {org_id}",
            error_code=ErrorCode.NODE_NOT_FOUND,
            http_status=404,
            context={"org_id": org_id, "node_id": node_id},
        )
        self.node_id = node_id


class ParentNotFoundError(OrgChartError):
    """The requested parent id does not resolve within the organization."""

    user_message = "The selected manager does not exist"

    def __init__(self, org_id: str, parent_id: str):
        super().__init__(
            message=f"Parent node {parent_id} not found in org {org_id}",
            error_code=ErrorCode.PARENT_NOT_FOUND,
            http_status=400,
            context={"org_id": org_id, "parent_id": parent_id},
        )
        self.parent_id = parent_id


class CycleDetectedError(OrgChartError):
    """Moving the node under the requested parent would create a cycle."""

    user_message = "Cannot move a person under their own subordinate"

    def __init__(self, org_id: str, node_id: str, new_parent_id: str):
        super().__init__(
            message=(
                f"Moving node {node_id} under {new_parent_id} would create a cycle "
                f"in org {org_id}"
            ),
            error_code=ErrorCode.CYCLE_DETECTED,
            http_status=409,
            context={"org_id": org_id, "node_id": node_id, "new_parent_id": new_parent_id},
        )
        self.node_id = node_id
        self.new_parent_id = new_parent_id


class HasChildrenError(OrgChartError):
    """Deletion refused because other nodes report to this one."""

    user_message = "Cannot delete node with children. Please move or delete its reports first."

    def __init__(self, org_id: str, node_id: str, child_ids: list):
        super().__init__(
            message=f"Node {node_id} in org {org_id} has {len(child_ids)} direct report(s)",
            error_code=ErrorCode.HAS_CHILDREN,
            http_status=409,
            context={"org_id": org_id, "node_id": node_id, "child_ids": list(child_ids)},
        )
        self.node_id = node_id
        self.child_ids = list(child_ids)


class InvalidPatchError(OrgChartError):
    """An update tried to change a field that only the engine controls."""

    user_message = "Some of these fields cannot be edited"

    def __init__(self, node_id: str, fields: list):
        super().__init__(
            message=f"Fields {sorted(fields)} cannot be changed on node {node_id} with an update",
            error_code=ErrorCode.INVALID_PATCH,
            http_status=400,
            context={"node_id": node_id, "fields": sorted(fields)},
        )
        self.fields = sorted(fields)


class MemberAlreadyPlacedError(OrgChartError):
    """The organization member already has a node in the chart."""

    user_message = "This member is already in the organization chart"

    def __init__(self, org_id: str, user_id: str, node_id: str):
        super().__init__(
            message=f"Member {user_id} already placed as node {node_id} in org {org_id}",
            error_code=ErrorCode.MEMBER_ALREADY_PLACED,
            http_status=409,
            context={"org_id": org_id, "user_id": user_id, "node_id": node_id},
        )


class StoreNotFoundError(OrgChartError):
    """Raised by node stores when an id is not present for the org."""

    def __init__(self, org_id: str, node_id: str):
        super().__init__(
            message=f"Record {node_id} not found in store for org {org_id}",
            error_code=ErrorCode.STORE_NOT_FOUND,
            http_status=404,
            context={"org_id": org_id, "node_id": node_id},
        )
        self.node_id = node_id
