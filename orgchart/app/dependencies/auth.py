"""
Caller identity for the org chart API.

Authentication itself is handled upstream; the session layer forwards the
caller as headers. This module turns them into a CurrentUser and gates
mutating endpoints on the admin capability.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class CurrentUser:
    """Identity of the caller as supplied by the session layer."""
    user_id: str
    org_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role.lower() == ADMIN_ROLE


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_org_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> CurrentUser:
    """Read caller identity headers. 401 when identity is missing."""
    if not x_user_id or not x_org_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id or X-Org-Id header"
        )
    return CurrentUser(user_id=x_user_id, org_id=x_org_id, role=x_user_role or "Member")


def ensure_org_access(org_id: str, user: CurrentUser) -> None:
    """Reject access to another organization's chart."""
    if user.org_id != org_id:
        logger.warning(
            f"User {user.user_id} of org {user.org_id} denied access to org {org_id}",
            extra={"user_id": user.user_id, "org_id": org_id}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access to this organization is not allowed"
        )


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Only admins may change the chart."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required to modify the organization chart"
        )
    return user
