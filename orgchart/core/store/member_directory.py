"""
Member directory collaborator.

Read-only source of organization members for the suggestion helper and the
member placement path.
"""

from threading import Lock
from typing import Dict, Iterable, List, Optional

from orgchart.app.models.hierarchy_models import OrgMember


class InMemoryMemberDirectory:
    """Members keyed by org_id, in registration order."""

    def __init__(self):
        self._members: Dict[str, Dict[str, OrgMember]] = {}
        self._lock = Lock()

    def register(self, org_id: str, members: Iterable[OrgMember]) -> None:
        """Add or replace members of an organization."""
        with self._lock:
            org_members = self._members.setdefault(org_id, {})
            for member in members:
                org_members[member.id] = member

    def list_members(self, org_id: str) -> List[OrgMember]:
        with self._lock:
            return list(self._members.get(org_id, {}).values())

    def get_member(self, org_id: str, member_id: str) -> Optional[OrgMember]:
        with self._lock:
            return self._members.get(org_id, {}).get(member_id)
