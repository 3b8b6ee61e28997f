"""
Autocomplete suggestions for the "add member" form.

Advisory only: never blocks node creation and never mutates anything.
"""

from itertools import islice
from typing import Callable, Collection, Generic, Iterable, Iterator, List, Optional, TypeVar

from orgchart.app.config import get_settings
from orgchart.app.models.hierarchy_models import HierarchyNode, MemberSuggestion, OrgMember

T = TypeVar("T")


def _contains(value: Optional[str], query: str) -> bool:
    return bool(value) and query in value.lower()


def member_matches(member: OrgMember, query: str) -> bool:
    """Case-insensitive substring match over name, role and department."""
    q = query.lower()
    return _contains(member.full_name, q) or _contains(member.role, q) or _contains(member.department, q)


def node_matches(node: HierarchyNode, query: str) -> bool:
    """Same match rule applied to an existing chart node."""
    q = query.lower()
    return _contains(node.name, q) or _contains(node.role, q) or _contains(node.department, q)


class Suggestions(Generic[T]):
    """
    Lazy, finite, restartable sequence of candidates.

    Every iteration re-runs the filter over the source, so iterating twice
    gives the same result and nothing is computed until iterated.
    """

    def __init__(
        self,
        source: Iterable[T],
        predicate: Callable[[T], bool],
        limit: int
    ):
        self._source = source
        self._predicate = predicate
        self._limit = limit

    def __iter__(self) -> Iterator[T]:
        return islice((item for item in self._source if self._predicate(item)), self._limit)

    def to_list(self) -> List[T]:
        return list(self)


def _too_short(query: Optional[str], min_length: int) -> bool:
    return query is None or len(query.strip()) < min_length


def suggest_members(
    query: Optional[str],
    members: Iterable[OrgMember],
    placed_user_ids: Collection[str],
    limit: Optional[int] = None,
    min_length: Optional[int] = None
) -> Suggestions[OrgMember]:
    """
    Suggest organization members not yet placed in the chart.

    Args:
        query: Partial text typed by the admin
        members: Member directory entries for the organization
        placed_user_ids: user_id values already attached to nodes
        limit: Max candidates (default: settings.suggestion_limit)
        min_length: Minimum query length (default: settings.suggestion_min_query_length)

    Returns:
        Up to `limit` members, empty when the query is too short.
    """
    settings = get_settings()
    limit = limit or settings.suggestion_limit
    min_length = min_length or settings.suggestion_min_query_length
    member_list = list(members)
    if _too_short(query, min_length):
        return Suggestions(member_list, lambda _: False, limit)

    q = query.strip()
    placed = set(placed_user_ids)
    return Suggestions(
        member_list,
        lambda m: m.id not in placed and member_matches(m, q),
        limit,
    )


def suggest_from_nodes(
    query: Optional[str],
    nodes: Iterable[HierarchyNode],
    limit: Optional[int] = None,
    min_length: Optional[int] = None
) -> Suggestions[HierarchyNode]:
    """Suggest existing nodes whose fields can pre-fill a new node."""
    settings = get_settings()
    limit = limit or settings.suggestion_limit
    min_length = min_length or settings.suggestion_min_query_length
    node_list = list(nodes)
    if _too_short(query, min_length):
        return Suggestions(node_list, lambda _: False, limit)
    q = query.strip()
    return Suggestions(node_list, lambda n: node_matches(n, q), limit)


def to_member_suggestion(member: OrgMember) -> MemberSuggestion:
    return MemberSuggestion(
        member_id=member.id,
        full_name=member.full_name,
        role=member.role,
        department=member.department,
        email=member.email,
    )
