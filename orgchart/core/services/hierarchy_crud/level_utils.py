"""
Level and ancestry utilities for the parent_id hierarchy.

Provides functions for:
- Walking the ancestor chain of a node
- Cycle detection before a move
- Computing levels from parent links
- Breadth-first descendant traversal
- Auditing a flat node set against the level invariant
"""

from collections import deque
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set

from orgchart.app.models.hierarchy_models import HierarchyNode


def index_by_id(nodes: Iterable[HierarchyNode]) -> Dict[str, HierarchyNode]:
    """Map node id -> node."""
    return {node.id: node for node in nodes}


def index_children(nodes: Iterable[HierarchyNode]) -> Dict[Optional[str], List[HierarchyNode]]:
    """
    Map parent id -> direct children, in input order.

    Root nodes are listed under the None key.
    """
    children: Dict[Optional[str], List[HierarchyNode]] = {}
    for node in nodes:
        children.setdefault(node.parent_id, []).append(node)
    return children


def iter_ancestor_ids(start_id: Optional[str], by_id: Mapping[str, HierarchyNode]) -> Iterator[str]:
    """
    Yield ids walking upward from start_id (inclusive) along parent links.

    Stops at a root, at a dangling parent reference, or when an id repeats,
    so it terminates even on corrupted data.

    Examples:
        A <- B <- C (C's parent is B, B's parent is A)
        >>> list(iter_ancestor_ids('C', by_id))
        ['C', 'B', 'A']
    """
    seen: Set[str] = set()
    current = start_id
    while current is not None and current in by_id and current not in seen:
        seen.add(current)
        yield current
        current = by_id[current].parent_id


def would_create_cycle(
    node_id: str,
    new_parent_id: Optional[str],
    by_id: Mapping[str, HierarchyNode]
) -> bool:
    """
    Check whether attaching node_id under new_parent_id creates a cycle.

    True when node_id appears anywhere on the ancestor chain of
    new_parent_id, including new_parent_id == node_id. Moving to root
    never creates a cycle.
    """
    if new_parent_id is None:
        return False
    return any(ancestor_id == node_id for ancestor_id in iter_ancestor_ids(new_parent_id, by_id))


def level_under(parent: Optional[HierarchyNode]) -> int:
    """
    Level for a node placed under parent.

    Examples:
        >>> level_under(None)
        0
        >>> level_under(node_at_level_2)
        3
    """
    return 0 if parent is None else parent.level + 1


def iter_descendants_bfs(
    root_id: str,
    children_by_parent: Mapping[Optional[str], List[HierarchyNode]]
) -> Iterator[HierarchyNode]:
    """
    Yield every descendant of root_id breadth-first (root excluded).

    Each node is yielded at most once even if the input contains a cycle.
    """
    visited: Set[str] = {root_id}
    queue = deque([root_id])
    while queue:
        parent_id = queue.popleft()
        for child in children_by_parent.get(parent_id, []):
            if child.id in visited:
                continue
            visited.add(child.id)
            yield child
            queue.append(child.id)


def compute_levels(nodes: Iterable[HierarchyNode]) -> Dict[str, Optional[int]]:
    """
    Compute the correct level of every node from its parent links.

    Nodes whose parent is absent or dangling are at level 0. Nodes on or
    below a cycle get None because no root reaches them.
    """
    node_list = list(nodes)
    by_id = index_by_id(node_list)
    children = index_children(node_list)
    levels: Dict[str, Optional[int]] = {node.id: None for node in node_list}

    roots = [n for n in node_list if n.parent_id is None or n.parent_id not in by_id]
    queue = deque()
    for root in roots:
        levels[root.id] = 0
        queue.append(root.id)
    while queue:
        parent_id = queue.popleft()
        for child in children.get(parent_id, []):
            if levels[child.id] is None:
                levels[child.id] = levels[parent_id] + 1
                queue.append(child.id)
    return levels


def validate_hierarchy(nodes: Iterable[HierarchyNode]) -> Dict[str, List[str]]:
    """
    Audit a flat node set against the structural invariants.

    Returns:
        Dict with:
        - "unreachable": ids on or below a parent_id cycle
        - "level_mismatches": ids whose stored level differs from the computed one
        - "dangling_parents": ids whose parent_id does not resolve

    An empty list in every key means the set is a valid forest.
    """
    node_list = list(nodes)
    by_id = index_by_id(node_list)
    levels = compute_levels(node_list)

    unreachable = [node_id for node_id, level in levels.items() if level is None]
    mismatches = [
        node.id for node in node_list
        if levels[node.id] is not None and levels[node.id] != node.level
    ]
    dangling = [
        node.id for node in node_list
        if node.parent_id is not None and node.parent_id not in by_id
    ]
    return {
        "unreachable": unreachable,
        "level_mismatches": mismatches,
        "dangling_parents": dangling,
    }
