"""
Tree builder: flat node list -> forest.

Pure and synchronous. Safe to call after every mutation.
"""

from typing import Any, Dict, Iterable, List, Set

from orgchart.app.models.hierarchy_models import HierarchyNode, HierarchyTreeNode


def build_forest(nodes: Iterable[HierarchyNode]) -> List[HierarchyTreeNode]:
    """
    Build the forest of one organization from its flat node list.

    Roots are nodes without a parent or whose parent id does not resolve.
    Children keep the input order. Never raises; nodes caught in a parent_id
    cycle are unreachable from any root and do not appear in the result.
    """
    node_list = list(nodes)
    tree_nodes: Dict[str, HierarchyTreeNode] = {}
    roots: List[HierarchyTreeNode] = []

    # First pass: create all tree nodes
    for node in node_list:
        tree_nodes[node.id] = HierarchyTreeNode(**node.model_dump(), children=[])

    # Second pass: attach to parent or promote to root
    for node in node_list:
        tree_node = tree_nodes[node.id]
        if node.parent_id and node.parent_id in tree_nodes:
            tree_nodes[node.parent_id].children.append(tree_node)
        else:
            roots.append(tree_node)

    return roots


def flatten_forest(forest: Iterable[HierarchyTreeNode]) -> List[HierarchyNode]:
    """
    Pre-order traversal of a forest back to flat nodes (children stripped).
    """
    flat: List[HierarchyNode] = []
    visited: Set[str] = set()
    stack = list(reversed(list(forest)))
    while stack:
        tree_node = stack.pop()
        if tree_node.id in visited:
            continue
        visited.add(tree_node.id)
        flat.append(HierarchyNode(**tree_node.model_dump(exclude={"children"})))
        stack.extend(reversed(tree_node.children))
    return flat


def forest_stats(nodes: Iterable[HierarchyNode]) -> Dict[str, Any]:
    """Counts for the tree header: total, roots, per-level and deepest level."""
    node_list = list(nodes)
    ids = {node.id for node in node_list}
    by_level: Dict[str, int] = {}
    for node in node_list:
        key = str(node.level)
        by_level[key] = by_level.get(key, 0) + 1
    return {
        "total": len(node_list),
        "roots": sum(1 for n in node_list if n.parent_id is None or n.parent_id not in ids),
        "by_level": by_level,
        "max_level": max((n.level for n in node_list), default=0),
    }
