"""
Session-local view state for the org chart: expand set, search and level filter.

Never persisted. One controller per viewing session, passed explicitly to
whatever renders the tree.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from orgchart.app.models.hierarchy_models import HierarchyNode, HierarchyTreeNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisibleRow:
    """One rendered line of the tree: the node and its indentation depth."""
    node: HierarchyTreeNode
    depth: int
    has_children: bool
    is_expanded: bool


class ViewStateController:
    """
    Expand set plus search / level filters over a built forest.

    The search filter only decides which roots render. It is matched against
    each root on its own and is not propagated: a matching descendant does not
    pull in its non-matching root, and children of a matching root render
    unfiltered when expanded.
    """

    def __init__(self, expanded: Optional[Iterable[str]] = None):
        self._expanded: Set[str] = set(expanded or ())
        self._known_ids: Set[str] = set(self._expanded)
        self.search_query: str = ""
        self.level_filter: Optional[int] = None

    @classmethod
    def from_nodes(cls, nodes: Iterable[HierarchyNode]) -> "ViewStateController":
        """Seed the expand set from the persisted is_expanded hints."""
        node_list = list(nodes)
        controller = cls(node.id for node in node_list if node.is_expanded)
        controller.sync(node_list)
        return controller

    # ------------------------------------------------------------------
    # Expand set
    # ------------------------------------------------------------------

    @property
    def expanded(self) -> frozenset:
        return frozenset(self._expanded)

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    def toggle(self, node_id: str) -> bool:
        """Flip membership of node_id. Returns the new expanded state."""
        if node_id in self._expanded:
            self._expanded.discard(node_id)
            return False
        self._expanded.add(node_id)
        return True

    def expand(self, node_id: str) -> None:
        self._expanded.add(node_id)

    def collapse(self, node_id: str) -> None:
        self._expanded.discard(node_id)

    def expand_all(self) -> None:
        self._expanded = set(self._known_ids)

    def collapse_all(self) -> None:
        self._expanded.clear()

    def sync(self, nodes: Iterable[HierarchyNode]) -> None:
        """
        Refresh the known ids after the tree was rebuilt.

        Ids that no longer exist are dropped from the expand set; new ids are
        not expanded automatically.
        """
        self._known_ids = {node.id for node in nodes}
        stale = self._expanded - self._known_ids
        if stale:
            logger.debug(f"Dropping {len(stale)} stale ids from expand set")
        self._expanded &= self._known_ids

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_search(self, query: Optional[str]) -> None:
        self.search_query = (query or "").strip()

    def set_level_filter(self, level: Optional[int]) -> None:
        self.level_filter = level

    def clear_filters(self) -> None:
        self.search_query = ""
        self.level_filter = None

    @property
    def is_filtering(self) -> bool:
        return bool(self.search_query) or self.level_filter is not None

    def matches(self, node: HierarchyNode) -> bool:
        """Search AND level filter against a single node."""
        if self.search_query:
            query = self.search_query.lower()
            hit = (
                query in node.name.lower()
                or query in node.role.lower()
                or (node.department is not None and query in node.department.lower())
            )
            if not hit:
                return False
        if self.level_filter is not None and node.level != self.level_filter:
            return False
        return True

    def filter_nodes(self, nodes: Iterable[HierarchyNode]) -> List[HierarchyNode]:
        """Apply both filters to a flat list of nodes."""
        return [node for node in nodes if self.matches(node)]

    # ------------------------------------------------------------------
    # Derived view
    # ------------------------------------------------------------------

    def visible_roots(self, forest: Iterable[HierarchyTreeNode]) -> List[HierarchyTreeNode]:
        return [root for root in forest if self.matches(root)]

    def visible_rows(self, forest: Iterable[HierarchyTreeNode]) -> List[VisibleRow]:
        """
        Rows to render, in display order.

        Children of a node are emitted only when its id is in the expand set.
        """
        rows: List[VisibleRow] = []
        visited: Set[str] = set()

        def walk(tree_node: HierarchyTreeNode, depth: int) -> None:
            if tree_node.id in visited:
                return
            visited.add(tree_node.id)
            expanded = tree_node.id in self._expanded
            rows.append(VisibleRow(
                node=tree_node,
                depth=depth,
                has_children=bool(tree_node.children),
                is_expanded=expanded,
            ))
            if expanded:
                for child in tree_node.children:
                    walk(child, depth + 1)

        for root in self.visible_roots(forest):
            walk(root, 0)
        return rows
