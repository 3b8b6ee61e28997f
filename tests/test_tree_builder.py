"""
Tests for the tree builder and the level utilities.

Covers:
1. Forest construction (roots, dangling parents, child order)
2. Cycle tolerance
3. flatten_forest round trip
4. Header stats
5. Hierarchy audit
"""

import pytest

from orgchart.app.models.hierarchy_models import HierarchyNode
from orgchart.core.services.hierarchy_crud import (
    build_forest,
    flatten_forest,
    forest_stats,
    validate_hierarchy,
)
from orgchart.core.services.hierarchy_crud.level_utils import (
    compute_levels,
    index_by_id,
    iter_ancestor_ids,
    would_create_cycle,
)


def node(node_id, parent_id=None, level=0, name=None, **kwargs):
    return HierarchyNode(
        id=node_id,
        org_id="acme_inc",
        parent_id=parent_id,
        level=level,
        name=name or node_id.upper(),
        role=kwargs.pop("role", "Employee"),
        **kwargs
    )


@pytest.fixture
def sample_nodes():
    """
    a
    |-- b
    |   `-- d
    `-- c
    e (second root)
    """
    return [
        node("a"),
        node("b", "a", 1),
        node("c", "a", 1),
        node("d", "b", 2),
        node("e"),
    ]


class TestBuildForest:
    """Tests for build_forest."""

    def test_empty_input(self):
        assert build_forest([]) == []

    def test_roots_and_children(self, sample_nodes):
        forest = build_forest(sample_nodes)

        assert [root.id for root in forest] == ["a", "e"]
        a = forest[0]
        assert [child.id for child in a.children] == ["b", "c"]
        assert [child.id for child in a.children[0].children] == ["d"]
        assert forest[1].children == []

    def test_children_keep_input_order(self):
        nodes = [node("root"), node("z", "root", 1), node("m", "root", 1), node("a", "root", 1)]
        forest = build_forest(nodes)
        assert [child.id for child in forest[0].children] == ["z", "m", "a"]

    def test_child_before_parent_in_input(self):
        """Order of the flat list does not matter for attachment."""
        nodes = [node("child", "parent", 1), node("parent")]
        forest = build_forest(nodes)
        assert [root.id for root in forest] == ["parent"]
        assert forest[0].children[0].id == "child"

    def test_dangling_parent_becomes_root(self):
        nodes = [node("a"), node("orphan", "deleted-id", 3)]
        forest = build_forest(nodes)
        assert {root.id for root in forest} == {"a", "orphan"}

    def test_cycle_members_are_excluded(self):
        """A <-> B cycle is unreachable from any root; C is still a root."""
        nodes = [node("x", "y", 1), node("y", "x", 1), node("c")]
        forest = build_forest(nodes)
        assert [root.id for root in forest] == ["c"]
        assert flatten_forest(forest)[0].id == "c"
        assert len(flatten_forest(forest)) == 1

    def test_every_reachable_node_appears_once(self, sample_nodes):
        flat = flatten_forest(build_forest(sample_nodes))
        ids = [n.id for n in flat]
        assert len(ids) == len(set(ids))


class TestFlattenForest:
    """Tests for the pre-order flattening."""

    def test_round_trip_preserves_ids(self, sample_nodes):
        flat = flatten_forest(build_forest(sample_nodes))
        assert {n.id for n in flat} == {n.id for n in sample_nodes}

    def test_pre_order(self, sample_nodes):
        flat = flatten_forest(build_forest(sample_nodes))
        assert [n.id for n in flat] == ["a", "b", "d", "c", "e"]

    def test_children_stripped(self, sample_nodes):
        flat = flatten_forest(build_forest(sample_nodes))
        assert all(not hasattr(n, "children") for n in flat)


class TestForestStats:
    """Tests for header stats."""

    def test_stats(self, sample_nodes):
        stats = forest_stats(sample_nodes)
        assert stats["total"] == 5
        assert stats["roots"] == 2
        assert stats["by_level"] == {"0": 2, "1": 2, "2": 1}
        assert stats["max_level"] == 2

    def test_stats_empty(self):
        assert forest_stats([]) == {"total": 0, "roots": 0, "by_level": {}, "max_level": 0}


class TestLevelUtils:
    """Tests for ancestry and level helpers."""

    def test_ancestor_chain(self, sample_nodes):
        by_id = index_by_id(sample_nodes)
        assert list(iter_ancestor_ids("d", by_id)) == ["d", "b", "a"]
        assert list(iter_ancestor_ids(None, by_id)) == []

    def test_ancestor_chain_terminates_on_cycle(self):
        by_id = index_by_id([node("x", "y", 1), node("y", "x", 1)])
        assert list(iter_ancestor_ids("x", by_id)) == ["x", "y"]

    def test_would_create_cycle(self, sample_nodes):
        by_id = index_by_id(sample_nodes)
        assert would_create_cycle("a", "d", by_id) is True
        assert would_create_cycle("b", "b", by_id) is True
        assert would_create_cycle("d", "c", by_id) is False
        assert would_create_cycle("a", None, by_id) is False

    def test_compute_levels(self):
        nodes = [node("a"), node("b", "a", 7), node("x", "y", 1), node("y", "x", 1)]
        assert compute_levels(nodes) == {"a": 0, "b": 1, "x": None, "y": None}


class TestValidateHierarchy:
    """Tests for the hierarchy audit."""

    def test_valid_forest(self, sample_nodes):
        report = validate_hierarchy(sample_nodes)
        assert report == {"unreachable": [], "level_mismatches": [], "dangling_parents": []}

    def test_reports_problems(self):
        nodes = [
            node("a"),
            node("b", "a", 5),
            node("orphan", "gone", 0),
            node("x", "y", 1),
            node("y", "x", 1),
        ]
        report = validate_hierarchy(nodes)
        assert report["level_mismatches"] == ["b"]
        assert report["dangling_parents"] == ["orphan"]
        assert sorted(report["unreachable"]) == ["x", "y"]
