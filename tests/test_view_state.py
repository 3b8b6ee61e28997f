"""
Tests for the session-local view state controller.

Covers expand set behaviour, search and level filters, and the derived
visible rows of a forest.
"""

import pytest

from orgchart.app.models.hierarchy_models import HierarchyNode
from orgchart.core.services.hierarchy_crud import ViewStateController, build_forest


def node(node_id, parent_id=None, level=0, department=None, name=None, role="Employee", is_expanded=True):
    return HierarchyNode(
        id=node_id,
        org_id="acme_inc",
        parent_id=parent_id,
        level=level,
        name=name or node_id.upper(),
        role=role,
        department=department,
        is_expanded=is_expanded,
    )


@pytest.fixture
def chart():
    """
    ceo (Executive)
    |-- cfo (Finance)
    |   |-- controller (Finance)
    |   `-- treasurer (Treasury & Financing)
    `-- cto (Technology)
        `-- dev (Technology)
    advisor (Finance), second root
    """
    return [
        node("ceo", department="Executive", role="CEO"),
        node("cfo", "ceo", 1, department="Finance", role="CFO"),
        node("controller", "cfo", 2, department="Finance", role="Controller"),
        node("treasurer", "cfo", 2, department="Treasury & Financing", role="Treasurer"),
        node("cto", "ceo", 1, department="Technology", role="CTO"),
        node("dev", "cto", 2, department="Technology", role="Developer", is_expanded=False),
        node("advisor", department="Finance", role="Advisor"),
    ]


class TestExpandSet:
    """Tests for toggle / expand_all / collapse_all."""

    def test_toggle_twice_is_identity(self):
        controller = ViewStateController(["a", "b"])
        original = controller.expanded

        assert controller.toggle("x") is True
        assert controller.is_expanded("x")
        assert controller.toggle("x") is False

        assert controller.expanded == original

    def test_toggle_existing_member_twice(self):
        controller = ViewStateController(["a"])
        controller.toggle("a")
        assert not controller.is_expanded("a")
        controller.toggle("a")
        assert controller.expanded == frozenset({"a"})

    def test_from_nodes_seeds_from_hint(self, chart):
        controller = ViewStateController.from_nodes(chart)
        assert controller.is_expanded("ceo")
        assert not controller.is_expanded("dev")

    def test_expand_all_and_collapse_all(self, chart):
        controller = ViewStateController.from_nodes(chart)

        controller.collapse_all()
        assert controller.expanded == frozenset()

        controller.expand_all()
        assert controller.expanded == frozenset(n.id for n in chart)

    def test_sync_drops_stale_ids(self, chart):
        controller = ViewStateController.from_nodes(chart)
        controller.sync([n for n in chart if n.id != "cfo"])
        assert not controller.is_expanded("cfo")
        assert controller.is_expanded("ceo")

    def test_expanded_is_a_snapshot(self):
        controller = ViewStateController(["a"])
        snapshot = controller.expanded
        controller.expand("b")
        assert snapshot == frozenset({"a"})


class TestFilters:
    """Tests for the search and level filters."""

    def test_department_and_level_filter(self, chart):
        """Search 'Fin' plus level 2 returns only level-2 nodes with 'fin' in the department."""
        controller = ViewStateController()
        controller.set_search("Fin")
        controller.set_level_filter(2)

        result = controller.filter_nodes(chart)

        assert [n.id for n in result] == ["controller", "treasurer"]
        assert all(n.level == 2 and "fin" in n.department.lower() for n in result)

    def test_search_is_case_insensitive(self, chart):
        controller = ViewStateController()
        controller.set_search("tECHno")
        assert {n.id for n in controller.filter_nodes(chart)} == {"cto", "dev"}

    def test_search_matches_name_and_role(self, chart):
        controller = ViewStateController()
        controller.set_search("develop")
        assert [n.id for n in controller.filter_nodes(chart)] == ["dev"]

    def test_level_filter_alone(self, chart):
        controller = ViewStateController()
        controller.set_level_filter(0)
        assert [n.id for n in controller.filter_nodes(chart)] == ["ceo", "advisor"]

    def test_clear_filters(self, chart):
        controller = ViewStateController()
        controller.set_search("fin")
        controller.set_level_filter(1)
        assert controller.is_filtering

        controller.clear_filters()

        assert not controller.is_filtering
        assert len(controller.filter_nodes(chart)) == len(chart)

    def test_blank_search_is_no_filter(self, chart):
        controller = ViewStateController()
        controller.set_search("   ")
        assert not controller.is_filtering


class TestVisibleRows:
    """Tests for the derived rendered rows."""

    def test_only_expanded_nodes_show_children(self, chart):
        controller = ViewStateController(["ceo"])
        controller.sync(chart)

        rows = controller.visible_rows(build_forest(chart))

        assert [(r.node.id, r.depth) for r in rows] == [
            ("ceo", 0), ("cfo", 1), ("cto", 1), ("advisor", 0)
        ]
        assert rows[1].has_children is True
        assert rows[1].is_expanded is False

    def test_expand_all_shows_everything(self, chart):
        controller = ViewStateController.from_nodes(chart)
        controller.expand_all()
        rows = controller.visible_rows(build_forest(chart))
        assert len(rows) == len(chart)

    def test_search_restricts_roots_only(self, chart):
        """A matching descendant does not pull in its root; children of a matching root are unfiltered."""
        controller = ViewStateController.from_nodes(chart)
        controller.expand_all()
        controller.set_search("Finance")

        roots = controller.visible_roots(build_forest(chart))
        assert [r.id for r in roots] == ["advisor"]

        controller.set_search("Executive")
        rows = controller.visible_rows(build_forest(chart))
        assert rows[0].node.id == "ceo"
        assert {r.node.id for r in rows} == {"ceo", "cfo", "controller", "treasurer", "cto", "dev"}
