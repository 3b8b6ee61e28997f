"""
Tests for the node store implementations.

The same contract is exercised against the in-memory store and the SQLite
store (backed by a temporary file).
"""

import pytest

from orgchart.app.models.hierarchy_models import HierarchyNode
from orgchart.core.exceptions import StoreNotFoundError
from orgchart.core.store import InMemoryMemberDirectory, InMemoryNodeStore, SqliteNodeStore
from orgchart.app.models.hierarchy_models import OrgMember


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryNodeStore()
    return SqliteNodeStore(str(tmp_path / "nested" / "orgchart.db"))


def make(node_id, org_id="acme_inc", parent_id=None, level=0, **kwargs):
    return HierarchyNode(
        id=node_id,
        org_id=org_id,
        parent_id=parent_id,
        level=level,
        name=kwargs.pop("name", node_id.upper()),
        role=kwargs.pop("role", "Employee"),
        **kwargs
    )


class TestNodeStoreContract:
    """Contract tests run against every backend."""

    @pytest.mark.asyncio
    async def test_insert_sets_timestamps(self, store):
        stored = await store.insert(make("a"))
        assert stored.created_at is not None
        assert stored.updated_at == stored.created_at

    @pytest.mark.asyncio
    async def test_list_by_org_preserves_insertion_order(self, store):
        for node_id in ["c", "a", "b"]:
            await store.insert(make(node_id))
        await store.insert(make("z", org_id="globex_corp"))

        assert [n.id for n in await store.list_by_org("acme_inc")] == ["c", "a", "b"]
        assert [n.id for n in await store.list_by_org("globex_corp")] == ["z"]
        assert await store.list_by_org("empty_org") == []

    @pytest.mark.asyncio
    async def test_round_trips_all_fields(self, store):
        await store.insert(make(
            "a", user_id="m-1", department="Finance", email="a@acme.test",
            color="purple", shape="diamond", position={"x": 12.5, "y": -3}, is_expanded=False,
        ))
        [loaded] = await store.list_by_org("acme_inc")
        assert loaded.user_id == "m-1"
        assert loaded.department == "Finance"
        assert loaded.email == "a@acme.test"
        assert loaded.color == "purple"
        assert loaded.shape == "diamond"
        assert (loaded.position.x, loaded.position.y) == (12.5, -3)
        assert loaded.is_expanded is False

    @pytest.mark.asyncio
    async def test_duplicate_insert_rejected(self, store):
        await store.insert(make("a"))
        with pytest.raises(ValueError):
            await store.insert(make("a"))

    @pytest.mark.asyncio
    async def test_same_id_in_two_orgs(self, store):
        await store.insert(make("a"))
        await store.insert(make("a", org_id="globex_corp"))
        assert len(await store.list_by_org("acme_inc")) == 1
        assert len(await store.list_by_org("globex_corp")) == 1

    @pytest.mark.asyncio
    async def test_update_by_id(self, store):
        created = await store.insert(make("a"))
        await store.insert(make("b", parent_id="a", level=1))

        updated = await store.update_by_id("acme_inc", "b", {"parent_id": None, "level": 0, "role": "Lead"})

        assert updated.parent_id is None
        assert updated.level == 0
        assert updated.role == "Lead"
        assert updated.updated_at >= created.created_at
        [_, reloaded] = await store.list_by_org("acme_inc")
        assert reloaded.role == "Lead"

    @pytest.mark.asyncio
    async def test_update_keeps_identity(self, store):
        original = await store.insert(make("a"))
        updated = await store.update_by_id("acme_inc", "a", {"id": "x", "org_id": "globex_corp"})
        assert updated.id == "a"
        assert updated.org_id == "acme_inc"
        assert updated.created_at == original.created_at

    @pytest.mark.asyncio
    async def test_update_unknown(self, store):
        with pytest.raises(StoreNotFoundError):
            await store.update_by_id("acme_inc", "missing", {"name": "X"})

    @pytest.mark.asyncio
    async def test_delete_by_id(self, store):
        await store.insert(make("a"))
        await store.insert(make("b"))
        await store.delete_by_id("acme_inc", "a")
        assert [n.id for n in await store.list_by_org("acme_inc")] == ["b"]

        with pytest.raises(StoreNotFoundError):
            await store.delete_by_id("acme_inc", "a")

    @pytest.mark.asyncio
    async def test_delete_scoped_to_org(self, store):
        await store.insert(make("a", org_id="globex_corp"))
        with pytest.raises(StoreNotFoundError):
            await store.delete_by_id("acme_inc", "a")
        assert len(await store.list_by_org("globex_corp")) == 1


class TestInMemoryNodeStore:
    """Behaviour specific to the in-memory store."""

    @pytest.mark.asyncio
    async def test_returns_copies(self):
        store = InMemoryNodeStore()
        inserted = await store.insert(make("a"))
        inserted.name = "Mutated"
        [listed] = await store.list_by_org("acme_inc")
        listed.role = "Mutated"

        [fresh] = await store.list_by_org("acme_inc")
        assert fresh.name == "A"
        assert fresh.role == "Employee"

    @pytest.mark.asyncio
    async def test_clear(self):
        store = InMemoryNodeStore()
        await store.insert(make("a"))
        store.clear()
        assert await store.list_by_org("acme_inc") == []


class TestSqliteNodeStore:
    """Behaviour specific to the SQLite store."""

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        db_path = str(tmp_path / "orgchart.db")
        await SqliteNodeStore(db_path).insert(make("a"))

        reopened = SqliteNodeStore(db_path)
        assert [n.id for n in await reopened.list_by_org("acme_inc")] == ["a"]


class TestMemberDirectory:
    """Tests for the in-memory member directory."""

    def test_register_and_lookup(self):
        directory = InMemoryMemberDirectory()
        directory.register("acme_inc", [OrgMember(id="m-1", full_name="Alice")])
        directory.register("acme_inc", [OrgMember(id="m-1", full_name="Alice B", role="Lead")])

        assert [m.full_name for m in directory.list_members("acme_inc")] == ["Alice B"]
        assert directory.get_member("acme_inc", "m-1").role == "Lead"
        assert directory.get_member("globex_corp", "m-1") is None
        assert directory.list_members("globex_corp") == []
