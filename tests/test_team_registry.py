import pytest

from teamquiz.core.errors import MembershipLockedError, NotFoundError, NotLoggedInError, ValidationError
from teamquiz.domain.model import MEMBERSHIPS, TEAMS, membership_path
from teamquiz.services.team_registry import TeamRegistry
from teamquiz.store.memory import MemoryDocumentStore

pytestmark = pytest.mark.anyio


async def test_register_team_persists(registry, store):
    team = await registry.register_team("  Owls ")
    assert team.name == "Owls"
    assert team.id
    assert await store.get(f"{TEAMS}/{team.id}") == team.to_doc()


@pytest.mark.parametrize("name", ["", "   "])
async def test_register_team_rejects_empty_name(registry, name):
    with pytest.raises(ValidationError):
        await registry.register_team(name)


async def test_list_teams_in_creation_order(registry):
    names = ["Owls", "Foxes", "Bears"]
    for name in names:
        await registry.register_team(name)

    teams = await registry.list_teams()
    assert [t.name for t in teams] == names
    assert len({t.id for t in teams}) == 3
    assert await registry.count_teams() == 3


class SameMillisecondStore(MemoryDocumentStore):
    """Every write lands in the same millisecond and queries come back reversed."""

    async def server_time_ms(self):
        return 1_700_000_000_000

    async def query(self, collection, predicate=None):
        return list(reversed(await super().query(collection, predicate)))


async def test_list_teams_orders_same_millisecond_teams():
    registry = TeamRegistry(SameMillisecondStore())
    names = ["Owls", "Foxes", "Bears", "Wolves"]
    for name in names:
        await registry.register_team(name)

    teams = await registry.list_teams()
    assert [t.name for t in teams] == names
    assert [t.seq for t in teams] == [1, 2, 3, 4]


async def test_join_unknown_team(registry):
    with pytest.raises(NotFoundError):
        await registry.join_team("ident-1", "nope")


async def test_join_requires_identity(registry):
    team = await registry.register_team("Owls")
    with pytest.raises(NotLoggedInError):
        await registry.join_team(None, team.id)


async def test_rejoin_same_team_is_a_noop(registry, store):
    team = await registry.register_team("Owls")
    await registry.join_team("ident-1", team.id)
    before = await store.get(membership_path("ident-1"))

    await registry.join_team("ident-1", team.id)

    assert await store.get(membership_path("ident-1")) == before
    assert len(await store.query(MEMBERSHIPS)) == 1


async def test_join_other_team_overwrites_before_start(registry):
    owls = await registry.register_team("Owls")
    foxes = await registry.register_team("Foxes")
    await registry.join_team("ident-1", owls.id)
    await registry.join_team("ident-1", foxes.id)
    assert await registry.current_team_id("ident-1") == foxes.id


async def test_membership_is_locked_after_start(registry, signal):
    owls = await registry.register_team("Owls")
    foxes = await registry.register_team("Foxes")
    await registry.join_team("ident-1", owls.id)
    await signal.start_game()

    with pytest.raises(MembershipLockedError):
        await registry.join_team("ident-1", foxes.id)
    # rejoining the same team stays harmless
    await registry.join_team("ident-1", owls.id)
    assert await registry.current_team_id("ident-1") == owls.id


async def test_current_team_requires_membership(registry):
    with pytest.raises(NotFoundError):
        await registry.current_team_id("ident-1")
    with pytest.raises(NotLoggedInError):
        await registry.current_team_id(None)
