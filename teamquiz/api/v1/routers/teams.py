from fastapi import APIRouter, status

from ...deps import IdentityDep, IdentityProviderDep, RegistryDep, ResultServiceDep
from ....core.errors import NotLoggedInError
from ....schemas.game_schemas import IdentityOut, MembershipOut, RoundStateOut, TeamCreateIn, TeamListOut, TeamOut

router = APIRouter(tags=["teams"])


@router.post("/identity", response_model=IdentityOut, status_code=status.HTTP_201_CREATED)
async def sign_in_anonymously(provider: IdentityProviderDep):
    return {"identity": provider.sign_in_anonymously()}


@router.get("/teams", response_model=TeamListOut)
async def list_teams(registry: RegistryDep):
    teams = await registry.list_teams()
    return {"count": await registry.count_teams(), "teams": [{"id": t.id, "name": t.name} for t in teams]}


@router.post("/teams", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
async def register_team(payload: TeamCreateIn, registry: RegistryDep):
    team = await registry.register_team(payload.name)
    return {"id": team.id, "name": team.name}


@router.get("/teams/me", response_model=MembershipOut)
async def current_team(registry: RegistryDep, identity: IdentityDep):
    team_id = await registry.current_team_id(identity)
    return {"identity": identity, "teamId": team_id}


@router.post("/teams/{team_id}/join", response_model=MembershipOut)
async def join_team(team_id: str, registry: RegistryDep, identity: IdentityDep):
    if identity is None:
        raise NotLoggedInError()
    await registry.join_team(identity, team_id)
    return {"identity": identity, "teamId": team_id}


@router.get("/teams/{team_id}/progress", response_model=RoundStateOut)
async def team_progress(team_id: str, results: ResultServiceDep):
    state = await results.round_state(team_id)
    return {
        "teamId": state.team_id,
        "currentIndex": state.current_index,
        "length": state.length,
        "terminal": state.terminal,
    }
