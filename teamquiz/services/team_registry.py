from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from teamquiz.core.errors import MembershipLockedError, NotFoundError, NotLoggedInError, ValidationError
from teamquiz.core.logging import get_logger
from teamquiz.domain.model import TEAMS, Team, TeamMembership, membership_path, team_path
from teamquiz.store.base import DocumentStore

if TYPE_CHECKING:
    from teamquiz.services.game_signal import GameStartSignal

logger = get_logger(__name__)


class TeamRegistry:
    """Teams and the identity -> team membership."""

    def __init__(self, store: DocumentStore, signal: Optional["GameStartSignal"] = None) -> None:
        self.store = store
        self.signal = signal

    async def register_team(self, name: str) -> Team:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Team name must not be empty")
        team = Team(
            id=uuid.uuid4().hex,
            name=name,
            created_at=await self.store.server_time_ms(),
            seq=await self.store.next_sequence(TEAMS),
        )
        await self.store.set(team_path(team.id), team.to_doc())
        logger.info("Registered team %s (%s)", team.name, team.id[:8])
        return team

    async def list_teams(self) -> list[Team]:
        docs = await self.store.query(TEAMS)
        teams = [Team.from_doc(d) for d in docs]
        # creation order; the counter breaks ties within one millisecond
        return sorted(teams, key=lambda t: (t.created_at, t.seq))

    async def count_teams(self) -> int:
        return len(await self.store.query(TEAMS))

    async def get_team(self, team_id: str) -> Team:
        doc = await self.store.get(team_path(team_id))
        if doc is None:
            raise NotFoundError(f"Team {team_id} not found")
        return Team.from_doc(doc)

    async def join_team(self, identity_id: Optional[str], team_id: str) -> None:
        if not identity_id:
            raise NotLoggedInError()
        await self.get_team(team_id)

        current = await self.store.get(membership_path(identity_id))
        if current is not None and current.get("teamId") == team_id:
            return
        if current is not None and self.signal is not None and await self.signal.is_started():
            raise MembershipLockedError()

        membership = TeamMembership(
            identity_id=identity_id,
            team_id=team_id,
            joined_at=await self.store.server_time_ms(),
        )
        await self.store.set(membership_path(identity_id), membership.to_doc())
        logger.info(
            "Identity %s joined team %s",
            identity_id[:8],
            team_id[:8],
            extra={"identity": identity_id, "team": team_id},
        )

    async def current_team_id(self, identity_id: Optional[str]) -> str:
        if not identity_id:
            raise NotLoggedInError()
        doc = await self.store.get(membership_path(identity_id))
        if doc is None:
            raise NotFoundError(f"Identity {identity_id} has not joined a team")
        return TeamMembership.from_doc(doc).team_id
