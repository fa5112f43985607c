from __future__ import annotations

from dataclasses import dataclass

from teamquiz.core.logging import get_logger
from teamquiz.domain.model import RoundState
from teamquiz.services.answer_ledger import AnswerLedger
from teamquiz.services.quiz_sequencer import QuizSequencer
from teamquiz.services.team_registry import TeamRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class TeamResult:
    team_id: str
    name: str
    answered: int
    correct: int


class ResultService:
    def __init__(self, registry: TeamRegistry, sequencer: QuizSequencer, ledger: AnswerLedger) -> None:
        self.registry = registry
        self.sequencer = sequencer
        self.ledger = ledger

    async def round_state(self, team_id: str) -> RoundState:
        """Recomputed from the ledger on every call."""
        await self.registry.get_team(team_id)
        sequence = await self.sequencer.sequence()
        answered = {a.quiz_id for a in await self.ledger.answers_by_team(team_id)}
        positions = [i for i, quiz_id in enumerate(sequence.quiz_ids) if quiz_id in answered]
        current = max(positions) + 1 if positions else 0
        return RoundState(team_id=team_id, current_index=current, length=len(sequence.quiz_ids))

    async def scoreboard(self) -> list[TeamResult]:
        teams = await self.registry.list_teams()
        sequence = await self.sequencer.sequence()

        answered: dict[str, int] = {t.id: 0 for t in teams}
        correct: dict[str, int] = {t.id: 0 for t in teams}
        for quiz_id in sequence.quiz_ids:
            quiz = await self.sequencer.quiz_by_id(quiz_id)
            for answer in await self.ledger.answers_for(quiz_id):
                if answer.team_id not in answered:
                    continue
                answered[answer.team_id] += 1
                if quiz.correct_option is not None and answer.option_index == quiz.correct_option:
                    correct[answer.team_id] += 1

        result = [
            TeamResult(team_id=t.id, name=t.name, answered=answered[t.id], correct=correct[t.id])
            for t in teams
        ]
        # stable: ties keep team creation order
        result.sort(key=lambda r: r.correct, reverse=True)
        logger.info("Scoreboard collated for %d teams", len(result))
        return result
