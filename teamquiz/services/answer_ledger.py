from __future__ import annotations

from typing import Optional

from teamquiz.core.errors import DuplicateAnswerError, NotLoggedInError, ValidationError
from teamquiz.core.logging import get_logger
from teamquiz.domain.model import ANSWERS, Answer, answer_path
from teamquiz.services.quiz_sequencer import QuizSequencer
from teamquiz.store.base import DocumentStore

logger = get_logger(__name__)


class AnswerLedger:
    """Append-only record of answers, at most one per (quiz, team)."""

    def __init__(self, store: DocumentStore, sequencer: QuizSequencer) -> None:
        self.store = store
        self.sequencer = sequencer

    async def submit(
        self,
        quiz_id: str,
        team_id: str,
        identity_id: Optional[str],
        option_index: int,
    ) -> Answer:
        if not identity_id:
            raise NotLoggedInError()

        quiz = await self.sequencer.quiz_by_id(quiz_id)
        if isinstance(option_index, bool) or not 0 <= option_index < len(quiz.options):
            raise ValidationError(
                f"Option {option_index} is out of bounds for quiz {quiz_id} ({len(quiz.options)} options)"
            )

        answer = Answer(
            quiz_id=quiz_id,
            team_id=team_id,
            identity_id=identity_id,
            option_index=option_index,
            submitted_at=await self.store.server_time_ms(),
        )
        # create-if-absent is the only write; an existing answer is never overwritten
        created = await self.store.create(answer_path(quiz_id, team_id), answer.to_doc())
        if not created:
            logger.warning(
                "Duplicate answer rejected: quiz=%s team=%s",
                quiz_id[:8],
                team_id[:8],
                extra={"identity": identity_id, "team": team_id},
            )
            raise DuplicateAnswerError()

        logger.info(
            "Answer recorded: quiz=%s team=%s option=%d",
            quiz_id[:8],
            team_id[:8],
            option_index,
            extra={"identity": identity_id, "team": team_id},
        )
        return answer

    async def has_answered(self, quiz_id: str, team_id: str) -> bool:
        return await self.store.get(answer_path(quiz_id, team_id)) is not None

    async def answers_for(self, quiz_id: str) -> set[Answer]:
        docs = await self.store.query(ANSWERS, lambda d: d.get("quizId") == quiz_id)
        return {Answer.from_doc(d) for d in docs}

    async def answers_by_team(self, team_id: str) -> set[Answer]:
        docs = await self.store.query(ANSWERS, lambda d: d.get("teamId") == team_id)
        return {Answer.from_doc(d) for d in docs}

    async def clear(self) -> int:
        docs = await self.store.query(ANSWERS)
        for doc in docs:
            await self.store.delete(answer_path(doc["quizId"], doc["teamId"]))
        return len(docs)
