from __future__ import annotations

import uuid
from typing import List, Optional

from teamquiz.core.errors import ValidationError
from teamquiz.core.logging import get_logger
from teamquiz.domain.model import QUIZZES, SEQUENCE_PATH, Quiz, QuizDraft, QuizSequence, quiz_path
from teamquiz.services.answer_ledger import AnswerLedger
from teamquiz.services.game_signal import GameStartSignal
from teamquiz.store.base import DocumentStore

logger = get_logger(__name__)


def validate_draft(position: int, draft: QuizDraft) -> None:
    if not draft.question.strip():
        raise ValidationError(f"Question {position} has no text")
    if len(draft.options) < 2:
        raise ValidationError(f"Question {position} needs at least 2 options")
    if draft.correct_option is not None and not 0 <= draft.correct_option < len(draft.options):
        raise ValidationError(f"Question {position} has an out of range correct option")


class RoundService:
    """Sets up a brand-new round: quizzes, sequence, empty ledger, unset flag."""

    def __init__(self, store: DocumentStore, signal: GameStartSignal, ledger: AnswerLedger) -> None:
        self.store = store
        self.signal = signal
        self.ledger = ledger

    async def new_round(self, drafts: List[QuizDraft], round_id: Optional[str] = None) -> QuizSequence:
        for position, draft in enumerate(drafts):
            validate_draft(position, draft)

        round_id = round_id or uuid.uuid4().hex

        # flag first, so nobody starts playing a half-written round
        await self.signal.reset(round_id)

        cleared = await self.ledger.clear()
        for doc in await self.store.query(QUIZZES):
            await self.store.delete(quiz_path(doc["id"]))

        quizzes = [
            Quiz(
                id=uuid.uuid4().hex,
                question=draft.question,
                options=tuple(draft.options),
                position=position,
                team_id=draft.team_id,
                correct_option=draft.correct_option,
            )
            for position, draft in enumerate(drafts)
        ]
        for quiz in quizzes:
            await self.store.set(quiz_path(quiz.id), quiz.to_doc())

        sequence = QuizSequence(quiz_ids=tuple(q.id for q in quizzes), round_id=round_id)
        await self.store.set(SEQUENCE_PATH, sequence.to_doc())

        logger.info(
            "New round %s with %d quizzes (%d old answers cleared)",
            round_id,
            len(quizzes),
            cleared,
        )
        return sequence
