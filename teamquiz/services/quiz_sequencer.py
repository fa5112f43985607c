from __future__ import annotations

from typing import Optional

from teamquiz.core.errors import NotFoundError, OutOfRangeError
from teamquiz.domain.model import SEQUENCE_PATH, Quiz, QuizSequence, quiz_path
from teamquiz.store.base import DocumentStore


class QuizSequencer:
    """
    Resolves quizzes purely by position in the round's sequence.

    The sequence is read once per instance; it is fixed for the round and an
    instance lives no longer than one request or one client session.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._sequence: Optional[QuizSequence] = None

    async def sequence(self) -> QuizSequence:
        if self._sequence is None:
            self._sequence = QuizSequence.from_doc(await self.store.get(SEQUENCE_PATH))
        return self._sequence

    async def length(self) -> int:
        return len((await self.sequence()).quiz_ids)

    async def is_last(self, index: int) -> bool:
        return index == await self.length() - 1

    async def quiz_at(self, index: int) -> Quiz:
        ids = (await self.sequence()).quiz_ids
        if index < 0 or index >= len(ids):
            raise OutOfRangeError(f"Quiz index {index} is out of range (0..{len(ids) - 1})")
        return await self.quiz_by_id(ids[index])

    async def quiz_by_id(self, quiz_id: str) -> Quiz:
        doc = await self.store.get(quiz_path(quiz_id))
        if doc is None:
            raise NotFoundError(f"Quiz {quiz_id} not found")
        return Quiz.from_doc(doc)

