from typing import List, Optional

from .typing import to_iso
from ..domain.model import QuizDraft
from ..repositories.quiz_repository import QuizRepository


class QuizLibraryService:
    """Saved quizzes that a new round can be built from."""

    def __init__(self, repo: QuizRepository) -> None:
        self.repo = repo

    def list_quizzes(self) -> list[dict]:
        items = self.repo.list_quizzes()
        return [
            {
                "id": i["id"],
                "title": i["title"],
                "updatedAt": to_iso(i["updated_at"]),
            }
            for i in items
        ]

    def drafts(self, quiz_id: str) -> Optional[List[QuizDraft]]:
        return self.repo.load_drafts(quiz_id)
