from typing import List, Optional, Tuple
from supabase import Client

from teamquiz.domain.model import QuizDraft


class QuizRepository:
    """Read access to the saved quiz library (``quizzes`` / ``questions`` tables)."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def list_quizzes(self) -> List[dict]:
        res = (
            self.client.table("quizzes")
            .select("id,title,updated_at")
            .order("updated_at", desc=True)
            .execute()
        )
        return res.data or []

    def get_quiz_with_questions(self, quiz_id: str) -> Optional[Tuple[dict, List[dict]]]:
        quiz_res = (
            self.client.table("quizzes")
            .select("*")
            .eq("id", quiz_id)
            .maybe_single()
            .execute()
        )
        if quiz_res is None or not quiz_res.data:
            return None

        q_res = (
            self.client.table("questions")
            .select("*")
            .eq("quiz_id", quiz_id)
            .order("position", desc=False)
            .execute()
        )
        return quiz_res.data, (q_res.data or [])

    def load_drafts(self, quiz_id: str) -> Optional[List[QuizDraft]]:
        res = self.get_quiz_with_questions(quiz_id)
        if res is None:
            return None
        _, questions = res
        return [
            QuizDraft(
                question=q["question_text"],
                options=list(q["answers"]),
                correct_option=q.get("correct_answer"),
            )
            for q in questions
        ]
