from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

# persisted layout
TEAMS = "teams"
MEMBERSHIPS = "teamMemberships"
QUIZZES = "quizzes"
GAME_STATE = "gameState"
ANSWERS = "answers"

FLAG_PATH = f"{GAME_STATE}/flag"
SEQUENCE_PATH = f"{GAME_STATE}/sequence"


def team_path(team_id: str) -> str:
    return f"{TEAMS}/{team_id}"


def membership_path(identity_id: str) -> str:
    return f"{MEMBERSHIPS}/{identity_id}"


def quiz_path(quiz_id: str) -> str:
    return f"{QUIZZES}/{quiz_id}"


def answer_path(quiz_id: str, team_id: str) -> str:
    # composite key: one document per (quiz, team)
    return f"{ANSWERS}/{quiz_id}_{team_id}"


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    created_at: int = 0
    seq: int = 0

    def to_doc(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "createdAt": self.created_at, "seq": self.seq}

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> "Team":
        return cls(
            id=doc["id"],
            name=doc["name"],
            created_at=int(doc.get("createdAt") or 0),
            seq=int(doc.get("seq") or 0),
        )


@dataclass(frozen=True)
class TeamMembership:
    identity_id: str
    team_id: str
    joined_at: int = 0

    def to_doc(self) -> dict[str, Any]:
        return {"identityId": self.identity_id, "teamId": self.team_id, "joinedAt": self.joined_at}

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> "TeamMembership":
        return cls(
            identity_id=doc["identityId"],
            team_id=doc["teamId"],
            joined_at=int(doc.get("joinedAt") or 0),
        )


@dataclass(frozen=True)
class GameStartFlag:
    started: bool = False
    started_at: Optional[int] = None
    round_id: Optional[str] = None

    def to_doc(self) -> dict[str, Any]:
        return {"started": self.started, "startedAt": self.started_at, "roundId": self.round_id}

    @classmethod
    def from_doc(cls, doc: Optional[dict[str, Any]]) -> "GameStartFlag":
        if not doc:
            return cls()
        return cls(
            started=bool(doc.get("started")),
            started_at=doc.get("startedAt"),
            round_id=doc.get("roundId"),
        )


@dataclass(frozen=True)
class Quiz:
    id: str
    question: str
    options: tuple[str, ...]
    position: int
    team_id: Optional[str] = None
    correct_option: Optional[int] = None

    def to_doc(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "teamId": self.team_id,
            "question": self.question,
            "options": list(self.options),
            "position": self.position,
            "correctOption": self.correct_option,
        }

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> "Quiz":
        return cls(
            id=doc["id"],
            question=doc["question"],
            options=tuple(doc["options"]),
            position=int(doc["position"]),
            team_id=doc.get("teamId"),
            correct_option=doc.get("correctOption"),
        )


@dataclass(frozen=True)
class QuizDraft:
    """A question waiting to be placed into a round."""

    question: str
    options: list[str] = field(default_factory=list)
    correct_option: Optional[int] = None
    team_id: Optional[str] = None


@dataclass(frozen=True)
class QuizSequence:
    quiz_ids: tuple[str, ...] = ()
    round_id: Optional[str] = None

    def to_doc(self) -> dict[str, Any]:
        return {"quizIds": list(self.quiz_ids), "roundId": self.round_id}

    @classmethod
    def from_doc(cls, doc: Optional[dict[str, Any]]) -> "QuizSequence":
        if not doc:
            return cls()
        return cls(quiz_ids=tuple(doc.get("quizIds") or ()), round_id=doc.get("roundId"))


@dataclass(frozen=True)
class Answer:
    quiz_id: str
    team_id: str
    identity_id: str
    option_index: int
    submitted_at: int

    def to_doc(self) -> dict[str, Any]:
        return {
            "quizId": self.quiz_id,
            "teamId": self.team_id,
            "identityId": self.identity_id,
            "optionIndex": self.option_index,
            "submittedAt": self.submitted_at,
        }

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> "Answer":
        return cls(
            quiz_id=doc["quizId"],
            team_id=doc["teamId"],
            identity_id=doc["identityId"],
            option_index=int(doc["optionIndex"]),
            submitted_at=int(doc["submittedAt"]),
        )


@dataclass(frozen=True)
class RoundState:
    """Derived per team from the ledger and the sequence; never stored."""

    team_id: str
    current_index: int
    length: int

    @property
    def terminal(self) -> bool:
        return self.current_index > self.length - 1
