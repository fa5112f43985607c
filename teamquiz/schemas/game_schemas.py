from typing import Annotated, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from ..domain.model import QuizDraft


class IdentityOut(BaseModel):
    identity: str


class TeamCreateIn(BaseModel):
    name: str = Field(..., min_length=1)


class TeamOut(BaseModel):
    id: str
    name: str


class TeamListOut(BaseModel):
    count: int
    teams: List[TeamOut]


class MembershipOut(BaseModel):
    identity: str
    teamId: str


class FlagOut(BaseModel):
    started: bool
    startedAt: Optional[str] = None
    roundId: Optional[str] = None


class StartOut(FlagOut):
    changed: bool


class QuestionIn(BaseModel):
    questionText: str = Field(..., min_length=1)
    options: Annotated[list[str], Field(min_length=2)]
    correctOption: Optional[int] = Field(None, ge=0)
    teamId: Optional[str] = None

    @model_validator(mode="after")
    def _correct_in_options(self):
        if self.correctOption is not None and self.correctOption >= len(self.options):
            raise ValueError("correctOption must point at one of the options")
        return self

    def to_draft(self) -> QuizDraft:
        return QuizDraft(
            question=self.questionText,
            options=list(self.options),
            correct_option=self.correctOption,
            team_id=self.teamId,
        )


class RoundCreateIn(BaseModel):
    roundId: Optional[str] = None
    questions: List[QuestionIn]


class RoundOut(BaseModel):
    roundId: Optional[str]
    length: int


class QuizOut(BaseModel):
    id: str
    teamId: Optional[str] = None
    question: str
    options: list[str]
    position: int
    isLast: bool


class AnswerIn(BaseModel):
    quizId: str = Field(..., min_length=1)
    optionIndex: int

    @field_validator("optionIndex", mode="before")
    @classmethod
    def _no_bool(cls, v):
        if isinstance(v, bool):
            raise ValueError("optionIndex must be an integer")
        return v


class AnswerOut(BaseModel):
    quizId: str
    teamId: str
    identityId: str
    optionIndex: int
    submittedAt: str


class AnsweredOut(BaseModel):
    quizId: str
    teamId: str
    answered: bool


class RoundStateOut(BaseModel):
    teamId: str
    currentIndex: int
    length: int
    terminal: bool


class ScoreRow(BaseModel):
    teamId: str
    name: str
    answered: int
    correct: int


class LibraryItem(BaseModel):
    id: str
    title: str
    updatedAt: str
