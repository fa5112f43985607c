from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional


# --- client -> server ---

class TeamJoin(BaseModel):
    type: Literal["team:join"] = "team:join"
    teamId: str = Field(..., min_length=1)


class ViewOpen(BaseModel):
    type: Literal["view:open"] = "view:open"
    path: str
    params: dict[str, str] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _stringify(cls, v):
        # navigation parameters are query-string values
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items() if val is not None}
        return v


class AnswerSelect(BaseModel):
    type: Literal["answer:select"] = "answer:select"
    optionIndex: int


class AnswerConfirm(BaseModel):
    type: Literal["answer:confirm"] = "answer:confirm"


# --- server -> client ---

class QuizView(BaseModel):
    id: str
    teamId: Optional[str] = None
    question: str
    options: list[str]


class ServerStateSync(BaseModel):
    type: Literal["state_sync"] = "state_sync"
    phase: Literal["lobby", "starting", "answering", "advancing", "results_wait"]
    index: Optional[int] = None
    quiz: Optional[QuizView] = None
    selectedOption: Optional[int] = None
    canConfirm: bool = False
    teamId: Optional[str] = None


class ServerNavigate(BaseModel):
    type: Literal["navigate"] = "navigate"
    path: str
    params: dict[str, str]
    url: str


class ServerError(BaseModel):
    type: Literal["error"] = "error"
    code: str
    message: str
    fatal: bool = False

