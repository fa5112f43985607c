from fastapi import APIRouter, status

from ...deps import IdentityDep, LedgerDep, RegistryDep
from ....core.errors import NotLoggedInError
from ....domain.model import Answer
from ....schemas.game_schemas import AnswerIn, AnsweredOut, AnswerOut
from ....services.typing import to_iso

router = APIRouter(tags=["answers"])


def _answer_out(a: Answer) -> dict:
    return {
        "quizId": a.quiz_id,
        "teamId": a.team_id,
        "identityId": a.identity_id,
        "optionIndex": a.option_index,
        "submittedAt": to_iso(a.submitted_at),
    }


@router.post("/answers", response_model=AnswerOut, status_code=status.HTTP_201_CREATED)
async def submit_answer(payload: AnswerIn, ledger: LedgerDep, registry: RegistryDep, identity: IdentityDep):
    # the team is taken from the caller's membership, never from the body
    if identity is None:
        raise NotLoggedInError()
    team_id = await registry.current_team_id(identity)
    answer = await ledger.submit(payload.quizId, team_id, identity, payload.optionIndex)
    return _answer_out(answer)


@router.get("/answers/{quiz_id}", response_model=list[AnswerOut])
async def answers_for(quiz_id: str, ledger: LedgerDep):
    answers = sorted(await ledger.answers_for(quiz_id), key=lambda a: (a.submitted_at, a.team_id))
    return [_answer_out(a) for a in answers]


@router.get("/answers/{quiz_id}/{team_id}", response_model=AnsweredOut)
async def has_answered(quiz_id: str, team_id: str, ledger: LedgerDep):
    return {"quizId": quiz_id, "teamId": team_id, "answered": await ledger.has_answered(quiz_id, team_id)}
