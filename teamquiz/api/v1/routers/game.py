from fastapi import APIRouter, HTTPException, status

from ...deps import LibraryServiceDep, ResultServiceDep, RoundServiceDep, SignalDep
from ....domain.model import GameStartFlag
from ....schemas.game_schemas import FlagOut, RoundCreateIn, RoundOut, ScoreRow, StartOut
from ....services.typing import to_iso

router = APIRouter(tags=["game"])


def _flag_out(flag: GameStartFlag) -> dict:
    return {
        "started": flag.started,
        "startedAt": to_iso(flag.started_at) if flag.started_at is not None else None,
        "roundId": flag.round_id,
    }


@router.get("/game/flag", response_model=FlagOut)
async def get_flag(signal: SignalDep):
    return _flag_out(await signal.flag())


@router.post("/game/start", response_model=StartOut)
async def start_game(signal: SignalDep):
    changed = await signal.start_game()
    return {**_flag_out(await signal.flag()), "changed": changed}


@router.post("/round", response_model=RoundOut, status_code=status.HTTP_201_CREATED)
async def new_round(payload: RoundCreateIn, rounds: RoundServiceDep):
    sequence = await rounds.new_round([q.to_draft() for q in payload.questions], payload.roundId)
    return {"roundId": sequence.round_id, "length": len(sequence.quiz_ids)}


@router.post("/round/from-library/{quiz_id}", response_model=RoundOut, status_code=status.HTTP_201_CREATED)
async def new_round_from_library(quiz_id: str, rounds: RoundServiceDep, library: LibraryServiceDep):
    drafts = library.drafts(quiz_id)
    if drafts is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    sequence = await rounds.new_round(drafts)
    return {"roundId": sequence.round_id, "length": len(sequence.quiz_ids)}


@router.get("/results", response_model=list[ScoreRow])
async def results(svc: ResultServiceDep):
    return [
        {"teamId": r.team_id, "name": r.name, "answered": r.answered, "correct": r.correct}
        for r in await svc.scoreboard()
    ]
