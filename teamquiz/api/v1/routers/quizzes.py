from fastapi import APIRouter

from ...deps import LibraryServiceDep, SequencerDep
from ....schemas.game_schemas import LibraryItem, QuizOut, RoundOut

router = APIRouter(tags=["quizzes"])


@router.get("/quizzes", response_model=RoundOut)
async def sequence_info(sequencer: SequencerDep):
    sequence = await sequencer.sequence()
    return {"roundId": sequence.round_id, "length": len(sequence.quiz_ids)}


@router.get("/quizzes/{index}", response_model=QuizOut)
async def quiz_at(index: int, sequencer: SequencerDep):
    # OutOfRangeError is mapped to 422 by the app
    quiz = await sequencer.quiz_at(index)
    return {
        "id": quiz.id,
        "teamId": quiz.team_id,
        "question": quiz.question,
        "options": list(quiz.options),
        "position": quiz.position,
        "isLast": await sequencer.is_last(index),
    }


@router.get("/library", response_model=list[LibraryItem])
async def list_library(library: LibraryServiceDep):
    return library.list_quizzes()
