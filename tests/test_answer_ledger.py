import asyncio

import pytest

from conftest import make_drafts
from teamquiz.core.errors import DuplicateAnswerError, NotFoundError, NotLoggedInError, ValidationError
from teamquiz.domain.model import ANSWERS

pytestmark = pytest.mark.anyio


@pytest.fixture
async def quiz(rounds, sequencer):
    await rounds.new_round(make_drafts(2))
    return await sequencer.quiz_at(0)


async def test_submit_records_answer(ledger, quiz, store):
    answer = await ledger.submit(quiz.id, "team-1", "ident-1", 2)
    assert answer.option_index == 2
    assert answer.submitted_at > 0
    assert await ledger.has_answered(quiz.id, "team-1")
    assert not await ledger.has_answered(quiz.id, "team-2")
    assert await store.get(f"{ANSWERS}/{quiz.id}_team-1") == answer.to_doc()


async def test_second_submit_is_rejected_and_keeps_first(ledger, quiz):
    first = await ledger.submit(quiz.id, "team-1", "ident-1", 0)
    with pytest.raises(DuplicateAnswerError):
        await ledger.submit(quiz.id, "team-1", "ident-2", 3)
    assert await ledger.answers_for(quiz.id) == {first}


async def test_concurrent_submits_leave_exactly_one_answer(ledger, quiz):
    results = await asyncio.gather(
        *(ledger.submit(quiz.id, "team-1", f"ident-{i}", i % 4) for i in range(6)),
        return_exceptions=True,
    )
    accepted = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, DuplicateAnswerError)]
    assert len(accepted) == 1
    assert len(rejected) == 5
    assert len(await ledger.answers_for(quiz.id)) == 1


async def test_teams_write_disjoint_answers(ledger, quiz):
    await ledger.submit(quiz.id, "team-1", "ident-1", 0)
    await ledger.submit(quiz.id, "team-2", "ident-2", 1)
    assert {a.team_id for a in await ledger.answers_for(quiz.id)} == {"team-1", "team-2"}


@pytest.mark.parametrize("option", [-1, 4])
async def test_option_out_of_bounds(ledger, quiz, option):
    with pytest.raises(ValidationError):
        await ledger.submit(quiz.id, "team-1", "ident-1", option)
    assert not await ledger.has_answered(quiz.id, "team-1")


async def test_identity_required_before_write(ledger, quiz):
    with pytest.raises(NotLoggedInError):
        await ledger.submit(quiz.id, "team-1", None, 0)
    assert not await ledger.has_answered(quiz.id, "team-1")


async def test_unknown_quiz(ledger):
    with pytest.raises(NotFoundError):
        await ledger.submit("missing", "team-1", "ident-1", 0)


async def test_new_round_clears_ledger(ledger, quiz, rounds):
    await ledger.submit(quiz.id, "team-1", "ident-1", 0)
    await rounds.new_round(make_drafts(1))
    assert await ledger.answers_for(quiz.id) == set()
    assert not await ledger.has_answered(quiz.id, "team-1")
