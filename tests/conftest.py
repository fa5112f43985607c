import pytest
from fastapi.testclient import TestClient

from teamquiz.core.store import get_store
from teamquiz.domain.model import QuizDraft
from teamquiz.main import app
from teamquiz.services.answer_ledger import AnswerLedger
from teamquiz.services.game_signal import GameStartSignal
from teamquiz.services.quiz_sequencer import QuizSequencer
from teamquiz.services.round_service import RoundService
from teamquiz.services.team_registry import TeamRegistry
from teamquiz.store.memory import MemoryDocumentStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def signal(store):
    return GameStartSignal(store)


@pytest.fixture
def registry(store, signal):
    return TeamRegistry(store, signal)


@pytest.fixture
def sequencer(store):
    return QuizSequencer(store)


@pytest.fixture
def ledger(store, sequencer):
    return AnswerLedger(store, sequencer)


@pytest.fixture
def rounds(store, signal, ledger):
    return RoundService(store, signal, ledger)


def make_drafts(count=3):
    return [
        QuizDraft(
            question=f"Question {i + 1}?",
            options=["A", "B", "C", "D"],
            correct_option=i % 4,
        )
        for i in range(count)
    ]


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
