from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Header

from teamquiz.core.store import get_store
from teamquiz.core.supabase_client import get_supabase
from teamquiz.repositories.quiz_repository import QuizRepository
from teamquiz.services.answer_ledger import AnswerLedger
from teamquiz.services.game_signal import GameStartSignal
from teamquiz.services.identity import IdentityProvider
from teamquiz.services.library_service import QuizLibraryService
from teamquiz.services.quiz_sequencer import QuizSequencer
from teamquiz.services.results import ResultService
from teamquiz.services.round_service import RoundService
from teamquiz.services.team_registry import TeamRegistry
from teamquiz.store.base import DocumentStore

StoreDep = Annotated[DocumentStore, Depends(get_store)]


def get_signal(store: StoreDep) -> GameStartSignal:
    return GameStartSignal(store)


def get_registry(store: StoreDep, signal: Annotated[GameStartSignal, Depends(get_signal)]) -> TeamRegistry:
    return TeamRegistry(store, signal)


def get_sequencer(store: StoreDep) -> QuizSequencer:
    return QuizSequencer(store)


def get_ledger(store: StoreDep, sequencer: Annotated[QuizSequencer, Depends(get_sequencer)]) -> AnswerLedger:
    return AnswerLedger(store, sequencer)


def get_round_service(
    store: StoreDep,
    signal: Annotated[GameStartSignal, Depends(get_signal)],
    ledger: Annotated[AnswerLedger, Depends(get_ledger)],
) -> RoundService:
    return RoundService(store, signal, ledger)


def get_result_service(
    registry: Annotated[TeamRegistry, Depends(get_registry)],
    sequencer: Annotated[QuizSequencer, Depends(get_sequencer)],
    ledger: Annotated[AnswerLedger, Depends(get_ledger)],
) -> ResultService:
    return ResultService(registry, sequencer, ledger)


def get_identity_provider() -> IdentityProvider:
    return IdentityProvider()


def get_library_service() -> QuizLibraryService:
    return QuizLibraryService(QuizRepository(get_supabase()))


def current_identity(x_identity: Annotated[Optional[str], Header()] = None) -> Optional[str]:
    """The opaque session identity travels in the ``X-Identity`` header."""
    return x_identity or None


SignalDep = Annotated[GameStartSignal, Depends(get_signal)]
RegistryDep = Annotated[TeamRegistry, Depends(get_registry)]
SequencerDep = Annotated[QuizSequencer, Depends(get_sequencer)]
LedgerDep = Annotated[AnswerLedger, Depends(get_ledger)]
RoundServiceDep = Annotated[RoundService, Depends(get_round_service)]
ResultServiceDep = Annotated[ResultService, Depends(get_result_service)]
IdentityProviderDep = Annotated[IdentityProvider, Depends(get_identity_provider)]
LibraryServiceDep = Annotated[QuizLibraryService, Depends(get_library_service)]
IdentityDep = Annotated[Optional[str], Depends(current_identity)]
