"""Client-side game flow of one team device.

    Lobby -> Starting -> Answering(i) -> Advancing(i) -> Answering(i + 1) | ResultsWait

Every view is entered through ``open(navigation)``; the quiz index travels in
the navigation parameters only, so a reload resumes from the url alone.
Transitions of one coordinator never interleave. A failed transition keeps
the prior state.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from teamquiz.core.errors import (
    DuplicateAnswerError,
    NoSelectionError,
    NotLoggedInError,
    PreconditionError,
    QuizGameError,
    SubmissionPendingError,
    ValidationError,
)
from teamquiz.core.logging import get_logger
from teamquiz.domain.model import GameStartFlag, Quiz
from teamquiz.flow.navigation import ANSWER, RESULT_WAITING, WAITING, Navigation, parse_index
from teamquiz.services.answer_ledger import AnswerLedger
from teamquiz.services.game_signal import GameStartSignal, StartListener
from teamquiz.services.identity import SessionIdentity
from teamquiz.services.quiz_sequencer import QuizSequencer
from teamquiz.services.team_registry import TeamRegistry

logger = get_logger(__name__)


class FlowPhase(str, Enum):
    LOBBY = "lobby"
    STARTING = "starting"
    ANSWERING = "answering"
    ADVANCING = "advancing"
    RESULTS_WAIT = "results_wait"


@dataclass(frozen=True)
class FlowState:
    phase: FlowPhase = FlowPhase.LOBBY
    index: Optional[int] = None
    quiz: Optional[Quiz] = None
    selected_option: Optional[int] = None
    submitting: bool = False
    team_id: Optional[str] = None

    @property
    def can_confirm(self) -> bool:
        return (
            self.phase is FlowPhase.ANSWERING
            and self.selected_option is not None
            and not self.submitting
        )


class FlowObserver:
    """Receives what the client should render. The default ignores everything."""

    async def on_state(self, state: FlowState) -> None:
        pass

    async def on_navigate(self, navigation: Navigation) -> None:
        pass

    async def on_error(self, error: QuizGameError) -> None:
        pass


class GameFlowCoordinator:
    def __init__(
        self,
        registry: TeamRegistry,
        signal: GameStartSignal,
        sequencer: QuizSequencer,
        ledger: AnswerLedger,
        identity: SessionIdentity,
        observer: Optional[FlowObserver] = None,
    ) -> None:
        self.registry = registry
        self.signal = signal
        self.sequencer = sequencer
        self.ledger = ledger
        self.identity = identity
        self.observer = observer or FlowObserver()
        self.state = FlowState()
        self.location: Optional[Navigation] = None
        self._lock = asyncio.Lock()
        self._start_listener: Optional[StartListener] = None
        self._closed = False

    @property
    def _log_extra(self) -> dict:
        return {"identity": self.identity.current() or "-", "team": self.state.team_id or "-"}

    # --- views ---

    async def open(self, navigation: Navigation) -> FlowState:
        async with self._lock:
            await self._open(navigation)
        return self.state

    async def _open(self, navigation: Navigation) -> None:
        if navigation.path == WAITING:
            await self._enter_lobby()
        elif navigation.path == ANSWER:
            await self._enter_answering(navigation)
        elif navigation.path == RESULT_WAITING:
            self._dispose_lobby()
            await self._set_state(FlowState(phase=FlowPhase.RESULTS_WAIT, team_id=self.state.team_id))
        else:
            raise ValidationError(f"Unknown view: {navigation.path}")
        self.location = navigation

    async def _enter_lobby(self) -> None:
        self._dispose_lobby()
        # UnavailableError leaves the previous state untouched
        self._start_listener = await self.signal.on_game_start(self._on_game_start)
        await self._set_state(FlowState(phase=FlowPhase.LOBBY))
        logger.info("Waiting for the game to start", extra=self._log_extra)

    async def _on_game_start(self, flag: GameStartFlag) -> None:
        try:
            async with self._lock:
                listener = self._start_listener
                if self._closed or listener is None or listener.disposed:
                    return
                if self.state.phase is not FlowPhase.LOBBY or self.location is None or self.location.path != WAITING:
                    return
                logger.info("Game start observed (round %s)", flag.round_id, extra=self._log_extra)
                await self._go(Navigation.answer(0))
        except QuizGameError as exc:
            logger.warning("Could not enter the first quiz: %s", exc, extra=self._log_extra)
            await self.observer.on_error(exc)

    async def _enter_answering(self, navigation: Navigation) -> None:
        index = parse_index(navigation.params)
        prior = self.state
        self.state = FlowState(phase=FlowPhase.STARTING, index=index, team_id=prior.team_id)
        try:
            team_id = await self.registry.current_team_id(self.identity.current())
            quiz = await self.sequencer.quiz_at(index)
        except QuizGameError:
            self.state = prior
            raise
        self._dispose_lobby()
        await self._set_state(FlowState(phase=FlowPhase.ANSWERING, index=index, quiz=quiz, team_id=team_id))

    # --- answering ---

    async def select(self, option_index: int) -> FlowState:
        state = self.state
        if state.submitting:
            raise SubmissionPendingError()
        if state.phase is not FlowPhase.ANSWERING or state.quiz is None:
            raise PreconditionError("No quiz is open")
        if not 0 <= option_index < len(state.quiz.options):
            raise ValidationError(f"Option {option_index} does not exist")
        await self._set_state(replace(state, selected_option=option_index))
        return self.state

    async def confirm(self) -> Navigation:
        state = self.state
        if state.submitting:
            raise SubmissionPendingError()
        if state.phase is not FlowPhase.ANSWERING or state.quiz is None or state.index is None:
            raise PreconditionError("No quiz is open")
        if state.selected_option is None:
            raise NoSelectionError()
        identity_id = self.identity.current()
        if identity_id is None:
            raise NotLoggedInError()

        await self._set_state(replace(state, submitting=True))
        async with self._lock:
            try:
                team_id = await self.registry.current_team_id(identity_id)
                try:
                    await self.ledger.submit(state.quiz.id, team_id, identity_id, state.selected_option)
                except DuplicateAnswerError:
                    # another tab of the same team got there first
                    logger.info("Answer for index %d already recorded", state.index, extra=self._log_extra)
                is_last = await self.sequencer.is_last(state.index)
            except QuizGameError:
                await self._set_state(replace(state, submitting=False))
                raise

            await self._set_state(replace(state, phase=FlowPhase.ADVANCING, submitting=False, team_id=team_id))
            navigation = Navigation.result_waiting() if is_last else Navigation.answer(state.index + 1)
            try:
                await self._go(navigation)
            except QuizGameError:
                # the answer is recorded; confirming again retries the move
                await self._set_state(replace(state, submitting=False, team_id=team_id))
                raise
        return navigation

    # --- lifecycle ---

    async def close(self) -> None:
        self._closed = True
        self.location = None
        self._dispose_lobby()

    async def _go(self, navigation: Navigation) -> None:
        self._dispose_lobby()
        if self._closed:
            return
        await self.observer.on_navigate(navigation)
        await self._open(navigation)

    def _dispose_lobby(self) -> None:
        if self._start_listener is not None:
            self._start_listener.dispose()
            self._start_listener = None

    async def _set_state(self, state: FlowState) -> None:
        self.state = state
        await self.observer.on_state(state)
