import json
from typing import Optional

from fastapi import status
from fastapi.websockets import WebSocket
from pydantic import BaseModel

from teamquiz.core.errors import QuizGameError, UnavailableError, ValidationError
from teamquiz.core.logging import get_logger
from teamquiz.flow.coordinator import FlowObserver, FlowState, GameFlowCoordinator
from teamquiz.flow.navigation import Navigation
from teamquiz.services.answer_ledger import AnswerLedger
from teamquiz.services.game_signal import GameStartSignal
from teamquiz.services.identity import SessionIdentity
from teamquiz.services.quiz_sequencer import QuizSequencer
from teamquiz.services.team_registry import TeamRegistry
from teamquiz.store.base import DocumentStore
from teamquiz.ws.schemas import (
    AnswerConfirm,
    AnswerSelect,
    QuizView,
    ServerError,
    ServerNavigate,
    ServerStateSync,
    TeamJoin,
    ViewOpen,
)

logger = get_logger(__name__)


def state_sync(state: FlowState) -> ServerStateSync:
    quiz = state.quiz
    return ServerStateSync(
        phase=state.phase.value,
        index=state.index,
        quiz=QuizView(id=quiz.id, teamId=quiz.team_id, question=quiz.question, options=list(quiz.options))
        if quiz is not None
        else None,
        selectedOption=state.selected_option,
        canConfirm=state.can_confirm,
        teamId=state.team_id,
    )


class PlaySession(FlowObserver):
    """One websocket connection = one team device running its own coordinator."""

    def __init__(self, websocket: WebSocket, store: DocumentStore, identity_id: Optional[str]) -> None:
        self.ws = websocket
        self.closed = False
        self.identity = SessionIdentity(identity_id)
        signal = GameStartSignal(store)
        sequencer = QuizSequencer(store)
        self.registry = TeamRegistry(store, signal)
        self.coordinator = GameFlowCoordinator(
            self.registry,
            signal,
            sequencer,
            AnswerLedger(store, sequencer),
            self.identity,
            observer=self,
        )

    # --- FlowObserver ---

    async def on_state(self, state: FlowState) -> None:
        await self.send(state_sync(state))

    async def on_navigate(self, navigation: Navigation) -> None:
        await self.send(ServerNavigate(path=navigation.path, params=navigation.params, url=navigation.url))

    async def on_error(self, error: QuizGameError) -> None:
        await self.send_error(error)

    # --- outgoing ---

    async def send(self, message: BaseModel) -> None:
        await self.ws.send_text(message.model_dump_json())

    async def send_error(self, error: QuizGameError, fatal: bool = False) -> None:
        await self.send(ServerError(code=error.code, message=error.message, fatal=fatal))

    async def end(self, error: QuizGameError, fatal: bool = True) -> None:
        """Report ``error`` and close the socket; nothing is rendered after this."""
        await self.send_error(error, fatal=fatal)
        await self.ws.close(code=status.WS_1008_POLICY_VIOLATION if fatal else status.WS_1011_INTERNAL_ERROR)
        self.closed = True

    # --- incoming ---

    async def open(self, navigation: Navigation) -> None:
        await self.coordinator.open(navigation)

    async def handle(self, raw: str) -> None:
        """Dispatch one client event. Errors are reported to the client, never dropped."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            await self.send_error(ValidationError("Event is not valid JSON"))
            return
        t = data.get("type") if isinstance(data, dict) else None
        logger.debug("Event %s", t, extra={"identity": self.identity.current() or "-"})

        try:
            if t == "team:join":
                evt = TeamJoin(**data)
                await self.registry.join_team(self.identity.current(), evt.teamId)
                await self.send(state_sync(self.coordinator.state))

            elif t == "view:open":
                evt = ViewOpen(**data)
                try:
                    await self.open(Navigation(path=evt.path, params=evt.params))
                except UnavailableError as exc:
                    await self.send_error(exc)
                except QuizGameError as exc:
                    logger.warning("Could not open %s: %s", evt.path, exc, extra={"identity": self.identity.current() or "-"})
                    await self.end(exc)

            elif t == "answer:select":
                evt = AnswerSelect(**data)
                await self.coordinator.select(evt.optionIndex)

            elif t == "answer:confirm":
                AnswerConfirm(**data)
                await self.coordinator.confirm()

            else:
                await self.send_error(ValidationError(f"Unknown event type: {t}"))

        except QuizGameError as exc:
            await self.send_error(exc)
        except ValueError as exc:
            # pydantic.ValidationError is a ValueError
            await self.send_error(ValidationError(str(exc)))

    async def close(self) -> None:
        await self.coordinator.close()
