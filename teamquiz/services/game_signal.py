"""Game Start Signal: a single shared flag, monotonic within a round.

``on_game_start`` subscribes first and reads second, so a start that lands
between the two is still observed. Each subscription fires at most once.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Awaitable, Callable, Optional, Union

from teamquiz.core.logging import get_logger
from teamquiz.domain.model import FLAG_PATH, GameStartFlag
from teamquiz.store.base import Document, DocumentStore, Subscription

logger = get_logger(__name__)

StartCallback = Callable[[GameStartFlag], Union[None, Awaitable[None]]]


class StartListener:
    """One ``on_game_start`` registration. Calling it disposes the subscription."""

    def __init__(self, callback: StartCallback) -> None:
        self._callback = callback
        self._subscription: Optional[Subscription] = None
        self._disposed = False
        self._running = False
        self.fired = False
        self.task: Optional[asyncio.Task] = None

    def __call__(self) -> None:
        self.dispose()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def attach(self, subscription: Subscription) -> None:
        self._subscription = subscription
        if self._disposed or self.fired:
            subscription.close()

    def dispose(self) -> None:
        self._disposed = True
        if self._subscription is not None:
            self._subscription.close()
        # a scheduled callback that has not begun yet must not run
        if self.task is not None and not self._running:
            self.task.cancel()

    def on_change(self, doc: Optional[Document]) -> None:
        flag = GameStartFlag.from_doc(doc)
        if flag.started:
            self.fire(flag)

    def fire(self, flag: GameStartFlag) -> None:
        if self.fired or self._disposed:
            return
        self.fired = True
        if self._subscription is not None:
            self._subscription.close()
        # never inline: the caller sees the callback on a later loop iteration
        self.task = asyncio.get_running_loop().create_task(self._invoke(flag))
        self.task.add_done_callback(_report_failure)

    async def _invoke(self, flag: GameStartFlag) -> None:
        if self._disposed:
            return
        self._running = True
        result = self._callback(flag)
        if inspect.isawaitable(result):
            await result


def _report_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Game start callback failed: %r", exc, exc_info=exc)


class GameStartSignal:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def flag(self) -> GameStartFlag:
        return GameStartFlag.from_doc(await self.store.get(FLAG_PATH))

    async def is_started(self) -> bool:
        return (await self.flag()).started

    async def start_game(self) -> bool:
        """Set the flag. Returns False when the game had already started."""
        current = await self.flag()
        if current.started:
            logger.info("start_game ignored: round %s already started", current.round_id)
            return False
        started = GameStartFlag(
            started=True,
            started_at=await self.store.server_time_ms(),
            round_id=current.round_id,
        )
        await self.store.set(FLAG_PATH, started.to_doc())
        logger.info("Game started (round %s)", started.round_id)
        return True

    async def reset(self, round_id: Optional[str]) -> None:
        """Only a brand-new round may put the flag back to false."""
        await self.store.set(FLAG_PATH, GameStartFlag(started=False, round_id=round_id).to_doc())
        logger.info("Start flag reset for round %s", round_id)

    async def on_game_start(self, callback: StartCallback) -> StartListener:
        """
        Register ``callback`` for the first time the flag is (or becomes) true.

        Raises UnavailableError when the subscription cannot be established.
        The returned listener is the disposer; calling it twice is harmless.
        """
        listener = StartListener(callback)
        listener.attach(await self.store.subscribe(FLAG_PATH, listener.on_change))
        try:
            current = await self.flag()
        except Exception:
            listener.dispose()
            raise
        if current.started:
            listener.fire(current)
        return listener
