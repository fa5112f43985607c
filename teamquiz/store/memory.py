"""In-process document store.

Backs single-process deployments and the test-suite. Handlers are delivered
on the event loop that registered them, so writers running on another loop
(a different TestClient portal, for instance) still reach their subscribers.
"""

from __future__ import annotations

import asyncio
import copy
import time
from typing import Optional

from teamquiz.core.logging import get_logger
from teamquiz.store.base import (
    ChangeHandler,
    Document,
    DocumentStore,
    Predicate,
    Subscription,
    collection_of,
    deliver,
)

logger = get_logger(__name__)


class MemorySubscription(Subscription):
    def __init__(self, store: "MemoryDocumentStore", path: str, handler: ChangeHandler,
                 loop: asyncio.AbstractEventLoop) -> None:
        super().__init__(path)
        self.handler = handler
        self.loop = loop
        self._store = store
        self._tasks: set[asyncio.Task] = set()

    def notify(self, doc: Optional[Document]) -> None:
        if self.closed or self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self._spawn, doc)

    def _spawn(self, doc: Optional[Document]) -> None:
        if self.closed:
            return
        task = self.loop.create_task(deliver(self.handler, doc))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _release(self) -> None:
        self._store._detach(self)


class MemoryDocumentStore(DocumentStore):
    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}
        self._subs: dict[str, set[MemorySubscription]] = {}
        self._counters: dict[str, int] = {}

    async def get(self, path: str) -> Optional[Document]:
        doc = self._docs.get(path)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, path: str, doc: Document) -> None:
        self._docs[path] = copy.deepcopy(doc)
        self._publish(path, doc)

    async def create(self, path: str, doc: Document) -> bool:
        # no suspension between the check and the write
        if path in self._docs:
            return False
        self._docs[path] = copy.deepcopy(doc)
        self._publish(path, doc)
        return True

    async def delete(self, path: str) -> None:
        if self._docs.pop(path, None) is not None:
            self._publish(path, None)

    async def query(self, collection: str, predicate: Optional[Predicate] = None) -> list[Document]:
        docs = [
            copy.deepcopy(doc)
            for path, doc in list(self._docs.items())
            if collection_of(path) == collection
        ]
        if predicate is not None:
            docs = [d for d in docs if predicate(d)]
        return docs

    async def subscribe(self, path: str, on_change: ChangeHandler) -> Subscription:
        sub = MemorySubscription(self, path, on_change, asyncio.get_running_loop())
        self._subs.setdefault(path, set()).add(sub)
        logger.debug("Subscribed to %s (%d listeners)", path, len(self._subs[path]))
        return sub

    async def next_sequence(self, name: str) -> int:
        value = self._counters.get(name, 0) + 1
        self._counters[name] = value
        return value

    async def server_time_ms(self) -> int:
        return int(time.time() * 1000)

    def _publish(self, path: str, doc: Optional[Document]) -> None:
        for sub in list(self._subs.get(path, ())):
            sub.notify(copy.deepcopy(doc) if doc is not None else None)

    def _detach(self, sub: MemorySubscription) -> None:
        subs = self._subs.get(sub.path)
        if subs is None:
            return
        subs.discard(sub)
        if not subs:
            del self._subs[sub.path]
