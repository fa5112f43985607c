from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Optional

from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from teamquiz.core.errors import UnavailableError
from teamquiz.core.logging import get_logger
from teamquiz.store.base import (
    ChangeHandler,
    Document,
    DocumentStore,
    Predicate,
    Subscription,
    deliver,
)

logger = get_logger(__name__)

_DELETED = "null"


@asynccontextmanager
async def _unavailable_on_error(op: str, path: str):
    try:
        yield
    except RedisError as exc:
        logger.warning("Redis %s failed for %s: %s", op, path, exc)
        raise UnavailableError(f"Store {op} failed for {path}") from exc


class RedisSubscription(Subscription):
    def __init__(self, path: str, pubsub: PubSub, channel: str, handler: ChangeHandler) -> None:
        super().__init__(path)
        self._pubsub = pubsub
        self._channel = channel
        self._handler = handler
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._listen())

    async def _listen(self) -> None:
        try:
            async for message in self._pubsub.listen():
                if message.get("type") != "message":
                    continue
                raw = message.get("data")
                doc = None if raw in (None, _DELETED) else json.loads(raw)
                await deliver(self._handler, doc)
        except asyncio.CancelledError:
            pass
        except RedisError as exc:
            logger.warning("Subscription to %s dropped: %s", self.path, exc)
        finally:
            try:
                await self._pubsub.unsubscribe(self._channel)
                await self._pubsub.aclose()
            except RedisError as exc:
                logger.warning("Could not release subscription to %s: %s", self.path, exc)

    def _release(self) -> None:
        if self._task is not None:
            self._task.cancel()


class RedisDocumentStore(DocumentStore):
    """Documents are JSON strings under ``prefix + path``; changes go out on pub/sub."""

    def __init__(self, client: Redis, prefix: str = "teamquiz:") -> None:
        self.client = client
        self.prefix = prefix

    # --- keys ---

    def k_doc(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def k_channel(self, path: str) -> str:
        return f"{self.prefix}changes:{path}"

    def k_counter(self, name: str) -> str:
        return f"{self.prefix}counters:{name}"

    # --- operations ---

    async def get(self, path: str) -> Optional[Document]:
        async with _unavailable_on_error("get", path):
            raw = await self.client.get(self.k_doc(path))
        return json.loads(raw) if raw else None

    async def set(self, path: str, doc: Document) -> None:
        data = json.dumps(doc)
        async with _unavailable_on_error("set", path):
            await self.client.set(self.k_doc(path), data)
            await self.client.publish(self.k_channel(path), data)

    async def create(self, path: str, doc: Document) -> bool:
        data = json.dumps(doc)
        async with _unavailable_on_error("create", path):
            created = await self.client.set(self.k_doc(path), data, nx=True)
            if created:
                await self.client.publish(self.k_channel(path), data)
        return bool(created)

    async def delete(self, path: str) -> None:
        async with _unavailable_on_error("delete", path):
            removed = await self.client.delete(self.k_doc(path))
            if removed:
                await self.client.publish(self.k_channel(path), _DELETED)

    async def query(self, collection: str, predicate: Optional[Predicate] = None) -> list[Document]:
        async with _unavailable_on_error("query", collection):
            keys = [key async for key in self.client.scan_iter(match=f"{self.prefix}{collection}/*")]
            raws = await self.client.mget(keys) if keys else []
        docs = [json.loads(raw) for raw in raws if raw]
        if predicate is not None:
            docs = [d for d in docs if predicate(d)]
        return docs

    async def subscribe(self, path: str, on_change: ChangeHandler) -> Subscription:
        pubsub = self.client.pubsub()
        channel = self.k_channel(path)
        async with _unavailable_on_error("subscribe", path):
            try:
                await pubsub.subscribe(channel)
            except RedisError:
                await pubsub.aclose()
                raise
        sub = RedisSubscription(path, pubsub, channel, on_change)
        sub.start()
        return sub

    async def next_sequence(self, name: str) -> int:
        async with _unavailable_on_error("incr", name):
            return int(await self.client.incr(self.k_counter(name)))

    async def server_time_ms(self) -> int:
        async with _unavailable_on_error("time", "-"):
            seconds, micros = await self.client.time()
        return int(seconds) * 1000 + int(micros) // 1000
