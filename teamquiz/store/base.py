"""Store adapter boundary: a generic document store with subscriptions.

Paths are slash separated (``collection/id``) and documents are JSON
compatible dicts. Every operation may raise ``UnavailableError``.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Union

Document = dict[str, Any]
ChangeHandler = Callable[[Optional[Document]], Union[None, Awaitable[None]]]
Predicate = Callable[[Document], bool]


async def deliver(handler: ChangeHandler, doc: Optional[Document]) -> None:
    """Invoke a change handler that may be either sync or async."""
    result = handler(doc)
    if inspect.isawaitable(result):
        await result


def collection_of(path: str) -> str:
    return path.split("/", 1)[0]


class Subscription(ABC):
    """Handle returned by ``DocumentStore.subscribe``; ``close`` is idempotent."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    @abstractmethod
    def _release(self) -> None:
        ...


class DocumentStore(ABC):
    @abstractmethod
    async def get(self, path: str) -> Optional[Document]:
        ...

    @abstractmethod
    async def set(self, path: str, doc: Document) -> None:
        ...

    @abstractmethod
    async def create(self, path: str, doc: Document) -> bool:
        """Write ``doc`` only if ``path`` is empty. Returns False when it already exists."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        ...

    @abstractmethod
    async def query(self, collection: str, predicate: Optional[Predicate] = None) -> list[Document]:
        ...

    @abstractmethod
    async def subscribe(self, path: str, on_change: ChangeHandler) -> Subscription:
        """Listen for mutations of ``path``. Delivery happens later, never inline."""

    @abstractmethod
    async def next_sequence(self, name: str) -> int:
        """Strictly increasing counter shared by every writer of this store."""

    @abstractmethod
    async def server_time_ms(self) -> int:
        ...

    async def close(self) -> None:
        return None
