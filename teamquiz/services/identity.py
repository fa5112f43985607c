"""Anonymous, opaque per-device identities."""

from __future__ import annotations

import uuid
from typing import Callable, Optional

from teamquiz.core.logging import get_logger

logger = get_logger(__name__)


class IdentityProvider:
    def sign_in_anonymously(self) -> str:
        identity_id = uuid.uuid4().hex
        logger.info("Issued anonymous identity %s", identity_id[:8])
        return identity_id


class SessionIdentity:
    """The identity of one client session. Changes are observable."""

    def __init__(self, identity_id: Optional[str] = None) -> None:
        self._identity_id = identity_id or None
        self._listeners: list[Callable[[Optional[str]], None]] = []

    def current(self) -> Optional[str]:
        return self._identity_id

    def update(self, identity_id: Optional[str]) -> None:
        identity_id = identity_id or None
        if identity_id == self._identity_id:
            return
        self._identity_id = identity_id
        for listener in list(self._listeners):
            listener(identity_id)

    def subscribe(self, listener: Callable[[Optional[str]], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
