from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from teamquiz.core.errors import QuizGameError, UnavailableError
from teamquiz.core.logging import get_logger
from teamquiz.core.store import get_store
from teamquiz.flow.navigation import Navigation
from teamquiz.store.base import DocumentStore
from teamquiz.ws.play_session import PlaySession

ws_router = APIRouter()
logger = get_logger(__name__)


@ws_router.websocket("/ws/play")
async def play_endpoint(
    websocket: WebSocket,
    view: str = Query("waiting", pattern="^(waiting|answer|result-waiting)$"),
    index: str | None = Query(default=None),
    identity: str | None = Query(default=None),
    store: DocumentStore = Depends(get_store),
) -> None:
    await websocket.accept()
    session = PlaySession(websocket, store, identity)
    extra = {"identity": identity or "-", "view": view}
    logger.info("Client connected (view=%s index=%s)", view, index, extra=extra)

    try:
        try:
            await session.open(Navigation.for_view(view, index))
        except QuizGameError as exc:
            # nothing to render without the initial view
            fatal = not isinstance(exc, UnavailableError)
            logger.warning("Could not open %s: %s", view, exc, extra=extra)
            await session.end(exc, fatal=fatal)
            return

        while not session.closed:
            raw = await websocket.receive_text()
            await session.handle(raw)

    except WebSocketDisconnect:
        logger.info("Client disconnected", extra=extra)

    finally:
        await session.close()
