from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.cors import setup_cors
from .core.errors import QuizGameError
from .core.logging import get_logger, setup_logging
from .core.store import close_store
from .api.v1.routers import answers as answers_router
from .api.v1.routers import game as game_router
from .api.v1.routers import quizzes as quizzes_router
from .api.v1.routers import teams as teams_router
from .api.v1.routers import ws_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    try:
        yield
    finally:
        await close_store()


async def quiz_game_error_handler(request: Request, exc: QuizGameError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    setup_cors(app)
    app.add_exception_handler(QuizGameError, quiz_game_error_handler)

    app.include_router(teams_router.router, prefix=settings.API_V1_PREFIX)
    app.include_router(game_router.router, prefix=settings.API_V1_PREFIX)
    app.include_router(quizzes_router.router, prefix=settings.API_V1_PREFIX)
    app.include_router(answers_router.router, prefix=settings.API_V1_PREFIX)

    app.include_router(ws_router.ws_router)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "teamquiz.main:app",
        host="0.0.0.0",
        port=settings.BACKEND_PORT,
        reload=settings.APP_ENV == "dev",
    )
