"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from arcade_snake.config import ServerSettings
from arcade_snake.leaderboard import SqliteLeaderboard
from arcade_snake.server.game_manager import GameManager
from arcade_snake.server.routes import games_router, router
from arcade_snake.server.websocket import ws_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    settings: ServerSettings = app.state.settings
    app.state.game_manager = GameManager(
        max_sessions=settings.max_sessions,
        idle_timeout=settings.idle_timeout_s,
    )
    owns_store = getattr(app.state, "leaderboard", None) is None
    if owns_store:
        app.state.leaderboard = SqliteLeaderboard(settings.db_path)
    yield
    await app.state.game_manager.cleanup()
    if owns_store:
        app.state.leaderboard.close()


async def _validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={
            "error": "Invalid request body.",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Arcade Snake API", version="0.1.0", lifespan=_lifespan,
    )
    app.state.settings = settings if settings is not None else ServerSettings()
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.include_router(router)
    app.include_router(games_router)
    app.include_router(ws_router)
    return app
