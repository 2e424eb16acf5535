"""REST API route handlers for scores and hosted game sessions."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from arcade_snake.leaderboard import LeaderboardError
from arcade_snake.server.models import (
    CreateGameRequest,
    GameCreated,
    LeaderboardRow,
    ScoreSaved,
    ScoreSubmission,
)

router = APIRouter(tags=["leaderboard"])
games_router = APIRouter(prefix="/games", tags=["games"])


def _get_manager(request: Request):
    return request.app.state.game_manager


def _get_leaderboard(request: Request):
    return request.app.state.leaderboard


@router.post("/score", response_model=ScoreSaved)
async def submit_score(body: ScoreSubmission, request: Request):
    """Store a finished game's score.

    Store calls block on disk I/O, so they run in the worker thread pool
    and never stall the tick loops on the event loop.
    """
    store = _get_leaderboard(request)
    try:
        row_id = await run_in_threadpool(
            store.submit, body.name, body.score, body.date,
        )
    except LeaderboardError as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)})
    return ScoreSaved(id=row_id)


@router.get("/leaderboard", response_model=list[LeaderboardRow])
async def get_leaderboard(request: Request):
    """Return the top scores, highest first."""
    store = _get_leaderboard(request)
    try:
        entries = await run_in_threadpool(store.fetch_top)
    except LeaderboardError as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)})
    return [LeaderboardRow(**e.to_dict()) for e in entries]


@games_router.post("", status_code=201)
async def create_game(body: CreateGameRequest, request: Request) -> GameCreated:
    """Create a new hosted session."""
    manager = _get_manager(request)
    try:
        session = manager.create_session(
            grid_width=body.grid_width,
            grid_height=body.grid_height,
            seed=body.seed,
        )
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return GameCreated(game_id=session.game_id, state=session.engine.snapshot())


@games_router.get("/{game_id}")
async def get_game(game_id: str, request: Request) -> dict:
    """Get the current snapshot of a session."""
    session = _get_manager(request).get_session(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Game not found.")
    return {
        "game_id": session.game_id,
        "connected": len(session.sockets),
        "state": session.engine.snapshot(),
    }


@games_router.post("/{game_id}/restart")
async def restart_game(game_id: str, request: Request) -> dict:
    """Throw away the current game and start over."""
    try:
        state = await _get_manager(request).restart(game_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"game_id": game_id, "state": state}


@games_router.delete("/{game_id}", status_code=204)
async def delete_game(game_id: str, request: Request) -> None:
    try:
        await _get_manager(request).delete_session(game_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
