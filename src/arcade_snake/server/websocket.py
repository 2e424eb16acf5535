"""WebSocket handler for real-time play."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from arcade_snake.server.game_manager import GameManager, encode_state
from arcade_snake.snake import Direction

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _get_manager(ws: WebSocket) -> GameManager:
    return ws.app.state.game_manager


def _parse_direction(value: object) -> Direction | None:
    if not isinstance(value, str):
        return None
    try:
        return Direction.from_name(value)
    except ValueError:
        return None


@ws_router.websocket("/games/{game_id}/play")
async def play(websocket: WebSocket, game_id: str) -> None:
    """Player WebSocket: send directions or pause, receive state each tick."""
    manager = _get_manager(websocket)
    session = manager.get_session(game_id)
    if session is None:
        await websocket.close(code=4004, reason="Game not found.")
        return

    await websocket.accept()
    manager.add_socket(session, websocket)
    logger.info("Player connected to session %s.", game_id)

    # Send the current state so the client can draw before the first tick.
    await websocket.send_text(encode_state(session.engine.snapshot()))
    manager.ensure_running(session)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict):
                continue

            action = msg.get("action")
            if action == "pause":
                await manager.toggle_pause(session)
                continue
            if action == "restart":
                await manager.restart(game_id)
                continue

            direction = _parse_direction(msg.get("direction"))
            if direction is not None:
                manager.steer(session, direction)
    except WebSocketDisconnect:
        logger.info("Player disconnected from session %s.", game_id)
    finally:
        await manager.remove_socket(session, websocket)
