"""In-memory session registry and per-session tick loops."""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass, field

from starlette.websockets import WebSocket, WebSocketState

from arcade_snake.config import GameConfig
from arcade_snake.engine import GameEngine
from arcade_snake.scheduler import TickScheduler
from arcade_snake.snake import Direction

logger = logging.getLogger(__name__)

_MAX_SESSIONS = 100
_IDLE_TIMEOUT = 300.0  # seconds without a connected socket


def encode_state(state: dict) -> str:
    """Compact JSON used on the wire."""
    return json.dumps(state, separators=(",", ":"))


@dataclass
class GameSession:
    """One hosted game and the sockets watching it."""

    game_id: str
    engine: GameEngine
    sockets: list[WebSocket] = field(default_factory=list)
    created_at: float = field(default_factory=time.monotonic)
    last_seen: float = field(default_factory=time.monotonic)
    scheduler: TickScheduler | None = field(default=None, repr=False)


class GameManager:
    """Central registry managing all hosted game sessions."""

    def __init__(
        self,
        max_sessions: int = _MAX_SESSIONS,
        idle_timeout: float = _IDLE_TIMEOUT,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1.")
        if idle_timeout <= 0:
            raise ValueError("idle_timeout must be > 0.")
        self._sessions: dict[str, GameSession] = {}
        self._max_sessions = max_sessions
        self._idle_timeout = idle_timeout

    def __len__(self) -> int:
        return len(self._sessions)

    def create_session(
        self,
        grid_width: int = 20,
        grid_height: int = 20,
        seed: int | None = None,
    ) -> GameSession:
        """Create a new running session and return it."""
        if len(self._sessions) >= self._max_sessions:
            self._prune_stale()
        if len(self._sessions) >= self._max_sessions:
            raise ValueError("Too many active sessions. Try again later.")

        config = GameConfig(grid_width=grid_width, grid_height=grid_height)
        game_id = uuid.uuid4().hex[:12]
        session = GameSession(
            game_id=game_id, engine=GameEngine(config, seed=seed),
        )
        self._sessions[game_id] = session
        logger.info(
            "Session %s created (%dx%d).", game_id, grid_width, grid_height,
        )
        return session

    def get_session(self, game_id: str) -> GameSession | None:
        return self._sessions.get(game_id)

    def require_session(self, game_id: str) -> GameSession:
        session = self._sessions.get(game_id)
        if session is None:
            raise KeyError(f"Game {game_id} not found.")
        return session

    def ensure_running(self, session: GameSession) -> None:
        """Start the session's tick loop unless it is already running."""
        if session.engine.game_over:
            return
        if session.scheduler is None:
            session.scheduler = TickScheduler(
                session.engine,
                lambda state: self._broadcast(session, state),
            )
        session.scheduler.start()

    def steer(self, session: GameSession, direction: Direction) -> None:
        session.engine.set_direction(direction)

    async def toggle_pause(self, session: GameSession) -> dict:
        """Flip the pause flag, wake the loop and push the new state."""
        paused = session.engine.toggle_pause()
        if not paused and session.scheduler is not None:
            session.scheduler.wake()
        state = session.engine.snapshot()
        await self._broadcast(session, state)
        return state

    async def restart(self, game_id: str) -> dict:
        """Reset a session to a fresh game."""
        session = self.require_session(game_id)
        state = session.engine.reset()
        session.last_seen = time.monotonic()
        logger.info("Session %s restarted.", game_id)
        if session.sockets:
            if session.scheduler is not None:
                session.scheduler.wake()
            self.ensure_running(session)
        await self._broadcast(session, state)
        return state

    def add_socket(self, session: GameSession, ws: WebSocket) -> None:
        session.sockets.append(ws)
        session.last_seen = time.monotonic()

    async def remove_socket(self, session: GameSession, ws: WebSocket) -> None:
        """Detach a socket; the loop stops once nobody is watching."""
        if ws in session.sockets:
            session.sockets.remove(ws)
        session.last_seen = time.monotonic()
        if not session.sockets and session.scheduler is not None:
            await session.scheduler.stop()

    async def delete_session(self, game_id: str) -> None:
        session = self._sessions.pop(game_id, None)
        if session is None:
            raise KeyError(f"Game {game_id} not found.")
        if session.scheduler is not None:
            await session.scheduler.stop()
        await self._close_connections(session)
        logger.info("Session %s deleted.", game_id)

    def _prune_stale(self) -> None:
        """Drop unwatched sessions that are finished or idle, oldest first."""
        now = time.monotonic()
        stale = sorted(
            (
                s for s in self._sessions.values()
                if not s.sockets and (
                    s.engine.game_over
                    or now - s.last_seen > self._idle_timeout
                )
            ),
            key=lambda s: s.last_seen,
        )
        for s in stale:
            self._sessions.pop(s.game_id, None)
        if stale:
            logger.info("Pruned %d stale sessions.", len(stale))

    async def _close_connections(self, session: GameSession) -> None:
        for ws in list(session.sockets):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.close(code=1000, reason="Game closed.")
            except Exception:
                logger.warning(
                    "Failed closing socket in session %s.", session.game_id,
                )
        session.sockets.clear()

    async def _broadcast(self, session: GameSession, state: dict) -> None:
        """Send game state to every connected socket."""
        payload = encode_state(state)
        dead: list[WebSocket] = []
        # Iterate over a snapshot so disconnect handlers can mutate the list.
        for ws in list(session.sockets):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.send_text(payload)
            except Exception:
                dead.append(ws)
        for ws in dead:
            if ws in session.sockets:
                session.sockets.remove(ws)

    async def cleanup(self) -> None:
        """Cancel all running tick loops."""
        for session in self._sessions.values():
            if session.scheduler is not None:
                await session.scheduler.stop()
        logger.info("GameManager cleanup complete.")
