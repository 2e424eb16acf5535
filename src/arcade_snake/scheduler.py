"""Variable-rate tick loop for a single game session."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from arcade_snake.engine import GameEngine

logger = logging.getLogger(__name__)

StateCallback = Callable[[dict], Awaitable[None]]


class TickScheduler:
    """Drives :meth:`GameEngine.tick` at the engine's current interval.

    The interval is re-read after every tick, so speed changes apply to
    the next sleep. Ticks never overlap: the loop sleeps, ticks, awaits
    ``on_state`` and only then rearms. While the session is paused the
    loop idles until :meth:`wake` is called; it exits on game over or
    when :meth:`stop` cancels it.
    """

    def __init__(self, engine: GameEngine, on_state: StateCallback) -> None:
        self.engine = engine
        self._on_state = on_state
        self._wake = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop if it is not already running."""
        if self.running:
            return
        self._wake = asyncio.Event()
        self._task = asyncio.create_task(self._run())

    def wake(self) -> None:
        """Resume a loop that is idling on a paused session."""
        self._wake.set()

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def _run(self) -> None:
        engine = self.engine
        try:
            while not engine.game_over:
                if engine.paused:
                    self._wake.clear()
                    await self._wake.wait()
                    continue
                await asyncio.sleep(engine.tick_interval_ms / 1000.0)
                state = engine.tick()
                await self._on_state(state)
        except asyncio.CancelledError:
            logger.debug("Tick loop cancelled.")
            raise
        except Exception:
            logger.exception("Tick loop failed.")
            raise
