"""Fixed-step snake simulation with streak scoring and bonus items."""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable

import numpy as np

from arcade_snake.config import GameConfig
from arcade_snake.food import BoardFullError, BonusItem, ItemSpawner, bonus_chance
from arcade_snake.grid import Cell, Grid
from arcade_snake.snake import Direction, Snake, same_axis

logger = logging.getLogger(__name__)


class SessionStatus(str, enum.Enum):
    """Lifecycle states for a game session."""

    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class GameEngine:
    """Single-session, step-based snake engine on a wrapping board.

    The engine owns one game session: snake, food, optional bonus item,
    score, streak and the current tick interval. A host calls
    :meth:`tick` every ``tick_interval_ms`` milliseconds and draws the
    returned snapshot. Nothing is shared between engine instances.

    ``clock`` returns the current time in milliseconds and drives bonus
    expiry; tests pass a fake clock to control it.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        seed: int | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        self.grid = Grid(
            width=self.config.grid_width, height=self.config.grid_height,
        )
        self.rng = np.random.default_rng(seed)
        self.spawner = ItemSpawner(
            self.grid, rng=self.rng, max_attempts=self.config.spawn_attempts,
        )
        self._clock = clock if clock is not None else _monotonic_ms
        self.reset()

    # -- lifecycle ---------------------------------------------------------

    def reset(self) -> dict:
        """Start a fresh session and return its first snapshot.

        A board the start cell fills completely has no room for food; the
        session then begins already over with reason ``"board_full"``.
        """
        start = self.grid.clamp(*self.config.start)
        self.snake = Snake(start, Direction.RIGHT)
        self.bonus: BonusItem | None = None
        self.score = 0
        self.streak = 0
        self.tick_interval_ms = self.config.initial_interval_ms
        self.status = SessionStatus.RUNNING
        self.end_reason: str | None = None
        self.tick_count = 0
        self._pending_direction: Direction | None = None
        self._events: list[str] = []
        try:
            self.food: Cell | None = self.spawner.spawn({start})
        except BoardFullError:
            self.food = None
            self.status = SessionStatus.GAME_OVER
            self.end_reason = "board_full"
            logger.info(
                "Board %dx%d has no room for food.",
                self.grid.width, self.grid.height,
            )
        return self.snapshot()

    @property
    def paused(self) -> bool:
        return self.status is SessionStatus.PAUSED

    @property
    def game_over(self) -> bool:
        return self.status is SessionStatus.GAME_OVER

    @property
    def heading(self) -> Direction:
        """Direction the snake will move on the next tick."""
        if self._pending_direction is not None:
            return self._pending_direction
        return self.snake.direction

    # -- input -------------------------------------------------------------

    def set_direction(self, direction: Direction) -> None:
        """Queue a turn for the next tick.

        Only turns onto the other axis are accepted, so the snake can never
        reverse into its own neck. Ignored while paused or after game over.
        """
        if self.status is not SessionStatus.RUNNING:
            return
        if same_axis(direction, self.snake.direction):
            return
        self._pending_direction = direction

    def toggle_pause(self) -> bool:
        """Flip between running and paused. Returns the new paused flag."""
        if self.status is SessionStatus.RUNNING:
            self.status = SessionStatus.PAUSED
        elif self.status is SessionStatus.PAUSED:
            self.status = SessionStatus.RUNNING
        return self.paused

    def pause(self) -> None:
        if self.status is SessionStatus.RUNNING:
            self.status = SessionStatus.PAUSED

    def resume(self) -> None:
        if self.status is SessionStatus.PAUSED:
            self.status = SessionStatus.RUNNING

    # -- simulation --------------------------------------------------------

    def tick(self) -> dict:
        """Advance the session by one step and return the snapshot.

        Does nothing while paused or after game over.
        """
        if self.status is not SessionStatus.RUNNING:
            return self.snapshot()

        self._events = []
        if self._pending_direction is not None:
            self.snake.direction = self._pending_direction
            self._pending_direction = None

        new_head = self.grid.wrap(*self.snake.next_head())

        # The whole body counts, tail included.
        if self.snake.occupies(new_head):
            self._end("collision")
            return self.snapshot()

        self.snake.grow_to(new_head)
        cfg = self.config

        if new_head == self.food:
            self.score += 1 + self.streak // cfg.food_streak_divisor
            self.streak += 1
            self._events.append("eat")
            if self.score % cfg.level_up_every == 0:
                self._events.append("level_up")
            self.tick_interval_ms = max(
                cfg.min_interval_ms, self.tick_interval_ms - cfg.speedup_ms,
            )
            try:
                self.food = self.spawner.spawn(self._blocked(self.bonus))
            except BoardFullError:
                self.food = None
                self._end("board_full")
                return self.snapshot()
            chance = bonus_chance(
                self.streak,
                base=cfg.bonus_base_chance,
                per_streak=cfg.bonus_chance_per_streak,
                cap=cfg.bonus_max_chance,
            )
            if self.bonus is None and self.rng.random() < chance:
                self._spawn_bonus()
        elif self.bonus is not None and new_head == self.bonus.cell:
            # Bonus pickup keeps the new head without dropping the tail.
            self.score += (
                cfg.bonus_points + self.streak // cfg.bonus_streak_divisor
            )
            self.streak += 1
            self.bonus = None
            self._events.append("bonus")
        else:
            self.snake.drop_tail()
            self.streak = 0
            self.tick_interval_ms = min(
                cfg.max_interval_ms, self.tick_interval_ms + cfg.slowdown_ms,
            )

        self._expire_bonus()
        self.tick_count += 1
        return self.snapshot()

    def snapshot(self) -> dict:
        """Return the render-ready, JSON-serializable session state.

        ``events`` lists what happened during the most recent tick.
        """
        now = self._clock()
        return {
            "tick": self.tick_count,
            "status": self.status.value,
            "reason": self.end_reason,
            "score": self.score,
            "streak": self.streak,
            "streak_bonus": self.streak // self.config.food_streak_divisor,
            "paused": self.paused,
            "alive": self.snake.alive,
            "game_over": self.game_over,
            "tick_interval_ms": self.tick_interval_ms,
            "grid": self.grid.to_dict(),
            "snake": [list(cell) for cell in self.snake.body],
            "direction": self.snake.direction.name.lower(),
            "food": list(self.food) if self.food is not None else None,
            "bonus": self.bonus.to_dict(now) if self.bonus is not None else None,
            "events": list(self._events),
        }

    # -- helpers -----------------------------------------------------------

    def _blocked(self, other: BonusItem | Cell | None) -> set[Cell]:
        blocked = set(self.snake.body)
        if isinstance(other, BonusItem):
            blocked.add(other.cell)
        elif other is not None:
            blocked.add(other)
        return blocked

    def _spawn_bonus(self) -> None:
        try:
            cell = self.spawner.spawn(self._blocked(self.food))
        except BoardFullError:
            logger.debug("No room for a bonus item; skipping.")
            return
        self.bonus = BonusItem(
            cell=cell,
            spawned_at_ms=self._clock(),
            duration_ms=self.config.bonus_duration_ms,
        )
        self._events.append("bonus_spawned")
        logger.debug("Bonus item spawned at %s.", cell)

    def _expire_bonus(self) -> None:
        if self.bonus is not None and self.bonus.expired(self._clock()):
            logger.debug("Bonus item at %s expired.", self.bonus.cell)
            self.bonus = None
            self._events.append("bonus_expired")

    def _end(self, reason: str) -> None:
        """End the session; only a collision kills the snake."""
        if reason == "collision":
            self.snake.alive = False
        self.status = SessionStatus.GAME_OVER
        self.end_reason = reason
        self._events.append("game_over")
        self.tick_count += 1
        logger.info(
            "Game over (%s) at tick %d with score %d.",
            reason, self.tick_count, self.score,
        )
