"""Food and bonus-item placement."""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from arcade_snake.grid import Cell

if TYPE_CHECKING:
    from arcade_snake.grid import Grid

logger = logging.getLogger(__name__)


class BoardFullError(RuntimeError):
    """Raised when no free cell is left for an item."""


@dataclass
class BonusItem:
    """A time-limited bonus cell."""

    cell: Cell
    spawned_at_ms: float
    duration_ms: float = 6000.0

    def elapsed(self, now_ms: float) -> float:
        return now_ms - self.spawned_at_ms

    def expired(self, now_ms: float) -> bool:
        """True once strictly more than the duration has passed."""
        return self.elapsed(now_ms) > self.duration_ms

    def remaining_fraction(self, now_ms: float) -> float:
        """Share of the lifetime still left, clamped to [0, 1]."""
        left = self.duration_ms - self.elapsed(now_ms)
        return min(1.0, max(0.0, left / self.duration_ms))

    def to_dict(self, now_ms: float) -> dict:
        return {
            "cell": list(self.cell),
            "remaining": self.remaining_fraction(now_ms),
        }


def bonus_chance(
    streak: int,
    base: float = 0.15,
    per_streak: float = 0.02,
    cap: float = 0.4,
) -> float:
    """Probability that eating food triggers a bonus item."""
    return min(cap, base + streak * per_streak)


class ItemSpawner:
    """Places items on free cells of the grid.

    Draws uniformly with rejection sampling from a seeded NumPy RNG. After
    ``max_attempts`` misses it scans the board and picks uniformly among
    the remaining free cells, so a crowded board still terminates.
    """

    def __init__(
        self,
        grid: Grid,
        rng: np.random.Generator | None = None,
        max_attempts: int = 100,
    ) -> None:
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0.")
        self.grid = grid
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts

    def spawn(self, blocked: Collection[Cell]) -> Cell:
        """Return a random cell not in *blocked*.

        Raises :class:`BoardFullError` when every cell is blocked.
        """
        for _ in range(self.max_attempts):
            candidate = (
                int(self.rng.integers(self.grid.width)),
                int(self.rng.integers(self.grid.height)),
            )
            if candidate not in blocked:
                return candidate

        free = self.grid.free_cells(blocked)
        if not free:
            raise BoardFullError("No free cell available for spawning.")
        logger.debug(
            "Rejection sampling exhausted; choosing among %d free cells.",
            len(free),
        )
        return free[int(self.rng.integers(len(free)))]
