"""Snake representation and heading rules."""

from __future__ import annotations

import enum
from collections import deque

from arcade_snake.grid import Cell


class Direction(enum.Enum):
    """Cardinal movement directions with (dx, dy) values."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @classmethod
    def from_name(cls, name: str) -> Direction:
        """Look up a direction by case-insensitive name."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown direction: {name!r}") from None


def same_axis(a: Direction, b: Direction) -> bool:
    """True when both directions move along the same axis."""
    return (a.value[0] == 0) == (b.value[0] == 0)


class Snake:
    """A snake represented as an ordered deque of (x, y) body cells.

    The head is ``body[0]``; the tail is ``body[-1]``. Growth and
    movement are driven by the engine: every step prepends a head, and
    only non-eating steps drop the tail.
    """

    def __init__(
        self, start: Cell, direction: Direction = Direction.RIGHT,
    ) -> None:
        self.body: deque[Cell] = deque([start])
        self.direction = direction
        self.alive = True

    def __len__(self) -> int:
        return len(self.body)

    @property
    def head(self) -> Cell:
        """Return the head coordinate."""
        return self.body[0]

    def next_head(self) -> Cell:
        """Compute the next head position, unwrapped."""
        dx, dy = self.direction.value
        x, y = self.head
        return x + dx, y + dy

    def occupies(self, cell: Cell) -> bool:
        """Check whether the snake occupies a given cell."""
        return cell in self.body

    def grow_to(self, cell: Cell) -> None:
        self.body.appendleft(cell)

    def drop_tail(self) -> Cell:
        """Remove and return the tail cell."""
        return self.body.pop()
