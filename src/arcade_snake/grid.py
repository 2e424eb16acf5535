"""Toroidal board geometry."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

Cell = tuple[int, int]


class Grid:
    """Wrapping game board of ``width`` x ``height`` cells.

    Coordinates are ``(x, y)``; the NumPy mask used for free-cell scans is
    indexed ``[y, x]``.
    """

    def __init__(self, width: int = 20, height: int = 20) -> None:
        if width < 1 or height < 1:
            raise ValueError("Grid dimensions must be positive.")
        self.width = width
        self.height = height

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether a coordinate lies within the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def wrap(self, x: int, y: int) -> Cell:
        """Wrap coordinates around the grid edges."""
        return x % self.width, y % self.height

    def clamp(self, x: int, y: int) -> Cell:
        """Pull a coordinate inside the grid."""
        return (
            min(max(x, 0), self.width - 1),
            min(max(y, 0), self.height - 1),
        )

    def free_cells(self, occupied: Iterable[Cell]) -> list[Cell]:
        """Return every cell not in *occupied*, in row-major order."""
        mask = np.ones((self.height, self.width), dtype=bool)
        for x, y in occupied:
            if self.in_bounds(x, y):
                mask[y, x] = False
        ys, xs = np.nonzero(mask)
        return list(zip(xs.tolist(), ys.tolist(), strict=True))

    def to_dict(self) -> dict:
        """Serialize grid dimensions to a dictionary."""
        return {"width": self.width, "height": self.height}
