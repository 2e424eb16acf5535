"""Tests for item spawning and bonus items."""

import numpy as np
import pytest

from arcade_snake.food import BoardFullError, BonusItem, ItemSpawner, bonus_chance
from arcade_snake.grid import Grid


class TestItemSpawner:
    def test_spawn_avoids_blocked(self):
        grid = Grid(width=4, height=4)
        blocked = {(x, y) for x in range(4) for y in range(4)} - {(2, 3)}
        spawner = ItemSpawner(grid, rng=np.random.default_rng(0))
        assert spawner.spawn(blocked) == (2, 3)

    def test_spawn_in_bounds(self):
        grid = Grid(width=6, height=5)
        spawner = ItemSpawner(grid, rng=np.random.default_rng(1))
        for _ in range(50):
            x, y = spawner.spawn(set())
            assert grid.in_bounds(x, y)

    def test_fallback_scan_without_attempts(self):
        grid = Grid(width=4, height=4)
        spawner = ItemSpawner(grid, rng=np.random.default_rng(3), max_attempts=0)
        cell = spawner.spawn({(0, 0)})
        assert cell != (0, 0)
        assert grid.in_bounds(*cell)

    def test_full_board_raises(self):
        grid = Grid(width=4, height=4)
        everything = {(x, y) for x in range(4) for y in range(4)}
        spawner = ItemSpawner(grid, rng=np.random.default_rng(0))
        with pytest.raises(BoardFullError):
            spawner.spawn(everything)

    def test_spawn_deterministic(self):
        def run(seed):
            spawner = ItemSpawner(Grid(), rng=np.random.default_rng(seed))
            return [spawner.spawn(set()) for _ in range(5)]

        assert run(42) == run(42)
        assert run(1) != run(2)

    def test_invalid_attempts(self):
        with pytest.raises(ValueError, match=">= 0"):
            ItemSpawner(Grid(), max_attempts=-1)


class TestBonusItem:
    def test_expiry_is_strict(self):
        bonus = BonusItem((1, 1), spawned_at_ms=1000.0, duration_ms=6000.0)
        assert not bonus.expired(7000.0)
        assert bonus.expired(7000.5)

    def test_remaining_fraction(self):
        bonus = BonusItem((1, 1), spawned_at_ms=0.0, duration_ms=6000.0)
        assert bonus.remaining_fraction(0.0) == 1.0
        assert bonus.remaining_fraction(3000.0) == pytest.approx(0.5)
        assert bonus.remaining_fraction(9000.0) == 0.0

    def test_to_dict(self):
        bonus = BonusItem((2, 3), spawned_at_ms=0.0)
        assert bonus.to_dict(1500.0) == {"cell": [2, 3], "remaining": 0.75}


class TestBonusChance:
    def test_base(self):
        assert bonus_chance(0) == pytest.approx(0.15)

    def test_grows_with_streak(self):
        assert bonus_chance(5) == pytest.approx(0.25)

    def test_capped(self):
        assert bonus_chance(50) == pytest.approx(0.4)
