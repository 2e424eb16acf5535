"""Arcade Snake — wrapping-board snake engine with a top-five leaderboard."""

from arcade_snake.config import GameConfig, ServerSettings
from arcade_snake.engine import GameEngine, SessionStatus
from arcade_snake.food import BoardFullError, BonusItem, ItemSpawner
from arcade_snake.grid import Grid
from arcade_snake.leaderboard import (
    JsonLeaderboard,
    LeaderboardEntry,
    LeaderboardError,
    SqliteLeaderboard,
)
from arcade_snake.scheduler import TickScheduler
from arcade_snake.snake import Direction, Snake

__all__ = [
    "BoardFullError",
    "BonusItem",
    "Direction",
    "GameConfig",
    "GameEngine",
    "Grid",
    "ItemSpawner",
    "JsonLeaderboard",
    "LeaderboardEntry",
    "LeaderboardError",
    "ServerSettings",
    "SessionStatus",
    "Snake",
    "SqliteLeaderboard",
    "TickScheduler",
]
