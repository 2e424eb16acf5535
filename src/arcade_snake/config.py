"""Game and server configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameConfig:
    """Tunable simulation rules.

    Intervals are in milliseconds. The defaults reproduce the classic
    browser game on a 20x20 board.
    """

    # Board
    grid_width: int = 20
    grid_height: int = 20
    start: tuple[int, int] = (5, 5)

    # Speed
    initial_interval_ms: float = 150.0
    min_interval_ms: float = 100.0
    max_interval_ms: float = 150.0
    speedup_ms: float = 1.0
    slowdown_ms: float = 0.5

    # Scoring
    food_streak_divisor: int = 5
    bonus_points: int = 5
    bonus_streak_divisor: int = 3
    level_up_every: int = 10

    # Bonus item
    bonus_duration_ms: float = 6000.0
    bonus_base_chance: float = 0.15
    bonus_chance_per_streak: float = 0.02
    bonus_max_chance: float = 0.4

    # Spawning
    spawn_attempts: int = 100

    def __post_init__(self) -> None:
        if self.min_interval_ms > self.max_interval_ms:
            raise ValueError("min_interval_ms must not exceed max_interval_ms.")
        if not (
            self.min_interval_ms
            <= self.initial_interval_ms
            <= self.max_interval_ms
        ):
            raise ValueError("initial_interval_ms must lie within the bounds.")
        if self.spawn_attempts < 0:
            raise ValueError("spawn_attempts must be >= 0.")

    def to_dict(self) -> dict:
        """Serialize to a plain dict (tuples become lists)."""
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file."""
        raw = json.loads(Path(path).read_text())
        if "start" in raw:
            raw["start"] = tuple(raw["start"])
        return cls(**raw)


class ServerSettings(BaseSettings):
    """Settings for the HTTP host, loaded from environment variables.

    The listen port comes from ``PORT`` and the database path from
    ``ARCADE_SNAKE_DB``; the rest use the ``ARCADE_SNAKE_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARCADE_SNAKE_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535, validation_alias="PORT")
    db_path: str = Field(default="db.sqlite3", validation_alias="ARCADE_SNAKE_DB")
    max_sessions: int = Field(default=100, ge=1)
    idle_timeout_s: float = Field(default=300.0, gt=0)
