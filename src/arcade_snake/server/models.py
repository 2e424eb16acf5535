"""Pydantic models for API request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ScoreSubmission(BaseModel):
    """Request body for POST /score."""

    name: str = Field(default="", max_length=64)
    score: int = Field(ge=0)
    date: str | None = Field(default=None, max_length=64)


class ScoreSaved(BaseModel):
    """Response for a stored score."""

    success: bool = True
    id: int


class LeaderboardRow(BaseModel):
    """One leaderboard line as sent to clients."""

    name: str
    score: int
    date: str


class CreateGameRequest(BaseModel):
    """Request body for POST /games."""

    grid_width: int = Field(default=20, ge=1, le=200)
    grid_height: int = Field(default=20, ge=1, le=200)
    seed: int | None = None


class GameCreated(BaseModel):
    """Response for a newly created session."""

    game_id: str
    state: dict
