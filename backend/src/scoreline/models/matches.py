"""Rows read from the sports_data schema: staging games, sports, teams, matches."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class StagingGame(BaseModel):
    """A betting-feed game (``stg_azuro_games``) linked to an internal match."""

    model_config = ConfigDict(extra="ignore")

    id: str
    match_id: str | None = None
    sport_id: str | int | None = None
    league_azuro_slug: str | None = None
    home: str | None = None
    away: str | None = None


class Team(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str | None = None
    logo: str | None = None
    highlightly_id: str | int | None = None


class Match(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    highlightly_id: str | int | None = None
    sport_id: str | int | None = None
    league_id: str | int | None = None
    home_team_id: str | None = None
    away_team_id: str | None = None
    starts_at: datetime | None = None
    date: str | None = None
    status_short: str | None = None
    home_score: int | None = None
    away_score: int | None = None

    # Cached provider data (volatile, rewritten on every cache miss)
    events: list[Any] | None = None
    statistics: Any = None
    venue: Any = None
    referee: Any = None
    forecast: Any = None
    shots: Any = None
    news: Any = None
    predictions: Any = None
    box_scores: Any = None
    top_performers: Any = None
    injuries: Any = None
    states: Any = None
    last_data_fetch: datetime | None = None
