"""Models for cached lineups and the lineup response payload."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class LineupPlayer(BaseModel):
    """A player from a flat per-player roster, with provider field variants folded."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | str | None = None
    name: str = ""
    number: int | str = 0
    position: str = ""
    position_abbreviation: str = Field("", alias="positionAbbreviation")


class LineupRow(BaseModel):
    """One ``lineups`` row, keyed by (match_id, side)."""

    model_config = ConfigDict(extra="ignore")

    match_id: str
    side: Literal["home", "away"]
    team_id: str | None = None
    sport_id: str | int | None = None
    formation: str | None = None
    # Flat list of players, or formation rows (list of lists) for football
    initial_lineup: list[Any] | None = None
    substitutes: list[Any] | None = None
    provider: str = "highlightly"
    provider_lineup_id: str | int | None = None


class TeamLineup(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_id: str | None = Field(None, alias="teamId")
    name: str
    logo: str = ""
    formation: str = ""
    initial_lineup: list[Any] = Field(default_factory=list, alias="initialLineup")
    substitutes: list[Any] = Field(default_factory=list)
