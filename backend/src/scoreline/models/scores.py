"""Normalized score models produced by the states parser and the live adapter."""

from __future__ import annotations

from pydantic import BaseModel


class HomeAway(BaseModel):
    home: int = 0
    away: int = 0


class PeriodScore(BaseModel):
    label: str  # H1, Q3, S2, P1, OT, PEN, or an inning number ("7")
    home: int
    away: int


class NormalizedScore(BaseModel):
    home: int
    away: int
    breakdown: list[PeriodScore] | None = None
