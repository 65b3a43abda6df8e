"""Models for h2h_records and the head-to-head response payload."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scoreline.models.scores import HomeAway

MAX_STORED_MATCHES = 5


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class H2HRecord(BaseModel):
    """Cache row keyed by the ordered pair (team_1_id < team_2_id)."""

    model_config = ConfigDict(extra="ignore")

    team_1_id: str
    team_2_id: str
    match_1_id: str | None = None
    match_2_id: str | None = None
    match_3_id: str | None = None
    match_4_id: str | None = None
    match_5_id: str | None = None
    total_matches: int = 0
    team_1_wins: int = 0
    team_2_wins: int = 0
    draws: int = 0
    last_fetched_at: datetime | None = None

    @property
    def match_ids(self) -> list[str | None]:
        return [self.match_1_id, self.match_2_id, self.match_3_id, self.match_4_id, self.match_5_id]


class H2HSummary(_CamelModel):
    home_wins: int = Field(0, alias="homeWins")
    draws: int = 0
    away_wins: int = Field(0, alias="awayWins")
    total_matches: int = Field(0, alias="totalMatches")


class TeamRef(BaseModel):
    id: str
    name: str
    logo: str | None = None


class Competition(BaseModel):
    name: str | None = None
    logo: str | None = None


class CricketOvers(BaseModel):
    home: str | None = None
    away: str | None = None


class CricketData(_CamelModel):
    format: str | None = None
    home_score_str: str = Field(alias="homeScoreStr")
    away_score_str: str = Field(alias="awayScoreStr")
    report: str | None = None
    overs: CricketOvers | None = None


class BasketballData(_CamelModel):
    q1: HomeAway | None = None
    q2: HomeAway | None = None
    q3: HomeAway | None = None
    q4: HomeAway | None = None
    over_time: HomeAway | None = Field(None, alias="overTime")


class VolleyballData(BaseModel):
    set1: HomeAway | None = None
    set2: HomeAway | None = None
    set3: HomeAway | None = None
    set4: HomeAway | None = None
    set5: HomeAway | None = None


class HockeyData(_CamelModel):
    first_period: HomeAway | None = Field(None, alias="firstPeriod")
    second_period: HomeAway | None = Field(None, alias="secondPeriod")
    third_period: HomeAway | None = Field(None, alias="thirdPeriod")
    overtime_period: HomeAway | None = Field(None, alias="overtimePeriod")


class H2HMatch(_CamelModel):
    id: str
    date: str | None = None
    home_team: TeamRef = Field(alias="homeTeam")
    away_team: TeamRef = Field(alias="awayTeam")
    home_score: int = Field(alias="homeScore")
    away_score: int = Field(alias="awayScore")
    competition: Competition | None = None
    cricket_data: CricketData | None = Field(None, alias="cricketData")
    basketball_data: BasketballData | None = Field(None, alias="basketballData")
    volleyball_data: VolleyballData | None = Field(None, alias="volleyballData")
    hockey_data: HockeyData | None = Field(None, alias="hockeyData")
