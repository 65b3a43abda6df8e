"""Score extraction for head-to-head meetings, one branch per provider endpoint."""

from __future__ import annotations

from typing import Any, Literal

from scoreline.ingestion.match_states import nba_total
from scoreline.models.h2h import (
    BasketballData,
    CricketData,
    CricketOvers,
    HockeyData,
    VolleyballData,
)
from scoreline.models.scores import HomeAway
from scoreline.sports.score_string import SCORE_SEPARATOR, parse_int_prefix

Winner = Literal["home", "away", "draw"]

_DRAW_MARKERS = ("match drawn", "no result", "abandoned")


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def score_pair(value: Any) -> HomeAway:
    """Lenient ``"H - A"`` read; missing or unparseable sides are 0."""
    if not value or not isinstance(value, str):
        return HomeAway()
    parts = value.split(SCORE_SEPARATOR)
    home = parse_int_prefix(parts[0])
    away = parse_int_prefix(parts[1]) if len(parts) > 1 else 0
    return HomeAway(home=home, away=away)


def _optional_pair(value: Any) -> HomeAway | None:
    return score_pair(value) if value else None


def determine_cricket_winner(
    report: str | None,
    home_name: str | None,
    away_name: str | None,
    home_abbr: str | None = None,
    away_abbr: str | None = None,
) -> Winner:
    """Infer the winner of a cricket match from the free-text result report.

    Draw markers win over everything; otherwise the first home identifier
    (name, then abbreviation) found alongside "won" decides, then the away
    side. Anything else is a draw.
    """
    text = (report or "").lower()
    if any(marker in text for marker in _DRAW_MARKERS):
        return "draw"
    if "won" not in text:
        return "draw"
    for name in (home_name, home_abbr):
        if name and name.lower() in text:
            return "home"
    for name in (away_name, away_abbr):
        if name and name.lower() in text:
            return "away"
    return "draw"


def cricket_result(match: dict) -> tuple[HomeAway, CricketData]:
    """Report-based score (1-0 / 0-1 / 0-0) plus the raw innings summary."""
    state = _dict(match.get("state"))
    teams = _dict(state.get("teams"))
    home_side, away_side = _dict(teams.get("home")), _dict(teams.get("away"))
    home_team, away_team = _dict(match.get("homeTeam")), _dict(match.get("awayTeam"))

    winner = determine_cricket_winner(
        state.get("report"),
        home_team.get("name"),
        away_team.get("name"),
        home_team.get("abbreviation"),
        away_team.get("abbreviation"),
    )
    score = {
        "home": HomeAway(home=1, away=0),
        "away": HomeAway(home=0, away=1),
    }.get(winner, HomeAway())

    data = CricketData(
        format=match.get("format"),
        home_score_str=home_side.get("score") or "0/0",
        away_score_str=away_side.get("score") or "0/0",
        report=state.get("report"),
        overs=CricketOvers(home=home_side.get("info") or None, away=away_side.get("info") or None),
    )
    return score, data


def nba_quarters(home: Any, away: Any) -> BasketballData | None:
    if not isinstance(home, list) or not isinstance(away, list):
        return None
    quarters = {}
    for i in range(4):
        if i < len(home) and i < len(away):
            quarters[f"q{i + 1}"] = HomeAway(home=home[i] or 0, away=away[i] or 0)
    if len(home) > 4 and len(away) > 4:
        ot_home, ot_away = nba_total(home[4:]), nba_total(away[4:])
        if ot_home > 0 or ot_away > 0:
            quarters["over_time"] = HomeAway(home=ot_home, away=ot_away)
    return BasketballData(**quarters) if quarters else None


def extract_score(endpoint: str, match: dict) -> HomeAway:
    """Final score of a non-cricket meeting as reported by ``endpoint``."""
    score = _dict(_dict(match.get("state")).get("score"))
    if endpoint == "nba":
        return HomeAway(home=nba_total(score.get("homeTeam")), away=nba_total(score.get("awayTeam")))
    if endpoint == "rugby":
        raw = _dict(match.get("state")).get("score")
        return score_pair(raw if isinstance(raw, str) else score.get("current"))
    return score_pair(score.get("current"))


def sport_details(endpoint: str, match: dict) -> dict[str, Any]:
    """Per-sport breakdown attached to a returned meeting (never to the tally)."""
    score = _dict(match.get("state")).get("score")
    if endpoint == "nba":
        score = _dict(score)
        return {"basketball_data": nba_quarters(score.get("homeTeam"), score.get("awayTeam"))}
    if not isinstance(score, dict) or not score:
        return {}
    if endpoint in ("nhl", "hockey"):
        hockey = HockeyData(
            first_period=_optional_pair(score.get("firstPeriod")),
            second_period=_optional_pair(score.get("secondPeriod")),
            third_period=_optional_pair(score.get("thirdPeriod")),
            overtime_period=_optional_pair(score.get("overtimePeriod")),
        )
        has_period = any(
            p is not None
            for p in (hockey.first_period, hockey.second_period, hockey.third_period, hockey.overtime_period)
        )
        return {"hockey_data": hockey} if has_period else {}
    if endpoint == "basketball":
        return {"basketball_data": BasketballData(
            q1=_optional_pair(score.get("q1")),
            q2=_optional_pair(score.get("q2")),
            q3=_optional_pair(score.get("q3")),
            q4=_optional_pair(score.get("q4")),
            over_time=_optional_pair(score.get("overTime")),
        )}
    if endpoint == "volleyball":
        return {"volleyball_data": VolleyballData(
            set1=_optional_pair(score.get("firstSet")),
            set2=_optional_pair(score.get("secondSet")),
            set3=_optional_pair(score.get("thirdSet")),
            set4=_optional_pair(score.get("fourthSet")),
            set5=_optional_pair(score.get("fifthSet")),
        )}
    return {}
