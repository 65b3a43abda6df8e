"""Build the ``states`` blob stored on a match row from a provider payload.

The stored shape is what ``scoreline.sports.states.parse_states_score`` reads
back, so every sport keeps its own score and period keys.
"""

from __future__ import annotations

from typing import Any

from scoreline.sports.endpoints import is_nba_tier


def _state(payload: dict) -> dict:
    state = payload.get("state")
    return state if isinstance(state, dict) else {}


def _score(state: dict) -> dict:
    score = state.get("score")
    return score if isinstance(score, dict) else {}


def _periods(score: dict, keys: tuple[str, ...]) -> dict:
    return {key: score.get(key) or None for key in keys}


def nba_total(values: Any) -> int:
    if not isinstance(values, list):
        return 0
    return sum(v or 0 for v in values)


def nba_quarter_scores(home: Any, away: Any) -> dict | None:
    """Turn per-period score arrays into ``{q1..q4, overTime}`` objects.

    Periods past the fourth are summed into a single overtime entry.
    """
    if not isinstance(home, list) or not isinstance(away, list):
        return None
    details: dict[str, dict[str, int]] = {}
    for i in range(4):
        if i < len(home) and i < len(away):
            details[f"q{i + 1}"] = {"home": home[i], "away": away[i]}
    if len(home) > 4 and len(away) > 4:
        details["overTime"] = {"home": nba_total(home[4:]), "away": nba_total(away[4:])}
    return details


def baseball_states(payload: dict) -> dict:
    state = _state(payload)
    score = _score(state)

    def side(key: str) -> dict:
        team = score.get(key) if isinstance(score.get(key), dict) else {}
        return {
            "hits": team.get("hits") or 0,
            "errors": team.get("errors") or 0,
            "innings": team.get("innings") or [],
        }

    return {
        "description": state.get("description"),
        "report": state.get("report"),
        "score": score.get("current"),
        "scoreDetails": {"home": side("home"), "away": side("away")},
    }


def rugby_states(payload: dict) -> dict:
    state = _state(payload)
    # Rugby keeps the provider's score verbatim, usually a "47 - 14" string.
    return {"description": state.get("description"), "score": state.get("score")}


def cricket_states(payload: dict) -> dict:
    state = _state(payload)
    return {
        "description": state.get("description"),
        "report": state.get("report"),
        "teams": state.get("teams"),
        "format": payload.get("format"),
        "dayType": payload.get("dayType"),
    }


def cricket_dates(payload: dict) -> dict:
    return {
        "startDate": payload.get("startDate"),
        "endDate": payload.get("endDate"),
        "startTime": payload.get("startTime"),
    }


def basketball_states(payload: dict, league_slug: str | None) -> dict:
    state = _state(payload)
    score = _score(state)
    if is_nba_tier(league_slug):
        home, away = score.get("homeTeam"), score.get("awayTeam")
        return {
            "description": state.get("description"),
            "clock": state.get("clock"),
            "period": state.get("period"),
            "score": f"{nba_total(home)} - {nba_total(away)}",
            "scoreDetails": nba_quarter_scores(home, away),
        }
    return {
        "description": state.get("description"),
        "clock": state.get("clock"),
        "score": score.get("current"),
        "scoreDetails": _periods(score, ("q1", "q2", "q3", "q4", "overTime")),
    }


def volleyball_states(payload: dict) -> dict:
    state = _state(payload)
    score = _score(state)
    return {
        "description": state.get("description"),
        "score": score.get("current"),
        "scoreDetails": _periods(score, ("firstSet", "secondSet", "thirdSet", "fourthSet", "fifthSet")),
    }


def hockey_states(payload: dict) -> dict:
    state = _state(payload)
    score = _score(state)
    return {
        "description": state.get("description"),
        "clock": state.get("clock"),
        "period": state.get("period"),
        "report": state.get("report"),
        "score": score.get("current"),
        "scoreDetails": _periods(
            score, ("firstPeriod", "secondPeriod", "thirdPeriod", "overtimePeriod", "penalties")
        ),
    }


def american_football_states(payload: dict) -> dict:
    state = _state(payload)
    score = _score(state)
    return {
        "description": state.get("description"),
        "clock": state.get("clock"),
        "period": state.get("period"),
        "report": state.get("report"),
        "score": score.get("current"),
        "scoreDetails": _periods(score, (
            "firstPeriod", "secondPeriod", "thirdPeriod", "fourthPeriod",
            "firstOvertimePeriod", "secondOvertimePeriod",
        )),
    }


def football_states(payload: dict) -> dict:
    state = _state(payload)
    score = _score(state)
    return {
        "description": state.get("description"),
        "clock": state.get("clock"),
        "period": state.get("period"),
        "report": state.get("report"),
        "score": score.get("current"),
        "scoreDetails": _periods(score, ("firstHalf", "secondHalf", "extraTime", "penalties")),
    }


def build_states(sport_slug: str, payload: dict, league_slug: str | None = None) -> dict:
    if sport_slug == "baseball":
        return baseball_states(payload)
    if sport_slug == "rugby":
        return rugby_states(payload)
    if sport_slug == "cricket":
        return cricket_states(payload)
    if sport_slug == "basketball":
        return basketball_states(payload, league_slug)
    if sport_slug == "volleyball":
        return volleyball_states(payload)
    if sport_slug in ("hockey", "ice-hockey"):
        return hockey_states(payload)
    if sport_slug == "american-football":
        return american_football_states(payload)
    return football_states(payload)
