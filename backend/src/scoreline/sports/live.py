"""Live view adapter: merge polled live statistics with the parsed states score.

The live feed delivers a per-sport scoreboard keyed by ``h`` (home) and ``g``
(guest). ``extract_live_stats`` flattens it into ``LiveStats``;
``select_display_score`` decides whether the live numbers or the persisted
states score are shown, and ``select_renderer`` picks the scoreboard variant.

Clients import these functions directly; the ``live-stats`` runner command
drives them against a saved statistics blob.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel

from scoreline.models.scores import HomeAway, NormalizedScore, PeriodScore

LIVE_SUPPORTED_SPORTS = frozenset({"tennis", "volleyball", "soccer", "football", "basketball"})

BASKETBALL_STAT_KEYS = (
    "fouls",
    "freeThrows",
    "freeThrowsScoredPerc",
    "twoPointers",
    "threePointers",
    "timeoutsTaken",
    "timeoutsRemaining",
    "jumpBalls",
    "assists",
    "offensiveRebounds",
    "defensiveRebounds",
    "totalRebounds",
    "turnovers",
    "steals",
    "blocks",
    "playersDisqualified",
)

BASKETBALL_STATE_LABELS = {
    "Q1": "Q1", "Q2": "Q2", "Q3": "Q3", "Q4": "Q4",
    "H1": "1H", "H2": "2H", "HT": "HT", "OT": "OT",
}

_SET_STATE = re.compile(r"S(\d)")

Renderer = Literal["football", "basketball", "tennis", "volleyball"]


class BasketballQuarters(BaseModel):
    q1: HomeAway
    q2: HomeAway
    q3: HomeAway
    q4: HomeAway


class StatPair(BaseModel):
    """Home/away values of a detailed live stat; percentages arrive as floats."""

    home: int | float = 0
    away: int | float = 0


class LiveStats(BaseModel):
    is_loading: bool = False
    is_available: bool = False
    sets_won: HomeAway = HomeAway()
    current_set_score: HomeAway = HomeAway()
    current_set: int | None = None
    game_points: HomeAway | None = None
    serving_team: Literal["home", "away"] | None = None
    soccer_goals: HomeAway | None = None
    basketball_total: HomeAway | None = None
    basketball_quarters: BasketballQuarters | None = None
    basketball_overtime: HomeAway | None = None
    basketball_possession: Literal["home", "away"] | None = None
    # None per stat means the feed reported -1 ("not available")
    basketball_stats: dict[str, StatPair | None] | None = None
    game_state: str | None = None
    game_time: str | None = None


def _hg(value: Any) -> HomeAway:
    """Read a ``{h, g}`` pair; missing sides are 0."""
    if not isinstance(value, dict):
        return HomeAway()
    return HomeAway(home=value.get("h") or 0, away=value.get("g") or 0)


def _set_number(state: str | None) -> int:
    m = _SET_STATE.search(state or "")
    return int(m.group(1)) if m else 1


def _stat(value: Any) -> StatPair | None:
    if not isinstance(value, dict) or value.get("h") == -1 or value.get("g") == -1:
        return None
    return StatPair(home=_number(value.get("h")), away=_number(value.get("g")))


def _number(value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _set_based(board: dict, result: LiveStats) -> None:
    current = _set_number(board.get("state"))
    servis = board.get("servis") if isinstance(board.get("servis"), dict) else {}
    result.current_set = current
    result.sets_won = _hg(board.get("sets"))
    result.current_set_score = _hg(board.get(f"s{current}"))
    result.serving_team = "home" if servis.get("h") else "away"
    result.game_state = board.get("state")


def extract_live_stats(
    statistics: dict | None,
    sport_slug: str | None,
    is_available: bool,
    is_loading: bool = False,
) -> LiveStats:
    """Flatten a live-statistics payload (``scoreBoard`` + ``stats``) for ``sport_slug``."""
    result = LiveStats(is_loading=is_loading, is_available=is_available)
    board = (statistics or {}).get("scoreBoard")
    if sport_slug not in LIVE_SUPPORTED_SPORTS or not is_available or not isinstance(board, dict):
        return result

    if sport_slug == "tennis":
        _set_based(board, result)
        points = board.get("points") if isinstance(board.get("points"), dict) else {}
        result.game_points = HomeAway(
            home=_points(points.get("h")),
            away=_points(points.get("g")),
        )
    elif sport_slug == "volleyball":
        _set_based(board, result)
    elif sport_slug in ("soccer", "football"):
        result.soccer_goals = _hg(board.get("goals"))
        if isinstance(board.get("time"), str):
            result.game_time = board["time"]
    elif sport_slug == "basketball":
        result.basketball_total = _hg(board.get("total"))
        result.basketball_quarters = BasketballQuarters(
            q1=_hg(board.get("q1")),
            q2=_hg(board.get("q2")),
            q3=_hg(board.get("q3")),
            q4=_hg(board.get("q4")),
        )
        result.basketball_overtime = _hg(board.get("overtime"))
        possession = board.get("possession") if isinstance(board.get("possession"), dict) else {}
        result.basketball_possession = "home" if possession.get("h") else "away"
        if board.get("time"):
            result.game_time = board["time"]
        if board.get("state"):
            result.game_state = board["state"]
        stats = (statistics or {}).get("stats")
        if isinstance(stats, dict):
            result.basketball_stats = {key: _stat(stats.get(key)) for key in BASKETBALL_STAT_KEYS}
    return result


def _points(value: Any) -> int:
    # Tennis game points arrive as "15", "30", "40" or "A"; advantage reads as 0.
    try:
        return int(str(value if value is not None else "0"))
    except ValueError:
        return 0


def select_display_score(
    sport_slug: str | None,
    is_live: bool,
    live: LiveStats | None,
    parsed: NormalizedScore | None,
) -> NormalizedScore | None:
    """Prefer live numbers while the match is live and the feed is up."""
    if not (is_live and live is not None and live.is_available):
        return parsed

    if sport_slug in ("soccer", "football"):
        goals = live.soccer_goals or HomeAway()
        return NormalizedScore(home=goals.home, away=goals.away)
    if sport_slug == "basketball":
        total = live.basketball_total or HomeAway()
        breakdown = None
        if live.basketball_quarters is not None:
            q = live.basketball_quarters
            breakdown = [
                PeriodScore(label=label, home=pair.home, away=pair.away)
                for label, pair in (("Q1", q.q1), ("Q2", q.q2), ("Q3", q.q3), ("Q4", q.q4))
            ]
        return NormalizedScore(home=total.home, away=total.away, breakdown=breakdown)
    if sport_slug in ("tennis", "volleyball"):
        return NormalizedScore(home=live.sets_won.home, away=live.sets_won.away)
    return parsed


def format_game_time(sport_slug: str | None, is_live: bool, live: LiveStats | None) -> str | None:
    """Clock/period label shown next to a live score."""
    if not (is_live and live is not None and live.is_available):
        return None

    if sport_slug in ("soccer", "football"):
        time = live.game_time
        if time:
            return f"{time}'" if time.isdigit() else time
        return None
    if sport_slug == "basketball":
        state = live.game_state or ""
        label = BASKETBALL_STATE_LABELS.get(state, state)
        return f"{label} {live.game_time}" if live.game_time else label
    if sport_slug == "tennis":
        return f"Set {live.current_set or 1}"
    return None


def result_indicator(
    team_id: str | None,
    home_team_id: str | None,
    away_team_id: str | None,
    is_finished: bool,
    score: NormalizedScore | None,
) -> Literal["win", "draw", "loss"] | None:
    """Outcome of a finished match from ``team_id``'s side, or None."""
    if not team_id or not is_finished or score is None:
        return None
    if team_id == home_team_id:
        own, other = score.home, score.away
    elif team_id == away_team_id:
        own, other = score.away, score.home
    else:
        return None
    if own > other:
        return "win"
    if own < other:
        return "loss"
    return "draw"


def select_renderer(sport_slug: str | None, live: LiveStats) -> Renderer | None:
    """Scoreboard variant for a live score, None when nothing should render."""
    if not live.is_available or live.is_loading:
        return None
    if sport_slug in ("soccer", "football"):
        return "football"
    if sport_slug in ("basketball", "tennis", "volleyball"):
        return sport_slug  # type: ignore[return-value]
    return None
