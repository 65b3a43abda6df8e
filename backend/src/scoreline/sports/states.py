"""Normalize a persisted ``match.states`` blob into a score with period breakdown.

Each sport family has one pure transform ``(states) -> NormalizedScore | None``
registered in ``SCORE_TRANSFORMS``. A transform tries the object-form score
(``score.current`` plus period keys) first and the legacy string-form
(``score`` string plus ``scoreDetails``) second. When the sport transform
yields nothing, the generic fallback reads ``score.current`` or a bare score
string without a breakdown.

Nothing here raises: a blob with no usable score gives None, which callers
render as "no live score".
"""

from __future__ import annotations

from typing import Any, Callable

from scoreline.models.scores import NormalizedScore, PeriodScore
from scoreline.models.states import (
    AmericanFootballStates,
    BaseballStates,
    BasketballStates,
    CricketStates,
    FootballStates,
    HandballStates,
    HockeyStates,
    MatchStates,
    RugbyStates,
    VolleyballStates,
    validate_states,
)
from scoreline.sports.score_string import parse_int_prefix, parse_runs, parse_score_string

ScoreTransform = Callable[[Any], "NormalizedScore | None"]

# (source key, label) in play order
HOCKEY_PERIODS = (("firstPeriod", "P1"), ("secondPeriod", "P2"), ("thirdPeriod", "P3"))
VOLLEYBALL_SETS = (
    ("firstSet", "S1"),
    ("secondSet", "S2"),
    ("thirdSet", "S3"),
    ("fourthSet", "S4"),
    ("fifthSet", "S5"),
)
AMERICAN_FOOTBALL_QUARTERS = (
    ("firstPeriod", "Q1"),
    ("secondPeriod", "Q2"),
    ("thirdPeriod", "Q3"),
    ("fourthPeriod", "Q4"),
)
BASKETBALL_QUARTERS = (("q1", "Q1"), ("q2", "Q2"), ("q3", "Q3"), ("q4", "Q4"))
FOOTBALL_PERIODS = (
    ("firstHalf", "H1"),
    ("secondHalf", "H2"),
    ("extraTime", "ET"),
    ("penalties", "PEN"),
)
HANDBALL_HALVES = (("firstHalf", "H1"), ("secondHalf", "H2"))


# ── helpers ──────────────────────────────────────────────────────────────────


def _score(home: int, away: int, breakdown: list[PeriodScore]) -> NormalizedScore:
    return NormalizedScore(home=home, away=away, breakdown=breakdown or None)


def _periods(source: dict | None, keys: tuple[tuple[str, str], ...]) -> list[PeriodScore]:
    """Breakdown entries for every key whose value parses as ``"H - A"``."""
    out: list[PeriodScore] = []
    if not source:
        return out
    for key, label in keys:
        parsed = parse_score_string(source.get(key))
        if parsed:
            out.append(PeriodScore(label=label, home=parsed[0], away=parsed[1]))
    return out


def _overtime(source: dict | None, *keys: str) -> list[PeriodScore]:
    """An ``OT`` entry from the first key that parses, if any."""
    if not source:
        return []
    for key in keys:
        parsed = parse_score_string(source.get(key))
        if parsed:
            return [PeriodScore(label="OT", home=parsed[0], away=parsed[1])]
    return []


def _period_based(
    states: MatchStates,
    keys: tuple[tuple[str, str], ...],
    object_ot: tuple[str, ...] = (),
    details_ot: tuple[str, ...] = (),
) -> NormalizedScore | None:
    obj = states.score_object
    if obj is not None:
        current = parse_score_string(obj.get("current"))
        if current:
            return _score(*current, _periods(obj, keys) + _overtime(obj, *object_ot))

    text = states.score_string
    if text is not None:
        parsed = parse_score_string(text)
        if parsed:
            details = states.score_details
            return _score(*parsed, _periods(details, keys) + _overtime(details, *details_ot))
    return None


def _innings(home: Any, away: Any) -> list[PeriodScore]:
    if not isinstance(home, list) or not isinstance(away, list):
        return []
    out = []
    for i in range(max(len(home), len(away))):
        h = home[i] if i < len(home) else 0
        a = away[i] if i < len(away) else 0
        out.append(PeriodScore(label=str(i + 1), home=parse_int_prefix(h), away=parse_int_prefix(a)))
    return out


def _side_innings(source: dict | None, side: str) -> Any:
    if not source:
        return None
    block = source.get(side)
    return block.get("innings") if isinstance(block, dict) else None


# ── per-sport transforms ─────────────────────────────────────────────────────


def rugby_score(states: RugbyStates) -> NormalizedScore | None:
    # Rugby feeds only carry the full-time string, no half splits.
    parsed = parse_score_string(states.score_string)
    if parsed:
        return NormalizedScore(home=parsed[0], away=parsed[1])
    return None


def cricket_score(states: CricketStates) -> NormalizedScore | None:
    teams = states.teams
    if teams is None:
        return None
    home = teams.get("home") if isinstance(teams.get("home"), dict) else {}
    away = teams.get("away") if isinstance(teams.get("away"), dict) else {}
    return NormalizedScore(home=parse_runs(home.get("score")), away=parse_runs(away.get("score")))


def hockey_score(states: HockeyStates) -> NormalizedScore | None:
    return _period_based(
        states,
        HOCKEY_PERIODS,
        object_ot=("overtimePeriod", "overTime"),
        details_ot=("overtimePeriod",),
    )


def volleyball_score(states: VolleyballStates) -> NormalizedScore | None:
    return _period_based(states, VOLLEYBALL_SETS)


def american_football_score(states: AmericanFootballStates) -> NormalizedScore | None:
    return _period_based(
        states,
        AMERICAN_FOOTBALL_QUARTERS,
        object_ot=("firstOvertimePeriod", "overTime"),
        details_ot=("firstOvertimePeriod",),
    )


def basketball_score(states: BasketballStates) -> NormalizedScore | None:
    obj = states.score_object
    if obj is not None:
        current = parse_score_string(obj.get("current"))
        if current:
            return _score(*current, _periods(obj, BASKETBALL_QUARTERS) + _overtime(obj, "overTime"))

    text = states.score_string
    if text is None:
        return None
    parsed = parse_score_string(text)
    if not parsed:
        return None

    # Legacy NBA rows store each quarter as {home, away} rather than a string.
    breakdown: list[PeriodScore] = []
    details = states.score_details or {}
    for key, label in BASKETBALL_QUARTERS + (("overTime", "OT"),):
        quarter = details.get(key)
        if isinstance(quarter, dict):
            breakdown.append(
                PeriodScore(
                    label=label,
                    home=parse_int_prefix(quarter.get("home")),
                    away=parse_int_prefix(quarter.get("away")),
                )
            )
        elif isinstance(quarter, str):
            q = parse_score_string(quarter)
            if q:
                breakdown.append(PeriodScore(label=label, home=q[0], away=q[1]))
    return _score(*parsed, breakdown)


def football_score(states: FootballStates) -> NormalizedScore | None:
    return _period_based(states, FOOTBALL_PERIODS)


def baseball_score(states: BaseballStates) -> NormalizedScore | None:
    obj = states.score_object
    if obj is not None:
        current = parse_score_string(obj.get("current"))
        if current:
            return _score(*current, _innings(_side_innings(obj, "home"), _side_innings(obj, "away")))

    text = states.score_string
    if text is not None:
        parsed = parse_score_string(text)
        if parsed:
            details = states.score_details
            return _score(*parsed, _innings(_side_innings(details, "home"), _side_innings(details, "away")))
    return None


def handball_score(states: HandballStates) -> NormalizedScore | None:
    obj = states.score_object
    if obj is None:
        return None
    current = parse_score_string(obj.get("current"))
    if not current:
        return None
    return _score(*current, _periods(obj, HANDBALL_HALVES))


def generic_score(states: MatchStates) -> NormalizedScore | None:
    obj = states.score_object
    if obj is not None:
        current = parse_score_string(obj.get("current"))
        if current:
            return NormalizedScore(home=current[0], away=current[1])
    parsed = parse_score_string(states.score_string)
    if parsed:
        return NormalizedScore(home=parsed[0], away=parsed[1])
    return None


# Precedence order; each slug belongs to exactly one family.
SCORE_TRANSFORMS: dict[str, ScoreTransform] = {
    "rugby": rugby_score,
    "cricket": cricket_score,
    "hockey": hockey_score,
    "volleyball": volleyball_score,
    "american-football": american_football_score,
    "basketball": basketball_score,
    "football": football_score,
    "baseball": baseball_score,
    "handball": handball_score,
}


def parse_states_score(states: dict | None, sport_slug: str | None) -> NormalizedScore | None:
    """Parse a ``match.states`` blob for ``sport_slug`` into a NormalizedScore."""
    if not states or not isinstance(states, dict):
        return None
    variant = validate_states(states, sport_slug)
    transform = SCORE_TRANSFORMS.get(variant.kind)
    result = transform(variant) if transform is not None else None
    if result is None:
        result = generic_score(variant)
    return result
