"""Head-to-head gateway.

Records are cached per unordered team pair: ``team_1_id`` is always the
lexicographically smaller internal id, and the win tallies are stored from
that team's point of view. Responses are reoriented to the caller's
home/away order.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from postgrest.exceptions import APIError

from scoreline import db
from scoreline.errors import ConfigurationError, UpstreamError
from scoreline.ingestion import highlightly_client
from scoreline.ingestion.cache import H2H_TTL, KeyedLocks, cache_age, is_fresh, parse_timestamp, utcnow
from scoreline.ingestion.h2h_scores import cricket_result, extract_score, sport_details
from scoreline.ingestion.match_states import cricket_dates
from scoreline.models.gateway import GatewayResponse
from scoreline.models.h2h import (
    MAX_STORED_MATCHES,
    Competition,
    H2HMatch,
    H2HRecord,
    H2HSummary,
    TeamRef,
)
from scoreline.models.matches import Team
from scoreline.models.scores import HomeAway
from scoreline.sports.endpoints import DEFAULT_ENDPOINT, resolve_sport_endpoint

logger = logging.getLogger(__name__)

LOG_PREFIX = "[fetch-h2h]"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

_locks = KeyedLocks()


def order_team_ids(id1: str, id2: str) -> tuple[str, str]:
    return (id1, id2) if id1 < id2 else (id2, id1)


def _same(a: Any, b: Any) -> bool:
    """Provider ids arrive as ints or strings; compare them loosely."""
    return a is not None and b is not None and str(a) == str(b)


def _summary(team_1_wins: int, team_2_wins: int, draws: int, total: int, home_first: bool) -> H2HSummary:
    return H2HSummary(
        home_wins=team_1_wins if home_first else team_2_wins,
        away_wins=team_2_wins if home_first else team_1_wins,
        draws=draws,
        total_matches=total,
    )


def _body(source: str, summary: H2HSummary, matches: list[H2HMatch], limit: int, **extra: Any) -> dict:
    return {
        "source": source,
        "summary": summary.model_dump(by_alias=True),
        "matches": [m.model_dump(by_alias=True, exclude_none=True) for m in matches[: max(limit, 0)]],
        **extra,
    }


def _empty(source: str) -> GatewayResponse:
    return GatewayResponse(body=_body(source, H2HSummary(), [], 0))


def _failure(message: str) -> GatewayResponse:
    return GatewayResponse(body={"error": message, "summary": None, "matches": []})


# ── cache ────────────────────────────────────────────────────────────────────


def load_cached_matches(record: H2HRecord) -> list[H2HMatch]:
    """Rebuild the stored meetings (up to five) with their teams and leagues."""
    ids = [mid for mid in record.match_ids if mid]
    if not ids:
        return []
    rows = {
        r["id"]: r
        for r in db.select_in(
            "match", "id", ids,
            "id, date, highlightly_id, home_team_id, away_team_id, home_score, away_score, league_id",
        )
    }
    team_ids = sorted({r[k] for r in rows.values() for k in ("home_team_id", "away_team_id") if r.get(k)})
    teams = {t["id"]: t for t in db.select_in("teams", "id", team_ids, "id, name, logo")}
    league_ids = sorted({r["league_id"] for r in rows.values() if r.get("league_id")})
    leagues = {lg["id"]: lg for lg in db.select_in("leagues", "id", league_ids, "id, name, logo")}

    def team_ref(team_id: Any) -> TeamRef:
        team = teams.get(team_id) or {}
        return TeamRef(id=team.get("id") or "", name=team.get("name") or "Unknown", logo=team.get("logo"))

    matches = []
    for mid in ids:
        row = rows.get(mid)
        if row is None:
            continue
        league = leagues.get(row.get("league_id"))
        matches.append(H2HMatch(
            id=row["id"],
            date=row.get("date"),
            home_team=team_ref(row.get("home_team_id")),
            away_team=team_ref(row.get("away_team_id")),
            home_score=row.get("home_score") or 0,
            away_score=row.get("away_score") or 0,
            competition=Competition(name=league.get("name"), logo=league.get("logo")) if league else None,
        ))
    return matches


def _cached_response(record: H2HRecord, home_first: bool, limit: int, **extra: Any) -> GatewayResponse:
    summary = _summary(record.team_1_wins, record.team_2_wins, record.draws, record.total_matches, home_first)
    return GatewayResponse(body=_body("cache", summary, load_cached_matches(record), limit, **extra))


# ── provider payload ─────────────────────────────────────────────────────────


def _competition(league: Any) -> Competition | None:
    if not league:
        return None
    if isinstance(league, str):
        return Competition(name=league)
    if isinstance(league, dict):
        return Competition(name=league.get("name"), logo=league.get("logo"))
    return None


def _meeting_date(match: dict, is_cricket: bool) -> str | None:
    return match.get("startDate") if is_cricket else match.get("date")


def sort_meetings(meetings: list[dict], is_cricket: bool) -> list[dict]:
    """Most recent first; undated meetings sink to the end."""
    return sorted(
        meetings,
        key=lambda m: parse_timestamp(_meeting_date(m, is_cricket)) or _EPOCH,
        reverse=True,
    )


def _upsert_meeting(
    match: dict,
    score: HomeAway,
    is_cricket: bool,
    home_team_id: str | None,
    away_team_id: str | None,
    now: datetime,
) -> str | None:
    row: dict[str, Any] = {
        "highlightly_id": match.get("id"),
        "date": _meeting_date(match, is_cricket),
        "home_score": score.home,
        "away_score": score.away,
        "updated_at": now.isoformat(),
    }
    if home_team_id and away_team_id:
        row["home_team_id"] = home_team_id
        row["away_team_id"] = away_team_id
    if is_cricket:
        row["highlightly_dates"] = cricket_dates(match)
    try:
        upserted = db.upsert_rows("match", [row], on_conflict="highlightly_id")
    except APIError as exc:
        logger.error("%s Match upsert error for %s: %s", LOG_PREFIX, match.get("id"), exc)
        return None
    return upserted[0].get("id") if upserted else None


def fetch_h2h(
    home_team_id: str | None,
    away_team_id: str | None,
    limit: int = MAX_STORED_MATCHES,
    sport: str | None = DEFAULT_ENDPOINT,
    league_slug: str | None = None,
    now: datetime | None = None,
) -> GatewayResponse:
    """Head-to-head summary and recent meetings between two internal teams."""
    endpoint = resolve_sport_endpoint(sport or DEFAULT_ENDPOINT, league_slug)
    logger.info(
        "%s homeTeamId: %s, awayTeamId: %s, limit: %s, sport: %s, league: %s -> %s",
        LOG_PREFIX, home_team_id, away_team_id, limit, sport, league_slug, endpoint,
    )
    if not home_team_id or not away_team_id:
        return GatewayResponse.error(400, "Missing homeTeamId or awayTeamId")

    rows = db.select_in("teams", "id", [home_team_id, away_team_id], "id, highlightly_id, name, logo")
    if len(rows) < 2:
        logger.error("%s Teams not found: %s, %s", LOG_PREFIX, home_team_id, away_team_id)
        return _failure("Teams not found")
    by_id = {r["id"]: Team.model_validate(r) for r in rows}
    home, away = by_id.get(home_team_id), by_id.get(away_team_id)
    if home is None or away is None or not home.highlightly_id or not away.highlightly_id:
        logger.info("%s Missing highlightly_id for teams", LOG_PREFIX)
        return _empty("none")

    team1, team2 = order_team_ids(home_team_id, away_team_id)
    with _locks.hold(f"{team1}:{team2}"):
        return _serve(home, away, team1, team2, endpoint, limit, now or utcnow())


def _serve(
    home: Team,
    away: Team,
    team1: str,
    team2: str,
    endpoint: str,
    limit: int,
    now: datetime,
) -> GatewayResponse:
    home_first = home.id == team1
    cached_row = db.select_one("h2h_records", "*", {"team_1_id": team1, "team_2_id": team2})
    record = H2HRecord.model_validate(cached_row) if cached_row else None

    if record is not None:
        age = cache_age(record.last_fetched_at, now)
        if is_fresh(record.last_fetched_at, H2H_TTL, now):
            logger.info("%s Cache hit, age: %dmin", LOG_PREFIX, round(age.total_seconds() / 60))
            return _cached_response(record, home_first, limit)
        logger.info("%s Cache expired for %s:%s", LOG_PREFIX, team1, team2)

    try:
        highlightly_client.ensure_configured()
        meetings = highlightly_client.fetch_head_to_head(endpoint, home.highlightly_id, away.highlightly_id)
    except (ConfigurationError, UpstreamError) as exc:
        logger.error("%s API error: %s", LOG_PREFIX, exc)
        if record is not None:
            return _cached_response(record, home_first, limit, warning="API unavailable, serving stale cache")
        return _failure("Failed to fetch H2H data")

    if not isinstance(meetings, list) or not meetings:
        logger.info("%s Received 0 H2H matches for %s", LOG_PREFIX, endpoint)
        return _empty("api")
    logger.info("%s Received %d H2H matches for %s", LOG_PREFIX, len(meetings), endpoint)

    is_cricket = endpoint == "cricket"
    meetings = sort_meetings([m for m in meetings if isinstance(m, dict)], is_cricket)

    match_ids: list[str | None] = [None] * MAX_STORED_MATCHES
    transformed: list[H2HMatch] = []
    team_1_wins = team_2_wins = draws = 0

    for i, meeting in enumerate(meetings):
        details: dict[str, Any] = {}
        if is_cricket:
            score, cricket_data = cricket_result(meeting)
            details["cricket_data"] = cricket_data
        else:
            score = extract_score(endpoint, meeting)

        api_home = meeting.get("homeTeam") if isinstance(meeting.get("homeTeam"), dict) else {}
        api_away = meeting.get("awayTeam") if isinstance(meeting.get("awayTeam"), dict) else {}
        api_home_id = api_home.get("id")
        api_home_is_team1 = (
            (_same(api_home_id, home.highlightly_id) and home_first)
            or (_same(api_home_id, away.highlightly_id) and not home_first)
        )
        team1_score, team2_score = (
            (score.home, score.away) if api_home_is_team1 else (score.away, score.home)
        )
        if team1_score > team2_score:
            team_1_wins += 1
        elif team2_score > team1_score:
            team_2_wins += 1
        else:
            draws += 1

        # Only the most recent meetings are stored and returned; older ones just count.
        if i >= MAX_STORED_MATCHES:
            continue

        local_home = home.id if _same(api_home_id, home.highlightly_id) else away.id
        local_away = home.id if _same(api_home_id, away.highlightly_id) else away.id
        # Team ids are only persisted when the provider's home team is one of ours.
        known_home = _same(api_home_id, home.highlightly_id) or _same(api_home_id, away.highlightly_id)
        match_ids[i] = _upsert_meeting(
            meeting, score, is_cricket,
            local_home if known_home else None,
            local_away if known_home else None,
            now,
        )

        if not is_cricket:
            details.update(sport_details(endpoint, meeting))
        transformed.append(H2HMatch(
            id=match_ids[i] or str(uuid.uuid4()),
            date=_meeting_date(meeting, is_cricket),
            home_team=TeamRef(
                id=local_home,
                name=api_home.get("displayName") or api_home.get("name") or "",
                logo=api_home.get("logo"),
            ),
            away_team=TeamRef(
                id=local_away,
                name=api_away.get("displayName") or api_away.get("name") or "",
                logo=api_away.get("logo"),
            ),
            home_score=score.home,
            away_score=score.away,
            competition=_competition(meeting.get("league")),
            **details,
        ))

    record_row = {
        "team_1_id": team1,
        "team_2_id": team2,
        **{f"match_{n + 1}_id": mid for n, mid in enumerate(match_ids)},
        "total_matches": len(meetings),
        "team_1_wins": team_1_wins,
        "team_2_wins": team_2_wins,
        "draws": draws,
        "last_fetched_at": now.isoformat(),
    }
    try:
        db.upsert_rows("h2h_records", [record_row], on_conflict="team_1_id,team_2_id")
    except APIError as exc:
        logger.error("%s H2H upsert error: %s", LOG_PREFIX, exc)

    summary = _summary(team_1_wins, team_2_wins, draws, len(meetings), home_first)
    return GatewayResponse(body=_body("api", summary, transformed, limit))
