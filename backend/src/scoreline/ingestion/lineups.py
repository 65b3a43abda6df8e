"""Lineup gateway.

Cached lineups are served whenever a row carries players. Otherwise a
sport-specific kickoff window decides whether asking the provider is worth it
at all; outside the window the caller gets a 204 with a "check back" reason.
Provider failures surface as 502: unlike match data, lineups have no stale
fallback.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, NamedTuple

from postgrest.exceptions import APIError

from scoreline import db
from scoreline.errors import ConfigurationError, UpstreamError
from scoreline.ingestion import highlightly_client
from scoreline.ingestion.cache import KeyedLocks, parse_timestamp, utcnow
from scoreline.models.gateway import GatewayResponse
from scoreline.models.lineups import LineupPlayer, LineupRow, TeamLineup
from scoreline.models.matches import Match, StagingGame
from scoreline.sports.endpoints import DEFAULT_ENDPOINT, resolve_lineup_endpoint

logger = logging.getLogger(__name__)

LOG_PREFIX = "[fetch-match-lineup]"


class LineupWindow(NamedTuple):
    before_minutes: int
    after_minutes: int


LINEUP_WINDOWS: dict[str, LineupWindow] = {
    "football": LineupWindow(30, 15),
    "american-football": LineupWindow(180, 60),
    "basketball": LineupWindow(180, 60),
    "hockey": LineupWindow(180, 60),
    "ice-hockey": LineupWindow(180, 60),
    "baseball": LineupWindow(120, 60),
}

# Sports whose provider lineup is a flat roster: {home: {team, lineup}, away: {...}}
FLAT_LINEUP_SPORTS = frozenset({"baseball", "american-football", "basketball", "hockey", "ice-hockey"})
# Flat rosters that may omit isStarter and name players "player"/"name"
NBA_STYLE_SPORTS = frozenset({"basketball", "hockey", "ice-hockey"})

_locks = KeyedLocks()


def lineup_unavailable_reason(sport_slug: str, starts_at: Any, now: datetime) -> str | None:
    """Return why lineups cannot exist yet, or None when a fetch is allowed.

    Only the lower bound blocks: once kickoff is close (or past) a fetch is
    always allowed, since late requests may still find published lineups.
    """
    start = parse_timestamp(starts_at)
    if start is None:
        return None
    window = LINEUP_WINDOWS.get(sport_slug, LINEUP_WINDOWS["football"])
    minutes_until = (start - now).total_seconds() / 60
    if minutes_until <= window.before_minutes:
        return None
    hours = math.ceil((minutes_until - window.before_minutes) / 60)
    return (
        f"Lineups for {sport_slug} become available {window.before_minutes} minutes "
        f"before kickoff. Check back in ~{hours} hour(s)."
    )


def has_players(row: dict) -> bool:
    """A cached lineup row is usable when it lists at least one player."""
    initial = row.get("initial_lineup")
    substitutes = row.get("substitutes")
    has_initial = isinstance(initial, list) and bool(initial) and (
        isinstance(initial[0], dict)
        or (isinstance(initial[0], list) and len(initial[0]) > 0)
    )
    return has_initial or (isinstance(substitutes, list) and len(substitutes) > 0)


def _flat_player(p: dict, nba_style: bool) -> LineupPlayer:
    if nba_style:
        name = p.get("player") or p.get("fullName") or p.get("name") or ""
        number = p.get("jersey") or p.get("shirtNumber") or 0
    else:
        name = p.get("player") or p.get("fullName") or ""
        number = p.get("jersey") or 0
    return LineupPlayer(
        id=p.get("id"),
        name=name,
        number=number,
        position=p.get("position") or "",
        position_abbreviation=p.get("positionAbbreviation") or "",
    )


def transform_flat_lineup(players: Any, nba_style: bool = False) -> tuple[list[dict], list[dict]]:
    """Split a flat roster into (starters, substitutes) player dicts.

    NBA-style rosters without any boolean ``isStarter`` list everyone as a
    starter with no substitutes.
    """
    if not isinstance(players, list):
        return [], []
    players = [p for p in players if isinstance(p, dict)]

    def dump(p: dict) -> dict:
        return _flat_player(p, nba_style).model_dump(by_alias=True)

    if nba_style and not any(isinstance(p.get("isStarter"), bool) for p in players):
        return [dump(p) for p in players], []
    starters = [dump(p) for p in players if p.get("isStarter")]
    substitutes = [dump(p) for p in players if not p.get("isStarter")]
    return starters, substitutes


class _Context(NamedTuple):
    game: StagingGame
    match: Match
    starts_at: datetime | None
    sport_slug: str
    home_team: dict
    away_team: dict


def _load_context(stg_azuro_id: str) -> GatewayResponse | _Context:
    stg_row = db.select_one("stg_azuro_games", "id, match_id, home, away", {"id": stg_azuro_id})
    if stg_row is None:
        logger.error("%s stg_azuro_games not found for id: %s", LOG_PREFIX, stg_azuro_id)
        return GatewayResponse.error(404, "Match not found in staging")
    game = StagingGame.model_validate(stg_row)
    if not game.match_id:
        logger.error("%s No match_id linked for stgAzuroId: %s", LOG_PREFIX, stg_azuro_id)
        return GatewayResponse.error(404, "Match not linked to sports_data.match yet")

    match_row = db.select_one(
        "match",
        "id, highlightly_id, sport_id, home_team_id, away_team_id, starts_at",
        {"id": game.match_id},
    )
    if match_row is None:
        logger.error("%s sports_data.match not found for id: %s", LOG_PREFIX, game.match_id)
        return GatewayResponse.error(404, "Match not found in sports_data")
    match = Match.model_validate(match_row)

    sport_slug = DEFAULT_ENDPOINT
    if match.sport_id is not None:
        sport = db.select_one("sport", "id, slug", {"id": match.sport_id})
        if sport and sport.get("slug"):
            sport_slug = sport["slug"]

    team_ids = [t for t in (match.home_team_id, match.away_team_id) if t]
    teams = {t["id"]: t for t in db.select_in("teams", "id", team_ids, "id, name, logo")}
    return _Context(
        game=game,
        match=match,
        starts_at=match.starts_at,
        sport_slug=sport_slug,
        home_team=teams.get(match.home_team_id) or {},
        away_team=teams.get(match.away_team_id) or {},
    )


def _cached_team(ctx: _Context, row: dict | None, side: str) -> dict | None:
    if row is None:
        return None
    team = ctx.home_team if side == "home" else ctx.away_team
    fallback = (ctx.game.home if side == "home" else ctx.game.away) or side.capitalize()
    return TeamLineup(
        team_id=row.get("team_id"),
        name=team.get("name") or fallback,
        logo=team.get("logo") or "",
        formation=row.get("formation") or "",
        initial_lineup=row.get("initial_lineup") or [],
        substitutes=row.get("substitutes") or [],
    ).model_dump(by_alias=True)


def _lineup_row(ctx: _Context, side: str, team_id: str, formation: Any, initial: list, subs: list) -> dict:
    return LineupRow(
        match_id=ctx.match.id,
        side=side,
        team_id=team_id,
        sport_id=ctx.match.sport_id,
        formation=formation or None,
        initial_lineup=initial,
        substitutes=subs,
        provider_lineup_id=ctx.match.highlightly_id,
    ).model_dump()


def fetch_match_lineup(stg_azuro_id: str | None, now: datetime | None = None) -> GatewayResponse:
    """Lineups for the match behind a ``stg_azuro_games`` id."""
    if not stg_azuro_id:
        logger.error("%s Missing stgAzuroId parameter", LOG_PREFIX)
        return GatewayResponse.error(400, "Missing stgAzuroId parameter")
    logger.info("%s Received request for stgAzuroId: %s", LOG_PREFIX, stg_azuro_id)

    ctx = _load_context(stg_azuro_id)
    if isinstance(ctx, GatewayResponse):
        return ctx
    logger.info(
        "%s Found match: highlightly_id=%s, sport=%s, starts_at=%s",
        LOG_PREFIX, ctx.match.highlightly_id, ctx.sport_slug, ctx.starts_at,
    )
    with _locks.hold(ctx.match.id):
        return _serve(ctx, now or utcnow())


def _serve(ctx: _Context, now: datetime) -> GatewayResponse:
    match = ctx.match
    cached = db.select_rows("lineups", "*", {"match_id": match.id})
    if any(has_players(row) for row in cached):
        logger.info("%s Found %d valid cached lineups for match_id: %s", LOG_PREFIX, len(cached), match.id)
        by_side = {row.get("side"): row for row in cached}
        return GatewayResponse(body={
            "source": "cache",
            "matchId": match.id,
            "homeTeam": _cached_team(ctx, by_side.get("home"), "home"),
            "awayTeam": _cached_team(ctx, by_side.get("away"), "away"),
        })
    if cached:
        logger.info("%s Found empty cached lineups, deleting stale cache for match_id: %s", LOG_PREFIX, match.id)
        try:
            db.delete_rows("lineups", {"match_id": match.id})
        except APIError as exc:
            logger.error("%s Error deleting empty lineups: %s", LOG_PREFIX, exc)

    reason = lineup_unavailable_reason(ctx.sport_slug, ctx.starts_at, now)
    if reason is not None:
        logger.info("%s Lineups not yet available: %s", LOG_PREFIX, reason)
        return GatewayResponse.error(
            204, "Lineups not yet available",
            reason=reason, matchId=match.id, startsAt=ctx.starts_at, sport=ctx.sport_slug,
        )

    if not match.highlightly_id:
        logger.info("%s No highlightly_id for match, cannot fetch lineups", LOG_PREFIX)
        return GatewayResponse.error(
            204, "Lineups not available", reason="Match has no highlightly_id linked", matchId=match.id,
        )

    try:
        highlightly_client.ensure_configured()
    except ConfigurationError:
        logger.error("%s HIGHLIGHTLY_KEY not configured", LOG_PREFIX)
        return GatewayResponse.error(500, "API key not configured")

    endpoint = resolve_lineup_endpoint(ctx.sport_slug)
    try:
        payload = highlightly_client.fetch_lineups(endpoint, match.highlightly_id)
    except UpstreamError as exc:
        logger.error("%s Highlightly API error: %s", LOG_PREFIX, exc)
        return GatewayResponse.error(
            502, "Failed to fetch lineups from provider", status=exc.status, matchId=match.id,
        )
    if not isinstance(payload, dict):
        payload = {}

    if ctx.sport_slug in FLAT_LINEUP_SPORTS:
        return _from_flat(ctx, payload)
    return _from_formation(ctx, payload)


def _not_announced(match: Match) -> GatewayResponse:
    logger.info("%s Lineups not yet available for this match", LOG_PREFIX)
    return GatewayResponse.error(
        204, "Lineups not yet available",
        reason="Match lineups have not been announced yet", matchId=match.id,
    )


def _store(rows: list[dict]) -> None:
    if not rows:
        return
    logger.info("%s Inserting %d lineups into DB", LOG_PREFIX, len(rows))
    try:
        db.upsert_rows("lineups", rows, on_conflict="match_id,side")
    except APIError as exc:
        logger.error("%s Error inserting lineups: %s", LOG_PREFIX, exc)


def _from_flat(ctx: _Context, payload: dict) -> GatewayResponse:
    match = ctx.match
    nba_style = ctx.sport_slug in NBA_STYLE_SPORTS
    sides: dict[str, dict] = {}
    for side in ("home", "away"):
        block = payload.get(side)
        if isinstance(block, dict):
            sides[side] = block
    if not any(block.get("lineup") for block in sides.values()):
        return _not_announced(match)

    rows = []
    body: dict[str, Any] = {"source": "api", "matchId": match.id, "homeTeam": None, "awayTeam": None}
    for side, block in sides.items():
        team_id = match.home_team_id if side == "home" else match.away_team_id
        local_team = ctx.home_team if side == "home" else ctx.away_team
        fallback = (ctx.game.home if side == "home" else ctx.game.away) or side.capitalize()
        provider_team = block.get("team") if isinstance(block.get("team"), dict) else {}

        initial: list = []
        subs: list = []
        if block.get("lineup"):
            starters, subs = transform_flat_lineup(block["lineup"], nba_style)
            # One row of starters keeps the response shaped like a formation grid.
            initial = [starters]
            if team_id:
                rows.append(_lineup_row(ctx, side, team_id, None, starters, subs))

        body[f"{side}Team"] = TeamLineup(
            team_id=team_id or "",
            name=provider_team.get("displayName") or provider_team.get("name") or local_team.get("name") or fallback,
            logo=provider_team.get("logo") or local_team.get("logo") or "",
            formation="",
            initial_lineup=initial,
            substitutes=subs,
        ).model_dump(by_alias=True)

    _store(rows)
    return GatewayResponse(body=body)


def _from_formation(ctx: _Context, payload: dict) -> GatewayResponse:
    match = ctx.match
    sides = {
        side: payload[key]
        for side, key in (("home", "homeTeam"), ("away", "awayTeam"))
        if isinstance(payload.get(key), dict) and payload.get(key)
    }
    if not sides:
        return _not_announced(match)

    rows = []
    body: dict[str, Any] = {"source": "api", "matchId": match.id, "homeTeam": None, "awayTeam": None}
    for side, team in sides.items():
        team_id = match.home_team_id if side == "home" else match.away_team_id
        local_team = ctx.home_team if side == "home" else ctx.away_team
        fallback = (ctx.game.home if side == "home" else ctx.game.away) or side.capitalize()
        initial = team.get("initialLineup") or []
        subs = team.get("substitutes") or []
        if team_id:
            rows.append(_lineup_row(ctx, side, team_id, team.get("formation"), initial, subs))
        body[f"{side}Team"] = TeamLineup(
            team_id=team_id or "",
            name=team.get("name") or local_team.get("name") or fallback,
            logo=team.get("logo") or local_team.get("logo") or "",
            formation=team.get("formation") or "",
            initial_lineup=initial,
            substitutes=subs,
        ).model_dump(by_alias=True)

    _store(rows)
    return GatewayResponse(body=body)
