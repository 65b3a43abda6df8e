"""Match-data gateway: serve a match's provider data from cache or Highlightly.

Resolves a betting-feed id to the internal match, serves the cached columns
while they are fresh (1 minute for live matches, 7 days once finished), and
otherwise refetches, transforms and writes them back. On provider failure a
stale cache is served instead of an error.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from postgrest.exceptions import APIError

from scoreline import db
from scoreline.errors import ConfigurationError, UpstreamError
from scoreline.ingestion import highlightly_client
from scoreline.ingestion.cache import KeyedLocks, cache_age, is_fresh, match_ttl, utcnow
from scoreline.ingestion.match_states import build_states, cricket_dates
from scoreline.ingestion.match_transforms import (
    transform_forecast,
    transform_match_payload,
    transform_referee,
    transform_venue,
)
from scoreline.models.gateway import GatewayResponse
from scoreline.models.matches import Match, StagingGame
from scoreline.sports.endpoints import DEFAULT_ENDPOINT, resolve_sport_endpoint

logger = logging.getLogger(__name__)

LOG_PREFIX = "[fetch-match-data]"

MATCH_COLUMNS = (
    "id, highlightly_id, home_team_id, away_team_id, events, statistics, venue, referee, "
    "forecast, shots, news, predictions, box_scores, top_performers, injuries, states, "
    "last_data_fetch, status_short"
)

# Sports whose update writes box_scores / top_performers / injuries.
BOX_SCORE_SPORTS = frozenset({"american-football", "cricket", "rugby", "baseball", "basketball"})
TOP_PERFORMER_SPORTS = frozenset({"american-football", "cricket"})
INJURY_SPORTS = frozenset({"american-football"})

_locks = KeyedLocks()


def resolve_staging_game(stg_azuro_id: str) -> tuple[StagingGame, str] | None:
    """Look up a staging game and its sport slug (``football`` when unknown)."""
    row = db.select_one(
        "stg_azuro_games",
        "id, match_id, sport_id, league_azuro_slug",
        {"id": stg_azuro_id},
    )
    if row is None:
        return None
    game = StagingGame.model_validate(row)

    sport_slug = DEFAULT_ENDPOINT
    if game.sport_id is not None:
        sport = db.select_one("sport", "slug", {"id": game.sport_id})
        if sport and sport.get("slug"):
            sport_slug = sport["slug"]
    return game, sport_slug


def _cached_body(source: str, match: Match, sport_slug: str) -> dict[str, Any]:
    return {
        "source": source,
        "matchId": match.id,
        "sportSlug": sport_slug,
        "homeTeamId": match.home_team_id,
        "awayTeamId": match.away_team_id,
        "events": match.events or [],
        "statistics": match.statistics or None,
        "venue": match.venue or None,
        "referee": match.referee or None,
        "forecast": match.forecast or None,
        "shots": match.shots or None,
        "news": match.news or [],
        "predictions": match.predictions or None,
        "boxScores": match.box_scores or None,
        "topPerformers": match.top_performers or None,
        "injuries": match.injuries or None,
        "states": match.states or None,
    }


def _empty_body(match: Match, sport_slug: str) -> dict[str, Any]:
    return {
        "source": "no_highlightly_id",
        "matchId": match.id,
        "sportSlug": sport_slug,
        "homeTeamId": match.home_team_id,
        "awayTeamId": match.away_team_id,
        "events": [],
        "statistics": None,
        "venue": None,
        "referee": None,
        "forecast": None,
        "shots": None,
        "news": [],
        "predictions": None,
        "boxScores": None,
        "topPerformers": None,
        "injuries": None,
    }


def _has_cache(match: Match) -> bool:
    return match.last_data_fetch is not None and match.events is not None


def build_update(
    sport_slug: str,
    payload: dict,
    match_id: str,
    league_slug: str | None,
    now: datetime,
) -> dict[str, Any]:
    """Transform a provider payload into the ``match`` columns to write back."""
    columns = transform_match_payload(sport_slug, payload, match_id, league_slug)
    update: dict[str, Any] = {
        "events": columns.events,
        "statistics": columns.statistics,
        "venue": transform_venue(payload.get("venue")),
        "referee": transform_referee(sport_slug, payload),
        "forecast": transform_forecast(payload.get("forecast")),
        "shots": columns.shots,
        "news": payload.get("news") or [],
        "predictions": payload.get("predictions") or None,
        "last_data_fetch": now.isoformat(),
    }
    if sport_slug in BOX_SCORE_SPORTS:
        update["box_scores"] = columns.box_scores
    if sport_slug in TOP_PERFORMER_SPORTS:
        update["top_performers"] = columns.top_performers
    if sport_slug in INJURY_SPORTS:
        update["injuries"] = columns.injuries
    update["states"] = build_states(sport_slug, payload, league_slug)
    if sport_slug == "cricket":
        update["highlightly_dates"] = cricket_dates(payload)
    return update


def fetch_match_data(stg_azuro_id: str | None, now: datetime | None = None) -> GatewayResponse:
    """Serve provider data for the match behind a ``stg_azuro_games`` id."""
    if not stg_azuro_id:
        return GatewayResponse.error(400, "stgAzuroId is required")

    now = now or utcnow()
    logger.info("%s Fetching for stgAzuroId: %s", LOG_PREFIX, stg_azuro_id)

    resolved = resolve_staging_game(stg_azuro_id)
    if resolved is None or not resolved[0].match_id:
        logger.error("%s stg_azuro_games lookup failed for %s", LOG_PREFIX, stg_azuro_id)
        return GatewayResponse.error(404, "Match not found in staging table")
    game, sport_slug = resolved
    match_id = game.match_id
    league_slug = game.league_azuro_slug
    endpoint = resolve_sport_endpoint(sport_slug, league_slug)
    logger.info(
        "%s Resolved matchId: %s, sport: %s, league: %s, endpoint: %s",
        LOG_PREFIX, match_id, sport_slug, league_slug, endpoint,
    )

    with _locks.hold(match_id):
        return _serve(match_id, sport_slug, league_slug, endpoint, now)


def _serve(
    match_id: str,
    sport_slug: str,
    league_slug: str | None,
    endpoint: str,
    now: datetime,
) -> GatewayResponse:
    row = db.select_one("match", MATCH_COLUMNS, {"id": match_id})
    if row is None:
        logger.error("%s Match lookup failed for %s", LOG_PREFIX, match_id)
        return GatewayResponse.error(404, "Match not found")
    match = Match.model_validate(row)

    if _has_cache(match) and is_fresh(match.last_data_fetch, match_ttl(match.status_short), now):
        age = cache_age(match.last_data_fetch, now)
        logger.info("%s Returning cached data (age: %ds)", LOG_PREFIX, round(age.total_seconds()))
        return GatewayResponse(body=_cached_body("cache", match, sport_slug))

    if not match.highlightly_id:
        logger.info("%s No highlightly_id, returning empty data", LOG_PREFIX)
        return GatewayResponse(body=_empty_body(match, sport_slug))

    try:
        highlightly_client.ensure_configured()
    except ConfigurationError:
        logger.error("%s HIGHLIGHTLY_KEY not configured", LOG_PREFIX)
        return GatewayResponse.error(500, "API key not configured")

    try:
        raw = highlightly_client.fetch_match(endpoint, match.highlightly_id)
    except UpstreamError as exc:
        logger.error("%s API error: %s", LOG_PREFIX, exc)
        if match.events is not None:
            return GatewayResponse(body=_cached_body("stale_cache", match, sport_slug))
        return GatewayResponse.error(502, "Failed to fetch from API")

    payload = raw[0] if isinstance(raw, list) and raw else raw
    if not isinstance(payload, dict):
        logger.error("%s Empty API response", LOG_PREFIX)
        return GatewayResponse.error(502, "Empty API response")

    update = build_update(sport_slug, payload, match_id, league_slug, now)
    try:
        db.update_rows("match", update, {"id": match_id})
    except APIError as exc:
        logger.error("%s Update error: %s", LOG_PREFIX, exc)
    else:
        logger.info("%s Updated match data in database", LOG_PREFIX)

    return GatewayResponse(body={
        "source": "api",
        "matchId": match_id,
        "sportSlug": sport_slug,
        "homeTeamId": match.home_team_id,
        "awayTeamId": match.away_team_id,
        "events": update["events"],
        "statistics": update["statistics"],
        "venue": update["venue"],
        "referee": update["referee"],
        "forecast": update["forecast"],
        "shots": update["shots"],
        "news": update["news"],
        "predictions": update["predictions"],
        "stage": payload.get("stage") or None,
        "round": payload.get("round") or None,
        "boxScores": update.get("box_scores"),
        "topPerformers": update.get("top_performers"),
        "injuries": update.get("injuries"),
        "states": update["states"],
    })
