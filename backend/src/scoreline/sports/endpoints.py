"""Sport slug → Highlightly API segment resolution.

Some sports are split across tiered provider endpoints: NBA-tier basketball
leagues live under ``/nba`` and NHL-tier hockey leagues under ``/nhl``, while
everything else uses the generic ``/basketball`` and ``/hockey`` routes.
Unknown sports resolve to ``football``.
"""

from __future__ import annotations

from types import MappingProxyType

DEFAULT_ENDPOINT = "football"

NBA_TIER_LEAGUES: frozenset[str] = frozenset(
    {"nba", "ncaa", "nba-g-league", "nba-summer-league", "nba-cup"}
)
NHL_TIER_LEAGUES: frozenset[str] = frozenset({"nhl", "ncaa-hockey", "nhl-preseason"})

# Internal sport slug → provider segment (match-data and head-to-head routes)
SPORT_ENDPOINTS = MappingProxyType({
    "football": "football",
    "american-football": "american-football",
    "nfl": "american-football",
    "basketball": "basketball",
    "ice-hockey": "hockey",
    "hockey": "hockey",
    "baseball": "baseball",
    "cricket": "cricket",
    "rugby": "rugby",
    "volleyball": "volleyball",
})

_BASKETBALL_SLUGS = frozenset({"basketball", "nba", "ncaa"})
_HOCKEY_SLUGS = frozenset({"hockey", "ice-hockey", "nhl", "ncaa-hockey"})

# Lineups are only published on the top-tier routes for US sports.
LINEUP_ENDPOINTS = MappingProxyType({
    "football": "football",
    "baseball": "baseball",
    "american-football": "american-football",
    "basketball": "nba",
    "hockey": "nhl",
    "ice-hockey": "nhl",
})


def is_nba_tier(league_slug: str | None) -> bool:
    return bool(league_slug) and league_slug.lower() in NBA_TIER_LEAGUES


def is_nhl_tier(league_slug: str | None) -> bool:
    return bool(league_slug) and league_slug.lower() in NHL_TIER_LEAGUES


def basketball_endpoint(league_slug: str | None = None) -> str:
    return "nba" if is_nba_tier(league_slug) else "basketball"


def hockey_endpoint(league_slug: str | None = None) -> str:
    return "nhl" if is_nhl_tier(league_slug) else "hockey"


def resolve_sport_endpoint(sport: str | None, league_slug: str | None = None) -> str:
    """Return the provider segment for ``sport`` in ``league_slug``.

    Always returns a string; an unrecognised sport maps to ``football``.
    """
    base = (sport or "").lower()
    if base in _HOCKEY_SLUGS:
        return hockey_endpoint(league_slug)
    if base in _BASKETBALL_SLUGS:
        return basketball_endpoint(league_slug)
    return SPORT_ENDPOINTS.get(base, DEFAULT_ENDPOINT)


def resolve_lineup_endpoint(sport: str | None) -> str:
    return LINEUP_ENDPOINTS.get((sport or "").lower(), DEFAULT_ENDPOINT)
