"""Per-sport transforms of a Highlightly match payload into cached columns.

Each ``transform_<sport>`` returns a ``MatchColumns`` holding the values written
to the match row's volatile columns (events, statistics, shots, box scores,
top performers, injuries). Venue, referee and forecast are shared across sports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from scoreline.sports.endpoints import is_nba_tier, is_nhl_tier


@dataclass
class MatchColumns:
    events: list[dict]
    statistics: Any = None
    shots: dict | None = None
    box_scores: Any = None
    top_performers: Any = None
    injuries: Any = None


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _team_name(team: Any) -> str:
    team = _dict(team)
    return team.get("displayName") or team.get("name") or ""


def _stats_by(entries: Any, key: str) -> dict | None:
    """Flatten ``[{key: ..., value: ...}]`` into ``{key: value}``; None when empty."""
    stats = {}
    for stat in _list(entries):
        stat = _dict(stat)
        if stat.get(key) and "value" in stat:
            stats[stat[key]] = stat["value"]
    return stats or None


def _assign_sides(
    entries: list[tuple[Any, Any]],
    home_team: Any,
    away_team: Any,
    fill_order: tuple[str, str] = ("home", "away"),
) -> dict[str, Any]:
    """Split ``(provider_team, value)`` pairs into home/away.

    Matches on team id first, then on a substring match of the team names,
    and finally drops the value into the first free slot of ``fill_order``.
    """
    home_id = _dict(home_team).get("id")
    away_id = _dict(away_team).get("id")
    home_name = _team_name(home_team).lower()
    away_name = _team_name(away_team).lower()
    out: dict[str, Any] = {"home": None, "away": None}

    for team, value in entries:
        team_id = _dict(team).get("id")
        if team_id is not None and team_id == home_id:
            out["home"] = value
        elif team_id is not None and team_id == away_id:
            out["away"] = value
        else:
            name = _team_name(team).lower()
            if name and home_name and (name in home_name or home_name in name):
                out["home"] = value
            elif name and away_name and (name in away_name or away_name in name):
                out["away"] = value
            elif out[fill_order[0]] is None:
                out[fill_order[0]] = value
            elif out[fill_order[1]] is None:
                out[fill_order[1]] = value
    return out


# ── shared ───────────────────────────────────────────────────────────────────


def transform_venue(venue: Any) -> dict | None:
    if not venue:
        return None
    venue = _dict(venue)
    return {k: venue.get(k) or None for k in ("name", "city", "country", "state", "capacity")}


def transform_forecast(forecast: Any) -> dict | None:
    if not forecast:
        return None
    forecast = _dict(forecast)
    return {"status": forecast.get("status") or None, "temperature": forecast.get("temperature") or None}


def transform_referee(sport_slug: str, payload: dict) -> Any:
    """Baseball umpires and NHL officials come as lists; football/rugby as one referee."""
    referees = payload.get("referees")
    if sport_slug == "baseball" and referees:
        return [{"name": r.get("name") or None, "position": r.get("position") or None}
                for r in map(_dict, _list(referees))] or None
    if sport_slug in ("hockey", "ice-hockey") and referees:
        return [{"name": r.get("name") or "", "position": r.get("position") or ""}
                for r in map(_dict, _list(referees))] or None
    referee = payload.get("referee")
    if sport_slug not in ("american-football", "cricket") and referee:
        referee = _dict(referee)
        return {"name": referee.get("name") or None, "nationality": referee.get("nationality") or None}
    return None


# ── football ─────────────────────────────────────────────────────────────────


def football_events(events: Any, match_id: str) -> list[dict]:
    out = []
    for i, ev in enumerate(map(_dict, _list(events))):
        team = _dict(ev.get("team"))
        out.append({
            "id": f"{match_id}-event-{i}",
            "eventType": ev.get("type") or "Unknown",
            "eventTime": ev.get("time") or "0",
            "team": {
                "providerId": team.get("id") or 0,
                "name": team.get("name") or "",
                "logo": team.get("logo") or "",
            },
            "player": {"providerId": ev.get("playerId") or 0, "name": ev.get("player") or ""},
            "assistingPlayer": (
                {"providerId": ev.get("assistingPlayerId") or 0, "name": ev["assist"]}
                if ev.get("assist") else None
            ),
            "substitutedPlayer": (
                {"providerId": ev.get("assistingPlayerId") or 0, "name": ev["substituted"]}
                if ev.get("substituted") else None
            ),
        })
    return out


def football_statistics(statistics: Any, home_team_id: Any, away_team_id: Any) -> dict | None:
    if not statistics:
        return None
    by_team = {_dict(s.get("team")).get("id"): s for s in map(_dict, _list(statistics))}

    def side(team_id: Any) -> dict | None:
        entry = by_team.get(team_id) if team_id is not None else None
        return _stats_by(entry.get("statistics"), "displayName") if entry else None

    return {"home": side(home_team_id), "away": side(away_team_id)}


def transform_football(payload: dict, match_id: str) -> MatchColumns:
    home, away = _dict(payload.get("homeTeam")), _dict(payload.get("awayTeam"))
    return MatchColumns(
        events=football_events(payload.get("events"), match_id),
        statistics=football_statistics(payload.get("statistics"), home.get("id"), away.get("id")),
        shots={"home": _list(home.get("shots")), "away": _list(away.get("shots"))},
    )


# ── american football ────────────────────────────────────────────────────────


def american_football_events(events: Any, match_id: str) -> list[dict]:
    out = []
    for i, ev in enumerate(map(_dict, _list(events))):
        team = _dict(ev.get("team"))
        out.append({
            "id": f"{match_id}-event-{i}",
            "eventType": ev.get("result") or "Drive",
            "start": ev.get("start") or None,
            "end": ev.get("end") or None,
            "team": {
                "providerId": team.get("id") or 0,
                "name": _team_name(team),
                "logo": team.get("logo") or "",
                "abbreviation": team.get("abbreviation") or None,
            },
            "plays": _list(ev.get("plays")),
            "description": ev.get("description") or None,
            "isScoringPlay": bool(ev.get("isScoringPlay")),
        })
    return out


def american_football_injuries(injuries: Any, home_team: Any, away_team: Any) -> dict | None:
    if not _list(injuries):
        return None
    entries = []
    for team_injury in map(_dict, injuries):
        team = _dict(team_injury.get("team"))
        players = [
            {
                "playerName": _dict(inj.get("player")).get("name") or "Unknown",
                "jerseyNumber": _dict(inj.get("player")).get("jersey") or None,
                "position": _dict(inj.get("player")).get("position") or None,
                "status": inj.get("status") or "Unknown",
            }
            for inj in map(_dict, _list(team_injury.get("data")))
        ]
        entries.append((team, {
            "name": _team_name(team) or "Unknown",
            "logo": team.get("logo") or "",
            "injuries": players,
        }))
    # Unmatched injury lists fill the away slot first, as the provider lists visitors first.
    sides = _assign_sides(entries, home_team, away_team, fill_order=("away", "home"))
    return {"homeTeam": sides["home"], "awayTeam": sides["away"]}


def transform_american_football(payload: dict, match_id: str) -> MatchColumns:
    match_stats = payload.get("matchStatistics")
    statistics = None
    if match_stats:
        match_stats = _dict(match_stats)
        statistics = {
            "home": _stats_by(_dict(match_stats.get("homeTeam")).get("statistics"), "name"),
            "away": _stats_by(_dict(match_stats.get("awayTeam")).get("statistics"), "name"),
        }
    return MatchColumns(
        events=american_football_events(payload.get("events"), match_id),
        statistics=statistics,
        box_scores=payload.get("boxScores") or None,
        top_performers=payload.get("topPerformers") or None,
        injuries=american_football_injuries(
            payload.get("injuries"), payload.get("homeTeam"), payload.get("awayTeam")
        ),
    )


# ── cricket ──────────────────────────────────────────────────────────────────


def _cricket_team(team: Any) -> dict:
    team = _dict(team)
    return {k: team.get(k) for k in ("id", "name", "logo", "abbreviation")}


def cricket_statistics(statistics: Any) -> list[dict] | None:
    if not isinstance(statistics, list):
        return None
    out = []
    for inning in map(_dict, statistics):
        team = _dict(inning.get("team"))
        out.append({
            "inningNumber": inning.get("inningNumber"),
            "team": {
                **_cricket_team(team),
                "fallOfWickets": [
                    {k: f.get(k) for k in ("runs", "order", "overs", "dismissalBatsman")}
                    for f in map(_dict, _list(team.get("fallOfWickets")))
                ],
                "inningBatsmen": [
                    {k: b.get(k) for k in ("runs", "balls", "fours", "sixes", "battingStrikeRate", "player")}
                    for b in map(_dict, _list(team.get("inningBatsmen")))
                ],
                "inningBowlers": [
                    {k: b.get(k) for k in ("overs", "maidens", "wickets", "concededRuns", "economy", "player")}
                    for b in map(_dict, _list(team.get("inningBowlers")))
                ],
                "inningPartnerships": [
                    {k: p.get(k) for k in (
                        "runs", "balls", "overs", "firstPlayer", "secondPlayer",
                        "firstPlayerRuns", "firstPlayerBalls", "secondPlayerRuns", "secondPlayerBalls",
                    )}
                    for p in map(_dict, _list(team.get("inningPartnerships")))
                ],
            },
        })
    return out


def cricket_top_performers(best_batsmen: Any, best_bowlers: Any) -> dict:
    def batsman(p: dict) -> dict:
        s = _dict(p.get("statistics"))
        return {
            "name": p.get("name"),
            "runs": s.get("runs"),
            "average": s.get("average"),
            "innings": s.get("innings"),
            "matches": s.get("matches"),
            "strikeRate": s.get("battingStrikeRate"),
        }

    def bowler(p: dict) -> dict:
        s = _dict(p.get("statistics"))
        return {
            "name": p.get("name"),
            "wickets": s.get("wickets"),
            "economy": s.get("economy"),
            "average": s.get("average"),
            "balls": s.get("balls"),
            "concededRuns": s.get("concededRuns"),
            "strikeRate": s.get("battingStrikeRate"),
        }

    return {
        "batsmen": [
            {"team": _cricket_team(t.get("team")), "players": [batsman(p) for p in map(_dict, _list(t.get("players")))]}
            for t in map(_dict, _list(best_batsmen))
        ],
        "bowlers": [
            {"team": _cricket_team(t.get("team")), "players": [bowler(p) for p in map(_dict, _list(t.get("players")))]}
            for t in map(_dict, _list(best_bowlers))
        ],
    }


def cricket_squad(squad: Any) -> list[dict]:
    return [
        {
            "team": _cricket_team(t.get("team")),
            "players": [
                {k: p.get(k) for k in ("name", "battingStyles", "bowlingStyles", "roles")}
                for p in map(_dict, _list(t.get("players")))
            ],
        }
        for t in map(_dict, _list(squad))
    ]


def transform_cricket(payload: dict, match_id: str) -> MatchColumns:
    # Cricket has no event timeline in this feed.
    return MatchColumns(
        events=[],
        statistics=cricket_statistics(payload.get("statistics")),
        top_performers=cricket_top_performers(payload.get("bestBatsmen"), payload.get("bestBowlers")),
        box_scores=cricket_squad(payload.get("squad")),
    )


# ── rugby ────────────────────────────────────────────────────────────────────


def _rugby_player(p: dict) -> dict:
    return {
        "name": p.get("name") or None,
        "shortName": p.get("shortName") or None,
        "countryName": p.get("countryName") or None,
        "birth": p.get("birth") or None,
        "height": p.get("height") or None,
        "position": p.get("position") or "Unknown",
        "shirtNumber": p.get("shirtNumber") or None,
    }


def rugby_lineups(lineups: Any, home_team: Any, away_team: Any) -> dict | None:
    if not lineups:
        return None
    lineups = _dict(lineups)

    def side(key: str, team: Any) -> dict:
        team, block = _dict(team), _dict(lineups.get(key))
        return {
            "team": {"id": team.get("id") or None, "name": team.get("name") or None, "logo": team.get("logo") or None},
            "initialLineup": [_rugby_player(p) for p in map(_dict, _list(block.get("initialLineup")))],
            "substitutions": [_rugby_player(p) for p in map(_dict, _list(block.get("substitutions")))],
        }

    return {"home": side("home", home_team), "away": side("away", away_team)}


def transform_rugby(payload: dict, match_id: str) -> MatchColumns:
    return MatchColumns(
        events=[],
        box_scores=rugby_lineups(payload.get("lineups"), payload.get("homeTeam"), payload.get("awayTeam")),
    )


# ── baseball ─────────────────────────────────────────────────────────────────


def baseball_plays(plays: Any, match_id: str) -> list[dict]:
    out = []
    for i, play in enumerate(map(_dict, _list(plays))):
        pitch, result, score = play.get("pitch"), play.get("result"), play.get("score")
        out.append({
            "id": f"{match_id}-play-{i}",
            "type": play.get("type") or "Unknown",
            "teamId": play.get("teamId") or None,
            "description": play.get("description") or None,
            "period": play.get("period") or None,
            "currentOuts": play.get("currentOuts") or 0,
            "pitch": {
                "type": pitch.get("type") or None,
                "velocity": pitch.get("velocity") or None,
                "ballsCount": pitch.get("ballsCount") or 0,
                "strikesCount": pitch.get("strikesCount") or 0,
            } if isinstance(pitch, dict) and pitch else None,
            "result": {
                "ballsCount": result.get("ballsCount") or 0,
                "strikesCount": result.get("strikesCount") or 0,
            } if isinstance(result, dict) and result else None,
            "score": {
                "away": score.get("away") or 0,
                "home": score.get("home") or 0,
            } if isinstance(score, dict) and score else None,
        })
    return out


def baseball_stats(stats: Any) -> dict | None:
    if not stats:
        return None
    stats = _dict(stats)

    def team_stats(team_stats: Any) -> dict | None:
        group = team_stats[0] if isinstance(team_stats, list) and team_stats else team_stats
        if not isinstance(group, dict):
            return None
        blocks = {
            name: [
                {"displayName": s.get("displayName") or None, "value": s.get("value", 0) if s.get("value") is not None else 0}
                for s in map(_dict, filter(None, _list(group.get(name))))
            ]
            for name in ("batting", "fielding", "pitching")
        }
        return blocks if any(blocks.values()) else None

    home, away = team_stats(stats.get("homeTeam")), team_stats(stats.get("awayTeam"))
    if home is None and away is None:
        return None
    return {"homeTeam": home, "awayTeam": away}


def baseball_rosters(rosters: Any, home_team: Any, away_team: Any) -> dict | None:
    if not rosters:
        return None
    rosters = _dict(rosters)

    def player(p: dict) -> dict:
        return {
            "jersey": p.get("jersey") or None,
            "fullName": p.get("fullName") or None,
            "position": p.get("position") or None,
            "isStarter": bool(p.get("isStarter")),
        }

    def roster(value: Any) -> list[dict]:
        if isinstance(value, list):
            return [player(_dict(p)) for p in value]
        return [player(value)] if isinstance(value, dict) and value else []

    def side(team: Any, key: str) -> dict:
        team = _dict(team)
        return {
            "team": {
                "id": team.get("id") or None,
                "name": _team_name(team) or None,
                "logo": team.get("logo") or None,
                "abbreviation": team.get("abbreviation") or None,
            },
            "players": roster(rosters.get(key)),
        }

    return {"home": side(home_team, "homeTeam"), "away": side(away_team, "awayTeam")}


def transform_baseball(payload: dict, match_id: str) -> MatchColumns:
    return MatchColumns(
        events=baseball_plays(payload.get("plays"), match_id),
        statistics=baseball_stats(payload.get("stats")),
        box_scores=baseball_rosters(payload.get("rosters"), payload.get("homeTeam"), payload.get("awayTeam")),
    )


# ── basketball ───────────────────────────────────────────────────────────────


def basketball_events(events: Any, match_id: str) -> list[dict]:
    out = []
    for i, ev in enumerate(map(_dict, _list(events))):
        team = ev.get("team")
        out.append({
            "id": f"{match_id}-event-{i}",
            "team": {
                "id": team.get("id"),
                "name": _team_name(team),
                "abbreviation": team.get("abbreviation"),
                "logo": team.get("logo"),
            } if isinstance(team, dict) and team else None,
            "clock": ev.get("clock") or None,
            "period": ev.get("period") or None,
            "description": ev.get("description") or "",
            "isScoringPlay": bool(ev.get("isScoringPlay")),
            "isShootingPlay": bool(ev.get("isShootingPlay")),
        })
    return out


def basketball_player_statistics(player_statistics: Any, home_team: Any, away_team: Any) -> dict | None:
    if not isinstance(player_statistics, list):
        return None
    entries = []
    for team_data in map(_dict, player_statistics):
        team = _dict(team_data.get("team"))
        players = [
            {
                "name": p.get("name"),
                "position": p.get("position"),
                "stats": {
                    s["displayName"]: s.get("value")
                    for s in map(_dict, _list(p.get("data")))
                    if s.get("displayName")
                },
            }
            for p in map(_dict, _list(team_data.get("players")))
        ]
        info = {
            "id": team.get("id"),
            "name": _team_name(team),
            "abbreviation": team.get("abbreviation"),
            "logo": team.get("logo"),
        }
        entries.append((team, {"team": info, "players": players}))
    return _assign_sides(entries, home_team, away_team)


def generic_basketball_statistics(statistics: Any) -> dict | None:
    if not isinstance(statistics, list):
        return None
    teams = []
    for team_stats in map(_dict, statistics):
        team = team_stats.get("team")
        teams.append({
            "team": {"id": team.get("id"), "name": team.get("name"), "logo": team.get("logo")}
            if isinstance(team, dict) and team else None,
            "stats": {
                s["displayName"]: s.get("value")
                for s in map(_dict, _list(team_stats.get("statistics")))
                if "displayName" in s
            },
        })
    return {"teams": teams}


def transform_basketball(payload: dict, match_id: str, league_slug: str | None) -> MatchColumns:
    if is_nba_tier(league_slug):
        match_stats = payload.get("matchStatistics")
        statistics = None
        if match_stats:
            match_stats = _dict(match_stats)
            statistics = {
                "home": _stats_by(_dict(match_stats.get("homeTeam")).get("statistics"), "name"),
                "away": _stats_by(_dict(match_stats.get("awayTeam")).get("statistics"), "name"),
            }
        return MatchColumns(
            events=basketball_events(payload.get("events"), match_id),
            statistics=statistics,
            box_scores=basketball_player_statistics(
                payload.get("playerStatistics"), payload.get("homeTeam"), payload.get("awayTeam")
            ),
        )
    # NBL, Euroleague and friends: statistics[] only, no play-by-play or player stats
    return MatchColumns(events=[], statistics=generic_basketball_statistics(payload.get("statistics")))


# ── hockey ───────────────────────────────────────────────────────────────────


def nhl_events(events: Any, match_id: str) -> list[dict]:
    out = []
    for i, ev in enumerate(map(_dict, _list(events))):
        team = _dict(ev.get("team"))
        out.append({
            "id": f"{match_id}-event-{i}",
            "eventType": ev.get("type") or "Unknown",
            "clock": ev.get("clock") or None,
            "period": ev.get("period") or None,
            "isScoringPlay": bool(ev.get("isScoringPlay")),
            "team": {
                "providerId": team.get("id") or 0,
                "name": _team_name(team),
                "abbreviation": team.get("abbreviation") or "",
                "logo": team.get("logo") or "",
            },
        })
    return out


def nhl_statistics(overall_statistics: Any) -> dict | None:
    if not isinstance(overall_statistics, list):
        return None
    result: dict[str, dict] = {"home": {}, "away": {}}
    # Two entries, home first.
    for idx, team_stats in enumerate(overall_statistics):
        target = "home" if idx == 0 else "away"
        for stat in map(_dict, _list(_dict(team_stats).get("data"))):
            if stat.get("displayName") and "value" in stat:
                result[target][stat["displayName"]] = stat["value"]
    return result


def transform_hockey(payload: dict, match_id: str, league_slug: str | None) -> MatchColumns:
    if is_nhl_tier(league_slug) and payload.get("events"):
        return MatchColumns(
            events=nhl_events(payload.get("events"), match_id),
            statistics=nhl_statistics(payload.get("overallStatistics")),
        )
    return MatchColumns(events=[])


def transform_volleyball(payload: dict, match_id: str) -> MatchColumns:
    # Sets only; the volleyball feed has neither events nor statistics.
    return MatchColumns(events=[])


def transform_match_payload(
    sport_slug: str,
    payload: dict,
    match_id: str,
    league_slug: str | None = None,
) -> MatchColumns:
    """Dispatch a provider payload to the transform for ``sport_slug``."""
    if sport_slug == "cricket":
        return transform_cricket(payload, match_id)
    if sport_slug == "american-football":
        return transform_american_football(payload, match_id)
    if sport_slug == "rugby":
        return transform_rugby(payload, match_id)
    if sport_slug == "baseball":
        return transform_baseball(payload, match_id)
    if sport_slug == "basketball":
        return transform_basketball(payload, match_id, league_slug)
    if sport_slug == "volleyball":
        return transform_volleyball(payload, match_id)
    if sport_slug in ("hockey", "ice-hockey"):
        return transform_hockey(payload, match_id, league_slug)
    return transform_football(payload, match_id)
