"""
Gateway tests for fetch_h2h.

Teams "t-a" (provider id 100) and "t-b" (provider id 200). "t-a" sorts first,
so it is team_1 of the cached record.
"""

from datetime import timedelta

import pytest

from scoreline.ingestion.h2h import fetch_h2h, order_team_ids, sort_meetings


def meeting(mid, date, home_id, away_id, score, **extra):
    names = {100: "Arsenal", 200: "Chelsea"}
    return {
        "id": mid,
        "date": date,
        "homeTeam": {"id": home_id, "name": names[home_id], "logo": f"{home_id}.png"},
        "awayTeam": {"id": away_id, "name": names[away_id], "logo": f"{away_id}.png"},
        "league": {"name": "Premier League", "logo": "pl.png"},
        "state": {"score": {"current": score}},
        **extra,
    }


# Deliberately out of date order.
MEETINGS = [
    meeting(3, "2024-05-01T15:00:00Z", 100, 200, "1 - 1"),
    meeting(1, "2025-02-01T15:00:00Z", 100, 200, "2 - 1"),
    meeting(4, "2024-01-01T15:00:00Z", 200, 100, "0 - 2"),
    meeting(2, "2024-10-01T15:00:00Z", 200, 100, "3 - 0"),
]


@pytest.fixture
def teams(store):
    store.add("teams", id="t-a", highlightly_id=100, name="Arsenal", logo="ars.png")
    store.add("teams", id="t-b", highlightly_id=200, name="Chelsea", logo="che.png")
    return store


class TestValidation:
    """Early exits before the cache or provider."""

    def test_missing_team(self, store, provider):
        result = fetch_h2h("t-a", None)
        assert result.status_code == 400
        assert result.body == {"error": "Missing homeTeamId or awayTeamId"}

    def test_teams_not_found(self, store, provider):
        store.add("teams", id="t-a", highlightly_id=100)
        result = fetch_h2h("t-a", "t-zzz")

        assert result.status_code == 200
        assert result.body == {"error": "Teams not found", "summary": None, "matches": []}

    def test_team_without_provider_id(self, teams, provider):
        teams.rows("teams")[1]["highlightly_id"] = None

        result = fetch_h2h("t-a", "t-b")

        assert result.body["source"] == "none"
        assert result.body["summary"] == {"homeWins": 0, "draws": 0, "awayWins": 0, "totalMatches": 0}
        assert result.body["matches"] == []
        assert provider.calls == []


class TestFetch:
    """Provider fetch, tally and persistence."""

    def test_tally_from_home_perspective(self, teams, provider, now):
        provider.h2h = MEETINGS

        body = fetch_h2h("t-a", "t-b", now=now).body

        assert body["source"] == "api"
        assert body["summary"] == {"homeWins": 2, "draws": 1, "awayWins": 1, "totalMatches": 4}
        assert provider.calls == [("h2h", "football", 100, 200)]

    def test_meetings_most_recent_first(self, teams, provider, now):
        provider.h2h = MEETINGS

        matches = fetch_h2h("t-a", "t-b", now=now).body["matches"]

        assert [m["date"][:7] for m in matches] == ["2025-02", "2024-10", "2024-05", "2024-01"]
        first = matches[0]
        assert first["homeTeam"] == {"id": "t-a", "name": "Arsenal", "logo": "100.png"}
        assert first["awayTeam"]["id"] == "t-b"
        assert (first["homeScore"], first["awayScore"]) == (2, 1)
        assert first["competition"] == {"name": "Premier League", "logo": "pl.png"}
        assert matches[1]["homeTeam"]["id"] == "t-b"

    def test_record_persisted(self, teams, provider, now):
        provider.h2h = MEETINGS

        fetch_h2h("t-b", "t-a", now=now)

        (record,) = teams.rows("h2h_records")
        assert (record["team_1_id"], record["team_2_id"]) == ("t-a", "t-b")
        assert (record["team_1_wins"], record["team_2_wins"], record["draws"]) == (2, 1, 1)
        assert record["match_5_id"] is None
        assert record["last_fetched_at"] == now.isoformat()

        stored = {m["highlightly_id"]: m for m in teams.rows("match")}
        assert stored[2]["home_team_id"] == "t-b"
        assert (stored[2]["home_score"], stored[2]["away_score"]) == (3, 0)
        assert record["match_1_id"] == stored[1]["id"]

    def test_unknown_provider_team_not_linked(self, teams, provider, now):
        """A meeting whose home side is not one of ours keeps no team ids."""
        provider.h2h = [{
            "id": 21,
            "date": "2024-08-01T15:00:00Z",
            "homeTeam": {"id": 999, "name": "Fulham"},
            "awayTeam": {"id": 200, "name": "Chelsea"},
            "state": {"score": {"current": "2 - 0"}},
        }]

        body = fetch_h2h("t-a", "t-b", now=now).body

        assert body["summary"]["totalMatches"] == 1
        (stored,) = teams.rows("match")
        assert stored.get("home_team_id") is None
        assert stored.get("away_team_id") is None
        assert (stored["home_score"], stored["away_score"]) == (2, 0)

    def test_only_five_stored_but_all_counted(self, teams, provider, now):
        provider.h2h = [
            meeting(i, f"2024-0{i}-01T12:00:00Z", 100, 200, "1 - 0") for i in range(1, 8)
        ]

        body = fetch_h2h("t-a", "t-b", limit=10, now=now).body

        assert body["summary"]["totalMatches"] == 7
        assert body["summary"]["homeWins"] == 7
        assert len(body["matches"]) == 5
        assert len(teams.rows("match")) == 5

    @pytest.mark.parametrize("limit, expected", [(2, 2), (0, 0), (-1, 0)])
    def test_limit(self, teams, provider, now, limit, expected):
        provider.h2h = MEETINGS
        body = fetch_h2h("t-a", "t-b", limit=limit, now=now).body

        assert len(body["matches"]) == expected
        assert body["summary"]["totalMatches"] == 4

    def test_no_meetings(self, teams, provider, now):
        provider.h2h = []
        body = fetch_h2h("t-a", "t-b", now=now).body

        assert body["source"] == "api"
        assert body["summary"]["totalMatches"] == 0
        assert teams.rows("h2h_records") == []

    def test_nba_endpoint_and_quarters(self, teams, provider, now):
        provider.h2h = [{
            "id": 9,
            "date": "2025-01-10T00:30:00Z",
            "homeTeam": {"id": 100, "displayName": "Boston Celtics"},
            "awayTeam": {"id": 200, "displayName": "New York Knicks"},
            "state": {"score": {"homeTeam": [25, 30, 20, 28], "awayTeam": [20, 20, 20, 20]}},
        }]

        body = fetch_h2h("t-a", "t-b", sport="basketball", league_slug="nba", now=now).body

        assert provider.calls[0][1] == "nba"
        match = body["matches"][0]
        assert (match["homeScore"], match["awayScore"]) == (103, 80)
        assert match["homeTeam"]["name"] == "Boston Celtics"
        assert match["basketballData"]["q1"] == {"home": 25, "away": 20}
        assert "overTime" not in match["basketballData"]

    def test_cricket(self, teams, provider, now):
        provider.h2h = [{
            "id": 11,
            "startDate": "2024-11-01",
            "format": "T20",
            "homeTeam": {"id": 200, "name": "Chelsea CC", "abbreviation": "CHE"},
            "awayTeam": {"id": 100, "name": "Arsenal CC", "abbreviation": "ARS"},
            "state": {
                "report": "Arsenal CC won by 5 wickets",
                "teams": {"home": {"score": "150/8", "info": "20 ov"}, "away": {"score": "151/5"}},
            },
        }]

        body = fetch_h2h("t-a", "t-b", sport="cricket", now=now).body

        match = body["matches"][0]
        assert (match["homeScore"], match["awayScore"]) == (0, 1)
        assert match["date"] == "2024-11-01"
        assert match["cricketData"] == {
            "format": "T20",
            "homeScoreStr": "150/8",
            "awayScoreStr": "151/5",
            "report": "Arsenal CC won by 5 wickets",
            "overs": {"home": "20 ov"},
        }
        # Arsenal (t-a, team_1) won as the away side.
        assert body["summary"]["homeWins"] == 1
        stored = teams.rows("match")[0]
        assert stored["highlightly_dates"]["startDate"] == "2024-11-01"


class TestCache:
    """Symmetry, TTL and stale fallback."""

    def test_reversed_order_served_from_cache(self, teams, provider, now):
        """Swapping the teams hits the same record with the tallies swapped."""
        provider.h2h = MEETINGS
        forward = fetch_h2h("t-a", "t-b", now=now).body
        backward = fetch_h2h("t-b", "t-a", now=now + timedelta(minutes=5)).body

        assert len(provider.calls) == 1
        assert backward["source"] == "cache"
        assert backward["summary"]["homeWins"] == forward["summary"]["awayWins"]
        assert backward["summary"]["awayWins"] == forward["summary"]["homeWins"]
        assert backward["summary"]["draws"] == forward["summary"]["draws"]
        assert backward["summary"]["totalMatches"] == forward["summary"]["totalMatches"]

    def test_cached_matches_resolve_teams(self, teams, provider, now):
        provider.h2h = MEETINGS
        fetch_h2h("t-a", "t-b", now=now)

        matches = fetch_h2h("t-a", "t-b", now=now + timedelta(hours=1)).body["matches"]

        assert len(matches) == 4
        assert matches[0]["homeTeam"] == {"id": "t-a", "name": "Arsenal", "logo": "ars.png"}
        assert (matches[1]["homeTeam"]["name"], matches[1]["homeScore"]) == ("Chelsea", 3)

    def test_expired_record_refetches(self, teams, provider, now):
        provider.h2h = MEETINGS
        fetch_h2h("t-a", "t-b", now=now)
        fetch_h2h("t-a", "t-b", now=now + timedelta(hours=25))

        assert len(provider.calls) == 2
        assert len(teams.rows("h2h_records")) == 1

    def test_stale_record_on_provider_failure(self, teams, provider, now):
        teams.add(
            "h2h_records",
            team_1_id="t-a",
            team_2_id="t-b",
            total_matches=3,
            team_1_wins=2,
            team_2_wins=0,
            draws=1,
            last_fetched_at=(now - timedelta(days=3)).isoformat(),
        )
        provider.h2h = provider.fail(503)

        body = fetch_h2h("t-b", "t-a", now=now).body

        assert body["source"] == "cache"
        assert body["warning"] == "API unavailable, serving stale cache"
        assert body["summary"] == {"homeWins": 0, "draws": 1, "awayWins": 2, "totalMatches": 3}
        assert body["matches"] == []

    def test_failure_without_record(self, teams, provider, now):
        provider.h2h = provider.fail(500)

        result = fetch_h2h("t-a", "t-b", now=now)

        assert result.status_code == 200
        assert result.body == {"error": "Failed to fetch H2H data", "summary": None, "matches": []}

    def test_missing_key_without_record(self, teams, provider, now):
        provider.configured = False
        assert fetch_h2h("t-a", "t-b", now=now).body["error"] == "Failed to fetch H2H data"


class TestHelpers:
    """Tests for order_team_ids / sort_meetings."""

    def test_order_team_ids(self):
        assert order_team_ids("b", "a") == ("a", "b")
        assert order_team_ids("a", "b") == ("a", "b")

    def test_undated_meetings_sink(self):
        meetings = [{"id": 1}, {"id": 2, "date": "2024-01-01"}, {"id": 3, "date": "2025-01-01"}]
        assert [m["id"] for m in sort_meetings(meetings, is_cricket=False)] == [3, 2, 1]
