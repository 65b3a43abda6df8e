"""Unit tests for the per-sport match payload transforms."""

from scoreline.ingestion.match_states import build_states, nba_quarter_scores
from scoreline.ingestion.match_transforms import (
    _assign_sides,
    american_football_injuries,
    baseball_stats,
    generic_basketball_statistics,
    nhl_statistics,
    transform_match_payload,
    transform_referee,
    transform_venue,
)

HOME = {"id": 1, "name": "Kansas City Chiefs"}
AWAY = {"id": 2, "name": "Buffalo Bills"}


class TestAssignSides:
    """Tests for _assign_sides."""

    def test_by_id(self):
        sides = _assign_sides([({"id": 2}, "b"), ({"id": 1}, "a")], HOME, AWAY)
        assert sides == {"home": "a", "away": "b"}

    def test_by_name_substring(self):
        sides = _assign_sides([({"name": "Bills"}, "b")], HOME, AWAY)
        assert sides == {"home": None, "away": "b"}

    def test_fill_order(self):
        sides = _assign_sides([({}, "x"), ({}, "y")], HOME, AWAY, fill_order=("away", "home"))
        assert sides == {"home": "y", "away": "x"}

    def test_empty_name_does_not_match_everything(self):
        sides = _assign_sides([({"name": ""}, "x")], HOME, AWAY)
        assert sides == {"home": "x", "away": None}


class TestSharedColumns:
    """Venue and referee."""

    def test_venue(self):
        assert transform_venue({"name": "Arrowhead", "city": "Kansas City", "capacity": 76416}) == {
            "name": "Arrowhead",
            "city": "Kansas City",
            "country": None,
            "state": None,
            "capacity": 76416,
        }
        assert transform_venue(None) is None

    def test_football_referee(self):
        payload = {"referee": {"name": "A. Taylor", "nationality": "England"}}
        assert transform_referee("football", payload) == {"name": "A. Taylor", "nationality": "England"}

    def test_baseball_umpires(self):
        payload = {"referees": [{"name": "J. West", "position": "Home Plate"}]}
        assert transform_referee("baseball", payload) == [{"name": "J. West", "position": "Home Plate"}]

    def test_no_referee_for_cricket(self):
        assert transform_referee("cricket", {"referee": {"name": "K. Dharmasena"}}) is None


class TestSportColumns:
    """Sport-specific column builders."""

    def test_injuries_fill_away_first(self):
        injuries = [
            {"team": {"id": 99, "name": "Unknown Team"}, "data": [{"player": {"name": "J. Allen"}, "status": "Out"}]},
            {"team": {"id": 1}, "data": []},
        ]
        result = american_football_injuries(injuries, HOME, AWAY)

        assert result["awayTeam"]["injuries"][0] == {
            "playerName": "J. Allen",
            "jerseyNumber": None,
            "position": None,
            "status": "Out",
        }
        assert result["homeTeam"]["injuries"] == []

    def test_baseball_stats(self):
        stats = {"homeTeam": [{"batting": [{"displayName": "Hits", "value": 9}, None]}], "awayTeam": []}
        assert baseball_stats(stats) == {
            "homeTeam": {"batting": [{"displayName": "Hits", "value": 9}], "fielding": [], "pitching": []},
            "awayTeam": None,
        }

    def test_nhl_statistics_first_entry_is_home(self):
        stats = [
            {"data": [{"displayName": "Shots", "value": 31}]},
            {"data": [{"displayName": "Shots", "value": 27}]},
        ]
        assert nhl_statistics(stats) == {"home": {"Shots": 31}, "away": {"Shots": 27}}

    def test_generic_basketball_statistics(self):
        stats = [{"team": {"id": 5, "name": "Real Madrid"}, "statistics": [{"displayName": "Rebounds", "value": 40}]}]
        result = generic_basketball_statistics(stats)
        assert result["teams"][0]["stats"] == {"Rebounds": 40}

    def test_nba_quarter_scores(self):
        details = nba_quarter_scores([30, 25, 20, 28], [22, 27, 31, 20])
        assert details["q3"] == {"home": 20, "away": 31}
        assert "overTime" not in details


class TestDispatch:
    """transform_match_payload picks the sport's transform."""

    def test_unknown_sport_uses_football(self):
        payload = {"events": [{"type": "Yellow Card", "time": "41", "team": {"id": 3}}]}
        columns = transform_match_payload("curling", payload, "m-9")

        assert columns.events[0]["eventType"] == "Yellow Card"
        assert columns.shots == {"home": [], "away": []}

    def test_generic_basketball_has_no_events(self):
        payload = {"events": [{"description": "Jump ball"}], "statistics": []}
        columns = transform_match_payload("basketball", payload, "m-1", league_slug="euroleague")
        assert columns.events == []
        assert columns.statistics == {"teams": []}

    def test_nba_events(self):
        payload = {"events": [{"description": "Tatum makes 3-pt jumper", "isScoringPlay": True, "period": 1}]}
        columns = transform_match_payload("basketball", payload, "m-1", league_slug="nba")

        assert columns.events[0]["id"] == "m-1-event-0"
        assert columns.events[0]["isScoringPlay"] is True
        assert columns.events[0]["team"] is None

    def test_hockey_outside_nhl_keeps_nothing(self):
        payload = {"events": [{"type": "Goal"}]}
        assert transform_match_payload("ice-hockey", payload, "m-1", league_slug="khl").events == []

    def test_baseball_plays(self):
        payload = {"plays": [{"type": "Strikeout", "pitch": {"type": "Slider", "velocity": 88}}]}
        event = transform_match_payload("baseball", payload, "m-2").events[0]

        assert event["id"] == "m-2-play-0"
        assert event["pitch"] == {"type": "Slider", "velocity": 88, "ballsCount": 0, "strikesCount": 0}
        assert event["result"] is None

    def test_volleyball_states(self):
        payload = {"state": {"description": "Finished", "score": {"current": "3 - 1", "firstSet": "25 - 21"}}}
        states = build_states("volleyball", payload)

        assert states["score"] == "3 - 1"
        assert states["scoreDetails"]["firstSet"] == "25 - 21"
        assert states["scoreDetails"]["fifthSet"] is None
