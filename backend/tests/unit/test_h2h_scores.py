"""Unit tests for head-to-head score extraction."""

import pytest

from scoreline.ingestion.h2h_scores import (
    cricket_result,
    determine_cricket_winner,
    extract_score,
    nba_quarters,
    score_pair,
    sport_details,
)
from scoreline.models.scores import HomeAway


class TestDetermineCricketWinner:
    """Tests for determine_cricket_winner."""

    def test_home_by_name(self):
        assert determine_cricket_winner("India won by 5 wickets", "India", "Australia") == "home"

    def test_away_by_name(self):
        assert determine_cricket_winner("Australia won by 12 runs", "India", "Australia") == "away"

    def test_abbreviation(self):
        report = "AUS won by 3 wickets (with 4 balls remaining)"
        assert determine_cricket_winner(report, "India", "Australia", "IND", "AUS") == "away"

    @pytest.mark.parametrize(
        "report",
        ["Match drawn", "No result (rain)", "Match abandoned without a ball bowled"],
    )
    def test_draw_markers(self, report):
        assert determine_cricket_winner(report, "India", "Australia") == "draw"

    def test_draw_marker_beats_team_name(self):
        """A report naming a team still reads as a draw when it says so."""
        report = "India won the toss; match abandoned"
        assert determine_cricket_winner(report, "India", "Australia") == "draw"

    def test_no_won_keyword(self):
        assert determine_cricket_winner("India lead by 40 runs", "India", "Australia") == "draw"

    def test_missing_report(self):
        assert determine_cricket_winner(None, "India", "Australia") == "draw"

    def test_unrecognized_winner(self):
        assert determine_cricket_winner("England won by 1 run", "India", "Australia") == "draw"


class TestCricketResult:
    """Tests for cricket_result."""

    def test_home_win(self):
        match = {
            "format": "ODI",
            "homeTeam": {"name": "India", "abbreviation": "IND"},
            "awayTeam": {"name": "Australia", "abbreviation": "AUS"},
            "state": {
                "report": "India won by 5 wickets",
                "teams": {
                    "home": {"score": "187/6", "info": "48.2 ov"},
                    "away": {"score": "186/10", "info": "50 ov"},
                },
            },
        }

        score, data = cricket_result(match)

        assert score == HomeAway(home=1, away=0)
        assert data.home_score_str == "187/6"
        assert data.away_score_str == "186/10"
        assert data.overs.home == "48.2 ov"
        assert data.format == "ODI"

    def test_missing_innings_default(self):
        score, data = cricket_result({"state": {"report": "Match drawn"}})

        assert score == HomeAway(home=0, away=0)
        assert data.home_score_str == "0/0"
        assert data.away_score_str == "0/0"
        assert data.overs.home is None


class TestScorePair:
    """Tests for score_pair."""

    def test_parse(self):
        assert score_pair("3 - 1") == HomeAway(home=3, away=1)

    def test_missing(self):
        assert score_pair(None) == HomeAway()
        assert score_pair("") == HomeAway()

    def test_one_side_only(self):
        assert score_pair("4") == HomeAway(home=4, away=0)


class TestNbaQuarters:
    """Tests for nba_quarters."""

    def test_regulation(self):
        data = nba_quarters([25, 30, 20, 28], [28, 22, 25, 28])
        assert data.q1 == HomeAway(home=25, away=28)
        assert data.q4 == HomeAway(home=28, away=28)
        assert data.over_time is None

    def test_overtime_periods_are_summed(self):
        data = nba_quarters([25, 30, 20, 28, 10, 6], [28, 22, 25, 28, 10, 4])
        assert data.over_time == HomeAway(home=16, away=14)

    def test_zero_overtime_is_dropped(self):
        data = nba_quarters([25, 30, 20, 28, 0], [28, 22, 25, 28, 0])
        assert data.over_time is None

    def test_not_lists(self):
        assert nba_quarters(None, [1, 2]) is None


class TestExtractScore:
    """Tests for extract_score."""

    def test_nba_sums_periods(self):
        match = {"state": {"score": {"homeTeam": [25, 30, 20, 28], "awayTeam": [20, 20, 20, 20]}}}
        assert extract_score("nba", match) == HomeAway(home=103, away=80)

    def test_rugby_string(self):
        assert extract_score("rugby", {"state": {"score": "47 - 14"}}) == HomeAway(home=47, away=14)

    def test_rugby_object(self):
        assert extract_score("rugby", {"state": {"score": {"current": "20 - 3"}}}) == HomeAway(home=20, away=3)

    def test_current(self):
        assert extract_score("football", {"state": {"score": {"current": "2 - 2"}}}) == HomeAway(home=2, away=2)

    def test_missing_state(self):
        assert extract_score("football", {}) == HomeAway()


class TestSportDetails:
    """Tests for sport_details."""

    def test_hockey_periods(self):
        match = {"state": {"score": {"current": "3 - 2", "firstPeriod": "1 - 0", "thirdPeriod": "2 - 2"}}}
        hockey = sport_details("nhl", match)["hockey_data"]

        assert hockey.first_period == HomeAway(home=1, away=0)
        assert hockey.second_period is None

    def test_hockey_without_periods(self):
        assert sport_details("hockey", {"state": {"score": {"current": "3 - 2"}}}) == {}

    def test_volleyball_sets(self):
        match = {"state": {"score": {"current": "3 - 0", "firstSet": "25 - 20", "thirdSet": "25 - 23"}}}
        volleyball = sport_details("volleyball", match)["volleyball_data"]

        assert volleyball.set1 == HomeAway(home=25, away=20)
        assert volleyball.set2 is None

    def test_generic_basketball(self):
        match = {"state": {"score": {"current": "80 - 75", "q1": "20 - 18", "overTime": "8 - 5"}}}
        data = sport_details("basketball", match)["basketball_data"]

        assert data.q1 == HomeAway(home=20, away=18)
        assert data.over_time == HomeAway(home=8, away=5)

    def test_football_has_no_details(self):
        assert sport_details("football", {"state": {"score": {"current": "1 - 0"}}}) == {}
