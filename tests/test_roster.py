from fractions import Fraction
from league.models.team import Team
from league.services.roster import (
    roster_factor,
    roster_size,
    round_half_up,
    scale_points,
    team_factor,
)


def test_eleven_player_team_is_scaled():
    factor = roster_factor(11)
    assert factor == Fraction(10, 11)
    assert scale_points(22, factor) == 20


def test_baseline_and_smaller_teams_are_not_scaled():
    assert roster_factor(10) == 1
    assert roster_factor(8) == 1
    assert scale_points(17, roster_factor(8)) == 17


def test_rounding_happens_once_half_up():
    # 13 * 10/13 = 10 exactly; 7 * 10/13 = 5.38 -> 5; 12 * 10/11 = 10.9 -> 11
    assert scale_points(13, roster_factor(13)) == 10
    assert scale_points(7, roster_factor(13)) == 5
    assert scale_points(12, roster_factor(11)) == 11
    assert round_half_up(2.5) == 3


def test_roster_size_lookup_is_case_insensitive():
    overrides = {"Crusaders": 11}
    assert roster_size("crusaders", overrides=overrides) == 11
    assert roster_size("CRUSADERS ", overrides=overrides) == 11
    assert roster_size("Alpha", overrides=overrides) == 10


def test_team_column_wins_over_overrides():
    team = Team(name="Crusaders", roster_size=13)
    assert team_factor(team, overrides={"crusaders": 11}) == Fraction(10, 13)


def test_larger_roster_never_shows_more_points():
    for raw in range(0, 60):
        baseline = scale_points(raw, roster_factor(10))
        for size in (11, 12, 13, 15):
            assert scale_points(raw, roster_factor(size)) <= baseline
