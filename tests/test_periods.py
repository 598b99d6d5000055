from datetime import date
import pytest
from league.services.clock import Clock
from league.services.periods import period_options, resolve_period, week_number_for, week_range

SEASON_START = date(2025, 10, 15)
SEASON_END = date(2026, 1, 12)


def test_week_range():
    assert week_range(1, SEASON_START) == (date(2025, 10, 15), date(2025, 10, 21))
    assert week_range(3, SEASON_START) == (date(2025, 10, 29), date(2025, 11, 4))


def test_week_number_for():
    assert week_number_for(date(2025, 10, 21), SEASON_START) == 1
    assert week_number_for(date(2025, 10, 22), SEASON_START) == 2


def test_period_options_stop_at_today():
    options = period_options(date(2025, 10, 23), SEASON_START, SEASON_END)
    assert [o["value"] for o in options] == ["overall", "week-1", "week-2"]
    assert options[0]["end"] == date(2025, 10, 23)
    assert options[2]["end"] == date(2025, 10, 23)
    assert options[2]["current"] is True
    assert options[1]["current"] is False


def test_period_options_before_season():
    options = period_options(date(2025, 10, 1), SEASON_START, SEASON_END)
    assert [o["value"] for o in options] == ["overall"]


def test_resolve_period():
    today = date(2025, 10, 23)
    assert resolve_period("overall", today, SEASON_START, SEASON_END) == (SEASON_START, today)
    assert resolve_period("week-1", today, SEASON_START, SEASON_END) == (date(2025, 10, 15), date(2025, 10, 21))
    assert resolve_period("week-2", today, SEASON_START, SEASON_END) == (date(2025, 10, 22), today)


def test_resolve_period_after_season_clips_to_season_end():
    assert resolve_period("overall", date(2026, 3, 1), SEASON_START, SEASON_END) == (SEASON_START, SEASON_END)


@pytest.mark.parametrize("period", ["week-0", "week-x", "month-1", ""])
def test_resolve_period_rejects_unknown(period):
    with pytest.raises(ValueError):
        resolve_period(period, date(2025, 10, 23), SEASON_START, SEASON_END)


def test_clock_yesterday():
    clock = Clock(fixed_today=date(2025, 11, 1))
    assert clock.today() == date(2025, 11, 1)
    assert clock.yesterday() == date(2025, 10, 31)
