"""
Season periods: the whole season plus seven-day weeks counted from the
season start.
"""

from datetime import date, timedelta
from typing import Dict, List, Tuple

from ..config import SEASON_END, SEASON_START

WEEK_DAYS = 7


def week_range(week_number: int, season_start: date = SEASON_START) -> Tuple[date, date]:
    if week_number < 1:
        raise ValueError("Week numbers start at 1")
    start = season_start + timedelta(days=(week_number - 1) * WEEK_DAYS)
    return start, start + timedelta(days=WEEK_DAYS - 1)


def week_number_for(day: date, season_start: date = SEASON_START) -> int:
    return (day - season_start).days // WEEK_DAYS + 1


def period_options(
    today: date,
    season_start: date = SEASON_START,
    season_end: date = SEASON_END,
) -> List[Dict]:
    """
    List the selectable periods: "overall" and every week that has started.

    Week ends are clipped to today so an in-progress week covers only the
    days played so far.
    """
    options = [{
        "value": "overall",
        "label": "Season Total",
        "start": season_start,
        "end": min(today, season_end),
        "current": False,
    }]

    last_day = min(today, season_end)
    week = 1
    week_start = season_start
    while week_start <= last_day:
        _, week_end = week_range(week, season_start)
        options.append({
            "value": f"week-{week}",
            "label": f"Week {week}",
            "start": week_start,
            "end": min(week_end, last_day),
            "current": week_start <= today <= week_end,
        })
        week += 1
        week_start = week_start + timedelta(days=WEEK_DAYS)

    return options


def resolve_period(
    period: str,
    today: date,
    season_start: date = SEASON_START,
    season_end: date = SEASON_END,
) -> Tuple[date, date]:
    """Turn "overall" or "week-N" into a closed (start, end) window."""
    if period == "overall":
        return season_start, min(today, season_end)

    if period.startswith("week-"):
        try:
            week = int(period.split("-", 1)[1])
        except ValueError:
            raise ValueError(f"Unknown period: {period}") from None
        start, end = week_range(week, season_start)
        return start, min(end, today, season_end)

    raise ValueError(f"Unknown period: {period}")
