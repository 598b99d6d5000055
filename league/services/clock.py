from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import LEAGUE_TIMEZONE


class Clock:
    """Single source of "today" in the league's local calendar."""

    def __init__(self, timezone: str = LEAGUE_TIMEZONE, fixed_today: Optional[date] = None):
        self.timezone = ZoneInfo(timezone)
        self.fixed_today = fixed_today

    def today(self) -> date:
        if self.fixed_today is not None:
            return self.fixed_today
        return datetime.now(self.timezone).date()

    def yesterday(self) -> date:
        """Scoring cutoff: today is still in progress and never counts as missed."""
        return self.today() - timedelta(days=1)


def get_clock() -> Clock:
    """Dependency returning the league clock."""
    return Clock()
