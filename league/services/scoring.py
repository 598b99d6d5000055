"""
Period aggregation and challenge bonuses.

Everything here is pure: callers fetch entries and challenge scores first and
pass them in.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import CHALLENGE_BONUS_WINDOWED, RR_FLOOR_AT_AGGREGATION
from .activities import classify_entry


def in_window(day: date, start: date, end: date) -> bool:
    return start <= day <= end


def round_rr(value: float) -> float:
    """Round an RR half-up to two decimals."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def counted_entries(entries: Iterable, start: date, end: date) -> List:
    """
    Approved entries inside [start, end], one per person per day.

    When a person has more than one row for a day the newest (highest id)
    wins, so a day can never be worth more than one point.
    """
    by_day: Dict[Tuple[int, date], object] = {}
    for entry in entries:
        if entry.status != "approved" or entry.date is None:
            continue
        if not in_window(entry.date, start, end):
            continue
        key = (entry.user_id, entry.date)
        current = by_day.get(key)
        if current is None or (entry.id or 0) >= (current.id or 0):
            by_day[key] = entry
    return sorted(by_day.values(), key=lambda e: (e.date, e.user_id))


def aggregate_period(
    entries: Iterable,
    start: date,
    end: date,
    senior_ids: Iterable[int] = (),
    enforce_floor: bool = RR_FLOOR_AT_AGGREGATION,
) -> Tuple[int, float]:
    """
    Aggregate one entity's entries over [start, end].

    Returns (raw_points, avg_rr). Each counted entry is worth one point; the
    average RR ignores entries whose RR is zero and is 0 when none remain.
    """
    seniors = set(senior_ids)
    points = 0
    rr_total = 0.0
    rr_count = 0

    for entry in counted_entries(entries, start, end):
        entry_points, rr = classify_entry(entry, entry.user_id in seniors, enforce_floor)
        points += entry_points
        if rr > 0:
            rr_total += rr
            rr_count += 1

    avg_rr = round_rr(rr_total / rr_count) if rr_count else 0.0
    return points, avg_rr


def _whole(value: float):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def challenge_bonus(
    team_id: int,
    challenges: Iterable,
    scores: Iterable,
    start: Optional[date] = None,
    end: Optional[date] = None,
    windowed: bool = CHALLENGE_BONUS_WINDOWED,
):
    """
    Sum a team's posted challenge scores.

    With windowed scoring a challenge only counts for the period its end date
    falls in. Unposted (None) scores count as 0.
    """
    if windowed and (start is None or end is None):
        raise ValueError("A window is required for windowed challenge bonuses")

    qualifying = set()
    for challenge in challenges:
        if not windowed or in_window(challenge.end_date, start, end):
            qualifying.add(challenge.id)

    bonus = 0
    for score in scores:
        if score.team_id != team_id or score.challenge_id not in qualifying:
            continue
        if score.score is not None:
            bonus += score.score
    return _whole(bonus)


def rest_days(entries: Iterable, start: date, end: date) -> int:
    return sum(1 for e in counted_entries(entries, start, end) if e.kind == "rest")
