"""
League standings: ranking teams and individuals over a date window.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from ..config import BASELINE_ROSTER_SIZE, CHALLENGE_BONUS_WINDOWED, RR_FLOOR_AT_AGGREGATION
from .roster import scale_points, team_factor
from .scoring import aggregate_period, challenge_bonus, in_window


class StandingRow:
    """One ranked team or individual."""

    def __init__(self, entity_id: int, entity_name: str, points=0, avg_rr: float = 0.0,
                 raw_points: int = 0, bonus=0, team_name: Optional[str] = None):
        self.entity_id = entity_id
        self.entity_name = entity_name
        self.points = points
        self.avg_rr = avg_rr
        self.raw_points = raw_points
        self.bonus = bonus
        self.team_name = team_name
        self.position = 0
        self.position_delta = 0

    def sort_key(self):
        return (-self.points, -self.avg_rr, self.entity_name.casefold(), str(self.entity_id))

    def to_dict(self) -> dict:
        data = {
            "entity_id": self.entity_id,
            "entity_name": self.entity_name,
            "points": self.points,
            "avg_rr": self.avg_rr,
            "raw_points": self.raw_points,
            "bonus": self.bonus,
            "position": self.position,
            "position_delta": self.position_delta,
        }
        if self.team_name is not None:
            data["team_name"] = self.team_name
        return data

    def __repr__(self):
        return f"{self.position}. {self.entity_name}: {self.points}pts (RR {self.avg_rr:.2f})"


def rank_rows(rows: Iterable[StandingRow]) -> List[StandingRow]:
    """Sort by points, then average RR, then name; assign 1-based positions."""
    ranked = sorted(rows, key=lambda row: row.sort_key())
    for i, row in enumerate(ranked):
        row.position = i + 1
    return ranked


def apply_deltas(current: List[StandingRow], previous: Optional[List[StandingRow]]) -> List[StandingRow]:
    """
    Set position_delta = current - previous position.

    Positive means the entity dropped; entities missing from the previous
    snapshot (or when there is none) get 0.
    """
    previous_positions = {row.entity_id: row.position for row in (previous or [])}
    for row in current:
        prev = previous_positions.get(row.entity_id)
        row.position_delta = row.position - prev if prev is not None else 0
    return current


def _group_by(entries: Iterable, attr: str) -> Dict[int, list]:
    grouped: Dict[int, list] = defaultdict(list)
    for entry in entries:
        key = getattr(entry, attr)
        if key is not None:
            grouped[key].append(entry)
    return grouped


def team_rows(
    teams: Iterable,
    entries: Iterable,
    start: date,
    end: date,
    challenges: Iterable = (),
    scores: Iterable = (),
    senior_ids: Iterable[int] = (),
    roster_overrides: Optional[Dict[str, int]] = None,
    baseline: int = BASELINE_ROSTER_SIZE,
    enforce_floor: bool = RR_FLOOR_AT_AGGREGATION,
    windowed: bool = CHALLENGE_BONUS_WINDOWED,
) -> List[StandingRow]:
    """Unranked team rows: scaled entry points plus challenge bonus."""
    by_team = _group_by(entries, "team_id")
    challenges = list(challenges)
    scores = list(scores)
    seniors = set(senior_ids)

    rows = []
    for team in teams:
        raw, avg_rr = aggregate_period(by_team.get(team.id, []), start, end, seniors, enforce_floor)
        scaled = scale_points(raw, team_factor(team, roster_overrides, baseline))
        bonus = challenge_bonus(team.id, challenges, scores, start, end, windowed)
        rows.append(StandingRow(team.id, team.name, scaled + bonus, avg_rr, raw_points=raw, bonus=bonus))
    return rows


def individual_rows(
    accounts: Iterable,
    entries: Iterable,
    start: date,
    end: date,
    team_names: Optional[Dict[int, str]] = None,
    enforce_floor: bool = RR_FLOOR_AT_AGGREGATION,
) -> List[StandingRow]:
    """Unranked individual rows; no roster factor or bonus applies to people."""
    by_user = _group_by(entries, "user_id")
    team_names = team_names or {}

    rows = []
    for account in accounts:
        seniors = {account.id} if account.is_senior else set()
        raw, avg_rr = aggregate_period(by_user.get(account.id, []), start, end, seniors, enforce_floor)
        rows.append(StandingRow(
            account.id,
            account.display_name,
            raw,
            avg_rr,
            raw_points=raw,
            team_name=team_names.get(account.team_id),
        ))
    return rows


def _standings(
    build: Callable[[date, date], List[StandingRow]],
    empty: Callable[[], List[StandingRow]],
    start: date,
    end: date,
) -> List[StandingRow]:
    if end < start:
        # Window before the season began: everyone at zero, ordered by name
        return rank_rows(empty())

    current = rank_rows(build(start, end))
    previous_end = end - timedelta(days=1)
    previous = rank_rows(build(start, previous_end)) if previous_end >= start else None
    return apply_deltas(current, previous)


def team_standings(
    teams: Iterable,
    entries: Iterable,
    start: date,
    end: date,
    challenges: Iterable = (),
    scores: Iterable = (),
    senior_ids: Iterable[int] = (),
    roster_overrides: Optional[Dict[str, int]] = None,
    baseline: int = BASELINE_ROSTER_SIZE,
    enforce_floor: bool = RR_FLOOR_AT_AGGREGATION,
    windowed: bool = CHALLENGE_BONUS_WINDOWED,
) -> List[StandingRow]:
    """
    Rank every team over [start, end] with the position change against the
    same window ending one day earlier.

    Args:
        teams: Objects with id, name and optional roster_size
        entries: Entries for any team; non-approved rows are ignored
        challenges, scores: Challenge and ChallengeScore rows for bonuses
        senior_ids: Account ids using senior thresholds

    Returns:
        StandingRow list sorted by position
    """
    teams = list(teams)
    entries = list(entries)
    challenges = list(challenges)
    scores = list(scores)

    def build(s: date, e: date) -> List[StandingRow]:
        return team_rows(teams, entries, s, e, challenges, scores, senior_ids,
                         roster_overrides, baseline, enforce_floor, windowed)

    def empty() -> List[StandingRow]:
        return [StandingRow(team.id, team.name) for team in teams]

    return _standings(build, empty, start, end)


def individual_standings(
    accounts: Iterable,
    entries: Iterable,
    start: date,
    end: date,
    team_names: Optional[Dict[int, str]] = None,
    enforce_floor: bool = RR_FLOOR_AT_AGGREGATION,
) -> List[StandingRow]:
    """Rank individual members over [start, end]."""
    accounts = list(accounts)
    entries = list(entries)
    team_names = team_names or {}

    def build(s: date, e: date) -> List[StandingRow]:
        return individual_rows(accounts, entries, s, e, team_names, enforce_floor)

    def empty() -> List[StandingRow]:
        return [
            StandingRow(a.id, a.display_name, team_name=team_names.get(a.team_id))
            for a in accounts
        ]

    return _standings(build, empty, start, end)


def missed_days(entry_dates: Iterable[date], start: date, as_of: date) -> int:
    """Days in [start, as_of] without an entry."""
    total_days = (as_of - start).days + 1
    if total_days <= 0:
        return 0
    logged = {d for d in entry_dates if in_window(d, start, as_of)}
    return max(total_days - len(logged), 0)


def member_missed_days(user_id: int, entries: Iterable, start: date, as_of: date) -> int:
    dates = [e.date for e in entries if e.user_id == user_id and e.status == "approved"]
    return missed_days(dates, start, as_of)


def team_missed_days(member_ids: Iterable[int], entries: Iterable, start: date, as_of: date) -> int:
    """
    Sum of each member's missed days. Two members missing the same day count
    twice.
    """
    by_user = _group_by((e for e in entries if e.status == "approved"), "user_id")
    return sum(
        missed_days([e.date for e in by_user.get(user_id, [])], start, as_of)
        for user_id in member_ids
    )
