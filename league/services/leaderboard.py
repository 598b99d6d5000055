"""
Fetch-then-compute helpers used by the routers. Each function reads a
snapshot through the repository and hands it to the pure standings code.
"""

from datetime import date
from typing import Dict, List, Optional
from sqlmodel import Session

from ..config import SEASON_END, SEASON_START
from ..models.account import Account
from ..models.team import Team
from ..utils.logging import setup_logger
from . import repository
from .scoring import aggregate_period, rest_days, round_rr
from .standings import (
    StandingRow,
    individual_standings,
    missed_days,
    team_missed_days,
    team_standings,
)

logger = setup_logger(__name__)

# Governors run the league but do not compete
COMPETING_ROLES = ("player", "leader")


def league_team_standings(db: Session, start: date, end: date) -> List[StandingRow]:
    teams = repository.list_teams(db)
    accounts = repository.list_accounts(db)
    entries = repository.fetch_approved_entries(db, date_from=start, date_to=end)
    challenges = repository.list_challenges(db)
    scores = repository.list_challenge_scores(db)

    rows = team_standings(
        teams,
        entries,
        start,
        end,
        challenges=challenges,
        scores=scores,
        senior_ids=repository.senior_ids(accounts),
    )
    logger.debug("Computed team standings for %s..%s (%d teams)", start, end, len(rows))
    return rows


def league_individual_standings(
    db: Session,
    start: date,
    end: date,
    team_id: Optional[int] = None,
) -> List[StandingRow]:
    accounts = repository.list_accounts(db, team_id=team_id, roles=COMPETING_ROLES)
    entries = repository.fetch_approved_entries(db, team_id=team_id, date_from=start, date_to=end)
    team_names = {t.id: t.name for t in repository.list_teams(db)}

    rows = individual_standings(accounts, entries, start, end, team_names=team_names)
    logger.debug("Computed individual standings for %s..%s (%d members)", start, end, len(rows))
    return rows


def _missed_window_end(end: date, as_of: date) -> date:
    # Never count days that have not finished yet
    return min(end, as_of)


def member_summaries(db: Session, team_id: int, start: date, end: date, as_of: date) -> List[Dict]:
    """Per-member points, average RR, rest days and missed days for a team."""
    members = repository.list_accounts(db, team_id=team_id, roles=COMPETING_ROLES)
    entries = repository.fetch_approved_entries(db, team_id=team_id, date_from=start, date_to=end)
    missed_end = _missed_window_end(end, as_of)

    summaries = []
    for member in members:
        own = [e for e in entries if e.user_id == member.id]
        seniors = [member.id] if member.is_senior else []
        points, avg_rr = aggregate_period(own, start, end, seniors)
        summaries.append({
            "user_id": member.id,
            "name": member.display_name,
            "role": member.role,
            "points": points,
            "avg_rr": avg_rr,
            "rest_days": rest_days(own, start, end),
            "missed_days": missed_days([e.date for e in own], start, missed_end),
        })

    summaries.sort(key=lambda s: (-s["points"], -s["avg_rr"], s["name"].casefold()))
    return summaries


def team_summary(db: Session, team: Team, start: date, end: date, as_of: date) -> Dict:
    """Team totals for a period; points are scaled and include bonuses."""
    standings = league_team_standings(db, start, end)
    row = next((r for r in standings if r.entity_id == team.id), None)

    members = repository.list_accounts(db, team_id=team.id, roles=COMPETING_ROLES)
    entries = repository.fetch_approved_entries(db, team_id=team.id, date_from=start, date_to=end)

    return {
        "team_id": team.id,
        "team_name": team.name,
        "points": row.points if row else 0,
        "avg_rr": row.avg_rr if row else 0.0,
        "position": row.position if row else None,
        "position_delta": row.position_delta if row else 0,
        "rest_days": rest_days(entries, start, end),
        "missed_days": team_missed_days(
            [m.id for m in members], entries, start, _missed_window_end(end, as_of)
        ),
    }


def season_to_date_end(as_of: date, season_end: date = SEASON_END) -> date:
    """Last day a season-to-date view covers: as_of, but never past the season."""
    return min(as_of, season_end)


def member_dashboard(
    db: Session,
    account,
    as_of: date,
    season_start: date = SEASON_START,
    season_end: date = SEASON_END,
) -> Dict:
    """Season-to-date numbers for one member, as of yesterday."""
    end = season_to_date_end(as_of, season_end)
    entries = repository.fetch_approved_entries(db, user_id=account.id, date_from=season_start, date_to=end)
    seniors = [account.id] if account.is_senior else []
    points, avg_rr = aggregate_period(entries, season_start, end, seniors)

    return {
        "user_id": account.id,
        "name": account.display_name,
        "points": points,
        "avg_rr": avg_rr,
        "rest_days": rest_days(entries, season_start, end),
        "missed_days": missed_days([e.date for e in entries], season_start, end),
    }


# Inclusive upper bounds; ages above the last bound fall in the final bracket
AGE_BRACKETS = (
    ("juniors", 18),
    ("young_adults", 35),
    ("adults", 49),
    ("super_adults", 64),
    ("seniors", 79),
    ("super_seniors", None),
)


def _gender_bucket(gender: Optional[str]) -> str:
    value = (gender or "").strip().lower()
    if value in ("male", "m"):
        return "male"
    if value in ("female", "f"):
        return "female"
    return "other" if value else "unknown"


def league_composition(accounts: List[Account], team_count: int) -> Dict:
    """Headcounts of competing members by gender, role and age bracket."""
    genders = {"male": 0, "female": 0, "other": 0, "unknown": 0}
    roles = {role: 0 for role in COMPETING_ROLES}
    ages = {name: 0 for name, _ in AGE_BRACKETS}

    for account in accounts:
        genders[_gender_bucket(account.gender)] += 1
        if account.role in roles:
            roles[account.role] += 1
        if account.age is None:
            continue
        for name, upper in AGE_BRACKETS:
            if upper is None or account.age <= upper:
                ages[name] += 1
                break

    return {
        "players": len(accounts),
        "teams": team_count,
        "genders": genders,
        "roles": roles,
        "age_brackets": ages,
    }


def league_overview(
    db: Session,
    as_of: date,
    season_start: date = SEASON_START,
    season_end: date = SEASON_END,
) -> Dict:
    """Governor view: official standings as of yesterday plus league-wide numbers."""
    end = season_to_date_end(as_of, season_end)
    teams = league_team_standings(db, season_start, end)
    individuals = league_individual_standings(db, season_start, end)
    entries = repository.fetch_approved_entries(db, date_from=season_start, date_to=end)
    accounts = repository.list_accounts(db, roles=COMPETING_ROLES)

    # Teams without any RR yet stay out of the league average
    team_rrs = [row.avg_rr for row in teams if row.avg_rr > 0]
    league_avg_rr = round_rr(sum(team_rrs) / len(team_rrs)) if team_rrs else 0.0

    individual_rows = []
    for row in individuals:
        own = [e for e in entries if e.user_id == row.entity_id]
        data = row.to_dict()
        data["rest_days"] = rest_days(own, season_start, end)
        data["missed_days"] = missed_days([e.date for e in own], season_start, end)
        individual_rows.append(data)

    return {
        "as_of": as_of.isoformat(),
        "teams": [row.to_dict() for row in teams],
        "individuals": individual_rows,
        "league_avg_rr": league_avg_rr,
        "total_rest_days": rest_days(entries, season_start, end),
        "composition": league_composition(accounts, len(teams)),
    }
