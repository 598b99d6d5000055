"""
Database access for the standings engine. These functions only fetch rows;
all scoring happens in the pure services.
"""

from datetime import date
from typing import Iterable, List, Optional
from sqlmodel import Session, select

from ..models.account import Account
from ..models.challenge import Challenge, ChallengeScore
from ..models.entry import Entry
from ..models.team import Team


def fetch_approved_entries(
    db: Session,
    team_id: Optional[int] = None,
    user_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Entry]:
    statement = select(Entry).where(Entry.status == "approved")
    if team_id is not None:
        statement = statement.where(Entry.team_id == team_id)
    if user_id is not None:
        statement = statement.where(Entry.user_id == user_id)
    if date_from is not None:
        statement = statement.where(Entry.date >= date_from)
    if date_to is not None:
        statement = statement.where(Entry.date <= date_to)
    return list(db.exec(statement.order_by(Entry.date, Entry.id)).all())


def list_teams(db: Session) -> List[Team]:
    return list(db.exec(select(Team).order_by(Team.name)).all())


def list_accounts(
    db: Session,
    team_id: Optional[int] = None,
    roles: Optional[Iterable[str]] = None,
) -> List[Account]:
    statement = select(Account)
    if team_id is not None:
        statement = statement.where(Account.team_id == team_id)
    if roles is not None:
        statement = statement.where(Account.role.in_(list(roles)))
    return list(db.exec(statement.order_by(Account.first_name, Account.id)).all())


def list_challenges(db: Session) -> List[Challenge]:
    return list(db.exec(select(Challenge).order_by(Challenge.start_date, Challenge.id)).all())


def list_challenge_scores(db: Session, challenge_id: Optional[int] = None) -> List[ChallengeScore]:
    statement = select(ChallengeScore)
    if challenge_id is not None:
        statement = statement.where(ChallengeScore.challenge_id == challenge_id)
    return list(db.exec(statement).all())


def senior_ids(accounts: Iterable[Account]) -> List[int]:
    return [a.id for a in accounts if a.is_senior]
