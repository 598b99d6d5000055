"""
Submitting and reviewing daily entries.
"""

from datetime import date, datetime, UTC
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models.account import Account
from ..models.entry import Entry
from ..utils.logging import setup_logger
from .activities import EntryValidationError, calculate_rr, needs_verification, validate_submission
from .clock import Clock

logger = setup_logger(__name__)

REVIEW_DECISIONS = ("approved", "rejected")


class EntryStateError(ValueError):
    """Raised when an entry cannot move to the requested state."""


def get_entry_for_day(db: Session, user_id: int, day: date) -> Optional[Entry]:
    statement = select(Entry).where(Entry.user_id == user_id, Entry.date == day)
    return db.exec(statement).first()


def submit_entry(
    db: Session,
    account: Account,
    day: date,
    kind: str,
    clock: Clock,
    activity_type: Optional[str] = None,
    duration: Optional[float] = None,
    distance: Optional[float] = None,
    steps: Optional[int] = None,
    holes: Optional[int] = None,
    proof_url: Optional[str] = None,
) -> Tuple[Entry, bool]:
    """
    Create or overwrite the member's entry for a day.

    Members may log today, or redo yesterday only when yesterday's entry was
    rejected. Approved entries are final. Returns (entry, created).
    """
    today = clock.today()
    yesterday = clock.yesterday()
    if day not in (today, yesterday):
        raise EntryValidationError("You can only submit for today or yesterday")

    if kind == "rest":
        activity_type = duration = distance = steps = holes = None

    validate_submission(kind, activity_type, duration, distance, steps, holes, account.is_senior)

    existing = get_entry_for_day(db, account.id, day)
    if day == yesterday and day != today:
        if not existing or existing.status != "rejected":
            raise EntryStateError(
                "You cannot submit yesterday's workout unless your submission yesterday was rejected"
            )
    if existing and existing.status == "approved":
        raise EntryStateError("This day's entry has already been approved")

    rr_value = calculate_rr(
        kind,
        activity_type,
        duration=duration,
        distance=distance,
        steps=steps,
        holes=holes,
        senior=account.is_senior,
    )

    entry = existing or Entry(user_id=account.id, date=day)
    entry.team_id = account.team_id
    entry.kind = kind
    entry.activity_type = activity_type
    entry.duration = duration
    entry.distance = distance
    entry.steps = steps
    entry.holes = holes
    entry.rr_value = rr_value
    entry.proof_url = proof_url
    entry.status = "pending"
    entry.updated_at = datetime.now(UTC)

    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        # Another submission for the same day landed between the read and the insert
        db.rollback()
        logger.warning("Duplicate %s entry for %s on %s", kind, account.username, day)
        raise EntryStateError("An entry for this day was already submitted") from None
    db.refresh(entry)

    logger.info(
        "%s %s entry for %s on %s (RR %.2f)",
        "Created" if existing is None else "Overwrote",
        kind,
        account.username,
        day,
        rr_value,
    )
    return entry, existing is None


def entry_needs_verification(entry: Entry, senior: bool = False) -> bool:
    if entry.kind != "workout":
        return False
    return needs_verification(entry.activity_type, entry.duration, senior)


def can_review(reviewer: Account, entry: Entry) -> bool:
    if reviewer.role == "governor":
        return True
    return reviewer.role == "leader" and reviewer.team_id is not None and reviewer.team_id == entry.team_id


def review_entry(db: Session, entry: Entry, reviewer: Account, decision: str) -> Entry:
    """Approve or reject a pending entry. Reviewed entries cannot change again."""
    if decision not in REVIEW_DECISIONS:
        raise EntryValidationError(f"Unknown decision: {decision}")
    if entry.status != "pending":
        raise EntryStateError(f"Entry is already {entry.status}")

    entry.status = decision
    entry.updated_at = datetime.now(UTC)
    db.add(entry)
    db.commit()
    db.refresh(entry)

    logger.info("%s %s entry %s", reviewer.username, decision, entry.id)
    return entry


def list_pending_entries(db: Session, team_id: int, limit: int = 20, offset: int = 0):
    statement = (
        select(Entry)
        .where(Entry.team_id == team_id, Entry.status == "pending")
        .order_by(Entry.date.desc(), Entry.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return db.exec(statement).all()
