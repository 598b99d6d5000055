import datetime as dt
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlmodel import Session, select

from ..database import get_session
from ..dependencies import require_leader, require_user
from ..models.account import Account
from ..models.entry import Entry
from ..services.activities import ACTIVITY_RULES, EntryValidationError, base_thresholds
from ..services.clock import Clock, get_clock
from ..services.entries import (
    EntryStateError,
    can_review,
    entry_needs_verification,
    review_entry,
    submit_entry,
)

router = APIRouter(prefix="/api/entries", tags=["entries"])


class EntryCreate(BaseModel):
    """Schema for submitting a workout or rest day."""
    date: Optional[dt.date] = None
    kind: str = "workout"
    activity_type: Optional[str] = None
    duration: Optional[float] = None
    distance: Optional[float] = None
    steps: Optional[int] = None
    holes: Optional[int] = None
    proof_url: Optional[str] = None


class EntryResponse(BaseModel):
    """Schema for entry response."""
    id: int
    user_id: int
    team_id: Optional[int]
    date: dt.date
    kind: str
    activity_type: Optional[str]
    duration: Optional[float]
    distance: Optional[float]
    steps: Optional[int]
    holes: Optional[int]
    rr_value: float
    status: str
    proof_url: Optional[str]


def entry_to_dict(entry: Entry) -> dict:
    return EntryResponse.model_validate(entry, from_attributes=True).model_dump(mode="json")


@router.get("/activities")
async def list_activities(current_user: Account = Depends(require_user)):
    """Activity types with the minimums that apply to the caller."""
    base_duration, base_steps = base_thresholds(current_user.is_senior)
    activities = []
    for key, rule in ACTIVITY_RULES.items():
        item = {"value": key, "name": rule["name"], "fields": rule["fields"]}
        if "min_duration" in rule:
            item["min_duration"] = base_duration
        if "min_distance" in rule:
            item["min_distance"] = 2.6 if key == "run" and current_user.is_senior else rule["min_distance"]
        if "min_steps" in rule:
            item["min_steps"] = base_steps
        if "min_holes" in rule:
            item["min_holes"] = rule["min_holes"]
        activities.append(item)
    return activities


@router.post("")
async def create_entry(
    entry_data: EntryCreate,
    db: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
    current_user: Account = Depends(require_user)
):
    """Submit today's entry, or redo yesterday's rejected one."""
    if current_user.role == "governor":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Governors do not log entries"
        )

    try:
        entry, created = submit_entry(
            db,
            current_user,
            entry_data.date or clock.today(),
            entry_data.kind,
            clock,
            activity_type=entry_data.activity_type,
            duration=entry_data.duration,
            distance=entry_data.distance,
            steps=entry_data.steps,
            holes=entry_data.holes,
            proof_url=entry_data.proof_url,
        )
    except EntryValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except EntryStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return {
        "entry": entry_to_dict(entry),
        "created": created,
        "needs_verification": entry_needs_verification(entry, current_user.is_senior),
    }


@router.get("")
async def list_my_entries(
    start: Optional[dt.date] = None,
    end: Optional[dt.date] = None,
    db: Session = Depends(get_session),
    current_user: Account = Depends(require_user)
) -> List[dict]:
    """List the caller's entries, newest first."""
    statement = select(Entry).where(Entry.user_id == current_user.id)
    if start:
        statement = statement.where(Entry.date >= start)
    if end:
        statement = statement.where(Entry.date <= end)
    entries = db.exec(statement.order_by(Entry.date.desc())).all()
    return [entry_to_dict(e) for e in entries]


def _review(entry_id: int, decision: str, db: Session, reviewer: Account) -> dict:
    entry = db.get(Entry, entry_id)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Entry not found"
        )

    if not can_review(reviewer, entry):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only review entries from your own team"
        )

    try:
        entry = review_entry(db, entry, reviewer, decision)
    except EntryStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return entry_to_dict(entry)


@router.post("/{entry_id}/approve")
async def approve_entry(
    entry_id: int,
    db: Session = Depends(get_session),
    current_user: Account = Depends(require_leader)
):
    return _review(entry_id, "approved", db, current_user)


@router.post("/{entry_id}/reject")
async def reject_entry(
    entry_id: int,
    db: Session = Depends(get_session),
    current_user: Account = Depends(require_leader)
):
    return _review(entry_id, "rejected", db, current_user)
