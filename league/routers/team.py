from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from ..database import get_session
from ..dependencies import require_leader, require_user
from ..models.account import Account
from ..models.team import Team
from ..services.clock import Clock, get_clock
from ..services.entries import list_pending_entries
from ..services.leaderboard import member_summaries, team_summary
from ..services.periods import resolve_period
from .entries import entry_to_dict

router = APIRouter(prefix="/api/team", tags=["team"])


def _own_team(db: Session, current_user: Account, team_id: Optional[int]) -> Team:
    # Governors may look at any team; everyone else sees their own
    if team_id is None or current_user.role != "governor":
        team_id = current_user.team_id

    team = db.get(Team, team_id) if team_id is not None else None
    if not team:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Team not found"
        )
    return team


def _period(period: str, clock: Clock):
    try:
        return resolve_period(period, clock.today())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("")
async def get_team_summary(
    period: str = "overall",
    team_id: Optional[int] = None,
    clock: Clock = Depends(get_clock),
    current_user: Account = Depends(require_user),
    db: Session = Depends(get_session)
):
    team = _own_team(db, current_user, team_id)
    start, end = _period(period, clock)
    return team_summary(db, team, start, end, clock.yesterday())


@router.get("/members")
async def get_member_summaries(
    period: str = "overall",
    team_id: Optional[int] = None,
    clock: Clock = Depends(get_clock),
    current_user: Account = Depends(require_user),
    db: Session = Depends(get_session)
):
    team = _own_team(db, current_user, team_id)
    start, end = _period(period, clock)
    return member_summaries(db, team.id, start, end, clock.yesterday())


@router.get("/pending")
async def get_pending_entries(
    page: int = 1,
    per_page: int = 20,
    team_id: Optional[int] = None,
    current_user: Account = Depends(require_leader),
    db: Session = Depends(get_session)
):
    """Entries waiting for the leader's review."""
    team = _own_team(db, current_user, team_id)
    offset = (max(page, 1) - 1) * per_page
    entries = list_pending_entries(db, team.id, limit=per_page, offset=offset)
    return [entry_to_dict(e) for e in entries]
