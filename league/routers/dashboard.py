from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..config import SEASON_START
from ..database import get_session
from ..dependencies import require_user
from ..models.account import Account
from ..models.team import Team
from ..services.clock import Clock, get_clock
from ..services.leaderboard import member_dashboard, season_to_date_end, team_summary

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(
    clock: Clock = Depends(get_clock),
    current_user: Account = Depends(require_user),
    db: Session = Depends(get_session)
):
    """The caller's season numbers and their team's, as of yesterday."""
    as_of = clock.yesterday()
    end = season_to_date_end(as_of)
    team = db.get(Team, current_user.team_id) if current_user.team_id else None

    return {
        "as_of": as_of.isoformat(),
        "me": member_dashboard(db, current_user, as_of),
        "team": team_summary(db, team, SEASON_START, end, as_of) if team else None,
    }
