from datetime import date
from typing import Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from ..database import get_session
from ..dependencies import require_user
from ..models.account import Account
from ..services.clock import Clock, get_clock
from ..services.leaderboard import league_individual_standings, league_team_standings
from ..services.periods import period_options, resolve_period

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


def resolve_window(
    period: str,
    start: Optional[date],
    end: Optional[date],
    clock: Clock,
) -> Tuple[date, date]:
    """Explicit start/end win over a named period."""
    if start is not None or end is not None:
        if start is None or end is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Both start and end are required"
            )
        return start, end

    try:
        return resolve_period(period, clock.today())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/periods")
async def list_periods(clock: Clock = Depends(get_clock)):
    return [
        {**option, "start": option["start"].isoformat(), "end": option["end"].isoformat()}
        for option in period_options(clock.today())
    ]


@router.get("/teams")
async def team_leaderboard(
    period: str = "overall",
    start: Optional[date] = None,
    end: Optional[date] = None,
    clock: Clock = Depends(get_clock),
    current_user: Account = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Team standings with position change since the previous day."""
    window_start, window_end = resolve_window(period, start, end, clock)
    rows = league_team_standings(db, window_start, window_end)
    return {
        "start": window_start.isoformat(),
        "end": window_end.isoformat(),
        "standings": [row.to_dict() for row in rows],
    }


@router.get("/individuals")
async def individual_leaderboard(
    period: str = "overall",
    start: Optional[date] = None,
    end: Optional[date] = None,
    team_id: Optional[int] = None,
    page: int = 1,
    per_page: int = 10,
    clock: Clock = Depends(get_clock),
    current_user: Account = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Individual standings, paginated."""
    if page < 1 or per_page < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid page"
        )

    window_start, window_end = resolve_window(period, start, end, clock)
    rows = league_individual_standings(db, window_start, window_end, team_id=team_id)

    offset = (page - 1) * per_page
    total_pages = max(1, (len(rows) + per_page - 1) // per_page)

    return {
        "start": window_start.isoformat(),
        "end": window_end.isoformat(),
        "page": page,
        "total_pages": total_pages,
        "total": len(rows),
        "standings": [row.to_dict() for row in rows[offset:offset + per_page]],
    }
