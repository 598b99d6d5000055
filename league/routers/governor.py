from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlmodel import Session, select

from ..database import get_session
from ..dependencies import require_governor
from ..models.account import Account
from ..models.team import Team
from ..services.auth import ROLES
from ..services.clock import Clock, get_clock
from ..services.leaderboard import league_overview
from ..utils.logging import setup_logger
from .auth import account_to_dict

router = APIRouter(prefix="/api/governor", tags=["governor"])
logger = setup_logger(__name__)


class TeamCreate(BaseModel):
    name: str
    roster_size: Optional[int] = None


class MemberUpdate(BaseModel):
    team_id: Optional[int] = None
    role: Optional[str] = None


def team_to_dict(team: Team) -> dict:
    return {"id": team.id, "name": team.name, "roster_size": team.roster_size}


@router.get("/overview")
async def get_overview(
    clock: Clock = Depends(get_clock),
    current_user: Account = Depends(require_governor),
    db: Session = Depends(get_session)
):
    """Official league standings as of yesterday."""
    return league_overview(db, clock.yesterday())


@router.get("/teams")
async def list_teams(
    current_user: Account = Depends(require_governor),
    db: Session = Depends(get_session)
):
    teams = db.exec(select(Team).order_by(Team.name)).all()
    return [team_to_dict(t) for t in teams]


@router.post("/teams", status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    current_user: Account = Depends(require_governor),
    db: Session = Depends(get_session)
):
    name = team_data.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Team name is required"
        )

    if team_data.roster_size is not None and team_data.roster_size < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Roster size must be positive"
        )

    if db.exec(select(Team).where(Team.name == name)).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Team name already exists"
        )

    team = Team(name=name, roster_size=team_data.roster_size)
    db.add(team)
    db.commit()
    db.refresh(team)
    logger.info("Created team %s", name)
    return team_to_dict(team)


@router.get("/accounts")
async def list_accounts(
    team_id: Optional[int] = None,
    current_user: Account = Depends(require_governor),
    db: Session = Depends(get_session)
):
    statement = select(Account).order_by(Account.first_name)
    if team_id is not None:
        statement = statement.where(Account.team_id == team_id)
    return [account_to_dict(a) for a in db.exec(statement).all()]


@router.patch("/accounts/{account_id}")
async def update_member(
    account_id: int,
    member_data: MemberUpdate,
    current_user: Account = Depends(require_governor),
    db: Session = Depends(get_session)
):
    """Move a member to a team and/or change their role."""
    account = db.get(Account, account_id)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found"
        )

    # An explicit null removes the member from their team; an omitted field leaves it alone
    if "team_id" in member_data.model_fields_set:
        if member_data.team_id is not None and not db.get(Team, member_data.team_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Team not found"
            )
        account.team_id = member_data.team_id

    if member_data.role is not None:
        if member_data.role not in ROLES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid role"
            )
        account.role = member_data.role

    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info("Updated account %s: team=%s role=%s", account.username, account.team_id, account.role)
    return account_to_dict(account)
