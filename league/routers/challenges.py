from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlmodel import Session

from ..database import get_session
from ..dependencies import require_governor, require_user
from ..models.account import Account
from ..models.challenge import Challenge
from ..models.team import Team
from ..services import repository
from ..services.challenges import challenge_to_dict, create_challenge, set_team_score

router = APIRouter(prefix="/api/challenges", tags=["challenges"])


class ChallengeCreate(BaseModel):
    """Schema for creating a special challenge."""
    name: str
    description: str = ""
    start_date: date
    end_date: date
    rules_doc_url: Optional[str] = None


class ScoreUpdate(BaseModel):
    """A team's score; null clears it back to "not posted"."""
    team_id: int
    score: Optional[float] = None


@router.get("")
async def list_challenges(
    current_user: Account = Depends(require_user),
    db: Session = Depends(get_session)
):
    """All challenges, with the caller's team score alongside."""
    scores = repository.list_challenge_scores(db)
    challenges = []
    for challenge in repository.list_challenges(db):
        data = challenge_to_dict(challenge, scores)
        data["my_team_score"] = data["scores"].get(current_user.team_id)
        challenges.append(data)
    return challenges


@router.get("/{challenge_id}")
async def get_challenge(
    challenge_id: int,
    current_user: Account = Depends(require_user),
    db: Session = Depends(get_session)
):
    challenge = db.get(Challenge, challenge_id)
    if not challenge:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Challenge not found"
        )
    return challenge_to_dict(challenge, repository.list_challenge_scores(db, challenge_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_challenge(
    challenge_data: ChallengeCreate,
    current_user: Account = Depends(require_governor),
    db: Session = Depends(get_session)
):
    try:
        challenge = create_challenge(
            db,
            name=challenge_data.name,
            start_date=challenge_data.start_date,
            end_date=challenge_data.end_date,
            description=challenge_data.description,
            rules_doc_url=challenge_data.rules_doc_url,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return challenge_to_dict(challenge, [])


@router.put("/{challenge_id}/scores")
async def put_score(
    challenge_id: int,
    score_data: ScoreUpdate,
    current_user: Account = Depends(require_governor),
    db: Session = Depends(get_session)
):
    """Post or clear one team's score for a challenge."""
    challenge = db.get(Challenge, challenge_id)
    if not challenge:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Challenge not found"
        )

    if not db.get(Team, score_data.team_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Team not found"
        )

    set_team_score(db, challenge_id, score_data.team_id, score_data.score)
    return challenge_to_dict(challenge, repository.list_challenge_scores(db, challenge_id))
