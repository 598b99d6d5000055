from datetime import date, datetime, UTC
from typing import Dict, List, Optional
from sqlmodel import Session, select

from ..models.challenge import Challenge, ChallengeScore
from ..utils.logging import setup_logger

logger = setup_logger(__name__)


def create_challenge(
    db: Session,
    name: str,
    start_date: date,
    end_date: date,
    description: str = "",
    rules_doc_url: Optional[str] = None,
) -> Challenge:
    if end_date < start_date:
        raise ValueError("Challenge cannot end before it starts")

    challenge = Challenge(
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        rules_doc_url=rules_doc_url,
    )
    db.add(challenge)
    db.commit()
    db.refresh(challenge)
    logger.info("Created challenge %s (%s..%s)", name, start_date, end_date)
    return challenge


def set_team_score(db: Session, challenge_id: int, team_id: int, score: Optional[float]) -> ChallengeScore:
    """Post (or clear, with None) a team's score for a challenge."""
    statement = select(ChallengeScore).where(
        ChallengeScore.challenge_id == challenge_id,
        ChallengeScore.team_id == team_id
    )
    row = db.exec(statement).first()
    if row is None:
        row = ChallengeScore(challenge_id=challenge_id, team_id=team_id)

    row.score = score
    row.updated_at = datetime.now(UTC)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Challenge %s score for team %s set to %s", challenge_id, team_id, score)
    return row


def challenge_to_dict(challenge: Challenge, scores: List[ChallengeScore]) -> Dict:
    team_scores = {s.team_id: s.score for s in scores if s.challenge_id == challenge.id}
    return {
        "id": challenge.id,
        "name": challenge.name,
        "description": challenge.description,
        "start_date": challenge.start_date.isoformat(),
        "end_date": challenge.end_date.isoformat(),
        "rules_doc_url": challenge.rules_doc_url,
        "scores": team_scores,
        "has_scores": any(v is not None for v in team_scores.values()),
    }
