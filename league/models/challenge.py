from datetime import date, datetime, UTC
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class Challenge(SQLModel, table=True):
    """Special competition whose team scores are added as a bonus."""
    __tablename__ = "challenges"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: str = Field(default="")
    start_date: date
    end_date: date = Field(index=True)
    rules_doc_url: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ChallengeScore(SQLModel, table=True):
    __tablename__ = "challenge_scores"
    __table_args__ = (UniqueConstraint("challenge_id", "team_id", name="unique_challenge_team"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    challenge_id: int = Field(foreign_key="challenges.id", index=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    # None means the governor has not posted a score yet
    score: Optional[float] = Field(default=None)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
