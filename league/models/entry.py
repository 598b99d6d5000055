import datetime as dt
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class Entry(SQLModel, table=True):
    """One logged workout or rest day for one person."""
    __tablename__ = "entries"
    __table_args__ = (UniqueConstraint("user_id", "date", name="unique_user_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="accounts.id", index=True)
    team_id: Optional[int] = Field(default=None, foreign_key="teams.id", index=True)
    date: dt.date = Field(index=True)
    kind: str = Field(default="workout")  # workout, rest
    activity_type: Optional[str] = Field(default=None)

    # Only the fields relevant to activity_type are populated
    duration: Optional[float] = Field(default=None)  # minutes
    distance: Optional[float] = Field(default=None)  # km
    steps: Optional[int] = Field(default=None)
    holes: Optional[int] = Field(default=None)

    rr_value: float = Field(default=1.0)
    status: str = Field(default="pending", index=True)  # pending, approved, rejected
    proof_url: Optional[str] = Field(default=None)

    created_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))
    updated_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))
