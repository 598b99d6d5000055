from datetime import datetime, UTC
from typing import Optional
from sqlmodel import SQLModel, Field


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    # Explicit roster size; falls back to the configured overrides when unset
    roster_size: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
