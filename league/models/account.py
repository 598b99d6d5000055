from datetime import datetime, UTC
from typing import Optional
from sqlmodel import SQLModel, Field

SENIOR_AGE = 65


class Account(SQLModel, table=True):
    __tablename__ = "accounts"

    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str = Field(default="")
    username: str = Field(unique=True, index=True)
    password_hash: str
    role: str = Field(default="player", index=True)  # player, leader, governor
    team_id: Optional[int] = Field(default=None, foreign_key="teams.id", index=True)
    age: Optional[int] = Field(default=None)
    gender: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_senior(self) -> bool:
        return self.age is not None and self.age >= SENIOR_AGE

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username
