from .account import Account
from .session import Session
from .team import Team
from .entry import Entry
from .challenge import Challenge, ChallengeScore

__all__ = [
    "Account",
    "Session",
    "Team",
    "Entry",
    "Challenge",
    "ChallengeScore",
]
