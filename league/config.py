import json
import os
import secrets
from datetime import date
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/league.db")

# Security
SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_hex(32))
SESSION_COOKIE_NAME = "league_session"
SESSION_EXPIRE_DAYS = 30

# Governor account seeded on startup (override in production)
GOVERNOR_USERNAME = os.getenv("GOVERNOR_USERNAME", "governor")
GOVERNOR_PASSWORD = os.getenv("GOVERNOR_PASSWORD", "password")

# Season
SEASON_START = date.fromisoformat(os.getenv("SEASON_START", "2025-10-15"))
SEASON_END = date.fromisoformat(os.getenv("SEASON_END", "2026-01-12"))
LEAGUE_TIMEZONE = os.getenv("LEAGUE_TIMEZONE", "Asia/Kolkata")

# Roster normalization: teams larger than the baseline are scaled down
BASELINE_ROSTER_SIZE = int(os.getenv("BASELINE_ROSTER_SIZE", "10"))
ROSTER_SIZES = {
    name.lower(): int(size)
    for name, size in json.loads(os.getenv(
        "ROSTER_SIZES",
        '{"Deccan Warriors": 11, "Frolic Fetizens": 13, "Interstellar": 13}'
    )).items()
}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Apply the steps/golf minimum check (RR = 0 below minimum) when aggregating
RR_FLOOR_AT_AGGREGATION = _flag("RR_FLOOR_AT_AGGREGATION", "false")

# Credit challenge bonuses only to the period the challenge ended in
CHALLENGE_BONUS_WINDOWED = _flag("CHALLENGE_BONUS_WINDOWED", "true")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
