import secrets
from datetime import datetime, timedelta, UTC
from typing import Optional
import bcrypt
from sqlmodel import Session, select

from ..config import SESSION_EXPIRE_DAYS
from ..models.account import Account
from ..models.session import Session as UserSession
from ..utils.logging import setup_logger

logger = setup_logger(__name__)

ROLES = ("player", "leader", "governor")


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def create_session(db: Session, user_id: int) -> str:
    """Create a new session for an account and return the session token."""
    session_token = secrets.token_urlsafe(32)
    user_session = UserSession(
        user_id=user_id,
        session_token=session_token,
        expires_at=datetime.now(UTC) + timedelta(days=SESSION_EXPIRE_DAYS)
    )
    db.add(user_session)
    db.commit()
    return session_token


def get_account_by_session_token(db: Session, session_token: str) -> Optional[Account]:
    statement = select(UserSession).where(UserSession.session_token == session_token)
    user_session = db.exec(statement).first()
    if not user_session:
        return None

    if _as_utc(user_session.expires_at) < datetime.now(UTC):
        db.delete(user_session)
        db.commit()
        return None

    return db.get(Account, user_session.user_id)


def delete_session(db: Session, session_token: str) -> None:
    """Delete a session (logout)."""
    statement = select(UserSession).where(UserSession.session_token == session_token)
    user_session = db.exec(statement).first()
    if user_session:
        db.delete(user_session)
        db.commit()


def get_account_by_username(db: Session, username: str) -> Optional[Account]:
    statement = select(Account).where(Account.username == username)
    return db.exec(statement).first()


def authenticate(db: Session, username: str, password: str) -> Optional[Account]:
    account = get_account_by_username(db, username)
    if not account or not verify_password(password, account.password_hash):
        return None
    return account


def create_account(
    db: Session,
    username: str,
    password: str,
    first_name: str,
    last_name: str = "",
    role: str = "player",
    team_id: Optional[int] = None,
    age: Optional[int] = None,
    gender: Optional[str] = None,
) -> Account:
    """Create a new account."""
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")

    account = Account(
        username=username,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        team_id=team_id,
        age=age,
        gender=gender,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info("Created %s account %s", role, username)
    return account


def change_password(db: Session, account: Account, current_password: str, new_password: str) -> bool:
    if not verify_password(current_password, account.password_hash):
        return False
    account.password_hash = hash_password(new_password)
    db.add(account)
    db.commit()
    return True
