from typing import Optional
from fastapi import Request, Depends, HTTPException, status
from sqlmodel import Session

from .database import get_session
from .models.account import Account
from .services.auth import get_account_by_session_token
from .config import SESSION_COOKIE_NAME


async def get_current_user(
    request: Request,
    db: Session = Depends(get_session)
) -> Optional[Account]:
    """Get the current logged-in account from the session cookie."""
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_token:
        return None
    return get_account_by_session_token(db, session_token)


async def require_user(
    current_user: Optional[Account] = Depends(get_current_user)
) -> Account:
    """Require a logged-in account."""
    if not current_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return current_user


async def require_leader(
    current_user: Account = Depends(require_user)
) -> Account:
    """Require a team leader (governors may act as leaders)."""
    if current_user.role not in ("leader", "governor"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Leader access required"
        )
    return current_user


async def require_governor(
    current_user: Account = Depends(require_user)
) -> Account:
    """Require a governor."""
    if current_user.role != "governor":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Governor access required"
        )
    return current_user
