from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response, Form
from sqlmodel import Session

from ..config import SESSION_COOKIE_NAME, SESSION_EXPIRE_DAYS
from ..database import get_session
from ..dependencies import require_user
from ..models.account import Account
from ..models.team import Team
from ..services.auth import (
    authenticate,
    change_password,
    create_account,
    create_session,
    delete_session,
    get_account_by_username,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def account_to_dict(account: Account) -> dict:
    return {
        "id": account.id,
        "username": account.username,
        "first_name": account.first_name,
        "last_name": account.last_name,
        "role": account.role,
        "team_id": account.team_id,
        "age": account.age,
        "gender": account.gender,
        "is_senior": account.is_senior,
    }


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        samesite="lax"
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    response: Response,
    username: str = Form(...),
    password: str = Form(...),
    first_name: str = Form(...),
    last_name: str = Form(""),
    team_id: Optional[int] = Form(None),
    age: Optional[int] = Form(None),
    gender: Optional[str] = Form(None),
    db: Session = Depends(get_session)
):
    """Register a player account and sign it in."""
    username = username.strip()
    if not username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username is required"
        )

    if get_account_by_username(db, username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists"
        )

    if len(password) < 6:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must be at least 6 characters"
        )

    if age is not None and not 0 < age < 130:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid age"
        )

    if team_id is not None and not db.get(Team, team_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Team not found"
        )

    account = create_account(
        db,
        username=username,
        password=password,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        team_id=team_id,
        age=age,
        gender=gender,
    )
    _set_session_cookie(response, create_session(db, account.id))
    return account_to_dict(account)


@router.post("/login")
async def login(
    response: Response,
    username: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_session)
):
    """Handle login."""
    account = authenticate(db, username.strip(), password)

    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )

    _set_session_cookie(response, create_session(db, account.id))
    return account_to_dict(account)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_session)
):
    """Handle logout."""
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if session_token:
        delete_session(db, session_token)

    response.delete_cookie(key=SESSION_COOKIE_NAME)
    return {"status": "logged_out"}


@router.get("/me")
async def me(current_user: Account = Depends(require_user)):
    return account_to_dict(current_user)


@router.post("/password")
async def update_password(
    current_password: str = Form(...),
    new_password: str = Form(...),
    current_user: Account = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Change the signed-in account's password."""
    if len(new_password) < 6:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must be at least 6 characters"
        )

    if not change_password(db, current_user, current_password, new_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )

    return {"status": "updated"}
