from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from main import app
from league.config import SESSION_COOKIE_NAME
from league.database import get_session
from league.models import Team
from league.services.auth import create_account, create_session
from league.services.clock import Clock, get_clock

# Fixed "today" for every API test: the second week of the default season
TODAY = date(2025, 10, 22)

# Create in-memory database for testing
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_clock] = lambda: Clock(fixed_today=TODAY)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="teams")
def teams_fixture(session: Session):
    """Two teams: Alpha at the baseline size, Crusaders with eleven players."""
    alpha = Team(name="Alpha")
    crusaders = Team(name="Crusaders", roster_size=11)
    session.add_all([alpha, crusaders])
    session.commit()
    session.refresh(alpha)
    session.refresh(crusaders)
    return {"alpha": alpha, "crusaders": crusaders}


@pytest.fixture(name="make_account")
def make_account_fixture(session: Session):
    def make(username: str, role: str = "player", team: Team = None, age: int = None, gender: str = None):
        return create_account(
            session,
            username=username,
            password="password123",
            first_name=username.capitalize(),
            role=role,
            team_id=team.id if team else None,
            age=age,
            gender=gender,
        )
    return make


@pytest.fixture(name="login_as")
def login_as_fixture(client: TestClient, session: Session):
    """Point the test client's session cookie at the given account."""
    def login(account):
        client.cookies.set(SESSION_COOKIE_NAME, create_session(session, account.id))
        return client
    return login
