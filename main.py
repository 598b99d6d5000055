from fastapi import FastAPI
from contextlib import asynccontextmanager
from sqlmodel import Session
from league.config import GOVERNOR_USERNAME, GOVERNOR_PASSWORD
from league.database import create_db_and_tables, engine
from league.services.auth import create_account, get_account_by_username
from league.utils.logging import setup_logger

logger = setup_logger("league")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: create tables and make sure a governor can sign in
    create_db_and_tables()
    with Session(engine) as db:
        if not get_account_by_username(db, GOVERNOR_USERNAME):
            create_account(
                db,
                username=GOVERNOR_USERNAME,
                password=GOVERNOR_PASSWORD,
                first_name="League",
                last_name="Governor",
                role="governor",
            )
            logger.info("Seeded governor account %s", GOVERNOR_USERNAME)
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Fitness League",
    description="Log workouts and rest days, approve entries, and follow team standings",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
from league.routers import auth, entries, team, leaderboard, dashboard, challenges, governor

app.include_router(auth.router, tags=["auth"])
app.include_router(entries.router, tags=["entries"])
app.include_router(team.router, tags=["team"])
app.include_router(leaderboard.router, tags=["leaderboard"])
app.include_router(dashboard.router, tags=["dashboard"])
app.include_router(challenges.router, tags=["challenges"])
app.include_router(governor.router, tags=["governor"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
