"""dailycoach API server for dashboards and integrations."""

import datetime as dt
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any

import structlog
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from dailycoach import __version__
from dailycoach.adapters.base import BaseRepository
from dailycoach.adapters.unavailable import UnavailableRepository
from dailycoach.engine.daily import DailyEngine
from dailycoach.models import FocusTask, Reminder, ScoreCard, WinEntry

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: open the database unless a repository was injected
    if getattr(app.state, "repository", None) is None:
        try:
            from dailycoach.adapters.sql import SQLRepository
            from dailycoach.db import init_db

            app.state.repository = SQLRepository(await init_db())
            logger.info("Database initialized")
        except Exception as e:
            logger.warning("Database initialization failed", error=str(e))
            app.state.repository = UnavailableRepository(f"database unavailable: {e}")

    yield

    # Shutdown: Close database connections
    try:
        from dailycoach.db import close_db

        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning("Database shutdown failed", error=str(e))


app = FastAPI(
    title="dailycoach API",
    description="Daily reminders, scores and wins",
    version=__version__,
    lifespan=lifespan,
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_repository(request: Request) -> BaseRepository:
    return request.app.state.repository


def get_daily_engine(repository: BaseRepository = Depends(get_repository)) -> DailyEngine:
    return DailyEngine(repository)


class WinsRequest(BaseModel):
    """Request to detect and save wins for a date (yesterday when omitted)."""

    user_id: str
    date: dt.date | None = None


class WinsResponse(BaseModel):
    date: dt.date
    wins: list[WinEntry]
    saved: int
    failed: int


@app.get("/api/reminders")
async def get_reminders(
    user_id: str = Query(..., description="User to generate reminders for"),
    at: datetime | None = Query(None, description="Local time to evaluate. Defaults to now."),
    engine: DailyEngine = Depends(get_daily_engine),
) -> list[Reminder]:
    """Get the ordered reminder feed."""
    return await engine.get_reminders(user_id, at)


@app.get("/api/focus")
async def get_focus(
    user_id: str = Query(..., description="User to fetch Today's Focus for"),
    at: datetime | None = Query(None, description="Local time to evaluate. Defaults to now."),
    engine: DailyEngine = Depends(get_daily_engine),
) -> list[FocusTask]:
    """Get Today's Focus, generating it on the first request of the day."""
    return await engine.get_focus_tasks(user_id, at)


@app.get("/api/score")
async def get_score(
    user_id: str = Query(..., description="User to score"),
    target_date: date | None = Query(
        None,
        alias="date",
        description="Date to score (YYYY-MM-DD). Defaults to today.",
    ),
    engine: DailyEngine = Depends(get_daily_engine),
) -> ScoreCard:
    """Get category scores and the daily score."""
    return await engine.get_scores(user_id, target_date)


@app.post("/api/wins")
async def post_wins(
    request: WinsRequest,
    engine: DailyEngine = Depends(get_daily_engine),
) -> WinsResponse:
    """Detect and save wins for a date."""
    result = await engine.detect_wins(request.user_id, request.date)
    return WinsResponse(date=result.day, wins=result.wins, saved=result.saved, failed=result.failed)


@app.get("/api/status")
async def get_status(repository: BaseRepository = Depends(get_repository)) -> dict[str, Any]:
    """Get repository health."""
    try:
        healthy = await repository.health_check()
        status = {"name": repository.name, "status": "online" if healthy else "offline"}
    except Exception as e:
        status = {"name": repository.name, "status": "error", "error": str(e)}

    return {"version": __version__, "repository": status, "timestamp": date.today().isoformat()}


def run_server(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the API server."""
    import uvicorn

    from dailycoach.config.logging import configure_logging

    configure_logging()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
