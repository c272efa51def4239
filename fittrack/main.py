from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from loguru import logger

from fittrack.config import settings
from fittrack.db import init_db
from fittrack.logger import setup_logger
from fittrack.tracker.log_router import router as log_router
from fittrack.tracker.router import router as tracker_router
from fittrack.tracker.steps import StepsSyncCoordinator
from fittrack.tracker.steps_router import router as steps_router
from fittrack.tracker.store import UserLocks

setup_logger(level=settings.log_level, log_file=settings.log_file)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    app.state.sync_coordinator = StepsSyncCoordinator()
    app.state.user_locks = UserLocks()
    app.state.http_client = httpx.AsyncClient(timeout=settings.google_fit_timeout_s)
    logger.info("FitTrack started")
    yield
    await app.state.http_client.aclose()


app = FastAPI(title="FitTrack", version="0.1.0", lifespan=lifespan)
app.include_router(tracker_router)
app.include_router(log_router)
app.include_router(steps_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "tracker": {
            "templates": "/tracker/templates",
            "sessions": "/tracker/sessions",
            "logs": "/tracker/logs/{date}",
            "nutrition": "/tracker/logs/{date}/nutrition",
            "activity": "/tracker/logs/{date}/activity",
            "goals_weekly": "/tracker/goals/weekly",
            "foods": "/tracker/foods",
            "steps_sync": "/tracker/steps/sync",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
