"""FastAPI dependencies wiring the tracker components together."""

from __future__ import annotations

from datetime import date

import httpx
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.auth import get_user_key, verify_api_key
from fittrack.config import settings
from fittrack.db import get_session
from fittrack.tracker.context import TrackerContext
from fittrack.tracker.google_fit import GoogleFitStepsProvider
from fittrack.tracker.steps import StepsSyncCoordinator
from fittrack.tracker.store import KeyValueStore, SqlStore, UserLocks, UserStore


def parse_date(value: str, name: str = "date") -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date for '{name}': {value}")


async def get_store(session: AsyncSession = Depends(get_session)) -> KeyValueStore:
    return SqlStore(session)


def get_user_locks(request: Request) -> UserLocks:
    return request.app.state.user_locks


async def get_context(
    user_key: str = Depends(get_user_key),
    store: KeyValueStore = Depends(get_store),
    locks: UserLocks = Depends(get_user_locks),
    _: str = Depends(verify_api_key),
) -> TrackerContext:
    return TrackerContext(store=UserStore(store, user_key, locks.for_user(user_key)), settings=settings)


def get_coordinator(request: Request) -> StepsSyncCoordinator:
    return request.app.state.sync_coordinator


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


async def get_steps_provider(
    ctx: TrackerContext = Depends(get_context),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> GoogleFitStepsProvider:
    return GoogleFitStepsProvider(ctx, client)
