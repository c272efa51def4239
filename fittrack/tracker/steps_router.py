"""Steps sync endpoints — status, sync, Google Fit connect/disconnect."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from fittrack.tracker.context import TrackerContext
from fittrack.tracker.deps import get_context, get_coordinator, get_steps_provider
from fittrack.tracker.google_fit import GoogleFitStepsProvider
from fittrack.tracker.models import DailyLog
from fittrack.tracker.steps import (
    StepsAuthorizationError,
    StepsProvider,
    StepsSyncCoordinator,
    SyncResult,
    disconnect_provider,
    sync_steps,
)

router = APIRouter(prefix="/tracker/steps", tags=["steps"])


class CallbackRequest(BaseModel):
    code: str


@router.get("/status")
async def steps_status(
    ctx: TrackerContext = Depends(get_context),
    provider: StepsProvider = Depends(get_steps_provider),
    coordinator: StepsSyncCoordinator = Depends(get_coordinator),
) -> dict[str, bool]:
    return {
        "connected": await provider.is_connected(),
        "syncing": coordinator.is_syncing(ctx.user_key),
    }


@router.post("/sync", response_model=SyncResult)
async def steps_sync(
    ctx: TrackerContext = Depends(get_context),
    provider: StepsProvider = Depends(get_steps_provider),
    coordinator: StepsSyncCoordinator = Depends(get_coordinator),
) -> SyncResult:
    return await sync_steps(ctx, provider, coordinator)


@router.get("/google-fit/authorize")
async def google_fit_authorize(
    provider: GoogleFitStepsProvider = Depends(get_steps_provider),
) -> dict[str, str]:
    try:
        url = await provider.begin_authorization()
    except StepsAuthorizationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"url": url}


@router.post("/google-fit/callback")
async def google_fit_callback(
    body: CallbackRequest,
    provider: GoogleFitStepsProvider = Depends(get_steps_provider),
) -> dict[str, bool]:
    try:
        await provider.complete_authorization(body.code)
    except StepsAuthorizationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"connected": True}


@router.post("/google-fit/disconnect", response_model=DailyLog)
async def google_fit_disconnect(
    ctx: TrackerContext = Depends(get_context),
    provider: StepsProvider = Depends(get_steps_provider),
) -> DailyLog:
    return await disconnect_provider(ctx, provider)
