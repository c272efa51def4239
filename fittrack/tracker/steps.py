"""Steps sync orchestration.

The core only needs today's step count from a provider. At most one sync per
user is in flight; a second request while one is outstanding is skipped so a
stale response can never overwrite a fresher one. Any provider failure tears
the connection down (fail closed) and asks the user to reconnect; nothing is
retried automatically.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from loguru import logger
from pydantic import BaseModel

from fittrack.tracker.context import TrackerContext
from fittrack.tracker.daily_log import DailyLogRepository, merge_steps
from fittrack.tracker.models import DailyLog


class StepsError(Exception):
    """Base class for step provider failures."""

    kind = "unknown"


class StepsUnauthenticatedError(StepsError):
    kind = "unauthenticated"


class StepsNetworkError(StepsError):
    kind = "network"


class StepsProviderError(StepsError):
    kind = "unknown"


class StepsAuthorizationError(StepsError):
    """Authorization could not be started or completed."""

    kind = "unauthenticated"


class StepsProvider(Protocol):
    async def is_connected(self) -> bool: ...

    async def fetch_today_steps(self) -> int: ...

    async def disconnect(self) -> None: ...


class SyncStatus(str, Enum):
    synced = "synced"
    skipped = "skipped"  # another sync for this user is still running
    not_connected = "not_connected"
    discarded = "discarded"  # provider disconnected while the fetch was running
    failed = "failed"


class SyncResult(BaseModel):
    status: SyncStatus
    log: DailyLog | None = None
    error: str | None = None  # "unauthenticated" | "network" | "unknown"
    message: str = ""
    reconnect_required: bool = False


class StepsSyncCoordinator:
    """Tracks which users have a sync in flight. One instance per process."""

    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    def is_syncing(self, user_key: str) -> bool:
        return user_key in self._in_flight

    def try_acquire(self, user_key: str) -> bool:
        if user_key in self._in_flight:
            return False
        self._in_flight.add(user_key)
        return True

    def release(self, user_key: str) -> None:
        self._in_flight.discard(user_key)


async def disconnect_provider(ctx: TrackerContext, provider: StepsProvider) -> DailyLog:
    """Disconnect and zero today's steps, which came from the provider.

    A provider that is already disconnected leaves the log untouched.
    """
    logs = DailyLogRepository(ctx)
    if not await provider.is_connected():
        return await logs.get_today()
    await provider.disconnect()
    return await logs.update_log(ctx.today(), lambda log: merge_steps(log, 0))


async def sync_steps(
    ctx: TrackerContext,
    provider: StepsProvider,
    coordinator: StepsSyncCoordinator,
) -> SyncResult:
    if not await provider.is_connected():
        return SyncResult(status=SyncStatus.not_connected, message="Step provider is not connected.")

    if not coordinator.try_acquire(ctx.user_key):
        logger.debug(f"Steps sync already in flight for {ctx.user_key}; skipping")
        return SyncResult(status=SyncStatus.skipped, message="A sync is already in progress.")

    try:
        try:
            steps = await provider.fetch_today_steps()
        except StepsError as e:
            logger.warning(f"Steps sync failed for {ctx.user_key} ({e.kind}): {e}")
            log = await disconnect_provider(ctx, provider)
            return SyncResult(
                status=SyncStatus.failed,
                log=log,
                error=e.kind,
                message="Could not sync steps. Reconnect the step provider in settings.",
                reconnect_required=True,
            )

        if not await provider.is_connected():
            logger.info(f"Provider disconnected during sync for {ctx.user_key}; discarding {steps} steps")
            return SyncResult(status=SyncStatus.discarded, message="Provider was disconnected during sync.")

        log = await DailyLogRepository(ctx).update_log(ctx.today(), lambda today: merge_steps(today, steps))
        logger.info(f"Synced {steps} steps for {ctx.user_key} on {log.date}")
        return SyncResult(status=SyncStatus.synced, log=log)
    finally:
        coordinator.release(ctx.user_key)
