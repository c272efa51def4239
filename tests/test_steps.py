"""Tests for steps sync orchestration."""

from __future__ import annotations

import asyncio

import pytest

from fittrack.tracker.daily_log import DailyLogRepository, add_food, empty_log
from fittrack.tracker.models import MealName
from fittrack.tracker.steps import (
    StepsNetworkError,
    StepsProviderError,
    StepsSyncCoordinator,
    StepsUnauthenticatedError,
    SyncStatus,
    disconnect_provider,
    sync_steps,
)
from tests.conftest import NOW, TODAY, FakeStepsProvider


class TestCoordinator:
    def test_acquire_release(self):
        c = StepsSyncCoordinator()
        assert c.try_acquire("alice")
        assert c.is_syncing("alice")
        assert not c.try_acquire("alice")
        assert c.try_acquire("bob")
        c.release("alice")
        assert not c.is_syncing("alice")
        assert c.try_acquire("alice")


class TestSyncSteps:
    @pytest.mark.asyncio
    async def test_success_merges_into_today(self, ctx, coordinator):
        provider = FakeStepsProvider(steps=7540)
        result = await sync_steps(ctx, provider, coordinator)
        assert result.status == SyncStatus.synced
        assert result.log.steps == 7540
        assert result.log.date == TODAY
        stored = await DailyLogRepository(ctx).get_log_for_date(TODAY)
        assert stored.steps == 7540
        assert not coordinator.is_syncing(ctx.user_key)

    @pytest.mark.asyncio
    async def test_success_keeps_meals(self, ctx, coordinator):
        repo = DailyLogRepository(ctx)
        log, _ = add_food(empty_log(TODAY), MealName.lunch, "food_1", 1, NOW)
        await repo.upsert_log(log)
        result = await sync_steps(ctx, FakeStepsProvider(steps=100), coordinator)
        assert result.log.meals == log.meals

    @pytest.mark.asyncio
    async def test_not_connected(self, ctx, coordinator):
        provider = FakeStepsProvider(connected=False)
        result = await sync_steps(ctx, provider, coordinator)
        assert result.status == SyncStatus.not_connected
        assert provider.fetch_calls == 0

    @pytest.mark.asyncio
    async def test_second_sync_while_in_flight_is_skipped(self, ctx, coordinator):
        provider = FakeStepsProvider(steps=1234)
        provider.gate = asyncio.Event()

        first = asyncio.create_task(sync_steps(ctx, provider, coordinator))
        await asyncio.sleep(0)
        assert coordinator.is_syncing(ctx.user_key)

        second = await sync_steps(ctx, provider, coordinator)
        assert second.status == SyncStatus.skipped

        provider.gate.set()
        result = await first
        assert result.status == SyncStatus.synced
        assert provider.fetch_calls == 1
        assert not coordinator.is_syncing(ctx.user_key)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, kind",
        [
            (StepsUnauthenticatedError("expired"), "unauthenticated"),
            (StepsNetworkError("offline"), "network"),
            (StepsProviderError("boom"), "unknown"),
        ],
    )
    async def test_failure_disconnects_and_resets_steps(self, ctx, coordinator, error, kind):
        repo = DailyLogRepository(ctx)
        await repo.upsert_log(empty_log(TODAY).model_copy(update={"steps": 4000}))
        provider = FakeStepsProvider(error=error)

        result = await sync_steps(ctx, provider, coordinator)

        assert result.status == SyncStatus.failed
        assert result.error == kind
        assert result.reconnect_required
        assert provider.disconnect_calls == 1
        assert not await provider.is_connected()
        assert (await repo.get_log_for_date(TODAY)).steps == 0
        assert not coordinator.is_syncing(ctx.user_key)

    @pytest.mark.asyncio
    async def test_disconnect_during_fetch_discards_result(self, ctx, coordinator):
        provider = FakeStepsProvider(steps=9999)
        provider.gate = asyncio.Event()

        task = asyncio.create_task(sync_steps(ctx, provider, coordinator))
        await asyncio.sleep(0)
        provider.connected = False
        provider.gate.set()
        result = await task

        assert result.status == SyncStatus.discarded
        assert (await DailyLogRepository(ctx).get_log_for_date(TODAY)).steps == 0


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_resets_today_steps(self, ctx):
        repo = DailyLogRepository(ctx)
        await repo.upsert_log(empty_log(TODAY).model_copy(update={"steps": 5000}))
        provider = FakeStepsProvider()
        log = await disconnect_provider(ctx, provider)
        assert log.steps == 0
        assert provider.disconnect_calls == 1

    @pytest.mark.asyncio
    async def test_already_disconnected_is_noop(self, ctx):
        repo = DailyLogRepository(ctx)
        await repo.upsert_log(empty_log(TODAY).model_copy(update={"steps": 5000}))
        provider = FakeStepsProvider(connected=False)
        log = await disconnect_provider(ctx, provider)
        assert log.steps == 5000
        assert provider.disconnect_calls == 0
