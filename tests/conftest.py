"""Shared fixtures for the test suite."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient

from fittrack.auth import get_user_key
from fittrack.config import Settings
from fittrack.main import app
from fittrack.tracker.context import TrackerContext
from fittrack.tracker.deps import get_context, get_coordinator, get_steps_provider
from fittrack.tracker.models import TemplateExercise, WorkoutTemplate
from fittrack.tracker.steps import StepsSyncCoordinator
from fittrack.tracker.store import KeyValueStore, MemoryStore, UserLocks, UserStore

# 2024-05-06 is a Monday
TODAY = date(2024, 5, 6)
NOW = datetime(2024, 5, 6, 18, 30, tzinfo=timezone.utc)

TEST_SETTINGS = Settings(_env_file=None, google_fit_client_id="client-123")


# ---------------------------------------------------------------------------
# Fake steps provider (no Google Fit needed)
# ---------------------------------------------------------------------------

class FakeStepsProvider:
    """In-memory StepsProvider. Set `gate` to hold fetches until it is set."""

    def __init__(
        self,
        steps: int = 0,
        error: Exception | None = None,
        connected: bool = True,
    ):
        self.steps = steps
        self.error = error
        self.connected = connected
        self.gate: asyncio.Event | None = None
        self.fetch_calls = 0
        self.disconnect_calls = 0

    async def is_connected(self) -> bool:
        return self.connected

    async def fetch_today_steps(self) -> int:
        self.fetch_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.steps

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_context(
    store: KeyValueStore,
    user_key: str = "alice",
    locks: UserLocks | None = None,
) -> TrackerContext:
    lock = locks.for_user(user_key) if locks is not None else None
    return TrackerContext(
        store=UserStore(store, user_key, lock),
        settings=TEST_SETTINGS,
        today=lambda: TODAY,
        now=lambda: NOW,
    )


def make_template(
    day: str = "Monday",
    exercises: list[tuple[str, int, str]] | None = None,
    template_id: str = "tpl-mon",
    title: str = "Push",
) -> WorkoutTemplate:
    if exercises is None:
        exercises = [("chest_4", 3, "8-10")]
    return WorkoutTemplate(
        id=template_id,
        title=title,
        day_of_week=day,
        exercises=[
            TemplateExercise(exercise_id=ex_id, default_sets=sets, default_reps=reps)
            for ex_id, sets, reps in exercises
        ],
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def memory_store():
    return MemoryStore()


@pytest.fixture()
def ctx(memory_store):
    return make_context(memory_store)


@pytest.fixture()
def steps_provider():
    return FakeStepsProvider(steps=7540)


@pytest.fixture()
def coordinator():
    return StepsSyncCoordinator()


@pytest.fixture()
def user_locks():
    return UserLocks()


@pytest.fixture()
def override_context(memory_store, steps_provider, coordinator, user_locks):
    """Override the FastAPI dependencies so no database or Google Fit is needed."""
    async def _context(user_key: str = Depends(get_user_key)):
        return make_context(memory_store, user_key, user_locks)

    app.dependency_overrides[get_context] = _context
    app.dependency_overrides[get_steps_provider] = lambda: steps_provider
    app.dependency_overrides[get_coordinator] = lambda: coordinator
    yield memory_store
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_context):
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Key": "alice"},
    ) as ac:
        yield ac
