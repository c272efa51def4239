"""Session engine — turns a workout template into a loggable session.

The mutators are pure: each takes a Session and returns a new one, leaving
the input untouched. Unknown exercise or set ids are a no-op, never an error.
Persisting the result is the caller's job (see SessionRepository).

    in-progress --complete--> completed   (terminal)
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable

from loguru import logger

from fittrack.tracker.catalogs import lookup_exercise
from fittrack.tracker.context import TrackerContext
from fittrack.tracker.models import (
    Exercise,
    Session,
    SessionExercise,
    SessionStatus,
    SetEntry,
    WeightUnit,
    WorkoutTemplate,
)

SESSIONS_TABLE = "sessions"

UNKNOWN_EXERCISE_NAME = "Unknown Exercise"
UNKNOWN_MUSCLE_GROUP = "Unknown"


# ---------------------------------------------------------------------------
# Pure mutators
# ---------------------------------------------------------------------------


def find_session_for_date(sessions: list[Session], target_date: date) -> Session | None:
    for session in sessions:
        if session.date == target_date:
            return session
    return None


def instantiate_session(
    template: WorkoutTemplate,
    target_date: date,
    unit: WeightUnit,
    lookup: Callable[[str], Exercise | None] = lookup_exercise,
) -> Session:
    """Fresh in-progress session with `default_sets` empty sets per exercise.

    Exercise name and muscle group are copied from the catalog now; later
    catalog changes do not reach this session.
    """
    exercises: list[SessionExercise] = []
    for planned in template.exercises:
        details = lookup(planned.exercise_id)
        exercises.append(
            SessionExercise(
                id=planned.exercise_id,
                name=details.name if details else UNKNOWN_EXERCISE_NAME,
                muscle_group=details.muscle_group if details else UNKNOWN_MUSCLE_GROUP,
                sets=[SetEntry() for _ in range(planned.default_sets)],
            )
        )
    return Session(
        date=target_date,
        template_id=template.id,
        exercises=exercises,
        status=SessionStatus.in_progress,
        unit=unit,
    )


def start_session(
    sessions: list[Session],
    template: WorkoutTemplate,
    target_date: date,
    unit: WeightUnit,
    lookup: Callable[[str], Exercise | None] = lookup_exercise,
) -> Session:
    """Existing session for `target_date` if any, else a new one from `template`."""
    existing = find_session_for_date(sessions, target_date)
    if existing is not None:
        return existing
    return instantiate_session(template, target_date, unit, lookup)


def exercise_volume(exercise: SessionExercise) -> float:
    return sum(s.volume for s in exercise.sets)


def session_volume(session: Session) -> float:
    return sum(exercise_volume(e) for e in session.exercises)


def _replace_sets(
    session: Session,
    exercise_id: str,
    edit: Callable[[list[SetEntry]], list[SetEntry] | None],
) -> Session:
    """Apply `edit` to one exercise's sets; `edit` returns None for no change."""
    exercises: list[SessionExercise] = []
    changed = False
    for exercise in session.exercises:
        if not changed and exercise.id == exercise_id:
            new_sets = edit(exercise.sets)
            if new_sets is not None:
                exercise = exercise.model_copy(update={"sets": new_sets})
                changed = True
        exercises.append(exercise)

    if not changed:
        return session

    updated = session.model_copy(update={"exercises": exercises})
    if updated.status == SessionStatus.completed:
        # Keep the stored total in line with edits made after completion.
        updated = updated.model_copy(update={"total_volume": session_volume(updated)})
    return updated


def update_set(
    session: Session,
    exercise_id: str,
    set_id: str,
    reps: int | None = None,
    weight: float | None = None,
) -> Session:
    """Patch reps and/or weight of one set; its volume follows automatically."""
    patch: dict = {}
    if reps is not None:
        patch["reps"] = reps
    if weight is not None:
        patch["weight"] = weight

    def edit(sets: list[SetEntry]) -> list[SetEntry] | None:
        if not any(s.id == set_id for s in sets):
            return None
        return [s.model_copy(update=patch) if s.id == set_id else s for s in sets]

    return _replace_sets(session, exercise_id, edit)


def add_set(session: Session, exercise_id: str) -> Session:
    return _replace_sets(session, exercise_id, lambda sets: [*sets, SetEntry()])


def remove_set(session: Session, exercise_id: str, set_id: str) -> Session:
    """Drop one set. An exercise may end up with no sets at all."""

    def edit(sets: list[SetEntry]) -> list[SetEntry] | None:
        kept = [s for s in sets if s.id != set_id]
        return kept if len(kept) != len(sets) else None

    return _replace_sets(session, exercise_id, edit)


def complete_session(session: Session, now: datetime) -> Session:
    """Mark completed and total the volume.

    Completing twice recomputes the total and keeps the first completed_at.
    """
    return session.model_copy(
        update={
            "status": SessionStatus.completed,
            "completed_at": session.completed_at or now,
            "total_volume": session_volume(session),
        }
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class SessionRepository:
    def __init__(self, ctx: TrackerContext):
        self._ctx = ctx

    async def list_sessions(self) -> list[Session]:
        raw = await self._ctx.store.get(SESSIONS_TABLE, [])
        sessions = [Session.model_validate(s) for s in raw]
        return sorted(sessions, key=lambda s: s.date)

    async def _write(self, sessions: list[Session]) -> None:
        await self._ctx.store.set(SESSIONS_TABLE, [s.model_dump(mode="json") for s in sessions])

    async def get(self, session_id: str) -> Session | None:
        for session in await self.list_sessions():
            if session.id == session_id:
                return session
        return None

    async def for_date(self, target_date: date) -> Session | None:
        return find_session_for_date(await self.list_sessions(), target_date)

    async def _put(self, session: Session) -> Session:
        sessions = await self.list_sessions()
        for i, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[i] = session
                break
        else:
            sessions.append(session)
        await self._write(sessions)
        return session

    async def save(self, session: Session) -> Session:
        """Replace the stored session with the same id, or append it."""
        async with self._ctx.store.lock:
            return await self._put(session)

    async def update(self, session_id: str, edit: Callable[[Session], Session]) -> Session | None:
        """Apply `edit` to the stored session and write it back. None for unknown ids."""
        async with self._ctx.store.lock:
            session = await self.get(session_id)
            if session is None:
                return None
            return await self._put(edit(session))

    async def start(
        self,
        template: WorkoutTemplate,
        unit: WeightUnit,
        target_date: date | None = None,
    ) -> Session:
        """Start (or resume) the session for `target_date`, default today."""
        target_date = target_date or self._ctx.today()
        async with self._ctx.store.lock:
            sessions = await self.list_sessions()
            session = start_session(sessions, template, target_date, unit)
            if find_session_for_date(sessions, target_date) is session:
                logger.info(f"Resuming session {session.id} for {target_date}")
                return session

            sessions.append(session)
            await self._write(sessions)
        logger.info(
            f"Started session {session.id} for {target_date} from template {template.id} "
            f"({len(session.exercises)} exercises)"
        )
        return session
