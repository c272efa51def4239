"""Tracker HTTP router — templates, sessions, ratings."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pydantic import BaseModel, Field

from fittrack.tracker import sessions as engine
from fittrack.tracker.catalogs import list_exercises
from fittrack.tracker.context import TrackerContext
from fittrack.tracker.deps import get_context, parse_date
from fittrack.tracker.models import Exercise, Session, SetPatch, WorkoutTemplate
from fittrack.tracker.profile import ProfileRepository
from fittrack.tracker.sessions import SessionRepository
from fittrack.tracker.templates import TemplateRepository

router = APIRouter(prefix="/tracker", tags=["workouts"])


class StartSessionRequest(BaseModel):
    template_id: str
    date: str | None = None


class StartForDateRequest(BaseModel):
    date: str


class RatingRequest(BaseModel):
    rating: int = Field(ge=0)


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Unknown session: {session_id}")


async def _session_or_404(repo: SessionRepository, session_id: str) -> Session:
    session = await repo.get(session_id)
    if session is None:
        raise _not_found(session_id)
    return session


async def _update_or_404(repo: SessionRepository, session_id: str, edit) -> Session:
    session = await repo.update(session_id, edit)
    if session is None:
        raise _not_found(session_id)
    return session


# ---------------------------------------------------------------------------
# /tracker/templates
# ---------------------------------------------------------------------------


@router.get("/templates", response_model=list[WorkoutTemplate])
async def templates_list(ctx: TrackerContext = Depends(get_context)) -> list[WorkoutTemplate]:
    return await TemplateRepository(ctx).list_templates()


@router.put("/templates", response_model=list[WorkoutTemplate])
async def templates_save(
    templates: list[WorkoutTemplate],
    ctx: TrackerContext = Depends(get_context),
) -> list[WorkoutTemplate]:
    return await TemplateRepository(ctx).save(templates)


@router.get("/templates/for-date", response_model=WorkoutTemplate | None)
async def template_for_date(
    ctx: TrackerContext = Depends(get_context),
    target_date: str = Query(..., alias="date", description="Date (YYYY-MM-DD)"),
) -> WorkoutTemplate | None:
    return await TemplateRepository(ctx).resolve_for_date(parse_date(target_date))


@router.get("/templates/next", response_model=WorkoutTemplate | None)
async def template_next(ctx: TrackerContext = Depends(get_context)) -> WorkoutTemplate | None:
    return await TemplateRepository(ctx).next_template()


@router.get("/exercises", response_model=list[Exercise])
async def exercises_list() -> list[Exercise]:
    return list_exercises()


# ---------------------------------------------------------------------------
# /tracker/sessions
# ---------------------------------------------------------------------------


@router.get("/sessions", response_model=list[Session])
async def sessions_list(ctx: TrackerContext = Depends(get_context)) -> list[Session]:
    return await SessionRepository(ctx).list_sessions()


@router.get("/sessions/{session_id}", response_model=Session)
async def session_detail(session_id: str, ctx: TrackerContext = Depends(get_context)) -> Session:
    return await _session_or_404(SessionRepository(ctx), session_id)


@router.post("/sessions/start", response_model=Session)
async def session_start(body: StartSessionRequest, ctx: TrackerContext = Depends(get_context)) -> Session:
    template = await TemplateRepository(ctx).get(body.template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Unknown template: {body.template_id}")
    target_date = parse_date(body.date) if body.date else None
    prefs = await ProfileRepository(ctx).get_preferences()
    return await SessionRepository(ctx).start(template, prefs.unit, target_date)


@router.post("/sessions/start-for-date", response_model=Session)
async def session_start_for_date(
    body: StartForDateRequest,
    ctx: TrackerContext = Depends(get_context),
) -> Session:
    target_date = parse_date(body.date)
    template = await TemplateRepository(ctx).resolve_for_date(target_date)
    if template is None:
        raise HTTPException(status_code=404, detail="No workout template found for this day.")
    prefs = await ProfileRepository(ctx).get_preferences()
    return await SessionRepository(ctx).start(template, prefs.unit, target_date)


@router.patch("/sessions/{session_id}/exercises/{exercise_id}/sets/{set_id}", response_model=Session)
async def session_update_set(
    session_id: str,
    exercise_id: str,
    set_id: str,
    patch: SetPatch,
    ctx: TrackerContext = Depends(get_context),
) -> Session:
    return await _update_or_404(
        SessionRepository(ctx),
        session_id,
        lambda s: engine.update_set(s, exercise_id, set_id, reps=patch.reps, weight=patch.weight),
    )


@router.post("/sessions/{session_id}/exercises/{exercise_id}/sets", response_model=Session)
async def session_add_set(
    session_id: str,
    exercise_id: str,
    ctx: TrackerContext = Depends(get_context),
) -> Session:
    return await _update_or_404(SessionRepository(ctx), session_id, lambda s: engine.add_set(s, exercise_id))


@router.delete("/sessions/{session_id}/exercises/{exercise_id}/sets/{set_id}", response_model=Session)
async def session_remove_set(
    session_id: str,
    exercise_id: str,
    set_id: str,
    ctx: TrackerContext = Depends(get_context),
) -> Session:
    return await _update_or_404(
        SessionRepository(ctx), session_id, lambda s: engine.remove_set(s, exercise_id, set_id)
    )


@router.post("/sessions/{session_id}/complete", response_model=Session)
async def session_complete(session_id: str, ctx: TrackerContext = Depends(get_context)) -> Session:
    now = ctx.now()
    completed = await _update_or_404(
        SessionRepository(ctx), session_id, lambda s: engine.complete_session(s, now)
    )
    logger.info(f"Completed session {completed.id}: total volume {completed.total_volume} {completed.unit.value}")
    return completed


# ---------------------------------------------------------------------------
# /tracker/ratings
# ---------------------------------------------------------------------------


@router.get("/ratings")
async def ratings_get(ctx: TrackerContext = Depends(get_context)) -> dict[str, int]:
    return await ProfileRepository(ctx).get_ratings()


@router.put("/ratings/{exercise_id}")
async def ratings_put(
    exercise_id: str,
    body: RatingRequest,
    ctx: TrackerContext = Depends(get_context),
) -> dict[str, int]:
    return await ProfileRepository(ctx).rate(exercise_id, body.rating)
