"""Daily log endpoints — meals, steps, rollups, goal rings, foods, profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from fittrack.tracker import daily_log as agg
from fittrack.tracker.catalogs import add_custom_food, load_food_catalog
from fittrack.tracker.context import TrackerContext
from fittrack.tracker.daily_log import DailyLogRepository
from fittrack.tracker.deps import get_context, parse_date
from fittrack.tracker.models import (
    ActivitySummary,
    DailyLog,
    FoodItem,
    MealName,
    NutritionSummary,
    Preferences,
    UserProfile,
    WeeklyAchievement,
)
from fittrack.tracker.profile import ProfileRepository

router = APIRouter(prefix="/tracker", tags=["nutrition"])


class StepsRequest(BaseModel):
    steps: int = Field(ge=0)


class LogFoodRequest(BaseModel):
    food_id: str
    servings: float = Field(gt=0)


# ---------------------------------------------------------------------------
# /tracker/logs
# ---------------------------------------------------------------------------


@router.get("/logs", response_model=list[DailyLog])
async def logs_list(ctx: TrackerContext = Depends(get_context)) -> list[DailyLog]:
    return await DailyLogRepository(ctx).list_logs()


@router.get("/logs/{log_date}", response_model=DailyLog)
async def log_get(log_date: str, ctx: TrackerContext = Depends(get_context)) -> DailyLog:
    return await DailyLogRepository(ctx).get_log_for_date(parse_date(log_date))


@router.put("/logs/{log_date}", response_model=DailyLog)
async def log_put(log_date: str, log: DailyLog, ctx: TrackerContext = Depends(get_context)) -> DailyLog:
    if log.date != parse_date(log_date):
        raise HTTPException(status_code=422, detail=f"Log date {log.date} does not match path {log_date}")
    return await DailyLogRepository(ctx).upsert_log(log)


@router.put("/logs/{log_date}/steps", response_model=DailyLog)
async def log_put_steps(
    log_date: str,
    body: StepsRequest,
    ctx: TrackerContext = Depends(get_context),
) -> DailyLog:
    return await DailyLogRepository(ctx).update_log(
        parse_date(log_date), lambda log: agg.merge_steps(log, body.steps)
    )


@router.post("/logs/{log_date}/meals/{meal}/foods", response_model=DailyLog)
async def log_add_food(
    log_date: str,
    meal: MealName,
    body: LogFoodRequest,
    ctx: TrackerContext = Depends(get_context),
) -> DailyLog:
    now = ctx.now()
    return await DailyLogRepository(ctx).update_log(
        parse_date(log_date), lambda log: agg.add_food(log, meal, body.food_id, body.servings, now)[0]
    )


@router.delete("/logs/{log_date}/meals/{meal}/foods/{logged_food_id}", response_model=DailyLog)
async def log_remove_food(
    log_date: str,
    meal: MealName,
    logged_food_id: str,
    ctx: TrackerContext = Depends(get_context),
) -> DailyLog:
    return await DailyLogRepository(ctx).update_log(
        parse_date(log_date), lambda log: agg.remove_food(log, meal, logged_food_id)
    )


@router.get("/logs/{log_date}/nutrition", response_model=NutritionSummary)
async def log_nutrition(log_date: str, ctx: TrackerContext = Depends(get_context)) -> NutritionSummary:
    target_date = parse_date(log_date)
    log = await DailyLogRepository(ctx).get_log_for_date(target_date)
    goals = await ProfileRepository(ctx).get_goals()
    consumed = agg.compute_nutrition_totals(log, await load_food_catalog(ctx.store))
    return NutritionSummary(
        date=target_date,
        consumed=consumed,
        remaining=agg.compute_remaining(consumed, goals),
        goals=goals,
    )


@router.get("/logs/{log_date}/activity", response_model=ActivitySummary)
async def log_activity(log_date: str, ctx: TrackerContext = Depends(get_context)) -> ActivitySummary:
    target_date = parse_date(log_date)
    log = await DailyLogRepository(ctx).get_log_for_date(target_date)
    goals = await ProfileRepository(ctx).get_goals()
    consumed = agg.compute_activity_totals(log, ctx.settings)
    return ActivitySummary(
        date=target_date,
        consumed=consumed,
        remaining=agg.compute_activity_remaining(consumed, goals),
        goals=goals,
    )


@router.get("/goals/weekly", response_model=WeeklyAchievement)
async def goals_weekly(
    ctx: TrackerContext = Depends(get_context),
    end: str | None = Query(default=None, description="Last day of the window (default: today)"),
    size: int | None = Query(default=None, ge=1, le=31, description="Window length in days"),
) -> WeeklyAchievement:
    window_end = parse_date(end, "end") if end else ctx.today()
    return agg.compute_weekly_achievement(
        await DailyLogRepository(ctx).list_logs(),
        await ProfileRepository(ctx).get_goals(),
        await load_food_catalog(ctx.store),
        window_end=window_end,
        window_size=size or ctx.settings.weekly_window_days,
    )


# ---------------------------------------------------------------------------
# /tracker/foods
# ---------------------------------------------------------------------------


@router.get("/foods", response_model=list[FoodItem])
async def foods_list(ctx: TrackerContext = Depends(get_context)) -> list[FoodItem]:
    return (await load_food_catalog(ctx.store)).list_foods()


@router.post("/foods", response_model=FoodItem)
async def foods_add(food: FoodItem, ctx: TrackerContext = Depends(get_context)) -> FoodItem:
    return await add_custom_food(ctx.store, food)


# ---------------------------------------------------------------------------
# /tracker/profile, /tracker/preferences
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=UserProfile)
async def profile_get(ctx: TrackerContext = Depends(get_context)) -> UserProfile:
    return await ProfileRepository(ctx).get_profile()


@router.put("/profile", response_model=UserProfile)
async def profile_put(profile: UserProfile, ctx: TrackerContext = Depends(get_context)) -> UserProfile:
    return await ProfileRepository(ctx).save_profile(profile)


@router.get("/preferences", response_model=Preferences)
async def preferences_get(ctx: TrackerContext = Depends(get_context)) -> Preferences:
    return await ProfileRepository(ctx).get_preferences()


@router.put("/preferences", response_model=Preferences)
async def preferences_put(prefs: Preferences, ctx: TrackerContext = Depends(get_context)) -> Preferences:
    return await ProfileRepository(ctx).save_preferences(prefs)
