"""Daily log aggregation — pure rollups over DailyLog values, plus storage.

Rollups are recomputed on every call and never persisted. Missing food
references count as zero; nothing in here raises on stale data.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Callable

from fittrack.config import Settings
from fittrack.tracker.catalogs import FoodCatalog
from fittrack.tracker.context import TrackerContext
from fittrack.tracker.models import (
    ActivityTotals,
    DailyLog,
    DayAchievement,
    LoggedFood,
    MealName,
    NutritionTotals,
    UserGoals,
    WeeklyAchievement,
)

LOGS_TABLE = "daily_logs"


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def empty_log(target_date: date) -> DailyLog:
    return DailyLog(date=target_date)


def find_log(logs: list[DailyLog], target_date: date) -> DailyLog | None:
    for log in logs:
        if log.date == target_date:
            return log
    return None


# ---------------------------------------------------------------------------
# Nutrition
# ---------------------------------------------------------------------------


def _sum_macros(log: DailyLog, catalog: FoodCatalog) -> NutritionTotals:
    totals = NutritionTotals()
    for meal in log.meals:
        for logged in meal.foods:
            food = catalog.lookup_food(logged.food_id)
            if food is None:
                continue
            totals.calories += food.calories * logged.servings
            totals.protein += food.protein * logged.servings
            totals.fat += food.fat * logged.servings
            totals.carbs += food.carbs * logged.servings
    return totals


def compute_nutrition_totals(log: DailyLog, catalog: FoodCatalog) -> NutritionTotals:
    """Consumed calories and macros for the day, rounded to whole units."""
    raw = _sum_macros(log, catalog)
    return NutritionTotals(
        calories=_round_half_up(raw.calories),
        protein=_round_half_up(raw.protein),
        fat=_round_half_up(raw.fat),
        carbs=_round_half_up(raw.carbs),
    )


def compute_remaining(totals: NutritionTotals, goals: UserGoals) -> NutritionTotals:
    """goal - consumed per field. Unclamped: over-eating gives negatives."""
    return NutritionTotals(
        calories=goals.calorie_target - totals.calories,
        protein=goals.protein_target - totals.protein,
        fat=goals.fat_target - totals.fat,
        carbs=goals.carbs_target - totals.carbs,
    )


def add_food(
    log: DailyLog,
    meal_name: MealName,
    food_id: str,
    servings: float,
    now: datetime,
) -> tuple[DailyLog, LoggedFood]:
    logged = LoggedFood(food_id=food_id, servings=servings, logged_at=now)
    meals = [
        meal.model_copy(update={"foods": [*meal.foods, logged]}) if meal.name == meal_name else meal
        for meal in log.meals
    ]
    return log.model_copy(update={"meals": meals}), logged


def remove_food(log: DailyLog, meal_name: MealName, logged_food_id: str) -> DailyLog:
    meals = [
        meal.model_copy(update={"foods": [f for f in meal.foods if f.id != logged_food_id]})
        if meal.name == meal_name
        else meal
        for meal in log.meals
    ]
    return log.model_copy(update={"meals": meals})


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------


def merge_steps(log: DailyLog, steps: int) -> DailyLog:
    """Replace the day's steps. Last write wins; no reconciliation."""
    return log.model_copy(update={"steps": steps})


def compute_activity_totals(log: DailyLog, settings: Settings) -> ActivityTotals:
    """Distance, burn and move minutes estimated from the step count."""
    steps = float(log.steps)
    miles = steps / settings.steps_per_mile if settings.steps_per_mile > 0 else 0.0
    move = steps / settings.steps_per_move_minute if settings.steps_per_move_minute > 0 else 0.0
    return ActivityTotals(
        steps=steps,
        miles=_round_half_up(miles, 1),
        calories_burned=_round_half_up(steps * settings.steps_to_kcal),
        move_minutes=_round_half_up(move),
    )


def compute_activity_remaining(totals: ActivityTotals, goals: UserGoals) -> ActivityTotals:
    return ActivityTotals(
        steps=goals.step_target - totals.steps,
        miles=round(goals.miles_target - totals.miles, 1),
        calories_burned=goals.calories_burned_target - totals.calories_burned,
        move_minutes=goals.move_minutes_target - totals.move_minutes,
    )


# ---------------------------------------------------------------------------
# Weekly goal rings
# ---------------------------------------------------------------------------


def _pct(value: float, target: float) -> float:
    if target == 0:
        return 0.0
    return value / target * 100.0


def compute_weekly_achievement(
    logs: list[DailyLog],
    goals: UserGoals,
    catalog: FoodCatalog,
    window_end: date,
    window_size: int = 7,
) -> WeeklyAchievement:
    """One entry per day for `window_size` days ending at `window_end`, oldest first.

    A day is achieved when both calories eaten and steps reach their targets.
    Days with no log count as zero.
    """
    days: list[DayAchievement] = []
    for offset in range(window_size - 1, -1, -1):
        day = window_end - timedelta(days=offset)
        log = find_log(logs, day)
        calories = _sum_macros(log, catalog).calories if log else 0.0
        steps = log.steps if log else 0
        calorie_pct = _pct(calories, goals.calorie_target)
        step_pct = _pct(steps, goals.step_target)
        days.append(
            DayAchievement(
                date=day,
                day=day.strftime("%a")[0],
                calorie_pct=calorie_pct,
                step_pct=step_pct,
                achieved=calorie_pct >= 100.0 and step_pct >= 100.0,
            )
        )
    return WeeklyAchievement(days=days, achieved_count=sum(1 for d in days if d.achieved))


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class DailyLogRepository:
    def __init__(self, ctx: TrackerContext):
        self._ctx = ctx

    async def list_logs(self) -> list[DailyLog]:
        raw = await self._ctx.store.get(LOGS_TABLE, [])
        return [DailyLog.model_validate(log) for log in raw]

    async def get_log_for_date(self, target_date: date) -> DailyLog:
        """Stored log for the date, or an empty one that is not written back."""
        return find_log(await self.list_logs(), target_date) or empty_log(target_date)

    async def get_today(self) -> DailyLog:
        return await self.get_log_for_date(self._ctx.today())

    async def _put(self, log: DailyLog) -> DailyLog:
        logs = await self.list_logs()
        for i, existing in enumerate(logs):
            if existing.date == log.date:
                logs[i] = log
                break
        else:
            logs.append(log)
        await self._ctx.store.set(LOGS_TABLE, [entry.model_dump(mode="json") for entry in logs])
        return log

    async def upsert_log(self, log: DailyLog) -> DailyLog:
        """Replace the log with the same date, or append. The whole value is written."""
        async with self._ctx.store.lock:
            return await self._put(log)

    async def update_log(self, target_date: date, edit: Callable[[DailyLog], DailyLog]) -> DailyLog:
        """Apply `edit` to the date's log (synthesized if absent) and store the result."""
        async with self._ctx.store.lock:
            return await self._put(edit(await self.get_log_for_date(target_date)))
