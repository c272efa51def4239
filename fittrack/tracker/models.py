"""Tracker records — Pydantic v2 models with explicit defaults."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, computed_field, field_validator


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DayOfWeek(str, Enum):
    sunday = "Sunday"
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"

    @classmethod
    def for_date(cls, day: date) -> DayOfWeek:
        # date.weekday(): Monday == 0
        return _WEEKDAYS[day.weekday()]


_WEEKDAYS = [
    DayOfWeek.monday,
    DayOfWeek.tuesday,
    DayOfWeek.wednesday,
    DayOfWeek.thursday,
    DayOfWeek.friday,
    DayOfWeek.saturday,
    DayOfWeek.sunday,
]


class WeightUnit(str, Enum):
    kg = "kg"
    lbs = "lbs"


class SessionStatus(str, Enum):
    in_progress = "in-progress"
    completed = "completed"


class MealName(str, Enum):
    breakfast = "Breakfast"
    lunch = "Lunch"
    dinner = "Dinner"
    snacks = "Snacks"


MEAL_ORDER: tuple[MealName, ...] = (
    MealName.breakfast,
    MealName.lunch,
    MealName.dinner,
    MealName.snacks,
)


# ---------------------------------------------------------------------------
# Reference catalog entries
# ---------------------------------------------------------------------------


class Exercise(BaseModel):
    id: str
    name: str
    muscle_group: str


class FoodItem(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    fat: float = Field(ge=0)
    carbs: float = Field(ge=0)
    serving_size: str = "1 serving"
    is_custom: bool = False


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


class TemplateExercise(BaseModel):
    exercise_id: str
    default_sets: int = Field(default=3, gt=0)
    default_reps: str = "8-12"


class WorkoutTemplate(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    day_of_week: DayOfWeek
    exercises: list[TemplateExercise] = Field(default_factory=list)


class SetEntry(BaseModel):
    """One logged set. `volume` is derived and cannot be set directly."""

    id: str = Field(default_factory=new_id)
    reps: int = Field(default=0, ge=0)
    weight: float = Field(default=0.0, ge=0)
    completed_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def volume(self) -> float:
        return self.reps * self.weight


class SessionExercise(BaseModel):
    id: str  # source exercise id
    name: str
    muscle_group: str
    sets: list[SetEntry] = Field(default_factory=list)


class Session(BaseModel):
    id: str = Field(default_factory=new_id)
    date: date
    template_id: str
    exercises: list[SessionExercise] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.in_progress
    total_volume: float | None = None
    unit: WeightUnit = WeightUnit.kg
    completed_at: datetime | None = None


class SetPatch(BaseModel):
    reps: int | None = Field(default=None, ge=0)
    weight: float | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Nutrition & activity
# ---------------------------------------------------------------------------


class LoggedFood(BaseModel):
    id: str = Field(default_factory=new_id)
    food_id: str
    servings: float = Field(gt=0)
    logged_at: datetime = Field(default_factory=utc_now)


class Meal(BaseModel):
    name: MealName
    foods: list[LoggedFood] = Field(default_factory=list)


def default_meals() -> list[Meal]:
    return [Meal(name=name) for name in MEAL_ORDER]


class DailyLog(BaseModel):
    """One calendar day of meals and steps. Always holds the four fixed meals."""

    date: date
    meals: list[Meal] = Field(default_factory=default_meals)
    steps: int = Field(default=0, ge=0)

    @field_validator("meals")
    @classmethod
    def _normalise_meals(cls, meals: list[Meal]) -> list[Meal]:
        by_name: dict[MealName, list[LoggedFood]] = {}
        for meal in meals:
            by_name.setdefault(meal.name, []).extend(meal.foods)
        return [Meal(name=name, foods=by_name.get(name, [])) for name in MEAL_ORDER]


class UserGoals(BaseModel):
    calorie_target: float = 2000.0
    protein_target: float = 150.0
    fat_target: float = 70.0
    carbs_target: float = 250.0
    step_target: float = 10000.0
    miles_target: float = 5.0
    calories_burned_target: float = 400.0
    move_minutes_target: float = 30.0


class UserProfile(BaseModel):
    name: str = ""
    goals: UserGoals = Field(default_factory=UserGoals)
    onboarding_completed: bool = False
    last_updated: datetime | None = None


class Preferences(BaseModel):
    unit: WeightUnit = WeightUnit.kg


# ---------------------------------------------------------------------------
# Rollups (derived, never persisted)
# ---------------------------------------------------------------------------


class NutritionTotals(BaseModel):
    calories: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0


class ActivityTotals(BaseModel):
    steps: float = 0.0
    miles: float = 0.0
    calories_burned: float = 0.0
    move_minutes: float = 0.0


class NutritionSummary(BaseModel):
    date: date
    consumed: NutritionTotals
    remaining: NutritionTotals
    goals: UserGoals


class ActivitySummary(BaseModel):
    date: date
    consumed: ActivityTotals
    remaining: ActivityTotals
    goals: UserGoals


class DayAchievement(BaseModel):
    date: date
    day: str  # weekday initial
    calorie_pct: float
    step_pct: float
    achieved: bool


class WeeklyAchievement(BaseModel):
    days: list[DayAchievement] = Field(default_factory=list)
    achieved_count: int = 0
