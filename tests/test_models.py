"""Tests for tracker record models."""

from datetime import date

import pytest
from pydantic import ValidationError

from fittrack.tracker.models import (
    DailyLog,
    LoggedFood,
    Meal,
    Session,
    SessionStatus,
    SetEntry,
    UserGoals,
    UserProfile,
    WeightUnit,
)


class TestSetEntry:
    def test_defaults(self):
        s = SetEntry()
        assert (s.reps, s.weight, s.volume) == (0, 0, 0)
        assert s.id

    def test_volume_is_derived(self):
        assert SetEntry(reps=8, weight=80).volume == 640

    def test_incoming_volume_is_ignored(self):
        s = SetEntry.model_validate({"reps": 5, "weight": 20, "volume": 999})
        assert s.volume == 100

    def test_volume_is_serialized(self):
        assert SetEntry(reps=2, weight=10).model_dump()["volume"] == 20

    def test_negative_reps_rejected(self):
        with pytest.raises(ValidationError):
            SetEntry(reps=-1)


class TestDailyLog:
    def test_four_fixed_meals_by_default(self):
        log = DailyLog(date=date(2024, 5, 6))
        assert [m.name for m in log.meals] == ["Breakfast", "Lunch", "Dinner", "Snacks"]
        assert log.steps == 0

    def test_meals_are_normalised(self):
        food = LoggedFood(food_id="food_1", servings=1)
        log = DailyLog(date=date(2024, 5, 6), meals=[Meal(name="Snacks", foods=[food])])
        assert [m.name for m in log.meals] == ["Breakfast", "Lunch", "Dinner", "Snacks"]
        assert log.meals[3].foods == [food]

    def test_servings_must_be_positive(self):
        with pytest.raises(ValidationError):
            LoggedFood(food_id="food_1", servings=0)

    def test_negative_steps_rejected(self):
        with pytest.raises(ValidationError):
            DailyLog(date=date(2024, 5, 6), steps=-5)


class TestSessionSerialization:
    def test_roundtrip_json(self):
        session = Session(date=date(2024, 5, 6), template_id="t", unit=WeightUnit.lbs)
        data = session.model_dump(mode="json")
        assert data["status"] == "in-progress"
        assert data["unit"] == "lbs"
        assert data["date"] == "2024-05-06"
        assert Session.model_validate(data) == session

    def test_status_values(self):
        assert SessionStatus("completed") == SessionStatus.completed


class TestProfileDefaults:
    def test_goal_defaults(self):
        goals = UserProfile().goals
        assert goals == UserGoals()
        assert goals.step_target == 10000.0
        assert goals.calorie_target == 2000.0
