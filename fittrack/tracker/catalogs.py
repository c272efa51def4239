"""Reference catalogs — built-in exercise and food tables, lookup only.

Users may append custom foods; those are stored per user and searched after
the built-in table. Lookups return the first match and never raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fittrack.tracker.models import Exercise, FoodItem
from fittrack.tracker.store import UserStore

FOODS_TABLE = "foods"


EXERCISES: dict[str, Exercise] = {
    e.id: e
    for e in [
        Exercise(id="chest_1", name="Incline Dumbbell Press", muscle_group="Chest"),
        Exercise(id="chest_2", name="Cable Fly", muscle_group="Chest"),
        Exercise(id="chest_3", name="Dips", muscle_group="Chest"),
        Exercise(id="chest_4", name="Bench Press", muscle_group="Chest"),
        Exercise(id="back_1", name="Deadlift", muscle_group="Back"),
        Exercise(id="back_2", name="Pull Up", muscle_group="Back"),
        Exercise(id="back_3", name="Barbell Row", muscle_group="Back"),
        Exercise(id="back_4", name="Lat Pulldown", muscle_group="Back"),
        Exercise(id="legs_1", name="Back Squat", muscle_group="Legs"),
        Exercise(id="legs_2", name="Romanian Deadlift", muscle_group="Legs"),
        Exercise(id="legs_3", name="Leg Press", muscle_group="Legs"),
        Exercise(id="legs_4", name="Walking Lunge", muscle_group="Legs"),
        Exercise(id="shoulders_1", name="Overhead Press", muscle_group="Shoulders"),
        Exercise(id="shoulders_2", name="Lateral Raise", muscle_group="Shoulders"),
        Exercise(id="arms_1", name="Barbell Curl", muscle_group="Arms"),
        Exercise(id="arms_2", name="Triceps Pushdown", muscle_group="Arms"),
    ]
}

FOODS: list[FoodItem] = [
    FoodItem(id="food_1", name="Chicken Breast", calories=165, protein=31, fat=3.6, carbs=0, serving_size="100g"),
    FoodItem(id="food_2", name="White Rice", calories=130, protein=2.7, fat=0.3, carbs=28, serving_size="100g"),
    FoodItem(id="food_3", name="Whole Egg", calories=72, protein=6.3, fat=4.8, carbs=0.4, serving_size="1 large"),
    FoodItem(id="food_4", name="Rolled Oats", calories=150, protein=5, fat=2.5, carbs=27, serving_size="40g"),
    FoodItem(id="food_5", name="Banana", calories=105, protein=1.3, fat=0.4, carbs=27, serving_size="1 medium"),
    FoodItem(id="food_6", name="Greek Yogurt", calories=100, protein=17, fat=0.7, carbs=6, serving_size="170g"),
    FoodItem(id="food_7", name="Salmon", calories=208, protein=20, fat=13, carbs=0, serving_size="100g"),
    FoodItem(id="food_8", name="Almonds", calories=164, protein=6, fat=14, carbs=6, serving_size="28g"),
    FoodItem(id="food_9", name="Whey Protein", calories=120, protein=24, fat=1.5, carbs=3, serving_size="1 scoop"),
    FoodItem(id="food_10", name="Broccoli", calories=55, protein=3.7, fat=0.6, carbs=11, serving_size="1 cup"),
]


def lookup_exercise(exercise_id: str) -> Exercise | None:
    return EXERCISES.get(exercise_id)


def list_exercises() -> list[Exercise]:
    return list(EXERCISES.values())


@dataclass(slots=True)
class FoodCatalog:
    """Built-in foods followed by the user's custom foods."""

    custom: list[FoodItem] = field(default_factory=list)

    def list_foods(self) -> list[FoodItem]:
        return FOODS + self.custom

    def lookup_food(self, food_id: str) -> FoodItem | None:
        for food in self.list_foods():
            if food.id == food_id:
                return food
        return None


async def load_food_catalog(store: UserStore) -> FoodCatalog:
    raw = await store.get(FOODS_TABLE, [])
    return FoodCatalog(custom=[FoodItem.model_validate(f) for f in raw])


async def add_custom_food(store: UserStore, food: FoodItem) -> FoodItem:
    """Append a custom food. Ids are not checked for uniqueness."""
    custom = food.model_copy(update={"is_custom": True})
    async with store.lock:
        raw = await store.get(FOODS_TABLE, [])
        raw.append(custom.model_dump(mode="json"))
        await store.set(FOODS_TABLE, raw)
    return custom
