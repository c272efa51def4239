"""User profile, goals, preferences and exercise ratings."""

from __future__ import annotations

from fittrack.tracker.context import TrackerContext
from fittrack.tracker.models import Preferences, UserGoals, UserProfile

PROFILE_TABLE = "profile"
PREFERENCES_TABLE = "preferences"
RATINGS_TABLE = "ratings"


def rate_exercise(ratings: dict[str, int], exercise_id: str, rating: int) -> dict[str, int]:
    """Return a new ratings mapping with `exercise_id` set to `rating`."""
    return {**ratings, exercise_id: rating}


class ProfileRepository:
    def __init__(self, ctx: TrackerContext):
        self._ctx = ctx

    async def get_profile(self) -> UserProfile:
        raw = await self._ctx.store.get(PROFILE_TABLE)
        return UserProfile.model_validate(raw) if raw else UserProfile()

    async def save_profile(self, profile: UserProfile) -> UserProfile:
        profile = profile.model_copy(update={"last_updated": self._ctx.now()})
        await self._ctx.store.set(PROFILE_TABLE, profile.model_dump(mode="json"))
        return profile

    async def get_goals(self) -> UserGoals:
        return (await self.get_profile()).goals

    async def get_preferences(self) -> Preferences:
        raw = await self._ctx.store.get(PREFERENCES_TABLE)
        if raw:
            return Preferences.model_validate(raw)
        return Preferences(unit=self._ctx.settings.default_weight_unit)

    async def save_preferences(self, prefs: Preferences) -> Preferences:
        await self._ctx.store.set(PREFERENCES_TABLE, prefs.model_dump(mode="json"))
        return prefs

    async def get_ratings(self) -> dict[str, int]:
        return dict(await self._ctx.store.get(RATINGS_TABLE, {}))

    async def rate(self, exercise_id: str, rating: int) -> dict[str, int]:
        async with self._ctx.store.lock:
            ratings = rate_exercise(await self.get_ratings(), exercise_id, rating)
            await self._ctx.store.set(RATINGS_TABLE, ratings)
        return ratings
