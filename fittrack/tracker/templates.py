"""Template repository — weekly workout plans keyed by day of week."""

from __future__ import annotations

from datetime import date

from fittrack.tracker.context import TrackerContext
from fittrack.tracker.models import DayOfWeek, WorkoutTemplate

TEMPLATES_TABLE = "templates"


def resolve_for_date(templates: list[WorkoutTemplate], target_date: date) -> WorkoutTemplate | None:
    """First template, in stored order, planned for the weekday of `target_date`."""
    day = DayOfWeek.for_date(target_date)
    for template in templates:
        if template.day_of_week == day:
            return template
    return None


class TemplateRepository:
    def __init__(self, ctx: TrackerContext):
        self._ctx = ctx

    async def list_templates(self) -> list[WorkoutTemplate]:
        raw = await self._ctx.store.get(TEMPLATES_TABLE, [])
        return [WorkoutTemplate.model_validate(t) for t in raw]

    async def save(self, templates: list[WorkoutTemplate]) -> list[WorkoutTemplate]:
        """Replace the whole collection. Callers read-modify-write the full set."""
        await self._ctx.store.set(TEMPLATES_TABLE, [t.model_dump(mode="json") for t in templates])
        return templates

    async def get(self, template_id: str) -> WorkoutTemplate | None:
        for template in await self.list_templates():
            if template.id == template_id:
                return template
        return None

    async def resolve_for_date(self, target_date: date) -> WorkoutTemplate | None:
        return resolve_for_date(await self.list_templates(), target_date)

    async def next_template(self) -> WorkoutTemplate | None:
        return await self.resolve_for_date(self._ctx.today())
