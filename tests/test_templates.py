"""Tests for template resolution and the template repository."""

from datetime import date

import pytest

from fittrack.tracker.models import DayOfWeek
from fittrack.tracker.templates import TemplateRepository, resolve_for_date
from tests.conftest import make_template


class TestDayOfWeek:
    def test_monday(self):
        assert DayOfWeek.for_date(date(2024, 5, 6)) == DayOfWeek.monday

    def test_sunday(self):
        assert DayOfWeek.for_date(date(2024, 5, 12)) == DayOfWeek.sunday

    def test_saturday(self):
        assert DayOfWeek.for_date(date(2024, 5, 11)) == DayOfWeek.saturday


class TestResolveForDate:
    def test_match(self):
        templates = [make_template("Tuesday", template_id="t"), make_template("Monday", template_id="m")]
        result = resolve_for_date(templates, date(2024, 5, 6))
        assert result is not None
        assert result.id == "m"

    def test_no_match(self):
        assert resolve_for_date([make_template("Friday")], date(2024, 5, 6)) is None

    def test_empty(self):
        assert resolve_for_date([], date(2024, 5, 6)) is None

    def test_first_match_wins_on_collision(self):
        templates = [
            make_template("Monday", template_id="first"),
            make_template("Monday", template_id="second"),
        ]
        assert resolve_for_date(templates, date(2024, 5, 6)).id == "first"


class TestTemplateRepository:
    @pytest.mark.asyncio
    async def test_empty_by_default(self, ctx):
        assert await TemplateRepository(ctx).list_templates() == []

    @pytest.mark.asyncio
    async def test_save_is_bulk_overwrite(self, ctx):
        repo = TemplateRepository(ctx)
        await repo.save([make_template("Monday", template_id="a"), make_template("Tuesday", template_id="b")])
        await repo.save([make_template("Friday", template_id="c")])
        assert [t.id for t in await repo.list_templates()] == ["c"]

    @pytest.mark.asyncio
    async def test_get_by_id(self, ctx):
        repo = TemplateRepository(ctx)
        await repo.save([make_template(template_id="a")])
        assert (await repo.get("a")).title == "Push"
        assert await repo.get("zzz") is None

    @pytest.mark.asyncio
    async def test_next_template_uses_today(self, ctx):
        repo = TemplateRepository(ctx)
        await repo.save([make_template("Tuesday", template_id="t"), make_template("Monday", template_id="m")])
        nxt = await repo.next_template()
        assert nxt is not None
        assert nxt.id == "m"

    @pytest.mark.asyncio
    async def test_dangling_exercise_reference_is_stored(self, ctx):
        repo = TemplateRepository(ctx)
        await repo.save([make_template(exercises=[("ghost", 2, "5")])])
        (tpl,) = await repo.list_templates()
        assert tpl.exercises[0].exercise_id == "ghost"
