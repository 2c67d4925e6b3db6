"""Unit tests for the generic async repository and query helpers."""

import pytest
from sqlalchemy import select

from edustack.core.database.entities.categories import Category
from edustack.core.database.entities.courses import Course
from edustack.core.database.repositories.base import Page
from edustack.core.database.repositories.categories import CategoryRepository
from edustack.core.database.repositories.courses import CourseRepository


class TestPage:
    @pytest.mark.parametrize(
        "total,page,limit,pages,has_next,has_prev",
        [
            (0, 1, 10, 0, False, False),
            (10, 1, 10, 1, False, False),
            (11, 1, 10, 2, True, False),
            (25, 3, 10, 3, False, True),
        ],
    )
    def test_navigation(self, total, page, limit, pages, has_next, has_prev):
        result = Page(items=[], total=total, page=page, limit=limit)
        assert result.total_pages == pages
        assert result.has_next is has_next
        assert result.has_prev is has_prev


class TestAsyncBaseRepository:
    @pytest.mark.asyncio
    async def test_create_flushes_without_committing(self, in_memory_session):
        repo = CategoryRepository(in_memory_session)
        category = await repo.create(Category(name="Design", slug="design"))

        assert category.id
        assert await repo.get_by_id(category.id) is category

        await in_memory_session.rollback()
        assert await repo.get_by_id(category.id) is None

    @pytest.mark.asyncio
    async def test_update_applies_changes_and_touches_timestamp(self, in_memory_session, category):
        repo = CategoryRepository(in_memory_session)
        before = category.updated_at

        updated = await repo.update(category, {"name": "Software", "sort_order": 3})

        assert updated.name == "Software"
        assert updated.sort_order == 3
        assert updated.updated_at >= before

    @pytest.mark.asyncio
    async def test_delete(self, in_memory_session, category):
        repo = CategoryRepository(in_memory_session)
        await repo.delete(category)
        assert (await in_memory_session.execute(select(Category))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_list_with_filters_and_pagination(self, in_memory_session):
        repo = CategoryRepository(in_memory_session)
        for index, name in enumerate(["A", "B", "C"]):
            await repo.create(Category(name=name, slug=name.lower(), is_active=index != 1))

        active = await repo.list(filters={"is_active": True, "unknown_column": 1})
        assert sorted(category.name for category in active) == ["A", "C"]
        assert len(await repo.list(limit=2)) == 2
        assert len(await repo.list(limit=2, offset=2)) == 1

    @pytest.mark.asyncio
    async def test_paginate_counts_all_rows(self, in_memory_session, add_course):
        for title in ("Alpha", "Beta", "Gamma"):
            await add_course(title)
        repo = CourseRepository(in_memory_session)

        page = await repo.paginate(select(Course).order_by(Course.title), page=2, limit=2)

        assert page.total == 3
        assert [course.title for course in page.items] == ["Gamma"]
        assert page.has_prev and not page.has_next

    @pytest.mark.asyncio
    async def test_increment(self, in_memory_session, add_course):
        course = await add_course("Alpha")
        repo = CourseRepository(in_memory_session)

        await repo.increment(course.id, total_enrollments=2, total_revenue=19.5)
        await repo.increment(course.id, total_enrollments=-1)
        await repo.increment(course.id)

        refreshed = await in_memory_session.get(Course, course.id, populate_existing=True)
        assert refreshed.total_enrollments == 1
        assert refreshed.total_revenue == pytest.approx(19.5)
