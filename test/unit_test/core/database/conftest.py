"""Test configuration for database unit tests.

This module provides common fixtures and utilities for testing the
centralized database layer with in-memory SQLite.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from edustack.core.database import create_all, create_sessionmaker, utc_now
from edustack.core.database.entities.categories import Category
from edustack.core.database.entities.courses import Course, Lesson, Section
from edustack.core.database.entities.users import Tutor, User
from edustack.core.models.domain.enums import CourseStatus


@pytest.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest.fixture
async def tutor(in_memory_session) -> Tutor:
    user = User(
        email="ada@example.com",
        username="ada",
        first_name="Ada",
        last_name="Lovelace",
        password_hash="x",
    )
    user.tutor_profile = Tutor()
    in_memory_session.add(user)
    await in_memory_session.commit()
    return user.tutor_profile


@pytest.fixture
async def category(in_memory_session) -> Category:
    category = Category(name="Programming", slug="programming")
    in_memory_session.add(category)
    await in_memory_session.commit()
    return category


@pytest.fixture
def add_course(in_memory_session, tutor, category):
    """Factory persisting a course with a single section of two lessons."""

    async def _add(title: str, published: bool = True, **fields) -> Course:
        course = Course(
            title=title,
            slug=fields.pop("slug", title.lower().replace(" ", "-")),
            description=fields.pop("description", f"All about {title}"),
            tutor_id=tutor.id,
            category_id=category.id,
            status=CourseStatus.PUBLISHED if published else CourseStatus.DRAFT,
            is_published=published,
            published_at=utc_now() if published else None,
            **fields,
        )
        section = Section(title="Intro")
        section.lessons = [
            Lesson(title="One", video_duration=120, sort_order=0),
            Lesson(title="Two", video_duration=240, sort_order=1),
        ]
        course.sections = [section]
        in_memory_session.add(course)
        await in_memory_session.commit()
        return course

    return _add
