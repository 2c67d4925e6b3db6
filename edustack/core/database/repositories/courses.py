"""
Course, section and lesson repositories.

``CourseRepository.search_published`` implements the public catalog query:
filtering, case-insensitive search, tag matching, ordering and pagination.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from edustack.core.models.domain.enums import CourseLevel, CourseSortField, CourseStatus

from ..entities.courses import Course, Lesson, Section
from ..entities.enrollments import Enrollment
from ..entities.users import Tutor
from .base import AsyncBaseRepository, AsyncQueryBuilder, Page

SORT_COLUMNS = {
    CourseSortField.createdAt: Course.created_at,
    CourseSortField.title: Course.title,
    CourseSortField.price: Course.price,
    CourseSortField.rating: Course.average_rating,
    CourseSortField.enrollments: Course.total_enrollments,
}


@dataclass
class CourseFilters:
    """Catalog filters; ``None`` or empty values are ignored."""

    category_id: Optional[str] = None
    level: Optional[CourseLevel] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    language: Optional[str] = None
    search: Optional[str] = None
    tags: List[str] = field(default_factory=list)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` only matches itself (escape character ``\\``)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _json_list_contains(column, value: str):
    """Portable membership test for a JSON array of strings."""
    encoded = json.dumps(value)
    return cast(column, String).like(f"%{escape_like(encoded)}%", escape="\\")


LISTING_OPTIONS = (
    selectinload(Course.tutor).selectinload(Tutor.user),
    selectinload(Course.category),
    selectinload(Course.sections),
)


def _with_listing_relations(stmt):
    return stmt.options(*LISTING_OPTIONS).execution_options(populate_existing=True)


class CourseRepository(AsyncBaseRepository[Course]):
    """Repository for courses."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Course)

    async def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(func.count()).select_from(Course).where(Course.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Course.id != exclude_id)
        return (await self.session.execute(stmt)).scalar_one() > 0

    async def get_detail(self, course_id: str) -> Optional[Course]:
        """A course with tutor (and user), category, sections and lessons loaded."""
        stmt = (
            select(Course)
            .where(Course.id == course_id)
            .options(
                selectinload(Course.tutor).selectinload(Tutor.user),
                selectinload(Course.category),
                selectinload(Course.sections).selectinload(Section.lessons),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_published(self, course_id: str) -> Optional[Course]:
        stmt = select(Course).where(
            Course.id == course_id,
            Course.is_published.is_(True),
            Course.status == CourseStatus.PUBLISHED,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def search_published(
        self,
        filters: CourseFilters,
        sort_by: CourseSortField,
        descending: bool,
        page: int,
        limit: int,
    ) -> Page[Course]:
        """Published courses matching ``filters``, one page at a time."""
        stmt = select(Course).where(Course.is_published.is_(True), Course.status == CourseStatus.PUBLISHED)
        stmt = AsyncQueryBuilder.apply_filters(
            stmt,
            Course,
            {"category_id": filters.category_id, "level": filters.level, "language": filters.language},
        )
        if filters.min_price is not None:
            stmt = stmt.where(Course.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(Course.price <= filters.max_price)
        if filters.search:
            term = f"%{escape_like(filters.search)}%"
            stmt = stmt.where(
                or_(
                    Course.title.ilike(term, escape="\\"),
                    Course.description.ilike(term, escape="\\"),
                    _json_list_contains(Course.tags, filters.search),
                )
            )
        if filters.tags:
            stmt = stmt.where(or_(*[_json_list_contains(Course.tags, tag) for tag in filters.tags]))

        stmt = AsyncQueryBuilder.apply_ordering(stmt, [SORT_COLUMNS[sort_by], Course.id], descending)
        return await self.paginate(stmt, page, limit, LISTING_OPTIONS)

    async def list_for_tutor(self, tutor_id: str, limit: Optional[int] = None) -> List[Course]:
        """A tutor's courses, most recently updated first."""
        stmt = _with_listing_relations(
            select(Course).where(Course.tutor_id == tutor_id).order_by(Course.updated_at.desc())
        )
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, None)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def latest_published_in_category(self, category_id: str, limit: int = 10) -> List[Course]:
        stmt = _with_listing_relations(
            select(Course)
            .where(
                Course.category_id == category_id,
                Course.is_published.is_(True),
                Course.status == CourseStatus.PUBLISHED,
            )
            .order_by(Course.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def top_for_tutor(self, tutor_id: str, limit: int = 5) -> List[Course]:
        stmt = (
            select(Course)
            .where(Course.tutor_id == tutor_id)
            .order_by(Course.total_enrollments.desc(), Course.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def ids_for_tutor(self, tutor_id: str) -> List[str]:
        result = await self.session.execute(select(Course.id).where(Course.tutor_id == tutor_id))
        return list(result.scalars().all())

    async def has_enrollments(self, course_id: str) -> bool:
        stmt = select(func.count()).select_from(Enrollment).where(Enrollment.course_id == course_id)
        return (await self.session.execute(stmt)).scalar_one() > 0

    async def count_sections(self, course_id: str) -> int:
        stmt = select(func.count()).select_from(Section).where(Section.course_id == course_id)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_lessons(self, course_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Lesson)
            .join(Section, Lesson.section_id == Section.id)
            .where(Section.course_id == course_id)
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def active_lesson_ids(self, course_id: str) -> List[str]:
        """Ids of active lessons inside active sections of the course."""
        stmt = (
            select(Lesson.id)
            .join(Section, Lesson.section_id == Section.id)
            .where(Section.course_id == course_id, Section.is_active.is_(True), Lesson.is_active.is_(True))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def active_video_seconds(self, course_id: str) -> int:
        stmt = (
            select(func.coalesce(func.sum(Lesson.video_duration), 0))
            .join(Section, Lesson.section_id == Section.id)
            .where(Section.course_id == course_id, Section.is_active.is_(True), Lesson.is_active.is_(True))
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_published(self, since: Optional[datetime] = None) -> int:
        stmt = select(func.count()).select_from(Course).where(Course.status == CourseStatus.PUBLISHED)
        if since is not None:
            stmt = stmt.where(Course.created_at >= since)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_by_status(self, since: Optional[datetime] = None) -> Dict[str, int]:
        stmt = select(Course.status, func.count()).group_by(Course.status)
        if since is not None:
            stmt = stmt.where(Course.created_at >= since)
        result = await self.session.execute(stmt)
        return {CourseStatus(status).value: count for status, count in result.all()}

    async def tutor_rating_summary(self, tutor_id: str) -> Dict[str, float]:
        stmt = select(func.count(), func.coalesce(func.avg(Course.average_rating), 0)).where(
            Course.tutor_id == tutor_id
        )
        total, average = (await self.session.execute(stmt)).one()
        return {"totalCourses": total, "averageRating": round(float(average), 2)}


class SectionRepository(AsyncBaseRepository[Section]):
    """Repository for course sections."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Section)

    async def get_in_course(self, course_id: str, section_id: str, with_lessons: bool = False) -> Optional[Section]:
        stmt = select(Section).where(Section.id == section_id, Section.course_id == course_id)
        if with_lessons:
            stmt = stmt.options(selectinload(Section.lessons)).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class LessonRepository(AsyncBaseRepository[Lesson]):
    """Repository for lessons."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Lesson)

    async def get_in_course(self, course_id: str, lesson_id: str) -> Optional[Lesson]:
        """The lesson only if it belongs to a section of ``course_id``."""
        stmt = (
            select(Lesson)
            .join(Section, Lesson.section_id == Section.id)
            .where(Lesson.id == lesson_id, Section.course_id == course_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_course(self, course_id: str) -> List[Lesson]:
        stmt = (
            select(Lesson)
            .join(Section, Lesson.section_id == Section.id)
            .where(Section.course_id == course_id)
            .order_by(Section.sort_order, Lesson.sort_order)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
