"""
Enrollment, progress and certificate repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import Integer, cast, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from edustack.core.models.domain.enums import EnrollmentStatus

from ..entities.courses import Course, Section
from ..entities.enrollments import Certificate, Enrollment, Progress
from ..entities.users import Tutor
from .base import AsyncBaseRepository, Page

_COURSE_CARD = selectinload(Enrollment.course).selectinload(Course.tutor).selectinload(Tutor.user)
_LISTING = (
    _COURSE_CARD,
    selectinload(Enrollment.course).selectinload(Course.category),
    selectinload(Enrollment.course).selectinload(Course.sections),
    selectinload(Enrollment.certificate),
)


class EnrollmentRepository(AsyncBaseRepository[Enrollment]):
    """Repository for enrollments."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Enrollment)

    async def get_for(self, student_id: str, course_id: str) -> Optional[Enrollment]:
        stmt = select(Enrollment).where(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_detail(self, student_id: str, course_id: str) -> Optional[Enrollment]:
        """An enrollment with the course outline and certificate loaded."""
        stmt = (
            select(Enrollment)
            .where(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
            .options(
                _COURSE_CARD,
                selectinload(Enrollment.course).selectinload(Course.sections).selectinload(Section.lessons),
                selectinload(Enrollment.course).selectinload(Course.category),
                selectinload(Enrollment.certificate),
                selectinload(Enrollment.progress_records).selectinload(Progress.lesson),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_card(self, student_id: str, course_id: str) -> Optional[Enrollment]:
        """An enrollment with the course card (tutor, category, sections) loaded."""
        stmt = (
            select(Enrollment)
            .where(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
            .options(*_LISTING)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_student(
        self, student_id: str, status: Optional[EnrollmentStatus], page: int, limit: int
    ) -> Page[Enrollment]:
        stmt = select(Enrollment).where(Enrollment.student_id == student_id)
        if status is not None:
            stmt = stmt.where(Enrollment.status == status)
        stmt = stmt.order_by(Enrollment.enrolled_at.desc(), Enrollment.id)
        return await self.paginate(stmt, page, limit, _LISTING)

    async def recent_for_student(self, student_id: str, limit: int = 5) -> List[Enrollment]:
        """Most recently accessed enrollments (never accessed ones last)."""
        stmt = (
            select(Enrollment)
            .where(Enrollment.student_id == student_id)
            .options(_COURSE_CARD)
            .order_by(Enrollment.last_accessed_at.desc().nulls_last(), Enrollment.enrolled_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_course(self, course_id: str, page: int, limit: int) -> Page[Enrollment]:
        stmt = select(Enrollment).where(Enrollment.course_id == course_id).order_by(Enrollment.enrolled_at.desc())
        return await self.paginate(stmt, page, limit, (selectinload(Enrollment.student),))

    async def recent_for_courses(self, course_ids: Sequence[str], limit: int = 10) -> List[Enrollment]:
        if not course_ids:
            return []
        stmt = (
            select(Enrollment)
            .where(Enrollment.course_id.in_(list(course_ids)))
            .options(selectinload(Enrollment.student), selectinload(Enrollment.course))
            .order_by(Enrollment.enrolled_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_courses(self, course_ids: Sequence[str], since: Optional[datetime] = None) -> int:
        if not course_ids:
            return 0
        stmt = select(func.count()).select_from(Enrollment).where(Enrollment.course_id.in_(list(course_ids)))
        if since is not None:
            stmt = stmt.where(Enrollment.enrolled_at >= since)
        return (await self.session.execute(stmt)).scalar_one()

    async def course_summary(self, course_id: str) -> Dict[str, float]:
        """Enrollment count, completed count and mean progress for one course."""
        completed = func.sum(cast(Enrollment.status == EnrollmentStatus.COMPLETED, Integer))
        stmt = select(
            func.count(),
            func.coalesce(completed, 0),
            func.coalesce(func.avg(Enrollment.progress), 0),
        ).where(Enrollment.course_id == course_id)
        total, done, average = (await self.session.execute(stmt)).one()
        return {"total": total, "completed": int(done), "averageProgress": float(average)}

    async def daily_enrollments(self, course_id: str, since: datetime) -> List[Tuple[str, int]]:
        day = func.date(Enrollment.enrolled_at)
        stmt = (
            select(day, func.count())
            .where(Enrollment.course_id == course_id, Enrollment.enrolled_at >= since)
            .group_by(day)
            .order_by(day)
        )
        result = await self.session.execute(stmt)
        return [(str(row[0]), row[1]) for row in result.all()]


class ProgressRepository(AsyncBaseRepository[Progress]):
    """Repository for lesson progress."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Progress)

    async def get_for(self, student_id: str, lesson_id: str) -> Optional[Progress]:
        stmt = select(Progress).where(Progress.student_id == student_id, Progress.lesson_id == lesson_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_completed(self, student_id: str, lesson_ids: Sequence[str]) -> int:
        if not lesson_ids:
            return 0
        stmt = (
            select(func.count())
            .select_from(Progress)
            .where(
                Progress.student_id == student_id,
                Progress.is_completed.is_(True),
                Progress.lesson_id.in_(list(lesson_ids)),
            )
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def list_for_enrollment(self, enrollment_id: str) -> List[Progress]:
        result = await self.session.execute(select(Progress).where(Progress.enrollment_id == enrollment_id))
        return list(result.scalars().all())

    async def recent_for_student(self, student_id: str, limit: int = 10) -> List[Progress]:
        stmt = (
            select(Progress)
            .where(Progress.student_id == student_id)
            .options(selectinload(Progress.lesson))
            .order_by(Progress.updated_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_for_enrollment(self, enrollment_id: str) -> None:
        await self.session.execute(delete(Progress).where(Progress.enrollment_id == enrollment_id))

    async def delete_for_lessons(self, lesson_ids: Sequence[str]) -> None:
        if lesson_ids:
            await self.session.execute(delete(Progress).where(Progress.lesson_id.in_(list(lesson_ids))))

    async def lesson_statistics(self, lesson_ids: Sequence[str]) -> Dict[str, Dict[str, float]]:
        """Views, completions and mean time spent per lesson id."""
        if not lesson_ids:
            return {}
        completed = func.sum(cast(Progress.is_completed, Integer))
        stmt = (
            select(
                Progress.lesson_id,
                func.count(),
                func.coalesce(completed, 0),
                func.coalesce(func.avg(Progress.time_spent), 0),
            )
            .where(Progress.lesson_id.in_(list(lesson_ids)))
            .group_by(Progress.lesson_id)
        )
        result = await self.session.execute(stmt)
        return {
            lesson_id: {"views": views, "completed": int(done), "averageTimeSpent": float(avg_time)}
            for lesson_id, views, done, avg_time in result.all()
        }


class CertificateRepository(AsyncBaseRepository[Certificate]):
    """Repository for course completion certificates."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Certificate)

    async def get_for_enrollment(self, enrollment_id: str) -> Optional[Certificate]:
        result = await self.session.execute(select(Certificate).where(Certificate.enrollment_id == enrollment_id))
        return result.scalar_one_or_none()

    async def recent_for_student(self, student_id: str, limit: int = 5) -> List[Certificate]:
        stmt = (
            select(Certificate)
            .where(Certificate.student_id == student_id)
            .options(selectinload(Certificate.course))
            .order_by(Certificate.issued_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
