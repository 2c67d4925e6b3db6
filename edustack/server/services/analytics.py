"""
Analytics and dashboards.

Reports are plain JSON-ready dictionaries assembled from repository
aggregates. ``timeframe`` selects the look-back window (7d, 30d, 90d, 1y);
unknown values fall back to 30 days.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from edustack.core.database.base import utc_now
from edustack.core.database.entities.enrollments import Enrollment
from edustack.core.database.entities.users import User
from edustack.core.database.repositories.categories import CategoryRepository
from edustack.core.database.repositories.courses import CourseRepository, LessonRepository
from edustack.core.database.repositories.enrollments import (
    CertificateRepository,
    EnrollmentRepository,
    ProgressRepository,
)
from edustack.core.database.repositories.payments import PaymentRepository
from edustack.core.database.repositories.reviews import ReviewRepository
from edustack.core.database.repositories.users import UserRepository
from edustack.core.errors import ForbiddenError, NotFoundError
from edustack.core.models.io.courses import CourseBrief, CourseSummary
from edustack.core.models.io.enrollments import CertificateRead, CourseStudentRead, EnrollmentRead, ProgressRead
from edustack.core.models.io.reviews import ReviewRead
from edustack.core.models.io.users import AdminRead, StudentRead, TutorRead
from edustack.server.core.constant import DEFAULT_TIMEFRAME, TIMEFRAME_DAYS

from .courses import is_admin, owns_course


def resolve_timeframe(timeframe: Optional[str]) -> Tuple[str, datetime]:
    """Normalized timeframe label and the start of its window."""
    if timeframe not in TIMEFRAME_DAYS:
        timeframe = DEFAULT_TIMEFRAME
    return timeframe, utc_now() - timedelta(days=TIMEFRAME_DAYS[timeframe])


def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def _daily(rows: List[Tuple[str, int]]) -> List[Dict[str, Any]]:
    return [{"date": day, "count": count} for day, count in rows]


def _tutor_enrollment(enrollment: Enrollment) -> Dict[str, Any]:
    data = _dump(CourseStudentRead.model_validate(enrollment))
    data["course"] = _dump(CourseBrief.model_validate(enrollment.course)) if enrollment.course else None
    return data


class AnalyticsService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.courses = CourseRepository(session)
        self.enrollments = EnrollmentRepository(session)
        self.payments = PaymentRepository(session)
        self.reviews = ReviewRepository(session)

    async def overview(self, timeframe: Optional[str]) -> Dict[str, Any]:
        """Platform-wide totals and growth for admins."""
        timeframe, since = resolve_timeframe(timeframe)
        top = await CategoryRepository(self.session).top_by_published_courses(limit=5)
        return {
            "overview": {
                "totalUsers": await self.users.count(),
                "totalCourses": await self.courses.count_published(),
                "totalRevenue": await self.payments.completed_revenue(),
                "newUsersInPeriod": await self.users.count(since=since),
                "newCoursesInPeriod": await self.courses.count_published(since=since),
                "revenueInPeriod": await self.payments.completed_revenue(since=since),
            },
            "topCategories": [
                {"id": category.id, "name": category.name, "slug": category.slug, "courseCount": count}
                for category, count in top
            ],
            "userGrowth": _daily(await self.users.daily_signups(since)),
            "courseStats": [
                {"status": status, "count": count} for status, count in (await self.courses.count_by_status()).items()
            ],
            "timeframe": timeframe,
        }

    async def tutor_report(self, user: User, timeframe: Optional[str]) -> Dict[str, Any]:
        timeframe, since = resolve_timeframe(timeframe)
        tutor_id = user.tutor_profile.id
        course_ids = await self.courses.ids_for_tutor(tutor_id)
        reviews = await self.reviews.rating_summary(course_ids, since=since)
        top_courses = await self.courses.top_for_tutor(tutor_id, limit=5)
        recent = await self.enrollments.recent_for_courses(course_ids, limit=10)
        return {
            "courseStats": await self.courses.tutor_rating_summary(tutor_id),
            "enrollmentStats": {"newEnrollments": await self.enrollments.count_for_courses(course_ids, since=since)},
            "revenueStats": {"totalRevenue": await self.payments.completed_revenue(course_ids, since=since)},
            "reviewStats": {"newReviews": reviews["totalReviews"], "averageRating": reviews["averageRating"]},
            "topCourses": [
                {
                    **_dump(CourseBrief.model_validate(course)),
                    "totalEnrollments": course.total_enrollments,
                    "averageRating": course.average_rating,
                }
                for course in top_courses
            ],
            "recentEnrollments": [_tutor_enrollment(enrollment) for enrollment in recent],
            "timeframe": timeframe,
        }

    async def course_report(self, user: User, course_id: str, timeframe: Optional[str]) -> Dict[str, Any]:
        """Enrollment, completion, review and per-lesson statistics for one course."""
        timeframe, since = resolve_timeframe(timeframe)
        course = await self.courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        if not (owns_course(user, course) or is_admin(user)):
            raise ForbiddenError("Access denied")

        summary = await self.enrollments.course_summary(course.id)
        total = summary["total"]
        reviews = await self.reviews.rating_summary([course.id])
        lessons = await LessonRepository(self.session).list_for_course(course.id)
        lesson_stats = await ProgressRepository(self.session).lesson_statistics([lesson.id for lesson in lessons])

        lesson_analytics = []
        for lesson in lessons:
            stats = lesson_stats.get(lesson.id, {"views": 0, "completed": 0, "averageTimeSpent": 0.0})
            lesson_analytics.append(
                {
                    "lessonId": lesson.id,
                    "title": lesson.title,
                    "completionRate": stats["completed"] / total * 100 if total else 0.0,
                    "totalViews": stats["views"],
                    "averageTimeSpent": stats["averageTimeSpent"],
                }
            )

        return {
            "course": {"id": course.id, "title": course.title, "thumbnail": course.thumbnail},
            "enrollmentStats": {
                "total": total,
                "completed": summary["completed"],
                "completionRate": summary["completed"] / total * 100 if total else 0.0,
            },
            "progressStats": {"averageProgress": summary["averageProgress"]},
            "reviewStats": {"total": reviews["totalReviews"], "averageRating": reviews["averageRating"]},
            "enrollmentTrend": _daily(await self.enrollments.daily_enrollments(course.id, since)),
            "lessonAnalytics": lesson_analytics,
            "timeframe": timeframe,
        }

    async def dashboard(self, user: User) -> Dict[str, Any]:
        """Role-specific dashboard. Admin wins over tutor, tutor over student."""
        if user.admin_profile is not None:
            return await self._admin_dashboard(user)
        if user.tutor_profile is not None:
            return await self._tutor_dashboard(user)
        if user.student_profile is not None:
            return await self._student_dashboard(user)
        return {}

    async def _student_dashboard(self, user: User) -> Dict[str, Any]:
        enrollments = await self.enrollments.recent_for_student(user.id, limit=5)
        progress = await ProgressRepository(self.session).recent_for_student(user.id, limit=10)
        certificates = await CertificateRepository(self.session).recent_for_student(user.id, limit=5)
        return {
            "type": "student",
            "enrollments": [_dump(EnrollmentRead.model_validate(enrollment)) for enrollment in enrollments],
            "recentProgress": [_dump(ProgressRead.model_validate(record)) for record in progress],
            "certificates": [_dump(CertificateRead.model_validate(certificate)) for certificate in certificates],
            "stats": _dump(StudentRead.model_validate(user.student_profile)),
        }

    async def _tutor_dashboard(self, user: User) -> Dict[str, Any]:
        tutor_id = user.tutor_profile.id
        course_ids = await self.courses.ids_for_tutor(tutor_id)
        courses = await self.courses.list_for_tutor(tutor_id, limit=5)
        recent = await self.enrollments.recent_for_courses(course_ids, limit=10)
        reviews = await self.reviews.latest_for_courses(course_ids, limit=5)
        return {
            "type": "tutor",
            "courses": [_dump(CourseSummary.model_validate(course)) for course in courses],
            "recentEnrollments": [_tutor_enrollment(enrollment) for enrollment in recent],
            "totalEarnings": await self.payments.completed_revenue(course_ids),
            "reviews": [_dump(ReviewRead.model_validate(review)) for review in reviews],
            "stats": _dump(TutorRead.model_validate(user.tutor_profile)),
        }

    async def _admin_dashboard(self, user: User) -> Dict[str, Any]:
        _, since = resolve_timeframe("30d")
        return {
            "type": "admin",
            "userStats": _daily(await self.users.daily_signups(since)),
            "courseStats": [
                {"status": status, "count": count} for status, count in (await self.courses.count_by_status()).items()
            ],
            "revenue": await self.payments.completed_revenue(since=since),
            "stats": _dump(AdminRead.model_validate(user.admin_profile)),
        }
