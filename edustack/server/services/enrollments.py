"""
Enrollment and lesson-progress service.

``record_progress`` is the one multi-step write in the system: it upserts
the lesson progress row, recomputes the course percentage over the course's
active lessons, completes the enrollment and issues the certificate when the
percentage reaches 100, all in a single transaction. Notifications are
published only after the commit succeeds.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from edustack.core.database.base import utc_now
from edustack.core.database.entities.courses import Course
from edustack.core.database.entities.enrollments import Certificate, Enrollment, Progress
from edustack.core.database.entities.users import User
from edustack.core.database.repositories.base import Page
from edustack.core.database.repositories.courses import CourseRepository, LessonRepository
from edustack.core.database.repositories.enrollments import (
    CertificateRepository,
    EnrollmentRepository,
    ProgressRepository,
)
from edustack.core.database.repositories.users import StudentRepository, TutorRepository
from edustack.core.errors import BadRequestError, NotFoundError, PaymentRequiredError
from edustack.core.identifiers import certificate_number
from edustack.core.logging_config import get_logger
from edustack.core.models.domain.enums import EnrollmentStatus, NotificationEvent
from edustack.core.models.io.enrollments import EnrollmentDetail, EnrollmentRead, ProgressRead, ProgressResult, ProgressUpdate

from .notifications import NotificationHub

logger = get_logger(__name__)

ENROLLMENT_NOT_FOUND = "Enrollment not found"
ALREADY_ENROLLED = "Already enrolled in this course"


class EnrollmentService:
    """Enrollment operations for one student request."""

    def __init__(self, session: AsyncSession, hub: NotificationHub):
        self.session = session
        self.hub = hub
        self.courses = CourseRepository(session)
        self.enrollments = EnrollmentRepository(session)
        self.progress = ProgressRepository(session)
        self.students = StudentRepository(session)
        self.tutors = TutorRepository(session)

    async def admit(self, student_id: str, course: Course) -> Enrollment:
        """
        Create an ACTIVE enrollment and bump the enrollment counters.

        Flushes only; the caller commits. Shared by free enrollment and the
        payment webhook.
        """
        enrollment = await self.enrollments.create(
            Enrollment(student_id=student_id, course_id=course.id, status=EnrollmentStatus.ACTIVE)
        )
        await self.courses.increment(course.id, total_enrollments=1)
        await self.tutors.increment(course.tutor_id, total_students=1)
        await self.students.increment_for_user(student_id, total_courses_enrolled=1)
        return enrollment

    async def enroll(self, user: User, course_id: str) -> EnrollmentRead:
        """Enroll in a free course; paid courses answer 402 with the price."""
        course = await self.courses.get_published(course_id)
        if course is None:
            raise NotFoundError("Course not found or not available for enrollment")
        if await self.enrollments.get_for(user.id, course.id) is not None:
            raise BadRequestError(ALREADY_ENROLLED)
        if course.price > 0:
            raise PaymentRequiredError(
                "Payment required for this course",
                data={"courseId": course.id, "price": course.price, "currency": course.currency},
            )

        await self.admit(user.id, course)
        await self.session.commit()
        logger.info(f"User {user.id} enrolled in free course {course.id}")

        self.hub.publish(
            user.id,
            NotificationEvent.enrollment_success,
            {"courseId": course.id, "courseName": course.title},
        )
        return EnrollmentRead.model_validate(await self.enrollments.get_card(user.id, course.id))

    async def list_enrollments(
        self, user: User, status: Optional[EnrollmentStatus], page: int, limit: int
    ) -> Page[Enrollment]:
        return await self.enrollments.list_for_student(user.id, status, page, limit)

    async def get_enrollment(self, user: User, course_id: str) -> EnrollmentDetail:
        enrollment = await self.enrollments.get_detail(user.id, course_id)
        if enrollment is None:
            raise NotFoundError(ENROLLMENT_NOT_FOUND)
        detail = EnrollmentDetail.model_validate(enrollment)
        if detail.course is not None:
            detail = detail.model_copy(update={"course": detail.course.visible_to_public()})
        return detail

    async def record_progress(
        self, user: User, course_id: str, lesson_id: str, payload: ProgressUpdate
    ) -> ProgressResult:
        """
        Record progress on a lesson and recompute the course percentage.

        Args:
            user: The enrolled student
            course_id: Course of the enrollment
            lesson_id: Lesson inside that course
            payload: Optional time spent, playback position and completion flag

        Returns:
            The lesson progress row, the course percentage and the enrollment

        Raises:
            NotFoundError: no enrollment, or the lesson is not part of the course
        """
        enrollment = await self.enrollments.get_for(user.id, course_id)
        if enrollment is None:
            raise NotFoundError(ENROLLMENT_NOT_FOUND)
        lesson = await LessonRepository(self.session).get_in_course(course_id, lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")

        now = utc_now()
        progress = await self.progress.get_for(user.id, lesson.id)
        if progress is None:
            progress = await self.progress.create(
                Progress(
                    student_id=user.id,
                    lesson_id=lesson.id,
                    enrollment_id=enrollment.id,
                    time_spent=payload.time_spent or 0,
                    last_position=payload.last_position or 0,
                    is_completed=bool(payload.is_completed),
                    completed_at=now if payload.is_completed else None,
                )
            )
        else:
            changes = {}
            if payload.time_spent is not None:
                changes["time_spent"] = payload.time_spent
            if payload.last_position is not None:
                changes["last_position"] = payload.last_position
            # Completion is monotonic: a later false never reverts it.
            if payload.is_completed and not progress.is_completed:
                changes["is_completed"] = True
                changes["completed_at"] = now
            await self.progress.update(progress, changes)

        lesson_ids = await self.courses.active_lesson_ids(course_id)
        completed = await self.progress.count_completed(user.id, lesson_ids)
        course_progress = completed / len(lesson_ids) * 100 if lesson_ids else 0.0

        just_completed = course_progress == 100 and enrollment.status != EnrollmentStatus.COMPLETED
        changes = {"progress": course_progress, "last_accessed_at": now}
        if just_completed:
            changes.update(status=EnrollmentStatus.COMPLETED, completed_at=now)
        await self.enrollments.update(enrollment, changes)

        certificate: Optional[Certificate] = None
        if just_completed:
            await self.students.increment_for_user(user.id, total_courses_completed=1)
            certificate = await CertificateRepository(self.session).create(
                Certificate(
                    student_id=user.id,
                    course_id=course_id,
                    enrollment_id=enrollment.id,
                    certificate_number=certificate_number(),
                )
            )
        await self.session.commit()

        if certificate is not None:
            logger.info(f"User {user.id} completed course {course_id}, certificate {certificate.certificate_number}")
            self.hub.publish(
                user.id,
                NotificationEvent.course_completed,
                {"courseId": course_id, "certificateNumber": certificate.certificate_number},
            )
        self.hub.publish(
            user.id,
            NotificationEvent.progress_updated,
            {"courseId": course_id, "lessonId": lesson.id, "progress": course_progress},
        )
        return ProgressResult(
            progress=ProgressRead.model_validate(progress),
            course_progress=course_progress,
            enrollment=EnrollmentRead.model_validate(enrollment),
        )

    async def unenroll(self, user: User, course_id: str) -> None:
        enrollment = await self.enrollments.get_for(user.id, course_id)
        if enrollment is None:
            raise NotFoundError(ENROLLMENT_NOT_FOUND)
        if enrollment.status == EnrollmentStatus.COMPLETED:
            raise BadRequestError("Cannot unenroll from completed course")

        await self.progress.delete_for_enrollment(enrollment.id)
        await self.enrollments.delete(enrollment)
        await self.courses.increment(course_id, total_enrollments=-1)
        await self.students.increment_for_user(user.id, total_courses_enrolled=-1)
        await self.session.commit()
        logger.info(f"User {user.id} unenrolled from course {course_id}")
