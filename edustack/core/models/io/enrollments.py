"""
Enrollment, progress and certificate I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from edustack.core.models.domain.enums import EnrollmentStatus

from .common import IOModel, Pagination
from .courses import CourseBrief, CourseDetail, CourseSummary
from .users import UserBrief


class CertificateRead(IOModel):
    id: str
    student_id: str
    course_id: str
    enrollment_id: str
    certificate_number: str
    issued_at: datetime
    course: Optional[CourseBrief] = None


class LessonRef(IOModel):
    id: str
    title: str
    section_id: str


class ProgressRead(IOModel):
    id: str
    student_id: str
    lesson_id: str
    enrollment_id: str
    is_completed: bool
    time_spent: int
    last_position: int
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    lesson: Optional[LessonRef] = None


class EnrollmentRead(IOModel):
    id: str
    student_id: str
    course_id: str
    status: EnrollmentStatus
    progress: float
    enrolled_at: datetime
    completed_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None
    course: Optional[CourseSummary] = None
    certificate: Optional[CertificateRead] = None


class EnrollmentDetail(EnrollmentRead):
    """An enrollment with the course outline and the student's lesson progress."""

    course: Optional[CourseDetail] = None
    progress_records: List[ProgressRead] = []


class CourseStudentRead(IOModel):
    """Enrollment as seen by the course's tutor."""

    id: str
    status: EnrollmentStatus
    progress: float
    enrolled_at: datetime
    completed_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None
    student: Optional[UserBrief] = None


class ProgressUpdate(IOModel):
    time_spent: Optional[int] = Field(default=None, ge=0)
    last_position: Optional[int] = Field(default=None, ge=0)
    is_completed: Optional[bool] = None


class EnrollmentData(IOModel):
    enrollment: EnrollmentRead


class EnrollmentDetailData(IOModel):
    enrollment: EnrollmentDetail


class EnrollmentListData(IOModel):
    enrollments: List[EnrollmentRead]
    pagination: Pagination


class CourseStudentsData(IOModel):
    enrollments: List[CourseStudentRead]
    pagination: Pagination


class ProgressResult(IOModel):
    progress: ProgressRead
    course_progress: float
    enrollment: EnrollmentRead


class PaymentRequiredData(IOModel):
    course_id: str
    price: float
    currency: str
