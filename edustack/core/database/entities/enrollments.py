"""
Enrollment, lesson progress and certificate entity models.

``Enrollment`` links a student (user) to a course and carries the course
completion percentage. ``Progress`` is one row per (student, lesson).
``Certificate`` is issued once per enrollment when it reaches 100%.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship

from edustack.core.identifiers import new_id
from edustack.core.models.domain.enums import EnrollmentStatus

from ..base import Base, UTCDateTime, utc_now
from .courses import Course, Lesson
from .users import User


class Enrollment(Base, table=True):
    """
    A student's enrollment in a course.

    Table: enrollments
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    student_id: str = Field(foreign_key="users.id", index=True)
    course_id: str = Field(foreign_key="courses.id", index=True)
    status: EnrollmentStatus = Field(default=EnrollmentStatus.ACTIVE, index=True)
    progress: float = Field(default=0.0, ge=0, le=100)
    enrolled_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    completed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    last_accessed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    student: Optional[User] = Relationship()
    course: Optional[Course] = Relationship()
    certificate: Optional["Certificate"] = Relationship(
        back_populates="enrollment", sa_relationship_kwargs={"uselist": False, "passive_deletes": True}
    )
    progress_records: List["Progress"] = Relationship(sa_relationship_kwargs={"passive_deletes": True})


class Progress(Base, table=True):
    """
    A student's progress on one lesson.

    Table: progress
    """

    __tablename__ = "progress"
    __table_args__ = (
        UniqueConstraint("student_id", "lesson_id", name="uq_progress_student_lesson"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    student_id: str = Field(foreign_key="users.id", index=True)
    lesson_id: str = Field(foreign_key="lessons.id", index=True)
    enrollment_id: str = Field(foreign_key="enrollments.id", index=True, ondelete="CASCADE")
    is_completed: bool = Field(default=False)
    time_spent: int = Field(default=0, description="Seconds spent on the lesson")
    last_position: int = Field(default=0, description="Playback position in seconds")
    completed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    lesson: Optional[Lesson] = Relationship()


class Certificate(Base, table=True):
    """
    Completion certificate.

    Table: certificates
    """

    __tablename__ = "certificates"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    student_id: str = Field(foreign_key="users.id", index=True)
    course_id: str = Field(foreign_key="courses.id", index=True)
    enrollment_id: str = Field(foreign_key="enrollments.id", unique=True)
    certificate_number: str = Field(unique=True, max_length=40)
    issued_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    enrollment: Optional[Enrollment] = Relationship(back_populates="certificate")
    course: Optional[Course] = Relationship()
