"""
Course, section and lesson entity models.

A course is owned by a tutor and organised into ordered sections, each
holding ordered lessons. Aggregate counters (enrollments, revenue, rating)
are denormalised onto the course row and maintained by the services that
change the underlying data.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, Relationship

from edustack.core.identifiers import new_id
from edustack.core.models.domain.enums import ContentType, CourseLevel, CourseStatus

from ..base import Base, UTCDateTime, utc_now
from .categories import Category
from .users import Tutor


class CourseBase(Base):
    """Base fields for a course."""

    title: str = Field(max_length=200)
    slug: str = Field(unique=True, index=True, max_length=255)
    description: str = Field(sa_column=Column(Text, nullable=False))
    short_description: Optional[str] = Field(default=None, max_length=500)
    thumbnail: Optional[str] = Field(default=None, max_length=500)
    preview_video: Optional[str] = Field(default=None, max_length=500)
    price: float = Field(default=0.0, ge=0)
    original_price: Optional[float] = None
    currency: str = Field(default="USD", max_length=3)
    level: CourseLevel = Field(default=CourseLevel.BEGINNER)
    duration: int = Field(default=0, description="Total video duration in minutes")
    language: str = Field(default="en", max_length=10)
    status: CourseStatus = Field(default=CourseStatus.DRAFT, index=True)
    is_published: bool = Field(default=False, index=True)
    published_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    meta_title: Optional[str] = Field(default=None, max_length=200)
    meta_description: Optional[str] = Field(default=None, max_length=500)


class Course(CourseBase, table=True):
    """
    Persistent course.

    Table: courses
    """

    __tablename__ = "courses"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    tutor_id: str = Field(foreign_key="tutors.id", index=True)
    category_id: str = Field(foreign_key="categories.id", index=True)

    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    requirements: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    what_you_learn: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    target_audience: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    total_enrollments: int = Field(default=0)
    total_revenue: float = Field(default=0.0)
    average_rating: float = Field(default=0.0)
    total_reviews: int = Field(default=0)
    view_count: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    tutor: Optional[Tutor] = Relationship()
    category: Optional[Category] = Relationship()
    sections: List["Section"] = Relationship(
        back_populates="course",
        sa_relationship_kwargs={"order_by": "Section.sort_order", "cascade": "all, delete-orphan"},
    )


class Section(Base, table=True):
    """
    Ordered group of lessons inside a course.

    Table: sections
    """

    __tablename__ = "sections"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    course_id: str = Field(foreign_key="courses.id", index=True, ondelete="CASCADE")
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: float = Field(default=0.0)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    course: Optional[Course] = Relationship(back_populates="sections")
    lessons: List["Lesson"] = Relationship(
        back_populates="section",
        sa_relationship_kwargs={"order_by": "Lesson.sort_order", "cascade": "all, delete-orphan"},
    )


class Lesson(Base, table=True):
    """
    A single unit of course content.

    ``content`` holds type-specific structured data (quiz questions,
    assignment rubric...) while ``text_content`` and ``video_url`` cover the
    common text and video lessons.

    Table: lessons
    """

    __tablename__ = "lessons"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    section_id: str = Field(foreign_key="sections.id", index=True, ondelete="CASCADE")
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    content_type: ContentType = Field(default=ContentType.VIDEO)
    content: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    video_url: Optional[str] = Field(default=None, max_length=500)
    video_duration: Optional[int] = Field(default=None, description="Video length in seconds")
    text_content: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    attachments: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    price: float = Field(default=0.0)
    is_preview: bool = Field(default=False)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    section: Optional[Section] = Relationship(back_populates="lessons")
