"""
Course, section and lesson I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, HttpUrl, field_validator

from edustack.core.models.domain.enums import ContentType, CourseLevel, CourseStatus

from .categories import CategoryBrief, CategoryDetail, CategoryDetailData
from .common import IOModel, Pagination
from .reviews import ReviewRead
from .users import UserBrief


def _check_items(values: Optional[List[str]], max_len: int) -> Optional[List[str]]:
    if values is None:
        return values
    cleaned = [value.strip() for value in values]
    if any(not value or len(value) > max_len for value in cleaned):
        raise ValueError(f"each item must be 1-{max_len} characters")
    return cleaned


class CourseFields(IOModel):
    """Validation rules shared by course creation and update."""

    @field_validator("tags", check_fields=False)
    @classmethod
    def _tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _check_items(value, 50)

    @field_validator("requirements", "what_you_learn", "target_audience", check_fields=False)
    @classmethod
    def _outline_items(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _check_items(value, 200)


class CourseCreate(CourseFields):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=10, max_length=5000)
    short_description: Optional[str] = Field(default=None, max_length=500)
    category_id: str
    price: float = Field(ge=0, le=10000)
    original_price: Optional[float] = Field(default=None, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    level: CourseLevel = CourseLevel.BEGINNER
    language: str = Field(default="en", max_length=10)
    thumbnail: Optional[str] = Field(default=None, max_length=500)
    preview_video: Optional[str] = Field(default=None, max_length=500)
    tags: List[str] = Field(default_factory=list, max_length=10)
    requirements: List[str] = Field(default_factory=list, max_length=10)
    what_you_learn: List[str] = Field(default_factory=list, max_length=20)
    target_audience: List[str] = Field(default_factory=list, max_length=10)
    meta_title: Optional[str] = Field(default=None, max_length=200)
    meta_description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title must not be blank")
        return value

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()


class CourseUpdate(CourseFields):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=10, max_length=5000)
    short_description: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0, le=10000)
    original_price: Optional[float] = Field(default=None, ge=0)
    level: Optional[CourseLevel] = None
    language: Optional[str] = Field(default=None, max_length=10)
    thumbnail: Optional[str] = Field(default=None, max_length=500)
    preview_video: Optional[str] = Field(default=None, max_length=500)
    tags: Optional[List[str]] = Field(default=None, max_length=10)
    requirements: Optional[List[str]] = Field(default=None, max_length=10)
    what_you_learn: Optional[List[str]] = Field(default=None, max_length=20)
    target_audience: Optional[List[str]] = Field(default=None, max_length=10)
    status: Optional[CourseStatus] = None
    meta_title: Optional[str] = Field(default=None, max_length=200)
    meta_description: Optional[str] = Field(default=None, max_length=500)


class TutorBrief(IOModel):
    id: str
    title: Optional[str] = None
    average_rating: float = 0.0
    total_students: int = 0
    user: Optional[UserBrief] = None


class CourseBrief(IOModel):
    id: str
    title: str
    slug: str
    thumbnail: Optional[str] = None
    price: float
    currency: str = "USD"


class CourseSummary(CourseBrief):
    """Catalog card for a course."""

    short_description: Optional[str] = None
    original_price: Optional[float] = None
    level: CourseLevel
    language: str
    duration: int = 0
    status: CourseStatus
    is_published: bool
    published_at: Optional[datetime] = None
    tags: List[str] = []
    average_rating: float = 0.0
    total_reviews: int = 0
    total_enrollments: int = 0
    view_count: int = 0
    tutor_id: str
    category_id: str
    created_at: datetime
    updated_at: datetime
    tutor: Optional[TutorBrief] = None
    category: Optional[CategoryBrief] = None
    section_count: int = 0

    @classmethod
    def from_entity_fields(cls, fields: Dict[str, Any]) -> Dict[str, Any]:
        if "sections" in fields:
            fields["section_count"] = len(fields["sections"])
        return fields


class LessonOutline(IOModel):
    """Lesson entry in a course outline; the content itself is not included."""

    id: str
    section_id: str
    title: str
    description: Optional[str] = None
    content_type: ContentType
    video_duration: Optional[int] = None
    is_preview: bool = False
    sort_order: int = 0
    is_active: bool = True


class LessonRead(LessonOutline):
    content: Dict[str, Any] = {}
    video_url: Optional[str] = None
    text_content: Optional[str] = None
    attachments: List[str] = []
    price: float = 0.0
    created_at: datetime
    updated_at: datetime


class SectionRead(IOModel):
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    price: float = 0.0
    sort_order: int = 0
    is_active: bool = True
    lessons: List[LessonOutline] = []


class CourseDetail(CourseSummary):
    description: str
    preview_video: Optional[str] = None
    requirements: List[str] = []
    what_you_learn: List[str] = []
    target_audience: List[str] = []
    total_revenue: float = 0.0
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    sections: List[SectionRead] = []
    reviews: List[ReviewRead] = []

    def visible_to_public(self) -> "CourseDetail":
        """Only active sections and lessons, as shown to learners."""
        sections = [
            section.model_copy(update={"lessons": [lesson for lesson in section.lessons if lesson.is_active]})
            for section in self.sections
            if section.is_active
        ]
        return self.model_copy(update={"sections": sections, "section_count": len(sections)})


class SectionCreate(IOModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: float = Field(default=0.0, ge=0, le=1000)
    sort_order: int = Field(default=0, ge=0)
    is_active: bool = True


class SectionUpdate(IOModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Optional[float] = Field(default=None, ge=0, le=1000)
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class LessonCreate(IOModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    content_type: ContentType
    content: Dict[str, Any] = Field(default_factory=dict)
    video_url: Optional[HttpUrl] = None
    video_duration: Optional[int] = Field(default=None, ge=0)
    text_content: Optional[str] = Field(default=None, max_length=50000)
    attachments: List[HttpUrl] = Field(default_factory=list, max_length=10)
    price: float = Field(default=0.0, ge=0, le=500)
    is_preview: bool = False
    sort_order: int = Field(default=0, ge=0)
    is_active: bool = True


class LessonUpdate(IOModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    content_type: Optional[ContentType] = None
    content: Optional[Dict[str, Any]] = None
    video_url: Optional[HttpUrl] = None
    video_duration: Optional[int] = Field(default=None, ge=0)
    text_content: Optional[str] = Field(default=None, max_length=50000)
    attachments: Optional[List[HttpUrl]] = Field(default=None, max_length=10)
    price: Optional[float] = Field(default=None, ge=0, le=500)
    is_preview: Optional[bool] = None
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class CourseListData(IOModel):
    courses: List[CourseSummary]
    pagination: Pagination


CategoryDetail.model_rebuild()
CategoryDetailData.model_rebuild()


class CourseData(IOModel):
    course: CourseSummary


class CourseDetailData(IOModel):
    course: CourseDetail


class SectionData(IOModel):
    section: SectionRead


class LessonData(IOModel):
    lesson: LessonRead
