"""
Course review and review-like entity models.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship

from edustack.core.identifiers import new_id

from ..base import Base, UTCDateTime, utc_now
from .users import User


class Review(Base, table=True):
    """
    A student's review of a course. One review per (student, course).

    ``is_verified`` marks reviews written after completing the course.

    Table: reviews
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_reviews_student_course"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    student_id: str = Field(foreign_key="users.id", index=True)
    course_id: str = Field(foreign_key="courses.id", index=True)
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = Field(default=None, max_length=2000)
    is_published: bool = Field(default=True)
    is_verified: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    student: Optional[User] = Relationship()


class ReviewLike(Base, table=True):
    """
    A user marking a review as helpful.

    Table: review_likes
    """

    __tablename__ = "review_likes"
    __table_args__ = (
        UniqueConstraint("user_id", "review_id", name="uq_review_likes_user_review"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", index=True)
    review_id: str = Field(foreign_key="reviews.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
