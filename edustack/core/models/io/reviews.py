"""
Review I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from .common import IOModel, Pagination
from .users import UserBrief


class ReviewCreate(IOModel):
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = Field(default=None, max_length=2000)


class ReviewUpdate(IOModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = Field(default=None, max_length=2000)


class ReviewRead(IOModel):
    id: str
    student_id: str
    course_id: str
    rating: int
    title: Optional[str] = None
    content: Optional[str] = None
    is_published: bool
    is_verified: bool
    created_at: datetime
    updated_at: datetime
    student: Optional[UserBrief] = None
    likes: int = 0


class ReviewStatistics(IOModel):
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[int, int]


class ReviewListData(IOModel):
    reviews: List[ReviewRead]
    statistics: ReviewStatistics
    pagination: Pagination


class ReviewData(IOModel):
    review: ReviewRead


class LikeResult(IOModel):
    liked: bool
