"""
Category I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from pydantic import Field

from .common import IOModel

if TYPE_CHECKING:
    from .courses import CourseSummary

COLOR_PATTERN = r"^#[0-9A-F]{6}$"


class CategoryBrief(IOModel):
    id: str
    name: str
    slug: str


class CategoryCreate(IOModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    parent_id: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    sort_order: int = Field(default=0, ge=0)
    is_active: bool = True


class CategoryUpdate(IOModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    parent_id: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class CategoryRead(IOModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    course_count: int = 0
    children: List[CategoryBrief] = []


class CategoryDetail(CategoryRead):
    parent: Optional[CategoryBrief] = None
    courses: List["CourseSummary"] = []


class CategoryListData(IOModel):
    categories: List[CategoryRead]


class CategoryData(IOModel):
    category: CategoryRead


class CategoryDetailData(IOModel):
    category: CategoryDetail
