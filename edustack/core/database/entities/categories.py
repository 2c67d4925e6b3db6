"""
Course category entity model.

Categories form a two-level tree: root categories listed in the catalog
navigation and optional children referencing them through ``parent_id``.
"""

from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship

from edustack.core.identifiers import new_id

from ..base import Base, UTCDateTime, utc_now


class CategoryBase(Base):
    """Base fields for a category."""

    name: str = Field(max_length=100)
    slug: str = Field(unique=True, index=True, max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    icon: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = Field(default=None, max_length=7)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)


class Category(CategoryBase, table=True):
    """
    Persistent course category.

    Table: categories
    """

    __tablename__ = "categories"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    parent_id: Optional[str] = Field(default=None, foreign_key="categories.id", index=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    parent: Optional["Category"] = Relationship(
        back_populates="children", sa_relationship_kwargs={"remote_side": "Category.id"}
    )
    children: List["Category"] = Relationship(back_populates="parent")
