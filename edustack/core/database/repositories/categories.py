"""
Category repository.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from edustack.core.models.domain.enums import CourseStatus

from ..entities.categories import Category
from ..entities.courses import Course
from .base import AsyncBaseRepository


class CategoryRepository(AsyncBaseRepository[Category]):
    """Repository for the course category tree."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Category)

    async def get_by_slug(self, slug: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def list_active_roots(self) -> List[Category]:
        """Active root categories with their children loaded, ordered by ``sort_order``."""
        stmt = (
            select(Category)
            .where(Category.parent_id.is_(None), Category.is_active.is_(True))
            .options(selectinload(Category.children))
            .order_by(Category.sort_order, Category.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_detail(self, category_id: str) -> Optional[Category]:
        """A category with parent and children loaded."""
        stmt = (
            select(Category)
            .where(Category.id == category_id)
            .options(selectinload(Category.parent), selectinload(Category.children))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def has_children(self, category_id: str) -> bool:
        stmt = select(func.count()).select_from(Category).where(Category.parent_id == category_id)
        return (await self.session.execute(stmt)).scalar_one() > 0

    async def course_counts(self, category_ids: Sequence[str]) -> Dict[str, int]:
        """Number of courses (any status) per category id."""
        if not category_ids:
            return {}
        stmt = (
            select(Course.category_id, func.count())
            .where(Course.category_id.in_(list(category_ids)))
            .group_by(Course.category_id)
        )
        result = await self.session.execute(stmt)
        return {category_id: count for category_id, count in result.all()}

    async def top_by_published_courses(self, limit: int = 5) -> List[Tuple[Category, int]]:
        """Categories ranked by how many published courses they hold."""
        published = func.count(Course.id)
        stmt = (
            select(Category, published)
            .join(Course, (Course.category_id == Category.id) & (Course.status == CourseStatus.PUBLISHED))
            .group_by(Category.id)
            .order_by(published.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(category, count) for category, count in result.all()]
