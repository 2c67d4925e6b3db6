"""
Review and review-like repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from edustack.core.models.domain.enums import ReviewSortField

from ..entities.reviews import Review, ReviewLike
from .base import AsyncBaseRepository, AsyncQueryBuilder, Page


class ReviewRepository(AsyncBaseRepository[Review]):
    """Repository for course reviews."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Review)

    async def get_for(self, student_id: str, course_id: str) -> Optional[Review]:
        stmt = select(Review).where(Review.student_id == student_id, Review.course_id == course_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_student(self, review_id: str) -> Optional[Review]:
        stmt = (
            select(Review)
            .where(Review.id == review_id)
            .options(selectinload(Review.student))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_published_for_course(
        self, course_id: str, sort_by: ReviewSortField, descending: bool, page: int, limit: int
    ) -> Page[Review]:
        stmt = select(Review).where(Review.course_id == course_id, Review.is_published.is_(True))
        if sort_by == ReviewSortField.helpful:
            likes = (
                select(ReviewLike.review_id, func.count().label("likes"))
                .group_by(ReviewLike.review_id)
                .subquery()
            )
            stmt = stmt.outerjoin(likes, likes.c.review_id == Review.id)
            columns = [func.coalesce(likes.c.likes, 0), Review.created_at]
        elif sort_by == ReviewSortField.rating:
            columns = [Review.rating, Review.created_at]
        else:
            columns = [Review.created_at]
        stmt = AsyncQueryBuilder.apply_ordering(stmt, [*columns, Review.id], descending)
        return await self.paginate(stmt, page, limit, (selectinload(Review.student),))

    async def latest_published_for_course(self, course_id: str, limit: int = 5) -> List[Review]:
        stmt = (
            select(Review)
            .where(Review.course_id == course_id, Review.is_published.is_(True))
            .options(selectinload(Review.student))
            .order_by(Review.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def latest_for_courses(self, course_ids: Sequence[str], limit: int = 5) -> List[Review]:
        if not course_ids:
            return []
        stmt = (
            select(Review)
            .where(Review.course_id.in_(list(course_ids)), Review.is_published.is_(True))
            .options(selectinload(Review.student))
            .order_by(Review.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def rating_summary(
        self, course_ids: Sequence[str], since: Optional[datetime] = None
    ) -> Dict[str, float]:
        """Published review count and mean rating over ``course_ids``."""
        if not course_ids:
            return {"totalReviews": 0, "averageRating": 0.0}
        stmt = select(func.count(), func.coalesce(func.avg(Review.rating), 0)).where(
            Review.course_id.in_(list(course_ids)), Review.is_published.is_(True)
        )
        if since is not None:
            stmt = stmt.where(Review.created_at >= since)
        total, average = (await self.session.execute(stmt)).one()
        return {"totalReviews": total, "averageRating": round(float(average), 2)}

    async def rating_distribution(self, course_id: str) -> Dict[int, int]:
        """Count of published reviews per star rating, with every rating 1-5 present."""
        stmt = (
            select(Review.rating, func.count())
            .where(Review.course_id == course_id, Review.is_published.is_(True))
            .group_by(Review.rating)
        )
        result = await self.session.execute(stmt)
        distribution = {rating: 0 for rating in range(1, 6)}
        distribution.update({rating: count for rating, count in result.all()})
        return distribution


class ReviewLikeRepository(AsyncBaseRepository[ReviewLike]):
    """Repository for review likes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ReviewLike)

    async def get_for(self, user_id: str, review_id: str) -> Optional[ReviewLike]:
        stmt = select(ReviewLike).where(ReviewLike.user_id == user_id, ReviewLike.review_id == review_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_for_review(self, review_id: str) -> None:
        await self.session.execute(delete(ReviewLike).where(ReviewLike.review_id == review_id))

    async def counts(self, review_ids: Sequence[str]) -> Dict[str, int]:
        if not review_ids:
            return {}
        stmt = (
            select(ReviewLike.review_id, func.count())
            .where(ReviewLike.review_id.in_(list(review_ids)))
            .group_by(ReviewLike.review_id)
        )
        result = await self.session.execute(stmt)
        return {review_id: count for review_id, count in result.all()}
