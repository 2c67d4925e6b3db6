"""
Payment repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from edustack.core.models.domain.enums import PaymentStatus

from ..entities.payments import Payment
from .base import AsyncBaseRepository, Page


class PaymentRepository(AsyncBaseRepository[Payment]):
    """Repository for course payments."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Payment)

    async def get_by_stripe_id(self, stripe_payment_id: str) -> Optional[Payment]:
        result = await self.session.execute(select(Payment).where(Payment.stripe_payment_id == stripe_payment_id))
        return result.scalar_one_or_none()

    async def get_for_user(self, payment_id: str, user_id: str) -> Optional[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.id == payment_id, Payment.user_id == user_id)
            .options(selectinload(Payment.course))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: str, page: int, limit: int) -> Page[Payment]:
        stmt = select(Payment).where(Payment.user_id == user_id).order_by(Payment.created_at.desc(), Payment.id)
        return await self.paginate(stmt, page, limit, (selectinload(Payment.course),))

    async def completed_revenue(
        self, course_ids: Optional[Sequence[str]] = None, since: Optional[datetime] = None
    ) -> float:
        """Sum of completed payments, optionally limited to courses and a start date."""
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.status == PaymentStatus.COMPLETED)
        if course_ids is not None:
            if not course_ids:
                return 0.0
            stmt = stmt.where(Payment.course_id.in_(list(course_ids)))
        if since is not None:
            stmt = stmt.where(Payment.created_at >= since)
        return float((await self.session.execute(stmt)).scalar_one())
