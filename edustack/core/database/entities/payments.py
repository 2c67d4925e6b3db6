"""
Payment entity model.

A payment is created in ``PENDING`` state together with a Stripe
PaymentIntent and settled by the Stripe webhook.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship

from edustack.core.identifiers import new_id
from edustack.core.models.domain.enums import PaymentMethod, PaymentStatus

from ..base import Base, UTCDateTime, utc_now
from .courses import Course


class Payment(Base, table=True):
    """
    Persistent payment for a course purchase.

    Table: payments
    """

    __tablename__ = "payments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", index=True)
    course_id: str = Field(foreign_key="courses.id", index=True)
    amount: float = Field(ge=0)
    currency: str = Field(default="USD", max_length=3)
    payment_method: PaymentMethod = Field(default=PaymentMethod.STRIPE)
    status: PaymentStatus = Field(default=PaymentStatus.PENDING, index=True)
    stripe_payment_id: Optional[str] = Field(default=None, unique=True, index=True, max_length=255)
    stripe_client_secret: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=255)
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))
    paid_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    failed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    course: Optional[Course] = Relationship()
