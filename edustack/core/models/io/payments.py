"""
Payment I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from edustack.core.models.domain.enums import PaymentMethod, PaymentStatus

from .common import IOModel, Pagination
from .courses import CourseBrief


class CreateIntentRequest(IOModel):
    course_id: str = Field(min_length=1)


class PaymentIntentData(IOModel):
    client_secret: Optional[str] = None
    payment_id: str
    amount: float
    currency: str
    course: CourseBrief


class PaymentRead(IOModel):
    """A payment as shown to its owner; the Stripe client secret is never returned."""

    id: str
    user_id: str
    course_id: str
    amount: float
    currency: str
    payment_method: PaymentMethod
    status: PaymentStatus
    stripe_payment_id: Optional[str] = None
    description: Optional[str] = None
    metadata: Dict[str, Any] = {}
    paid_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    course: Optional[CourseBrief] = None

    @classmethod
    def from_entity_fields(cls, fields: Dict[str, Any]) -> Dict[str, Any]:
        fields["metadata"] = fields.pop("details", None) or {}
        return fields


class PaymentListData(IOModel):
    payments: List[PaymentRead]
    pagination: Pagination


class PaymentData(IOModel):
    payment: PaymentRead


class WebhookAck(IOModel):
    received: bool = True
