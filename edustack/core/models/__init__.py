"""Core models: domain enums. The REST I/O schemas live in ``edustack.core.models.io``."""

from __future__ import annotations

from .domain import (
    ContentType,
    CourseLevel,
    CourseStatus,
    EnrollmentStatus,
    NotificationEvent,
    PaymentStatus,
    UserType,
)

__all__ = [
    "ContentType",
    "CourseLevel",
    "CourseStatus",
    "EnrollmentStatus",
    "NotificationEvent",
    "PaymentStatus",
    "UserType",
]
