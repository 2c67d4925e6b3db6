"""Domain-level enums and value types."""

from .enums import (
    AdminLevel,
    ContentType,
    CourseLevel,
    CourseSortField,
    CourseStatus,
    EnrollmentStatus,
    Gender,
    NotificationEvent,
    PaymentMethod,
    PaymentStatus,
    ReviewSortField,
    SortOrder,
    UserType,
)

__all__ = [
    "AdminLevel",
    "ContentType",
    "CourseLevel",
    "CourseSortField",
    "CourseStatus",
    "EnrollmentStatus",
    "Gender",
    "NotificationEvent",
    "PaymentMethod",
    "PaymentStatus",
    "ReviewSortField",
    "SortOrder",
    "UserType",
]
