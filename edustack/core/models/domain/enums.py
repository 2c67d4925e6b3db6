"""Domain enums shared by entities, I/O models and services."""

from __future__ import annotations

from enum import Enum


class UserType(str, Enum):
    """Account type chosen at registration; maps onto a seeded role."""

    student = "student"
    tutor = "tutor"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
    PREFER_NOT_TO_SAY = "PREFER_NOT_TO_SAY"


class AdminLevel(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"


class CourseLevel(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    ALL_LEVELS = "ALL_LEVELS"


class CourseStatus(str, Enum):
    """
    Editorial lifecycle of a course.

    Only ``PUBLISHED`` courses are listed in the catalog and open for enrollment.
    """

    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    PUBLISHED = "PUBLISHED"
    SUSPENDED = "SUSPENDED"
    ARCHIVED = "ARCHIVED"


class ContentType(str, Enum):
    VIDEO = "VIDEO"
    TEXT = "TEXT"
    QUIZ = "QUIZ"
    ASSIGNMENT = "ASSIGNMENT"
    DOCUMENT = "DOCUMENT"
    INTERACTIVE = "INTERACTIVE"


class EnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    STRIPE = "STRIPE"
    PAYPAL = "PAYPAL"
    BANK_TRANSFER = "BANK_TRANSFER"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class CourseSortField(str, Enum):
    createdAt = "createdAt"
    title = "title"
    price = "price"
    rating = "rating"
    enrollments = "enrollments"


class ReviewSortField(str, Enum):
    createdAt = "createdAt"
    rating = "rating"
    helpful = "helpful"


class NotificationEvent(str, Enum):
    """Events pushed to a user's notification stream."""

    enrollment_success = "enrollment-success"
    progress_updated = "progress-updated"
    course_completed = "course-completed"
    payment_succeeded = "payment-succeeded"
