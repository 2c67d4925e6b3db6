"""
Repository layer.

Each repository wraps one aggregate and shares the CRUD primitives of
``AsyncBaseRepository``. Repositories flush but never commit.
"""

from .base import AsyncBaseRepository, AsyncQueryBuilder, Page
from .categories import CategoryRepository
from .courses import CourseFilters, CourseRepository, LessonRepository, SectionRepository
from .enrollments import CertificateRepository, EnrollmentRepository, ProgressRepository
from .payments import PaymentRepository
from .reviews import ReviewLikeRepository, ReviewRepository
from .users import (
    AdminRepository,
    PermissionRepository,
    RoleRepository,
    StudentRepository,
    TutorRepository,
    UserRepository,
)

__all__ = [
    "AdminRepository",
    "AsyncBaseRepository",
    "AsyncQueryBuilder",
    "CategoryRepository",
    "CertificateRepository",
    "CourseFilters",
    "CourseRepository",
    "EnrollmentRepository",
    "LessonRepository",
    "Page",
    "PaymentRepository",
    "PermissionRepository",
    "ProgressRepository",
    "ReviewLikeRepository",
    "ReviewRepository",
    "RoleRepository",
    "SectionRepository",
    "StudentRepository",
    "TutorRepository",
    "UserRepository",
]
