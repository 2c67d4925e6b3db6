"""
Database entity models.

Modules:
- users: Accounts, roles, permissions and student/tutor/admin profiles
- categories: Course category tree
- courses: Courses, sections and lessons
- enrollments: Enrollments, lesson progress and certificates
- reviews: Course reviews and review likes
- payments: Course purchases settled through Stripe
"""

from . import categories, courses, enrollments, payments, reviews, users

__all__ = [
    "categories",
    "courses",
    "enrollments",
    "payments",
    "reviews",
    "users",
]
