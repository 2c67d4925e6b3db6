"""Initial schema and seed data for EduStack

Revision ID: 20250101_000000
Revises: None
Create Date: 2025-01-01 00:00:00.000000

This is the initial migration that creates all tables of the course
marketplace and seeds its reference data:
- Accounts, roles, permissions and student/tutor/admin profiles
- Categories, courses, sections and lessons
- Enrollments, lesson progress and certificates
- Reviews, review likes and payments
- Default roles with their permission grants and the default categories

Revision format: YYYYMMDD_HHMMSS_description

"""

import uuid
from datetime import datetime, timezone
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20250101_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

GENDER = sa.Enum("MALE", "FEMALE", "OTHER", "PREFER_NOT_TO_SAY", name="gender")
ADMIN_LEVEL = sa.Enum("SUPER_ADMIN", "ADMIN", "MODERATOR", name="adminlevel")
COURSE_LEVEL = sa.Enum("BEGINNER", "INTERMEDIATE", "ADVANCED", "ALL_LEVELS", name="courselevel")
COURSE_STATUS = sa.Enum(
    "DRAFT", "UNDER_REVIEW", "APPROVED", "PUBLISHED", "SUSPENDED", "ARCHIVED", name="coursestatus"
)
CONTENT_TYPE = sa.Enum("VIDEO", "TEXT", "QUIZ", "ASSIGNMENT", "DOCUMENT", "INTERACTIVE", name="contenttype")
ENROLLMENT_STATUS = sa.Enum("ACTIVE", "COMPLETED", "SUSPENDED", "CANCELLED", name="enrollmentstatus")
PAYMENT_STATUS = sa.Enum("PENDING", "COMPLETED", "FAILED", "REFUNDED", "CANCELLED", name="paymentstatus")
PAYMENT_METHOD = sa.Enum("STRIPE", "PAYPAL", "BANK_TRANSFER", name="paymentmethod")

ROLES = {
    "super_admin": "Super Administrator with full system access",
    "admin": "Administrator with system management access",
    "moderator": "Moderator with content management access",
    "tutor": "Tutor with course creation and management access",
    "student": "Student with course enrollment and learning access",
}

PERMISSIONS = [
    ("create_course", "Create new courses", "course", "create"),
    ("read_course", "View courses", "course", "read"),
    ("update_course", "Update courses", "course", "update"),
    ("delete_course", "Delete courses", "course", "delete"),
    ("manage_users", "Manage users", "user", "manage"),
    ("manage_payments", "Manage payments", "payment", "manage"),
    ("moderate_content", "Moderate content", "content", "moderate"),
    ("view_analytics", "View analytics", "analytics", "read"),
    ("manage_categories", "Create, update and delete categories", "category", "manage"),
]

GRANTS = {
    "super_admin": [name for name, _, _, _ in PERMISSIONS],
    "admin": ["manage_users", "moderate_content", "view_analytics", "manage_categories"],
    "moderator": ["moderate_content", "read_course"],
    "tutor": ["create_course", "read_course", "update_course", "view_analytics"],
    "student": ["read_course"],
}

CATEGORIES = [
    ("Programming & Development", "programming-development", "Software development and programming courses"),
    ("Data Science & Analytics", "data-science-analytics", "Data science, machine learning, and analytics courses"),
    ("Design & Creative", "design-creative", "Design, art, and creative courses"),
    ("Business & Entrepreneurship", "business-entrepreneurship", "Business skills and entrepreneurship courses"),
    ("Marketing & Sales", "marketing-sales", "Marketing, sales, and digital marketing courses"),
    ("Language Learning", "language-learning", "Language learning courses"),
    ("Personal Development", "personal-development", "Personal growth and development courses"),
    ("Health & Fitness", "health-fitness", "Health, fitness, and wellness courses"),
]


def _id() -> str:
    return str(uuid.uuid4())


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Access control
    op.create_table(
        "permissions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("resource", sa.String(50), nullable=True),
        sa.Column("action", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_permissions_name", "permissions", ["name"], unique=True)

    op.create_table(
        "roles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(30), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("bio", sa.String(1000), nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", GENDER, nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("timezone", sa.String(50), nullable=False),
        sa.Column("language", sa.String(10), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "user_roles",
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role_id", sa.String(36), sa.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "role_id"),
    )
    op.create_table(
        "role_permissions",
        sa.Column("role_id", sa.String(36), sa.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "permission_id", sa.String(36), sa.ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False
        ),
        sa.PrimaryKeyConstraint("role_id", "permission_id"),
    )
    op.create_table(
        "user_permissions",
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "permission_id", sa.String(36), sa.ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False
        ),
        sa.PrimaryKeyConstraint("user_id", "permission_id"),
    )

    # Profiles
    op.create_table(
        "students",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("education_level", sa.String(100), nullable=True),
        sa.Column("interests", sa.JSON(), nullable=False),
        sa.Column("goals", sa.String(), nullable=True),
        sa.Column("learning_style", sa.String(50), nullable=True),
        sa.Column("total_courses_enrolled", sa.Integer(), nullable=False),
        sa.Column("total_courses_completed", sa.Integer(), nullable=False),
        sa.Column("total_learning_hours", sa.Float(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_user_id", "students", ["user_id"], unique=True)

    op.create_table(
        "tutors",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(100), nullable=True),
        sa.Column("expertise", sa.JSON(), nullable=False),
        sa.Column("experience_years", sa.Integer(), nullable=False),
        sa.Column("education", sa.String(), nullable=True),
        sa.Column("languages", sa.JSON(), nullable=False),
        sa.Column("hourly_rate", sa.Float(), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        sa.Column("total_students", sa.Integer(), nullable=False),
        sa.Column("total_earnings", sa.Float(), nullable=False),
        sa.Column("total_reviews", sa.Integer(), nullable=False),
        sa.Column("average_rating", sa.Float(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tutors_user_id", "tutors", ["user_id"], unique=True)

    op.create_table(
        "admins",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("level", ADMIN_LEVEL, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admins_user_id", "admins", ["user_id"], unique=True)

    # Catalog
    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("icon", sa.String(100), nullable=True),
        sa.Column("color", sa.String(7), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("parent_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_categories_slug", "categories", ["slug"], unique=True)
    op.create_index("ix_categories_parent_id", "categories", ["parent_id"])

    op.create_table(
        "courses",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("short_description", sa.String(500), nullable=True),
        sa.Column("thumbnail", sa.String(500), nullable=True),
        sa.Column("preview_video", sa.String(500), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("original_price", sa.Float(), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("level", COURSE_LEVEL, nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("language", sa.String(10), nullable=False),
        sa.Column("status", COURSE_STATUS, nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("meta_title", sa.String(200), nullable=True),
        sa.Column("meta_description", sa.String(500), nullable=True),
        sa.Column("tutor_id", sa.String(36), sa.ForeignKey("tutors.id"), nullable=False),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("requirements", sa.JSON(), nullable=False),
        sa.Column("what_you_learn", sa.JSON(), nullable=False),
        sa.Column("target_audience", sa.JSON(), nullable=False),
        sa.Column("total_enrollments", sa.Integer(), nullable=False),
        sa.Column("total_revenue", sa.Float(), nullable=False),
        sa.Column("average_rating", sa.Float(), nullable=False),
        sa.Column("total_reviews", sa.Integer(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_courses_slug", "courses", ["slug"], unique=True)
    op.create_index("ix_courses_status", "courses", ["status"])
    op.create_index("ix_courses_is_published", "courses", ["is_published"])
    op.create_index("ix_courses_tutor_id", "courses", ["tutor_id"])
    op.create_index("ix_courses_category_id", "courses", ["category_id"])

    op.create_table(
        "sections",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("course_id", sa.String(36), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sections_course_id", "sections", ["course_id"])

    op.create_table(
        "lessons",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("section_id", sa.String(36), sa.ForeignKey("sections.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("content_type", CONTENT_TYPE, nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("video_url", sa.String(500), nullable=True),
        sa.Column("video_duration", sa.Integer(), nullable=True),
        sa.Column("text_content", sa.Text(), nullable=True),
        sa.Column("attachments", sa.JSON(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("is_preview", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lessons_section_id", "lessons", ["section_id"])

    # Learning
    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("course_id", sa.String(36), sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("status", ENROLLMENT_STATUS, nullable=False),
        sa.Column("progress", sa.Float(), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_status", "enrollments", ["status"])

    op.create_table(
        "progress",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("lesson_id", sa.String(36), sa.ForeignKey("lessons.id"), nullable=False),
        sa.Column(
            "enrollment_id", sa.String(36), sa.ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("time_spent", sa.Integer(), nullable=False),
        sa.Column("last_position", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "lesson_id", name="uq_progress_student_lesson"),
    )
    op.create_index("ix_progress_student_id", "progress", ["student_id"])
    op.create_index("ix_progress_lesson_id", "progress", ["lesson_id"])
    op.create_index("ix_progress_enrollment_id", "progress", ["enrollment_id"])

    op.create_table(
        "certificates",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("course_id", sa.String(36), sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("enrollment_id", sa.String(36), sa.ForeignKey("enrollments.id"), nullable=False),
        sa.Column("certificate_number", sa.String(40), nullable=False),
        sa.Column("issued_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("enrollment_id"),
        sa.UniqueConstraint("certificate_number"),
    )
    op.create_index("ix_certificates_student_id", "certificates", ["student_id"])
    op.create_index("ix_certificates_course_id", "certificates", ["course_id"])

    # Feedback and payments
    op.create_table(
        "reviews",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("course_id", sa.String(36), sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("content", sa.String(2000), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "course_id", name="uq_reviews_student_course"),
    )
    op.create_index("ix_reviews_student_id", "reviews", ["student_id"])
    op.create_index("ix_reviews_course_id", "reviews", ["course_id"])

    op.create_table(
        "review_likes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("review_id", sa.String(36), sa.ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "review_id", name="uq_review_likes_user_review"),
    )
    op.create_index("ix_review_likes_user_id", "review_likes", ["user_id"])
    op.create_index("ix_review_likes_review_id", "review_likes", ["review_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("course_id", sa.String(36), sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("payment_method", PAYMENT_METHOD, nullable=False),
        sa.Column("status", PAYMENT_STATUS, nullable=False),
        sa.Column("stripe_payment_id", sa.String(255), nullable=True),
        sa.Column("stripe_client_secret", sa.String(255), nullable=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("failed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_course_id", "payments", ["course_id"])
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("ix_payments_stripe_payment_id", "payments", ["stripe_payment_id"], unique=True)

    _seed()


def _seed() -> None:
    """Default roles, permissions, grants and categories."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)

    roles_table = sa.table(
        "roles",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("description", sa.String),
        sa.column("created_at", sa.DateTime),
    )
    permissions_table = sa.table(
        "permissions",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("description", sa.String),
        sa.column("resource", sa.String),
        sa.column("action", sa.String),
        sa.column("created_at", sa.DateTime),
    )
    grants_table = sa.table("role_permissions", sa.column("role_id", sa.String), sa.column("permission_id", sa.String))
    categories_table = sa.table(
        "categories",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("slug", sa.String),
        sa.column("description", sa.String),
        sa.column("sort_order", sa.Integer),
        sa.column("is_active", sa.Boolean),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )

    role_ids = {name: _id() for name in ROLES}
    permission_ids = {name: _id() for name, _, _, _ in PERMISSIONS}

    op.bulk_insert(
        roles_table,
        [
            {"id": role_ids[name], "name": name, "description": description, "created_at": now}
            for name, description in ROLES.items()
        ],
    )
    op.bulk_insert(
        permissions_table,
        [
            {
                "id": permission_ids[name],
                "name": name,
                "description": description,
                "resource": resource,
                "action": action,
                "created_at": now,
            }
            for name, description, resource, action in PERMISSIONS
        ],
    )
    op.bulk_insert(
        grants_table,
        [
            {"role_id": role_ids[role], "permission_id": permission_ids[permission]}
            for role, permissions in GRANTS.items()
            for permission in permissions
        ],
    )
    op.bulk_insert(
        categories_table,
        [
            {
                "id": _id(),
                "name": name,
                "slug": slug,
                "description": description,
                "sort_order": index,
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            }
            for index, (name, slug, description) in enumerate(CATEGORIES)
        ],
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("payments")
    op.drop_table("review_likes")
    op.drop_table("reviews")
    op.drop_table("certificates")
    op.drop_table("progress")
    op.drop_table("enrollments")
    op.drop_table("lessons")
    op.drop_table("sections")
    op.drop_table("courses")
    op.drop_table("categories")
    op.drop_table("admins")
    op.drop_table("tutors")
    op.drop_table("students")
    op.drop_table("user_permissions")
    op.drop_table("role_permissions")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")
    op.drop_table("permissions")

    for enum in (
        PAYMENT_METHOD,
        PAYMENT_STATUS,
        ENROLLMENT_STATUS,
        CONTENT_TYPE,
        COURSE_STATUS,
        COURSE_LEVEL,
        ADMIN_LEVEL,
        GENDER,
    ):
        enum.drop(op.get_bind(), checkfirst=True)
