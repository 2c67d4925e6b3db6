"""
User, access-control and profile entity models.

A ``User`` is an account. What the account may do is decided by two
independent mechanisms:

1. Role-based access control: ``Role`` rows grant ``Permission`` rows
   (``RolePermission``), users hold roles (``UserRole``) and may receive
   extra permissions directly (``UserPermission``).
2. Profiles: a ``Student``, ``Tutor`` or ``Admin`` row attached to the user
   unlocks the corresponding areas of the API and stores the per-role
   counters shown on dashboards.
"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship

from edustack.core.identifiers import new_id
from edustack.core.models.domain.enums import AdminLevel, Gender

from ..base import Base, UTCDateTime, utc_now


class UserRole(Base, table=True):
    """Association between users and roles."""

    __tablename__ = "user_roles"
    __table_args__ = ({"extend_existing": True},)

    user_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    role_id: str = Field(foreign_key="roles.id", primary_key=True, ondelete="CASCADE")
    assigned_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class RolePermission(Base, table=True):
    """Association between roles and permissions."""

    __tablename__ = "role_permissions"
    __table_args__ = ({"extend_existing": True},)

    role_id: str = Field(foreign_key="roles.id", primary_key=True, ondelete="CASCADE")
    permission_id: str = Field(foreign_key="permissions.id", primary_key=True, ondelete="CASCADE")


class UserPermission(Base, table=True):
    """Permission granted to a single user outside of any role."""

    __tablename__ = "user_permissions"
    __table_args__ = ({"extend_existing": True},)

    user_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    permission_id: str = Field(foreign_key="permissions.id", primary_key=True, ondelete="CASCADE")


class Permission(Base, table=True):
    """
    A named capability such as ``create_course`` or ``manage_categories``.

    Table: permissions
    """

    __tablename__ = "permissions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    name: str = Field(unique=True, index=True, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)
    resource: Optional[str] = Field(default=None, max_length=50)
    action: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Role(Base, table=True):
    """
    A named bundle of permissions (``student``, ``tutor``, ``admin``...).

    Table: roles
    """

    __tablename__ = "roles"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    name: str = Field(unique=True, index=True, max_length=50)
    description: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    permissions: List[Permission] = Relationship(link_model=RolePermission)


class UserBase(Base):
    """Base fields for a user account."""

    email: str = Field(unique=True, index=True, max_length=255)
    username: str = Field(unique=True, index=True, max_length=30)
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    avatar: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=1000)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    location: Optional[str] = Field(default=None, max_length=100)
    timezone: str = Field(default="UTC", max_length=50)
    language: str = Field(default="en", max_length=10)
    is_active: bool = Field(default=True)
    is_verified: bool = Field(default=False)


class User(UserBase, table=True):
    """
    Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    password_hash: str = Field(max_length=255)
    last_login_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    roles: List[Role] = Relationship(link_model=UserRole)
    direct_permissions: List[Permission] = Relationship(link_model=UserPermission)
    student_profile: Optional["Student"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"uselist": False}
    )
    tutor_profile: Optional["Tutor"] = Relationship(back_populates="user", sa_relationship_kwargs={"uselist": False})
    admin_profile: Optional["Admin"] = Relationship(back_populates="user", sa_relationship_kwargs={"uselist": False})

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def role_names(self) -> List[str]:
        return sorted(role.name for role in self.roles)

    def effective_permissions(self) -> List[str]:
        """Union of role permissions and directly granted permissions.

        Requires ``roles.permissions`` and ``direct_permissions`` to be loaded.
        """
        names = {permission.name for role in self.roles for permission in role.permissions}
        names.update(permission.name for permission in self.direct_permissions)
        return sorted(names)


class Student(Base, table=True):
    """
    Student profile with learning counters.

    Table: students
    """

    __tablename__ = "students"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, ondelete="CASCADE")
    education_level: Optional[str] = Field(default=None, max_length=100)
    interests: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    goals: Optional[str] = None
    learning_style: Optional[str] = Field(default=None, max_length=50)
    total_courses_enrolled: int = Field(default=0)
    total_courses_completed: int = Field(default=0)
    total_learning_hours: float = Field(default=0.0)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    user: Optional[User] = Relationship(back_populates="student_profile")


class Tutor(Base, table=True):
    """
    Tutor profile with teaching counters and earnings.

    Table: tutors
    """

    __tablename__ = "tutors"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, ondelete="CASCADE")
    title: Optional[str] = Field(default=None, max_length=100)
    expertise: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    experience_years: int = Field(default=0)
    education: Optional[str] = None
    languages: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    hourly_rate: Optional[float] = None
    is_approved: bool = Field(default=False)
    total_students: int = Field(default=0)
    total_earnings: float = Field(default=0.0)
    total_reviews: int = Field(default=0)
    average_rating: float = Field(default=0.0)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    user: Optional[User] = Relationship(back_populates="tutor_profile")


class Admin(Base, table=True):
    """
    Administrator profile.

    Table: admins
    """

    __tablename__ = "admins"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, ondelete="CASCADE")
    level: AdminLevel = Field(default=AdminLevel.ADMIN)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    user: Optional[User] = Relationship(back_populates="admin_profile")
