"""
User, profile and dashboard I/O models.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from edustack.core.models.domain.enums import AdminLevel, Gender

from .common import IOModel, is_entity, orm_fields

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


class UserBrief(IOModel):
    """Public identity of a user shown next to courses, reviews and enrollments."""

    id: str
    username: Optional[str] = None
    first_name: str
    last_name: str
    avatar: Optional[str] = None


class StudentRead(IOModel):
    id: str
    education_level: Optional[str] = None
    interests: List[str] = []
    goals: Optional[str] = None
    learning_style: Optional[str] = None
    total_courses_enrolled: int = 0
    total_courses_completed: int = 0
    total_learning_hours: float = 0.0


class TutorRead(IOModel):
    id: str
    title: Optional[str] = None
    expertise: List[str] = []
    experience_years: int = 0
    education: Optional[str] = None
    languages: List[str] = []
    hourly_rate: Optional[float] = None
    is_approved: bool = False
    total_students: int = 0
    total_earnings: float = 0.0
    total_reviews: int = 0
    average_rating: float = 0.0


class AdminRead(IOModel):
    id: str
    level: AdminLevel


class UserRead(IOModel):
    """A user account as returned to its owner. Never includes the password hash."""

    id: str
    email: str
    username: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    phone_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    location: Optional[str] = None
    timezone: str = "UTC"
    language: str = "en"
    is_active: bool = True
    is_verified: bool = False
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    roles: List[str] = []
    permissions: List[str] = []
    student_profile: Optional[StudentRead] = None
    tutor_profile: Optional[TutorRead] = None
    admin_profile: Optional[AdminRead] = None

    @classmethod
    def from_entity_fields(cls, fields: Dict[str, Any]) -> Dict[str, Any]:
        roles = fields.get("roles")
        if roles is None:
            return fields
        fields["roles"] = sorted(role.name for role in roles)
        permissions = set()
        for role in roles:
            permissions.update(p.name for p in orm_fields(role).get("permissions", []))
        permissions.update(p.name for p in fields.get("direct_permissions") or [])
        fields["permissions"] = sorted(permissions)
        return fields


class ProfileUpdate(IOModel):
    """Editable profile fields; omitted fields are left unchanged."""

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=1000)
    avatar: Optional[str] = Field(default=None, max_length=500)
    phone_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    location: Optional[str] = Field(default=None, max_length=100)
    timezone: Optional[str] = Field(default=None, max_length=50)
    language: Optional[str] = Field(default=None, max_length=10)

    @field_validator("first_name", "last_name", "location")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else value

    @field_validator("phone_number")
    @classmethod
    def _valid_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not PHONE_PATTERN.match(value):
            raise ValueError("Please provide a valid phone number")
        return value

    @field_validator("date_of_birth")
    @classmethod
    def _not_in_future(cls, value: Optional[date]) -> Optional[date]:
        if value is not None and value > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return value


def brief(user: Any) -> Optional[Dict[str, Any]]:
    """Serialized ``UserBrief`` for a loaded user entity (or None)."""
    if user is None or not is_entity(user):
        return None
    return UserBrief.model_validate(user).model_dump(by_alias=True, mode="json")


class UserData(IOModel):
    user: UserRead
