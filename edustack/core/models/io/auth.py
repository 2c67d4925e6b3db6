"""
Authentication I/O models.
"""

from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from edustack.core.models.domain.enums import UserType
from edustack.core.security import check_password_policy

from .common import IOModel
from .users import UserRead


class RegisterRequest(IOModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    password: str
    user_type: UserType

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        return check_password_policy(value)


class LoginRequest(IOModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.lower()


class ChangePasswordRequest(IOModel):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        return check_password_policy(value)


class ForgotPasswordRequest(IOModel):
    email: EmailStr


class ResetPasswordRequest(IOModel):
    token: str = Field(min_length=1)
    password: str

    @field_validator("password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        return check_password_policy(value)


class VerifyEmailRequest(IOModel):
    token: str = Field(min_length=1)


class AuthPayload(IOModel):
    user: UserRead
    token: str
