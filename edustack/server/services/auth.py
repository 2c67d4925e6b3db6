"""
Account service: registration, login, password management and e-mail verification.

Password hashing is CPU bound, so bcrypt runs in the threadpool instead of on
the event loop.
"""

from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from edustack.core.database.base import utc_now
from edustack.core.database.entities.users import Student, Tutor, User
from edustack.core.database.repositories.users import (
    RoleRepository,
    StudentRepository,
    TutorRepository,
    UserRepository,
)
from edustack.core.errors import AuthenticationError, BadRequestError, ConflictError, NotFoundError
from edustack.core.logging_config import get_logger
from edustack.core.models.domain.enums import UserType
from edustack.core.models.io.auth import RegisterRequest
from edustack.core.models.io.users import ProfileUpdate
from edustack.core.security import (
    EMAIL_VERIFICATION,
    PASSWORD_RESET,
    create_access_token,
    create_purpose_token,
    decode_purpose_token,
    hash_password,
    verify_password,
)

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """Account lifecycle operations on one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.roles = RoleRepository(session)

    async def _reload(self, user_id: str) -> User:
        user = await self.users.get_with_access(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def register(self, payload: RegisterRequest) -> Tuple[User, str]:
        """
        Create an account with the role and profile matching ``payload.user_type``.

        Returns:
            The new user (access relationships loaded) and an access token
        """
        if await self.users.get_by_email(payload.email) is not None:
            raise ConflictError("User with this email already exists")
        if await self.users.get_by_username(payload.username) is not None:
            raise ConflictError("Username already taken")

        role = await self.roles.get_by_name(payload.user_type.value)
        if role is None:
            raise BadRequestError("Invalid user type")

        password_hash = await run_in_threadpool(hash_password, payload.password)
        user = await self.users.create(
            User(
                email=payload.email,
                username=payload.username,
                first_name=payload.first_name,
                last_name=payload.last_name,
                password_hash=password_hash,
            )
        )
        await self.roles.assign(user.id, role.id)
        if payload.user_type == UserType.student:
            await StudentRepository(self.session).create(Student(user_id=user.id))
        else:
            await TutorRepository(self.session).create(Tutor(user_id=user.id))
        await self.session.commit()

        verification_token = create_purpose_token(user.id, EMAIL_VERIFICATION)
        logger.info(f"Registered {payload.user_type.value} account {user.id}")
        logger.debug(f"E-mail verification token for {user.id}: {verification_token}")
        return await self._reload(user.id), create_access_token(user.id)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        user = await self.users.get_by_email(email)
        if user is None or not user.is_active:
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.info(f"Failed login for user {user.id}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        await self.users.update(user, {"last_login_at": utc_now()})
        await self.session.commit()
        logger.info(f"User {user.id} logged in")
        return await self._reload(user.id), create_access_token(user.id)

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not await run_in_threadpool(verify_password, current_password, user.password_hash):
            raise BadRequestError("Current password is incorrect")
        password_hash = await run_in_threadpool(hash_password, new_password)
        await self.users.update(user, {"password_hash": password_hash})
        await self.session.commit()
        logger.info(f"Password changed for user {user.id}")

    async def forgot_password(self, email: str) -> Optional[str]:
        """Issue a password-reset token when the account exists.

        No mail transport is configured, the token is only logged. The
        caller must answer identically whether or not a token was issued.
        """
        user = await self.users.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for an unknown e-mail")
            return None
        token = create_purpose_token(user.id, PASSWORD_RESET)
        logger.info(f"Password reset token issued for user {user.id}")
        logger.debug(f"Password reset token for {user.id}: {token}")
        return token

    async def reset_password(self, token: str, new_password: str) -> None:
        user_id = decode_purpose_token(token, PASSWORD_RESET)
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise BadRequestError("Invalid or expired token")
        password_hash = await run_in_threadpool(hash_password, new_password)
        await self.users.update(user, {"password_hash": password_hash})
        await self.session.commit()
        logger.info(f"Password reset for user {user.id}")

    async def verify_email(self, token: str) -> None:
        user_id = decode_purpose_token(token, EMAIL_VERIFICATION)
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise BadRequestError("Invalid or expired token")
        await self.users.update(user, {"is_verified": True})
        await self.session.commit()
        logger.info(f"E-mail verified for user {user.id}")

    async def update_profile(self, user: User, payload: ProfileUpdate) -> User:
        changes = payload.model_dump(exclude_unset=True)
        await self.users.update(user, changes)
        await self.session.commit()
        logger.info(f"Profile updated for user {user.id}: {sorted(changes)}")
        return await self._reload(user.id)
