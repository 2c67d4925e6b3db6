"""
Shared FastAPI dependencies.

Database session, request authentication, role and permission gates,
pagination parameters and the process-wide service singletons
(notification hub, payment gateway, media storage).
"""

from typing import Annotated, Callable, Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from edustack.core.database import get_session
from edustack.core.database.entities.users import User
from edustack.core.database.repositories.users import UserRepository
from edustack.core.errors import AuthenticationError, ForbiddenError
from edustack.core.security import decode_access_token
from edustack.server.core.constant import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from edustack.server.services.notifications import NotificationHub, get_notification_hub
from edustack.server.services.payments import PaymentGateway, get_payment_gateway
from edustack.server.services.storage import MediaStorage, get_media_storage

SessionDep = Annotated[AsyncSession, Depends(get_session)]
NotificationHubDep = Annotated[NotificationHub, Depends(get_notification_hub)]
PaymentGatewayDep = Annotated[PaymentGateway, Depends(get_payment_gateway)]
MediaStorageDep = Annotated[MediaStorage, Depends(get_media_storage)]

bearer_scheme = HTTPBearer(auto_error=False)
BearerDep = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def _load_user(session: AsyncSession, token: str) -> User:
    user_id = decode_access_token(token)
    user = await UserRepository(session).get_with_access(user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("Token is not valid")
    return user


async def get_current_user(session: SessionDep, credentials: BearerDep) -> User:
    """The authenticated user with roles, permissions and profiles loaded."""
    if credentials is None:
        raise AuthenticationError("No token provided, authorization denied")
    return await _load_user(session, credentials.credentials)


async def get_optional_user(session: SessionDep, credentials: BearerDep) -> Optional[User]:
    """Like ``get_current_user`` but anonymous (None) when no valid token is sent."""
    if credentials is None:
        return None
    try:
        return await _load_user(session, credentials.credentials)
    except AuthenticationError:
        return None


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]


async def require_student(user: CurrentUser) -> User:
    if user.student_profile is None:
        raise ForbiddenError("Student access required")
    return user


async def require_tutor(user: CurrentUser) -> User:
    if user.tutor_profile is None:
        raise ForbiddenError("Tutor access required")
    return user


async def require_admin(user: CurrentUser) -> User:
    if user.admin_profile is None:
        raise ForbiddenError("Admin access required")
    return user


StudentUser = Annotated[User, Depends(require_student)]
TutorUser = Annotated[User, Depends(require_tutor)]
AdminUser = Annotated[User, Depends(require_admin)]


def require_permission(permission: str) -> Callable:
    """Dependency factory: the user must hold ``permission`` through a role or directly."""

    async def dependency(user: CurrentUser) -> User:
        if permission not in user.effective_permissions():
            raise ForbiddenError("Insufficient permissions")
        return user

    return dependency


def require_role(*roles: str) -> Callable:
    """Dependency factory: the user must hold at least one of ``roles``."""

    async def dependency(user: CurrentUser) -> User:
        if not set(roles) & set(user.role_names()):
            raise ForbiddenError("Insufficient role privileges")
        return user

    return dependency


class PageParams:
    """``page`` and ``limit`` query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    ) -> None:
        self.page = page
        self.limit = limit


PageDep = Annotated[PageParams, Depends()]
