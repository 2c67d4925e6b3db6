"""
User, role and profile repositories.

Besides plain lookups this module loads the access context of a user
(roles with their permissions, direct permissions and profiles) in one
round of eager loads, which is what request authentication needs.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..entities.users import Admin, Permission, Role, Student, Tutor, User, UserRole
from .base import AsyncBaseRepository


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_with_access(self, user_id: str) -> Optional[User]:
        """Load a user with roles, permissions and all three profiles.

        Args:
            user_id: User identifier

        Returns:
            User instance with access relationships loaded, or None
        """
        stmt = (
            select(User)
            .where(User.id == user_id)
            .options(
                selectinload(User.roles).selectinload(Role.permissions),
                selectinload(User.direct_permissions),
                selectinload(User.student_profile),
                selectinload(User.tutor_profile),
                selectinload(User.admin_profile),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count(self, since: Optional[datetime] = None) -> int:
        stmt = select(func.count()).select_from(User)
        if since is not None:
            stmt = stmt.where(User.created_at >= since)
        return (await self.session.execute(stmt)).scalar_one()

    async def daily_signups(self, since: datetime) -> List[Tuple[str, int]]:
        """New accounts per calendar day since ``since``, oldest first."""
        day = func.date(User.created_at)
        stmt = select(day, func.count()).where(User.created_at >= since).group_by(day).order_by(day)
        result = await self.session.execute(stmt)
        return [(str(row[0]), row[1]) for row in result.all()]


class RoleRepository(AsyncBaseRepository[Role]):
    """Repository for roles and role assignment."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Role)

    async def get_by_name(self, name: str) -> Optional[Role]:
        result = await self.session.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def assign(self, user_id: str, role_id: str) -> UserRole:
        link = UserRole(user_id=user_id, role_id=role_id)
        self.session.add(link)
        await self.session.flush()
        return link


class PermissionRepository(AsyncBaseRepository[Permission]):
    """Repository for permissions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Permission)

    async def get_by_name(self, name: str) -> Optional[Permission]:
        result = await self.session.execute(select(Permission).where(Permission.name == name))
        return result.scalar_one_or_none()


class StudentRepository(AsyncBaseRepository[Student]):
    """Repository for student profiles."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Student)

    async def get_by_user_id(self, user_id: str) -> Optional[Student]:
        result = await self.session.execute(select(Student).where(Student.user_id == user_id))
        return result.scalar_one_or_none()

    async def increment_for_user(self, user_id: str, **deltas: float) -> None:
        """Adjust counters of the student profile owned by ``user_id`` (no-op without a profile)."""
        student = await self.get_by_user_id(user_id)
        if student is not None:
            await self.increment(student.id, **deltas)


class TutorRepository(AsyncBaseRepository[Tutor]):
    """Repository for tutor profiles."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Tutor)

    async def get_by_user_id(self, user_id: str) -> Optional[Tutor]:
        result = await self.session.execute(select(Tutor).where(Tutor.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_with_user(self, tutor_id: str) -> Optional[Tutor]:
        stmt = select(Tutor).where(Tutor.id == tutor_id).options(selectinload(Tutor.user))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class AdminRepository(AsyncBaseRepository[Admin]):
    """Repository for administrator profiles."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Admin)

    async def get_by_user_id(self, user_id: str) -> Optional[Admin]:
        result = await self.session.execute(select(Admin).where(Admin.user_id == user_id))
        return result.scalar_one_or_none()
