"""Unit tests for user, role and profile repositories."""

from datetime import timedelta

import pytest

from edustack.core.database import utc_now
from edustack.core.database.entities.users import Permission, Role, Student, User, UserPermission
from edustack.core.database.repositories.users import (
    PermissionRepository,
    RoleRepository,
    StudentRepository,
    TutorRepository,
    UserRepository,
)


@pytest.fixture
async def student_user(in_memory_session) -> User:
    user = User(email="Grace@Example.com", username="grace", first_name="Grace", last_name="Hopper", password_hash="x")
    user.student_profile = Student()
    in_memory_session.add(user)
    await in_memory_session.commit()
    return user


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_lookup_by_email_ignores_case(self, in_memory_session, student_user):
        repo = UserRepository(in_memory_session)
        assert (await repo.get_by_email("grace@example.com")).id == student_user.id
        assert await repo.get_by_email("nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_lookup_by_username(self, in_memory_session, student_user):
        repo = UserRepository(in_memory_session)
        assert (await repo.get_by_username("grace")).id == student_user.id
        assert await repo.get_by_username("Grace") is None

    @pytest.mark.asyncio
    async def test_access_context(self, in_memory_session, student_user):
        read = Permission(name="read_course")
        review = Permission(name="write_review")
        in_memory_session.add(Role(name="student", permissions=[read]))
        in_memory_session.add(review)
        await in_memory_session.flush()
        role = await RoleRepository(in_memory_session).get_by_name("student")
        await RoleRepository(in_memory_session).assign(student_user.id, role.id)
        in_memory_session.add(UserPermission(user_id=student_user.id, permission_id=review.id))
        await in_memory_session.commit()

        user = await UserRepository(in_memory_session).get_with_access(student_user.id)

        assert user.role_names() == ["student"]
        assert user.effective_permissions() == ["read_course", "write_review"]
        assert user.student_profile is not None
        assert user.tutor_profile is None

    @pytest.mark.asyncio
    async def test_counts(self, in_memory_session, student_user):
        repo = UserRepository(in_memory_session)
        assert await repo.count() == 1
        assert await repo.count(since=utc_now() + timedelta(days=1)) == 0

        signups = await repo.daily_signups(utc_now() - timedelta(days=1))
        assert [count for _, count in signups] == [1]


class TestProfileRepositories:
    @pytest.mark.asyncio
    async def test_student_counters(self, in_memory_session, student_user):
        repo = StudentRepository(in_memory_session)
        await repo.increment_for_user(student_user.id, total_courses_enrolled=1)
        await repo.increment_for_user("no-such-user", total_courses_enrolled=1)

        profile = await in_memory_session.get(Student, student_user.student_profile.id, populate_existing=True)
        assert profile.total_courses_enrolled == 1

    @pytest.mark.asyncio
    async def test_tutor_with_user(self, in_memory_session, tutor):
        repo = TutorRepository(in_memory_session)
        loaded = await repo.get_with_user(tutor.id)
        assert loaded.user.full_name == "Ada Lovelace"
        assert (await repo.get_by_user_id(loaded.user.id)).id == tutor.id

    @pytest.mark.asyncio
    async def test_permission_lookup(self, in_memory_session):
        repo = PermissionRepository(in_memory_session)
        await repo.create(Permission(name="manage_users"))
        assert (await repo.get_by_name("manage_users")).name == "manage_users"
        assert await repo.get_by_name("fly") is None
