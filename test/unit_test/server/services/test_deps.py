"""Unit tests for server services dependencies.

Tests verify the service singletons wired through ``Annotated`` dependencies,
the role and permission gates, and pagination parameters.
"""

from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from edustack.core.errors import ForbiddenError
from edustack.server.services.deps import (
    MediaStorageDep,
    NotificationHubDep,
    PageDep,
    PaymentGatewayDep,
    require_admin,
    require_permission,
    require_role,
    require_student,
    require_tutor,
)
from edustack.server.services.notifications import get_notification_hub
from edustack.server.services.payments import get_payment_gateway
from edustack.server.services.storage import get_media_storage


def fake_user(roles=(), permissions=(), student=None, tutor=None, admin=None):
    return SimpleNamespace(
        role_names=lambda: list(roles),
        effective_permissions=lambda: set(permissions),
        student_profile=student,
        tutor_profile=tutor,
        admin_profile=admin,
    )


class TestServiceDeps:
    """Annotated dependencies resolve to the process-wide providers."""

    @pytest.mark.parametrize(
        "annotated,provider",
        [
            (NotificationHubDep, get_notification_hub),
            (PaymentGatewayDep, get_payment_gateway),
            (MediaStorageDep, get_media_storage),
        ],
    )
    def test_dependency_provider(self, annotated, provider):
        depends_obj = annotated.__metadata__[0]
        assert depends_obj.dependency is provider

    def test_notification_hub_is_a_singleton(self):
        assert get_notification_hub() is get_notification_hub()

    def test_payment_gateway_is_a_singleton(self):
        assert get_payment_gateway() is get_payment_gateway()


class TestProfileGates:
    @pytest.mark.asyncio
    async def test_student_gate(self):
        student = fake_user(student=object())
        assert await require_student(student) is student
        with pytest.raises(ForbiddenError, match="Student access required"):
            await require_student(fake_user(tutor=object()))

    @pytest.mark.asyncio
    async def test_tutor_gate(self):
        tutor = fake_user(tutor=object())
        assert await require_tutor(tutor) is tutor
        with pytest.raises(ForbiddenError, match="Tutor access required"):
            await require_tutor(fake_user(student=object()))

    @pytest.mark.asyncio
    async def test_admin_gate(self):
        admin = fake_user(admin=object())
        assert await require_admin(admin) is admin
        with pytest.raises(ForbiddenError, match="Admin access required"):
            await require_admin(fake_user(tutor=object()))


class TestPermissionGates:
    @pytest.mark.asyncio
    async def test_permission_granted(self):
        user = fake_user(permissions={"manage_categories"})
        assert await require_permission("manage_categories")(user) is user

    @pytest.mark.asyncio
    async def test_permission_missing(self):
        with pytest.raises(ForbiddenError, match="Insufficient permissions"):
            await require_permission("manage_categories")(fake_user(permissions={"read_course"}))

    @pytest.mark.asyncio
    async def test_any_listed_role_is_enough(self):
        user = fake_user(roles=["tutor"])
        assert await require_role("admin", "tutor")(user) is user

    @pytest.mark.asyncio
    async def test_role_missing(self):
        with pytest.raises(ForbiddenError, match="Insufficient role privileges"):
            await require_role("admin")(fake_user(roles=["student"]))


class TestPageParams:
    @pytest.fixture
    def app(self) -> FastAPI:
        app = FastAPI()

        @app.get("/items")
        async def items(paging: PageDep):
            return {"page": paging.page, "limit": paging.limit}

        return app

    @pytest.mark.asyncio
    async def test_defaults(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/items")
        assert response.json() == {"page": 1, "limit": 10}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
    async def test_bounds(self, app, params):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/items", params=params)
        assert response.status_code == 422
