import itertools
import json
from functools import lru_cache
from typing import Any, AsyncGenerator, Dict, List, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from edustack.core.database import create_all, create_sessionmaker, utc_now
from edustack.core.database.entities.categories import Category
from edustack.core.database.entities.courses import Course, Lesson, Section
from edustack.core.database.entities.enrollments import Enrollment
from edustack.core.database.entities.users import Admin, Permission, Role, Student, Tutor, User, UserRole
from edustack.core.identifiers import slugify
from edustack.core.models.domain.enums import ContentType, CourseStatus, EnrollmentStatus
from edustack.core.security import create_access_token, hash_password
from edustack.server.services.notifications import NotificationHub
from edustack.server.services.payments import PaymentGateway, PaymentIntent, WebhookVerificationError
from edustack.server.services.storage import MediaStorage

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "Passw0rd!"
VALID_SIGNATURE = "valid-signature"
MAX_UPLOAD_BYTES = 1024

ROLE_GRANTS = {
    "admin": ["manage_users", "moderate_content", "view_analytics", "manage_categories"],
    "tutor": ["create_course", "read_course", "update_course", "view_analytics"],
    "student": ["read_course"],
}

PROFILES = {"student": Student, "tutor": Tutor, "admin": Admin}


@lru_cache(maxsize=1)
def default_password_hash() -> str:
    return hash_password(DEFAULT_PASSWORD)


class FakePaymentGateway(PaymentGateway):
    """Offline stand-in for Stripe recording every intent it creates."""

    def __init__(self) -> None:
        self.intents: List[Dict[str, Any]] = []

    async def create_payment_intent(self, amount: int, currency: str, metadata: Dict[str, str]) -> PaymentIntent:
        intent_id = f"pi_test_{len(self.intents) + 1}"
        self.intents.append({"id": intent_id, "amount": amount, "currency": currency, "metadata": metadata})
        return PaymentIntent(id=intent_id, client_secret=f"{intent_id}_secret")

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if signature != VALID_SIGNATURE:
            raise WebhookVerificationError("No signatures found matching the expected signature for payload")
        return json.loads(payload)


@pytest_asyncio.fixture
async def test_engine():
    """A fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return create_sessionmaker(test_engine)


@pytest_asyncio.fixture(name="session")
async def session_fixture(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to seed and inspect the database."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def notification_hub() -> NotificationHub:
    return NotificationHub()


@pytest.fixture
def media_storage(tmp_path) -> MediaStorage:
    return MediaStorage(str(tmp_path / "media"), "http://localhost/media", MAX_UPLOAD_BYTES)


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session_maker, roles, payment_gateway, notification_hub, media_storage
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from edustack.core.database import get_session
    from edustack.server.main import app
    from edustack.server.services.notifications import get_notification_hub
    from edustack.server.services.payments import get_payment_gateway
    from edustack.server.services.storage import get_media_storage

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as request_session:
            try:
                yield request_session
            except Exception:
                await request_session.rollback()
                raise

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    app.dependency_overrides[get_notification_hub] = lambda: notification_hub
    app.dependency_overrides[get_media_storage] = lambda: media_storage

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("edustack.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def roles(session) -> Dict[str, Role]:
    """The student, tutor and admin roles with their seeded permissions."""
    names = sorted({name for granted in ROLE_GRANTS.values() for name in granted})
    permissions = {name: Permission(name=name) for name in names}
    seeded = {}
    for role_name, granted in ROLE_GRANTS.items():
        role = Role(name=role_name, permissions=[permissions[name] for name in granted])
        session.add(role)
        seeded[role_name] = role
    await session.commit()
    return seeded


@pytest.fixture
def make_user(session, roles):
    """Factory creating an account with the role and profile of ``kind``."""
    counter = itertools.count(1)

    async def _make(kind: str = "student", **fields: Any) -> User:
        n = next(counter)
        values = {
            "email": f"{kind}{n}@example.com",
            "username": f"{kind}{n}",
            "first_name": kind.title(),
            "last_name": f"Number{n}",
            "password_hash": default_password_hash(),
        }
        values.update(fields)
        user = User(**values)
        setattr(user, f"{kind}_profile", PROFILES[kind]())
        session.add(user)
        await session.flush()
        session.add(UserRole(user_id=user.id, role_id=roles[kind].id))
        await session.commit()
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
def make_category(session):
    async def _make(name: str = "Programming", **fields: Any) -> Category:
        category = Category(name=name, slug=slugify(name), **fields)
        session.add(category)
        await session.commit()
        return category

    return _make


@pytest.fixture
def make_course(session):
    """Factory creating a course with one section of ``lessons`` video lessons."""

    async def _make(
        tutor: User,
        category: Category,
        *,
        title: str = "Python Basics",
        price: float = 0.0,
        published: bool = True,
        lessons: int = 2,
        video_duration: int = 600,
        **fields: Any,
    ) -> Course:
        course = Course(
            title=title,
            slug=slugify(title),
            description="A thorough introduction to the topic.",
            price=price,
            tutor_id=tutor.tutor_profile.id,
            category_id=category.id,
            status=CourseStatus.PUBLISHED if published else CourseStatus.DRAFT,
            is_published=published,
            published_at=utc_now() if published else None,
            duration=round(lessons * video_duration / 60),
            **fields,
        )
        section = Section(title="Getting started", sort_order=0)
        section.lessons = [
            Lesson(
                title=f"Lesson {index + 1}",
                content_type=ContentType.VIDEO,
                video_duration=video_duration,
                sort_order=index,
            )
            for index in range(lessons)
        ]
        course.sections = [section]
        session.add(course)
        await session.commit()
        return course

    return _make


@pytest.fixture
def make_enrollment(session):
    async def _make(
        student: User, course: Course, status: EnrollmentStatus = EnrollmentStatus.ACTIVE, **fields: Any
    ) -> Enrollment:
        enrollment = Enrollment(student_id=student.id, course_id=course.id, status=status, **fields)
        session.add(enrollment)
        await session.commit()
        return enrollment

    return _make


@pytest.fixture
def reload(session):
    """Fetch the current database state of one row, bypassing the identity map."""

    async def _reload(model, entity_id: str):
        return await session.get(model, entity_id, populate_existing=True)

    return _reload
