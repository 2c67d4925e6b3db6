from datetime import timedelta

import pytest
from httpx import AsyncClient

from edustack.core.database import utc_now
from edustack.core.database.entities.enrollments import Progress
from edustack.core.database.entities.payments import Payment
from edustack.core.database.entities.reviews import Review
from edustack.core.models.domain.enums import EnrollmentStatus, PaymentStatus

pytestmark = pytest.mark.asyncio


@pytest.fixture
def make_payment(session):
    async def _make(student, course, amount: float, status: PaymentStatus = PaymentStatus.COMPLETED, **fields):
        payment = Payment(user_id=student.id, course_id=course.id, amount=amount, status=status, **fields)
        session.add(payment)
        await session.commit()
        return payment

    return _make


@pytest.fixture
async def marketplace(make_user, make_category, make_course, make_enrollment, make_payment, session):
    """One tutor with a paid course bought by two students, one of whom finished it."""
    tutor = await make_user("tutor")
    category = await make_category("Data")
    course = await make_course(tutor, category, title="Statistics", price=20.0, total_enrollments=2)
    await make_course(tutor, category, title="Unfinished", published=False)
    finisher = await make_user("student")
    learner = await make_user("student")
    done = await make_enrollment(finisher, course, status=EnrollmentStatus.COMPLETED, progress=100)
    await make_enrollment(learner, course, progress=50)
    await make_payment(finisher, course, 20.0)
    await make_payment(learner, course, 20.0)
    await make_payment(learner, course, 20.0, status=PaymentStatus.FAILED)
    await make_payment(finisher, course, 5.0, created_at=utc_now() - timedelta(days=60))

    first_lesson = course.sections[0].lessons[0]
    session.add(
        Progress(
            student_id=finisher.id, lesson_id=first_lesson.id, enrollment_id=done.id, is_completed=True, time_spent=300
        )
    )
    session.add(Review(student_id=finisher.id, course_id=course.id, rating=4))
    await session.commit()
    return {"tutor": tutor, "category": category, "course": course, "finisher": finisher, "learner": learner}


class TestOverview:
    async def test_requires_admin(self, client: AsyncClient, make_user, auth_headers):
        response = await client.get("/api/v1/analytics/overview", headers=auth_headers(await make_user("tutor")))
        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"

    async def test_overview(self, client: AsyncClient, marketplace, make_user, auth_headers):
        admin = await make_user("admin")
        response = await client.get(
            "/api/v1/analytics/overview", params={"timeframe": "7d"}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["timeframe"] == "7d"
        assert data["overview"] == {
            "totalUsers": 4,
            "totalCourses": 1,
            "totalRevenue": 45.0,
            "newUsersInPeriod": 4,
            "newCoursesInPeriod": 1,
            "revenueInPeriod": 40.0,
        }
        assert data["topCategories"] == [
            {"id": marketplace["category"].id, "name": "Data", "slug": "data", "courseCount": 1}
        ]
        assert sum(day["count"] for day in data["userGrowth"]) == 4
        assert {row["status"]: row["count"] for row in data["courseStats"]} == {"PUBLISHED": 1, "DRAFT": 1}

    async def test_unknown_timeframe_defaults_to_30_days(self, client: AsyncClient, make_user, auth_headers):
        response = await client.get(
            "/api/v1/analytics/overview", params={"timeframe": "forever"}, headers=auth_headers(await make_user("admin"))
        )
        assert response.json()["data"]["timeframe"] == "30d"


class TestTutorReport:
    async def test_tutor_report(self, client: AsyncClient, marketplace, auth_headers):
        response = await client.get("/api/v1/analytics/tutor", headers=auth_headers(marketplace["tutor"]))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["timeframe"] == "30d"
        assert data["courseStats"]["totalCourses"] == 2
        assert data["enrollmentStats"] == {"newEnrollments": 2}
        assert data["revenueStats"] == {"totalRevenue": 40.0}
        assert data["reviewStats"] == {"newReviews": 1, "averageRating": 4.0}
        assert data["topCourses"][0]["id"] == marketplace["course"].id
        assert data["topCourses"][0]["totalEnrollments"] == 2
        assert len(data["recentEnrollments"]) == 2
        assert data["recentEnrollments"][0]["course"]["id"] == marketplace["course"].id

    async def test_students_are_rejected(self, client: AsyncClient, make_user, auth_headers):
        response = await client.get("/api/v1/analytics/tutor", headers=auth_headers(await make_user("student")))
        assert response.status_code == 403


class TestCourseReport:
    async def test_course_report(self, client: AsyncClient, marketplace, auth_headers):
        course = marketplace["course"]
        response = await client.get(
            f"/api/v1/analytics/course/{course.id}", params={"timeframe": "90d"}, headers=auth_headers(marketplace["tutor"])
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["course"]["id"] == course.id
        assert data["enrollmentStats"] == {"total": 2, "completed": 1, "completionRate": 50.0}
        assert data["progressStats"] == {"averageProgress": 75.0}
        assert data["reviewStats"] == {"total": 1, "averageRating": 4.0}
        assert sum(day["count"] for day in data["enrollmentTrend"]) == 2
        assert data["timeframe"] == "90d"

        first, second = data["lessonAnalytics"]
        assert first["title"] == "Lesson 1"
        assert first["totalViews"] == 1
        assert first["completionRate"] == 50.0
        assert first["averageTimeSpent"] == 300.0
        assert second["totalViews"] == 0

    async def test_other_tutor_is_denied(self, client: AsyncClient, marketplace, make_user, auth_headers):
        response = await client.get(
            f"/api/v1/analytics/course/{marketplace['course'].id}", headers=auth_headers(await make_user("tutor"))
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied"

    async def test_admin_can_read_any_course(self, client: AsyncClient, marketplace, make_user, auth_headers):
        response = await client.get(
            f"/api/v1/analytics/course/{marketplace['course'].id}", headers=auth_headers(await make_user("admin"))
        )
        assert response.status_code == 200

    async def test_missing_course(self, client: AsyncClient, make_user, auth_headers):
        response = await client.get("/api/v1/analytics/course/missing", headers=auth_headers(await make_user("admin")))
        assert response.status_code == 404
