from datetime import date, timedelta

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestProfile:
    async def test_get_profile(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user("student")
        response = await client.get("/api/v1/users/profile", headers=auth_headers(user))
        assert response.status_code == 200
        profile = response.json()["data"]["user"]
        assert profile["id"] == user.id
        assert profile["studentProfile"] is not None

    async def test_profile_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/users/profile")
        assert response.status_code == 401

    async def test_update_profile(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user("student")
        response = await client.put(
            "/api/v1/users/profile",
            json={"firstName": "  Grace ", "bio": "Learning every day", "phoneNumber": "+15551234567"},
            headers=auth_headers(user),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile updated successfully"
        profile = body["data"]["user"]
        assert profile["firstName"] == "Grace"
        assert profile["bio"] == "Learning every day"
        assert profile["phoneNumber"] == "+15551234567"
        assert profile["lastName"] == user.last_name

    async def test_update_profile_rejects_bad_phone(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user("student")
        response = await client.put(
            "/api/v1/users/profile", json={"phoneNumber": "call me"}, headers=auth_headers(user)
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "phoneNumber"

    async def test_update_profile_rejects_future_birthday(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user("student")
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        response = await client.put(
            "/api/v1/users/profile", json={"dateOfBirth": tomorrow}, headers=auth_headers(user)
        )
        assert response.status_code == 400


class TestDashboard:
    async def test_student_dashboard(
        self, client: AsyncClient, make_user, make_category, make_course, make_enrollment, auth_headers
    ):
        tutor = await make_user("tutor")
        student = await make_user("student")
        course = await make_course(tutor, await make_category())
        await make_enrollment(student, course)

        response = await client.get("/api/v1/users/dashboard", headers=auth_headers(student))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["type"] == "student"
        assert [enrollment["courseId"] for enrollment in data["enrollments"]] == [course.id]
        assert data["enrollments"][0]["course"]["tutor"]["user"]["firstName"] == "Tutor"
        assert data["recentProgress"] == []
        assert data["certificates"] == []
        assert "totalCoursesEnrolled" in data["stats"]

    async def test_tutor_dashboard(
        self, client: AsyncClient, make_user, make_category, make_course, make_enrollment, auth_headers
    ):
        tutor = await make_user("tutor")
        student = await make_user("student")
        course = await make_course(tutor, await make_category())
        await make_enrollment(student, course)

        response = await client.get("/api/v1/users/dashboard", headers=auth_headers(tutor))
        data = response.json()["data"]
        assert data["type"] == "tutor"
        assert [summary["id"] for summary in data["courses"]] == [course.id]
        assert data["recentEnrollments"][0]["student"]["id"] == student.id
        assert data["recentEnrollments"][0]["course"]["id"] == course.id
        assert data["totalEarnings"] == 0.0
        assert data["reviews"] == []

    async def test_admin_dashboard(self, client: AsyncClient, make_user, auth_headers):
        admin = await make_user("admin")
        response = await client.get("/api/v1/users/dashboard", headers=auth_headers(admin))
        data = response.json()["data"]
        assert data["type"] == "admin"
        assert data["revenue"] == 0.0
        assert data["stats"]["level"] == "ADMIN"
        assert sum(day["count"] for day in data["userStats"]) == 1
