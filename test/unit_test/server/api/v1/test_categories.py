import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestBrowseCategories:
    async def test_list_roots_with_children(self, client: AsyncClient, make_user, make_category, make_course):
        programming = await make_category("Programming", sort_order=1)
        design = await make_category("Design", sort_order=0)
        await make_category("Python", parent_id=programming.id)
        await make_category("Legacy", parent_id=programming.id, is_active=False)
        await make_category("Hidden", is_active=False)
        await make_course(await make_user("tutor"), programming)

        response = await client.get("/api/v1/categories")
        assert response.status_code == 200
        categories = response.json()["data"]["categories"]
        assert [category["name"] for category in categories] == ["Design", "Programming"]
        assert categories[0]["id"] == design.id
        assert categories[0]["courseCount"] == 0
        assert categories[1]["courseCount"] == 1
        assert [child["name"] for child in categories[1]["children"]] == ["Python"]

    async def test_get_category(self, client: AsyncClient, make_user, make_category, make_course):
        programming = await make_category("Programming")
        python = await make_category("Python", parent_id=programming.id)
        tutor = await make_user("tutor")
        published = await make_course(tutor, python, title="Published Course")
        await make_course(tutor, python, title="Draft Course", published=False)

        response = await client.get(f"/api/v1/categories/{python.id}")
        assert response.status_code == 200
        category = response.json()["data"]["category"]
        assert category["slug"] == "python"
        assert category["parent"]["id"] == programming.id
        assert category["courseCount"] == 2
        assert [course["id"] for course in category["courses"]] == [published.id]

    async def test_get_missing_category(self, client: AsyncClient):
        response = await client.get("/api/v1/categories/missing")
        assert response.status_code == 404
        assert response.json()["message"] == "Category not found"


class TestManageCategories:
    async def test_create_requires_authentication(self, client: AsyncClient):
        response = await client.post("/api/v1/categories", json={"name": "Music"})
        assert response.status_code == 401

    async def test_create_requires_permission(self, client: AsyncClient, make_user, auth_headers):
        tutor = await make_user("tutor")
        response = await client.post("/api/v1/categories", json={"name": "Music"}, headers=auth_headers(tutor))
        assert response.status_code == 403
        assert response.json()["message"] == "Insufficient permissions"

    async def test_create(self, client: AsyncClient, make_user, auth_headers):
        admin = await make_user("admin")
        response = await client.post(
            "/api/v1/categories",
            json={"name": "Music & Audio", "color": "#FF8800", "sortOrder": 3},
            headers=auth_headers(admin),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Category created successfully"
        assert body["data"]["category"]["slug"] == "music-audio"
        assert body["data"]["category"]["sortOrder"] == 3

    async def test_create_duplicate_name(self, client: AsyncClient, make_user, make_category, auth_headers):
        admin = await make_user("admin")
        await make_category("Music")
        response = await client.post("/api/v1/categories", json={"name": "music"}, headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["message"] == "Category with this name already exists"

    async def test_create_with_unknown_parent(self, client: AsyncClient, make_user, auth_headers):
        admin = await make_user("admin")
        response = await client.post(
            "/api/v1/categories", json={"name": "Jazz", "parentId": "missing"}, headers=auth_headers(admin)
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Parent category not found"

    async def test_create_rejects_bad_color(self, client: AsyncClient, make_user, auth_headers):
        admin = await make_user("admin")
        response = await client.post(
            "/api/v1/categories", json={"name": "Jazz", "color": "orange"}, headers=auth_headers(admin)
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "color"

    async def test_rename_updates_slug(self, client: AsyncClient, make_user, make_category, auth_headers):
        admin = await make_user("admin")
        category = await make_category("Music")
        response = await client.put(
            f"/api/v1/categories/{category.id}", json={"name": "Music Theory"}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()["data"]["category"]["slug"] == "music-theory"

    async def test_category_cannot_be_its_own_parent(
        self, client: AsyncClient, make_user, make_category, auth_headers
    ):
        admin = await make_user("admin")
        category = await make_category("Music")
        response = await client.put(
            f"/api/v1/categories/{category.id}", json={"parentId": category.id}, headers=auth_headers(admin)
        )
        assert response.status_code == 400

    async def test_delete(self, client: AsyncClient, make_user, make_category, auth_headers):
        admin = await make_user("admin")
        category = await make_category("Music")
        response = await client.delete(f"/api/v1/categories/{category.id}", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["message"] == "Category deleted successfully"
        assert (await client.get(f"/api/v1/categories/{category.id}")).status_code == 404

    async def test_delete_with_courses(self, client: AsyncClient, make_user, make_category, make_course, auth_headers):
        admin = await make_user("admin")
        category = await make_category("Music")
        await make_course(await make_user("tutor"), category)
        response = await client.delete(f"/api/v1/categories/{category.id}", headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["message"].startswith("Cannot delete category with courses")

    async def test_delete_with_children(self, client: AsyncClient, make_user, make_category, auth_headers):
        admin = await make_user("admin")
        parent = await make_category("Music")
        await make_category("Jazz", parent_id=parent.id)
        response = await client.delete(f"/api/v1/categories/{parent.id}", headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["message"].startswith("Cannot delete category with subcategories")
