"""Unit tests for the course catalog repository."""

import pytest

from edustack.core.database.entities.courses import Lesson
from edustack.core.database.repositories.courses import CourseFilters, CourseRepository, LessonRepository
from edustack.core.models.domain.enums import CourseLevel, CourseSortField


@pytest.fixture
async def catalog(add_course):
    return {
        "python": await add_course(
            "Python Basics", price=0.0, tags=["python", "beginner"], level=CourseLevel.BEGINNER
        ),
        "django": await add_course(
            "Django Web", price=49.99, tags=["python", "web"], level=CourseLevel.ADVANCED, language="fr"
        ),
        "rust": await add_course("Rust Systems", price=19.0, tags=["rust"], level=CourseLevel.INTERMEDIATE),
        "draft": await add_course("Secret Draft", published=False, tags=["python"]),
    }


async def titles(repo, filters=CourseFilters(), sort_by=CourseSortField.title, descending=False):
    page = await repo.search_published(filters, sort_by, descending, page=1, limit=10)
    return [course.title for course in page.items]


class TestSearchPublished:
    @pytest.mark.asyncio
    async def test_only_published_courses(self, in_memory_session, catalog):
        repo = CourseRepository(in_memory_session)
        assert await titles(repo) == ["Django Web", "Python Basics", "Rust Systems"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "filters,expected",
        [
            (CourseFilters(level=CourseLevel.ADVANCED), ["Django Web"]),
            (CourseFilters(min_price=10), ["Django Web", "Rust Systems"]),
            (CourseFilters(max_price=19), ["Python Basics", "Rust Systems"]),
            (CourseFilters(language="fr"), ["Django Web"]),
            (CourseFilters(search="django"), ["Django Web"]),
            (CourseFilters(search="ALL ABOUT rust"), ["Rust Systems"]),
            (CourseFilters(search="web"), ["Django Web"]),
            (CourseFilters(tags=["rust", "beginner"]), ["Python Basics", "Rust Systems"]),
        ],
    )
    async def test_filters(self, in_memory_session, catalog, filters, expected):
        assert await titles(CourseRepository(in_memory_session), filters) == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("search", ["%", "_", "\\"])
    async def test_search_wildcards_are_literal(self, in_memory_session, catalog, search):
        assert await titles(CourseRepository(in_memory_session), CourseFilters(search=search)) == []

    @pytest.mark.asyncio
    async def test_search_special_characters(self, in_memory_session, catalog, add_course):
        await add_course("100% Python", slug="100-python", tags=["c_sharp", 'say "hi"'])
        await add_course("Csharp Tricks", slug="csharp-tricks", tags=["cxsharp"])
        repo = CourseRepository(in_memory_session)

        assert await titles(repo, CourseFilters(search="100%")) == ["100% Python"]
        assert await titles(repo, CourseFilters(tags=["c_sharp"])) == ["100% Python"]
        assert await titles(repo, CourseFilters(tags=['say "hi"'])) == ["100% Python"]
        assert await titles(repo, CourseFilters(tags=["say"])) == []

    @pytest.mark.asyncio
    async def test_sort_by_price_descending(self, in_memory_session, catalog):
        repo = CourseRepository(in_memory_session)
        assert await titles(repo, sort_by=CourseSortField.price, descending=True) == [
            "Django Web",
            "Rust Systems",
            "Python Basics",
        ]

    @pytest.mark.asyncio
    async def test_listing_relations_are_loaded(self, in_memory_session, catalog):
        page = await CourseRepository(in_memory_session).search_published(
            CourseFilters(), CourseSortField.createdAt, True, page=1, limit=1
        )
        assert page.total == 3
        course = page.items[0]
        assert course.tutor.user.username == "ada"
        assert course.category.slug == "programming"
        assert len(course.sections) == 1


class TestCourseQueries:
    @pytest.mark.asyncio
    async def test_slug_exists(self, in_memory_session, catalog):
        repo = CourseRepository(in_memory_session)
        assert await repo.slug_exists("python-basics")
        assert not await repo.slug_exists("python-basics", exclude_id=catalog["python"].id)
        assert not await repo.slug_exists("missing")

    @pytest.mark.asyncio
    async def test_get_published(self, in_memory_session, catalog):
        repo = CourseRepository(in_memory_session)
        assert (await repo.get_published(catalog["rust"].id)).title == "Rust Systems"
        assert await repo.get_published(catalog["draft"].id) is None

    @pytest.mark.asyncio
    async def test_get_detail_loads_outline(self, in_memory_session, catalog):
        course = await CourseRepository(in_memory_session).get_detail(catalog["python"].id)
        assert [lesson.title for lesson in course.sections[0].lessons] == ["One", "Two"]

    @pytest.mark.asyncio
    async def test_active_lessons_and_duration(self, in_memory_session, catalog):
        repo = CourseRepository(in_memory_session)
        course = catalog["python"]
        second = course.sections[0].lessons[1]
        second.is_active = False
        in_memory_session.add(second)
        await in_memory_session.commit()

        assert await repo.count_lessons(course.id) == 2
        assert await repo.active_lesson_ids(course.id) == [course.sections[0].lessons[0].id]
        assert await repo.active_video_seconds(course.id) == 120

    @pytest.mark.asyncio
    async def test_inactive_section_hides_its_lessons(self, in_memory_session, catalog):
        repo = CourseRepository(in_memory_session)
        section = catalog["rust"].sections[0]
        section.is_active = False
        in_memory_session.add(section)
        await in_memory_session.commit()

        assert await repo.active_lesson_ids(catalog["rust"].id) == []
        assert await repo.active_video_seconds(catalog["rust"].id) == 0

    @pytest.mark.asyncio
    async def test_counts(self, in_memory_session, catalog, tutor):
        repo = CourseRepository(in_memory_session)
        assert await repo.count_published() == 3
        assert await repo.count_by_status() == {"PUBLISHED": 3, "DRAFT": 1}
        assert await repo.count_sections(catalog["python"].id) == 1
        assert sorted(await repo.ids_for_tutor(tutor.id)) == sorted(c.id for c in catalog.values())
        assert not await repo.has_enrollments(catalog["python"].id)

    @pytest.mark.asyncio
    async def test_lesson_repository_scopes_to_course(self, in_memory_session, catalog):
        repo = LessonRepository(in_memory_session)
        lesson: Lesson = catalog["python"].sections[0].lessons[0]
        assert (await repo.get_in_course(catalog["python"].id, lesson.id)).id == lesson.id
        assert await repo.get_in_course(catalog["rust"].id, lesson.id) is None
