"""
Course catalog and authoring service.

Covers the public catalog, course CRUD for tutors, publishing, the course
outline (sections and lessons) and lesson access control. Every write keeps
``Course.duration`` equal to the active lessons' video time in minutes.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from edustack.core.database.base import utc_now
from edustack.core.database.entities.courses import Course, Lesson, Section
from edustack.core.database.entities.users import User
from edustack.core.database.repositories.base import Page
from edustack.core.database.repositories.categories import CategoryRepository
from edustack.core.database.repositories.courses import (
    CourseFilters,
    CourseRepository,
    LessonRepository,
    SectionRepository,
)
from edustack.core.database.repositories.enrollments import EnrollmentRepository, ProgressRepository
from edustack.core.database.repositories.reviews import ReviewRepository
from edustack.core.errors import BadRequestError, ForbiddenError, NotFoundError
from edustack.core.identifiers import epoch_millis, slugify
from edustack.core.logging_config import get_logger
from edustack.core.models.domain.enums import CourseSortField, CourseStatus, SortOrder
from edustack.core.models.io.courses import (
    CourseCreate,
    CourseDetail,
    CourseUpdate,
    LessonCreate,
    LessonUpdate,
    SectionCreate,
    SectionUpdate,
)
from edustack.core.models.io.reviews import ReviewRead

logger = get_logger(__name__)

COURSE_NOT_FOUND = "Course not found"

# Optional fields that an update may clear by sending null.
COURSE_NULLABLE = {"short_description", "original_price", "thumbnail", "preview_video", "meta_title", "meta_description"}
SECTION_NULLABLE = {"description"}
LESSON_NULLABLE = {"description", "video_url", "video_duration", "text_content"}


def _changes(payload, nullable, **dump_options) -> Dict[str, Any]:
    """Fields sent in ``payload``; a null only counts for ``nullable`` fields."""
    data = payload.model_dump(exclude_unset=True, **dump_options)
    return {key: value for key, value in data.items() if value is not None or key in nullable}


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.admin_profile is not None


def owns_course(user: Optional[User], course: Course) -> bool:
    """True when ``user`` is the tutor who authored ``course``."""
    return user is not None and user.tutor_profile is not None and user.tutor_profile.id == course.tutor_id


class CourseService:
    """Course operations on one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.courses = CourseRepository(session)
        self.sections = SectionRepository(session)
        self.lessons = LessonRepository(session)
        self.categories = CategoryRepository(session)

    async def _unique_slug(self, title: str, exclude_id: Optional[str] = None) -> str:
        slug = slugify(title)
        if await self.courses.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{slug}-{epoch_millis()}"
        return slug

    async def _require_category(self, category_id: str) -> None:
        if await self.categories.get_by_id(category_id) is None:
            raise NotFoundError("Category not found")

    async def managed_course(self, user: User, course_id: str, action: str = "update") -> Course:
        """Load a course the user may manage (its tutor or an admin).

        Raises:
            NotFoundError: no such course
            ForbiddenError: the user neither owns the course nor is an admin
        """
        course = await self.courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError(COURSE_NOT_FOUND)
        if not (owns_course(user, course) or is_admin(user)):
            raise ForbiddenError(f"You can only {action} your own courses")
        return course

    async def _refresh_duration(self, course: Course) -> None:
        seconds = await self.courses.active_video_seconds(course.id)
        await self.courses.update(course, {"duration": round(seconds / 60)})

    async def _detail(self, course_id: str) -> Course:
        course = await self.courses.get_detail(course_id)
        if course is None:
            raise NotFoundError(COURSE_NOT_FOUND)
        return course

    # -- catalog ---------------------------------------------------------

    async def search(
        self,
        filters: CourseFilters,
        sort_by: CourseSortField,
        sort_order: SortOrder,
        page: int,
        limit: int,
    ) -> Page[Course]:
        return await self.courses.search_published(filters, sort_by, sort_order == SortOrder.desc, page, limit)

    async def get_course(self, course_id: str, viewer: Optional[User]) -> CourseDetail:
        """
        A course page: outline of active sections and lessons plus the latest reviews.

        Unpublished courses are reported missing to everyone except their
        tutor and admins. Each successful read counts as a view.
        """
        course = await self._detail(course_id)
        published = course.is_published and course.status == CourseStatus.PUBLISHED
        if not published and not (owns_course(viewer, course) or is_admin(viewer)):
            raise NotFoundError(COURSE_NOT_FOUND)

        detail = CourseDetail.model_validate(course).visible_to_public()
        await self.courses.increment(course.id, view_count=1)
        await self.session.commit()

        reviews = await ReviewRepository(self.session).latest_published_for_course(course.id, limit=5)
        return detail.model_copy(
            update={
                "view_count": detail.view_count + 1,
                "reviews": [ReviewRead.model_validate(review) for review in reviews],
            }
        )

    # -- authoring -------------------------------------------------------

    async def create_course(self, user: User, payload: CourseCreate) -> Course:
        await self._require_category(payload.category_id)
        data = payload.model_dump()
        course = Course(**data, slug=await self._unique_slug(payload.title), tutor_id=user.tutor_profile.id)
        await self.courses.create(course)
        await self.session.commit()
        logger.info(f"Course {course.id} created by tutor {course.tutor_id}")
        return await self._detail(course.id)

    async def update_course(self, user: User, course_id: str, payload: CourseUpdate) -> Course:
        course = await self.managed_course(user, course_id, "update")
        changes = _changes(payload, COURSE_NULLABLE)
        if "title" in changes:
            changes["slug"] = await self._unique_slug(changes["title"], exclude_id=course.id)
        if changes.get("category_id") is not None and changes["category_id"] != course.category_id:
            await self._require_category(changes["category_id"])
        if "status" in changes:
            changes["is_published"] = changes["status"] == CourseStatus.PUBLISHED
            if changes["is_published"] and course.published_at is None:
                changes["published_at"] = utc_now()
        await self.courses.update(course, changes)
        await self.session.commit()
        logger.info(f"Course {course.id} updated: {sorted(changes)}")
        return await self._detail(course.id)

    async def delete_course(self, user: User, course_id: str) -> None:
        course = await self.managed_course(user, course_id, "delete")
        if await self.courses.has_enrollments(course.id):
            raise BadRequestError("Cannot delete course with active enrollments. Archive it instead.")
        # Sections and lessons are removed through the ORM cascade, so load them first.
        course = await self._detail(course.id)
        lesson_ids = [lesson.id for section in course.sections for lesson in section.lessons]
        await ProgressRepository(self.session).delete_for_lessons(lesson_ids)
        await self.courses.delete(course)
        await self.session.commit()
        logger.info(f"Course {course_id} deleted")

    async def publish_course(self, user: User, course_id: str) -> Course:
        course = await self.managed_course(user, course_id, "publish")
        if await self.courses.count_sections(course.id) == 0:
            raise BadRequestError("Course must have at least one section to be published")
        if await self.courses.count_lessons(course.id) == 0:
            raise BadRequestError("Course must have at least one lesson to be published")
        await self.courses.update(
            course,
            {"status": CourseStatus.PUBLISHED, "is_published": True, "published_at": course.published_at or utc_now()},
        )
        await self.session.commit()
        logger.info(f"Course {course.id} published")
        return await self._detail(course.id)

    async def list_students(self, user: User, course_id: str, page: int, limit: int):
        course = await self.courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError(COURSE_NOT_FOUND)
        if not (owns_course(user, course) or is_admin(user)):
            raise ForbiddenError("Access denied")
        return await EnrollmentRepository(self.session).list_for_course(course.id, page, limit)

    # -- outline ---------------------------------------------------------

    async def _section(self, course_id: str, section_id: str) -> Section:
        section = await self.sections.get_in_course(course_id, section_id, with_lessons=True)
        if section is None:
            raise NotFoundError("Section not found")
        return section

    async def _lesson(self, course_id: str, lesson_id: str) -> Lesson:
        lesson = await self.lessons.get_in_course(course_id, lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")
        return lesson

    async def add_section(self, user: User, course_id: str, payload: SectionCreate) -> Section:
        course = await self.managed_course(user, course_id)
        section = await self.sections.create(Section(course_id=course.id, **payload.model_dump()))
        await self.session.commit()
        return section

    async def update_section(self, user: User, course_id: str, section_id: str, payload: SectionUpdate) -> Section:
        course = await self.managed_course(user, course_id)
        section = await self._section(course.id, section_id)
        changes = _changes(payload, SECTION_NULLABLE)
        await self.sections.update(section, changes)
        if "is_active" in changes:
            await self._refresh_duration(course)
        await self.session.commit()
        return section

    async def delete_section(self, user: User, course_id: str, section_id: str) -> None:
        course = await self.managed_course(user, course_id)
        section = await self._section(course.id, section_id)
        await ProgressRepository(self.session).delete_for_lessons([lesson.id for lesson in section.lessons])
        await self.sections.delete(section)
        await self._refresh_duration(course)
        await self.session.commit()
        logger.info(f"Section {section_id} removed from course {course.id}")

    async def add_lesson(self, user: User, course_id: str, section_id: str, payload: LessonCreate) -> Lesson:
        course = await self.managed_course(user, course_id)
        section = await self._section(course.id, section_id)
        lesson = await self.lessons.create(Lesson(section_id=section.id, **payload.model_dump(mode="json")))
        await self._refresh_duration(course)
        await self.session.commit()
        return lesson

    async def update_lesson(self, user: User, course_id: str, lesson_id: str, payload: LessonUpdate) -> Lesson:
        course = await self.managed_course(user, course_id)
        lesson = await self._lesson(course.id, lesson_id)
        changes = _changes(payload, LESSON_NULLABLE, mode="json")
        await self.lessons.update(lesson, changes)
        await self._refresh_duration(course)
        await self.session.commit()
        return lesson

    async def delete_lesson(self, user: User, course_id: str, lesson_id: str) -> None:
        course = await self.managed_course(user, course_id)
        lesson = await self._lesson(course.id, lesson_id)
        await ProgressRepository(self.session).delete_for_lessons([lesson.id])
        await self.lessons.delete(lesson)
        await self._refresh_duration(course)
        await self.session.commit()
        logger.info(f"Lesson {lesson_id} removed from course {course.id}")

    async def get_lesson(self, viewer: Optional[User], course_id: str, lesson_id: str) -> Lesson:
        """Full lesson content for previews, enrolled students, the course tutor and admins."""
        course = await self.courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError(COURSE_NOT_FOUND)
        lesson = await self._lesson(course.id, lesson_id)
        if lesson.is_preview or owns_course(viewer, course) or is_admin(viewer):
            return lesson
        if viewer is not None and await EnrollmentRepository(self.session).get_for(viewer.id, course.id) is not None:
            return lesson
        raise ForbiddenError("You must be enrolled in this course to access this lesson")

