"""
Course Endpoints.

The public catalog, course authoring for tutors (create, update, publish,
delete), the course outline of sections and lessons, and lesson access.
Authoring endpoints require the owning tutor or an admin.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status

from edustack.core.database.repositories.courses import CourseFilters
from edustack.core.models.domain.enums import CourseLevel, CourseSortField, SortOrder
from edustack.core.models.io import (
    ApiResponse,
    CourseCreate,
    CourseData,
    CourseDetailData,
    CourseListData,
    CourseStudentRead,
    CourseStudentsData,
    CourseSummary,
    CourseUpdate,
    LessonCreate,
    LessonData,
    LessonRead,
    LessonUpdate,
    Pagination,
    SectionCreate,
    SectionData,
    SectionRead,
    SectionUpdate,
)
from edustack.server.services.courses import CourseService
from edustack.server.services.deps import CurrentUser, OptionalUser, PageDep, SessionDep, TutorUser

router = APIRouter()


def catalog_filters(
    category: Optional[str] = Query(None, description="Category id"),
    level: Optional[CourseLevel] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    language: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Matches title, description or an exact tag"),
    tags: List[str] = Query([], description="Courses carrying any of these tags"),
) -> CourseFilters:
    return CourseFilters(
        category_id=category,
        level=level,
        min_price=min_price,
        max_price=max_price,
        language=language,
        search=search,
        tags=tags,
    )


CatalogFilters = Annotated[CourseFilters, Depends(catalog_filters)]


def _course_data(course) -> CourseData:
    return CourseData(course=CourseSummary.model_validate(course))


@router.get(
    "",
    response_model=ApiResponse[CourseListData],
    summary="List Courses",
    description="Search the catalog of published courses with filtering, sorting and pagination.",
    response_description="A page of courses with tutor, category and section count.",
)
async def list_courses(
    session: SessionDep,
    paging: PageDep,
    filters: CatalogFilters,
    sort_by: CourseSortField = Query(CourseSortField.createdAt, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.desc, alias="sortOrder"),
) -> ApiResponse[CourseListData]:
    page = await CourseService(session).search(filters, sort_by, sort_order, paging.page, paging.limit)
    return ApiResponse[CourseListData](
        data=CourseListData(
            courses=[CourseSummary.model_validate(course) for course in page.items],
            pagination=Pagination.from_page(page),
        )
    )


@router.get(
    "/{course_id}",
    response_model=ApiResponse[CourseDetailData],
    summary="Get Course",
    description=(
        "A course with its active outline and the five latest reviews. Unpublished courses are "
        "only visible to their tutor and admins."
    ),
    responses={404: {"description": "Course not found"}},
)
async def get_course(course_id: str, session: SessionDep, viewer: OptionalUser) -> ApiResponse[CourseDetailData]:
    course = await CourseService(session).get_course(course_id, viewer)
    return ApiResponse[CourseDetailData](data=CourseDetailData(course=course))


@router.post(
    "",
    response_model=ApiResponse[CourseData],
    status_code=status.HTTP_201_CREATED,
    summary="Create Course",
    description="Create a draft course owned by the calling tutor.",
    responses={403: {"description": "Tutor access required"}, 404: {"description": "Category not found"}},
)
async def create_course(payload: CourseCreate, user: TutorUser, session: SessionDep) -> ApiResponse[CourseData]:
    course = await CourseService(session).create_course(user, payload)
    return ApiResponse[CourseData](message="Course created successfully", data=_course_data(course))


@router.put(
    "/{course_id}",
    response_model=ApiResponse[CourseData],
    summary="Update Course",
    description="Update a course. Changing the title recomputes the slug.",
    responses={403: {"description": "You can only update your own courses"}},
)
async def update_course(
    course_id: str, payload: CourseUpdate, user: CurrentUser, session: SessionDep
) -> ApiResponse[CourseData]:
    course = await CourseService(session).update_course(user, course_id, payload)
    return ApiResponse[CourseData](message="Course updated successfully", data=_course_data(course))


@router.delete(
    "/{course_id}",
    response_model=ApiResponse,
    summary="Delete Course",
    description="Delete a course together with its outline. Courses with enrollments must be archived instead.",
    responses={400: {"description": "The course has enrollments"}},
)
async def delete_course(course_id: str, user: CurrentUser, session: SessionDep) -> ApiResponse:
    await CourseService(session).delete_course(user, course_id)
    return ApiResponse(message="Course deleted successfully")


@router.post(
    "/{course_id}/publish",
    response_model=ApiResponse[CourseData],
    summary="Publish Course",
    description="Publish a course that has at least one section and one lesson.",
    responses={400: {"description": "The course has no sections or no lessons"}},
)
async def publish_course(course_id: str, user: CurrentUser, session: SessionDep) -> ApiResponse[CourseData]:
    course = await CourseService(session).publish_course(user, course_id)
    return ApiResponse[CourseData](message="Course published successfully", data=_course_data(course))


@router.get(
    "/{course_id}/students",
    response_model=ApiResponse[CourseStudentsData],
    summary="List Course Students",
    description="Enrollments of a course with the students' identity. Tutor of the course or admin only.",
    responses={403: {"description": "Access denied"}},
)
async def list_students(
    course_id: str, user: CurrentUser, session: SessionDep, paging: PageDep
) -> ApiResponse[CourseStudentsData]:
    page = await CourseService(session).list_students(user, course_id, paging.page, paging.limit)
    return ApiResponse[CourseStudentsData](
        data=CourseStudentsData(
            enrollments=[CourseStudentRead.model_validate(enrollment) for enrollment in page.items],
            pagination=Pagination.from_page(page),
        )
    )


@router.post(
    "/{course_id}/sections",
    response_model=ApiResponse[SectionData],
    status_code=status.HTTP_201_CREATED,
    summary="Add Section",
)
async def add_section(
    course_id: str, payload: SectionCreate, user: CurrentUser, session: SessionDep
) -> ApiResponse[SectionData]:
    section = await CourseService(session).add_section(user, course_id, payload)
    return ApiResponse[SectionData](
        message="Section created successfully", data=SectionData(section=SectionRead.model_validate(section))
    )


@router.put(
    "/{course_id}/sections/{section_id}",
    response_model=ApiResponse[SectionData],
    summary="Update Section",
)
async def update_section(
    course_id: str, section_id: str, payload: SectionUpdate, user: CurrentUser, session: SessionDep
) -> ApiResponse[SectionData]:
    section = await CourseService(session).update_section(user, course_id, section_id, payload)
    return ApiResponse[SectionData](
        message="Section updated successfully", data=SectionData(section=SectionRead.model_validate(section))
    )


@router.delete(
    "/{course_id}/sections/{section_id}",
    response_model=ApiResponse,
    summary="Delete Section",
    description="Delete a section with its lessons and the learners' progress on them.",
)
async def delete_section(course_id: str, section_id: str, user: CurrentUser, session: SessionDep) -> ApiResponse:
    await CourseService(session).delete_section(user, course_id, section_id)
    return ApiResponse(message="Section deleted successfully")


@router.post(
    "/{course_id}/sections/{section_id}/lessons",
    response_model=ApiResponse[LessonData],
    status_code=status.HTTP_201_CREATED,
    summary="Add Lesson",
)
async def add_lesson(
    course_id: str, section_id: str, payload: LessonCreate, user: CurrentUser, session: SessionDep
) -> ApiResponse[LessonData]:
    lesson = await CourseService(session).add_lesson(user, course_id, section_id, payload)
    return ApiResponse[LessonData](
        message="Lesson created successfully", data=LessonData(lesson=LessonRead.model_validate(lesson))
    )


@router.get(
    "/{course_id}/lessons/{lesson_id}",
    response_model=ApiResponse[LessonData],
    summary="Get Lesson",
    description="Full lesson content for previews, enrolled students, the course tutor and admins.",
    responses={403: {"description": "You must be enrolled in this course to access this lesson"}},
)
async def get_lesson(
    course_id: str, lesson_id: str, session: SessionDep, viewer: OptionalUser
) -> ApiResponse[LessonData]:
    lesson = await CourseService(session).get_lesson(viewer, course_id, lesson_id)
    return ApiResponse[LessonData](data=LessonData(lesson=LessonRead.model_validate(lesson)))


@router.put(
    "/{course_id}/lessons/{lesson_id}",
    response_model=ApiResponse[LessonData],
    summary="Update Lesson",
)
async def update_lesson(
    course_id: str, lesson_id: str, payload: LessonUpdate, user: CurrentUser, session: SessionDep
) -> ApiResponse[LessonData]:
    lesson = await CourseService(session).update_lesson(user, course_id, lesson_id, payload)
    return ApiResponse[LessonData](
        message="Lesson updated successfully", data=LessonData(lesson=LessonRead.model_validate(lesson))
    )


@router.delete(
    "/{course_id}/lessons/{lesson_id}",
    response_model=ApiResponse,
    summary="Delete Lesson",
)
async def delete_lesson(course_id: str, lesson_id: str, user: CurrentUser, session: SessionDep) -> ApiResponse:
    await CourseService(session).delete_lesson(user, course_id, lesson_id)
    return ApiResponse(message="Lesson deleted successfully")
