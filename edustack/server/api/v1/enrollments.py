"""
Enrollment Endpoints.

Students enroll in free courses, follow their enrollments, record lesson
progress and unenroll. Paid courses answer 402 and go through the payments
flow instead.
"""

from typing import Optional

from fastapi import APIRouter, Query, status

from edustack.core.models.domain.enums import EnrollmentStatus
from edustack.core.models.io import (
    ApiResponse,
    EnrollmentData,
    EnrollmentDetailData,
    EnrollmentListData,
    EnrollmentRead,
    Pagination,
    ProgressResult,
    ProgressUpdate,
)
from edustack.server.services.deps import NotificationHubDep, PageDep, SessionDep, StudentUser
from edustack.server.services.enrollments import EnrollmentService

router = APIRouter()


@router.post(
    "/{course_id}",
    response_model=ApiResponse[EnrollmentData],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll",
    description="Enroll the calling student in a free published course.",
    response_description="The new enrollment with its course.",
    responses={
        400: {"description": "Already enrolled in this course"},
        402: {"description": "Payment required, with the course price"},
        404: {"description": "Course not found or not available for enrollment"},
    },
)
async def enroll(
    course_id: str, user: StudentUser, session: SessionDep, hub: NotificationHubDep
) -> ApiResponse[EnrollmentData]:
    enrollment = await EnrollmentService(session, hub).enroll(user, course_id)
    return ApiResponse[EnrollmentData](
        message="Successfully enrolled in course", data=EnrollmentData(enrollment=enrollment)
    )


@router.get(
    "",
    response_model=ApiResponse[EnrollmentListData],
    summary="List Enrollments",
    description="The calling student's enrollments, newest first, optionally filtered by status.",
)
async def list_enrollments(
    user: StudentUser,
    session: SessionDep,
    hub: NotificationHubDep,
    paging: PageDep,
    enrollment_status: Optional[EnrollmentStatus] = Query(None, alias="status"),
) -> ApiResponse[EnrollmentListData]:
    page = await EnrollmentService(session, hub).list_enrollments(user, enrollment_status, paging.page, paging.limit)
    return ApiResponse[EnrollmentListData](
        data=EnrollmentListData(
            enrollments=[EnrollmentRead.model_validate(enrollment) for enrollment in page.items],
            pagination=Pagination.from_page(page),
        )
    )


@router.get(
    "/{course_id}",
    response_model=ApiResponse[EnrollmentDetailData],
    summary="Get Enrollment",
    description="One enrollment with the course outline, lesson progress and certificate.",
    responses={404: {"description": "Enrollment not found"}},
)
async def get_enrollment(
    course_id: str, user: StudentUser, session: SessionDep, hub: NotificationHubDep
) -> ApiResponse[EnrollmentDetailData]:
    enrollment = await EnrollmentService(session, hub).get_enrollment(user, course_id)
    return ApiResponse[EnrollmentDetailData](data=EnrollmentDetailData(enrollment=enrollment))


@router.put(
    "/{course_id}/progress/{lesson_id}",
    response_model=ApiResponse[ProgressResult],
    summary="Update Lesson Progress",
    description=(
        "Record time spent, playback position or completion of a lesson and recompute the course "
        "progress. Reaching 100% completes the enrollment and issues a certificate."
    ),
    responses={404: {"description": "Enrollment or lesson not found"}},
)
async def update_progress(
    course_id: str,
    lesson_id: str,
    payload: ProgressUpdate,
    user: StudentUser,
    session: SessionDep,
    hub: NotificationHubDep,
) -> ApiResponse[ProgressResult]:
    result = await EnrollmentService(session, hub).record_progress(user, course_id, lesson_id, payload)
    return ApiResponse[ProgressResult](message="Progress updated successfully", data=result)


@router.delete(
    "/{course_id}",
    response_model=ApiResponse,
    summary="Unenroll",
    description="Remove an enrollment that is not completed, together with its progress.",
    responses={400: {"description": "Cannot unenroll from completed course"}},
)
async def unenroll(course_id: str, user: StudentUser, session: SessionDep, hub: NotificationHubDep) -> ApiResponse:
    await EnrollmentService(session, hub).unenroll(user, course_id)
    return ApiResponse(message="Successfully unenrolled from course")
