"""
Review Endpoints.

Course reviews with rating statistics. Enrolled students write one review
per course; any user can like a review.
"""

from fastapi import APIRouter, Query, status

from edustack.core.models.domain.enums import ReviewSortField, SortOrder
from edustack.core.models.io import (
    ApiResponse,
    LikeResult,
    ReviewCreate,
    ReviewData,
    ReviewListData,
    ReviewUpdate,
)
from edustack.server.services.deps import CurrentUser, PageDep, SessionDep, StudentUser
from edustack.server.services.reviews import ReviewService

router = APIRouter()


@router.get(
    "/course/{course_id}",
    response_model=ApiResponse[ReviewListData],
    summary="List Course Reviews",
    description="Published reviews of a course with the rating distribution.",
)
async def list_course_reviews(
    course_id: str,
    session: SessionDep,
    paging: PageDep,
    sort_by: ReviewSortField = Query(ReviewSortField.createdAt, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.desc, alias="sortOrder"),
) -> ApiResponse[ReviewListData]:
    data = await ReviewService(session).list_for_course(course_id, sort_by, sort_order, paging.page, paging.limit)
    return ApiResponse[ReviewListData](data=data)


@router.post(
    "/{course_id}",
    response_model=ApiResponse[ReviewData],
    status_code=status.HTTP_201_CREATED,
    summary="Create Review",
    description="Review a course the calling student is enrolled in.",
    responses={
        400: {"description": "You have already reviewed this course"},
        403: {"description": "You must be enrolled in this course to leave a review"},
        404: {"description": "Course not found"},
    },
)
async def create_review(
    course_id: str, payload: ReviewCreate, user: StudentUser, session: SessionDep
) -> ApiResponse[ReviewData]:
    review = await ReviewService(session).create_review(user, course_id, payload)
    return ApiResponse[ReviewData](message="Review created successfully", data=ReviewData(review=review))


@router.put(
    "/{course_id}",
    response_model=ApiResponse[ReviewData],
    summary="Update Review",
    responses={404: {"description": "Review not found"}},
)
async def update_review(
    course_id: str, payload: ReviewUpdate, user: StudentUser, session: SessionDep
) -> ApiResponse[ReviewData]:
    review = await ReviewService(session).update_review(user, course_id, payload)
    return ApiResponse[ReviewData](message="Review updated successfully", data=ReviewData(review=review))


@router.delete(
    "/{course_id}",
    response_model=ApiResponse,
    summary="Delete Review",
    responses={404: {"description": "Review not found"}},
)
async def delete_review(course_id: str, user: StudentUser, session: SessionDep) -> ApiResponse:
    await ReviewService(session).delete_review(user, course_id)
    return ApiResponse(message="Review deleted successfully")


@router.post(
    "/{review_id}/like",
    response_model=ApiResponse[LikeResult],
    summary="Toggle Review Like",
    description="Like a review, or remove the caller's like when one exists.",
    responses={404: {"description": "Review not found"}},
)
async def toggle_like(review_id: str, user: CurrentUser, session: SessionDep) -> ApiResponse[LikeResult]:
    liked = await ReviewService(session).toggle_like(user, review_id)
    return ApiResponse[LikeResult](message="Review liked" if liked else "Review unliked", data=LikeResult(liked=liked))
