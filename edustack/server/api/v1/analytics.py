"""
Analytics Endpoints.

Platform overview for admins, a per-tutor report, and a per-course report
for the course's tutor or an admin. ``timeframe`` is one of 7d, 30d, 90d
or 1y; anything else falls back to 30d.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query

from edustack.core.models.io import ApiResponse
from edustack.server.services.analytics import AnalyticsService
from edustack.server.services.deps import AdminUser, CurrentUser, SessionDep, TutorUser

router = APIRouter()

Timeframe = Query(None, description="7d, 30d, 90d or 1y")


@router.get(
    "/overview",
    response_model=ApiResponse[Dict[str, Any]],
    summary="Platform Overview",
    description="Totals, period growth, top categories, daily signups and course counts by status.",
    responses={403: {"description": "Admin access required"}},
)
async def overview(
    user: AdminUser, session: SessionDep, timeframe: Optional[str] = Timeframe
) -> ApiResponse[Dict[str, Any]]:
    return ApiResponse[Dict[str, Any]](data=await AnalyticsService(session).overview(timeframe))


@router.get(
    "/tutor",
    response_model=ApiResponse[Dict[str, Any]],
    summary="Tutor Report",
    description="Course, enrollment, revenue and review statistics for the calling tutor.",
    responses={403: {"description": "Tutor access required"}},
)
async def tutor_report(
    user: TutorUser, session: SessionDep, timeframe: Optional[str] = Timeframe
) -> ApiResponse[Dict[str, Any]]:
    return ApiResponse[Dict[str, Any]](data=await AnalyticsService(session).tutor_report(user, timeframe))


@router.get(
    "/course/{course_id}",
    response_model=ApiResponse[Dict[str, Any]],
    summary="Course Report",
    description="Enrollment, completion, review and per-lesson statistics for one course.",
    responses={403: {"description": "Access denied"}, 404: {"description": "Course not found"}},
)
async def course_report(
    course_id: str, user: CurrentUser, session: SessionDep, timeframe: Optional[str] = Timeframe
) -> ApiResponse[Dict[str, Any]]:
    return ApiResponse[Dict[str, Any]](data=await AnalyticsService(session).course_report(user, course_id, timeframe))
