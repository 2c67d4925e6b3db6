"""
User Profile Endpoints.

Profile reads and edits for the authenticated user and the role-specific
dashboard summary.
"""

from typing import Any, Dict

from fastapi import APIRouter

from edustack.core.models.io import ApiResponse, ProfileUpdate, UserData, UserRead
from edustack.server.services.analytics import AnalyticsService
from edustack.server.services.auth import AuthService
from edustack.server.services.deps import CurrentUser, SessionDep

router = APIRouter()


@router.get(
    "/profile",
    response_model=ApiResponse[UserData],
    summary="Get Profile",
    description="Return the caller's profile including roles and learner/tutor/admin details.",
)
async def get_profile(user: CurrentUser) -> ApiResponse[UserData]:
    return ApiResponse[UserData](data=UserData(user=UserRead.model_validate(user)))


@router.put(
    "/profile",
    response_model=ApiResponse[UserData],
    summary="Update Profile",
    description="Update the caller's editable profile fields. Omitted fields are left unchanged.",
    responses={400: {"description": "Validation failed"}},
)
async def update_profile(payload: ProfileUpdate, user: CurrentUser, session: SessionDep) -> ApiResponse[UserData]:
    updated = await AuthService(session).update_profile(user, payload)
    return ApiResponse[UserData](
        message="Profile updated successfully",
        data=UserData(user=UserRead.model_validate(updated)),
    )


@router.get(
    "/dashboard",
    response_model=ApiResponse[Dict[str, Any]],
    summary="Dashboard",
    description=(
        "Role-specific dashboard. Admins get platform statistics, tutors their courses, "
        "enrollments, earnings and reviews, students their learning progress."
    ),
)
async def dashboard(user: CurrentUser, session: SessionDep) -> ApiResponse[Dict[str, Any]]:
    return ApiResponse[Dict[str, Any]](data=await AnalyticsService(session).dashboard(user))
