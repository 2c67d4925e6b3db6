"""
Authentication Endpoints.

Account registration, login and password management. Tokens are stateless
JWTs, so logging out is acknowledged without any server-side state.
"""

from fastapi import APIRouter, status

from edustack.core.logging_config import get_logger
from edustack.core.models.io import (
    ApiResponse,
    AuthPayload,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserData,
    UserRead,
    VerifyEmailRequest,
)
from edustack.server.services.auth import AuthService
from edustack.server.services.deps import CurrentUser, SessionDep

logger = get_logger(__name__)

router = APIRouter()

RESET_LINK_SENT = "If an account with this email exists, a password reset link has been sent."


@router.post(
    "/register",
    response_model=ApiResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a student or tutor account and return it together with an access token.",
    response_description="The new user and a bearer token.",
    responses={400: {"description": "Email or username already taken, or invalid user type"}},
)
async def register(payload: RegisterRequest, session: SessionDep) -> ApiResponse[AuthPayload]:
    user, token = await AuthService(session).register(payload)
    return ApiResponse[AuthPayload](
        message="User registered successfully",
        data=AuthPayload(user=UserRead.model_validate(user), token=token),
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthPayload],
    summary="Login",
    description="Exchange e-mail and password for an access token.",
    response_description="The user and a bearer token.",
    responses={401: {"description": "Invalid email or password"}},
)
async def login(payload: LoginRequest, session: SessionDep) -> ApiResponse[AuthPayload]:
    user, token = await AuthService(session).login(payload.email, payload.password)
    return ApiResponse[AuthPayload](
        message="Login successful",
        data=AuthPayload(user=UserRead.model_validate(user), token=token),
    )


@router.get(
    "/me",
    response_model=ApiResponse[UserData],
    summary="Current User",
    description="Return the authenticated user with roles, permissions and profiles.",
)
async def me(user: CurrentUser) -> ApiResponse[UserData]:
    return ApiResponse[UserData](data=UserData(user=UserRead.model_validate(user)))


@router.post(
    "/change-password",
    response_model=ApiResponse,
    summary="Change Password",
    description="Replace the caller's password after checking the current one.",
    responses={400: {"description": "Current password is incorrect"}},
)
async def change_password(payload: ChangePasswordRequest, user: CurrentUser, session: SessionDep) -> ApiResponse:
    await AuthService(session).change_password(user, payload.current_password, payload.new_password)
    return ApiResponse(message="Password changed successfully")


@router.post(
    "/forgot-password",
    response_model=ApiResponse,
    summary="Forgot Password",
    description="Issue a password reset token. The answer is the same whether or not the account exists.",
)
async def forgot_password(payload: ForgotPasswordRequest, session: SessionDep) -> ApiResponse:
    await AuthService(session).forgot_password(payload.email)
    return ApiResponse(message=RESET_LINK_SENT)


@router.post(
    "/reset-password",
    response_model=ApiResponse,
    summary="Reset Password",
    description="Set a new password using a password reset token.",
    responses={400: {"description": "Invalid or expired token"}},
)
async def reset_password(payload: ResetPasswordRequest, session: SessionDep) -> ApiResponse:
    await AuthService(session).reset_password(payload.token, payload.password)
    return ApiResponse(message="Password reset successfully")


@router.post(
    "/verify-email",
    response_model=ApiResponse,
    summary="Verify E-mail",
    description="Mark the account verified using an e-mail verification token.",
    responses={400: {"description": "Invalid or expired token"}},
)
async def verify_email(payload: VerifyEmailRequest, session: SessionDep) -> ApiResponse:
    await AuthService(session).verify_email(payload.token)
    return ApiResponse(message="Email verified successfully")


@router.post(
    "/logout",
    response_model=ApiResponse,
    summary="Logout",
    description="Acknowledge a logout. Clients discard their token.",
)
async def logout(user: CurrentUser) -> ApiResponse:
    logger.info(f"User {user.id} logged out")
    return ApiResponse(message="Logged out successfully")
