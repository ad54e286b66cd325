"""Authentication endpoints."""

from fastapi import APIRouter, Request, status

from welltrack.core.rate_limit import auth_limit
from welltrack.dependencies import DatabaseSession, Notifier
from welltrack.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenPair,
)
from welltrack.schemas.common import MessageResponse
from welltrack.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
@auth_limit
async def register(request: Request, data: RegisterRequest, db: DatabaseSession) -> AuthResponse:
    """
    Register with email and password.

    Returns the new user together with an access/refresh token pair.
    """
    return await AuthService(db).register(data)


@router.post("/login", response_model=AuthResponse, summary="Sign in")
@auth_limit
async def login(request: Request, data: LoginRequest, db: DatabaseSession) -> AuthResponse:
    return await AuthService(db).login(data)


@router.post("/refresh", response_model=TokenPair, summary="Rotate the refresh token")
@auth_limit
async def refresh(request: Request, data: RefreshRequest, db: DatabaseSession) -> TokenPair:
    """
    Exchange a refresh token for a new pair.

    The presented token is revoked; presenting it again fails with 401.
    """
    return await AuthService(db).refresh(data.refresh_token)


@router.post("/logout", response_model=MessageResponse, summary="Revoke a refresh token")
@auth_limit
async def logout(request: Request, data: LogoutRequest, db: DatabaseSession) -> MessageResponse:
    await AuthService(db).logout(data.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request a password reset link",
)
@auth_limit
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    db: DatabaseSession,
    notifier: Notifier,
) -> MessageResponse:
    """Always succeeds so the response does not reveal registered emails."""
    await AuthService(db).forgot_password(str(data.email), notifier)
    return MessageResponse(message="If that email is registered, a reset link has been sent")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Set a new password with a reset token",
)
@auth_limit
async def reset_password(
    request: Request,
    data: ResetPasswordRequest,
    db: DatabaseSession,
) -> MessageResponse:
    await AuthService(db).reset_password(data.token, data.password)
    return MessageResponse(message="Password has been reset successfully")
