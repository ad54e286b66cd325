"""Endpoints for the signed-in user's account."""

from html import escape

from fastapi import APIRouter, Query, Request, Response, status
from fastapi.responses import HTMLResponse

from welltrack.config import settings
from welltrack.core.exceptions import NotFoundException
from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession
from welltrack.schemas.common import MessageResponse
from welltrack.schemas.users import (
    AuditLogEntry,
    ChangePasswordRequest,
    UserProfile,
    UserUpdate,
)
from welltrack.services.audit_service import AuditService
from welltrack.services.auth_service import AuthService
from welltrack.services.user_service import UserService

router = APIRouter()

_PAGE = (
    '<!DOCTYPE html><html lang="en"><head><meta charset="utf-8">'
    "<title>{title} - WellTrack</title>"
    '<meta name="viewport" content="width=device-width,initial-scale=1"></head>'
    '<body style="font-family:sans-serif;max-width:480px;margin:60px auto;'
    'text-align:center;color:#374151">{body}</body></html>'
)


def _page(title: str, body: str, status_code: int) -> HTMLResponse:
    return HTMLResponse(_PAGE.format(title=escape(title), body=body), status_code=status_code)


@router.get("/me", response_model=UserProfile, summary="Get my profile")
async def get_me(user_id: CurrentUserId, db: DatabaseSession) -> UserProfile:
    return await UserService(db).get_profile(user_id)


@router.patch("/me", response_model=UserProfile, summary="Update my profile")
@write_limit
async def update_me(
    request: Request,
    data: UserUpdate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> UserProfile:
    """
    Update profile fields.

    Only fields present in the body change. Changing the email is audited;
    opting in to the weekly digest enables its unsubscribe link.
    """
    return await UserService(db).update_profile(user_id, data)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT, summary="Delete my account")
@write_limit
async def delete_me(request: Request, user_id: CurrentUserId, db: DatabaseSession) -> Response:
    """Delete the account and everything it owns."""
    await UserService(db).delete_account(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/me/password", response_model=MessageResponse, summary="Change my password")
@write_limit
async def change_password(
    request: Request,
    data: ChangePasswordRequest,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> MessageResponse:
    """Change the password; every refresh token of the account is revoked."""
    await AuthService(db).change_password(user_id, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully")


@router.get("/me/audit-log", response_model=list[AuditLogEntry], summary="My security events")
async def get_audit_log(user_id: CurrentUserId, db: DatabaseSession) -> list[AuditLogEntry]:
    return await AuditService(db).list_for_user(user_id)


@router.get(
    "/unsubscribe",
    response_class=HTMLResponse,
    summary="Unsubscribe from the weekly digest",
)
async def unsubscribe(db: DatabaseSession, token: str | None = Query(None)) -> HTMLResponse:
    """One-click opt-out linked from digest emails; no sign-in required."""
    if not token:
        return _page("Unsubscribe", "<p>Missing unsubscribe token.</p>", status.HTTP_400_BAD_REQUEST)

    try:
        await UserService(db).unsubscribe_digest(token)
    except NotFoundException as e:
        return _page("Unsubscribe", f"<p>{escape(e.message)}.</p>", status.HTTP_404_NOT_FOUND)

    settings_url = escape(f"{settings.app_base_url.rstrip('/')}/settings")
    body = (
        '<h1 style="color:#0d9488">You\'ve been unsubscribed</h1>'
        "<p>You will no longer receive weekly wellness digest emails from WellTrack.</p>"
        f'<p>You can re-enable them any time in <a href="{settings_url}" '
        'style="color:#0d9488">Settings</a>.</p>'
    )
    return _page("Unsubscribed", body, status.HTTP_200_OK)
