"""Authentication service: registration, login and token rotation."""

import asyncio
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.config import settings
from welltrack.core.exceptions import (
    BadRequestException,
    ConflictException,
    UnauthorizedException,
)
from welltrack.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    generate_secure_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from welltrack.models.auth_tokens import password_reset_tokens, refresh_tokens
from welltrack.models.users import users
from welltrack.schemas.auth import (
    AuthResponse,
    AuthUser,
    LoginRequest,
    RegisterRequest,
    TokenPair,
)
from welltrack.services.audit_service import AuditAction, AuditService
from welltrack.services.notification_service import (
    NotificationSender,
    password_reset_notification,
)

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"
INVALID_RESET_TOKEN = "Invalid or expired password reset token"


async def hash_password(password: str) -> str:
    """bcrypt off the event loop."""
    return await asyncio.to_thread(get_password_hash, password)


async def check_password(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)


class AuthService:
    """Issues, rotates and revokes credentials."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db
        self.audit = AuditService(db)

    async def _issue_tokens(self, user_id: UUID, email: str) -> TokenPair:
        """
        Create an access/refresh pair and persist the refresh token.

        The caller commits.
        """
        access_token = create_access_token(str(user_id), email)
        refresh_token, expires_at = create_refresh_token(str(user_id))

        await self.db.execute(
            insert(refresh_tokens).values(
                user_id=user_id,
                token=refresh_token,
                expires_at=expires_at,
            )
        )
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """
        Create an account and sign it in.

        Raises:
            ConflictException: If the email is already registered
        """
        email = str(data.email)
        existing = await self.db.execute(select(users.c.id).where(users.c.email == email))
        if existing.first():
            raise ConflictException("Email already in use")

        password_hash = await hash_password(data.password)
        try:
            result = await self.db.execute(
                insert(users)
                .values(email=email, password_hash=password_hash, display_name=data.display_name)
                .returning(users.c.id, users.c.email, users.c.display_name)
            )
            row = result.one()
            tokens = await self._issue_tokens(row.id, row.email)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException("Email already in use") from None

        logger.info("user_registered", user_id=str(row.id))
        return AuthResponse(
            user=AuthUser.model_validate(dict(row._mapping)),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def login(self, data: LoginRequest) -> AuthResponse:
        """
        Verify credentials and sign in.

        Unknown email and wrong password are indistinguishable to the client.

        Raises:
            UnauthorizedException: If the credentials do not match
        """
        result = await self.db.execute(select(users).where(users.c.email == str(data.email)))
        user = result.first()
        if not user or not await check_password(data.password, user.password_hash):
            logger.info("login_failed")
            raise UnauthorizedException(INVALID_CREDENTIALS)

        await self.db.execute(
            update(users).where(users.c.id == user.id).values(last_login_at=datetime.now(UTC))
        )
        tokens = await self._issue_tokens(user.id, user.email)
        await self.audit.record(user.id, AuditAction.LOGIN)
        await self.db.commit()

        logger.info("user_logged_in", user_id=str(user.id))
        return AuthResponse(
            user=AuthUser(id=user.id, email=user.email, display_name=user.display_name),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh token.

        Deleting the stored row is the claim on the token: of two concurrent
        requests presenting the same token only one deletes a row, the other
        sees nothing to delete and is rejected.

        Raises:
            UnauthorizedException: If the token is invalid, expired, already
                rotated or revoked, or its user no longer exists
        """
        payload = decode_refresh_token(refresh_token)
        if not payload or not payload.get("sub"):
            raise UnauthorizedException(INVALID_REFRESH_TOKEN)

        result = await self.db.execute(
            delete(refresh_tokens)
            .where(refresh_tokens.c.token == refresh_token)
            .returning(refresh_tokens.c.user_id, refresh_tokens.c.expires_at)
        )
        claimed = result.first()
        if not claimed:
            await self.db.rollback()
            logger.warning("refresh_token_reuse_rejected")
            raise UnauthorizedException(INVALID_REFRESH_TOKEN)

        if claimed.expires_at <= datetime.now(UTC) or str(claimed.user_id) != payload["sub"]:
            await self.db.commit()
            raise UnauthorizedException(INVALID_REFRESH_TOKEN)

        user_result = await self.db.execute(
            select(users.c.id, users.c.email).where(users.c.id == claimed.user_id)
        )
        user = user_result.first()
        if not user:
            await self.db.commit()
            raise UnauthorizedException(INVALID_REFRESH_TOKEN)

        tokens = await self._issue_tokens(user.id, user.email)
        await self.db.commit()

        logger.info("refresh_token_rotated", user_id=str(user.id))
        return tokens

    async def logout(self, refresh_token: str) -> None:
        """Revoke a refresh token. Unknown tokens are ignored."""
        result = await self.db.execute(
            delete(refresh_tokens).where(refresh_tokens.c.token == refresh_token)
        )
        await self.db.commit()
        logger.info("user_logged_out", revoked=result.rowcount)

    async def forgot_password(self, email: str, sender: NotificationSender) -> None:
        """
        Start a password reset.

        Does nothing for unknown emails; the response must not reveal whether
        an account exists. Delivery failures are logged, not raised.
        """
        result = await self.db.execute(select(users.c.id, users.c.email).where(users.c.email == email))
        user = result.first()
        if not user:
            return

        await self.db.execute(
            update(password_reset_tokens)
            .where(
                password_reset_tokens.c.user_id == user.id,
                password_reset_tokens.c.used.is_(False),
            )
            .values(used=True)
        )

        raw_token = generate_secure_token()
        await self.db.execute(
            insert(password_reset_tokens).values(
                user_id=user.id,
                token_hash=hash_token(raw_token),
                expires_at=datetime.now(UTC) + timedelta(minutes=settings.password_reset_expire_minutes),
            )
        )
        await self.db.commit()
        logger.info("password_reset_requested", user_id=str(user.id))

        reset_url = f"{settings.app_base_url.rstrip('/')}/reset-password?token={raw_token}"
        try:
            await sender.send(
                user.email,
                password_reset_notification(reset_url, settings.password_reset_expire_minutes),
            )
        except Exception as e:
            logger.error("password_reset_notification_failed", user_id=str(user.id), error=str(e))

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Complete a password reset and sign the user out everywhere.

        Raises:
            BadRequestException: If the token is unknown, used or expired
        """
        result = await self.db.execute(
            select(password_reset_tokens).where(password_reset_tokens.c.token_hash == hash_token(token))
        )
        record = result.first()
        if not record or record.used or record.expires_at <= datetime.now(UTC):
            raise BadRequestException(INVALID_RESET_TOKEN)

        # Claim the token so a concurrent reset with the same token fails
        claimed = await self.db.execute(
            update(password_reset_tokens)
            .where(
                password_reset_tokens.c.id == record.id,
                password_reset_tokens.c.used.is_(False),
            )
            .values(used=True)
        )
        if claimed.rowcount != 1:
            await self.db.rollback()
            raise BadRequestException(INVALID_RESET_TOKEN)

        await self._set_password(record.user_id, new_password)
        await self.db.commit()
        logger.info("password_reset_completed", user_id=str(record.user_id))

    async def change_password(self, user_id: UUID, current_password: str, new_password: str) -> None:
        """
        Change the password of a signed-in user and revoke all their sessions.

        Raises:
            UnauthorizedException: If the current password is wrong
        """
        result = await self.db.execute(select(users.c.password_hash).where(users.c.id == user_id))
        row = result.first()
        if not row or not await check_password(current_password, row.password_hash):
            raise UnauthorizedException("Current password is incorrect")

        await self._set_password(user_id, new_password)
        await self.db.commit()
        logger.info("password_changed", user_id=str(user_id))

    async def _set_password(self, user_id: UUID, new_password: str) -> None:
        await self.db.execute(
            update(users)
            .where(users.c.id == user_id)
            .values(password_hash=await hash_password(new_password))
        )
        await self.db.execute(delete(refresh_tokens).where(refresh_tokens.c.user_id == user_id))
        await self.audit.record(user_id, AuditAction.PASSWORD_CHANGE)
