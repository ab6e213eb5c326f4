"""Authentication endpoints: register, login, password reset."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.jwt import create_access_token
from certprep.auth.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    ResetPasswordConfirm,
    ResetPasswordRequest,
    UserResponse,
)
from certprep.auth.service import (
    authenticate_user,
    create_reset_token,
    get_user_by_email,
    register_user,
    reset_password,
)
from certprep.config import get_settings
from certprep.database import get_session
from certprep.db.models import User
from certprep.email.service import get_email_service
from certprep.schemas import MessageResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=create_access_token(user.id, user.email, user.role),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> AuthResponse:
    """Create an account and return an access token."""
    user = await register_user(db, body.email, body.password, body.first_name, body.last_name)
    await db.commit()
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> AuthResponse:
    user = await authenticate_user(db, body.email, body.password)
    logger.info("user_login", user_id=str(user.id))
    return _auth_response(user)


@router.post("/reset-password/request", response_model=MessageResponse)
async def request_password_reset(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Request password reset email. Always returns 200 so account existence is not revealed."""
    user = await get_user_by_email(db, body.email)

    if user is not None:
        try:
            raw_token = await create_reset_token(db, user.id)
            await db.commit()
            settings = get_settings()
            reset_url = f"{settings.frontend_base_url}/reset-password?token={raw_token}"
            await get_email_service().send_template(
                to=user.email,
                template_name="password_reset",
                context={"reset_url": reset_url, "first_name": user.first_name or ""},
            )
        except Exception:
            logger.exception("password_reset_email_failed", email=body.email)

    return MessageResponse(message="If an account exists with that email, a password reset link has been sent.")


@router.post("/reset-password", response_model=MessageResponse)
async def confirm_password_reset(
    body: ResetPasswordConfirm,
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Reset password with a valid token."""
    await reset_password(db, body.token, body.password)
    await db.commit()
    return MessageResponse(message="Password has been reset successfully")
