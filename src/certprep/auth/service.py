"""
Authentication business logic.

Handles user creation, credential checks, and the password reset flow.
"""

from __future__ import annotations

import hashlib
import secrets
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update

from certprep.auth.password import (
    PasswordStrengthError,
    hash_password,
    validate_password_strength,
    verify_password,
)
from certprep.config import get_settings
from certprep.db.base import as_utc, utcnow
from certprep.db.models import PasswordResetToken, User
from certprep.errors import ConflictError, UnauthorizedError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """
    Register a new user with email + password.

    Raises:
        ValidationError: If the password is too weak.
        ConflictError: If the email is already registered.
    """
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationError(str(e)) from e

    if await get_user_by_email(db, email) is not None:
        msg = "User with this email already exists"
        raise ConflictError(msg)

    user = User(
        email=email.lower().strip(),
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role="user",
        subscription_tier="free",
    )
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=str(user.id), email=user.email)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate a user with email + password.

    Raises:
        UnauthorizedError: If credentials are invalid.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        msg = "Invalid email or password"
        raise UnauthorizedError(msg)
    return user


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


def _hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


async def create_reset_token(db: AsyncSession, user_id: uuid.UUID) -> str:
    """
    Create a password reset token, invalidating any earlier unused one.

    Returns the raw token to send to the user.
    """
    settings = get_settings()
    raw_token = secrets.token_urlsafe(48)
    now = utcnow()

    await db.execute(
        update(PasswordResetToken)
        .where(PasswordResetToken.user_id == user_id)
        .where(PasswordResetToken.used_at.is_(None))
        .values(used_at=now)
    )

    db.add(
        PasswordResetToken(
            user_id=user_id,
            token_hash=_hash_token(raw_token),
            created_at=now,
            expires_at=now + timedelta(minutes=settings.password_reset_token_ttl_minutes),
        )
    )
    await db.flush()
    return raw_token


async def consume_reset_token(db: AsyncSession, raw_token: str) -> uuid.UUID:
    """
    Verify a password reset token and mark it used.

    Returns the user_id if valid.

    Raises:
        ValidationError: If token is invalid, expired, or already used.
    """
    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == _hash_token(raw_token))
    )
    token = result.scalar_one_or_none()

    if token is None or token.used_at is not None:
        msg = "Invalid or expired reset token"
        raise ValidationError(msg)
    if as_utc(token.expires_at) < utcnow():
        msg = "Invalid or expired reset token"
        raise ValidationError(msg)

    token.used_at = utcnow()
    await db.flush()
    return token.user_id


async def reset_password(db: AsyncSession, raw_token: str, new_password: str) -> None:
    """Set a new password using a reset token."""
    try:
        validate_password_strength(new_password)
    except PasswordStrengthError as e:
        raise ValidationError(str(e)) from e

    user_id = await consume_reset_token(db, raw_token)
    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "Invalid or expired reset token"
        raise ValidationError(msg)
    user.password_hash = hash_password(new_password)
    await db.flush()
    logger.info("password_reset", user_id=str(user_id))
