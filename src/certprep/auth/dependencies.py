"""FastAPI authentication dependencies."""

from __future__ import annotations

import uuid

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.jwt import verify_token
from certprep.auth.service import get_user_by_id
from certprep.database import get_session
from certprep.db.models import User
from certprep.errors import ForbiddenError, UnauthorizedError

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Extract and verify the bearer JWT, return the User model.

    Raises 401 when the token is missing, invalid, or names an unknown user.
    """
    if credentials is None:
        msg = "Authentication required"
        raise UnauthorizedError(msg)
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
        user_id = uuid.UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise UnauthorizedError(str(e) or "Invalid token") from e

    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "User not found"
        raise UnauthorizedError(msg)
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Same as get_current_user but additionally requires role='admin'."""
    if user.role != "admin":
        msg = "Admin access required"
        raise ForbiddenError(msg)
    return user
