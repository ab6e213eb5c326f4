"""Admin user management endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import require_admin
from certprep.auth.schemas import UserResponse
from certprep.database import get_session
from certprep.db.models import User
from certprep.errors import NotFoundError

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])

_USER_LIST_LIMIT = 100


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    search: str | None = Query(None, max_length=200),
    subscription_tier: str | None = Query(None, alias="subscriptionTier"),
    db: AsyncSession = Depends(get_session),
) -> list[UserResponse]:
    """Newest users first, optionally filtered by a name/email substring and tier."""
    stmt = select(User)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            )
        )
    if subscription_tier:
        stmt = stmt.where(User.subscription_tier == subscription_tier)
    result = await db.execute(stmt.order_by(User.created_at.desc()).limit(_USER_LIST_LIMIT))
    return [UserResponse.model_validate(u) for u in result.scalars()]


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> UserResponse:
    user = await db.get(User, user_id)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return UserResponse.model_validate(user)
