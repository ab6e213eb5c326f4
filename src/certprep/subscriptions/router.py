"""Subscription endpoints for the signed-in user."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user
from certprep.database import get_session
from certprep.db.base import as_utc
from certprep.db.models import User
from certprep.schemas import CamelModel, MessageResponse
from certprep.subscriptions.service import cancel_subscription, set_subscription
from certprep.subscriptions.tiers import is_active

router = APIRouter(prefix="/api/subscriptions", tags=["Subscriptions"])

Tier = Literal["free", "premium_monthly", "premium_semi_annual", "premium_annual", "cram_time"]


class SubscriptionResponse(CamelModel):
    tier: str
    expires_at: datetime | None = None
    is_active: bool


class SubscriptionUpdate(CamelModel):
    tier: Tier
    expires_at: datetime | None = None


@router.get("", response_model=SubscriptionResponse)
async def get_subscription(user: User = Depends(get_current_user)) -> SubscriptionResponse:
    expires_at = as_utc(user.subscription_expires_at)
    return SubscriptionResponse(tier=user.subscription_tier, expires_at=expires_at, is_active=is_active(expires_at))


@router.put("", response_model=MessageResponse)
async def update_subscription(
    body: SubscriptionUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await set_subscription(db, user.id, body.tier, body.expires_at)
    await db.commit()
    return MessageResponse(message="Subscription updated successfully")


@router.post("/sync", response_model=SubscriptionResponse)
async def sync_subscription(
    body: SubscriptionUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SubscriptionResponse:
    """Store the entitlement the client just read from the app store."""
    await set_subscription(db, user.id, body.tier, body.expires_at)
    await db.commit()
    expires_at = as_utc(body.expires_at)
    return SubscriptionResponse(tier=body.tier, expires_at=expires_at, is_active=is_active(expires_at))


@router.delete("", response_model=MessageResponse)
async def delete_subscription(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await cancel_subscription(db, user.id)
    await db.commit()
    return MessageResponse(message="Subscription cancelled successfully")
