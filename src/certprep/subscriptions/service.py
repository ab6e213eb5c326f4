"""Subscription state on the user row."""

from __future__ import annotations

import uuid
from datetime import datetime

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.db.base import utcnow
from certprep.db.models import User
from certprep.subscriptions.tiers import FREE

logger = structlog.get_logger()


async def set_subscription(
    db: AsyncSession, user_id: uuid.UUID, tier: str, expires_at: datetime | None
) -> bool:
    """Returns False when no such user exists."""
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(subscription_tier=tier, subscription_expires_at=expires_at, updated_at=utcnow())
    )
    if result.rowcount == 0:
        return False
    logger.info("subscription_updated", user_id=str(user_id), tier=tier)
    return True


async def cancel_subscription(db: AsyncSession, user_id: uuid.UUID) -> bool:
    return await set_subscription(db, user_id, FREE, None)
