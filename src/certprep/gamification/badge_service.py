"""Badge award service with duplicate prevention."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.db.base import utcnow
from certprep.db.models import Badge
from certprep.db.upsert import upsert_insert

logger = logging.getLogger(__name__)


async def award_badge(db: AsyncSession, user_id: uuid.UUID, badge_type: str) -> bool:
    """
    Award a badge to a user.

    The UNIQUE(user_id, badge_type) constraint makes this idempotent even
    under concurrent calls. Returns True if this call created the badge.
    """
    result = await db.execute(
        upsert_insert(db, Badge)
        .values(user_id=user_id, badge_type=badge_type, earned_at=utcnow())
        .on_conflict_do_nothing(index_elements=["user_id", "badge_type"])
        .returning(Badge.id)
    )
    if result.scalar_one_or_none() is None:
        return False
    logger.info("Badge %s awarded to user %s", badge_type, user_id)
    return True


async def list_badges(db: AsyncSession, user_id: uuid.UUID) -> list[Badge]:
    result = await db.execute(
        select(Badge).where(Badge.user_id == user_id).order_by(Badge.earned_at.desc())
    )
    return list(result.scalars())
