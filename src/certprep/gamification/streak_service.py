"""Daily study streaks and milestone badges."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.config import get_settings
from certprep.db.models import Streak
from certprep.db.upsert import upsert_insert
from certprep.gamification.badge_service import award_badge

logger = logging.getLogger(__name__)

# --- Streak badge thresholds (awarded only when the streak equals the value) ---
STREAK_MILESTONES = (7, 30, 60, 90, 180, 365)


@dataclass(frozen=True)
class StreakState:
    current: int = 0
    longest: int = 0
    last_activity_date: date | None = None


@dataclass
class StreakUpdate:
    state: StreakState
    awarded: list[str] = field(default_factory=list)


def activity_date(now: datetime | None = None) -> date:
    """Calendar day of ``now`` in the configured activity time zone."""
    tz = ZoneInfo(get_settings().activity_timezone)
    if now is None:
        return datetime.now(tz).date()
    return now.astimezone(tz).date()


def advance_streak(state: StreakState, today: date) -> StreakState:
    """Apply one qualifying activity on ``today``.

    No previous activity starts a streak at 1. One day later extends it,
    a longer gap resets it to 1, and the same day (or an earlier one) leaves
    the state untouched.
    """
    if state.last_activity_date is None:
        return StreakState(current=1, longest=max(state.longest, 1), last_activity_date=today)

    days = (today - state.last_activity_date).days
    if days <= 0:
        return state
    current = state.current + 1 if days == 1 else 1
    return StreakState(current=current, longest=max(state.longest, current), last_activity_date=today)


def milestone_badges(current_streak: int) -> list[str]:
    """Badge types earned by a streak of exactly ``current_streak`` days."""
    return [f"streak_{m}" for m in STREAK_MILESTONES if current_streak == m]


async def get_streak(db: AsyncSession, user_id: uuid.UUID) -> StreakState:
    result = await db.execute(select(Streak).where(Streak.user_id == user_id))
    row = result.scalar_one_or_none()
    if row is None:
        return StreakState()
    return StreakState(row.current_streak, row.longest_streak, row.last_activity_date)


async def record_activity(db: AsyncSession, user_id: uuid.UUID, today: date | None = None) -> StreakUpdate:
    """Credit a qualifying activity and award any milestone badge reached.

    The streak row is created with ON CONFLICT DO NOTHING and then locked
    FOR UPDATE, so concurrent calls for one user serialize on the row.
    The caller commits.
    """
    if today is None:
        today = activity_date()

    await db.execute(
        upsert_insert(db, Streak)
        .values(user_id=user_id, current_streak=0, longest_streak=0, last_activity_date=None)
        .on_conflict_do_nothing(index_elements=["user_id"])
    )
    result = await db.execute(
        select(Streak)
        .where(Streak.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one()

    previous = StreakState(row.current_streak, row.longest_streak, row.last_activity_date)
    state = advance_streak(previous, today)
    if state != previous:
        row.current_streak = state.current
        row.longest_streak = state.longest
        row.last_activity_date = state.last_activity_date
        await db.flush()
        logger.info("Streak updated for user %s: %d day(s), longest %d", user_id, state.current, state.longest)

    awarded = [badge for badge in milestone_badges(state.current) if await award_badge(db, user_id, badge)]
    return StreakUpdate(state=state, awarded=awarded)
