"""Learner and operator analytics aggregates."""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime, time, timedelta, timezone

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.analytics.schemas import (
    ActivityDay,
    AdminAnalyticsResponse,
    ProgressSummary,
    RevenueResponse,
    StreakSummary,
    TierCount,
    UsageDay,
    UserAnalyticsResponse,
)
from certprep.db.base import utcnow
from certprep.db.models import Streak, User, UserAnswer, UserProgress
from certprep.exams.scoring import as_percentage
from certprep.subscriptions.tiers import FREE, MONTHLY_PRICE

logger = structlog.get_logger()

ADMIN_CACHE_KEY = "analytics:admin"
ADMIN_CACHE_TTL = 60  # seconds
ACTIVE_WINDOW_DAYS = 30
RECENT_ACTIVITY_DAYS = 30


async def user_analytics(
    db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID | None
) -> UserAnalyticsResponse:
    progress = None
    if certification_id is not None:
        row = (
            await db.execute(
                select(UserProgress).where(
                    UserProgress.user_id == user_id, UserProgress.certification_id == certification_id
                )
            )
        ).scalar_one_or_none()
        if row is not None:
            progress = ProgressSummary(
                total_questions_answered=row.total_questions_answered,
                correct_answers=row.correct_answers,
                accuracy=as_percentage(row.accuracy),
                updated_at=row.updated_at,
            )

    streak_row = (await db.execute(select(Streak).where(Streak.user_id == user_id))).scalar_one_or_none()
    streak = StreakSummary()
    if streak_row is not None:
        streak = StreakSummary(current_streak=streak_row.current_streak, longest_streak=streak_row.longest_streak)

    day = func.date(UserAnswer.answered_at)
    activity = (
        await db.execute(
            select(day, func.count(UserAnswer.id))
            .where(UserAnswer.user_id == user_id)
            .group_by(day)
            .order_by(day.desc())
            .limit(RECENT_ACTIVITY_DAYS)
        )
    ).all()

    return UserAnalyticsResponse(
        progress=progress,
        streak=streak,
        recent_activity=[ActivityDay(date=str(d), count=int(c)) for d, c in activity],
    )


async def _admin_counts(db: AsyncSession) -> AdminAnalyticsResponse:
    since = utcnow() - timedelta(days=ACTIVE_WINDOW_DAYS)
    total_users = (await db.execute(select(func.count(User.id)))).scalar_one()
    active_users = (
        await db.execute(select(func.count(func.distinct(UserAnswer.user_id))).where(UserAnswer.answered_at > since))
    ).scalar_one()
    total_answers = (await db.execute(select(func.count(UserAnswer.id)))).scalar_one()
    return AdminAnalyticsResponse(
        total_users=total_users,
        active_users=active_users,
        total_questions_answered=total_answers,
    )


async def admin_analytics(db: AsyncSession, redis: aioredis.Redis | None) -> AdminAnalyticsResponse:
    """Platform totals, cached briefly in Redis when it is configured."""
    if redis is not None:
        try:
            cached = await redis.get(ADMIN_CACHE_KEY)
        except RedisError:
            logger.warning("analytics_cache_unavailable", exc_info=True)
            redis = None
        else:
            if cached:
                return AdminAnalyticsResponse.model_validate(json.loads(cached))

    result = await _admin_counts(db)
    if redis is not None:
        try:
            await redis.setex(ADMIN_CACHE_KEY, ADMIN_CACHE_TTL, result.model_dump_json())
        except RedisError:
            logger.warning("analytics_cache_unavailable", exc_info=True)
    return result


async def usage(db: AsyncSession, start_date: date | None, end_date: date | None) -> list[UsageDay]:
    """Answers and distinct active users per UTC day, newest first. Both bounds are inclusive."""
    day = func.date(UserAnswer.answered_at)
    stmt = select(day, func.count(UserAnswer.id), func.count(func.distinct(UserAnswer.user_id)))
    if start_date is not None:
        stmt = stmt.where(UserAnswer.answered_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date is not None:
        stmt = stmt.where(
            UserAnswer.answered_at < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        )
    rows = (await db.execute(stmt.group_by(day).order_by(day.desc()))).all()
    return [UsageDay(date=str(d), questions_answered=int(n), active_users=int(u)) for d, n, u in rows]


async def revenue(db: AsyncSession) -> RevenueResponse:
    rows = (
        await db.execute(
            select(User.subscription_tier, func.count(User.id))
            .where(User.subscription_tier != FREE)
            .group_by(User.subscription_tier)
            .order_by(User.subscription_tier)
        )
    ).all()
    counts = [TierCount(subscription_tier=tier, user_count=int(n)) for tier, n in rows]
    estimate = sum(MONTHLY_PRICE.get(c.subscription_tier, 0.0) * c.user_count for c in counts)
    return RevenueResponse(subscriptions=counts, estimated_monthly_revenue=round(estimate, 2))
