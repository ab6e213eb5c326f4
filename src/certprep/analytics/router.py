"""Analytics endpoints — learner summary and admin reports."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.analytics.schemas import AdminAnalyticsResponse, RevenueResponse, UsageResponse, UserAnalyticsResponse
from certprep.analytics.service import admin_analytics, revenue, usage, user_analytics
from certprep.auth.dependencies import get_current_user, require_admin
from certprep.database import get_session
from certprep.db.models import User
from certprep.errors import ValidationError
from certprep.redis_client import get_redis

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get("/user", response_model=UserAnalyticsResponse)
async def get_user_analytics(
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserAnalyticsResponse:
    """Progress for one certification, streak, and the last 30 active days."""
    return await user_analytics(db, user.id, certification_id)


@router.get("/admin", response_model=AdminAnalyticsResponse, dependencies=[Depends(require_admin)])
async def get_admin_analytics(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> AdminAnalyticsResponse:
    try:
        redis = get_redis(request)
    except RuntimeError:
        redis = None
    return await admin_analytics(db, redis)


@router.get("/usage", response_model=UsageResponse, dependencies=[Depends(require_admin)])
async def get_usage(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_session),
) -> UsageResponse:
    if start_date and end_date and start_date > end_date:
        msg = "startDate must not be after endDate"
        raise ValidationError(msg)
    return UsageResponse(usage=await usage(db, start_date, end_date))


@router.get("/revenue", response_model=RevenueResponse, dependencies=[Depends(require_admin)])
async def get_revenue(db: AsyncSession = Depends(get_session)) -> RevenueResponse:
    """Paid-tier head counts and the estimated monthly revenue they represent."""
    return await revenue(db)
