"""Analytics response models."""

from __future__ import annotations

from datetime import datetime

from certprep.schemas import CamelModel


class ProgressSummary(CamelModel):
    total_questions_answered: int
    correct_answers: int
    accuracy: float
    updated_at: datetime | None = None


class StreakSummary(CamelModel):
    current_streak: int = 0
    longest_streak: int = 0


class ActivityDay(CamelModel):
    date: str
    count: int


class UserAnalyticsResponse(CamelModel):
    progress: ProgressSummary | None = None
    streak: StreakSummary
    recent_activity: list[ActivityDay]


class AdminAnalyticsResponse(CamelModel):
    total_users: int
    active_users: int
    total_questions_answered: int


class UsageDay(CamelModel):
    date: str
    questions_answered: int
    active_users: int


class UsageResponse(CamelModel):
    usage: list[UsageDay]


class TierCount(CamelModel):
    subscription_tier: str
    user_count: int


class RevenueResponse(CamelModel):
    subscriptions: list[TierCount]
    estimated_monthly_revenue: float
