"""Pydantic response models for gamification endpoints."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from certprep.schemas import CamelModel


class BadgeResponse(CamelModel):
    id: uuid.UUID
    badge_type: str
    earned_at: datetime


class BadgesResponse(CamelModel):
    badges: list[BadgeResponse]


class StreakResponse(CamelModel):
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: date | None = None


class StreakUpdateResponse(StreakResponse):
    badges_awarded: list[str] = []
