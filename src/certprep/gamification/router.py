"""Badge and streak endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user
from certprep.database import get_session
from certprep.db.models import User
from certprep.gamification.badge_service import list_badges
from certprep.gamification.schemas import BadgeResponse, BadgesResponse, StreakResponse, StreakUpdateResponse
from certprep.gamification.streak_service import get_streak, record_activity

router = APIRouter(prefix="/api/badges", tags=["Gamification"])


@router.get("", response_model=BadgesResponse)
async def get_user_badges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BadgesResponse:
    """Earned badges, newest first."""
    badges = await list_badges(db, user.id)
    return BadgesResponse(badges=[BadgeResponse.model_validate(b) for b in badges])


@router.get("/streak", response_model=StreakResponse)
async def get_user_streak(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> StreakResponse:
    state = await get_streak(db, user.id)
    return StreakResponse(
        current_streak=state.current,
        longest_streak=state.longest,
        last_activity_date=state.last_activity_date,
    )


@router.post("/streak", response_model=StreakUpdateResponse)
async def update_user_streak(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> StreakUpdateResponse:
    """Credit today's study activity."""
    update = await record_activity(db, user.id)
    await db.commit()
    return StreakUpdateResponse(
        current_streak=update.state.current,
        longest_streak=update.state.longest,
        last_activity_date=update.state.last_activity_date,
        badges_awarded=update.awarded,
    )
