"""Daily quiz: one short distributed quiz per user per activity day."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.config import get_settings
from certprep.db.base import as_utc
from certprep.db.models import MockExam, Question
from certprep.errors import ConflictError
from certprep.exams.schemas import DailyQuizDay, DailyQuizStatusResponse, DailyQuizWeeklyResponse
from certprep.exams.service import exam_questions, start_exam
from certprep.gamification.streak_service import activity_date

logger = structlog.get_logger()

DAILY_QUIZ = "daily_quiz"


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC [start, end) of a calendar day in the activity time zone."""
    tz = ZoneInfo(get_settings().activity_timezone)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


async def _completed_between(
    db: AsyncSession,
    user_id: uuid.UUID,
    start: datetime,
    end: datetime,
    certification_id: uuid.UUID | None = None,
) -> list[MockExam]:
    stmt = select(MockExam).where(
        MockExam.user_id == user_id,
        MockExam.exam_type == DAILY_QUIZ,
        MockExam.completed_at.is_not(None),
        MockExam.completed_at >= start,
        MockExam.completed_at < end,
    )
    if certification_id is not None:
        stmt = stmt.where(MockExam.certification_id == certification_id)
    result = await db.execute(stmt.order_by(MockExam.completed_at))
    return list(result.scalars())


async def start_daily_quiz(
    db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID
) -> tuple[MockExam, list[Question]]:
    """Start today's quiz, or hand back today's unfinished one.

    Raises ConflictError when a quiz was already completed today.
    """
    start, end = day_bounds(activity_date())
    if await _completed_between(db, user_id, start, end, certification_id):
        msg = "Daily quiz already completed today"
        raise ConflictError(msg)

    pending = (
        await db.execute(
            select(MockExam)
            .where(
                MockExam.user_id == user_id,
                MockExam.certification_id == certification_id,
                MockExam.exam_type == DAILY_QUIZ,
                MockExam.completed_at.is_(None),
                MockExam.started_at >= start,
                MockExam.started_at < end,
            )
            .order_by(MockExam.started_at.desc())
            .limit(1)
        )
    ).scalar_one_or_none()
    if pending is not None:
        logger.info("daily_quiz_resumed", exam_id=str(pending.id))
        return pending, await exam_questions(db, pending)

    return await start_exam(
        db,
        user_id,
        certification_id,
        get_settings().daily_quiz_size,
        distribute_by_knowledge_area=True,
        randomize=True,
        exam_type=DAILY_QUIZ,
    )


async def daily_quiz_status(
    db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID | None = None
) -> DailyQuizStatusResponse:
    start, end = day_bounds(activity_date())
    completed = await _completed_between(db, user_id, start, end, certification_id)
    if not completed:
        return DailyQuizStatusResponse(has_taken_today=False, can_take=True)
    quiz = completed[-1]
    return DailyQuizStatusResponse(
        has_taken_today=True,
        can_take=False,
        exam_id=quiz.id,
        completed_at=as_utc(quiz.completed_at),
        score=quiz.score,
    )


async def weekly_daily_quizzes(
    db: AsyncSession,
    user_id: uuid.UUID,
    start_date: date | None = None,
    certification_id: uuid.UUID | None = None,
) -> DailyQuizWeeklyResponse:
    """Completed daily quizzes over the seven days starting at ``start_date``.

    Defaults to the week ending today. One entry per day (the last completion).
    """
    if start_date is None:
        start_date = activity_date() - timedelta(days=6)
    start, _ = day_bounds(start_date)
    _, end = day_bounds(start_date + timedelta(days=6))

    by_day: dict[date, MockExam] = {}
    for quiz in await _completed_between(db, user_id, start, end, certification_id):
        by_day[activity_date(as_utc(quiz.completed_at))] = quiz

    return DailyQuizWeeklyResponse(
        start_date=start_date,
        completed=[
            DailyQuizDay(quiz_date=day, exam_id=quiz.id, score=quiz.score) for day, quiz in sorted(by_day.items())
        ],
    )
