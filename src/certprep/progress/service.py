"""Per-certification progress aggregates and performance breakdowns."""

from __future__ import annotations

import uuid
from datetime import datetime

import structlog
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.db.base import as_utc, utcnow
from certprep.db.models import (
    Answer,
    KnowledgeArea,
    MissedQuestionReview,
    Question,
    UserAnswer,
    UserProgress,
)
from certprep.db.upsert import upsert_insert
from certprep.errors import NotFoundError, ValidationError
from certprep.exams.scoring import accuracy_fraction, as_percentage
from certprep.progress.domains import summarize_domains
from certprep.progress.schemas import (
    DomainPerformance,
    KnowledgeAreaPerformance,
    MissedQuestion,
    ProgressResponse,
)
from certprep.questions.service import question_response

logger = structlog.get_logger()

_correct_count = func.coalesce(func.sum(case((UserAnswer.is_correct.is_(True), 1), else_=0)), 0)


def progress_response(row: UserProgress) -> ProgressResponse:
    return ProgressResponse(
        id=row.id,
        certification_id=row.certification_id,
        total_questions_answered=row.total_questions_answered,
        correct_answers=row.correct_answers,
        accuracy=as_percentage(row.accuracy),
        updated_at=row.updated_at,
    )


async def upsert_progress(
    db: AsyncSession,
    user_id: uuid.UUID,
    certification_id: uuid.UUID,
    total: int,
    correct: int,
) -> None:
    """Write the (user, certification) aggregate in one INSERT ... ON CONFLICT."""
    stmt = upsert_insert(db, UserProgress).values(
        id=uuid.uuid4(),
        user_id=user_id,
        certification_id=certification_id,
        total_questions_answered=total,
        correct_answers=correct,
        accuracy=accuracy_fraction(correct, total),
        updated_at=utcnow(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "certification_id"],
        set_={
            "total_questions_answered": stmt.excluded.total_questions_answered,
            "correct_answers": stmt.excluded.correct_answers,
            "accuracy": stmt.excluded.accuracy,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    await db.execute(stmt)


async def recompute_progress(db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID) -> tuple[int, int]:
    """Re-aggregate the user's full answer history for one certification.

    Returns (total_answered, correct_answers).
    """
    row = (
        await db.execute(
            select(func.count(UserAnswer.id), _correct_count)
            .join(Question, Question.id == UserAnswer.question_id)
            .where(UserAnswer.user_id == user_id, Question.certification_id == certification_id)
        )
    ).one()
    total, correct = int(row[0]), int(row[1])
    await upsert_progress(db, user_id, certification_id, total, correct)
    return total, correct


async def list_progress(
    db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID | None = None
) -> list[UserProgress]:
    stmt = select(UserProgress).where(UserProgress.user_id == user_id)
    if certification_id is not None:
        stmt = stmt.where(UserProgress.certification_id == certification_id)
    result = await db.execute(stmt.execution_options(populate_existing=True))
    return list(result.scalars())


async def set_progress(
    db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID, total: int, correct: int
) -> None:
    if correct > total:
        msg = "correctAnswers cannot exceed totalQuestionsAnswered"
        raise ValidationError(msg)
    await upsert_progress(db, user_id, certification_id, total, correct)


async def record_answer(
    db: AsyncSession, user_id: uuid.UUID, question_id: uuid.UUID, answer_id: uuid.UUID
) -> UserAnswer:
    """Record a single practice answer and refresh the certification aggregate."""
    answer = await db.get(Answer, answer_id)
    if answer is None:
        msg = "Answer not found"
        raise NotFoundError(msg)
    if answer.question_id != question_id:
        msg = "Answer does not belong to this question"
        raise ValidationError(msg)
    question = await db.get(Question, question_id)
    if question is None:
        msg = "Question not found"
        raise NotFoundError(msg)

    event = UserAnswer(
        id=uuid.uuid4(),
        user_id=user_id,
        question_id=question_id,
        answer_id=answer_id,
        is_correct=answer.is_correct,
        answered_at=utcnow(),
    )
    db.add(event)
    await db.flush()
    await recompute_progress(db, user_id, question.certification_id)
    return event


async def knowledge_area_performance(
    db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID
) -> list[KnowledgeAreaPerformance]:
    """Every knowledge area of the certification, in display order, with the user's accuracy."""
    areas = (
        await db.execute(
            select(KnowledgeArea)
            .where(KnowledgeArea.certification_id == certification_id)
            .order_by(KnowledgeArea.display_order, KnowledgeArea.name)
        )
    ).scalars().all()
    stats = {
        area_id: (int(total), int(correct))
        for area_id, total, correct in (
            await db.execute(
                select(Question.knowledge_area_id, func.count(UserAnswer.id), _correct_count)
                .join(Question, Question.id == UserAnswer.question_id)
                .where(UserAnswer.user_id == user_id, Question.certification_id == certification_id)
                .group_by(Question.knowledge_area_id)
            )
        ).all()
    }

    performance = []
    for area in areas:
        total, correct = stats.get(area.id, (0, 0))
        performance.append(
            KnowledgeAreaPerformance(
                knowledge_area_id=area.id,
                knowledge_area_name=area.name,
                total_answered=total,
                correct_answers=correct,
                accuracy=as_percentage(accuracy_fraction(correct, total)),
            )
        )
    return performance


async def domain_performance(
    db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID
) -> list[DomainPerformance]:
    questions = (
        await db.execute(
            select(Question.id, Question.domain, KnowledgeArea.name)
            .join(KnowledgeArea, KnowledgeArea.id == Question.knowledge_area_id, isouter=True)
            .where(Question.certification_id == certification_id)
        )
    ).all()
    answers = (
        await db.execute(
            select(UserAnswer.question_id, UserAnswer.is_correct)
            .join(Question, Question.id == UserAnswer.question_id)
            .where(UserAnswer.user_id == user_id, Question.certification_id == certification_id)
        )
    ).all()
    return [DomainPerformance(**row) for row in summarize_domains(questions, answers)]


async def answered_question_ids(
    db: AsyncSession, user_id: uuid.UUID, certification_id: uuid.UUID | None = None
) -> list[uuid.UUID]:
    stmt = select(UserAnswer.question_id).where(UserAnswer.user_id == user_id).distinct()
    if certification_id is not None:
        stmt = stmt.join(Question, Question.id == UserAnswer.question_id).where(
            Question.certification_id == certification_id
        )
    return list((await db.execute(stmt)).scalars())


async def missed_questions(
    db: AsyncSession,
    user_id: uuid.UUID,
    certification_id: uuid.UUID | None = None,
    knowledge_area_id: uuid.UUID | None = None,
    reviewed: bool | None = None,
) -> list[MissedQuestion]:
    """Questions the user has answered incorrectly at least once, most recent miss first."""
    stmt = (
        select(UserAnswer.question_id, UserAnswer.answer_id, UserAnswer.answered_at)
        .join(Question, Question.id == UserAnswer.question_id)
        .where(UserAnswer.user_id == user_id, UserAnswer.is_correct.is_(False))
        .order_by(UserAnswer.answered_at.desc())
    )
    if certification_id is not None:
        stmt = stmt.where(Question.certification_id == certification_id)
    if knowledge_area_id is not None:
        stmt = stmt.where(Question.knowledge_area_id == knowledge_area_id)

    latest: dict[uuid.UUID, tuple[uuid.UUID | None, datetime]] = {}
    for question_id, answer_id, answered_at in (await db.execute(stmt)).all():
        latest.setdefault(question_id, (answer_id, answered_at))
    if not latest:
        return []

    reviewed_ids = set(
        (
            await db.execute(
                select(MissedQuestionReview.question_id).where(MissedQuestionReview.user_id == user_id)
            )
        ).scalars()
    )
    if reviewed is True:
        latest = {qid: v for qid, v in latest.items() if qid in reviewed_ids}
    elif reviewed is False:
        latest = {qid: v for qid, v in latest.items() if qid not in reviewed_ids}
    if not latest:
        return []

    questions = {
        q.id: q for q in (await db.execute(select(Question).where(Question.id.in_(list(latest))))).scalars()
    }
    items = [
        MissedQuestion(
            question_id=qid,
            question=question_response(questions[qid]),
            answered_at=as_utc(answered_at),
            is_reviewed=qid in reviewed_ids,
            user_answer_id=answer_id,
        )
        for qid, (answer_id, answered_at) in latest.items()
        if qid in questions
    ]
    items.sort(key=lambda item: item.answered_at, reverse=True)
    return items


async def mark_reviewed(db: AsyncSession, user_id: uuid.UUID, question_id: uuid.UUID) -> bool:
    """Returns False when the question was already marked."""
    if await db.get(Question, question_id) is None:
        msg = "Question not found"
        raise NotFoundError(msg)
    result = await db.execute(
        upsert_insert(db, MissedQuestionReview)
        .values(id=uuid.uuid4(), user_id=user_id, question_id=question_id, reviewed_at=utcnow())
        .on_conflict_do_nothing(index_elements=["user_id", "question_id"])
        .returning(MissedQuestionReview.id)
    )
    return result.scalar_one_or_none() is not None
