"""Mock exam lifecycle: start, submit (score), review, delete."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.db.base import utcnow
from certprep.db.models import Answer, Certification, MockExam, Question, UserAnswer
from certprep.errors import ConflictError, NotFoundError, ValidationError
from certprep.exams.schemas import ReviewItem, SubmittedAnswer
from certprep.exams.scoring import exam_score
from certprep.gamification.streak_service import record_activity
from certprep.progress.service import recompute_progress
from certprep.questions.sampler import SampleRequest, sample_questions
from certprep.questions.schemas import AnswerResponse

logger = structlog.get_logger()

EXAM_LIST_LIMIT = 50


async def start_exam(
    db: AsyncSession,
    user_id: uuid.UUID,
    certification_id: uuid.UUID,
    total_questions: int,
    *,
    difficulty: str | None = None,
    distribute_by_knowledge_area: bool = True,
    randomize: bool = True,
    exam_type: str = "mock",
) -> tuple[MockExam, list[Question]]:
    """Create an exam attempt with a sampled question set.

    The stored total is the number of questions actually drawn, which can be
    less than requested when the pool is small.
    """
    if await db.get(Certification, certification_id) is None:
        msg = "Certification not found"
        raise NotFoundError(msg)

    questions = await sample_questions(
        db,
        SampleRequest(
            certification_id=certification_id,
            total=total_questions,
            difficulty=difficulty,
            random=randomize,
            distribute_by_knowledge_area=distribute_by_knowledge_area,
        ),
    )
    if not questions:
        msg = "No questions available for this certification"
        raise ValidationError(msg)

    exam = MockExam(
        id=uuid.uuid4(),
        user_id=user_id,
        certification_id=certification_id,
        exam_type=exam_type,
        total_questions=len(questions),
        question_ids=[str(q.id) for q in questions],
        started_at=utcnow(),
    )
    db.add(exam)
    await db.flush()
    logger.info(
        "exam_started",
        exam_id=str(exam.id),
        exam_type=exam_type,
        requested=total_questions,
        drawn=len(questions),
    )
    return exam, questions


async def get_user_exam(db: AsyncSession, user_id: uuid.UUID, exam_id: uuid.UUID, *, lock: bool = False) -> MockExam:
    """Fetch an exam owned by the user, or raise NotFoundError."""
    stmt = select(MockExam).where(MockExam.id == exam_id, MockExam.user_id == user_id)
    if lock:
        stmt = stmt.with_for_update()
    exam = (await db.execute(stmt.execution_options(populate_existing=True))).scalar_one_or_none()
    if exam is None:
        msg = "Exam not found"
        raise NotFoundError(msg)
    return exam


async def list_exams(db: AsyncSession, user_id: uuid.UUID) -> list[MockExam]:
    result = await db.execute(
        select(MockExam)
        .where(MockExam.user_id == user_id)
        .order_by(MockExam.started_at.desc())
        .limit(EXAM_LIST_LIMIT)
    )
    return list(result.scalars())


async def exam_questions(db: AsyncSession, exam: MockExam) -> list[Question]:
    """The exam's questions in the order they were drawn."""
    ids = [uuid.UUID(qid) for qid in exam.question_ids]
    if not ids:
        return []
    by_id = {q.id: q for q in (await db.execute(select(Question).where(Question.id.in_(ids)))).scalars()}
    return [by_id[qid] for qid in ids if qid in by_id]


async def submit_exam(
    db: AsyncSession,
    user_id: uuid.UUID,
    exam_id: uuid.UUID,
    answers: Sequence[SubmittedAnswer],
) -> tuple[MockExam, list[str]]:
    """Score a submission, record every answer event, and refresh progress.

    An answer id that does not resolve to an answer of the given question is
    recorded as incorrect rather than failing the submission. Returns the
    exam and any streak badges awarded (daily quizzes only).
    """
    exam = await get_user_exam(db, user_id, exam_id, lock=True)
    if exam.completed_at is not None:
        msg = "Exam has already been submitted"
        raise ConflictError(msg)
    if not answers:
        msg = "At least one answer is required"
        raise ValidationError(msg)

    question_ids = {a.question_id for a in answers}
    known = set(
        (await db.execute(select(Question.id).where(Question.id.in_(list(question_ids))))).scalars()
    )
    unknown = question_ids - known
    if unknown:
        msg = f"Unknown question id(s): {', '.join(sorted(str(q) for q in unknown))}"
        raise ValidationError(msg)

    answer_rows = {
        row.id: row
        for row in (
            await db.execute(
                select(Answer.id, Answer.question_id, Answer.is_correct).where(
                    Answer.id.in_([a.answer_id for a in answers])
                )
            )
        ).all()
    }

    now = utcnow()
    correct = 0
    for submitted in answers:
        row = answer_rows.get(submitted.answer_id)
        resolved = row is not None and row.question_id == submitted.question_id
        is_correct = bool(resolved and row.is_correct)
        correct += is_correct
        db.add(
            UserAnswer(
                user_id=user_id,
                question_id=submitted.question_id,
                answer_id=submitted.answer_id if resolved else None,
                mock_exam_id=exam.id,
                is_correct=is_correct,
                answered_at=now,
            )
        )

    exam.correct_answers = correct
    exam.score = exam_score(correct, len(answers))
    exam.completed_at = now
    await db.flush()

    await recompute_progress(db, user_id, exam.certification_id)

    awarded: list[str] = []
    if exam.exam_type == "daily_quiz":
        awarded = (await record_activity(db, user_id)).awarded

    logger.info(
        "exam_submitted",
        exam_id=str(exam.id),
        exam_type=exam.exam_type,
        correct=correct,
        answered=len(answers),
        score=exam.score,
    )
    return exam, awarded


async def review_exam(db: AsyncSession, user_id: uuid.UUID, exam_id: uuid.UUID) -> tuple[MockExam, list[ReviewItem]]:
    """Each exam question with the user's recorded choice and the full answer set."""
    exam = await get_user_exam(db, user_id, exam_id)
    events = (
        await db.execute(
            select(UserAnswer).where(UserAnswer.mock_exam_id == exam.id).order_by(UserAnswer.answered_at)
        )
    ).scalars().all()
    chosen = {e.question_id: e for e in events}

    items = []
    for question in await exam_questions(db, exam):
        event = chosen.get(question.id)
        answers = sorted(question.answers, key=lambda a: a.display_order)
        selected = next((a for a in answers if event is not None and a.id == event.answer_id), None)
        items.append(
            ReviewItem(
                question_id=question.id,
                question_text=question.question_text,
                explanation=question.explanation,
                knowledge_area_name=question.knowledge_area.name if question.knowledge_area else None,
                selected_answer_id=selected.id if selected else None,
                selected_answer_text=selected.answer_text if selected else None,
                is_correct=bool(event and event.is_correct),
                answers=[
                    AnswerResponse(id=a.id, answer_text=a.answer_text, is_correct=a.is_correct, order=a.display_order)
                    for a in answers
                ],
            )
        )
    return exam, items


async def delete_exam(db: AsyncSession, user_id: uuid.UUID, exam_id: uuid.UUID) -> None:
    """Delete an attempt. Recorded answer events are kept and detached from it."""
    exam = await get_user_exam(db, user_id, exam_id)
    await db.execute(delete(MockExam).where(MockExam.id == exam.id))
    logger.info("exam_deleted", exam_id=str(exam_id))
