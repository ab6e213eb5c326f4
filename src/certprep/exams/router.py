"""Mock exam and daily quiz endpoints."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user
from certprep.database import get_session
from certprep.db.base import as_utc
from certprep.db.models import MockExam, Question, User
from certprep.exams.daily_quiz import daily_quiz_status, start_daily_quiz, weekly_daily_quizzes
from certprep.exams.schemas import (
    DailyQuizStartRequest,
    DailyQuizStatusResponse,
    DailyQuizWeeklyResponse,
    ExamResponse,
    ExamResultResponse,
    ExamReviewResponse,
    ExamStartRequest,
    ExamStartResponse,
    ExamSubmitRequest,
)
from certprep.exams.service import (
    delete_exam,
    get_user_exam,
    list_exams,
    review_exam,
    start_exam,
    submit_exam,
)
from certprep.questions.service import question_response

router = APIRouter(prefix="/api/exams", tags=["Exams"])


def exam_response(exam: MockExam) -> ExamResponse:
    return ExamResponse(
        id=exam.id,
        certification_id=exam.certification_id,
        exam_type=exam.exam_type,
        total_questions=exam.total_questions,
        correct_answers=exam.correct_answers,
        score=exam.score,
        started_at=as_utc(exam.started_at),
        completed_at=as_utc(exam.completed_at),
    )


def _start_response(exam: MockExam, questions: list[Question]) -> ExamStartResponse:
    return ExamStartResponse(exam=exam_response(exam), questions=[question_response(q) for q in questions])


# --- Daily quiz (declared before /{exam_id} so the literal paths win) ---


@router.post("/daily-quiz/start", response_model=ExamStartResponse)
async def post_daily_quiz_start(
    body: DailyQuizStartRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ExamStartResponse:
    exam, questions = await start_daily_quiz(db, user.id, body.certification_id)
    await db.commit()
    return _start_response(exam, questions)


@router.get("/daily-quiz/status", response_model=DailyQuizStatusResponse)
async def get_daily_quiz_status(
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DailyQuizStatusResponse:
    return await daily_quiz_status(db, user.id, certification_id)


@router.get("/daily-quiz/weekly", response_model=DailyQuizWeeklyResponse)
async def get_daily_quiz_weekly(
    start_date: date | None = Query(None, alias="startDate"),
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DailyQuizWeeklyResponse:
    return await weekly_daily_quizzes(db, user.id, start_date, certification_id)


# --- Mock exams ---


@router.post("/start", response_model=ExamStartResponse, status_code=status.HTTP_201_CREATED)
async def post_exam_start(
    body: ExamStartRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ExamStartResponse:
    exam, questions = await start_exam(
        db,
        user.id,
        body.certification_id,
        body.total_questions,
        difficulty=body.difficulty,
        distribute_by_knowledge_area=body.distribute_by_knowledge_area,
        randomize=body.random,
    )
    await db.commit()
    return _start_response(exam, questions)


@router.get("", response_model=list[ExamResponse])
async def get_exams(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[ExamResponse]:
    return [exam_response(e) for e in await list_exams(db, user.id)]


@router.get("/{exam_id}", response_model=ExamResponse)
async def get_exam(
    exam_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ExamResponse:
    return exam_response(await get_user_exam(db, user.id, exam_id))


@router.get("/{exam_id}/review", response_model=ExamReviewResponse)
async def get_exam_review(
    exam_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ExamReviewResponse:
    exam, items = await review_exam(db, user.id, exam_id)
    return ExamReviewResponse(exam=exam_response(exam), items=items)


@router.post("/{exam_id}/submit", response_model=ExamResultResponse)
async def post_exam_submit(
    exam_id: uuid.UUID,
    body: ExamSubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ExamResultResponse:
    exam, awarded = await submit_exam(db, user.id, exam_id, body.answers)
    await db.commit()
    return ExamResultResponse(**exam_response(exam).model_dump(), badges_awarded=awarded)


@router.delete("/{exam_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_exam(
    exam_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> None:
    await delete_exam(db, user.id, exam_id)
    await db.commit()
