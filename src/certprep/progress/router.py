"""Progress tracking endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user
from certprep.database import get_session
from certprep.db.models import User
from certprep.progress.schemas import (
    AnsweredQuestionsResponse,
    DomainPerformanceResponse,
    KnowledgeAreaPerformanceResponse,
    MarkReviewedRequest,
    MissedQuestionsResponse,
    ProgressListResponse,
    ProgressUpdate,
    RecordAnswerRequest,
    RecordAnswerResponse,
)
from certprep.progress.service import (
    answered_question_ids,
    domain_performance,
    knowledge_area_performance,
    list_progress,
    mark_reviewed,
    missed_questions,
    progress_response,
    record_answer,
    set_progress,
)
from certprep.schemas import MessageResponse

router = APIRouter(prefix="/api/progress", tags=["Progress"])


@router.get("", response_model=ProgressListResponse)
async def get_progress(
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProgressListResponse:
    rows = await list_progress(db, user.id, certification_id)
    return ProgressListResponse(progress=[progress_response(r) for r in rows])


@router.put("", response_model=MessageResponse)
async def update_progress(
    body: ProgressUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await set_progress(db, user.id, body.certification_id, body.total_questions_answered, body.correct_answers)
    await db.commit()
    return MessageResponse(message="Progress updated successfully")


@router.post("/answer", response_model=RecordAnswerResponse)
async def post_answer(
    body: RecordAnswerRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> RecordAnswerResponse:
    event = await record_answer(db, user.id, body.question_id, body.answer_id)
    await db.commit()
    return RecordAnswerResponse(is_correct=event.is_correct, user_answer_id=event.id)


@router.get("/knowledge-area", response_model=KnowledgeAreaPerformanceResponse)
async def performance_by_knowledge_area(
    certification_id: uuid.UUID = Query(..., alias="certificationId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> KnowledgeAreaPerformanceResponse:
    return KnowledgeAreaPerformanceResponse(
        performance=await knowledge_area_performance(db, user.id, certification_id)
    )


@router.get("/domain", response_model=DomainPerformanceResponse)
async def performance_by_domain(
    certification_id: uuid.UUID = Query(..., alias="certificationId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DomainPerformanceResponse:
    """People / Process / Business breakdown; all three domains are always present."""
    return DomainPerformanceResponse(performance=await domain_performance(db, user.id, certification_id))


@router.get("/answered-questions", response_model=AnsweredQuestionsResponse)
async def get_answered_questions(
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AnsweredQuestionsResponse:
    return AnsweredQuestionsResponse(question_ids=await answered_question_ids(db, user.id, certification_id))


@router.get("/missed-questions", response_model=MissedQuestionsResponse)
async def get_missed_questions(
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    knowledge_area_id: uuid.UUID | None = Query(None, alias="knowledgeAreaId"),
    reviewed: bool | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MissedQuestionsResponse:
    items = await missed_questions(db, user.id, certification_id, knowledge_area_id, reviewed)
    return MissedQuestionsResponse(missed_questions=items)


@router.post("/missed-questions/reviewed", response_model=MessageResponse)
async def mark_missed_question_reviewed(
    body: MarkReviewedRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    created = await mark_reviewed(db, user.id, body.question_id)
    await db.commit()
    return MessageResponse(message="Marked as reviewed successfully" if created else "Already marked as reviewed")
