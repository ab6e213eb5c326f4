"""Question bank endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user, require_admin
from certprep.database import get_session
from certprep.questions.sampler import SampleRequest, sample_questions
from certprep.questions.schemas import Difficulty, QuestionCreate, QuestionResponse, QuestionUpdate
from certprep.questions.service import (
    create_question,
    delete_question,
    load_question,
    question_response,
    update_question,
)

router = APIRouter(prefix="/api/questions", tags=["Questions"])


@router.get(
    "",
    response_model=list[QuestionResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_questions(
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    knowledge_area_id: uuid.UUID | None = Query(None, alias="knowledgeAreaId"),
    difficulty: Difficulty | None = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    random: bool = False,
    distribute_by_knowledge_area: bool = Query(False, alias="distributeByKnowledgeArea"),
    db: AsyncSession = Depends(get_session),
) -> list[QuestionResponse]:
    """List active questions.

    With ``distributeByKnowledgeArea`` and a ``certificationId`` the result is
    balanced across the certification's knowledge areas.
    """
    questions = await sample_questions(
        db,
        SampleRequest(
            certification_id=certification_id,
            total=limit,
            difficulty=difficulty,
            random=random,
            distribute_by_knowledge_area=distribute_by_knowledge_area,
            knowledge_area_id=knowledge_area_id,
            offset=offset,
        ),
    )
    return [question_response(q) for q in questions]


@router.get(
    "/knowledge-area/{knowledge_area_id}",
    response_model=list[QuestionResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_by_knowledge_area(
    knowledge_area_id: uuid.UUID,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_session),
) -> list[QuestionResponse]:
    questions = await sample_questions(
        db,
        SampleRequest(certification_id=None, total=limit, knowledge_area_id=knowledge_area_id, offset=offset),
    )
    return [question_response(q) for q in questions]


@router.get(
    "/{question_id}",
    response_model=QuestionResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_question(question_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> QuestionResponse:
    return question_response(await load_question(db, question_id))


@router.post("", response_model=QuestionResponse, status_code=201, dependencies=[Depends(require_admin)])
async def create(body: QuestionCreate, db: AsyncSession = Depends(get_session)) -> QuestionResponse:
    return question_response(await create_question(db, body))


@router.put("/{question_id}", response_model=QuestionResponse, dependencies=[Depends(require_admin)])
async def update(
    question_id: uuid.UUID,
    body: QuestionUpdate,
    db: AsyncSession = Depends(get_session),
) -> QuestionResponse:
    return question_response(await update_question(db, question_id, body))


@router.delete("/{question_id}", status_code=204, dependencies=[Depends(require_admin)])
async def delete(question_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> Response:
    await delete_question(db, question_id)
    return Response(status_code=204)
