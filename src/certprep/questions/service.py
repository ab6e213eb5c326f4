"""Question bank operations."""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.db.models import Answer, KnowledgeArea, Question
from certprep.errors import NotFoundError, ValidationError
from certprep.questions.schemas import (
    AnswerIn,
    AnswerResponse,
    QuestionCreate,
    QuestionResponse,
    QuestionUpdate,
    check_answer_set,
)

logger = structlog.get_logger()


def question_response(question: Question) -> QuestionResponse:
    """Hydrated response: answers in display order plus the knowledge area name."""
    return QuestionResponse(
        id=question.id,
        certification_id=question.certification_id,
        knowledge_area_id=question.knowledge_area_id,
        knowledge_area_name=question.knowledge_area.name if question.knowledge_area else None,
        question_text=question.question_text,
        explanation=question.explanation,
        difficulty=question.difficulty,
        domain=question.domain,
        question_type=question.question_type,
        question_metadata=question.question_metadata,
        is_active=question.is_active,
        created_at=question.created_at,
        answers=[
            AnswerResponse(id=a.id, answer_text=a.answer_text, is_correct=a.is_correct, order=a.display_order)
            for a in sorted(question.answers, key=lambda a: a.display_order)
        ],
    )


async def load_question(db: AsyncSession, question_id: uuid.UUID) -> Question:
    """Fetch one question with answers, or raise NotFoundError."""
    result = await db.execute(
        select(Question).where(Question.id == question_id).execution_options(populate_existing=True)
    )
    question = result.scalar_one_or_none()
    if question is None:
        msg = "Question not found"
        raise NotFoundError(msg)
    return question


async def check_placement(db: AsyncSession, certification_id: uuid.UUID, knowledge_area_id: uuid.UUID) -> None:
    """The knowledge area must exist and belong to the certification."""
    area = await db.get(KnowledgeArea, knowledge_area_id)
    if area is None or area.certification_id != certification_id:
        msg = "Knowledge area not found for this certification"
        raise ValidationError(msg)


def _answer_rows(question_id: uuid.UUID, answers: list[AnswerIn]) -> list[Answer]:
    return [
        Answer(question_id=question_id, answer_text=a.answer_text, is_correct=a.is_correct, display_order=i)
        for i, a in enumerate(answers)
    ]


def add_question(db: AsyncSession, body: QuestionCreate) -> Question:
    """Stage a question and its answers on the session without flushing."""
    question = Question(
        id=uuid.uuid4(),
        certification_id=body.certification_id,
        knowledge_area_id=body.knowledge_area_id,
        question_text=body.question_text,
        explanation=body.explanation,
        difficulty=body.difficulty,
        domain=body.domain,
        question_type=body.question_type,
        question_metadata=body.question_metadata,
        is_active=True,
    )
    db.add(question)
    db.add_all(_answer_rows(question.id, body.answers))
    return question


async def create_question(db: AsyncSession, body: QuestionCreate) -> Question:
    await check_placement(db, body.certification_id, body.knowledge_area_id)
    question = add_question(db, body)
    await db.commit()
    logger.info("question_created", question_id=str(question.id))
    return await load_question(db, question.id)


async def update_question(db: AsyncSession, question_id: uuid.UUID, body: QuestionUpdate) -> Question:
    question = await load_question(db, question_id)
    updates: dict[str, Any] = body.model_dump(exclude_unset=True, exclude={"answers"})
    if not updates and body.answers is None:
        msg = "No fields to update"
        raise ValidationError(msg)

    if "knowledge_area_id" in updates:
        await check_placement(db, question.certification_id, updates["knowledge_area_id"])

    new_type = updates.get("question_type", question.question_type)
    new_metadata = updates.get("question_metadata", question.question_metadata)
    if body.answers is not None or "question_type" in updates or "question_metadata" in updates:
        answers = body.answers
        if answers is None:
            answers = [AnswerIn(answer_text=a.answer_text, is_correct=a.is_correct) for a in question.answers]
        try:
            check_answer_set(new_type, answers, new_metadata)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    for field, value in updates.items():
        setattr(question, field, value)
    if body.answers is not None:
        await db.execute(delete(Answer).where(Answer.question_id == question_id))
        db.add_all(_answer_rows(question_id, body.answers))
    await db.commit()
    return await load_question(db, question_id)


async def delete_question(db: AsyncSession, question_id: uuid.UUID) -> None:
    await load_question(db, question_id)
    await db.execute(delete(Answer).where(Answer.question_id == question_id))
    await db.execute(delete(Question).where(Question.id == question_id))
    await db.commit()
    logger.info("question_deleted", question_id=str(question_id))
