"""Batch import of questions and flashcards.

A batch is committed in one transaction. Invalid records are skipped and
reported back with their 1-based position in the batch.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.db.models import Flashcard, KnowledgeArea, Question
from certprep.import_export.schemas import ImportErrorDetail, ImportResult
from certprep.questions.schemas import QuestionCreate
from certprep.questions.service import add_question

logger = structlog.get_logger()


def _format_pydantic_error(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


async def _area_owners(db: AsyncSession) -> dict[uuid.UUID, uuid.UUID]:
    """knowledge_area_id -> certification_id for every knowledge area."""
    rows = await db.execute(select(KnowledgeArea.id, KnowledgeArea.certification_id))
    return {area_id: cert_id for area_id, cert_id in rows.all()}


async def import_questions(db: AsyncSession, records: Sequence[Any]) -> ImportResult:
    owners = await _area_owners(db)
    errors: list[ImportErrorDetail] = []
    imported = 0

    for index, raw in enumerate(records, start=1):
        try:
            body = QuestionCreate.model_validate(raw)
        except PydanticValidationError as exc:
            errors.append(ImportErrorDetail(row=index, error=_format_pydantic_error(exc)))
            continue
        if owners.get(body.knowledge_area_id) != body.certification_id:
            errors.append(ImportErrorDetail(row=index, error="Knowledge area not found for this certification"))
            continue
        add_question(db, body)
        imported += 1

    await db.commit()
    logger.info("questions_imported", imported=imported, errors=len(errors))
    return ImportResult(imported=imported, errors=len(errors), error_details=errors)


async def import_flashcards(db: AsyncSession, records: Sequence[dict[str, str | None]]) -> ImportResult:
    errors: list[ImportErrorDetail] = []
    imported = 0

    for index, record in enumerate(records, start=1):
        missing = [field for field in ("front_face", "back_face", "knowledge_area") if not record.get(field)]
        if missing:
            errors.append(ImportErrorDetail(row=index, error=f"Missing required fields: {', '.join(missing)}"))
            continue
        db.add(
            Flashcard(
                front_face=record["front_face"],
                back_face=record["back_face"],
                knowledge_area=record["knowledge_area"],
            )
        )
        imported += 1

    await db.commit()
    logger.info("flashcards_imported", imported=imported, errors=len(errors))
    return ImportResult(imported=imported, errors=len(errors), error_details=errors)


async def export_questions(db: AsyncSession, certification_id: uuid.UUID | None) -> list[Question]:
    stmt = select(Question)
    if certification_id is not None:
        stmt = stmt.where(Question.certification_id == certification_id)
    result = await db.execute(stmt.order_by(Question.created_at, Question.id))
    return list(result.scalars())
