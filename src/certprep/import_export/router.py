"""Admin import/export endpoints."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from certprep.auth.dependencies import require_admin
from certprep.database import get_session
from certprep.errors import ValidationError
from certprep.import_export.csv_format import parse_flashcard_rows, parse_question_rows, questions_to_csv
from certprep.import_export.schemas import ImportResult
from certprep.import_export.service import export_questions, import_flashcards, import_questions

router = APIRouter(prefix="/api/import-export", tags=["Import/Export"], dependencies=[Depends(require_admin)])


async def _read_upload(request: Request) -> str:
    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        msg = "No file uploaded"
        raise ValidationError(msg)
    try:
        return (await upload.read()).decode("utf-8-sig")
    except UnicodeDecodeError as e:
        msg = "File must be UTF-8 encoded CSV"
        raise ValidationError(msg) from e


async def _read_json_records(request: Request) -> list[Any]:
    try:
        payload = await request.json()
    except ValueError as e:
        msg = "Request body must be a CSV upload or a JSON array"
        raise ValidationError(msg) from e
    if isinstance(payload, dict):
        payload = payload.get("questions")
    if not isinstance(payload, list):
        msg = "Request body must be a CSV upload or a JSON array"
        raise ValidationError(msg)
    return payload


@router.post("/import", response_model=ImportResult)
async def import_question_batch(request: Request, db: AsyncSession = Depends(get_session)) -> ImportResult:
    """Import questions from a multipart CSV upload (field ``file``) or a JSON array."""
    if request.headers.get("content-type", "").startswith("multipart/form-data"):
        records: list[Any] = parse_question_rows(await _read_upload(request))
    else:
        records = await _read_json_records(request)
    if not records:
        msg = "No records to import"
        raise ValidationError(msg)
    return await import_questions(db, records)


@router.post("/import/flashcards", response_model=ImportResult)
async def import_flashcard_batch(request: Request, db: AsyncSession = Depends(get_session)) -> ImportResult:
    records = parse_flashcard_rows(await _read_upload(request))
    if not records:
        msg = "No records to import"
        raise ValidationError(msg)
    return await import_flashcards(db, records)


@router.get("/export")
async def export_question_csv(
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    db: AsyncSession = Depends(get_session),
) -> Response:
    questions = await export_questions(db, certification_id)
    return Response(
        content=questions_to_csv(questions),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="questions.csv"'},
    )
