"""Flashcard study endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user
from certprep.database import get_session
from certprep.db.models import User
from certprep.errors import ValidationError
from certprep.flashcards.schemas import (
    FlashcardKnowledgeAreasResponse,
    FlashcardsResponse,
    MarkRequest,
    MarkResponse,
    ReviewRequest,
    ReviewResponse,
)
from certprep.flashcards.service import (
    flashcard_knowledge_areas,
    list_flashcards,
    marked_flashcards,
    record_review,
    set_marked,
)

router = APIRouter(prefix="/api/flashcards", tags=["Flashcards"])


def _parse_ids(raw: list[str]) -> list[uuid.UUID]:
    """Accept repeated ``knowledgeAreaIds`` params as well as a comma-separated list."""
    ids = []
    for value in raw:
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                ids.append(uuid.UUID(part))
            except ValueError:
                msg = f"Invalid knowledge area id: {part}"
                raise ValidationError(msg) from None
    return ids


@router.get("", response_model=FlashcardsResponse)
async def get_flashcards(
    knowledge_area_ids: list[str] = Query([], alias="knowledgeAreaIds"),
    random: bool = False,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> FlashcardsResponse:
    cards = await list_flashcards(db, user.id, _parse_ids(knowledge_area_ids), randomize=random)
    return FlashcardsResponse(flashcards=cards)


@router.get("/knowledge-areas", response_model=FlashcardKnowledgeAreasResponse)
async def get_flashcard_knowledge_areas(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> FlashcardKnowledgeAreasResponse:
    return FlashcardKnowledgeAreasResponse(knowledge_areas=await flashcard_knowledge_areas(db))


@router.get("/marked", response_model=FlashcardsResponse)
async def get_marked_flashcards(
    random: bool = False,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> FlashcardsResponse:
    return FlashcardsResponse(flashcards=await marked_flashcards(db, user.id, randomize=random))


@router.post("/review", response_model=ReviewResponse)
async def post_review(
    body: ReviewRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ReviewResponse:
    await record_review(db, user.id, body.flashcard_id, body.is_correct)
    await db.commit()
    return ReviewResponse()


@router.post("/{flashcard_id}/mark", response_model=MarkResponse)
async def post_mark(
    flashcard_id: uuid.UUID,
    body: MarkRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MarkResponse:
    await set_marked(db, user.id, flashcard_id, body.is_marked)
    await db.commit()
    return MarkResponse(is_marked=body.is_marked)
