"""Question bookmarks."""

from __future__ import annotations

import uuid
from datetime import datetime

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user
from certprep.database import get_session
from certprep.db.base import as_utc, utcnow
from certprep.db.models import Bookmark, Question, User
from certprep.db.upsert import upsert_insert
from certprep.errors import NotFoundError
from certprep.questions.schemas import QuestionResponse
from certprep.questions.service import question_response
from certprep.schemas import CamelModel, MessageResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api/bookmarks", tags=["Bookmarks"])


class BookmarkCreate(CamelModel):
    question_id: uuid.UUID


class BookmarkResponse(CamelModel):
    id: uuid.UUID
    question_id: uuid.UUID
    created_at: datetime
    question: QuestionResponse | None = None


class BookmarksResponse(CamelModel):
    bookmarks: list[BookmarkResponse]


class BookmarkCheckResponse(CamelModel):
    is_bookmarked: bool


def _bookmark_response(bookmark: Bookmark, *, hydrate: bool = True) -> BookmarkResponse:
    return BookmarkResponse(
        id=bookmark.id,
        question_id=bookmark.question_id,
        created_at=as_utc(bookmark.created_at),
        question=question_response(bookmark.question) if hydrate else None,
    )


@router.get("", response_model=BookmarksResponse)
async def list_bookmarks(
    knowledge_area_id: uuid.UUID | None = Query(None, alias="knowledgeAreaId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BookmarksResponse:
    """Bookmarked questions with their answers, newest bookmark first."""
    stmt = select(Bookmark).where(Bookmark.user_id == user.id)
    if knowledge_area_id is not None:
        stmt = stmt.join(Question, Question.id == Bookmark.question_id).where(
            Question.knowledge_area_id == knowledge_area_id
        )
    result = await db.execute(stmt.order_by(Bookmark.created_at.desc()))
    return BookmarksResponse(bookmarks=[_bookmark_response(b) for b in result.scalars()])


@router.post("", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
async def add_bookmark(
    body: BookmarkCreate,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BookmarkResponse:
    """Bookmark a question. Bookmarking it again returns the existing row with 200."""
    if await db.get(Question, body.question_id) is None:
        msg = "Question not found"
        raise NotFoundError(msg)

    result = await db.execute(
        upsert_insert(db, Bookmark)
        .values(id=uuid.uuid4(), user_id=user.id, question_id=body.question_id, created_at=utcnow())
        .on_conflict_do_nothing(index_elements=["user_id", "question_id"])
        .returning(Bookmark.id)
    )
    created = result.scalar_one_or_none() is not None
    await db.commit()

    bookmark = (
        await db.execute(
            select(Bookmark).where(Bookmark.user_id == user.id, Bookmark.question_id == body.question_id)
        )
    ).scalar_one()
    if created:
        logger.info("bookmark_added", question_id=str(body.question_id))
    else:
        response.status_code = status.HTTP_200_OK
    return _bookmark_response(bookmark, hydrate=False)


@router.delete("/{question_id}", response_model=MessageResponse)
async def remove_bookmark(
    question_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    result = await db.execute(
        delete(Bookmark)
        .where(Bookmark.user_id == user.id, Bookmark.question_id == question_id)
        .returning(Bookmark.id)
    )
    if result.scalar_one_or_none() is None:
        msg = "Bookmark not found"
        raise NotFoundError(msg)
    await db.commit()
    return MessageResponse(message="Bookmark removed successfully")


@router.get("/check/{question_id}", response_model=BookmarkCheckResponse)
async def check_bookmark(
    question_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BookmarkCheckResponse:
    result = await db.execute(
        select(Bookmark.id).where(Bookmark.user_id == user.id, Bookmark.question_id == question_id)
    )
    return BookmarkCheckResponse(is_bookmarked=result.scalar_one_or_none() is not None)
