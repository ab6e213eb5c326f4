"""Flashcard decks and per-user review progress."""

from __future__ import annotations

import re
import uuid
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.db.base import utcnow
from certprep.db.models import Flashcard, KnowledgeArea, UserFlashcardProgress
from certprep.db.upsert import upsert_insert
from certprep.errors import NotFoundError
from certprep.flashcards.schemas import FlashcardResponse

_PROJECT_PREFIX = re.compile(r"^Project\s+", re.IGNORECASE)


def flashcard_label(knowledge_area_name: str) -> str:
    """Flashcards are labelled "Schedule Management", not "Project Schedule Management"."""
    return _PROJECT_PREFIX.sub("", knowledge_area_name).strip()


def _card(card: Flashcard, progress: UserFlashcardProgress | None) -> FlashcardResponse:
    return FlashcardResponse(
        id=card.id,
        front_face=card.front_face,
        back_face=card.back_face,
        knowledge_area=card.knowledge_area,
        is_marked=bool(progress and progress.is_marked),
        times_reviewed=progress.times_reviewed if progress else 0,
        times_correct=progress.times_correct if progress else 0,
        times_incorrect=progress.times_incorrect if progress else 0,
    )


async def list_flashcards(
    db: AsyncSession,
    user_id: uuid.UUID,
    knowledge_area_ids: Sequence[uuid.UUID] = (),
    *,
    randomize: bool = False,
) -> list[FlashcardResponse]:
    stmt = select(Flashcard, UserFlashcardProgress).outerjoin(
        UserFlashcardProgress,
        (UserFlashcardProgress.flashcard_id == Flashcard.id) & (UserFlashcardProgress.user_id == user_id),
    )
    if knowledge_area_ids:
        names = (
            await db.execute(select(KnowledgeArea.name).where(KnowledgeArea.id.in_(list(knowledge_area_ids))))
        ).scalars().all()
        if not names:
            return []
        stmt = stmt.where(Flashcard.knowledge_area.in_([flashcard_label(n) for n in names]))

    stmt = stmt.order_by(func.random() if randomize else Flashcard.id)
    return [_card(card, progress) for card, progress in (await db.execute(stmt)).all()]


async def flashcard_knowledge_areas(db: AsyncSession) -> list[str]:
    result = await db.execute(select(Flashcard.knowledge_area).distinct().order_by(Flashcard.knowledge_area))
    return list(result.scalars())


async def marked_flashcards(
    db: AsyncSession, user_id: uuid.UUID, *, randomize: bool = False
) -> list[FlashcardResponse]:
    stmt = (
        select(Flashcard, UserFlashcardProgress)
        .join(UserFlashcardProgress, UserFlashcardProgress.flashcard_id == Flashcard.id)
        .where(UserFlashcardProgress.user_id == user_id, UserFlashcardProgress.is_marked.is_(True))
        .order_by(func.random() if randomize else Flashcard.id)
    )
    return [_card(card, progress) for card, progress in (await db.execute(stmt)).all()]


async def _require_flashcard(db: AsyncSession, flashcard_id: uuid.UUID) -> None:
    if await db.get(Flashcard, flashcard_id) is None:
        msg = "Flashcard not found"
        raise NotFoundError(msg)


async def set_marked(db: AsyncSession, user_id: uuid.UUID, flashcard_id: uuid.UUID, is_marked: bool) -> None:
    await _require_flashcard(db, flashcard_id)
    stmt = upsert_insert(db, UserFlashcardProgress).values(
        id=uuid.uuid4(),
        user_id=user_id,
        flashcard_id=flashcard_id,
        is_marked=is_marked,
        times_reviewed=0,
        times_correct=0,
        times_incorrect=0,
    )
    await db.execute(
        stmt.on_conflict_do_update(
            index_elements=["user_id", "flashcard_id"],
            set_={"is_marked": stmt.excluded.is_marked},
        )
    )


async def record_review(db: AsyncSession, user_id: uuid.UUID, flashcard_id: uuid.UUID, is_correct: bool) -> None:
    """Bump the reviewed counter and exactly one of correct/incorrect, in one statement."""
    await _require_flashcard(db, flashcard_id)
    now = utcnow()
    stmt = upsert_insert(db, UserFlashcardProgress).values(
        id=uuid.uuid4(),
        user_id=user_id,
        flashcard_id=flashcard_id,
        is_marked=False,
        times_reviewed=1,
        times_correct=1 if is_correct else 0,
        times_incorrect=0 if is_correct else 1,
        last_reviewed_at=now,
    )
    table = UserFlashcardProgress.__table__
    await db.execute(
        stmt.on_conflict_do_update(
            index_elements=["user_id", "flashcard_id"],
            set_={
                "times_reviewed": table.c.times_reviewed + 1,
                "times_correct": table.c.times_correct + stmt.excluded.times_correct,
                "times_incorrect": table.c.times_incorrect + stmt.excluded.times_incorrect,
                "last_reviewed_at": stmt.excluded.last_reviewed_at,
            },
        )
    )
