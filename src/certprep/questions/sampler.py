"""Knowledge-area-distributed question sampling.

With distribution on, every knowledge area of the certification contributes up
to ``ceil(N / K)`` questions; any shortfall is filled from the whole active
pool of the certification. The result never exceeds ``N`` and may be shorter
when the pool itself is smaller.
"""

from __future__ import annotations

import math
import random as _random
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.db.models import KnowledgeArea, Question

T = TypeVar("T")


@dataclass(frozen=True)
class SampleRequest:
    certification_id: uuid.UUID | None
    total: int
    difficulty: str | None = None
    random: bool = False
    distribute_by_knowledge_area: bool = False
    knowledge_area_id: uuid.UUID | None = None
    offset: int = 0


def per_area_quota(total: int, area_count: int) -> int:
    """Questions requested from each area: ceil(total / area_count)."""
    if total <= 0 or area_count <= 0:
        return 0
    return math.ceil(total / area_count)


def finalize_selection(
    items: Sequence[T],
    total: int,
    *,
    shuffle: bool,
    rng: _random.Random | None = None,
) -> list[T]:
    """Optionally shuffle, then truncate to at most ``total`` items."""
    result = list(items)
    if shuffle:
        (rng or _random).shuffle(result)
    return result[: max(total, 0)]


def _active_questions(certification_id: uuid.UUID | None, difficulty: str | None) -> Select[tuple[Question]]:
    stmt = select(Question).where(Question.is_active.is_(True))
    if certification_id is not None:
        stmt = stmt.where(Question.certification_id == certification_id)
    if difficulty:
        stmt = stmt.where(Question.difficulty == difficulty)
    return stmt


def _ordered(stmt: Select[tuple[Question]], randomize: bool) -> Select[tuple[Question]]:
    if randomize:
        return stmt.order_by(func.random())
    return stmt.order_by(Question.created_at.desc(), Question.id)


async def sample_questions(
    db: AsyncSession,
    request: SampleRequest,
    rng: _random.Random | None = None,
) -> list[Question]:
    """Select questions for a practice session or exam.

    Answers and the knowledge area are eager-loaded on each returned question.
    """
    if request.total <= 0:
        return []

    if not (request.distribute_by_knowledge_area and request.certification_id is not None):
        stmt = _active_questions(request.certification_id, request.difficulty)
        if request.knowledge_area_id is not None:
            stmt = stmt.where(Question.knowledge_area_id == request.knowledge_area_id)
        stmt = _ordered(stmt, request.random).limit(request.total)
        if not request.random:
            stmt = stmt.offset(request.offset)
        return list((await db.execute(stmt)).scalars())

    areas = (
        await db.execute(
            select(KnowledgeArea.id)
            .where(KnowledgeArea.certification_id == request.certification_id)
            .order_by(KnowledgeArea.display_order, KnowledgeArea.name)
        )
    ).scalars().all()

    quota = per_area_quota(request.total, len(areas))
    selected: list[Question] = []
    for area_id in areas:
        stmt = _active_questions(request.certification_id, request.difficulty).where(
            Question.knowledge_area_id == area_id
        )
        stmt = _ordered(stmt, request.random).limit(quota)
        if not request.random:
            stmt = stmt.offset(request.offset)
        selected.extend((await db.execute(stmt)).scalars())

    shortfall = request.total - len(selected)
    if shortfall > 0:
        stmt = _active_questions(request.certification_id, request.difficulty)
        if selected:
            stmt = stmt.where(Question.id.notin_([q.id for q in selected]))
        stmt = stmt.order_by(func.random()).limit(shortfall)
        selected.extend((await db.execute(stmt)).scalars())

    return finalize_selection(selected, request.total, shuffle=request.random, rng=rng)
