"""Knowledge area endpoints. Listings are ordered by display order."""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response
from pydantic import Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user, require_admin
from certprep.database import get_session
from certprep.db.models import Certification, KnowledgeArea
from certprep.errors import NotFoundError, ValidationError
from certprep.schemas import CamelModel

router = APIRouter(prefix="/api/knowledge-areas", tags=["Knowledge Areas"])


class KnowledgeAreaResponse(CamelModel):
    id: uuid.UUID
    certification_id: uuid.UUID
    name: str
    description: str | None = None
    order: int
    created_at: datetime


class KnowledgeAreaCreate(CamelModel):
    certification_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    order: int = 0


class KnowledgeAreaUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    order: int | None = None


def _to_response(area: KnowledgeArea) -> KnowledgeAreaResponse:
    return KnowledgeAreaResponse(
        id=area.id,
        certification_id=area.certification_id,
        name=area.name,
        description=area.description,
        order=area.display_order,
        created_at=area.created_at,
    )


async def _get_or_404(db: AsyncSession, area_id: uuid.UUID) -> KnowledgeArea:
    area = await db.get(KnowledgeArea, area_id)
    if area is None:
        msg = "Knowledge area not found"
        raise NotFoundError(msg)
    return area


@router.get(
    "",
    response_model=list[KnowledgeAreaResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_knowledge_areas(
    certification_id: uuid.UUID | None = Query(None, alias="certificationId"),
    db: AsyncSession = Depends(get_session),
) -> list[KnowledgeAreaResponse]:
    stmt = select(KnowledgeArea)
    if certification_id is not None:
        stmt = stmt.where(KnowledgeArea.certification_id == certification_id)
    result = await db.execute(stmt.order_by(KnowledgeArea.display_order, KnowledgeArea.name))
    return [_to_response(a) for a in result.scalars()]


@router.get(
    "/certification/{certification_id}",
    response_model=list[KnowledgeAreaResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_by_certification(
    certification_id: uuid.UUID, db: AsyncSession = Depends(get_session)
) -> list[KnowledgeAreaResponse]:
    result = await db.execute(
        select(KnowledgeArea)
        .where(KnowledgeArea.certification_id == certification_id)
        .order_by(KnowledgeArea.display_order, KnowledgeArea.name)
    )
    return [_to_response(a) for a in result.scalars()]


@router.get(
    "/{area_id}",
    response_model=KnowledgeAreaResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_knowledge_area(area_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> KnowledgeAreaResponse:
    return _to_response(await _get_or_404(db, area_id))


@router.post("", response_model=KnowledgeAreaResponse, status_code=201, dependencies=[Depends(require_admin)])
async def create_knowledge_area(
    body: KnowledgeAreaCreate, db: AsyncSession = Depends(get_session)
) -> KnowledgeAreaResponse:
    if await db.get(Certification, body.certification_id) is None:
        msg = "Certification not found"
        raise ValidationError(msg)
    area = KnowledgeArea(
        certification_id=body.certification_id,
        name=body.name,
        description=body.description,
        display_order=body.order,
    )
    db.add(area)
    await db.commit()
    return _to_response(area)


@router.put("/{area_id}", response_model=KnowledgeAreaResponse, dependencies=[Depends(require_admin)])
async def update_knowledge_area(
    area_id: uuid.UUID,
    body: KnowledgeAreaUpdate,
    db: AsyncSession = Depends(get_session),
) -> KnowledgeAreaResponse:
    area = await _get_or_404(db, area_id)
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        msg = "No fields to update"
        raise ValidationError(msg)
    if "order" in updates:
        updates["display_order"] = updates.pop("order")
    for field, value in updates.items():
        setattr(area, field, value)
    await db.commit()
    return _to_response(area)


@router.delete("/{area_id}", status_code=204, dependencies=[Depends(require_admin)])
async def delete_knowledge_area(area_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> Response:
    area = await _get_or_404(db, area_id)
    await db.delete(area)
    await db.commit()
    return Response(status_code=204)
