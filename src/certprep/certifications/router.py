"""Certification catalogue endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Response
from pydantic import Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.auth.dependencies import get_current_user, require_admin
from certprep.database import get_session
from certprep.db.models import Certification
from certprep.errors import NotFoundError, ValidationError
from certprep.schemas import CamelModel

router = APIRouter(prefix="/api/certifications", tags=["Certifications"])

CertificationType = Literal["pmp"]


class CertificationResponse(CamelModel):
    id: uuid.UUID
    name: str
    type: str
    description: str | None = None
    is_active: bool
    created_at: datetime


class CertificationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: CertificationType
    description: str | None = None
    is_active: bool = True


class CertificationUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    type: CertificationType | None = None
    description: str | None = None
    is_active: bool | None = None


async def _get_or_404(db: AsyncSession, certification_id: uuid.UUID) -> Certification:
    cert = await db.get(Certification, certification_id)
    if cert is None:
        msg = "Certification not found"
        raise NotFoundError(msg)
    return cert


@router.get(
    "",
    response_model=list[CertificationResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_certifications(db: AsyncSession = Depends(get_session)) -> list[CertificationResponse]:
    result = await db.execute(
        select(Certification).where(Certification.is_active.is_(True)).order_by(Certification.name)
    )
    return [CertificationResponse.model_validate(c) for c in result.scalars()]


@router.get(
    "/{certification_id}",
    response_model=CertificationResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_certification(
    certification_id: uuid.UUID, db: AsyncSession = Depends(get_session)
) -> CertificationResponse:
    return CertificationResponse.model_validate(await _get_or_404(db, certification_id))


@router.post("", response_model=CertificationResponse, status_code=201, dependencies=[Depends(require_admin)])
async def create_certification(
    body: CertificationCreate, db: AsyncSession = Depends(get_session)
) -> CertificationResponse:
    cert = Certification(**body.model_dump())
    db.add(cert)
    await db.commit()
    return CertificationResponse.model_validate(cert)


@router.put("/{certification_id}", response_model=CertificationResponse, dependencies=[Depends(require_admin)])
async def update_certification(
    certification_id: uuid.UUID,
    body: CertificationUpdate,
    db: AsyncSession = Depends(get_session),
) -> CertificationResponse:
    cert = await _get_or_404(db, certification_id)
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        msg = "No fields to update"
        raise ValidationError(msg)
    for field, value in updates.items():
        setattr(cert, field, value)
    await db.commit()
    await db.refresh(cert)
    return CertificationResponse.model_validate(cert)


@router.delete("/{certification_id}", status_code=204, dependencies=[Depends(require_admin)])
async def delete_certification(certification_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> Response:
    cert = await _get_or_404(db, certification_id)
    await db.delete(cert)
    await db.commit()
    return Response(status_code=204)
