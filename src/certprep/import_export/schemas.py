"""Import result models."""

from __future__ import annotations

from certprep.schemas import CamelModel


class ImportErrorDetail(CamelModel):
    row: int
    error: str


class ImportResult(CamelModel):
    imported: int
    errors: int
    error_details: list[ImportErrorDetail] = []
