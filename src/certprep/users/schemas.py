"""Profile and preference schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from certprep.schemas import CamelModel


class ProfileUpdate(CamelModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)


class PreferencesResponse(CamelModel):
    difficulty_level: str | None = None
    study_goals: list[str] = []
    notifications_enabled: bool = True
    updated_at: datetime | None = None


class PreferencesUpdate(CamelModel):
    difficulty_level: Literal["easy", "medium", "hard"] | None = None
    study_goals: list[str] | None = None
    notifications_enabled: bool | None = None
