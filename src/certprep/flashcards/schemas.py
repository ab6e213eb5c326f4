"""Flashcard request/response models."""

from __future__ import annotations

import uuid

from certprep.schemas import CamelModel


class FlashcardResponse(CamelModel):
    id: uuid.UUID
    front_face: str
    back_face: str
    knowledge_area: str
    is_marked: bool = False
    times_reviewed: int = 0
    times_correct: int = 0
    times_incorrect: int = 0


class FlashcardsResponse(CamelModel):
    flashcards: list[FlashcardResponse]


class FlashcardKnowledgeAreasResponse(CamelModel):
    knowledge_areas: list[str]


class MarkRequest(CamelModel):
    is_marked: bool


class MarkResponse(CamelModel):
    success: bool = True
    is_marked: bool


class ReviewRequest(CamelModel):
    flashcard_id: uuid.UUID
    is_correct: bool


class ReviewResponse(CamelModel):
    success: bool = True
