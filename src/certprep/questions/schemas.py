"""Question bank request/response models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import Field, model_validator

from certprep.schemas import CamelModel

Difficulty = Literal["easy", "medium", "hard"]
QuestionType = Literal["multiple_choice", "multi_select", "drag_and_match"]


class AnswerIn(CamelModel):
    answer_text: str = Field(..., min_length=1)
    is_correct: bool = False


class DragAndMatchMetadata(CamelModel):
    """Left items are matched to right items; ``matches`` maps left -> right."""

    left_items: list[str] = Field(..., min_length=1)
    right_items: list[str] = Field(..., min_length=1)
    matches: dict[str, str]


def check_answer_set(question_type: str, answers: list[AnswerIn] | None, metadata: Any) -> None:  # noqa: ANN401
    """Raise ValueError if the answers/metadata combination is not a valid question."""
    if question_type == "drag_and_match":
        if metadata is None:
            msg = "Drag and match questions require questionMetadata with leftItems, rightItems and matches"
            raise ValueError(msg)
        try:
            DragAndMatchMetadata.model_validate(metadata)
        except ValueError as e:
            msg = "questionMetadata must contain leftItems, rightItems and matches"
            raise ValueError(msg) from e
        return
    if answers is None or len(answers) < 2:
        msg = "Question must have at least 2 answers"
        raise ValueError(msg)
    if not any(a.is_correct for a in answers):
        msg = "Question must have at least one correct answer"
        raise ValueError(msg)


class QuestionCreate(CamelModel):
    certification_id: uuid.UUID
    knowledge_area_id: uuid.UUID
    question_text: str = Field(..., min_length=1)
    explanation: str | None = None
    difficulty: Difficulty = "medium"
    domain: str | None = Field(None, max_length=64)
    question_type: QuestionType = "multiple_choice"
    question_metadata: dict[str, Any] | None = None
    answers: list[AnswerIn] = []

    @model_validator(mode="after")
    def _check_answers(self) -> QuestionCreate:
        check_answer_set(self.question_type, self.answers, self.question_metadata)
        return self


class QuestionUpdate(CamelModel):
    """Partial update. When ``answers`` is given the whole answer set is replaced."""

    knowledge_area_id: uuid.UUID | None = None
    question_text: str | None = Field(None, min_length=1)
    explanation: str | None = None
    difficulty: Difficulty | None = None
    domain: str | None = Field(None, max_length=64)
    question_type: QuestionType | None = None
    question_metadata: dict[str, Any] | None = None
    is_active: bool | None = None
    answers: list[AnswerIn] | None = None


class AnswerResponse(CamelModel):
    id: uuid.UUID
    answer_text: str
    is_correct: bool
    order: int


class QuestionResponse(CamelModel):
    id: uuid.UUID
    certification_id: uuid.UUID
    knowledge_area_id: uuid.UUID
    knowledge_area_name: str | None = None
    question_text: str
    explanation: str | None = None
    difficulty: str
    domain: str | None = None
    question_type: str
    question_metadata: dict[str, Any] | None = None
    is_active: bool
    created_at: datetime
    answers: list[AnswerResponse] = []
