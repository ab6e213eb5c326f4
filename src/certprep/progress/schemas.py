"""Progress and performance response models. Accuracy fields are percentages."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from certprep.questions.schemas import QuestionResponse
from certprep.schemas import CamelModel


class ProgressResponse(CamelModel):
    id: uuid.UUID
    certification_id: uuid.UUID
    total_questions_answered: int
    correct_answers: int
    accuracy: float
    updated_at: datetime


class ProgressListResponse(CamelModel):
    progress: list[ProgressResponse]


class ProgressUpdate(CamelModel):
    certification_id: uuid.UUID
    total_questions_answered: int = Field(..., ge=0)
    correct_answers: int = Field(..., ge=0)


class RecordAnswerRequest(CamelModel):
    question_id: uuid.UUID
    answer_id: uuid.UUID


class RecordAnswerResponse(CamelModel):
    is_correct: bool
    user_answer_id: uuid.UUID


class KnowledgeAreaPerformance(CamelModel):
    knowledge_area_id: uuid.UUID
    knowledge_area_name: str
    total_answered: int
    correct_answers: int
    accuracy: float


class DomainPerformance(CamelModel):
    domain: str
    total_questions: int
    total_answered: int
    correct_answers: int
    accuracy: float


class KnowledgeAreaPerformanceResponse(CamelModel):
    performance: list[KnowledgeAreaPerformance]


class DomainPerformanceResponse(CamelModel):
    performance: list[DomainPerformance]


class AnsweredQuestionsResponse(CamelModel):
    question_ids: list[uuid.UUID]


class MissedQuestion(CamelModel):
    question_id: uuid.UUID
    question: QuestionResponse
    answered_at: datetime
    is_reviewed: bool
    user_answer_id: uuid.UUID | None = None


class MissedQuestionsResponse(CamelModel):
    missed_questions: list[MissedQuestion]


class MarkReviewedRequest(CamelModel):
    question_id: uuid.UUID
