"""Exam and daily quiz request/response models."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import Field

from certprep.questions.schemas import AnswerResponse, Difficulty, QuestionResponse
from certprep.schemas import CamelModel


class ExamStartRequest(CamelModel):
    certification_id: uuid.UUID
    total_questions: int = Field(..., ge=1, le=500)
    difficulty: Difficulty | None = None
    distribute_by_knowledge_area: bool = True
    random: bool = True


class DailyQuizStartRequest(CamelModel):
    certification_id: uuid.UUID


class SubmittedAnswer(CamelModel):
    question_id: uuid.UUID
    answer_id: uuid.UUID


class ExamSubmitRequest(CamelModel):
    answers: list[SubmittedAnswer] = Field(..., min_length=1)


class ExamResponse(CamelModel):
    id: uuid.UUID
    certification_id: uuid.UUID
    exam_type: str
    total_questions: int
    correct_answers: int | None = None
    score: float | None = None
    started_at: datetime
    completed_at: datetime | None = None


class ExamStartResponse(CamelModel):
    exam: ExamResponse
    questions: list[QuestionResponse]


class ExamResultResponse(ExamResponse):
    badges_awarded: list[str] = []


class ReviewItem(CamelModel):
    question_id: uuid.UUID
    question_text: str
    explanation: str | None = None
    knowledge_area_name: str | None = None
    selected_answer_id: uuid.UUID | None = None
    selected_answer_text: str | None = None
    is_correct: bool = False
    answers: list[AnswerResponse] = []


class ExamReviewResponse(CamelModel):
    exam: ExamResponse
    items: list[ReviewItem]


class DailyQuizStatusResponse(CamelModel):
    has_taken_today: bool
    can_take: bool
    exam_id: uuid.UUID | None = None
    completed_at: datetime | None = None
    score: float | None = None


class DailyQuizDay(CamelModel):
    quiz_date: date = Field(..., alias="date")
    exam_id: uuid.UUID
    score: float | None = None


class DailyQuizWeeklyResponse(CamelModel):
    start_date: date
    completed: list[DailyQuizDay]
