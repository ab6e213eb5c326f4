"""CSV layouts for question and flashcard import/export."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable
from typing import Any

from certprep.db.models import Question

QUESTION_COLUMNS = (
    "certificationId",
    "knowledgeAreaId",
    "questionText",
    "explanation",
    "difficulty",
    "domain",
    "questionType",
    "answers",
    "questionMetadata",
)

_FLASHCARD_HEADERS = {
    "front_face": ("Front Face", "front_face", "frontFace"),
    "back_face": ("Back Face", "back_face", "backFace"),
    "knowledge_area": ("Knowledge Area", "knowledge_area", "knowledgeArea"),
}


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_question_rows(text: str) -> list[dict[str, Any]]:
    """Turn CSV text into question records.

    ``answers`` is a JSON list of ``{answerText, isCorrect}``; a row whose
    answers cell is not valid JSON keeps the raw string so validation reports it.
    """
    records: list[dict[str, Any]] = []
    for row in csv.DictReader(io.StringIO(text)):
        record: dict[str, Any] = {k: _blank_to_none(v) for k, v in row.items() if k}
        record["difficulty"] = record.get("difficulty") or "medium"
        if not record.get("questionType"):
            record.pop("questionType", None)
        raw_answers = record.get("answers")
        if raw_answers:
            try:
                record["answers"] = json.loads(raw_answers)
            except json.JSONDecodeError:
                record["answers"] = raw_answers
        else:
            record["answers"] = []
        raw_metadata = record.pop("questionMetadata", None)
        if raw_metadata:
            try:
                record["questionMetadata"] = json.loads(raw_metadata)
            except json.JSONDecodeError:
                record["questionMetadata"] = raw_metadata
        records.append(record)
    return records


def parse_flashcard_rows(text: str) -> list[dict[str, str | None]]:
    """Read flashcards, accepting either the spreadsheet headers or snake_case ones."""
    records: list[dict[str, str | None]] = []
    for row in csv.DictReader(io.StringIO(text)):
        record: dict[str, str | None] = {}
        for field, headers in _FLASHCARD_HEADERS.items():
            record[field] = next((_blank_to_none(row[h]) for h in headers if h in row), None)
        records.append(record)
    return records


def questions_to_csv(questions: Iterable[Question]) -> str:
    """Serialize questions in the import layout, answers in display order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(QUESTION_COLUMNS)
    for q in questions:
        answers = [
            {"answerText": a.answer_text, "isCorrect": a.is_correct}
            for a in sorted(q.answers, key=lambda a: a.display_order)
        ]
        writer.writerow(
            [
                str(q.certification_id),
                str(q.knowledge_area_id),
                q.question_text,
                q.explanation or "",
                q.difficulty,
                q.domain or "",
                q.question_type,
                json.dumps(answers),
                json.dumps(q.question_metadata) if q.question_metadata else "",
            ]
        )
    return buffer.getvalue()
