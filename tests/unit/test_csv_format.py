"""CSV layouts for question and flashcard import/export."""

import csv
import io
import json
import uuid

from certprep.db.models import Answer, Question
from certprep.import_export.csv_format import (
    QUESTION_COLUMNS,
    parse_flashcard_rows,
    parse_question_rows,
    questions_to_csv,
)

CERT = "6f1c1d7e-5b1e-4c51-9d43-1f0f3a0e7a10"
AREA = "0b9e8f52-3c2a-4c6e-8f6e-2a4b9d1c0e21"


def _csv(*rows: dict) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=QUESTION_COLUMNS)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


class TestParseQuestionRows:
    def test_answers_decoded(self):
        answers = [{"answerText": "A", "isCorrect": True}, {"answerText": "B", "isCorrect": False}]
        text = _csv(
            {
                "certificationId": CERT,
                "knowledgeAreaId": AREA,
                "questionText": "What is scope creep?",
                "difficulty": "hard",
                "answers": json.dumps(answers),
            }
        )
        (record,) = parse_question_rows(text)
        assert record["answers"] == answers
        assert record["difficulty"] == "hard"
        assert record["explanation"] is None
        assert "questionType" not in record

    def test_difficulty_defaults_to_medium(self):
        (record,) = parse_question_rows(_csv({"questionText": "Q", "answers": "[]"}))
        assert record["difficulty"] == "medium"

    def test_bad_answers_json_kept_raw(self):
        (record,) = parse_question_rows(_csv({"questionText": "Q", "answers": "A|B|C"}))
        assert record["answers"] == "A|B|C"

    def test_missing_answers_is_empty_list(self):
        (record,) = parse_question_rows(_csv({"questionText": "Q"}))
        assert record["answers"] == []

    def test_metadata_decoded(self):
        metadata = {"leftItems": ["a"], "rightItems": ["b"], "matches": {"a": "b"}}
        (record,) = parse_question_rows(
            _csv({"questionText": "Q", "questionType": "drag_and_match", "questionMetadata": json.dumps(metadata)})
        )
        assert record["questionType"] == "drag_and_match"
        assert record["questionMetadata"] == metadata

    def test_cells_stripped_and_blanks_are_none(self):
        (record,) = parse_question_rows(_csv({"questionText": "  Q  ", "domain": "  "}))
        assert record["questionText"] == "Q"
        assert record["domain"] is None


class TestParseFlashcardRows:
    def test_spreadsheet_headers(self):
        text = "Front Face,Back Face,Knowledge Area\nWBS,Work breakdown structure,Scope Management\n"
        assert parse_flashcard_rows(text) == [
            {"front_face": "WBS", "back_face": "Work breakdown structure", "knowledge_area": "Scope Management"}
        ]

    def test_snake_case_headers(self):
        text = "front_face,back_face,knowledge_area\nEVM,Earned value,Cost Management\n"
        assert parse_flashcard_rows(text)[0]["knowledge_area"] == "Cost Management"

    def test_missing_column_is_none(self):
        text = "Front Face,Back Face\nWBS,Work breakdown structure\n"
        assert parse_flashcard_rows(text)[0]["knowledge_area"] is None


class TestQuestionsToCsv:
    def test_answers_in_display_order(self):
        question = Question(
            id=uuid.uuid4(),
            certification_id=uuid.UUID(CERT),
            knowledge_area_id=uuid.UUID(AREA),
            question_text="Pick the charter",
            explanation=None,
            difficulty="easy",
            domain="2. Process",
            question_type="multiple_choice",
            question_metadata=None,
        )
        question.answers = [
            Answer(answer_text="Second", is_correct=False, display_order=1),
            Answer(answer_text="First", is_correct=True, display_order=0),
        ]

        rows = list(csv.DictReader(io.StringIO(questions_to_csv([question]))))
        assert len(rows) == 1
        row = rows[0]
        assert row["certificationId"] == CERT
        assert row["explanation"] == ""
        assert row["questionMetadata"] == ""
        assert json.loads(row["answers"]) == [
            {"answerText": "First", "isCorrect": True},
            {"answerText": "Second", "isCorrect": False},
        ]
