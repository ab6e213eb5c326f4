"""Certification, knowledge area, question, and import/export endpoints."""

import csv
import io
import json
from collections import Counter

import pytest
from httpx import AsyncClient


def _question_body(bank, **overrides) -> dict:
    body = {
        "certificationId": str(bank.certification_id),
        "knowledgeAreaId": str(bank.area_ids[0]),
        "questionText": "Which document formally authorizes a project?",
        "explanation": "The charter authorizes the project.",
        "difficulty": "easy",
        "domain": "2. Process",
        "answers": [
            {"answerText": "Project charter", "isCorrect": True},
            {"answerText": "Scope statement", "isCorrect": False},
            {"answerText": "Risk register", "isCorrect": False},
            {"answerText": "Issue log", "isCorrect": False},
        ],
    }
    body.update(overrides)
    return body


# --- Certifications and knowledge areas ---


@pytest.mark.asyncio
async def test_list_certifications(authed_client: AsyncClient, bank) -> None:
    response = await authed_client.get("/api/certifications")
    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["PMP"]


@pytest.mark.asyncio
async def test_content_reads_require_login(client: AsyncClient, bank) -> None:
    """Answer keys are never served to anonymous callers."""
    question_id = next(iter(bank.answer_key))
    for path, params in [
        ("/api/questions", {"certificationId": str(bank.certification_id)}),
        (f"/api/questions/{question_id}", None),
        (f"/api/questions/knowledge-area/{bank.area_ids[0]}", None),
        ("/api/certifications", None),
        (f"/api/certifications/{bank.certification_id}", None),
        ("/api/knowledge-areas", None),
        (f"/api/knowledge-areas/certification/{bank.certification_id}", None),
        (f"/api/knowledge-areas/{bank.area_ids[0]}", None),
    ]:
        response = await client.get(path, params=params)
        assert response.status_code == 401, path
        assert "answers" not in response.text


@pytest.mark.asyncio
async def test_create_certification_admin_only(client: AsyncClient, auth_headers, admin_headers) -> None:
    body = {"name": "PMP 2026", "type": "pmp"}
    denied = await client.post("/api/certifications", json=body, headers=auth_headers)
    assert denied.status_code == 403

    created = await client.post("/api/certifications", json=body, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["isActive"] is True


@pytest.mark.asyncio
async def test_unknown_certification(authed_client: AsyncClient) -> None:
    response = await authed_client.get("/api/certifications/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["detail"] == "Certification not found"


@pytest.mark.asyncio
async def test_knowledge_areas_in_display_order(authed_client: AsyncClient, bank) -> None:
    response = await authed_client.get(f"/api/knowledge-areas/certification/{bank.certification_id}")
    assert response.status_code == 200
    assert [a["name"] for a in response.json()] == [
        "Project Integration Management",
        "Project Scope Management",
        "Project Risk Management",
    ]
    assert [a["order"] for a in response.json()] == [1, 2, 3]


@pytest.mark.asyncio
async def test_create_knowledge_area_for_unknown_certification(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/knowledge-areas",
        json={"certificationId": "00000000-0000-0000-0000-000000000000", "name": "Ethics"},
        headers=admin_headers,
    )
    assert response.status_code == 400


# --- Questions ---


@pytest.mark.asyncio
async def test_create_question_keeps_answer_order(client: AsyncClient, bank, admin_headers) -> None:
    response = await client.post("/api/questions", json=_question_body(bank), headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert [a["answerText"] for a in data["answers"]] == [
        "Project charter",
        "Scope statement",
        "Risk register",
        "Issue log",
    ]
    assert [a["order"] for a in data["answers"]] == [0, 1, 2, 3]
    assert [a["isCorrect"] for a in data["answers"]] == [True, False, False, False]
    assert data["knowledgeAreaName"] == "Project Integration Management"
    assert data["questionType"] == "multiple_choice"


@pytest.mark.asyncio
async def test_create_question_requires_a_correct_answer(client: AsyncClient, bank, admin_headers) -> None:
    body = _question_body(
        bank,
        answers=[{"answerText": "A", "isCorrect": False}, {"answerText": "B", "isCorrect": False}],
    )
    response = await client.post("/api/questions", json=body, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_question_requires_two_answers(client: AsyncClient, bank, admin_headers) -> None:
    body = _question_body(bank, answers=[{"answerText": "Only", "isCorrect": True}])
    response = await client.post("/api/questions", json=body, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_drag_and_match_needs_metadata(client: AsyncClient, bank, admin_headers) -> None:
    body = _question_body(bank, questionType="drag_and_match", answers=[])
    missing = await client.post("/api/questions", json=body, headers=admin_headers)
    assert missing.status_code == 400

    body["questionMetadata"] = {
        "leftItems": ["Charter", "WBS"],
        "rightItems": ["Authorizes", "Decomposes"],
        "matches": {"Charter": "Authorizes", "WBS": "Decomposes"},
    }
    created = await client.post("/api/questions", json=body, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["questionMetadata"]["matches"]["WBS"] == "Decomposes"


@pytest.mark.asyncio
async def test_create_question_in_foreign_area(client: AsyncClient, bank, make_bank, admin_headers) -> None:
    other = await make_bank(areas=("Project Cost Management",), per_area=1)
    body = _question_body(bank, knowledgeAreaId=str(other.area_ids[0]))
    response = await client.post("/api/questions", json=body, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_question_learner_forbidden(client: AsyncClient, bank, auth_headers) -> None:
    response = await client.post("/api/questions", json=_question_body(bank), headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_question_replaces_answers(client: AsyncClient, bank, admin_headers) -> None:
    question_id = next(iter(bank.answer_key))
    response = await client.put(
        f"/api/questions/{question_id}",
        json={
            "difficulty": "easy",
            "answers": [{"answerText": "Yes", "isCorrect": True}, {"answerText": "No", "isCorrect": False}],
        },
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["difficulty"] == "easy"
    assert [a["answerText"] for a in data["answers"]] == ["Yes", "No"]


@pytest.mark.asyncio
async def test_update_question_rejects_invalid_answer_set(client: AsyncClient, bank, admin_headers) -> None:
    question_id = next(iter(bank.answer_key))
    response = await client.put(
        f"/api/questions/{question_id}",
        json={"answers": [{"answerText": "A", "isCorrect": False}, {"answerText": "B", "isCorrect": False}]},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_question(client: AsyncClient, bank, admin_headers) -> None:
    question_id = next(iter(bank.answer_key))
    deleted = await client.delete(f"/api/questions/{question_id}", headers=admin_headers)
    assert deleted.status_code == 204
    missing = await client.get(f"/api/questions/{question_id}", headers=admin_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_list_questions_filters(authed_client: AsyncClient, bank) -> None:
    response = await authed_client.get(
        "/api/questions",
        params={"certificationId": str(bank.certification_id), "difficulty": "hard", "limit": 100},
    )
    assert response.status_code == 200
    questions = response.json()
    assert len(questions) == 6
    assert {q["difficulty"] for q in questions} == {"hard"}


@pytest.mark.asyncio
async def test_list_questions_by_knowledge_area(authed_client: AsyncClient, bank) -> None:
    area_id = bank.area_ids[1]
    response = await authed_client.get(f"/api/questions/knowledge-area/{area_id}")
    assert response.status_code == 200
    assert len(response.json()) == 4
    assert {q["knowledgeAreaId"] for q in response.json()} == {str(area_id)}


@pytest.mark.asyncio
async def test_distributed_sampling_covers_every_area(authed_client: AsyncClient, bank) -> None:
    response = await authed_client.get(
        "/api/questions",
        params={
            "certificationId": str(bank.certification_id),
            "limit": 6,
            "random": "true",
            "distributeByKnowledgeArea": "true",
        },
    )
    assert response.status_code == 200
    questions = response.json()
    assert len(questions) == 6
    assert len({q["id"] for q in questions}) == 6
    per_area = Counter(q["knowledgeAreaId"] for q in questions)
    assert set(per_area) == {str(a) for a in bank.area_ids}
    assert all(count == 2 for count in per_area.values())


@pytest.mark.asyncio
async def test_distributed_sampling_fills_shortfall(authed_client: AsyncClient, make_bank) -> None:
    """A thin area contributes what it has and the rest comes from the whole pool."""
    lopsided = await make_bank(areas=("Project Quality Management", "Project Cost Management"), per_area=1)
    response = await authed_client.get(
        "/api/questions",
        params={
            "certificationId": str(lopsided.certification_id),
            "limit": 10,
            "distributeByKnowledgeArea": "true",
        },
    )
    assert response.status_code == 200
    # Only two questions exist: the result is short rather than padded.
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_inactive_questions_are_not_sampled(client: AsyncClient, bank, admin_headers) -> None:
    question_id = next(iter(bank.answer_key))
    await client.put(f"/api/questions/{question_id}", json={"isActive": False}, headers=admin_headers)
    response = await client.get(
        "/api/questions",
        params={"certificationId": str(bank.certification_id), "limit": 100},
        headers=admin_headers,
    )
    ids = {q["id"] for q in response.json()}
    assert str(question_id) not in ids
    assert len(ids) == 11


# --- Import / export ---


@pytest.mark.asyncio
async def test_import_json_reports_row_errors(client: AsyncClient, bank, admin_headers) -> None:
    good = _question_body(bank)
    bad = _question_body(bank, answers=[{"answerText": "A", "isCorrect": False}])
    response = await client.post("/api/import-export/import", json=[good, bad], headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["imported"] == 1
    assert data["errors"] == 1
    assert data["errorDetails"][0]["row"] == 2


@pytest.mark.asyncio
async def test_csv_export_then_import(client: AsyncClient, bank, admin_headers) -> None:
    exported = await client.get(
        "/api/import-export/export",
        params={"certificationId": str(bank.certification_id)},
        headers=admin_headers,
    )
    assert exported.status_code == 200
    assert exported.headers["content-type"].startswith("text/csv")

    rows = list(csv.DictReader(io.StringIO(exported.text)))
    assert len(rows) == 12
    answers = json.loads(rows[0]["answers"])
    assert len(answers) == 4
    assert [a["isCorrect"] for a in answers] == [True, False, False, False]

    imported = await client.post(
        "/api/import-export/import",
        files={"file": ("questions.csv", exported.content, "text/csv")},
        headers=admin_headers,
    )
    assert imported.status_code == 200
    assert imported.json() == {"imported": 12, "errors": 0, "errorDetails": []}


@pytest.mark.asyncio
async def test_import_flashcards_csv(client: AsyncClient, admin_headers) -> None:
    content = (
        "Front Face,Back Face,Knowledge Area\n"
        "What is a WBS?,Work breakdown structure,Project Scope Management\n"
        "Missing back,,Project Scope Management\n"
    )
    response = await client.post(
        "/api/import-export/import/flashcards",
        files={"file": ("cards.csv", content.encode(), "text/csv")},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["imported"] == 1
    assert data["errors"] == 1
    assert "back_face" in data["errorDetails"][0]["error"]


@pytest.mark.asyncio
async def test_import_rejects_empty_body(client: AsyncClient, admin_headers) -> None:
    response = await client.post("/api/import-export/import", json=[], headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_import_export_is_admin_only(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/import-export/export", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_import_rejects_non_utf8_json(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/import-export/import",
        content=b'[{"questionText": "\xff\xfe"}]',
        headers={**admin_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
