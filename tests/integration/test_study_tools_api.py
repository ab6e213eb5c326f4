"""Practice answers, performance breakdowns, missed questions, bookmarks, and flashcards."""

import uuid

import pytest
import pytest_asyncio
from httpx import AsyncClient

from certprep.db.models import Flashcard


async def _answer(client: AsyncClient, bank, question_id: uuid.UUID, correct: bool) -> dict:
    right, wrong = bank.answer_key[question_id]
    response = await client.post(
        "/api/progress/answer",
        json={"questionId": str(question_id), "answerId": str(right if correct else wrong)},
    )
    assert response.status_code == 200, response.text
    return response.json()


def _questions_in_area(bank, area_index: int) -> list[uuid.UUID]:
    area_id = bank.area_ids[area_index]
    return [qid for qid, aid in bank.area_of.items() if aid == area_id]


# --- Progress ---


@pytest.mark.asyncio
async def test_record_answer_updates_progress(authed_client: AsyncClient, bank) -> None:
    first, second = _questions_in_area(bank, 0)[:2]
    assert (await _answer(authed_client, bank, first, correct=True))["isCorrect"] is True
    assert (await _answer(authed_client, bank, second, correct=False))["isCorrect"] is False

    progress = await authed_client.get("/api/progress")
    rows = progress.json()["progress"]
    assert len(rows) == 1
    assert rows[0]["certificationId"] == str(bank.certification_id)
    assert rows[0]["totalQuestionsAnswered"] == 2
    assert rows[0]["correctAnswers"] == 1
    assert rows[0]["accuracy"] == 50.0


@pytest.mark.asyncio
async def test_record_answer_from_other_question(authed_client: AsyncClient, bank) -> None:
    q1, q2 = _questions_in_area(bank, 0)[:2]
    response = await authed_client.post(
        "/api/progress/answer",
        json={"questionId": str(q1), "answerId": str(bank.answer_key[q2][0])},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_record_unknown_answer(authed_client: AsyncClient, bank) -> None:
    q1 = _questions_in_area(bank, 0)[0]
    response = await authed_client.post(
        "/api/progress/answer", json={"questionId": str(q1), "answerId": str(uuid.uuid4())}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_put_progress(authed_client: AsyncClient, bank) -> None:
    body = {"certificationId": str(bank.certification_id), "totalQuestionsAnswered": 40, "correctAnswers": 30}
    response = await authed_client.put("/api/progress", json=body)
    assert response.status_code == 200

    rows = (await authed_client.get("/api/progress")).json()["progress"]
    assert rows[0]["totalQuestionsAnswered"] == 40
    assert rows[0]["accuracy"] == 75.0


@pytest.mark.asyncio
async def test_put_progress_rejects_more_correct_than_answered(authed_client: AsyncClient, bank) -> None:
    body = {"certificationId": str(bank.certification_id), "totalQuestionsAnswered": 3, "correctAnswers": 4}
    response = await authed_client.put("/api/progress", json=body)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_knowledge_area_performance(authed_client: AsyncClient, bank) -> None:
    for qid in _questions_in_area(bank, 1)[:4]:
        await _answer(authed_client, bank, qid, correct=qid == _questions_in_area(bank, 1)[0])

    response = await authed_client.get(
        "/api/progress/knowledge-area", params={"certificationId": str(bank.certification_id)}
    )
    assert response.status_code == 200
    performance = response.json()["performance"]
    assert [p["knowledgeAreaName"] for p in performance] == [
        "Project Integration Management",
        "Project Scope Management",
        "Project Risk Management",
    ]
    untouched, scope, _ = performance
    assert untouched["totalAnswered"] == 0
    assert untouched["accuracy"] == 0.0
    assert scope["totalAnswered"] == 4
    assert scope["correctAnswers"] == 1
    assert scope["accuracy"] == 25.0


@pytest.mark.asyncio
async def test_domain_performance_has_all_domains(authed_client: AsyncClient, bank) -> None:
    await _answer(authed_client, bank, _questions_in_area(bank, 0)[0], correct=True)
    response = await authed_client.get(
        "/api/progress/domain", params={"certificationId": str(bank.certification_id)}
    )
    assert response.status_code == 200
    by_domain = {p["domain"]: p for p in response.json()["performance"]}
    assert set(by_domain) == {"People", "Process", "Business"}
    assert by_domain["Process"]["totalQuestions"] == 12
    assert by_domain["Process"]["totalAnswered"] == 1
    assert by_domain["Process"]["accuracy"] == 100.0
    assert by_domain["People"]["totalQuestions"] == 0


@pytest.mark.asyncio
async def test_answered_question_ids(authed_client: AsyncClient, bank) -> None:
    qid = _questions_in_area(bank, 2)[0]
    await _answer(authed_client, bank, qid, correct=False)
    await _answer(authed_client, bank, qid, correct=True)

    response = await authed_client.get("/api/progress/answered-questions")
    assert response.json()["questionIds"] == [str(qid)]


@pytest.mark.asyncio
async def test_missed_questions_and_review(authed_client: AsyncClient, bank) -> None:
    missed = _questions_in_area(bank, 0)[0]
    hit = _questions_in_area(bank, 0)[1]
    await _answer(authed_client, bank, missed, correct=False)
    await _answer(authed_client, bank, hit, correct=True)

    listed = await authed_client.get("/api/progress/missed-questions")
    items = listed.json()["missedQuestions"]
    assert [i["questionId"] for i in items] == [str(missed)]
    assert items[0]["isReviewed"] is False
    assert items[0]["question"]["questionText"]

    marked = await authed_client.post("/api/progress/missed-questions/reviewed", json={"questionId": str(missed)})
    assert marked.json()["message"] == "Marked as reviewed successfully"
    again = await authed_client.post("/api/progress/missed-questions/reviewed", json={"questionId": str(missed)})
    assert again.json()["message"] == "Already marked as reviewed"

    pending = await authed_client.get("/api/progress/missed-questions", params={"reviewed": "false"})
    assert pending.json()["missedQuestions"] == []
    done = await authed_client.get("/api/progress/missed-questions", params={"reviewed": "true"})
    assert done.json()["missedQuestions"][0]["isReviewed"] is True


# --- Bookmarks ---


@pytest.mark.asyncio
async def test_bookmark_lifecycle(authed_client: AsyncClient, bank) -> None:
    qid = _questions_in_area(bank, 0)[0]

    created = await authed_client.post("/api/bookmarks", json={"questionId": str(qid)})
    assert created.status_code == 201
    assert created.json()["questionId"] == str(qid)

    duplicate = await authed_client.post("/api/bookmarks", json={"questionId": str(qid)})
    assert duplicate.status_code == 200
    assert duplicate.json()["id"] == created.json()["id"]

    check = await authed_client.get(f"/api/bookmarks/check/{qid}")
    assert check.json() == {"isBookmarked": True}

    listed = await authed_client.get("/api/bookmarks")
    bookmarks = listed.json()["bookmarks"]
    assert len(bookmarks) == 1
    assert len(bookmarks[0]["question"]["answers"]) == 4

    removed = await authed_client.delete(f"/api/bookmarks/{qid}")
    assert removed.status_code == 200
    assert removed.json()["message"] == "Bookmark removed successfully"
    assert (await authed_client.get(f"/api/bookmarks/check/{qid}")).json() == {"isBookmarked": False}

    missing = await authed_client.delete(f"/api/bookmarks/{qid}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_bookmark_unknown_question(authed_client: AsyncClient) -> None:
    response = await authed_client.post("/api/bookmarks", json={"questionId": str(uuid.uuid4())})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_bookmarks_filtered_by_knowledge_area(authed_client: AsyncClient, bank) -> None:
    in_area = _questions_in_area(bank, 0)[0]
    elsewhere = _questions_in_area(bank, 1)[0]
    await authed_client.post("/api/bookmarks", json={"questionId": str(in_area)})
    await authed_client.post("/api/bookmarks", json={"questionId": str(elsewhere)})

    response = await authed_client.get("/api/bookmarks", params={"knowledgeAreaId": str(bank.area_ids[0])})
    assert [b["questionId"] for b in response.json()["bookmarks"]] == [str(in_area)]


@pytest.mark.asyncio
async def test_bookmarks_are_per_user(client: AsyncClient, bank, auth_headers, make_user, headers_for) -> None:
    qid = _questions_in_area(bank, 0)[0]
    await client.post("/api/bookmarks", json={"questionId": str(qid)}, headers=auth_headers)

    other = await make_user("other@example.com")
    response = await client.get("/api/bookmarks", headers=headers_for(other))
    assert response.json()["bookmarks"] == []


# --- Flashcards ---


@pytest_asyncio.fixture
async def deck(db_session) -> dict[str, uuid.UUID]:
    cards = {
        "wbs": Flashcard(id=uuid.uuid4(), front_face="WBS", back_face="Work breakdown structure",
                         knowledge_area="Scope Management"),
        "charter": Flashcard(id=uuid.uuid4(), front_face="Charter", back_face="Authorizes the project",
                             knowledge_area="Integration Management"),
        "risk": Flashcard(id=uuid.uuid4(), front_face="Risk register", back_face="Log of identified risks",
                          knowledge_area="Risk Management"),
    }
    db_session.add_all(cards.values())
    await db_session.commit()
    return {name: card.id for name, card in cards.items()}


@pytest.mark.asyncio
async def test_list_flashcards(authed_client: AsyncClient, deck) -> None:
    response = await authed_client.get("/api/flashcards")
    assert response.status_code == 200
    cards = response.json()["flashcards"]
    assert len(cards) == 3
    assert all(c["timesReviewed"] == 0 and c["isMarked"] is False for c in cards)


@pytest.mark.asyncio
async def test_flashcards_filtered_by_knowledge_area(authed_client: AsyncClient, bank, deck) -> None:
    """Knowledge area "Project Scope Management" selects cards labelled "Scope Management"."""
    scope_area = bank.area_ids[1]
    risk_area = bank.area_ids[2]
    response = await authed_client.get(
        "/api/flashcards", params={"knowledgeAreaIds": f"{scope_area},{risk_area}"}
    )
    fronts = sorted(c["frontFace"] for c in response.json()["flashcards"])
    assert fronts == ["Risk register", "WBS"]


@pytest.mark.asyncio
async def test_flashcards_bad_knowledge_area_id(authed_client: AsyncClient, deck) -> None:
    response = await authed_client.get("/api/flashcards", params={"knowledgeAreaIds": "not-a-uuid"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_flashcard_knowledge_areas(authed_client: AsyncClient, deck) -> None:
    response = await authed_client.get("/api/flashcards/knowledge-areas")
    assert response.json()["knowledgeAreas"] == ["Integration Management", "Risk Management", "Scope Management"]


@pytest.mark.asyncio
async def test_mark_and_unmark(authed_client: AsyncClient, deck) -> None:
    card_id = deck["wbs"]
    marked = await authed_client.post(f"/api/flashcards/{card_id}/mark", json={"isMarked": True})
    assert marked.json() == {"success": True, "isMarked": True}

    listed = await authed_client.get("/api/flashcards/marked")
    assert [c["id"] for c in listed.json()["flashcards"]] == [str(card_id)]

    await authed_client.post(f"/api/flashcards/{card_id}/mark", json={"isMarked": False})
    assert (await authed_client.get("/api/flashcards/marked")).json()["flashcards"] == []


@pytest.mark.asyncio
async def test_mark_unknown_flashcard(authed_client: AsyncClient) -> None:
    response = await authed_client.post(f"/api/flashcards/{uuid.uuid4()}/mark", json={"isMarked": True})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_review_counters(authed_client: AsyncClient, deck) -> None:
    card_id = deck["charter"]
    for is_correct in (True, True, False):
        response = await authed_client.post(
            "/api/flashcards/review", json={"flashcardId": str(card_id), "isCorrect": is_correct}
        )
        assert response.json() == {"success": True}

    await authed_client.post(f"/api/flashcards/{card_id}/mark", json={"isMarked": True})

    cards = (await authed_client.get("/api/flashcards")).json()["flashcards"]
    card = next(c for c in cards if c["id"] == str(card_id))
    assert card["timesReviewed"] == 3
    assert card["timesCorrect"] == 2
    assert card["timesIncorrect"] == 1
    assert card["isMarked"] is True
