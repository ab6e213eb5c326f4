"""Mapping of questions onto the exam content outline domains.

Imported questions carry free-text domains such as "1. People" or
"3. Business Environment". Questions without a recognisable domain fall back
to the domain implied by their knowledge area name.
"""

from __future__ import annotations

import re
from collections.abc import Hashable, Iterable
from typing import Any

DOMAINS = ("People", "Process", "Business")

_NUMBERED = re.compile(r"^[0-9]+\.\s*")

_PEOPLE_AREAS = ("Resource Management", "Communications Management", "Stakeholder Management")
_PROCESS_AREAS = ("Integration", "Scope", "Schedule", "Cost", "Quality", "Risk", "Procurement")


def normalize_domain(raw: str | None) -> str | None:
    """Canonical domain for a question's stored domain text, or None."""
    if raw is None:
        return None
    value = raw.strip()
    match = _NUMBERED.match(value)
    body = value[match.end():] if match else None

    if value == "People" or (body is not None and body.startswith("People")):
        return "People"
    if value == "Process" or (body is not None and body.startswith("Process")):
        return "Process"
    if value in ("Business", "Business Environment") or (body is not None and body.startswith("Business")):
        return "Business"
    return None


def domain_for_knowledge_area(name: str | None) -> str | None:
    if not name:
        return None
    if any(area in name for area in _PEOPLE_AREAS):
        return "People"
    if any(area in name for area in _PROCESS_AREAS):
        return "Process"
    return None


def classify_question(domain: str | None, knowledge_area_name: str | None) -> str | None:
    return normalize_domain(domain) or domain_for_knowledge_area(knowledge_area_name)


def summarize_domains(
    questions: Iterable[tuple[Hashable, str | None, str | None]],
    answers: Iterable[tuple[Hashable, bool]],
) -> list[dict[str, Any]]:
    """Per-domain question counts and answer accuracy.

    ``questions`` yields (question_id, domain, knowledge_area_name) and
    ``answers`` yields (question_id, is_correct). All three domains are
    always present; unclassifiable questions are ignored.
    """
    domain_of: dict[Hashable, str] = {}
    totals = {d: {"total_questions": 0, "total_answered": 0, "correct_answers": 0} for d in DOMAINS}
    for question_id, domain, area_name in questions:
        resolved = classify_question(domain, area_name)
        if resolved is None:
            continue
        domain_of[question_id] = resolved
        totals[resolved]["total_questions"] += 1

    for question_id, is_correct in answers:
        resolved = domain_of.get(question_id)
        if resolved is None:
            continue
        totals[resolved]["total_answered"] += 1
        if is_correct:
            totals[resolved]["correct_answers"] += 1

    summary = []
    for domain in DOMAINS:
        stats = totals[domain]
        answered = stats["total_answered"]
        accuracy = round(stats["correct_answers"] / answered * 100, 2) if answered else 0.0
        summary.append({"domain": domain, **stats, "accuracy": accuracy})
    return summary
