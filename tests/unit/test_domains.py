"""Domain classification for the performance breakdown."""

import pytest

from certprep.progress.domains import (
    DOMAINS,
    classify_question,
    domain_for_knowledge_area,
    normalize_domain,
    summarize_domains,
)


class TestNormalizeDomain:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("People", "People"),
            ("1. People", "People"),
            ("Process", "Process"),
            ("2. Process", "Process"),
            ("Business", "Business"),
            ("Business Environment", "Business"),
            ("3. Business Environment", "Business"),
            ("  2. Process  ", "Process"),
        ],
    )
    def test_recognised(self, raw, expected):
        assert normalize_domain(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "Agile", "4. Other"])
    def test_unrecognised(self, raw):
        assert normalize_domain(raw) is None


class TestKnowledgeAreaFallback:
    def test_people_areas(self):
        assert domain_for_knowledge_area("Project Stakeholder Management") == "People"
        assert domain_for_knowledge_area("Project Resource Management") == "People"

    def test_process_areas(self):
        assert domain_for_knowledge_area("Project Risk Management") == "Process"
        assert domain_for_knowledge_area("Project Schedule Management") == "Process"

    def test_unknown_area(self):
        assert domain_for_knowledge_area("Ethics") is None
        assert domain_for_knowledge_area(None) is None

    def test_explicit_domain_wins(self):
        assert classify_question("1. People", "Project Risk Management") == "People"

    def test_fallback_used_when_domain_blank(self):
        assert classify_question(None, "Project Communications Management") == "People"


class TestSummarizeDomains:
    def test_all_domains_present_when_empty(self):
        summary = summarize_domains([], [])
        assert [row["domain"] for row in summary] == list(DOMAINS)
        assert all(row["total_answered"] == 0 and row["accuracy"] == 0.0 for row in summary)

    def test_counts_and_accuracy(self):
        questions = [
            ("q1", "1. People", None),
            ("q2", None, "Project Scope Management"),
            ("q3", "2. Process", None),
            ("q4", None, "Unmapped Area"),
        ]
        answers = [("q1", True), ("q1", False), ("q2", True), ("q3", True), ("q4", True)]
        by_domain = {row["domain"]: row for row in summarize_domains(questions, answers)}

        assert by_domain["People"]["total_questions"] == 1
        assert by_domain["People"]["total_answered"] == 2
        assert by_domain["People"]["accuracy"] == 50.0

        assert by_domain["Process"]["total_questions"] == 2
        assert by_domain["Process"]["correct_answers"] == 2
        assert by_domain["Process"]["accuracy"] == 100.0

        assert by_domain["Business"]["total_questions"] == 0
