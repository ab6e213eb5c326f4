"""Exam score and accuracy arithmetic."""

import pytest

from certprep.exams.scoring import accuracy_fraction, as_percentage, exam_score


class TestExamScore:
    def test_half_right(self):
        assert exam_score(1, 2) == 50.0

    def test_all_right(self):
        assert exam_score(4, 4) == 100.0

    def test_all_wrong(self):
        assert exam_score(0, 3) == 0.0

    def test_not_rounded(self):
        assert exam_score(1, 3) == pytest.approx(100 / 3)
        assert exam_score(2, 3) == pytest.approx(200 / 3)
        assert exam_score(1, 3) != 33.33

    @pytest.mark.parametrize("total", [0, -1])
    def test_empty_submission_rejected(self, total):
        with pytest.raises(ValueError, match="no answers"):
            exam_score(0, total)


class TestAccuracy:
    def test_fraction(self):
        assert accuracy_fraction(3, 4) == 0.75

    def test_nothing_answered(self):
        assert accuracy_fraction(0, 0) == 0.0

    def test_percentage(self):
        assert as_percentage(0.75) == 75.0
        assert as_percentage(2 / 3) == 66.67
