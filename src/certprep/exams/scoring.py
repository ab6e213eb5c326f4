"""Score arithmetic shared by exam submission and progress aggregation."""

from __future__ import annotations


def exam_score(correct: int, total: int) -> float:
    """Percentage of correct answers, unrounded.

    Raises ValueError for an empty submission.
    """
    if total <= 0:
        msg = "Cannot score an exam with no answers"
        raise ValueError(msg)
    return correct / total * 100


def accuracy_fraction(correct: int, total: int) -> float:
    """Accuracy as a 0..1 fraction; 0 when nothing has been answered."""
    if total <= 0:
        return 0.0
    return correct / total


def as_percentage(fraction: float) -> float:
    return round(fraction * 100, 2)
