"""Quota and truncation rules of the distributed sampler."""

import random

import pytest

from certprep.questions.sampler import finalize_selection, per_area_quota


class TestPerAreaQuota:
    @pytest.mark.parametrize(
        ("total", "areas", "expected"),
        [
            (10, 3, 4),
            (9, 3, 3),
            (1, 5, 1),
            (180, 10, 18),
            (7, 1, 7),
        ],
    )
    def test_ceiling_division(self, total, areas, expected):
        assert per_area_quota(total, areas) == expected

    def test_no_areas(self):
        assert per_area_quota(10, 0) == 0

    def test_non_positive_total(self):
        assert per_area_quota(0, 3) == 0
        assert per_area_quota(-4, 3) == 0


class TestFinalizeSelection:
    def test_truncates_to_total(self):
        assert finalize_selection(list(range(12)), 10, shuffle=False) == list(range(10))

    def test_short_pool_is_returned_whole(self):
        assert finalize_selection([1, 2, 3], 10, shuffle=False) == [1, 2, 3]

    def test_order_kept_without_shuffle(self):
        items = ["a", "b", "c", "d"]
        assert finalize_selection(items, 4, shuffle=False) == items

    def test_shuffle_is_a_permutation(self):
        items = list(range(50))
        result = finalize_selection(items, 50, shuffle=True, rng=random.Random(7))
        assert sorted(result) == items
        assert result != items

    def test_shuffle_then_truncate(self):
        """Truncation happens after shuffling, so any item can survive."""
        items = list(range(12))
        survivors = set()
        for seed in range(40):
            survivors.update(finalize_selection(items, 10, shuffle=True, rng=random.Random(seed)))
        assert survivors == set(items)

    def test_input_not_mutated(self):
        items = [1, 2, 3, 4]
        finalize_selection(items, 2, shuffle=True, rng=random.Random(1))
        assert items == [1, 2, 3, 4]

    def test_zero_total(self):
        assert finalize_selection([1, 2], 0, shuffle=False) == []
