"""Unit tests for reducers and chunking."""

import math

import pytest

from meshsim.core.chunking import split
from meshsim.core.reducers import REDUCERS, get_reducer, round_half_up


class TestReducers:
    """Tests for the batch count reducers."""

    def test_max_keeps_smallest_count(self):
        # Counts are consumed budget: "max" leaves the most budget
        assert REDUCERS["max"]([3, 1, 2]) == 1

    def test_min_keeps_largest_count(self):
        assert REDUCERS["min"]([3, 1, 2]) == 3

    def test_mean(self):
        assert REDUCERS["mean"]([1, 2]) == 1.5

    def test_integer_counts_stay_integers(self):
        assert isinstance(REDUCERS["max"]([1, 2]), int)
        assert isinstance(REDUCERS["min"]([1, 2]), int)

    def test_get_reducer(self):
        assert get_reducer("mean") is REDUCERS["mean"]

    def test_unknown_reducer(self):
        with pytest.raises(ValueError, match="Unknown reducer"):
            get_reducer("median")

    def test_round_half_up(self):
        assert round_half_up(1.5) == 2
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2
        assert round_half_up(0) == 0


class TestSplit:
    """Tests for lock-step chunking."""

    def test_chunks_in_lock_step(self):
        chunks = list(split(2, [1, 2, 3, 4, 5], "abcde"))
        assert chunks == [
            ([1, 2], ["a", "b"]),
            ([3, 4], ["c", "d"]),
            ([5], ["e"]),
        ]

    def test_unbounded_limit_yields_one_chunk(self):
        chunks = list(split(math.inf, [1, 2, 3], [4, 5, 6]))
        assert chunks == [([1, 2, 3], [4, 5, 6])]

    def test_limit_one(self):
        chunks = list(split(1, ["x", "y"]))
        assert chunks == [(["x"],), (["y"],)]

    def test_fitting_input_yielded_once(self):
        assert len(list(split(5, [1, 2]))) == 1

    def test_duplicate_fitting_replays_double_yield(self):
        chunks = list(split(math.inf, [1, 2], duplicate_fitting=True))
        assert chunks == [([1, 2],), ([1, 2],)]

    def test_duplicate_fitting_ignored_when_input_does_not_fit(self):
        chunks = list(split(1, [1, 2], duplicate_fitting=True))
        assert chunks == [([1],), ([2],)]

    def test_empty_input(self):
        assert list(split(3, [])) == []

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            list(split(0, [1, 2]))

    def test_no_sequences(self):
        with pytest.raises(ValueError):
            list(split(2))
