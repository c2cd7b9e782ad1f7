"""
tests/test_utils.py
===================
Tests for the numeric helpers in phyledge._utils: tabulate() and rank().
"""

import numpy as np
import pytest

from phyledge import rank, tabulate


class TestTabulate:
    def test_counts_by_id(self):
        assert tabulate([3, 3, 4, 4, 4]).tolist() == [0, 0, 0, 2, 3]

    def test_unseen_ids_are_zero(self):
        assert tabulate([0, 2]).tolist() == [1, 0, 1]

    def test_minlength_pads(self):
        assert tabulate([1], minlength=4).tolist() == [0, 1, 0, 0]

    def test_empty(self):
        assert tabulate([], minlength=2).tolist() == [0, 0]

    def test_dtype(self):
        assert tabulate(np.array([1, 1], dtype=np.int32)).dtype == np.int64

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            tabulate([1, -1])


class TestRank:
    @pytest.mark.parametrize(
        "ties,expected",
        [
            ("average", [1.5, 3.0, 1.5]),
            ("first", [1, 3, 2]),
            ("last", [2, 3, 1]),
            ("min", [1, 3, 1]),
            ("max", [2, 3, 2]),
        ],
    )
    def test_tie_policies(self, ties, expected):
        assert rank([10, 20, 10], ties=ties).tolist() == expected

    def test_average_is_float(self):
        assert rank([1, 2]).dtype == np.float64

    def test_other_policies_are_int(self):
        assert rank([1, 2], ties="min").dtype == np.int64

    def test_no_ties(self):
        assert rank([30, 10, 20], ties="first").tolist() == [3, 1, 2]

    def test_random_ties_use_group_ranks(self):
        rng = np.random.default_rng(0)
        result = rank([5, 5, 5, 1], ties="random", rng=rng)
        assert result[3] == 1
        assert sorted(result[:3].tolist()) == [2, 3, 4]

    def test_missing_last(self):
        assert rank([2.0, None, 1.0]).tolist() == [2.0, 3.0, 1.0]

    def test_missing_first(self):
        assert rank([2.0, None, 1.0], na_last=False).tolist() == [3.0, 1.0, 2.0]

    def test_nan_is_missing(self):
        assert rank([np.nan, 5.0], ties="first").tolist() == [2, 1]

    def test_several_missing_keep_appearance_order(self):
        assert rank([None, 1.0, None], ties="first").tolist() == [2, 1, 3]

    def test_unknown_ties_raises(self):
        with pytest.raises(ValueError):
            rank([1, 2], ties="dense")
