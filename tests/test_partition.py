"""
tests/test_partition.py
=======================
Tests for bipartition() and prop_part().
"""

import logging

import numpy as np
import pytest

from phyledge import PropPart, ValidationError, bipartition, prop_part, read_newick, reorder


@pytest.fixture
def two_trees():
    return [read_newick("((A,B),(C,D));"), read_newick("((A,C),(B,D));")]


class TestBipartition:
    def test_balanced(self):
        tree = read_newick("((A,B),(C,D));")
        assert [c.tolist() for c in bipartition(tree)] == [[0, 1, 2, 3], [0, 1], [2, 3]]

    def test_nested(self):
        tree = read_newick("(A,(B,(C,D)));")
        assert [c.tolist() for c in bipartition(tree)] == [[0, 1, 2, 3], [1, 2, 3], [2, 3]]

    def test_independent_of_edge_order(self):
        tree = read_newick("((A,(B,C)),(D,(E,F)));")
        post = reorder(tree, "postorder")
        assert [c.tolist() for c in bipartition(post)] == [c.tolist() for c in bipartition(tree)]

    def test_members_sorted(self):
        tree = read_newick("((D,A),(C,B));")
        for clade in bipartition(tree):
            assert np.all(np.diff(clade) > 0)

    def test_single_tip(self):
        assert bipartition(read_newick("A;")) == []


class TestPropPart:
    def test_counts(self, two_trees):
        pp = prop_part(two_trees)
        assert pp.counts.tolist() == [2, 1, 1, 1, 1]
        assert [c.tolist() for c in pp] == [[0, 1, 2, 3], [0, 1], [2, 3], [0, 2], [1, 3]]

    def test_unshared_clades_warn(self, two_trees, caplog):
        with caplog.at_level(logging.WARNING, logger="phyledge"):
            prop_part(two_trees)
        assert "no non-trivial clade is shared" in caplog.text

    def test_identical_trees(self):
        trees = [read_newick("((A,B),(C,D));")] * 3
        assert prop_part(trees).counts.tolist() == [3, 3, 3]

    def test_single_tree_argument(self):
        pp = prop_part(read_newick("((A,B),C);"))
        assert pp.n_trees == 1
        assert pp.counts.tolist() == [1, 1]

    def test_tip_order_realigned(self, caplog):
        trees = [read_newick("((A,B),(C,D));"), read_newick("((D,C),(B,A));")]
        with caplog.at_level(logging.INFO, logger="phyledge"):
            pp = prop_part(trees)
        assert pp.counts.tolist() == [2, 2, 2]
        assert "different order" in caplog.text

    def test_without_label_check_ids_are_compared(self):
        trees = [read_newick("((A,B),(C,D));"), read_newick("((D,C),(B,A));")]
        pp = prop_part(trees, check_labels=False)
        assert pp.counts.tolist() == [2, 2, 2]
        assert pp.labels == ["A", "B", "C", "D"]

    def test_different_labels(self):
        trees = [read_newick("((A,B),C);"), read_newick("((A,B),X);")]
        with pytest.raises(ValidationError):
            prop_part(trees)

    def test_different_tip_count_without_check(self):
        trees = [read_newick("((A,B),C);"), read_newick("((A,B),(C,D));")]
        with pytest.raises(ValidationError):
            prop_part(trees, check_labels=False)

    def test_empty(self):
        with pytest.raises(ValueError):
            prop_part([])

    def test_frequencies_and_labels(self, two_trees):
        pp = prop_part(two_trees)
        assert pp.frequencies().tolist() == [1.0, 0.5, 0.5, 0.5, 0.5]
        assert pp.clade_labels(3) == ["A", "C"]
        assert len(pp) == 5

    def test_repr(self, two_trees):
        assert repr(prop_part(two_trees)) == "PropPart(n_trees=2, n_tips=4, n_partitions=5)"

    def test_is_prop_part(self, two_trees):
        assert isinstance(prop_part(two_trees), PropPart)

    def test_count_bounds(self):
        trees = [
            read_newick("((A,B),(C,(D,E)));"),
            read_newick("((A,B),((C,D),E));"),
            read_newick("(((A,B),C),(D,E));"),
        ]
        pp = prop_part(trees)
        assert pp.counts[0] == 3
        assert all(1 <= c <= 3 for c in pp.counts[1:].tolist())

    def test_all_tip_clade_registered_once(self):
        trees = [read_newick("((A,B),(C,D));"), read_newick("(((A,B),(C,D)));")]
        pp = prop_part(trees)
        assert [c.tolist() for c in pp] == [[0, 1, 2, 3], [0, 1], [2, 3]]
        assert pp.counts.tolist() == [2, 2, 2]

    def test_all_tip_clade_in_first_tree(self):
        trees = [read_newick("(((A,B),(C,D)));"), read_newick("((A,B),(C,D));")]
        assert prop_part(trees).counts.tolist() == [2, 2, 2]
