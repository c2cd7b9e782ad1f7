"""
tests/test_collapse.py
======================
Tests for has_singles() and collapse_singles().
"""

import logging

import pytest

from phyledge import Order, Tree, collapse_singles, has_singles, read_newick


class TestHasSingles:
    def test_false_for_binary_tree(self):
        assert has_singles(read_newick("((A,B),C);")) is False

    def test_true_for_singleton(self):
        assert has_singles(read_newick("((A),B);")) is True

    def test_sequence_input(self):
        trees = [read_newick("((A),B);"), read_newick("(A,B);")]
        assert has_singles(trees) == [True, False]

    def test_single_tip(self):
        assert has_singles(read_newick("A;")) is False


class TestCollapseSingles:
    def test_no_op_returns_copy(self):
        tree = read_newick("(A:1,(B:1,C:1):2);")
        out = collapse_singles(tree)
        assert out == tree
        assert out is not tree

    def test_interior_singleton_spliced(self):
        out = collapse_singles(read_newick("((A:1):2,B:3);"))
        assert out.to_newick() == "(A:3,B:3);"
        assert out.n_node == 1

    def test_chain_of_singletons(self):
        out = collapse_singles(read_newick("(((A:1):1):1,B:1);"))
        assert out.to_newick() == "(A:3,B:1);"

    def test_basal_singleton_discarded_by_default(self):
        out = collapse_singles(read_newick("((A:1,B:1):2):0.5;"))
        assert out.to_newick() == "(A:1,B:1):0.5;"
        assert out.root_edge == 0.5

    def test_basal_length_added_to_root_edge(self):
        out = collapse_singles(read_newick("((A:1,B:1):2):0.5;"), root_edge=True)
        assert out.root_edge == pytest.approx(2.5)

    def test_basal_length_without_previous_root_edge(self):
        out = collapse_singles(read_newick("((A:1,B:1):2);"), root_edge=True)
        assert out.root_edge == pytest.approx(2.0)

    def test_root_edge_flag_without_lengths(self):
        out = collapse_singles(read_newick("((A,B));"), root_edge=True)
        assert out.to_newick() == "(A,B);"
        assert out.root_edge is None

    def test_labels_of_removed_nodes_dropped(self):
        out = collapse_singles(read_newick("((A,B)x,(C)y)r;"))
        assert out.node_label == ["r", "x"]
        assert out.to_newick() == "((A,B)x,C)r;"

    def test_result_is_canonical_and_cladewise(self):
        tree = Tree(
            [[3, 4], [4, 0], [3, 5], [5, 1], [5, 2]],
            ["A", "B", "C"],
            n_node=3,
        )
        out = collapse_singles(tree)
        assert out.order is Order.CLADEWISE
        assert out.edge.tolist() == [[3, 0], [3, 4], [4, 1], [4, 2]]
        assert has_singles(out) is False

    def test_input_not_modified(self):
        tree = read_newick("((A:1):2,B:3);")
        before = tree.copy()
        collapse_singles(tree)
        assert tree == before

    def test_summary_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="phyledge"):
            collapse_singles(read_newick("(((A:1):1):1,B:1);"))
        assert "Collapsed 2 singleton node(s)" in caplog.text

    @pytest.mark.parametrize(
        "text",
        ["((A:1):2,B:3);", "(((A,B)),C);", "((((A:1,B:1):1):1,(C:1):1):1);"],
    )
    def test_idempotent(self, text):
        once = collapse_singles(read_newick(text))
        assert collapse_singles(once) == once
