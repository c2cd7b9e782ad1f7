"""
tests/test_reorder.py
=====================
Tests for reorder() and the edge-order properties it guarantees.

  ((A,B),(C,D));

      A=0 B=1 C=2 D=3  root=4  AB=5  CD=6
      cladewise  (4,5) (5,0) (5,1) (4,6) (6,2) (6,3)
      postorder  (6,2) (6,3) (5,0) (5,1) (4,5) (4,6)
"""

import numpy as np
import pytest

from phyledge import Order, Tree, read_newick, reorder


# ======================================================================== #
# Helpers                                                                   #
# ======================================================================== #


def caterpillar(n_tips: int) -> str:
    text = "t0"
    for i in range(1, n_tips):
        text = f"({text}:1,t{i}:1)"
    return text + ";"


def is_cladewise(tree: Tree) -> bool:
    """Every edge's parent is the root or was reached by an earlier edge."""
    seen = {tree.root}
    for p, c in tree.edge.tolist():
        if p not in seen:
            return False
        seen.add(c)
    return True


def is_postorder(tree: Tree) -> bool:
    """
    Edges of one parent are contiguous, and every edge into an internal
    node comes after all of that node's outgoing edges.
    """
    parent = tree.parent.tolist()
    child = tree.child.tolist()
    last_out = {}
    finished = set()
    for i, p in enumerate(parent):
        if p in finished:
            return False
        if i > 0 and parent[i - 1] != p:
            finished.add(parent[i - 1])
        last_out[p] = i
    for i, c in enumerate(child):
        if c >= tree.n_tips and last_out[c] > i:
            return False
    return True


TREES = [
    "((A,B),(C,D));",
    "(A:1,(B:1,C:1):2);",
    "((A,(B,C)),(D,(E,(F,G))));",
    "(A,B,(C,D,E),((F,G),H));",
    caterpillar(50),
]


@pytest.fixture
def balanced():
    return read_newick("((A,B),(C,D));")


# ======================================================================== #
# Known orders                                                              #
# ======================================================================== #


class TestKnownOrders:
    def test_postorder(self, balanced):
        post = reorder(balanced, "postorder")
        assert post.edge.tolist() == [[6, 2], [6, 3], [5, 0], [5, 1], [4, 5], [4, 6]]
        assert post.order is Order.POSTORDER

    def test_back_to_cladewise(self, balanced):
        post = reorder(balanced, Order.POSTORDER)
        clad = reorder(post, Order.CLADEWISE)
        assert clad.edge.tolist() == balanced.edge.tolist()
        assert clad.order is Order.CLADEWISE

    def test_pruningwise_synonym(self, balanced):
        assert reorder(balanced, "pruningwise") == reorder(balanced, "postorder")

    def test_lengths_follow_edges(self):
        tree = read_newick("(A:1,(B:2,C:3):4);")
        post = reorder(tree, "postorder")
        lookup = {(p, c): x for (p, c), x in zip(post.edge.tolist(), post.edge_length)}
        assert lookup[(3, 4)] == 4.0
        assert lookup[(4, 2)] == 3.0

    def test_index_only(self, balanced):
        perm = reorder(balanced, "postorder", index_only=True)
        assert perm.tolist() == [4, 5, 1, 2, 0, 3]
        assert np.array_equal(balanced.edge[perm], reorder(balanced, "postorder").edge)


# ======================================================================== #
# No-op cases                                                               #
# ======================================================================== #


class TestNoOp:
    def test_same_order_returns_copy(self, balanced):
        out = reorder(balanced, "cladewise")
        assert out == balanced
        assert out is not balanced
        assert out.edge is not balanced.edge

    def test_single_internal_node(self):
        star = Tree([[3, 2], [3, 0], [3, 1]], ["A", "B", "C"])
        out = reorder(star, "postorder")
        assert out.edge.tolist() == [[3, 2], [3, 0], [3, 1]]
        assert out.order is Order.POSTORDER

    def test_single_internal_node_index_only(self):
        star = read_newick("(A,B,C);")
        assert reorder(star, "postorder", index_only=True).tolist() == [0, 1, 2]

    def test_single_tip(self):
        tree = read_newick("A;")
        assert reorder(tree, "postorder").n_edges == 0


class TestErrors:
    @pytest.mark.parametrize("order", ["sideways", "unordered", Order.UNORDERED])
    def test_bad_order(self, balanced, order):
        with pytest.raises(ValueError):
            reorder(balanced, order)


# ======================================================================== #
# Properties                                                                #
# ======================================================================== #


class TestProperties:
    @pytest.mark.parametrize("text", TREES)
    def test_cladewise_property(self, text):
        tree = reorder(read_newick(text), "postorder")
        assert is_cladewise(reorder(tree, "cladewise"))

    @pytest.mark.parametrize("text", TREES)
    def test_postorder_property(self, text):
        assert is_postorder(reorder(read_newick(text), "postorder"))

    @pytest.mark.parametrize("text", TREES)
    def test_bijection(self, text):
        tree = read_newick(text)
        perm = reorder(tree, "postorder", index_only=True)
        assert sorted(perm.tolist()) == list(range(tree.n_edges))

    @pytest.mark.parametrize("text", TREES)
    def test_edge_multiset_preserved(self, text):
        tree = read_newick(text)
        post = reorder(tree, "postorder")
        assert post.edge_set() == tree.edge_set()
        assert reorder(post, "cladewise").edge_set() == tree.edge_set()

    @pytest.mark.parametrize("text", TREES)
    def test_unordered_input(self, text):
        tree = read_newick(text)
        rng = np.random.default_rng(1)
        perm = rng.permutation(tree.n_edges)
        shuffled = Tree(
            tree.edge[perm],
            tree.tip_label,
            edge_length=None if tree.edge_length is None else tree.edge_length[perm],
        )
        clad = reorder(shuffled, "cladewise")
        post = reorder(shuffled, "postorder")
        assert is_cladewise(clad)
        assert is_postorder(post)
        assert clad.edge_set() == tree.edge_set()
        assert post.edge_set() == tree.edge_set()

    def test_ties_keep_input_order(self):
        # The root's edges are listed to 2, 4, 0; a subtree is emitted in place.
        tree = Tree([[3, 2], [3, 4], [4, 1], [3, 0]], ["A", "B", "C"], n_node=2)
        perm = reorder(tree, "cladewise", index_only=True)
        assert tree.child[perm].tolist() == [2, 4, 1, 0]

    def test_input_not_modified(self, balanced):
        before = balanced.copy()
        reorder(balanced, "postorder")
        assert balanced == before

    @pytest.mark.slow
    def test_deep_caterpillar(self):
        tree = read_newick(caterpillar(3000))
        post = reorder(tree, "postorder")
        assert is_postorder(post)
        assert reorder(post, "cladewise").edge.tolist() == tree.edge.tolist()
