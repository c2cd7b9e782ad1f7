"""
_collapse.py
============
Removal of singleton nodes (internal nodes with exactly one child).

  has_singles(tree | trees)          -> bool | list[bool]
  collapse_singles(tree, root_edge=False) -> Tree

A singleton chain at the base of the tree is stripped by moving the root
down to the first branching node.  Every other singleton is spliced out:
its incoming and outgoing edges become one edge whose length is the sum of
the two.  Labels of removed nodes are discarded.
"""


import numpy as np

from ._logging import log_collapse_summary
from ._reorder import canonicalize, node_labels_by_id, reorder
from ._tree import Order, Tree
from ._utils import tabulate


def _out_degree(tree: Tree) -> np.ndarray:
    """Out-degree of every internal node, indexed from 0 (the root)."""
    return tabulate(tree.parent, minlength=tree.n_nodes)[tree.n_tips:]


def _has_singles(tree: Tree) -> bool:
    if tree.n_edges == 0:
        return False
    return bool(np.any(_out_degree(tree) == 1))


def has_singles(tree):
    """
    Whether *tree* has an internal node with exactly one child.

    Parameters
    ----------
    tree : Tree or sequence of Tree

    Returns
    -------
    bool, or list of bool for a sequence input
    """
    if isinstance(tree, Tree):
        return _has_singles(tree)
    return [_has_singles(t) for t in tree]


def collapse_singles(tree: Tree, root_edge: bool = False, backend: str = "best") -> Tree:
    """
    Remove every singleton node from *tree*.

    Parameters
    ----------
    tree : Tree
    root_edge : bool, default False
        If True and the tree has branch lengths, the lengths of the edges
        stripped from the base of the tree are added to ``root_edge``.
        Otherwise they are discarded.
    backend : str, default 'best'

    Returns
    -------
    Tree
        A canonical copy.  When there is nothing to collapse the copy is
        otherwise identical to the input, order tag included.
    """
    if tree.n_tips < 2 or not _has_singles(tree):
        return tree.copy()

    ordered = reorder(tree, Order.CLADEWISE, backend=backend)
    n_tips = ordered.n_tips
    n_nodes = ordered.n_nodes
    n_edges = ordered.n_edges
    edge = ordered.edge.copy()
    parent = edge[:, 0]
    child = edge[:, 1]
    lengths = None if ordered.edge_length is None else ordered.edge_length.copy()
    degree = tabulate(parent, minlength=n_nodes)

    first_out = np.full(n_nodes, -1, dtype=np.int64)
    incoming = np.full(n_nodes, -1, dtype=np.int64)
    for e in range(n_edges - 1, -1, -1):
        first_out[parent[e]] = e
        incoming[child[e]] = e

    keep = np.ones(n_edges, dtype=bool)

    root = n_tips
    basal_length = 0.0
    n_basal = 0
    while degree[root] == 1:
        e = first_out[root]
        keep[e] = False
        if lengths is not None:
            basal_length += lengths[e]
        root = int(child[e])
        n_basal += 1

    n_spliced = 0
    for e in range(n_edges - 1, -1, -1):
        if not keep[e]:
            continue
        p = parent[e]
        if p != root and degree[p] == 1:
            j = incoming[p]
            c = child[e]
            child[j] = c
            incoming[c] = j
            if lengths is not None:
                lengths[j] += lengths[e]
            keep[e] = False
            n_spliced += 1

    new_root_edge = ordered.root_edge
    if root_edge and lengths is not None and n_basal:
        new_root_edge = (ordered.root_edge or 0.0) + basal_length

    out = canonicalize(
        edge[keep],
        ordered.tip_label,
        edge_length=None if lengths is None else lengths[keep],
        node_labels=node_labels_by_id(ordered),
        root_edge=new_root_edge,
        root=root,
        backend=backend,
    )
    log_collapse_summary(n_basal, n_spliced, out.n_node)
    return out
