"""
_depth.py
=========
Per-node depths and heights derived from an ordered edge list.

Every function returns a float64 array of length ``n_tips + n_node``
indexed by node id.  The input tree is reordered internally as each sweep
requires; node ids are never changed by reordering, so the result lines up
with the caller's tree.

  node_depth_edgelength : cumulative branch length from the root
  node_depth            : 'count' (tips below a node) or 'even' spacing
  node_height           : mean of children's heights
  node_height_clado     : children's heights weighted by clade size
"""

import numpy as np

from ._errors import ValidationError
from ._kernels import (
    _depth_count,
    _depth_edgelength,
    _depth_even,
    _height_clado,
    _height_mean,
)
from ._reorder import call_kernel, reorder
from ._tree import Order, Tree


def _ordered_columns(tree: Tree, order: Order, backend: str):
    ordered = reorder(tree, order, backend=backend)
    parent = np.ascontiguousarray(ordered.parent, dtype=np.int64)
    child = np.ascontiguousarray(ordered.child, dtype=np.int64)
    return ordered, parent, child


def node_depth_edgelength(tree: Tree, backend: str = "best") -> np.ndarray:
    """
    Distance from the root to every node along the branch lengths.

    Raises
    ------
    ValidationError
        If *tree* has no branch lengths and at least one edge.
    """
    if tree.n_edges == 0:
        return np.zeros(tree.n_nodes, dtype=np.float64)
    if tree.edge_length is None:
        raise ValidationError("node_depth_edgelength requires branch lengths.")
    ordered, parent, child = _ordered_columns(tree, Order.CLADEWISE, backend)
    lengths = np.ascontiguousarray(ordered.edge_length, dtype=np.float64)
    return call_kernel(_depth_edgelength, parent, child, lengths, tree.n_nodes, backend=backend)


def node_depth(tree: Tree, method: str = "count", backend: str = "best") -> np.ndarray:
    """
    Topological node depths.

    Parameters
    ----------
    tree : Tree
    method : {'count', 'even'}
        'count': tips are 1 and each internal node is the number of tips
        below it.  'even': tips are 1 and each internal node is one more
        than its deepest child.
    backend : str, default 'best'

    Returns
    -------
    np.ndarray[float64]
    """
    if method == "count":
        kernel = _depth_count
    elif method == "even":
        kernel = _depth_even
    else:
        raise ValueError(f"method must be 'count' or 'even', got {method!r}.")

    if tree.n_edges == 0:
        xx = np.zeros(tree.n_nodes, dtype=np.float64)
        xx[: tree.n_tips] = 1.0
        return xx
    _, parent, child = _ordered_columns(tree, Order.POSTORDER, backend)
    return call_kernel(kernel, parent, child, tree.n_tips, tree.n_nodes, backend=backend)


def _initial_heights(tree: Tree, tip_height, backend: str) -> np.ndarray:
    yy = np.zeros(tree.n_nodes, dtype=np.float64)
    if tip_height is not None:
        tip_height = np.asarray(tip_height, dtype=np.float64)
        if tip_height.shape != (tree.n_tips,):
            raise ValidationError(
                f"tip_height has shape {tip_height.shape}; expected ({tree.n_tips},)."
            )
        yy[: tree.n_tips] = tip_height
        return yy

    # Tips are spaced 1..n in the order they are met in a cladewise walk.
    ordered = reorder(tree, Order.CLADEWISE, backend=backend)
    child = ordered.child
    tips_in_order = child[child < tree.n_tips]
    yy[tips_in_order] = np.arange(1, tree.n_tips + 1, dtype=np.float64)
    return yy


def node_height(tree: Tree, tip_height=None, backend: str = "best") -> np.ndarray:
    """
    Node heights for plotting: each internal node sits at the mean height
    of its children.

    Parameters
    ----------
    tree : Tree
    tip_height : array-like [n_tips] or None
        Height of every tip.  Defaults to 1..n in cladewise tip order.
    backend : str, default 'best'
    """
    yy = _initial_heights(tree, tip_height, backend)
    if tree.n_edges == 0:
        return yy
    _, parent, child = _ordered_columns(tree, Order.POSTORDER, backend)
    return call_kernel(_height_mean, parent, child, yy, backend=backend)


def node_height_clado(tree: Tree, tip_height=None, backend: str = "best") -> np.ndarray:
    """As ``node_height`` with each child weighted by its tip count."""
    yy = _initial_heights(tree, tip_height, backend)
    if tree.n_edges == 0:
        return yy
    weight = node_depth(tree, "count", backend=backend)
    _, parent, child = _ordered_columns(tree, Order.POSTORDER, backend)
    return call_kernel(_height_clado, parent, child, yy, weight, backend=backend)
