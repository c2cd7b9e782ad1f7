"""
_reorder.py
===========
Edge-order canonicalization and canonical renumbering.

Public API
----------
  reorder(tree, order=Order.CLADEWISE, index_only=False, backend='best')

Helpers shared by the other engines
-----------------------------------
  call_kernel(kernel, *args, backend='best')
      Run a kernel from ``_kernels.py`` on the resolved backend, logging the
      first call per backend.

  edge_permutation(tree, order, backend='best')
      The raw permutation behind ``reorder``.

  canonicalize(edge, tip_label, ...)
      Turn an arbitrary valid edge list into the canonical form returned by
      every engine: root ``n_tips``, remaining internal nodes numbered by
      first appearance in the cladewise child column, edges in cladewise
      order.
"""

from typing import Callable, Optional, Sequence

import numba
import numpy as np

from ._backend import check_jit_enabled, resolve_backend, select_kernel
from ._kernels import _cladewise_order, _postorder_order
from ._logging import log_kernel_call, log_kernel_status, log_reorder
from ._tree import Order, Tree, first_appearance_map, remap_node_label

log_kernel_status(numba.__version__, check_jit_enabled())


def call_kernel(kernel: Callable, *args, backend: str = "best"):
    """
    Run *kernel* with *args* on the resolved backend.

    Parameters
    ----------
    kernel : numba dispatcher
        An ``@njit`` function from ``_kernels.py``.
    *args
        Forwarded unchanged.
    backend : str, default 'best'
    """
    resolved = resolve_backend(backend)
    fn = select_kernel(kernel, resolved)
    log_kernel_call(getattr(kernel, "py_func", kernel).__name__, resolved)
    return fn(*args)


def _columns(edge: np.ndarray):
    parent = np.ascontiguousarray(edge[:, 0], dtype=np.int64)
    child = np.ascontiguousarray(edge[:, 1], dtype=np.int64)
    return parent, child


def _target_order(order) -> Order:
    target = Order(order)
    if target is Order.UNORDERED:
        raise ValueError("order must be 'cladewise' or 'postorder'.")
    return target


def edge_permutation(tree: Tree, order=Order.CLADEWISE, backend: str = "best") -> np.ndarray:
    """
    Return the edge permutation that puts *tree* in *order*.

    The tree's current ``order`` tag is ignored; the permutation is always
    computed from the edge list.
    """
    target = _target_order(order)
    if tree.n_edges == 0:
        return np.zeros(0, dtype=np.int64)
    parent, child = _columns(tree.edge)
    kernel = _cladewise_order if target is Order.CLADEWISE else _postorder_order
    return call_kernel(kernel, parent, child, tree.n_tips, tree.n_node, backend=backend)


def reorder(tree: Tree, order=Order.CLADEWISE, index_only: bool = False, backend: str = "best"):
    """
    Reorder the edges of *tree*.

    Parameters
    ----------
    tree : Tree
    order : Order or str, default Order.CLADEWISE
        'cladewise', 'postorder' or its synonym 'pruningwise'.
    index_only : bool, default False
        Return the edge permutation instead of a tree.
    backend : str, default 'best'
        Kernel backend ('python', 'numba' or 'best').

    Returns
    -------
    Tree or np.ndarray[int64]
        A new tree tagged with *order*, or the permutation ``perm`` such
        that ``tree.edge[perm]`` is in *order*.

    Notes
    -----
    Nothing is recomputed when the tree already carries the requested tag,
    has a single internal node, or has fewer than two tips.  Within the
    group of edges leaving one parent the input order is preserved.

    Examples
    --------
    >>> tree = read_newick("((A,B),(C,D));")
    >>> reorder(tree, "postorder").edge.tolist()
    [[6, 2], [6, 3], [5, 0], [5, 1], [4, 5], [4, 6]]
    """
    target = _target_order(order)

    if tree.n_tips < 2 or tree.n_node == 1 or tree.order is target:
        if index_only:
            return np.arange(tree.n_edges, dtype=np.int64)
        out = tree.copy()
        out.order = target
        return out

    perm = edge_permutation(tree, target, backend=backend)
    if index_only:
        return perm

    out = Tree(
        tree.edge[perm],
        list(tree.tip_label),
        edge_length=None if tree.edge_length is None else tree.edge_length[perm],
        node_label=None if tree.node_label is None else list(tree.node_label),
        root_edge=tree.root_edge,
        n_node=tree.n_node,
        order=target,
        validate=False,
    )
    log_reorder(tree.n_edges, tree.order.value, target.value)
    return out


def canonicalize(
    edge,
    tip_label: Sequence[str],
    edge_length=None,
    node_labels: Optional[dict] = None,
    root_edge: Optional[float] = None,
    root: Optional[int] = None,
    backend: str = "best",
) -> Tree:
    """
    Build a canonically numbered, cladewise ``Tree`` from a rewritten edge
    list.

    Parameters
    ----------
    edge : array-like [n_edges, 2]
        Tip ids must already be final (``0 .. len(tip_label)-1``).  Internal
        ids may be any integers >= ``len(tip_label)`` and need not be
        contiguous.
    tip_label : sequence of str
    edge_length : array-like or None
    node_labels : dict or None
        Old internal id -> label.  None means the result has no node labels.
    root_edge : float or None
    root : int or None
        Old id of the root.  Defaults to ``len(tip_label)``.

    Returns
    -------
    Tree
        Validated; raises ValidationError if the rewritten edge list does
        not describe a tree.
    """
    edge = np.array(edge, dtype=np.int64).reshape(-1, 2)
    n_tips = len(tip_label)
    if root is None:
        root = n_tips
    lengths = None if edge_length is None else np.array(edge_length, dtype=np.float64)

    # Compact the internal ids with the root at n_tips.
    first = first_appearance_map(edge[:, 0], edge[:, 1], n_tips, root)
    compact = first[edge]
    n_node = int(np.count_nonzero(first >= n_tips))

    draft = Tree(
        compact,
        tip_label,
        edge_length=lengths,
        n_node=n_node,
        validate=False,
    )
    perm = edge_permutation(draft, Order.CLADEWISE, backend=backend)
    compact = compact[perm]
    if lengths is not None:
        lengths = lengths[perm]

    # Preorder numbering of the non-root internal nodes.
    second = first_appearance_map(compact[:, 0], compact[:, 1], n_tips, n_tips)
    final = second[compact]

    labels = None
    if node_labels is not None:
        mapping = np.full(first.shape[0], -1, dtype=np.int64)
        present = first >= 0
        mapping[present] = second[first[present]]
        labels = remap_node_label(node_labels, mapping, n_tips, n_node)

    return Tree(
        final,
        tip_label,
        edge_length=lengths,
        node_label=labels,
        root_edge=root_edge,
        n_node=n_node,
        order=Order.CLADEWISE,
    )


def node_labels_by_id(tree: Tree) -> Optional[dict]:
    """Return ``{internal id: label}`` for *tree*, or None if unlabelled."""
    if tree.node_label is None:
        return None
    return {tree.n_tips + i: label for i, label in enumerate(tree.node_label)}
