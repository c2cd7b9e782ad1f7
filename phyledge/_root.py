"""
_root.py
========
Rooting and unrooting.

  is_rooted(tree)                                         -> bool
  root(tree, outgroup=None, node=None, resolve_root=False,
       transfer_labels=False)                             -> Tree
  unroot(tree, collapse_singles=False, keep_root_edge=False) -> Tree

Rerooting reverses the edges on the path from the new root up to the old
one.  A bifurcating old root is then left with a single child and is
spliced out, its two edges becoming one.  Every result is canonically
renumbered with the new root at ``n_tips``.
"""

from typing import Optional

import numpy as np

from ._collapse import collapse_singles as _collapse_singles
from ._errors import (
    AmbiguousRootError,
    ConstantDegreeError,
    DegenerateTreeError,
    MonophylyError,
    ValidationError,
)
from ._logging import log_reroot, log_unroot
from ._partition import bipartition
from ._reorder import canonicalize, node_labels_by_id, reorder
from ._tree import Order, Tree, resolve_tips
from ._utils import tabulate


def is_rooted(tree: Tree) -> bool:
    """
    Whether *tree* is rooted: it has a root edge, or its root has at most
    two children.
    """
    if tree.root_edge is not None:
        return True
    return int(np.count_nonzero(tree.parent == tree.root)) <= 2


# ======================================================================== #
# Helpers                                                                   #
# ======================================================================== #


def _incoming(child: np.ndarray, n_nodes: int) -> np.ndarray:
    """Index of the edge leading to each node (-1 for the root)."""
    incoming = np.full(n_nodes, -1, dtype=np.int64)
    incoming[child] = np.arange(child.shape[0], dtype=np.int64)
    return incoming


def _locate_new_root(tree: Tree, outgroup: np.ndarray, backend: str) -> int:
    """
    **Private.**  Node at which to root *tree* (cladewise, canonical) so
    that *outgroup* hangs off the root.

    A single tip gives its parent.  Several tips must form a clade, or be
    the complement of one: an outgroup clade gives its own node, an ingroup
    clade gives the ingroup's parent.
    """
    n_tips = tree.n_tips
    if outgroup.shape[0] == 1:
        e = int(np.flatnonzero(tree.child == outgroup[0])[0])
        return int(tree.parent[e])

    ingroup = np.setdiff1d(np.arange(n_tips, dtype=np.int64), outgroup)
    clades = bipartition(tree, backend=backend)
    for i in range(1, tree.n_node):
        clade = clades[i]
        if np.array_equal(clade, ingroup):
            e = int(np.flatnonzero(tree.child == n_tips + i)[0])
            return int(tree.parent[e])
        if np.array_equal(clade, outgroup):
            return n_tips + i
    raise MonophylyError("the specified outgroup is not monophyletic.")


def _outgroup_edges(
    parent: np.ndarray, child: np.ndarray, keep: np.ndarray, top: int, outgroup: np.ndarray, n_nodes: int
) -> set:
    """
    **Private.**  Edges leaving *top* whose subtrees contain an outgroup tip.
    """
    incoming = np.full(n_nodes, -1, dtype=np.int64)
    kept = np.flatnonzero(keep)
    incoming[child[kept]] = kept
    found = set()
    for t in outgroup.tolist():
        e = incoming[t]
        while parent[e] != top:
            e = incoming[parent[e]]
        found.add(int(e))
    return found


# ======================================================================== #
# Rooting                                                                   #
# ======================================================================== #


def root(
    tree: Tree,
    outgroup=None,
    node: Optional[int] = None,
    resolve_root: bool = False,
    transfer_labels: bool = False,
    backend: str = "best",
) -> Tree:
    """
    Reroot *tree*.

    Parameters
    ----------
    tree : Tree
    outgroup : int | str | sequence of (int | str), optional
        Tip(s) to place next to the root.  Several tips must be
        monophyletic in the current tree (or be the complement of a clade).
    node : int, optional
        Internal node id to use as the new root.  Takes precedence over
        *outgroup*.
    resolve_root : bool, default False
        Insert a node, joined to the root by a zero-length edge, so that the
        root bifurcates between the outgroup and the rest.
    transfer_labels : bool, default False
        Shift node labels along the reversed path so each label still names
        the same split.
    backend : str, default 'best'

    Returns
    -------
    Tree

    Raises
    ------
    AmbiguousRootError
        If neither *outgroup* nor *node* is given, or if the root has to be
        resolved and no outgroup says how.
    MonophylyError
        If several outgroup tips do not form a clade.
    TipNotFoundError, ValidationError
        If the outgroup or node does not exist.

    Examples
    --------
    >>> tree = read_newick("(((A,B),C),D);")
    >>> root(tree, "C").to_newick()
    '((A,B),C,D);'
    >>> root(tree, "C", resolve_root=True).to_newick()
    '(C,((A,B),D));'
    """
    n_tips = tree.n_tips
    if n_tips < 2:
        return tree.copy()

    t = reorder(tree, Order.CLADEWISE, backend=backend)
    old_root = n_tips
    n_nodes = t.n_nodes

    out_ids = None
    if node is not None:
        node = int(node)
        if not n_tips <= node < n_nodes:
            raise ValidationError(
                f"node must be an internal node id in {n_tips}..{n_nodes - 1}; got {node}."
            )
        new_root = node
    elif outgroup is None:
        raise AmbiguousRootError("specify an outgroup or a node to root on.")
    else:
        out_ids = resolve_tips(t, outgroup, strict=True)
        if out_ids.shape[0] == 0:
            raise ValidationError("the outgroup is empty.")
        if out_ids.shape[0] == n_tips:
            return t
        new_root = _locate_new_root(t, out_ids, backend)

    edge = t.edge.copy()
    parent = edge[:, 0]
    child = edge[:, 1]
    lengths = None if t.edge_length is None else t.edge_length.copy()
    labels = node_labels_by_id(t)
    keep = np.ones(t.n_edges, dtype=bool)
    root_edge = t.root_edge
    degree = tabulate(parent, minlength=n_nodes)
    fused = False

    if new_root != old_root:
        root_edge = None
        incoming = _incoming(child, n_nodes)

        # Path from the new root up to the edge leaving the old root.
        path = []
        v = new_root
        while True:
            e = int(incoming[v])
            path.append(e)
            if parent[e] == old_root:
                break
            v = int(parent[e])
        root_side = path[-1]

        fused = degree[old_root] == 2
        inverted = sorted(path[:-1] if fused else path)

        if fused:
            other = int(np.flatnonzero((parent == old_root) & (np.arange(t.n_edges) != root_side))[0])
            parent[other] = child[root_side]
            if lengths is not None:
                lengths[other] += lengths[root_side]

        if transfer_labels and labels is not None:
            for e in inverted:
                labels[int(parent[e])] = labels.get(int(child[e]), "")
            labels[new_root] = ""

        for e in inverted:
            parent[e], child[e] = child[e], parent[e]

        if fused:
            keep[root_side] = False
            if labels is not None:
                labels.pop(old_root, None)

    resolved = False
    if resolve_root:
        root_out = np.flatnonzero(keep & (parent == new_root))
        if root_out.shape[0] > 2:
            if out_ids is None:
                raise AmbiguousRootError(
                    "ambiguous resolution of the root node: specify an outgroup."
                )
            out_side = _outgroup_edges(parent, child, keep, new_root, out_ids, n_nodes)
            rest = [int(e) for e in root_out if int(e) not in out_side]
            if len(out_side) == 1:
                moved = rest
            elif len(rest) == 1:
                moved = sorted(out_side)
            else:
                raise MonophylyError("the specified outgroup is not monophyletic.")

            new_node = n_tips + t.n_node
            parent[moved] = new_node
            edge = np.vstack((edge[keep], [[new_root, new_node]]))
            if lengths is not None:
                lengths = np.append(lengths[keep], 0.0)
            keep = np.ones(edge.shape[0], dtype=bool)
            resolved = True
            if labels is not None:
                labels[new_node] = labels.get(new_root, "")
                labels[new_root] = "Root"

    out = canonicalize(
        edge[keep],
        t.tip_label,
        edge_length=None if lengths is None else lengths[keep],
        node_labels=labels,
        root_edge=root_edge,
        root=new_root,
        backend=backend,
    )
    log_reroot(old_root, new_root, fused, resolved)
    return out


# ======================================================================== #
# Unrooting                                                                 #
# ======================================================================== #


def unroot(
    tree: Tree,
    collapse_singles: bool = False,
    keep_root_edge: bool = False,
    backend: str = "best",
) -> Tree:
    """
    Remove the root bifurcation of *tree*.

    The two edges leaving the root are merged into one (lengths summed), so
    the root becomes a node of degree three or more.  A root with a single
    child is first spliced into that child.

    Parameters
    ----------
    tree : Tree
    collapse_singles : bool, default False
        Collapse singleton nodes before unrooting.
    keep_root_edge : bool, default False
        Turn ``root_edge`` into a terminal edge leading to a new tip
        labelled ``"[ROOT]"``.  Without this the root edge is dropped.
    backend : str, default 'best'

    Returns
    -------
    Tree
        A copy of *tree* (without its root edge) when it is not rooted.

    Raises
    ------
    DegenerateTreeError
        If the tree has fewer than three edges.
    ConstantDegreeError
        If no node has degree three or more.
    """
    t = _collapse_singles(tree, backend=backend) if collapse_singles else tree

    if t.n_edges < 3:
        raise DegenerateTreeError("cannot unroot a tree with less than three edges.")
    n_nodes = t.n_nodes
    total_degree = tabulate(t.parent, minlength=n_nodes) + tabulate(t.child, minlength=n_nodes)
    if not np.any(total_degree >= 3):
        raise ConstantDegreeError("cannot unroot a tree where all nodes are singletons.")

    root_edge = t.root_edge
    if root_edge is None:
        keep_root_edge = False
    elif not keep_root_edge:
        root_edge = None

    out_degree = int(np.count_nonzero(t.parent == t.root))
    if root_edge is None and out_degree > 2:
        out = t.copy()
        out.root_edge = None
        return out

    t = reorder(t, Order.CLADEWISE, backend=backend)
    n_tips = t.n_tips
    edge = t.edge.copy()
    lengths = None if t.edge_length is None else t.edge_length.copy()
    tip_label = list(t.tip_label)
    labels = node_labels_by_id(t)
    root_node = n_tips
    pseudo_tip = -1

    if keep_root_edge:
        edge[edge >= n_tips] += 1
        root_node = n_tips + 1
        pseudo_tip = n_tips
        edge = np.vstack((edge, [[root_node, pseudo_tip]]))
        if lengths is not None:
            lengths = np.append(lengths, root_edge)
        tip_label.append("[ROOT]")
        if labels is not None:
            labels = {k + 1: v for k, v in labels.items()}
        n_tips += 1

    parent = edge[:, 0]
    child = edge[:, 1]
    keep = np.ones(edge.shape[0], dtype=bool)
    degree = tabulate(parent, minlength=int(edge.max()) + 1)

    if not keep_root_edge and degree[root_node] == 1:
        e = int(np.flatnonzero(parent == root_node)[0])
        keep[e] = False
        if labels is not None:
            labels.pop(root_node, None)
        root_node = int(child[e])
        if degree[root_node] >= 3:
            out = canonicalize(
                edge[keep],
                tip_label,
                edge_length=None if lengths is None else lengths[keep],
                node_labels=labels,
                root=root_node,
                backend=backend,
            )
            log_unroot(root_node, False)
            return out

    root_edges = [int(e) for e in np.flatnonzero(keep & (parent == root_node))]
    real_edges = [e for e in root_edges if child[e] != pseudo_tip]
    merged = -1
    if len(real_edges) <= 2:
        merged_edge = next((e for e in real_edges if child[e] >= n_tips), None)
        if merged_edge is None:
            raise DegenerateTreeError("cannot unroot a tree with fewer than three tips.")
        others = [e for e in real_edges if e != merged_edge] or [
            e for e in root_edges if e != merged_edge
        ]
        other = others[0]
        merged = int(child[merged_edge])

        keep[merged_edge] = False
        if lengths is not None:
            lengths[other] += lengths[merged_edge]
        parent[parent == merged] = root_node
        if labels is not None:
            labels[root_node] = labels.pop(merged, "")

    out = canonicalize(
        edge[keep],
        tip_label,
        edge_length=None if lengths is None else lengths[keep],
        node_labels=labels,
        root=root_node,
        backend=backend,
    )
    log_unroot(merged, keep_root_edge)
    return out
