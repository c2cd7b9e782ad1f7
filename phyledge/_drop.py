"""
_drop.py
========
Pruning of tips from a tree.

  drop_tip(tree, tip, trim_internal=True, subtree=False, root_edge=0,
           rooted=None, collapse_singles=True) -> Tree | None

Algorithm (cladewise edge list, boolean keep mask):

  1. unmark the terminal edge of every dropped tip
  2. trim_internal: unmark edges to internal nodes with no kept child edge,
     repeated until nothing changes
  3. subtree: re-mark every edge whose parent has both kept and unkept
     edges, so each removed clade leaves a single boundary tip behind
  4. root_edge > 0: if the root is left with one kept child, walk down the
     single-child chain to the first branching node, which becomes the new
     root; up to ``root_edge`` chain lengths (deepest first) go into the
     root edge
  5. number the surviving tips by their old id (real tips first, then
     internal nodes that became tips), canonicalize, collapse singletons
"""

from typing import Optional

import numpy as np

from ._collapse import collapse_singles as _collapse_singles
from ._depth import node_depth
from ._logging import log_all_tips_dropped, log_prune_summary
from ._reorder import canonicalize, reorder
from ._root import is_rooted, root as _root
from ._tree import Order, Tree, resolve_tips
from ._utils import rank, tabulate


def _last_tip_tree(tree: Tree, survivor: int) -> Tree:
    """
    **Private.**  The one-edge tree left when every tip but *survivor* is
    dropped.  The edge keeps the survivor's own terminal length.
    """
    n_tips = tree.n_tips
    e = int(np.flatnonzero(tree.child == survivor)[0])
    return Tree(
        [[1, 0]],
        [tree.tip_label[survivor]],
        edge_length=None if tree.edge_length is None else [tree.edge_length[e]],
        node_label=None if tree.node_label is None else [tree.node_label[tree.parent[e] - n_tips]],
        n_node=1,
        order=Order.CLADEWISE,
    )


def drop_tip(
    tree: Tree,
    tip,
    trim_internal: bool = True,
    subtree: bool = False,
    root_edge: int = 0,
    rooted: Optional[bool] = None,
    collapse_singles: bool = True,
    backend: str = "best",
) -> Optional[Tree]:
    """
    Remove tips from *tree*.

    Parameters
    ----------
    tree : Tree
    tip : int | str | sequence of (int | str)
        Tips to drop, by id and/or label.  Ids outside ``0 .. n_tips-1``
        are ignored with a logged warning.
    trim_internal : bool, default True
        Also remove internal branches left without descendants.  If False
        such nodes stay as new tips.
    subtree : bool, default False
        Keep one tip in place of each removed clade, labelled with the
        number of tips it stands for (``"[3_tips]"``, or ``"[1_tip]"`` for
        a single dropped tip) unless the clade has a node label.  Implies
        ``trim_internal=True``.
    root_edge : int, default 0
        If positive and the root is left with one child, up to this many
        of the removed basal branch lengths are summed into ``root_edge``.
    rooted : bool or None
        Whether to treat the tree as rooted.  Detected with ``is_rooted``
        by default.  An unrooted tree loses its ``root_edge``.
    collapse_singles : bool, default True
        Remove singleton nodes from the result.
    backend : str, default 'best'

    Returns
    -------
    Tree or None
        None when every tip is dropped (and the tree cannot keep internal
        nodes as tips).

    Raises
    ------
    TipNotFoundError
        If a label does not name a tip.

    Examples
    --------
    >>> tree = read_newick("(A,(B,C));")
    >>> pruned = drop_tip(tree, "A")
    >>> pruned.edge.tolist(), pruned.tip_label
    ([[2, 0], [2, 1]], ['B', 'C'])
    """
    n_tips = tree.n_tips
    drop = resolve_tips(tree, tip, strict=False)
    n_drop = drop.shape[0]

    if n_drop == 0:
        return tree.copy()

    if n_drop == n_tips and (tree.n_node < 3 or trim_internal):
        log_all_tips_dropped(n_tips)
        return None

    if n_drop == n_tips - 1 and trim_internal:
        survivor = int(np.setdiff1d(np.arange(n_tips), drop)[0])
        return _last_tip_tree(tree, survivor)

    if rooted is None:
        rooted = is_rooted(tree)

    working = tree
    budget = int(root_edge)
    if not rooted:
        working = working.copy()
        working.root_edge = None
        if subtree:
            kept_tips = np.setdiff1d(np.arange(n_tips), drop)
            working = _root(working, outgroup=int(kept_tips[0]), backend=backend)
            budget = 0

    working = reorder(working, Order.CLADEWISE, backend=backend)
    n_nodes = working.n_nodes
    n_edges = working.n_edges
    parent = working.parent.copy()
    child = working.child.copy()
    lengths = working.edge_length

    nvec = None
    if subtree:
        trim_internal = True
        nvec = node_depth(working, "count", backend=backend)

    keep = np.ones(n_edges, dtype=bool)
    dropped = np.zeros(n_tips, dtype=bool)
    dropped[drop] = True
    to_tip = child < n_tips
    keep[to_tip] = ~dropped[child[to_tip]]

    new_root = n_tips
    new_root_edge = working.root_edge

    if trim_internal:
        to_internal = ~to_tip
        while True:
            has_kept_child = np.zeros(n_nodes, dtype=bool)
            has_kept_child[parent[keep]] = True
            sel = keep & to_internal & ~has_kept_child[child]
            if not sel.any():
                break
            keep[sel] = False

        if subtree:
            kept_parent = np.zeros(n_nodes, dtype=bool)
            kept_parent[parent[keep]] = True
            cut_parent = np.zeros(n_nodes, dtype=bool)
            cut_parent[parent[~keep]] = True
            keep |= kept_parent[parent] & cut_parent[parent]

        if budget > 0 and lengths is not None:
            degree = tabulate(parent[keep], minlength=n_nodes)
            if degree[n_tips] == 1:
                chain = []
                node = n_tips
                while True:
                    out = np.flatnonzero(keep & (parent == node))
                    if out.shape[0] == 0 or child[out[0]] < n_tips:
                        break
                    e = int(out[0])
                    chain.insert(0, e)
                    node = int(child[e])
                    if degree[node] > 1:
                        break
                new_root = node
                keep[chain] = False
                absorbed = chain[:budget]
                total = float(lengths[absorbed].sum()) if absorbed else 0.0
                if len(absorbed) < budget and working.root_edge is not None:
                    total += working.root_edge
                new_root_edge = total

    kept = np.flatnonzero(keep)
    e_parent = parent[kept]
    e_child = child[kept]

    is_parent = np.zeros(n_nodes, dtype=bool)
    is_parent[e_parent] = True
    terminal = e_child[~is_parent[e_child]]
    new_tips = np.sort(terminal)

    tip_label = list(working.tip_label)
    if subtree:
        for t in new_tips[new_tips < n_tips]:
            if dropped[t]:
                tip_label[t] = "[1_tip]"

    labels = [tip_label[t] for t in new_tips[new_tips < n_tips]]
    node_label = working.node_label
    for x in new_tips[new_tips >= n_tips]:
        own = None if node_label is None else node_label[x - n_tips]
        if subtree and not own:
            labels.append(f"[{int(nvec[x])}_tips]")
        elif own is not None:
            labels.append(own)
        else:
            labels.append("NA")

    # New tips take ids 0..k-1 by rank of old id; internal nodes are
    # shifted clear of that range and compacted by canonicalize.
    n_new_tips = new_tips.shape[0]
    shift = np.arange(n_nodes, dtype=np.int64) + n_new_tips
    shift[terminal] = rank(terminal, ties="first") - 1
    edges = np.column_stack((shift[e_parent], shift[e_child]))

    node_labels = None
    if node_label is not None:
        became_tip = np.zeros(n_nodes, dtype=bool)
        became_tip[new_tips] = True
        node_labels = {
            int(shift[n_tips + i]): label
            for i, label in enumerate(node_label)
            if not became_tip[n_tips + i]
        }

    out = canonicalize(
        edges,
        labels,
        edge_length=None if lengths is None else lengths[kept],
        node_labels=node_labels,
        root_edge=new_root_edge,
        root=int(shift[new_root]),
        backend=backend,
    )
    if collapse_singles:
        out = _collapse_singles(out, backend=backend)

    log_prune_summary(n_tips, out.n_tips, tree.n_node, out.n_node)
    return out
