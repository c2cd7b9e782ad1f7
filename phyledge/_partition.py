"""
_partition.py
=============
Clade (bipartition) computation for one tree and registries of clades
shared across a set of trees.

  bipartition(tree)                      -> list[np.ndarray]
  prop_part(trees, check_labels=True)    -> PropPart

A clade is the sorted array of tip ids below an internal node.  Tip ids are
those of the first tree; later trees listing the same labels in another
order are renumbered onto it before their clades are compared.
"""

from typing import Iterator, List, Sequence, Union

import numpy as np

from ._errors import ValidationError
from ._logging import log_partition_summary, log_tip_realignment
from ._reorder import reorder
from ._tree import Order, Tree


def bipartition(tree: Tree, backend: str = "best") -> List[np.ndarray]:
    """
    Tip set of every internal node.

    Returns
    -------
    list of np.ndarray[int64]
        Entry ``i`` is the sorted tip ids below node ``n_tips + i``; entry 0
        is the root and holds every tip.

    Examples
    --------
    >>> tree = read_newick("((A,B),(C,D));")
    >>> [c.tolist() for c in bipartition(tree)]
    [[0, 1, 2, 3], [0, 1], [2, 3]]
    """
    n_tips = tree.n_tips
    if tree.n_node == 0:
        return []
    ordered = reorder(tree, Order.POSTORDER, backend=backend)

    # Postorder puts every child's edges before the edge into it.
    members: List[list] = [[] for _ in range(tree.n_node)]
    for p, c in ordered.edge.tolist():
        if c < n_tips:
            members[p - n_tips].append(c)
        else:
            members[p - n_tips].extend(members[c - n_tips])
    return [np.array(sorted(m), dtype=np.int64) for m in members]


class PropPart:
    """
    Registry of the distinct clades found in a set of trees.

    Attributes
    ----------
    partitions : list of np.ndarray[int64]
        Distinct clades.  Entry 0 is the clade of all tips.
    counts : np.ndarray[int64]
        Number of trees containing each clade.  ``counts[0]`` is the
        number of trees.
    labels : list[str]
        Tip labels; clade members index into this list.
    n_trees : int
    """

    def __init__(self, partitions, counts, labels, n_trees):
        self.partitions: List[np.ndarray] = partitions
        self.counts: np.ndarray = np.asarray(counts, dtype=np.int64)
        self.labels: List[str] = labels
        self.n_trees: int = n_trees

    def __len__(self) -> int:
        return len(self.partitions)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.partitions)

    def __repr__(self) -> str:
        return (
            f"PropPart(n_trees={self.n_trees}, n_tips={len(self.labels)}, "
            f"n_partitions={len(self.partitions)})"
        )

    def frequencies(self) -> np.ndarray:
        """Fraction of trees containing each clade."""
        return self.counts / float(self.n_trees)

    def clade_labels(self, i: int) -> List[str]:
        """Tip labels of clade *i*."""
        return [self.labels[j] for j in self.partitions[i].tolist()]


def _align_tips(tree: Tree, labels: List[str], index: int) -> Tree:
    """
    **Private.**  Renumber the tips of *tree* to follow *labels*.
    """
    if tree.tip_label == labels:
        return tree
    if len(set(tree.tip_label)) != len(tree.tip_label) or set(tree.tip_label) != set(labels):
        raise ValidationError(
            f"tree {index} does not have the same tip labels as tree 0."
        )
    position = {label: i for i, label in enumerate(labels)}
    tip_map = np.array([position[label] for label in tree.tip_label], dtype=np.int64)
    n_tips = tree.n_tips
    edge = tree.edge.copy()
    is_tip = edge < n_tips
    edge[is_tip] = tip_map[edge[is_tip]]
    log_tip_realignment(index)
    return Tree(
        edge,
        list(labels),
        edge_length=tree.edge_length,
        node_label=tree.node_label,
        root_edge=tree.root_edge,
        n_node=tree.n_node,
        order=tree.order,
        validate=False,
    )


def prop_part(
    trees: Union[Tree, Sequence[Tree]], check_labels: bool = True, backend: str = "best"
) -> PropPart:
    """
    Count the clades of a set of trees.

    Parameters
    ----------
    trees : Tree or sequence of Tree
        Trees over the same tip labels.
    check_labels : bool, default True
        Renumber trees whose tips are listed in another order than in the
        first tree.  If False, tip ids are compared as they are.
    backend : str, default 'best'

    Returns
    -------
    PropPart
        Clades in order of first appearance: the all-tip clade, then the
        first tree's clades in node order, then new clades of each later
        tree.

    Raises
    ------
    ValidationError
        If the trees do not share their tip labels (or, without
        ``check_labels``, their tip count).
    """
    if isinstance(trees, Tree):
        trees = [trees]
    trees = list(trees)
    if not trees:
        raise ValueError("prop_part needs at least one tree.")

    first = trees[0]
    labels = list(first.tip_label)
    n_tips = first.n_tips
    n_trees = len(trees)

    clades = bipartition(first, backend=backend)
    if not clades:
        raise ValidationError("tree 0 has no internal nodes.")
    partitions = [clades[0]]
    counts = [n_trees]
    # The all-tip clade already counts every tree.
    registry = {tuple(clades[0].tolist()): 0}
    for clade in clades[1:]:
        key = tuple(clade.tolist())
        if registry.get(key) == 0:
            continue
        registry.setdefault(key, len(partitions))
        partitions.append(clade)
        counts.append(1)

    for k in range(1, n_trees):
        tree = trees[k]
        if check_labels:
            tree = _align_tips(tree, labels, k)
        elif tree.n_tips != n_tips:
            raise ValidationError(
                f"tree {k} has {tree.n_tips} tips; tree 0 has {n_tips}."
            )
        for clade in bipartition(tree, backend=backend)[1:]:
            key = tuple(clade.tolist())
            slot = registry.get(key)
            if slot == 0:
                continue
            if slot is None:
                registry[key] = len(partitions)
                partitions.append(clade)
                counts.append(1)
            else:
                counts[slot] += 1

    log_partition_summary(n_trees, n_tips, len(partitions))
    return PropPart(partitions, counts, labels, n_trees)
