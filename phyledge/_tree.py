"""
_tree.py
========
A phylogenetic tree represented as an edge list held in numpy arrays.

Public API
----------
  Tree(edge, tip_label, edge_length=None, node_label=None, root_edge=None,
       n_node=None, order=Order.UNORDERED, validate=True)
      Constructor.  Copies every array it is given and checks the
      edge-list invariants.

  Tree.from_newick(text)       Parse a Newick string.
  .to_newick(digits=10)        Write a Newick string.
  .copy()                      Deep copy of all arrays.
  .validate()                  Raise ValidationError on a malformed tree.
  .edge_set()                  Multiset of (parent, child, length) triples.

  resolve_tips(tree, tips, strict=True)
      Normalize an id, a label, or a sequence of either into a sorted array
      of tip ids.

Node-ID conventions
-------------------
  Tips     : 0 … n_tips-1
  Internal : n_tips … n_tips+n_node-1
  Root     : n_tips   (every engine returns trees numbered this way)

Canonical numbering additionally numbers the non-root internal nodes in
order of first appearance in the child column of the cladewise edge list,
which is preorder.

Invariants
----------
* ``n_edges == n_tips + n_node - 1``
* every non-root node is the child of exactly one edge
* the root is never a child; tips are never parents
* every node is reachable from the root (no cycles, one component)

Trees with fewer than two tips are degenerate and pass through every engine
unchanged.

Ownership
---------
Engine functions never modify the ``Tree`` they receive.  They copy the
arrays they rewrite and return a new ``Tree``.  Callers that mutate the
public arrays of a tree directly should call ``validate()`` afterwards.
"""

import enum
from collections import Counter
from typing import List, Optional, Sequence

import numpy as np

from ._errors import TipNotFoundError, ValidationError
from ._logging import log_out_of_range_tips


class Order(enum.Enum):
    """Traversal order of an edge list."""

    UNORDERED = "unordered"
    CLADEWISE = "cladewise"
    POSTORDER = "postorder"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.lower()
            if key == "pruningwise":
                return cls.POSTORDER
            for member in cls:
                if member.value == key:
                    return member
        return None


class Tree:
    """
    A phylogenetic tree stored as an ordered edge list.

    Attributes
    ----------
    edge        : int64  [n_edges, 2]  (parent, child) id pairs.
    edge_length : float64[n_edges] or None
                                       Branch length of each edge.
    tip_label   : list[str]            Label of tip ``i`` at index ``i``.
    node_label  : list[str] or None    Label of internal node ``n_tips + i``
                                       at index ``i`` (index 0 is the root).
    root_edge   : float or None        Branch length above the root.
    n_node      : int                  Number of internal nodes.
    order       : Order                Declared order of ``edge``.
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(
        self,
        edge,
        tip_label: Sequence[str],
        edge_length=None,
        node_label: Optional[Sequence[str]] = None,
        root_edge: Optional[float] = None,
        n_node: Optional[int] = None,
        order=Order.UNORDERED,
        validate: bool = True,
    ) -> None:
        self.edge = np.array(edge, dtype=np.int64).reshape(-1, 2)
        self.tip_label: List[str] = [str(label) for label in tip_label]
        self.edge_length = (
            None if edge_length is None else np.array(edge_length, dtype=np.float64)
        )
        self.node_label: Optional[List[str]] = (
            None if node_label is None else ["" if x is None else str(x) for x in node_label]
        )
        self.root_edge: Optional[float] = None if root_edge is None else float(root_edge)

        if n_node is None:
            n_tips = len(self.tip_label)
            n_node = self.edge.shape[0] - n_tips + 1 if self.edge.shape[0] else 0
        self.n_node: int = int(n_node)
        self.order: Order = Order(order)

        if validate:
            self.validate()

    @classmethod
    def from_newick(cls, text: str) -> "Tree":
        """Parse a Newick string (see ``read_newick``)."""
        from ._newick import read_newick

        return read_newick(text)

    # ================================================================== #
    # Derived properties                                                   #
    # ================================================================== #

    @property
    def n_tips(self) -> int:
        return len(self.tip_label)

    @property
    def n_edges(self) -> int:
        return int(self.edge.shape[0])

    @property
    def n_nodes(self) -> int:
        """Total number of nodes, tips included."""
        return self.n_tips + self.n_node

    @property
    def root(self) -> int:
        return self.n_tips

    @property
    def parent(self) -> np.ndarray:
        """Parent column of ``edge`` (a view)."""
        return self.edge[:, 0]

    @property
    def child(self) -> np.ndarray:
        """Child column of ``edge`` (a view)."""
        return self.edge[:, 1]

    # ================================================================== #
    # Public methods                                                       #
    # ================================================================== #

    def copy(self) -> "Tree":
        """Return a deep copy; no array is shared with ``self``."""
        return Tree(
            self.edge,
            list(self.tip_label),
            edge_length=self.edge_length,
            node_label=None if self.node_label is None else list(self.node_label),
            root_edge=self.root_edge,
            n_node=self.n_node,
            order=self.order,
            validate=False,
        )

    def to_newick(self, digits: int = 10) -> str:
        """Write the tree as a Newick string (see ``write_newick``)."""
        from ._newick import write_newick

        return write_newick(self, digits=digits)

    def edge_set(self) -> Counter:
        """
        Return the multiset of ``(parent, child, length)`` triples.

        Independent of edge order, so two trees that differ only in the
        order of their edge lists compare equal.  ``length`` is None when
        the tree carries no branch lengths.
        """
        if self.edge_length is None:
            lengths = [None] * self.n_edges
        else:
            lengths = [float(x) for x in self.edge_length]
        return Counter(
            (int(p), int(c), length)
            for (p, c), length in zip(self.edge.tolist(), lengths)
        )

    def validate(self) -> None:
        """
        Check the edge-list invariants.

        Raises
        ------
        ValidationError
            Describing the first violated invariant.
        """
        n_tips = self.n_tips
        n_edges = self.n_edges
        n_node = self.n_node

        if self.edge.ndim != 2 or self.edge.shape[1] != 2:
            raise ValidationError(f"edge must have shape (n_edges, 2); got {self.edge.shape}.")
        if self.edge_length is not None and self.edge_length.shape != (n_edges,):
            raise ValidationError(
                f"edge_length has {self.edge_length.shape[0]} entries for {n_edges} edges."
            )
        if self.node_label is not None and len(self.node_label) != n_node:
            raise ValidationError(
                f"node_label has {len(self.node_label)} entries for {n_node} internal nodes."
            )

        if n_tips == 0:
            if n_edges or n_node:
                raise ValidationError("a tree without tips cannot have edges or internal nodes.")
            return
        if n_edges != n_tips + n_node - 1:
            raise ValidationError(
                f"{n_edges} edges is inconsistent with {n_tips} tips and "
                f"{n_node} internal nodes (expected {n_tips + n_node - 1})."
            )
        if n_edges == 0:
            return

        n_nodes = n_tips + n_node
        parent = self.edge[:, 0]
        child = self.edge[:, 1]
        if self.edge.min() < 0 or self.edge.max() >= n_nodes:
            raise ValidationError(f"node ids must lie in 0..{n_nodes - 1}.")
        if parent.min() < n_tips:
            bad = int(parent[parent < n_tips][0])
            raise ValidationError(f"tip {bad} appears as a parent.")

        as_child = np.bincount(child, minlength=n_nodes)
        if as_child[n_tips] != 0:
            raise ValidationError(f"the root ({n_tips}) appears as a child.")
        as_child[n_tips] = 1
        if np.any(as_child != 1):
            bad = int(np.flatnonzero(as_child != 1)[0])
            raise ValidationError(
                f"node {bad} appears as a child {int(as_child[bad])} times (expected once)."
            )

        reached = Tree._count_reachable(parent, child, n_tips, n_nodes)
        if reached != n_nodes:
            raise ValidationError(
                f"only {reached} of {n_nodes} nodes are reachable from the root."
            )

    # ================================================================== #
    # Dunder methods                                                       #
    # ================================================================== #

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tree):
            return NotImplemented
        if self.edge_length is None or other.edge_length is None:
            lengths_equal = self.edge_length is None and other.edge_length is None
        else:
            lengths_equal = np.array_equal(self.edge_length, other.edge_length, equal_nan=True)
        return (
            lengths_equal
            and np.array_equal(self.edge, other.edge)
            and self.tip_label == other.tip_label
            and self.node_label == other.node_label
            and self.root_edge == other.root_edge
            and self.n_node == other.n_node
            and self.order == other.order
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"Tree(n_tips={self.n_tips}, n_node={self.n_node}, "
            f"n_edges={self.n_edges}, order='{self.order.value}')"
        )

    # ================================================================== #
    # Private static methods                                               #
    # ================================================================== #

    @staticmethod
    def _count_reachable(parent, child, root: int, n_nodes: int) -> int:
        """
        **Private static.**  Count the nodes reachable from *root* with an
        explicit stack.  Children are found through a CSR adjacency built
        with a stable argsort of the parent column.
        """
        order = np.argsort(parent, kind="stable")
        counts = np.bincount(parent, minlength=n_nodes)
        offsets = np.zeros(n_nodes + 1, dtype=np.int64)
        np.cumsum(counts, out=offsets[1:])
        kids = child[order]

        seen = np.zeros(n_nodes, dtype=bool)
        stack = [root]
        seen[root] = True
        reached = 1
        while stack:
            node = stack.pop()
            for c in kids[offsets[node]:offsets[node + 1]]:
                if not seen[c]:
                    seen[c] = True
                    reached += 1
                    stack.append(int(c))
        return reached


# ======================================================================== #
# Tip resolution                                                            #
# ======================================================================== #


def resolve_tips(tree: Tree, tips, strict: bool = True) -> np.ndarray:
    """
    Normalize a tip specification into a sorted array of unique tip ids.

    This is the single boundary at which ids and labels are reconciled;
    engines only ever see the returned id array.

    Parameters
    ----------
    tree : Tree
    tips : int | str | sequence of (int | str)
        Tip ids (0-based) and/or tip labels, in any mixture.
    strict : bool, default True
        If True, an id outside ``0 .. n_tips-1`` raises ValidationError.
        If False, such ids are dropped and reported through the logger at
        WARNING level.

    Returns
    -------
    np.ndarray[int64]

    Raises
    ------
    TipNotFoundError
        If a label is not a tip label of *tree*.
    ValidationError
        If an id is out of range and *strict* is True, or if an element is
        neither an integer nor a string.
    """
    if isinstance(tips, (str, int, np.integer)):
        tips = [tips]

    n_tips = tree.n_tips
    index = None
    ids = []
    out_of_range = []
    for tip in tips:
        if isinstance(tip, (bool, np.bool_)):
            raise ValidationError(f"tips must be ids or labels, not {tip!r}.")
        if isinstance(tip, (int, np.integer)):
            tip = int(tip)
            if 0 <= tip < n_tips:
                ids.append(tip)
            else:
                out_of_range.append(tip)
        elif isinstance(tip, str):
            if index is None:
                index = _build_label_index(tree.tip_label)
            if tip not in index:
                raise TipNotFoundError(f"No tip with label '{tip}' found in tree.")
            ids.append(index[tip])
        else:
            raise ValidationError(f"tips must be ids or labels, not {tip!r}.")

    if out_of_range:
        if strict:
            raise ValidationError(
                f"tip id(s) {out_of_range} outside 0..{n_tips - 1}."
            )
        log_out_of_range_tips(out_of_range, n_tips)

    return np.unique(np.array(ids, dtype=np.int64))


def _build_label_index(tip_label: Sequence[str]) -> dict:
    """Map each tip label to its id; the first occurrence wins."""
    idx = {}
    for tip_id, label in enumerate(tip_label):
        idx.setdefault(label, tip_id)
    return idx


# ======================================================================== #
# Renumbering helpers (shared by the engines)                               #
# ======================================================================== #


def first_appearance_map(parent, child, n_tips: int, root: int) -> np.ndarray:
    """
    Map internal node ids onto the canonical range.

    *root* maps to ``n_tips``; every other internal node (id >= n_tips)
    maps to ``n_tips + 1, n_tips + 2, …`` in order of first appearance in
    *child*.  Tip ids map to themselves.  Ids that do not occur map to -1.

    Returns
    -------
    np.ndarray[int64]
        Lookup table indexed by old id.
    """
    size = int(max(parent.max(initial=root), child.max(initial=root), root)) + 1
    mapping = np.full(size, -1, dtype=np.int64)
    mapping[:n_tips] = np.arange(n_tips, dtype=np.int64)
    mapping[root] = n_tips
    nxt = n_tips + 1
    for c in child.tolist():
        if c >= n_tips and mapping[c] < 0:
            mapping[c] = nxt
            nxt += 1
    return mapping


def remap_node_label(
    labels_by_old_id: dict, mapping: np.ndarray, n_tips: int, n_node: int
) -> List[str]:
    """
    Carry internal node labels through a renumbering.

    Parameters
    ----------
    labels_by_old_id : dict
        Old internal id -> label.  Nodes without an entry get "".
    mapping : np.ndarray
        Old id -> new id, as returned by ``first_appearance_map``.
    n_tips, n_node : int
        Shape of the renumbered tree.
    """
    labels = [""] * n_node
    for old_id, label in labels_by_old_id.items():
        if old_id < mapping.shape[0]:
            new_id = int(mapping[old_id])
            if new_id >= n_tips:
                labels[new_id - n_tips] = label
    return labels
