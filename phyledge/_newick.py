"""
_newick.py
==========
Newick reader and writer for edge-list trees.

Reading
-------
Two passes, both iterative:

Pass 1  Character scan → token list.  Whitespace and bracketed comments
        are discarded; single-quoted labels are unquoted ('' is an escaped
        quote) and may contain any character.
Pass 2  Token walk with a cursor node.  ``(`` opens the first child of the
        cursor, ``,`` opens a sibling, ``)`` returns to the parent.  Labels
        and ``:length`` attach to the cursor.

The node list is then numbered with an explicit-stack preorder walk:
tips left to right (0 … n-1), root n, other internal nodes in preorder.
Edges are emitted in the same walk, so the result is in cladewise order.

Writing
-------
The root is found as the node that never appears as a child, so the writer
does not depend on the order tag or on canonical numbering.  Subtree strings
are assembled in reverse preorder (children before parents).
"""

import math
from typing import List, Optional

import numpy as np

from ._errors import NewickError
from ._tree import Order, Tree

_DELIMITERS = "(),:;"
_NEEDS_QUOTES = set("()[]':;, \t\n\r")


# ======================================================================== #
# Reading                                                                   #
# ======================================================================== #


def _tokenize(text: str) -> List[tuple]:
    """
    **Private.**  Split *text* into ``(kind, value)`` tokens.

    kind is one of the delimiter characters or ``"label"``.
    """
    tokens = []
    n_chars = len(text)
    i = 0
    while i < n_chars:
        c = text[i]

        if c in " \t\r\n":
            i += 1
            continue

        if c == "[":
            j = text.find("]", i + 1)
            if j < 0:
                raise NewickError(f"Unterminated comment starting at position {i}.")
            i = j + 1
            continue

        if c in _DELIMITERS:
            tokens.append((c, c))
            i += 1
            continue

        if c == "'":
            buf = []
            j = i + 1
            while True:
                if j >= n_chars:
                    raise NewickError(f"Unterminated quoted label starting at position {i}.")
                if text[j] == "'":
                    if j + 1 < n_chars and text[j + 1] == "'":
                        buf.append("'")
                        j += 2
                        continue
                    break
                buf.append(text[j])
                j += 1
            tokens.append(("label", "".join(buf)))
            i = j + 1
            continue

        j = i
        while j < n_chars and text[j] not in _DELIMITERS and text[j] not in " \t\r\n[":
            j += 1
        tokens.append(("label", text[i:j]))
        i = j

    return tokens


def read_newick(text: str) -> Tree:
    """
    Parse a Newick string into a ``Tree``.

    Parameters
    ----------
    text : str
        A Newick tree.  The trailing ';' is optional.

    Returns
    -------
    Tree
        Canonically numbered, in cladewise order.  ``edge_length`` is None
        when no branch carries a length; otherwise missing lengths are nan.
        ``node_label`` is None when no internal node is labelled.  A length
        on the root becomes ``root_edge``.

    Raises
    ------
    NewickError
        On unbalanced parentheses, misplaced tokens or unparseable lengths.

    Examples
    --------
    >>> tree = read_newick("(A:1,(B:1,C:1)x:2);")
    >>> tree.edge.tolist()
    [[3, 0], [3, 4], [4, 1], [4, 2]]
    >>> tree.node_label
    ['', 'x']
    """
    if not isinstance(text, str):
        raise NewickError("Newick input must be a string.")
    tokens = _tokenize(text)

    parent_of = [-1]
    children_of: List[List[int]] = [[]]
    label_of: List[Optional[str]] = [None]
    length_of: List[Optional[float]] = [None]

    def new_node(parent: int) -> int:
        parent_of.append(parent)
        children_of.append([])
        label_of.append(None)
        length_of.append(None)
        node = len(parent_of) - 1
        children_of[parent].append(node)
        return node

    cursor = 0
    k = 0
    n_tokens = len(tokens)
    finished = False
    while k < n_tokens:
        kind, value = tokens[k]

        if finished:
            raise NewickError(f"Unexpected token '{value}' after the closing ';'.")

        if kind == "(":
            if label_of[cursor] is not None or children_of[cursor]:
                raise NewickError("'(' must open a new node.")
            cursor = new_node(cursor)
        elif kind == ",":
            if parent_of[cursor] < 0:
                raise NewickError("',' outside of any parentheses.")
            cursor = new_node(parent_of[cursor])
        elif kind == ")":
            if parent_of[cursor] < 0:
                raise NewickError("Unbalanced ')'.")
            cursor = parent_of[cursor]
        elif kind == ":":
            k += 1
            if k >= n_tokens or tokens[k][0] != "label":
                raise NewickError("':' must be followed by a branch length.")
            try:
                length_of[cursor] = float(tokens[k][1])
            except ValueError:
                raise NewickError(f"Invalid branch length '{tokens[k][1]}'.") from None
        elif kind == ";":
            finished = True
        else:
            if label_of[cursor] is not None:
                raise NewickError(f"Node already labelled before '{value}'.")
            label_of[cursor] = value
        k += 1

    if cursor != 0:
        raise NewickError("Unbalanced '(': the tree string ended inside a clade.")

    return _build_tree(parent_of, children_of, label_of, length_of)


def _build_tree(parent_of, children_of, label_of, length_of) -> Tree:
    """
    **Private.**  Number the parsed nodes and assemble the edge arrays.
    """
    n_parsed = len(parent_of)
    is_tip = [not children_of[v] for v in range(n_parsed)]
    n_tips = sum(is_tip)

    if n_tips == 1 and n_parsed == 1:
        return Tree(
            np.empty((0, 2), dtype=np.int64),
            [label_of[0] or ""],
            root_edge=length_of[0],
            n_node=0,
            order=Order.CLADEWISE,
        )

    new_id = [-1] * n_parsed
    next_tip = 0
    next_internal = n_tips
    edges = []
    lengths = []
    tip_label = []
    node_label = []

    # Preorder walk with children pushed in reverse.
    stack = [0]
    while stack:
        v = stack.pop()
        if is_tip[v]:
            new_id[v] = next_tip
            next_tip += 1
            tip_label.append(label_of[v] or "")
        else:
            new_id[v] = next_internal
            next_internal += 1
            node_label.append(label_of[v] or "")
            stack.extend(reversed(children_of[v]))
        if parent_of[v] >= 0:
            edges.append((new_id[parent_of[v]], new_id[v]))
            lengths.append(length_of[v])

    has_lengths = any(x is not None for x in lengths)
    edge_length = (
        [math.nan if x is None else x for x in lengths] if has_lengths else None
    )

    return Tree(
        edges,
        tip_label,
        edge_length=edge_length,
        node_label=node_label if any(node_label) else None,
        root_edge=length_of[0],
        n_node=next_internal - n_tips,
        order=Order.CLADEWISE,
    )


# ======================================================================== #
# Writing                                                                   #
# ======================================================================== #


def _quote(label: str) -> str:
    if label and not (_NEEDS_QUOTES & set(label)):
        return label
    if not label:
        return ""
    return "'" + label.replace("'", "''") + "'"


def _format_length(value: float, digits: int) -> str:
    return format(float(value), f".{digits}g")


def write_newick(tree: Tree, digits: int = 10) -> str:
    """
    Write *tree* as a Newick string.

    Parameters
    ----------
    tree : Tree
    digits : int, default 10
        Significant digits for branch lengths.

    Returns
    -------
    str
        Newick text terminated by ';'.  Internal node labels and
        ``root_edge`` are written when present; nan lengths are omitted.
    """
    n_tips = tree.n_tips
    if n_tips == 0:
        return ";"
    if tree.n_edges == 0:
        text = _quote(tree.tip_label[0])
        if tree.root_edge is not None:
            text += ":" + _format_length(tree.root_edge, digits)
        return text + ";"

    n_nodes = tree.n_nodes
    parent = tree.parent
    child = tree.child
    lengths = tree.edge_length

    children = [[] for _ in range(n_nodes)]
    incoming = np.full(n_nodes, -1, dtype=np.int64)
    for e in range(tree.n_edges):
        children[int(parent[e])].append(int(child[e]))
        incoming[child[e]] = e

    roots = np.flatnonzero(incoming < 0)
    roots = roots[roots >= n_tips]
    if roots.shape[0] != 1:
        raise NewickError("Could not identify a unique root of the tree.")
    root = int(roots[0])

    preorder = []
    stack = [root]
    while stack:
        v = stack.pop()
        preorder.append(v)
        stack.extend(reversed(children[v]))

    text = [""] * n_nodes
    for v in reversed(preorder):
        if v < n_tips:
            s = _quote(tree.tip_label[v])
        else:
            parts = []
            for c in children[v]:
                part = text[c]
                e = incoming[c]
                if lengths is not None and not math.isnan(lengths[e]):
                    part += ":" + _format_length(lengths[e], digits)
                parts.append(part)
                text[c] = ""
            s = "(" + ",".join(parts) + ")"
            if tree.node_label is not None:
                s += _quote(tree.node_label[v - n_tips])
        text[v] = s

    out = text[root]
    if tree.root_edge is not None:
        out += ":" + _format_length(tree.root_edge, digits)
    return out + ";"
