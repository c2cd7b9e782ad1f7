"""
_kernels.py
===========
Numba-compiled array kernels for edge-list traversal.

This module contains ONLY numba-accelerated code and should not import other
project modules to avoid import-time complications.  Every kernel takes plain
numpy arrays and integers; no Tree objects cross this boundary.

Node ids follow the package convention: tips ``0 .. n_tips-1``, internal
nodes ``n_tips .. n_tips+n_node-1``, root ``n_tips``.  All integer arrays are
expected as contiguous ``int64``.

Exported Functions
------------------
_bucket_edges : njit function
    Counting sort of edge indices by parent id.

_cladewise_order : njit function
    Edge permutation for depth-first (cladewise) order.

_postorder_order : njit function
    Edge permutation for pruningwise (postorder) order.

_depth_edgelength : njit function
    Cumulative branch length from the root.

_depth_count, _depth_even : njit functions
    Tip-count and evenly spaced node depths.

_height_mean, _height_clado : njit functions
    Node heights as (weighted) means of children's heights.

Notes
-----
- All functions are decorated with @njit; the pure-Python body of each stays
  reachable as ``kernel.py_func`` for the 'python' backend.
- Traversals use explicit work stacks, so tree height never touches the
  Python recursion limit.
- cache=True persists compiled binary to disk for faster subsequent runs.
"""

import numpy as np
from numba import njit


# ======================================================================== #
# Edge bucketing                                                            #
# ======================================================================== #


@njit(cache=True)
def _bucket_edges(parent, n_tips, n_node):
    """
    Group edge indices by parent with a counting sort.

    Parameters
    ----------
    parent : int64[:]
        Parent id of each edge.
    n_tips : int
        Number of tips.
    n_node : int
        Number of internal nodes.

    Returns
    -------
    start : int64[n_node]
        Offset of each internal node's group in *bucket*.
    degree : int64[n_node]
        Number of outgoing edges of each internal node.
    bucket : int64[n_edges]
        Edge indices, grouped by parent, original order kept within a group.
    """
    n_edges = parent.shape[0]
    degree = np.zeros(n_node, dtype=np.int64)
    for i in range(n_edges):
        degree[parent[i] - n_tips] += 1

    start = np.zeros(n_node, dtype=np.int64)
    for i in range(1, n_node):
        start[i] = start[i - 1] + degree[i - 1]

    fill = np.zeros(n_node, dtype=np.int64)
    bucket = np.empty(n_edges, dtype=np.int64)
    for i in range(n_edges):
        k = parent[i] - n_tips
        bucket[start[k] + fill[k]] = i
        fill[k] += 1

    return start, degree, bucket


# ======================================================================== #
# Edge orderings                                                            #
# ======================================================================== #


@njit(cache=True)
def _cladewise_order(parent, child, n_tips, n_node):
    """
    Return the edge permutation for cladewise (preorder) traversal.

    For the node on top of the stack, the next edge of its bucket is
    emitted; if that edge leads to an internal node, the child is pushed and
    its bucket is exhausted before the parent resumes.
    """
    start, degree, bucket = _bucket_edges(parent, n_tips, n_node)
    n_edges = parent.shape[0]
    neworder = np.empty(n_edges, dtype=np.int64)

    stack_node = np.empty(n_node, dtype=np.int64)
    stack_next = np.empty(n_node, dtype=np.int64)
    stack_top = 0
    stack_node[0] = 0  # root, as an internal index
    stack_next[0] = 0

    k = 0
    while stack_top >= 0:
        node = stack_node[stack_top]
        j = stack_next[stack_top]
        if j == degree[node]:
            stack_top -= 1
            continue
        stack_next[stack_top] = j + 1

        e = bucket[start[node] + j]
        neworder[k] = e
        k += 1

        c = child[e]
        if c >= n_tips:
            stack_top += 1
            stack_node[stack_top] = c - n_tips
            stack_next[stack_top] = 0

    return neworder


@njit(cache=True)
def _postorder_order(parent, child, n_tips, n_node):
    """
    Return the edge permutation for pruningwise (postorder) traversal.

    The output is filled from the tail.  Visiting a node writes its bucket
    (in reverse) just in front of everything written so far, then its
    internal children are visited in bucket order.  Every node's descendant
    edges therefore precede its own bucket and the edge leading to it.
    """
    start, degree, bucket = _bucket_edges(parent, n_tips, n_node)
    n_edges = parent.shape[0]
    neworder = np.empty(n_edges, dtype=np.int64)

    stack = np.empty(n_node, dtype=np.int64)
    stack_top = 0
    stack[0] = 0

    pos = n_edges - 1
    while stack_top >= 0:
        node = stack[stack_top]
        stack_top -= 1

        first = start[node]
        last = first + degree[node] - 1
        for j in range(last, first - 1, -1):
            neworder[pos] = bucket[j]
            pos -= 1

        # Push in reverse so the first child is visited next.
        for j in range(last, first - 1, -1):
            c = child[bucket[j]]
            if c >= n_tips:
                stack_top += 1
                stack[stack_top] = c - n_tips

    return neworder


# ======================================================================== #
# Depths and heights                                                        #
# ======================================================================== #


@njit(cache=True)
def _depth_edgelength(parent, child, edge_length, n_nodes):
    """
    Cumulative branch length from the root, for an edge list in which every
    edge's parent is resolved before the edge itself (cladewise order).
    """
    xx = np.zeros(n_nodes, dtype=np.float64)
    for i in range(parent.shape[0]):
        xx[child[i]] = xx[parent[i]] + edge_length[i]
    return xx


@njit(cache=True)
def _depth_count(parent, child, n_tips, n_nodes):
    """Tips get 1; an internal node gets the sum over its children.

    Requires postorder input.
    """
    xx = np.zeros(n_nodes, dtype=np.float64)
    for i in range(n_tips):
        xx[i] = 1.0
    for i in range(parent.shape[0]):
        xx[parent[i]] += xx[child[i]]
    return xx


@njit(cache=True)
def _depth_even(parent, child, n_tips, n_nodes):
    """Tips get 1; an internal node gets one more than its deepest child.

    Requires postorder input.  A value that is already at least one more than
    the current child is kept, so the first assignment wins ties.
    """
    xx = np.zeros(n_nodes, dtype=np.float64)
    for i in range(n_tips):
        xx[i] = 1.0
    for i in range(parent.shape[0]):
        p = parent[i]
        c = child[i]
        if xx[p] != 0.0 and xx[p] >= xx[c] + 1.0:
            continue
        xx[p] = xx[c] + 1.0
    return xx


@njit(cache=True)
def _height_mean(parent, child, yy):
    """
    Set each internal node's height to the mean of its children's heights.

    *yy* must hold the tip heights on entry and is updated in place.  The
    edge list must be in postorder, where the edges of one parent are
    contiguous and come after those of its descendants.
    """
    n_edges = parent.shape[0]
    acc = 0.0
    count = 0
    for i in range(n_edges):
        acc += yy[child[i]]
        count += 1
        if i == n_edges - 1 or parent[i + 1] != parent[i]:
            yy[parent[i]] = acc / count
            acc = 0.0
            count = 0
    return yy


@njit(cache=True)
def _height_clado(parent, child, yy, weight):
    """As ``_height_mean``, with each child weighted by ``weight[child]``."""
    n_edges = parent.shape[0]
    acc = 0.0
    total = 0.0
    for i in range(n_edges):
        c = child[i]
        acc += yy[c] * weight[c]
        total += weight[c]
        if i == n_edges - 1 or parent[i + 1] != parent[i]:
            yy[parent[i]] = acc / total
            acc = 0.0
            total = 0.0
    return yy
