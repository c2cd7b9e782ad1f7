"""
_utils.py
=========
General-purpose numeric utilities for phyledge.

These are standalone functions that don't depend on the tree classes and
are used by several engines (parent-degree tables, tip renumbering).
"""

from typing import Optional, Sequence

import numpy as np


_TIES_METHODS = ("average", "first", "last", "random", "max", "min")


def tabulate(values: Sequence[int], minlength: int = 0) -> np.ndarray:
    """
    Count the occurrences of each non-negative integer in *values*.

    Parameters
    ----------
    values : sequence of int
        Non-negative integer ids (e.g. the parent column of an edge list).
    minlength : int, default 0
        Minimum length of the result; ids that never occur are counted 0.

    Returns
    -------
    np.ndarray[int64]
        ``counts[i]`` is the number of times ``i`` occurs in *values*.
        The length is ``max(max(values) + 1, minlength)``.

    Raises
    ------
    ValueError
        If any value is negative.

    Examples
    --------
    >>> tabulate([3, 3, 4, 4, 4])
    array([0, 0, 0, 2, 3])

    >>> tabulate([], minlength=2)
    array([0, 0])
    """
    arr = np.asarray(values, dtype=np.int64).ravel()
    if arr.size and arr.min() < 0:
        raise ValueError("tabulate() expects non-negative integer ids.")
    return np.bincount(arr, minlength=minlength).astype(np.int64)


def rank(
    values: Sequence[Optional[float]],
    ties: str = "average",
    na_last: bool = True,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Rank *values* from 1 upward with a selectable tie policy.

    Missing values (``None`` or ``nan``) are ranked after every present
    value when *na_last* is true, or before them otherwise, in order of
    appearance.

    Parameters
    ----------
    values : sequence of float
        Values to rank.
    ties : str, default "average"
        How tied values share ranks:
        - "average": every member gets the mean of the group's ranks
        - "first":   ranks follow order of appearance
        - "last":    ranks follow reverse order of appearance
        - "min":     every member gets the lowest rank of the group
        - "max":     every member gets the highest rank of the group
        - "random":  the group's ranks are shuffled among its members
    na_last : bool, default True
        Place missing values last (True) or first (False).
    rng : numpy.random.Generator, optional
        Source of randomness for ``ties="random"``.

    Returns
    -------
    np.ndarray
        ``float64`` ranks for "average", ``int64`` ranks otherwise.

    Examples
    --------
    >>> rank([10, 20, 10]).tolist()
    [1.5, 3.0, 1.5]

    >>> rank([10, 20, 10], ties="min").tolist()
    [1, 3, 1]

    >>> rank([2.0, None, 1.0], na_last=False).tolist()
    [3.0, 1.0, 2.0]
    """
    if ties not in _TIES_METHODS:
        raise ValueError(
            f"Unknown ties method '{ties}'. "
            f"Expected one of: {', '.join(_TIES_METHODS)}"
        )

    arr = np.array(
        [np.nan if v is None else v for v in values], dtype=np.float64
    )
    n = arr.shape[0]
    missing = np.isnan(arr)
    present_idx = np.flatnonzero(~missing)
    missing_idx = np.flatnonzero(missing)
    n_missing = missing_idx.shape[0]

    dtype = np.float64 if ties == "average" else np.int64
    ranks = np.zeros(n, dtype=dtype)

    # Stable sort keeps order of appearance within a tie group.
    order = present_idx[np.argsort(arr[present_idx], kind="stable")]
    sorted_vals = arr[order]
    offset = n_missing if not na_last else 0

    if rng is None and ties == "random":
        rng = np.random.default_rng()

    start = 0
    n_present = order.shape[0]
    while start < n_present:
        stop = start + 1
        while stop < n_present and sorted_vals[stop] == sorted_vals[start]:
            stop += 1
        group = order[start:stop]
        lo = offset + start + 1
        hi = offset + stop

        if ties == "average":
            ranks[group] = (lo + hi) / 2.0
        elif ties == "first":
            ranks[group] = np.arange(lo, hi + 1)
        elif ties == "last":
            ranks[group] = np.arange(hi, lo - 1, -1)
        elif ties == "min":
            ranks[group] = lo
        elif ties == "max":
            ranks[group] = hi
        else:
            ranks[group] = rng.permutation(np.arange(lo, hi + 1))
        start = stop

    if na_last:
        ranks[missing_idx] = np.arange(n_present + 1, n + 1)
    else:
        ranks[missing_idx] = np.arange(1, n_missing + 1)

    return ranks
