"""
_logging.py
===========
Logging functions for phyledge.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
- Clear boundaries between tree rewriting and reporting
"""

import logging
from typing import Sequence

logger = logging.getLogger(__name__)


# Track first calls to kernels for compilation logging
_kernel_first_call = {}


# ============================================================================ #
# Kernel Logging (called at import time and on first kernel use)
# ============================================================================ #


def log_kernel_status(numba_version: str, jit_enabled: bool) -> None:
    """
    Log numba availability and JIT configuration at INFO level.

    Called once at module import time.

    Parameters
    ----------
    numba_version : str
        ``numba.__version__``.
    jit_enabled : bool
        False when ``NUMBA_DISABLE_JIT`` is set.
    """
    if jit_enabled:
        logger.info(f"Numba {numba_version} loaded; edge-list kernels will be JIT-compiled")
    else:
        logger.info(
            f"Numba {numba_version} loaded with JIT disabled; "
            "edge-list kernels will run as pure Python"
        )


def log_kernel_call(kernel_name: str, backend: str) -> None:
    """
    Log the first call of each kernel per backend.

    The first call on the 'numba' backend triggers compilation (or a load
    from the on-disk cache), which can take a noticeable fraction of a
    second.

    Parameters
    ----------
    kernel_name : str
        ``__name__`` of the kernel.
    backend : str
        Resolved backend name.
    """
    key = (kernel_name, backend)
    if key in _kernel_first_call:
        return
    _kernel_first_call[key] = True
    if backend == "numba":
        logger.info("First call to %s: compiling (or loading cached) kernel", kernel_name)
    else:
        logger.info("First call to %s on the python backend", kernel_name)


# ============================================================================ #
# Engine Logging
# ============================================================================ #


def log_reorder(n_edges: int, source: str, target: str) -> None:
    logger.debug("Reordered %d edges: %s -> %s", n_edges, source, target)


def log_collapse_summary(n_basal: int, n_spliced: int, n_node: int) -> None:
    """
    Report how many singleton nodes were removed.

    Parameters
    ----------
    n_basal : int
        Singleton nodes stripped from the base of the tree.
    n_spliced : int
        Singleton nodes spliced out elsewhere.
    n_node : int
        Internal nodes remaining.
    """
    logger.debug(
        "Collapsed %d singleton node(s) (%d basal, %d interior); %d internal nodes remain",
        n_basal + n_spliced,
        n_basal,
        n_spliced,
        n_node,
    )


def log_out_of_range_tips(ids: Sequence[int], n_tips: int) -> None:
    """
    Emit the non-fatal warning for tip ids that do not name a tip.

    Parameters
    ----------
    ids : sequence of int
        The rejected ids.
    n_tips : int
        Number of tips in the tree (valid ids are 0 .. n_tips-1).
    """
    if len(ids) == 0:
        return
    shown = ", ".join(str(i) for i in list(ids)[:10])
    if len(ids) > 10:
        shown += ", ..."
    logger.warning(
        "%d tip id(s) outside 0..%d were ignored: %s",
        len(ids),
        n_tips - 1,
        shown,
    )


def log_all_tips_dropped(n_tips: int) -> None:
    logger.warning("All %d tips of the tree were dropped: returning None", n_tips)


def log_prune_summary(
    n_tips_before: int, n_tips_after: int, n_node_before: int, n_node_after: int
) -> None:
    """Report the size of a tree before and after drop_tip."""
    logger.debug(
        "Pruned tree: tips %d -> %d, internal nodes %d -> %d",
        n_tips_before,
        n_tips_after,
        n_node_before,
        n_node_after,
    )


def log_reroot(old_root: int, new_root: int, fused: bool, resolved: bool) -> None:
    """
    Report a rerooting.

    Parameters
    ----------
    old_root, new_root : int
        Node ids in the input numbering.
    fused : bool
        Whether the old bifurcating root was spliced out.
    resolved : bool
        Whether a node was inserted to make the new root bifurcating.
    """
    logger.debug(
        "Rerooted at node %d (was %d)%s%s",
        new_root,
        old_root,
        "; old root spliced out" if fused else "",
        "; root resolved into a bifurcation" if resolved else "",
    )


def log_unroot(merged_node: int, kept_root_edge: bool) -> None:
    suffix = " (root edge kept as a [ROOT] tip)" if kept_root_edge else ""
    if merged_node < 0:
        logger.debug("Unrooted without merging a root child%s", suffix)
        return
    logger.debug("Unrooted: node %d merged into the root%s", merged_node, suffix)


# ============================================================================ #
# Partition Logging
# ============================================================================ #


def log_partition_summary(n_trees: int, n_tips: int, n_partitions: int) -> None:
    """
    Log the size of a bipartition registry.

    Parameters
    ----------
    n_trees : int
        Number of trees tabulated.
    n_tips : int
        Size of the shared tip set.
    n_partitions : int
        Distinct clades found (including the trivial all-tip clade).
    """
    logger.info(
        "Partition registry built: %d tree(s), %d tips, %d distinct clades",
        n_trees,
        n_tips,
        n_partitions,
    )
    if n_trees > 1 and n_partitions > n_trees * max(n_tips - 2, 1):
        logger.warning(
            "Registry holds %d clades for %d trees: no non-trivial clade is shared.",
            n_partitions,
            n_trees,
        )


def log_tip_realignment(tree_index: int) -> None:
    logger.info(
        "Tree %d lists its tips in a different order; renumbered onto the first tree",
        tree_index,
    )
