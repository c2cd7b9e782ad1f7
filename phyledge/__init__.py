"""
phyledge
========

Edge-list phylogenetic trees: reordering, pruning, rooting and clade
bipartitions on numpy arrays, with numba-compiled traversal kernels.

A tree is an ``(n_edges, 2)`` array of (parent, child) ids.  Tips are
``0 .. n_tips-1``, internal nodes follow, and the root is always
``n_tips``.  Every operation returns a new, canonically numbered tree and
leaves its input untouched.

Main Classes
------------
Tree : Edge-list tree with its invariants
Order : Edge order tag (unordered, cladewise, postorder)
PropPart : Clade registry across a set of trees

Tree Operations
---------------
reorder : Cladewise or postorder edge order
drop_tip : Prune tips
collapse_singles, has_singles : Singleton nodes
is_rooted, root, unroot : Rooting
bipartition, prop_part : Clades of one tree or of many
node_depth, node_depth_edgelength, node_height, node_height_clado : Depths

Newick
------
read_newick, write_newick : Text serialization

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
suppress_warnings : Suppress specific warnings
use_backend : Force the python or numba kernels

Backend Information
-------------------
get_available_backends : Query available kernel backends
get_backend_info : Get comprehensive backend status

Examples
--------
>>> from phyledge import read_newick, drop_tip, root, unroot
>>> tree = read_newick("(A:1,(B:1,C:1):2);")
>>> drop_tip(tree, "A").to_newick()
'(B:1,C:1);'

>>> from phyledge import prop_part
>>> trees = [read_newick("((A,B),(C,D));"), read_newick("((A,C),(B,D));")]
>>> pp = prop_part(trees)
>>> pp.counts
array([2, 1, 1, 1, 1])

With context managers:

>>> from phyledge import quiet, use_backend
>>> with quiet(), use_backend('python'):
...     rerooted = root(tree, "B")
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes
from ._tree import Order, Tree, resolve_tips
from ._partition import PropPart

# Errors
from ._errors import (
    PhyledgeError,
    ValidationError,
    NewickError,
    TipNotFoundError,
    MonophylyError,
    DegenerateTreeError,
    AmbiguousRootError,
    ConstantDegreeError,
)

# Tree operations
from ._reorder import reorder
from ._depth import (
    node_depth,
    node_depth_edgelength,
    node_height,
    node_height_clado,
)
from ._collapse import collapse_singles, has_singles
from ._root import is_rooted, root, unroot
from ._drop import drop_tip
from ._partition import bipartition, prop_part

# Newick
from ._newick import read_newick, write_newick

# Utilities
from ._utils import rank, tabulate

# Context managers
from ._context import (
    suppress_logger,
    quiet,
    suppress_warnings,
    use_backend,
)

# Backend information
from ._backend import (
    get_available_backends,
    get_backend_info,
    get_best_backend,
    resolve_backend,
)

# Public API
__all__ = [
    # Main classes
    "Tree",
    "Order",
    "PropPart",
    "resolve_tips",
    # Errors
    "PhyledgeError",
    "ValidationError",
    "NewickError",
    "TipNotFoundError",
    "MonophylyError",
    "DegenerateTreeError",
    "AmbiguousRootError",
    "ConstantDegreeError",
    # Tree operations
    "reorder",
    "node_depth",
    "node_depth_edgelength",
    "node_height",
    "node_height_clado",
    "collapse_singles",
    "has_singles",
    "is_rooted",
    "root",
    "unroot",
    "drop_tip",
    "bipartition",
    "prop_part",
    # Newick
    "read_newick",
    "write_newick",
    # Utilities
    "rank",
    "tabulate",
    # Context managers
    "suppress_logger",
    "quiet",
    "suppress_warnings",
    "use_backend",
    # Backend information
    "get_available_backends",
    "get_backend_info",
    "get_best_backend",
    "resolve_backend",
    # Version info
    "__version__",
]
