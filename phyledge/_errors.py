"""
_errors.py
==========
Exception hierarchy for phyledge.

Every error raised deliberately by the package derives from
``PhyledgeError`` and also from the closest built-in exception, so callers
can catch either the specific class or the familiar built-in
(``ValueError`` / ``KeyError``).

  PhyledgeError
  ├── ValidationError        (ValueError)  malformed tree structure
  │   └── NewickError                      malformed Newick text
  ├── TipNotFoundError       (KeyError)    tip label not present in the tree
  ├── MonophylyError         (ValueError)  outgroup is not a clade
  ├── DegenerateTreeError    (ValueError)  tree too small to root / unroot
  ├── AmbiguousRootError     (ValueError)  root resolution needs an outgroup
  └── ConstantDegreeError    (ValueError)  no node of degree >= 3 to unroot on
"""


class PhyledgeError(Exception):
    """Base class for all phyledge errors."""


class ValidationError(PhyledgeError, ValueError):
    """The tree arrays violate the edge-list invariants."""


class NewickError(ValidationError):
    """The Newick text could not be parsed."""


class TipNotFoundError(PhyledgeError, KeyError):
    """A tip label could not be resolved to a tip id."""

    def __str__(self):
        # KeyError wraps its message in quotes; keep the plain text.
        return str(self.args[0]) if self.args else ""


class MonophylyError(PhyledgeError, ValueError):
    """The requested outgroup does not form a clade of the tree."""


class DegenerateTreeError(PhyledgeError, ValueError):
    """The tree has too few edges for the requested operation."""


class AmbiguousRootError(PhyledgeError, ValueError):
    """Resolving the root requires an outgroup, but none was supplied."""


class ConstantDegreeError(PhyledgeError, ValueError):
    """No node has degree three or more, so there is nothing to unroot on."""
