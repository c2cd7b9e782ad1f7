"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
slow
    Applied to tests that build trees large enough to take noticeably
    longer than the rest of the suite (deep caterpillars, many-tree
    registries).  Deselect with ``-m "not slow"``.

    Registration here suppresses PytestUnknownMarkWarning and makes the mark
    visible in ``pytest --markers``.

Warning filters
---------------
NumbaWarning messages are filtered out during tests.  Warnings about
caching or reflected types are expected with the small arrays used here
and are not informative for correctness testing.
"""

import warnings

from numba.core.errors import NumbaWarning


def pytest_configure(config):
    """
    Configure pytest before test collection begins.

    This runs before any test module is imported, so the filter is in place
    when the kernels are first compiled.
    """
    config.addinivalue_line(
        "markers",
        "slow: tests on large trees (deselect with -m 'not slow')",
    )

    warnings.filterwarnings("ignore", category=NumbaWarning)


def pytest_unconfigure(config):
    """Restore default warning behavior."""
    warnings.resetwarnings()
