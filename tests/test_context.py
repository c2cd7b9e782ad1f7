"""
tests/test_context.py
=====================
Tests for backend selection, the context managers and kernel logging.
"""

import logging
import warnings

import pytest

from phyledge import (
    drop_tip,
    get_available_backends,
    get_backend_info,
    get_best_backend,
    quiet,
    read_newick,
    reorder,
    resolve_backend,
    suppress_logger,
    suppress_warnings,
    use_backend,
)
from phyledge import _logging
from phyledge._backend import select_kernel
from phyledge._context import get_backend_override
from phyledge._kernels import _postorder_order


class TestBackends:
    def test_python_always_available(self):
        assert "python" in get_available_backends()

    def test_best_is_last(self):
        assert get_best_backend() == get_available_backends()[-1]

    def test_resolve_explicit(self):
        assert resolve_backend("python") == "python"

    def test_resolve_unknown(self):
        with pytest.raises(ValueError, match="not available"):
            resolve_backend("cuda")

    def test_info_keys(self):
        info = get_backend_info()
        assert set(info) == {
            "numba_version",
            "jit_enabled",
            "backends",
            "best_backend",
            "active_backend",
        }

    def test_select_python_kernel(self):
        kernel = select_kernel(_postorder_order, "python")
        assert kernel is getattr(_postorder_order, "py_func", _postorder_order)


class TestUseBackend:
    def test_override(self):
        with use_backend("python"):
            assert resolve_backend() == "python"
            assert get_backend_override() == "python"
        assert get_backend_override() is None

    def test_explicit_backend_wins(self):
        with use_backend("python"):
            assert resolve_backend(get_best_backend()) == get_best_backend()

    def test_invalid(self):
        with pytest.raises(ValueError):
            with use_backend("gpu"):
                pass

    def test_restored_after_exception(self):
        with pytest.raises(RuntimeError):
            with use_backend("python"):
                raise RuntimeError("boom")
        assert get_backend_override() is None

    def test_nesting(self):
        with use_backend("python"):
            with use_backend("best"):
                assert get_backend_override() == "best"
            assert get_backend_override() == "python"


class TestLoggingContext:
    def test_quiet_suppresses_warnings(self, caplog):
        tree = read_newick("((A,B),C);")
        with caplog.at_level(logging.WARNING):
            with quiet():
                drop_tip(tree, [0, 99])
        assert "outside" not in caplog.text

    def test_suppress_logger_restores_level(self):
        logger = logging.getLogger("phyledge._logging")
        before = logger.level
        with suppress_logger("phyledge._logging", logging.ERROR):
            assert logger.level == logging.ERROR
        assert logger.level == before

    def test_suppress_logger_silences_engine_warnings(self, caplog):
        tree = read_newick("((A,B),C);")
        with caplog.at_level(logging.WARNING, logger="phyledge"):
            with suppress_logger("phyledge._logging"):
                drop_tip(tree, [0, 99])
        assert "outside" not in caplog.text

    def test_suppress_warnings(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with suppress_warnings(UserWarning):
                warnings.warn("hidden", UserWarning)
            warnings.warn("shown", UserWarning)
        assert [str(w.message) for w in caught] == ["shown"]


class TestKernelLogging:
    def test_first_call_logged_once(self, caplog, monkeypatch):
        monkeypatch.setattr(_logging, "_kernel_first_call", {})
        tree = read_newick("((A,B),(C,D));")
        with caplog.at_level(logging.INFO, logger="phyledge"):
            reorder(tree, "postorder", backend="python")
            reorder(tree, "postorder", backend="python")
        assert caplog.text.count("First call to _postorder_order") == 1

    def test_reorder_logged_at_debug(self, caplog):
        tree = read_newick("((A,B),(C,D));")
        with caplog.at_level(logging.DEBUG, logger="phyledge"):
            reorder(tree, "postorder")
        assert "Reordered 6 edges" in caplog.text
