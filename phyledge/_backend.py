"""
_backend.py
===========
Backend detection and selection for the edge-list kernels.

Two execution backends exist for every kernel in ``_kernels.py``:

  'numba'   LLVM-compiled code (numba.njit)
  'python'  the same kernel body run by the interpreter (``kernel.py_func``),
            useful for debugging and for cross-checking the compiled code

Functions in this module have NO side effects - they only query state.
Logging is done by the calling code, not here.
"""

from typing import Callable, List

import numba


# ============================================================================ #
# Backend Detection (No Side Effects)
# ============================================================================ #


def check_jit_enabled() -> bool:
    """
    Check whether numba will actually compile kernels.

    Returns
    -------
    bool
        False when JIT compilation has been switched off through
        ``NUMBA_DISABLE_JIT``; True otherwise.
    """
    return not bool(numba.config.DISABLE_JIT)


def get_available_backends() -> List[str]:
    """
    Get list of available execution backends.

    Returns
    -------
    list[str]
        Backends in preference order (last is best).  Always includes
        'python'; includes 'numba' unless JIT compilation is disabled.

    Examples
    --------
    >>> get_available_backends()
    ['python', 'numba']
    """
    backends = ["python"]
    if check_jit_enabled():
        backends.append("numba")
    return backends


def get_best_backend() -> str:
    """
    Get the most optimized available backend.

    Returns
    -------
    str
        'numba' when JIT compilation is enabled, else 'python'.
    """
    return get_available_backends()[-1]


def resolve_backend(backend: str = "best") -> str:
    """
    Resolve a backend specification to an actual backend.

    An override installed with ``use_backend()`` takes precedence over
    ``'best'``.

    Parameters
    ----------
    backend : str
        'best', 'python' or 'numba'.

    Returns
    -------
    str
        Resolved backend name.

    Raises
    ------
    ValueError
        If the requested backend is not available.
    """
    from ._context import get_backend_override

    if backend == "best":
        override = get_backend_override()
        if override is not None and override != "best":
            return override
        return get_best_backend()

    available = get_available_backends()
    if backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )
    return backend


def select_kernel(kernel: Callable, backend: str = "best") -> Callable:
    """
    Return the callable that runs *kernel* on the resolved backend.

    Parameters
    ----------
    kernel : numba dispatcher
        One of the ``@njit`` functions from ``_kernels.py``.
    backend : str, default 'best'

    Returns
    -------
    callable
        The dispatcher itself for 'numba', its ``py_func`` for 'python'.
        With JIT disabled numba hands back plain functions, which are
        returned unchanged.
    """
    resolved = resolve_backend(backend)
    if resolved == "python":
        return getattr(kernel, "py_func", kernel)
    return kernel


# ============================================================================ #
# Module-Level State Query (Read-Only)
# ============================================================================ #


def get_backend_info() -> dict:
    """
    Get comprehensive backend information.

    Returns
    -------
    dict
        Dictionary with keys:
        - 'numba_version': str
        - 'jit_enabled': bool
        - 'backends': list[str]
        - 'best_backend': str
        - 'active_backend': str  (after any ``use_backend`` override)

    Examples
    --------
    >>> info = get_backend_info()
    >>> info['backends']
    ['python', 'numba']
    """
    return {
        "numba_version": numba.__version__,
        "jit_enabled": check_jit_enabled(),
        "backends": get_available_backends(),
        "best_backend": get_best_backend(),
        "active_backend": resolve_backend("best"),
    }
