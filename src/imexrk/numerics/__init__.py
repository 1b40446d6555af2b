# src/imexrk/numerics/__init__.py
"""
Low-level linear algebra used by the stiff operators.

Most users only need :mod:`imexrk.operators`; this subpackage exposes the
underlying tridiagonal storage and solvers.
"""

from .tridiag import (
    Tridiag,
    solve_tridiag_scipy,
    solve_tridiag_thomas,
    tridiag_mv,
    tridiag_to_dense,
)

__all__ = [
    "Tridiag",
    "solve_tridiag_thomas",
    "solve_tridiag_scipy",
    "tridiag_mv",
    "tridiag_to_dense",
]
