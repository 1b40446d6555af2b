"""Stiff linear operators.

An IMEX scheme treats the linear part ``A`` of ``dx/dt = A x + g(t, x)``
implicitly. The step kernels only need two primitives from ``A``:

- ``mul_into(out, x)``: ``out := A x``;
- ``solve_shifted_into(out, c, rhs)``: solve ``(I - c A) out = rhs``.

Both work in place and must not assume ``out`` is initialised. ``out`` never
aliases ``x`` when called from the kernels, but ``solve_shifted_into`` must
tolerate ``out is rhs``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from .couple import first, last
from .numerics.tridiag import Tridiag, solve_tridiag_scipy, solve_tridiag_thomas
from .state import broadcast_into

__all__ = [
    "LinearOperator",
    "DiagonalOperator",
    "TridiagOperator",
    "DenseOperator",
    "CoupleOperator",
    "as_operator",
]


@runtime_checkable
class LinearOperator(Protocol):
    def mul_into(self, out: Any, x: Any) -> Any:  # pragma: no cover
        ...

    def solve_shifted_into(self, out: Any, c: float, rhs: Any) -> Any:  # pragma: no cover
        ...


@dataclass(frozen=True, slots=True)
class DiagonalOperator:
    """A = diag(d). Typical for spectral discretisations of dissipative terms."""

    d: NDArray[np.floating]

    def mul_into(self, out: NDArray[np.floating], x: NDArray[np.floating]):
        return np.multiply(self.d, x, out=out)

    def solve_shifted_into(
        self, out: NDArray[np.floating], c: float, rhs: NDArray[np.floating]
    ):
        denom = 1.0 - float(c) * np.asarray(self.d)
        if np.any(denom == 0.0):
            raise np.linalg.LinAlgError(f"I - c*A is singular for c={c}")
        return np.divide(rhs, denom, out=out)


@dataclass(frozen=True, slots=True)
class TridiagOperator:
    """A tridiagonal (e.g. finite-difference diffusion) operator."""

    T: Tridiag
    solver: Literal["thomas", "scipy"] = "thomas"
    _shifted: dict[float, Tridiag] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.T.check()
        if self.solver not in ("thomas", "scipy"):
            raise ValueError(f"Unknown tridiagonal solver '{self.solver}'")

    def mul_into(self, out: NDArray[np.floating], x: NDArray[np.floating]):
        return self.T.mv(x, out=out)

    def solve_shifted_into(
        self, out: NDArray[np.floating], c: float, rhs: NDArray[np.floating]
    ):
        c = float(c)
        # A fixed-step scheme only ever uses a handful of distinct shifts.
        shifted = self._shifted.get(c)
        if shifted is None:
            shifted = self.T.shifted(c)
            self._shifted[c] = shifted
        if self.solver == "scipy":
            return solve_tridiag_scipy(shifted, rhs, out=out)
        return solve_tridiag_thomas(shifted, rhs, out=out)


@dataclass(frozen=True, slots=True)
class DenseOperator:
    """A general dense matrix, solved through a cached SciPy LU factorisation."""

    matrix: NDArray[np.floating]
    _lu: dict[float, Any] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        m = np.asarray(self.matrix)
        if m.ndim != 2 or m.shape[0] != m.shape[1]:
            raise ValueError(f"matrix must be square, got shape {m.shape}")

    def mul_into(self, out: NDArray[np.floating], x: NDArray[np.floating]):
        return np.matmul(self.matrix, x, out=out)

    def solve_shifted_into(
        self, out: NDArray[np.floating], c: float, rhs: NDArray[np.floating]
    ):
        from scipy.linalg import lu_factor, lu_solve

        c = float(c)
        lu = self._lu.get(c)
        if lu is None:
            m = np.asarray(self.matrix, dtype=float)
            lu = lu_factor(np.eye(m.shape[0]) - c * m)
            self._lu[c] = lu
        np.copyto(out, lu_solve(lu, rhs), casting="same_kind")
        return out


def _zero(x):
    return np.zeros_like(x)


def _identity(x):
    return x


@dataclass(frozen=True, slots=True)
class CoupleOperator:
    """Acts part by part on a :class:`~imexrk.couple.Couple` state.

    A ``None`` part is the zero operator: ``A x`` is zero there and the shifted
    solve reduces to a copy. Quadrature accumulators use this, since their
    whole right-hand side is explicit.
    """

    a: LinearOperator | None
    b: LinearOperator | None = None

    def mul_into(self, out, x):
        for op, o, xx in ((self.a, first(out), first(x)), (self.b, last(out), last(x))):
            if op is None:
                broadcast_into(_zero, o, xx)
            else:
                op.mul_into(o, xx)
        return out

    def solve_shifted_into(self, out, c: float, rhs):
        for op, o, r in ((self.a, first(out), first(rhs)), (self.b, last(out), last(rhs))):
            if op is None:
                broadcast_into(_identity, o, r)
            else:
                op.solve_shifted_into(o, c, r)
        return out


def as_operator(A: Any) -> LinearOperator:
    """Resolve common matrix representations into a :class:`LinearOperator`.

    Resolution order:
    1) objects already implementing the protocol are returned unchanged;
    2) :class:`Tridiag` -> :class:`TridiagOperator`;
    3) 1D arrays -> :class:`DiagonalOperator`; 2D arrays -> :class:`DenseOperator`.
    """
    if isinstance(A, LinearOperator):
        return A
    if isinstance(A, Tridiag):
        return TridiagOperator(A)

    arr = np.asarray(A, dtype=float)
    if arr.ndim == 1:
        return DiagonalOperator(arr)
    if arr.ndim == 2:
        return DenseOperator(arr)
    raise TypeError(
        f"Cannot interpret object of type {type(A).__name__} with ndim={arr.ndim} "
        "as a linear operator"
    )
