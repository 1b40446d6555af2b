# src/imexrk/numerics/tridiag.py
from __future__ import annotations

from dataclasses import dataclass
from typing import cast

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "Tridiag",
    "tridiag_mv",
    "solve_tridiag_thomas",
    "solve_tridiag_scipy",
    "tridiag_to_dense",
]


@dataclass(frozen=True, slots=True)
class Tridiag:
    """Tridiagonal matrix stored by diagonals.

    For size M: ``diag`` has shape (M,), ``lower``/``upper`` have shape (M-1,)
    (``(0,)`` when M <= 1).
    """

    lower: NDArray[np.floating]
    diag: NDArray[np.floating]
    upper: NDArray[np.floating]

    def check(self) -> int:
        """Validate the diagonals and return the system size M."""
        diag = np.asarray(self.diag)
        if diag.ndim != 1:
            raise ValueError("diag must be 1D")

        M = int(diag.shape[0])
        off = (max(M - 1, 0),)
        if np.shape(self.lower) != off or np.shape(self.upper) != off:
            raise ValueError(
                f"lower/upper must have shape {off}, "
                f"got {np.shape(self.lower)}, {np.shape(self.upper)}"
            )
        return M

    def mv(
        self, u: NDArray[np.floating], out: NDArray[np.floating] | None = None
    ) -> NDArray[np.floating]:
        self.check()
        return tridiag_mv(self.lower, self.diag, self.upper, u, out=out)

    def shifted(self, c: float) -> Tridiag:
        """Return the diagonals of ``I - c T``."""
        self.check()
        c = float(c)
        return Tridiag(
            lower=-c * np.asarray(self.lower, dtype=float),
            diag=1.0 - c * np.asarray(self.diag, dtype=float),
            upper=-c * np.asarray(self.upper, dtype=float),
        )


def tridiag_mv(
    lower: NDArray[np.floating],  # (M-1,)
    diag: NDArray[np.floating],  # (M,)
    upper: NDArray[np.floating],  # (M-1,)
    u: NDArray[np.floating],  # (M,)
    *,
    out: NDArray[np.floating] | None = None,
) -> NDArray[np.floating]:
    """
    y = T u for T tridiagonal:

      y[j] = lower[j-1]*u[j-1] + diag[j]*u[j] + upper[j]*u[j+1]

    with the out-of-range terms dropped. ``out`` must not alias ``u``.
    """
    diag = np.asarray(diag)
    u = np.asarray(u)
    M = int(diag.shape[0])
    if u.shape != (M,):
        raise ValueError(f"u must have shape {(M,)} got {u.shape}")

    if out is None:
        out = np.empty(M, dtype=np.result_type(diag, u, np.float64))
    elif out.shape != (M,):
        raise ValueError(f"out must have shape {(M,)} got {out.shape}")
    elif np.shares_memory(out, u):
        raise ValueError("out must not share memory with u")

    np.multiply(diag, u, out=out)
    if M > 1:
        out[1:] += np.asarray(lower) * u[:-1]
        out[:-1] += np.asarray(upper) * u[1:]
    return out


def solve_tridiag_thomas(
    A: Tridiag,
    rhs: NDArray[np.floating],
    *,
    out: NDArray[np.floating] | None = None,
) -> NDArray[np.floating]:
    """
    Solve A x = rhs with the Thomas algorithm (no pivoting).

    Prefer diagonally dominant systems; ``I - c T`` is one whenever T is a
    dissipative second-difference operator and c >= 0. Raises
    ``np.linalg.LinAlgError`` on (near-)zero pivots. Inputs are never
    modified; ``out`` may alias ``rhs``.
    """
    M = A.check()
    rhs = np.asarray(rhs)
    if rhs.shape != (M,):
        raise ValueError(f"rhs must have shape {(M,)} got {rhs.shape}")

    dtype = np.result_type(A.lower, A.diag, A.upper, rhs, np.float64)
    if out is None:
        out = np.empty(M, dtype=dtype)
    elif out.shape != (M,):
        raise ValueError(f"out must have shape {(M,)} got {out.shape}")
    elif not np.can_cast(dtype, out.dtype, casting="same_kind"):
        raise TypeError(f"cannot write {dtype} solution into out of dtype {out.dtype}")
    if M == 0:
        return out

    lower = np.asarray(A.lower, dtype=dtype)
    diag = np.asarray(A.diag, dtype=dtype)
    upper = np.asarray(A.upper, dtype=dtype)
    tol = 100.0 * np.finfo(dtype).eps

    # Forward sweep on private copies
    cp = np.empty(max(M - 1, 0), dtype=dtype)
    dp = np.array(rhs, dtype=dtype)

    denom = diag[0]
    if abs(denom) < tol:
        raise np.linalg.LinAlgError("Near-zero pivot at row 0")
    if M > 1:
        cp[0] = upper[0] / denom
    dp[0] = dp[0] / denom

    for i in range(1, M):
        denom = diag[i] - lower[i - 1] * cp[i - 1]
        if abs(denom) < tol:
            raise np.linalg.LinAlgError(f"Near-zero pivot at row {i}")
        if i < M - 1:
            cp[i] = upper[i] / denom
        dp[i] = (dp[i] - lower[i - 1] * dp[i - 1]) / denom

    # Back substitution
    out[M - 1] = dp[M - 1]
    for i in range(M - 2, -1, -1):
        out[i] = dp[i] - cp[i] * out[i + 1]
    return out


def solve_tridiag_scipy(
    A: Tridiag,
    rhs: NDArray[np.floating],
    *,
    out: NDArray[np.floating] | None = None,
) -> NDArray[np.floating]:
    """Solve A x = rhs with SciPy's banded LAPACK solver. SciPy is imported lazily."""
    from scipy.linalg import (
        solve_banded,  # local import to avoid import-time dependency
    )

    M = A.check()
    rhs = np.asarray(rhs)
    if rhs.shape != (M,):
        raise ValueError(f"rhs must have shape {(M,)} got {rhs.shape}")

    if M == 0:
        res = rhs.copy()
    else:
        ab = np.zeros((3, M), dtype=np.result_type(A.lower, A.diag, A.upper, rhs))
        ab[0, 1:] = A.upper
        ab[1, :] = A.diag
        ab[2, :-1] = A.lower
        res = np.asarray(solve_banded((1, 1), ab, rhs))

    if out is None:
        return cast(NDArray[np.floating], res)
    np.copyto(out, res, casting="same_kind")
    return out


def tridiag_to_dense(A: Tridiag) -> NDArray[np.floating]:
    M = A.check()
    dense = np.zeros((M, M), dtype=np.result_type(A.lower, A.diag, A.upper))
    idx = np.arange(M)
    dense[idx, idx] = A.diag
    dense[idx[1:], idx[:-1]] = A.lower
    dense[idx[:-1], idx[1:]] = A.upper
    return dense
