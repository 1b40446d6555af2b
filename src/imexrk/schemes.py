"""IMEX Runge-Kutta step kernels and a small registry.

This module provides:

1) :class:`IMEXTableau`, the coefficients of an additive Runge-Kutta pair:
   an explicit tableau for the non-stiff term ``g`` and a diagonally implicit
   tableau for the stiff linear operator ``A``;
2) :class:`IMEXRKScheme`, the generic step kernel driven by a tableau, which
   works on any state type supported by :mod:`imexrk.state`;
3) a string-to-scheme *registry* so users can write ``scheme="imex-euler"``
   or register their own tableaus.

The only built-in tableau is the first-order forward/backward Euler pair.
Higher-order pairs are supplied by the user as an :class:`IMEXTableau`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from .exceptions import InvalidArgumentError
from .operators import LinearOperator
from .state import broadcast_into, similar, structure
from .typing import VectorField

__all__ = [
    "IMEXScheme",
    "IMEXTableau",
    "IMEXRKScheme",
    "imex_euler",
    "register_scheme",
    "available_schemes",
    "resolve_scheme",
]

logger = logging.getLogger(__name__)

_SUM_TOL = 1e-12


@runtime_checkable
class IMEXScheme(Protocol):
    """A fixed-step IMEX method, called once per time step."""

    @property
    def name(self) -> str:  # pragma: no cover
        ...

    def step(
        self, g: VectorField, A: LinearOperator, t: float, dt: float, z: Any
    ) -> Any:  # pragma: no cover
        ...


@dataclass(frozen=True, slots=True)
class IMEXTableau:
    """Coefficients of an s-stage IMEX Runge-Kutta pair.

    Stage i solves

        (I - dt*aI[i,i] A) Y_i = z + dt * sum_{j<i} (aE[i,j] g_j + aI[i,j] A Y_j)

    and the step is ``z + dt * sum_i (bE[i] g_i + bI[i] A Y_i)`` where
    ``g_i = g(t + c[i]*dt, Y_i)``.
    """

    aE: NDArray[np.floating]  # (s, s), strictly lower triangular
    bE: NDArray[np.floating]  # (s,)
    aI: NDArray[np.floating]  # (s, s), lower triangular
    bI: NDArray[np.floating]  # (s,)
    c: NDArray[np.floating]  # (s,)
    order: int = 1
    label: str = "custom"

    def __post_init__(self) -> None:
        # Freeze private float copies so callers cannot edit coefficients later.
        for name in ("aE", "bE", "aI", "bI", "c"):
            arr = np.array(getattr(self, name), dtype=float)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

        s = int(self.c.shape[0]) if self.c.ndim == 1 else -1
        if s < 1:
            raise InvalidArgumentError(f"c must be a non-empty 1D array, got {self.c!r}")
        for name in ("aE", "aI"):
            if getattr(self, name).shape != (s, s):
                raise InvalidArgumentError(
                    f"{name} must have shape {(s, s)}, got {getattr(self, name).shape}"
                )
        for name in ("bE", "bI"):
            if getattr(self, name).shape != (s,):
                raise InvalidArgumentError(
                    f"{name} must have shape {(s,)}, got {getattr(self, name).shape}"
                )

        if np.any(np.triu(self.aE) != 0.0):
            raise InvalidArgumentError("aE must be strictly lower triangular")
        if np.any(np.triu(self.aI, k=1) != 0.0):
            raise InvalidArgumentError("aI must be lower triangular (diagonally implicit)")

        for name in ("bE", "bI"):
            total = float(np.sum(getattr(self, name)))
            if abs(total - 1.0) > _SUM_TOL:
                raise InvalidArgumentError(f"{name} must sum to 1, got {total}")
        if self.order < 1:
            raise InvalidArgumentError(f"order must be >= 1, got {self.order}")

    @property
    def stages(self) -> int:
        return int(self.c.shape[0])


def imex_euler() -> IMEXTableau:
    """Forward Euler for ``g``, backward Euler for ``A`` (first order).

    One step reduces to ``z_new = (I - dt A)^{-1} (z + dt g(t, z))``.
    """
    return IMEXTableau(
        aE=np.array([[0.0, 0.0], [1.0, 0.0]]),
        bE=np.array([1.0, 0.0]),
        aI=np.array([[0.0, 0.0], [0.0, 1.0]]),
        bI=np.array([0.0, 1.0]),
        c=np.array([0.0, 1.0]),
        order=1,
        label="imex-euler",
    )


def _add_scaled(dest: Any, w: float, k: Any) -> None:
    """dest += w * k, componentwise."""
    broadcast_into(lambda d, kk: d + w * kk, dest, dest, k)


def _assign(dest: Any, src: Any) -> None:
    broadcast_into(lambda s: s, dest, src)


class IMEXRKScheme:
    """Generic step kernel for an :class:`IMEXTableau`.

    Temporaries (one stage vector plus one ``g`` and one ``A Y`` evaluation
    per stage that is actually used) are allocated from the first state seen
    with :func:`imexrk.state.similar` and reused while the state's structure
    is unchanged. An instance must therefore not be shared between concurrent
    integrations.
    """

    __slots__ = ("tableau", "_needs_g", "_needs_l", "_storage", "_structure")

    def __init__(self, tableau: IMEXTableau) -> None:
        if not isinstance(tableau, IMEXTableau):
            raise TypeError(f"tableau must be an IMEXTableau, got {type(tableau).__name__}")
        self.tableau = tableau

        # Stage evaluations that never enter a later stage or the update are skipped.
        s = tableau.stages
        self._needs_g = [
            bool(tableau.bE[j] != 0.0 or np.any(tableau.aE[j + 1 :, j] != 0.0))
            for j in range(s)
        ]
        self._needs_l = [
            bool(tableau.bI[j] != 0.0 or np.any(tableau.aI[j + 1 :, j] != 0.0))
            for j in range(s)
        ]
        self._storage: tuple[Any, list[Any], list[Any]] | None = None
        self._structure: tuple | None = None

    @property
    def name(self) -> str:
        return self.tableau.label

    def __repr__(self) -> str:
        return f"IMEXRKScheme({self.tableau.label!r}, stages={self.tableau.stages})"

    def _ensure_storage(self, z: Any) -> tuple[Any, list[Any], list[Any]]:
        sig = structure(z)
        if self._storage is None or sig != self._structure:
            logger.debug("Allocating %s temporaries for state %s", self.name, sig)
            s = self.tableau.stages
            y = similar(z)
            gs = [similar(z) if self._needs_g[j] else None for j in range(s)]
            ls = [similar(z) if self._needs_l[j] else None for j in range(s)]
            self._storage = (y, gs, ls)
            self._structure = sig
        return self._storage

    def step(
        self, g: VectorField, A: LinearOperator, t: float, dt: float, z: Any
    ) -> Any:
        """Advance ``z`` in place by one step of size ``dt`` from time ``t``."""
        tab = self.tableau
        y, gs, ls = self._ensure_storage(z)

        for i in range(tab.stages):
            _assign(y, z)
            for j in range(i):
                if tab.aE[i, j] != 0.0:
                    _add_scaled(y, dt * tab.aE[i, j], gs[j])
                if tab.aI[i, j] != 0.0:
                    _add_scaled(y, dt * tab.aI[i, j], ls[j])

            shift = dt * tab.aI[i, i]
            if shift != 0.0:
                A.solve_shifted_into(y, shift, y)

            if gs[i] is not None:
                g(t + tab.c[i] * dt, y, gs[i])
            if ls[i] is not None:
                A.mul_into(ls[i], y)

        for i in range(tab.stages):
            if tab.bE[i] != 0.0:
                _add_scaled(z, dt * tab.bE[i], gs[i])
            if tab.bI[i] != 0.0:
                _add_scaled(z, dt * tab.bI[i], ls[i])
        return z


# -----------------------------
# Registry
# -----------------------------

SchemeFactory = Callable[[], IMEXScheme]
_SCHEME_REGISTRY: dict[str, SchemeFactory] = {}


def register_scheme(
    name: str,
    factory: SchemeFactory,
    *,
    overwrite: bool = False,
    aliases: tuple[str, ...] = (),
) -> None:
    """Register a scheme factory under one or more names.

    Parameters
    ----------
    name:
        Primary key users will pass as ``scheme=...``.
    factory:
        Callable returning a *new* scheme instance (schemes own mutable storage).
    overwrite:
        If False (default), raise if ``name`` or any alias already exists.
    aliases:
        Additional strings that resolve to the same factory.
    """

    keys = (name, *aliases)
    for k in keys:
        kk = str(k).lower().strip()
        if not kk:
            raise ValueError("Scheme name/alias cannot be empty")
        if (not overwrite) and (kk in _SCHEME_REGISTRY):
            raise KeyError(f"Scheme '{kk}' is already registered")
        _SCHEME_REGISTRY[kk] = factory


def available_schemes() -> list[str]:
    """Return the currently registered scheme keys (sorted)."""

    return sorted(_SCHEME_REGISTRY.keys())


def resolve_scheme(scheme: str | IMEXTableau | IMEXScheme | None) -> IMEXScheme:
    """Resolve the user's scheme choice into a concrete :class:`IMEXScheme`.

    Resolution order:
    1) ``None`` -> ``"imex-euler"``.
    2) An :class:`IMEXTableau` -> a new :class:`IMEXRKScheme` around it.
    3) An object implementing :class:`IMEXScheme` -> returned unchanged.
    4) A string -> looked up in the registry.
    """

    if scheme is None:
        scheme = "imex-euler"

    if isinstance(scheme, IMEXTableau):
        return IMEXRKScheme(scheme)

    if isinstance(scheme, IMEXScheme):
        return scheme

    key = str(scheme).lower().strip()
    try:
        factory = _SCHEME_REGISTRY[key]
    except KeyError as e:
        raise ValueError(
            f"Unknown scheme '{scheme}'. Available: {', '.join(available_schemes())}"
        ) from e
    return factory()


def _register_builtin_schemes() -> None:
    register_scheme(
        "imex-euler",
        lambda: IMEXRKScheme(imex_euler()),
        overwrite=True,
        aliases=("euler", "ars111", "forward-backward-euler"),
    )


_register_builtin_schemes()
