"""Generic operations on integration states.

The driver and the step kernels never look inside a state. Everything they
need is expressed through three capabilities:

- ``similar(x)``: a freshly allocated, uninitialized duplicate of ``x``;
- ``copy(x)``: a value-identical duplicate sharing no storage with ``x``;
- ``broadcast_into(f, dest, *args)``: ``dest := f(*args)`` elementwise, in place.

NumPy arrays support these natively. Any other state type opts in by
implementing the :class:`StateLike` protocol (see :class:`imexrk.couple.Couple`).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import numpy as np

__all__ = [
    "StateLike",
    "similar",
    "copy",
    "broadcast_into",
    "structure",
]


@runtime_checkable
class StateLike(Protocol):
    """A composite state that knows how to duplicate and update itself."""

    def similar(self) -> StateLike:  # pragma: no cover
        ...

    def copy(self) -> StateLike:  # pragma: no cover
        ...

    def broadcast_(self, f: Callable[..., Any], *args: Any) -> StateLike:  # pragma: no cover
        ...

    def structure(self) -> tuple:  # pragma: no cover
        ...


def similar(x: Any) -> Any:
    if isinstance(x, StateLike):
        return x.similar()
    return np.empty_like(x)


def copy(x: Any) -> Any:
    if isinstance(x, StateLike):
        return x.copy()
    return np.array(x, copy=True)


def broadcast_into(f: Callable[..., Any], dest: Any, *args: Any) -> Any:
    """
    Overwrite ``dest`` with ``f(*args)`` and return ``dest``.

    ``f`` must accept arrays and combine them elementwise (NumPy ufuncs,
    arithmetic lambdas, ...). ``dest`` may itself appear among ``args``; the
    right-hand side is fully evaluated before assignment.

    Shape mismatches surface as the ``ValueError`` NumPy raises on broadcasting.
    Writes follow NumPy's ``same_kind`` casting rule, so a floating result
    cannot be truncated into an integer ``dest``; NumPy raises ``TypeError``.
    """
    if isinstance(dest, StateLike):
        return dest.broadcast_(f, *args)
    if not isinstance(dest, np.ndarray):
        raise TypeError(
            f"cannot update a state of type {type(dest).__name__} in place; "
            "use a NumPy array or a StateLike container"
        )
    np.copyto(dest, f(*args), casting="same_kind")
    return dest


def structure(x: Any) -> tuple:
    """Nested shape/dtype signature of a state, used to validate cached temporaries."""
    if isinstance(x, StateLike):
        return x.structure()
    arr = np.asarray(x)
    return (arr.shape, arr.dtype.str)
