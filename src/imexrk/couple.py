"""A pair of independently stored states.

:class:`Couple` has two uses in this library:

1) wrapping a primary state ``a`` together with an accumulator ``b`` used for
   quadrature integration along the trajectory. Because the pair is frozen, a
   scalar quadrature is stored in a one-element array and updated in place;
2) integrating two coupled systems jointly, e.g. the nonlinear equations and
   their tangent (linearized) equations. Any coupling between the parts is the
   job of the vector field, never of the container.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from . import state as _state

__all__ = ["Couple", "coupled", "first", "last"]

A = TypeVar("A")
B = TypeVar("B")


@dataclass(frozen=True, slots=True)
class Couple(Generic[A, B]):
    a: A
    b: B

    def similar(self) -> Couple[A, B]:
        return Couple(_state.similar(self.a), _state.similar(self.b))

    def copy(self) -> Couple[A, B]:
        return Couple(_state.copy(self.a), _state.copy(self.b))

    def broadcast_(self, f: Callable[..., Any], *args: Any) -> Couple[A, B]:
        """Apply ``f`` to the first parts and, separately, to the last parts."""
        _state.broadcast_into(f, self.a, *(first(arg) for arg in args))
        _state.broadcast_into(f, self.b, *(last(arg) for arg in args))
        return self

    def structure(self) -> tuple:
        return ("couple", _state.structure(self.a), _state.structure(self.b))


def coupled(a: A, b: B) -> Couple[A, B]:
    return Couple(a, b)


def first(pair: Couple[A, Any]) -> A:
    return pair.a


def last(pair: Couple[Any, B]) -> B:
    return pair.b
