"""Augmenting a system with a quadrature accumulator.

Given a vector field ``g(t, x, xdot)`` and a quadrature integrand
``q(t, x, xdot, qdot)``, the augmented system evolves the pair
``Couple(x, Q)`` with ``dQ/dt = q(t, x, dx/dt)``, so that after integrating
from 0 to T the second part holds ``Q(0) + int_0^T q dt``.

The integrand only sees the non-stiff part of ``dx/dt`` (what ``g`` wrote into
``xdot``); integrands that need the full derivative must add ``A x`` themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any

import numpy as np

from .couple import Couple, first, last
from .typing import QuadratureFn, VectorField

__all__ = ["AugmentedSystem", "aug_system", "aug_state"]


@dataclass(frozen=True, slots=True)
class AugmentedSystem:
    g: VectorField
    q: QuadratureFn

    def __call__(self, t: float, z: Couple, zdot: Couple) -> None:
        x, xdot = first(z), first(zdot)
        self.g(t, x, xdot)
        self.q(t, x, xdot, last(zdot))


def aug_system(g: VectorField, q: QuadratureFn) -> AugmentedSystem:
    if not callable(g) or not callable(q):
        raise TypeError("g and q must both be callable")
    return AugmentedSystem(g, q)


def aug_state(x: Any, q0: Any) -> Couple:
    """Pair a base state with the initial quadrature value.

    A scalar ``q0`` is promoted to a one-element float array so it can be
    updated in place; array ``q0`` is used as is (and mutated by integration).
    """
    if isinstance(q0, Real):
        q0 = np.array([float(q0)])
    return Couple(x, q0)
