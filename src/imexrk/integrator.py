"""Fixed-step integrators and the propagation loop.

An integrator bundles the non-stiff term ``g``, the stiff linear operator
``A``, an IMEX scheme and a fixed step ``dt``. Integrators are callable::

    I = integrator(g, A, "imex-euler", 0.01)
    I(x, 2.0)              # advances x in place by T=2 and returns it
    I(x, 2.0, monitor)     # same, recording samples before every step

Built with a quadrature function ``q`` the result is a
:class:`QuadratureIntegrator`, which takes the initial quadrature value as an
extra argument::

    Iq = integrator(g, A, "imex-euler", 0.01, q=q)
    z = Iq(x, 0.0, 2.0)    # z = Couple(x, Q) with Q = int_0^2 q dt

The two call forms are not interchangeable; mixing them raises
:class:`~imexrk.exceptions.ContractViolationError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from numbers import Real
from typing import Any

from .config import IntegratorConfig
from .couple import Couple
from .exceptions import ContractViolationError, InvalidArgumentError
from .monitor import Monitor
from .operators import CoupleOperator, LinearOperator, as_operator
from .schemes import IMEXScheme, IMEXTableau, resolve_scheme
from .system import AugmentedSystem, aug_state, aug_system
from .typing import QuadratureFn, State, VectorField

__all__ = [
    "Integrator",
    "QuadratureIntegrator",
    "integrator",
    "forward_map",
    "propagate",
    "next_dt",
]

logger = logging.getLogger(__name__)

SchemeLike = str | IMEXTableau | IMEXScheme


def _is_real(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class _IntegratorBase:
    g: VectorField  # the non-stiff part, possibly augmented with a quadrature
    A: LinearOperator  # the stiff linear part
    scheme: IMEXScheme  # coefficients + temporaries
    dt: float

    def __post_init__(self) -> None:
        if not _is_real(self.dt) or not self.dt > 0:
            raise InvalidArgumentError(f"dt must be greater than 0, got {self.dt}")
        if not callable(self.g):
            raise TypeError(f"g must be callable, got {type(self.g).__name__}")
        object.__setattr__(self, "dt", float(self.dt))
        object.__setattr__(self, "A", as_operator(self.A))
        object.__setattr__(self, "scheme", resolve_scheme(self.scheme))

    def _run(self, z: State, T: Any, monitor: Any) -> State:
        if not _is_real(T):
            raise ContractViolationError(
                f"T must be a real number, got {type(T).__name__}. {self._usage}"
            )
        if monitor is not None and not isinstance(monitor, Monitor):
            raise ContractViolationError(
                f"monitor must be a Monitor, got {type(monitor).__name__}. {self._usage}"
            )
        return propagate(self.scheme, self.g, self.A, T, self.dt, z, monitor)

    _usage = ""


@dataclass(frozen=True, slots=True)
class Integrator(_IntegratorBase):
    """Plain integrator, called as ``I(x, T)`` or ``I(x, T, monitor)``."""

    _usage = "Expected I(x, T[, monitor])."

    def __post_init__(self) -> None:
        _IntegratorBase.__post_init__(self)
        if isinstance(self.g, AugmentedSystem):
            raise ContractViolationError(
                "g is an AugmentedSystem; build a QuadratureIntegrator instead"
            )

    def __call__(self, x: State, *args: Any) -> State:
        if len(args) not in (1, 2):
            raise ContractViolationError(
                f"{self._usage} Got {len(args) + 1} arguments; the quadrature form "
                "I(x, q0, T[, monitor]) needs an integrator built with q=..."
            )
        T, monitor = args if len(args) == 2 else (args[0], None)
        return self._run(x, T, monitor)

    @classmethod
    def from_config(
        cls,
        g: VectorField,
        A: Any,
        config: IntegratorConfig,
        *,
        q: QuadratureFn | None = None,
    ) -> Integrator | QuadratureIntegrator:
        return integrator(g, A, config.scheme, config.dt, q=q)


@dataclass(frozen=True, slots=True)
class QuadratureIntegrator(_IntegratorBase):
    """Integrator of an augmented system, called as ``I(x, q0, T[, monitor])``.

    Returns the augmented state ``Couple(x, Q)``; both parts are updated in
    place, so ``x`` (and an array ``q0``) hold the final values as well.
    """

    _usage = "Expected I(x, q0, T[, monitor])."

    def __post_init__(self) -> None:
        _IntegratorBase.__post_init__(self)
        if not isinstance(self.g, AugmentedSystem):
            raise ContractViolationError(
                "QuadratureIntegrator requires an AugmentedSystem; use integrator(..., q=q)"
            )

    def __call__(self, x: State, *args: Any) -> Couple:
        if len(args) not in (2, 3):
            raise ContractViolationError(
                f"{self._usage} Got {len(args) + 1} arguments; the plain form "
                "I(x, T[, monitor]) needs an integrator built without q"
            )
        q0, T = args[0], args[1]
        monitor = args[2] if len(args) == 3 else None
        return self._run(aug_state(x, q0), T, monitor)


def integrator(
    g: VectorField,
    A: Any,
    scheme: SchemeLike,
    dt: float,
    *,
    q: QuadratureFn | None = None,
) -> Integrator | QuadratureIntegrator:
    """Build an integrator for ``dx/dt = A x + g(t, x)``.

    ``A`` may be any :class:`~imexrk.operators.LinearOperator`, a
    :class:`~imexrk.numerics.Tridiag`, or a 1D/2D array (diagonal/dense).
    If a quadrature function ``q`` is given, the system is augmented with
    :func:`~imexrk.system.aug_system` and the stiff operator acts on the base
    state only.
    """
    if q is None:
        return Integrator(g, A, scheme, dt)

    op = as_operator(A)
    if not isinstance(op, CoupleOperator):
        op = CoupleOperator(op, None)
    return QuadratureIntegrator(aug_system(g, q), op, scheme, dt)


def forward_map(I: Integrator) -> Callable[[float], Callable[[State], State]]:
    """Curry ``I`` into ``T -> (x -> I(x, T))``.

    The maps work in place: every application overwrites and returns its
    argument. Pass a copy to keep the input.
    """
    if not isinstance(I, Integrator):
        raise ContractViolationError(
            f"forward_map requires a plain Integrator, got {type(I).__name__}"
        )

    def at_time(T: float) -> Callable[[State], State]:
        def fwd(x: State) -> State:
            return I(x, T)

        return fwd

    return at_time


def propagate(
    scheme: IMEXScheme,
    g: VectorField,
    A: LinearOperator,
    T: float,
    dt: float,
    z: State,
    monitor: Monitor | None = None,
) -> State:
    """Advance ``z`` in place from t=0 to t=T with steps of at most ``dt``.

    The monitor, if any, records ``z`` before each step. The last step is
    shortened so that integration stops exactly at ``T``. Exceptions from the
    scheme, ``g`` or ``A`` propagate unchanged, leaving ``z`` partially updated.
    """
    if not T > 0:
        raise InvalidArgumentError(f"T must be greater than 0, got {T}")
    if not dt > 0:
        raise InvalidArgumentError(f"dt must be greater than 0, got {dt}")

    name = getattr(scheme, "name", type(scheme).__name__)
    logger.debug("Propagating with %s to T=%g, dt=%g", name, T, dt)

    t = 0.0
    n_steps = 0
    while t < T:
        if monitor is not None:
            monitor.push(t, z)
        dt_step = next_dt(t, T, dt)
        if not dt_step > 0:
            raise InvalidArgumentError(
                f"dt={dt} is too small to advance from t={t} in floating point"
            )
        scheme.step(g, A, t, dt_step, z)
        # Advance the clock through the clamp itself so the last step lands on T.
        t = min(t + dt, T)
        n_steps += 1

    logger.debug("Reached T=%g after %d steps", T, n_steps)
    return z


def next_dt(t: float, T: float, dt: float) -> float:
    """Step size for the step starting at ``t``: ``dt``, or less to hit ``T`` exactly."""
    return min(min(t + dt, T) - t, dt)
