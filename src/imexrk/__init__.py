"""
imexrk

Fixed-step implicit-explicit Runge-Kutta integration of split systems

    dx/dt = A x + g(t, x)

on arbitrary in-place state types. The main entry points are exposed at the
top level, so you can write, for example:

    from imexrk import integrator, Monitor
"""

from .config import IntegratorConfig
from .couple import Couple, coupled, first, last
from .exceptions import ContractViolationError, InvalidArgumentError
from .integrator import (
    Integrator,
    QuadratureIntegrator,
    forward_map,
    integrator,
    next_dt,
    propagate,
)
from .monitor import Monitor
from .numerics import Tridiag
from .operators import (
    CoupleOperator,
    DenseOperator,
    DiagonalOperator,
    LinearOperator,
    TridiagOperator,
    as_operator,
)
from .schemes import (
    IMEXRKScheme,
    IMEXScheme,
    IMEXTableau,
    available_schemes,
    imex_euler,
    register_scheme,
)
from .system import AugmentedSystem, aug_state, aug_system

__all__ = [
    # Errors / config
    "InvalidArgumentError",
    "ContractViolationError",
    "IntegratorConfig",
    # Pair state
    "Couple",
    "coupled",
    "first",
    "last",
    # Integrators
    "Integrator",
    "QuadratureIntegrator",
    "integrator",
    "forward_map",
    "propagate",
    "next_dt",
    "Monitor",
    # Operators
    "Tridiag",
    "LinearOperator",
    "DiagonalOperator",
    "TridiagOperator",
    "DenseOperator",
    "CoupleOperator",
    "as_operator",
    # Schemes
    "IMEXScheme",
    "IMEXTableau",
    "IMEXRKScheme",
    "imex_euler",
    "register_scheme",
    "available_schemes",
    # Augmentation
    "AugmentedSystem",
    "aug_system",
    "aug_state",
]
