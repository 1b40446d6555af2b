from __future__ import annotations

from collections.abc import Callable
from typing import Any

# typing only
type State = Any  # ndarray, Couple or any StateLike
type VectorField = Callable[[float, Any, Any], None]  # g(t, x, xdot), writes xdot
type QuadratureFn = Callable[[float, Any, Any, Any], None]  # q(t, x, xdot, qdot)
type Observable = Callable[[Any], Any]
