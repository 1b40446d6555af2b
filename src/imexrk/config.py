from __future__ import annotations

import math
from dataclasses import dataclass

from .exceptions import InvalidArgumentError


@dataclass(frozen=True, slots=True)
class IntegratorConfig:
    """Settings for a fixed-step IMEX integration.

    ``scheme`` is any key known to :func:`imexrk.schemes.available_schemes`.
    """

    dt: float
    scheme: str = "imex-euler"

    def __post_init__(self) -> None:
        if not math.isfinite(self.dt) or self.dt <= 0:
            raise InvalidArgumentError(f"dt must be greater than 0, got {self.dt}")
        if not str(self.scheme).strip():
            raise InvalidArgumentError("scheme name cannot be empty")
