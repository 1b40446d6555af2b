"""Pytest helpers for the imexrk library."""

from __future__ import annotations

import numpy as np
import pytest

from imexrk.operators import DiagonalOperator


@pytest.fixture
def rng():
    """Seeded RNG factory."""

    def _rng(seed: int) -> np.random.Generator:
        return np.random.default_rng(seed)

    return _rng


@pytest.fixture
def make_linear_problem():
    """Factory for the split scalar test equation ``x' = lam*x + mu*x``.

    ``lam`` is the stiff part (a DiagonalOperator, treated implicitly) and
    ``mu`` the non-stiff part (an in-place vector field, treated explicitly).
    """

    def _make(lam, mu):
        A = DiagonalOperator(np.atleast_1d(np.asarray(lam, dtype=float)))
        mu_arr = np.asarray(mu, dtype=float)

        def g(t, x, xdot):
            np.multiply(mu_arr, x, out=xdot)

        return g, A

    return _make


class RecordingScheme:
    """Test double: records (t, dt) per step and adds dt to every state entry."""

    name = "recording"

    def __init__(self) -> None:
        self.calls: list[tuple[float, float]] = []

    def step(self, g, A, t, dt, z):
        self.calls.append((t, dt))
        z += dt
        return z


@pytest.fixture
def recording_scheme():
    return RecordingScheme()
