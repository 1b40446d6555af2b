import math

import numpy as np
import pytest

from imexrk.exceptions import InvalidArgumentError
from imexrk.integrator import next_dt, propagate
from imexrk.monitor import Monitor


def _step_sizes(T: float, dt: float) -> list[float]:
    t = 0.0
    steps = []
    while t < T:
        h = next_dt(t, T, dt)
        steps.append(h)
        t += h
    return steps


def test_next_dt_example_sequence() -> None:
    assert _step_sizes(5.0, 2.0) == [2.0, 2.0, 1.0]


@pytest.mark.parametrize(
    "T, dt",
    [(1.0, 0.125), (1.1, 0.25), (3.0, 0.5), (0.75, 1.0), (10.0, 3.0)],
)
def test_step_sizes_sum_to_T_and_stay_within_dt(T: float, dt: float) -> None:
    steps = _step_sizes(T, dt)
    assert math.fsum(steps) == pytest.approx(T, rel=1e-14)
    assert all(0.0 < h <= dt for h in steps)
    assert len(steps) == math.ceil(T / dt)


def test_step_sizes_random_pairs(rng) -> None:
    r = rng(7)
    for _ in range(200):
        T = float(r.uniform(0.01, 20.0))
        dt = float(r.uniform(1e-2, 5.0))
        steps = _step_sizes(T, dt)
        assert all(0.0 < h <= dt for h in steps)
        assert math.fsum(steps) == pytest.approx(T, rel=1e-12)


def test_next_dt_is_plain_dt_away_from_target() -> None:
    assert next_dt(0.0, 10.0, 0.5) == 0.5
    assert next_dt(9.75, 10.0, 0.5) == 0.25


def test_propagate_hits_target_exactly(recording_scheme) -> None:
    z = np.zeros(1)
    out = propagate(recording_scheme, None, None, 5.0, 2.0, z)

    assert out is z
    assert [c[1] for c in recording_scheme.calls] == [2.0, 2.0, 1.0]
    assert [c[0] for c in recording_scheme.calls] == [0.0, 2.0, 4.0]
    assert z[0] == 5.0


@pytest.mark.parametrize("T", [0.0, -1.0, float("nan")])
def test_propagate_rejects_non_positive_T(recording_scheme, T: float) -> None:
    z = np.zeros(1)
    with pytest.raises(InvalidArgumentError):
        propagate(recording_scheme, None, None, T, 0.1, z)
    assert recording_scheme.calls == []


def test_propagate_error_message_carries_value(recording_scheme) -> None:
    with pytest.raises(InvalidArgumentError, match="-1"):
        propagate(recording_scheme, None, None, -1.0, 0.1, np.zeros(1))


@pytest.mark.parametrize("T, dt", [(1.0, 0.125), (1.1, 0.25), (5.0, 2.0), (0.3, 1.0)])
def test_monitor_sees_ceil_T_over_dt_samples_before_each_step(
    recording_scheme, T: float, dt: float
) -> None:
    mon = Monitor()
    z = np.zeros(2)
    propagate(recording_scheme, None, None, T, dt, z, mon)

    times = mon.times
    assert len(mon) == math.ceil(T / dt)
    assert np.all(times < T)
    assert np.all(np.diff(times) > 0)
    assert times[0] == 0.0

    # Each sample is the state at its own time, not the post-integration state.
    for t, sample in mon:
        np.testing.assert_allclose(sample, [t, t])


def test_exceptions_from_the_kernel_propagate_unchanged() -> None:
    class Exploding:
        name = "exploding"

        def __init__(self) -> None:
            self.n = 0

        def step(self, g, A, t, dt, z):
            self.n += 1
            z += 1.0
            if self.n == 2:
                raise FloatingPointError("diverged")
            return z

    z = np.zeros(1)
    with pytest.raises(FloatingPointError, match="diverged"):
        propagate(Exploding(), None, None, 10.0, 1.0, z)
    # The partially updated state is left as the kernel left it.
    assert z[0] == 2.0



def test_accumulated_clock_rounding_adds_a_final_ulp_step(recording_scheme) -> None:
    """Ten steps of 0.1 sum to 0.9999999999999999, so an eleventh tiny step closes the gap."""
    mon = Monitor()
    z = np.zeros(1)
    propagate(recording_scheme, None, None, 1.0, 0.1, z, mon)

    assert len(mon) == 11
    t_last, dt_last = recording_scheme.calls[-1]
    assert t_last < 1.0
    assert t_last + dt_last == 1.0
    assert 0.0 < dt_last < 1e-15
    assert math.fsum(c[1] for c in recording_scheme.calls) == pytest.approx(1.0, rel=1e-15)
