from __future__ import annotations

from collections.abc import Iterator
from numbers import Real
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from .state import copy as copy_state
from .typing import Observable

if TYPE_CHECKING:
    import pandas as pd

__all__ = ["Monitor"]


class Monitor:
    """Append-only record of ``(t, observable(state))`` samples.

    The propagation driver pushes the state *before* each step, so a run of
    total time T records samples at times ``0 <= t < T`` in increasing order
    and never the final state.

    The default observable copies the whole state. Array results of custom
    observables are copied as well, since the driver keeps mutating the state
    in place after each sample.
    """

    __slots__ = ("observable", "_times", "_samples")

    def __init__(self, observable: Observable = copy_state) -> None:
        if not callable(observable):
            raise TypeError("observable must be callable")
        self.observable = observable
        self._times: list[float] = []
        self._samples: list[Any] = []

    def push(self, t: float, z: Any) -> None:
        value = self.observable(z)
        if isinstance(value, np.ndarray):
            value = value.copy()
        self._times.append(float(t))
        self._samples.append(value)

    @property
    def times(self) -> NDArray[np.floating]:
        return np.asarray(self._times, dtype=float)

    @property
    def samples(self) -> list[Any]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._times)

    def __iter__(self) -> Iterator[tuple[float, Any]]:
        return iter(zip(self._times, self._samples))

    def reset(self) -> None:
        self._times.clear()
        self._samples.clear()

    def to_frame(self) -> pd.DataFrame:
        """Samples as a DataFrame indexed by time.

        Scalar samples give a single ``value`` column; 1D array samples are
        expanded into columns ``x0 .. x{n-1}``. Other samples are stored as
        objects in ``value``.
        """
        import pandas as pd

        index = pd.Index(self._times, name="t", dtype=float)
        if not self._samples:
            return pd.DataFrame(index=index)

        if all(isinstance(s, (np.ndarray, np.number, Real)) for s in self._samples):
            arrays = [np.asarray(s) for s in self._samples]
            shapes = {a.shape for a in arrays}
            if len(shapes) == 1 and arrays[0].ndim == 1:
                data = np.vstack(arrays)
                cols = [f"x{i}" for i in range(data.shape[1])]
                return pd.DataFrame(data, index=index, columns=cols)
            if shapes == {()}:
                return pd.DataFrame({"value": [a.item() for a in arrays]}, index=index)
        return pd.DataFrame({"value": self._samples}, index=index)
