from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..monitor import Monitor
from ._mpl import get_plt, pretty_ax

if TYPE_CHECKING:
    from matplotlib.axes import Axes


def plot_monitor(
    monitor: Monitor,
    *,
    ax: Axes | None = None,
    columns: Sequence[str] | None = None,
    title: str | None = None,
) -> Axes:
    """Plot numeric monitor samples against time, one line per column.

    Only monitors whose samples are scalars or equal-length 1D arrays can be
    plotted (see :meth:`Monitor.to_frame`).
    """
    df = monitor.to_frame()
    if df.empty:
        raise ValueError("monitor has no samples to plot")

    if columns is None:
        columns = list(df.columns)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"monitor frame missing columns: {missing}")
    if any(df[c].dtype == object for c in columns):
        raise ValueError("monitor samples are not numeric; use a numeric observable")

    if ax is None:
        plt = get_plt()
        _, ax = plt.subplots(figsize=(7, 4))

    for c in columns:
        ax.plot(df.index.to_numpy(), df[c].to_numpy(), label=str(c))

    ax.set_xlabel("t")
    if title:
        ax.set_title(title)
    if len(columns) > 1:
        ax.legend()
    pretty_ax(ax)
    return ax
