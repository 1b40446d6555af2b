"""Optional plotting helpers. Matplotlib is imported only when a plot is drawn."""

from .plots import plot_monitor

__all__ = ["plot_monitor"]
