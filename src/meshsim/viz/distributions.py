"""
Plots of a run's delivery log.

- Hop-count and latency histograms of delivered messages
- Outcome bars: delivered / dropped at hop limit / still in flight

All plots use matplotlib and return (fig, ax) like the rest of viz.
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Hashable, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

if TYPE_CHECKING:
    from meshsim.core.delivery_log import DeliveryLog


COLOR_DELIVERED = "#2a9d8f"
COLOR_DROPPED = "#e76f51"
COLOR_IN_FLIGHT = "#e9c46a"


def plot_histogram(
    values: Sequence[float],
    title: str = "",
    xlabel: str = "",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (6, 4),
    color: str = COLOR_DELIVERED,
) -> tuple[Figure, Axes]:
    """Histogram with one bin per integer value."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    values = np.asarray(values, dtype=np.float64)
    if values.size:
        lo, hi = np.floor(values.min()), np.ceil(values.max())
        bins = np.arange(lo - 0.5, hi + 1.5)
        ax.hist(values, bins=bins, color=color, edgecolor="white")

    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel("Messages")
    return fig, ax


def plot_hop_histogram(log: "DeliveryLog", **kwargs) -> tuple[Figure, Axes]:
    """Distribution of relay counts over delivered messages."""
    hops = [len(record.hops) for record in log.recv_detail]
    kwargs.setdefault("title", "Hops per delivered message")
    return plot_histogram(hops, xlabel="Hops", **kwargs)


def plot_latency_histogram(log: "DeliveryLog", **kwargs) -> tuple[Figure, Axes]:
    """Distribution of ticks from origination to delivery."""
    latency = [record.latency for record in log.recv_detail]
    kwargs.setdefault("title", "Delivery latency")
    return plot_histogram(latency, xlabel="Ticks", **kwargs)


def plot_outcomes(
    log: "DeliveryLog",
    sent_ids: Sequence[Hashable],
    title: str = "Message outcomes",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (5, 4),
) -> tuple[Figure, Axes]:
    """Bars for delivered, dropped and in-flight message counts."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    delivered = sum(1 for i in sent_ids if i in log.recv)
    in_flight = len(log.in_flight(sent_ids))
    dropped = len(sent_ids) - delivered - in_flight

    labels = ["Delivered", "Hop limit", "In flight"]
    counts = [delivered, dropped, in_flight]
    ax.bar(labels, counts, color=[COLOR_DELIVERED, COLOR_DROPPED, COLOR_IN_FLIGHT])
    for i, count in enumerate(counts):
        ax.text(i, count, str(count), ha="center", va="bottom")

    ax.set_title(title)
    ax.set_ylabel("Messages")
    return fig, ax


def plot_run_summary(
    log: "DeliveryLog",
    sent_ids: Sequence[Hashable],
    figsize: tuple[float, float] = (15, 4),
) -> Figure:
    """Outcomes, hop and latency distributions side by side."""
    fig, axes = plt.subplots(1, 3, figsize=figsize)
    plot_outcomes(log, sent_ids, ax=axes[0])
    plot_hop_histogram(log, ax=axes[1])
    plot_latency_histogram(log, ax=axes[2])
    fig.tight_layout()
    return fig


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
