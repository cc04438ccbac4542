"""
Visualization utilities.

- Outcome bars (delivered / hop limit / in flight)
- Hop and latency histograms
- Combined run summary figure
"""

from meshsim.viz.distributions import (
    plot_histogram,
    plot_hop_histogram,
    plot_latency_histogram,
    plot_outcomes,
    plot_run_summary,
    save_figure,
)

__all__ = [
    "plot_histogram",
    "plot_hop_histogram",
    "plot_latency_histogram",
    "plot_outcomes",
    "plot_run_summary",
    "save_figure",
]
