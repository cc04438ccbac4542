"""Smoke tests for visualization."""

import matplotlib.pyplot as plt

from meshsim.core import DeliveryLog, PlainMessage
from meshsim.viz import plot_hop_histogram, plot_outcomes, plot_run_summary, save_figure


def make_log():
    log = DeliveryLog()
    log.record_delivery(PlainMessage("m1", "A", "B", 0), 3, ["X"])
    log.record_delivery(PlainMessage("m2", "A", "C", 1), 2, [])
    log.record_drop("m3")
    return log


def test_plot_outcomes():
    fig, ax = plot_outcomes(make_log(), ["m1", "m2", "m3", "m4"])
    heights = [patch.get_height() for patch in ax.patches]
    assert heights == [2, 1, 1]
    plt.close(fig)


def test_hop_histogram_empty_log():
    fig, ax = plot_hop_histogram(DeliveryLog())
    assert ax.get_title() == "Hops per delivered message"
    plt.close(fig)


def test_save_run_summary(tmp_path):
    fig = plot_run_summary(make_log(), ["m1", "m2", "m3"])
    path = tmp_path / "summary.png"
    save_figure(fig, path)
    assert path.exists()
    plt.close(fig)
