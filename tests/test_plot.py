import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from kingswalk import plot
from kingswalk.hillclimb import average_score_over_runs, perfect_rate_vs_N, run_hillclimb
from kingswalk.utility import random_puzzle


@pytest.fixture(autouse=True)
def no_show(monkeypatch):
    monkeypatch.setattr(plt, "show", lambda: None)
    yield
    plt.close("all")


def test_plot_score_curve():
    values = random_puzzle(4, 3, np.random.default_rng(0))
    _, result = run_hillclimb(values, 4, max_restarts=10, seed=0)
    fig = plot.plot_score_curve(result)
    assert isinstance(fig, matplotlib.figure.Figure)


def test_plot_score_curve_average():
    N, scores_matrix, mean_score, std_score, _ = average_score_over_runs(3, 2, runs=2, max_restarts=10, base_seed=0)
    fig = plot.plot_score_curve_average(N, scores_matrix, mean_score, std_score)
    assert isinstance(fig, matplotlib.figure.Figure)


def test_plot_perfect_rate_vs_N():
    result = perfect_rate_vs_N([2, 3], runs=2, max_restarts=10, base_seed=0)
    fig = plot.plot_perfect_rate_vs_N(result)
    assert len(fig.axes) == 2
