import matplotlib.pyplot as plt
import numpy as np
import plotly.graph_objects as go

from rethinking import approximation, plots


def test_trace_plots(normal_draws):
    assert len(plots.plot_chains(normal_draws).axes) == 2
    assert len(plots.trace_rank_plot(normal_draws, parameters=["mu"]).axes) == 1


def test_plot_autocorrelation(normal_draws):
    fig = plots.plot_autocorrelation(normal_draws, "mu", lags=20)
    assert isinstance(fig, plt.Figure)
    assert len(fig.axes) == 2


def test_plot_joint_distribution(normal_draws):
    assert len(plots.plot_joint_distribution(normal_draws)) == 1


def test_plot_posterior_density(normal_draws):
    fig = plots.plot_posterior_density({"mu": normal_draws["mu"], "sigma": normal_draws["sigma"]})
    assert isinstance(fig, go.Figure)
    assert [trace.type for trace in fig.data] == ["histogram", "histogram", "scatter", "scatter"]
    assert fig.data[-1].name == "sigma kde"
    assert fig.layout.title.text == "Posterior distribution"


def test_plot_grid_posterior():
    fig = plots.plot_grid_posterior(approximation.globe_grid(6, 9, grid_size=20))
    assert fig.axes[0].get_title() == "20 points"


def test_plot_interval_band():
    x = np.linspace(0, 1, 15)
    samples = np.random.default_rng(0).normal(x, 0.1, size=(200, 15))
    fig = plots.plot_interval_band(x, samples, observed=(x, x), xlabel="speed", ylabel="dist")
    assert fig.axes[0].get_xlabel() == "speed"


def test_plot_observed_vs_simulated():
    simulated = np.random.default_rng(0).poisson(5, size=(100, 3))
    fig = plots.plot_observed_vs_simulated([4, 5, 6], simulated, labels=["x", "y", "z"])
    assert isinstance(fig, go.Figure)
    assert fig.data[-1].name == "observed"


def test_single_chain_tables_without_chain_column(normal_draws):
    quap_draws = normal_draws[["mu", "sigma"]]
    assert len(plots.plot_chains(quap_draws).axes) == 2
    assert len(plots.trace_rank_plot(quap_draws).axes) == 2
    assert len(plots.plot_autocorrelation(quap_draws, "mu", lags=10).axes) == 1
    assert len(plots.plot_joint_distribution(quap_draws)) == 1
