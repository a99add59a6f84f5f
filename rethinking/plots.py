"""
Plotting helpers shared by the chapters.

Static figures use matplotlib/seaborn, interactive ones plotly. Every function
returns its figure; pass ``show=True`` to display it right away.
"""
import itertools

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import plotly.express as px
import seaborn as sns
from scipy import stats
from statsmodels.graphics.tsaplots import plot_acf

from .sampling import parameter_columns


def _finish(fig, show):
    if show:
        fig.show()
    return fig


def _with_chain(draws_df):
    """Tables without chain columns, such as quadratic approximation samples, are one chain."""
    if "chain" in draws_df.columns:
        return draws_df
    return draws_df.assign(chain=1, iteration=np.arange(1, len(draws_df) + 1))


def plot_chains(draws_df, parameters=None, show=False):
    """
    Input
    -------
    draws_df: posterior-draws dataframe
    parameters: parameters to plot, default all

    Output
    -------
    matplotlib figure with one trace panel per parameter, chains overlaid.
    """
    draws_df = _with_chain(draws_df)
    parameters = parameters if parameters else parameter_columns(draws_df)
    fig, axes = plt.subplots(len(parameters), 1, figsize=(10, 2.5 * len(parameters)), squeeze=False)
    for ax, param in zip(axes[:, 0], parameters):
        for chain, group in draws_df.groupby("chain"):
            ax.plot(group["iteration"].to_numpy(), group[param].to_numpy(), label="chain_%s" % chain, linewidth=0.8)
        ax.set_title("Chain intermixing for '%s' samples" % param)
        ax.legend(loc="upper right")
    fig.tight_layout()
    return _finish(fig, show)


def trace_rank_plot(draws_df, parameters=None, bins=30, show=False):
    """
    Histograms of the ranks of each chain's draws within the pooled draws. Chains
    that explore the same distribution give overlapping, roughly flat histograms.
    """
    draws_df = _with_chain(draws_df)
    parameters = parameters if parameters else parameter_columns(draws_df)
    fig, axes = plt.subplots(len(parameters), 1, figsize=(10, 2.5 * len(parameters)), squeeze=False)
    for ax, param in zip(axes[:, 0], parameters):
        ranks = stats.rankdata(draws_df[param].to_numpy())
        edges = np.linspace(0, len(ranks), bins + 1)
        for chain in sorted(draws_df["chain"].unique()):
            counts, _ = np.histogram(ranks[(draws_df["chain"] == chain).to_numpy()], bins=edges)
            ax.step(edges[:-1], counts, where="post", label="chain_%s" % chain)
        ax.set_title("Trank plot for '%s'" % param)
        ax.legend(loc="upper right")
    fig.tight_layout()
    return _finish(fig, show)


def plot_autocorrelation(draws_df, param, chains=None, lags=40, show=False):
    draws_df = _with_chain(draws_df)
    chains = chains if chains else sorted(draws_df["chain"].unique())
    fig, axes = plt.subplots(len(chains), 1, figsize=(9, 3 * len(chains)), squeeze=False)
    for ax, chain in zip(axes[:, 0], chains):
        data = draws_df.loc[draws_df["chain"] == chain, param].to_numpy()
        plot_acf(data, ax=ax, lags=min(lags, len(data) - 1),
                 title="Sample autocorrelation for '%s' from 'chain_%s'" % (param, chain))
    fig.tight_layout()
    return _finish(fig, show)


def plot_joint_distribution(draws_df, parameters=None, show=False):
    """Seaborn joint plot per pair of parameters, coloured by chain. Returns the list of grids."""
    draws_df = _with_chain(draws_df)
    parameters = parameters if parameters else parameter_columns(draws_df)
    draws_df = draws_df.assign(chain=draws_df["chain"].map("chain_{}".format))
    grids = []
    for param1, param2 in itertools.combinations(parameters, 2):
        grid = sns.jointplot(data=draws_df, x=param1, y=param2, hue="chain", palette="tab10")
        grid.figure.suptitle(f'{param1} Vs. {param2}')
        grids.append(grid)
        if show:
            plt.show()
    return grids


def plot_posterior_density(samples_dict, title="Posterior distribution", show=False):
    """
    Input
    -------
    samples_dict: dict of label vs array of samples, example {"p": draws_df["p"]}

    Output
    -------
    plotly figure overlaying a density-normalised histogram and a kde curve per entry.
    """
    samples_df = pd.concat([pd.DataFrame({"parameters": label, "values": np.asarray(values, dtype=float)})
                            for label, values in samples_dict.items()], ignore_index=True)
    fig = px.histogram(samples_df, x="values", color="parameters", histnorm="probability density",
                       barmode="overlay", opacity=0.5, nbins=50)
    for label, values in samples_dict.items():
        values = np.asarray(values, dtype=float)
        x_seq = np.linspace(values.min(), values.max(), 200)
        fig.add_scatter(x=x_seq, y=stats.gaussian_kde(values)(x_seq), mode="lines", name="%s kde" % label)
    fig.update_layout(title=title, xaxis_title="parameter values", yaxis_title="density", legend_title="parameters")
    return _finish(fig, show)


def plot_grid_posterior(grid_df, title=None, show=False):
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(grid_df["p_grid"], grid_df["posterior"], marker="o")
    ax.set_xlabel("probability of water")
    ax.set_ylabel("posterior probability")
    ax.set_title(title if title else "%s points" % len(grid_df))
    return _finish(fig, show)


def plot_interval_band(x, samples_matrix, observed=None, prob=0.89, xlabel="x", ylabel="y", show=False):
    """
    Input
    -------
    x: grid of predictor values, shape (K,)
    samples_matrix: simulated means or outcomes, shape (num_draws, K)
    observed: optional (x, y) pair of raw data to scatter underneath

    Output
    -------
    matplotlib figure with the posterior mean line and its ``prob`` percentile band.
    """
    samples_matrix = np.asarray(samples_matrix, dtype=float)
    lower, upper = np.quantile(samples_matrix, [(1 - prob) / 2, 1 - (1 - prob) / 2], axis=0)
    fig, ax = plt.subplots(figsize=(7, 4))
    if observed is not None:
        ax.scatter(*observed, alpha=0.6, color="tab:blue")
    ax.plot(x, samples_matrix.mean(axis=0), color="black")
    ax.fill_between(x, lower, upper, color="grey", alpha=0.4)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    return _finish(fig, show)


def plot_observed_vs_simulated(observed, simulated, labels=None, title="Observed vs simulated", show=False):
    """
    Plotly box plot of simulated outcomes per case with the observed value marked.

    simulated is shaped (num_draws, num_cases).
    """
    simulated = np.asarray(simulated, dtype=float)
    labels = labels if labels is not None else ["case_%s" % (ind + 1) for ind in range(simulated.shape[1])]
    sim_df = pd.DataFrame(simulated, columns=labels).melt(var_name="case", value_name="values")
    fig = px.box(sim_df, x="case", y="values", points=False)
    fig.add_scatter(x=labels, y=np.asarray(observed, dtype=float), mode="markers", name="observed",
                    marker_color="black", marker_size=9)
    fig.update_layout(title=title, xaxis_title="case", yaxis_title="value")
    return _finish(fig, show)
