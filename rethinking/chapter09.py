import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pyro
import pyro.distributions as dist
import torch

from . import approximation, diagnostics, plots, summary
from .models import ModelSpec, register


class base(object):
    def __init__(self):
        pass

    @staticmethod
    def king_markov_visits(num_weeks=100000, num_islands=10, seed=None):
        """
        Output
        --------
        (positions array, dataframe indexed by island with observed visit
        frequency & the frequency proportional to population).
        """
        positions = approximation.king_markov(num_weeks=num_weeks, num_islands=num_islands, seed=seed)
        islands = np.arange(1, num_islands + 1)
        visits = np.bincount(positions, minlength=num_islands + 1)[1:]
        visits_df = pd.DataFrame({"visits": visits, "frequency": visits / num_weeks,
                                  "expected": islands / islands.sum()},
                                 index=pd.Index(islands, name="island"))
        return positions, visits_df

    @staticmethod
    def plot_king_markov(positions, visits_df, weeks_shown=100, show=False):
        fig, (ax_path, ax_visits) = plt.subplots(1, 2, figsize=(11, 4))
        ax_path.plot(np.arange(1, weeks_shown + 1), positions[:weeks_shown], marker="o", markersize=3)
        ax_path.set_xlabel("week")
        ax_path.set_ylabel("island")
        ax_visits.bar(visits_df.index, visits_df["visits"])
        ax_visits.set_xlabel("island")
        ax_visits.set_ylabel("number of weeks")
        if show:
            plt.show()
        return fig

    @staticmethod
    def two_points():
        return {"y": torch.tensor([-1., 1.])}

    @staticmethod
    def WildChainModel(y=None, num_obs=2):
        """
        Implements model: {
                y ~ normal(mu, sigma);
                mu = alpha;
                alpha ~ normal(0, 1000);
                sigma ~ exponential(0.0001);}
        """
        alpha = pyro.sample("alpha", dist.Normal(0., 1000.))
        sigma = pyro.sample("sigma", dist.Exponential(0.0001))
        with pyro.plate("data", len(y) if y is not None else num_obs):
            pyro.sample("obs", dist.Normal(alpha, sigma), obs=y)

    @staticmethod
    def TamedChainModel(y=None, num_obs=2):
        """
        Implements model: {
                y ~ normal(mu, sigma);
                mu = alpha;
                alpha ~ normal(1, 10);
                sigma ~ exponential(1);}
        """
        alpha = pyro.sample("alpha", dist.Normal(1., 10.))
        sigma = pyro.sample("sigma", dist.Exponential(1.))
        with pyro.plate("data", len(y) if y is not None else num_obs):
            pyro.sample("obs", dist.Normal(alpha, sigma), obs=y)

    @staticmethod
    def simulate_gaussian(num_obs=100, seed=41):
        rng = np.random.default_rng(seed)
        return {"y": torch.tensor(rng.normal(0., 1., size=num_obs), dtype=torch.float)}

    @staticmethod
    def NonIdentifiableModel(y=None, num_obs=100, scale=1000.):
        """
        Input
        -------
        scale: prior scale of a1 & a2, 1000 for the flat version, 10 for the regularised one

        Implements model: {
                y ~ normal(mu, sigma);
                mu = a1 + a2;
                a1 ~ normal(0, scale);
                a2 ~ normal(0, scale);
                sigma ~ exponential(1);}
        """
        a1 = pyro.sample("a1", dist.Normal(0., scale))
        a2 = pyro.sample("a2", dist.Normal(0., scale))
        sigma = pyro.sample("sigma", dist.Exponential(1.))
        with pyro.plate("data", len(y) if y is not None else num_obs):
            pyro.sample("obs", dist.Normal(a1 + a2, sigma), obs=y)

    @staticmethod
    def RegularisedNonIdentifiableModel(y=None, num_obs=100):
        return base.NonIdentifiableModel(y=y, num_obs=num_obs, scale=10.)

    @staticmethod
    def chain_report(draws_df, diagnostics_df=None, show=False):
        """
        Input
        -------
        draws_df: posterior-draws dataframe with at least two chains
        diagnostics_df: optional per-chain Pyro diagnostics, as returned by ``fit(..., diagnostics=True)``
        show: draw trace, trank, autocorrelation & joint plots

        Output
        --------
        precis dataframe with the Gelman-Rubin statistic computed chain-by-chain.
        The per-chain summary & Pyro's diagnostics are printed alongside.
        """
        precis_df = summary.precis(draws_df)
        matrix = diagnostics.chain_matrix(draws_df)
        grubin = diagnostics.compute_grubin({param: np.stack(list(matrix.loc[param])) for param in matrix.index})
        precis_df["grubin"] = pd.Series(grubin)
        print(precis_df.round(3))
        print(summary.summary_stats_df(matrix, ["mean", "std"]).round(3))
        if diagnostics_df is not None:
            print(diagnostics_df["metric_values"].unstack("metric").round(3))
            divergences = diagnostics_df.groupby("chain")["divergences"].first()
            print("divergences per chain: %s" % {chain: int(count) for chain, count in divergences.items()})
        if show:
            plots.plot_chains(draws_df, show=True)
            plots.trace_rank_plot(draws_df, show=True)
            for param in matrix.index:
                plots.plot_autocorrelation(draws_df, param, show=True)
            plots.plot_joint_distribution(draws_df, show=True)
        return precis_df

    @staticmethod
    def thinned_grubin(draws_df, thin=5):
        """
        Keeps every ``thin``-th draw of every chain & recomputes Gelman-Rubin on
        what is left, to check whether autocorrelation is what inflates it.

        Returns dictionary of parameter vs Gelman-Rubin statistic.
        """
        hmc_sample_chains = diagnostics.sample_chains(draws_df)
        thining_dict = {chain: {param: thin for param in params_dict}
                        for chain, params_dict in hmc_sample_chains.items()}
        return diagnostics.gelman_rubin_stats(diagnostics.prune_hmc_samples(hmc_sample_chains, thining_dict))


wild_chain = register(ModelSpec("m9_2_wild_chain", """
    y ~ normal(mu, sigma);
    mu = alpha;
    alpha ~ normal(0, 1000);
    sigma ~ exponential(0.0001);
""", base.WildChainModel, parameters=["alpha", "sigma"]))

tamed_chain = register(ModelSpec("m9_3_tamed_chain", """
    y ~ normal(mu, sigma);
    mu = alpha;
    alpha ~ normal(1, 10);
    sigma ~ exponential(1);
""", base.TamedChainModel, parameters=["alpha", "sigma"]))

non_identifiable = register(ModelSpec("m9_4_non_identifiable", """
    y ~ normal(mu, sigma);
    mu = a1 + a2;
    a1 ~ normal(0, 1000);
    a2 ~ normal(0, 1000);
    sigma ~ exponential(1);
""", base.NonIdentifiableModel, parameters=["a1", "a2", "sigma"]))

non_identifiable_regularised = register(ModelSpec("m9_5_non_identifiable", """
    y ~ normal(mu, sigma);
    mu = a1 + a2;
    a1 ~ normal(0, 10);
    a2 ~ normal(0, 10);
    sigma ~ exponential(1);
""", base.RegularisedNonIdentifiableModel, parameters=["a1", "a2", "sigma"]))
