import numpy as np
import pandas as pd
import pyro
import pyro.distributions as dist
import torch
from scipy import stats

from . import approximation, plots
from .datasets import globe_counts
from .models import ModelSpec, register


class base(object):
    def __init__(self):
        pass

    @staticmethod
    def load_data():
        """
        Output
        --------
        dict with W (count of water) & N (total tosses) as float tensors, the globe
        tossing data W L W W W L W L W.
        """
        W, N = globe_counts()
        return {"W": torch.tensor(float(W)), "N": torch.tensor(float(N))}

    @staticmethod
    def GlobeModel(N, W=None):
        """
        Input
        -------
        N: tensor holding the number of tosses
        W: tensor holding the number of water outcomes, None to simulate

        Output
        --------
        Implements model: {
                W ~ binomial(N, p);
                p ~ uniform(0, 1);}
        """
        p = pyro.sample("p", dist.Uniform(0., 1.))
        pyro.sample("obs", dist.Binomial(total_count=N, probs=p), obs=W)

    @staticmethod
    def prior(name):
        """Priors over the proportion of water: 'flat', 'step' or 'peaked'."""
        priors = {"flat": lambda p_grid: np.ones_like(p_grid),
                  "step": lambda p_grid: np.where(p_grid < 0.5, 0., 1.),
                  "peaked": lambda p_grid: np.exp(-5 * np.abs(p_grid - 0.5))}
        if name not in priors:
            raise ValueError("prior must be one of %s, got '%s'" % (sorted(priors), name))
        return priors[name]

    @staticmethod
    def grid_posteriors(W=6, N=9, grid_sizes=(5, 20), priors=("flat", "step", "peaked"), show=False):
        """
        Grid-approximates the globe posterior for every combination of grid size & prior.

        Returns dict of (grid_size, prior name) vs grid dataframe.
        """
        grids = {}
        for grid_size in grid_sizes:
            for prior_name in priors:
                grid_df = approximation.globe_grid(W, N, grid_size=grid_size, prior=base.prior(prior_name))
                grids[(grid_size, prior_name)] = grid_df
                if show:
                    plots.plot_grid_posterior(grid_df, title="%s points, %s prior" % (grid_size, prior_name), show=True)
        return grids

    @staticmethod
    def quap_vs_exact(W=6, N=9):
        """
        Compares the quadratic approximation of p with the exact Beta(W+1, N-W+1)
        posterior implied by the flat prior.
        """
        quap = approximation.quadratic_approximation(globe_binomial, N=torch.tensor(float(N)),
                                                     W=torch.tensor(float(W)))
        exact = stats.beta(W + 1, N - W + 1)
        return pd.DataFrame({"mean": [quap.mean["p"], exact.mean()],
                             "sd": [quap.sd["p"], exact.std()],
                             "mode": [quap.mean["p"], W / N]},
                            index=pd.Index(["quadratic", "exact"], name="method"))

    @staticmethod
    def metropolis_vs_exact(n_samples=1000, W=6, L=3, seed=None, show=False):
        """
        Runs the toy Metropolis chain and returns its samples next to draws from the
        exact posterior, with a density plot when ``show`` is set.
        """
        samples = approximation.toy_metropolis_globe(n_samples=n_samples, W=W, L=L, seed=seed)
        exact = stats.beta(W + 1, L + 1).rvs(size=n_samples, random_state=seed)
        if show:
            plots.plot_posterior_density({"metropolis": samples, "exact": exact},
                                         title="Toy Metropolis vs exact posterior of p", show=True)
        return samples, exact


globe_binomial = register(ModelSpec("globe_binomial", """
    W ~ binomial(N, p);
    p ~ uniform(0, 1);
""", base.GlobeModel, parameters=["p"]))
