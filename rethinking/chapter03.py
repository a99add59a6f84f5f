import numpy as np
import pandas as pd
from scipy import stats

from . import approximation, summary


class base(object):
    def __init__(self):
        pass

    @staticmethod
    def posterior_samples(W=6, N=9, grid_size=1000, size=10000, seed=None):
        """
        Input
        -------
        W, N: water count & number of tosses
        grid_size: points in the flat-prior grid approximation
        size: number of samples drawn from the grid posterior

        Output
        --------
        (grid dataframe, samples array)
        """
        grid_df = approximation.globe_grid(W, N, grid_size=grid_size)
        return grid_df, approximation.sample_grid_posterior(grid_df, size=size, seed=seed)

    @staticmethod
    def interval_summary(samples, probs=(0.5, 0.8, 0.89)):
        """
        Output
        --------
        dataframe indexed by interval mass with percentile interval & HPDI bounds.
        """
        records = []
        for prob in probs:
            pi_lower, pi_upper = summary.percentile_interval(samples, prob)
            hpdi_lower, hpdi_upper = summary.hpdi(samples, prob)
            records.append({"prob": prob, "PI_lower": pi_lower, "PI_upper": pi_upper,
                            "HPDI_lower": hpdi_lower, "HPDI_upper": hpdi_upper})
        return pd.DataFrame(records).set_index("prob")

    @staticmethod
    def point_estimates(grid_df, samples):
        return pd.Series({"MAP": grid_df.loc[grid_df["posterior"].idxmax(), "p_grid"],
                          "mean": np.mean(samples), "median": np.median(samples)})

    @staticmethod
    def expected_loss(grid_df, loss="absolute"):
        """
        Expected loss of every candidate decision on the grid, weighting by the
        posterior. Absolute loss is minimised at the posterior median, quadratic
        loss at the posterior mean.

        Returns a series indexed by decision.
        """
        p_grid = grid_df["p_grid"].to_numpy()
        posterior = grid_df["posterior"].to_numpy()
        loss_functions = {"absolute": lambda d: np.abs(d - p_grid), "quadratic": lambda d: (d - p_grid) ** 2}
        if loss not in loss_functions:
            raise ValueError("loss must be one of %s, got '%s'" % (sorted(loss_functions), loss))
        losses = [np.sum(posterior * loss_functions[loss](decision)) for decision in p_grid]
        return pd.Series(losses, index=pd.Index(p_grid, name="decision"), name="%s_loss" % loss)

    @staticmethod
    def dummy_data(N=2, p=0.7, size=100000, seed=None):
        """
        Simulated binomial counts next to their exact probabilities.

        Returns dataframe indexed by count with 'exact' and 'simulated' frequencies.
        """
        rng = np.random.default_rng(seed)
        counts = rng.binomial(N, p, size=size)
        values = np.arange(N + 1)
        return pd.DataFrame({"exact": stats.binom.pmf(values, N, p),
                             "simulated": np.bincount(counts, minlength=N + 1) / size},
                            index=pd.Index(values, name="W"))

    @staticmethod
    def posterior_predictive(samples, N=9, seed=None):
        """Water counts in N new tosses, one per posterior sample of p."""
        rng = np.random.default_rng(seed)
        return rng.binomial(N, np.asarray(samples, dtype=float))

    @staticmethod
    def predictive_distribution(simulated, N=9):
        return pd.Series(np.bincount(np.asarray(simulated, dtype=int), minlength=N + 1) / len(simulated),
                         index=pd.Index(np.arange(N + 1), name="W"), name="frequency")
