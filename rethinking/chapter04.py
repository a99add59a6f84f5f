import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pyro
import pyro.distributions as dist
import torch

from . import datasets, plots
from .models import ModelSpec, register
from .sampling import samples_from_draws


class base(object):
    def __init__(self):
        pass

    @staticmethod
    def load_data():
        return datasets.load_data("cars")

    @staticmethod
    def transform_data(cars_df):
        """
        Input
        -------
        cars_df: cars dataframe with speed (mph) & dist (ft) columns

        Outputs
        ---------
        dict of float tensors: speed, speed_bar (mean speed), speed_s (standardized
        speed) & dist_obs (stopping distance).
        """
        speed = cars_df["speed"].to_numpy(dtype=float)
        return {"speed": torch.tensor(speed, dtype=torch.float),
                "speed_bar": torch.tensor(speed.mean(), dtype=torch.float),
                "speed_s": torch.tensor(datasets.standardize(speed), dtype=torch.float),
                "dist_obs": torch.tensor(cars_df["dist"].to_numpy(dtype=float), dtype=torch.float)}

    @staticmethod
    def linear_data(data):
        return {key: data[key] for key in ("speed", "speed_bar", "dist_obs")}

    @staticmethod
    def poly_data(data):
        return {key: data[key] for key in ("speed_s", "dist_obs")}

    @staticmethod
    def LinearModel(speed, speed_bar, dist_obs=None):
        """
        Input
        -------
        speed: tensor holding speed in mph for every car, shaped (50,)
        speed_bar: tensor holding the mean speed
        dist_obs: tensor holding the stopping distances, None to simulate

        Output
        --------
        Implements model: {
                dist ~ normal(mu, sigma);
                mu = a + b * (speed - speed_bar);
                a ~ normal(40, 20);
                b ~ lognormal(0, 1);
                sigma ~ uniform(0, 50);}
        """
        a = pyro.sample("a", dist.Normal(40., 20.))
        b = pyro.sample("b", dist.LogNormal(0., 1.))
        sigma = pyro.sample("sigma", dist.Uniform(0., 50.))
        mu = a + b * (speed - speed_bar)
        with pyro.plate("data", len(speed)):
            pyro.sample("obs", dist.Normal(mu, sigma), obs=dist_obs)

    @staticmethod
    def PolyModel(speed_s, dist_obs=None):
        """
        Input
        -------
        speed_s: tensor holding standardized speed, shaped (50,)
        dist_obs: tensor holding the stopping distances, None to simulate

        Output
        --------
        Implements model: {
                dist ~ normal(mu, sigma);
                mu = a + b1 * speed_s + b2 * speed_s^2;
                a ~ normal(40, 20);
                b1 ~ normal(0, 20);
                b2 ~ normal(0, 10);
                sigma ~ uniform(0, 50);}
        """
        a = pyro.sample("a", dist.Normal(40., 20.))
        b1 = pyro.sample("b1", dist.Normal(0., 20.))
        b2 = pyro.sample("b2", dist.Normal(0., 10.))
        sigma = pyro.sample("sigma", dist.Uniform(0., 50.))
        mu = a + b1 * speed_s + b2 * speed_s ** 2
        with pyro.plate("data", len(speed_s)):
            pyro.sample("obs", dist.Normal(mu, sigma), obs=dist_obs)

    @staticmethod
    def prior_predictive_lines(num_lines=100, b_prior="lognormal", seed=None):
        """
        Draws intercept & slope pairs from the priors of the linear model, to see
        what regression lines the model believes in before seeing the data.

        b_prior: 'lognormal' (the model's prior) or 'normal' (Normal(0, 10), which allows negative slopes).
        Returns dataframe with a & b columns.
        """
        rng = np.random.default_rng(seed)
        a = rng.normal(40, 20, size=num_lines)
        if b_prior == "lognormal":
            b = rng.lognormal(0, 1, size=num_lines)
        elif b_prior == "normal":
            b = rng.normal(0, 10, size=num_lines)
        else:
            raise ValueError("b_prior must be 'lognormal' or 'normal', got '%s'" % b_prior)
        return pd.DataFrame({"a": a, "b": b})

    @staticmethod
    def plot_prior_lines(lines_df, speed_bar, speed_range=(0, 30), show=False):
        speed_seq = np.linspace(*speed_range, 50)
        fig, ax = plt.subplots(figsize=(7, 4))
        for a, b in lines_df[["a", "b"]].itertuples(index=False):
            ax.plot(speed_seq, a + b * (speed_seq - speed_bar), color="black", alpha=0.2)
        ax.axhline(0, linestyle="--", color="tab:red")
        ax.axhline(120, linestyle=":", color="tab:red")
        ax.set_xlabel("speed")
        ax.set_ylabel("dist")
        if show:
            plt.show()
        return fig

    @staticmethod
    def link(draws_df, speed_seq, speed_bar):
        """
        Posterior distribution of mu at each speed in speed_seq.

        Returns array shaped (num_draws, len(speed_seq)).
        """
        samples = samples_from_draws(draws_df)
        a = samples["a"].numpy().reshape((-1, 1))
        b = samples["b"].numpy().reshape((-1, 1))
        return a + b * (np.asarray(speed_seq, dtype=float).reshape((1, -1)) - float(speed_bar))

    @staticmethod
    def simulate_dist(draws_df, speed_seq, speed_bar, seed=None):
        """Posterior predictive stopping distances at each speed, shaped (num_draws, len(speed_seq))."""
        rng = np.random.default_rng(seed)
        mu = base.link(draws_df, speed_seq, speed_bar)
        sigma = draws_df["sigma"].to_numpy().reshape((-1, 1))
        return rng.normal(mu, sigma)

    @staticmethod
    def plot_posterior_fit(cars_df, draws_df, speed_bar, prob=0.89, show=False):
        speed_seq = np.linspace(cars_df["speed"].min(), cars_df["speed"].max(), 30)
        fig = plots.plot_interval_band(speed_seq, base.simulate_dist(draws_df, speed_seq, speed_bar),
                                       observed=(cars_df["speed"], cars_df["dist"]), prob=prob,
                                       xlabel="speed", ylabel="dist")
        mu = base.link(draws_df, speed_seq, speed_bar)
        lower, upper = np.quantile(mu, [(1 - prob) / 2, 1 - (1 - prob) / 2], axis=0)
        fig.axes[0].fill_between(speed_seq, lower, upper, color="tab:orange", alpha=0.5)
        if show:
            fig.show()
        return fig


cars_linear = register(ModelSpec("cars_linear", """
    dist ~ normal(mu, sigma);
    mu = a + b * (speed - speed_bar);
    a ~ normal(40, 20);
    b ~ lognormal(0, 1);
    sigma ~ uniform(0, 50);
""", base.LinearModel, parameters=["a", "b", "sigma"]))

cars_poly = register(ModelSpec("cars_poly", """
    dist ~ normal(mu, sigma);
    mu = a + b1 * speed_s + b2 * speed_s^2;
    a ~ normal(40, 20);
    b1 ~ normal(0, 20);
    b2 ~ normal(0, 10);
    sigma ~ uniform(0, 50);
""", base.PolyModel, parameters=["a", "b1", "b2", "sigma"]))
