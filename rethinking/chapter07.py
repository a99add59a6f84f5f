import numpy as np
import pandas as pd
import pyro
import pyro.distributions as dist
import torch

from . import approximation, datasets, summary
from .models import ModelSpec, register


class base(object):
    def __init__(self):
        pass

    @staticmethod
    def load_data():
        """
        Output
        --------
        dict of float tensors: speed & dist_obs for the 50 cars.
        """
        cars_df = datasets.load_data("cars")
        return {"speed": torch.tensor(cars_df["speed"].to_numpy(dtype=float), dtype=torch.float),
                "dist_obs": torch.tensor(cars_df["dist"].to_numpy(dtype=float), dtype=torch.float)}

    @staticmethod
    def CarsModel(speed, dist_obs=None):
        """
        Implements model: {
                dist ~ normal(mu, sigma);
                mu = a + b * speed;
                a ~ normal(0, 100);
                b ~ normal(0, 10);
                sigma ~ exponential(1);}
        """
        a = pyro.sample("a", dist.Normal(0., 100.))
        b = pyro.sample("b", dist.Normal(0., 10.))
        sigma = pyro.sample("sigma", dist.Exponential(1.))
        with pyro.plate("data", len(speed)):
            pyro.sample("obs", dist.Normal(a + b * speed, sigma), obs=dist_obs)

    @staticmethod
    def CarsQuadraticModel(speed, dist_obs=None):
        """
        Implements model: {
                dist ~ normal(mu, sigma);
                mu = a + b * speed + b2 * speed^2;
                a ~ normal(0, 100);
                b ~ normal(0, 10);
                b2 ~ normal(0, 1);
                sigma ~ exponential(1);}
        """
        a = pyro.sample("a", dist.Normal(0., 100.))
        b = pyro.sample("b", dist.Normal(0., 10.))
        b2 = pyro.sample("b2", dist.Normal(0., 1.))
        sigma = pyro.sample("sigma", dist.Exponential(1.))
        with pyro.plate("data", len(speed)):
            pyro.sample("obs", dist.Normal(a + b * speed + b2 * speed ** 2, sigma), obs=dist_obs)

    @staticmethod
    def quap_samples(spec, data, size=1000, seed=None):
        """Samples from the quadratic approximation of ``spec``'s posterior, as a draws table."""
        quap = approximation.quadratic_approximation(spec, **data)
        return quap.sample(size=size, seed=seed)

    @staticmethod
    def waic_by_hand(spec, draws_df, data):
        """
        Walks through WAIC one observation at a time.

        Output
        --------
        (pointwise dataframe with lppd, pWAIC & WAIC per car, series of the totals
        WAIC, lppd, pWAIC & std_err).
        """
        log_lik = summary.log_likelihood_matrix(spec, draws_df, **data)
        lppd = summary.lppd(log_lik).numpy()
        pwaic = log_lik.var(dim=0).numpy()
        waic_vec = -2 * (lppd - pwaic)
        pointwise_df = pd.DataFrame({"lppd": lppd, "pWAIC": pwaic, "WAIC": waic_vec})
        totals = pd.Series({"WAIC": waic_vec.sum(), "lppd": lppd.sum(), "pWAIC": pwaic.sum(),
                            "std_err": np.sqrt(len(waic_vec) * np.var(waic_vec, ddof=1))})
        return pointwise_df, totals

    @staticmethod
    def compare_models(data, draws_by_model):
        """
        Input
        -------
        data: output of load_data
        draws_by_model: dict of ModelSpec vs draws table

        Output
        --------
        comparison dataframe (see summary.compare) indexed by model name.
        """
        return summary.compare(**{spec.name: summary.waic(spec, draws_df, **data)
                                  for spec, draws_df in draws_by_model.items()})


cars_speed = register(ModelSpec("cars_speed", """
    dist ~ normal(mu, sigma);
    mu = a + b * speed;
    a ~ normal(0, 100);
    b ~ normal(0, 10);
    sigma ~ exponential(1);
""", base.CarsModel, parameters=["a", "b", "sigma"]))

cars_speed_quadratic = register(ModelSpec("cars_speed_quadratic", """
    dist ~ normal(mu, sigma);
    mu = a + b * speed + b2 * speed^2;
    a ~ normal(0, 100);
    b ~ normal(0, 10);
    b2 ~ normal(0, 1);
    sigma ~ exponential(1);
""", base.CarsQuadraticModel, parameters=["a", "b", "b2", "sigma"]))
