import pandas as pd
import pyro
import pyro.distributions as dist
import torch
from scipy.special import logit

from . import datasets
from .models import ModelSpec, register
from .sampling import samples_from_draws


class base(object):
    def __init__(self):
        pass

    @staticmethod
    def load_data():
        """
        Output
        --------
        (UCBadmit dataframe, dict of tensors: dept_id, male (1 for male applicants),
        applications & admit).
        """
        ucb_df = datasets.load_data("UCBadmit")
        dept_id, _ = datasets.to_index(ucb_df["dept"])
        return ucb_df, {"dept_id": torch.tensor(dept_id, dtype=torch.long),
                        "male": torch.tensor((ucb_df["applicant.gender"] == "male").to_numpy(dtype=float),
                                             dtype=torch.float),
                        "applications": torch.tensor(ucb_df["applications"].to_numpy(dtype=float), dtype=torch.float),
                        "admit": torch.tensor(ucb_df["admit"].to_numpy(dtype=float), dtype=torch.float)}

    @staticmethod
    def VaryingInterceptsModel(dept_id, male, applications, admit=None, num_depts=6):
        """
        Input
        -------
        dept_id: long tensor holding department index per row
        male: tensor holding 1 for male applicant rows, 0 otherwise
        applications: tensor holding applications per row
        admit: tensor holding admissions per row, None to simulate

        Output
        --------
        Implements model: {
                admit ~ binomial(applications, p);
                logit(p) = a[dept_id] + bm * male;
                a[dept_id] ~ normal(a_bar, sigma);
                a_bar ~ normal(0, 1.5);
                bm ~ normal(0, 1);
                sigma ~ exponential(1);}
        """
        a_bar = pyro.sample("a_bar", dist.Normal(0., 1.5))
        sigma = pyro.sample("sigma", dist.Exponential(1.))
        bm = pyro.sample("bm", dist.Normal(0., 1.))
        with pyro.plate("dept", num_depts):
            a = pyro.sample("a", dist.Normal(a_bar, sigma))
        with pyro.plate("data", len(dept_id)):
            pyro.sample("obs", dist.Binomial(total_count=applications, logits=a[dept_id] + bm * male), obs=admit)

    @staticmethod
    def shrinkage(ucb_df, draws_df):
        """
        Raw log-odds of admission per department (pooled over gender) next to the
        posterior mean of the department's varying intercept and the population
        mean a_bar the intercepts are pulled towards.
        """
        pooled = ucb_df.groupby("dept")[["admit", "applications"]].sum()
        samples = samples_from_draws(draws_df)
        shrinkage_df = pd.DataFrame({"raw_logit": logit(pooled["admit"] / pooled["applications"]),
                                     "posterior_a": samples["a"].numpy().mean(axis=0)},
                                    index=pooled.index)
        shrinkage_df["a_bar"] = samples["a_bar"].numpy().mean()
        return shrinkage_df


ucb_varying_intercepts = register(ModelSpec("m13_ucb_varying_intercepts", """
    admit ~ binomial(applications, p);
    logit(p) = a[dept_id] + bm * male;
    a[dept_id] ~ normal(a_bar, sigma);
    a_bar ~ normal(0, 1.5);
    bm ~ normal(0, 1);
    sigma ~ exponential(1);
""", base.VaryingInterceptsModel, parameters=["a_bar", "sigma", "bm", "a"]))
