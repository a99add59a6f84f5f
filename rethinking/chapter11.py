import numpy as np
import pandas as pd
import pyro
import pyro.distributions as dist
import torch
from scipy.special import expit

from . import datasets, summary
from .models import ModelSpec, register
from .sampling import samples_from_draws


class base(object):
    def __init__(self):
        pass

    @staticmethod
    def load_ucbadmit():
        return datasets.load_data("UCBadmit")

    @staticmethod
    def transform_ucbadmit(ucb_df):
        """
        Input
        -------
        ucb_df: UCBadmit dataframe, one row per department & gender

        Outputs
        ---------
        dict of tensors: gid (0 male, 1 female), dept_id (0 for A .. 5 for F),
        applications & admit counts.
        """
        dept_id, _ = datasets.to_index(ucb_df["dept"])
        return {"gid": torch.tensor((ucb_df["applicant.gender"] == "female").to_numpy(dtype=int), dtype=torch.long),
                "dept_id": torch.tensor(dept_id, dtype=torch.long),
                "applications": torch.tensor(ucb_df["applications"].to_numpy(dtype=float), dtype=torch.float),
                "admit": torch.tensor(ucb_df["admit"].to_numpy(dtype=float), dtype=torch.float)}

    @staticmethod
    def GenderModel(gid, applications, admit=None):
        """
        Input
        -------
        gid: long tensor holding gender index per row, 0 male & 1 female
        applications: tensor holding the number of applications per row
        admit: tensor holding the admissions per row, None to simulate

        Output
        --------
        Implements model: {
                admit ~ binomial(applications, p);
                logit(p) = a[gid];
                a[gid] ~ normal(0, 1.5);}
        """
        with pyro.plate("gender", 2):
            a = pyro.sample("a", dist.Normal(0., 1.5))
        with pyro.plate("data", len(gid)):
            pyro.sample("obs", dist.Binomial(total_count=applications, logits=a[gid]), obs=admit)

    @staticmethod
    def GenderDeptModel(gid, dept_id, applications, admit=None):
        """
        Implements model: {
                admit ~ binomial(applications, p);
                logit(p) = a[gid] + delta[dept_id];
                a[gid] ~ normal(0, 1.5);
                delta[dept_id] ~ normal(0, 1.5);}
        """
        with pyro.plate("gender", 2):
            a = pyro.sample("a", dist.Normal(0., 1.5))
        with pyro.plate("dept", 6):
            delta = pyro.sample("delta", dist.Normal(0., 1.5))
        with pyro.plate("data", len(gid)):
            pyro.sample("obs", dist.Binomial(total_count=applications, logits=a[gid] + delta[dept_id]), obs=admit)

    @staticmethod
    def gender_contrasts(draws_df, prob=0.89):
        """
        Difference between men & women on the log-odds (diff_a) and on the
        probability scale (diff_p), summarised with precis.
        """
        a = samples_from_draws(draws_df)["a"].numpy()
        contrast_df = pd.DataFrame({"diff_a": a[:, 0] - a[:, 1], "diff_p": expit(a[:, 0]) - expit(a[:, 1])})
        contrast_df.insert(0, "chain", draws_df["chain"].to_numpy() if "chain" in draws_df else 1)
        return summary.precis(contrast_df, prob=prob)

    @staticmethod
    def admission_rates(ucb_df):
        rates = ucb_df.assign(rate=ucb_df["admit"] / ucb_df["applications"])
        return rates.pivot(index="dept", columns="applicant.gender", values="rate")

    @staticmethod
    def load_kline():
        return datasets.load_data("Kline")

    @staticmethod
    def transform_kline(kline_df):
        """
        Outputs
        ---------
        dict of tensors: P (standardized log population), cid (0 low contact,
        1 high contact) & total_tools.
        """
        return {"P": torch.tensor(datasets.standardize(np.log(kline_df["population"].to_numpy(dtype=float))),
                                  dtype=torch.float),
                "cid": torch.tensor((kline_df["contact"] == "high").to_numpy(dtype=int), dtype=torch.long),
                "total_tools": torch.tensor(kline_df["total_tools"].to_numpy(dtype=float), dtype=torch.float)}

    @staticmethod
    def KlineInterceptModel(P, total_tools=None):
        """
        Implements model: {
                total_tools ~ poisson(lambda);
                log(lambda) = a;
                a ~ normal(3, 0.5);}
        """
        a = pyro.sample("a", dist.Normal(3., 0.5))
        with pyro.plate("data", len(P)):
            pyro.sample("obs", dist.Poisson(torch.exp(a).expand([len(P)])), obs=total_tools)

    @staticmethod
    def KlineInteractionModel(P, cid, total_tools=None):
        """
        Implements model: {
                total_tools ~ poisson(lambda);
                log(lambda) = a[cid] + b[cid] * P;
                a[cid] ~ normal(3, 0.5);
                b[cid] ~ normal(0, 0.2);}
        """
        with pyro.plate("contact", 2):
            a = pyro.sample("a", dist.Normal(3., 0.5))
            b = pyro.sample("b", dist.Normal(0., 0.2))
        with pyro.plate("data", len(P)):
            pyro.sample("obs", dist.Poisson(torch.exp(a[cid] + b[cid] * P)), obs=total_tools)

    @staticmethod
    def expected_tools(draws_df, P_seq, prob=0.89):
        """
        Posterior mean & percentile interval of lambda along P_seq for each contact level.

        Returns dataframe with P, contact, mean, lower & upper columns.
        """
        samples = samples_from_draws(draws_df)
        a, b = samples["a"].numpy(), samples["b"].numpy()
        P_seq = np.asarray(P_seq, dtype=float)
        frames = []
        for cid, contact in enumerate(["low", "high"]):
            lam = np.exp(a[:, [cid]] + b[:, [cid]] * P_seq.reshape((1, -1)))
            lower, upper = np.quantile(lam, [(1 - prob) / 2, 1 - (1 - prob) / 2], axis=0)
            frames.append(pd.DataFrame({"P": P_seq, "contact": contact, "mean": lam.mean(axis=0),
                                        "lower": lower, "upper": upper}))
        return pd.concat(frames, ignore_index=True)


ucb_gender = register(ModelSpec("m11_7_ucb_gender", """
    admit ~ binomial(applications, p);
    logit(p) = a[gid];
    a[gid] ~ normal(0, 1.5);
""", base.GenderModel, parameters=["a"]))

ucb_gender_dept = register(ModelSpec("m11_8_ucb_gender_dept", """
    admit ~ binomial(applications, p);
    logit(p) = a[gid] + delta[dept_id];
    a[gid] ~ normal(0, 1.5);
    delta[dept_id] ~ normal(0, 1.5);
""", base.GenderDeptModel, parameters=["a", "delta"]))

kline_intercept = register(ModelSpec("m11_9_kline_intercept", """
    total_tools ~ poisson(lambda);
    log(lambda) = a;
    a ~ normal(3, 0.5);
""", base.KlineInterceptModel, parameters=["a"]))

kline_interaction = register(ModelSpec("m11_10_kline_interaction", """
    total_tools ~ poisson(lambda);
    log(lambda) = a[cid] + b[cid] * P;
    a[cid] ~ normal(3, 0.5);
    b[cid] ~ normal(0, 0.2);
""", base.KlineInteractionModel, parameters=["a", "b"]))
