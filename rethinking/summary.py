"""Posterior summaries: precis tables, intervals and WAIC."""
import math

import numpy as np
import pandas as pd
import torch
from pyro import poutine
from pyro.ops import stats

from .sampling import parameter_columns, samples_from_draws


def _interval_labels(prob):
    lower, upper = (1 - prob) / 2, 1 - (1 - prob) / 2
    return lower, upper, "%g%%" % (100 * lower), "%g%%" % (100 * upper)


def _chain_tensor(draws_df, column):
    if "chain" not in draws_df.columns:
        return torch.tensor(draws_df[column].to_numpy(dtype=float)).unsqueeze(0)
    chains = [group[column].to_numpy(dtype=float) for _, group in draws_df.groupby("chain")]
    length = min(map(len, chains))
    return torch.tensor(np.stack([chain[:length] for chain in chains]))


def precis(draws_df, prob=0.89, parameters=None):
    """
    Input
    -------
    draws_df: posterior-draws dataframe, ``chain`` column optional
    prob: mass of the central percentile interval, default 0.89
    parameters: subset of parameter columns, default all

    Output
    --------
    dataframe indexed by parameter with mean, sd, interval bounds, n_eff & r_hat.
    """
    lower, upper, lower_label, upper_label = _interval_labels(prob)
    parameters = parameters if parameters else parameter_columns(draws_df)
    records = []
    for param in parameters:
        values = draws_df[param]
        chains = _chain_tensor(draws_df, param)
        records.append({"parameter": param, "mean": values.mean(), "sd": values.std(),
                        lower_label: values.quantile(lower), upper_label: values.quantile(upper),
                        "n_eff": stats.effective_sample_size(chains, chain_dim=0, sample_dim=1).item(),
                        "r_hat": stats.split_gelman_rubin(chains, chain_dim=0, sample_dim=1).item()})
    return pd.DataFrame(records).set_index("parameter")


def percentile_interval(samples, prob=0.89):
    """Central interval holding ``prob`` of the samples, as (lower, upper)."""
    interval = stats.pi(torch.as_tensor(np.asarray(samples, dtype=float)), prob, dim=0)
    return tuple(interval.numpy().tolist())


def hpdi(samples, prob=0.89):
    """Narrowest interval holding ``prob`` of the samples, as (lower, upper)."""
    interval = stats.hpdi(torch.as_tensor(np.asarray(samples, dtype=float)), prob, dim=0)
    return tuple(interval.numpy().tolist())


def summary_stats_df(param_chain_matrix_df, key_metrics):
    """
    Input
    -------
    param_chain_matrix_df: parameters across rows, chains across columns, sample arrays as cells
                           (see diagnostics.chain_matrix)
    key_metrics: any of "mean", "std", "25%", "50%", "75%"

    Output
    --------
    dataframe indexed by (metric, parameter) with one column per chain.
    """
    all_metric_func_map = lambda metric, vals: {"mean": np.mean(vals), "std": np.std(vals),
                                                "25%": np.quantile(vals, 0.25),
                                                "50%": np.quantile(vals, 0.50),
                                                "75%": np.quantile(vals, 0.75)}.get(metric)
    frames = []
    for metric in key_metrics:
        final_di = {}
        for column in param_chain_matrix_df.columns:
            final_di[column] = dict(param_chain_matrix_df[column].apply(lambda x: all_metric_func_map(metric, x)))
        metric_df_ = pd.DataFrame(final_di)
        metric_df_["metric"] = metric
        frames.append(metric_df_)

    summary_df = pd.concat(frames, axis=0)
    summary_df.index.name = "parameter"
    summary_df.reset_index(inplace=True)
    summary_df.set_index(["metric", "parameter"], inplace=True)
    return summary_df


def log_likelihood_matrix(spec, draws_df, obs_site=None, **data):
    """
    Input
    -------
    spec: ModelSpec the draws came from
    draws_df: posterior draws (MCMC or quadratic approximation samples)
    obs_site: observed site name, default ``spec.obs_site``
    data: keyword arguments for the model, observations included

    Output
    --------
    tensor shaped (num_draws, num_observations) of pointwise log-likelihoods.
    """
    obs_site = obs_site if obs_site else getattr(spec, "obs_site", "obs")
    model = getattr(spec, "model", spec)
    samples = samples_from_draws(draws_df)
    num_draws = len(draws_df)

    log_lik = []
    for index in range(num_draws):
        params = {name: values[index] for name, values in samples.items()}
        trace = poutine.trace(poutine.condition(model, data=params)).get_trace(**data)
        node = trace.nodes[obs_site]
        log_lik.append(node["fn"].log_prob(node["value"]).detach().reshape(-1))
    return torch.stack(log_lik)


def lppd(log_lik):
    """Log pointwise predictive density, one value per observation."""
    log_lik = torch.as_tensor(log_lik)
    return torch.logsumexp(log_lik, dim=0) - math.log(log_lik.shape[0])


def waic(spec, draws_df, pointwise=False, **data):
    """
    Widely Applicable Information Criterion on the deviance scale,
    WAIC = -2 * (lppd - penalty), with penalty the summed pointwise variance of
    the log-likelihood across draws.

    Returns a series (WAIC, lppd, penalty, std_err), or a per-observation
    dataframe when ``pointwise`` is set.
    """
    log_lik = log_likelihood_matrix(spec, draws_df, **data)
    lppd_i = lppd(log_lik)
    penalty_i = log_lik.var(dim=0)
    waic_i = -2 * (lppd_i - penalty_i)
    if pointwise:
        return pd.DataFrame({"WAIC": waic_i.numpy(), "lppd": lppd_i.numpy(), "penalty": penalty_i.numpy()})
    num_obs = waic_i.shape[0]
    return pd.Series({"WAIC": waic_i.sum().item(), "lppd": lppd_i.sum().item(),
                      "penalty": penalty_i.sum().item(),
                      "std_err": math.sqrt(num_obs * waic_i.var().item())})


def compare(**named_waic):
    """
    Input
    -------
    named_waic: model name vs series returned by waic()

    Output
    --------
    dataframe sorted by WAIC with dWAIC (distance to the best model) & Akaike weight.
    """
    compare_df = pd.DataFrame(named_waic).T[["WAIC", "std_err", "penalty"]]
    compare_df = compare_df.sort_values("WAIC")
    compare_df["dWAIC"] = compare_df["WAIC"] - compare_df["WAIC"].min()
    relative = np.exp(-0.5 * compare_df["dWAIC"])
    compare_df["weight"] = relative / relative.sum()
    return compare_df
