"""Chain-level diagnostics: thinning, Gelman-Rubin and Pyro's per-chain metrics."""
import itertools
from collections import defaultdict

import numpy as np
import pandas as pd

from .sampling import _flat_names, parameter_columns


def chain_matrix(draws_df, parameters=None):
    """
    Input
    -------
    draws_df: posterior-draws dataframe with a ``chain`` column

    Output
    --------
    dataframe with parameter names across rows, ``chain_<n>`` across columns and
    the array of that chain's samples in each cell.
    """
    parameters = parameters if parameters else parameter_columns(draws_df)
    columns = {}
    for chain, group in draws_df.groupby("chain"):
        columns["chain_%s" % chain] = pd.Series({param: group[param].to_numpy() for param in parameters})
    return pd.DataFrame(columns).loc[parameters]


def sample_chains(draws_df, parameters=None):
    """
    Inverse of the draws table for chain-level tools: {"chain_<n>": {param: array}},
    the layout get_hmc_n_chains returns and prune_hmc_samples expects.
    """
    parameters = parameters if parameters else parameter_columns(draws_df)
    return {"chain_%s" % chain: {param: group[param].to_numpy() for param in parameters}
            for chain, group in draws_df.groupby("chain")}


def prune_hmc_samples(hmc_sample_chains, thining_dict):
    """
    Input
    -------
    hmc_sample_chains: a dictionary with chain names as keys & dictionary of parameter vs sampled values as values
    thining_dict: a dictionary with chain names as keys & dictionary of parameter vs thining factor as values
                  example:  {"chain_0": {"alpha": 6, "beta": 3}, "chain_1": {"alpha": 7, "beta": 3}}

    Outputs
    ---------
    pruned version of hmc_sample_chains, keeping every k-th sample per the thining factors.
    """
    pruned_hmc_sample_chains = {}
    for chain, params_dict in hmc_sample_chains.items():
        pruned_hmc_sample_chains[chain] = {param: params_dict[param][::factor]
                                           for param, factor in thining_dict[chain].items()}

        original_sample_shape_dict = {param: values.shape for param, values in params_dict.items()}
        pruned_sample_shape_dict = {param: values.shape for param, values in pruned_hmc_sample_chains[chain].items()}

        print("%s\nOriginal sample counts for '%s' parameters: %s" % ("-" * 25, chain, original_sample_shape_dict))
        print("Thining factors for '%s' parameters: %s" % (chain, thining_dict[chain]))
        print("Post thining sample counts for '%s' parameters: %s\n" % (chain, pruned_sample_shape_dict))

    return pruned_hmc_sample_chains


def compute_grubin(param_chains_sample_dict):
    """
    Input
    -------
    param_chains_sample_dict: dictionary with parameter names as keys and a (chains, samples)
                              array of equal-length chains as values.

    Output
    -------
    dictionary of parameter vs Gelman-Rubin statistic (R-hat).
    """
    grubin_dict = {}
    for param, chain_list in param_chains_sample_dict.items():
        chain_list = np.asarray(chain_list, dtype=float)
        L = float(chain_list.shape[1])
        num_chains_J = float(chain_list.shape[0])
        chain_mean = np.mean(chain_list, axis=1).reshape((-1, 1))
        grand_chain_mean = np.mean(chain_mean)

        B = L * np.reciprocal(num_chains_J - 1) * np.sum(np.square(chain_mean - grand_chain_mean))
        # within-chain variance, averaged over chains
        W = np.mean(np.reciprocal(L - 1) * np.sum(np.square(chain_list - chain_mean), axis=1))

        grubin = round(((L - 1) * np.reciprocal(L) * W + np.reciprocal(L) * B) / W, 4)
        grubin_dict[param] = grubin
        print("Gelman-Rubin for '%s' over all chains is: %s" % (param, grubin))

    return grubin_dict


def gelman_rubin_stats(pruned_hmc_sample_chains):
    """
    Input
    -------
    pruned_hmc_sample_chains: output of prune_hmc_samples (or get_hmc_n_chains);
                              chains are truncated to the shortest before comparing.

    Output
    -------
    dictionary of parameter vs Gelman-Rubin statistic.
    """
    param_chain_list = itertools.chain.from_iterable(
        ((param, chain) for param in params_dict) for chain, params_dict in pruned_hmc_sample_chains.items())

    chains_per_param = defaultdict(list)
    for param, chain in param_chain_list:
        chains_per_param[param].append(chain)

    param_chains_sample_dict = {}
    for param, chain_list in chains_per_param.items():
        L = min(len(pruned_hmc_sample_chains[chain][param]) for chain in chain_list)
        param_chains_sample_dict[param] = np.stack(
            [np.ravel(pruned_hmc_sample_chains[chain][param][:L]) for chain in chain_list])

    return compute_grubin(param_chains_sample_dict)


def get_chain_diagnostics(hmc_chain_diagnostics):
    """
    Input
    -------
    hmc_chain_diagnostics: dictionary holding chain diagnostic metric values from hmc sampling
                           (ex: {'chain_0': {'alpha': OrderedDict([('n_eff', tensor(320.6)), ('r_hat', tensor(0.99))]),
                           'divergences': {'chain 0': []}, 'acceptance rate': {'chain 0': 0.986}}}).

    Outputs
    ---------
    pandas dataframe indexed by (parameters, chain, metric) holding the diagnostic values.
    Vector sites are flattened to ``name[i]`` rows, as in the posterior-draws table.
    """
    frames = []
    for chain, diag_di in hmc_chain_diagnostics.items():
        parameters = sorted(set(diag_di.keys()) - {"acceptance rate", "divergences"})
        diag_params = list(diag_di.get(parameters[0]).keys())

        diagnostics_dict = {}
        for param in parameters:
            metric_values = [np.asarray(diag_di[param][metric], dtype=float) for metric in diag_params]
            for position, column in enumerate(_flat_names(param, metric_values[0].shape)):
                diagnostics_dict[column] = [float(np.ravel(values)[position]) for values in metric_values]
        diagnostics_dict.update({"metric": diag_params, "chain": chain,
                                 "acceptance rate": diag_di.get("acceptance rate", {}).get("chain 0")})

        diagnostics_dict_df = pd.DataFrame(diagnostics_dict)
        diagnostics_dict_df["divergences"] = len(diag_di.get("divergences", {}).get("chain 0", []))
        frames.append(diagnostics_dict_df)

    diagnostics_df = pd.concat(frames, axis=0)
    diagnostics_df = diagnostics_df.melt(id_vars=["chain", "metric", "acceptance rate", "divergences"],
                                         var_name="parameters", value_name="metric_values")
    return diagnostics_df.set_index(["parameters", "chain", "metric"])
