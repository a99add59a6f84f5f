"""
Fitting models with Pyro's NUTS sampler.

Draws come back as a flat posterior-draws table (one row per draw, ``chain``,
``iteration`` and ``draw`` columns plus one column per scalar parameter).
Fits are written to a CSV cache keyed on the model text, the data and the
sampler settings, so re-rendering a chapter does not re-run the sampler.
"""
import hashlib
import json
import logging
import os
import re
import time
from collections import defaultdict

import numpy as np
import pandas as pd
import pyro
import torch
from pyro.infer import MCMC, NUTS, Predictive

from . import config
from .exceptions import SamplingError


_log = logging.getLogger(__name__)

INDEX_COLUMNS = ["chain", "iteration", "draw"]
_FLAT_NAME = re.compile(r"^(?P<name>[^\[]+)\[(?P<index>[0-9,]+)\]$")


def get_hmc_n_chains(pyromodel, num_chains=4, sample_count=1000, warmup=1000, seed=1, **data):
    """
    Input
    -------
    pyromodel: Pyro model callable, receives ``data`` as keyword arguments
    num_chains: Count of MCMC chains to launch, default 4
    sample_count: count of samples kept per chain after warmup, default 1000
    warmup: count of warmup (adaptation) steps per chain, default 1000
    seed: chain ``i`` is run with rng seed ``seed + i``
    data: keyword arguments passed to ``pyromodel``

    Outputs
    ---------
    hmc_sample_chains: a dictionary with chain names as keys & dictionary of parameter vs sampled values as values
    hmc_chain_diagnostics: a dictionary with chain names as keys & dictionary of chain diagnostic metric values
    """
    hmc_sample_chains = defaultdict(dict)
    hmc_chain_diagnostics = defaultdict(dict)

    t1 = time.time()
    for idx in range(num_chains):
        pyro.set_rng_seed(seed + idx)
        nuts_kernel = NUTS(pyromodel)
        mcmc = MCMC(nuts_kernel, num_samples=sample_count, warmup_steps=warmup, disable_progbar=True)
        mcmc.run(**data)
        hmc_sample_chains["chain_{}".format(idx)] = {k: v.detach().cpu().numpy() for k, v in mcmc.get_samples().items()}
        hmc_chain_diagnostics["chain_{}".format(idx)] = mcmc.diagnostics()

    _log.info("Sampled %s chains of %s draws in %.2fs", num_chains, sample_count, time.time() - t1)
    return dict(hmc_sample_chains), dict(hmc_chain_diagnostics)


def _flat_names(name, shape):
    if not shape:
        return [name]
    return ["%s[%s]" % (name, ",".join(str(i + 1) for i in index)) for index in np.ndindex(*shape)]


def to_draws_dataframe(hmc_sample_chains, parameters=None):
    """
    Input
    -------
    hmc_sample_chains: output of get_hmc_n_chains, {"chain_0": {"a": array(S, ...), ...}, ...}
    parameters: column order for the sampled sites, the rest follow alphabetically

    Output
    --------
    posterior-draws dataframe, one row per draw. ``chain`` and ``iteration`` are
    1-based, ``draw`` runs 1..total over all chains. Vector parameters are
    flattened to ``name[i]`` columns.
    """
    frames = []
    for chain_number, chain in enumerate(hmc_sample_chains, start=1):
        params_dict = hmc_sample_chains[chain]
        columns = {}
        num_draws = None
        order = [param for param in (parameters or []) if param in params_dict]
        for param in order + sorted(set(params_dict) - set(order)):
            values = np.asarray(params_dict[param])
            num_draws = values.shape[0]
            flat = values.reshape((num_draws, -1))
            for position, column in enumerate(_flat_names(param, values.shape[1:])):
                columns[column] = flat[:, position]
        chain_df = pd.DataFrame(columns)
        chain_df.insert(0, "chain", chain_number)
        chain_df.insert(1, "iteration", np.arange(1, (num_draws or 0) + 1))
        frames.append(chain_df)

    draws_df = pd.concat(frames, axis=0, ignore_index=True)
    draws_df.insert(2, "draw", np.arange(1, len(draws_df) + 1))
    return draws_df


def parameter_columns(draws_df):
    return [column for column in draws_df.columns if column not in INDEX_COLUMNS]


def samples_from_draws(draws_df):
    """
    Inverse of the flattening done by to_draws_dataframe.

    Output
    --------
    dict of parameter name vs float tensor shaped (num_draws, *event_shape).
    """
    grouped = defaultdict(list)
    order = []
    for column in parameter_columns(draws_df):
        match = _FLAT_NAME.match(column)
        name, index = (match.group("name"), tuple(int(i) - 1 for i in match.group("index").split(","))) if match else (column, ())
        if name not in grouped:
            order.append(name)
        grouped[name].append((index, column))

    samples = {}
    for name in order:
        entries = grouped[name]
        values = draws_df[[column for _, column in entries]].to_numpy(dtype=float)
        if entries[0][0] == ():
            array = values[:, 0]
        else:
            shape = tuple(max(index[d] for index, _ in entries) + 1 for d in range(len(entries[0][0])))
            array = np.zeros((len(draws_df),) + shape)
            for position, (index, _) in enumerate(entries):
                array[(slice(None),) + index] = values[:, position]
        samples[name] = torch.tensor(array, dtype=torch.get_default_dtype())
    return samples


def _jsonable(value):
    if value is None:
        return None
    if torch.is_tensor(value):
        value = value.detach().cpu().numpy()
    return np.asarray(value).tolist()


def cache_key(spec, data, settings):
    payload = json.dumps({"name": spec.name, "code": spec.code, "settings": settings,
                          "data": {key: _jsonable(value) for key, value in sorted(data.items())}},
                         sort_keys=True)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:16]


def cache_path(spec, data, settings, cache_dir=None):
    cache_dir = cache_dir if cache_dir else config.cache_dir()
    return os.path.join(cache_dir, "%s-%s.csv" % (spec.name, cache_key(spec, data, settings)))


def diagnostics_path(filepath):
    return re.sub(r"\.csv$", ".diagnostics.csv", filepath)


def _write_csv(df, filepath, **kwargs):
    tmp_path = "%s.%s.tmp" % (filepath, os.getpid())
    df.to_csv(tmp_path, **kwargs)
    os.replace(tmp_path, filepath)


def _read_cached_draws(filepath, expected_draws):
    try:
        draws_df = pd.read_csv(filepath)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as error:
        _log.warning("Ignoring unreadable cached fit %s: %s", filepath, error)
        return None
    if len(draws_df) != expected_draws or not set(INDEX_COLUMNS) <= set(draws_df.columns):
        _log.warning("Ignoring cached fit %s: %s draws, expected %s", filepath, len(draws_df), expected_draws)
        return None
    return draws_df


def fit(spec, data, num_chains=None, num_samples=None, warmup=None, seed=None, use_cache=None, cache_dir=None,
        diagnostics=False):
    """
    Input
    -------
    spec: ModelSpec to fit
    data: dict of keyword arguments for the Pyro program (observations included)
    num_chains, num_samples, warmup, seed: sampler settings, default from rethinking.config
    use_cache: read/write the CSV fit cache, default from rethinking.config
    cache_dir: cache location, default from rethinking.config
    diagnostics: also return Pyro's per-chain diagnostics

    Output
    --------
    posterior-draws dataframe (see to_draws_dataframe), or a (draws, diagnostics)
    pair when ``diagnostics`` is set (see diagnostics.get_chain_diagnostics).
    """
    from .diagnostics import get_chain_diagnostics

    settings = config.sampler_settings(num_chains=num_chains, num_samples=num_samples, warmup=warmup, seed=seed)
    use_cache = config.use_cache() if use_cache is None else use_cache
    filepath = cache_path(spec, data, settings, cache_dir)
    diag_filepath = diagnostics_path(filepath)

    if use_cache and os.path.isfile(filepath) and os.path.isfile(diag_filepath):
        draws_df = _read_cached_draws(filepath, settings["num_chains"] * settings["num_samples"])
        if draws_df is not None:
            _log.info("Loading cached fit of '%s' from %s", spec.name, filepath)
            if diagnostics:
                return draws_df, pd.read_csv(diag_filepath, index_col=["parameters", "chain", "metric"])
            return draws_df

    try:
        hmc_sample_chains, hmc_chain_diagnostics = get_hmc_n_chains(
            spec.model, num_chains=settings["num_chains"], sample_count=settings["num_samples"],
            warmup=settings["warmup"], seed=settings["seed"], **data)
    except (RuntimeError, ValueError) as error:
        raise SamplingError(spec.name, error) from error

    draws_df = to_draws_dataframe(hmc_sample_chains, parameters=spec.parameters)
    diagnostics_df = get_chain_diagnostics(hmc_chain_diagnostics)
    if use_cache:
        os.makedirs(os.path.dirname(filepath), exist_ok=True)
        # draws last, their presence marks a complete entry
        _write_csv(diagnostics_df, diag_filepath)
        _write_csv(draws_df, filepath, index=False)
        _log.info("Saved fit of '%s' at %s", spec.name, filepath)
    if diagnostics:
        return draws_df, diagnostics_df
    return draws_df


def clear_cache(cache_dir=None):
    """Deletes every cached fit (draws & diagnostics), returns the number of fits removed."""
    cache_dir = cache_dir if cache_dir else config.cache_dir()
    if not os.path.isdir(cache_dir):
        return 0
    removed = 0
    for filename in os.listdir(cache_dir):
        if filename.endswith(".csv") or filename.endswith(".tmp"):
            os.remove(os.path.join(cache_dir, filename))
            if filename.endswith(".csv") and not filename.endswith(".diagnostics.csv"):
                removed += 1
    _log.info("Removed %s cached fits from %s", removed, cache_dir)
    return removed


def posterior_predictive(spec, draws_df, seed=None, **data):
    """
    Simulates observations for every posterior draw; pass the observed site as None.

    Returns dict of site name vs numpy array shaped (num_draws, ...).
    """
    pyro.set_rng_seed(config.seed() if seed is None else seed)
    predictive = Predictive(spec.model, posterior_samples=samples_from_draws(draws_df))
    return {site: values.detach().cpu().numpy() for site, values in predictive(**data).items()}


def prior_predictive(spec, num_samples=1000, seed=None, **data):
    pyro.set_rng_seed(config.seed() if seed is None else seed)
    predictive = Predictive(spec.model, num_samples=num_samples)
    return {site: values.detach().cpu().numpy() for site, values in predictive(**data).items()}
