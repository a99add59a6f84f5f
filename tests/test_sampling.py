import os

import numpy as np
import pandas as pd
import pytest
import torch

from rethinking import config, sampling
from rethinking.chapter02 import base as ch02
from rethinking.chapter02 import globe_binomial
from rethinking.exceptions import SamplingError


@pytest.fixture
def fake_chains():
    rng = np.random.default_rng(0)
    return {"chain_0": {"mu": rng.normal(size=4), "a": rng.normal(size=(4, 3))},
            "chain_1": {"mu": rng.normal(size=4), "a": rng.normal(size=(4, 3))}}


def test_to_draws_dataframe(fake_chains):
    draws_df = sampling.to_draws_dataframe(fake_chains)
    assert list(draws_df.columns) == ["chain", "iteration", "draw", "a[1]", "a[2]", "a[3]", "mu"]
    assert draws_df["chain"].tolist() == [1] * 4 + [2] * 4
    assert draws_df["iteration"].tolist() == [1, 2, 3, 4] * 2
    assert draws_df["draw"].tolist() == list(range(1, 9))
    np.testing.assert_allclose(draws_df["a[2]"].to_numpy()[4:], fake_chains["chain_1"]["a"][:, 1])
    assert sampling.parameter_columns(draws_df) == ["a[1]", "a[2]", "a[3]", "mu"]


def test_samples_from_draws_restores_shapes(fake_chains):
    samples = sampling.samples_from_draws(sampling.to_draws_dataframe(fake_chains))
    assert samples["mu"].shape == (8,)
    assert samples["a"].shape == (8, 3)
    np.testing.assert_allclose(samples["a"][:4].numpy(), fake_chains["chain_0"]["a"], rtol=1e-6)


def test_samples_from_draws_matrix_columns():
    draws_df = pd.DataFrame({"w[1,1]": [1., 2.], "w[1,2]": [3., 4.], "w[2,1]": [5., 6.], "w[2,2]": [7., 8.]})
    samples = sampling.samples_from_draws(draws_df)
    assert samples["w"].shape == (2, 2, 2)
    assert samples["w"][1, 0, 1].item() == 4.


def test_cache_path_depends_on_data_and_settings(tmp_path):
    data = ch02.load_data()
    settings = {"num_chains": 2, "num_samples": 10, "warmup": 10, "seed": 1}
    path = sampling.cache_path(globe_binomial, data, settings, cache_dir=str(tmp_path))
    assert os.path.basename(path).startswith("globe_binomial-")
    assert path == sampling.cache_path(globe_binomial, dict(data), dict(settings), cache_dir=str(tmp_path))
    assert path != sampling.cache_path(globe_binomial, {"W": torch.tensor(5.), "N": data["N"]}, settings,
                                       cache_dir=str(tmp_path))
    assert path != sampling.cache_path(globe_binomial, data, dict(settings, seed=2), cache_dir=str(tmp_path))


def test_get_hmc_n_chains():
    hmc_sample_chains, hmc_chain_diagnostics = sampling.get_hmc_n_chains(
        globe_binomial.model, num_chains=2, sample_count=30, warmup=30, seed=3, **ch02.load_data())
    assert list(hmc_sample_chains) == ["chain_0", "chain_1"]
    assert hmc_sample_chains["chain_0"]["p"].shape == (30,)
    assert "acceptance rate" in hmc_chain_diagnostics["chain_1"]


def test_fit_globe_model():
    draws_df = sampling.fit(globe_binomial, ch02.load_data(), num_chains=2, num_samples=50, warmup=50)
    assert list(draws_df.columns) == ["chain", "iteration", "draw", "p"]
    assert len(draws_df) == 100
    assert draws_df["chain"].unique().tolist() == [1, 2]
    assert ((draws_df["p"] > 0) & (draws_df["p"] < 1)).all()
    assert draws_df["p"].mean() == pytest.approx(7 / 11, abs=0.1)


def test_fit_reads_cache_on_second_call(monkeypatch):
    data = ch02.load_data()
    first = sampling.fit(globe_binomial, data, num_samples=20, warmup=20)
    assert any(name.endswith(".diagnostics.csv") for name in os.listdir(os.environ["RETHINKING_CACHE_DIR"]))
    assert len(os.listdir(os.environ["RETHINKING_CACHE_DIR"])) == 2

    def fail(*args, **kwargs):
        raise AssertionError("sampler should not run on a cache hit")

    monkeypatch.setattr(sampling, "get_hmc_n_chains", fail)
    second = sampling.fit(globe_binomial, data, num_samples=20, warmup=20)
    pd.testing.assert_frame_equal(first, second, check_dtype=False)


def test_fit_without_cache_writes_nothing(monkeypatch):
    monkeypatch.setenv("RETHINKING_USE_CACHE", "0")
    sampling.fit(globe_binomial, ch02.load_data(), num_chains=1, num_samples=10, warmup=10)
    assert not os.path.exists(os.environ["RETHINKING_CACHE_DIR"])


def test_clear_cache(tmp_path):
    assert sampling.clear_cache(str(tmp_path / "missing")) == 0
    sampling.fit(globe_binomial, ch02.load_data(), num_chains=1, num_samples=10, warmup=10)
    assert sampling.clear_cache() == 1
    assert os.listdir(os.environ["RETHINKING_CACHE_DIR"]) == []


def test_fit_wraps_sampler_errors(monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("step size adaptation failed")

    monkeypatch.setattr(sampling, "get_hmc_n_chains", broken)
    with pytest.raises(SamplingError) as excinfo:
        sampling.fit(globe_binomial, ch02.load_data())
    assert excinfo.value.model_name == "globe_binomial"
    assert "step size adaptation failed" in str(excinfo.value)


def test_posterior_predictive_shapes():
    draws_df = pd.DataFrame({"chain": 1, "iteration": np.arange(1, 201), "draw": np.arange(1, 201),
                             "p": np.linspace(0.05, 0.95, 200)})
    ppc = sampling.posterior_predictive(globe_binomial, draws_df, seed=1, N=torch.tensor(9.), W=None)
    assert ppc["obs"].shape == (200,)
    assert ((ppc["obs"] >= 0) & (ppc["obs"] <= 9)).all()


def test_prior_predictive():
    prior = sampling.prior_predictive(globe_binomial, num_samples=500, seed=1, N=torch.tensor(9.))
    assert prior["p"].shape == (500,)
    assert prior["obs"].shape == (500,)
    assert prior["p"].mean() == pytest.approx(0.5, abs=0.05)


def test_to_draws_dataframe_follows_parameter_order(fake_chains):
    draws_df = sampling.to_draws_dataframe(fake_chains, parameters=["mu", "a"])
    assert sampling.parameter_columns(draws_df) == ["mu", "a[1]", "a[2]", "a[3]"]


def test_fit_returns_diagnostics_from_sampler_and_cache(monkeypatch):
    data = ch02.load_data()
    draws_df, diagnostics_df = sampling.fit(globe_binomial, data, num_samples=20, warmup=20, diagnostics=True)
    assert diagnostics_df.index.names == ["parameters", "chain", "metric"]
    assert set(diagnostics_df.index.get_level_values("chain")) == {"chain_0", "chain_1"}

    def fail(*args, **kwargs):
        raise AssertionError("sampler should not run on a cache hit")

    monkeypatch.setattr(sampling, "get_hmc_n_chains", fail)
    cached_draws, cached_diagnostics = sampling.fit(globe_binomial, data, num_samples=20, warmup=20,
                                                    diagnostics=True)
    assert len(cached_draws) == len(draws_df)
    assert cached_diagnostics.index.names == ["parameters", "chain", "metric"]
    assert len(cached_diagnostics) == len(diagnostics_df)


def test_fit_ignores_truncated_cache_file():
    data = ch02.load_data()
    settings = config.sampler_settings(num_samples=20, warmup=20)
    filepath = sampling.cache_path(globe_binomial, data, settings)
    os.makedirs(os.path.dirname(filepath))
    with open(filepath, "w") as fh:
        fh.write("chain,iteration,draw,p\n1,1,1,0.5\n")
    with open(sampling.diagnostics_path(filepath), "w") as fh:
        fh.write("")

    draws_df = sampling.fit(globe_binomial, data, num_samples=20, warmup=20)
    assert len(draws_df) == 40
    assert len(pd.read_csv(filepath)) == 40
    assert not [name for name in os.listdir(os.path.dirname(filepath)) if name.endswith(".tmp")]


def test_fit_ignores_empty_cache_file():
    data = ch02.load_data()
    settings = config.sampler_settings(num_samples=10, warmup=10)
    filepath = sampling.cache_path(globe_binomial, data, settings)
    os.makedirs(os.path.dirname(filepath))
    for path in (filepath, sampling.diagnostics_path(filepath)):
        open(path, "w").close()
    assert len(sampling.fit(globe_binomial, data, num_samples=10, warmup=10)) == 20
