import numpy as np
import pytest
import torch

from rethinking import approximation
from rethinking.chapter02 import globe_binomial
from rethinking.chapter07 import base as ch07
from rethinking.chapter07 import cars_speed
from rethinking.exceptions import RethinkingError


def test_grid_posterior_sums_to_one():
    grid_df = approximation.globe_grid(6, 9, grid_size=50)
    assert grid_df["posterior"].sum() == pytest.approx(1.)
    assert list(grid_df.columns) == ["p_grid", "prior", "likelihood", "unstd_posterior", "posterior"]


def test_twenty_point_grid_mode():
    grid_df = approximation.globe_grid(6, 9, grid_size=20)
    assert grid_df.loc[grid_df["posterior"].idxmax(), "p_grid"] == pytest.approx(13 / 19)


def test_grid_with_array_prior():
    p_grid = np.linspace(0, 1, 20)
    grid_df = approximation.globe_grid(6, 9, grid_size=20, prior=np.where(p_grid < 0.5, 0., 1.))
    assert (grid_df.loc[grid_df["p_grid"] < 0.5, "posterior"] == 0).all()


def test_grid_zero_everywhere():
    with pytest.raises(RethinkingError):
        approximation.grid_approximation(np.linspace(0, 1, 5), np.zeros(5), np.ones(5))


def test_sample_grid_posterior():
    grid_df = approximation.globe_grid(6, 9, grid_size=100)
    samples = approximation.sample_grid_posterior(grid_df, size=5000, seed=3)
    assert samples.shape == (5000,)
    assert set(samples) <= set(grid_df["p_grid"])
    np.testing.assert_array_equal(samples, approximation.sample_grid_posterior(grid_df, size=5000, seed=3))


def test_quap_globe():
    quap = approximation.quadratic_approximation(globe_binomial, N=torch.tensor(9.), W=torch.tensor(6.))
    assert quap.names == ["p"]
    assert quap.mean["p"] == pytest.approx(2 / 3, abs=5e-3)
    assert quap.sd["p"] == pytest.approx(1 / np.sqrt(40.5), abs=5e-3)


def test_quap_precis_and_sample():
    quap = approximation.quadratic_approximation(globe_binomial, N=torch.tensor(9.), W=torch.tensor(6.))
    precis_df = quap.precis()
    assert list(precis_df.columns) == ["mean", "sd", "5.5%", "94.5%"]
    assert precis_df.loc["p", "5.5%"] < quap.mean["p"] < precis_df.loc["p", "94.5%"]
    draws = quap.sample(size=2000, seed=1)
    assert draws.shape == (2000, 1)
    assert draws["p"].mean() == pytest.approx(quap.mean["p"], abs=0.02)


def test_quap_linear_regression_matches_least_squares():
    quap = approximation.quadratic_approximation(cars_speed, **ch07.load_data())
    assert quap.names == ["a", "b", "sigma"]
    assert quap.mean["a"] == pytest.approx(-17.58, abs=1.)
    assert quap.mean["b"] == pytest.approx(3.93, abs=0.1)
    assert 13. < quap.mean["sigma"] < 17.
    assert (quap.sd > 0).all()


def test_quap_rejects_discrete_sites():
    import pyro
    import pyro.distributions as dist

    def model():
        pyro.sample("k", dist.Poisson(3.))

    with pytest.raises(RethinkingError):
        approximation.quadratic_approximation(model)


def test_toy_metropolis():
    samples = approximation.toy_metropolis_globe(n_samples=20000, W=6, L=3, seed=1)
    assert samples.shape == (20000,)
    assert ((samples >= 0) & (samples <= 1)).all()
    assert samples[1000:].mean() == pytest.approx(7 / 11, abs=0.03)


def test_king_markov_visit_frequencies():
    positions = approximation.king_markov(num_weeks=100000, num_islands=10, seed=7)
    assert positions[0] == 10
    assert set(np.unique(positions)) == set(range(1, 11))
    frequencies = np.bincount(positions, minlength=11)[1:] / len(positions)
    np.testing.assert_allclose(frequencies, np.arange(1, 11) / 55, atol=0.02)


def test_quap_skips_plates_and_flattens_vector_sites():
    from rethinking.chapter11 import base as ch11
    from rethinking.chapter11 import ucb_gender

    data = ch11.transform_ucbadmit(ch11.load_ucbadmit())
    quap = approximation.quadratic_approximation(ucb_gender, gid=data["gid"], applications=data["applications"],
                                                 admit=data["admit"])
    assert quap.names == ["a[1]", "a[2]"]
    assert quap.mean["a[1]"] == pytest.approx(-0.22, abs=0.02)
    assert quap.mean["a[2]"] == pytest.approx(-0.83, abs=0.02)
