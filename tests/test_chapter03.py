import numpy as np
import pytest
from scipy import stats

from rethinking.chapter03 import base


@pytest.fixture(scope="module")
def posterior():
    return base.posterior_samples(seed=100)


def test_posterior_samples(posterior):
    grid_df, samples = posterior
    assert len(grid_df) == 1000
    assert samples.shape == (10000,)
    assert samples.mean() == pytest.approx(7 / 11, abs=0.01)


def test_interval_summary(posterior):
    _, samples = posterior
    intervals = base.interval_summary(samples)
    assert list(intervals.index) == [0.5, 0.8, 0.89]
    widths_pi = intervals["PI_upper"] - intervals["PI_lower"]
    widths_hpdi = intervals["HPDI_upper"] - intervals["HPDI_lower"]
    assert (widths_hpdi <= widths_pi + 1e-3).all()
    assert widths_pi.is_monotonic_increasing


def test_point_estimates(posterior):
    grid_df, samples = posterior
    estimates = base.point_estimates(grid_df, samples)
    assert estimates["MAP"] == pytest.approx(2 / 3, abs=1e-3)
    assert estimates["mean"] < estimates["median"] < estimates["MAP"]


def test_expected_loss_minimised_at_median_and_mean(posterior):
    grid_df, _ = posterior
    absolute = base.expected_loss(grid_df, loss="absolute")
    quadratic = base.expected_loss(grid_df, loss="quadratic")
    assert absolute.idxmin() == pytest.approx(stats.beta(7, 4).median(), abs=0.01)
    assert quadratic.idxmin() == pytest.approx(7 / 11, abs=0.01)
    with pytest.raises(ValueError):
        base.expected_loss(grid_df, loss="zero-one")


def test_dummy_data():
    dummy_df = base.dummy_data(seed=1)
    np.testing.assert_allclose(dummy_df["exact"], [0.09, 0.42, 0.49])
    np.testing.assert_allclose(dummy_df["simulated"], dummy_df["exact"], atol=0.01)


def test_posterior_predictive_distribution(posterior):
    _, samples = posterior
    simulated = base.posterior_predictive(samples, seed=2)
    distribution = base.predictive_distribution(simulated)
    assert len(distribution) == 10
    assert distribution.sum() == pytest.approx(1.)
    assert distribution.idxmax() in (6, 7)
