import pytest

from rethinking import summary
from rethinking.chapter07 import base, cars_speed, cars_speed_quadratic


@pytest.fixture(scope="module")
def fits():
    data = base.load_data()
    return data, {cars_speed: base.quap_samples(cars_speed, data, size=300, seed=94),
                  cars_speed_quadratic: base.quap_samples(cars_speed_quadratic, data, size=300, seed=94)}


def test_load_data():
    data = base.load_data()
    assert data["speed"].shape == data["dist_obs"].shape == (50,)


def test_quap_samples_columns(fits):
    _, draws = fits
    assert list(draws[cars_speed].columns) == ["a", "b", "sigma"]
    assert list(draws[cars_speed_quadratic].columns) == ["a", "b", "b2", "sigma"]


def test_waic_by_hand_matches_summary(fits):
    data, draws = fits
    pointwise_df, totals = base.waic_by_hand(cars_speed, draws[cars_speed], data)
    assert list(pointwise_df.columns) == ["lppd", "pWAIC", "WAIC"]
    assert len(pointwise_df) == 50
    result = summary.waic(cars_speed, draws[cars_speed], **data)
    assert totals["WAIC"] == pytest.approx(result["WAIC"], rel=1e-4)
    assert totals["pWAIC"] == pytest.approx(result["penalty"], rel=1e-4)
    assert totals["std_err"] == pytest.approx(result["std_err"], rel=1e-3)


def test_compare_models(fits):
    data, draws = fits
    compare_df = base.compare_models(data, draws)
    assert sorted(compare_df.index) == ["cars_speed", "cars_speed_quadratic"]
    assert compare_df["dWAIC"].iloc[0] == 0.
    assert compare_df["weight"].sum() == pytest.approx(1.)
