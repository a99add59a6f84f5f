import numpy as np
import pandas as pd
import pytest

from rethinking import fit
from rethinking.chapter11 import base, ucb_gender


@pytest.fixture(scope="module")
def ucb():
    ucb_df = base.load_ucbadmit()
    return ucb_df, base.transform_ucbadmit(ucb_df)


def _draws(**columns):
    size = len(next(iter(columns.values())))
    draws_df = pd.DataFrame(columns)
    draws_df.insert(0, "chain", 1)
    draws_df.insert(1, "iteration", np.arange(1, size + 1))
    draws_df.insert(2, "draw", np.arange(1, size + 1))
    return draws_df


def test_transform_ucbadmit(ucb):
    _, data = ucb
    assert data["gid"].tolist() == [0, 1] * 6
    assert data["dept_id"].tolist() == [0, 0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5]
    assert data["applications"].sum().item() == 4526


def test_admission_rates(ucb):
    ucb_df, _ = ucb
    rates = base.admission_rates(ucb_df)
    assert rates.shape == (6, 2)
    assert rates.loc["A", "female"] == pytest.approx(89 / 108)


def test_gender_contrasts():
    rng = np.random.default_rng(11)
    contrasts = base.gender_contrasts(_draws(**{"a[1]": rng.normal(-0.22, 0.04, 400),
                                                "a[2]": rng.normal(-0.83, 0.05, 400)}))
    assert list(contrasts.index) == ["diff_a", "diff_p"]
    assert contrasts.loc["diff_a", "mean"] == pytest.approx(0.61, abs=0.02)
    assert contrasts.loc["diff_p", "mean"] == pytest.approx(0.14, abs=0.01)


def test_transform_kline():
    data = base.transform_kline(base.load_kline())
    assert data["cid"].sum().item() == 5
    assert data["P"].mean().item() == pytest.approx(0., abs=1e-5)
    assert data["total_tools"][-1].item() == 71.


def test_expected_tools():
    rng = np.random.default_rng(12)
    draws_df = _draws(**{"a[1]": rng.normal(3.3, 0.1, 300), "a[2]": rng.normal(3.6, 0.1, 300),
                         "b[1]": rng.normal(0.4, 0.05, 300), "b[2]": rng.normal(0.2, 0.1, 300)})
    expected_df = base.expected_tools(draws_df, np.linspace(-1, 2, 7))
    assert len(expected_df) == 14
    assert set(expected_df["contact"]) == {"low", "high"}
    assert (expected_df["lower"] < expected_df["mean"]).all()
    assert (expected_df["mean"] < expected_df["upper"]).all()


def test_gender_model_fit(ucb):
    _, data = ucb
    gender_data = {key: data[key] for key in ("gid", "applications", "admit")}
    draws_df = fit(ucb_gender, gender_data, num_chains=1, num_samples=200, warmup=200)
    assert list(draws_df.columns) == ["chain", "iteration", "draw", "a[1]", "a[2]"]
    assert draws_df["a[1]"].mean() == pytest.approx(-0.22, abs=0.1)
    assert draws_df["a[2]"].mean() == pytest.approx(-0.83, abs=0.1)
