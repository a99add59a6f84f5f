import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pyro
import pytest


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("RETHINKING_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("RETHINKING_NUM_CHAINS", "2")
    monkeypatch.setenv("RETHINKING_NUM_SAMPLES", "100")
    monkeypatch.setenv("RETHINKING_WARMUP", "100")
    monkeypatch.setenv("RETHINKING_SEED", "1")
    pyro.clear_param_store()
    yield
    plt.close("all")


@pytest.fixture
def normal_draws():
    """Two chains of 500 independent N(0, 1) & N(5, 2) draws shaped as a posterior-draws table."""
    rng = np.random.default_rng(0)
    frames = []
    for chain in (1, 2):
        frames.append(pd.DataFrame({"chain": chain, "iteration": np.arange(1, 501),
                                    "mu": rng.normal(0, 1, size=500), "sigma": rng.normal(5, 2, size=500)}))
    draws_df = pd.concat(frames, ignore_index=True)
    draws_df.insert(2, "draw", np.arange(1, len(draws_df) + 1))
    return draws_df
