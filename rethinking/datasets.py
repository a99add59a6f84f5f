"""
Bundled example datasets.

The files under ``data/`` are ``;``-separated, the same layout the textbook's
R package ships them in, and are read-only.
"""
import os

import numpy as np
import pandas as pd

from .exceptions import DatasetNotFoundError


DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")


def list_datasets():
    return sorted(os.path.splitext(filename)[0] for filename in os.listdir(DATA_DIR)
                  if filename.endswith(".csv"))


def load_data(name):
    """
    Input
    -------
    name: dataset name, one of list_datasets(), example: "cars"

    Output
    --------
    pandas dataframe holding the dataset.
    """
    filepath = os.path.join(DATA_DIR, "%s.csv" % name)
    if not os.path.isfile(filepath):
        raise DatasetNotFoundError(name, list_datasets())
    return pd.read_csv(filepath, sep=";")


def standardize(values):
    """z-score with the sample standard deviation (ddof=1)."""
    values = np.asarray(values, dtype=float)
    return (values - values.mean()) / values.std(ddof=1)


def globe_counts(tosses=None):
    """
    Input
    -------
    tosses: sequence of "W"/"L" outcomes, defaults to the bundled globe tosses.

    Output
    --------
    (W, N): count of water outcomes & total tosses.
    """
    if tosses is None:
        tosses = load_data("globe_tosses")["toss"]
    tosses = list(tosses)
    return sum(1 for toss in tosses if toss == "W"), len(tosses)


def to_index(values):
    """
    Maps categorical values to 0-based integer codes, in sorted order of the labels.

    Returns (codes, labels).
    """
    codes, labels = pd.factorize(pd.Series(values), sort=True)
    return codes, list(labels)
