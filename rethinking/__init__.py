"""Helpers for working through Statistical Rethinking with Pyro."""
import logging

from .datasets import list_datasets, load_data, standardize
from .exceptions import (ConfigurationError, DatasetNotFoundError, ModelNotFoundError, RethinkingError,
                         SamplingError)
from .models import ModelSpec, get_model, list_models, model_spec, register
from .sampling import fit, posterior_predictive, prior_predictive, to_draws_dataframe
from .summary import hpdi, percentile_interval, precis, waic

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
