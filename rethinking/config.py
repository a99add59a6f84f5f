"""
Runtime defaults for sampling and caching, overridable from the environment.

Every value is read when it is asked for, so a document (or a test) can set
``RETHINKING_*`` variables before fitting without re-importing anything.
"""
import os

from .exceptions import ConfigurationError


DEFAULTS = {
    "RETHINKING_CACHE_DIR": os.path.join("~", ".cache", "rethinking"),
    "RETHINKING_SEED": "1",
    "RETHINKING_NUM_CHAINS": "4",
    "RETHINKING_NUM_SAMPLES": "1000",
    "RETHINKING_WARMUP": "1000",
    "RETHINKING_USE_CACHE": "1",
}


def _get(key):
    return os.environ.get(key, DEFAULTS[key])


def _get_int(key, minimum=0):
    value = _get(key)
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError("%s must be an integer, got %r" % (key, value))
    if value < minimum:
        raise ConfigurationError("%s must be >= %s, got %s" % (key, minimum, value))
    return value


def cache_dir():
    return os.path.expanduser(_get("RETHINKING_CACHE_DIR"))


def seed():
    return _get_int("RETHINKING_SEED")


def num_chains():
    return _get_int("RETHINKING_NUM_CHAINS", minimum=1)


def num_samples():
    return _get_int("RETHINKING_NUM_SAMPLES", minimum=1)


def warmup():
    return _get_int("RETHINKING_WARMUP")


def use_cache():
    return _get("RETHINKING_USE_CACHE").strip().lower() not in ("0", "false", "no", "off", "")


def sampler_settings(**overrides):
    """
    Input
    -------
    overrides: any of num_chains, num_samples, warmup, seed; None values fall back to the environment.

    Output
    --------
    dict with resolved num_chains, num_samples, warmup & seed.
    """
    settings = {"num_chains": num_chains(), "num_samples": num_samples(),
                "warmup": warmup(), "seed": seed()}
    settings.update({key: value for key, value in overrides.items() if value is not None})
    return settings
