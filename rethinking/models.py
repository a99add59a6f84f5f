"""
Model specifications.

A ``ModelSpec`` pairs the short declarative text of a model, written the way the
textbook writes it, with the Pyro program that implements it. The text is what a
chapter prints and what keys the fit cache; the Pyro program is what the sampler
runs.
"""
import textwrap

from .exceptions import ModelNotFoundError


_REGISTRY = {}


class ModelSpec(object):
    def __init__(self, name, code, model, parameters=None, obs_site="obs"):
        self.name = name
        self.code = textwrap.dedent(code).strip()
        self.model = model
        self.parameters = list(parameters) if parameters else None
        self.obs_site = obs_site

    def __call__(self, *args, **kwargs):
        return self.model(*args, **kwargs)

    def __repr__(self):
        return "ModelSpec(%r)" % self.name

    def show(self):
        print("Model '%s':\n%s" % (self.name, textwrap.indent(self.code, "    ")))


def register(spec):
    _REGISTRY[spec.name] = spec
    return spec


def model_spec(name, code, parameters=None, obs_site="obs"):
    """Decorator registering a Pyro program under ``name`` with its model text."""
    def wrapper(model):
        return register(ModelSpec(name, code, model, parameters=parameters, obs_site=obs_site))
    return wrapper


def get_model(name):
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ModelNotFoundError(name, list_models()) from None


def list_models():
    return sorted(_REGISTRY)
