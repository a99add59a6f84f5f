class RethinkingError(Exception):
    """Base class for errors raised by the rethinking helpers."""


class DatasetNotFoundError(RethinkingError, KeyError):
    def __init__(self, name, known):
        self.name = name
        self.known = list(known)
        super().__init__("Unknown dataset '%s', available datasets: %s" % (name, self.known))

    def __str__(self):
        return self.args[0]


class ModelNotFoundError(RethinkingError, KeyError):
    def __init__(self, name, known):
        self.name = name
        self.known = list(known)
        super().__init__("Unknown model '%s', registered models: %s" % (name, self.known))

    def __str__(self):
        return self.args[0]


class SamplingError(RethinkingError):
    """Raised when the NUTS sampler fails for a model."""

    def __init__(self, model_name, error):
        self.model_name = model_name
        self.error = error
        super().__init__("Sampling failed for model '%s': %s" % (model_name, error))


class ConfigurationError(RethinkingError, ValueError):
    pass
