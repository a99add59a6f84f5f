import pytest

from rethinking import models
from rethinking.exceptions import ModelNotFoundError


def _model(y=None):
    pass


def test_register_and_get():
    spec = models.register(models.ModelSpec("test_register", """
        y ~ normal(mu, 1);
        mu ~ normal(0, 1);
    """, _model, parameters=["mu"]))
    assert models.get_model("test_register") is spec
    assert "test_register" in models.list_models()
    assert spec.code.splitlines()[0] == "y ~ normal(mu, 1);"
    assert spec.obs_site == "obs"


def test_model_spec_decorator():
    @models.model_spec("test_decorated", "y ~ normal(0, 1);")
    def decorated(y=None):
        return "called"

    assert isinstance(decorated, models.ModelSpec)
    assert decorated() == "called"
    assert models.get_model("test_decorated") is decorated


def test_unknown_model():
    with pytest.raises(ModelNotFoundError) as excinfo:
        models.get_model("no_such_model")
    assert "no_such_model" in str(excinfo.value)


def test_show(capsys):
    models.ModelSpec("shown", "p ~ uniform(0, 1);", _model).show()
    out = capsys.readouterr().out
    assert "Model 'shown'" in out
    assert "    p ~ uniform(0, 1);" in out


def test_chapter_models_are_registered():
    import rethinking.chapter11  # noqa: F401

    assert "m11_7_ucb_gender" in models.list_models()
    assert models.get_model("m11_10_kline_interaction").parameters == ["a", "b"]
