import pytest

from decipher_engine.config import Config
from decipher_engine.core.engine import TransformEngine
from decipher_engine.core.models import InputTooLargeError, UnknownTransformerError


@pytest.fixture
def config(tmp_path):
    return Config(tmp_path / "config.json")


def test_apply_builds_history_entry(config):
    engine = TransformEngine(config)
    code = "var a = 1;\nconsole.log(a);"
    outcome = engine.apply(code, "rename-variables")

    assert outcome.entry.transformer_id == "rename-variables"
    assert outcome.entry.original_code == code
    assert outcome.entry.transformed_code == outcome.result.code
    assert outcome.entry.options == {"preserve_builtins": True}
    assert outcome.challenge_score == outcome.breakdown.total
    assert outcome.step_score == (outcome.challenge_score or outcome.legacy_score)
    assert 0 <= outcome.readability <= 100


def test_configured_options_are_merged(config):
    config["transformer_options"] = {"flatten-control-flow": {"max_depth": 3}}
    engine = TransformEngine(config)

    outcome = engine.apply("var a;", "flatten-control-flow", {})
    assert outcome.entry.options == {"max_depth": 3}

    outcome = engine.apply("var a;", "flatten-control-flow", {"max_depth": "1"})
    assert outcome.entry.options == {"max_depth": 1}


def test_input_size_limit(config):
    config.set("max_input_size", 10)
    engine = TransformEngine(config)
    with pytest.raises(InputTooLargeError):
        engine.apply("x" * 11, "format")


def test_disabled_transformer_is_unknown(config):
    config.get("transformers")["minify"] = False
    engine = TransformEngine(config)
    with pytest.raises(UnknownTransformerError):
        engine.apply("var a;", "minify")


def test_outcome_serializes(config):
    outcome = TransformEngine(config).apply("var a = 1;", "format")
    data = outcome.to_dict()
    assert data["entry"]["breakdown"]["total"] == data["challenge_score"]
    assert data["result"]["code"] == "var a = 1;"
