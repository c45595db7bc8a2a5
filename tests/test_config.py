import json

from decipher_engine.config import Config


def test_defaults_when_file_missing(tmp_path):
    config = Config(tmp_path / "missing.json")
    assert config.get("default_mode") == "manual"
    assert config["transformers"]["auto-deobfuscate"] is True
    assert config.transformer_options("format") == {}


def test_file_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"transformers": {"minify": False}, "oracle": {"model": "other"}}))

    config = Config(path)
    assert config["transformers"]["minify"] is False
    assert config["transformers"]["format"] is True
    assert config["oracle"]["model"] == "other"
    assert config["oracle"]["timeout_seconds"] == 30


def test_defaults_are_not_shared(tmp_path):
    first = Config(tmp_path / "a.json")
    first["transformers"]["minify"] = False
    assert Config(tmp_path / "b.json")["transformers"]["minify"] is True


def test_unreadable_file_keeps_defaults(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    config = Config(path)
    assert config.get("log_level") == "INFO"
    assert "Ignoring unreadable config file" in caplog.text


def test_non_object_file_is_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]")
    assert Config(path).get("default_mode") == "manual"


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = Config(path)
    config.set("transformer_options", {"flatten-control-flow": {"max_depth": 1}})
    config.save()

    reloaded = Config(path)
    assert reloaded.transformer_options("flatten-control-flow") == {"max_depth": 1}


def test_api_key_from_environment(tmp_path, monkeypatch):
    config = Config(tmp_path / "config.json")
    config["oracle"]["api_key"] = "file-key"

    monkeypatch.delenv("DECIPHER_ORACLE_API_KEY", raising=False)
    assert config.oracle_api_key() == "file-key"

    monkeypatch.setenv("DECIPHER_ORACLE_API_KEY", "env-key")
    assert config.oracle_api_key() == "env-key"
