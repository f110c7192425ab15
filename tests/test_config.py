from pathlib import Path

import pytest

from apibind.config import (
    BinderConfig,
    config_from_env,
    config_from_file,
    deep_update,
    format_nested_dict,
)
from apibind.errors import ConfigurationError


def test_defaults():
    config = BinderConfig()
    assert not config.is_dev
    assert config.pretty_user_agents == ("curl/",)
    assert config.to_thread
    assert config.identity_key == "identity_id"


def test_format_nested_dict():
    result = format_nested_dict({"simple": "value", "a.b.c": 1})
    assert result == {"simple": "value", "a": {"b": {"c": 1}}}


def test_deep_update():
    original = {"a": 1, "b": {"c": 2, "d": 3}}
    updated = deep_update(original, {"a": 10, "b": {"c": 20}, "e": 5})
    assert updated == {"a": 10, "b": {"c": 20, "d": 3}, "e": 5}


def test_config_from_env():
    environ = {
        "APIBIND_ENV": "dev",
        "APIBIND_TO_THREAD": "false",
        "APIBIND_PRETTY_USER_AGENTS": "curl/, httpie/",
        "APIBIND_UNKNOWN": "ignored",
        "OTHER": "ignored",
    }
    assert config_from_env(environ) == {
        "is_dev": True,
        "to_thread": "false",
        "pretty_user_agents": ["curl/", "httpie/"],
    }


def test_config_from_files(tmp_path: Path):
    base = tmp_path / "base.toml"
    base.write_text('is_dev = true\nidentity_key = "uid"\n')
    prod = tmp_path / "prod.toml"
    prod.write_text("is_dev = false\n")

    config = config_from_file(base, prod, environ={})
    assert config == BinderConfig(is_dev=False, identity_key="uid")


def test_env_overrides_file(tmp_path: Path):
    base = tmp_path / "base.toml"
    base.write_text("to_thread = true\n")

    config = config_from_file(base, environ={"APIBIND_TO_THREAD": "false"})
    assert config.to_thread is False


def test_no_files_is_default():
    assert config_from_file(environ={}) == BinderConfig()


def test_unknown_field(tmp_path: Path):
    bad = tmp_path / "bad.toml"
    bad.write_text("colour = 'red'\n")
    with pytest.raises(ConfigurationError, match="invalid config"):
        config_from_file(bad, environ={})


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="not found"):
        config_from_file(tmp_path / "nope.toml", environ={})


def test_invalid_toml(tmp_path: Path):
    bad = tmp_path / "bad.toml"
    bad.write_text("is_dev = \n")
    with pytest.raises(ConfigurationError, match="invalid toml"):
        config_from_file(bad, environ={})
