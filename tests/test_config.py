from __future__ import annotations

from pathlib import Path

import pytest

from ccswitch_sdk.config import DEFAULT_API_BASE, load_config
from ccswitch_sdk.errors import ConfigError


def test_defaults_when_config_missing(tmp_path) -> None:
    config = load_config(tmp_path / "missing.toml")
    assert config.mode == "auto"
    assert config.api_base == DEFAULT_API_BASE
    assert config.page_origin == "http://127.0.0.1:3000"
    assert config.fetch_timeout == 180.0
    assert config.max_retries == 1
    assert config.retry_delay == 0.5
    assert config.log_level == "warning"
    assert config.storage_path == Path(tmp_path / "state") / "storage.json"


def test_file_values_used_when_env_not_set(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        "\n".join(
            [
                "[sdk]",
                'mode = "web"',
                'api_base = "https://api.example.com/v1/"',
                "fetch_timeout = 5",
                "max_retries = 3",
                "retry_delay = 0",
                'log_level = "DEBUG"',
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    config = load_config(config_path)
    assert config.mode == "web"
    assert config.api_base == "https://api.example.com/v1"
    assert config.fetch_timeout == 5.0
    assert config.max_retries == 3
    assert config.retry_delay == 0.0
    assert config.log_level == "debug"


def test_top_level_keys_accepted_without_section(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('mode = "web"\n', encoding="utf-8")
    assert load_config(config_path).mode == "web"


def test_env_overrides_config_file(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[sdk]\nmode = "native"\nmax_retries = 4\n', encoding="utf-8")
    monkeypatch.setenv("CCSWITCH_MODE", "web")
    monkeypatch.setenv("CCSWITCH_FETCH_RETRIES", "0")
    config = load_config(config_path)
    assert config.mode == "web"
    assert config.max_retries == 0


def test_invalid_default_api_base_falls_back(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CCSWITCH_API_BASE", "ftp://nope")
    assert load_config(tmp_path / "missing.toml").api_base == DEFAULT_API_BASE


@pytest.mark.parametrize(
    ("env_var", "value", "message"),
    [
        ("CCSWITCH_MODE", "desktop", "mode must be one of"),
        ("CCSWITCH_FETCH_TIMEOUT", "soon", "fetch_timeout must be a number"),
        ("CCSWITCH_FETCH_RETRIES", "-1", "max_retries must be >= 0"),
        ("CCSWITCH_FETCH_RETRY_DELAY", "-0.5", "retry_delay must be >= 0"),
        ("CCSWITCH_LOG_LEVEL", "loud", "log_level must be one of"),
        ("CCSWITCH_PAGE_ORIGIN", "not-a-url", "page_origin must be"),
    ],
)
def test_invalid_values_raise_config_error(tmp_path, monkeypatch, env_var, value, message) -> None:
    monkeypatch.setenv(env_var, value)
    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path / "missing.toml")


def test_invalid_toml_raises_config_error(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("mode = \n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid TOML"):
        load_config(config_path)


def test_boolean_retry_count_rejected(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("max_retries = true\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="integer"):
        load_config(config_path)
