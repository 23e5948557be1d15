"""Tests for settings loading and precedence."""

from __future__ import annotations

from textwrap import dedent

import pytest
from pydantic import ValidationError

from portfolio_engine.settings import EngineSettings


def test_defaults():
    """Settings should have sensible defaults without any config."""
    settings = EngineSettings()

    assert settings.source_timeout_seconds == 8.0
    assert settings.quote_timeout_seconds == 10.0
    assert settings.balance_timeout_seconds == 10.0
    assert settings.disabled_sources == []
    assert settings.panora_api_key is None
    assert settings.aptos_view_url == "https://fullnode.mainnet.aptoslabs.com/v1/view"
    assert settings.aptos_auth_headers == {}


def test_toml_values_loaded_from_nested_table(tmp_path, monkeypatch):
    """Values under the [portfolio_engine] table of the TOML file should load."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        dedent(
            """
            [portfolio_engine]
            source_timeout_seconds = 5
            disabled_sources = ["Tapp Exchange"]

            [portfolio_engine.extra_tokens."0xabc::coin::COIN"]
            symbol = "COIN"
            decimals = 6
            """
        ).strip()
    )
    monkeypatch.setenv("PORTFOLIO_ENGINE_CONFIG", str(config_path))

    settings = EngineSettings()

    assert settings.source_timeout_seconds == 5.0
    assert settings.disabled_sources == ["Tapp Exchange"]
    assert settings.extra_tokens["0xabc::coin::COIN"].symbol == "COIN"
    assert settings.extra_tokens["0xabc::coin::COIN"].decimals == 6


def test_precedence_cli_over_env_over_file(tmp_path, monkeypatch):
    """CLI overrides env, which overrides the config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("source_timeout_seconds = 3\nquote_timeout_seconds = 4\n")
    monkeypatch.setenv("PORTFOLIO_ENGINE_CONFIG", str(config_path))
    monkeypatch.setenv("PORTFOLIO_ENGINE_SOURCE_TIMEOUT_SECONDS", "6")

    assert EngineSettings().source_timeout_seconds == 6.0
    assert EngineSettings().quote_timeout_seconds == 4.0
    assert EngineSettings(source_timeout_seconds=7).source_timeout_seconds == 7.0


@pytest.mark.parametrize("key", ["panora_api_key", "aptos_api_key"])
def test_toml_rejects_secrets(tmp_path, monkeypatch, key):
    """Secrets in the config file should be rejected."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(f'{key} = "secret"\n')
    monkeypatch.setenv("PORTFOLIO_ENGINE_CONFIG", str(config_path))

    with pytest.raises(ValueError, match=key):
        EngineSettings()


def test_secrets_from_env_are_redacted(monkeypatch):
    """Secrets loaded from env should be redacted in the safe dict."""
    monkeypatch.setenv("PORTFOLIO_ENGINE_PANORA_API_KEY", "pk-123")

    settings = EngineSettings()

    assert settings.panora_auth_headers == {"x-api-key": "pk-123"}
    assert settings.as_safe_dict()["panora_api_key"] == "***redacted***"
    assert "pk-123" not in repr(settings)


def test_log_level_uppercased():
    """Log level should be normalized to upper case."""
    assert EngineSettings(log_level="debug").log_level == "DEBUG"


def test_timeout_must_be_positive():
    """A non-positive timeout should fail validation."""
    with pytest.raises(ValidationError, match="greater than 0"):
        EngineSettings(source_timeout_seconds=0)


def test_extra_token_decimals_bounded():
    """Extra token decimals outside 0..32 should fail validation."""
    with pytest.raises(ValidationError):
        EngineSettings(extra_tokens={"0x1::a::A": {"symbol": "A", "decimals": 99}})
