# tests/unit/config/test_settings.py
from __future__ import annotations

import pytest
from pydantic import SecretStr, ValidationError

from tickerbot.config.settings import Environment, get_settings


def test_defaults(make_settings) -> None:
    s = make_settings()
    assert s.environment is Environment.TEST
    assert s.cache_backend == "memory"
    assert s.rate_limit_policy == "fixed"
    assert s.rate_limit_window_seconds == 60
    assert s.history_days == 7
    assert s.cache_ttl_quote_s == 300
    assert s.cache_ttl_summary_s == 28_800
    assert s.command_timeout_s > s.summary_timeout_s


def test_production_requires_public_key(make_settings) -> None:
    with pytest.raises(ValidationError, match="DISCORD_PUBLIC_KEY"):
        make_settings(ENVIRONMENT="production")


def test_production_rejects_dev_mode(make_settings) -> None:
    with pytest.raises(ValidationError, match="DEV_MODE"):
        make_settings(ENVIRONMENT="production", DISCORD_PUBLIC_KEY="ab" * 32, DEV_MODE=True)


def test_unknown_keys_are_rejected(make_settings) -> None:
    with pytest.raises(ValidationError):
        make_settings(NOT_A_SETTING="x")


@pytest.mark.parametrize(
    ("overrides", "expected"),
    [
        (
            {"OPENAI_API_KEY": "sk-o"},
            ("https://api.openai.com/v1", "sk-o", "gpt-4o-mini"),
        ),
        (
            {"SUMMARY_PROVIDER": "perplexity", "PERPLEXITY_API_KEY": "pplx"},
            ("https://api.perplexity.ai", "pplx", "sonar"),
        ),
    ],
)
def test_summary_credentials_follow_provider(make_settings, overrides, expected) -> None:
    base_url, key, model = make_settings(**overrides).summary_credentials()
    assert isinstance(key, SecretStr)
    assert (base_url, key.get_secret_value(), model) == expected


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "15")
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    assert get_settings().rate_limit_window_seconds == 15
    assert get_settings() is get_settings()


def test_get_settings_wraps_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.delenv("DISCORD_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("DEV_MODE", raising=False)
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        get_settings()
