"""Tests for environment settings and option models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mcpforge.foundation.config import (
    AuthOptions,
    CorsOptions,
    ServerSettings,
    clear_settings_cache,
    get_settings,
)
from mcpforge.foundation.errors import ConfigurationError


def test_defaults(settings: ServerSettings) -> None:
    assert settings.name == "mcpforge"
    assert settings.logging.level == "INFO"
    assert settings.rate_limit.options() is None
    assert settings.cors.options() is None
    assert settings.is_development
    assert settings.user_agent == "mcpforge/1.0.0"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCPFORGE_ENVIRONMENT", "PRODUCTION")
    monkeypatch.setenv("MCPFORGE_LOG_LEVEL", "debug")
    monkeypatch.setenv("MCPFORGE_RATELIMIT_ENABLED", "1")
    monkeypatch.setenv("MCPFORGE_RATELIMIT_TIME_WINDOW", "1500")
    monkeypatch.setenv("MCPFORGE_CORS_ENABLED", "true")
    monkeypatch.setenv("MCPFORGE_CORS_ORIGIN", "https://app.example")
    settings = ServerSettings(_env_file=None)
    assert settings.environment == "production"
    assert not settings.is_development
    assert settings.logging.level == "DEBUG"
    assert settings.rate_limit.options().window_ms == 1500
    assert settings.cors.options().origin_header == "https://app.example"


def test_bad_window_fails_at_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCPFORGE_RATELIMIT_TIME_WINDOW", "1w")
    with pytest.raises(ConfigurationError):
        ServerSettings(_env_file=None)


def test_get_settings_cached() -> None:
    first = get_settings()
    assert get_settings() is first
    clear_settings_cache()
    assert get_settings() is not first


@pytest.mark.parametrize(
    ("options", "header"),
    [
        (AuthOptions(type="apiKey"), "x-api-key"),
        (AuthOptions(type="apiKey", headerName="X-Key"), "x-key"),
        (AuthOptions(type="bearer", headerName="X-Ignored"), "authorization"),
        (AuthOptions(type="custom"), "authorization"),
    ],
)
def test_auth_effective_header(options: AuthOptions, header: str) -> None:
    assert options.effective_header == header


def test_auth_type_validated() -> None:
    with pytest.raises(ValidationError):
        AuthOptions(type="oauth")  # type: ignore[arg-type]


def test_cors_origin_header() -> None:
    assert CorsOptions().origin_header == "*"
    assert CorsOptions(origin=True).origin_header == "*"
    assert CorsOptions(origin=["https://a", "https://b"]).origin_header == "https://a, https://b"
