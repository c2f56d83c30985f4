"""Configuration: environment settings and admission option models."""

from .settings import (
    AuthOptions,
    AuthSettings,
    AuthType,
    CorsOptions,
    CorsSettings,
    HttpSettings,
    LoggingSettings,
    RateLimitOptions,
    RateLimitSettings,
    ServerSettings,
    TokenValidator,
    clear_settings_cache,
    get_settings,
    parse_time_window,
)

__all__ = [
    "ServerSettings", "get_settings", "clear_settings_cache",
    "LoggingSettings", "RateLimitSettings", "AuthSettings", "CorsSettings", "HttpSettings",
    "RateLimitOptions", "AuthOptions", "CorsOptions", "AuthType", "TokenValidator",
    "parse_time_window",
]
