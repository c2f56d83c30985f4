"""Environment-based configuration using pydantic-settings.

Also holds the option models for admission middleware (rate limit, auth,
CORS). Malformed rate-limit windows are rejected when the options are built,
so a bad configuration fails at startup rather than on a live call.

Example:
    >>> from mcpforge.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # MCPFORGE_NAME=demo-mcp
    # MCPFORGE_LOG_LEVEL=DEBUG
    # MCPFORGE_RATELIMIT_ENABLED=true
    # MCPFORGE_RATELIMIT_TIME_WINDOW=1m
"""

from __future__ import annotations

from collections.abc import Awaitable
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Any, Callable, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    computed_field,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcpforge.foundation.errors import ConfigurationError

if TYPE_CHECKING:
    from mcpforge.foundation.core.context import InvocationContext

AuthType = Literal["apiKey", "bearer", "custom"]
# (token, ctx) -> bool, or the caller identity as a str; sync or async
TokenValidator = Callable[[str, "InvocationContext"], "bool | str | Awaitable[bool | str]"]

_UNIT_MS: dict[str, int] = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}


def parse_time_window(window: int | str) -> int:
    """Parse a rate-limit window into milliseconds.

    Accepts a positive integer (milliseconds) or the compact `<int><s|m|h|d>` form.

    Raises:
        ConfigurationError: malformed string, unknown unit, or non-positive window

    Example:
        >>> parse_time_window("1m")
        60000
        >>> parse_time_window(1500)
        1500
    """
    if isinstance(window, bool):
        raise ConfigurationError(f"Invalid time window format: {window!r}")
    if isinstance(window, int):
        if window <= 0:
            raise ConfigurationError(f"Time window must be positive, got {window}")
        return window
    if not isinstance(window, str):
        raise ConfigurationError(f"Invalid time window format: {window!r}")
    digits, unit = window[:-1], window[-1:]
    if not digits.isdigit() or not digits.isascii() or unit not in _UNIT_MS:
        raise ConfigurationError(f"Invalid time window format: {window}")
    if (ms := int(digits) * _UNIT_MS[unit]) <= 0:
        raise ConfigurationError(f"Time window must be positive, got {window}")
    return ms


# ═══════════════════════════════════════════════════════════════════════════════
# Admission Options
# ═══════════════════════════════════════════════════════════════════════════════


class RateLimitOptions(BaseModel):
    """Sliding-window limit: at most `max` accepted calls per `time_window`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    max: PositiveInt
    time_window: int | str = Field(alias="timeWindow")

    @field_validator("time_window")
    @classmethod
    def _check_window(cls, v: int | str) -> int | str:
        parse_time_window(v)
        return v

    @computed_field
    @property
    def window_ms(self) -> int:
        return parse_time_window(self.time_window)

    @property
    def window_label(self) -> str:
        """Window as configured, e.g. `1m` or `1500ms`."""
        return self.time_window if isinstance(self.time_window, str) else f"{self.time_window}ms"


class AuthOptions(BaseModel):
    """Token extraction scheme plus an optional accept/reject callback.

    - apiKey: token read from `header_name` (default `x-api-key`)
    - bearer: token is the `Authorization: Bearer <token>` value
    - custom: token is the raw value of `header_name` (default `authorization`)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=True)

    type: AuthType
    header_name: str | None = Field(default=None, alias="headerName")
    validate_token: Callable[..., Any] | None = Field(default=None, alias="validate", exclude=True)

    @property
    def effective_header(self) -> str:
        match self.type:
            case "apiKey":
                return (self.header_name or "x-api-key").lower()
            case "bearer":
                return "authorization"
            case _:
                return (self.header_name or "authorization").lower()


class CorsOptions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    origin: str | list[str] | bool = "*"
    methods: list[str] = Field(default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"])
    allowed_headers: list[str] = Field(default_factory=lambda: ["Content-Type", "Authorization"], alias="allowedHeaders")
    exposed_headers: list[str] = Field(default_factory=list, alias="exposedHeaders")
    credentials: bool = False
    max_age: NonNegativeInt | None = Field(default=None, alias="maxAge")

    @property
    def origin_header(self) -> str:
        match self.origin:
            case bool():
                return "*"
            case list():
                return ", ".join(self.origin)
            case _:
                return self.origin


# ═══════════════════════════════════════════════════════════════════════════════
# Environment Settings
# ═══════════════════════════════════════════════════════════════════════════════


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MCPFORGE_LOG_", extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RateLimitSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MCPFORGE_RATELIMIT_", extra="ignore")

    enabled: bool = False
    max: PositiveInt = Field(default=100, description="Max accepted calls per window")
    time_window: int | str = Field(default="1m", description="Window in ms or <int><s|m|h|d>")
    default_key: str = Field(default="unknown", description="Key used when caller identity is unavailable")

    @field_validator("time_window", mode="before")
    @classmethod
    def _window(cls, v: int | str) -> int | str:
        if isinstance(v, str) and v.isdigit():
            v = int(v)
        parse_time_window(v)
        return v

    def options(self) -> RateLimitOptions | None:
        return RateLimitOptions(max=self.max, time_window=self.time_window) if self.enabled else None


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MCPFORGE_AUTH_", extra="ignore")

    type: AuthType | None = None
    header_name: str | None = None


class CorsSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MCPFORGE_CORS_", extra="ignore")

    enabled: bool = False
    origin: str = "*"
    credentials: bool = False
    max_age: NonNegativeInt | None = None

    def options(self) -> CorsOptions | None:
        return CorsOptions(origin=self.origin, credentials=self.credentials, max_age=self.max_age) if self.enabled else None


class HttpSettings(BaseSettings):
    """Defaults for the network capability handed to tool handlers."""

    model_config = SettingsConfigDict(env_prefix="MCPFORGE_HTTP_", extra="ignore")

    timeout: PositiveFloat = Field(default=30.0, description="Request timeout in seconds")
    user_agent: str | None = Field(default=None, description="Defaults to <name>/<version>")


class ServerSettings(BaseSettings):
    """Root settings. Loads `MCPFORGE_*` environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_prefix="MCPFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    name: Annotated[str, Field(min_length=1)] = "mcpforge"
    version: str = "1.0.0"
    description: str | None = None
    environment: Literal["development", "staging", "production"] = "development"
    port: PositiveInt = 3000

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def user_agent(self) -> str:
        return self.http.user_agent or f"{self.name}/{self.version}"


@lru_cache(maxsize=1)
def get_settings() -> ServerSettings:
    """Get the global settings instance (cached)."""
    return ServerSettings()


def clear_settings_cache() -> None:
    """Clear cached settings (for testing or reload)."""
    get_settings.cache_clear()
