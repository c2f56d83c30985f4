"""Admission middleware: types, composition, and built-in plugins."""

from .middleware import AdmissionRequest, AdmissionResponse, Middleware, Next, compose
from .plugins import (
    AuthMiddleware,
    BodyRequiredMiddleware,
    CorsMiddleware,
    ErrorMiddleware,
    HeaderAuthMiddleware,
    HeaderValidator,
    LoggingMiddleware,
    RateLimiter,
    RateLimitMiddleware,
    caller_key,
    extract_token,
    token_identity,
)

__all__ = [
    # Core
    "AdmissionRequest", "AdmissionResponse", "Middleware", "Next", "compose",
    # Plugins
    "AuthMiddleware", "HeaderAuthMiddleware", "HeaderValidator", "extract_token", "token_identity",
    "CorsMiddleware", "ErrorMiddleware", "LoggingMiddleware",
    "RateLimiter", "RateLimitMiddleware", "caller_key",
    "BodyRequiredMiddleware",
]
