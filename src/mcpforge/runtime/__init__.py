"""Runtime - Execution flow, admission, and monitoring.

Contains: invocation pipeline, admission middleware, observability.
"""

from __future__ import annotations

__all__ = [
    # Pipeline
    "InvocationPipeline", "Stage", "CallToolResult", "TextContent", "ToolListing",
    # Middleware
    "AdmissionRequest", "AdmissionResponse", "Middleware", "Next", "compose",
    "AuthMiddleware", "HeaderAuthMiddleware", "CorsMiddleware", "ErrorMiddleware", "LoggingMiddleware",
    "RateLimiter", "RateLimitMiddleware", "BodyRequiredMiddleware",
    # Observability
    "BoundLogger", "get_logger", "configure_logging", "configure_from_settings",
]

_PIPELINE = {"InvocationPipeline", "Stage", "CallToolResult", "TextContent", "ToolListing"}
_MIDDLEWARE = {"AdmissionRequest", "AdmissionResponse", "Middleware", "Next", "compose",
               "AuthMiddleware", "HeaderAuthMiddleware", "CorsMiddleware", "ErrorMiddleware", "LoggingMiddleware",
               "RateLimiter", "RateLimitMiddleware", "BodyRequiredMiddleware"}


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in _PIPELINE:
        from . import pipeline
        return getattr(pipeline, name)
    if name in _MIDDLEWARE:
        from . import middleware
        return getattr(middleware, name)
    if name in ("BoundLogger", "get_logger", "configure_logging", "configure_from_settings"):
        from . import observability
        return getattr(observability, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
