"""Built-in admission middleware.

Order matters: the first middleware passed to `compose` runs first. A
typical chain is errors → logging → cors → auth → rate limit → body check.
"""

from .auth import AuthMiddleware, HeaderAuthMiddleware, HeaderValidator, extract_token, token_identity
from .cors import CorsMiddleware
from .errors import ErrorMiddleware
from .logging import LoggingMiddleware
from .rate_limit import RateLimiter, RateLimitMiddleware, caller_key
from .validation import BodyRequiredMiddleware

__all__ = [
    "AuthMiddleware", "HeaderAuthMiddleware", "HeaderValidator", "extract_token", "token_identity",
    "CorsMiddleware",
    "ErrorMiddleware",
    "LoggingMiddleware",
    "RateLimiter", "RateLimitMiddleware", "caller_key",
    "BodyRequiredMiddleware",
]
