"""Sliding-window rate limiting keyed by caller identity."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from mcpforge.foundation.config import RateLimitOptions
from mcpforge.runtime.observability import BoundLogger, get_logger

from ..middleware import AdmissionRequest, AdmissionResponse, Next


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass
class RateLimiter:
    """Per-key sliding-window counter.

    A key's history holds the timestamps (ms) of accepted calls still inside
    the trailing window. `check` first drops entries with `now - t >= window`,
    then accepts and records `now` only if fewer than `max_calls` remain.
    Rejections do not touch state.

    Buckets are created on first use and deleted when they are found empty
    on a later access to the same key; there is no background sweep. One
    lock guards every bucket, so threaded callers cannot push a key past
    `max_calls` and no per-key state outlives its bucket.

    Example:
        >>> limiter = RateLimiter(max_calls=2, window_ms=1000)
        >>> [limiter.check("10.0.0.1") for _ in range(3)]
        [True, True, False]
    """

    max_calls: int
    window_ms: float
    clock: Callable[[], float] = field(default=_monotonic_ms, repr=False)
    _buckets: dict[str, deque[float]] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        if self.max_calls < 1:
            raise ValueError(f"max_calls must be >= 1, got {self.max_calls}")
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")

    @classmethod
    def from_options(cls, options: RateLimitOptions, *, clock: Callable[[], float] | None = None) -> RateLimiter:
        return cls(options.max, options.window_ms, **({"clock": clock} if clock else {}))

    def check(self, key: str) -> bool:
        """Record a call for `key`. Returns True if accepted."""
        with self._lock:
            now = self.clock()
            bucket = self._buckets.get(key)
            if bucket is not None:
                while bucket and now - bucket[0] >= self.window_ms:
                    bucket.popleft()
                if not bucket:
                    del self._buckets[key]
                    bucket = None
            if bucket is not None and len(bucket) >= self.max_calls:
                return False
            if bucket is None:
                bucket = self._buckets[key] = deque()
            bucket.append(now)
            return True

    def remaining(self, key: str) -> int:
        """Calls still available to `key` in the current window (read-only)."""
        with self._lock:
            now = self.clock()
            live = sum(1 for t in self._buckets.get(key, ()) if now - t < self.window_ms)
            return max(self.max_calls - live, 0)

    def reset(self, key: str) -> None:
        """Clear a key's history."""
        with self._lock:
            self._buckets.pop(key, None)

    @property
    def active_keys(self) -> int:
        return len(self._buckets)


def caller_key(request: AdmissionRequest, default: str = "unknown") -> str:
    """Identity used for limiting: identity, client IP, first X-Forwarded-For hop, then `default`."""
    if request.identity:
        return request.identity
    if request.client_ip:
        return request.client_ip
    if forwarded := request.header("x-forwarded-for"):
        if first := forwarded.split(",")[0].strip():
            return first
    return default


@dataclass
class RateLimitMiddleware:
    """Reject callers exceeding `max` calls per window with 429.

    Args:
        options: Limit and window (window validated when options are built)
        default_key: Key when the caller cannot be identified
        clock: Millisecond clock, injectable for tests

    Example:
        >>> server.use(RateLimitMiddleware(RateLimitOptions(max=100, time_window="1m")))
    """

    options: RateLimitOptions
    default_key: str = "unknown"
    clock: Callable[[], float] | None = field(default=None, repr=False)
    log: BoundLogger = field(default_factory=lambda: get_logger("mcpforge.middleware.rate_limit"), repr=False)
    limiter: RateLimiter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.limiter = RateLimiter.from_options(self.options, clock=self.clock)

    async def __call__(self, request: AdmissionRequest, next: Next) -> AdmissionResponse:
        key = caller_key(request, self.default_key)
        if not self.limiter.check(key):
            self.log.warning("rate limit exceeded", key=key, max=self.options.max, window=self.options.window_label)
            return AdmissionResponse.reject(
                429,
                "Too many requests",
                f"Rate limit exceeded. Max {self.options.max} requests per {self.options.window_label}",
            )
        return await next(request)
