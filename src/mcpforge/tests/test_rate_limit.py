"""Tests for sliding-window rate limiting and window parsing."""

from __future__ import annotations

import threading

import pytest
from pydantic import ValidationError

from mcpforge.foundation.config import RateLimitOptions, parse_time_window
from mcpforge.foundation.errors import ConfigurationError
from mcpforge.foundation.testing import ManualClock, quiet_logger
from mcpforge.runtime.middleware import AdmissionRequest, AdmissionResponse, RateLimiter, RateLimitMiddleware, caller_key


# ═════════════════════════════════════════════════════════════════════════════
# Window parsing
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    ("window", "ms"),
    [("1s", 1000), ("1m", 60_000), ("2h", 7_200_000), ("1d", 86_400_000), (1500, 1500), ("90s", 90_000)],
)
def test_parse_time_window(window, ms) -> None:
    assert parse_time_window(window) == ms


@pytest.mark.parametrize("window", ["", "m", "10", "1w", "1.5m", "-1m", "0m", 0, -5, True, 1.5])
def test_parse_time_window_rejects(window) -> None:
    with pytest.raises(ConfigurationError):
        parse_time_window(window)


def test_options_validate_window_at_construction() -> None:
    with pytest.raises(ConfigurationError, match="Invalid time window format: soon"):
        RateLimitOptions(max=10, time_window="soon")
    with pytest.raises(ValidationError):
        RateLimitOptions(max=0, time_window="1m")


def test_options_aliases_and_label() -> None:
    options = RateLimitOptions.model_validate({"max": 100, "timeWindow": "1m"})
    assert options.window_ms == 60_000
    assert options.window_label == "1m"
    assert RateLimitOptions(max=1, time_window=1500).window_label == "1500ms"


# ═════════════════════════════════════════════════════════════════════════════
# Limiter
# ═════════════════════════════════════════════════════════════════════════════


def test_sliding_window() -> None:
    clock = ManualClock()
    limiter = RateLimiter(max_calls=2, window_ms=1000, clock=clock)
    assert [limiter.check("a"), limiter.check("a"), limiter.check("a")] == [True, True, False]
    clock.advance(999)
    assert not limiter.check("a")
    clock.advance(1)
    assert limiter.check("a")


def test_window_slides_per_call() -> None:
    clock = ManualClock()
    limiter = RateLimiter(max_calls=2, window_ms=1000, clock=clock)
    limiter.check("a")
    clock.advance(600)
    limiter.check("a")
    clock.advance(500)
    # first call has left the window, second is still in it
    assert limiter.check("a")
    assert not limiter.check("a")


def test_rejections_do_not_extend_window() -> None:
    clock = ManualClock()
    limiter = RateLimiter(max_calls=1, window_ms=1000, clock=clock)
    assert limiter.check("a")
    for _ in range(5):
        clock.advance(100)
        assert not limiter.check("a")
    clock.advance(500)
    assert limiter.check("a")


def test_keys_are_independent() -> None:
    limiter = RateLimiter(max_calls=1, window_ms=1000, clock=ManualClock())
    assert limiter.check("a")
    assert limiter.check("b")
    assert not limiter.check("a")


def test_remaining_and_reset() -> None:
    clock = ManualClock()
    limiter = RateLimiter(max_calls=3, window_ms=1000, clock=clock)
    limiter.check("a")
    limiter.check("a")
    assert limiter.remaining("a") == 1
    assert limiter.remaining("never") == 3
    limiter.reset("a")
    assert limiter.remaining("a") == 3


def test_state_tracks_only_live_keys() -> None:
    clock = ManualClock()
    limiter = RateLimiter(max_calls=1, window_ms=1000, clock=clock)
    for i in range(1000):
        limiter.check(f"k{i}")
        limiter.reset(f"k{i}")
    assert limiter.active_keys == 0
    limiter.remaining("never-seen")
    assert limiter.active_keys == 0

    limiter.check("a")
    clock.advance(1000)
    limiter.check("a")
    assert limiter.active_keys == 1
    assert list(limiter._buckets) == ["a"]


def test_concurrent_checks_never_exceed_limit() -> None:
    limiter = RateLimiter(max_calls=50, window_ms=60_000)
    accepted: list[bool] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(20):
            ok = limiter.check("shared")
            with lock:
                accepted.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sum(accepted) == 50


@pytest.mark.parametrize(("max_calls", "window_ms"), [(0, 1000), (1, 0)])
def test_limiter_rejects_bad_arguments(max_calls, window_ms) -> None:
    with pytest.raises(ValueError):
        RateLimiter(max_calls=max_calls, window_ms=window_ms)


# ═════════════════════════════════════════════════════════════════════════════
# Middleware
# ═════════════════════════════════════════════════════════════════════════════


def test_caller_key_precedence() -> None:
    req = AdmissionRequest("POST", "/tools/x", {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert caller_key(req) == "203.0.113.7"
    req.client_ip = "10.0.0.2"
    assert caller_key(req) == "10.0.0.2"
    req.identity = "user-1"
    assert caller_key(req) == "user-1"
    assert caller_key(AdmissionRequest("POST", "/tools/x"), "anon") == "anon"


@pytest.mark.asyncio
async def test_middleware_rejects_with_429() -> None:
    clock = ManualClock()
    mw = RateLimitMiddleware(RateLimitOptions(max=2, time_window="1m"), clock=clock, log=quiet_logger())

    async def endpoint(request: AdmissionRequest) -> AdmissionResponse:
        return AdmissionResponse(body={"ok": True})

    statuses = [(await mw(AdmissionRequest("POST", "/tools/x", client_ip="1.2.3.4"), endpoint)).status for _ in range(3)]
    assert statuses == [200, 200, 429]

    rejected = await mw(AdmissionRequest("POST", "/tools/x", client_ip="1.2.3.4"), endpoint)
    assert rejected.body == {"error": "Too many requests", "message": "Rate limit exceeded. Max 2 requests per 1m"}

    other = await mw(AdmissionRequest("POST", "/tools/x", client_ip="5.6.7.8"), endpoint)
    assert other.status == 200

    clock.advance(60_000)
    assert (await mw(AdmissionRequest("POST", "/tools/x", client_ip="1.2.3.4"), endpoint)).status == 200
