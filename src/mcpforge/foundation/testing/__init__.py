"""Testing utilities: fake capabilities, manual clock, single-tool helpers."""

from .fakes import (
    FakeCapabilities,
    ManualClock,
    MemoryStorage,
    MockHttp,
    MockResponse,
    call_tool,
    make_context,
    quiet_logger,
)

__all__ = [
    "FakeCapabilities", "MockHttp", "MockResponse", "MemoryStorage", "ManualClock",
    "call_tool", "make_context", "quiet_logger",
]
