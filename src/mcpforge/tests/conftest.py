"""Shared fixtures."""

from __future__ import annotations

import os

import pytest

from mcpforge.foundation import schema as s
from mcpforge.foundation.config import ServerSettings, clear_settings_cache
from mcpforge.foundation.core import define_tool
from mcpforge.foundation.registry import ToolRegistry
from mcpforge.foundation.testing import FakeCapabilities, quiet_logger
from mcpforge.runtime.observability import BoundLogger, CaptureRenderer, get_logger
from mcpforge.runtime.pipeline import InvocationPipeline


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep host MCPFORGE_* variables from leaking into tests."""
    for key in [k for k in os.environ if k.startswith("MCPFORGE_")]:
        monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(_env_file=None)


@pytest.fixture
def capture() -> CaptureRenderer:
    return CaptureRenderer()


@pytest.fixture
def log(capture: CaptureRenderer) -> BoundLogger:
    return get_logger("test", renderer=capture)


@pytest.fixture
def caps() -> FakeCapabilities:
    return FakeCapabilities.with_env(API_KEY="secret")


@pytest.fixture
def echo_tool():
    return define_tool(
        name="echo",
        description="Echo a message",
        input=s.object({"message": s.string(), "times": s.integer(minimum=1).with_default(1)}),
        output=s.object({"echo": s.string()}),
        handler=lambda input, ctx: {"echo": input["message"] * input["times"]},
    )


@pytest.fixture
def registry(echo_tool) -> ToolRegistry:
    return ToolRegistry([echo_tool], logger=quiet_logger())


@pytest.fixture
def pipeline(registry: ToolRegistry, caps: FakeCapabilities, log: BoundLogger) -> InvocationPipeline:
    return InvocationPipeline(registry, caps, log)
