"""Tests for the structured logger and its renderers."""

from __future__ import annotations

import io

import orjson
import pytest

from mcpforge.runtime.observability import (
    CaptureRenderer,
    ConsoleRenderer,
    JsonRenderer,
    configure_logging,
    get_logger,
)
from mcpforge.runtime.observability import logging as obs


@pytest.fixture(autouse=True)
def restore_defaults():
    saved = (obs._defaults.renderer, obs._defaults.level)
    yield
    obs._defaults.renderer, obs._defaults.level = saved


def test_bind_merges_without_mutating_parent(capture: CaptureRenderer):
    base = get_logger("svc", renderer=capture)
    child = base.bind(tool="greet")
    base.info("plain")
    child.info("bound", total=1)
    assert capture.entries[0].context == {"logger": "svc"}
    assert capture.entries[1].context == {"logger": "svc", "tool": "greet", "total": 1}


def test_unbind_drops_keys(capture: CaptureRenderer):
    get_logger("svc", renderer=capture, a=1, b=2).unbind("a").info("x")
    assert capture.entries[0].context == {"logger": "svc", "b": 2}


def test_default_level_suppresses_debug(capture: CaptureRenderer):
    log = get_logger("svc", renderer=capture)
    log.debug("hidden")
    log.warning("shown")
    assert capture.events() == ["shown"]
    assert capture.entries[0].level == "warning"


def test_configure_changes_level_for_existing_loggers(capture: CaptureRenderer):
    log = get_logger("svc", renderer=capture)
    configure_logging("none", "DEBUG")
    log.debug("visible now")
    assert capture.events("debug") == ["visible now"]


def test_exception_attaches_traceback(capture: CaptureRenderer):
    log = get_logger("svc", renderer=capture)
    try:
        raise ValueError("boom")
    except ValueError:
        log.exception("failed", stage="execute")
    entry = capture.entries[0]
    assert entry.level == "error"
    assert "ValueError: boom" in entry.context["exc_info"]


def test_json_renderer_writes_one_object_per_line():
    out = io.StringIO()
    log = get_logger("svc", renderer=JsonRenderer(output=out))
    log.info("tool registered", tool="greet")
    log.info("tool registered", tool="calculate")
    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    record = orjson.loads(lines[1])
    assert record["event"] == "tool registered"
    assert record["level"] == "info"
    assert record["tool"] == "calculate"
    assert record["ts"].endswith("+00:00")


def test_console_renderer_plain_line():
    out = io.StringIO()
    get_logger("svc", renderer=ConsoleRenderer(output=out, colors=False)).info(
        "tool failed", reason="not found", ok=False, extra=None
    )
    line = out.getvalue().strip()
    assert "[info] tool failed" in line
    assert 'reason="not found"' in line
    assert "ok=false" in line
    assert "extra=null" in line
    assert "\033[" not in line


def test_console_renderer_skips_colors_for_non_tty():
    assert ConsoleRenderer(output=io.StringIO()).colors is False


@pytest.mark.parametrize(("fmt", "cls"), [("console", ConsoleRenderer), ("json", JsonRenderer)])
def test_configure_logging_formats(fmt, cls):
    assert isinstance(configure_logging(fmt, output=io.StringIO()), cls)


def test_configure_logging_rejects_unknown():
    with pytest.raises(ValueError, match="Unknown log format"):
        configure_logging("xml")
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("none", "LOUD")
