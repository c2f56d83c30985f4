"""Structured, context-bound logging for servers, pipelines and middleware.

Every entry is an event name plus key/value context (`tool`, `request_id`,
`stage`, `duration_ms`, ...). Loggers are immutable; `bind()` returns a new
one with merged context, so the pipeline can hand each call its own logger
without affecting the server's.

All renderers write to stderr unless told otherwise: on the stdio transport
stdout carries protocol frames and must stay clean.

Quick Start:
    >>> from mcpforge.runtime.observability import configure_logging, get_logger
    >>> configure_logging(format="console", level="DEBUG")
    >>> log = get_logger("mcpforge.server").bind(server="demo-mcp")
    >>> log.info("tool registered", tool="greet", total=1)
    # => 10:30:45.120 [info] tool registered logger=mcpforge.server server=demo-mcp tool=greet total=1
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

import orjson

from mcpforge.foundation.errors import JsonDict, JsonValue

if TYPE_CHECKING:
    from mcpforge.foundation.config import LoggingSettings


@dataclass(slots=True)
class LogEntry:
    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def iso_time(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat(timespec="milliseconds")

    @property
    def clock_time(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


# ─────────────────────────────────────────────────────────────────────────────
# Process-wide defaults
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class _Defaults:
    renderer: LogRenderer | None = None
    level: int = logging.INFO


_defaults = _Defaults()


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class BoundLogger:
    """Logger carrying bound context.

    `renderer` and `level` fall back to the process-wide defaults set by
    `configure_logging`, looked up on every call, so loggers created at
    import time follow later configuration.

    Example:
        >>> log = get_logger("mcpforge.pipeline").bind(tool="calculate", request_id="a1b2")
        >>> log.warning("tool failed", stage="validate_input", code="INVALID_PARAMS")
    """

    context: JsonDict = field(default_factory=dict)
    renderer: LogRenderer | None = None
    level: int | None = None

    def bind(self, **kw: JsonValue) -> BoundLogger:
        return BoundLogger({**self.context, **kw}, self.renderer, self.level)

    def unbind(self, *keys: str) -> BoundLogger:
        return BoundLogger({k: v for k, v in self.context.items() if k not in keys}, self.renderer, self.level)

    def enabled_for(self, level: int) -> bool:
        return level >= (self.level if self.level is not None else _defaults.level)

    def _emit(self, level: int, event: str, kw: JsonDict) -> None:
        if not self.enabled_for(level):
            return
        renderer = self.renderer or _defaults.renderer or _install_default()
        renderer.render(LogEntry(time.time(), logging.getLevelName(level).lower(), event, {**self.context, **kw}))

    def debug(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.DEBUG, event, kw)

    def info(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.INFO, event, kw)

    def warning(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.WARNING, event, kw)

    def error(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.ERROR, event, kw)

    def exception(self, event: str, **kw: JsonValue) -> None:
        """Log at error level with the traceback of the exception being handled."""
        self._emit(logging.ERROR, event, {**kw, "exc_info": traceback.format_exc()})


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


_ANSI = {"reset": "\033[0m", "dim": "\033[2m", "bold": "\033[1m", "key": "\033[36m", "err": "\033[31m"}
_LEVEL_ANSI = {"debug": "\033[2m", "info": "\033[32m", "warning": "\033[33m", "error": "\033[31m", "critical": "\033[31m"}


@dataclass(slots=True)
class ConsoleRenderer:
    """One line per entry: `HH:MM:SS.mmm [level] event key=value ...`, tracebacks below."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def render(self, entry: LogEntry) -> None:
        paint = (lambda code, text: f"{code}{text}{_ANSI['reset']}") if self.colors else (lambda code, text: text)
        pairs = " ".join(
            f"{paint(_ANSI['key'], k)}={_console_value(v)}"
            for k, v in sorted(entry.context.items())
            if k != "exc_info"
        )
        line = f"{paint(_ANSI['dim'], entry.clock_time)} {paint(_LEVEL_ANSI.get(entry.level, ''), f'[{entry.level}]')} "
        line += paint(_ANSI["bold"], entry.event) + (f" {pairs}" if pairs else "")
        print(line, file=self.output)
        if exc := entry.context.get("exc_info"):
            print(paint(_ANSI["err"], str(exc).rstrip()), file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines, one object per entry, for log shippers."""

    output: TextIO = field(default_factory=lambda: sys.stderr)

    def render(self, entry: LogEntry) -> None:
        record = {"ts": entry.iso_time, "level": entry.level, "event": entry.event, **entry.context}
        self.output.write(orjson.dumps(record, option=orjson.OPT_NON_STR_KEYS | orjson.OPT_APPEND_NEWLINE, default=str).decode())
        self.output.flush()


class NoOpRenderer:
    __slots__ = ()

    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class CaptureRenderer:
    """Keeps entries in memory so tests can assert on them."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level is None or e.level == level]


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────


def configure_logging(
    format: str = "console",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Set the process-wide renderer and level. Format: "console", "json" or "none"."""
    renderer: LogRenderer
    match format:
        case "console":
            renderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json":
            renderer = JsonRenderer(output=output or sys.stderr)
        case "none":
            renderer = NoOpRenderer()
        case _:
            raise ValueError(f"Unknown log format {format!r}: use 'console', 'json' or 'none'")
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level {level!r}")
    _defaults.renderer, _defaults.level = renderer, resolved
    return renderer


def configure_from_settings(settings: LoggingSettings) -> LogRenderer:
    return configure_logging(settings.format, settings.level)


def get_logger(name: str | None = None, *, renderer: LogRenderer | None = None, **context: JsonValue) -> BoundLogger:
    """Logger with `logger=<name>` bound, plus any extra context."""
    if name:
        context["logger"] = name
    return BoundLogger(context, renderer)


def _install_default() -> LogRenderer:
    _defaults.renderer = ConsoleRenderer()
    return _defaults.renderer


def _console_value(v: object) -> str:
    match v:
        case None:
            return "null"
        case bool():
            return "true" if v else "false"
        case str() if " " in v or not v:
            return f'"{v}"'
        case dict() | list() | tuple():
            return orjson.dumps(v, option=orjson.OPT_NON_STR_KEYS, default=str).decode()
        case _:
            return str(v)
