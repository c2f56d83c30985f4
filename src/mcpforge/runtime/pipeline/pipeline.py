"""Per-call invocation pipeline.

Each call runs a fixed stage sequence, one stage at a time:

    RESOLVE → VALIDATE_INPUT → PRE_HOOKS → EXECUTE → VALIDATE_OUTPUT → POST_HOOKS → RESPOND

Stages raise `CallError` subclasses; the pipeline converts them exactly once,
at its own boundary, into an error envelope. No exception other than
`asyncio.CancelledError` leaves `invoke`.

Example:
    >>> pipeline = InvocationPipeline(registry, DefaultCapabilities())
    >>> result = await pipeline.invoke("calculate", {"operation": "divide", "a": 10, "b": 0})
    >>> result.is_error, result.payload()["message"]
    (True, 'Division by zero')
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from mcpforge.foundation.core import Capabilities, InvocationContext, Replace, RequestInfo
from mcpforge.foundation.errors import (
    CallError,
    Err,
    HandlerFault,
    InputValidationError,
    Ok,
    OutputValidationError,
    ToolNotFoundError,
)
from mcpforge.foundation.registry import ToolRegistry
from mcpforge.foundation.schema import MISSING, BaseNode, Issue, to_input_schema, validate
from mcpforge.runtime.observability import BoundLogger, get_logger

from .envelope import CallToolResult, ToolListing


class Stage(StrEnum):
    RESOLVE = "resolve"
    VALIDATE_INPUT = "validate_input"
    PRE_HOOKS = "pre_hooks"
    EXECUTE = "execute"
    VALIDATE_OUTPUT = "validate_output"
    POST_HOOKS = "post_hooks"
    RESPOND = "respond"


# ═══════════════════════════════════════════════════════════════════════════════
# Stage helpers
# ═══════════════════════════════════════════════════════════════════════════════


async def _call_user(tool_name: str, stage: Stage, fn: Callable[..., object], *args: object) -> object:
    """Run a hook or handler, sync or async. Exceptions become HandlerFault."""
    try:
        result = fn(*args)
        if inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        raise HandlerFault.wrap(tool_name, exc, stage=stage.value) from exc
    return result


def _replacement(tool_name: str, stage: Stage, outcome: object, current: object) -> object:
    match outcome:
        case None:
            return current
        case Replace(value=value):
            return value
        case _:
            raise HandlerFault(
                tool_name,
                TypeError(f"Hook must return Replace(...) or None, got {type(outcome).__name__}"),
                stage=stage.value,
            )


def _checked(node: BaseNode, value: object, fail: Callable[[tuple[Issue, ...]], CallError]) -> object:
    match validate(node, value):
        case Ok(checked):
            return checked
        case Err(issues):
            raise fail(issues)


# ═══════════════════════════════════════════════════════════════════════════════
# Pipeline
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class InvocationPipeline:
    """Resolves, validates, and executes tool calls against a registry.

    Capabilities are injected once and forwarded untouched to every
    invocation context.

    Args:
        registry: Tool descriptors to serve
        capabilities: Capability set handed to hooks and handlers
        logger: Base logger; each call binds `tool` and `request_id`
    """

    registry: ToolRegistry
    capabilities: Capabilities
    logger: BoundLogger = field(default_factory=lambda: get_logger("mcpforge.pipeline"))

    def list_tools(self) -> list[ToolListing]:
        """Catalog in registration order."""
        return [
            ToolListing(name=d.name, description=d.display_description, input_schema=to_input_schema(d.input_schema))
            for d in self.registry.list()
        ]

    async def invoke(
        self,
        name: str,
        arguments: object = MISSING,
        *,
        request_id: str | None = None,
        identity: str | None = None,
        headers: Mapping[str, str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> CallToolResult:
        """Run one call to completion and return its envelope.

        Args:
            name: Tool name to resolve
            arguments: Raw, untrusted input (omitted means absent)
            request_id: Peer-supplied request id, generated when absent
            identity: Caller identity established by admission
            headers: Inbound request headers, exposed read-only to handlers
            cancel: Set by the transport to stop the call between stages

        Raises:
            asyncio.CancelledError: the call was cancelled; partial state is discarded
        """
        started = time.perf_counter()
        request = RequestInfo.create(request_id, headers)
        log = self.logger.bind(tool=name, request_id=request.id)
        stage = Stage.RESOLVE
        ctx: InvocationContext | None = None

        def advance(next_stage: Stage) -> Stage:
            if ctx is not None and ctx.cancelled:
                raise asyncio.CancelledError(f"call cancelled before {next_stage}")
            return next_stage

        try:
            if (descriptor := self.registry.resolve(name)) is None:
                raise ToolNotFoundError(name)
            ctx = InvocationContext(
                capabilities=self.capabilities,
                log=log,
                request=request,
                identity=identity,
                tool_name=name,
                cancel_event=cancel,
            )
            log.debug("tool executing", identity=identity)

            stage = advance(Stage.VALIDATE_INPUT)
            value = _checked(descriptor.input_schema, arguments, lambda issues: InputValidationError(name, issues))

            stage = advance(Stage.PRE_HOOKS)
            for hook in descriptor.pre_hooks:
                value = _replacement(name, stage, await _call_user(name, stage, hook, ctx, value), value)
                advance(stage)

            stage = advance(Stage.EXECUTE)
            output = await _call_user(name, stage, descriptor.handler, value, ctx)

            stage = advance(Stage.VALIDATE_OUTPUT)
            output = _checked(descriptor.output_schema, output, lambda issues: OutputValidationError(name, issues))

            stage = advance(Stage.POST_HOOKS)
            for hook in descriptor.post_hooks:
                output = _replacement(name, stage, await _call_user(name, stage, hook, ctx, value, output), output)
                advance(stage)

            stage = advance(Stage.RESPOND)
            try:
                result = CallToolResult.success(output)
            except TypeError as exc:
                raise HandlerFault(name, exc, stage=stage.value) from exc
        except asyncio.CancelledError:
            log.warning("tool cancelled", stage=stage.value, duration_ms=_elapsed(started))
            raise
        except CallError as fault:
            return self._fail(fault, log, stage, started)
        except Exception as exc:  # noqa: BLE001
            return self._fail(HandlerFault(name, exc, stage=stage.value), log, stage, started)

        log.info("tool completed", duration_ms=_elapsed(started))
        return result

    def _fail(self, fault: CallError, log: BoundLogger, stage: Stage, started: float) -> CallToolResult:
        error = fault.to_error()
        kw = {"stage": stage.value, "code": error.code.value, "duration_ms": _elapsed(started)}
        match fault:
            case HandlerFault():
                log.exception("tool failed", error=str(fault), **kw)
            case OutputValidationError():
                log.error("tool failed", error=error.error, issues=len(fault.issues), **kw)
            case _:
                log.warning("tool failed", error=error.error, **kw)
        return CallToolResult.failure(error)


def _elapsed(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
