"""Error taxonomy and structured error payloads for tool invocation.

Two families live here:

- Startup faults (`DuplicateToolError`, `ConfigurationError`) propagate and
  are allowed to abort the process.
- Per-call faults (`ToolNotFoundError`, `InputValidationError`,
  `OutputValidationError`, `HandlerFault`) are raised inside pipeline stages
  and converted exactly once, at the pipeline boundary, into a `ToolError`
  which renders the error envelope text returned to the peer.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Self

import orjson
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .types import JsonDict

if TYPE_CHECKING:
    from mcpforge.foundation.schema import Issue


class ErrorCode(StrEnum):
    """Machine-readable error classification."""
    NOT_FOUND = "NOT_FOUND"
    INVALID_PARAMS = "INVALID_PARAMS"
    INVALID_OUTPUT = "INVALID_OUTPUT"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    DUPLICATE_TOOL = "DUPLICATE_TOOL"
    CONFIGURATION = "CONFIGURATION"
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"
    CANCELLED = "CANCELLED"


# Codes that indicate a defect on the server side rather than a caller mistake
_SERVER_FAULT_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.INVALID_OUTPUT,
    ErrorCode.EXECUTION_FAILED,
})


# ═══════════════════════════════════════════════════════════════════════════════
# Structured Error Payload
# ═══════════════════════════════════════════════════════════════════════════════


class ToolError(BaseModel):
    """Structured error for a failed tool call.

    Attributes:
        tool_name: Name of the tool the call addressed
        error: Short error code/message shown to the peer
        code: Machine-readable classification
        details: Structured diagnostics (validation issue list)
        message: Free-text diagnostic (underlying fault message)
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "title": "Tool Error",
            "examples": [{
                "tool_name": "calculate",
                "error": "Tool execution failed",
                "code": "EXECUTION_FAILED",
                "message": "Division by zero",
            }],
        },
    )

    tool_name: str
    error: Annotated[str, Field(min_length=1)]
    code: ErrorCode = ErrorCode.EXECUTION_FAILED
    details: list[JsonDict] | None = None
    message: str | None = None

    @computed_field
    @property
    def is_server_fault(self) -> bool:
        """Whether the failure is the tool's own defect rather than the caller's."""
        return self.code in _SERVER_FAULT_CODES

    def payload(self) -> JsonDict:
        """Peer-visible error object: `{error, details?, message?}`."""
        out: JsonDict = {"error": self.error}
        if self.details is not None:
            out["details"] = self.details
        if self.message is not None:
            out["message"] = self.message
        return out

    def render(self) -> str:
        """Serialize the payload as 2-space indented JSON text."""
        return orjson.dumps(self.payload(), option=orjson.OPT_INDENT_2).decode()

    __str__ = render


# ═══════════════════════════════════════════════════════════════════════════════
# Exceptions
# ═══════════════════════════════════════════════════════════════════════════════


class MCPForgeError(Exception):
    """Base class for all mcpforge faults."""

    code: ErrorCode = ErrorCode.EXECUTION_FAILED


class DuplicateToolError(MCPForgeError):
    """A tool with the same name is already registered."""

    code = ErrorCode.DUPLICATE_TOOL

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Tool with name "{name}" already registered')


class ConfigurationError(MCPForgeError):
    """Malformed startup configuration (rate-limit window, sealed registry, ...)."""

    code = ErrorCode.CONFIGURATION


class CallError(MCPForgeError):
    """Per-call fault. Always converted to an error envelope, never raised to the peer."""

    __slots__ = ("tool_name",)

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message)

    def to_error(self) -> ToolError:
        return ToolError(tool_name=self.tool_name, error=str(self), code=self.code)


class ToolNotFoundError(CallError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f'Tool "{tool_name}" not found')


class _IssueError(CallError):
    """Validation fault carrying the full issue list."""

    __slots__ = ("issues",)
    summary: str = ""

    def __init__(self, tool_name: str, issues: tuple[Issue, ...]) -> None:
        self.issues = issues
        super().__init__(tool_name, self.summary)

    def to_error(self) -> ToolError:
        return ToolError(
            tool_name=self.tool_name,
            error=self.summary,
            code=self.code,
            details=[issue.to_dict() for issue in self.issues],
        )


class InputValidationError(_IssueError):
    code = ErrorCode.INVALID_PARAMS
    summary = "Input validation failed"


class OutputValidationError(_IssueError):
    code = ErrorCode.INVALID_OUTPUT
    summary = "Output validation failed"


class HandlerFault(CallError):
    """Fault raised by a pre-hook, the handler, or a post-hook.

    Carries the originating stage and the underlying exception; only the
    exception's message reaches the peer.
    """

    __slots__ = ("stage", "cause")
    code = ErrorCode.EXECUTION_FAILED

    def __init__(self, tool_name: str, cause: BaseException, *, stage: str) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(tool_name, str(cause) or type(cause).__name__)

    def to_error(self) -> ToolError:
        return ToolError(
            tool_name=self.tool_name,
            error="Tool execution failed",
            code=self.code,
            message=str(self),
        )

    @classmethod
    def wrap(cls, tool_name: str, exc: Exception, *, stage: str) -> Self:
        return exc if isinstance(exc, cls) else cls(tool_name, exc, stage=stage)  # type: ignore[return-value]
