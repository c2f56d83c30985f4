"""Wire models for inbound call requests.

Call requests arrive as `{name, arguments, meta?: {requestId?}}`. The MCP
wire form spells the metadata key `_meta`; both spellings are accepted.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from mcpforge.foundation.errors import ErrorCode, ToolError
from mcpforge.runtime.middleware import AdmissionResponse
from mcpforge.runtime.pipeline import CallToolResult

# Admission rejection status → error classification for non-HTTP transports
_STATUS_CODES: dict[int, ErrorCode] = {
    400: ErrorCode.INVALID_PARAMS,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
    429: ErrorCode.RATE_LIMITED,
}

# Error classification → HTTP status for error envelopes
_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_PARAMS: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.RATE_LIMITED: 429,
}


class CallMeta(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    request_id: str | None = Field(default=None, alias="requestId")


class CallToolRequest(BaseModel):
    """`{name, arguments, meta?}` call request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    arguments: Any = None
    meta: CallMeta | None = Field(default=None, validation_alias=AliasChoices("meta", "_meta"))

    @property
    def request_id(self) -> str | None:
        return self.meta.request_id if self.meta else None

    @classmethod
    def from_mcp(cls, params: Any) -> CallToolRequest:
        """Build from an `mcp.types.CallToolRequestParams`.

        Absent arguments are treated as an empty object, as MCP clients omit
        them for parameterless tools.
        """
        meta = getattr(params, "meta", None)
        extra = (getattr(meta, "model_extra", None) or {}) if meta is not None else {}
        request_id = extra.get("requestId")
        return cls(
            name=params.name,
            arguments=params.arguments if params.arguments is not None else {},
            meta=CallMeta(request_id=request_id) if isinstance(request_id, str) else None,
        )


def rejection_to_result(tool_name: str, response: AdmissionResponse) -> CallToolResult:
    """Turn a terminal admission response into an error envelope."""
    body = response.body if isinstance(response.body, dict) else {}
    return CallToolResult.failure(ToolError(
        tool_name=tool_name,
        error=str(body.get("error") or f"Request rejected with status {response.status}"),
        code=_STATUS_CODES.get(response.status, ErrorCode.EXECUTION_FAILED),
        message=body.get("message"),
    ))


def http_status(result: CallToolResult) -> int:
    """HTTP status for an envelope: 200 on success, mapped from the error code otherwise."""
    if not result.is_error:
        return 200
    return _HTTP_STATUS.get(result.error.code, 500) if result.error else 500
