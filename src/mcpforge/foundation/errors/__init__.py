"""Unified error handling for mcpforge.

- ErrorCode / ToolError: classification and the structured error payload
- Exception taxonomy: startup faults and per-call faults
- Result/Ok/Err: failure as a value
"""

from .errors import (
    CallError,
    ConfigurationError,
    DuplicateToolError,
    ErrorCode,
    HandlerFault,
    InputValidationError,
    MCPForgeError,
    OutputValidationError,
    ToolError,
    ToolNotFoundError,
)
from .result import Err, Ok, Result, collect_results
from .types import JsonDict, JsonMapping, JsonPrimitive, JsonValue

__all__ = [
    # Payload
    "ErrorCode", "ToolError",
    # Exceptions
    "MCPForgeError", "DuplicateToolError", "ConfigurationError",
    "CallError", "ToolNotFoundError", "InputValidationError", "OutputValidationError", "HandlerFault",
    # Result monad
    "Result", "Ok", "Err", "collect_results",
    # JSON aliases
    "JsonDict", "JsonMapping", "JsonPrimitive", "JsonValue",
]
