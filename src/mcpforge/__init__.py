"""mcpforge - Declarative MCP tool servers with validated invocation.

Tools declare input and output shapes with schema nodes. Every call is
admitted (auth, rate limit, CORS), validated, executed through pre-hooks,
handler and post-hooks, validated again, and answered with a normalized
envelope. Handler faults never escape as transport errors.

Quick Start:
    >>> from mcpforge import MCPServer, define_tool, s
    >>>
    >>> calculate = define_tool(
    ...     name="calculate",
    ...     description="Perform basic mathematical operations",
    ...     input=s.object({"operation": s.enum(["add", "divide"]), "a": s.number(), "b": s.number()}),
    ...     output=s.object({"result": s.number()}),
    ...     handler=lambda input, ctx: {"result": input["a"] / input["b"]},
    ... )
    >>> server = MCPServer("demo-mcp")
    >>> server.register_tool(calculate)
    >>> await server.start()  # stdio

Hooks:
    >>> def trim(ctx, input):
    ...     return Replace({**input, "name": input["name"].strip()})

HTTP REST Server (Web Backends):
    >>> server.serve_http(port=3000)
"""

from __future__ import annotations

__version__ = "1.0.0"

# Errors
from .foundation.errors import (
    CallError,
    ConfigurationError,
    DuplicateToolError,
    Err,
    ErrorCode,
    HandlerFault,
    InputValidationError,
    MCPForgeError,
    Ok,
    OutputValidationError,
    Result,
    ToolError,
    ToolNotFoundError,
)

# Schema
from .foundation import schema as s
from .foundation.schema import Issue, ValidationResult, to_json_schema, validate

# Observability
from .runtime.observability import BoundLogger, configure_logging, get_logger

# Config
from .foundation.config import (
    AuthOptions,
    CorsOptions,
    RateLimitOptions,
    ServerSettings,
    clear_settings_cache,
    get_settings,
    parse_time_window,
)

# Core
from .foundation.core import (
    Capabilities,
    DefaultCapabilities,
    HttpxCapability,
    InvocationContext,
    Replace,
    ToolDescriptor,
    define_tool,
    tool,
)

# Registry
from .foundation.registry import ToolRegistry

# Pipeline
from .runtime.pipeline import CallToolResult, InvocationPipeline, Stage, ToolListing

# Middleware
from .runtime.middleware import (
    AdmissionRequest,
    AdmissionResponse,
    AuthMiddleware,
    BodyRequiredMiddleware,
    CorsMiddleware,
    ErrorMiddleware,
    LoggingMiddleware,
    Middleware,
    RateLimiter,
    RateLimitMiddleware,
    compose,
)

# Server
from .ext.mcp import (
    MCPServer,
    Manifest,
    create_server,
    generate_manifest,
    generate_markdown_docs,
    generate_openapi_spec,
)

__all__ = [
    # Version
    "__version__",
    # Schema
    "s", "Issue", "ValidationResult", "to_json_schema", "validate",
    # Core
    "ToolDescriptor", "define_tool", "tool", "Replace", "InvocationContext",
    "Capabilities", "DefaultCapabilities", "HttpxCapability",
    # Errors
    "ErrorCode", "ToolError", "MCPForgeError", "DuplicateToolError", "ConfigurationError",
    "CallError", "ToolNotFoundError", "InputValidationError", "OutputValidationError", "HandlerFault",
    "Result", "Ok", "Err",
    # Registry
    "ToolRegistry",
    # Pipeline
    "InvocationPipeline", "Stage", "CallToolResult", "ToolListing",
    # Middleware
    "AdmissionRequest", "AdmissionResponse", "Middleware", "compose",
    "AuthMiddleware", "BodyRequiredMiddleware", "CorsMiddleware", "ErrorMiddleware", "LoggingMiddleware",
    "RateLimiter", "RateLimitMiddleware",
    # Config
    "ServerSettings", "get_settings", "clear_settings_cache", "parse_time_window",
    "RateLimitOptions", "AuthOptions", "CorsOptions",
    # Observability
    "BoundLogger", "get_logger", "configure_logging",
    # Server
    "MCPServer", "create_server", "Manifest", "generate_manifest", "generate_markdown_docs", "generate_openapi_spec",
]
