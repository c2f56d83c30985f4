"""Foundation - Core building blocks for mcpforge.

Contains: schema nodes, tool descriptors, error handling, registry, config, testing.
"""

from __future__ import annotations

__all__ = [
    # Schema
    "schema",
    # Core
    "ToolDescriptor", "define_tool", "tool", "Replace", "InvocationContext", "RequestInfo",
    "Capabilities", "DefaultCapabilities", "HttpCapability", "HttpxCapability",
    # Errors
    "ErrorCode", "ToolError", "MCPForgeError", "DuplicateToolError", "ConfigurationError",
    "CallError", "ToolNotFoundError", "InputValidationError", "OutputValidationError", "HandlerFault",
    "Result", "Ok", "Err", "collect_results",
    # Registry
    "ToolRegistry",
    # Config
    "ServerSettings", "get_settings", "clear_settings_cache", "parse_time_window",
    "RateLimitOptions", "AuthOptions", "CorsOptions",
]

_CORE = {"ToolDescriptor", "define_tool", "tool", "Replace", "InvocationContext", "RequestInfo",
         "Capabilities", "DefaultCapabilities", "HttpCapability", "HttpxCapability"}
_ERRORS = {"ErrorCode", "ToolError", "MCPForgeError", "DuplicateToolError", "ConfigurationError",
           "CallError", "ToolNotFoundError", "InputValidationError", "OutputValidationError", "HandlerFault",
           "Result", "Ok", "Err", "collect_results"}
_CONFIG = {"ServerSettings", "get_settings", "clear_settings_cache", "parse_time_window",
           "RateLimitOptions", "AuthOptions", "CorsOptions"}


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in _CORE:
        from . import core
        return getattr(core, name)
    if name in _ERRORS:
        from . import errors
        return getattr(errors, name)
    if name == "ToolRegistry":
        from . import registry
        return registry.ToolRegistry
    if name in _CONFIG:
        from . import config
        return getattr(config, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
